"""
Camera module for generating primary rays.

A fixed pinhole camera looking into the Cornell box, plus the tent filter
used to jitter sample positions inside a sub-pixel.
"""

from __future__ import annotations
import math
import random
from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera with a 2x2 sub-pixel grid per pixel."""

    def __init__(
        self,
        width: int,
        height: int,
        origin: Point3 = Point3(50, 52, 295.6),
        direction: Vec3 = Vec3(0, -0.042612, -1),
        fov_scale: float = 0.5135,
        near_offset: float = 140.0
    ):
        """Create a camera.

        Args:
            width: Image width in pixels
            height: Image height in pixels
            origin: Pinhole position in world space
            direction: Viewing direction (normalized here)
            fov_scale: Half-extent of the image plane at unit distance
            near_offset: Distance rays are pushed forward before tracing,
                so geometry right in front of the pinhole is skipped
        """
        self.width = width
        self.height = height
        self.origin = origin
        self.direction = direction.normalize()
        self.near_offset = near_offset

        # Image-plane basis, scaled by field of view and aspect ratio
        self.cx = Vec3(width * fov_scale / height, 0, 0)
        self.cy = self.cx.cross(self.direction).normalize() * fov_scale

    def get_ray(self, x: int, y: int, sx: int, sy: int, dx: float, dy: float) -> Ray:
        """Generate a ray through a jittered point of a sub-pixel.

        Args:
            x: Pixel column (0 = left)
            y: Pixel row in camera space (0 = bottom)
            sx, sy: Sub-pixel cell (0 or 1 each)
            dx, dy: Tent-filter offsets in [-1, 1]

        Returns:
            A ray with unit direction starting near_offset ahead of the pinhole
        """
        d = (
            self.cx * (((sx + 0.5 + dx) / 2 + x) / self.width - 0.5)
            + self.cy * (((sy + 0.5 + dy) / 2 + y) / self.height - 0.5)
            + self.direction
        )
        return Ray(self.origin + d * self.near_offset, d.normalize())

    def __repr__(self) -> str:
        return f"Camera(origin={self.origin}, direction={self.direction})"


def tent_sample(rng: random.Random) -> float:
    """Draw an offset in [-1, 1] from a triangular (tent) distribution."""
    r = 2.0 * rng.random()
    if r < 1.0:
        return math.sqrt(r) - 1.0
    return 1.0 - math.sqrt(2.0 - r)
