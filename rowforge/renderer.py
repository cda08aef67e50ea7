"""
Renderer module - the heart of the path tracer.

Implements:
- Iterative path tracing with Russian roulette termination
- 2x2 sub-pixel stratification with tent-filtered jitter
- Row-range rendering into private pixel buffers
"""

from __future__ import annotations
import logging
import os
import random
from dataclasses import dataclass
from typing import Callable, Iterable, Optional
import numpy as np

from .vec3 import Color
from .ray import Ray
from .camera import Camera, tent_sample
from .materials import scatter
from .shapes import Scene

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 512
    height: int = 512
    samples_per_subpixel: int = 1
    workers: int = 1  # 0 = auto-detect
    roulette_depth: int = 5
    gamma: float = 2.2

    def __post_init__(self):
        if self.workers == 0:
            self.workers = os.cpu_count() or 1
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Image size must be positive, got {self.width}x{self.height}")
        if self.samples_per_subpixel <= 0:
            raise ValueError(f"Samples per sub-pixel must be positive, got {self.samples_per_subpixel}")
        if self.workers < 0:
            raise ValueError(f"Worker count must be positive, got {self.workers}")
        if self.roulette_depth < 0:
            raise ValueError(f"Roulette depth must not be negative, got {self.roulette_depth}")


def row_seed(row: int) -> int:
    """Seed for the random source of one image row."""
    return row * row * row


class Renderer:
    """Monte Carlo path tracer over an immutable sphere scene."""

    def __init__(self, scene: Scene, settings: RenderSettings = None, camera: Camera = None):
        """Create a renderer.

        Args:
            scene: The scene to render
            settings: Render configuration (uses defaults if None)
            camera: Camera to render from (the fixed pinhole if None)
        """
        self.scene = scene
        self.settings = settings if settings else RenderSettings()
        self.camera = camera if camera else Camera(self.settings.width, self.settings.height)
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def radiance(self, ray: Ray, rng: random.Random) -> Color:
        """Estimate the radiance arriving along a ray.

        Iterative path tracing: the loop carries the accumulated radiance and
        the path throughput instead of recursing per bounce. After
        roulette_depth bounces each path survives with probability equal to
        the hit albedo's largest channel, and the survivor is reweighted by
        its inverse so the estimate stays unbiased.

        Args:
            ray: Ray with unit direction
            rng: Random source for this scanline

        Returns:
            One unbiased RGB radiance sample
        """
        result = Color(0, 0, 0)
        throughput = Color(1, 1, 1)
        depth = 0

        while True:
            hit = self.scene.intersect(ray)
            if hit is None:
                return result

            sphere = hit.sphere
            result = result + throughput * sphere.emission

            albedo = sphere.albedo
            depth += 1
            if depth > self.settings.roulette_depth:
                p = albedo.max_component()
                if rng.random() >= p:
                    return result
                albedo = albedo / p

            throughput = throughput * albedo

            point = ray.at(hit.distance)
            scattered = scatter(sphere.material, ray, point, sphere.normal_at(point), rng)
            if scattered.weight != 1.0:
                throughput = throughput * scattered.weight
            ray = scattered.scattered_ray

    def render_pixel(self, x: int, y: int, rng: random.Random) -> Color:
        """Render one pixel.

        Each of the 2x2 sub-pixels averages samples_per_subpixel path
        estimates; the sub-pixel means are clamped to [0, 1] and averaged.

        Args:
            x: Pixel column
            y: Pixel row in camera space (0 = bottom)
            rng: Random source for this scanline

        Returns:
            Pixel color with every channel in [0, 1]
        """
        samples = self.settings.samples_per_subpixel
        inv_samples = 1.0 / samples
        pixel = Color(0, 0, 0)

        for sy in range(2):
            for sx in range(2):
                sub = Color(0, 0, 0)
                for _ in range(samples):
                    dx = tent_sample(rng)
                    dy = tent_sample(rng)
                    ray = self.camera.get_ray(x, y, sx, sy, dx, dy)
                    sub = sub + self.radiance(ray, rng) * inv_samples
                pixel = pixel + sub.clamp() * 0.25

        return pixel

    def render_rows(self, rows: Iterable[int]) -> np.ndarray:
        """Render a set of image rows into a private buffer.

        Image row 0 is the top of the picture. Every row gets its own random
        source seeded from its index, so a row renders the same no matter
        which worker owns it.

        Args:
            rows: Image row indices, in the order they appear in the buffer

        Returns:
            Buffer of shape (len(rows), width, 3)
        """
        rows = list(rows)
        width = self.settings.width
        height = self.settings.height
        buffer = np.zeros((len(rows), width, 3), dtype=np.float64)

        for i, row in enumerate(rows):
            rng = random.Random(row_seed(row))
            y = height - 1 - row
            for x in range(width):
                pixel = self.render_pixel(x, y, rng)
                buffer[i, x] = pixel.to_array()

            if self._progress_callback:
                self._progress_callback((i + 1) / len(rows))

        logger.debug("Rendered %d rows", len(rows))
        return buffer

    def render(self) -> np.ndarray:
        """Render the whole image in this process.

        Returns:
            Image as numpy array of shape (height, width, 3), values in [0, 1]
        """
        return self.render_rows(range(self.settings.height))
