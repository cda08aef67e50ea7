"""
Sphere primitives and the scene they make up.

The scene is an immutable ordered sequence of spheres; a sphere's index in
that sequence is its id.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterable, Iterator, Optional
import math
import numpy as np

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .materials import MaterialKind


# Minimum hit distance; suppresses self-intersection at the ray origin
EPSILON = 1e-4

# Distances at or beyond this count as a miss
FAR = 1e20


@dataclass(frozen=True)
class Sphere:
    """A sphere with emission, albedo and a material kind.

    Attributes:
        radius: Radius of the sphere (must be positive)
        center: Center point
        emission: Emitted radiance (RGB)
        albedo: Surface reflectance (RGB, each component 0-1)
        material: Reflection model
    """
    radius: float
    center: Point3
    emission: Color
    albedo: Color
    material: MaterialKind = MaterialKind.DIFFUSE

    def __post_init__(self):
        if not self.radius > 0:
            raise ValueError(f"Sphere radius must be positive, got {self.radius}")
        # Accept "diffuse"/"specular"/"refractive" as well as enum members
        object.__setattr__(self, 'material', MaterialKind(self.material))

    def intersect(self, ray: Ray) -> Optional[float]:
        """Distance to the nearest intersection in front of the ray origin.

        Solves t²(d·d) + 2t(o-c)·d + (o-c)·(o-c) - r² = 0 for a unit
        direction d.

        Returns:
            The smaller root if it exceeds EPSILON, else the larger root if it
            does, else None
        """
        op = self.center - ray.origin
        b = op.dot(ray.direction)
        det = b * b - op.length_squared() + self.radius * self.radius
        if det < 0:
            return None

        det = math.sqrt(det)
        t = b - det
        if t > EPSILON:
            return t
        t = b + det
        if t > EPSILON:
            return t
        return None

    def normal_at(self, point: Point3) -> Vec3:
        """Unit outward normal at a point on the surface."""
        return (point - self.center).normalize()


@dataclass(frozen=True)
class HitRecord:
    """Nearest intersection of a ray with the scene.

    Attributes:
        distance: Ray parameter of the hit
        sphere_id: Index of the sphere in the scene
        sphere: The sphere that was hit
    """
    distance: float
    sphere_id: int
    sphere: Sphere


class Scene:
    """A fixed, ordered collection of spheres.

    Centers and radii are also packed into numpy arrays so a ray is tested
    against every sphere at once.
    """

    __slots__ = ('_spheres', '_centers', '_radii_sq')

    def __init__(self, spheres: Iterable[Sphere] = ()):
        self._spheres = tuple(spheres)
        self._centers = np.array([s.center.to_array() for s in self._spheres],
                                 dtype=np.float64).reshape(-1, 3)
        self._radii_sq = np.array([s.radius * s.radius for s in self._spheres],
                                  dtype=np.float64)

    @property
    def spheres(self) -> tuple:
        return self._spheres

    def intersect(self, ray: Ray) -> Optional[HitRecord]:
        """Find the nearest sphere hit by the ray.

        Uses the same root selection as Sphere.intersect for every sphere.
        Distances at or beyond FAR are misses, and np.argmin picks the first
        minimum, so ties go to the lower id.

        Returns:
            HitRecord for the nearest hit, or None on a miss
        """
        if not self._spheres:
            return None

        op = self._centers - ray.origin.to_array()
        b = op @ ray.direction.to_array()
        det = b * b - np.einsum('ij,ij->i', op, op) + self._radii_sq

        # Negative determinants become NaN and fail both comparisons below
        with np.errstate(invalid='ignore'):
            root = np.sqrt(det)
            near = b - root
            far = b + root
            t = np.where(near > EPSILON, near, np.where(far > EPSILON, far, np.inf))

        closest_id = int(np.argmin(t))
        closest_t = float(t[closest_id])
        if not closest_t < FAR:
            return None
        return HitRecord(closest_t, closest_id, self._spheres[closest_id])

    def __len__(self) -> int:
        return len(self._spheres)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self._spheres)

    def __getitem__(self, index: int) -> Sphere:
        return self._spheres[index]

    def __repr__(self) -> str:
        return f"Scene({len(self._spheres)} spheres)"
