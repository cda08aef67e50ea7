"""
Material kinds and their scattering rules.

Implements:
- Diffuse (ideal Lambertian, cosine-weighted hemisphere sampling)
- Specular (perfect mirror)
- Refractive (glass, Fresnel-weighted reflect/transmit choice)
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
import math
import random

from .vec3 import Vec3
from .ray import Ray


# Refractive indices for REFRACTIVE spheres (air -> glass)
IOR_OUTSIDE = 1.0
IOR_INSIDE = 1.5


class MaterialKind(Enum):
    """Surface reflection model of a sphere."""
    DIFFUSE = "diffuse"
    SPECULAR = "specular"
    REFRACTIVE = "refractive"


@dataclass
class ScatterResult:
    """Result of a material scatter operation.

    Attributes:
        scattered_ray: The continuation ray
        weight: Scalar throughput factor (inverse branch probability for the
            stochastic glass branch, 1.0 otherwise)
    """
    scattered_ray: Ray
    weight: float = 1.0


def scatter(kind: MaterialKind, ray_in: Ray, point: Vec3, normal: Vec3,
            rng: random.Random) -> ScatterResult:
    """Sample the continuation ray for a hit.

    Args:
        kind: Material of the sphere that was hit
        ray_in: The incoming ray (unit direction)
        point: Hit point
        normal: Unit outward normal of the sphere at the hit point
        rng: Per-scanline random source

    Returns:
        ScatterResult with the new ray and its throughput weight
    """
    if kind is MaterialKind.DIFFUSE:
        return _scatter_diffuse(ray_in, point, normal, rng)
    if kind is MaterialKind.SPECULAR:
        return ScatterResult(Ray(point, ray_in.direction.reflect(normal)))
    if kind is MaterialKind.REFRACTIVE:
        return _scatter_refractive(ray_in, point, normal, rng)
    raise ValueError(f"Unknown material kind: {kind!r}")


def _scatter_diffuse(ray_in: Ray, point: Vec3, normal: Vec3,
                     rng: random.Random) -> ScatterResult:
    """Cosine-weighted hemisphere sample around the oriented normal."""
    w = normal if normal.dot(ray_in.direction) < 0 else -normal

    r1 = 2.0 * math.pi * rng.random()
    r2 = rng.random()
    r2s = math.sqrt(r2)

    # Orthonormal basis (u, v, w); pick a helper axis not parallel to w
    helper = Vec3(0, 1, 0) if abs(w.x) > 0.1 else Vec3(1, 0, 0)
    u = helper.cross(w).normalize()
    v = w.cross(u)

    direction = (
        u * (math.cos(r1) * r2s)
        + v * (math.sin(r1) * r2s)
        + w * math.sqrt(1.0 - r2)
    ).normalize()
    return ScatterResult(Ray(point, direction))


def _scatter_refractive(ray_in: Ray, point: Vec3, normal: Vec3,
                        rng: random.Random) -> ScatterResult:
    """Reflect or transmit through a glass surface.

    Uses Snell's law for the transmitted direction and Schlick's
    approximation for the Fresnel reflectance. The branch is chosen with
    probability P = 0.25 + 0.5 * Re and the throughput is reweighted by the
    inverse of the chosen branch's probability.
    """
    d = ray_in.direction
    reflected = Ray(point, d.reflect(normal))

    oriented = normal if normal.dot(d) < 0 else -normal
    into = normal.dot(oriented) > 0
    nnt = IOR_OUTSIDE / IOR_INSIDE if into else IOR_INSIDE / IOR_OUTSIDE
    ddn = d.dot(oriented)
    cos2t = 1.0 - nnt * nnt * (1.0 - ddn * ddn)

    if cos2t < 0:
        # Total internal reflection
        return ScatterResult(reflected)

    sign = 1.0 if into else -1.0
    tdir = (d * nnt - normal * (sign * (ddn * nnt + math.sqrt(cos2t)))).normalize()

    a = IOR_INSIDE - IOR_OUTSIDE
    b = IOR_INSIDE + IOR_OUTSIDE
    r0 = a * a / (b * b)
    c = 1.0 - (-ddn if into else tdir.dot(normal))
    re = _schlick(r0, c)
    tr = 1.0 - re
    p = 0.25 + 0.5 * re

    if rng.random() < p:
        return ScatterResult(reflected, re / p)
    return ScatterResult(Ray(point, tdir), tr / (1.0 - p))


def _schlick(r0: float, c: float) -> float:
    """Schlick's approximation for reflectance."""
    return r0 + (1.0 - r0) * c ** 5
