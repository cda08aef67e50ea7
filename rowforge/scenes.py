"""Built-in scenes."""

from __future__ import annotations

from .vec3 import Point3, Color
from .materials import MaterialKind
from .shapes import Sphere, Scene


def cornell_box() -> Scene:
    """Create the Cornell box scene.

    Walls are huge spheres; the room holds a mirror ball and a glass ball
    and is lit by a large emitter poking through the ceiling.
    """
    black = Color(0, 0, 0)
    white = Color(0.75, 0.75, 0.75)
    near_white = Color(1, 1, 1) * 0.999

    return Scene([
        # Left wall (red)
        Sphere(1e5, Point3(1e5 + 1, 40.8, 81.6), black, Color(0.75, 0.25, 0.25), MaterialKind.DIFFUSE),
        # Right wall (blue)
        Sphere(1e5, Point3(-1e5 + 99, 40.8, 81.6), black, Color(0.25, 0.25, 0.75), MaterialKind.DIFFUSE),
        # Back wall
        Sphere(1e5, Point3(50, 40.8, 1e5), black, white, MaterialKind.DIFFUSE),
        # Front wall (behind the camera, absorbing)
        Sphere(1e5, Point3(50, 40.8, -1e5 + 170), black, black, MaterialKind.DIFFUSE),
        # Floor
        Sphere(1e5, Point3(50, 1e5, 81.6), black, white, MaterialKind.DIFFUSE),
        # Ceiling
        Sphere(1e5, Point3(50, -1e5 + 81.6, 81.6), black, white, MaterialKind.DIFFUSE),
        # Mirror ball
        Sphere(16.5, Point3(27, 16.5, 47), black, near_white, MaterialKind.SPECULAR),
        # Glass ball
        Sphere(16.5, Point3(73, 16.5, 78), black, near_white, MaterialKind.REFRACTIVE),
        # Light
        Sphere(600, Point3(50, 681.6 - 0.27, 81.6), Color(12, 12, 12), black, MaterialKind.DIFFUSE),
    ])
