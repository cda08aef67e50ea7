"""Tests for material scattering."""

import pytest
import math
import random
from rowforge.vec3 import Vec3, Point3
from rowforge.ray import Ray
from rowforge.materials import MaterialKind, ScatterResult, scatter, IOR_INSIDE, IOR_OUTSIDE


class FixedRandom(random.Random):
    """Random source returning a fixed value."""

    def __init__(self, value):
        super().__init__(0)
        self.value = value

    def random(self):
        return self.value


class TestMaterialKind:
    """Test MaterialKind enum."""

    def test_members(self):
        assert {k.name for k in MaterialKind} == {"DIFFUSE", "SPECULAR", "REFRACTIVE"}

    def test_from_value(self):
        assert MaterialKind("diffuse") is MaterialKind.DIFFUSE


class TestDiffuse:
    """Test diffuse scattering."""

    def test_scattered_in_hemisphere_of_oriented_normal(self):
        rng = random.Random(1)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        normal = Vec3(0, 1, 0)

        for _ in range(200):
            result = scatter(MaterialKind.DIFFUSE, ray_in, Point3(0, 0, 0), normal, rng)
            assert result.scattered_ray.direction.dot(normal) >= 0.0
            assert result.weight == 1.0

    def test_normal_oriented_against_ray_from_inside(self):
        rng = random.Random(2)
        # Ray travels along +y and hits a surface whose outward normal is +y
        ray_in = Ray(Point3(0, -1, 0), Vec3(0, 1, 0))
        normal = Vec3(0, 1, 0)

        for _ in range(200):
            result = scatter(MaterialKind.DIFFUSE, ray_in, Point3(0, 0, 0), normal, rng)
            assert result.scattered_ray.direction.y <= 0.0

    def test_direction_is_unit(self):
        rng = random.Random(3)
        ray_in = Ray(Point3(0, 0, 1), Vec3(0, 0, -1))
        for _ in range(50):
            result = scatter(MaterialKind.DIFFUSE, ray_in, Point3(0, 0, 0), Vec3(0, 0, 1), rng)
            assert result.scattered_ray.direction.length() == pytest.approx(1.0)

    def test_starts_at_hit_point(self):
        point = Point3(1, 2, 3)
        result = scatter(MaterialKind.DIFFUSE, Ray(Point3(0, 0, 0), Vec3(0, 0, 1)),
                         point, Vec3(0, 0, -1), random.Random(0))
        assert result.scattered_ray.origin == point

    def test_cosine_weighting(self):
        # E[cos(theta)] for cosine-weighted sampling is 2/3
        rng = random.Random(4)
        ray_in = Ray(Point3(0, 1, 0), Vec3(0, -1, 0))
        normal = Vec3(0, 1, 0)
        n = 4000
        total = sum(
            scatter(MaterialKind.DIFFUSE, ray_in, Point3(0, 0, 0), normal, rng).scattered_ray.direction.y
            for _ in range(n)
        )
        assert total / n == pytest.approx(2.0 / 3.0, abs=0.03)


class TestSpecular:
    """Test mirror reflection."""

    def test_perfect_reflection(self):
        ray_in = Ray(Point3(0, 1, 0), Vec3(1, -1, 0).normalize())
        result = scatter(MaterialKind.SPECULAR, ray_in, Point3(1, 0, 0), Vec3(0, 1, 0), random.Random(0))
        assert result.scattered_ray.direction == Vec3(1, 1, 0).normalize()
        assert result.weight == 1.0

    def test_uses_true_normal_from_inside(self):
        ray_in = Ray(Point3(0, -1, 0), Vec3(0, 1, 0))
        result = scatter(MaterialKind.SPECULAR, ray_in, Point3(0, 0, 0), Vec3(0, 1, 0), random.Random(0))
        assert result.scattered_ray.direction == Vec3(0, -1, 0)


class TestRefractive:
    """Test glass scattering."""

    def test_head_on_transmission(self):
        # u = 0.99 >= P, so the transmitted branch is taken
        ray_in = Ray(Point3(0, 0, 1), Vec3(0, 0, -1))
        result = scatter(MaterialKind.REFRACTIVE, ray_in, Point3(0, 0, 0), Vec3(0, 0, 1), FixedRandom(0.99))

        assert result.scattered_ray.direction == Vec3(0, 0, -1)

        r0 = ((IOR_INSIDE - IOR_OUTSIDE) / (IOR_INSIDE + IOR_OUTSIDE)) ** 2
        p = 0.25 + 0.5 * r0
        assert result.weight == pytest.approx((1 - r0) / (1 - p))

    def test_head_on_reflection(self):
        ray_in = Ray(Point3(0, 0, 1), Vec3(0, 0, -1))
        result = scatter(MaterialKind.REFRACTIVE, ray_in, Point3(0, 0, 0), Vec3(0, 0, 1), FixedRandom(0.0))

        assert result.scattered_ray.direction == Vec3(0, 0, 1)

        r0 = ((IOR_INSIDE - IOR_OUTSIDE) / (IOR_INSIDE + IOR_OUTSIDE)) ** 2
        p = 0.25 + 0.5 * r0
        assert result.weight == pytest.approx(r0 / p)

    def test_refraction_bends_toward_normal_entering(self):
        d = Vec3(1, 0, -1).normalize()
        ray_in = Ray(Point3(-1, 0, 1), d)
        result = scatter(MaterialKind.REFRACTIVE, ray_in, Point3(0, 0, 0), Vec3(0, 0, 1), FixedRandom(0.99))

        t = result.scattered_ray.direction
        sin_in = abs(d.x)
        sin_out = abs(t.x)
        assert t.z < 0
        assert sin_out == pytest.approx(sin_in * IOR_OUTSIDE / IOR_INSIDE, rel=1e-6)

    def test_total_internal_reflection(self):
        # Leaving glass at a grazing angle: sin > 1/1.5
        d = Vec3(0.9, 0, math.sqrt(1 - 0.81))
        ray_in = Ray(Point3(0, 0, -1), d)
        normal = Vec3(0, 0, 1)
        for value in (0.0, 0.5, 0.99):
            result = scatter(MaterialKind.REFRACTIVE, ray_in, Point3(0, 0, 0), normal, FixedRandom(value))
            assert result.weight == 1.0
            assert result.scattered_ray.direction == d.reflect(normal)

    def test_returns_scatter_result(self):
        result = scatter(MaterialKind.REFRACTIVE, Ray(Point3(0, 0, 1), Vec3(0, 0, -1)),
                         Point3(0, 0, 0), Vec3(0, 0, 1), random.Random(0))
        assert isinstance(result, ScatterResult)


class TestUnknownKind:
    """Scatter rejects anything that is not a MaterialKind."""

    def test_raises(self):
        with pytest.raises(ValueError):
            scatter("diffuse", Ray(Point3(0, 0, 0), Vec3(0, 0, 1)), Point3(0, 0, 0), Vec3(0, 0, 1), random.Random(0))
