"""Tests for the light-transport estimator."""

import pytest
import math
import numpy as np

from lumentrace.vec3 import Vec3, Point3, Color
from lumentrace.ray import Ray
from lumentrace.shapes import Sphere, HittableList
from lumentrace.materials import Material, ScatterResult, Lambertian
from lumentrace.integrator import ray_color, sky_color, SKY_HORIZON, SKY_ZENITH


class Absorber(Material):
    def scatter(self, ray_in, rec, rng=None):
        return None


class Tint(Material):
    """Scatters straight up out of the hit point."""

    def __init__(self, albedo):
        self.albedo = albedo
        self.calls = 0

    def scatter(self, ray_in, rec, rng=None):
        self.calls += 1
        return ScatterResult(Ray(rec.point, Vec3(0, 1, 0)), self.albedo)


class PassThrough(Material):
    """Continues the incoming ray unchanged from the hit point."""

    def __init__(self, albedo):
        self.albedo = albedo

    def scatter(self, ray_in, rec, rng=None):
        return ScatterResult(Ray(rec.point, ray_in.direction), self.albedo)


class CountingScene:
    def __init__(self, inner):
        self.inner = inner
        self.queries = []

    def hit(self, ray, t_min, t_max):
        self.queries.append((t_min, t_max))
        return self.inner.hit(ray, t_min, t_max)


class TestSkyColor:
    """Test the background gradient."""

    def test_straight_up_is_zenith(self):
        assert sky_color(Ray(Point3(0, 0, 0), Vec3(0, 1, 0))) == SKY_ZENITH

    def test_straight_down_is_horizon(self):
        assert sky_color(Ray(Point3(0, 0, 0), Vec3(0, -1, 0))) == SKY_HORIZON

    def test_level_is_midpoint(self):
        assert sky_color(Ray(Point3(0, 0, 0), Vec3(1, 0, 0))) == Color(0.75, 0.85, 1.0)

    def test_direction_length_ignored(self):
        a = sky_color(Ray(Point3(0, 0, 0), Vec3(1, 1, 0)))
        b = sky_color(Ray(Point3(0, 0, 0), Vec3(7, 7, 0)))
        assert a == b


class TestRayColor:
    """Test the iterative path estimator."""

    def test_miss_returns_sky(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, Lambertian(Color(1, 1, 1)))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert ray_color(ray, world, 10) == SKY_ZENITH

    def test_zero_budget_is_black(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, Lambertian(Color(1, 1, 1)))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert ray_color(ray, world, 0) == Color(0, 0, 0)

    def test_absorbed_path_is_black(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, Absorber())])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert ray_color(ray, world, 10) == Color(0, 0, 0)

    def test_single_bounce_attenuates_sky(self):
        tint = Tint(Color(0.5, 0.25, 1.0))
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, tint)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert ray_color(ray, world, 10) == Color(0.5, 0.25, 1.0) * SKY_ZENITH
        assert tint.calls == 1

    def test_budget_exhausted_is_black(self):
        # The upward scatter from the lower sphere enters the upper one at
        # its bottom and leaves through its top: three scatter events, so
        # four segments before the path can reach the sky
        lower = Tint(Color(0.5, 0.5, 0.5))
        upper = Tint(Color(0.5, 0.5, 0.5))
        world = HittableList([
            Sphere(Point3(0, 0, -5), 1.0, lower),
            Sphere(Point3(0, 3, -4), 1.0, upper),
        ])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        for budget in (1, 2, 3):
            assert ray_color(ray, world, budget) == Color(0, 0, 0)
        assert ray_color(ray, world, 4) == Color(0.125, 0.125, 0.125) * SKY_ZENITH

    def test_attenuations_multiply(self):
        glass = PassThrough(Color(0.8, 0.5, 0.2))
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, glass)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))

        # Entry and exit both attenuate before the ray reaches the sky
        expected = Color(0.64, 0.25, 0.04) * sky_color(ray)
        result = ray_color(ray, world, 10)
        for axis in range(3):
            assert result[axis] == pytest.approx(expected[axis])

    def test_unshaded_geometry_shows_normal(self):
        world = HittableList([Sphere(Point3(0, 0, -5), 1.0, None)])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        # Normal at the near pole is (0, 0, 1)
        assert ray_color(ray, world, 5) == Color(0.5, 0.5, 1.0)

    def test_queries_use_acne_epsilon(self):
        world = CountingScene(HittableList([Sphere(Point3(0, 0, -5), 1.0, Tint(Color(1, 1, 1)))]))
        ray_color(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), world, 4)

        assert len(world.queries) == 2
        for t_min, t_max in world.queries:
            assert t_min == pytest.approx(0.001)
            assert t_max == math.inf

    def test_diffuse_estimate_is_bounded(self):
        world = HittableList([
            Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.5, 0.5, 0.5))),
            Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.7, 0.3, 0.3))),
        ])
        rng = np.random.default_rng(10)
        for _ in range(50):
            color = ray_color(Ray(Point3(0, 0, 0), Vec3(0, -0.1, -1)), world, 20, rng)
            assert color.is_finite()
            assert all(0.0 <= c <= 1.0 for c in color)
