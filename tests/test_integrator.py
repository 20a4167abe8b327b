"""Tests for the path tracing color estimator."""

import pytest
import math
import numpy as np

from pathforge.vec3 import Vec3, Point3, Color
from pathforge.ray import Ray
from pathforge.shapes import Sphere, Scene
from pathforge.materials import Lambertian, Metal, Dielectric
from pathforge.integrator import ray_color, sky_color, T_MIN


@pytest.fixture
def rng():
    return np.random.default_rng(77)


class TestSkyColor:
    """Test the background gradient."""

    def test_straight_up_is_sky_blue(self):
        assert sky_color(Ray(Point3(0, 0, 0), Vec3(0, 1, 0))) == Color(0.5, 0.7, 1.0)

    def test_straight_down_is_white(self):
        assert sky_color(Ray(Point3(0, 0, 0), Vec3(0, -1, 0))) == Color(1.0, 1.0, 1.0)

    def test_horizon_is_midpoint(self):
        assert sky_color(Ray(Point3(0, 0, 0), Vec3(1, 0, 0))) == Color(0.75, 0.85, 1.0)

    def test_direction_length_ignored(self):
        a = sky_color(Ray(Point3(0, 0, 0), Vec3(1, 2, 0)))
        b = sky_color(Ray(Point3(0, 0, 0), Vec3(10, 20, 0)))
        assert a == b


class TestRayColor:
    """Test ray_color()."""

    def test_empty_scene_returns_background(self, rng):
        scene = Scene()
        up = ray_color(Ray(Point3(0, 0, 0), Vec3(0, 1, 0)), scene, rng, 16)
        down = ray_color(Ray(Point3(0, 0, 0), Vec3(0, -1, 0)), scene, rng, 16)
        assert up == Color(0.5, 0.7, 1.0)
        assert down == Color(1.0, 1.0, 1.0)

    def test_zero_depth_hit_is_black(self, rng):
        scene = Scene([Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(1, 1, 1)))])
        color = ray_color(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), scene, rng, 0)
        assert color == Color(0, 0, 0)

    def test_zero_depth_miss_is_sky(self, rng):
        scene = Scene([Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(1, 1, 1)))])
        color = ray_color(Ray(Point3(0, 0, 0), Vec3(0, 1, 0)), scene, rng, 0)
        assert color == Color(0.5, 0.7, 1.0)

    def test_mirror_bounce_attenuates_sky(self, rng):
        # Mirror floor: a ray hitting it straight down bounces straight up
        albedo = Color(0.8, 0.6, 0.4)
        scene = Scene([Sphere(Point3(0, -100, 0), 99, Metal(albedo, 0.0))])
        color = ray_color(Ray(Point3(0, 1, 0), Vec3(0, -1, 0)), scene, rng, 4)
        assert color == albedo * Color(0.5, 0.7, 1.0)

    def test_depth_limit_cuts_off_between_mirrors(self, rng):
        # Two facing mirrors trap the ray until the depth limit
        mirror = Metal(Color(1, 1, 1), 0.0)
        scene = Scene([
            Sphere(Point3(0, 0, -1000), 999, mirror),
            Sphere(Point3(0, 0, 1000), 999, mirror),
        ])
        color = ray_color(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), scene, rng, 10)
        assert color == Color(0, 0, 0)

    def test_absorbed_path_is_black(self, rng):
        # Metal reflection heading into the normal of an inverted sphere is absorbed
        scene = Scene([Sphere(Point3(0, 0, -1), -0.5, Metal(Color(1, 1, 1), 0.0))])
        color = ray_color(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), scene, rng, 8)
        assert color == Color(0, 0, 0)

    def test_t_min_avoids_self_intersection(self, rng):
        sphere = Sphere(Point3(0, 0, 0), 1.0, Lambertian(Color(0.5, 0.5, 0.5)))
        # Origin a hair inside the surface (as after a bounce), heading away
        ray = Ray(Point3(0, 1 - T_MIN / 10, 0), Vec3(0, 1, 0))
        assert Scene([sphere]).hit(ray, 0.0, math.inf) is not None
        assert Scene([sphere]).hit(ray, T_MIN, math.inf) is None
        assert ray_color(ray, Scene([sphere]), rng, 4) == Color(0.5, 0.7, 1.0)

    def test_glass_passes_light_unattenuated_on_average(self, rng):
        scene = Scene([Sphere(Point3(0, 0, -3), 1.0, Dielectric(1.5))])
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        color = ray_color(ray, scene, rng, 16)
        # Every path leaves the glass and sees the sky, never absorbed
        assert 0.5 <= color.r <= 1.0
        assert color.b == pytest.approx(1.0)

    def test_energy_not_amplified(self, rng):
        scene = Scene([
            Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))),
            Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))),
            Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.7)),
            Sphere(Point3(-1, 0, -1), 0.5, Metal(Color(0.9, 0.9, 0.9), 0.1)),
        ])
        for _ in range(200):
            direction = Vec3(rng.uniform(-1, 1), rng.uniform(-0.8, 0.5), -1)
            color = ray_color(Ray(Point3(0, 0, 1), direction), scene, rng, 8)
            for channel in color:
                assert 0.0 <= channel <= 1.0

    def test_attenuation_chain_bounds_color(self, rng):
        albedo = Color(0.5, 0.5, 0.5)
        scene = Scene([Sphere(Point3(0, -100.5, -1), 100, Lambertian(albedo))])
        for _ in range(100):
            color = ray_color(Ray(Point3(0, 0, 0), Vec3(0, -1, -1)), scene, rng, 8)
            # At least one diffuse bounce before reaching the sky
            assert max(color) <= 0.5 + 1e-12
