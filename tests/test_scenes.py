"""Tests for the built-in demo scenes."""

import pytest
import numpy as np

from pathforge.vec3 import Point3
from pathforge.materials import Lambertian, Metal, Dielectric
from pathforge.scenes import random_scene, random_scene_camera, simple_scene, simple_scene_camera


class TestRandomScene:
    """Test the random sphere field."""

    def test_feature_spheres(self):
        scene = random_scene(np.random.default_rng(0))
        ground, glass, diffuse, metal = list(scene)[:4]

        assert ground.radius == 1000
        assert isinstance(glass.material, Dielectric)
        assert isinstance(diffuse.material, Lambertian)
        assert isinstance(metal.material, Metal)

    def test_small_spheres(self):
        scene = random_scene(np.random.default_rng(0))
        small = list(scene)[4:]

        assert 0 < len(small) <= 100
        for sphere in small:
            assert sphere.radius == 0.2
            assert (sphere.center - Point3(4, 0.2, 0)).length() > 0.9
            assert isinstance(sphere.material, (Lambertian, Metal, Dielectric))

    def test_same_seed_same_scene(self):
        a = random_scene(np.random.default_rng(5))
        b = random_scene(np.random.default_rng(5))
        assert [s.center for s in a] == [s.center for s in b]
        assert [s.material for s in a] == [s.material for s in b]

    def test_camera_focused_on_target(self):
        camera = random_scene_camera(2.0)
        ray = camera.make_ray(0.5, 0.5, np.random.default_rng(1))
        # Center rays converge on the look-at point whatever the lens sample
        assert ray.at(1.0) == Point3(0, 0, 0)
        assert camera.lens_radius == pytest.approx(0.1)


class TestSimpleScene:
    """Test the small preview scene."""

    def test_hollow_glass(self):
        scene = simple_scene()
        radii = [s.radius for s in scene if isinstance(s.material, Dielectric)]
        assert sorted(radii) == [-0.45, 0.5]

    def test_camera(self):
        camera = simple_scene_camera(1.5)
        assert camera.eye == Point3(3, 3, 2)
