"""
Built-in demo scenes.
"""

from __future__ import annotations
import numpy as np

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Sphere, Scene
from .materials import Lambertian, Metal, Dielectric


def random_scene(rng: np.random.Generator) -> Scene:
    """Ground, three large feature spheres and a grid of small random ones."""
    world = Scene()

    world.add(Sphere(Point3(0, -1000, -1), 1000, Lambertian(Color(0.5, 0.5, 0.5))))
    world.add(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    world.add(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    world.add(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    # Keep the small spheres clear of the metal feature sphere
    clearing = Point3(4, 0.2, 0)
    for a in range(-5, 5):
        for b in range(-5, 5):
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())
            choose_mat = rng.random()
            if (center - clearing).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = Vec3.random(rng) * Vec3.random(rng)
                material = Lambertian(albedo)
            elif choose_mat < 0.95:
                albedo = Vec3.random(rng) * Vec3.random(rng)
                material = Metal(albedo, 0.5 * rng.random())
            else:
                material = Dielectric(1.5)
            world.add(Sphere(center, 0.2, material))

    return world


def random_scene_camera(aspect_ratio: float) -> Camera:
    """Camera framing random_scene, focused on the look-at point."""
    look_from = Point3(16, 2, 4)
    look_at = Point3(0, 0, 0)
    return Camera(
        look_from=look_from,
        look_at=look_at,
        vup=Vec3(0, 1, 0),
        vfov=15,
        aspect_ratio=aspect_ratio,
        aperture=0.2,
        focus_dist=(look_from - look_at).length()
    )


def simple_scene() -> Scene:
    """Diffuse, metal and hollow glass spheres on a ground sphere."""
    world = Scene()
    world.add(Sphere(Point3(0, -100.5, -1), 100, Lambertian(Color(0.8, 0.8, 0.0))))
    world.add(Sphere(Point3(0, 0, -1), 0.5, Lambertian(Color(0.1, 0.2, 0.5))))
    world.add(Sphere(Point3(1, 0, -1), 0.5, Metal(Color(0.8, 0.6, 0.2), 0.3)))
    # Negative radius flips the normal: a thin glass bubble
    world.add(Sphere(Point3(-1, 0, -1), 0.5, Dielectric(1.5)))
    world.add(Sphere(Point3(-1, 0, -1), -0.45, Dielectric(1.5)))
    return world


def simple_scene_camera(aspect_ratio: float) -> Camera:
    """Camera framing simple_scene."""
    look_from = Point3(3, 3, 2)
    look_at = Point3(0, 0, -1)
    return Camera(
        look_from=look_from,
        look_at=look_at,
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=(look_from - look_at).length()
    )
