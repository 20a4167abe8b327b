"""
Path tracing color estimator.

Follows one path per call: each bounce multiplies a running attenuation by
the material's attenuation, and the path ends when it escapes to the sky,
is absorbed, or hits the depth limit.
"""

from __future__ import annotations
import math
import numpy as np

from .vec3 import Color
from .ray import Ray
from .shapes import Scene
from .materials import scatter

# Minimum hit distance, keeps scattered rays from re-hitting their origin
T_MIN = 1e-3

BLACK = Color(0.0, 0.0, 0.0)
SKY_HORIZON = Color(1.0, 1.0, 1.0)
SKY_ZENITH = Color(0.5, 0.7, 1.0)


def sky_color(ray: Ray) -> Color:
    """Vertical white-to-blue gradient seen by rays that escape the scene."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return SKY_HORIZON * (1.0 - t) + SKY_ZENITH * t


def ray_color(ray: Ray, scene: Scene, rng: np.random.Generator, max_depth: int) -> Color:
    """Estimate the color carried back along a ray.

    Args:
        ray: The primary ray
        scene: The scene to trace against
        rng: Random source for scattering decisions
        max_depth: Number of bounces allowed; a hit at this depth is black

    Returns:
        Linear RGB color estimate
    """
    attenuation = Color(1.0, 1.0, 1.0)
    depth = 0

    while True:
        hit = scene.hit(ray, T_MIN, math.inf)
        if hit is None:
            return attenuation * sky_color(ray)

        if depth >= max_depth:
            return BLACK

        result = scatter(hit.material, ray, hit, rng)
        if result is None:
            return BLACK

        attenuation = attenuation * result.attenuation
        ray = result.scattered_ray
        depth += 1
