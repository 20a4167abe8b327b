"""
Camera module for generating primary rays.

Supports:
- Perspective projection with a vertical field of view
- Arbitrary positioning via look-at
- Depth of field (thin lens sampled over a disk)
"""

from __future__ import annotations
import math
import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A thin-lens perspective camera.

    The basis is computed once; the camera is read-only afterwards and can
    be shared by any number of render workers.
    """

    def __init__(
        self,
        look_from: Point3,
        look_at: Point3,
        vup: Vec3 = Vec3(0, 1, 0),
        vfov: float = 90.0,
        aspect_ratio: float = 2.0,
        aperture: float = 0.0,
        focus_dist: float = 1.0,
    ):
        """Create a camera.

        Args:
            look_from: Camera position in world space
            look_at: Point the camera is looking at (must differ from look_from)
            vup: World up hint (usually (0, 1, 0))
            vfov: Vertical field of view in degrees
            aspect_ratio: Width / Height ratio
            aperture: Lens diameter for depth of field (0 = pinhole)
            focus_dist: Distance to the plane in perfect focus
        """
        theta = math.radians(vfov)
        half_height = math.tan(theta / 2)
        half_width = aspect_ratio * half_height

        # Orthonormal camera basis
        self.w = (look_from - look_at).normalize()  # Points backward from camera
        self.u = vup.cross(self.w).normalize()       # Points right
        self.v = self.w.cross(self.u)                # Points up

        self.eye = look_from
        self.horizontal = self.u * (2 * half_width * focus_dist)
        self.vertical = self.v * (2 * half_height * focus_dist)
        self.lower_left_corner = (
            self.eye
            - self.u * (half_width * focus_dist)
            - self.v * (half_height * focus_dist)
            - self.w * focus_dist
        )
        self.lens_radius = aperture / 2

    def make_ray(self, s: float, t: float, rng: np.random.Generator) -> Ray:
        """Generate a ray for the given coordinates on the image plane.

        Args:
            s: Horizontal coordinate [0, 1] (0 = left, 1 = right)
            t: Vertical coordinate [0, 1] (0 = bottom, 1 = top)
            rng: Random source used for lens sampling

        Returns:
            A ray from a point on the lens through the image-plane point
        """
        if self.lens_radius > 0:
            rd = Vec3.random_in_unit_disk(rng) * self.lens_radius
            offset = self.u * rd.x + self.v * rd.y
        else:
            offset = Vec3(0, 0, 0)

        direction = (
            self.lower_left_corner
            + self.horizontal * s
            + self.vertical * t
            - self.eye
            - offset
        )
        return Ray(self.eye + offset, direction)

    def __repr__(self) -> str:
        return f"Camera(eye={self.eye}, looking_at={self.lower_left_corner + self.horizontal/2 + self.vertical/2})"
