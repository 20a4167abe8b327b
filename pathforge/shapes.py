"""
Sphere primitives and the scene aggregate.

The scene is a plain ordered list scanned linearly for every ray.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Iterator, Optional, TYPE_CHECKING
import math

from .vec3 import Vec3, Point3
from .ray import Ray

if TYPE_CHECKING:
    from .materials import Material


@dataclass
class HitRecord:
    """Stores information about a ray-sphere intersection.

    Attributes:
        t: The ray parameter at intersection
        point: The intersection point in world space
        normal: Unit surface normal, pointing away from the center for a
            positive radius and toward it for a negative radius
        material: The material of the sphere that was hit
    """
    t: float
    point: Point3
    normal: Vec3
    material: Material


class Sphere:
    """A sphere defined by center and radius."""

    def __init__(self, center: Point3, radius: float, material: Material):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (negative flips the normal, which
                models the inner surface of a hollow glass shell)
            material: Material for shading
        """
        self.center = center
        self.radius = radius
        self.material = material

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0.
        A tangent ray (zero discriminant) counts as a miss.
        """
        oc = ray.origin - self.center
        a = ray.direction.dot(ray.direction)
        b = oc.dot(ray.direction)
        c = oc.dot(oc) - self.radius * self.radius

        discriminant = b * b - a * c
        if discriminant <= 0:
            return None

        sqrtd = math.sqrt(discriminant)

        # Nearest root first; both bounds are exclusive
        for root in ((-b - sqrtd) / a, (-b + sqrtd) / a):
            if t_min < root < t_max:
                point = ray.at(root)
                return HitRecord(
                    t=root,
                    point=point,
                    normal=(point - self.center) / self.radius,
                    material=self.material,
                )
        return None

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Scene:
    """An ordered collection of spheres."""

    def __init__(self, spheres: Optional[list[Sphere]] = None):
        self.spheres: list[Sphere] = list(spheres) if spheres is not None else []

    def add(self, sphere: Sphere) -> None:
        """Add a sphere to the scene."""
        self.spheres.append(sphere)

    def clear(self) -> None:
        """Remove all spheres."""
        self.spheres.clear()

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Find the closest intersection among all spheres."""
        closest_hit: Optional[HitRecord] = None
        closest_t = t_max

        for sphere in self.spheres:
            hit_record = sphere.hit(ray, t_min, closest_t)
            if hit_record is not None:
                closest_hit = hit_record
                closest_t = hit_record.t

        return closest_hit

    def __len__(self) -> int:
        return len(self.spheres)

    def __iter__(self) -> Iterator[Sphere]:
        return iter(self.spheres)
