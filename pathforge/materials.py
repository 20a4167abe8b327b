"""
Materials and their scattering models.

Implements:
- Lambertian diffuse
- Metal (specular reflection with fuzz)
- Dielectric (glass, water - with refraction and Schlick reflectance)

The material set is closed: ``scatter`` dispatches over exactly these three
kinds and rejects anything else.
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Optional, Union
import math
import numpy as np

from .vec3 import Vec3, Color
from .ray import Ray
from .shapes import HitRecord


@dataclass
class ScatterResult:
    """Result of a material scatter operation."""
    attenuation: Color
    scattered_ray: Ray


@dataclass(frozen=True)
class Lambertian:
    """Diffuse material with Lambertian (ideal matte) scattering.

    Attributes:
        albedo: The base color (RGB, each component 0-1)
    """
    albedo: Color


@dataclass(frozen=True)
class Metal:
    """Metallic material with specular reflection.

    Attributes:
        albedo: The reflection color
        fuzz: Reflection roughness, clamped to [0, 1] (0 = mirror)
    """
    albedo: Color
    fuzz: float = 0.0

    def __post_init__(self):
        object.__setattr__(self, 'fuzz', max(0.0, min(float(self.fuzz), 1.0)))


@dataclass(frozen=True)
class Dielectric:
    """Clear dielectric (glass-like) material.

    Attributes:
        refraction_index: Index of refraction (1.5 = glass, 2.4 = diamond)
    """
    refraction_index: float = 1.5


Material = Union[Lambertian, Metal, Dielectric]

WHITE = Color(1.0, 1.0, 1.0)


def schlick(cosine: float, refraction_index: float) -> float:
    """Schlick's approximation for Fresnel reflectance."""
    cosine = max(0.0, min(cosine, 1.0))
    r0 = (1 - refraction_index) / (1 + refraction_index)
    r0 = r0 * r0
    return r0 + (1 - r0) * pow(1 - cosine, 5)


def refract(v: Vec3, normal: Vec3, ni_over_nt: float) -> Optional[Vec3]:
    """Refract v through a surface with the given unit normal.

    Args:
        v: Incoming direction (any length)
        normal: Unit normal on the side the ray comes from
        ni_over_nt: Ratio of refractive indices (incident / transmitted)

    Returns:
        Refracted direction, or None on total internal reflection
    """
    uv = v.normalize()
    dt = uv.dot(normal)
    discriminant = 1.0 - ni_over_nt * ni_over_nt * (1 - dt * dt)
    if discriminant <= 0:
        return None
    return (uv - normal * dt) * ni_over_nt - normal * math.sqrt(discriminant)


def _scatter_lambertian(material: Lambertian, ray_in: Ray, hit: HitRecord,
                        rng: np.random.Generator) -> Optional[ScatterResult]:
    target = hit.point + hit.normal + Vec3.random_in_unit_sphere(rng)
    return ScatterResult(material.albedo, Ray(hit.point, target - hit.point))


def _scatter_metal(material: Metal, ray_in: Ray, hit: HitRecord,
                   rng: np.random.Generator) -> Optional[ScatterResult]:
    reflected = ray_in.direction.normalize().reflect(hit.normal)
    if material.fuzz > 0:
        reflected = reflected + Vec3.random_in_unit_sphere(rng) * material.fuzz

    # A fuzzed reflection that dips below the surface is absorbed
    if reflected.dot(hit.normal) <= 0:
        return None
    return ScatterResult(material.albedo, Ray(hit.point, reflected))


def _scatter_dielectric(material: Dielectric, ray_in: Ray, hit: HitRecord,
                        rng: np.random.Generator) -> Optional[ScatterResult]:
    ior = material.refraction_index
    direction = ray_in.direction
    d_dot_n = direction.dot(hit.normal)

    if d_dot_n > 0:
        # Leaving the medium
        outward_normal = -hit.normal
        ni_over_nt = ior
        cosine = ior * d_dot_n / direction.length()
    else:
        outward_normal = hit.normal
        ni_over_nt = 1.0 / ior
        cosine = -d_dot_n / direction.length()

    # Total internal reflection always reflects
    refracted = refract(direction, outward_normal, ni_over_nt)
    if refracted is None or rng.random() < schlick(cosine, ior):
        scattered = Ray(hit.point, direction.reflect(hit.normal))
    else:
        scattered = Ray(hit.point, refracted)
    return ScatterResult(WHITE, scattered)


_SCATTER = {
    Lambertian: _scatter_lambertian,
    Metal: _scatter_metal,
    Dielectric: _scatter_dielectric,
}


def scatter(material: Material, ray_in: Ray, hit: HitRecord,
            rng: np.random.Generator) -> Optional[ScatterResult]:
    """Compute the scattered ray and attenuation for a hit.

    Args:
        material: One of Lambertian, Metal or Dielectric
        ray_in: The incoming ray
        hit: The intersection being shaded
        rng: Random source for direction sampling

    Returns:
        ScatterResult if the ray scatters, None if it is absorbed

    Raises:
        TypeError: If material is not one of the supported kinds
    """
    try:
        handler = _SCATTER[type(material)]
    except KeyError:
        raise TypeError(f"Unsupported material: {material!r}") from None
    return handler(material, ray_in, hit, rng)
