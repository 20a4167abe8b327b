"""
PathForge - A Python Monte Carlo path tracer for sphere scenes

Supports:
- Diffuse, metal and dielectric materials
- Thin-lens depth of field
- Parallel rendering with per-worker random streams
- Packed 0xAARRGGBB output and PNG export
- YAML/JSON scene descriptions
"""

__version__ = "0.1.0"
__author__ = "PathForge Team"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .shapes import Sphere, Scene, HitRecord
from .materials import Material, Lambertian, Metal, Dielectric, ScatterResult, scatter, schlick, refract
from .camera import Camera
from .integrator import ray_color, sky_color, T_MIN
from .renderer import Renderer, RenderSettings, RenderError, to_argb, buffer_to_rgb, render_range
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .scenes import random_scene, random_scene_camera, simple_scene, simple_scene_camera
