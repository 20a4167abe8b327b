"""
Scene description parser.

Reads a YAML (or JSON) scene description with:
- Camera configuration
- Render settings
- Materials library
- Spheres referencing a named material or carrying an inline one

Example scene file:
```yaml
camera:
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vfov: 20
  aperture: 0.1
  focus_dist: 10

render:
  width: 400
  height: 200
  samples: 64
  max_depth: 16
  seed: 7

materials:
  ground:
    type: lambertian
    albedo: [0.5, 0.5, 0.5]

  glass:
    type: dielectric
    ior: 1.5

objects:
  - center: [0, -1000, 0]
    radius: 1000
    material: ground

  - center: [0, 1, 0]
    radius: 1
    material: glass

  - center: [4, 1, 0]
    radius: 1
    material: {type: metal, albedo: [0.7, 0.6, 0.5], fuzz: 0.1}
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Tuple
import json
import logging

import yaml

from .vec3 import Vec3, Color
from .camera import Camera
from .shapes import Sphere, Scene
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.scene: Scene = Scene()
        self.camera: Camera = None
        self.settings: RenderSettings = None

    def parse_file(self, filepath: str) -> Tuple[Scene, Camera, RenderSettings]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as exc:
            raise SceneParseError(f"Cannot read scene file {filepath}: {exc}") from exc

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        logger.debug("Parsing scene file %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        if not isinstance(data, dict):
            raise SceneParseError(f"Scene description must be a mapping, got {type(data).__name__}")

        # Materials first (objects reference them)
        self._parse_materials(self._section(data, 'materials', dict))
        self._parse_objects(self._section(data, 'objects', list))

        # Settings before camera: the default aspect ratio comes from the image size
        self._parse_settings(self._section(data, 'render', dict))
        self._parse_camera(self._section(data, 'camera', dict))

        logger.debug("Parsed %d spheres, %d named materials", len(self.scene), len(self.materials))
        return self.scene, self.camera, self.settings

    @staticmethod
    def _section(data: Dict[str, Any], key: str, kind: type) -> Any:
        """Return a top-level section, empty when absent or null."""
        section = data.get(key)
        if section is None:
            return kind()
        if not isinstance(section, kind):
            raise SceneParseError(
                f"Section '{key}' must be a {kind.__name__}, got {type(section).__name__}"
            )
        return section

    @staticmethod
    def _parse_float(value: Any, field: str) -> float:
        """Convert a scalar field, reporting bad values as parse errors."""
        try:
            return float(value)
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid value for '{field}': {value!r}") from exc

    @staticmethod
    def _parse_int(value: Any, field: str) -> int:
        try:
            return int(value)
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid value for '{field}': {value!r}") from exc

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
        try:
            if isinstance(data, (list, tuple)):
                if len(data) != 3:
                    raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
                return Vec3(float(data[0]), float(data[1]), float(data[2]))
            elif isinstance(data, dict):
                return Vec3(
                    float(data.get('x', 0)),
                    float(data.get('y', 0)),
                    float(data.get('z', 0))
                )
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}") from exc
        raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, dict):
            return self._parse_vec3({
                'x': data.get('r', 0),
                'y': data.get('g', 0),
                'z': data.get('b', 0),
            })
        elif isinstance(data, str):
            # Hex colors
            if data.startswith('#') and len(data) == 7:
                try:
                    r = int(data[1:3], 16) / 255.0
                    g = int(data[3:5], 16) / 255.0
                    b = int(data[5:7], 16) / 255.0
                except ValueError as exc:
                    raise SceneParseError(f"Cannot parse color from string: {data}") from exc
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        return self._parse_vec3(data)

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        """Build a single material from its description."""
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Invalid material definition: {mat_data}")

        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type == 'lambertian':
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = self._parse_float(mat_data.get('fuzz', 0.0), 'fuzz')
            return Metal(albedo, fuzz)

        elif mat_type == 'dielectric':
            ior = self._parse_float(mat_data.get('ior', 1.5), 'ior')
            if ior <= 1.0:
                raise SceneParseError(f"Dielectric ior must be greater than 1, got {ior}")
            return Dielectric(ior)

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            raise SceneParseError("Sphere has no material")
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            if not isinstance(obj_data, dict):
                raise SceneParseError(f"Invalid object definition: {obj_data!r}")
            obj_type = str(obj_data.get('type', 'sphere')).lower()
            if obj_type != 'sphere':
                raise SceneParseError(f"Unknown object type: {obj_type}")

            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
            radius = self._parse_float(obj_data.get('radius', 1.0), 'radius')
            if radius == 0:
                raise SceneParseError("Sphere radius must be non-zero")
            material = self._get_material(obj_data.get('material'))
            self.scene.add(Sphere(center, radius, material))

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        look_from = self._parse_vec3(camera_data.get('look_from', [0, 0, 5]))
        look_at = self._parse_vec3(camera_data.get('look_at', [0, 0, 0]))
        vup = self._parse_vec3(camera_data.get('vup', [0, 1, 0]))
        vfov = self._parse_float(camera_data.get('vfov', 60), 'vfov')
        aspect_ratio = self._parse_float(camera_data.get(
            'aspect_ratio', self.settings.width / self.settings.height
        ), 'aspect_ratio')
        aperture = self._parse_float(camera_data.get('aperture', 0.0), 'aperture')
        focus_dist = self._parse_float(
            camera_data.get('focus_dist', (look_from - look_at).length()), 'focus_dist'
        )

        if (look_from - look_at).near_zero():
            raise SceneParseError("Camera look_from and look_at must differ")
        if not 0 < vfov < 180:
            raise SceneParseError(f"vfov must be in (0, 180), got {vfov}")
        if aspect_ratio <= 0:
            raise SceneParseError(f"aspect_ratio must be positive, got {aspect_ratio}")
        if aperture < 0:
            raise SceneParseError(f"aperture must be non-negative, got {aperture}")
        if focus_dist <= 0:
            raise SceneParseError(f"focus_dist must be positive, got {focus_dist}")

        self.camera = Camera(
            look_from=look_from,
            look_at=look_at,
            vup=vup,
            vfov=vfov,
            aspect_ratio=aspect_ratio,
            aperture=aperture,
            focus_dist=focus_dist
        )

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        seed = settings_data.get('seed')
        fields = dict(
            width=self._parse_int(settings_data.get('width', 640), 'width'),
            height=self._parse_int(settings_data.get('height', 320), 'height'),
            samples_per_pixel=self._parse_int(settings_data.get('samples', 128), 'samples'),
            max_depth=self._parse_int(settings_data.get('max_depth', 16), 'max_depth'),
            chunk_size=self._parse_int(settings_data.get('chunk_size', 1024), 'chunk_size'),
            num_threads=self._parse_int(settings_data.get('threads', 0), 'threads'),
            use_processes=bool(settings_data.get('processes', False)),
            seed=self._parse_int(seed, 'seed') if seed is not None else None,
        )
        try:
            self.settings = RenderSettings(**fields)
        except (TypeError, ValueError) as exc:
            raise SceneParseError(f"Invalid render settings: {exc}") from exc


def load_scene(filepath: str) -> Tuple[Scene, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[Scene, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
