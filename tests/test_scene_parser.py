"""Tests for the scene description parser."""

import pytest
import json

from pathforge.vec3 import Vec3, Point3, Color
from pathforge.shapes import Scene
from pathforge.camera import Camera
from pathforge.materials import Lambertian, Metal, Dielectric
from pathforge.renderer import RenderSettings
from pathforge.scene_parser import SceneParser, SceneParseError, load_scene, parse_scene


SCENE_YAML = """
camera:
  look_from: [13, 2, 3]
  look_at: [0, 0, 0]
  vfov: 20
  aperture: 0.1
  focus_dist: 10

render:
  width: 40
  height: 20
  samples: 4
  max_depth: 5
  seed: 7
  threads: 2

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
    material: {type: metal, albedo: "#ff8000", fuzz: 0.1}
"""


class TestParseFile:
    """Test loading scene files."""

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE_YAML)

        scene, camera, settings = load_scene(str(path))

        assert isinstance(scene, Scene)
        assert len(scene) == 3
        assert isinstance(camera, Camera)
        assert camera.eye == Point3(13, 2, 3)
        assert camera.lens_radius == pytest.approx(0.05)
        assert settings.width == 40
        assert settings.height == 20
        assert settings.samples_per_pixel == 4
        assert settings.max_depth == 5
        assert settings.seed == 7
        assert settings.num_threads == 2

    def test_materials(self, tmp_path):
        path = tmp_path / "scene.yml"
        path.write_text(SCENE_YAML)

        scene, _, _ = load_scene(str(path))
        ground, glass, metal = [s.material for s in scene]

        assert ground == Lambertian(Color(0.5, 0.5, 0.5))
        assert glass == Dielectric(1.5)
        assert isinstance(metal, Metal)
        assert metal.albedo == Color(1.0, 128 / 255, 0.0)
        assert metal.fuzz == pytest.approx(0.1)

    def test_json_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({
            "objects": [{"center": [0, 0, -1], "radius": 0.5,
                         "material": {"type": "lambertian", "albedo": [0.1, 0.2, 0.5]}}],
        }))

        scene, camera, settings = load_scene(str(path))
        assert len(scene) == 1
        assert settings == RenderSettings()

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(str(tmp_path / "nope.yaml"))

    def test_malformed_yaml(self, tmp_path):
        path = tmp_path / "broken.yaml"
        path.write_text("objects: [unterminated")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_non_mapping(self, tmp_path):
        path = tmp_path / "list.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))


class TestParseDict:
    """Test parsing from dictionaries."""

    def test_defaults(self):
        scene, camera, settings = parse_scene({})
        assert len(scene) == 0
        assert camera.eye == Point3(0, 0, 5)
        assert settings.width == 640

    def test_camera_defaults_follow_image_and_target(self):
        _, camera, _ = parse_scene({
            "camera": {"look_from": [0, 0, 4], "look_at": [0, 0, 0], "vfov": 90},
            "render": {"width": 30, "height": 10},
        })
        # aspect 3, focus distance 4
        assert camera.horizontal.length() == pytest.approx(2 * 3 * 4)
        assert camera.vertical.length() == pytest.approx(2 * 4)

    def test_vec3_from_mapping(self):
        scene, _, _ = parse_scene({
            "objects": [{"center": {"x": 1, "y": 2, "z": 3}, "radius": 0.5,
                         "material": {"type": "lambertian", "albedo": {"r": 1, "g": 0, "b": 0}}}],
        })
        sphere = next(iter(scene))
        assert sphere.center == Point3(1, 2, 3)
        assert sphere.material.albedo == Color(1, 0, 0)

    def test_negative_radius_allowed(self):
        scene, _, _ = parse_scene({
            "objects": [{"center": [0, 0, 0], "radius": -0.45,
                         "material": {"type": "dielectric", "ior": 1.5}}],
        })
        assert next(iter(scene)).radius == -0.45

    @pytest.mark.parametrize("data", [
        {"materials": {"x": {"type": "plastic"}}},
        {"objects": [{"center": [0, 0, 0], "radius": 1, "material": "missing"}]},
        {"objects": [{"center": [0, 0, 0], "radius": 1}]},
        {"objects": [{"center": [0, 0], "radius": 1, "material": {"type": "lambertian"}}]},
        {"objects": [{"center": [0, 0, 0], "radius": 0, "material": {"type": "lambertian"}}]},
        {"objects": [{"type": "plane", "material": {"type": "lambertian"}}]},
        {"materials": {"glass": {"type": "dielectric", "ior": 0.9}}},
        {"materials": {"red": {"type": "lambertian", "albedo": "red"}}},
        {"camera": {"look_from": [1, 1, 1], "look_at": [1, 1, 1]}},
        {"camera": {"vfov": 180}},
        {"camera": {"aperture": -1}},
        {"camera": {"focus_dist": 0}},
        {"camera": {"aspect_ratio": 0}},
        {"render": {"width": 0}},
        {"render": {"samples": -4}},
        {"render": {"threads": -3}},
        {"objects": [{"center": [0, 0, 0], "radius": "big", "material": {"type": "lambertian"}}]},
        {"render": {"width": None}},
        {"render": {"seed": "lucky"}},
        {"render": [640, 320]},
        {"camera": {"vfov": None}},
        {"camera": {"focus_dist": "far"}},
        {"camera": "default"},
        {"objects": [5]},
        {"objects": {"center": [0, 0, 0]}},
        {"materials": ["glass"]},
        {"materials": {"steel": {"type": "metal", "fuzz": "rough"}}},
        {"materials": {"glass": {"type": "dielectric", "ior": None}}},
        [{"objects": []}],
    ])
    def test_invalid_scenes(self, data):
        with pytest.raises(SceneParseError):
            SceneParser().parse_dict(data)

    def test_null_sections_use_defaults(self):
        scene, camera, settings = parse_scene(
            {"materials": None, "objects": None, "render": None, "camera": None}
        )
        assert len(scene) == 0
        assert camera.eye == Point3(0, 0, 5)
        assert settings.width == 640
