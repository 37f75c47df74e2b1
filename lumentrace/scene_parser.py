"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Camera configuration
- Render settings
- Materials library
- Objects (spheres with materials)

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
  height: 266
  samples: 100
  max_depth: 50

materials:
  ground:
    type: lambertian
    albedo: [0.5, 0.5, 0.5]

  glass:
    type: dielectric
    refraction_index: 1.5

objects:
  - type: sphere
    center: [0, -1000, 0]
    radius: 1000
    material: ground

  - type: sphere
    center: [0, 1, 0]
    radius: 1
    material: glass
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple
import json

import yaml

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Hittable, Sphere
from .materials import Material, Lambertian, Metal, Dielectric
from .renderer import RenderSettings
from .errors import SceneParseError

ParsedScene = Tuple[List[Hittable], Camera, RenderSettings]


def _expect_mapping(data: Any, what: str) -> Dict[str, Any]:
    if not isinstance(data, dict):
        raise SceneParseError(f"{what} must be a mapping, got {type(data).__name__}")
    return data


def _to_float(value: Any, what: str) -> float:
    try:
        return float(value)
    except (TypeError, ValueError) as e:
        raise SceneParseError(f"{what} must be a number, got {value!r}") from e


def _to_int(value: Any, what: str) -> int:
    try:
        return int(value)
    except (TypeError, ValueError) as e:
        raise SceneParseError(f"{what} must be an integer, got {value!r}") from e


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.objects: List[Hittable] = []
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None

    def parse_file(self, filepath: str) -> ParsedScene:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (objects, camera, settings)
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        try:
            content = path.read_text(encoding='utf-8')
        except (OSError, UnicodeDecodeError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                # YAML is a superset of JSON, so this covers other suffixes too
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file {filepath} must contain a mapping")

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> ParsedScene:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (objects, camera, settings)

        Raises:
            SceneParseError: If any section is malformed
        """
        data = _expect_mapping(data, "Scene")

        # Parse materials first (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'objects' in data:
            self._parse_objects(data['objects'])

        # Settings before camera: the camera's default aspect ratio follows them
        if 'render' in data:
            self._parse_settings(data['render'])
        else:
            self.settings = RenderSettings()

        if 'camera' in data:
            self._parse_camera(data['camera'])
        else:
            self.camera = Camera(
                look_from=Point3(0, 0, 5),
                look_at=Point3(0, 0, 0),
                vfov=60,
                aspect_ratio=self.settings.width / self.settings.height
            )

        return self.objects, self.camera, self.settings

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an x/y/z mapping."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Vec3 must have 3 components, got {len(data)}")
            return Vec3(*(_to_float(c, "Vec3 component") for c in data))
        elif isinstance(data, dict):
            return Vec3(
                _to_float(data.get('x', 0), "Vec3 x"),
                _to_float(data.get('y', 0), "Vec3 y"),
                _to_float(data.get('z', 0), "Vec3 z")
            )
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from a list, an r/g/b mapping or a '#rrggbb' string."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(*(_to_float(c, "Color component") for c in data))
        elif isinstance(data, dict):
            return Color(
                _to_float(data.get('r', 0), "Color r"),
                _to_float(data.get('g', 0), "Color g"),
                _to_float(data.get('b', 0), "Color b")
            )
        elif isinstance(data, str):
            if data.startswith('#') and len(data) == 7:
                try:
                    r = int(data[1:3], 16) / 255.0
                    g = int(data[3:5], 16) / 255.0
                    b = int(data[5:7], 16) / 255.0
                except ValueError as e:
                    raise SceneParseError(f"Cannot parse color from string: {data}") from e
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_material(self, mat_data: Any) -> Material:
        mat_data = _expect_mapping(mat_data, "Material")
        mat_type = str(mat_data.get('type', 'lambertian')).lower()

        if mat_type == 'lambertian':
            albedo = self._parse_color(mat_data.get('albedo', [0.5, 0.5, 0.5]))
            return Lambertian(albedo)

        elif mat_type == 'metal':
            albedo = self._parse_color(mat_data.get('albedo', [0.8, 0.8, 0.8]))
            fuzz = _to_float(mat_data.get('fuzz', 0.0), "Metal fuzz")
            return Metal(albedo, fuzz)

        elif mat_type == 'dielectric':
            return Dielectric(_to_float(mat_data.get('refraction_index', 1.5), "Refraction index"))

        raise SceneParseError(f"Unknown material type: {mat_type}")

    def _parse_materials(self, materials_data: Any) -> None:
        """Parse materials section."""
        for name, mat_data in _expect_mapping(materials_data, "Materials section").items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Material:
        """Get a material by name or inline definition."""
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: Any) -> None:
        """Parse objects section."""
        if not isinstance(objects_data, list):
            raise SceneParseError(
                f"Objects section must be a list, got {type(objects_data).__name__}"
            )

        for obj_data in objects_data:
            obj_data = _expect_mapping(obj_data, "Object")
            obj_type = str(obj_data.get('type', 'sphere')).lower()
            if obj_type != 'sphere':
                raise SceneParseError(f"Unknown object type: {obj_type}")

            if 'material' not in obj_data:
                raise SceneParseError(f"Object has no material: {obj_data}")
            material = self._get_material(obj_data['material'])

            center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
            radius = _to_float(obj_data.get('radius', 1.0), "Sphere radius")
            self.objects.append(Sphere(center, radius, material))

    def _parse_camera(self, camera_data: Any) -> None:
        """Parse camera section."""
        camera_data = _expect_mapping(camera_data, "Camera section")
        default_aspect = self.settings.width / self.settings.height

        self.camera = Camera(
            look_from=self._parse_vec3(camera_data.get('look_from', [0, 0, 5])),
            look_at=self._parse_vec3(camera_data.get('look_at', [0, 0, 0])),
            vup=self._parse_vec3(camera_data.get('vup', [0, 1, 0])),
            vfov=_to_float(camera_data.get('vfov', 60), "Camera vfov"),
            aspect_ratio=_to_float(camera_data.get('aspect_ratio', default_aspect), "Camera aspect_ratio"),
            aperture=_to_float(camera_data.get('aperture', 0.0), "Camera aperture"),
            focus_dist=_to_float(camera_data.get('focus_dist', 1.0), "Camera focus_dist")
        )

    def _parse_settings(self, settings_data: Any) -> None:
        """Parse render settings section."""
        settings_data = _expect_mapping(settings_data, "Render section")
        seed = settings_data.get('seed')
        self.settings = RenderSettings(
            width=_to_int(settings_data.get('width', 400), "Render width"),
            height=_to_int(settings_data.get('height', 300), "Render height"),
            samples_per_pixel=_to_int(settings_data.get('samples', 100), "Render samples"),
            max_depth=_to_int(settings_data.get('max_depth', 50), "Render max_depth"),
            num_threads=_to_int(settings_data.get('threads', 0), "Render threads"),
            seed=_to_int(seed, "Render seed") if seed is not None else None
        )
        if self.settings.width <= 0 or self.settings.height <= 0:
            raise SceneParseError(
                f"Image dimensions must be positive, got "
                f"{self.settings.width}x{self.settings.height}"
            )


def load_scene(filepath: str) -> ParsedScene:
    """Convenience function to load a scene file."""
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> ParsedScene:
    """Convenience function to parse a scene from a dictionary."""
    parser = SceneParser()
    return parser.parse_dict(data)
