"""
Scene description language parser.

Supports a YAML (or JSON) scene description format with:
- Scene settings (background, ambient light)
- Materials library
- Objects (geometries with materials and emission)
- Lights
- Camera, output image and sampling configuration

Example scene file:
```yaml
scene:
  name: mirror ball
  background: [0.05, 0.05, 0.1]
  ambient: {color: [1, 1, 1], ka: 0.1}

materials:
  mirror: {kd: 0.3, ks: 0.5, kr: 0.4, shininess: 60}

objects:
  - type: sphere
    center: [0, 0, -100]
    radius: 40
    emission: [0.2, 0.1, 0.4]
    material: mirror

lights:
  - type: point
    position: [100, 100, 0]
    color: [1, 1, 1]
    kl: 0.0005

camera:
  location: [0, 0, 100]
  forward: [0, 0, -1]
  up: [0, 1, 0]
  vp_size: [200, 200]
  vp_distance: 100

image:
  name: mirror_ball
  width: 400
  height: 400

sampling:
  samples: 9
  size: 2.0
  pattern: jittered

render:
  threads: 0
  max_level: 10
  aa_samples: 4
```
"""

from __future__ import annotations
import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

from .vec3 import Vec3, Color
from .shapes import Geometry, Sphere, Plane, Triangle
from .materials import Material
from .lights import AmbientLight, DirectionalLight, PointLight, SpotLight
from .scene import Scene
from .image_writer import ImageWriter
from .tracer import SimpleRayTracer, MAX_CALC_COLOR_LEVEL
from .sampling import SamplingConfig, SamplingPattern
from .camera import CameraBuilder

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self):
        self.materials: Dict[str, Material] = {}
        self.scene: Optional[Scene] = None

    def parse_file(self, filepath: str) -> Tuple[Scene, CameraBuilder]:
        """Parse a scene file.

        Args:
            filepath: Path to the scene file (YAML or JSON)

        Returns:
            Tuple of (scene, camera builder). The builder already holds the
            image writer, ray tracer and sampling settings, so callers may
            override any of them before build().
        """
        path = Path(filepath)
        if not path.exists():
            raise SceneParseError(f"Scene file not found: {filepath}")

        content = path.read_text()

        if path.suffix == '.json':
            try:
                data = json.loads(content)
            except json.JSONDecodeError as e:
                raise SceneParseError(f"Invalid JSON in {filepath}: {e}") from e
        else:
            # YAML is a superset of JSON, so it handles unknown suffixes too
            import yaml
            try:
                data = yaml.safe_load(content)
            except yaml.YAMLError as e:
                raise SceneParseError(f"Invalid YAML in {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file must contain a mapping: {filepath}")

        logger.debug("Parsing scene file %s", path)
        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, CameraBuilder]:
        """Parse a scene from a dictionary.

        Missing or empty sections fall back to their defaults.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera builder)
        """
        if not isinstance(data, dict):
            raise SceneParseError(f"Scene description must be a mapping, got {type(data).__name__}")

        self._parse_scene(self._section(data, 'scene'))

        # Parse materials first (objects reference them)
        self._parse_materials(self._section(data, 'materials'))
        self._parse_objects(self._section(data, 'objects', list))
        self._parse_lights(self._section(data, 'lights', list))

        render = self._section(data, 'render')
        try:
            tracer = SimpleRayTracer(self.scene, int(render.get('max_level', MAX_CALC_COLOR_LEVEL)))
            builder = CameraBuilder().set_ray_tracer(tracer)
            self._parse_camera(builder, self._section(data, 'camera'))
            self._parse_image(builder, self._section(data, 'image'))
            if data.get('sampling') is not None:
                builder.set_sampling_config(self._parse_sampling(self._section(data, 'sampling')))
            builder.set_multithreading(int(render.get('threads', 1)))
            if 'aa_samples' in render:
                builder.set_anti_aliasing(
                    int(render['aa_samples']),
                    self._parse_pattern(render.get('aa_pattern', 'jittered'))
                )
        except (TypeError, ValueError) as e:
            raise SceneParseError(str(e)) from e

        logger.info("Parsed %r", self.scene)
        return self.scene, builder

    @staticmethod
    def _section(data: Dict[str, Any], key: str, kind: type = dict) -> Any:
        """Fetch a section, treating a missing or empty one as empty."""
        section = data.get(key)
        if section is None:
            return kind()
        if not isinstance(section, kind):
            raise SceneParseError(
                f"Section '{key}' must be a {'list' if kind is list else 'mapping'}, "
                f"got {type(section).__name__}"
            )
        return section

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from various formats."""
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
        else:
            raise SceneParseError(f"Cannot parse Vec3 from: {data}")

    def _parse_color(self, data: Any) -> Color:
        """Parse a Color from various formats."""
        if isinstance(data, (list, tuple)):
            if len(data) != 3:
                raise SceneParseError(f"Color must have 3 components, got {len(data)}")
            return Color(float(data[0]), float(data[1]), float(data[2]))
        elif isinstance(data, dict):
            return Color(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0))
            )
        elif isinstance(data, str):
            # Handle hex colors
            if data.startswith('#') and len(data) == 7:
                r = int(data[1:3], 16) / 255.0
                g = int(data[3:5], 16) / 255.0
                b = int(data[5:7], 16) / 255.0
                return Color(r, g, b)
            raise SceneParseError(f"Cannot parse color from string: {data}")
        else:
            raise SceneParseError(f"Cannot parse Color from: {data}")

    def _parse_coefficient(self, data: Any):
        if isinstance(data, (int, float)):
            return float(data)
        return self._parse_color(data)

    def _parse_pattern(self, name: str) -> SamplingPattern:
        try:
            return SamplingPattern(str(name).lower())
        except ValueError as e:
            raise SceneParseError(f"Unknown sampling pattern: {name}") from e

    def _parse_scene(self, scene_data: Dict[str, Any]) -> None:
        """Parse the scene section (name, background, ambient light)."""
        ambient = AmbientLight.NONE
        if scene_data.get('ambient') is not None:
            ambient_data = self._section(scene_data, 'ambient')
            ambient = AmbientLight(
                self._parse_color(ambient_data.get('color', [1, 1, 1])),
                float(ambient_data.get('ka', 1.0))
            )

        self.scene = Scene(
            name=str(scene_data.get('name', 'scene')),
            background=self._parse_color(scene_data.get('background', [0, 0, 0])),
            ambient_light=ambient
        )

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        if not isinstance(mat_data, dict):
            raise SceneParseError(f"Material must be a mapping, got {mat_data!r}")
        try:
            return Material(
                kd=self._parse_coefficient(mat_data.get('kd', 0.0)),
                ks=self._parse_coefficient(mat_data.get('ks', 0.0)),
                kr=self._parse_coefficient(mat_data.get('kr', 0.0)),
                kt=self._parse_coefficient(mat_data.get('kt', 0.0)),
                shininess=int(mat_data.get('shininess', 0))
            )
        except ValueError as e:
            raise SceneParseError(f"Invalid material: {e}") from e

    def _parse_materials(self, materials_data: Dict[str, Any]) -> None:
        """Parse materials section."""
        for name, mat_data in materials_data.items():
            self.materials[name] = self._parse_material(mat_data)

    def _get_material(self, mat_ref: Any) -> Optional[Material]:
        """Get a material by name or inline definition."""
        if mat_ref is None:
            return None
        if isinstance(mat_ref, str):
            if mat_ref not in self.materials:
                raise SceneParseError(f"Unknown material: {mat_ref}")
            return self.materials[mat_ref]
        elif isinstance(mat_ref, dict):
            return self._parse_material(mat_ref)
        else:
            raise SceneParseError(f"Invalid material reference: {mat_ref}")

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            if not isinstance(obj_data, dict):
                raise SceneParseError(f"Object must be a mapping, got {obj_data!r}")
            obj_type = obj_data.get('type', 'sphere').lower()
            material = self._get_material(obj_data.get('material'))
            emission = None
            if 'emission' in obj_data:
                emission = self._parse_color(obj_data['emission'])

            geometry: Geometry
            try:
                if obj_type == 'sphere':
                    center = self._parse_vec3(obj_data.get('center', [0, 0, 0]))
                    radius = float(obj_data.get('radius', 1.0))
                    geometry = Sphere(center, radius, material, emission)

                elif obj_type == 'plane':
                    point = self._parse_vec3(obj_data.get('point', [0, 0, 0]))
                    normal = self._parse_vec3(obj_data.get('normal', [0, 1, 0]))
                    geometry = Plane(point, normal, material, emission)

                elif obj_type == 'triangle':
                    v0 = self._parse_vec3(obj_data['v0'])
                    v1 = self._parse_vec3(obj_data['v1'])
                    v2 = self._parse_vec3(obj_data['v2'])
                    geometry = Triangle(v0, v1, v2, material, emission)

                else:
                    raise SceneParseError(f"Unknown object type: {obj_type}")
            except (KeyError, ValueError) as e:
                raise SceneParseError(f"Invalid {obj_type}: {e}") from e

            self.scene.geometries.add(geometry)

    def _parse_lights(self, lights_data: list) -> None:
        """Parse lights section."""
        for light_data in lights_data:
            if not isinstance(light_data, dict):
                raise SceneParseError(f"Light must be a mapping, got {light_data!r}")
            light_type = light_data.get('type', 'point').lower()
            color = self._parse_color(light_data.get('color', [1, 1, 1]))

            try:
                if light_type == 'directional':
                    direction = self._parse_vec3(light_data.get('direction', [0, -1, 0]))
                    self.scene.lights.append(DirectionalLight(color, direction))

                elif light_type in ('point', 'spot'):
                    position = self._parse_vec3(light_data.get('position', [0, 5, 0]))
                    kc = float(light_data.get('kc', 1.0))
                    kl = float(light_data.get('kl', 0.0))
                    kq = float(light_data.get('kq', 0.0))
                    if light_type == 'point':
                        self.scene.lights.append(PointLight(color, position, kc, kl, kq))
                    else:
                        direction = self._parse_vec3(light_data.get('direction', [0, -1, 0]))
                        narrow_beam = float(light_data.get('narrow_beam', 1.0))
                        self.scene.lights.append(
                            SpotLight(color, position, direction, kc, kl, kq, narrow_beam)
                        )

                else:
                    raise SceneParseError(f"Unknown light type: {light_type}")
            except ValueError as e:
                raise SceneParseError(f"Invalid {light_type} light: {e}") from e

    def _parse_camera(self, builder: CameraBuilder, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        width, height = camera_data.get('vp_size', [1.0, 1.0])
        builder.set_location(self._parse_vec3(camera_data.get('location', [0, 0, 0])))
        builder.set_direction(
            self._parse_vec3(camera_data.get('forward', [0, 0, -1])),
            self._parse_vec3(camera_data.get('up', [0, 1, 0]))
        )
        builder.set_vp_size(float(width), float(height))
        builder.set_vp_distance(float(camera_data.get('vp_distance', 1.0)))

    def _parse_image(self, builder: CameraBuilder, image_data: Dict[str, Any]) -> None:
        """Parse output image section."""
        builder.set_image_writer(ImageWriter(
            str(image_data.get('name', self.scene.name.replace(' ', '_'))),
            int(image_data.get('width', 400)),
            int(image_data.get('height', 400)),
            image_data.get('output_dir')
        ))

    def _parse_sampling(self, sampling_data: Dict[str, Any]) -> SamplingConfig:
        """Parse super-sampling section."""
        return SamplingConfig(
            samples=int(sampling_data.get('samples', 1)),
            size=float(sampling_data.get('size', 0.5)),
            pattern=self._parse_pattern(sampling_data.get('pattern', 'jittered'))
        )


def load_scene(filepath: str) -> Tuple[Scene, CameraBuilder]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera builder)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any]) -> Tuple[Scene, CameraBuilder]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary

    Returns:
        Tuple of (scene, camera builder)
    """
    parser = SceneParser()
    return parser.parse_dict(data)
