"""
Scene description parser.

Scenes are YAML or JSON documents with these sections:
- materials: named Phong materials
- colormaps: named density transfer functions for volumes
- objects: ellipsoids, spheres and volume scans
- lights: point lights
- camera: position, orientation, view plane and clip distances
- render: image size, background and shading options
- shadows: shadow ray margin and whether volumes cast shadows

Example scene file:
```yaml
materials:
  shiny:
    ambient: [0.1, 0.1, 0.1]
    diffuse: [0.8, 0.8, 0.8]
    specular: [1, 1, 1]
    shininess: 50

objects:
  - type: ellipsoid
    center: [0, 0, 0]
    semi_axes: [2, 1, 1]
    radius: 1
    color: [0.9, 0.2, 0.2]
    material: shiny
    rotation: {axis: [0, 0, 1], angle: 30}

  - type: volume
    header: scans/head.dat
    data: scans/head.raw
    position: [-1, -1, 3]
    scale: 0.01
    colormap: default

lights:
  - position: [5, 10, -5]
    ambient: [0.1, 0.1, 0.1]
    diffuse: [0.8, 0.8, 0.8]
    specular: [1, 1, 1]

camera:
  position: [0, 0, -10]
  direction: [0, 0, 1]
  up: [0, 1, 0]
  view_plane_distance: 1
  view_plane_height: 1
  front_plane_distance: 0
  back_plane_distance: 1000

render:
  width: 800
  height: 600
  background: [0.2, 0.2, 0.2, 1]
```
"""

from __future__ import annotations
from pathlib import Path
from typing import Dict, Any, Optional, Tuple
import json
import logging
import math

import yaml

from .vec3 import Vec3
from .quaternion import Quaternion
from .color import Color
from .colormap import ColorMap
from .camera import Camera
from .materials import Material
from .shapes import Ellipsoid, Sphere
from .volumes import VolumeScan
from .lights import Light
from .scene import Scene
from .renderer import RenderSettings

logger = logging.getLogger(__name__)


class SceneParseError(Exception):
    """Error during scene parsing."""
    pass


class SceneParser:
    """Parser for scene description files."""

    def __init__(self, base_dir: Optional[Path] = None):
        """Create a parser.

        Args:
            base_dir: Directory that relative volume file paths resolve against
        """
        self.base_dir = base_dir if base_dir is not None else Path.cwd()
        self.materials: Dict[str, Material] = {}
        self.colormaps: Dict[str, ColorMap] = {'default': ColorMap.default()}
        self.scene = Scene()
        self.camera: Optional[Camera] = None
        self.settings: Optional[RenderSettings] = None
        self.volume_shadows = True

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

        self.base_dir = path.parent
        content = path.read_text()

        try:
            if path.suffix == '.json':
                data = json.loads(content)
            else:
                data = yaml.safe_load(content)
        except (json.JSONDecodeError, yaml.YAMLError) as e:
            raise SceneParseError(f"Cannot read scene file {filepath}: {e}") from e

        if not isinstance(data, dict):
            raise SceneParseError(f"Scene file {filepath} must contain a mapping")

        return self.parse_dict(data)

    def parse_dict(self, data: Dict[str, Any]) -> Tuple[Scene, Camera, RenderSettings]:
        """Parse a scene from a dictionary.

        Args:
            data: Scene description dictionary

        Returns:
            Tuple of (scene, camera, settings)
        """
        if 'shadows' in data:
            self._parse_shadows(data['shadows'])

        # Materials and color maps first (objects reference them)
        if 'materials' in data:
            self._parse_materials(data['materials'])

        if 'colormaps' in data:
            self._parse_colormaps(data['colormaps'])

        if 'objects' in data:
            self._parse_objects(data['objects'])

        if 'lights' in data:
            self._parse_lights(data['lights'])

        if 'camera' in data:
            self._parse_camera(data['camera'])
        else:
            self.camera = Camera(position=Vec3(0, 0, -10), direction=Vec3(0, 0, 1))

        if 'render' in data:
            self._parse_settings(data['render'])
        else:
            self.settings = RenderSettings()

        logger.debug(
            "Parsed scene: %d objects, %d lights", len(self.scene), len(self.scene.lights)
        )
        return self.scene, self.camera, self.settings

    def _parse_vec3(self, data: Any) -> Vec3:
        """Parse a Vec3 from a list or an x/y/z mapping."""
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
        try:
            return Color.parse(data)
        except ValueError as e:
            raise SceneParseError(str(e)) from e

    def _parse_rotation(self, data: Any) -> Quaternion:
        """Parse a rotation given as {axis, angle in degrees} or [w, x, y, z]."""
        if isinstance(data, dict):
            axis = self._parse_vec3(data.get('axis', [0, 1, 0]))
            angle = math.radians(float(data.get('angle', 0.0)))
            return Quaternion.from_axis_angle(angle, axis)
        if isinstance(data, (list, tuple)) and len(data) == 4:
            return Quaternion(*(float(c) for c in data))
        raise SceneParseError(f"Cannot parse rotation from: {data}")

    def _parse_shadows(self, shadows_data: Dict[str, Any]) -> None:
        if 'epsilon' in shadows_data:
            self.scene.shadow_epsilon = float(shadows_data['epsilon'])
        self.volume_shadows = bool(shadows_data.get('volumes', True))

    def _parse_material(self, mat_data: Dict[str, Any]) -> Material:
        default = Material.DEFAULT
        return Material(
            ambient=self._parse_color(mat_data['ambient']) if 'ambient' in mat_data else default.ambient,
            diffuse=self._parse_color(mat_data['diffuse']) if 'diffuse' in mat_data else default.diffuse,
            specular=self._parse_color(mat_data['specular']) if 'specular' in mat_data else default.specular,
            shininess=float(mat_data.get('shininess', default.shininess))
        )

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

    def _parse_colormaps(self, colormaps_data: Dict[str, Any]) -> None:
        """Parse colormaps section: name -> list of [threshold, color] stops."""
        for name, stops in colormaps_data.items():
            try:
                self.colormaps[name] = ColorMap(
                    (int(threshold), self._parse_color(color)) for threshold, color in stops
                )
            except (TypeError, ValueError) as e:
                raise SceneParseError(f"Invalid colormap {name}: {e}") from e

    def _resolve_path(self, value: str) -> Path:
        path = Path(value)
        if not path.is_absolute():
            path = self.base_dir / path
        return path

    def _parse_objects(self, objects_data: list) -> None:
        """Parse objects section."""
        for obj_data in objects_data:
            obj_type = obj_data.get('type', 'ellipsoid').lower()
            material = self._get_material(obj_data.get('material'))
            color = self._parse_color(obj_data['color']) if 'color' in obj_data else None
            casts_shadows = bool(obj_data.get('casts_shadows', True))

            if obj_type == 'ellipsoid':
                rotation = None
                if 'rotation' in obj_data:
                    rotation = self._parse_rotation(obj_data['rotation'])
                try:
                    ellipsoid = Ellipsoid(
                        center=self._parse_vec3(obj_data.get('center', [0, 0, 0])),
                        semi_axes=self._parse_vec3(obj_data.get('semi_axes', [1, 1, 1])),
                        radius=float(obj_data.get('radius', 1.0)),
                        material=material,
                        color=color,
                        rotation=rotation,
                        casts_shadows=casts_shadows
                    )
                except ValueError as e:
                    raise SceneParseError(str(e)) from e
                self.scene.add(ellipsoid)

            elif obj_type == 'sphere':
                self.scene.add(Sphere(
                    center=self._parse_vec3(obj_data.get('center', [0, 0, 0])),
                    radius=float(obj_data.get('radius', 1.0)),
                    material=material,
                    color=color,
                    casts_shadows=casts_shadows
                ))

            elif obj_type == 'volume':
                if 'header' not in obj_data or 'data' not in obj_data:
                    raise SceneParseError("Volume objects need 'header' and 'data' paths")
                colormap_name = obj_data.get('colormap', 'default')
                if colormap_name not in self.colormaps:
                    raise SceneParseError(f"Unknown colormap: {colormap_name}")
                self.scene.add(VolumeScan.from_files(
                    self._resolve_path(obj_data['header']),
                    self._resolve_path(obj_data['data']),
                    position=self._parse_vec3(obj_data.get('position', [0, 0, 0])),
                    scale=float(obj_data.get('scale', 1.0)),
                    color_map=self.colormaps[colormap_name],
                    material=material,
                    casts_shadows=bool(obj_data.get('casts_shadows', self.volume_shadows))
                ))

            else:
                raise SceneParseError(f"Unknown object type: {obj_type}")

    def _parse_lights(self, lights_data: list) -> None:
        """Parse lights section."""
        for light_data in lights_data:
            light_type = light_data.get('type', 'point').lower()
            if light_type != 'point':
                raise SceneParseError(f"Unknown light type: {light_type}")

            kwargs = {}
            for key in ('ambient', 'diffuse', 'specular'):
                if key in light_data:
                    kwargs[key] = self._parse_color(light_data[key])
            position = self._parse_vec3(light_data.get('position', [0, 5, 0]))
            self.scene.add_light(Light(position, **kwargs))

    def _parse_camera(self, camera_data: Dict[str, Any]) -> None:
        """Parse camera section."""
        try:
            self.camera = Camera(
                position=self._parse_vec3(camera_data.get('position', [0, 0, -10])),
                direction=self._parse_vec3(camera_data.get('direction', [0, 0, 1])),
                up=self._parse_vec3(camera_data.get('up', [0, 1, 0])),
                view_plane_distance=float(camera_data.get('view_plane_distance', 1.0)),
                view_plane_width=float(camera_data.get('view_plane_width', 0.0)),
                view_plane_height=float(camera_data.get('view_plane_height', 1.0)),
                front_plane_distance=float(camera_data.get('front_plane_distance', 0.0)),
                back_plane_distance=float(camera_data.get('back_plane_distance', 1000.0))
            )
        except ValueError as e:
            raise SceneParseError(str(e)) from e

    def _parse_settings(self, settings_data: Dict[str, Any]) -> None:
        """Parse render settings section."""
        kwargs = {}
        if 'background' in settings_data:
            kwargs['background_color'] = self._parse_color(settings_data['background'])
        try:
            self.settings = RenderSettings(
                width=int(settings_data.get('width', 800)),
                height=int(settings_data.get('height', 600)),
                normal_offset=float(settings_data.get('normal_offset', 0.0)),
                progress_interval=int(settings_data.get('progress_interval', 100)),
                **kwargs
            )
        except ValueError as e:
            raise SceneParseError(str(e)) from e


def load_scene(filepath: str) -> Tuple[Scene, Camera, RenderSettings]:
    """Convenience function to load a scene file.

    Args:
        filepath: Path to the scene file

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser()
    return parser.parse_file(filepath)


def parse_scene(data: Dict[str, Any], base_dir: Optional[Path] = None) -> Tuple[Scene, Camera, RenderSettings]:
    """Convenience function to parse a scene from a dictionary.

    Args:
        data: Scene description dictionary
        base_dir: Directory that relative volume paths resolve against

    Returns:
        Tuple of (scene, camera, settings)
    """
    parser = SceneParser(base_dir)
    return parser.parse_dict(data)
