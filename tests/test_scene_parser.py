"""Tests for scene description parsing."""

import pytest
import json
import math

from voxforge.vec3 import Vec3, Point3
from voxforge.color import Color
from voxforge.quaternion import Quaternion
from voxforge.materials import Material
from voxforge.shapes import Ellipsoid, Sphere
from voxforge.volumes import VolumeScan, TruncatedVolumeData
from voxforge.renderer import RenderSettings
from voxforge.scene_parser import SceneParser, SceneParseError, load_scene, parse_scene


SCENE_YAML = """
materials:
  shiny:
    specular: [1, 1, 1]
    shininess: 50

objects:
  - type: ellipsoid
    center: [0, 1, 0]
    semi_axes: [2, 1, 1]
    radius: 0.5
    color: [0.9, 0.2, 0.2]
    material: shiny
    rotation: {axis: [0, 0, 1], angle: 90}
  - type: sphere
    center: [3, 0, 0]
    radius: 1
    casts_shadows: false

lights:
  - position: [5, 10, -5]
    diffuse: [0.5, 0.5, 0.5]

camera:
  position: [0, 0, -8]
  direction: [0, 0, 1]
  back_plane_distance: 50

render:
  width: 64
  height: 48
  background: [0, 0, 0, 1]
"""


def write_cube(directory, value=200):
    (directory / "cube.dat").write_text("Resolution:\t2 2 2\nSliceThickness:\t1 1 1\n")
    (directory / "cube.raw").write_bytes(bytes([value] * 8))


class TestParseDict:
    """Test parsing scene dictionaries."""

    def test_empty_scene_uses_defaults(self):
        scene, camera, settings = parse_scene({})
        assert len(scene) == 0
        assert camera.position == Point3(0, 0, -10)
        assert camera.forward == Vec3(0, 0, 1)
        assert settings == RenderSettings()

    def test_ellipsoid_fields(self):
        scene, _, _ = parse_scene({
            'objects': [{
                'type': 'ellipsoid',
                'center': [1, 2, 3],
                'semi_axes': {'x': 2, 'y': 1, 'z': 0.5},
                'radius': 2,
                'color': '#ff0000',
            }]
        })
        e = scene.geometries[0]
        assert isinstance(e, Ellipsoid)
        assert e.center == Point3(1, 2, 3)
        assert e.semi_axes == Vec3(2, 1, 0.5)
        assert e.radius == 2.0
        assert e.color == Color(1, 0, 0, 1)
        assert e.material is Material.DEFAULT
        assert e.rotation == Quaternion.IDENTITY

    def test_type_defaults_to_ellipsoid(self):
        scene, _, _ = parse_scene({'objects': [{'center': [0, 0, 0]}]})
        assert isinstance(scene.geometries[0], Ellipsoid)

    def test_rotation_as_quaternion_list(self):
        scene, _, _ = parse_scene({'objects': [{'rotation': [0, 1, 0, 0]}]})
        assert scene.geometries[0].rotation == Quaternion(0, 1, 0, 0)

    def test_rotation_axis_angle_in_degrees(self):
        scene, _, _ = parse_scene({'objects': [{'rotation': {'axis': [0, 0, 1], 'angle': 90}}]})
        rotated = scene.geometries[0].rotation.rotate(Vec3(1, 0, 0))
        assert rotated == Vec3(0, 1, 0)

    def test_inline_material(self):
        scene, _, _ = parse_scene({'objects': [{'material': {'shininess': 7}}]})
        material = scene.geometries[0].material
        assert material.shininess == 7.0
        assert material.diffuse == Material.DEFAULT.diffuse

    def test_lights(self):
        scene, _, _ = parse_scene({
            'lights': [
                {'position': [1, 2, 3], 'ambient': [0, 0, 0]},
                {'position': [4, 5, 6]},
            ]
        })
        assert len(scene.lights) == 2
        assert scene.lights[0].ambient == Color(0, 0, 0, 1)
        assert scene.lights[1].position == Point3(4, 5, 6)
        assert scene.lights[1].specular == Color.gray(1.0)

    def test_camera_and_render(self):
        _, camera, settings = parse_scene({
            'camera': {
                'position': [0, 2, -8],
                'direction': [0, -0.2, 1],
                'view_plane_width': 1.5,
                'front_plane_distance': 0.5,
            },
            'render': {'width': 32, 'height': 16, 'normal_offset': 0.01},
        })
        assert camera.position == Point3(0, 2, -8)
        assert camera.view_plane_width == 1.5
        assert camera.front_plane_distance == 0.5
        assert camera.back_plane_distance == 1000.0
        assert (settings.width, settings.height) == (32, 16)
        assert settings.normal_offset == 0.01

    def test_shadow_epsilon(self):
        scene, _, _ = parse_scene({'shadows': {'epsilon': 0.01}})
        assert scene.shadow_epsilon == 0.01


class TestParseErrors:
    """Test invalid scene descriptions."""

    def test_unknown_object_type(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'type': 'torus'}]})

    def test_unknown_material(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'material': 'missing'}]})

    def test_bad_vector(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'center': [1, 2]}]})

    def test_bad_color(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'color': 'blue'}]})

    def test_non_positive_semi_axis(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'semi_axes': [1, -1, 1]}]})

    def test_unknown_light_type(self):
        with pytest.raises(SceneParseError):
            parse_scene({'lights': [{'type': 'area'}]})

    def test_degenerate_camera(self):
        with pytest.raises(SceneParseError):
            parse_scene({'camera': {'direction': [0, 1, 0], 'up': [0, 1, 0]}})

    def test_bad_render_size(self):
        with pytest.raises(SceneParseError):
            parse_scene({'render': {'width': 0}})

    def test_volume_without_paths(self):
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{'type': 'volume'}]})

    def test_unknown_colormap(self, tmp_path):
        write_cube(tmp_path)
        with pytest.raises(SceneParseError):
            parse_scene({'objects': [{
                'type': 'volume', 'header': 'cube.dat', 'data': 'cube.raw', 'colormap': 'bone'
            }]}, base_dir=tmp_path)

    def test_duplicate_colormap_thresholds(self):
        with pytest.raises(SceneParseError):
            parse_scene({'colormaps': {'bad': [[10, [1, 0, 0]], [10, [0, 1, 0]]]}})


class TestVolumes:
    """Test volume objects in scene descriptions."""

    def test_volume_paths_relative_to_base_dir(self, tmp_path):
        write_cube(tmp_path)
        scene, _, _ = parse_scene({'objects': [{
            'type': 'volume',
            'header': 'cube.dat',
            'data': 'cube.raw',
            'position': [-1, -1, -1],
            'scale': 0.5,
        }]}, base_dir=tmp_path)

        vol = scene.geometries[0]
        assert isinstance(vol, VolumeScan)
        assert vol.resolution == (2, 2, 2)
        assert vol.bounds.minimum == Point3(-1, -1, -1)
        assert vol.bounds.maximum == Point3(0, 0, 0)
        assert vol.casts_shadows is True

    def test_custom_colormap(self, tmp_path):
        write_cube(tmp_path, value=50)
        scene, _, _ = parse_scene({
            'colormaps': {'bone': [[0, [0, 0, 0, 0]], [40, [1, 1, 1, 1]]]},
            'objects': [{
                'type': 'volume', 'header': 'cube.dat', 'data': 'cube.raw', 'colormap': 'bone'
            }],
        }, base_dir=tmp_path)
        vol = scene.geometries[0]
        assert vol.color_map(50) == Color(1, 1, 1, 1)
        assert vol.color_map(39).alpha == 0.0

    def test_volume_shadows_disabled(self, tmp_path):
        write_cube(tmp_path)
        scene, _, _ = parse_scene({
            'shadows': {'volumes': False},
            'objects': [
                {'type': 'volume', 'header': 'cube.dat', 'data': 'cube.raw'},
                {'type': 'volume', 'header': 'cube.dat', 'data': 'cube.raw', 'casts_shadows': True},
            ],
        }, base_dir=tmp_path)
        assert scene.geometries[0].casts_shadows is False
        assert scene.geometries[1].casts_shadows is True

    def test_truncated_volume_propagates(self, tmp_path):
        (tmp_path / "cube.dat").write_text("Resolution: 2 2 2\nSliceThickness: 1 1 1\n")
        (tmp_path / "cube.raw").write_bytes(bytes(3))
        with pytest.raises(TruncatedVolumeData):
            parse_scene({'objects': [{'type': 'volume', 'header': 'cube.dat', 'data': 'cube.raw'}]},
                        base_dir=tmp_path)


class TestParseFile:
    """Test loading scene files."""

    def test_yaml_file(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text(SCENE_YAML)
        scene, camera, settings = load_scene(str(path))

        assert len(scene) == 2
        ellipsoid, sphere = scene.geometries
        assert isinstance(ellipsoid, Ellipsoid)
        assert ellipsoid.material.shininess == 50.0
        assert ellipsoid.material.specular == Color(1, 1, 1, 1)
        assert ellipsoid.rotation.rotate(Vec3(1, 0, 0)) == Vec3(0, 1, 0)
        assert isinstance(sphere, Sphere)
        assert sphere.casts_shadows is False

        assert scene.lights[0].diffuse == Color(0.5, 0.5, 0.5, 1)
        assert camera.position == Point3(0, 0, -8)
        assert camera.back_plane_distance == 50.0
        assert (settings.width, settings.height) == (64, 48)
        assert settings.background_color == Color(0, 0, 0, 1)

    def test_json_file(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text(json.dumps({
            'objects': [{'type': 'sphere', 'radius': 2}],
            'render': {'width': 10, 'height': 10},
        }))
        scene, _, settings = load_scene(str(path))
        assert scene.geometries[0].radius == 2.0
        assert settings.width == 10

    def test_volume_relative_to_scene_file(self, tmp_path):
        scans = tmp_path / "scans"
        scans.mkdir()
        write_cube(scans)
        path = tmp_path / "scene.yaml"
        path.write_text(
            "objects:\n"
            "  - type: volume\n"
            "    header: scans/cube.dat\n"
            "    data: scans/cube.raw\n"
        )
        scene, _, _ = SceneParser().parse_file(str(path))
        assert isinstance(scene.geometries[0], VolumeScan)

    def test_missing_file(self, tmp_path):
        with pytest.raises(SceneParseError):
            load_scene(str(tmp_path / "nope.yaml"))

    def test_invalid_yaml(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text("objects: [unclosed\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_invalid_json(self, tmp_path):
        path = tmp_path / "scene.json"
        path.write_text("{not json")
        with pytest.raises(SceneParseError):
            load_scene(str(path))

    def test_top_level_must_be_mapping(self, tmp_path):
        path = tmp_path / "scene.yaml"
        path.write_text("- 1\n- 2\n")
        with pytest.raises(SceneParseError):
            load_scene(str(path))
