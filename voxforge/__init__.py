"""
VoxForge - A Python Ray Caster for Analytic and Volumetric Scenes

Renders scenes of:
- Oriented ellipsoids (analytic quadric intersection)
- CT-style voxel scans (slab clipping and ray marching)
- Point lights with Phong shading and hard shadows
"""

__version__ = "0.1.0"
__author__ = "VoxForge Team"

from .vec3 import Vec3, Point3
from .quaternion import Quaternion
from .color import Color
from .colormap import ColorMap
from .ray import Ray
from .materials import Material
from .shapes import Geometry, Intersection, NO_INTERSECTION, Ellipsoid, Sphere, AABB
from .volumes import (
    VolumeScan, VolumeHeader, VolumeLoadError, MalformedVolumeHeader,
    TruncatedVolumeData, read_volume_header, read_volume_data
)
from .lights import Light, compute_lighting
from .scene import Scene
from .camera import Camera
from .image import Image
from .renderer import Renderer, RenderSettings
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
from .logging_config import setup_logging
