"""
Volumetric scan primitive.

Renders a discretized density field (such as a CT scan) by clipping the
ray against the volume's bounding box and marching through it at a fixed
step until a sample with visible opacity is found.

A scan is stored as two files:
- a text header with `Resolution` (3 ints) and `SliceThickness` (3 floats),
  keys and values separated by any run of ':', tabs or spaces
- a raw file of resolution.x * resolution.y * resolution.z single-byte
  density samples, x varying fastest, then y, then z
"""

from __future__ import annotations
from dataclasses import dataclass
from pathlib import Path
from typing import Callable, Optional, Tuple, Union
import logging
import math
import re

import numpy as np

from .vec3 import Vec3, Point3
from .ray import Ray
from .color import Color
from .materials import Material
from .shapes import Geometry, Intersection, NO_INTERSECTION, AABB

logger = logging.getLogger(__name__)

# Samples with alpha at or below this are treated as empty space.
ALPHA_THRESHOLD = 1e-5
# Smallest marching step, whatever the voxel size.
MIN_STEP = 0.001

_SEPARATORS = re.compile(r"[:\t ]+")


class VolumeLoadError(Exception):
    """Error while loading a volumetric scan from disk."""
    pass


class MalformedVolumeHeader(VolumeLoadError):
    """The header is missing a required field or a value cannot be parsed."""
    pass


class TruncatedVolumeData(VolumeLoadError):
    """The raw data file holds fewer samples than the resolution implies."""
    pass


@dataclass(frozen=True)
class VolumeHeader:
    """Voxel counts and physical voxel size per axis."""
    resolution: Tuple[int, int, int]
    thickness: Tuple[float, float, float]

    @property
    def sample_count(self) -> int:
        rx, ry, rz = self.resolution
        return rx * ry * rz


def read_volume_header(path: Union[str, Path]) -> VolumeHeader:
    """Parse a volume header file.

    Args:
        path: Path to the header (.dat) file

    Returns:
        The parsed VolumeHeader

    Raises:
        MalformedVolumeHeader: If a required field is missing or invalid
        FileNotFoundError: If the file does not exist
    """
    resolution = None
    thickness = None

    try:
        text = Path(path).read_text(encoding="utf-8")
    except UnicodeDecodeError as e:
        raise MalformedVolumeHeader(f"{path}: header is not a text file ({e})") from e

    for line in text.splitlines():
        fields = _SEPARATORS.sub(":", line.strip()).split(":")
        key, values = fields[0], fields[1:]

        if key == "Resolution":
            resolution = tuple(_parse_values(key, values, int))
        elif key == "SliceThickness":
            thickness = tuple(_parse_values(key, values, float))

    if resolution is None:
        raise MalformedVolumeHeader(f"{path}: missing Resolution")
    if thickness is None:
        raise MalformedVolumeHeader(f"{path}: missing SliceThickness")
    if min(resolution) <= 0:
        raise MalformedVolumeHeader(f"{path}: Resolution must be positive, got {resolution}")
    if min(thickness) <= 0.0:
        raise MalformedVolumeHeader(f"{path}: SliceThickness must be positive, got {thickness}")

    return VolumeHeader(resolution, thickness)


def _parse_values(key: str, values: list, kind: type) -> list:
    if len(values) != 3:
        raise MalformedVolumeHeader(f"{key} needs 3 values, got {len(values)}")
    try:
        return [kind(v) for v in values]
    except ValueError:
        raise MalformedVolumeHeader(f"Cannot parse {key} values: {values}") from None


def read_volume_data(path: Union[str, Path], resolution: Tuple[int, int, int]) -> np.ndarray:
    """Read raw density samples.

    Args:
        path: Path to the raw data file
        resolution: Voxel counts (x, y, z)

    Returns:
        uint8 array of shape (z, y, x)

    Raises:
        TruncatedVolumeData: If the file is shorter than the resolution implies
    """
    rx, ry, rz = resolution
    expected = rx * ry * rz

    with open(path, 'rb') as f:
        raw = f.read(expected)

    if len(raw) != expected:
        raise TruncatedVolumeData(
            f"Failed to read the {expected}-byte raw data from {path} (got {len(raw)} bytes)"
        )

    return np.frombuffer(raw, dtype=np.uint8).reshape((rz, ry, rx))


class VolumeScan(Geometry):
    """A voxel density grid placed in world space and rendered by ray marching.

    The hit is the first marching sample whose color-mapped opacity is
    visible. Features thinner than the step can be skipped over.
    """

    def __init__(
        self,
        data: np.ndarray,
        thickness: Tuple[float, float, float],
        position: Point3,
        scale: float,
        color_map: Callable[[int], Color],
        material: Optional[Material] = None,
        casts_shadows: bool = True
    ):
        """Create a volume scan.

        Args:
            data: Density samples indexed [z, y, x]
            thickness: Physical voxel size along x, y and z
            position: World position of the grid's minimum corner
            scale: Uniform world scale applied to the grid
            color_map: Maps a density sample to an RGBA color
            material: Material for hits (derived from the sample color if omitted)
            casts_shadows: Whether shadow rays test against this volume
        """
        super().__init__(material, Color.NONE, casts_shadows)
        self._derive_material = material is None
        self.data = np.asarray(data, dtype=np.uint8)
        rz, ry, rx = self.data.shape
        self.resolution = (rx, ry, rz)
        self.thickness = tuple(float(t) for t in thickness)
        self.position = position
        self.scale = scale
        self.color_map = color_map

        self._voxel_size = np.array(self.thickness, dtype=np.float64) * scale
        extent = Vec3.from_array(np.array(self.resolution, dtype=np.float64) * self._voxel_size)
        self.bounds = AABB(position, position + extent)
        self.step = max(MIN_STEP, min(self.thickness) * scale)
        # A hit lies up to one step inside the first opaque voxel
        self.shadow_offset = self.step + MIN_STEP

    @classmethod
    def from_files(
        cls,
        dat_file: Union[str, Path],
        raw_file: Union[str, Path],
        position: Point3,
        scale: float,
        color_map: Callable[[int], Color],
        **kwargs
    ) -> VolumeScan:
        """Load a scan from its header and raw data files.

        Raises:
            MalformedVolumeHeader: If the header cannot be parsed
            TruncatedVolumeData: If the raw file is too short
        """
        header = read_volume_header(dat_file)
        data = read_volume_data(raw_file, header.resolution)
        logger.info(
            "Loaded volume %s: resolution %s, slice thickness %s",
            raw_file, header.resolution, header.thickness
        )
        return cls(data, header.thickness, position, scale, color_map, **kwargs)

    def density(self, ix: int, iy: int, iz: int) -> int:
        """Density at a voxel index; 0 outside the grid."""
        rx, ry, rz = self.resolution
        if ix < 0 or iy < 0 or iz < 0 or ix >= rx or iy >= ry or iz >= rz:
            return 0
        return int(self.data[iz, iy, ix])

    def index_of(self, point: Point3) -> Tuple[int, int, int]:
        """Voxel index containing a world-space point."""
        idx = np.floor((point.to_array() - self.position.to_array()) / self._voxel_size)
        return int(idx[0]), int(idx[1]), int(idx[2])

    def sample_color(self, point: Point3) -> Color:
        return self.color_map(self.density(*self.index_of(point)))

    def gradient_normal(self, point: Point3, direction: Vec3) -> Vec3:
        """Unit normal from the central-difference density gradient.

        Oriented against `direction`; a flat neighbourhood falls back to
        facing straight back along the ray.
        """
        x, y, z = self.index_of(point)
        gradient = Vec3(
            self.density(x + 1, y, z) - self.density(x - 1, y, z),
            self.density(x, y + 1, z) - self.density(x, y - 1, z),
            self.density(x, y, z + 1) - self.density(x, y, z - 1)
        )
        if gradient.near_zero():
            return (-direction).normalize()
        normal = gradient.normalize()
        if normal.dot(direction) > 0.0:
            return -normal
        return normal

    def intersect(self, ray: Ray, min_dist: float, max_dist: float) -> Intersection:
        """Clip the ray to the bounding box, then march until an opaque sample."""
        interval = self.bounds.slab(ray)
        if interval is None:
            return NO_INTERSECTION

        t_start = max(interval[0], min_dist)
        t_end = min(interval[1], max_dist)
        # An unbounded interval means the direction is (near) zero on every axis
        if t_start >= t_end or math.isinf(t_end - t_start):
            return NO_INTERSECTION

        steps = int(math.ceil((t_end - t_start) / self.step))
        for k in range(steps):
            t = t_start + k * self.step
            if t <= min_dist:
                continue
            if t >= t_end:
                break

            point = ray.at(t)
            color = self.sample_color(point)
            if color.alpha > ALPHA_THRESHOLD:
                material = Material.from_color(color) if self._derive_material else self.material
                return Intersection(
                    valid=True,
                    visible=True,
                    geometry=self,
                    ray=ray,
                    t=t,
                    normal=self.gradient_normal(point, ray.direction),
                    material=material,
                    color=color
                )

        return NO_INTERSECTION

    def __repr__(self) -> str:
        return (
            f"VolumeScan(resolution={self.resolution}, thickness={self.thickness}, "
            f"position={self.position}, scale={self.scale})"
        )
