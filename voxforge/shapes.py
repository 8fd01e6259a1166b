"""
Geometric primitives for the ray tracer.

Each primitive implements the Geometry interface with a single
`intersect` method. A miss is the NO_INTERSECTION sentinel, never
an exception.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, Tuple
import math

from .vec3 import Vec3, Point3
from .quaternion import Quaternion
from .ray import Ray
from .color import Color
from .materials import Material

# Direction components at or below this are treated as parallel to a slab.
PARALLEL_EPSILON = 1e-6


@dataclass(frozen=True)
class Intersection:
    """Stores information about a ray-geometry intersection.

    Attributes:
        valid: True if the ray hit the geometry within the distance bounds
        visible: False for hits that must not contribute to shading
        geometry: The primitive that was hit
        ray: The ray the hit was computed against
        t: The ray parameter at the hit
        normal: Unit surface normal in world space, facing the incoming ray
        material: The material at the hit point
        color: The base color at the hit point
    """
    valid: bool
    visible: bool
    geometry: Optional['Geometry']
    ray: Optional[Ray]
    t: float
    normal: Optional[Vec3]
    material: Optional[Material]
    color: Color

    @property
    def position(self) -> Optional[Point3]:
        """The world-space hit point."""
        if self.ray is None:
            return None
        return self.ray.at(self.t)


NO_INTERSECTION = Intersection(
    valid=False,
    visible=False,
    geometry=None,
    ray=None,
    t=math.inf,
    normal=None,
    material=None,
    color=Color.NONE
)


class Geometry(ABC):
    """Abstract base class for everything a ray can hit."""

    # Minimum distance along the normal that shadow rays from a hit on this
    # geometry must start at to clear its own surface.
    shadow_offset = 0.0

    def __init__(
        self,
        material: Optional[Material] = None,
        color: Optional[Color] = None,
        casts_shadows: bool = True
    ):
        """Create a geometry.

        Args:
            material: Material for shading (defaults to Material.DEFAULT)
            color: Base color (defaults to white)
            casts_shadows: Whether shadow rays test against this geometry
        """
        self.material = material if material is not None else Material.DEFAULT
        self.color = color if color is not None else Color.WHITE
        self.casts_shadows = casts_shadows

    @abstractmethod
    def intersect(self, ray: Ray, min_dist: float, max_dist: float) -> Intersection:
        """Find the nearest hit of the ray with this geometry.

        Args:
            ray: The ray to test
            min_dist: Hits must have t strictly greater than this
            max_dist: Hits must have t strictly less than this

        Returns:
            The Intersection, or NO_INTERSECTION on a miss
        """


def _face_forward(normal: Vec3, direction: Vec3) -> Vec3:
    """Flip the normal so that it points against the ray direction."""
    if normal.dot(direction) > 0.0:
        return -normal
    return normal


class Sphere(Geometry):
    """A sphere defined by center and radius."""

    def __init__(
        self,
        center: Point3,
        radius: float,
        material: Optional[Material] = None,
        color: Optional[Color] = None,
        casts_shadows: bool = True
    ):
        super().__init__(material, color, casts_shadows)
        self.center = center
        self.radius = radius

    def intersect(self, ray: Ray, min_dist: float, max_dist: float) -> Intersection:
        """Test ray-sphere intersection using the quadratic formula.

        The equation (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t²(d·d) + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        which is the quadratic at² + bt + c = 0.
        """
        oc = ray.origin - self.center
        a = ray.direction.length_squared()
        if a < 1e-12:
            return NO_INTERSECTION
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = half_b * half_b - a * c
        if discriminant < 0:
            return NO_INTERSECTION

        sqrtd = math.sqrt(discriminant)

        # Find the nearest root in the acceptable range
        root = (-half_b - sqrtd) / a
        if not min_dist < root < max_dist:
            root = (-half_b + sqrtd) / a
            if not min_dist < root < max_dist:
                return NO_INTERSECTION

        outward_normal = ((ray.at(root) - self.center) / self.radius).normalize()

        return Intersection(
            valid=True,
            visible=True,
            geometry=self,
            ray=ray,
            t=root,
            normal=_face_forward(outward_normal, ray.direction),
            material=self.material,
            color=self.color
        )

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Ellipsoid(Geometry):
    """An ellipsoid with per-axis semi-lengths, a radius multiplier and an orientation.

    The surface is the set of local points p with
    (px/a)² + (py/b)² + (pz/c)² = radius², where local space is world
    space translated by -center and rotated by the inverse orientation.
    """

    def __init__(
        self,
        center: Point3,
        semi_axes: Vec3,
        radius: float,
        material: Optional[Material] = None,
        color: Optional[Color] = None,
        rotation: Optional[Quaternion] = None,
        casts_shadows: bool = True
    ):
        """Create an ellipsoid.

        Args:
            center: Center in world space
            semi_axes: Semi-axis lengths along the local x, y and z axes
            radius: Uniform multiplier applied to all semi-axes
            material: Material for shading
            color: Base color
            rotation: Orientation quaternion (identity if omitted)
            casts_shadows: Whether shadow rays test against this ellipsoid

        Raises:
            ValueError: If any semi-axis length is not positive
        """
        super().__init__(material, color, casts_shadows)
        if min(semi_axes) <= 0.0:
            raise ValueError(f"Semi-axis lengths must be positive, got {semi_axes}")
        self.center = center
        self.semi_axes = semi_axes
        self.radius = radius
        self.rotation = rotation if rotation is not None else Quaternion.IDENTITY

    def intersect(self, ray: Ray, min_dist: float, max_dist: float) -> Intersection:
        """Intersect by solving a unit-sphere problem in scaled local space."""
        rot = self.rotation.normalize()
        inv_rot = rot.conjugate()

        # Into the ellipsoid frame: translate, then undo the orientation
        local_origin = (ray.origin - self.center).rotate(inv_rot)
        local_direction = ray.direction.rotate(inv_rot)

        # Scale each axis so the ellipsoid becomes a sphere of `radius`
        scaled_origin = local_origin / self.semi_axes
        scaled_direction = local_direction / self.semi_axes

        a = scaled_direction.length_squared()
        if a < 1e-12:
            return NO_INTERSECTION
        b = 2.0 * scaled_direction.dot(scaled_origin)
        c = scaled_origin.length_squared() - self.radius * self.radius

        delta = b * b - 4.0 * a * c
        if delta < 0.0:
            return NO_INTERSECTION

        sqrt_delta = math.sqrt(delta)
        t1 = (-b - sqrt_delta) / (2.0 * a)
        t2 = (-b + sqrt_delta) / (2.0 * a)

        if min_dist < t1 < max_dist:
            t = t1
        elif min_dist < t2 < max_dist:
            t = t2
        else:
            return NO_INTERSECTION

        # Gradient of the quadric at the local hit point
        local_point = local_origin + local_direction * t
        normal = (local_point * 2.0 / (self.semi_axes * self.semi_axes)).normalize()
        normal = _face_forward(normal, local_direction)

        world_normal = normal.rotate(rot).normalize()

        return Intersection(
            valid=True,
            visible=True,
            geometry=self,
            ray=ray,
            t=t,
            normal=world_normal,
            material=self.material,
            color=self.color
        )

    def __repr__(self) -> str:
        return (
            f"Ellipsoid(center={self.center}, semi_axes={self.semi_axes}, "
            f"radius={self.radius})"
        )


class AABB:
    """Axis-aligned bounding box."""

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    def slab(self, ray: Ray) -> Optional[Tuple[float, float]]:
        """Clip the ray's parametric line against the box with the slab method.

        For an axis the ray runs parallel to, the ray is rejected when its
        origin lies outside that axis' extent, otherwise the axis does not
        constrain the interval.

        Returns:
            (t_min, t_max) of the overlap (possibly with negative t), or
            None if the line misses the box
        """
        t_min = -math.inf
        t_max = math.inf

        for i in range(3):
            d = ray.direction[i]
            o = ray.origin[i]
            if abs(d) > PARALLEL_EPSILON:
                t0 = (self.minimum[i] - o) / d
                t1 = (self.maximum[i] - o) / d
                if t0 > t1:
                    t0, t1 = t1, t0
                t_min = max(t_min, t0)
                t_max = min(t_max, t1)
            elif o < self.minimum[i] or o > self.maximum[i]:
                return None

        if t_min > t_max:
            return None
        return t_min, t_max

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"
