"""
Scene container and visibility queries.

The same nearest-hit search answers camera rays and shadow rays.
"""

from __future__ import annotations
from typing import Iterable, Optional

from .vec3 import Vec3, Point3
from .ray import Ray
from .shapes import Geometry, Intersection, NO_INTERSECTION
from .lights import Light


class Scene:
    """A list of geometries and the lights that illuminate them."""

    def __init__(
        self,
        geometries: Optional[Iterable[Geometry]] = None,
        lights: Optional[Iterable[Light]] = None,
        shadow_epsilon: float = 0.001
    ):
        """Create a scene.

        Args:
            geometries: Primitives in the scene
            lights: Light sources
            shadow_epsilon: Margin trimmed from both ends of a shadow ray
        """
        self.geometries: list[Geometry] = list(geometries) if geometries is not None else []
        self.lights: list[Light] = list(lights) if lights is not None else []
        self.shadow_epsilon = shadow_epsilon

    def add(self, geometry: Geometry) -> None:
        """Add a geometry to the scene."""
        self.geometries.append(geometry)

    def add_light(self, light: Light) -> None:
        """Add a light to the scene."""
        self.lights.append(light)

    def find_first_intersection(
        self,
        ray: Ray,
        min_dist: float,
        max_dist: float,
        shadow: bool = False
    ) -> Intersection:
        """Find the nearest valid, visible hit among all geometries.

        Ties on t keep the geometry that was added first.

        Args:
            ray: The ray to trace
            min_dist: Lower distance bound (exclusive)
            max_dist: Upper distance bound (exclusive)
            shadow: True for shadow rays, which skip non-occluding geometry

        Returns:
            The nearest Intersection, or NO_INTERSECTION
        """
        closest = NO_INTERSECTION

        for geometry in self.geometries:
            if shadow and not geometry.casts_shadows:
                continue

            hit = geometry.intersect(ray, min_dist, max_dist)
            if not hit.valid or not hit.visible:
                continue

            if not closest.valid or hit.t < closest.t:
                closest = hit

        return closest

    def is_lit(
        self,
        point: Point3,
        light: Light,
        normal: Optional[Vec3] = None,
        normal_offset: float = 0.0
    ) -> bool:
        """Check whether nothing blocks the segment from a point to a light.

        Args:
            point: The shaded point
            light: The light to test
            normal: Surface normal at the point, used with normal_offset
            normal_offset: Distance to move the ray origin along the normal

        Returns:
            True if the light is visible from the point
        """
        origin = point
        if normal is not None and normal_offset > 0.0:
            origin = point + normal * normal_offset

        to_light = light.position - origin
        distance = to_light.length()
        if distance <= 2 * self.shadow_epsilon:
            return True

        shadow_ray = Ray(origin, to_light / distance)
        hit = self.find_first_intersection(
            shadow_ray,
            self.shadow_epsilon,
            distance - self.shadow_epsilon,
            shadow=True
        )
        return not hit.valid

    def __len__(self) -> int:
        return len(self.geometries)

    def __iter__(self):
        return iter(self.geometries)
