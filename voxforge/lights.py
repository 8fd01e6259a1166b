"""
Light sources and local illumination.

Lights are points with separate ambient, diffuse and specular color
contributions and no distance attenuation. Shading follows the Phong
model: the ambient term is always added, the diffuse and specular
terms only when the light is visible from the hit point.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import Iterable, TYPE_CHECKING

from .vec3 import Vec3, Point3
from .color import Color
from .shapes import Intersection

if TYPE_CHECKING:
    from .scene import Scene


@dataclass(frozen=True)
class Light:
    """A point light."""
    position: Point3
    ambient: Color = field(default_factory=lambda: Color.gray(0.2))
    diffuse: Color = field(default_factory=lambda: Color.gray(0.8))
    specular: Color = field(default_factory=lambda: Color.gray(1.0))


def compute_lighting(
    hit: Intersection,
    lights: Iterable[Light],
    scene: Scene,
    view_direction: Vec3,
    normal_offset: float = 0.0
) -> Color:
    """Compute the Phong color of a hit.

    For each light:
        ambient  = base * ka * La
        diffuse  = base * kd * Ld * (N·L)       if lit and N·L > 0
        specular = ks * Ls * (R·V)^shininess    if lit, N·L > 0 and R·V > 0

    Args:
        hit: A valid intersection
        lights: Light sources to accumulate
        scene: Scene used for shadow rays
        view_direction: Direction of the incoming (camera) ray
        normal_offset: Distance to push shadow ray origins along the normal;
            raised to the hit geometry's own shadow_offset when that is larger

    Returns:
        The accumulated color (unclamped), always opaque
    """
    color = Color(0, 0, 0, 0)
    if hit.geometry is not None:
        normal_offset = max(normal_offset, hit.geometry.shadow_offset)
    material = hit.material
    base = hit.color
    point = hit.position
    normal = hit.normal.normalize()
    to_viewer = (-view_direction).normalize()

    for light in lights:
        color = color + base * material.ambient * light.ambient

        if not scene.is_lit(point, light, normal, normal_offset):
            continue

        to_light = (light.position - point).normalize()
        n_dot_l = normal.dot(to_light)
        if n_dot_l <= 0.0:
            continue

        color = color + base * material.diffuse * light.diffuse * n_dot_l

        reflected = (normal * (2.0 * n_dot_l) - to_light).normalize()
        r_dot_v = reflected.dot(to_viewer)
        if r_dot_v > 0.0:
            color = color + material.specular * light.specular * (r_dot_v ** material.shininess)

    # Alpha of the base color is opacity, not light
    return Color(color.r, color.g, color.b, 1.0)
