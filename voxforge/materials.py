"""
Phong materials.

A material holds per-channel ambient, diffuse and specular reflection
coefficients plus a shininess exponent for the specular highlight.
"""

from __future__ import annotations
from dataclasses import dataclass, field

from .color import Color


@dataclass(frozen=True)
class Material:
    """Local illumination coefficients of a surface."""
    ambient: Color = field(default_factory=lambda: Color.gray(0.1))
    diffuse: Color = field(default_factory=lambda: Color.gray(0.8))
    specular: Color = field(default_factory=lambda: Color.gray(0.2))
    shininess: float = 10.0

    @classmethod
    def from_color(cls, color: Color) -> Material:
        """Material for a surface whose appearance comes from `color` alone.

        The coefficients are neutral grey: the base color of the hit
        carries the hue, so it is not folded in a second time here.
        Fully transparent colors give a zero material.
        """
        if color.alpha <= 0.0:
            return cls(Color.NONE, Color.NONE, Color.NONE, 1.0)
        return cls()


Material.DEFAULT = Material()
