"""
Transfer functions mapping 8-bit density samples to RGBA colors.
"""

from __future__ import annotations
from bisect import bisect_right
from typing import Iterable, Tuple

from .color import Color


class ColorMap:
    """Step transfer function for volume densities.

    Defined by (threshold, color) stops: a density maps to the color
    of the last stop whose threshold does not exceed it. Densities
    below the first threshold are fully transparent.
    """

    def __init__(self, stops: Iterable[Tuple[int, Color]]):
        """Create a color map.

        Args:
            stops: (threshold, color) pairs, in any order

        Raises:
            ValueError: If no stops are given or two share a threshold
        """
        ordered = sorted(stops, key=lambda stop: stop[0])
        if not ordered:
            raise ValueError("A color map needs at least one stop")
        self.thresholds = [int(threshold) for threshold, _ in ordered]
        if len(set(self.thresholds)) != len(self.thresholds):
            raise ValueError(f"Duplicate color map thresholds: {self.thresholds}")
        self.colors = [color for _, color in ordered]

    def get_color(self, value: int) -> Color:
        idx = bisect_right(self.thresholds, value) - 1
        if idx < 0:
            return Color.NONE
        return self.colors[idx]

    def __call__(self, value: int) -> Color:
        return self.get_color(value)

    @classmethod
    def default(cls) -> ColorMap:
        """A CT-style map: air transparent, soft tissue red, bone white."""
        return cls([
            (40, Color(0.55, 0.15, 0.1, 0.05)),
            (80, Color(0.85, 0.45, 0.35, 0.4)),
            (160, Color(0.95, 0.92, 0.85, 1.0)),
        ])

    def __repr__(self) -> str:
        return f"ColorMap(thresholds={self.thresholds})"
