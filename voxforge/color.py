"""
RGBA color values.

Colors are accumulated additively during shading, so components are
not clamped until the image is written out. Alpha encodes opacity.
"""

from __future__ import annotations
from typing import Any, Union
import numpy as np


class Color:
    """An immutable RGBA color with float components."""

    __slots__ = ('_data',)

    def __init__(self, r: float = 0.0, g: float = 0.0, b: float = 0.0, a: float = 1.0):
        self._data = np.array([r, g, b, a], dtype=np.float64)
        self._data.flags.writeable = False

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Color:
        """Create a Color from a 4-element array (copied)."""
        c = cls.__new__(cls)
        c._data = np.array(arr, dtype=np.float64)
        c._data.flags.writeable = False
        return c

    @classmethod
    def gray(cls, level: float, alpha: float = 1.0) -> Color:
        return cls(level, level, level, alpha)

    @classmethod
    def parse(cls, data: Any) -> Color:
        """Parse a color from a list of 3 or 4 numbers or a hex string.

        Raises:
            ValueError: If the value cannot be interpreted as a color
        """
        if isinstance(data, Color):
            return data
        if isinstance(data, (list, tuple)):
            if len(data) not in (3, 4):
                raise ValueError(f"Color must have 3 or 4 components, got {len(data)}")
            return cls(*(float(c) for c in data))
        if isinstance(data, dict):
            return cls(
                float(data.get('r', 0)),
                float(data.get('g', 0)),
                float(data.get('b', 0)),
                float(data.get('a', 1))
            )
        if isinstance(data, str) and data.startswith('#') and len(data) in (7, 9):
            try:
                channels = [int(data[i:i + 2], 16) / 255.0 for i in range(1, len(data), 2)]
            except ValueError:
                raise ValueError(f"Cannot parse color from string: {data}") from None
            return cls(*channels)
        raise ValueError(f"Cannot parse color from: {data!r}")

    @property
    def r(self) -> float:
        return float(self._data[0])

    @property
    def g(self) -> float:
        return float(self._data[1])

    @property
    def b(self) -> float:
        return float(self._data[2])

    @property
    def alpha(self) -> float:
        return float(self._data[3])

    def __repr__(self) -> str:
        return f"Color({self.r:.4f}, {self.g:.4f}, {self.b:.4f}, {self.alpha:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Color):
            return NotImplemented
        return np.allclose(self._data, other._data)

    def __hash__(self) -> int:
        return hash(tuple(self._data))

    def __add__(self, other: Color) -> Color:
        return Color.from_array(self._data + other._data)

    def __mul__(self, other: Union[Color, float]) -> Color:
        if isinstance(other, Color):
            return Color.from_array(self._data * other._data)
        return Color.from_array(self._data * other)

    def __rmul__(self, other: float) -> Color:
        return Color.from_array(other * self._data)

    def clamp(self, min_val: float = 0.0, max_val: float = 1.0) -> Color:
        """Clamp all components to the given range."""
        return Color.from_array(np.clip(self._data, min_val, max_val))

    def to_array(self) -> np.ndarray:
        """Return the components as a new (r, g, b, a) array."""
        return self._data.copy()


Color.NONE = Color(0.0, 0.0, 0.0, 0.0)
Color.BLACK = Color(0.0, 0.0, 0.0, 1.0)
Color.WHITE = Color(1.0, 1.0, 1.0, 1.0)
