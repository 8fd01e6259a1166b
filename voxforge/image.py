"""
Image buffer that the renderer writes pixels into.
"""

from __future__ import annotations
from pathlib import Path
from typing import Union
import logging

import numpy as np
from PIL import Image as PILImage

from .color import Color

logger = logging.getLogger(__name__)


class Image:
    """An RGBA float image addressed by (column, row)."""

    def __init__(self, width: int, height: int):
        if width <= 0 or height <= 0:
            raise ValueError(f"Image size must be positive, got {width}x{height}")
        self.width = width
        self.height = height
        self.data = np.zeros((height, width, 4), dtype=np.float64)

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise IndexError(f"Pixel ({x}, {y}) outside {self.width}x{self.height} image")

    def set_pixel(self, x: int, y: int, color: Color) -> None:
        self._check_bounds(x, y)
        self.data[y, x] = color.to_array()

    def get_pixel(self, x: int, y: int) -> Color:
        self._check_bounds(x, y)
        return Color.from_array(self.data[y, x])

    def to_ldr(self) -> np.ndarray:
        """Clamp to [0, 1] and convert to 8-bit RGBA.

        Returns:
            uint8 array of shape (height, width, 4)
        """
        return (np.clip(self.data, 0.0, 1.0) * 255 + 0.5).astype(np.uint8)

    def store(self, filename: Union[str, Path]) -> None:
        """Save the image; the file extension picks the format.

        Formats without an alpha channel (such as JPEG) get RGB only.
        """
        path = Path(filename)
        path.parent.mkdir(parents=True, exist_ok=True)

        pil_image = PILImage.fromarray(self.to_ldr(), 'RGBA')
        if path.suffix.lower() in ('.jpg', '.jpeg', '.bmp'):
            pil_image = pil_image.convert('RGB')
        pil_image.save(path)
        logger.info("Saved %dx%d image to %s", self.width, self.height, path)
