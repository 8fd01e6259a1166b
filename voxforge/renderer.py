"""
Renderer module - the pixel loop.

For every pixel a primary ray is cast from the camera, the nearest hit
within the camera's clip range is found and shaded with the scene's
lights. Pixels whose ray escapes the scene get the background color.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
from typing import Callable, Optional, Union
import logging
import time

from .color import Color
from .ray import Ray
from .camera import Camera
from .image import Image
from .scene import Scene
from .lights import compute_lighting

logger = logging.getLogger(__name__)


@dataclass
class RenderSettings:
    """Configuration for the renderer."""
    width: int = 800
    height: int = 600
    background_color: Color = field(default_factory=lambda: Color(0.2, 0.2, 0.2, 1.0))
    normal_offset: float = 0.0
    progress_interval: int = 100

    def __post_init__(self):
        if self.width <= 0 or self.height <= 0:
            raise ValueError(f"Render size must be positive, got {self.width}x{self.height}")
        if self.progress_interval <= 0:
            raise ValueError("progress_interval must be positive")


class Renderer:
    """Single-threaded ray caster with Phong shading."""

    def __init__(self, settings: RenderSettings = None):
        """Create a renderer with the given settings.

        Args:
            settings: Render configuration (uses defaults if None)
        """
        self.settings = settings if settings else RenderSettings()
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_progress_callback(self, callback: Callable[[float], None]) -> None:
        """Set a callback function for progress updates.

        Args:
            callback: Function that takes progress as float (0.0 to 1.0)
        """
        self._progress_callback = callback

    def render(self, scene: Scene, camera: Camera) -> Image:
        """Render the scene into a new image.

        Args:
            scene: Geometries and lights to render
            camera: The camera to render from

        Returns:
            The rendered Image
        """
        width = self.settings.width
        height = self.settings.height
        interval = self.settings.progress_interval
        image = Image(width, height)

        logger.info(
            "Rendering %dx%d: %d geometries, %d lights",
            width, height, len(scene), len(scene.lights)
        )
        start_time = time.time()

        for j in range(height):
            if self._progress_callback and j % interval == 0:
                self._progress_callback(j / height)

            for i in range(width):
                ray = camera.get_ray(i, j, width, height)
                image.set_pixel(i, j, self.trace(ray, scene, camera))

        if self._progress_callback:
            self._progress_callback(1.0)

        logger.info("Render completed in %.2f seconds", time.time() - start_time)
        return image

    def trace(self, ray: Ray, scene: Scene, camera: Camera) -> Color:
        """Color seen along a primary ray."""
        hit = scene.find_first_intersection(
            ray, camera.front_plane_distance, camera.back_plane_distance
        )
        if not hit.valid or not hit.visible:
            return self.settings.background_color

        return compute_lighting(
            hit, scene.lights, scene, ray.direction, self.settings.normal_offset
        )

    def render_to_file(self, scene: Scene, camera: Camera, filename: Union[str, Path]) -> Image:
        """Render and store the image in one call."""
        image = self.render(scene, camera)
        image.store(filename)
        return image
