"""
Camera module for generating primary rays.

A pinhole camera with an explicit view plane: rays start at the camera
position and pass through pixel centers on a rectangle placed
`view_plane_distance` in front of it. Front and back clip distances
bound the visibility search of every primary ray.
"""

from __future__ import annotations
from typing import Tuple

from .vec3 import Vec3, Point3
from .ray import Ray


class Camera:
    """A pinhole camera described by position, orientation and view plane."""

    def __init__(
        self,
        position: Point3,
        direction: Vec3,
        up: Vec3 = Vec3(0, 1, 0),
        view_plane_distance: float = 1.0,
        view_plane_width: float = 0.0,
        view_plane_height: float = 1.0,
        front_plane_distance: float = 0.0,
        back_plane_distance: float = 1000.0
    ):
        """Create a camera.

        Args:
            position: Camera position in world space
            direction: Viewing direction (need not be normalized)
            up: Approximate up vector; must not be parallel to direction
            view_plane_distance: Distance from the position to the view plane
            view_plane_width: View plane width (0 = derive from image aspect ratio)
            view_plane_height: View plane height
            front_plane_distance: Nearest distance at which geometry is visible
            back_plane_distance: Farthest distance at which geometry is visible

        Raises:
            ValueError: If direction and up do not span a plane
        """
        self.position = position
        self.direction = direction
        self.up = up
        self.view_plane_distance = view_plane_distance
        self.view_plane_width = view_plane_width
        self.view_plane_height = view_plane_height
        self.front_plane_distance = front_plane_distance
        self.back_plane_distance = back_plane_distance

        self.forward = direction.normalize()
        self.right = self.forward.cross(up).normalize()
        if self.forward.near_zero() or self.right.near_zero():
            raise ValueError(f"Camera direction {direction} and up {up} are degenerate")
        self.true_up = self.right.cross(self.forward).normalize()

    def basis(self) -> Tuple[Vec3, Vec3, Vec3]:
        """Return the orthonormal (forward, right, up) camera frame."""
        return self.forward, self.right, self.true_up

    def view_plane_size(self, width: int, height: int) -> Tuple[float, float]:
        """View plane (width, height) for an image of the given size."""
        vp_height = self.view_plane_height
        if self.view_plane_width > 0:
            vp_width = self.view_plane_width
        else:
            vp_width = vp_height * width / height
        return vp_width, vp_height

    def get_ray(self, i: int, j: int, width: int, height: int) -> Ray:
        """Generate the primary ray through the center of pixel (i, j).

        Args:
            i: Column, 0 at the left edge
            j: Row, 0 at the top edge
            width: Image width in pixels
            height: Image height in pixels

        Returns:
            A ray from the camera position with a unit direction
        """
        vp_width, vp_height = self.view_plane_size(width, height)

        center = self.position + self.forward * self.view_plane_distance
        top_left = center + self.true_up * (vp_height * 0.5) - self.right * (vp_width * 0.5)
        step_x = self.right * (vp_width / width)
        step_y = self.true_up * (-vp_height / height)

        pixel = top_left + step_x * (i + 0.5) + step_y * (j + 0.5)
        return Ray.through(self.position, pixel)

    def __repr__(self) -> str:
        return f"Camera(position={self.position}, direction={self.forward})"
