"""
Unit quaternions for orienting primitives.

Only rotation is modelled: a quaternion is normalized before it is
applied and a degenerate one means "no rotation".
"""

from __future__ import annotations
from dataclasses import dataclass
import math

from .vec3 import Vec3


@dataclass(frozen=True)
class Quaternion:
    """A rotation quaternion w + xi + yj + zk."""
    w: float = 1.0
    x: float = 0.0
    y: float = 0.0
    z: float = 0.0

    def norm(self) -> float:
        return math.sqrt(self.w * self.w + self.x * self.x + self.y * self.y + self.z * self.z)

    def normalize(self) -> Quaternion:
        """Return the unit quaternion, or the identity if the norm is ~0."""
        n = self.norm()
        if n < 1e-15:
            return Quaternion.IDENTITY
        return Quaternion(self.w / n, self.x / n, self.y / n, self.z / n)

    def conjugate(self) -> Quaternion:
        """The inverse rotation of a unit quaternion."""
        return Quaternion(self.w, -self.x, -self.y, -self.z)

    def __mul__(self, other: Quaternion) -> Quaternion:
        """Hamilton product: (self * other) applies other first, then self."""
        if not isinstance(other, Quaternion):
            return NotImplemented
        return Quaternion(
            self.w * other.w - self.x * other.x - self.y * other.y - self.z * other.z,
            self.w * other.x + self.x * other.w + self.y * other.z - self.z * other.y,
            self.w * other.y - self.x * other.z + self.y * other.w + self.z * other.x,
            self.w * other.z + self.x * other.y - self.y * other.x + self.z * other.w,
        )

    def rotate(self, v: Vec3) -> Vec3:
        """Rotate a vector by this quaternion."""
        return v.rotate(self)

    @staticmethod
    def from_axis_angle(angle: float, axis: Vec3) -> Quaternion:
        """Build a rotation of `angle` radians around `axis`.

        A zero axis gives the identity.
        """
        axis = axis.normalize()
        if axis.near_zero():
            return Quaternion.IDENTITY
        half = angle / 2.0
        s = math.sin(half)
        return Quaternion(math.cos(half), axis.x * s, axis.y * s, axis.z * s)


Quaternion.IDENTITY = Quaternion(1.0, 0.0, 0.0, 0.0)
