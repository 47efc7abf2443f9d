"""
Vector3 class for 3D math operations.

This is the fundamental building block of the ray tracer, used for:
- Points in 3D space
- Direction vectors
- RGB color values and per-channel attenuation coefficients
"""

from __future__ import annotations
from typing import Union
import numpy as np


EPSILON = 1e-10


def is_zero(value: float) -> bool:
    """Check whether a scalar is numerically zero."""
    return abs(value) < EPSILON


def align_zero(value: float) -> float:
    """Snap values within EPSILON of zero to exactly zero."""
    return 0.0 if is_zero(value) else value


class Vec3:
    """A 3D vector class supporting common vector operations.

    Uses numpy internally for efficient computation while providing
    a clean, Pythonic API.
    """

    __slots__ = ('_data',)

    def __init__(self, x: float = 0.0, y: float = 0.0, z: float = 0.0):
        self._data = np.array([x, y, z], dtype=np.float64)

    @classmethod
    def from_array(cls, arr: np.ndarray) -> Vec3:
        """Create Vec3 from numpy array."""
        v = cls.__new__(cls)
        v._data = np.asarray(arr, dtype=np.float64)
        return v

    @classmethod
    def uniform(cls, value: float) -> Vec3:
        """Create a vector with the same value in every component."""
        return cls(value, value, value)

    @property
    def x(self) -> float:
        return float(self._data[0])

    @property
    def y(self) -> float:
        return float(self._data[1])

    @property
    def z(self) -> float:
        return float(self._data[2])

    # Aliases for color operations
    @property
    def r(self) -> float:
        return self.x

    @property
    def g(self) -> float:
        return self.y

    @property
    def b(self) -> float:
        return self.z

    def __repr__(self) -> str:
        return f"Vec3({self.x:.4f}, {self.y:.4f}, {self.z:.4f})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Vec3):
            return NotImplemented
        return bool(np.allclose(self._data, other._data))

    # Equality is approximate, so vectors are not hashable
    __hash__ = None

    def __iter__(self):
        return iter(float(c) for c in self._data)

    def __neg__(self) -> Vec3:
        return Vec3.from_array(-self._data)

    def __add__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data + other._data)
        return Vec3.from_array(self._data + other)

    def __radd__(self, other: float) -> Vec3:
        return Vec3.from_array(other + self._data)

    def __sub__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data - other._data)
        return Vec3.from_array(self._data - other)

    def __mul__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data * other._data)
        return Vec3.from_array(self._data * other)

    def __rmul__(self, other: float) -> Vec3:
        return Vec3.from_array(other * self._data)

    def __truediv__(self, other: Union[Vec3, float]) -> Vec3:
        if isinstance(other, Vec3):
            return Vec3.from_array(self._data / other._data)
        return Vec3.from_array(self._data / other)

    def __getitem__(self, index: int) -> float:
        return float(self._data[index])

    def scale(self, factor: float) -> Vec3:
        """Multiply every component by a scalar."""
        return Vec3.from_array(self._data * factor)

    def length(self) -> float:
        """Return the magnitude (length) of the vector."""
        return float(np.linalg.norm(self._data))

    def length_squared(self) -> float:
        """Return the squared magnitude (avoids sqrt for comparisons)."""
        return float(np.dot(self._data, self._data))

    def distance(self, other: Vec3) -> float:
        """Distance between two points."""
        return (self - other).length()

    def normalize(self) -> Vec3:
        """Return a unit vector in the same direction.

        Raises:
            ValueError: If the vector has zero length
        """
        length = self.length()
        if is_zero(length):
            raise ValueError("Cannot normalize a zero-length vector")
        return Vec3.from_array(self._data / length)

    def dot(self, other: Vec3) -> float:
        """Compute dot product with another vector."""
        return float(np.dot(self._data, other._data))

    def cross(self, other: Vec3) -> Vec3:
        """Compute cross product with another vector."""
        return Vec3.from_array(np.cross(self._data, other._data))

    def reflect(self, normal: Vec3) -> Vec3:
        """Reflect this vector around the given normal."""
        return self - normal * 2 * self.dot(normal)

    def create_perpendicular(self) -> Vec3:
        """Return a unit vector orthogonal to this one.

        Picks the world axis least aligned with the vector and removes its
        component along the vector.
        """
        unit = self.normalize()
        helper = np.zeros(3)
        helper[int(np.argmin(np.abs(unit._data)))] = 1.0
        perpendicular = helper - unit._data * np.dot(helper, unit._data)
        return Vec3.from_array(perpendicular).normalize()

    def lower_than(self, threshold: float) -> bool:
        """True if every component is below the threshold."""
        return bool(np.all(self._data < threshold))

    def is_zero_vector(self) -> bool:
        """Check if vector is numerically zero in all dimensions."""
        return bool(np.all(np.abs(self._data) < EPSILON))

    def copy(self) -> Vec3:
        """Return an independent copy."""
        return Vec3.from_array(self._data.copy())

    def to_array(self) -> np.ndarray:
        """Return the underlying numpy array (copy)."""
        return self._data.copy()

    def clamp(self, min_val: float = 0.0, max_val: float = 1.0) -> Vec3:
        """Clamp all components to the given range."""
        return Vec3.from_array(np.clip(self._data, min_val, max_val))


# Convenience type aliases
Point3 = Vec3
Color = Vec3

ZERO = Vec3(0.0, 0.0, 0.0)
BLACK = Color(0.0, 0.0, 0.0)
