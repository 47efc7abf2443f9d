"""
Ray class for representing rays in 3D space.

A ray is defined by an origin point and a normalized direction vector.
Ray(t) = origin + t * direction
"""

from __future__ import annotations
from typing import Optional, Sequence, TYPE_CHECKING

from .vec3 import Vec3, Point3, is_zero

if TYPE_CHECKING:
    from .shapes import Intersection


# Offset applied along the surface normal for secondary ray origins
DELTA = 1e-3


class Ray:
    """A ray with origin and unit direction.

    The parametric form is: P(t) = origin + t * direction
    where t >= 0 represents points along the ray.
    """

    __slots__ = ('origin', 'direction')

    def __init__(self, origin: Point3, direction: Vec3, normal: Optional[Vec3] = None):
        """Create a ray with given origin and direction.

        Args:
            origin: The starting point of the ray
            direction: The direction vector (normalized on construction)
            normal: Surface normal at the origin. When given, the origin is
                moved DELTA along the normal, toward the side the direction
                points to, so the ray does not hit its own surface.

        Raises:
            ValueError: If origin or direction is missing or the direction is zero
        """
        if origin is None or direction is None:
            raise ValueError("Ray origin and direction cannot be None")

        self.direction = direction.normalize()

        if normal is not None:
            nv = normal.dot(self.direction)
            if not is_zero(nv):
                origin = origin + normal * (DELTA if nv > 0 else -DELTA)
        self.origin = origin

    def at(self, t: float) -> Point3:
        """Get the point along the ray at parameter t.

        Args:
            t: The parameter value (distance, since direction is normalized)

        Returns:
            The point at origin + t * direction
        """
        return self.origin + self.direction * t

    def closest_intersection(self, intersections: Sequence[Intersection]) -> Optional[Intersection]:
        """Pick the intersection nearest to the ray origin.

        Returns:
            The closest intersection, or None if the sequence is empty
        """
        if not intersections:
            return None
        return min(intersections, key=lambda hit: hit.point.distance(self.origin))

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Ray):
            return NotImplemented
        return self.origin == other.origin and self.direction == other.direction

    def __repr__(self) -> str:
        return f"Ray(origin={self.origin}, direction={self.direction})"
