"""
Geometric shapes for the ray tracer.

Each shape implements the Intersectable interface with a
`find_intersections` method returning every hit along a ray.
"""

from __future__ import annotations
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional, List
import math

from .vec3 import Vec3, Point3, Color, BLACK, align_zero, is_zero
from .ray import Ray
from .materials import Material, DEFAULT_MATERIAL


@dataclass
class Intersection:
    """Stores information about a ray-object intersection.

    Attributes:
        point: The intersection point in world space
        geometry: The geometry that was hit (owned by the scene)
        t: The ray parameter (distance from the ray origin) at intersection
    """
    point: Point3
    geometry: Geometry
    t: float


class Intersectable(ABC):
    """Abstract base class for everything that can be hit by rays."""

    @abstractmethod
    def find_intersections(self, ray: Ray, max_distance: float = math.inf) -> List[Intersection]:
        """Find all intersections of the ray with this object.

        Args:
            ray: The ray to test
            max_distance: Hits farther than this are ignored

        Returns:
            List of intersections with 0 < t <= max_distance (may be empty)
        """
        pass

    def find_closest_intersection(self, ray: Ray) -> Optional[Intersection]:
        """Convenience wrapper returning only the nearest hit."""
        return ray.closest_intersection(self.find_intersections(ray))


class Geometry(Intersectable):
    """A shaded surface: emission color, material and surface normal."""

    def __init__(self, material: Optional[Material] = None, emission: Optional[Color] = None):
        self.material = material if material is not None else DEFAULT_MATERIAL
        self.emission = emission if emission is not None else BLACK

    @abstractmethod
    def get_normal(self, point: Point3) -> Vec3:
        """Return the outward unit normal at a point on the surface."""
        pass

    def _in_range(self, t: float, max_distance: float) -> bool:
        return align_zero(t) > 0 and align_zero(t - max_distance) <= 0


class Sphere(Geometry):
    """A sphere defined by center and radius."""

    def __init__(
        self,
        center: Point3,
        radius: float,
        material: Optional[Material] = None,
        emission: Optional[Color] = None
    ):
        """Create a sphere.

        Args:
            center: Center point of the sphere
            radius: Radius of the sphere (must be positive)
            material: Material for shading
            emission: Self-emitted color
        """
        if radius <= 0:
            raise ValueError(f"Sphere radius must be positive, got {radius}")
        super().__init__(material, emission)
        self.center = center
        self.radius = radius

    def get_normal(self, point: Point3) -> Vec3:
        return (point - self.center).normalize()

    def find_intersections(self, ray: Ray, max_distance: float = math.inf) -> List[Intersection]:
        """Ray-sphere intersection using the quadratic formula.

        With a unit direction, (P-C)·(P-C) = r² where P = ray.at(t)
        expands to: t² + 2t(d·(O-C)) + (O-C)·(O-C) - r² = 0
        """
        oc = ray.origin - self.center
        half_b = oc.dot(ray.direction)
        c = oc.length_squared() - self.radius * self.radius

        discriminant = align_zero(half_b * half_b - c)
        if discriminant <= 0:
            # Miss or tangent
            return []

        sqrtd = math.sqrt(discriminant)
        roots = (-half_b - sqrtd, -half_b + sqrtd)
        return [
            Intersection(ray.at(t), self, t)
            for t in roots
            if self._in_range(t, max_distance)
        ]

    def __repr__(self) -> str:
        return f"Sphere(center={self.center}, radius={self.radius})"


class Plane(Geometry):
    """An infinite plane defined by a point and normal."""

    def __init__(
        self,
        point: Point3,
        normal: Vec3,
        material: Optional[Material] = None,
        emission: Optional[Color] = None
    ):
        """Create a plane.

        Args:
            point: Any point on the plane
            normal: The plane's normal vector (will be normalized)
            material: Material for shading
            emission: Self-emitted color
        """
        super().__init__(material, emission)
        self.point = point
        self.normal = normal.normalize()

    def get_normal(self, point: Point3) -> Vec3:
        return self.normal

    def find_intersections(self, ray: Ray, max_distance: float = math.inf) -> List[Intersection]:
        denom = self.normal.dot(ray.direction)

        # Ray is parallel to plane
        if is_zero(denom):
            return []

        t = (self.point - ray.origin).dot(self.normal) / denom
        if not self._in_range(t, max_distance):
            return []
        return [Intersection(ray.at(t), self, t)]

    def __repr__(self) -> str:
        return f"Plane(point={self.point}, normal={self.normal})"


class Triangle(Geometry):
    """A triangle defined by three vertices."""

    def __init__(
        self,
        v0: Point3,
        v1: Point3,
        v2: Point3,
        material: Optional[Material] = None,
        emission: Optional[Color] = None
    ):
        """Create a triangle from three vertices.

        Args:
            v0, v1, v2: The three vertices in counter-clockwise order
            material: Material for shading
            emission: Self-emitted color
        """
        super().__init__(material, emission)
        self.v0 = v0
        self.v1 = v1
        self.v2 = v2

        # Pre-compute edges and normal
        self.e1 = v1 - v0
        self.e2 = v2 - v0
        self.normal = self.e1.cross(self.e2).normalize()

    def get_normal(self, point: Point3) -> Vec3:
        return self.normal

    def find_intersections(self, ray: Ray, max_distance: float = math.inf) -> List[Intersection]:
        """Ray-triangle intersection using the Möller-Trumbore algorithm."""
        h = ray.direction.cross(self.e2)
        a = self.e1.dot(h)

        # Ray is parallel to triangle
        if is_zero(a):
            return []

        f = 1.0 / a
        s = ray.origin - self.v0
        u = f * s.dot(h)
        if u < 0.0 or u > 1.0:
            return []

        q = s.cross(self.e1)
        v = f * ray.direction.dot(q)
        if v < 0.0 or u + v > 1.0:
            return []

        t = f * self.e2.dot(q)
        if not self._in_range(t, max_distance):
            return []
        return [Intersection(ray.at(t), self, t)]

    def __repr__(self) -> str:
        return f"Triangle({self.v0}, {self.v1}, {self.v2})"


class Geometries(Intersectable):
    """A collection of intersectable objects."""

    def __init__(self, *objects: Intersectable):
        self.objects: List[Intersectable] = list(objects)

    def add(self, *objects: Intersectable) -> None:
        """Add one or more objects."""
        self.objects.extend(objects)

    def find_intersections(self, ray: Ray, max_distance: float = math.inf) -> List[Intersection]:
        """Collect the intersections of every object."""
        intersections: List[Intersection] = []
        for obj in self.objects:
            intersections.extend(obj.find_intersections(ray, max_distance))
        return intersections

    def __len__(self) -> int:
        return len(self.objects)

    def __iter__(self):
        return iter(self.objects)
