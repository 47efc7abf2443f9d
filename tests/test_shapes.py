"""Tests for geometric shapes."""

import pytest
import math
from prismtrace.vec3 import Vec3, Point3, Color
from prismtrace.ray import Ray
from prismtrace.shapes import Sphere, Plane, Triangle, Geometries
from prismtrace.materials import Material, DEFAULT_MATERIAL


class TestSphere:
    """Test Sphere class."""

    def test_creation(self):
        center = Point3(0, 0, 0)
        sphere = Sphere(center, 1.0)
        assert sphere.center == center
        assert sphere.radius == 1.0
        assert sphere.material is DEFAULT_MATERIAL
        assert sphere.emission == Color(0, 0, 0)

    def test_non_positive_radius_raises(self):
        with pytest.raises(ValueError):
            Sphere(Point3(0, 0, 0), 0)

    def test_normal(self):
        sphere = Sphere(Point3(0, 0, 0), 2.0)
        assert sphere.get_normal(Point3(0, 2, 0)) == Vec3(0, 1, 0)

    def test_hit_through_center(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hits = sorted(sphere.find_intersections(ray), key=lambda h: h.t)

        assert len(hits) == 2
        assert abs(hits[0].t - 4.0) < 1e-6
        assert hits[0].point == Point3(0, 0, -1)
        assert hits[1].point == Point3(0, 0, 1)
        assert hits[0].geometry is sphere

    def test_hit_from_inside(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        hits = sphere.find_intersections(Ray(Point3(0, 0, 0), Vec3(0, 0, 1)))
        assert len(hits) == 1
        assert hits[0].point == Point3(0, 0, 1)

    def test_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        assert sphere.find_intersections(Ray(Point3(0, 5, -5), Vec3(0, 0, 1))) == []

    def test_tangent_is_miss(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        assert sphere.find_intersections(Ray(Point3(0, 1, -5), Vec3(0, 0, 1))) == []

    def test_behind_ray(self):
        sphere = Sphere(Point3(0, 0, -5), 1.0)
        assert sphere.find_intersections(Ray(Point3(0, 0, 0), Vec3(0, 0, 1))) == []

    def test_max_distance(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        ray = Ray(Point3(0, 0, -5), Vec3(0, 0, 1))
        hits = sphere.find_intersections(ray, 5.0)
        assert len(hits) == 1
        assert abs(hits[0].t - 4.0) < 1e-6


class TestPlane:
    """Test Plane class."""

    def test_normal_is_normalized(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 5, 0))
        assert plane.get_normal(Point3(3, 0, 1)) == Vec3(0, 1, 0)

    def test_hit(self):
        plane = Plane(Point3(0, -1, 0), Vec3(0, 1, 0))
        hits = plane.find_intersections(Ray(Point3(0, 0, 0), Vec3(0, -1, 0)))
        assert len(hits) == 1
        assert abs(hits[0].t - 1.0) < 1e-10

    def test_parallel_miss(self):
        plane = Plane(Point3(0, -1, 0), Vec3(0, 1, 0))
        assert plane.find_intersections(Ray(Point3(0, 0, 0), Vec3(1, 0, 0))) == []

    def test_ray_starting_on_plane(self):
        plane = Plane(Point3(0, 0, 0), Vec3(0, 1, 0))
        assert plane.find_intersections(Ray(Point3(0, 0, 0), Vec3(0, -1, 1))) == []


class TestTriangle:
    """Test Triangle class."""

    def _triangle(self):
        return Triangle(Point3(-1, -1, -2), Point3(1, -1, -2), Point3(0, 1, -2))

    def test_hit_inside(self):
        hits = self._triangle().find_intersections(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert len(hits) == 1
        assert hits[0].point == Point3(0, 0, -2)

    def test_miss_outside(self):
        assert self._triangle().find_intersections(Ray(Point3(5, 5, 0), Vec3(0, 0, -1))) == []

    def test_normal(self):
        n = self._triangle().get_normal(Point3(0, 0, -2))
        assert abs(abs(n.z) - 1.0) < 1e-10


class TestGeometries:
    """Test the composite container."""

    def test_empty(self):
        world = Geometries()
        assert len(world) == 0
        assert world.find_intersections(Ray(Point3(0, 0, 0), Vec3(0, 0, -1))) == []

    def test_collects_all_hits(self):
        world = Geometries(Sphere(Point3(0, 0, -5), 1))
        world.add(Sphere(Point3(0, 0, -10), 1), Plane(Point3(0, 0, -20), Vec3(0, 0, 1)))
        hits = world.find_intersections(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert len(hits) == 5
        assert len(world) == 3

    def test_closest(self):
        near = Sphere(Point3(0, 0, -5), 1)
        world = Geometries(Sphere(Point3(0, 0, -10), 1), near)
        closest = world.find_closest_intersection(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)))
        assert closest.geometry is near
        assert math.isclose(closest.t, 4.0)
