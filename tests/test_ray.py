"""Tests for Ray class."""

import pytest
from prismtrace.vec3 import Vec3, Point3
from prismtrace.ray import Ray, DELTA
from prismtrace.shapes import Intersection, Sphere


class TestRayCreation:
    """Test Ray construction."""

    def test_stores_origin(self):
        origin = Point3(1, 2, 3)
        ray = Ray(origin, Vec3(1, 0, 0))
        assert ray.origin == origin

    def test_direction_is_normalized(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 2, 3))
        assert ray.direction == Vec3(1, 2, 3).normalize()
        assert abs(ray.direction.length() - 1.0) < 1e-10

    def test_none_arguments_raise(self):
        with pytest.raises(ValueError):
            Ray(None, Vec3(1, 0, 0))
        with pytest.raises(ValueError):
            Ray(Point3(0, 0, 0), None)

    def test_zero_direction_raises(self):
        with pytest.raises(ValueError):
            Ray(Point3(0, 0, 0), Vec3(0, 0, 0))


class TestRayNormalOffset:
    """Test the self-intersection bias along a surface normal."""

    def test_offset_toward_direction_side(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 1, 1), Vec3(0, 1, 0))
        assert ray.origin == Point3(0, DELTA, 0)

    def test_offset_away_from_normal(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, -1, 1), Vec3(0, 1, 0))
        assert ray.origin == Point3(0, -DELTA, 0)

    def test_no_offset_when_direction_is_tangent(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 0, 0), Vec3(0, 1, 0))
        assert ray.origin == Point3(0, 0, 0)


class TestRayAt:
    """Test Ray.at() method."""

    def test_at_zero(self):
        origin = Point3(1, 2, 3)
        assert Ray(origin, Vec3(1, 0, 0)).at(0) == origin

    def test_at_positive(self):
        assert Ray(Point3(0, 0, 0), Vec3(2, 0, 0)).at(5) == Point3(5, 0, 0)

    def test_at_is_distance(self):
        ray = Ray(Point3(0, 0, 0), Vec3(1, 1, 1))
        assert abs(ray.at(2).length() - 2.0) < 1e-10


class TestClosestIntersection:
    """Test selection of the nearest hit."""

    def test_empty_returns_none(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        assert ray.closest_intersection([]) is None

    def test_picks_nearest(self):
        ray = Ray(Point3(0, 0, 0), Vec3(0, 0, -1))
        sphere = Sphere(Point3(0, 0, -10), 1)
        far = Intersection(Point3(0, 0, -11), sphere, 11.0)
        near = Intersection(Point3(0, 0, -9), sphere, 9.0)
        assert ray.closest_intersection([far, near]) is near


class TestRayEquality:
    """Test Ray comparison."""

    def test_equal_after_normalization(self):
        assert Ray(Point3(0, 0, 0), Vec3(1, -1, -10)) == Ray(Point3(0, 0, 0), Vec3(2, -2, -20))

    def test_different_direction(self):
        assert Ray(Point3(0, 0, 0), Vec3(1, 0, 0)) != Ray(Point3(0, 0, 0), Vec3(0, 1, 0))

    def test_repr(self):
        s = repr(Ray(Point3(1, 2, 3), Vec3(0, 1, 0)))
        assert "Ray" in s
        assert "origin" in s
        assert "direction" in s
