"""Tests for Camera class."""

import os
import threading
import time

import pytest

from prismtrace.vec3 import Vec3, Point3, Color
from prismtrace.ray import Ray
from prismtrace.scene import Scene
from prismtrace.image_writer import ImageWriter
from prismtrace.tracer import RayTracer, SimpleRayTracer
from prismtrace.sampling import SamplingConfig
from prismtrace.camera import Camera, CameraBuilder, MissingConfigurationError


class ConstantTracer(RayTracer):
    """Returns one color for every ray and counts the calls."""

    def __init__(self, color=Color(0.5, 0.5, 0.5)):
        super().__init__(Scene("constant"))
        self.color = color
        self.calls = 0
        self._lock = threading.Lock()

    def trace_ray(self, ray):
        with self._lock:
            self.calls += 1
        return self.color


def _builder(writer=None, tracer=None):
    """Camera at the origin looking down -z with a flipped up vector."""
    return (
        Camera.builder()
        .set_location(Point3(0, 0, 0))
        .set_direction(Vec3(0, 0, -1), Vec3(0, -1, 0))
        .set_vp_distance(10)
        .set_image_writer(writer or ImageWriter("test", 4, 4))
        .set_ray_tracer(tracer or ConstantTracer())
    )


class TestConstructRay:
    """Test rays through pixel centers."""

    def test_even_grid(self):
        camera = _builder().set_vp_size(8, 8).build()
        origin = Point3(0, 0, 0)

        assert camera.construct_ray(4, 4, 1, 1) == Ray(origin, Vec3(1, -1, -10))
        assert camera.construct_ray(4, 4, 3, 1) == Ray(origin, Vec3(-3, -1, -10))
        assert camera.construct_ray(4, 4, 0, 1) == Ray(origin, Vec3(3, -1, -10))
        assert camera.construct_ray(4, 4, 3, 3) == Ray(origin, Vec3(-3, 3, -10))
        assert camera.construct_ray(4, 4, 0, 0) == Ray(origin, Vec3(3, -3, -10))
        assert camera.construct_ray(4, 4, 1, 0) == Ray(origin, Vec3(1, -3, -10))

    def test_odd_grid(self):
        camera = _builder().set_vp_size(6, 6).build()
        origin = Point3(0, 0, 0)

        assert camera.construct_ray(3, 3, 1, 1) == Ray(origin, Vec3(0, 0, -10))
        assert camera.construct_ray(3, 3, 1, 0) == Ray(origin, Vec3(0, -2, -10))
        assert camera.construct_ray(3, 3, 0, 1) == Ray(origin, Vec3(2, 0, -10))
        assert camera.construct_ray(3, 3, 0, 0) == Ray(origin, Vec3(2, -2, -10))

    def test_rectangular_grid(self):
        camera = _builder().set_vp_size(6, 4).build()
        origin = Point3(0, 0, 0)

        # 3 columns, 2 rows: pixels are 2 wide, 2 high
        assert camera.construct_ray(3, 2, 1, 0) == Ray(origin, Vec3(0, -1, -10))
        assert camera.construct_ray(3, 2, 2, 1) == Ray(origin, Vec3(-2, 1, -10))

    def test_rays_start_at_location(self):
        camera = (
            _builder().set_location(Point3(1, 2, 3)).set_vp_size(4, 4).build()
        )
        assert camera.construct_ray(4, 4, 2, 2).origin == Point3(1, 2, 3)


class TestCameraAccessors:
    """Test camera geometry accessors."""

    def test_basis(self):
        camera = _builder().set_vp_size(8, 8).build()
        assert camera.forward == Vec3(0, 0, -1)
        assert camera.up == Vec3(0, -1, 0)
        assert camera.right == Vec3(-1, 0, 0)
        assert camera.vp_center == Point3(0, 0, -10)
        assert (camera.width, camera.height, camera.distance) == (8, 8, 10)

    def test_directions_are_normalized(self):
        camera = (
            _builder()
            .set_direction(Vec3(0, 0, -5), Vec3(0, 3, 0))
            .set_vp_size(1, 1)
            .build()
        )
        assert camera.forward == Vec3(0, 0, -1)
        assert camera.up == Vec3(0, 1, 0)
        assert camera.right == Vec3(1, 0, 0)

    def test_accessors_return_copies(self):
        camera = _builder().set_vp_size(8, 8).build()
        assert camera.location is not camera.location
        assert camera.forward is not camera.config.forward
        assert camera.vp_center is not camera.vp_center

    def test_config_is_frozen(self):
        camera = _builder().set_vp_size(8, 8).build()
        with pytest.raises(AttributeError):
            camera.config.distance = 5


class TestCameraBuilder:
    """Test builder validation."""

    @pytest.mark.parametrize("apply, missing", [
        (lambda b: b, "width"),
        (lambda b: b.set_vp_size(1, 1), "distance"),
        (lambda b: b.set_vp_size(1, 1).set_vp_distance(1), "up"),
        (lambda b: b.set_vp_size(1, 1).set_vp_distance(1)
            .set_direction(Vec3(0, 0, -1), Vec3(0, 1, 0)), "location"),
        (lambda b: b.set_vp_size(1, 1).set_vp_distance(1)
            .set_direction(Vec3(0, 0, -1), Vec3(0, 1, 0))
            .set_location(Point3(0, 0, 0)), "image_writer"),
        (lambda b: b.set_vp_size(1, 1).set_vp_distance(1)
            .set_direction(Vec3(0, 0, -1), Vec3(0, 1, 0))
            .set_location(Point3(0, 0, 0))
            .set_image_writer(ImageWriter("x", 1, 1)), "ray_tracer"),
    ])
    def test_missing_field(self, apply, missing):
        with pytest.raises(MissingConfigurationError) as excinfo:
            apply(CameraBuilder()).build()
        assert excinfo.value.field_name == missing
        assert f"Camera.{missing}" in str(excinfo.value)

    def test_non_orthogonal_direction_raises(self):
        with pytest.raises(ValueError):
            CameraBuilder().set_direction(Vec3(0, 0, -1), Vec3(0, 1, 1))

    @pytest.mark.parametrize("size", [(0, 1), (1, 0), (-2, 3)])
    def test_invalid_vp_size_raises(self, size):
        with pytest.raises(ValueError):
            CameraBuilder().set_vp_size(*size)

    @pytest.mark.parametrize("distance", [0, -1])
    def test_invalid_vp_distance_raises(self, distance):
        with pytest.raises(ValueError):
            CameraBuilder().set_vp_distance(distance)

    def test_none_arguments_raise(self):
        builder = CameraBuilder()
        with pytest.raises(ValueError):
            builder.set_location(None)
        with pytest.raises(ValueError):
            builder.set_image_writer(None)
        with pytest.raises(ValueError):
            builder.set_ray_tracer(None)
        with pytest.raises(ValueError):
            builder.set_sampling_config(None)

    def test_builder_keeps_own_copy_of_location(self):
        location = Point3(1, 1, 1)
        builder = _builder().set_location(location).set_vp_size(1, 1)
        assert builder.build().location == location

    def test_multithreading(self):
        assert _builder().set_vp_size(1, 1).set_multithreading(3).build().num_threads == 3
        auto = _builder().set_vp_size(1, 1).set_multithreading(0).build()
        assert auto.num_threads == (os.cpu_count() or 4)
        with pytest.raises(ValueError):
            CameraBuilder().set_multithreading(-1)

    def test_sampling_config_applied_to_tracer(self):
        tracer = SimpleRayTracer(Scene("empty"))
        config = SamplingConfig(samples=4, size=1.0)
        _builder(tracer=tracer).set_vp_size(1, 1).set_sampling_config(config).build()
        assert tracer.sampling_config is config

    def test_sampling_config_needs_simple_tracer(self):
        builder = _builder().set_vp_size(1, 1).set_sampling_config(SamplingConfig(samples=4))
        with pytest.raises(ValueError):
            builder.build()

    def test_invalid_anti_aliasing_raises(self):
        with pytest.raises(ValueError):
            CameraBuilder().set_anti_aliasing(0)


class TestRenderImage:
    """Test the render loop."""

    def test_fills_every_pixel(self):
        writer = ImageWriter("test", 5, 3)
        tracer = ConstantTracer(Color(0.2, 0.4, 0.6))
        camera = _builder(writer, tracer).set_vp_size(5, 3).build()

        assert camera.render_image() is camera
        assert tracer.calls == 15
        for i in range(3):
            for j in range(5):
                assert writer.get_pixel_color(j, i) == Color(0.2, 0.4, 0.6)

    def test_multithreaded_tiles(self):
        writer = ImageWriter("test", 40, 20)
        tracer = ConstantTracer(Color(1, 0, 0))
        camera = _builder(writer, tracer).set_vp_size(4, 2).set_multithreading(4).build()
        camera.tile_size = 8

        camera.render_image()
        assert tracer.calls == 800
        assert writer.get_pixel_color(39, 19) == Color(1, 0, 0)
        assert writer.get_pixel_color(0, 0) == Color(1, 0, 0)

    def test_anti_aliasing_rays_per_pixel(self):
        writer = ImageWriter("test", 3, 2)
        tracer = ConstantTracer(Color(0.3, 0.3, 0.3))
        camera = _builder(writer, tracer).set_vp_size(3, 2).set_anti_aliasing(4).build()

        camera.render_image()
        assert tracer.calls == 24
        assert writer.get_pixel_color(2, 1) == Color(0.3, 0.3, 0.3)

    def test_progress_reaches_one(self):
        progress = []
        writer = ImageWriter("test", 20, 20)
        camera = (
            _builder(writer)
            .set_vp_size(2, 2)
            .set_progress_callback(progress.append)
            .build()
        )
        camera.render_image()

        assert len(progress) == 4
        assert progress == sorted(progress)
        assert progress[-1] == 1.0

    def test_multithreaded_progress_is_ordered(self):
        progress = []
        threads = set()

        def record(fraction):
            threads.add(threading.get_ident())
            time.sleep(0.0005)
            progress.append(fraction)

        writer = ImageWriter("test", 32, 32)
        camera = (
            _builder(writer)
            .set_vp_size(2, 2)
            .set_multithreading(8)
            .set_progress_callback(record)
            .build()
        )
        camera.tile_size = 2
        camera.render_image()

        assert len(progress) == 256
        assert progress == sorted(progress)
        assert progress[-1] == 1.0
        assert threads == {threading.get_ident()}

    def test_tracer_errors_propagate(self):
        class FailingTracer(ConstantTracer):
            def trace_ray(self, ray):
                raise RuntimeError("boom")

        camera = _builder(tracer=FailingTracer()).set_vp_size(1, 1).set_multithreading(2).build()
        with pytest.raises(RuntimeError):
            camera.render_image()


class TestPrintGrid:
    """Test grid overlay."""

    def test_lines_every_interval(self):
        writer = ImageWriter("test", 7, 7)
        camera = _builder(writer).set_vp_size(1, 1).build()
        red = Color(1, 0, 0)

        assert camera.print_grid(3, red) is camera
        assert writer.get_pixel_color(0, 5) == red
        assert writer.get_pixel_color(3, 1) == red
        assert writer.get_pixel_color(5, 6) == red
        assert writer.get_pixel_color(1, 1) == Color(0, 0, 0)
        assert writer.get_pixel_color(4, 5) == Color(0, 0, 0)

    def test_invalid_interval_raises(self):
        camera = _builder().set_vp_size(1, 1).build()
        with pytest.raises(ValueError):
            camera.print_grid(0, Color(1, 1, 1))


class TestWriteToImage:
    """Test saving through the camera."""

    def test_writes_png(self, tmp_path):
        writer = ImageWriter("camera_test", 4, 4, tmp_path)
        camera = _builder(writer).set_vp_size(1, 1).build()
        path = camera.render_image().write_to_image()
        assert path == tmp_path / "camera_test.png"
        assert path.exists()
