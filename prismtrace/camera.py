"""
Camera module: view-plane geometry and the render loop.

Supports:
- A pinhole camera defined by location, forward/up directions and a view
  plane (size and distance)
- One ray through the center of every pixel
- Optional pixel-level anti-aliasing (several rays per pixel)
- Multi-threaded tile-based rendering
- Validating builder producing an immutable configuration
"""

from __future__ import annotations
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass
import logging
import time
from pathlib import Path
from typing import Callable, List, Optional, Tuple

from .vec3 import Vec3, Point3, Color, align_zero, is_zero
from .ray import Ray
from .image_writer import ImageWriter
from .tracer import RayTracer, SimpleRayTracer
from .sampling import SamplingConfig, SamplingPattern
from .supersampling import SuperSampler

logger = logging.getLogger(__name__)


class MissingConfigurationError(Exception):
    """Raised by CameraBuilder.build() when a required field was never set."""

    def __init__(self, field_name: str):
        super().__init__(f"Missing rendering data: Camera.{field_name}")
        self.field_name = field_name


@dataclass(frozen=True)
class CameraConfig:
    """Immutable camera pose and view plane.

    Attributes:
        location: Eye position
        forward: Unit vector toward the view plane
        up: Unit up vector (orthogonal to forward)
        right: Unit vector forward x up
        width: View-plane width
        height: View-plane height
        distance: Distance from the eye to the view-plane center
    """
    location: Point3
    forward: Vec3
    up: Vec3
    right: Vec3
    width: float
    height: float
    distance: float

    @property
    def vp_center(self) -> Point3:
        return self.location + self.forward * self.distance


class Camera:
    """A pinhole camera that renders a scene into an image writer.

    Create cameras with `Camera.builder()`.
    """

    def __init__(
        self,
        config: CameraConfig,
        image_writer: ImageWriter,
        ray_tracer: RayTracer,
        pixel_sampler: Optional[SuperSampler] = None,
        num_threads: int = 1,
        tile_size: int = 16,
        progress_callback: Optional[Callable[[float], None]] = None
    ):
        self._config = config
        self._vp_center = config.vp_center
        self._image_writer = image_writer
        self._ray_tracer = ray_tracer
        self._pixel_sampler = pixel_sampler
        self.num_threads = num_threads
        self.tile_size = tile_size
        self._progress_callback = progress_callback

    @staticmethod
    def builder() -> CameraBuilder:
        return CameraBuilder()

    # Vector and point accessors hand out copies

    @property
    def location(self) -> Point3:
        return self._config.location.copy()

    @property
    def forward(self) -> Vec3:
        return self._config.forward.copy()

    @property
    def up(self) -> Vec3:
        return self._config.up.copy()

    @property
    def right(self) -> Vec3:
        return self._config.right.copy()

    @property
    def vp_center(self) -> Point3:
        return self._vp_center.copy()

    @property
    def width(self) -> float:
        return self._config.width

    @property
    def height(self) -> float:
        return self._config.height

    @property
    def distance(self) -> float:
        return self._config.distance

    @property
    def config(self) -> CameraConfig:
        return self._config

    @property
    def image_writer(self) -> ImageWriter:
        return self._image_writer

    @property
    def ray_tracer(self) -> RayTracer:
        return self._ray_tracer

    def pixel_center(self, nx: int, ny: int, j: int, i: int) -> Point3:
        """Center point of pixel (j, i) on the view plane.

        Args:
            nx: Number of pixel columns
            ny: Number of pixel rows
            j: Pixel column index
            i: Pixel row index (row 0 is the top row)
        """
        y_shift = align_zero(-(i - (ny - 1) / 2) * self._config.height / ny)
        x_shift = align_zero((j - (nx - 1) / 2) * self._config.width / nx)

        point = self._vp_center
        if not is_zero(x_shift):
            point = point + self._config.right * x_shift
        if not is_zero(y_shift):
            point = point + self._config.up * y_shift
        return point

    def construct_ray(self, nx: int, ny: int, j: int, i: int) -> Ray:
        """Ray from the eye through the center of pixel (j, i)."""
        location = self._config.location
        return Ray(location, self.pixel_center(nx, ny, j, i) - location)

    def render_image(self) -> Camera:
        """Trace every pixel into the image writer.

        Returns:
            The camera itself, for chaining with write_to_image()
        """
        nx = self._image_writer.width
        ny = self._image_writer.height

        tiles = self._generate_tiles(nx, ny)
        total_tiles = len(tiles)

        logger.info(
            "Rendering %dx%d with %s on %d thread(s)",
            nx, ny, type(self._ray_tracer).__name__, self.num_threads
        )
        start_time = time.perf_counter()

        def render_tile(tile: Tuple[int, int, int, int]) -> None:
            """Render a single tile; only its own pixels are written."""
            x0, y0, x1, y1 = tile
            for i in range(y0, y1):
                for j in range(x0, x1):
                    self._image_writer.set_pixel_color(j, i, self._cast_pixel(nx, ny, j, i))

        if self.num_threads > 1:
            with ThreadPoolExecutor(max_workers=self.num_threads) as executor:
                futures = [executor.submit(render_tile, tile) for tile in tiles]
                # Progress is reported from this thread only
                for completed, future in enumerate(as_completed(futures), 1):
                    future.result()
                    self._report_progress(completed, total_tiles)
        else:
            for completed, tile in enumerate(tiles, 1):
                render_tile(tile)
                self._report_progress(completed, total_tiles)

        logger.info("Render completed in %.2f seconds", time.perf_counter() - start_time)
        return self

    def _report_progress(self, completed: int, total: int) -> None:
        if self._progress_callback:
            self._progress_callback(completed / total)

    def _cast_pixel(self, nx: int, ny: int, j: int, i: int) -> Color:
        ray = self.construct_ray(nx, ny, j, i)
        if self._pixel_sampler is None:
            return self._ray_tracer.trace_ray(ray)

        center = self.pixel_center(nx, ny, j, i)
        rays = self._pixel_sampler.generate_sample_rays(center, ray)
        return self._pixel_sampler.average_color(self._ray_tracer.trace_ray(r) for r in rays)

    def _generate_tiles(self, width: int, height: int) -> List[Tuple[int, int, int, int]]:
        """Split the image into tiles (x0, y0, x1, y1)."""
        tile_size = self.tile_size
        tiles = []

        for y in range(0, height, tile_size):
            for x in range(0, width, tile_size):
                x1 = min(x + tile_size, width)
                y1 = min(y + tile_size, height)
                tiles.append((x, y, x1, y1))

        return tiles

    def print_grid(self, interval: int, color: Color) -> Camera:
        """Paint grid lines every `interval` pixels over the image."""
        if interval <= 0:
            raise ValueError(f"Grid interval must be positive, got {interval}")
        for i in range(self._image_writer.height):
            for j in range(self._image_writer.width):
                if i % interval == 0 or j % interval == 0:
                    self._image_writer.set_pixel_color(j, i, color)
        return self

    def write_to_image(self) -> Path:
        """Save the rendered image.

        Raises:
            ImageWriteError: If the image cannot be written
        """
        return self._image_writer.save_image()

    def __repr__(self) -> str:
        return f"Camera(location={self._config.location}, forward={self._config.forward}, up={self._config.up})"


class CameraBuilder:
    """Collects camera settings and validates them into a Camera.

    Setters validate their arguments immediately; build() checks that every
    required field is present.
    """

    def __init__(self):
        self._location: Optional[Point3] = None
        self._forward: Optional[Vec3] = None
        self._up: Optional[Vec3] = None
        self._width: Optional[float] = None
        self._height: Optional[float] = None
        self._distance: Optional[float] = None
        self._image_writer: Optional[ImageWriter] = None
        self._ray_tracer: Optional[RayTracer] = None
        self._sampling_config: Optional[SamplingConfig] = None
        self._aa_samples = 1
        self._aa_pattern = SamplingPattern.JITTERED
        self._num_threads = 1
        self._progress_callback: Optional[Callable[[float], None]] = None

    def set_location(self, location: Point3) -> CameraBuilder:
        if location is None:
            raise ValueError("Location cannot be None")
        self._location = location.copy()
        return self

    def set_direction(self, forward: Vec3, up: Vec3) -> CameraBuilder:
        """Set the viewing direction and the up vector (must be orthogonal)."""
        if forward is None or up is None:
            raise ValueError("Forward and up vectors cannot be None")
        if not is_zero(forward.dot(up)):
            raise ValueError("Forward and up vectors are not orthogonal")
        self._forward = forward.normalize()
        self._up = up.normalize()
        return self

    def set_vp_size(self, width: float, height: float) -> CameraBuilder:
        if align_zero(width) <= 0 or align_zero(height) <= 0:
            raise ValueError(f"View plane width and height must be positive, got {width}x{height}")
        self._width = width
        self._height = height
        return self

    def set_vp_distance(self, distance: float) -> CameraBuilder:
        if align_zero(distance) <= 0:
            raise ValueError(f"View plane distance must be positive, got {distance}")
        self._distance = distance
        return self

    @property
    def image_writer(self) -> Optional[ImageWriter]:
        return self._image_writer

    def set_image_writer(self, image_writer: ImageWriter) -> CameraBuilder:
        if image_writer is None:
            raise ValueError("Image writer cannot be None")
        self._image_writer = image_writer
        return self

    def set_ray_tracer(self, ray_tracer: RayTracer) -> CameraBuilder:
        if ray_tracer is None:
            raise ValueError("Ray tracer cannot be None")
        self._ray_tracer = ray_tracer
        return self

    def set_sampling_config(self, config: SamplingConfig) -> CameraBuilder:
        """Super-sample around every first hit (applied to the ray tracer at build)."""
        if config is None:
            raise ValueError("Sampling config cannot be None")
        self._sampling_config = config
        return self

    def set_anti_aliasing(self, samples: int, pattern: SamplingPattern = SamplingPattern.JITTERED) -> CameraBuilder:
        """Cast `samples` rays per pixel, spread over one pixel, and average them."""
        if samples < 1:
            raise ValueError(f"Anti-aliasing samples must be at least 1, got {samples}")
        self._aa_samples = samples
        self._aa_pattern = pattern
        return self

    def set_multithreading(self, threads: int) -> CameraBuilder:
        """Number of render threads (0 = one per CPU core)."""
        if threads < 0:
            raise ValueError(f"Thread count must be non-negative, got {threads}")
        if threads == 0:
            import os
            threads = os.cpu_count() or 4
        self._num_threads = threads
        return self

    def set_progress_callback(self, callback: Callable[[float], None]) -> CameraBuilder:
        """Callback receiving the completed fraction (0.0 to 1.0) during rendering."""
        self._progress_callback = callback
        return self

    def build(self) -> Camera:
        """Validate the settings and create the camera.

        Raises:
            MissingConfigurationError: If a required field was not set
            ValueError: If the direction vectors are not orthogonal, or a
                sampling configuration is given for a tracer without
                super-sampling support
        """
        required = (
            ('width', self._width),
            ('height', self._height),
            ('distance', self._distance),
            ('up', self._up),
            ('forward', self._forward),
            ('location', self._location),
            ('image_writer', self._image_writer),
            ('ray_tracer', self._ray_tracer),
        )
        for name, value in required:
            if value is None:
                raise MissingConfigurationError(name)

        if not is_zero(self._forward.dot(self._up)):
            raise ValueError("Forward and up vectors are not orthogonal")

        config = CameraConfig(
            location=self._location.copy(),
            forward=self._forward.copy(),
            up=self._up.copy(),
            right=self._forward.cross(self._up).normalize(),
            width=self._width,
            height=self._height,
            distance=self._distance,
        )

        if self._sampling_config is not None:
            if not isinstance(self._ray_tracer, SimpleRayTracer):
                raise ValueError(
                    f"{type(self._ray_tracer).__name__} does not support super-sampling"
                )
            self._ray_tracer.set_sampling_config(self._sampling_config)

        pixel_sampler = None
        if self._aa_samples > 1:
            pixel_size = min(
                self._width / self._image_writer.width,
                self._height / self._image_writer.height
            )
            pixel_sampler = SuperSampler(self._aa_samples, pixel_size, self._aa_pattern)

        logger.debug("Built camera %s", config)
        return Camera(
            config,
            self._image_writer,
            self._ray_tracer,
            pixel_sampler=pixel_sampler,
            num_threads=self._num_threads,
            progress_callback=self._progress_callback,
        )
