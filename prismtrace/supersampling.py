"""
Super-sampling: replace one ray with several rays spread over a small
target area, then average the colors they produce.
"""

from __future__ import annotations
import threading
from typing import Iterable, List, Optional
import numpy as np

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .sampling import SamplingPattern


class TargetArea:
    """A square sampling area perpendicular to a ray direction.

    The center moves with every sampled point; size and pattern are fixed.
    """

    def __init__(self, center: Point3, size: float, pattern: SamplingPattern):
        if center is None:
            raise ValueError("Center cannot be None")
        if size <= 0:
            raise ValueError(f"Size must be positive, got {size}")
        self._center = center
        self._size = size
        self._pattern = pattern

    @property
    def center(self) -> Point3:
        return self._center

    @center.setter
    def center(self, new_center: Point3) -> None:
        if new_center is None:
            raise ValueError("Center cannot be None")
        self._center = new_center

    @property
    def size(self) -> float:
        return self._size

    @property
    def pattern(self) -> SamplingPattern:
        return self._pattern

    def generate_sample_points(
        self,
        count: int,
        ray_direction: Vec3,
        rng: Optional[np.random.Generator] = None
    ) -> List[Point3]:
        """Spread `count` points over the area, using the ray direction as normal."""
        if count <= 0:
            raise ValueError(f"Number of samples must be positive, got {count}")
        return self._pattern.generate_samples(count, self._center, self._size, ray_direction, rng)


class SuperSampler:
    """Generates sample rays around a point and averages their colors.

    Each thread gets its own target area and random generator, so a single
    sampler can be shared by all render workers.
    """

    def __init__(self, samples: int, size: float, pattern: SamplingPattern = SamplingPattern.JITTERED):
        """Create a super-sampler.

        Args:
            samples: Number of rays generated per call
            size: Side length of the sampling area
            pattern: Distribution of the sample points
        """
        if samples < 1:
            raise ValueError(f"Number of samples must be at least 1, got {samples}")
        if size <= 0:
            raise ValueError(f"Sampling size must be positive, got {size}")
        self.samples = samples
        self.size = size
        self.pattern = pattern
        self._local = threading.local()

    def _worker_state(self):
        state = self._local
        if not hasattr(state, 'target_area'):
            state.target_area = TargetArea(Point3(0, 0, 0), self.size, self.pattern)
            state.rng = np.random.default_rng()
        return state

    def generate_sample_rays(self, new_center: Point3, ray: Ray) -> List[Ray]:
        """Build one ray per sample point around `new_center`.

        Every ray starts at the primal ray's origin and passes through one
        sample point of the target area centered at `new_center`.

        Raises:
            ValueError: If the center or the ray is missing
        """
        if new_center is None or ray is None:
            raise ValueError("Center point and ray cannot be None")

        state = self._worker_state()
        state.target_area.center = new_center
        points = state.target_area.generate_sample_points(self.samples, ray.direction, state.rng)
        return [Ray(ray.origin, point - ray.origin) for point in points]

    @staticmethod
    def average_color(colors: Iterable[Color]) -> Color:
        """Per-channel mean of the colors.

        Raises:
            ValueError: If no colors are given
        """
        colors = list(colors)
        if not colors:
            raise ValueError("Color list must not be empty")
        total = np.sum([c.to_array() for c in colors], axis=0)
        return Color.from_array(total / len(colors))

    def __repr__(self) -> str:
        return f"SuperSampler(samples={self.samples}, size={self.size}, pattern={self.pattern.name})"
