"""
Sampling patterns for super-sampling.

A pattern spreads a number of sample points over a square area lying in
the plane perpendicular to a normal vector:
- Jittered: one random sample per cell of a regular grid (stratified)
- Random: independent uniform samples over the whole area
- Spiral: deterministic golden-angle spiral inside the inscribed disk
- Ring: the center plus concentric rings of evenly spaced samples
"""

from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import List, Optional, Tuple
import math

import numpy as np

from .vec3 import Vec3, Point3


GOLDEN_ANGLE = math.pi * (3.0 - math.sqrt(5.0))


def plane_axes(normal: Vec3) -> Tuple[Vec3, Vec3]:
    """Build two orthonormal in-plane axes for the plane with this normal."""
    x_axis = normal.create_perpendicular()
    y_axis = normal.cross(x_axis).normalize()
    return x_axis, y_axis


class SamplingPattern(Enum):
    """Distribution strategy for sample points."""
    JITTERED = "jittered"
    RANDOM = "random"
    SPIRAL = "spiral"  # Experimental
    RING = "ring"  # Experimental

    def generate_samples(
        self,
        count: int,
        center: Point3,
        size: float,
        normal: Vec3,
        rng: Optional[np.random.Generator] = None
    ) -> List[Point3]:
        """Generate sample points around a center.

        Args:
            count: Number of points to produce
            center: Center of the sampling square
            size: Side length of the sampling square
            normal: Normal of the sampling plane
            rng: Random generator (a fresh one is created if None)

        Returns:
            Exactly `count` points, each within size/2 of the center along
            both in-plane axes

        Raises:
            ValueError: On a non-positive count or size, or a missing
                center or normal
        """
        if count < 1:
            raise ValueError(f"Number of samples must be positive, got {count}")
        if size <= 0:
            raise ValueError(f"Sampling size must be positive, got {size}")
        if center is None or normal is None:
            raise ValueError("Center and normal cannot be None")

        if count == 1:
            return [center]

        if rng is None:
            rng = np.random.default_rng()

        if self is SamplingPattern.JITTERED:
            offsets = _jittered_offsets(count, size, rng)
        elif self is SamplingPattern.RANDOM:
            offsets = _random_offsets(count, size, rng)
        elif self is SamplingPattern.SPIRAL:
            offsets = _spiral_offsets(count, size)
        elif self is SamplingPattern.RING:
            offsets = _ring_offsets(count, size)
        else:
            raise ValueError(f"Unknown sampling pattern: {self}")

        x_axis, y_axis = plane_axes(normal)
        points = (
            center.to_array()
            + np.outer(offsets[:, 0], x_axis.to_array())
            + np.outer(offsets[:, 1], y_axis.to_array())
        )
        return [Point3.from_array(p) for p in points]


def _jittered_offsets(count: int, size: float, rng: np.random.Generator) -> np.ndarray:
    """One jittered sample in each of `count` distinct grid cells.

    The grid side is ceil(sqrt(count)); when count is not a perfect square
    a random subset of the cells is used so that exactly `count` samples
    are returned.
    """
    grid_size = max(1, math.ceil(math.sqrt(count)))
    step = size / grid_size

    cells = np.arange(grid_size * grid_size)
    if count < cells.size:
        cells = np.sort(rng.choice(cells, size=count, replace=False))

    cell_x = cells // grid_size
    cell_y = cells % grid_size
    jitter = rng.random((count, 2))

    offsets = np.empty((count, 2))
    offsets[:, 0] = (cell_x + jitter[:, 0]) * step - size / 2
    offsets[:, 1] = (cell_y + jitter[:, 1]) * step - size / 2
    return offsets


def _random_offsets(count: int, size: float, rng: np.random.Generator) -> np.ndarray:
    return (rng.random((count, 2)) - 0.5) * size


def _spiral_offsets(count: int, size: float) -> np.ndarray:
    k = np.arange(count)
    radius = (size / 2) * np.sqrt((k + 0.5) / count)
    angle = k * GOLDEN_ANGLE
    return np.column_stack((radius * np.cos(angle), radius * np.sin(angle)))


def _ring_offsets(count: int, size: float) -> np.ndarray:
    """The center followed by concentric rings out to the inscribed circle.

    Ring r can hold 6*r samples; the fewest rings that fit `count` are used
    and the samples outside the center are shared out in proportion to
    each ring's radius.
    """
    num_rings = 1
    while 1 + 3 * num_rings * (num_rings + 1) < count:
        num_rings += 1

    rings = np.arange(1, num_rings + 1)
    share = (count - 1) * rings / rings.sum()
    per_ring = np.diff(np.concatenate(([0], np.round(np.cumsum(share)).astype(int))))

    offsets = [np.zeros((1, 2))]
    step = (size / 2) / num_rings
    for ring, points in zip(rings, per_ring):
        angle = 2 * math.pi * np.arange(points) / max(points, 1)
        radius = ring * step
        offsets.append(np.column_stack((radius * np.cos(angle), radius * np.sin(angle))))
    return np.concatenate(offsets)


@dataclass(frozen=True)
class SamplingConfig:
    """Super-sampling settings.

    Attributes:
        samples: Rays per sampled point (super-sampling is on when > 1)
        size: Side length of the sampling area
        pattern: Distribution of the samples
    """
    samples: int = 1
    size: float = 0.5
    pattern: SamplingPattern = SamplingPattern.JITTERED

    def __post_init__(self):
        if self.samples < 1:
            raise ValueError(f"Anti-aliasing samples must be at least 1, got {self.samples}")
        if self.size <= 0:
            raise ValueError(f"Sampling size must be positive, got {self.size}")

    @property
    def enabled(self) -> bool:
        return self.samples > 1
