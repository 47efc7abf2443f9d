"""
Light sources for the ray tracer.

Implements:
- Ambient light (constant fill added to every hit)
- Directional lights (sun)
- Point lights with constant/linear/quadratic attenuation
- Spot lights (point lights with a preferred axis)
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import math

from .vec3 import Vec3, Point3, Color, BLACK


class AmbientLight:
    """Uniform ambient illumination: intensity scaled by an ambient factor."""

    NONE: AmbientLight

    def __init__(self, intensity: Color, ka: float = 1.0):
        """Create an ambient light.

        Args:
            intensity: Base color of the ambient light
            ka: Ambient attenuation factor
        """
        self.intensity = intensity * ka

    def __repr__(self) -> str:
        return f"AmbientLight(intensity={self.intensity})"


AmbientLight.NONE = AmbientLight(BLACK, 0.0)


class LightSource(ABC):
    """Abstract base class for direct light sources."""

    @abstractmethod
    def get_intensity(self, point: Point3) -> Color:
        """Light intensity arriving at the point."""
        pass

    @abstractmethod
    def get_direction(self, point: Point3) -> Vec3:
        """Unit vector from the light toward the point."""
        pass

    @abstractmethod
    def get_distance(self, point: Point3) -> float:
        """Distance from the light to the point (inf for directional lights)."""
        pass


class DirectionalLight(LightSource):
    """A directional light (like the sun).

    Directional lights have parallel rays and no falloff.
    """

    def __init__(self, intensity: Color, direction: Vec3):
        """Create a directional light.

        Args:
            intensity: Color of the light
            direction: Direction the light travels in
        """
        self.intensity = intensity
        self.direction = direction.normalize()

    def get_intensity(self, point: Point3) -> Color:
        return self.intensity

    def get_direction(self, point: Point3) -> Vec3:
        return self.direction

    def get_distance(self, point: Point3) -> float:
        return math.inf


class PointLight(LightSource):
    """A point light source.

    Point lights emit light equally in all directions from a single point,
    attenuated by kc + kl*d + kq*d².
    """

    def __init__(
        self,
        intensity: Color,
        position: Point3,
        kc: float = 1.0,
        kl: float = 0.0,
        kq: float = 0.0
    ):
        """Create a point light.

        Args:
            intensity: Color of the light
            position: Position of the light
            kc: Constant attenuation
            kl: Linear attenuation
            kq: Quadratic attenuation
        """
        if kc < 0 or kl < 0 or kq < 0 or kc + kl + kq == 0:
            raise ValueError("Attenuation factors must be non-negative and not all zero")
        self.intensity = intensity
        self.position = position
        self.kc = kc
        self.kl = kl
        self.kq = kq

    def _attenuation(self, point: Point3) -> float:
        d = self.get_distance(point)
        return self.kc + self.kl * d + self.kq * d * d

    def get_intensity(self, point: Point3) -> Color:
        return self.intensity / self._attenuation(point)

    def get_direction(self, point: Point3) -> Vec3:
        return (point - self.position).normalize()

    def get_distance(self, point: Point3) -> float:
        return point.distance(self.position)


class SpotLight(PointLight):
    """A point light that shines mainly along an axis.

    Intensity is scaled by max(0, axis·l)^narrow_beam where l is the
    direction from the light toward the lit point.
    """

    def __init__(
        self,
        intensity: Color,
        position: Point3,
        direction: Vec3,
        kc: float = 1.0,
        kl: float = 0.0,
        kq: float = 0.0,
        narrow_beam: float = 1.0
    ):
        super().__init__(intensity, position, kc, kl, kq)
        self.direction = direction.normalize()
        self.narrow_beam = narrow_beam

    def get_intensity(self, point: Point3) -> Color:
        cos_angle = max(0.0, self.direction.dot(self.get_direction(point)))
        return super().get_intensity(point) * (cos_angle ** self.narrow_beam)
