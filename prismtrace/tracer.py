"""
Ray tracer module - the heart of the renderer.

Implements Whitted-style recursive shading:
- Local effects: emission, Phong diffuse and specular per light
- Shadows with partial transparency of occluders
- Global effects: mirror reflection and pass-through transparency
- Recursion bounded by depth and by cumulative attenuation
- Optional super-sampling around the first hit point
"""

from __future__ import annotations
from abc import ABC, abstractmethod
import logging
from typing import Optional

from .vec3 import Vec3, Color, BLACK, align_zero
from .ray import Ray
from .scene import Scene
from .shapes import Intersection
from .lights import LightSource
from .sampling import SamplingConfig
from .supersampling import SuperSampler

logger = logging.getLogger(__name__)


MAX_CALC_COLOR_LEVEL = 10
MIN_CALC_COLOR_K = 0.001
INITIAL_K = Vec3(1.0, 1.0, 1.0)


class RayTracer(ABC):
    """Anything that can turn a ray into a color."""

    def __init__(self, scene: Scene):
        self.scene = scene

    @abstractmethod
    def trace_ray(self, ray: Ray) -> Color:
        """Compute the color seen along a ray."""
        pass


class SimpleRayTracer(RayTracer):
    """Recursive Whitted ray tracer."""

    def __init__(self, scene: Scene, max_level: int = MAX_CALC_COLOR_LEVEL):
        """Create a ray tracer for a scene.

        Args:
            scene: The scene to render
            max_level: Maximum recursion depth for reflected/refracted rays
        """
        super().__init__(scene)
        if max_level < 1:
            raise ValueError(f"Recursion depth must be at least 1, got {max_level}")
        self.max_level = max_level
        self._sampling_config: Optional[SamplingConfig] = None
        self._sampler: Optional[SuperSampler] = None

    @property
    def sampling_config(self) -> Optional[SamplingConfig]:
        return self._sampling_config

    def set_sampling_config(self, config: Optional[SamplingConfig]) -> None:
        """Configure super-sampling. Must be called before rendering starts.

        A sampler is created only when the configuration asks for more
        than one sample.
        """
        self._sampling_config = config
        if config is not None and config.enabled:
            self._sampler = SuperSampler(config.samples, config.size, config.pattern)
            logger.debug("Super-sampling enabled: %s", self._sampler)
        else:
            self._sampler = None

    def trace_ray(self, ray: Ray) -> Color:
        """Compute the color seen along a ray.

        Returns the background color on a miss; otherwise the ambient light
        plus the recursive shading of the closest hit (averaged over the
        sample rays when super-sampling is enabled).

        Raises:
            ValueError: If the ray is None
        """
        if ray is None:
            raise ValueError("Ray cannot be None")

        intersection = self._find_closest_intersection(ray)
        if intersection is None:
            return self.scene.background

        if self._sampler is not None:
            return self._trace_sampled(ray, intersection)
        return self._calc_color(intersection, ray)

    def _trace_sampled(self, ray: Ray, intersection: Intersection) -> Color:
        """Average the colors of sample rays spread around the hit point."""
        colors = []
        for sample_ray in self._sampler.generate_sample_rays(intersection.point, ray):
            sample_hit = self._find_closest_intersection(sample_ray)
            if sample_hit is None:
                colors.append(self.scene.background)
            else:
                colors.append(self._calc_color(sample_hit, sample_ray))
        return self._sampler.average_color(colors)

    def _find_closest_intersection(self, ray: Ray) -> Optional[Intersection]:
        return ray.closest_intersection(self.scene.geometries.find_intersections(ray))

    def _calc_color(self, intersection: Intersection, ray: Ray) -> Color:
        return (
            self._calc_color_recursive(intersection, ray, self.max_level, INITIAL_K)
            + self.scene.ambient_light.intensity
        )

    def _calc_color_recursive(self, intersection: Intersection, ray: Ray, level: int, k: Vec3) -> Color:
        # Out of depth, or the contribution no longer matters
        if level == 0 or k.lower_than(MIN_CALC_COLOR_K):
            return BLACK

        return (
            self._calc_local_effects(intersection, ray, k)
            + self._calc_global_effects(intersection, ray, level, k)
        )

    def _calc_local_effects(self, intersection: Intersection, ray: Ray, k: Vec3) -> Color:
        geometry = intersection.geometry
        point = intersection.point
        color = geometry.emission

        v = ray.direction
        n = geometry.get_normal(point)
        nv = align_zero(n.dot(v))
        if nv == 0:
            # Grazing view: only emission
            return color

        material = geometry.material
        for light in self.scene.lights:
            l = light.get_direction(point)
            nl = align_zero(n.dot(l))

            # Light and viewer must be on the same side of the surface
            if nl * nv <= 0:
                continue

            ktr = self._transparency(intersection, light, l, n)
            if (ktr * k).lower_than(MIN_CALC_COLOR_K):
                continue

            light_intensity = light.get_intensity(point) * ktr
            color = (
                color
                + self._calc_diffuse(material.kd, nl, light_intensity)
                + self._calc_specular(material.ks, n, l, nl, v, light_intensity, material.shininess)
            )
        return color

    @staticmethod
    def _calc_diffuse(kd: Vec3, nl: float, light_intensity: Color) -> Color:
        return light_intensity * (kd * abs(nl))

    @staticmethod
    def _calc_specular(
        ks: Vec3,
        n: Vec3,
        l: Vec3,
        nl: float,
        v: Vec3,
        light_intensity: Color,
        shininess: int
    ) -> Color:
        r = l - n * (2 * nl)
        minus_vr = -align_zero(v.dot(r))
        if minus_vr <= 0:
            return BLACK
        return light_intensity * (ks * (minus_vr ** shininess))

    def _transparency(self, intersection: Intersection, light: LightSource, l: Vec3, n: Vec3) -> Vec3:
        """Fraction of the light that reaches the point through occluders.

        Returns (1, 1, 1) when unobstructed and (0, 0, 0) once the product
        of the occluders' transmittance drops below the threshold.
        """
        point = intersection.point
        light_distance = light.get_distance(point)
        shadow_ray = Ray(point, -l, n)

        ktr = INITIAL_K
        for occluder in self.scene.geometries.find_intersections(shadow_ray, light_distance):
            if align_zero(occluder.point.distance(point) - light_distance) >= 0:
                continue
            ktr = ktr * occluder.geometry.material.kt
            if ktr.lower_than(MIN_CALC_COLOR_K):
                return BLACK
        return ktr

    def _calc_global_effects(self, intersection: Intersection, ray: Ray, level: int, k: Vec3) -> Color:
        geometry = intersection.geometry
        material = geometry.material
        v = ray.direction
        n = geometry.get_normal(intersection.point)

        color = BLACK
        if material.is_reflective:
            reflected = self._construct_reflected_ray(intersection, v, n)
            color = color + self._calc_global_effect(reflected, level, k, material.kr)
        if material.is_transparent:
            refracted = self._construct_refracted_ray(intersection, v, n)
            color = color + self._calc_global_effect(refracted, level, k, material.kt)
        return color

    def _calc_global_effect(self, ray: Ray, level: int, k: Vec3, kx: Vec3) -> Color:
        kkx = k * kx
        if kkx.lower_than(MIN_CALC_COLOR_K):
            return BLACK

        intersection = self._find_closest_intersection(ray)
        if intersection is None:
            return self.scene.background * kx
        return self._calc_color_recursive(intersection, ray, level - 1, kkx) * kx

    @staticmethod
    def _construct_reflected_ray(intersection: Intersection, direction: Vec3, n: Vec3) -> Ray:
        return Ray(intersection.point, direction.reflect(n), n)

    @staticmethod
    def _construct_refracted_ray(intersection: Intersection, direction: Vec3, n: Vec3) -> Ray:
        # Pass-through transparency: no bending by index of refraction
        return Ray(intersection.point, direction, n)
