"""
Material coefficients for Phong-style local shading and recursive
reflection / transparency.

Every coefficient is a per-channel factor in [0, 1]:
- kd: diffuse reflectance
- ks: specular reflectance
- kr: mirror reflectivity (drives reflected rays)
- kt: transmittance (drives refracted rays and translucent shadows)
"""

from __future__ import annotations
from dataclasses import dataclass
from typing import Union
import numpy as np

from .vec3 import Vec3


Coefficient = Union[float, Vec3]


def _as_coefficient(value: Coefficient, name: str) -> Vec3:
    """Convert a scalar or Vec3 to a validated per-channel coefficient."""
    k = value if isinstance(value, Vec3) else Vec3.uniform(float(value))
    data = k.to_array()
    if np.any(data < 0.0) or np.any(data > 1.0):
        raise ValueError(f"Material coefficient {name} must be within [0, 1], got {k}")
    return k


@dataclass(frozen=True)
class Material:
    """Shading coefficients of a geometry.

    Scalars are broadcast to all three channels.
    """
    kd: Coefficient = 0.0
    ks: Coefficient = 0.0
    kr: Coefficient = 0.0
    kt: Coefficient = 0.0
    shininess: int = 0

    def __post_init__(self):
        for name in ('kd', 'ks', 'kr', 'kt'):
            object.__setattr__(self, name, _as_coefficient(getattr(self, name), name))
        if self.shininess < 0:
            raise ValueError(f"Shininess must be non-negative, got {self.shininess}")

    @property
    def is_reflective(self) -> bool:
        return not self.kr.is_zero_vector()

    @property
    def is_transparent(self) -> bool:
        return not self.kt.is_zero_vector()


DEFAULT_MATERIAL = Material()
