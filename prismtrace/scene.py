"""
Scene container: geometry, lights, ambient light and background color.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import List

from .vec3 import Color, BLACK
from .shapes import Geometries
from .lights import AmbientLight, LightSource


@dataclass
class Scene:
    """Everything a ray tracer needs to shade a ray."""
    name: str
    background: Color = field(default_factory=lambda: BLACK)
    ambient_light: AmbientLight = AmbientLight.NONE
    geometries: Geometries = field(default_factory=Geometries)
    lights: List[LightSource] = field(default_factory=list)

    def __repr__(self) -> str:
        return (
            f"Scene(name={self.name!r}, objects={len(self.geometries)}, "
            f"lights={len(self.lights)})"
        )
