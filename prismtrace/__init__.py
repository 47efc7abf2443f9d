"""
PrismTrace - A Python Whitted-style Ray Tracer

A recursive ray tracer with support for:
- Pinhole camera with a configurable view plane
- Phong local shading with translucent shadows
- Mirror reflection and pass-through transparency
- Jittered / random / spiral super-sampling
- Multi-threaded tile-based rendering
- PNG output
"""

__version__ = "0.1.0"
__author__ = "PrismTrace Team"

from .vec3 import Vec3, Point3, Color, is_zero, align_zero
from .ray import Ray
from .shapes import Intersection, Intersectable, Geometry, Sphere, Plane, Triangle, Geometries
from .materials import Material
from .lights import AmbientLight, LightSource, DirectionalLight, PointLight, SpotLight
from .scene import Scene
from .image_writer import ImageWriter, ImageWriteError
from .sampling import SamplingPattern, SamplingConfig
from .supersampling import TargetArea, SuperSampler
from .tracer import RayTracer, SimpleRayTracer
from .camera import Camera, CameraBuilder, CameraConfig, MissingConfigurationError
from .scene_parser import SceneParser, SceneParseError, load_scene, parse_scene
