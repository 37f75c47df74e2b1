"""
LumenTrace - A Python Path Tracer

An offline Monte-Carlo path tracer with:
- Spheres with Lambertian, metal and dielectric materials
- Bounding Volume Hierarchy acceleration
- A thin-lens camera with depth of field
- Multi-threaded per-pixel rendering with deterministic seeding
- Plain-text PPM and Pillow image output
"""

__version__ = "0.1.0"

from .vec3 import Vec3, Point3, Color
from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord, Sphere, HittableList
from .materials import Material, ScatterResult, Lambertian, Metal, Dielectric
from .bvh import BVHNode, build_bvh
from .scene import Scene
from .integrator import ray_color, sky_color
from .camera import Camera
from .renderer import Renderer, RenderSettings, render, get_platform_info
from .image import to_8bit, encode_ppm, write_ppm, save_image
from .scene_parser import SceneParser, load_scene, parse_scene
from .errors import LumenTraceError, ConfigurationError, SceneParseError, RenderError
