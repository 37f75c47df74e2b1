"""
Built-in scenes.

Each builder returns the primitive list a Scene is constructed from, so
callers decide between BVH and linear search.
"""

from __future__ import annotations
from typing import List, Optional

import numpy as np

from .vec3 import Vec3, Point3, Color
from .camera import Camera
from .shapes import Hittable, Sphere
from .materials import Lambertian, Metal, Dielectric


def demo_scene() -> List[Hittable]:
    """Ground plus one diffuse, one glass and one metal sphere."""
    ground = Lambertian(Color(0.5, 0.5, 0.5))

    return [
        Sphere(Point3(0, -1000, 0), 1000, ground),
        Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)),
        Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))),
        Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)),
    ]


def random_scene(rng: Optional[np.random.Generator] = None) -> List[Hittable]:
    """A field of small random spheres around three large ones.

    Small spheres sit on a 22x22 grid with random jitter: 80% diffuse, 15%
    metal, 5% glass. The area right next to the large metal sphere is kept
    clear.
    """
    if rng is None:
        rng = np.random.default_rng()

    objects: List[Hittable] = [
        Sphere(Point3(0, -1000, 0), 1000, Lambertian(Color(0.5, 0.5, 0.5)))
    ]
    clearing = Point3(4, 0.2, 0)

    for a in range(-11, 11):
        for b in range(-11, 11):
            choose_mat = rng.random()
            center = Point3(a + 0.9 * rng.random(), 0.2, b + 0.9 * rng.random())

            if (center - clearing).length() <= 0.9:
                continue

            if choose_mat < 0.8:
                albedo = Color.random(rng=rng) * Color.random(rng=rng)
                material = Lambertian(albedo)
            elif choose_mat < 0.95:
                albedo = Color.random(0.5, 1.0, rng)
                material = Metal(albedo, rng.uniform(0.0, 0.5))
            else:
                material = Dielectric(1.5)

            objects.append(Sphere(center, 0.2, material))

    objects.append(Sphere(Point3(0, 1, 0), 1.0, Dielectric(1.5)))
    objects.append(Sphere(Point3(-4, 1, 0), 1.0, Lambertian(Color(0.4, 0.2, 0.1))))
    objects.append(Sphere(Point3(4, 1, 0), 1.0, Metal(Color(0.7, 0.6, 0.5), 0.0)))

    return objects


SCENE_NAMES = ('demo', 'random')


def default_camera(aspect_ratio: float) -> Camera:
    """The three-quarter view used by both built-in scenes."""
    return Camera(
        look_from=Point3(13, 2, 3),
        look_at=Point3(0, 0, 0),
        vup=Vec3(0, 1, 0),
        vfov=20,
        aspect_ratio=aspect_ratio,
        aperture=0.1,
        focus_dist=10.0
    )
