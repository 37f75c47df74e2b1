"""
Light-transport estimator.

Resolves one camera ray to a color by following it through material
scattering events until it escapes to the sky, is absorbed, or runs out of
bounces.
"""

from __future__ import annotations
import math
from typing import Optional

import numpy as np

from .vec3 import Color
from .ray import Ray
from .shapes import Hittable

# Lower bound on hit distance; keeps a scattered ray from re-hitting the
# surface it left because of floating point error in the hit point.
SHADOW_ACNE_EPSILON = 0.001

SKY_HORIZON = Color(1.0, 1.0, 1.0)
SKY_ZENITH = Color(0.5, 0.7, 1.0)


def sky_color(ray: Ray) -> Color:
    """Vertical white-to-blue gradient seen by rays that escape the scene."""
    unit_direction = ray.direction.normalize()
    t = 0.5 * (unit_direction.y + 1.0)
    return SKY_HORIZON * (1.0 - t) + SKY_ZENITH * t


def ray_color(
    ray: Ray,
    scene: Hittable,
    max_bounces: int,
    rng: Optional[np.random.Generator] = None
) -> Color:
    """Estimate the light arriving along ``ray``.

    Iterative form of the recursive estimator: the attenuation of every
    scatter event is accumulated as a running product and applied to the
    background color once the path escapes.

    Args:
        ray: The ray to trace
        scene: Anything with a closest-hit ``hit`` query
        max_bounces: Number of surface interactions allowed; 0 yields black
        rng: Random source for material scattering

    Returns:
        The estimated color. Paths that are absorbed or run out of bounces
        contribute black.
    """
    throughput = Color(1.0, 1.0, 1.0)

    for _ in range(max_bounces):
        rec = scene.hit(ray, SHADOW_ACNE_EPSILON, math.inf)

        if rec is None:
            return throughput * sky_color(ray)

        if rec.material is None:
            # Unshaded geometry: visualise the normal
            return throughput * (rec.normal + Color(1, 1, 1)) * 0.5

        scatter = rec.material.scatter(ray, rec, rng)
        if scatter is None:
            return Color(0, 0, 0)

        throughput = throughput * scatter.attenuation
        ray = scatter.scattered_ray

    return Color(0, 0, 0)
