"""
Axis-Aligned Bounding Boxes for acceleration structures.
"""

from __future__ import annotations
import math

from .vec3 import Point3
from .ray import Ray


class AABB:
    """Axis-Aligned Bounding Box.

    Invariant: ``minimum <= maximum`` on every axis.
    """

    __slots__ = ('minimum', 'maximum')

    def __init__(self, minimum: Point3, maximum: Point3):
        """Create an AABB from corner points.

        Args:
            minimum: Corner with smallest x, y, z values
            maximum: Corner with largest x, y, z values
        """
        self.minimum = minimum
        self.maximum = maximum

    def hit(self, ray: Ray, t_min: float, t_max: float) -> bool:
        """Test if ray intersects this AABB using the slab method.

        Each axis narrows the running ``[t_min, t_max]`` interval; the box is
        missed as soon as the interval becomes empty.

        A direction component of exactly zero gets a signed infinite inverse
        instead of a division. If the origin then lies exactly on that slab's
        plane the slab parameter is NaN, which counts as a miss.
        """
        for axis in range(3):
            direction = ray.direction[axis]
            origin = ray.origin[axis]
            if direction != 0.0:
                inv_d = 1.0 / direction
            else:
                inv_d = math.copysign(math.inf, direction)

            t0 = (self.minimum[axis] - origin) * inv_d
            t1 = (self.maximum[axis] - origin) * inv_d
            if math.isnan(t0) or math.isnan(t1):
                return False

            if inv_d < 0:
                t0, t1 = t1, t0

            t_min = t0 if t0 > t_min else t_min
            t_max = t1 if t1 < t_max else t_max

            if t_max <= t_min:
                return False

        return True

    def contains(self, point: Point3) -> bool:
        """True when point lies inside or on the boundary of the box."""
        return all(
            self.minimum[axis] <= point[axis] <= self.maximum[axis]
            for axis in range(3)
        )

    @staticmethod
    def union(box0: AABB, box1: AABB) -> AABB:
        """Return the tightest AABB that contains both input boxes."""
        small = Point3(
            min(box0.minimum.x, box1.minimum.x),
            min(box0.minimum.y, box1.minimum.y),
            min(box0.minimum.z, box1.minimum.z)
        )
        big = Point3(
            max(box0.maximum.x, box1.maximum.x),
            max(box0.maximum.y, box1.maximum.y),
            max(box0.maximum.z, box1.maximum.z)
        )
        return AABB(small, big)

    def __repr__(self) -> str:
        return f"AABB(min={self.minimum}, max={self.maximum})"
