"""
Bounding Volume Hierarchy (BVH) for accelerating ray-object intersection.

A BVH is a binary tree where every node holds the AABB of its two
children. Children are either primitives or further BVH nodes; a node over
a single primitive points both children at that same primitive, so there
is no separate leaf type.

The tree is built once, before rendering, and never modified afterwards,
which lets any number of worker threads traverse it without locking.
"""

from __future__ import annotations
import logging
from typing import List, Optional, Sequence

import numpy as np

from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


def _box_of(obj: Hittable) -> AABB:
    bbox = obj.bounding_box()
    if bbox is None:
        raise ConfigurationError(f"No bounding box for {obj!r} in BVH construction")
    return bbox


class BVHNode(Hittable):
    """A node in the Bounding Volume Hierarchy tree."""

    def __init__(
        self,
        objects: List[Hittable],
        start: int = 0,
        end: Optional[int] = None,
        rng: Optional[np.random.Generator] = None
    ):
        """Build a BVH over ``objects[start:end]``.

        The slice is reordered in place while partitioning.

        Args:
            objects: List of hittable objects
            start: Start index in the objects list
            end: End index (exclusive) in the objects list
            rng: Random source for the split axis choice

        Raises:
            ConfigurationError: If the span is empty or any object is unbounded
        """
        if end is None:
            end = len(objects)
        if rng is None:
            rng = np.random.default_rng()

        object_span = end - start
        if object_span <= 0:
            raise ConfigurationError("Cannot build a BVH node over no objects")

        axis = int(rng.integers(0, 3))

        def key(obj: Hittable) -> float:
            return _box_of(obj).minimum[axis]

        if object_span == 1:
            self.left = self.right = objects[start]

        elif object_span == 2:
            first, second = objects[start], objects[start + 1]
            if key(first) < key(second):
                self.left, self.right = first, second
            else:
                self.left, self.right = second, first

        else:
            objects[start:end] = sorted(objects[start:end], key=key)

            mid = start + object_span // 2
            self.left = BVHNode(objects, start, mid, rng)
            self.right = BVHNode(objects, mid, end, rng)

        self.bbox = AABB.union(_box_of(self.left), _box_of(self.right))

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        """Test ray intersection with BVH node.

        The right subtree is searched only up to the left hit's t, so any
        hit it returns is strictly closer than the left one.
        """
        if not self.bbox.hit(ray, t_min, t_max):
            return None

        hit_left = self.left.hit(ray, t_min, t_max)
        hit_right = self.right.hit(ray, t_min, hit_left.t if hit_left else t_max)

        if hit_right:
            return hit_right
        return hit_left

    def bounding_box(self) -> Optional[AABB]:
        """Return the bounding box for this node."""
        return self.bbox

    def depth(self) -> int:
        """Number of node levels below and including this one."""
        return 1 + max(
            child.depth() if isinstance(child, BVHNode) else 0
            for child in (self.left, self.right)
        )


def build_bvh(objects: Sequence[Hittable], rng: Optional[np.random.Generator] = None) -> BVHNode:
    """Convenience function to build a BVH from a sequence of hittables.

    The input is copied, so the caller's ordering is left untouched.

    Args:
        objects: Primitives to accelerate
        rng: Random source for split axis choices

    Returns:
        Root BVHNode
    """
    working = list(objects)
    root = BVHNode(working, 0, len(working), rng)
    logger.debug("Built BVH over %d objects (depth %d)", len(working), root.depth())
    return root
