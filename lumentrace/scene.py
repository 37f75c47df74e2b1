"""
Scene: the single intersection query the renderer traces against.
"""

from __future__ import annotations
import logging
from typing import Iterable, Optional, Tuple

import numpy as np

from .ray import Ray
from .aabb import AABB
from .shapes import Hittable, HitRecord, HittableList
from .bvh import build_bvh
from .errors import ConfigurationError

logger = logging.getLogger(__name__)


class Scene(Hittable):
    """An immutable collection of primitives behind an acceleration structure.

    The scene consumes its primitives once at construction; nothing can be
    added afterwards. Tracing code depends only on ``hit`` and so is
    unaffected by whether a BVH or a flat list sits underneath.
    """

    def __init__(
        self,
        objects: Iterable[Hittable],
        accelerate: bool = True,
        rng: Optional[np.random.Generator] = None
    ):
        """Build a scene.

        Args:
            objects: Primitives, each carrying its material
            accelerate: Build a BVH (True) or search a flat list (False)
            rng: Random source for BVH construction

        Raises:
            ConfigurationError: If the scene is empty or a primitive is unbounded
        """
        self._objects: Tuple[Hittable, ...] = tuple(objects)
        if not self._objects:
            raise ConfigurationError("Scene contains no objects")

        if accelerate:
            self.root: Hittable = build_bvh(self._objects, rng)
        else:
            self.root = HittableList(self._objects)

        logger.info(
            "Scene ready: %d objects (%s)",
            len(self._objects), "BVH" if accelerate else "linear"
        )

    @property
    def objects(self) -> Tuple[Hittable, ...]:
        return self._objects

    def hit(self, ray: Ray, t_min: float, t_max: float) -> Optional[HitRecord]:
        return self.root.hit(ray, t_min, t_max)

    def bounding_box(self) -> Optional[AABB]:
        return self.root.bounding_box()

    def __len__(self) -> int:
        return len(self._objects)
