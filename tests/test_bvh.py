"""Tests for BVH acceleration structure."""

import pytest
import math
import numpy as np

from lumentrace.vec3 import Vec3, Point3, Color
from lumentrace.ray import Ray
from lumentrace.shapes import Hittable, Sphere, HittableList
from lumentrace.materials import Lambertian
from lumentrace.bvh import BVHNode, build_bvh
from lumentrace.errors import ConfigurationError


class Unbounded(Hittable):
    """A primitive with no finite bounding box."""

    def hit(self, ray, t_min, t_max):
        return None

    def bounding_box(self):
        return None


class FixedAxis:
    """Random source that always chooses the same split axis."""

    def __init__(self, axis):
        self.axis = axis

    def integers(self, low, high=None, size=None):
        return self.axis


class TestBVHNode:
    """Test BVHNode class."""

    def test_single_object_aliases_both_children(self):
        sphere = Sphere(Point3(0, 0, 0), 1.0)
        node = BVHNode([sphere], 0, 1)

        assert node.left is sphere
        assert node.right is sphere
        assert node.bbox.minimum == Point3(-1, -1, -1)
        assert node.bbox.maximum == Point3(1, 1, 1)

    def test_two_objects_ordered_along_axis(self):
        low = Sphere(Point3(-2, 0, 0), 1.0)
        high = Sphere(Point3(2, 0, 0), 1.0)
        node = BVHNode([high, low], 0, 2, FixedAxis(0))

        assert node.left is low
        assert node.right is high

    def test_two_objects_with_equal_keys(self):
        a = Sphere(Point3(0, 0, -2), 1.0)
        b = Sphere(Point3(0, 0, 2), 1.0)
        node = BVHNode([a, b], 0, 2, FixedAxis(0))

        # Ties go to the second element first
        assert node.left is b
        assert node.right is a

    def test_many_objects(self):
        spheres = [Sphere(Point3(i, 0, 0), 0.5) for i in range(100)]
        node = BVHNode(spheres, 0, 100)

        assert isinstance(node.left, BVHNode)
        assert isinstance(node.right, BVHNode)
        assert node.bbox.minimum.x == pytest.approx(-0.5)
        assert node.bbox.maximum.x == pytest.approx(99.5)

    def test_midpoint_split(self):
        spheres = [Sphere(Point3(i, 0, 0), 0.25) for i in range(5)]
        node = BVHNode(list(reversed(spheres)), rng=FixedAxis(0))

        # Sorted along x, the left half holds the two lowest spheres
        assert node.left.bbox.maximum.x == pytest.approx(1.25)
        assert node.right.bbox.minimum.x == pytest.approx(1.75)

    def test_node_box_encloses_children(self):
        rng = np.random.default_rng(12)
        spheres = [
            Sphere(Vec3.random(-20, 20, rng), float(rng.uniform(0.1, 3)))
            for _ in range(40)
        ]
        root = BVHNode(spheres, rng=rng)

        def check(node):
            if not isinstance(node, BVHNode):
                return
            for child in (node.left, node.right):
                box = child.bounding_box()
                assert node.bbox.contains(box.minimum)
                assert node.bbox.contains(box.maximum)
                check(child)

        check(root)

    def test_subrange(self):
        spheres = [Sphere(Point3(i * 10, 0, 0), 1.0) for i in range(6)]
        node = BVHNode(spheres, 2, 4)
        assert node.bbox.minimum.x == pytest.approx(19.0)
        assert node.bbox.maximum.x == pytest.approx(31.0)

    def test_empty_span_rejected(self):
        with pytest.raises(ConfigurationError):
            BVHNode([], 0, 0)

    def test_unbounded_object_rejected(self):
        with pytest.raises(ConfigurationError):
            BVHNode([Unbounded()], 0, 1)

        with pytest.raises(ConfigurationError):
            BVHNode([Sphere(Point3(0, 0, 0), 1.0), Unbounded(), Sphere(Point3(3, 0, 0), 1.0)])

    def test_depth(self):
        assert BVHNode([Sphere(Point3(0, 0, 0), 1.0)]).depth() == 1
        spheres = [Sphere(Point3(i, 0, 0), 0.5) for i in range(8)]
        assert BVHNode(spheres).depth() == 3


class TestBVHHit:
    """Test BVH intersection queries."""

    def test_hit(self):
        spheres = [
            Sphere(Point3(0, 0, -5), 1.0),
            Sphere(Point3(3, 0, -5), 1.0),
            Sphere(Point3(-3, 0, -5), 1.0),
        ]
        bvh = build_bvh(spheres)

        rec = bvh.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), 0.001, float('inf'))
        assert rec is not None
        assert rec.t == pytest.approx(4.0)

    def test_miss(self):
        spheres = [Sphere(Point3(0, 0, -5), 1.0)]
        bvh = build_bvh(spheres)

        ray = Ray(Point3(0, 10, 0), Vec3(0, 0, -1))
        assert bvh.hit(ray, 0.001, float('inf')) is None

    def test_closest_of_overlapping(self):
        spheres = [Sphere(Point3(0, 0, -z), 1.0) for z in (20, 8, 14, 5, 11)]
        bvh = build_bvh(spheres)

        rec = bvh.hit(Ray(Point3(0, 0, 0), Vec3(0, 0, -1)), 0.001, math.inf)
        assert rec.t == pytest.approx(4.0)

    def test_material_preserved(self):
        red = Lambertian(Color(1, 0, 0))
        blue = Lambertian(Color(0, 0, 1))
        spheres = [
            Sphere(Point3(-3, 0, -5), 1.0, red),
            Sphere(Point3(3, 0, -5), 1.0, blue),
        ]
        bvh = build_bvh(spheres)

        rec = bvh.hit(Ray(Point3(3, 0, 0), Vec3(0, 0, -1)), 0.001, math.inf)
        assert rec.material is blue

    def test_matches_linear_search(self):
        rng = np.random.default_rng(2024)
        spheres = [
            Sphere(Vec3.random(-10, 10, rng), float(rng.uniform(0.2, 2.0)))
            for _ in range(60)
        ]
        bvh = build_bvh(spheres, np.random.default_rng(3))
        linear = HittableList(spheres)

        for _ in range(300):
            ray = Ray(Vec3.random(-15, 15, rng), Vec3.random_unit_vector(rng))
            expected = linear.hit(ray, 0.001, math.inf)
            actual = bvh.hit(ray, 0.001, math.inf)

            if expected is None:
                assert actual is None
            else:
                assert actual is not None
                assert actual.t == pytest.approx(expected.t)
                assert actual.point == expected.point

    def test_build_leaves_input_order(self):
        spheres = [Sphere(Point3(10 - i, 0, 0), 0.5) for i in range(10)]
        original = list(spheres)
        build_bvh(spheres)
        assert spheres == original
