import math
import unittest

from terminal_donut.renderer.engine import Mat4, Vec3
from terminal_donut.renderer.shapes import Box, Sphere, Torus, Transformed, Union

SAMPLE_POINTS = (
    Vec3(0.0, 0.0, 0.0),
    Vec3(3.0, -1.0, 2.0),
    Vec3(-7.5, 4.2, 0.1),
    Vec3(12.0, 12.0, -12.0),
)


class PrimitiveTests(unittest.TestCase):
    def test_sphere_surface_centre_and_far_point(self) -> None:
        centre = Vec3(1.0, 2.0, 3.0)
        sphere = Sphere(centre, 4.0)
        for direction in (Vec3(1.0, 0.0, 0.0), Vec3(1.0, 1.0, 1.0), Vec3(-2.0, 0.5, 3.0)):
            on_surface = centre + direction.normalized() * 4.0
            self.assertAlmostEqual(sphere.distance(on_surface), 0.0, places=9)
        self.assertAlmostEqual(sphere.distance(centre), -4.0)
        self.assertAlmostEqual(sphere.distance(centre + Vec3(0.0, 10.0, 0.0)), 6.0)

    def test_box_exact_outside_and_inside(self) -> None:
        box = Box(Vec3(0.0, 0.0, 0.0), Vec3(1.0, 2.0, 3.0))
        self.assertAlmostEqual(box.distance(Vec3(1.0, 0.0, 0.0)), 0.0)
        self.assertAlmostEqual(box.distance(Vec3(0.0, 0.0, 0.0)), -1.0)
        self.assertAlmostEqual(box.distance(Vec3(4.0, 0.0, 0.0)), 3.0)
        self.assertAlmostEqual(box.distance(Vec3(4.0, 6.0, 0.0)), 5.0)
        self.assertLessEqual(box.distance(Vec3(0.5, 1.5, -2.5)), 0.0)

    def test_torus_lies_in_xy_plane(self) -> None:
        torus = Torus(Vec3(0.0, 0.0, 0.0), 5.0, 1.0)
        self.assertAlmostEqual(torus.distance(Vec3(6.0, 0.0, 0.0)), 0.0)
        self.assertAlmostEqual(torus.distance(Vec3(0.0, 4.0, 0.0)), 0.0)
        self.assertAlmostEqual(torus.distance(Vec3(5.0, 0.0, 1.0)), 0.0)
        self.assertAlmostEqual(torus.distance(Vec3(5.0, 0.0, 0.0)), -1.0)
        self.assertAlmostEqual(torus.distance(Vec3(0.0, 0.0, 0.0)), math.sqrt(25.0) - 1.0)
        self.assertAlmostEqual(torus.distance(Vec3(0.0, 0.0, 10.0)), math.hypot(5.0, 10.0) - 1.0)


class CombinatorTests(unittest.TestCase):
    def test_union_is_minimum_of_members(self) -> None:
        a = Sphere(Vec3(-3.0, 0.0, 0.0), 2.0)
        b = Box(Vec3(4.0, 1.0, 0.0), Vec3(1.0, 1.0, 1.0))
        union = Union([a, b])
        self.assertEqual(len(union), 2)
        for point in SAMPLE_POINTS:
            self.assertEqual(union.distance(point), min(a.distance(point), b.distance(point)))

    def test_empty_union_is_rejected(self) -> None:
        with self.assertRaises(ValueError):
            Union([])

    def test_translation_round_trip(self) -> None:
        inner = Torus(Vec3(0.0, 0.0, 0.0), 3.0, 1.0)
        offset = Vec3(2.0, -1.0, 4.0)
        moved = Transformed(Mat4.translation(-offset), inner)
        placed = Transformed.placed(Mat4.translation(offset), inner)
        for point in SAMPLE_POINTS:
            self.assertAlmostEqual(moved.distance(point), inner.distance(point - offset))
            self.assertAlmostEqual(placed.distance(point), inner.distance(point - offset))

    def test_placed_rotation_moves_surface(self) -> None:
        torus = Torus(Vec3(0.0, 0.0, 0.0), 5.0, 1.0)
        # A quarter turn about Y swings the ring into the YZ plane.
        turned = Transformed.placed(Mat4.rotation_y(math.pi / 2), torus)
        self.assertAlmostEqual(turned.distance(Vec3(0.0, 0.0, 6.0)), 0.0, places=9)
        self.assertAlmostEqual(turned.distance(Vec3(6.0, 0.0, 0.0)), math.hypot(5.0, 6.0) - 1.0, places=9)

    def test_nested_tree(self) -> None:
        tree = Union(
            [
                Transformed.placed(
                    Mat4.translation(Vec3(10.0, 0.0, 0.0)),
                    Union([Sphere(Vec3(0.0, 0.0, 0.0), 1.0), Sphere(Vec3(0.0, 3.0, 0.0), 1.0)]),
                ),
                Sphere(Vec3(-10.0, 0.0, 0.0), 2.0),
            ]
        )
        self.assertAlmostEqual(tree.distance(Vec3(10.0, 3.0, 0.0)), -1.0)
        self.assertAlmostEqual(tree.distance(Vec3(-10.0, 0.0, 0.0)), -2.0)


if __name__ == "__main__":
    unittest.main()
