import unittest

from terminal_donut.renderer.engine import GLYPH_RAMP, RenderEngine, Vec3
from terminal_donut.renderer.scenes import SCENES, donut_scene, showcase_scene
from terminal_donut.renderer.shapes import Union


class SceneTests(unittest.TestCase):
    def test_registry_lists_every_scene(self) -> None:
        self.assertEqual(set(SCENES), {"donut", "showcase"})

    def test_light_is_unit_length(self) -> None:
        for factory in SCENES.values():
            scene = factory(0.0)
            self.assertAlmostEqual(scene.light_direction.length(), 1.0)

    def test_donut_hole_at_rest(self) -> None:
        scene = donut_scene(0.0)
        # At t=0 the ring faces the camera, so the centre sits in the hole.
        self.assertAlmostEqual(scene.field.distance(Vec3(0.0, 0.0, 0.0)), 3.0)
        self.assertAlmostEqual(scene.field.distance(Vec3(5.0, 0.0, 2.0)), 0.0)

    def test_showcase_is_a_union(self) -> None:
        scene = showcase_scene(1.0)
        self.assertIsInstance(scene.field, Union)
        self.assertEqual(len(scene.field), 4)

    def test_frames_change_over_time(self) -> None:
        engine = RenderEngine(48, 20, row_separator="\n")
        first = engine.render(donut_scene(0.0))
        later = engine.render(donut_scene(1.3))
        self.assertNotEqual(first, later)
        self.assertTrue(set(first) <= set(GLYPH_RAMP) | {"\n"})
        self.assertTrue(any(glyph in "LCG08@" for glyph in first))

    def test_showcase_renders_geometry(self) -> None:
        engine = RenderEngine(48, 20)
        frame = engine.render(showcase_scene(0.5))
        self.assertGreater(sum(1 for glyph in frame if glyph != " "), 0)


if __name__ == "__main__":
    unittest.main()
