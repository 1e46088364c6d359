import unittest

from terminal_donut.main import _build_frame_scene, _setup_runtime, parse_arguments
from terminal_donut.renderer.engine import Vec3
from terminal_donut.renderer.scenes import DEFAULT_LIGHT, donut_scene, showcase_scene


class RuntimeConfigTests(unittest.TestCase):
    def test_defaults(self) -> None:
        config = _setup_runtime(parse_arguments([]))
        self.assertIs(config.scene_factory, donut_scene)
        self.assertEqual(config.warnings, [])
        self.assertAlmostEqual(config.frame_duration, 1.0 / 30.0)
        self.assertIsNone(config.light)
        self.assertIsNone(config.camera_size)

    def test_invalid_values_are_clamped_with_warnings(self) -> None:
        args = parse_arguments(
            ["--fps", "0", "--size", "-3", "--aspect", "0", "--light", "0", "0", "0"]
        )
        config = _setup_runtime(args)
        self.assertEqual(config.fps, 1.0)
        self.assertIsNone(config.camera_size)
        self.assertEqual(config.aspect_correction, 0.5)
        self.assertEqual(config.light, DEFAULT_LIGHT)
        self.assertEqual(len(config.warnings), 4)

    def test_stream_disables_async(self) -> None:
        config = _setup_runtime(parse_arguments(["--async", "--stream"]))
        self.assertTrue(config.stream)
        self.assertFalse(config.async_mode)
        self.assertEqual(len(config.warnings), 1)

    def test_frame_scene_applies_overrides(self) -> None:
        args = parse_arguments(
            ["--scene", "showcase", "--size", "12", "--light", "0", "0", "-2", "--speed", "2"]
        )
        config = _setup_runtime(args)
        scene = _build_frame_scene(config, 0.5)
        reference = showcase_scene(1.0)
        self.assertEqual(scene.camera_size, 12.0)
        self.assertEqual(scene.light_direction, Vec3(0.0, 0.0, -1.0))
        probe = Vec3(3.0, 1.0, 2.0)
        self.assertAlmostEqual(scene.field.distance(probe), reference.field.distance(probe))


if __name__ == "__main__":
    unittest.main()
