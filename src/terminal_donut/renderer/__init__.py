"""Sphere-traced signed distance fields rendered as terminal glyphs."""

from .engine import GLYPH_RAMP, Mat4, RenderEngine, Scene, Vec3, march, render_scene
from .scenes import SCENES, donut_scene, showcase_scene
from .shapes import Box, Sphere, Torus, Transformed, Union
from .terminal import BufferSink, TerminalController

__all__ = [
    "GLYPH_RAMP",
    "Mat4",
    "RenderEngine",
    "Scene",
    "Vec3",
    "march",
    "render_scene",
    "SCENES",
    "donut_scene",
    "showcase_scene",
    "Box",
    "Sphere",
    "Torus",
    "Transformed",
    "Union",
    "BufferSink",
    "TerminalController",
]
