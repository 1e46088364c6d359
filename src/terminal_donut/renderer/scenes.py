"""Predefined animated scenes."""

from __future__ import annotations

import math
from typing import Callable, Dict, List

from .engine import ORIGIN, DistanceField, Mat4, Scene, Vec3
from .shapes import Box, Sphere, Torus, Transformed, Union

SceneFactory = Callable[[float], Scene]

DEFAULT_LIGHT = Vec3(1.0, -1.0, -1.0).normalized()
CAMERA_POSITION = Vec3(0.0, 0.0, 20.0)
WORLD_UP = Vec3(0.0, 1.0, 0.0)


def _tumbling_donut(time: float, major_radius: float, minor_radius: float) -> DistanceField:
    placement = Mat4.rotation_y(time * 0.7) @ Mat4.rotation_x(time)
    return Transformed.placed(placement, Torus(ORIGIN, major_radius, minor_radius))


def donut_scene(time: float) -> Scene:
    """Return a single torus tumbling about the X and Y axes."""

    return Scene(
        field=_tumbling_donut(time, 5.0, 2.0),
        camera_position=CAMERA_POSITION,
        look_at=ORIGIN,
        up=WORLD_UP,
        camera_size=18.0,
        light_direction=DEFAULT_LIGHT,
    )


def showcase_scene(time: float) -> Scene:
    """Return a donut with two orbiting moons and a spinning box in its hole."""

    fields: List[DistanceField] = [_tumbling_donut(time * 0.5, 6.0, 1.5)]

    for phase in (0.0, math.pi):
        angle = time * 1.3 + phase
        orbit = Vec3(9.0 * math.cos(angle), 2.0 * math.sin(angle * 2.0), 9.0 * math.sin(angle))
        fields.append(Sphere(orbit, 1.5))

    spin = Mat4.rotation_z(time * 1.1) @ Mat4.rotation_y(time * 1.7)
    fields.append(Transformed.placed(spin, Box(ORIGIN, Vec3(1.6, 1.6, 1.6))))

    return Scene(
        field=Union(fields),
        camera_position=CAMERA_POSITION,
        look_at=ORIGIN,
        up=WORLD_UP,
        camera_size=26.0,
        light_direction=DEFAULT_LIGHT,
    )


SCENES: Dict[str, SceneFactory] = {
    "donut": donut_scene,
    "showcase": showcase_scene,
}
