"""Core math utilities and sphere-tracing engine for terminal SDF graphics."""

from __future__ import annotations

import asyncio
import math
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import List, Optional, Protocol, Tuple, Union, cast


@dataclass(frozen=True, slots=True)
class Vec3:
    """Lightweight immutable 3D vector."""

    x: float
    y: float
    z: float

    def __add__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x + other.x, self.y + other.y, self.z + other.z)

    def __sub__(self, other: "Vec3") -> "Vec3":
        return Vec3(self.x - other.x, self.y - other.y, self.z - other.z)

    def __mul__(self, scalar: float) -> "Vec3":
        if not isinstance(scalar, (int, float)):
            raise TypeError("Vec3 can only be multiplied by a scalar")
        return Vec3(self.x * scalar, self.y * scalar, self.z * scalar)

    def __rmul__(self, scalar: float) -> "Vec3":
        return self.__mul__(scalar)

    def __truediv__(self, scalar: float) -> "Vec3":
        if scalar == 0:
            raise ZeroDivisionError("Division by zero in Vec3")
        return Vec3(self.x / scalar, self.y / scalar, self.z / scalar)

    def __neg__(self) -> "Vec3":
        return Vec3(-self.x, -self.y, -self.z)

    def __abs__(self) -> "Vec3":
        return Vec3(abs(self.x), abs(self.y), abs(self.z))

    def dot(self, other: "Vec3") -> float:
        return self.x * other.x + self.y * other.y + self.z * other.z

    def cross(self, other: "Vec3") -> "Vec3":
        return Vec3(
            self.y * other.z - self.z * other.y,
            self.z * other.x - self.x * other.z,
            self.x * other.y - self.y * other.x,
        )

    def maximum(self, other: "Vec3") -> "Vec3":
        return Vec3(max(self.x, other.x), max(self.y, other.y), max(self.z, other.z))

    def minimum(self, other: "Vec3") -> "Vec3":
        return Vec3(min(self.x, other.x), min(self.y, other.y), min(self.z, other.z))

    def max_component(self) -> float:
        return max(self.x, self.y, self.z)

    def length(self) -> float:
        return math.sqrt(self.dot(self))

    def length_squared(self) -> float:
        return self.dot(self)

    def normalized(self, fallback: Optional["Vec3"] = None) -> "Vec3":
        """Return the unit vector, or ``fallback`` (+Z by default) when degenerate."""
        length = self.length()
        if length <= 1e-8 or not math.isfinite(length):
            return fallback if fallback is not None else Vec3(0.0, 0.0, 1.0)
        return self / length


ORIGIN = Vec3(0.0, 0.0, 0.0)

Row4 = Tuple[float, float, float, float]


@dataclass(frozen=True, slots=True)
class Mat4:
    """Row-major homogeneous 4x4 matrix acting on column vectors."""

    rows: Tuple[Row4, Row4, Row4, Row4]

    @classmethod
    def identity(cls) -> "Mat4":
        return cls(
            (
                (1.0, 0.0, 0.0, 0.0),
                (0.0, 1.0, 0.0, 0.0),
                (0.0, 0.0, 1.0, 0.0),
                (0.0, 0.0, 0.0, 1.0),
            )
        )

    @classmethod
    def translation(cls, offset: Vec3) -> "Mat4":
        return cls(
            (
                (1.0, 0.0, 0.0, offset.x),
                (0.0, 1.0, 0.0, offset.y),
                (0.0, 0.0, 1.0, offset.z),
                (0.0, 0.0, 0.0, 1.0),
            )
        )

    @classmethod
    def rotation_x(cls, angle: float) -> "Mat4":
        c, s = math.cos(angle), math.sin(angle)
        return cls(
            (
                (1.0, 0.0, 0.0, 0.0),
                (0.0, c, -s, 0.0),
                (0.0, s, c, 0.0),
                (0.0, 0.0, 0.0, 1.0),
            )
        )

    @classmethod
    def rotation_y(cls, angle: float) -> "Mat4":
        c, s = math.cos(angle), math.sin(angle)
        return cls(
            (
                (c, 0.0, s, 0.0),
                (0.0, 1.0, 0.0, 0.0),
                (-s, 0.0, c, 0.0),
                (0.0, 0.0, 0.0, 1.0),
            )
        )

    @classmethod
    def rotation_z(cls, angle: float) -> "Mat4":
        c, s = math.cos(angle), math.sin(angle)
        return cls(
            (
                (c, -s, 0.0, 0.0),
                (s, c, 0.0, 0.0),
                (0.0, 0.0, 1.0, 0.0),
                (0.0, 0.0, 0.0, 1.0),
            )
        )

    def __matmul__(self, other: "Mat4") -> "Mat4":
        a, b = self.rows, other.rows
        rows = tuple(
            tuple(sum(a[i][k] * b[k][j] for k in range(4)) for j in range(4))
            for i in range(4)
        )
        return Mat4(rows)  # type: ignore[arg-type]

    def transform_point(self, point: Vec3) -> Vec3:
        r0, r1, r2, _ = self.rows
        return Vec3(
            r0[0] * point.x + r0[1] * point.y + r0[2] * point.z + r0[3],
            r1[0] * point.x + r1[1] * point.y + r1[2] * point.z + r1[3],
            r2[0] * point.x + r2[1] * point.y + r2[2] * point.z + r2[3],
        )

    def transform_direction(self, direction: Vec3) -> Vec3:
        r0, r1, r2, _ = self.rows
        return Vec3(
            r0[0] * direction.x + r0[1] * direction.y + r0[2] * direction.z,
            r1[0] * direction.x + r1[1] * direction.y + r1[2] * direction.z,
            r2[0] * direction.x + r2[1] * direction.y + r2[2] * direction.z,
        )

    def inverted(self) -> "Mat4":
        """Invert an affine matrix (linear part plus translation)."""
        (a, b, c, tx), (d, e, f, ty), (g, h, i, tz), bottom = self.rows
        if bottom != (0.0, 0.0, 0.0, 1.0):
            raise ValueError("Mat4.inverted only supports affine matrices")

        co_a = e * i - f * h
        co_b = f * g - d * i
        co_c = d * h - e * g
        det = a * co_a + b * co_b + c * co_c
        if abs(det) <= 1e-12:
            raise ValueError("Matrix is singular and cannot be inverted")

        inv_det = 1.0 / det
        m00, m01, m02 = co_a * inv_det, (c * h - b * i) * inv_det, (b * f - c * e) * inv_det
        m10, m11, m12 = co_b * inv_det, (a * i - c * g) * inv_det, (c * d - a * f) * inv_det
        m20, m21, m22 = co_c * inv_det, (b * g - a * h) * inv_det, (a * e - b * d) * inv_det
        return Mat4(
            (
                (m00, m01, m02, -(m00 * tx + m01 * ty + m02 * tz)),
                (m10, m11, m12, -(m10 * tx + m11 * ty + m12 * tz)),
                (m20, m21, m22, -(m20 * tx + m21 * ty + m22 * tz)),
                (0.0, 0.0, 0.0, 1.0),
            )
        )


class DistanceField(Protocol):
    """Anything that reports a signed distance to its nearest surface."""

    def distance(self, point: Vec3) -> float: ...


class FrameSink(Protocol):
    """Device that receives a frame one glyph at a time."""

    @property
    def aspect_correction(self) -> float: ...

    def size_tuple(self) -> Tuple[int, int]: ...

    def emit_glyph(self, glyph: str) -> None: ...

    def emit_row_end(self) -> None: ...

    def flush(self) -> None: ...


@dataclass(frozen=True, slots=True)
class Scene:
    """Everything needed to draw a single frame.

    ``light_direction`` points from the light toward the scene.
    """

    field: DistanceField
    camera_position: Vec3
    look_at: Vec3
    up: Vec3
    camera_size: float
    light_direction: Vec3


@dataclass(frozen=True, slots=True)
class CameraBasis:
    origin: Vec3
    forward: Vec3
    right: Vec3
    up: Vec3
    window_width: float
    window_height: float


GLYPH_RAMP = " .:-=+*tfLCG08@"

SURFACE_EPSILON = 0.01
MAX_STEPS = 100
MAX_DISTANCE = 100.0
NORMAL_EPSILON = 1e-4
AMBIENT = 0.1
DIFFUSE = 0.9
ASPECT_CORRECTION = 0.5


def estimate_normal(field: DistanceField, point: Vec3, epsilon: float = NORMAL_EPSILON) -> Vec3:
    """Central-difference gradient of ``field`` at ``point``, normalised."""
    dx = Vec3(epsilon, 0.0, 0.0)
    dy = Vec3(0.0, epsilon, 0.0)
    dz = Vec3(0.0, 0.0, epsilon)
    gradient = Vec3(
        field.distance(point + dx) - field.distance(point - dx),
        field.distance(point + dy) - field.distance(point - dy),
        field.distance(point + dz) - field.distance(point - dz),
    )
    return gradient.normalized(Vec3(0.0, 1.0, 0.0))


def lambert(normal: Vec3, light_direction: Vec3) -> float:
    return max(normal.dot(-light_direction), 0.0)


def march(
    field: DistanceField,
    origin: Vec3,
    direction: Vec3,
    light_direction: Vec3,
    *,
    surface_epsilon: float = SURFACE_EPSILON,
    max_steps: int = MAX_STEPS,
    max_distance: float = MAX_DISTANCE,
    normal_epsilon: float = NORMAL_EPSILON,
    ambient: float = AMBIENT,
    diffuse: float = DIFFUSE,
) -> float:
    """Sphere-trace a ray and return the shaded intensity in ``[0, 1]``.

    Rays that escape past ``max_distance`` or run out of steps return 0.0.
    """
    point = origin
    travelled = 0.0
    steps = 0
    while True:
        distance = field.distance(point)
        if distance < surface_epsilon:
            normal = estimate_normal(field, point, normal_epsilon)
            shade = ambient + lambert(normal, light_direction) * diffuse
            return max(0.0, min(1.0, shade))

        point = point + direction * distance
        travelled += distance
        steps += 1
        if steps >= max_steps or travelled >= max_distance:
            return 0.0


def glyph_for_intensity(intensity: float) -> str:
    if not math.isfinite(intensity):
        intensity = 0.0
    clamped = max(0.0, min(1.0, intensity))
    idx = int(math.floor(clamped * len(GLYPH_RAMP)))
    idx = max(0, min(len(GLYPH_RAMP) - 1, idx))
    return GLYPH_RAMP[idx]


def camera_window(
    camera_size: float, width: int, height: int, aspect_correction: float
) -> Tuple[float, float]:
    """World-space extent of the view window for a ``width`` x ``height`` grid."""
    if width >= height:
        return camera_size * (width / height) * aspect_correction, camera_size
    return camera_size, camera_size * (height / width) / aspect_correction


class RenderEngine:
    """Sphere-tracing renderer producing glyph frames for text output."""

    def __init__(
        self,
        width: int,
        height: int,
        *,
        aspect_correction: float = ASPECT_CORRECTION,
        row_separator: str = "",
        surface_epsilon: float = SURFACE_EPSILON,
        max_steps: int = MAX_STEPS,
        max_distance: float = MAX_DISTANCE,
        normal_epsilon: float = NORMAL_EPSILON,
        ambient: float = AMBIENT,
        diffuse: float = DIFFUSE,
    ) -> None:
        if width < 1 or height < 1:
            raise ValueError("RenderEngine requires width and height >= 1")
        if aspect_correction <= 0.0:
            raise ValueError("aspect_correction must be positive")
        self.width = width
        self.height = height
        self.aspect_correction = aspect_correction
        self.row_separator = row_separator
        self._surface_epsilon = surface_epsilon
        self._max_steps = max(1, int(max_steps))
        self._max_distance = max_distance
        self._normal_epsilon = normal_epsilon
        self._ambient = ambient
        self._diffuse = diffuse
        self._async_chunk_rows = 16

    def resize(self, width: int, height: int) -> None:
        if width < 1 or height < 1:
            return
        self.width = width
        self.height = height

    def camera_basis(self, scene: Scene) -> CameraBasis:
        forward = (scene.look_at - scene.camera_position).normalized(Vec3(0.0, 0.0, -1.0))
        right = forward.cross(scene.up).normalized(Vec3(1.0, 0.0, 0.0))
        up = forward.cross(right).normalized(Vec3(0.0, 1.0, 0.0))
        window_width, window_height = camera_window(
            scene.camera_size, self.width, self.height, self.aspect_correction
        )
        return CameraBasis(scene.camera_position, forward, right, up, window_width, window_height)

    def ray_origin(self, basis: CameraBasis, pixel_x: int, pixel_y: int) -> Vec3:
        offset_x = basis.right * (basis.window_width * (pixel_x / self.width - 0.5))
        offset_y = basis.up * (basis.window_height * (pixel_y / self.height - 0.5))
        return basis.origin + offset_x + offset_y

    def intensity_at(self, scene: Scene, basis: CameraBasis, pixel_x: int, pixel_y: int) -> float:
        return march(
            scene.field,
            self.ray_origin(basis, pixel_x, pixel_y),
            basis.forward,
            scene.light_direction,
            surface_epsilon=self._surface_epsilon,
            max_steps=self._max_steps,
            max_distance=self._max_distance,
            normal_epsilon=self._normal_epsilon,
            ambient=self._ambient,
            diffuse=self._diffuse,
        )

    def render(self, scene: Scene, *, output_format: str = "text") -> Union[str, List[str]]:
        basis = self.camera_basis(scene)
        _, rows = self._compute_chunk(scene, basis, 0, self.height)
        return self._finish(rows, output_format)

    async def render_async(
        self,
        scene: Scene,
        *,
        output_format: str = "text",
        executor: ThreadPoolExecutor | None = None,
        chunk_rows: int | None = None,
    ) -> Union[str, List[str]]:
        basis = self.camera_basis(scene)
        height = self.height
        chunk_size = chunk_rows if chunk_rows is not None else self._async_chunk_rows
        chunk_size = max(1, int(chunk_size))

        loop = asyncio.get_running_loop()
        local_executor = executor
        created_executor = False
        if local_executor is None:
            local_executor = ThreadPoolExecutor(max_workers=4)
            created_executor = True

        try:
            tasks = [
                loop.run_in_executor(
                    local_executor,
                    self._compute_chunk,
                    scene,
                    basis,
                    y_start,
                    min(height, y_start + chunk_size),
                )
                for y_start in range(0, height, chunk_size)
            ]
            results = await asyncio.gather(*tasks)
        finally:
            if created_executor and local_executor is not None:
                local_executor.shutdown(wait=True)

        results.sort(key=lambda item: item[0])
        rows: List[str] = []
        for _, chunk in results:
            rows.extend(chunk)
        return self._finish(rows, output_format)

    def render_to(self, scene: Scene, sink: FrameSink) -> None:
        """Stream a frame into ``sink``, adopting its current size and aspect."""
        width, height = sink.size_tuple()
        if width < 1 or height < 1:
            sink.flush()
            return
        self.aspect_correction = sink.aspect_correction
        self.resize(width, height)

        basis = self.camera_basis(scene)
        for y in range(self.height):
            for x in range(self.width):
                sink.emit_glyph(glyph_for_intensity(self.intensity_at(scene, basis, x, y)))
            sink.emit_row_end()
        sink.flush()

    # Internal helpers -------------------------------------------------

    def _compute_chunk(
        self, scene: Scene, basis: CameraBasis, y_start: int, y_end: int
    ) -> Tuple[int, List[str]]:
        intensity_at = self.intensity_at
        to_glyph = glyph_for_intensity
        width = self.width

        rows: List[str] = []
        for y in range(y_start, y_end):
            rows.append("".join(to_glyph(intensity_at(scene, basis, x, y)) for x in range(width)))
        return y_start, rows

    def _finish(self, rows: List[str], output_format: str) -> Union[str, List[str]]:
        if output_format == "rows":
            return rows
        if output_format == "text":
            return self.row_separator.join(rows)
        raise ValueError(f"Unsupported output_format '{output_format}'")


def render_scene(
    scene: Scene,
    width: int,
    height: int,
    aspect_correction: float = ASPECT_CORRECTION,
    *,
    row_separator: str = "",
) -> str:
    """Render ``scene`` once into a text buffer."""
    engine = RenderEngine(
        width, height, aspect_correction=aspect_correction, row_separator=row_separator
    )
    return cast(str, engine.render(scene))
