"""Interactive entry point for the terminal SDF donut demo."""

from __future__ import annotations

import argparse
import asyncio
import dataclasses
import os
import platform
import sys
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional, Sequence, cast

from .renderer.engine import RenderEngine, Scene, Vec3
from .renderer.scenes import DEFAULT_LIGHT, SCENES, SceneFactory
from .renderer.terminal import TerminalController


def parse_arguments(argv: Optional[Sequence[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Sphere-traced ASCII shapes for your terminal")
    parser.add_argument(
        "--scene",
        type=str,
        default="donut",
        choices=sorted(SCENES),
        help="Which demo scene to render",
    )
    parser.add_argument("--fps", type=float, default=30.0, help="Target frames per second (default: 30)")
    parser.add_argument(
        "--frames",
        type=int,
        default=0,
        help="Run for a fixed number of frames (0 = infinite)",
    )
    parser.add_argument(
        "--speed",
        type=float,
        default=1.0,
        help="Multiplier for the animation clock",
    )
    parser.add_argument(
        "--size",
        type=float,
        default=None,
        help="Override the camera window size in world units",
    )
    parser.add_argument(
        "--aspect",
        type=float,
        default=0.5,
        help="Glyph width/height ratio of the terminal font (default: 0.5)",
    )
    parser.add_argument(
        "--light",
        type=float,
        nargs=3,
        metavar=("X", "Y", "Z"),
        default=None,
        help="Light direction, pointing from the light toward the scene",
    )
    parser.add_argument(
        "--async",
        dest="async_mode",
        action="store_true",
        help="Compute row chunks on a thread pool",
    )
    parser.add_argument(
        "--stream",
        action="store_true",
        help="Emit glyphs straight to the terminal sink instead of building a text buffer",
    )
    return parser.parse_args(argv)


def _scene_factory(name: str) -> SceneFactory:
    try:
        return SCENES[name]
    except KeyError as exc:  # pragma: no cover - safeguarded by argparse choices
        raise ValueError(f"Unknown scene '{name}'") from exc


def _ensure_light_vector(vector: tuple[float, float, float]) -> Vec3:
    vec = Vec3(*vector)
    if vec.length_squared() <= 1e-8:
        return DEFAULT_LIGHT
    return vec.normalized()


def _is_arm_platform() -> bool:
    machine = platform.machine().lower()
    return any(token in machine for token in ("arm", "aarch64", "arm64"))


@dataclass
class RuntimeConfig:
    warnings: list[str]
    scene_factory: SceneFactory
    fps: float
    frame_duration: float
    frames: int
    speed: float
    camera_size: Optional[float]
    aspect_correction: float
    light: Optional[Vec3]
    stream: bool
    async_mode: bool
    async_workers: int
    async_chunk_rows: int


def _setup_runtime(args: argparse.Namespace) -> RuntimeConfig:
    warnings: list[str] = []

    fps = max(1.0, args.fps)
    if fps != args.fps:
        warnings.append(f"FPS {args.fps} too low; using {fps}")

    light: Optional[Vec3] = None
    if args.light is not None:
        light = _ensure_light_vector(tuple(args.light))
        if Vec3(*args.light).length_squared() <= 1e-8:
            warnings.append("Light vector is zero; using the default light")

    camera_size: Optional[float] = args.size
    if camera_size is not None and camera_size <= 0.0:
        warnings.append(f"Camera size {camera_size} must be positive; using the scene default")
        camera_size = None

    aspect_correction = args.aspect
    if aspect_correction <= 0.0:
        warnings.append(f"Aspect correction {aspect_correction} must be positive; using 0.5")
        aspect_correction = 0.5

    async_mode = bool(getattr(args, "async_mode", False))
    stream = bool(getattr(args, "stream", False))
    if async_mode and stream:
        warnings.append("Streaming output renders serially; ignoring --async")
        async_mode = False

    cpu_count = os.cpu_count() or 2
    is_arm = _is_arm_platform()
    async_workers = max(2, cpu_count - 1 if is_arm else min(cpu_count, 4))
    async_chunk_rows = 8

    return RuntimeConfig(
        warnings=warnings,
        scene_factory=_scene_factory(args.scene),
        fps=fps,
        frame_duration=1.0 / fps,
        frames=max(0, args.frames),
        speed=args.speed,
        camera_size=camera_size,
        aspect_correction=aspect_correction,
        light=light,
        stream=stream,
        async_mode=async_mode,
        async_workers=async_workers,
        async_chunk_rows=async_chunk_rows,
    )


def _emit_warnings(warnings: Sequence[str]) -> None:
    if not warnings:
        return
    for warning in warnings:
        sys.stderr.write(f"[renderer] {warning}\n")
    sys.stderr.flush()


def _create_engine(width: int, height: int, config: RuntimeConfig) -> RenderEngine:
    return RenderEngine(
        width,
        height,
        aspect_correction=config.aspect_correction,
        row_separator="\n",
    )


def _build_frame_scene(config: RuntimeConfig, elapsed: float) -> Scene:
    scene = config.scene_factory(elapsed * config.speed)
    if config.camera_size is not None:
        scene = dataclasses.replace(scene, camera_size=config.camera_size)
    if config.light is not None:
        scene = dataclasses.replace(scene, light_direction=config.light)
    return scene


def _run_sync_loop(config: RuntimeConfig) -> None:
    controller = TerminalController(aspect_correction=config.aspect_correction)

    with controller as terminal:
        width, height = terminal.size_tuple()
        engine = _create_engine(width, height, config)
        start_time = time.perf_counter()
        frame_counter = 0

        try:
            while True:
                frame_start = time.perf_counter()
                if terminal.poll_keys():
                    break

                scene = _build_frame_scene(config, frame_start - start_time)
                if config.stream:
                    engine.render_to(scene, terminal)
                else:
                    width, height = terminal.size_tuple()
                    engine.resize(width, height)
                    terminal.draw(cast(str, engine.render(scene)))

                frame_counter += 1
                if config.frames and frame_counter >= config.frames:
                    break

                frame_time = time.perf_counter() - frame_start
                sleep_time = config.frame_duration - frame_time
                if sleep_time > 0:
                    time.sleep(sleep_time)
        except KeyboardInterrupt:  # pragma: no cover - interactive loop
            controller.restore()
            sys.stdout.write("\nInterrupted. Bye!\n")
            sys.stdout.flush()


async def _run_async_loop(config: RuntimeConfig) -> None:
    controller = TerminalController(aspect_correction=config.aspect_correction)

    try:
        with controller as terminal:
            width, height = terminal.size_tuple()
            engine = _create_engine(width, height, config)
            start_time = time.perf_counter()
            frame_counter = 0

            with ThreadPoolExecutor(max_workers=max(2, config.async_workers)) as executor:
                while True:
                    frame_start = time.perf_counter()
                    if terminal.poll_keys():
                        break

                    width, height = terminal.size_tuple()
                    engine.resize(width, height)
                    scene = _build_frame_scene(config, frame_start - start_time)
                    frame = await engine.render_async(
                        scene,
                        executor=executor,
                        chunk_rows=config.async_chunk_rows,
                    )
                    terminal.draw(cast(str, frame))

                    frame_counter += 1
                    if config.frames and frame_counter >= config.frames:
                        break

                    frame_time = time.perf_counter() - frame_start
                    sleep_time = config.frame_duration - frame_time
                    if sleep_time > 0:
                        await asyncio.sleep(sleep_time)
    except (KeyboardInterrupt, asyncio.CancelledError):  # pragma: no cover - interactive loop
        controller.restore()
        sys.stdout.write("\nInterrupted. Bye!\n")
        sys.stdout.flush()


def run(argv: Optional[Sequence[str]] = None) -> None:
    args = parse_arguments(argv)
    config = _setup_runtime(args)
    _emit_warnings(config.warnings)

    if config.async_mode:
        asyncio.run(_run_async_loop(config))
    else:
        _run_sync_loop(config)


def main() -> None:
    run()


if __name__ == "__main__":
    main()
