"""Composition root.

Wires the config source, event bus, scene and both facades together and
drives a fixed number of frames. Without ``--gl`` nothing touches OpenGL,
which is handy to check buffer sizes and uniform updates::

    python -m wavemesh.app --frames 120 --geometry torus --resolution 24

With ``--gl`` every frame is also drawn into an offscreen OpenGL 3.3
context, and ``--snapshot`` keeps the last one::

    python -m wavemesh.app --gl --frames 30 --snapshot frame.png
"""

import argparse
import logging
import time
from pathlib import Path
from typing import Callable, Optional

from wavemesh.constants import TARGET_FPS, VIEWPORT_SIZE, WATER_PLANE_SEGMENTS
from wavemesh.core.clock import ElapsedClock
from wavemesh.core.config_loader import load_config_source
from wavemesh.core.events import EventBus, EventType
from wavemesh.core.scene_graph import Scene
from wavemesh.scene.mesh_generation import MeshGenerationFacade
from wavemesh.scene.water_surface import WaterSurfaceFacade

logger = logging.getLogger(__name__)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="Generate shape buffers and drive the wave uniforms",
    )
    parser.add_argument(
        "--config", type=Path, default=None, metavar="FILE",
        help="JSON file with initial control values (default: assets/config/controls.json)",
    )
    parser.add_argument("--geometry", default=None, help="Override the shape kind")
    parser.add_argument("--resolution", type=int, default=None, help="Override the resolution")
    parser.add_argument("--frames", type=int, default=TARGET_FPS, help="Frames to simulate")
    parser.add_argument(
        "--water-segments", type=int, default=WATER_PLANE_SEGMENTS,
        help="Subdivisions per side of the water plane",
    )
    parser.add_argument(
        "--gl", action="store_true",
        help="Also render each frame into an offscreen OpenGL context",
    )
    parser.add_argument(
        "--snapshot", type=Path, default=None, metavar="PNG",
        help="With --gl, save the last rendered frame",
    )
    return parser


def run_frames(
    frames: int,
    event_bus: EventBus,
    scene: Scene,
    clock: ElapsedClock,
    draw: Optional[Callable[[Scene], object]] = None,
) -> None:
    """Publish ``FRAME_UPDATE`` *frames* times at the target rate."""
    frame_time = 1.0 / TARGET_FPS
    for _ in range(max(frames, 0)):
        event_bus.publish(EventType.FRAME_UPDATE, elapsed=clock.elapsed())
        scene.update()
        if draw is not None:
            draw(scene)
        time.sleep(frame_time)


def run_offscreen(
    args: argparse.Namespace,
    event_bus: EventBus,
    scene: Scene,
    clock: ElapsedClock,
    water: WaterSurfaceFacade,
) -> None:
    # Qt and the GL renderer only load on this path
    from wavemesh.rendering.offscreen import OffscreenTarget
    from wavemesh.rendering.renderer import SceneRenderer

    with OffscreenTarget(*VIEWPORT_SIZE) as target:
        renderer = SceneRenderer(water, target.size)
        renderer.init_gl()
        try:
            run_frames(args.frames, event_bus, scene, clock, renderer.render)
            if args.snapshot is not None:
                target.save(args.snapshot)
        finally:
            renderer.destroy(scene)


def main(argv: Optional[list[str]] = None) -> int:
    """Run the frame loop, headless unless ``--gl`` is given."""
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    args = build_parser().parse_args(argv)

    event_bus = EventBus()
    source = load_config_source(args.config, event_bus)
    scene = Scene()
    clock = ElapsedClock()

    meshes = MeshGenerationFacade(scene, source, event_bus)
    water = WaterSurfaceFacade(
        scene, source, event_bus, clock, segments=args.water_segments,
    )

    overrides = {}
    if args.geometry is not None:
        overrides["geometry"] = args.geometry
    if args.resolution is not None:
        overrides["resolution"] = args.resolution
    if overrides:
        source.update(overrides)

    try:
        if args.gl:
            run_offscreen(args, event_bus, scene, clock, water)
        else:
            run_frames(args.frames, event_bus, scene, clock)
    finally:
        logger.info("Uniforms after %d frames: %s", args.frames, water.uniforms.as_uniforms())
        logger.info("Scene meshes: %s", [m.name for m, _ in scene.collect_meshes()])
        water.close()
        meshes.close()
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
