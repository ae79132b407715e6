"""Run the element card viewer against a simulated AR session.

Every reference image of the configured database is laid out in a row in
front of the camera, a few frames are drawn with the CPU overlay renderer,
and a tap at the screen centre toggles the middle card. The final canvas is
written to disk.

Usage:
    python -m app.demo --config configs/default.yaml --output demo.png
"""

from __future__ import annotations

import argparse
import math
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional

import cv2

from configs.settings import AppConfig, load_config
from contracts import CameraView, Pose, TrackedImage
from exceptions import ConfigError
from log_config.logger import configure_logging, get_logger
from session import SimulatedArSession, SimulatedSessionFactory
from ui import OverlayRenderer

from .augmented_image_app import AugmentedImageApp, FrameOutcome, ResumeOutcome, TapResult

logger = get_logger(__name__)

CARD_SPACING_M = 0.2
CARD_DISTANCE_M = 1.5

# Cards lie in the anchor's X-Z plane; tilt them upright to face the camera.
_UPRIGHT = (math.sqrt(0.5), 0.0, 0.0, math.sqrt(0.5))


@dataclass(frozen=True)
class DemoRun:
    renderer: OverlayRenderer
    tap: TapResult


def _card_row(session: SimulatedArSession) -> List[TrackedImage]:
    database = session.config.image_database if session.config else None
    if database is None:
        return []
    # The middle card sits on the optical axis, under the centre tap.
    middle = len(database) // 2
    images = []
    for reference in database:
        x = (reference.index - middle) * CARD_SPACING_M
        pose = Pose(translation=(x, 0.0, -CARD_DISTANCE_M), rotation=_UPRIGHT)
        images.append(session.image(reference.name, pose=pose))
    return images


def run_demo(config: AppConfig, width: int = 640, height: int = 480, frames: int = 3) -> DemoRun:
    """Drive one simulated session; the renderer keeps the last frame."""
    camera = CameraView(pose=Pose.identity(), vertical_fov_deg=60.0, aspect_ratio=width / height)
    factory = SimulatedSessionFactory(camera=camera)
    renderer = OverlayRenderer()
    app = AugmentedImageApp(config, factory, renderer)

    app.on_surface_created()
    app.on_surface_changed(width, height)
    if app.on_resume() is not ResumeOutcome.RESUMED:
        raise RuntimeError("Simulated session failed to resume")

    session = factory.latest_session
    session.report(*_card_row(session))

    for _ in range(frames):
        if app.on_draw_frame() is not FrameOutcome.DRAWN:
            logger.warning("Frame was not drawn")

    tap: TapResult = app.on_single_tap(width / 2.0, height / 2.0)
    logger.info(f"Centre tap: {tap.outcome.value} {[hit.name for hit in tap.hits]}")
    app.on_draw_frame()

    logger.info(f"Drew {renderer.cards_drawn} cards for {len(app.tracker)} tracked images")
    app.on_pause()
    app.on_destroy()
    return DemoRun(renderer=renderer, tap=tap)


def main(argv: Optional[List[str]] = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Render element cards from a simulated AR session")
    parser.add_argument(
        "--config",
        default=str(Path(__file__).resolve().parents[1] / "configs" / "default.yaml"),
        help="Configuration file (default: configs/default.yaml)",
    )
    parser.add_argument("--output", default="demo.png", help="Output image path (default: demo.png)")
    parser.add_argument("--width", type=int, default=640, help="Canvas width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=480, help="Canvas height in pixels (default: 480)")
    parser.add_argument("--frames", type=int, default=3, help="Frames to draw before the tap (default: 3)")
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config))
    except ConfigError as e:
        logger.error(f"Configuration error: {e}")
        return 1

    configure_logging(config.logging.level, config.logging.log_dir)

    run = run_demo(config, width=args.width, height=args.height, frames=args.frames)
    output = Path(args.output)
    output.parent.mkdir(parents=True, exist_ok=True)
    if not cv2.imwrite(str(output), run.renderer.canvas):
        logger.error(f"Failed to write {output}")
        return 1
    logger.info(f"Saved {output}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
