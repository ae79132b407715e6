"""Tap hit-testing against anchored cards.

Each card's centre is pushed through its model-view-projection transform.
The card counts as hit when the tap lies inside a screen-space circle whose
radius is the card's half-width ``extent_x`` scaled by ``1 / clip.w``.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, List

import numpy as np

from contracts import CameraView, Viewport
from log_config.logger import get_logger
from track.image_tracker import TrackingEntry

logger = get_logger(__name__)

DEFAULT_NEAR_CLIP = 0.1
DEFAULT_FAR_CLIP = 100.0

_ORIGIN = np.array([0.0, 0.0, 0.0, 1.0])


class HitPolicy(Enum):
    ALL = "all"
    FRONT_MOST = "front_most"


@dataclass(frozen=True)
class CardHit:
    index: int
    name: str
    screen_x: float
    screen_y: float
    radius: float
    distance: float
    depth: float


@dataclass(frozen=True)
class CardProjection:
    screen_x: float
    screen_y: float
    radius: float
    depth: float


def project_card(
    entry: TrackingEntry,
    view_projection: np.ndarray,
    viewport: Viewport,
) -> CardProjection | None:
    """Project an entry's centre to screen space, or None if behind the camera."""
    model = entry.image.center_pose.to_matrix()
    clip = view_projection @ model @ _ORIGIN
    w = clip[3]
    if w <= 0:
        return None
    half_width = viewport.width / 2.0
    half_height = viewport.height / 2.0
    return CardProjection(
        screen_x=half_width * (1.0 + clip[0] / w),
        screen_y=half_height * (1.0 - clip[1] / w),
        radius=half_width * (entry.image.extent_x / w),
        depth=clip[2] / w,
    )


class TapHitTester:
    def __init__(
        self,
        hit_policy: HitPolicy = HitPolicy.ALL,
        near: float = DEFAULT_NEAR_CLIP,
        far: float = DEFAULT_FAR_CLIP,
    ) -> None:
        self.hit_policy = hit_policy
        self.near = near
        self.far = far

    def hit_test(
        self,
        tap_x: float,
        tap_y: float,
        camera: CameraView,
        viewport: Viewport,
        entries: Iterable[TrackingEntry],
    ) -> List[CardHit]:
        """Return the cards under a tap.

        With ``HitPolicy.ALL`` every hit is returned in iteration order.
        With ``HitPolicy.FRONT_MOST`` at most one hit is returned: the one
        nearest the camera.
        """
        view_projection = camera.projection_matrix(self.near, self.far) @ camera.view_matrix()
        hits: List[CardHit] = []
        for entry in entries:
            projection = project_card(entry, view_projection, viewport)
            if projection is None:
                continue
            distance = math.hypot(tap_x - projection.screen_x, tap_y - projection.screen_y)
            if distance < projection.radius:
                logger.info(f"Tap hit on {entry.image.name}")
                hits.append(
                    CardHit(
                        index=entry.index,
                        name=entry.image.name,
                        screen_x=projection.screen_x,
                        screen_y=projection.screen_y,
                        radius=projection.radius,
                        distance=distance,
                        depth=projection.depth,
                    )
                )

        if self.hit_policy is HitPolicy.FRONT_MOST and len(hits) > 1:
            return [min(hits, key=lambda hit: hit.depth)]
        return hits
