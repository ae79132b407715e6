"""Augmented image to anchor bookkeeping.

The tracker keeps one entry per reference image that is currently in full
tracking, keyed by the image's database index. Entries are created with a
fresh anchor the first frame an image reaches ``TRACKING`` +
``FULL_TRACKING`` and removed, with their anchor detached, the frame the
image degrades or stops.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, Iterable, Iterator, List, Optional

from cards.texture import CardTexture
from contracts import Anchor, TrackedImage, TrackingMethod, TrackingState
from exceptions import AnchorCreationError
from log_config.logger import get_logger
from session.ar_session import ArSession

logger = get_logger(__name__)


@dataclass
class TrackingEntry:
    image: TrackedImage
    anchor: Anchor
    texture: CardTexture = field(default_factory=CardTexture)

    @property
    def index(self) -> int:
        return self.image.index

    @property
    def drawable(self) -> bool:
        return self.image.is_fully_tracked


@dataclass(frozen=True)
class TrackingUpdate:
    created: List[int] = field(default_factory=list)
    removed: List[TrackingEntry] = field(default_factory=list)
    failed: List[int] = field(default_factory=list)

    @property
    def changed(self) -> bool:
        return bool(self.created or self.removed)


class ImageTrackingStateManager:
    def __init__(self) -> None:
        self._entries: Dict[int, TrackingEntry] = {}

    def update(self, session: ArSession, updated_images: Iterable[TrackedImage]) -> TrackingUpdate:
        """Apply one frame of tracking changes.

        Args:
            session: Session used to create and detach anchors
            updated_images: Images the runtime reported as changed this frame

        Returns:
            Indices created, entries removed, and indices whose anchor request failed
        """
        result = TrackingUpdate()
        for image in updated_images:
            existing = self._entries.get(image.index)
            if existing is not None:
                # Keep the latest snapshot so the draw pass re-validates current state.
                existing.image = image
            state = image.tracking_state
            if state is TrackingState.PAUSED:
                # Detected but not yet tracked.
                continue
            if state is TrackingState.TRACKING:
                if image.tracking_method is TrackingMethod.FULL_TRACKING:
                    self._track(session, image, result)
                else:
                    self._remove(session, image.index, result)
            elif state is TrackingState.STOPPED:
                self._remove(session, image.index, result)

        if result.changed or result.failed:
            logger.debug(
                f"Tracking update: created={result.created} "
                f"removed={[entry.index for entry in result.removed]} failed={result.failed}"
            )
        return result

    def drawable_entries(self) -> List[TrackingEntry]:
        return [entry for entry in self._entries.values() if entry.drawable]

    def clear(self, session: Optional[ArSession] = None) -> List[TrackingEntry]:
        """Drop every entry, detaching anchors when a session is given."""
        removed = list(self._entries.values())
        if session is not None:
            for entry in removed:
                session.detach_anchor(entry.anchor)
        self._entries.clear()
        return removed

    def get(self, index: int) -> Optional[TrackingEntry]:
        return self._entries.get(index)

    def entries(self) -> List[TrackingEntry]:
        return list(self._entries.values())

    def __contains__(self, index: object) -> bool:
        return index in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def __iter__(self) -> Iterator[TrackingEntry]:
        return iter(self.entries())

    def _track(self, session: ArSession, image: TrackedImage, result: TrackingUpdate) -> None:
        if image.index in self._entries:
            return
        try:
            anchor = session.create_anchor(image, image.center_pose)
        except AnchorCreationError as e:
            logger.error(f"Anchor creation failed for {image.name} (index {image.index}): {e}")
            result.failed.append(image.index)
            return
        self._entries[image.index] = TrackingEntry(image=image, anchor=anchor)
        result.created.append(image.index)
        logger.info(f"Tracking {image.name} (index {image.index}) with anchor {anchor.anchor_id}")

    def _remove(self, session: ArSession, index: int, result: TrackingUpdate) -> None:
        entry = self._entries.pop(index, None)
        if entry is None:
            return
        session.detach_anchor(entry.anchor)
        result.removed.append(entry)
        logger.info(f"Stopped tracking {entry.image.name} (index {index})")
