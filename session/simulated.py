"""Simulated AR runtime for pipeline testing and demos.

The simulated session does not recognise anything: callers queue, frame by
frame, the tracked images the runtime should report as updated.
"""

from __future__ import annotations

import itertools
import time
from collections import deque
from typing import Deque, Dict, List, Optional, Sequence, Tuple

from contracts import (
    Anchor,
    CameraView,
    FrameSnapshot,
    Pose,
    TrackedImage,
    TrackingMethod,
    TrackingState,
)
from exceptions import (
    AnchorCreationError,
    CameraNotAvailableError,
    ImageDatabaseError,
    SessionPausedError,
)
from log_config.logger import get_logger

from .ar_session import ArSession, InstallStatus, SessionConfig, SessionFactory

logger = get_logger(__name__)

DEFAULT_EXTENT_M = 0.1


class SimulatedArSession(ArSession):
    def __init__(self, camera: Optional[CameraView] = None, camera_available: bool = True) -> None:
        self.config: Optional[SessionConfig] = None
        self.camera = camera or CameraView(pose=Pose.identity())
        self.color_correction: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
        self.camera_available = camera_available
        self.reject_anchor_creation = False
        self.display_geometry: Optional[Tuple[int, int, int]] = None
        self.anchor_requests = 0
        self.running = False
        self.closed = False
        self._pending: Deque[Tuple[TrackedImage, ...]] = deque()
        self._anchors: Dict[int, Anchor] = {}
        self._anchor_ids = itertools.count(1)
        self._frame_index = 0

    def configure(self, config: SessionConfig) -> None:
        self.config = config

    def resume(self) -> None:
        if self.closed:
            raise SessionPausedError("Session has been closed")
        if not self.camera_available:
            raise CameraNotAvailableError("Simulated camera is not available")
        self.running = True

    def pause(self) -> None:
        self.running = False

    def close(self) -> None:
        self.running = False
        self.closed = True
        self._anchors.clear()

    def set_display_geometry(self, rotation: int, width: int, height: int) -> None:
        self.display_geometry = (rotation, width, height)

    def update(self) -> FrameSnapshot:
        if not self.running:
            raise SessionPausedError("Session is not running")
        updated = self._pending.popleft() if self._pending else ()
        self._frame_index += 1
        return FrameSnapshot(
            frame_index=self._frame_index,
            timestamp_ns=time.monotonic_ns(),
            camera=self.camera,
            color_correction=self.color_correction,
            updated_images=updated,
        )

    def create_anchor(self, image: TrackedImage, pose: Pose) -> Anchor:
        self.anchor_requests += 1
        if not self.running:
            raise AnchorCreationError("Cannot create anchor while session is paused", image.index)
        if self.reject_anchor_creation:
            raise AnchorCreationError(f"Runtime rejected anchor for {image.name}", image.index)
        anchor = Anchor(anchor_id=next(self._anchor_ids), pose=pose, image_index=image.index)
        self._anchors[anchor.anchor_id] = anchor
        return anchor

    def detach_anchor(self, anchor: Anchor) -> None:
        self._anchors.pop(anchor.anchor_id, None)

    @property
    def live_anchors(self) -> List[Anchor]:
        return list(self._anchors.values())

    def report(self, *images: TrackedImage) -> None:
        """Queue the images the next ``update()`` reports as changed."""
        self._pending.append(tuple(images))

    def image(
        self,
        name: str,
        state: TrackingState = TrackingState.TRACKING,
        method: TrackingMethod = TrackingMethod.FULL_TRACKING,
        pose: Optional[Pose] = None,
        extent_x: Optional[float] = None,
        extent_z: Optional[float] = None,
    ) -> TrackedImage:
        """Build a tracked image for a reference image of the configured database."""
        database = self.config.image_database if self.config else None
        reference = database.find(name) if database is not None else None
        if reference is None:
            raise ImageDatabaseError(f"{name!r} is not in the session's image database")
        width = extent_x if extent_x is not None else (reference.width_m or DEFAULT_EXTENT_M)
        return TrackedImage(
            index=reference.index,
            name=reference.name,
            tracking_state=state,
            tracking_method=method,
            center_pose=pose or Pose.from_translation(0.0, 0.0, -1.0),
            extent_x=width,
            extent_z=extent_z if extent_z is not None else width,
        )


class SimulatedSessionFactory(SessionFactory):
    def __init__(
        self,
        installed: bool = True,
        install_error: Optional[Exception] = None,
        permission_granted: bool = True,
        grant_on_request: bool = True,
        show_rationale: bool = True,
        session_error: Optional[Exception] = None,
        camera_available: bool = True,
        camera: Optional[CameraView] = None,
    ) -> None:
        self.installed = installed
        self.install_error = install_error
        self.permission_granted = permission_granted
        self.grant_on_request = grant_on_request
        self.show_rationale = show_rationale
        self.session_error = session_error
        self.camera_available = camera_available
        self.camera = camera
        self.permission_requests = 0
        self.settings_launched = False
        self.sessions: List[SimulatedArSession] = []

    def request_install(self, user_requested: bool) -> InstallStatus:
        if self.install_error is not None:
            raise self.install_error
        if self.installed:
            return InstallStatus.INSTALLED
        if user_requested:
            # The install flow completes while the app is in the background.
            self.installed = True
            logger.info("Simulated AR runtime install requested")
        return InstallStatus.INSTALL_REQUESTED

    def has_camera_permission(self) -> bool:
        return self.permission_granted

    def request_camera_permission(self) -> None:
        self.permission_requests += 1
        if self.grant_on_request:
            self.permission_granted = True

    def should_show_permission_rationale(self) -> bool:
        return self.show_rationale

    def launch_permission_settings(self) -> None:
        self.settings_launched = True

    def create_session(self) -> SimulatedArSession:
        if self.session_error is not None:
            raise self.session_error
        session = SimulatedArSession(camera=self.camera, camera_available=self.camera_available)
        self.sessions.append(session)
        return session

    @property
    def latest_session(self) -> Optional[SimulatedArSession]:
        return self.sessions[-1] if self.sessions else None


def report_sequence(session: SimulatedArSession, frames: Sequence[Sequence[TrackedImage]]) -> None:
    """Queue several frames of updates at once."""
    for images in frames:
        session.report(*images)
