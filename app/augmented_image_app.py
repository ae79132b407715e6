"""Augmented image viewer: session lifecycle, frame loop, and tap handling.

The host platform drives this object through lifecycle callbacks
(``on_resume``, ``on_pause``, ``on_destroy``), surface callbacks
(``on_surface_created``, ``on_surface_changed``), one ``on_draw_frame`` per
displayed frame, and ``on_single_tap`` for gestures.

Thread-Safety:
    The frame loop and the tap handler both mutate the tracked-entry map and
    card textures. Every public callback holds one re-entrant lock, so the
    two may be delivered on different threads.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import List, Optional, Tuple, Type

import numpy as np

from app.events.error_bus import ErrorCategory, ErrorEvent, ErrorEventBus, ErrorSeverity, get_error_bus
from cards.assets import AssetStore, DirectoryAssetStore, decode_bitmap
from cards.texture import CardTexture, CardTextureManager
from configs.settings import AppConfig
from contracts import FrameSnapshot, TrackingState, Viewport
from exceptions import (
    ArcoreNotInstalledError,
    ArcoreTooOldError,
    AssetError,
    CameraNotAvailableError,
    ImageDatabaseError,
    InstallDeclinedError,
    SdkTooOldError,
)
from interaction.hit_test import CardHit, TapHitTester
from log_config.logger import get_logger, log_performance
from session.ar_session import ArSession, InstallStatus, SessionConfig, SessionFactory
from session.image_database import ImageDatabase
from track.image_tracker import ImageTrackingStateManager, TrackingUpdate
from ui.render import CardRenderer

logger = get_logger(__name__)

SOURCE = "AugmentedImageApp"

MSG_INSTALL = "Please install ARCore"
MSG_UPDATE_RUNTIME = "Please update ARCore"
MSG_UPDATE_APP = "Please update this app"
MSG_UNSUPPORTED = "This device does not support AR"
MSG_CAMERA_UNAVAILABLE = "Camera not available. Try restarting the app."
MSG_PERMISSION = "Camera permissions are needed to run this application"
MSG_DATABASE = "Could not setup augmented image database"

_UNAVAILABLE_MESSAGES: List[Tuple[Type[Exception], str]] = [
    (ArcoreNotInstalledError, MSG_INSTALL),
    (InstallDeclinedError, MSG_INSTALL),
    (ArcoreTooOldError, MSG_UPDATE_RUNTIME),
    (SdkTooOldError, MSG_UPDATE_APP),
]


class ResumeOutcome(Enum):
    RESUMED = "resumed"
    INSTALL_REQUESTED = "install_requested"
    PERMISSION_REQUESTED = "permission_requested"
    FAILED = "failed"


class FrameOutcome(Enum):
    DRAWN = "drawn"
    NO_SESSION = "no_session"
    PAUSED = "paused"
    FAILED = "failed"


class TapOutcome(Enum):
    HIT = "hit"
    MISS = "miss"
    NO_SESSION = "no_session"
    PAUSED = "paused"
    NO_FRAME = "no_frame"
    FAILED = "failed"


@dataclass(frozen=True)
class TapResult:
    outcome: TapOutcome
    hits: List[CardHit] = field(default_factory=list)

    @property
    def is_hit(self) -> bool:
        return self.outcome is TapOutcome.HIT


def unavailable_message(error: Exception) -> str:
    """User-facing message for a session creation failure."""
    for error_type, message in _UNAVAILABLE_MESSAGES:
        if isinstance(error, error_type):
            return message
    return MSG_UNSUPPORTED


class AugmentedImageApp:
    def __init__(
        self,
        config: AppConfig,
        session_factory: SessionFactory,
        renderer: CardRenderer,
        asset_store: Optional[AssetStore] = None,
        error_bus: Optional[ErrorEventBus] = None,
    ) -> None:
        self._config = config
        self._factory = session_factory
        self._renderer = renderer
        self._assets = asset_store or DirectoryAssetStore(config.assets.root)
        self._bus = error_bus or get_error_bus()
        self._textures = CardTextureManager(self._assets, renderer, config.assets.texture_layout())
        self._tracker = ImageTrackingStateManager()
        self._hit_tester = TapHitTester(
            hit_policy=config.interaction.hit_policy,
            near=config.camera.near_clip,
            far=config.camera.far_clip,
        )
        self._lock = threading.RLock()

        self._session: Optional[ArSession] = None
        self._paused = False
        self._install_requested = False
        self._should_configure_session = False
        self._last_frame: Optional[FrameSnapshot] = None
        self._viewport = Viewport(0, 0)
        self._display_rotation = 0
        self._viewport_changed = False

        self.fit_to_scan_visible = False
        self.keep_screen_on = False
        self.finished = False
        self.failed_frames = 0

    @property
    def session(self) -> Optional[ArSession]:
        return self._session

    @property
    def tracker(self) -> ImageTrackingStateManager:
        return self._tracker

    @property
    def textures(self) -> CardTextureManager:
        return self._textures

    @property
    def viewport(self) -> Viewport:
        return self._viewport

    @property
    def last_frame(self) -> Optional[FrameSnapshot]:
        return self._last_frame

    # Lifecycle -----------------------------------------------------------

    def on_resume(self) -> ResumeOutcome:
        with self._lock:
            if self._session is None:
                try:
                    status = self._factory.request_install(not self._install_requested)
                    if status is InstallStatus.INSTALL_REQUESTED:
                        self._install_requested = True
                        return ResumeOutcome.INSTALL_REQUESTED

                    # The camera permission has to be granted before a session can run.
                    if not self._factory.has_camera_permission():
                        self._factory.request_camera_permission()
                        return ResumeOutcome.PERMISSION_REQUESTED

                    session = self._factory.create_session()
                except Exception as e:
                    message = unavailable_message(e)
                    logger.error(f"Exception creating session: {e}")
                    self._report(ErrorCategory.SESSION, ErrorSeverity.CRITICAL, message, e)
                    return ResumeOutcome.FAILED

                self._session = session
                self._should_configure_session = True

            if self._should_configure_session:
                self._configure_session(self._session)
                self._should_configure_session = False

            try:
                self._session.resume()
            except CameraNotAvailableError as e:
                self._report(ErrorCategory.CAMERA, ErrorSeverity.CRITICAL, MSG_CAMERA_UNAVAILABLE, e)
                self._session.close()
                self._session = None
                return ResumeOutcome.FAILED

            self._paused = False
            self._viewport_changed = True
            self.fit_to_scan_visible = True
            logger.info("Session resumed")
            return ResumeOutcome.RESUMED

    def on_pause(self) -> None:
        with self._lock:
            if self._session is None:
                return
            self._drop_tracking_state(self._session)
            self._session.pause()
            self._paused = True
            logger.info("Session paused")

    def on_destroy(self) -> None:
        with self._lock:
            if self._session is None:
                return
            self._drop_tracking_state(self._session)
            self._session.close()
            self._session = None
            self._paused = False
            logger.info("Session closed")

    def on_request_permissions_result(self) -> bool:
        """Return False when the app must finish for lack of camera permission."""
        with self._lock:
            if self._factory.has_camera_permission():
                return True
            self._report(ErrorCategory.PERMISSION, ErrorSeverity.CRITICAL, MSG_PERMISSION)
            if not self._factory.should_show_permission_rationale():
                # Permission denied with "do not ask again".
                self._factory.launch_permission_settings()
            self.finished = True
            return False

    # Surface -------------------------------------------------------------

    def on_surface_created(self) -> None:
        with self._lock:
            self._renderer.create_on_gl_thread()
            self._textures.reset()
            for entry in self._tracker:
                entry.texture = CardTexture()
            try:
                self._textures.load_placeholder()
            except AssetError as e:
                logger.error(f"Failed to read an asset file: {e}")
                self._report(ErrorCategory.ASSETS, ErrorSeverity.ERROR, "Placeholder texture unavailable", e)

    def on_surface_changed(self, width: int, height: int) -> None:
        with self._lock:
            self._viewport = Viewport(width, height)
            self._renderer.set_viewport(width, height)
            self._viewport_changed = True

    def set_display_rotation(self, rotation: int) -> None:
        with self._lock:
            if rotation != self._display_rotation:
                self._display_rotation = rotation
                self._viewport_changed = True

    # Frame loop ----------------------------------------------------------

    def on_draw_frame(self) -> FrameOutcome:
        with self._lock:
            self._renderer.clear(self._config.render.clear_color)
            if self._session is None:
                return FrameOutcome.NO_SESSION
            if self._paused:
                return FrameOutcome.PAUSED

            start = time.perf_counter()
            try:
                self._update_display_geometry(self._session)
                frame = self._session.update()
                self._last_frame = frame

                # Keep the screen unlocked while tracking, allow it to lock otherwise.
                self.keep_screen_on = frame.camera.tracking_state is TrackingState.TRACKING

                camera = self._config.camera
                view = frame.camera.view_matrix()
                projection = frame.camera.projection_matrix(camera.near_clip, camera.far_clip)

                self._update_tracking(self._session, frame)
                self._draw_cards(view, projection, frame.color_correction)
            except Exception as e:
                self.failed_frames += 1
                logger.exception(f"Exception on the render thread: {e}")
                self._report(ErrorCategory.RENDERING, ErrorSeverity.ERROR, "Frame skipped", e)
                return FrameOutcome.FAILED

            log_performance("draw frame", (time.perf_counter() - start) * 1000.0, self._config.render.frame_budget_ms)
            return FrameOutcome.DRAWN

    def on_single_tap(self, x: float, y: float) -> TapResult:
        with self._lock:
            if self._session is None:
                return TapResult(TapOutcome.NO_SESSION)
            if self._paused:
                return TapResult(TapOutcome.PAUSED)
            frame = self._last_frame
            if frame is None:
                return TapResult(TapOutcome.NO_FRAME)

            try:
                # Only cards the draw pass shows can be tapped.
                visible = self._tracker.drawable_entries()
                hits = self._hit_tester.hit_test(x, y, frame.camera, self._viewport, visible)
                for hit in hits:
                    entry = self._tracker.get(hit.index)
                    if entry is not None:
                        self._textures.toggle(entry.texture, entry.image.name)
            except Exception as e:
                logger.exception(f"Exception on tap event: {e}")
                self._report(ErrorCategory.TRACKING, ErrorSeverity.ERROR, "Tap ignored", e)
                return TapResult(TapOutcome.FAILED)

            return TapResult(TapOutcome.HIT if hits else TapOutcome.MISS, hits)

    # Internals -----------------------------------------------------------

    def _configure_session(self, session: ArSession) -> None:
        database: Optional[ImageDatabase] = None
        try:
            database = self._build_image_database()
        except (ImageDatabaseError, AssetError) as e:
            logger.error(f"IO exception loading augmented image database: {e}")
            self._report(ErrorCategory.SESSION, ErrorSeverity.ERROR, MSG_DATABASE, e)
        session.configure(SessionConfig(focus_mode=self._config.session.focus_mode, image_database=database))

    def _build_image_database(self) -> ImageDatabase:
        settings = self._config.session
        if settings.use_single_image:
            path = settings.single_image
            database = ImageDatabase()
            database.add_image(settings.single_image_name, decode_bitmap(self._assets.open(path), path))
            return database
        return ImageDatabase.from_image_list(settings.image_list)

    def _update_display_geometry(self, session: ArSession) -> None:
        if not self._viewport_changed or self._viewport.width <= 0 or self._viewport.height <= 0:
            return
        session.set_display_geometry(self._display_rotation, self._viewport.width, self._viewport.height)
        self._viewport_changed = False

    def _update_tracking(self, session: ArSession, frame: FrameSnapshot) -> TrackingUpdate:
        update = self._tracker.update(session, frame.updated_images)
        for entry in update.removed:
            self._textures.release(entry.texture)
        if any(image.is_fully_tracked for image in frame.updated_images):
            self.fit_to_scan_visible = False
        return update

    def _draw_cards(
        self,
        view: np.ndarray,
        projection: np.ndarray,
        color_correction: Tuple[float, float, float, float],
    ) -> None:
        for entry in self._tracker.drawable_entries():
            handle = self._textures.ensure_loaded(entry.texture, entry.image.name)
            if handle is None:
                logger.debug(f"No texture available for {entry.image.name}, skipping draw")
                continue
            self._renderer.draw_card(
                view,
                projection,
                entry.anchor.pose.to_matrix(),
                entry.image.extent_x,
                entry.image.extent_z,
                color_correction,
                handle,
            )

    def _drop_tracking_state(self, session: ArSession) -> None:
        for entry in self._tracker.clear(session):
            self._textures.release(entry.texture)
        self._last_frame = None

    def _report(
        self,
        category: ErrorCategory,
        severity: ErrorSeverity,
        message: str,
        exception: Optional[Exception] = None,
    ) -> None:
        self._bus.publish(
            ErrorEvent(category=category, severity=severity, message=message, source=SOURCE, exception=exception)
        )
