"""AR runtime abstraction: session lifecycle, frames, and anchors."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from contracts import Anchor, FrameSnapshot, Pose, TrackedImage

from .image_database import ImageDatabase


class FocusMode(Enum):
    AUTO = "auto"
    FIXED = "fixed"


class InstallStatus(Enum):
    INSTALLED = "installed"
    INSTALL_REQUESTED = "install_requested"


@dataclass(frozen=True)
class SessionConfig:
    focus_mode: FocusMode = FocusMode.AUTO
    image_database: Optional[ImageDatabase] = None


class ArSession(ABC):
    @abstractmethod
    def configure(self, config: SessionConfig) -> None:
        """Apply focus mode and reference image database."""

    @abstractmethod
    def resume(self) -> None:
        """Start or restart camera capture.

        Raises:
            CameraNotAvailableError: If the camera cannot be opened
        """

    @abstractmethod
    def pause(self) -> None:
        """Stop camera capture; anchors become invalid."""

    @abstractmethod
    def close(self) -> None:
        """Release native resources. The session cannot be resumed afterwards."""

    @abstractmethod
    def set_display_geometry(self, rotation: int, width: int, height: int) -> None:
        """Notify the runtime of a viewport size or rotation change."""

    @abstractmethod
    def update(self) -> FrameSnapshot:
        """Return the latest frame.

        Raises:
            SessionPausedError: If the session is not running
        """

    @abstractmethod
    def create_anchor(self, image: TrackedImage, pose: Pose) -> Anchor:
        """Create an anchor on a tracked image.

        Raises:
            AnchorCreationError: If the runtime rejects the pose
        """

    @abstractmethod
    def detach_anchor(self, anchor: Anchor) -> None:
        """Release an anchor. Detaching an unknown anchor is a no-op."""


class SessionFactory(ABC):
    """Install and permission gatekeeper that hands out sessions."""

    @abstractmethod
    def request_install(self, user_requested: bool) -> InstallStatus:
        """Ensure the AR runtime is installed.

        Raises:
            ArcoreNotInstalledError, InstallDeclinedError, ArcoreTooOldError,
            SdkTooOldError, DeviceNotSupportedError
        """

    @abstractmethod
    def has_camera_permission(self) -> bool:
        """Return True if the camera permission has been granted."""

    @abstractmethod
    def request_camera_permission(self) -> None:
        """Ask the user for camera permission."""

    @abstractmethod
    def should_show_permission_rationale(self) -> bool:
        """Return False once the user chose "do not ask again"."""

    @abstractmethod
    def launch_permission_settings(self) -> None:
        """Open the system settings page for this application."""

    @abstractmethod
    def create_session(self) -> ArSession:
        """Create a new, unconfigured session.

        Raises:
            SessionUnavailableError: If the device cannot host a session
        """
