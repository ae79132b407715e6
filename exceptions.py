"""Custom exception classes for ElementCards."""

from __future__ import annotations

from typing import Optional

class ElementCardsError(Exception):
    """Base exception for all ElementCards errors."""

    pass

class SessionError(ElementCardsError):
    """Base exception for AR session errors."""

    pass

class SessionPausedError(SessionError):
    """Raised when a paused or closed session is asked for a frame."""

    pass

class CameraNotAvailableError(SessionError):
    """Raised when the camera cannot be opened by the AR runtime."""

    pass

class AnchorCreationError(SessionError):
    """Raised when the AR runtime rejects an anchor request."""

    def __init__(self, message: str, image_index: Optional[int] = None):
        self.image_index = image_index
        super().__init__(message)

class SessionUnavailableError(SessionError):
    """Base exception for conditions that prevent session creation."""

    pass

class ArcoreNotInstalledError(SessionUnavailableError):
    """Raised when the AR runtime is not installed on the device."""

    pass

class InstallDeclinedError(SessionUnavailableError):
    """Raised when the user declined to install the AR runtime."""

    pass

class ArcoreTooOldError(SessionUnavailableError):
    """Raised when the installed AR runtime is too old."""

    pass

class SdkTooOldError(SessionUnavailableError):
    """Raised when this application was built against an outdated SDK."""

    pass

class DeviceNotSupportedError(SessionUnavailableError):
    """Raised when the device cannot run AR at all."""

    pass

class ImageDatabaseError(ElementCardsError):
    """Raised when the reference image database cannot be built."""

    pass

class AssetError(ElementCardsError):
    """Base exception for asset loading errors."""

    def __init__(self, message: str, path: Optional[str] = None):
        self.path = path
        super().__init__(message)

class AssetNotFoundError(AssetError):
    """Raised when an asset path does not exist in the store."""

    pass

class TextureDecodeError(AssetError):
    """Raised when asset bytes cannot be decoded into a bitmap."""

    pass

class ConfigError(ElementCardsError):
    """Base exception for configuration errors."""

    pass

class InvalidConfigError(ConfigError):
    """Raised when configuration file is invalid or corrupted."""

    pass

class ConfigValidationError(ConfigError):
    """Raised when configuration fails schema validation."""

    def __init__(self, message: str, validation_errors: Optional[list] = None):
        self.validation_errors = validation_errors or []
        super().__init__(message)
