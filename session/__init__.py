"""AR session module."""

from .ar_session import ArSession, FocusMode, InstallStatus, SessionConfig, SessionFactory
from .image_database import ImageDatabase, ReferenceImage
from .simulated import SimulatedArSession, SimulatedSessionFactory, report_sequence

__all__ = [
    "ArSession",
    "FocusMode",
    "ImageDatabase",
    "InstallStatus",
    "ReferenceImage",
    "SessionConfig",
    "SessionFactory",
    "SimulatedArSession",
    "SimulatedSessionFactory",
    "report_sequence",
]
