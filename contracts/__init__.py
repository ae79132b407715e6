"""Shared data contracts for augmented image tracking."""

from .types import (
    Anchor,
    CameraView,
    FrameSnapshot,
    Pose,
    TrackedImage,
    TrackingMethod,
    TrackingState,
    Viewport,
)

__all__ = [
    "Anchor",
    "CameraView",
    "FrameSnapshot",
    "Pose",
    "TrackedImage",
    "TrackingMethod",
    "TrackingState",
    "Viewport",
]
