"""Application shell for the element card viewer."""

from .augmented_image_app import (
    AugmentedImageApp,
    FrameOutcome,
    ResumeOutcome,
    TapOutcome,
    TapResult,
)

__all__ = ["AugmentedImageApp", "FrameOutcome", "ResumeOutcome", "TapOutcome", "TapResult"]
