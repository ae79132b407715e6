"""Augmented image tracking."""

from .image_tracker import ImageTrackingStateManager, TrackingEntry, TrackingUpdate

__all__ = ["ImageTrackingStateManager", "TrackingEntry", "TrackingUpdate"]
