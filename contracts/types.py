"""Core data contracts for frames, tracked images, anchors, and cameras."""

from __future__ import annotations

import math
from dataclasses import dataclass, field
from enum import Enum
from typing import Tuple

import numpy as np


class TrackingState(Enum):
    PAUSED = "paused"
    TRACKING = "tracking"
    STOPPED = "stopped"


class TrackingMethod(Enum):
    NOT_TRACKING = "not_tracking"
    FULL_TRACKING = "full_tracking"
    LAST_KNOWN_POSE = "last_known_pose"


@dataclass(frozen=True)
class Pose:
    """Rigid transform: translation in meters, rotation as (qx, qy, qz, qw)."""

    translation: Tuple[float, float, float] = (0.0, 0.0, 0.0)
    rotation: Tuple[float, float, float, float] = (0.0, 0.0, 0.0, 1.0)

    @classmethod
    def identity(cls) -> "Pose":
        return cls()

    @classmethod
    def from_translation(cls, x: float, y: float, z: float) -> "Pose":
        return cls(translation=(float(x), float(y), float(z)))

    def rotation_matrix(self) -> np.ndarray:
        qx, qy, qz, qw = self.rotation
        norm = math.sqrt(qx * qx + qy * qy + qz * qz + qw * qw)
        if norm == 0:
            return np.eye(3, dtype=float)
        qx, qy, qz, qw = qx / norm, qy / norm, qz / norm, qw / norm
        return np.array(
            [
                [1 - 2 * (qy * qy + qz * qz), 2 * (qx * qy - qz * qw), 2 * (qx * qz + qy * qw)],
                [2 * (qx * qy + qz * qw), 1 - 2 * (qx * qx + qz * qz), 2 * (qy * qz - qx * qw)],
                [2 * (qx * qz - qy * qw), 2 * (qy * qz + qx * qw), 1 - 2 * (qx * qx + qy * qy)],
            ],
            dtype=float,
        )

    def to_matrix(self) -> np.ndarray:
        """4x4 model matrix acting on column vectors."""
        matrix = np.eye(4, dtype=float)
        matrix[:3, :3] = self.rotation_matrix()
        matrix[:3, 3] = self.translation
        return matrix

    def inverse_matrix(self) -> np.ndarray:
        rot = self.rotation_matrix()
        matrix = np.eye(4, dtype=float)
        matrix[:3, :3] = rot.T
        matrix[:3, 3] = -rot.T @ np.asarray(self.translation, dtype=float)
        return matrix


@dataclass(frozen=True)
class TrackedImage:
    index: int
    name: str
    tracking_state: TrackingState
    tracking_method: TrackingMethod
    center_pose: Pose
    extent_x: float
    extent_z: float

    @property
    def is_fully_tracked(self) -> bool:
        return (
            self.tracking_state is TrackingState.TRACKING
            and self.tracking_method is TrackingMethod.FULL_TRACKING
        )


@dataclass(frozen=True)
class Anchor:
    anchor_id: int
    pose: Pose
    image_index: int


@dataclass(frozen=True)
class CameraView:
    pose: Pose
    vertical_fov_deg: float = 60.0
    aspect_ratio: float = 9.0 / 16.0
    tracking_state: TrackingState = TrackingState.TRACKING

    def view_matrix(self) -> np.ndarray:
        return self.pose.inverse_matrix()

    def projection_matrix(self, near: float, far: float) -> np.ndarray:
        if near <= 0 or far <= near:
            raise ValueError(f"Invalid clip planes: near={near}, far={far}")
        f = 1.0 / math.tan(math.radians(self.vertical_fov_deg) / 2.0)
        projection = np.zeros((4, 4), dtype=float)
        projection[0, 0] = f / self.aspect_ratio
        projection[1, 1] = f
        projection[2, 2] = (far + near) / (near - far)
        projection[2, 3] = (2.0 * far * near) / (near - far)
        projection[3, 2] = -1.0
        return projection


@dataclass(frozen=True)
class FrameSnapshot:
    frame_index: int
    timestamp_ns: int
    camera: CameraView
    color_correction: Tuple[float, float, float, float] = (1.0, 1.0, 1.0, 1.0)
    updated_images: Tuple[TrackedImage, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class Viewport:
    width: int
    height: int
