"""Card renderer interface."""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Tuple

import numpy as np


@dataclass(frozen=True)
class TextureHandle:
    texture_id: int
    width: int
    height: int


class CardRenderer(ABC):
    @abstractmethod
    def create_on_gl_thread(self) -> None:
        """Allocate renderer resources once the drawing surface exists."""

    @abstractmethod
    def set_viewport(self, width: int, height: int) -> None:
        """Resize the drawing target."""

    @abstractmethod
    def clear(self, clear_color: Tuple[float, float, float, float]) -> None:
        """Clear the target before a new frame."""

    @abstractmethod
    def upload_texture(self, bitmap: np.ndarray) -> TextureHandle:
        """Upload a decoded bitmap and return its handle."""

    @abstractmethod
    def release_texture(self, handle: TextureHandle) -> None:
        """Free an uploaded texture."""

    @abstractmethod
    def draw_card(
        self,
        view_matrix: np.ndarray,
        projection_matrix: np.ndarray,
        anchor_matrix: np.ndarray,
        extent_x: float,
        extent_z: float,
        color_correction: Tuple[float, float, float, float],
        texture: TextureHandle,
    ) -> None:
        """Draw one textured card at the anchor pose."""
