"""CPU card renderer that composites textured cards onto a BGR canvas."""

from __future__ import annotations

import itertools
from typing import Dict, Optional, Tuple

import cv2
import numpy as np

from log_config.logger import get_logger

from .render import CardRenderer, TextureHandle

logger = get_logger(__name__)


class OverlayRenderer(CardRenderer):
    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._width = width
        self._height = height
        self._canvas: Optional[np.ndarray] = None
        self._textures: Dict[int, np.ndarray] = {}
        self._texture_ids = itertools.count(1)
        self.cards_drawn = 0

    @property
    def canvas(self) -> Optional[np.ndarray]:
        return self._canvas

    @property
    def texture_count(self) -> int:
        return len(self._textures)

    def create_on_gl_thread(self) -> None:
        self._allocate()

    def set_viewport(self, width: int, height: int) -> None:
        self._width = width
        self._height = height
        self._allocate()

    def clear(self, clear_color: Tuple[float, float, float, float]) -> None:
        if self._canvas is None:
            return
        r, g, b, _ = clear_color
        self._canvas[:] = np.clip(np.array([b, g, r]) * 255.0, 0, 255).astype(np.uint8)
        self.cards_drawn = 0

    def upload_texture(self, bitmap: np.ndarray) -> TextureHandle:
        if bitmap.ndim == 2:
            bitmap = cv2.cvtColor(bitmap, cv2.COLOR_GRAY2BGR)
        texture_id = next(self._texture_ids)
        self._textures[texture_id] = bitmap.copy()
        height, width = bitmap.shape[:2]
        return TextureHandle(texture_id=texture_id, width=width, height=height)

    def release_texture(self, handle: TextureHandle) -> None:
        self._textures.pop(handle.texture_id, None)

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
        if self._canvas is None:
            return
        bitmap = self._textures.get(texture.texture_id)
        if bitmap is None:
            logger.warning(f"Texture {texture.texture_id} is not uploaded, skipping card")
            return

        corners = self.project_corners(view_matrix, projection_matrix, anchor_matrix, extent_x, extent_z)
        if corners is None:
            return

        tex_h, tex_w = bitmap.shape[:2]
        src = np.array([[0, 0], [tex_w, 0], [tex_w, tex_h], [0, tex_h]], dtype=np.float32)
        warp = cv2.getPerspectiveTransform(src, corners.astype(np.float32))

        r, g, b, intensity = color_correction
        scale = np.array([b, g, r], dtype=np.float32) * intensity
        shaded = np.clip(bitmap.astype(np.float32) * scale, 0, 255).astype(np.uint8)

        size = (self._width, self._height)
        warped = cv2.warpPerspective(shaded, warp, size, flags=cv2.INTER_LINEAR)
        mask = cv2.warpPerspective(np.full((tex_h, tex_w), 255, dtype=np.uint8), warp, size)
        covered = mask > 0
        self._canvas[covered] = warped[covered]
        self.cards_drawn += 1

    def project_corners(
        self,
        view_matrix: np.ndarray,
        projection_matrix: np.ndarray,
        anchor_matrix: np.ndarray,
        extent_x: float,
        extent_z: float,
    ) -> Optional[np.ndarray]:
        """Screen-space corners of a card lying in its anchor's X-Z plane.

        Returns None when any corner is behind the camera.
        """
        half_x = extent_x / 2.0
        half_z = extent_z / 2.0
        local = np.array(
            [
                [-half_x, 0.0, -half_z, 1.0],
                [half_x, 0.0, -half_z, 1.0],
                [half_x, 0.0, half_z, 1.0],
                [-half_x, 0.0, half_z, 1.0],
            ]
        ).T
        clip = projection_matrix @ view_matrix @ anchor_matrix @ local
        w = clip[3]
        if np.any(w <= 0):
            return None
        screen_x = (self._width / 2.0) * (1.0 + clip[0] / w)
        screen_y = (self._height / 2.0) * (1.0 - clip[1] / w)
        return np.stack([screen_x, screen_y], axis=1)

    def _allocate(self) -> None:
        if self._width > 0 and self._height > 0:
            self._canvas = np.zeros((self._height, self._width, 3), dtype=np.uint8)
