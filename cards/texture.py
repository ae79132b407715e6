"""Per-card texture state machine.

Each anchored card starts in ``DEFAULT``. The first draw moves it to
``INFO``; every tap hit then toggles between ``INFO`` and ``PICTURE``.
A failed load shows the placeholder and drops the card back to
``DEFAULT`` so the next draw retries the info texture.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from exceptions import AssetError
from log_config.logger import get_logger
from ui.render import CardRenderer, TextureHandle

from .assets import AssetStore, decode_bitmap

logger = get_logger(__name__)


class TextureMode(Enum):
    DEFAULT = "default"
    INFO = "info"
    PICTURE = "picture"


@dataclass
class CardTexture:
    mode: TextureMode = TextureMode.DEFAULT
    handle: Optional[TextureHandle] = None


@dataclass(frozen=True)
class TextureLayout:
    textures_dir: str = "models/textures"
    info_dir: str = "element_info"
    picture_dir: str = "element_pictures"
    placeholder: str = "models/textures/template.png"

    def path_for(self, mode: TextureMode, image_name: str) -> str:
        if mode is TextureMode.INFO:
            return f"{self.textures_dir}/{self.info_dir}/{image_name}"
        if mode is TextureMode.PICTURE:
            return f"{self.textures_dir}/{self.picture_dir}/{image_name}"
        return self.placeholder


def next_mode(mode: TextureMode) -> TextureMode:
    """Mode a tap switches to."""
    if mode is TextureMode.INFO:
        return TextureMode.PICTURE
    return TextureMode.INFO


class CardTextureManager:
    def __init__(
        self,
        asset_store: AssetStore,
        renderer: CardRenderer,
        layout: Optional[TextureLayout] = None,
    ) -> None:
        self._assets = asset_store
        self._renderer = renderer
        self._layout = layout or TextureLayout()
        self._placeholder: Optional[TextureHandle] = None

    @property
    def layout(self) -> TextureLayout:
        return self._layout

    @property
    def placeholder(self) -> Optional[TextureHandle]:
        return self._placeholder

    def load_placeholder(self) -> TextureHandle:
        """Decode and upload the built-in placeholder.

        Raises:
            AssetError: If the placeholder itself is missing or corrupt
        """
        if self._placeholder is None:
            path = self._layout.placeholder
            self._placeholder = self._renderer.upload_texture(decode_bitmap(self._assets.open(path), path))
            logger.debug(f"Placeholder texture loaded from {path}")
        return self._placeholder

    def ensure_loaded(self, texture: CardTexture, image_name: str) -> TextureHandle:
        """Load the info texture on a card's first draw."""
        if texture.mode is TextureMode.DEFAULT or texture.handle is None:
            self._transition(texture, image_name, TextureMode.INFO)
        return texture.handle

    def toggle(self, texture: CardTexture, image_name: str) -> TextureMode:
        target = next_mode(texture.mode)
        self._transition(texture, image_name, target)
        return texture.mode

    def release(self, texture: CardTexture) -> None:
        self._drop_handle(texture)
        texture.handle = None
        texture.mode = TextureMode.DEFAULT

    def reset(self) -> None:
        """Forget the placeholder, e.g. after the drawing surface was recreated."""
        self._placeholder = None

    def _transition(self, texture: CardTexture, image_name: str, target: TextureMode) -> None:
        path = self._layout.path_for(target, image_name)
        try:
            bitmap = decode_bitmap(self._assets.open(path), path)
        except AssetError as e:
            logger.warning(f"Texture load failed for {image_name} ({target.value}): {e}")
            self._show_placeholder(texture)
            return

        handle = self._renderer.upload_texture(bitmap)
        self._drop_handle(texture)
        texture.handle = handle
        texture.mode = target
        logger.info(f"Texture changed to: {path}")

    def _show_placeholder(self, texture: CardTexture) -> None:
        self._drop_handle(texture)
        texture.handle = self._placeholder
        texture.mode = TextureMode.DEFAULT

    def _drop_handle(self, texture: CardTexture) -> None:
        if texture.handle is not None and texture.handle is not self._placeholder:
            self._renderer.release_texture(texture.handle)
