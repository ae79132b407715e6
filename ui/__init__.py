"""UI module."""

from .overlay_renderer import OverlayRenderer
from .render import CardRenderer, TextureHandle

__all__ = ["CardRenderer", "OverlayRenderer", "TextureHandle"]
