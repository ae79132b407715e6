"""Card textures and assets."""

from .assets import AssetStore, DirectoryAssetStore, decode_bitmap
from .texture import CardTexture, CardTextureManager, TextureLayout, TextureMode, next_mode

__all__ = [
    "AssetStore",
    "CardTexture",
    "CardTextureManager",
    "DirectoryAssetStore",
    "TextureLayout",
    "TextureMode",
    "decode_bitmap",
    "next_mode",
]
