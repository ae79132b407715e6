"""Asset store abstraction and bitmap decoding."""

from __future__ import annotations

from abc import ABC, abstractmethod
from pathlib import Path, PurePosixPath

import cv2
import numpy as np

from exceptions import AssetNotFoundError, TextureDecodeError


class AssetStore(ABC):
    @abstractmethod
    def open(self, path: str) -> bytes:
        """Return the raw bytes of an asset.

        Raises:
            AssetNotFoundError: If no asset exists at ``path``
        """


class DirectoryAssetStore(AssetStore):
    """Asset store backed by a directory, addressed with '/'-separated paths."""

    def __init__(self, root: Path) -> None:
        self._root = Path(root).resolve()

    @property
    def root(self) -> Path:
        return self._root

    def open(self, path: str) -> bytes:
        relative = PurePosixPath(path)
        if relative.is_absolute() or ".." in relative.parts:
            raise AssetNotFoundError(f"Asset path escapes the asset root: {path}", path=path)
        full_path = self._root.joinpath(*relative.parts)
        if not full_path.is_file():
            raise AssetNotFoundError(f"Asset not found: {path}", path=path)
        return full_path.read_bytes()


def decode_bitmap(data: bytes, path: str = "") -> np.ndarray:
    """Decode encoded image bytes (PNG, JPEG, ...) into a BGR array."""
    if not data:
        raise TextureDecodeError(f"Empty image data: {path}", path=path)
    buffer = np.frombuffer(data, dtype=np.uint8)
    bitmap = cv2.imdecode(buffer, cv2.IMREAD_COLOR)
    if bitmap is None:
        raise TextureDecodeError(f"Could not decode image: {path}", path=path)
    return bitmap
