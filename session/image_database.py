"""Reference image database for augmented image recognition.

Two ways to build a database:

1. Add a single decoded bitmap with ``add_image`` (single-image mode).
2. Load an image list file, one ``name|relative_path|width_in_meters``
   entry per line, with ``ImageDatabase.from_image_list``.

Indices are assigned in insertion order starting at 0 and are the keys the
tracker uses for its entries.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Iterator, List, Optional

from exceptions import ImageDatabaseError
from log_config.logger import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class ReferenceImage:
    index: int
    name: str
    path: Optional[Path] = None
    width_m: Optional[float] = None
    bitmap: Any = None


class ImageDatabase:
    def __init__(self) -> None:
        self._images: List[ReferenceImage] = []
        self._by_name: Dict[str, ReferenceImage] = {}

    def add_image(
        self,
        name: str,
        bitmap: Any = None,
        width_m: Optional[float] = None,
        path: Optional[Path] = None,
    ) -> int:
        if not name:
            raise ImageDatabaseError("Reference image name must not be empty")
        if name in self._by_name:
            raise ImageDatabaseError(f"Duplicate reference image name: {name}")
        if width_m is not None and width_m <= 0:
            raise ImageDatabaseError(f"Physical width must be positive for {name}: {width_m}")
        image = ReferenceImage(
            index=len(self._images),
            name=name,
            path=path,
            width_m=width_m,
            bitmap=bitmap,
        )
        self._images.append(image)
        self._by_name[name] = image
        return image.index

    @classmethod
    def from_image_list(cls, path: Path) -> "ImageDatabase":
        """Parse an image list file.

        Args:
            path: Image list file; relative image paths resolve against its directory

        Returns:
            Populated database

        Raises:
            ImageDatabaseError: If the file is missing or a line is malformed
        """
        path = Path(path)
        if not path.exists():
            raise ImageDatabaseError(f"Image list not found: {path}")

        database = cls()
        for line_no, raw in enumerate(path.read_text(encoding="utf-8").splitlines(), start=1):
            line = raw.strip()
            if not line or line.startswith("#"):
                continue
            parts = [part.strip() for part in line.split("|")]
            if len(parts) not in (2, 3) or not parts[0] or not parts[1]:
                raise ImageDatabaseError(f"{path}:{line_no}: expected 'name|path[|width_m]', got {raw!r}")
            width_m: Optional[float] = None
            if len(parts) == 3 and parts[2]:
                try:
                    width_m = float(parts[2])
                except ValueError:
                    raise ImageDatabaseError(f"{path}:{line_no}: invalid width {parts[2]!r}")
            database.add_image(parts[0], width_m=width_m, path=path.parent / parts[1])

        logger.info(f"Loaded {len(database)} reference images from {path}")
        return database

    def get(self, index: int) -> ReferenceImage:
        try:
            return self._images[index]
        except IndexError:
            raise ImageDatabaseError(f"No reference image at index {index}")

    def find(self, name: str) -> Optional[ReferenceImage]:
        return self._by_name.get(name)

    def __len__(self) -> int:
        return len(self._images)

    def __iter__(self) -> Iterator[ReferenceImage]:
        return iter(self._images)
