"""Shared fixtures: fake renderer, on-disk assets, and configuration."""

from __future__ import annotations

import itertools
from pathlib import Path
from typing import Callable, List, Tuple

import cv2
import numpy as np
import pytest

from app.events.error_bus import ErrorEventBus
from configs.settings import AppConfig, config_from_dict
from contracts import CameraView, Pose
from session import ImageDatabase, SessionConfig, SimulatedArSession
from ui.render import CardRenderer, TextureHandle

ELEMENTS = ("H", "He", "Li")


def png_bytes(color: Tuple[int, int, int] = (0, 0, 255), size: Tuple[int, int] = (8, 8)) -> bytes:
    image = np.full((size[1], size[0], 3), color, dtype=np.uint8)
    ok, buffer = cv2.imencode(".png", image)
    assert ok
    return buffer.tobytes()


class FakeRenderer(CardRenderer):
    def __init__(self) -> None:
        self.created = False
        self.viewport = None
        self.clears = 0
        self.uploads: List[TextureHandle] = []
        self.released: List[TextureHandle] = []
        self.draws: List[dict] = []
        self._ids = itertools.count(1)

    def create_on_gl_thread(self) -> None:
        self.created = True

    def set_viewport(self, width: int, height: int) -> None:
        self.viewport = (width, height)

    def clear(self, clear_color) -> None:
        self.clears += 1

    def upload_texture(self, bitmap: np.ndarray) -> TextureHandle:
        height, width = bitmap.shape[:2]
        handle = TextureHandle(texture_id=next(self._ids), width=width, height=height)
        self.uploads.append(handle)
        return handle

    def release_texture(self, handle: TextureHandle) -> None:
        self.released.append(handle)

    def draw_card(self, view_matrix, projection_matrix, anchor_matrix, extent_x, extent_z, color_correction, texture):
        self.draws.append(
            {
                "anchor_matrix": anchor_matrix,
                "extent": (extent_x, extent_z),
                "color_correction": color_correction,
                "texture": texture,
            }
        )


@pytest.fixture
def renderer() -> FakeRenderer:
    return FakeRenderer()


@pytest.fixture
def make_png() -> Callable[..., bytes]:
    return png_bytes


@pytest.fixture
def asset_root(tmp_path: Path) -> Path:
    """Asset tree with textures for H and Li; He has none."""
    root = tmp_path / "assets"
    textures = root / "models" / "textures"
    (textures / "element_info").mkdir(parents=True)
    (textures / "element_pictures").mkdir(parents=True)
    (textures / "template.png").write_bytes(png_bytes((128, 128, 128)))
    for name in ("H", "Li"):
        (textures / "element_info" / name).write_bytes(png_bytes((255, 0, 0)))
        (textures / "element_pictures" / name).write_bytes(png_bytes((0, 255, 0)))

    table = root / "periodic_table"
    table.mkdir()
    lines = ["# reference images"] + [f"{name}|cards/{name}.jpg|0.2" for name in ELEMENTS]
    (table / "image_list.txt").write_text("\n".join(lines) + "\n")
    (root / "default.jpg").write_bytes(png_bytes((10, 20, 30)))
    return root


@pytest.fixture
def config_data(asset_root: Path) -> dict:
    return {
        "session": {"image_list": str(asset_root / "periodic_table" / "image_list.txt")},
        "assets": {"root": str(asset_root)},
    }


@pytest.fixture
def app_config(config_data: dict, asset_root: Path) -> AppConfig:
    return config_from_dict(config_data, base_dir=asset_root)


@pytest.fixture
def error_bus() -> ErrorEventBus:
    return ErrorEventBus()


@pytest.fixture
def front_camera() -> CameraView:
    """Camera at the origin looking down -Z with a 90 degree square frustum."""
    return CameraView(pose=Pose.identity(), vertical_fov_deg=90.0, aspect_ratio=1.0)


@pytest.fixture
def running_session(front_camera: CameraView) -> SimulatedArSession:
    database = ImageDatabase()
    for name in ELEMENTS:
        database.add_image(name, width_m=0.2)
    session = SimulatedArSession(camera=front_camera)
    session.configure(SessionConfig(image_database=database))
    session.resume()
    return session
