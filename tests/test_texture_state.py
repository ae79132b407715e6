"""Tests for the card texture state machine."""

from __future__ import annotations

import pytest

from cards import CardTexture, CardTextureManager, DirectoryAssetStore, TextureLayout, TextureMode, next_mode


@pytest.fixture
def manager(asset_root, renderer) -> CardTextureManager:
    textures = CardTextureManager(DirectoryAssetStore(asset_root), renderer)
    textures.load_placeholder()
    return textures


def test_next_mode_toggles_between_info_and_picture() -> None:
    assert next_mode(TextureMode.DEFAULT) is TextureMode.INFO
    assert next_mode(TextureMode.INFO) is TextureMode.PICTURE
    assert next_mode(TextureMode.PICTURE) is TextureMode.INFO


def test_layout_paths_use_image_name() -> None:
    layout = TextureLayout()

    assert layout.path_for(TextureMode.INFO, "He") == "models/textures/element_info/He"
    assert layout.path_for(TextureMode.PICTURE, "He") == "models/textures/element_pictures/He"
    assert layout.path_for(TextureMode.DEFAULT, "He") == "models/textures/template.png"


def test_first_draw_loads_info_texture(manager, renderer) -> None:
    texture = CardTexture()

    handle = manager.ensure_loaded(texture, "H")

    assert texture.mode is TextureMode.INFO
    assert handle is texture.handle
    assert handle is not manager.placeholder


def test_ensure_loaded_does_not_reload_info(manager, renderer) -> None:
    texture = CardTexture()
    manager.ensure_loaded(texture, "H")
    uploads = len(renderer.uploads)

    manager.ensure_loaded(texture, "H")

    assert len(renderer.uploads) == uploads


def test_draw_then_taps_cycle_info_picture_info(manager) -> None:
    texture = CardTexture()

    manager.ensure_loaded(texture, "H")
    assert texture.mode is TextureMode.INFO
    assert manager.toggle(texture, "H") is TextureMode.PICTURE
    assert manager.toggle(texture, "H") is TextureMode.INFO


def test_toggle_from_default_goes_to_info(manager) -> None:
    texture = CardTexture()

    assert manager.toggle(texture, "Li") is TextureMode.INFO


def test_toggle_releases_previous_texture(manager, renderer) -> None:
    texture = CardTexture()
    manager.ensure_loaded(texture, "H")
    info_handle = texture.handle

    manager.toggle(texture, "H")

    assert renderer.released == [info_handle]


def test_missing_asset_falls_back_to_placeholder(manager) -> None:
    texture = CardTexture()

    handle = manager.ensure_loaded(texture, "He")

    assert texture.mode is TextureMode.DEFAULT
    assert handle is manager.placeholder


def test_fallback_retries_info_on_next_draw(manager, asset_root, make_png) -> None:
    texture = CardTexture()
    manager.ensure_loaded(texture, "He")
    (asset_root / "models" / "textures" / "element_info" / "He").write_bytes(make_png())

    manager.ensure_loaded(texture, "He")

    assert texture.mode is TextureMode.INFO
    assert texture.handle is not manager.placeholder


def test_undecodable_asset_falls_back_to_placeholder(manager, asset_root) -> None:
    (asset_root / "models" / "textures" / "element_pictures" / "H").write_bytes(b"not an image")
    texture = CardTexture()
    manager.ensure_loaded(texture, "H")

    mode = manager.toggle(texture, "H")

    assert mode is TextureMode.DEFAULT
    assert texture.handle is manager.placeholder


def test_placeholder_is_never_released(manager, renderer) -> None:
    texture = CardTexture()
    manager.ensure_loaded(texture, "He")

    manager.release(texture)

    assert renderer.released == []
    assert texture.handle is None
    assert texture.mode is TextureMode.DEFAULT


def test_release_frees_loaded_texture(manager, renderer) -> None:
    texture = CardTexture()
    manager.ensure_loaded(texture, "Li")
    handle = texture.handle

    manager.release(texture)

    assert renderer.released == [handle]
