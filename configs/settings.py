"""Configuration loading for the element card viewer."""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple

import yaml

from cards.texture import TextureLayout
from configs.validator import validate_config
from exceptions import ConfigError, InvalidConfigError
from interaction.hit_test import HitPolicy
from log_config.logger import get_logger
from session.ar_session import FocusMode

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionSettings:
    focus_mode: FocusMode
    use_single_image: bool
    image_list: Optional[Path]
    single_image: Optional[str]
    single_image_name: str = "image_name"


@dataclass(frozen=True)
class CameraSettings:
    near_clip: float = 0.1
    far_clip: float = 100.0


@dataclass(frozen=True)
class AssetSettings:
    root: Path
    textures_dir: str = "models/textures"
    info_dir: str = "element_info"
    picture_dir: str = "element_pictures"
    placeholder: str = "models/textures/template.png"

    def texture_layout(self) -> TextureLayout:
        return TextureLayout(
            textures_dir=self.textures_dir,
            info_dir=self.info_dir,
            picture_dir=self.picture_dir,
            placeholder=self.placeholder,
        )


@dataclass(frozen=True)
class InteractionSettings:
    hit_policy: HitPolicy = HitPolicy.ALL


@dataclass(frozen=True)
class RenderSettings:
    clear_color: Tuple[float, float, float, float] = (0.1, 0.1, 0.1, 1.0)
    frame_budget_ms: float = 33.0


@dataclass(frozen=True)
class LoggingSettings:
    level: str = "INFO"
    log_dir: Optional[Path] = None


@dataclass(frozen=True)
class AppConfig:
    session: SessionSettings
    camera: CameraSettings
    assets: AssetSettings
    interaction: InteractionSettings
    render: RenderSettings
    logging: LoggingSettings


def _resolve(base: Path, value: Optional[str]) -> Optional[Path]:
    if value is None:
        return None
    path = Path(value)
    return path if path.is_absolute() else base / path


def load_config(path: Path) -> AppConfig:
    """Load and validate configuration from YAML file.

    Relative paths in the file resolve against the file's directory.

    Args:
        path: Path to configuration file

    Returns:
        Validated AppConfig instance

    Raises:
        ConfigError: If configuration is invalid or cannot be loaded
    """
    path = Path(path)
    try:
        logger.info(f"Loading configuration from {path}")
        if not path.exists():
            raise InvalidConfigError(f"Configuration file not found: {path}")

        data = yaml.safe_load(path.read_text())

    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML configuration: {e}")
        raise InvalidConfigError(f"Failed to parse configuration file: {e}")

    return config_from_dict(data, base_dir=path.parent)


def config_from_dict(data: dict, base_dir: Path = Path(".")) -> AppConfig:
    """Validate a configuration dictionary and build an AppConfig.

    Raises:
        ConfigValidationError: If the dictionary fails schema validation
        InvalidConfigError: If values are inconsistent
    """
    validate_config(data)
    try:
        session_data = data["session"]
        session = SessionSettings(
            focus_mode=FocusMode(session_data["focus_mode"]),
            use_single_image=bool(session_data["use_single_image"]),
            image_list=_resolve(base_dir, session_data.get("image_list")),
            single_image=session_data.get("single_image"),
            single_image_name=session_data["single_image_name"],
        )
        if not session.use_single_image and session.image_list is None:
            raise InvalidConfigError("session.image_list is required unless use_single_image is set")
        if session.use_single_image and not session.single_image:
            raise InvalidConfigError("session.single_image is required when use_single_image is set")

        assets_data = data["assets"]
        assets = AssetSettings(
            root=_resolve(base_dir, assets_data["root"]),
            textures_dir=assets_data["textures_dir"],
            info_dir=assets_data["info_dir"],
            picture_dir=assets_data["picture_dir"],
            placeholder=assets_data["placeholder"],
        )
        camera = CameraSettings(**data["camera"])
        if camera.far_clip <= camera.near_clip:
            raise InvalidConfigError(
                f"camera.far_clip ({camera.far_clip}) must exceed near_clip ({camera.near_clip})"
            )
        interaction = InteractionSettings(hit_policy=HitPolicy(data["interaction"]["hit_policy"]))
        render = RenderSettings(
            clear_color=tuple(data["render"]["clear_color"]),
            frame_budget_ms=float(data["render"]["frame_budget_ms"]),
        )
        logging_data = data["logging"]
        logging = LoggingSettings(
            level=logging_data["level"],
            log_dir=_resolve(base_dir, logging_data.get("log_dir")),
        )

        config = AppConfig(
            session=session,
            camera=camera,
            assets=assets,
            interaction=interaction,
            render=render,
            logging=logging,
        )

        logger.info(
            f"Configuration loaded successfully: assets at {config.assets.root}, "
            f"hit policy {config.interaction.hit_policy.value}"
        )
        return config

    except ConfigError:
        raise
    except Exception as e:
        logger.error(f"Failed to construct configuration objects: {e}")
        raise InvalidConfigError(f"Failed to construct configuration: {e}")
