"""Configuration validation using JSON Schema."""

from __future__ import annotations

import copy
from pathlib import Path
from typing import Any, Dict

import jsonschema
import yaml
from jsonschema import Draft7Validator, validators

from exceptions import ConfigValidationError
from log_config.logger import get_logger

logger = get_logger(__name__)

_RGBA = {
    "type": "array",
    "items": {"type": "number", "minimum": 0.0, "maximum": 1.0},
    "minItems": 4,
    "maxItems": 4,
}

# JSON Schema for default.yaml configuration
CONFIG_SCHEMA = {
    "$schema": "http://json-schema.org/draft-07/schema#",
    "type": "object",
    "required": ["session", "assets"],
    "properties": {
        "session": {
            "type": "object",
            "properties": {
                "focus_mode": {"type": "string", "enum": ["auto", "fixed"], "default": "auto"},
                "use_single_image": {"type": "boolean", "default": False},
                "image_list": {"type": ["string", "null"], "default": None},
                "single_image": {"type": ["string", "null"], "default": None},
                "single_image_name": {"type": "string", "minLength": 1, "default": "image_name"},
            },
        },
        "camera": {
            "type": "object",
            "default": {},
            "properties": {
                "near_clip": {"type": "number", "exclusiveMinimum": 0, "maximum": 10, "default": 0.1},
                "far_clip": {"type": "number", "minimum": 1, "maximum": 10000, "default": 100.0},
            },
        },
        "assets": {
            "type": "object",
            "required": ["root"],
            "properties": {
                "root": {"type": "string"},
                "textures_dir": {"type": "string", "default": "models/textures"},
                "info_dir": {"type": "string", "default": "element_info"},
                "picture_dir": {"type": "string", "default": "element_pictures"},
                "placeholder": {"type": "string", "default": "models/textures/template.png"},
            },
        },
        "interaction": {
            "type": "object",
            "default": {},
            "properties": {
                "hit_policy": {"type": "string", "enum": ["all", "front_most"], "default": "all"},
            },
        },
        "render": {
            "type": "object",
            "default": {},
            "properties": {
                "clear_color": dict(_RGBA, default=[0.1, 0.1, 0.1, 1.0]),
                "frame_budget_ms": {"type": "number", "minimum": 1, "maximum": 1000, "default": 33.0},
            },
        },
        "logging": {
            "type": "object",
            "default": {},
            "properties": {
                "level": {
                    "type": "string",
                    "enum": ["TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"],
                    "default": "INFO",
                },
                "log_dir": {"type": ["string", "null"], "default": None},
            },
        },
    },
}


def extend_with_default(validator_class):
    """Extend JSON Schema validator to set default values."""
    validate_properties = validator_class.VALIDATORS["properties"]

    def set_defaults(validator, properties, instance, schema):
        if validator.is_type(instance, "object"):
            for prop, subschema in properties.items():
                if "default" in subschema:
                    instance.setdefault(prop, copy.deepcopy(subschema["default"]))

        for error in validate_properties(validator, properties, instance, schema):
            yield error

    return validators.extend(validator_class, {"properties": set_defaults})


DefaultValidatingValidator = extend_with_default(Draft7Validator)


def validate_config(config: Dict[str, Any]) -> None:
    """Validate configuration against JSON Schema, filling in defaults.

    Args:
        config: Configuration dictionary (modified in place)

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    try:
        validator = DefaultValidatingValidator(CONFIG_SCHEMA)
        errors = list(validator.iter_errors(config))

        if errors:
            error_messages = []
            for error in errors:
                path = " -> ".join(str(p) for p in error.path) if error.path else "root"
                error_messages.append(f"{path}: {error.message}")

            logger.error(f"Configuration validation failed with {len(errors)} errors")
            for msg in error_messages:
                logger.error(f"  - {msg}")

            raise ConfigValidationError(
                f"Configuration validation failed with {len(errors)} error(s). See logs for details.",
                validation_errors=error_messages,
            )

        logger.info("Configuration validation passed")

    except jsonschema.exceptions.SchemaError as e:
        logger.error(f"Invalid schema: {e}")
        raise ConfigValidationError(f"Invalid schema definition: {e}")


def validate_config_file(config_path: str) -> None:
    """Validate a YAML configuration file.

    Args:
        config_path: Path to configuration file

    Raises:
        ConfigValidationError: If configuration is invalid
    """
    path = Path(config_path)
    if not path.exists():
        raise ConfigValidationError(f"Configuration file not found: {config_path}")

    try:
        with open(path, "r") as f:
            config = yaml.safe_load(f)
    except yaml.YAMLError as e:
        logger.error(f"Failed to parse YAML: {e}")
        raise ConfigValidationError(f"Failed to parse configuration file: {e}")

    validate_config(config)


__all__ = ["validate_config", "validate_config_file", "CONFIG_SCHEMA"]
