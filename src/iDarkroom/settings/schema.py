"""Schema helpers for the engine settings file."""

from __future__ import annotations

from copy import deepcopy
from typing import Any

from jsonschema import Draft202012Validator

from ..config import MASK_HIT_PADDING, WB_SAMPLE_RADIUS

SETTINGS_SCHEMA: dict[str, Any] = {
    "$id": "iDarkroom/settings.schema.json",
    "type": "object",
    "required": ["schema", "white_balance", "masks"],
    "properties": {
        "schema": {"const": "iDarkroom/settings@1"},
        "white_balance": {
            "type": "object",
            "properties": {
                "sample_radius": {"type": "integer", "minimum": 0, "maximum": 64},
            },
            "additionalProperties": True,
        },
        "masks": {
            "type": "object",
            "properties": {
                "hit_padding": {"type": "number", "minimum": 0},
                "brush": {
                    "type": "object",
                    "properties": {
                        "size": {"type": "number", "exclusiveMinimum": 0},
                        "feather": {"type": "number", "minimum": 0, "maximum": 100},
                    },
                },
            },
            "additionalProperties": True,
        },
    },
    "additionalProperties": True,
}

DEFAULT_SETTINGS: dict[str, Any] = {
    "schema": "iDarkroom/settings@1",
    "white_balance": {
        "sample_radius": WB_SAMPLE_RADIUS,
    },
    "masks": {
        "hit_padding": MASK_HIT_PADDING,
        "brush": {"size": 50.0, "feather": 50.0},
    },
}

_validator = Draft202012Validator(SETTINGS_SCHEMA)


def _merge_section(target: dict[str, Any], value: dict[str, Any]) -> None:
    for key, sub_value in value.items():
        if isinstance(sub_value, dict) and isinstance(target.get(key), dict):
            _merge_section(target[key], sub_value)
        else:
            target[key] = sub_value


def merge_with_defaults(data: dict[str, Any] | None) -> dict[str, Any]:
    """Merge *data* with :data:`DEFAULT_SETTINGS` and validate the result."""

    merged = deepcopy(DEFAULT_SETTINGS)
    if data:
        for key, value in data.items():
            if isinstance(value, dict) and isinstance(merged.get(key), dict):
                _merge_section(merged[key], value)
                continue
            merged[key] = value
    _validator.validate(merged)
    return merged


def validate_settings(data: dict[str, Any]) -> None:
    """Validate *data* against the settings schema."""

    _validator.validate(data)


__all__ = ["DEFAULT_SETTINGS", "SETTINGS_SCHEMA", "merge_with_defaults", "validate_settings"]
