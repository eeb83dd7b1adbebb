"""JSON schema for persisted adjustment payloads."""

from __future__ import annotations

from typing import Any

from jsonschema import Draft202012Validator
from jsonschema.exceptions import ValidationError

from ..errors import AdjustmentsValidationError

_NUMBER = {"type": "number"}
_SLIDER = {"type": "number", "minimum": -100, "maximum": 100}
_POINT = {
    "type": "object",
    "required": ["x", "y"],
    "properties": {"x": _NUMBER, "y": _NUMBER},
}
_CURVE = {
    "type": "array",
    "items": {
        "type": "object",
        "required": ["x", "y"],
        "properties": {
            "x": {"type": "number", "minimum": 0, "maximum": 255},
            "y": {"type": "number", "minimum": 0, "maximum": 255},
        },
    },
}
_ZONE = {
    "type": "object",
    "properties": {
        "hue": _NUMBER,
        "saturation": {"type": "number", "minimum": 0, "maximum": 1},
        "luminance": _NUMBER,
    },
}
_LINE = {
    "type": "object",
    "required": ["brushSize", "points"],
    "properties": {
        "brushSize": {"type": "number", "minimum": 0},
        "feather": {"type": ["number", "null"]},
        "points": {"type": "array", "items": _POINT},
        "tool": {"enum": ["brush", "eraser", "ai-selector"]},
    },
}
_REQUIRED_PARAMETERS = {
    "radial": ["centerX", "centerY", "radiusX", "radiusY"],
    "linear": ["startX", "startY", "endX", "endY"],
}
_SUB_MASK = {
    "type": "object",
    "required": ["id", "type"],
    "allOf": [
        {
            "if": {"properties": {"type": {"const": mask_type}}, "required": ["type"]},
            "then": {
                "required": ["parameters"],
                "properties": {
                    "parameters": {
                        "required": keys,
                        "properties": {key: _NUMBER for key in keys},
                    }
                },
            },
        }
        for mask_type, keys in _REQUIRED_PARAMETERS.items()
    ],
    "properties": {
        "id": {"type": "string"},
        "type": {"enum": ["radial", "linear", "brush", "ai-subject", "quick-eraser"]},
        "mode": {"enum": ["additive", "subtractive"]},
        "visible": {"type": "boolean"},
        "parameters": {
            "type": "object",
            "properties": {"lines": {"type": "array", "items": _LINE}},
            "additionalProperties": True,
        },
    },
}
_CONTAINER = {
    "type": "object",
    "required": ["id"],
    "properties": {
        "id": {"type": "string"},
        "name": {"type": "string"},
        "visible": {"type": "boolean"},
        "subMasks": {"type": "array", "items": _SUB_MASK},
    },
}

ADJUSTMENTS_SCHEMA: dict[str, Any] = {
    "$id": "iDarkroom/adjustments.schema.json",
    "type": "object",
    "properties": {
        "exposure": {"type": "number", "minimum": -5, "maximum": 5},
        "brightness": _SLIDER,
        "contrast": _SLIDER,
        "highlights": _SLIDER,
        "shadows": _SLIDER,
        "whites": _SLIDER,
        "blacks": _SLIDER,
        "saturation": _SLIDER,
        "vibrance": _SLIDER,
        "clarity": _SLIDER,
        "dehaze": _SLIDER,
        "structure": _SLIDER,
        "sharpness": _SLIDER,
        "temperature": _SLIDER,
        "tint": _SLIDER,
        "curves": {
            "type": "object",
            "properties": {name: _CURVE for name in ("luma", "red", "green", "blue")},
        },
        "colorGrading": {
            "type": "object",
            "properties": {
                "shadows": _ZONE,
                "midtones": _ZONE,
                "highlights": _ZONE,
                "blending": _NUMBER,
                "balance": _SLIDER,
            },
        },
        "colorCalibration": {
            "type": "object",
            "properties": {"shadowsTint": _SLIDER},
        },
        "crop": {
            "type": ["object", "null"],
            "required": ["x", "y", "width", "height"],
            "properties": {
                "x": _NUMBER,
                "y": _NUMBER,
                "width": {"type": "number", "minimum": 0},
                "height": {"type": "number", "minimum": 0},
            },
        },
        "rotation": _NUMBER,
        "orientationSteps": {"type": "integer"},
        "flipHorizontal": {"type": "boolean"},
        "flipVertical": {"type": "boolean"},
        "vignetteAmount": _SLIDER,
        "vignetteMidpoint": {"type": "number", "minimum": 0, "maximum": 100},
        "vignetteFeather": {"type": "number", "minimum": 0, "maximum": 100},
        "vignetteRoundness": _SLIDER,
        "grainAmount": {"type": "number", "minimum": 0, "maximum": 100},
        "grainSize": {"type": "number", "minimum": 0, "maximum": 100},
        "chromaticAberrationRedCyan": _SLIDER,
        "chromaticAberrationBlueYellow": _SLIDER,
        "enableNegativeConversion": {"type": "boolean"},
        "masks": {"type": "array", "items": _CONTAINER},
        "aiPatches": {"type": "array", "items": _CONTAINER},
    },
    "additionalProperties": True,
}

_validator = Draft202012Validator(ADJUSTMENTS_SCHEMA)


def validate_adjustments(data: dict[str, Any]) -> None:
    """Validate *data* against :data:`ADJUSTMENTS_SCHEMA`.

    Raises :class:`AdjustmentsValidationError` describing the first failure.
    """

    try:
        _validator.validate(data)
    except ValidationError as exc:
        location = "/".join(str(part) for part in exc.absolute_path) or "<root>"
        raise AdjustmentsValidationError(f"{location}: {exc.message}") from exc


__all__ = ["ADJUSTMENTS_SCHEMA", "validate_adjustments"]
