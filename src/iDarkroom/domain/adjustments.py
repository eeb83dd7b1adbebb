"""Immutable edit state for a single image.

:class:`Adjustments` mirrors the persisted camelCase payload.  Values are
never mutated in place; :meth:`Adjustments.merged` returns a new instance
with a partial update applied so the edit session can swap state atomically.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from ..config import DEFAULT_GRAIN_SIZE, DEFAULT_VIGNETTE_FEATHER, DEFAULT_VIGNETTE_MIDPOINT
from ..core.curve_resolver import CurveParams
from ..core.tone_resolver import ColorGrading
from .masks import MaskContainer
from .schema import validate_adjustments


@dataclass(frozen=True)
class CropRect:
    """Crop rectangle in oriented image pixels."""

    x: float
    y: float
    width: float
    height: float

    def to_mapping(self) -> dict[str, float]:
        return {"x": self.x, "y": self.y, "width": self.width, "height": self.height}

    @staticmethod
    def from_mapping(data: Mapping[str, Any] | None) -> "CropRect | None":
        if not data:
            return None
        return CropRect(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            width=float(data.get("width", 0.0)),
            height=float(data.get("height", 0.0)),
        )


# Scalar fields and the camelCase key each one is persisted under.
_SCALAR_KEYS: dict[str, str] = {
    "exposure": "exposure",
    "brightness": "brightness",
    "contrast": "contrast",
    "highlights": "highlights",
    "shadows": "shadows",
    "whites": "whites",
    "blacks": "blacks",
    "saturation": "saturation",
    "vibrance": "vibrance",
    "clarity": "clarity",
    "dehaze": "dehaze",
    "structure": "structure",
    "sharpness": "sharpness",
    "temperature": "temperature",
    "tint": "tint",
    "rotation": "rotation",
    "vignette_amount": "vignetteAmount",
    "vignette_midpoint": "vignetteMidpoint",
    "vignette_feather": "vignetteFeather",
    "vignette_roundness": "vignetteRoundness",
    "grain_amount": "grainAmount",
    "grain_size": "grainSize",
    "ca_red_cyan": "chromaticAberrationRedCyan",
    "ca_blue_yellow": "chromaticAberrationBlueYellow",
}

_BOOL_KEYS: dict[str, str] = {
    "flip_horizontal": "flipHorizontal",
    "flip_vertical": "flipVertical",
    "enable_negative_conversion": "enableNegativeConversion",
}


@dataclass(frozen=True)
class Adjustments:
    """Complete non-destructive edit state."""

    exposure: float = 0.0
    brightness: float = 0.0
    contrast: float = 0.0
    highlights: float = 0.0
    shadows: float = 0.0
    whites: float = 0.0
    blacks: float = 0.0
    saturation: float = 0.0
    vibrance: float = 0.0
    clarity: float = 0.0
    dehaze: float = 0.0
    structure: float = 0.0
    sharpness: float = 0.0
    temperature: float = 0.0
    tint: float = 0.0
    curves: CurveParams = field(default_factory=CurveParams)
    color_grading: ColorGrading = field(default_factory=ColorGrading)
    shadows_tint: float = 0.0
    crop: CropRect | None = None
    rotation: float = 0.0
    orientation_steps: int = 0
    flip_horizontal: bool = False
    flip_vertical: bool = False
    vignette_amount: float = 0.0
    vignette_midpoint: float = DEFAULT_VIGNETTE_MIDPOINT
    vignette_feather: float = DEFAULT_VIGNETTE_FEATHER
    vignette_roundness: float = 0.0
    grain_amount: float = 0.0
    grain_size: float = DEFAULT_GRAIN_SIZE
    ca_red_cyan: float = 0.0
    ca_blue_yellow: float = 0.0
    enable_negative_conversion: bool = False
    masks: tuple[MaskContainer, ...] = ()
    ai_patches: tuple[MaskContainer, ...] = ()

    # ------------------------------------------------------------------
    # Derived values
    # ------------------------------------------------------------------
    @property
    def crop_origin(self) -> tuple[float, float]:
        """Return the crop's top-left corner, ``(0, 0)`` when uncropped."""

        if self.crop is None:
            return (0.0, 0.0)
        return (self.crop.x, self.crop.y)

    def containers(self) -> tuple[MaskContainer, ...]:
        """Return mask and AI patch containers in lookup order."""

        return self.masks + self.ai_patches

    # ------------------------------------------------------------------
    # Serialisation
    # ------------------------------------------------------------------
    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {key: float(getattr(self, name)) for name, key in _SCALAR_KEYS.items()}
        payload.update({key: bool(getattr(self, name)) for name, key in _BOOL_KEYS.items()})
        payload["orientationSteps"] = int(self.orientation_steps)
        payload["curves"] = self.curves.to_dict()
        payload["colorGrading"] = self.color_grading.to_dict()
        payload["colorCalibration"] = {"shadowsTint": float(self.shadows_tint)}
        payload["crop"] = None if self.crop is None else self.crop.to_mapping()
        payload["masks"] = [container.to_mapping() for container in self.masks]
        payload["aiPatches"] = [container.to_mapping() for container in self.ai_patches]
        return payload

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any] | None, *, validate: bool = False) -> "Adjustments":
        """Build adjustments from a persisted payload.

        Missing keys fall back to their defaults.  When *validate* is true the
        payload is checked against the adjustments schema first and
        :class:`~iDarkroom.errors.AdjustmentsValidationError` is raised on
        failure.
        """

        data = dict(data or {})
        if validate:
            validate_adjustments(data)
        return cls().merged(data)

    def merged(self, partial: Mapping[str, Any]) -> "Adjustments":
        """Return a copy with the camelCase fields in *partial* replaced."""

        changes: dict[str, Any] = {}
        for name, key in _SCALAR_KEYS.items():
            if key in partial and partial[key] is not None:
                changes[name] = float(partial[key])
        for name, key in _BOOL_KEYS.items():
            if key in partial:
                changes[name] = bool(partial[key])
        if "orientationSteps" in partial:
            changes["orientation_steps"] = int(partial["orientationSteps"]) % 4
        if "curves" in partial:
            changes["curves"] = _coerce(partial["curves"], CurveParams, CurveParams.from_dict)
        if "colorGrading" in partial:
            changes["color_grading"] = _coerce(
                partial["colorGrading"], ColorGrading, ColorGrading.from_dict
            )
        calibration = partial.get("colorCalibration")
        if isinstance(calibration, Mapping) and "shadowsTint" in calibration:
            changes["shadows_tint"] = float(calibration["shadowsTint"])
        if "crop" in partial:
            changes["crop"] = _coerce(partial["crop"], CropRect, CropRect.from_mapping)
        if "masks" in partial:
            changes["masks"] = _containers(partial["masks"])
        if "aiPatches" in partial:
            changes["ai_patches"] = _containers(partial["aiPatches"])
        return replace(self, **changes) if changes else self


def _coerce(value: Any, cls: type, factory) -> Any:
    if isinstance(value, cls):
        return value
    return factory(value)


def _containers(items: Any) -> tuple[MaskContainer, ...]:
    return tuple(
        item if isinstance(item, MaskContainer) else MaskContainer.from_mapping(item)
        for item in items or ()
    )


__all__ = ["Adjustments", "CropRect"]
