"""Tone and colour composition on top of the curve tables.

The composer runs a fixed sequence over every table entry:

1. per-channel curve lookup followed by the luma (master) curve;
2. parametric blacks / whites / shadows / highlights;
3. zone colour grading (shadows, midtones, highlights);
4. calibration shadow tint on the green channel.

Reordering the steps changes the output.  With every slider at zero, no
grading and no tint, the composed table equals the curve table.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

import numpy as np

from .curve_resolver import CurveParams, generate_curve_lut


@dataclass(frozen=True)
class ColorGradingZone:
    """Hue (degrees) and saturation (``[0, 1]``) pushed into one tonal zone."""

    hue: float = 0.0
    saturation: float = 0.0
    luminance: float = 0.0

    def to_dict(self) -> dict[str, float]:
        return {"hue": self.hue, "saturation": self.saturation, "luminance": self.luminance}

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None) -> "ColorGradingZone":
        data = data or {}
        return ColorGradingZone(
            hue=float(data.get("hue", 0.0)),
            saturation=float(data.get("saturation", 0.0)),
            luminance=float(data.get("luminance", 0.0)),
        )


@dataclass(frozen=True)
class ColorGrading:
    """Three-way colour grading.  ``balance`` is a slider in ``[-100, 100]``."""

    shadows: ColorGradingZone = field(default_factory=ColorGradingZone)
    midtones: ColorGradingZone = field(default_factory=ColorGradingZone)
    highlights: ColorGradingZone = field(default_factory=ColorGradingZone)
    blending: float = 50.0
    balance: float = 0.0

    def is_identity(self) -> bool:
        return all(
            abs(zone.saturation) < 1e-6
            for zone in (self.shadows, self.midtones, self.highlights)
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "shadows": self.shadows.to_dict(),
            "midtones": self.midtones.to_dict(),
            "highlights": self.highlights.to_dict(),
            "blending": self.blending,
            "balance": self.balance,
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None) -> "ColorGrading":
        data = data or {}
        return ColorGrading(
            shadows=ColorGradingZone.from_dict(data.get("shadows")),
            midtones=ColorGradingZone.from_dict(data.get("midtones")),
            highlights=ColorGradingZone.from_dict(data.get("highlights")),
            blending=float(data.get("blending", 50.0)),
            balance=_clamp_balance(float(data.get("balance", 0.0))),
        )


@dataclass(frozen=True)
class ToneParams:
    """Slider values consumed by :func:`compose_channel_tables`.

    Sliders use the ``[-100, 100]`` range of the edit state.
    """

    blacks: float = 0.0
    whites: float = 0.0
    shadows: float = 0.0
    highlights: float = 0.0
    grading: ColorGrading = field(default_factory=ColorGrading)
    shadow_tint: float = 0.0

    def is_identity(self) -> bool:
        return (
            abs(self.blacks) < 1e-6
            and abs(self.whites) < 1e-6
            and abs(self.shadows) < 1e-6
            and abs(self.highlights) < 1e-6
            and abs(self.shadow_tint) < 1e-6
            and self.grading.is_identity()
        )

    @staticmethod
    def from_adjustments(adjustments: Any) -> "ToneParams":
        return ToneParams(
            blacks=adjustments.blacks,
            whites=adjustments.whites,
            shadows=adjustments.shadows,
            highlights=adjustments.highlights,
            grading=adjustments.color_grading,
            shadow_tint=adjustments.shadows_tint,
        )


def hue_push(hue: float, saturation: float) -> np.ndarray:
    """Return the RGB offset that tints mid grey towards *hue*.

    The colour is built at a fixed lightness of 0.5 using the usual six
    60-degree hue sectors, then re-centred on grey so an unsaturated zone
    contributes nothing.
    """

    if saturation == 0:
        return np.zeros(3, dtype=np.float64)

    h = float(hue) % 360.0
    c = float(saturation)
    x = c * (1.0 - abs(((h / 60.0) % 2.0) - 1.0))
    m = 0.5 - c / 2.0

    sector = int(h // 60.0)
    r, g, b = (
        (c, x, 0.0),
        (x, c, 0.0),
        (0.0, c, x),
        (0.0, x, c),
        (x, 0.0, c),
        (c, 0.0, x),
    )[min(sector, 5)]
    return np.array([r + m - 0.5, g + m - 0.5, b + m - 0.5], dtype=np.float64)


def _clamp_balance(balance: float) -> float:
    # Keeps the zone pivot strictly inside (0, 1).
    return min(max(balance, -100.0), 100.0)


def zone_weights(v: np.ndarray, balance: float) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
    """Return the ``(shadow, midtone, highlight)`` weights for levels *v*.

    *balance* is the grading slider in ``[-100, 100]``; it moves the
    shadow/highlight split point by up to ``0.2`` either way.
    """

    offset = (_clamp_balance(balance) / 100.0) * 0.2
    pivot = 0.5 + offset

    w_shadow = np.maximum(0.0, 1.0 - v / pivot) ** 2
    w_highlight = np.maximum(0.0, (v - pivot) / (1.0 - pivot)) ** 2
    w_mid = np.maximum(0.0, 1.0 - np.abs(v - 0.5) * 2.0)
    return w_shadow, w_mid, w_highlight


def _apply_basic_tone(v: np.ndarray, tone: ToneParams) -> np.ndarray:
    v = v + (tone.blacks / 100.0) * (1.0 - v) * 0.2
    v = v + (tone.whites / 100.0) * v * 0.2

    if tone.shadows != 0:
        bump = (tone.shadows / 100.0) * (0.5 - np.abs(v - 0.25) * 2.0) * 0.3
        v = np.where(v < 0.5, v + bump, v)
    if tone.highlights != 0:
        bump = (tone.highlights / 100.0) * (0.5 - np.abs(v - 0.75) * 2.0) * 0.3
        v = np.where(v > 0.5, v + bump, v)
    return v


def _apply_grading(v: np.ndarray, channel: int, grading: ColorGrading) -> np.ndarray:
    if grading.is_identity():
        return v
    w_shadow, w_mid, w_highlight = zone_weights(v, grading.balance)
    shadow = hue_push(grading.shadows.hue, grading.shadows.saturation)[channel]
    mid = hue_push(grading.midtones.hue, grading.midtones.saturation)[channel]
    high = hue_push(grading.highlights.hue, grading.highlights.saturation)[channel]
    offset = shadow * w_shadow + mid * w_mid + high * w_highlight
    return v + offset * 2.0


def _apply_shadow_tint(v: np.ndarray, tint: float) -> np.ndarray:
    if tint == 0:
        return v
    weight = np.maximum(0.0, 1.0 - v * 2.0)
    return np.where(v < 0.5, v - (tint / 100.0) * weight * 0.1, v)


def compose_channel_tables(curves: CurveParams, tone: ToneParams) -> np.ndarray:
    """Return the final ``(256, 3)`` channel lookup tables clamped to ``[0, 1]``."""

    curve_lut = generate_curve_lut(curves)
    out = np.empty_like(curve_lut)
    for channel in range(3):
        v = _apply_basic_tone(curve_lut[:, channel], tone)
        v = _apply_grading(v, channel, tone.grading)
        if channel == 1:
            v = _apply_shadow_tint(v, tone.shadow_tint)
        out[:, channel] = np.clip(v, 0.0, 1.0)
    return out


__all__ = [
    "ColorGrading",
    "ColorGradingZone",
    "ToneParams",
    "compose_channel_tables",
    "hue_push",
    "zone_weights",
]
