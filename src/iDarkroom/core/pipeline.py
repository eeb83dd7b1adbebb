"""Assemble the ordered pixel transform for a set of adjustments.

The renderer receives a :class:`PixelTransform`: a fixed-order list of
stages applied to the pixels followed by overlay layers composited on top.
Stage order is part of the contract:

1. ``lut``: per-channel 256-entry lookup from the curve/tone composer;
2. ``channel_shift``: chromatic aberration (optional);
3. ``convolution``: 3x3 sharpen (optional);
4. ``global_filter``: brightness, contrast, saturation and blur;
5. ``invert``: negative conversion (optional).

Overlays are composited in the order temperature/tint wash, vignette, grain.
"""

from __future__ import annotations

import enum
from dataclasses import dataclass
from typing import Any, Optional, Tuple, Union

import numpy as np

from ..config import (
    BLUR_DIVISOR,
    CHROMATIC_ABERRATION_DIVISOR,
    COOL_COLOR,
    GRAIN_OCTAVES,
    GREEN_COLOR,
    MAGENTA_COLOR,
    SHARPEN_DIVISOR,
    TEMP_TINT_MAX_OPACITY,
    WARM_COLOR,
)
from .tone_resolver import ToneParams, compose_channel_tables


class BlendMode(str, enum.Enum):
    """Compositing mode of an overlay layer."""

    OVERLAY = "overlay"
    MULTIPLY = "multiply"
    SCREEN = "screen"


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

@dataclass(frozen=True, eq=False)
class LutStage:
    """``table`` has shape ``(256, 3)`` with values in ``[0, 1]``."""

    table: np.ndarray
    name: str = "lut"


@dataclass(frozen=True)
class ChannelShiftStage:
    """Horizontal red/blue displacement in pixels; green stays in place."""

    red_dx: float
    blue_dx: float
    name: str = "channel_shift"


@dataclass(frozen=True)
class ConvolutionStage:
    """Row-major 3x3 kernel."""

    kernel: Tuple[float, ...]
    name: str = "convolution"

    def as_matrix(self) -> np.ndarray:
        return np.asarray(self.kernel, dtype=np.float32).reshape(3, 3)


@dataclass(frozen=True)
class GlobalFilterStage:
    """Multiplicative brightness/contrast/saturation factors and blur radius."""

    brightness: float = 1.0
    contrast: float = 1.0
    saturation: float = 1.0
    blur: float = 0.0
    name: str = "global_filter"

    def is_identity(self) -> bool:
        return (
            self.brightness == 1.0
            and self.contrast == 1.0
            and self.saturation == 1.0
            and self.blur == 0.0
        )


@dataclass(frozen=True)
class InvertStage:
    name: str = "invert"


Stage = Union[LutStage, ChannelShiftStage, ConvolutionStage, GlobalFilterStage, InvertStage]


# ---------------------------------------------------------------------------
# Overlays
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class ColorWashOverlay:
    """Flat colour layer used for the temperature/tint preview."""

    color: Tuple[int, int, int]
    opacity: float
    blend: BlendMode = BlendMode.OVERLAY
    name: str = "temperature_tint"


@dataclass(frozen=True)
class VignetteOverlay:
    """Radial gradient from transparent at ``inner_stop`` to ``opacity`` at ``outer_stop``.

    Stops are percentages of the centre-to-nearest-corner distance.
    """

    color: Tuple[int, int, int]
    opacity: float
    inner_stop: float
    outer_stop: float
    blend: BlendMode
    roundness: float = 0.0
    name: str = "vignette"


@dataclass(frozen=True)
class GrainOverlay:
    """Fractal noise texture composited with an overlay blend."""

    base_frequency: float
    octaves: int
    texture_opacity: float
    opacity: float
    blend: BlendMode = BlendMode.OVERLAY
    name: str = "grain"


Overlay = Union[ColorWashOverlay, VignetteOverlay, GrainOverlay]


@dataclass(frozen=True)
class PixelTransform:
    """Ordered stage list and overlay layers handed to the renderer."""

    stages: Tuple[Stage, ...]
    overlays: Tuple[Overlay, ...] = ()

    def stage_names(self) -> Tuple[str, ...]:
        return tuple(stage.name for stage in self.stages)

    def overlay_names(self) -> Tuple[str, ...]:
        return tuple(overlay.name for overlay in self.overlays)

    def stage(self, name: str) -> Optional[Stage]:
        for stage in self.stages:
            if stage.name == name:
                return stage
        return None


# ---------------------------------------------------------------------------
# Builders
# ---------------------------------------------------------------------------

def build_lut_stage(adjustments: Any) -> LutStage:
    return LutStage(
        table=compose_channel_tables(adjustments.curves, ToneParams.from_adjustments(adjustments))
    )


def build_channel_shift_stage(adjustments: Any) -> Optional[ChannelShiftStage]:
    red_dx = adjustments.ca_red_cyan / CHROMATIC_ABERRATION_DIVISOR
    blue_dx = adjustments.ca_blue_yellow / CHROMATIC_ABERRATION_DIVISOR
    if red_dx == 0 and blue_dx == 0:
        return None
    return ChannelShiftStage(red_dx=red_dx, blue_dx=blue_dx)


def build_sharpen_stage(adjustments: Any) -> Optional[ConvolutionStage]:
    strength = (adjustments.sharpness + adjustments.structure) / SHARPEN_DIVISOR
    if strength <= 0:
        return None
    k = -strength
    c = 1.0 + 4.0 * strength
    return ConvolutionStage(kernel=(0.0, k, 0.0, k, c, k, 0.0, k, 0.0))


def build_global_filter_stage(adjustments: Any) -> GlobalFilterStage:
    brightness = 1.0 + adjustments.brightness / 100.0 + adjustments.exposure / 2.0 - adjustments.dehaze / 400.0
    contrast = 1.0 + (adjustments.contrast + adjustments.clarity / 2.0 + adjustments.dehaze / 2.0) / 100.0
    saturation = 1.0 + (adjustments.saturation + adjustments.vibrance) / 100.0
    blur = abs(adjustments.sharpness) / BLUR_DIVISOR if adjustments.sharpness < 0 else 0.0
    return GlobalFilterStage(
        brightness=max(0.0, brightness),
        contrast=max(0.0, contrast),
        saturation=max(0.0, saturation),
        blur=blur,
    )


def build_color_wash_overlay(adjustments: Any) -> Optional[ColorWashOverlay]:
    """Mix the temperature and tint colours into one wash.

    Each active slider contributes its colour scaled by its magnitude.  The
    opacity is the mean magnitude of the active sliders, capped at 0.5.
    """

    temperature = adjustments.temperature / 100.0
    tint = adjustments.tint / 100.0
    if temperature == 0 and tint == 0:
        return None

    rgb = np.zeros(3, dtype=np.float64)
    opacity = 0.0
    active = 0
    for value, positive, negative in (
        (temperature, WARM_COLOR, COOL_COLOR),
        (tint, MAGENTA_COLOR, GREEN_COLOR),
    ):
        if value == 0:
            continue
        rgb += np.asarray(positive if value > 0 else negative, dtype=np.float64) * abs(value)
        opacity += abs(value)
        active += 1

    rgb = np.minimum(rgb, 255.0)
    color = tuple(int(round(channel)) for channel in rgb)
    return ColorWashOverlay(color=color, opacity=min(TEMP_TINT_MAX_OPACITY, opacity / active))


def build_vignette_overlay(adjustments: Any) -> Optional[VignetteOverlay]:
    amount = adjustments.vignette_amount
    if amount == 0:
        return None
    dark = amount < 0
    midpoint = adjustments.vignette_midpoint
    return VignetteOverlay(
        color=(0, 0, 0) if dark else (255, 255, 255),
        opacity=abs(amount) / 100.0,
        inner_stop=midpoint,
        outer_stop=min(100.0, midpoint + 50.0 + (100.0 - adjustments.vignette_feather)),
        blend=BlendMode.MULTIPLY if dark else BlendMode.SCREEN,
        roundness=adjustments.vignette_roundness,
    )


def build_grain_overlay(adjustments: Any) -> Optional[GrainOverlay]:
    amount = adjustments.grain_amount
    if amount == 0:
        return None
    return GrainOverlay(
        base_frequency=0.5 + (100.0 - adjustments.grain_size) / 200.0,
        octaves=GRAIN_OCTAVES,
        texture_opacity=amount / 100.0,
        opacity=0.5 + amount / 200.0,
    )


def build_pixel_transform(adjustments: Any) -> PixelTransform:
    """Return the full :class:`PixelTransform` for *adjustments*."""

    stages: list[Stage] = [build_lut_stage(adjustments)]
    shift = build_channel_shift_stage(adjustments)
    if shift is not None:
        stages.append(shift)
    sharpen = build_sharpen_stage(adjustments)
    if sharpen is not None:
        stages.append(sharpen)
    stages.append(build_global_filter_stage(adjustments))
    if adjustments.enable_negative_conversion:
        stages.append(InvertStage())

    overlays = [
        overlay
        for overlay in (
            build_color_wash_overlay(adjustments),
            build_vignette_overlay(adjustments),
            build_grain_overlay(adjustments),
        )
        if overlay is not None
    ]
    return PixelTransform(stages=tuple(stages), overlays=tuple(overlays))


__all__ = [
    "BlendMode",
    "ChannelShiftStage",
    "ColorWashOverlay",
    "ConvolutionStage",
    "GlobalFilterStage",
    "GrainOverlay",
    "InvertStage",
    "LutStage",
    "Overlay",
    "PixelTransform",
    "Stage",
    "VignetteOverlay",
    "build_channel_shift_stage",
    "build_color_wash_overlay",
    "build_global_filter_stage",
    "build_grain_overlay",
    "build_lut_stage",
    "build_pixel_transform",
    "build_sharpen_stage",
    "build_vignette_overlay",
]
