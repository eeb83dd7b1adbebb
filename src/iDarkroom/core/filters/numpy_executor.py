"""NumPy reference executor for :class:`~iDarkroom.core.pipeline.PixelTransform`.

Each stage is a pure ``(pixels, stage) -> pixels`` function over float32
``(H, W, 3)`` arrays in ``[0, 1]``.  Overlays are generated at the image size
and composited with the overlay, multiply or screen blend they request.  The
executor exists so the transform contract can be checked on the CPU; it is
not tuned for interactive rendering.
"""

from __future__ import annotations

import math

import numpy as np
from PIL import Image, ImageFilter

from ..pipeline import (
    BlendMode,
    ChannelShiftStage,
    ColorWashOverlay,
    ConvolutionStage,
    GlobalFilterStage,
    GrainOverlay,
    InvertStage,
    LutStage,
    PixelTransform,
    VignetteOverlay,
)
from ...utils.logging import get_logger

logger = get_logger(__name__)

# Rec. 709 luma weights used by the saturation matrix.
_LUMA_R = 0.213
_LUMA_G = 0.715
_LUMA_B = 0.072


def _np_clamp01(arr: np.ndarray) -> np.ndarray:
    """Clamp array values to [0.0, 1.0]."""
    return np.clip(arr, 0.0, 1.0)


def _np_mix(a: np.ndarray, b: np.ndarray, t) -> np.ndarray:
    """Vectorized equivalent of GLSL's ``mix`` helper."""
    return a * (1.0 - t) + b * t


def _as_float_pixels(pixels: np.ndarray) -> np.ndarray:
    if pixels.dtype == np.uint8:
        return pixels[:, :, :3].astype(np.float32) / np.float32(255.0)
    return np.asarray(pixels[:, :, :3], dtype=np.float32)


# ---------------------------------------------------------------------------
# Stages
# ---------------------------------------------------------------------------

def apply_lut(pixels: np.ndarray, stage: LutStage) -> np.ndarray:
    table = np.asarray(stage.table, dtype=np.float32)
    index = np.clip(np.floor(pixels * 255.0 + 0.5), 0, 255).astype(np.intp)
    out = np.empty_like(pixels)
    for channel in range(3):
        out[:, :, channel] = table[index[:, :, channel], channel]
    return out


def _np_shift_columns(channel: np.ndarray, dx: float) -> np.ndarray:
    """Shift *channel* right by *dx* pixels with linear sampling and edge clamping."""

    if dx == 0:
        return channel
    width = channel.shape[1]
    source = np.arange(width, dtype=np.float32) - np.float32(dx)
    left = np.floor(source)
    frac = (source - left)[None, :]
    i0 = np.clip(left.astype(np.intp), 0, width - 1)
    i1 = np.clip(left.astype(np.intp) + 1, 0, width - 1)
    return _np_mix(channel[:, i0], channel[:, i1], frac)


def apply_channel_shift(pixels: np.ndarray, stage: ChannelShiftStage) -> np.ndarray:
    out = pixels.copy()
    out[:, :, 0] = _np_shift_columns(pixels[:, :, 0], stage.red_dx)
    out[:, :, 2] = _np_shift_columns(pixels[:, :, 2], stage.blue_dx)
    return out


def apply_convolution(pixels: np.ndarray, stage: ConvolutionStage) -> np.ndarray:
    kernel = stage.as_matrix()
    height, width = pixels.shape[:2]
    padded = np.pad(pixels, ((1, 1), (1, 1), (0, 0)), mode="edge")
    out = np.zeros_like(pixels)
    for dy in range(3):
        for dx in range(3):
            weight = kernel[dy, dx]
            if weight == 0:
                continue
            out += weight * padded[dy:dy + height, dx:dx + width, :]
    return _np_clamp01(out)


def _np_saturate(pixels: np.ndarray, amount: float) -> np.ndarray:
    s = float(amount)
    matrix = np.array(
        [
            [_LUMA_R + (1 - _LUMA_R) * s, _LUMA_G - _LUMA_G * s, _LUMA_B - _LUMA_B * s],
            [_LUMA_R - _LUMA_R * s, _LUMA_G + (1 - _LUMA_G) * s, _LUMA_B - _LUMA_B * s],
            [_LUMA_R - _LUMA_R * s, _LUMA_G - _LUMA_G * s, _LUMA_B + (1 - _LUMA_B) * s],
        ],
        dtype=np.float32,
    )
    return pixels @ matrix.T


def _pil_gaussian_blur(pixels: np.ndarray, radius: float) -> np.ndarray:
    as_bytes = np.round(_np_clamp01(pixels) * 255.0).astype(np.uint8)
    blurred = Image.fromarray(as_bytes).filter(ImageFilter.GaussianBlur(radius=radius))
    return np.asarray(blurred, dtype=np.float32) / np.float32(255.0)


def apply_global_filter(pixels: np.ndarray, stage: GlobalFilterStage) -> np.ndarray:
    out = pixels * np.float32(stage.brightness)
    out = (out - 0.5) * np.float32(stage.contrast) + 0.5
    out = _np_clamp01(out)
    if stage.saturation != 1.0:
        out = _np_clamp01(_np_saturate(out, stage.saturation))
    if stage.blur > 0:
        out = _pil_gaussian_blur(out, stage.blur)
    return out.astype(np.float32, copy=False)


def apply_invert(pixels: np.ndarray, stage: InvertStage) -> np.ndarray:
    return 1.0 - pixels


_STAGE_HANDLERS = {
    LutStage: apply_lut,
    ChannelShiftStage: apply_channel_shift,
    ConvolutionStage: apply_convolution,
    GlobalFilterStage: apply_global_filter,
    InvertStage: apply_invert,
}


# ---------------------------------------------------------------------------
# Overlays
# ---------------------------------------------------------------------------

def _np_blend(base: np.ndarray, layer: np.ndarray, mode: BlendMode) -> np.ndarray:
    if mode is BlendMode.MULTIPLY:
        return base * layer
    if mode is BlendMode.SCREEN:
        return 1.0 - (1.0 - base) * (1.0 - layer)
    return np.where(base < 0.5, 2.0 * base * layer, 1.0 - 2.0 * (1.0 - base) * (1.0 - layer))


def _composite(base: np.ndarray, layer: np.ndarray, alpha, mode: BlendMode) -> np.ndarray:
    blended = _np_blend(base, layer, mode)
    return _np_clamp01(_np_mix(base, blended, alpha)).astype(np.float32, copy=False)


def _solid(shape: tuple[int, ...], color: tuple[int, int, int]) -> np.ndarray:
    layer = np.empty(shape, dtype=np.float32)
    layer[...] = np.asarray(color, dtype=np.float32) / np.float32(255.0)
    return layer


def vignette_alpha(width: int, height: int, overlay: VignetteOverlay) -> np.ndarray:
    """Return the ``(H, W)`` alpha of a centred closest-corner radial gradient."""

    cx = width / 2.0
    cy = height / 2.0
    radius = math.hypot(cx, cy) or 1.0
    xs = np.arange(width, dtype=np.float32) + 0.5 - cx
    ys = np.arange(height, dtype=np.float32) + 0.5 - cy
    distance = np.sqrt(xs[None, :] ** 2 + ys[:, None] ** 2) / radius * 100.0
    span = overlay.outer_stop - overlay.inner_stop
    if span <= 0:
        ramp = (distance >= overlay.inner_stop).astype(np.float32)
    else:
        ramp = np.clip((distance - overlay.inner_stop) / span, 0.0, 1.0)
    return (ramp * overlay.opacity).astype(np.float32)


def _generate_grain_field(width: int, height: int, frequency: float = 1.0) -> np.ndarray:
    """Generate a deterministic pseudo-random grain field for the given dimensions.

    Uses a sine-based hash over the lattice scaled by *frequency* to create a
    repeatable noise pattern in [0.0, 1.0].
    """
    if width <= 0 or height <= 0:
        return np.zeros((max(1, height), max(1, width)), dtype=np.float32)

    u = np.floor(np.arange(width, dtype=np.float32) * np.float32(frequency))
    v = np.floor(np.arange(height, dtype=np.float32) * np.float32(frequency))
    seed = u[None, :] * np.float32(12.9898) + v[:, None] * np.float32(78.233)
    noise = np.sin(seed).astype(np.float32, copy=False) * np.float32(43758.5453)
    fraction = noise - np.floor(noise)
    return np.clip(fraction.astype(np.float32), 0.0, 1.0)


def fractal_noise(width: int, height: int, base_frequency: float, octaves: int) -> np.ndarray:
    """Sum *octaves* grain fields, doubling the frequency and halving the weight."""

    total = np.zeros((height, width), dtype=np.float32)
    weight_sum = 0.0
    frequency = float(base_frequency)
    weight = 1.0
    for _ in range(max(1, octaves)):
        total += np.float32(weight) * _generate_grain_field(width, height, frequency)
        weight_sum += weight
        frequency *= 2.0
        weight *= 0.5
    return total / np.float32(weight_sum)


def apply_overlay(pixels: np.ndarray, overlay) -> np.ndarray:
    height, width = pixels.shape[:2]
    if isinstance(overlay, ColorWashOverlay):
        layer = _solid(pixels.shape, overlay.color)
        return _composite(pixels, layer, np.float32(overlay.opacity), overlay.blend)
    if isinstance(overlay, VignetteOverlay):
        layer = _solid(pixels.shape, overlay.color)
        alpha = vignette_alpha(width, height, overlay)[:, :, None]
        return _composite(pixels, layer, alpha, overlay.blend)
    if isinstance(overlay, GrainOverlay):
        noise = fractal_noise(width, height, overlay.base_frequency, overlay.octaves)
        layer = np.repeat(noise[:, :, None], 3, axis=2)
        alpha = np.float32(overlay.texture_opacity * overlay.opacity)
        return _composite(pixels, layer, alpha, overlay.blend)
    raise TypeError(f"Unsupported overlay: {type(overlay).__name__}")


# ---------------------------------------------------------------------------
# Entry point
# ---------------------------------------------------------------------------

def apply_pixel_transform(pixels: np.ndarray, transform: PixelTransform) -> np.ndarray:
    """Run every stage then every overlay of *transform* over *pixels*.

    *pixels* may be ``uint8`` or float; the result is float32 in ``[0, 1]``.
    """

    out = _as_float_pixels(pixels)
    for stage in transform.stages:
        handler = _STAGE_HANDLERS.get(type(stage))
        if handler is None:
            raise TypeError(f"Unsupported stage: {type(stage).__name__}")
        out = handler(out, stage)
    for overlay in transform.overlays:
        out = apply_overlay(out, overlay)
    logger.debug(
        "Applied %d stages and %d overlays to %dx%d pixels",
        len(transform.stages),
        len(transform.overlays),
        out.shape[1],
        out.shape[0],
    )
    return _np_clamp01(out).astype(np.float32, copy=False)


__all__ = [
    "apply_channel_shift",
    "apply_convolution",
    "apply_global_filter",
    "apply_invert",
    "apply_lut",
    "apply_overlay",
    "apply_pixel_transform",
    "fractal_noise",
    "vignette_alpha",
]
