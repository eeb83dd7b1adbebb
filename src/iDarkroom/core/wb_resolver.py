"""White balance picking from the rendered preview.

A click on a neutral area is converted into preview pixels, a small
neighbourhood is averaged, and the colour cast of that average is turned into
temperature and tint deltas.  The deltas are added to the current sliders and
clamped to the slider range.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Tuple

import numpy as np
from PySide6.QtCore import QPointF

from ..config import EPSILON, WB_GAMMA, WB_SAMPLE_RADIUS, WB_SLIDER_RANGE, WB_TEMPERATURE_GAIN, WB_TINT_GAIN
from ..utils.logging import get_logger
from .coordinates import RenderSize

logger = get_logger(__name__)

Region = Tuple[int, int, int, int]


@dataclass(frozen=True)
class WBDelta:
    """Temperature and tint offsets in slider units."""

    temperature: float = 0.0
    tint: float = 0.0

    def is_identity(self) -> bool:
        return abs(self.temperature) < 1e-6 and abs(self.tint) < 1e-6


def preview_point(point: QPointF, render_size: RenderSize) -> QPointF | None:
    """Map a display click into preview-relative image coordinates.

    The preview already shows the cropped image, so the crop origin is not
    added.  Returns ``None`` when the click falls outside the image.
    """

    if not render_size.is_valid():
        return None
    x = (point.x() - render_size.offset_x) / render_size.scale
    y = (point.y() - render_size.offset_y) / render_size.scale
    img_width = render_size.width / render_size.scale
    img_height = render_size.height / render_size.scale
    if x < 0 or x > img_width or y < 0 or y > img_height:
        return None
    return QPointF(x, y)


def sample_region(
    image_point: QPointF,
    render_size: RenderSize,
    preview_width: int,
    preview_height: int,
    radius: int = WB_SAMPLE_RADIUS,
) -> Region | None:
    """Return ``(x0, y0, x1, y1)`` of the neighbourhood to average.

    *image_point* is scaled by the ratio between the decoded preview and the
    displayed image size, then a square of *radius* pixels is taken around it
    and clipped to the preview.  ``None`` means the clipped region is empty.
    """

    img_width = render_size.width / render_size.scale
    img_height = render_size.height / render_size.scale
    if img_width <= 0 or img_height <= 0:
        return None
    src_x = math.floor(image_point.x() * (preview_width / img_width))
    src_y = math.floor(image_point.y() * (preview_height / img_height))

    x0 = max(0, src_x - radius)
    y0 = max(0, src_y - radius)
    x1 = min(preview_width, src_x + radius + 1)
    y1 = min(preview_height, src_y + radius + 1)
    if x1 - x0 <= 0 or y1 - y0 <= 0:
        return None
    return (x0, y0, x1, y1)


def average_rgb(pixels: np.ndarray) -> Tuple[float, float, float]:
    """Return the mean 8-bit ``(r, g, b)`` of an ``(H, W, 3+)`` block."""

    flat = np.asarray(pixels[..., :3], dtype=np.float64).reshape(-1, 3)
    r, g, b = flat.mean(axis=0)
    return float(r), float(g), float(b)


def white_balance_delta(rgb: Tuple[float, float, float]) -> WBDelta:
    """Derive the temperature/tint correction for an averaged 8-bit colour."""

    lin_r, lin_g, lin_b = ((channel / 255.0) ** WB_GAMMA for channel in rgb)

    sum_rb = lin_r + lin_b
    temperature = (lin_b - lin_r) / sum_rb * WB_TEMPERATURE_GAIN if sum_rb > EPSILON else 0.0

    lin_m = sum_rb / 2.0
    sum_gm = lin_g + lin_m
    tint = (lin_g - lin_m) / sum_gm * WB_TINT_GAIN if sum_gm > EPSILON else 0.0
    return WBDelta(temperature=temperature, tint=tint)


def apply_white_balance_delta(
    temperature: float, tint: float, delta: WBDelta
) -> Tuple[float, float]:
    """Add *delta* to the current sliders and clamp to the slider range."""

    low, high = WB_SLIDER_RANGE
    return (
        max(low, min(high, temperature + delta.temperature)),
        max(low, min(high, tint + delta.tint)),
    )


def sample_white_balance(
    preview: np.ndarray,
    point: QPointF,
    render_size: RenderSize,
    radius: int = WB_SAMPLE_RADIUS,
) -> WBDelta:
    """Run a complete pick against an ``(H, W, 3)`` preview array.

    Clicks outside the image, empty regions or a zero render scale all
    produce a zero delta.
    """

    image_point = preview_point(point, render_size)
    if image_point is None:
        logger.debug("White balance pick outside the image")
        return WBDelta()
    height, width = preview.shape[:2]
    region = sample_region(image_point, render_size, width, height, radius)
    if region is None:
        return WBDelta()
    x0, y0, x1, y1 = region
    return white_balance_delta(average_rgb(preview[y0:y1, x0:x1]))


__all__ = [
    "Region",
    "WBDelta",
    "apply_white_balance_delta",
    "average_rgb",
    "preview_point",
    "sample_region",
    "sample_white_balance",
    "white_balance_delta",
]
