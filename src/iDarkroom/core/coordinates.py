"""Conversions between image, crop-relative and display coordinates.

Mask parameters are stored in whole-image pixel space.  The display shows
the cropped image scaled by ``RenderSize.scale`` and shifted by the render
offset, so every conversion first removes (or adds) the crop origin.
"""

from __future__ import annotations

from dataclasses import dataclass

from PySide6.QtCore import QPointF

from ..utils.logging import get_logger

logger = get_logger(__name__)


@dataclass(frozen=True)
class RenderSize:
    """Geometry of the rendered preview inside the viewport.

    ``width`` and ``height`` are the displayed image size in display pixels,
    ``scale`` is display pixels per image pixel and the offsets locate the
    image's top-left corner inside the viewport.
    """

    width: float
    height: float
    scale: float
    offset_x: float = 0.0
    offset_y: float = 0.0

    def is_valid(self) -> bool:
        return self.scale > 0.0


def display_to_image(
    point: QPointF,
    render_size: RenderSize,
    crop_origin: tuple[float, float] = (0.0, 0.0),
) -> QPointF | None:
    """Map a display *point* into image pixels.

    Returns ``None`` when the render scale is zero; nothing is visible yet so
    there is no meaningful conversion.
    """

    if not render_size.is_valid():
        logger.debug("display_to_image skipped: zero render scale")
        return None
    crop_x, crop_y = crop_origin
    return QPointF(
        (point.x() - render_size.offset_x) / render_size.scale + crop_x,
        (point.y() - render_size.offset_y) / render_size.scale + crop_y,
    )


def image_to_display(
    point: QPointF,
    render_size: RenderSize,
    crop_origin: tuple[float, float] = (0.0, 0.0),
) -> QPointF | None:
    """Inverse of :func:`display_to_image`."""

    if not render_size.is_valid():
        return None
    crop_x, crop_y = crop_origin
    return QPointF(
        (point.x() - crop_x) * render_size.scale + render_size.offset_x,
        (point.y() - crop_y) * render_size.scale + render_size.offset_y,
    )


def image_to_crop(point: QPointF, crop_origin: tuple[float, float]) -> QPointF:
    """Express an image-space *point* relative to the crop's top-left corner."""

    return QPointF(point.x() - crop_origin[0], point.y() - crop_origin[1])


def display_length_to_image(length: float, render_size: RenderSize) -> float | None:
    if not render_size.is_valid():
        return None
    return float(length) / render_size.scale


def image_length_to_display(length: float, render_size: RenderSize) -> float | None:
    if not render_size.is_valid():
        return None
    return float(length) * render_size.scale


__all__ = [
    "RenderSize",
    "display_length_to_image",
    "display_to_image",
    "image_length_to_display",
    "image_to_crop",
    "image_to_display",
]
