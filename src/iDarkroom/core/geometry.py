"""Orientation-aware image geometry used by the preview and mask overlay."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Tuple

from PySide6.QtGui import QTransform

from .coordinates import RenderSize


@dataclass(frozen=True)
class TransformOp:
    """One entry in the ordered image transform description.

    ``kind`` is ``"rotate"`` (``value`` in degrees), ``"scaleX"`` or
    ``"scaleY"`` (``value`` is the factor).
    """

    kind: str
    value: float


def oriented_dimensions(width: float, height: float, orientation_steps: int) -> Tuple[float, float]:
    """Return ``(width, height)`` after *orientation_steps* quarter turns."""

    if orientation_steps % 2:
        return (height, width)
    return (width, height)


def crop_inset_percentages(
    crop: Any,
    image_width: float,
    image_height: float,
    orientation_steps: int = 0,
) -> Tuple[float, float, float, float] | None:
    """Return ``(top, right, bottom, left)`` clip insets in percent.

    Percentages are relative to the oriented image because the crop rectangle
    is stored in that space.  ``None`` means "no clipping".
    """

    if crop is None:
        return None
    base_w, base_h = oriented_dimensions(image_width, image_height, orientation_steps)
    if base_w <= 0 or base_h <= 0:
        return None
    top = crop.y / base_h * 100.0
    left = crop.x / base_w * 100.0
    right = (base_w - crop.width - crop.x) / base_w * 100.0
    bottom = (base_h - crop.height - crop.y) / base_h * 100.0
    return (top, right, bottom, left)


def uncropped_render_size(
    image_width: float,
    image_height: float,
    orientation_steps: int,
    render_size: RenderSize,
) -> RenderSize | None:
    """Fit the whole oriented image into the viewport that hosts *render_size*.

    The viewport is reconstructed from the cropped render plus its offsets on
    both sides.  ``None`` is returned for degenerate inputs.
    """

    viewport_w = render_size.width + 2.0 * render_size.offset_x
    viewport_h = render_size.height + 2.0 * render_size.offset_y
    img_w, img_h = oriented_dimensions(image_width, image_height, orientation_steps)
    if img_w <= 0 or img_h <= 0 or viewport_w <= 0 or viewport_h <= 0:
        return None

    scale = min(viewport_w / img_w, viewport_h / img_h)
    width = img_w * scale
    height = img_h * scale
    return RenderSize(
        width=width,
        height=height,
        scale=scale,
        offset_x=(viewport_w - width) / 2.0,
        offset_y=(viewport_h - height) / 2.0,
    )


def image_transform(adjustments: Any) -> List[TransformOp]:
    """Return the ordered rotate/flip operations for *adjustments*.

    Zero rotations are omitted, so an unrotated, unflipped image yields an
    empty list.
    """

    ops: List[TransformOp] = []
    if adjustments.rotation:
        ops.append(TransformOp("rotate", float(adjustments.rotation)))
    if adjustments.orientation_steps % 4:
        ops.append(TransformOp("rotate", float(adjustments.orientation_steps % 4) * 90.0))
    if adjustments.flip_horizontal:
        ops.append(TransformOp("scaleX", -1.0))
    if adjustments.flip_vertical:
        ops.append(TransformOp("scaleY", -1.0))
    return ops


def transform_to_qtransform(ops: List[TransformOp]) -> QTransform:
    """Compose *ops* into a :class:`QTransform` applied left to right."""

    transform = QTransform()
    for op in ops:
        if op.kind == "rotate":
            transform.rotate(op.value)
        elif op.kind == "scaleX":
            transform.scale(op.value, 1.0)
        elif op.kind == "scaleY":
            transform.scale(1.0, op.value)
        else:
            raise ValueError(f"Unknown transform op: {op.kind}")
    return transform


__all__ = [
    "TransformOp",
    "crop_inset_percentages",
    "image_transform",
    "oriented_dimensions",
    "transform_to_qtransform",
    "uncropped_render_size",
]
