"""Geometry of parametric masks and the drag operations that edit them.

All stored parameters live in image-pixel space.  The helpers here project
them into display space for the overlay and turn display-space gestures back
into new parameter values.  Every function is pure: callers receive a new
parameter object and decide whether to commit it.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from typing import Iterable, List, Optional, Sequence, Tuple, Union

import numpy as np
from PySide6.QtCore import QPointF
from PySide6.QtGui import QTransform

from ..domain.masks import (
    BrushParams,
    BrushSettings,
    DrawnLine,
    LinearParams,
    MaskType,
    RadialParams,
    SelectorParams,
    SubMask,
    ToolType,
)
from ..utils.logging import get_logger
from .coordinates import (
    RenderSize,
    display_length_to_image,
    display_to_image,
    image_to_display,
)

logger = get_logger(__name__)

CropOrigin = Tuple[float, float]


# ---------------------------------------------------------------------------
# Display projections
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RadialDisplay:
    center: QPointF
    radius_x: float
    radius_y: float
    rotation: float


@dataclass(frozen=True)
class LinearDisplay:
    """Linear band in display space.

    ``center`` is the band's midpoint, ``angle`` the direction of the
    start-to-end line in degrees and ``range`` the half-width in display
    pixels.  ``transform`` maps band-local coordinates (x along the line,
    y across it) to display coordinates.
    """

    start: QPointF
    end: QPointF
    center: QPointF
    angle: float
    length: float
    range: float
    transform: QTransform

    def range_handles(self) -> Tuple[QPointF, QPointF]:
        return (
            self.transform.map(QPointF(0.0, -self.range)),
            self.transform.map(QPointF(0.0, self.range)),
        )


@dataclass(frozen=True)
class StrokeDisplay:
    points: Tuple[QPointF, ...]
    width: float
    tool: ToolType


@dataclass(frozen=True)
class BrushDisplay:
    strokes: Tuple[StrokeDisplay, ...]


@dataclass(frozen=True)
class SelectorDisplay:
    top_left: QPointF
    bottom_right: QPointF


ShapeDisplay = Union[RadialDisplay, LinearDisplay, BrushDisplay, SelectorDisplay]


def radial_to_display(
    params: RadialParams, render_size: RenderSize, crop_origin: CropOrigin = (0.0, 0.0)
) -> Optional[RadialDisplay]:
    center = image_to_display(QPointF(params.center_x, params.center_y), render_size, crop_origin)
    if center is None:
        return None
    return RadialDisplay(
        center=center,
        radius_x=params.radius_x * render_size.scale,
        radius_y=params.radius_y * render_size.scale,
        rotation=params.rotation,
    )


def linear_group_transform(center: QPointF, angle: float) -> QTransform:
    """Return the band-local to display transform for a band at *center*."""

    transform = QTransform()
    transform.translate(center.x(), center.y())
    transform.rotate(angle)
    return transform


def linear_to_display(
    params: LinearParams, render_size: RenderSize, crop_origin: CropOrigin = (0.0, 0.0)
) -> Optional[LinearDisplay]:
    start = image_to_display(QPointF(params.start_x, params.start_y), render_size, crop_origin)
    end = image_to_display(QPointF(params.end_x, params.end_y), render_size, crop_origin)
    if start is None or end is None:
        return None
    dx = end.x() - start.x()
    dy = end.y() - start.y()
    center = QPointF((start.x() + end.x()) / 2.0, (start.y() + end.y()) / 2.0)
    angle = math.degrees(math.atan2(dy, dx))
    return LinearDisplay(
        start=start,
        end=end,
        center=center,
        angle=angle,
        length=math.hypot(dx, dy),
        range=params.range * render_size.scale,
        transform=linear_group_transform(center, angle),
    )


def brush_to_display(
    params: BrushParams, render_size: RenderSize, crop_origin: CropOrigin = (0.0, 0.0)
) -> Optional[BrushDisplay]:
    if not render_size.is_valid():
        return None
    strokes = []
    for line in params.lines:
        points = tuple(
            image_to_display(QPointF(x, y), render_size, crop_origin) for x, y in line.points
        )
        strokes.append(
            StrokeDisplay(points=points, width=line.brush_size * render_size.scale, tool=line.tool)
        )
    return BrushDisplay(strokes=tuple(strokes))


def selector_to_display(
    params: SelectorParams, render_size: RenderSize, crop_origin: CropOrigin = (0.0, 0.0)
) -> Optional[SelectorDisplay]:
    top_left = image_to_display(QPointF(params.start_x, params.start_y), render_size, crop_origin)
    bottom_right = image_to_display(QPointF(params.end_x, params.end_y), render_size, crop_origin)
    if top_left is None or bottom_right is None:
        return None
    return SelectorDisplay(top_left=top_left, bottom_right=bottom_right)


def sub_mask_to_display(
    sub_mask: SubMask, render_size: RenderSize, crop_origin: CropOrigin = (0.0, 0.0)
) -> Optional[ShapeDisplay]:
    """Project *sub_mask* for overlay rendering."""

    params = sub_mask.parameters
    if isinstance(params, RadialParams):
        return radial_to_display(params, render_size, crop_origin)
    if isinstance(params, LinearParams):
        return linear_to_display(params, render_size, crop_origin)
    if isinstance(params, BrushParams):
        return brush_to_display(params, render_size, crop_origin)
    if isinstance(params, SelectorParams):
        return selector_to_display(params, render_size, crop_origin)
    raise TypeError(f"Unsupported mask parameters: {type(params).__name__}")


# ---------------------------------------------------------------------------
# Radial
# ---------------------------------------------------------------------------

def drag_radial(
    params: RadialParams,
    pointer: QPointF,
    render_size: RenderSize,
    crop_origin: CropOrigin = (0.0, 0.0),
) -> RadialParams:
    """Move the ellipse centre to the display *pointer*; radii are untouched."""

    center = display_to_image(pointer, render_size, crop_origin)
    if center is None:
        return params
    return replace(params, center_x=center.x(), center_y=center.y())


def transform_radial(
    params: RadialParams,
    scale_x: float,
    scale_y: float,
    rotation: float,
) -> RadialParams:
    """Fold a transient resize gesture into the stored radii.

    The interactive handle reports a scale factor relative to the current
    radii; the stored ellipse keeps a scale of 1 so the factor is multiplied
    into ``radius_x`` / ``radius_y`` and discarded.
    """

    return replace(
        params,
        radius_x=params.radius_x * abs(scale_x),
        radius_y=params.radius_y * abs(scale_y),
        rotation=float(rotation),
    )


# ---------------------------------------------------------------------------
# Linear
# ---------------------------------------------------------------------------

def translate_linear(params: LinearParams, dx: float, dy: float) -> LinearParams:
    return replace(
        params,
        start_x=params.start_x + dx,
        start_y=params.start_y + dy,
        end_x=params.end_x + dx,
        end_y=params.end_y + dy,
    )


def drag_linear_group(
    params: LinearParams,
    group_position: QPointF,
    render_size: RenderSize,
    crop_origin: CropOrigin = (0.0, 0.0),
) -> LinearParams:
    """Translate the whole band so its display centre lands on *group_position*.

    Both endpoints move by the same image-space delta so the band keeps its
    length, angle and range.
    """

    display = linear_to_display(params, render_size, crop_origin)
    if display is None:
        return params
    dx = (group_position.x() - display.center.x()) / render_size.scale
    dy = (group_position.y() - display.center.y()) / render_size.scale
    return translate_linear(params, dx, dy)


def constrain_to_perpendicular(pointer: QPointF, transform: QTransform) -> QPointF:
    """Project display *pointer* onto the band's local perpendicular axis."""

    inverse, invertible = transform.inverted()
    if not invertible:
        return pointer
    local = inverse.map(pointer)
    return transform.map(QPointF(0.0, local.y()))


def drag_linear_range(
    params: LinearParams,
    pointer: QPointF,
    render_size: RenderSize,
    crop_origin: CropOrigin = (0.0, 0.0),
) -> LinearParams:
    """Set the band half-width from a range-handle drag.

    Only the perpendicular distance from the band's centre line counts;
    endpoints are never modified.
    """

    display = linear_to_display(params, render_size, crop_origin)
    if display is None:
        return params
    inverse, invertible = display.transform.inverted()
    if not invertible:
        return params
    local = inverse.map(constrain_to_perpendicular(pointer, display.transform))
    return replace(params, range=abs(local.y()) / render_size.scale)


def drag_linear_endpoint(
    params: LinearParams,
    endpoint: str,
    pointer: QPointF,
    render_size: RenderSize,
    crop_origin: CropOrigin = (0.0, 0.0),
) -> LinearParams:
    """Move the ``"start"`` or ``"end"`` point to the raw display *pointer*."""

    target = display_to_image(pointer, render_size, crop_origin)
    if target is None:
        return params
    if endpoint == "start":
        return replace(params, start_x=target.x(), start_y=target.y())
    if endpoint == "end":
        return replace(params, end_x=target.x(), end_y=target.y())
    raise ValueError(f"Unknown linear endpoint: {endpoint!r}")


# ---------------------------------------------------------------------------
# Brush strokes
# ---------------------------------------------------------------------------

def display_stroke_to_image(
    points: Sequence[QPointF],
    settings: BrushSettings,
    render_size: RenderSize,
    crop_origin: CropOrigin = (0.0, 0.0),
) -> Optional[DrawnLine]:
    """Convert a finished display-space stroke into an image-space line.

    Returns ``None`` for empty strokes or when the render scale is zero.
    """

    if not points or not render_size.is_valid():
        return None
    image_points = []
    for point in points:
        mapped = display_to_image(point, render_size, crop_origin)
        image_points.append((mapped.x(), mapped.y()))
    return DrawnLine(
        brush_size=display_length_to_image(settings.size, render_size),
        points=tuple(image_points),
        tool=settings.tool,
        feather=settings.feather / 100.0,
    )


def strokes_overlap(first: DrawnLine, second: DrawnLine) -> bool:
    """Return True if any pair of points lies within the two half widths."""

    if not first.points or not second.points:
        return False
    threshold = first.brush_size / 2.0 + second.brush_size / 2.0
    a = np.asarray(first.points, dtype=np.float64)
    b = np.asarray(second.points, dtype=np.float64)
    distances = np.hypot(a[:, None, 0] - b[None, :, 0], a[:, None, 1] - b[None, :, 1])
    return bool(np.any(distances < threshold))


def append_stroke(params: BrushParams, line: DrawnLine) -> BrushParams:
    """Append *line* to the stroke list.

    Strokes are never merged or removed.  An eraser stroke that touches no
    existing brush stroke would have nothing to erase and is dropped.
    """

    if line.tool is ToolType.ERASER:
        painted = [existing for existing in params.lines if existing.tool is ToolType.BRUSH]
        if not any(strokes_overlap(line, existing) for existing in painted):
            logger.debug("Dropping eraser stroke that overlaps no brush stroke")
            return params
    return BrushParams(lines=params.lines + (line,))


# ---------------------------------------------------------------------------
# Rectangular selectors
# ---------------------------------------------------------------------------

def selector_from_drag(
    points: Sequence[QPointF],
    render_size: RenderSize,
    crop_origin: CropOrigin = (0.0, 0.0),
) -> Optional[SelectorParams]:
    """Return the image-space bounding box of a selector drag.

    Drags with fewer than two points or a zero-area box yield ``None``.
    """

    if len(points) < 2 or not render_size.is_valid():
        return None
    mapped = [display_to_image(point, render_size, crop_origin) for point in points]
    xs = [p.x() for p in mapped]
    ys = [p.y() for p in mapped]
    box = SelectorParams(start_x=min(xs), start_y=min(ys), end_x=max(xs), end_y=max(ys))
    if not box.has_area():
        logger.debug("Discarding zero-area selector rectangle")
        return None
    return box


# ---------------------------------------------------------------------------
# Selection rules
# ---------------------------------------------------------------------------

def is_brush_tool_active(active: Optional[SubMask]) -> bool:
    return active is not None and active.type is MaskType.BRUSH


def is_selector_tool_active(active: Optional[SubMask]) -> bool:
    return active is not None and active.type in (MaskType.AI_SUBJECT, MaskType.QUICK_ERASER)


def is_drawing_tool_active(active: Optional[SubMask]) -> bool:
    return is_brush_tool_active(active) or is_selector_tool_active(active)


def stack_order(sub_masks: Iterable[SubMask], active_id: Optional[str]) -> List[SubMask]:
    """Return *sub_masks* with the active one moved to the end (drawn last)."""

    sub_masks = list(sub_masks)
    others = [sub_mask for sub_mask in sub_masks if sub_mask.id != active_id]
    active = [sub_mask for sub_mask in sub_masks if sub_mask.id == active_id]
    return others + active


def is_selectable(sub_mask: SubMask, active: Optional[SubMask]) -> bool:
    """Clicking selects a non-active shape only while no drawing tool is active."""

    if is_drawing_tool_active(active):
        return False
    return active is None or sub_mask.id != active.id


__all__ = [
    "BrushDisplay",
    "LinearDisplay",
    "RadialDisplay",
    "SelectorDisplay",
    "ShapeDisplay",
    "StrokeDisplay",
    "append_stroke",
    "brush_to_display",
    "constrain_to_perpendicular",
    "display_stroke_to_image",
    "drag_linear_endpoint",
    "drag_linear_group",
    "drag_linear_range",
    "drag_radial",
    "is_brush_tool_active",
    "is_drawing_tool_active",
    "is_selectable",
    "is_selector_tool_active",
    "linear_group_transform",
    "linear_to_display",
    "radial_to_display",
    "selector_from_drag",
    "selector_to_display",
    "stack_order",
    "strokes_overlap",
    "sub_mask_to_display",
    "transform_radial",
    "translate_linear",
]
