"""
Hit testing logic for mask shapes and their handles.

This module contains pure geometric functions for detecting which part of a
projected mask shape (if any) is under a given point, with no dependencies on
Qt events or UI state.
"""

from __future__ import annotations

import math
from enum import IntEnum

from PySide6.QtCore import QPointF

from ...config import LINEAR_HANDLE_RADIUS, LINEAR_HIT_STROKE, MASK_HIT_PADDING
from ...core.mask_geometry import (
    BrushDisplay,
    LinearDisplay,
    RadialDisplay,
    SelectorDisplay,
    ShapeDisplay,
)


class MaskHandle(IntEnum):
    """Draggable parts of a mask shape."""

    NONE = 0
    BODY = 1
    RADIAL_EDGE = 2
    LINEAR_START = 3
    LINEAR_END = 4
    LINEAR_RANGE = 5


class MaskHitTester:
    """Pure-function hit tester for projected mask shapes."""

    def __init__(
        self,
        hit_padding: float = MASK_HIT_PADDING,
        handle_radius: float = LINEAR_HANDLE_RADIUS,
        line_stroke: float = LINEAR_HIT_STROKE,
    ) -> None:
        """Initialize hit tester.

        Parameters
        ----------
        hit_padding:
            Distance tolerance around ellipse edges and handles, in display pixels.
        handle_radius:
            Radius of the circular linear-band handles, in display pixels.
        line_stroke:
            Width of the invisible stroke that makes the band's centre line clickable.
        """
        self._hit_padding = float(hit_padding)
        self._handle_radius = float(handle_radius)
        self._line_stroke = float(line_stroke)

    def _near(self, point: QPointF, target: QPointF) -> bool:
        limit = self._handle_radius + self._hit_padding
        return math.hypot(point.x() - target.x(), point.y() - target.y()) <= limit

    def test_radial(self, point: QPointF, shape: RadialDisplay) -> MaskHandle:
        """Return ``RADIAL_EDGE`` near the ellipse outline and ``BODY`` inside it."""

        if shape.radius_x <= 0 or shape.radius_y <= 0:
            return MaskHandle.NONE
        theta = math.radians(shape.rotation)
        dx = point.x() - shape.center.x()
        dy = point.y() - shape.center.y()
        # Rotate into the ellipse's local frame.
        lx = dx * math.cos(theta) + dy * math.sin(theta)
        ly = -dx * math.sin(theta) + dy * math.cos(theta)
        normalised = math.hypot(lx / shape.radius_x, ly / shape.radius_y)

        edge_tolerance = self._hit_padding / min(shape.radius_x, shape.radius_y)
        if abs(normalised - 1.0) <= edge_tolerance:
            return MaskHandle.RADIAL_EDGE
        if normalised < 1.0:
            return MaskHandle.BODY
        return MaskHandle.NONE

    def test_linear(self, point: QPointF, shape: LinearDisplay) -> MaskHandle:
        """Check endpoints first, then range handles, then the centre line."""

        if self._near(point, shape.start):
            return MaskHandle.LINEAR_START
        if self._near(point, shape.end):
            return MaskHandle.LINEAR_END
        for handle in shape.range_handles():
            if self._near(point, handle):
                return MaskHandle.LINEAR_RANGE

        inverse, invertible = shape.transform.inverted()
        if not invertible:
            return MaskHandle.NONE
        local = inverse.map(point)
        if abs(local.x()) <= shape.length / 2.0 and abs(local.y()) <= self._line_stroke / 2.0:
            return MaskHandle.BODY
        return MaskHandle.NONE

    def test_selector(self, point: QPointF, shape: SelectorDisplay) -> MaskHandle:
        """Return ``BODY`` inside a rectangle that has area."""

        left = min(shape.top_left.x(), shape.bottom_right.x())
        right = max(shape.top_left.x(), shape.bottom_right.x())
        top = min(shape.top_left.y(), shape.bottom_right.y())
        bottom = max(shape.top_left.y(), shape.bottom_right.y())
        if right <= left or bottom <= top:
            return MaskHandle.NONE
        if left <= point.x() <= right and top <= point.y() <= bottom:
            return MaskHandle.BODY
        return MaskHandle.NONE

    def test_brush(self, point: QPointF, shape: BrushDisplay) -> MaskHandle:
        """Return ``BODY`` within half a stroke width of any painted segment."""

        for stroke in shape.strokes:
            limit = stroke.width / 2.0
            points = stroke.points
            if len(points) == 1:
                if _segment_distance(point, points[0], points[0]) <= limit:
                    return MaskHandle.BODY
                continue
            for a, b in zip(points, points[1:]):
                if _segment_distance(point, a, b) <= limit:
                    return MaskHandle.BODY
        return MaskHandle.NONE

    def test(self, point: QPointF, shape: ShapeDisplay | None) -> MaskHandle:
        """Determine which handle of *shape* (if any) is under *point*.

        Brush strokes and selector rectangles only report ``BODY``; they can be
        clicked but have nothing to drag.
        """
        if isinstance(shape, RadialDisplay):
            return self.test_radial(point, shape)
        if isinstance(shape, LinearDisplay):
            return self.test_linear(point, shape)
        if isinstance(shape, SelectorDisplay):
            return self.test_selector(point, shape)
        if isinstance(shape, BrushDisplay):
            return self.test_brush(point, shape)
        return MaskHandle.NONE


def _segment_distance(point: QPointF, a: QPointF, b: QPointF) -> float:
    dx = b.x() - a.x()
    dy = b.y() - a.y()
    length_sq = dx * dx + dy * dy
    if length_sq == 0.0:
        return math.hypot(point.x() - a.x(), point.y() - a.y())
    t = ((point.x() - a.x()) * dx + (point.y() - a.y()) * dy) / length_sq
    t = max(0.0, min(1.0, t))
    return math.hypot(point.x() - (a.x() + t * dx), point.y() - (a.y() + t * dy))


__all__ = ["MaskHandle", "MaskHitTester"]
