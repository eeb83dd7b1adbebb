"""Rotation correction from a reference line drawn over the image."""

from __future__ import annotations

import math

from PySide6.QtCore import QPointF

from ..utils.logging import get_logger
from .coordinates import RenderSize

logger = get_logger(__name__)


def unrotate_point(point: QPointF, rotation: float, center: QPointF) -> QPointF:
    """Rotate *point* by ``-rotation`` degrees about *center*."""

    theta = math.radians(rotation)
    cos_t = math.cos(theta)
    sin_t = math.sin(theta)
    x = point.x() - center.x()
    y = point.y() - center.y()
    return QPointF(
        center.x() + x * cos_t + y * sin_t,
        center.y() - x * sin_t + y * cos_t,
    )


def snap_target_angle(angle: float) -> float:
    """Return the nearest axis direction for a line drawn at *angle* degrees."""

    if -45.0 < angle <= 45.0:
        return 0.0
    if 45.0 < angle <= 135.0:
        return 90.0
    if angle > 135.0 or angle <= -135.0:
        return 180.0
    return -90.0


def normalise_correction(correction: float) -> float:
    """Wrap *correction* into ``(-180, 180]``."""

    while correction > 180.0:
        correction -= 360.0
    while correction <= -180.0:
        correction += 360.0
    return correction


def straighten_center(uncropped: RenderSize | None) -> QPointF:
    """Return the rotation pivot for a straighten gesture."""

    if uncropped is None:
        return QPointF(0.0, 0.0)
    return QPointF(uncropped.width / 2.0, uncropped.height / 2.0)


def straighten_correction(
    start: QPointF,
    end: QPointF,
    rotation: float,
    center: QPointF,
) -> float | None:
    """Return the rotation delta (degrees) that levels the drawn line.

    Both endpoints are first un-rotated by the current *rotation* so the
    line is measured against the unrotated image.  The correction snaps the
    line to the closest of 0, 90, 180 or -90 degrees.  A zero-length line
    yields ``None``.
    """

    if start.x() == end.x() and start.y() == end.y():
        logger.debug("Ignoring zero-length straighten line")
        return None

    first = unrotate_point(start, rotation, center)
    second = unrotate_point(end, rotation, center)
    angle = math.degrees(math.atan2(second.y() - first.y(), second.x() - first.x()))
    return normalise_correction(snap_target_angle(angle) - angle)


__all__ = [
    "normalise_correction",
    "snap_target_angle",
    "straighten_center",
    "straighten_correction",
    "unrotate_point",
]
