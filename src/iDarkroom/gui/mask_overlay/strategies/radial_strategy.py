"""
Move and resize strategies for radial masks.
"""

from __future__ import annotations

import math

from PySide6.QtCore import QPointF

from ....core.coordinates import RenderSize
from ....core.mask_geometry import drag_radial, radial_to_display, transform_radial
from ....domain.masks import RadialParams
from .abstract import DragSession, MaskDragStrategy


class RadialMoveStrategy(MaskDragStrategy):
    """Strategy for dragging an ellipse by its body; only the centre moves."""

    def _compute(self, render_size: RenderSize) -> RadialParams:
        params = self.session.original_params
        display = radial_to_display(params, render_size, self.session.crop_origin)
        if display is None:
            return params
        target = display.center + self.session.pointer_delta()
        return drag_radial(params, target, render_size, self.session.crop_origin)


class RadialTransformStrategy(MaskDragStrategy):
    """Strategy for stretching an ellipse from its outline.

    The pointer's offset from the centre, measured in the ellipse's own frame,
    is compared with the press offset to obtain per-axis scale factors.  Axes
    the press point did not extend along keep their radius.
    """

    _MIN_COMPONENT = 1.0

    def __init__(self, session: DragSession) -> None:
        super().__init__(session)
        self._last_scale = (1.0, 1.0)

    def _local(self, point: QPointF, center: QPointF, rotation: float) -> tuple[float, float]:
        theta = math.radians(rotation)
        dx = point.x() - center.x()
        dy = point.y() - center.y()
        return (
            dx * math.cos(theta) + dy * math.sin(theta),
            -dx * math.sin(theta) + dy * math.cos(theta),
        )

    def _compute(self, render_size: RenderSize) -> RadialParams:
        params = self.session.original_params
        display = radial_to_display(params, render_size, self.session.crop_origin)
        if display is None:
            return params
        press_x, press_y = self._local(self.session.press_pointer, display.center, params.rotation)
        now_x, now_y = self._local(self.session.current_pointer, display.center, params.rotation)

        scale_x = abs(now_x) / abs(press_x) if abs(press_x) >= self._MIN_COMPONENT else 1.0
        scale_y = abs(now_y) / abs(press_y) if abs(press_y) >= self._MIN_COMPONENT else 1.0
        self._last_scale = (scale_x, scale_y)
        return transform_radial(params, scale_x, scale_y, params.rotation)

    @property
    def last_scale(self) -> tuple[float, float]:
        return self._last_scale


__all__ = ["RadialMoveStrategy", "RadialTransformStrategy"]
