"""
Drag strategies for linear gradient bands.
"""

from __future__ import annotations

from ....core.coordinates import RenderSize
from ....core.mask_geometry import (
    drag_linear_endpoint,
    drag_linear_group,
    drag_linear_range,
    linear_to_display,
)
from ....domain.masks import LinearParams
from .abstract import DragSession, MaskDragStrategy


class LinearMoveStrategy(MaskDragStrategy):
    """Strategy for translating the whole band; length, angle and range stay fixed."""

    def _compute(self, render_size: RenderSize) -> LinearParams:
        params = self.session.original_params
        display = linear_to_display(params, render_size, self.session.crop_origin)
        if display is None:
            return params
        group_position = display.center + self.session.pointer_delta()
        return drag_linear_group(params, group_position, render_size, self.session.crop_origin)


class LinearRangeStrategy(MaskDragStrategy):
    """Strategy for dragging a range handle along the band's perpendicular axis."""

    def _compute(self, render_size: RenderSize) -> LinearParams:
        return drag_linear_range(
            self.session.original_params,
            self.session.current_pointer,
            render_size,
            self.session.crop_origin,
        )


class LinearEndpointStrategy(MaskDragStrategy):
    """Strategy for moving one endpoint to the raw pointer position."""

    def __init__(self, session: DragSession, endpoint: str) -> None:
        super().__init__(session)
        if endpoint not in ("start", "end"):
            raise ValueError(f"Unknown linear endpoint: {endpoint!r}")
        self._endpoint = endpoint

    @property
    def endpoint(self) -> str:
        return self._endpoint

    def _compute(self, render_size: RenderSize) -> LinearParams:
        return drag_linear_endpoint(
            self.session.original_params,
            self._endpoint,
            self.session.current_pointer,
            render_size,
            self.session.crop_origin,
        )


__all__ = ["LinearEndpointStrategy", "LinearMoveStrategy", "LinearRangeStrategy"]
