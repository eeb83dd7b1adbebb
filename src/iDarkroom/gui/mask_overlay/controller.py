"""
Mask interaction controller (coordinator).

This module routes pointer events to the right gesture: shape drags via the
strategies, brush strokes, selector rectangles, straighten lines and white
balance clicks.  It owns no edit state; shape updates are reported through
callbacks as "replace the parameters of sub-mask X" messages.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Any, Optional

from PySide6.QtCore import QPointF

from ...core.coordinates import RenderSize
from ...core.geometry import uncropped_render_size
from ...core.mask_geometry import (
    append_stroke,
    display_stroke_to_image,
    is_brush_tool_active,
    is_drawing_tool_active,
    is_selectable,
    is_selector_tool_active,
    selector_from_drag,
    stack_order,
    sub_mask_to_display,
    transform_radial,
)
from ...core.straighten import straighten_center, straighten_correction
from ...domain.adjustments import Adjustments
from ...domain.masks import (
    BrushParams,
    BrushSettings,
    MaskType,
    RadialParams,
    SelectorParams,
    SubMask,
)
from .hit_tester import MaskHandle, MaskHitTester
from .strategies import (
    DragSession,
    LinearEndpointStrategy,
    LinearMoveStrategy,
    LinearRangeStrategy,
    MaskDragStrategy,
    RadialMoveStrategy,
    RadialTransformStrategy,
)

if TYPE_CHECKING:
    from ...settings.manager import SettingsManager

_LOGGER = logging.getLogger(__name__)


class ToolMode(Enum):
    """What a primary-button press on the canvas does."""

    MASK = "mask"
    STRAIGHTEN = "straighten"
    WHITE_BALANCE = "white_balance"


@dataclass
class CursorPreview:
    """Brush outline that follows the pointer while a drawing tool is active."""

    position: QPointF
    size: float
    visible: bool = False


class MaskInteractionController:
    """Manages pointer interaction with mask shapes (as coordinator)."""

    def __init__(
        self,
        *,
        adjustments_provider: Callable[[], Adjustments],
        render_size_provider: Callable[[], Optional[RenderSize]],
        active_sub_mask_provider: Callable[[], Optional[str]],
        on_update_submask: Callable[[str, dict[str, Any]], None],
        on_select_submask: Callable[[Optional[str]], None],
        on_request_update: Callable[[], None],
        image_size_provider: Callable[[], tuple[int, int]] | None = None,
        brush_settings_provider: Callable[[], BrushSettings] | None = None,
        on_generate_ai_mask: Callable[[str, QPointF, QPointF], None] | None = None,
        on_quick_erase: Callable[[str, QPointF, QPointF], None] | None = None,
        on_straighten: Callable[[float], None] | None = None,
        on_white_balance_pick: Callable[[QPointF, RenderSize], None] | None = None,
        hit_tester: MaskHitTester | None = None,
    ) -> None:
        """Initialize the mask interaction controller.

        Parameters
        ----------
        adjustments_provider:
            Callable returning the current :class:`Adjustments`.
        render_size_provider:
            Callable returning the displayed image geometry, or ``None`` before
            the first layout.
        active_sub_mask_provider:
            Callable returning the id of the selected sub-mask, if any.
        on_update_submask:
            Callback receiving ``(sub_mask_id, partial)`` replace messages.
        on_select_submask:
            Callback receiving the id to select, or ``None`` to deselect.
        on_request_update:
            Callback to request an overlay repaint.
        image_size_provider:
            Callable returning the source image ``(width, height)``; needed to
            locate the rotation pivot for straightening.
        brush_settings_provider:
            Callable returning the current brush settings in display units.
        on_generate_ai_mask, on_quick_erase:
            Callbacks receiving ``(sub_mask_id, start, end)`` in image pixels
            once a selector rectangle is drawn.
        on_straighten:
            Callback receiving the rotation correction in degrees.
        on_white_balance_pick:
            Callback receiving a white balance click and the render size.
        hit_tester:
            Optional pre-configured hit tester.
        """
        self._adjustments_provider = adjustments_provider
        self._render_size_provider = render_size_provider
        self._active_sub_mask_provider = active_sub_mask_provider
        self._on_update_submask = on_update_submask
        self._on_select_submask = on_select_submask
        self._on_request_update = on_request_update
        self._image_size_provider = image_size_provider
        self._brush_settings_provider = brush_settings_provider or BrushSettings
        self._on_generate_ai_mask = on_generate_ai_mask
        self._on_quick_erase = on_quick_erase
        self._on_straighten = on_straighten
        self._on_white_balance_pick = on_white_balance_pick
        self._hit_tester = hit_tester or MaskHitTester()

        self._mode = ToolMode.MASK
        self._strategy: MaskDragStrategy | None = None
        self._stroke_points: list[QPointF] | None = None
        self._stroke_target: SubMask | None = None
        self._straighten_line: tuple[QPointF, QPointF] | None = None
        self._cursor = CursorPreview(position=QPointF(), size=0.0)

    @classmethod
    def from_settings(cls, settings: "SettingsManager", **kwargs: Any) -> "MaskInteractionController":
        """Build a controller whose brush and hit padding follow *settings*.

        Brush settings are read on every use.  The hit tester is rebuilt when
        ``masks.hit_padding`` changes.
        """
        kwargs.setdefault("brush_settings_provider", settings.brush_settings)
        kwargs.setdefault("hit_tester", MaskHitTester(hit_padding=settings.hit_padding()))
        controller = cls(**kwargs)

        def _on_settings_changed(key: str, _value: object) -> None:
            if key == "masks.hit_padding":
                controller.set_hit_tester(MaskHitTester(hit_padding=settings.hit_padding()))

        settings.settingsChanged.connect(_on_settings_changed)
        return controller

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------
    def set_hit_tester(self, hit_tester: MaskHitTester) -> None:
        self._hit_tester = hit_tester

    def mode(self) -> ToolMode:
        return self._mode

    def set_mode(self, mode: ToolMode) -> None:
        """Switch the tool mode, abandoning any gesture in progress."""
        if mode is self._mode:
            return
        self._mode = mode
        self._reset_gesture()
        self._on_request_update()

    def cursor_preview(self) -> CursorPreview:
        return self._cursor

    def straighten_line(self) -> tuple[QPointF, QPointF] | None:
        return self._straighten_line

    def stroke_points(self) -> tuple[QPointF, ...]:
        return tuple(self._stroke_points or ())

    def drag_session(self) -> DragSession | None:
        return None if self._strategy is None else self._strategy.session

    def is_busy(self) -> bool:
        """Return True while any gesture is in progress."""
        return (
            self._strategy is not None
            or self._stroke_points is not None
            or self._straighten_line is not None
        )

    def is_tool_active(self) -> bool:
        return self._mode is ToolMode.MASK and is_drawing_tool_active(self._active_sub_mask())

    def ordered_sub_masks(self) -> list[SubMask]:
        """Return every sub-mask in draw order, the active one last."""
        sub_masks = [
            sub_mask
            for container in self._adjustments_provider().containers()
            for sub_mask in container.sub_masks
        ]
        return stack_order(sub_masks, self._active_sub_mask_provider())

    # ------------------------------------------------------------------
    # Pointer events
    # ------------------------------------------------------------------
    def press(self, point: QPointF) -> bool:
        """Handle a primary-button press; returns True when the event is consumed."""
        render_size = self._render_size_provider()
        if render_size is None or not render_size.is_valid():
            return False

        if self._mode is ToolMode.STRAIGHTEN:
            self._straighten_line = (QPointF(point), QPointF(point))
            self._on_request_update()
            return True

        if self._mode is ToolMode.WHITE_BALANCE:
            if self._on_white_balance_pick is not None:
                self._on_white_balance_pick(QPointF(point), render_size)
            return True

        active = self._active_sub_mask()
        if is_drawing_tool_active(active):
            self._stroke_points = [QPointF(point)]
            self._stroke_target = active
            self._on_request_update()
            return True

        return self._press_shapes(point, render_size, active)

    def move(self, point: QPointF) -> None:
        """Handle pointer motion with or without a pressed button."""
        if self.is_tool_active():
            self._cursor.position = QPointF(point)
            self._cursor.size = self._brush_settings_provider().size
            self._cursor.visible = True

        if self._straighten_line is not None:
            self._straighten_line = (self._straighten_line[0], QPointF(point))
        elif self._stroke_points is not None:
            self._stroke_points.append(QPointF(point))
        elif self._strategy is not None:
            params = self._strategy.on_drag(point)
            self._on_update_submask(self._strategy.session.shape_id, {"parameters": params})
        elif not self.is_tool_active():
            return
        self._on_request_update()

    def release(self, point: QPointF | None = None) -> None:
        """Finish the current gesture.

        Releases outside the canvas still commit brush strokes and straighten
        lines; selector rectangles without area are discarded.
        """
        if point is not None and self.is_busy():
            self.move(point)

        if self._straighten_line is not None:
            self._finish_straighten()
        elif self._stroke_points is not None:
            self._finish_stroke()
        elif self._strategy is not None:
            self._strategy.on_end()
            self._strategy = None
        self._on_request_update()

    def enter(self) -> None:
        """Show the brush preview again when a drawing tool is active."""
        if self.is_tool_active():
            self._cursor.visible = True
            self._on_request_update()

    def leave(self) -> None:
        """Hide the brush preview; a gesture in progress keeps running."""
        if self._cursor.visible:
            self._cursor.visible = False
            self._on_request_update()

    def commit_radial_transform(
        self, sub_mask_id: str, scale_x: float, scale_y: float, rotation: float
    ) -> None:
        """Fold an externally driven resize/rotate of a radial mask into its radii."""
        sub_mask = self._find(sub_mask_id)
        if sub_mask is None or not isinstance(sub_mask.parameters, RadialParams):
            _LOGGER.debug("Ignoring radial transform for %s", sub_mask_id)
            return
        params = transform_radial(sub_mask.parameters, scale_x, scale_y, rotation)
        self._on_update_submask(sub_mask_id, {"parameters": params})

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _find(self, sub_mask_id: Optional[str]) -> SubMask | None:
        if sub_mask_id is None:
            return None
        for container in self._adjustments_provider().containers():
            sub_mask = container.find(sub_mask_id)
            if sub_mask is not None:
                return sub_mask
        return None

    def _active_sub_mask(self) -> SubMask | None:
        return self._find(self._active_sub_mask_provider())

    def _reset_gesture(self) -> None:
        if self._strategy is not None:
            self._strategy.on_end()
        self._strategy = None
        self._stroke_points = None
        self._stroke_target = None
        self._straighten_line = None

    def _press_shapes(self, point: QPointF, render_size: RenderSize, active: SubMask | None) -> bool:
        crop_origin = self._adjustments_provider().crop_origin
        # Topmost first: the active shape is drawn last so it is tested first.
        for sub_mask in reversed(self.ordered_sub_masks()):
            if not sub_mask.visible:
                continue
            display = sub_mask_to_display(sub_mask, render_size, crop_origin)
            handle = self._hit_tester.test(point, display)
            if handle is MaskHandle.NONE:
                continue
            if active is not None and sub_mask.id == active.id:
                self._begin_drag(sub_mask, handle, point, render_size, crop_origin)
                return True
            if is_selectable(sub_mask, active):
                self._on_select_submask(sub_mask.id)
                self._on_request_update()
                return True

        # Clicking empty canvas clears the selection.
        if active is not None:
            self._on_select_submask(None)
            self._on_request_update()
        return False

    def _begin_drag(
        self,
        sub_mask: SubMask,
        handle: MaskHandle,
        point: QPointF,
        render_size: RenderSize,
        crop_origin: tuple[float, float],
    ) -> None:
        if sub_mask.type not in (MaskType.RADIAL, MaskType.LINEAR):
            # Brush strokes and selector rectangles are clickable, not draggable.
            return
        session = DragSession(
            shape_id=sub_mask.id,
            original_params=sub_mask.parameters,
            current_pointer=QPointF(point),
            press_pointer=QPointF(point),
            render_size=render_size,
            crop_origin=crop_origin,
        )
        if handle is MaskHandle.RADIAL_EDGE:
            self._strategy = RadialTransformStrategy(session)
        elif handle is MaskHandle.LINEAR_START:
            self._strategy = LinearEndpointStrategy(session, "start")
        elif handle is MaskHandle.LINEAR_END:
            self._strategy = LinearEndpointStrategy(session, "end")
        elif handle is MaskHandle.LINEAR_RANGE:
            self._strategy = LinearRangeStrategy(session)
        elif sub_mask.type is MaskType.RADIAL:
            self._strategy = RadialMoveStrategy(session)
        else:
            self._strategy = LinearMoveStrategy(session)
        _LOGGER.debug("Started %s drag on %s", handle.name, sub_mask.id)

    def _finish_stroke(self) -> None:
        points = self._stroke_points or []
        target = self._stroke_target
        self._stroke_points = None
        self._stroke_target = None

        render_size = self._render_size_provider()
        if target is None or render_size is None or not render_size.is_valid():
            return
        # Re-read so strokes append to the latest committed state.
        current = self._find(target.id) or target
        crop_origin = self._adjustments_provider().crop_origin

        if is_brush_tool_active(current):
            line = display_stroke_to_image(
                points, self._brush_settings_provider(), render_size, crop_origin
            )
            if line is None or not isinstance(current.parameters, BrushParams):
                return
            params = append_stroke(current.parameters, line)
            if params is not current.parameters:
                self._on_update_submask(current.id, {"parameters": params})
            return

        if is_selector_tool_active(current):
            box = selector_from_drag(points, render_size, crop_origin)
            if box is None:
                return
            self._commit_selector(current, box)

    def _commit_selector(self, sub_mask: SubMask, box: SelectorParams) -> None:
        self._on_update_submask(sub_mask.id, {"parameters": box})
        start = QPointF(box.start_x, box.start_y)
        end = QPointF(box.end_x, box.end_y)
        if sub_mask.type is MaskType.AI_SUBJECT and self._on_generate_ai_mask is not None:
            self._on_generate_ai_mask(sub_mask.id, start, end)
        elif sub_mask.type is MaskType.QUICK_ERASER and self._on_quick_erase is not None:
            self._on_quick_erase(sub_mask.id, start, end)

    def _finish_straighten(self) -> None:
        start, end = self._straighten_line
        self._straighten_line = None
        adjustments = self._adjustments_provider()
        render_size = self._render_size_provider()
        uncropped = None
        if self._image_size_provider is not None and render_size is not None:
            width, height = self._image_size_provider()
            uncropped = uncropped_render_size(width, height, adjustments.orientation_steps, render_size)
        correction = straighten_correction(start, end, adjustments.rotation, straighten_center(uncropped))
        if correction is None:
            return
        if self._on_straighten is not None:
            self._on_straighten(correction)


__all__ = ["CursorPreview", "MaskInteractionController", "ToolMode"]
