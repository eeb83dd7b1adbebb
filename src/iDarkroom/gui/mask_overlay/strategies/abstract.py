"""
Abstract base class for mask drag strategies.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from dataclasses import dataclass, field

from PySide6.QtCore import QPointF

from ....core.coordinates import RenderSize
from ....domain.masks import MaskParameters


@dataclass
class DragSession:
    """State of one in-progress shape drag.

    ``original_params`` is captured at press time and never mutated; every
    move recomputes the new parameters from it, so replaying the same
    pointer position always yields the same result.
    """

    shape_id: str
    original_params: MaskParameters
    current_pointer: QPointF
    press_pointer: QPointF = field(default_factory=QPointF)
    render_size: RenderSize | None = None
    crop_origin: tuple[float, float] = (0.0, 0.0)

    def pointer_delta(self) -> QPointF:
        return self.current_pointer - self.press_pointer


class MaskDragStrategy(ABC):
    """Base class for mask drag interactions (move, resize, range, endpoints)."""

    def __init__(self, session: DragSession) -> None:
        self._session = session

    @property
    def session(self) -> DragSession:
        return self._session

    def on_drag(self, pointer: QPointF) -> MaskParameters:
        """Record *pointer* and return the parameters it implies.

        Parameters
        ----------
        pointer:
            Current pointer position in display coordinates.
        """
        self._session.current_pointer = QPointF(pointer)
        if self._session.render_size is None or not self._session.render_size.is_valid():
            return self._session.original_params
        return self._compute(self._session.render_size)

    @abstractmethod
    def _compute(self, render_size: RenderSize) -> MaskParameters:
        """Return new parameters for the session's current pointer."""

    def on_end(self) -> None:
        """Handle end of interaction (pointer release)."""


__all__ = ["DragSession", "MaskDragStrategy"]
