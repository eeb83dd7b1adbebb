"""State container for the non-destructive editing workflow."""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from PySide6.QtCore import QObject, Signal

from ..core.pipeline import PixelTransform, build_pixel_transform
from ..domain.adjustments import Adjustments
from ..domain.masks import MaskContainer, SubMask
from ..errors import UnknownMaskError
from ..utils.logging import get_logger

logger = get_logger(__name__)


class EditSession(QObject):
    """Hold the :class:`Adjustments` for the image being edited.

    The session is the single owner of edit state.  Every change replaces the
    stored value wholesale with a new immutable instance, so listeners always
    observe a consistent snapshot.
    """

    adjustmentsChanged = Signal(object)
    """Emitted with the new :class:`Adjustments` after any change."""

    subMaskChanged = Signal(str, object)
    """Emitted with the sub-mask id and the updated :class:`SubMask`."""

    imageChanged = Signal(str)
    """Emitted when the session switches to a different image identity."""

    resetPerformed = Signal()
    """Emitted when :meth:`reset` restores every adjustment to its default."""

    def __init__(self, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._adjustments = Adjustments()
        self._image_id: str | None = None

    # ------------------------------------------------------------------
    # Accessors
    def adjustments(self) -> Adjustments:
        return self._adjustments

    def image_id(self) -> str | None:
        """Return the identity of the image currently being edited."""

        return self._image_id

    def pixel_transform(self) -> PixelTransform:
        return build_pixel_transform(self._adjustments)

    def find_sub_mask(self, sub_mask_id: str | None) -> SubMask | None:
        for container in self._adjustments.containers():
            sub_mask = container.find(sub_mask_id)
            if sub_mask is not None:
                return sub_mask
        return None

    # ------------------------------------------------------------------
    # Mutation helpers
    def set_image(self, image_id: str, adjustments: Adjustments | None = None) -> None:
        """Start editing *image_id* with *adjustments* (defaults when omitted)."""

        self._image_id = image_id
        self._adjustments = adjustments or Adjustments()
        self.imageChanged.emit(image_id)
        self.adjustmentsChanged.emit(self._adjustments)

    def set_adjustments(self, adjustments: Adjustments) -> None:
        if adjustments == self._adjustments:
            return
        self._adjustments = adjustments
        self.adjustmentsChanged.emit(adjustments)

    def update(self, partial: Mapping[str, Any]) -> None:
        """Merge a camelCase *partial* payload into the current adjustments."""

        self.set_adjustments(self._adjustments.merged(partial))

    def update_submask(self, sub_mask_id: str, partial: Mapping[str, Any]) -> None:
        """Replace fields of *sub_mask_id* with *partial*.

        The update is idempotent: applying the same partial twice yields the
        same state.  Raises :class:`UnknownMaskError` when no container holds
        the id.
        """

        adjustments = self._adjustments
        masks = _update_containers(adjustments.masks, sub_mask_id, partial)
        ai_patches = adjustments.ai_patches
        if masks is None:
            ai_patches = _update_containers(adjustments.ai_patches, sub_mask_id, partial)
            if ai_patches is None:
                raise UnknownMaskError(f"No container holds sub-mask {sub_mask_id!r}")
            masks = adjustments.masks

        updated = replace(adjustments, masks=masks, ai_patches=ai_patches)
        if updated == adjustments:
            return
        self._adjustments = updated
        logger.debug("Updated sub-mask %s with %s", sub_mask_id, sorted(partial))
        self.subMaskChanged.emit(sub_mask_id, self.find_sub_mask(sub_mask_id))
        self.adjustmentsChanged.emit(updated)

    def reset(self) -> None:
        """Restore every adjustment to its default while keeping the image."""

        self._adjustments = Adjustments()
        self.adjustmentsChanged.emit(self._adjustments)
        self.resetPerformed.emit()


def _update_containers(
    containers: tuple[MaskContainer, ...], sub_mask_id: str, partial: Mapping[str, Any]
) -> tuple[MaskContainer, ...] | None:
    for index, container in enumerate(containers):
        if container.contains(sub_mask_id):
            updated = container.with_sub_mask(sub_mask_id, partial)
            return containers[:index] + (updated,) + containers[index + 1:]
    return None


__all__ = ["EditSession"]
