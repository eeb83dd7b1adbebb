"""Asynchronous white balance picking against the edit session."""

from __future__ import annotations

from PySide6.QtCore import QObject, QPointF, QThreadPool, Signal

from ..config import WB_SAMPLE_RADIUS
from ..core.coordinates import RenderSize
from ..core.wb_resolver import WBDelta, apply_white_balance_delta, preview_point
from ..settings.manager import SettingsManager
from ..utils.logging import get_logger
from .edit_session import EditSession
from .tasks.pixel_sample_worker import PixelSampleWorker, PixelSource

logger = get_logger(__name__)


class WhiteBalancePicker(QObject):
    """Turn preview clicks into temperature/tint updates.

    Sampling runs on a thread pool.  Each result carries the image identity
    it was requested for; results for anything but the session's current
    image are dropped, whatever order they arrive in.
    """

    picked = Signal(object)
    """Emitted with the applied :class:`WBDelta`."""

    pickFailed = Signal(str)
    """Emitted with an error message when the preview could not be sampled."""

    def __init__(
        self,
        session: EditSession,
        source: PixelSource,
        *,
        settings: SettingsManager | None = None,
        thread_pool: QThreadPool | None = None,
        parent: QObject | None = None,
    ) -> None:
        super().__init__(parent)
        self._session = session
        self._source = source
        self._settings = settings
        self._pool = thread_pool or QThreadPool.globalInstance()
        # Workers are not auto-deleted; keep them alive until they report back.
        self._pending: dict[QObject, PixelSampleWorker] = {}

    def sample_radius(self) -> int:
        if self._settings is None:
            return WB_SAMPLE_RADIUS
        return self._settings.sample_radius()

    def pick(self, point: QPointF, render_size: RenderSize) -> bool:
        """Start sampling at display *point*.

        Returns ``False`` without scheduling work when no image is loaded or
        the click lies outside the image.
        """

        image_id = self._session.image_id()
        if image_id is None:
            return False
        if preview_point(point, render_size) is None:
            logger.debug("Ignoring white balance click outside the image")
            return False

        worker = PixelSampleWorker(
            self._source, image_id, point, render_size, radius=self.sample_radius()
        )
        worker.setAutoDelete(False)
        worker.signals.sampled.connect(self._on_sampled)
        worker.signals.sampleFailed.connect(self._on_failed)
        self._pending[worker.signals] = worker
        self._pool.start(worker)
        return True

    def pending_count(self) -> int:
        return len(self._pending)

    # ------------------------------------------------------------------
    def _release_sender(self) -> None:
        self._pending.pop(self.sender(), None)

    def _on_sampled(self, image_id: str, delta: WBDelta) -> None:
        self._release_sender()
        if image_id != self._session.image_id():
            logger.debug("Discarding stale white balance sample for %s", image_id)
            return
        adjustments = self._session.adjustments()
        temperature, tint = apply_white_balance_delta(
            adjustments.temperature, adjustments.tint, delta
        )
        self._session.update({"temperature": temperature, "tint": tint})
        self.picked.emit(delta)

    def _on_failed(self, image_id: str, message: str) -> None:
        self._release_sender()
        if image_id != self._session.image_id():
            return
        self.pickFailed.emit(message)


__all__ = ["WhiteBalancePicker"]
