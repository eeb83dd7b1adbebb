"""Worker that samples decoded preview pixels off the UI thread."""

from __future__ import annotations

from typing import Optional, Protocol

import numpy as np
from PySide6.QtCore import QObject, QPointF, QRunnable, Signal
from PySide6.QtGui import QImage

from ...core.coordinates import RenderSize
from ...core.wb_resolver import Region, sample_white_balance
from ...config import WB_SAMPLE_RADIUS
from ...errors import PixelSourceError
from ...utils.image_buffer import qimage_to_rgb_array
from ...utils.logging import get_logger

logger = get_logger(__name__)


class PixelSource(Protocol):
    """Host bridge that decodes preview pixels for an image identity."""

    def decoded_pixels(self, image_id: str, region: Optional[Region] = None) -> np.ndarray:
        """Return ``(H, W, 3)`` ``uint8`` pixels, optionally limited to *region*.

        Implementations raise :class:`PixelSourceError` on failure.
        """


class QImagePixelSource:
    """:class:`PixelSource` backed by already decoded :class:`QImage` previews."""

    def __init__(self) -> None:
        self._images: dict[str, QImage] = {}

    def set_image(self, image_id: str, image: QImage) -> None:
        self._images[image_id] = image

    def discard(self, image_id: str) -> None:
        self._images.pop(image_id, None)

    def decoded_pixels(self, image_id: str, region: Optional[Region] = None) -> np.ndarray:
        image = self._images.get(image_id)
        if image is None:
            raise PixelSourceError(f"No preview available for {image_id!r}")
        pixels = qimage_to_rgb_array(image)
        if pixels is None:
            raise PixelSourceError(f"Preview for {image_id!r} could not be decoded")
        if region is not None:
            x0, y0, x1, y1 = region
            pixels = pixels[y0:y1, x0:x1]
        return pixels


class PixelSampleWorkerSignals(QObject):
    """Signals exposed by :class:`PixelSampleWorker`.

    The signal container is kept separate from the runnable so slots execute
    on the GUI thread regardless of which pool thread ran the job.
    """

    sampled = Signal(str, object)
    """Emitted with the image identity and the resulting ``WBDelta``."""

    sampleFailed = Signal(str, str)
    """Emitted with the image identity and an error message."""


class PixelSampleWorker(QRunnable):
    """Decode the preview for *image_id* and derive a white balance delta."""

    def __init__(
        self,
        source: PixelSource,
        image_id: str,
        point: QPointF,
        render_size: RenderSize,
        radius: int = WB_SAMPLE_RADIUS,
    ) -> None:
        super().__init__()
        self._source = source
        self._image_id = image_id
        self._point = QPointF(point)
        self._render_size = render_size
        self._radius = int(radius)
        self.signals = PixelSampleWorkerSignals()

    @property
    def image_id(self) -> str:
        """Return the image identity this worker samples."""

        return self._image_id

    def run(self) -> None:  # type: ignore[override]
        """Fetch the pixels and sample them on a background thread."""

        try:
            preview = self._source.decoded_pixels(self._image_id)
            delta = sample_white_balance(preview, self._point, self._render_size, self._radius)
        except Exception as exc:
            # Host bridges may raise anything; the picker must always hear back.
            logger.warning("Pixel sampling failed for %s: %s", self._image_id, exc)
            self.signals.sampleFailed.emit(self._image_id, str(exc) or type(exc).__name__)
            return

        self.signals.sampled.emit(self._image_id, delta)


__all__ = [
    "PixelSampleWorker",
    "PixelSampleWorkerSignals",
    "PixelSource",
    "QImagePixelSource",
]
