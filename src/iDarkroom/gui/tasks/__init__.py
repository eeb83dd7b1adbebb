"""Background tasks and workers."""

from __future__ import annotations

from .pixel_sample_worker import (
    PixelSampleWorker,
    PixelSampleWorkerSignals,
    PixelSource,
    QImagePixelSource,
)

__all__ = [
    "PixelSampleWorker",
    "PixelSampleWorkerSignals",
    "PixelSource",
    "QImagePixelSource",
]
