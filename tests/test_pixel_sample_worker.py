import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for worker tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtTest", reason="Qt test utilities unavailable", exc_type=ImportError)

import numpy as np
from PySide6.QtCore import QPointF
from PySide6.QtGui import QColor, QImage
from PySide6.QtTest import QSignalSpy

from iDarkroom.core.coordinates import RenderSize
from iDarkroom.errors import PixelSourceError
from iDarkroom.gui.tasks import PixelSampleWorker, QImagePixelSource

RENDER = RenderSize(width=200, height=100, scale=1.0)


def _solid_image(width: int = 200, height: int = 100, color: QColor | None = None) -> QImage:
    image = QImage(width, height, QImage.Format.Format_ARGB32)
    image.fill(color or QColor("#808080"))
    return image


def test_qimage_source_returns_rgb_pixels(qapp) -> None:
    source = QImagePixelSource()
    source.set_image("a", _solid_image(color=QColor(10, 20, 30)))
    pixels = source.decoded_pixels("a")
    assert pixels.shape == (100, 200, 3)
    assert pixels.dtype == np.uint8
    assert tuple(pixels[0, 0]) == (10, 20, 30)

    region = source.decoded_pixels("a", (5, 5, 15, 10))
    assert region.shape == (5, 10, 3)


def test_qimage_source_raises_for_unknown_image(qapp) -> None:
    source = QImagePixelSource()
    with pytest.raises(PixelSourceError):
        source.decoded_pixels("missing")
    source.set_image("gone", _solid_image())
    source.discard("gone")
    with pytest.raises(PixelSourceError):
        source.decoded_pixels("gone")


def test_worker_emits_zero_delta_for_grey(qapp) -> None:
    source = QImagePixelSource()
    source.set_image("grey", _solid_image())
    worker = PixelSampleWorker(source, "grey", QPointF(100, 50), RENDER, radius=3)
    sampled_spy = QSignalSpy(worker.signals.sampled)
    failed_spy = QSignalSpy(worker.signals.sampleFailed)

    worker.run()

    assert sampled_spy.count() == 1
    image_id, delta = sampled_spy.at(0)
    assert image_id == "grey"
    assert delta.temperature == pytest.approx(0.0)
    assert delta.tint == pytest.approx(0.0)
    assert failed_spy.count() == 0


def test_worker_reports_blue_cast(qapp) -> None:
    source = QImagePixelSource()
    source.set_image("blue", _solid_image(color=QColor(90, 110, 200)))
    worker = PixelSampleWorker(source, "blue", QPointF(20, 20), RENDER)
    sampled_spy = QSignalSpy(worker.signals.sampled)

    worker.run()

    _, delta = sampled_spy.at(0)
    assert delta.temperature > 0


def test_worker_emits_failure_when_source_fails(qapp) -> None:
    worker = PixelSampleWorker(QImagePixelSource(), "missing", QPointF(10, 10), RENDER)
    sampled_spy = QSignalSpy(worker.signals.sampled)
    failed_spy = QSignalSpy(worker.signals.sampleFailed)

    worker.run()

    assert sampled_spy.count() == 0
    assert failed_spy.count() == 1
    image_id, message = failed_spy.at(0)
    assert image_id == "missing"
    assert "missing" in message


class _BrokenSource:
    def decoded_pixels(self, image_id, region=None):
        raise OSError("disk gone")


def test_worker_reports_unexpected_source_errors(qapp) -> None:
    worker = PixelSampleWorker(_BrokenSource(), "a", QPointF(10, 10), RENDER)
    sampled_spy = QSignalSpy(worker.signals.sampled)
    failed_spy = QSignalSpy(worker.signals.sampleFailed)

    worker.run()

    assert sampled_spy.count() == 0
    assert failed_spy.count() == 1
    assert failed_spy.at(0) == ["a", "disk gone"]
