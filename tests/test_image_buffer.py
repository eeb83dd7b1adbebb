import numpy as np
import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for image buffer tests", exc_type=ImportError)

from PySide6.QtGui import QColor, QImage

from iDarkroom.utils.image_buffer import qimage_to_rgb_array, rgb_array_to_qimage


def test_qimage_to_rgb_array_drops_alpha(qapp) -> None:
    image = QImage(7, 3, QImage.Format.Format_ARGB32)
    image.fill(QColor(12, 34, 56))
    pixels = qimage_to_rgb_array(image)
    assert pixels.shape == (3, 7, 3)
    assert (pixels == np.array([12, 34, 56], dtype=np.uint8)).all()


def test_null_image_gives_none(qapp) -> None:
    assert qimage_to_rgb_array(QImage()) is None


def test_float_pixels_are_quantised(qapp) -> None:
    pixels = np.zeros((2, 3, 3), dtype=np.float32)
    pixels[..., 0] = 1.0
    pixels[..., 2] = 0.5
    image = rgb_array_to_qimage(pixels)
    assert (image.width(), image.height()) == (3, 2)
    color = image.pixelColor(1, 1)
    assert (color.red(), color.green(), color.blue()) == (255, 0, 128)


def test_uint8_pixels_survive_conversion(qapp) -> None:
    pixels = np.random.default_rng(4).integers(0, 256, size=(5, 6, 3), dtype=np.uint8)
    np.testing.assert_array_equal(qimage_to_rgb_array(rgb_array_to_qimage(pixels)), pixels)
