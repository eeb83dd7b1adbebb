"""Conversions between :class:`QImage` buffers and NumPy arrays."""

from __future__ import annotations

import numpy as np
from PySide6.QtGui import QImage


def _prepare_pixel_view(
    buffer: np.ndarray,
    width: int,
    height: int,
    bytes_per_line: int,
) -> np.ndarray | None:
    """Validate buffer dimensions and return a reshaped view (H, W, 4).

    Returns None if validation fails.
    """
    if width <= 0 or height <= 0:
        return None

    expected_size = bytes_per_line * height
    if buffer.size < expected_size:
        return None

    lines = buffer[:expected_size].reshape((height, bytes_per_line))
    valid_width = width * 4
    if valid_width > bytes_per_line:
        return None

    return lines[:, :valid_width].reshape((height, width, 4))


def qimage_to_rgb_array(image: QImage) -> np.ndarray | None:
    """Return an ``(H, W, 3)`` ``uint8`` copy of *image*'s RGB channels.

    ``None`` is returned for null images or buffers with unexpected strides.
    """

    if image is None or image.isNull():
        return None
    converted = image.convertToFormat(QImage.Format.Format_RGBA8888)
    buffer = np.frombuffer(converted.constBits(), dtype=np.uint8, count=converted.sizeInBytes())
    view = _prepare_pixel_view(
        buffer, converted.width(), converted.height(), converted.bytesPerLine()
    )
    if view is None:
        return None
    return np.array(view[:, :, :3], copy=True)


def rgb_array_to_qimage(pixels: np.ndarray) -> QImage:
    """Wrap an ``(H, W, 3)`` array (``uint8`` or float in ``[0, 1]``) in a new QImage."""

    if pixels.dtype != np.uint8:
        pixels = np.round(np.clip(pixels, 0.0, 1.0) * 255.0).astype(np.uint8)
    height, width = pixels.shape[:2]
    rgba = np.empty((height, width, 4), dtype=np.uint8)
    rgba[:, :, :3] = pixels[:, :, :3]
    rgba[:, :, 3] = 255
    image = QImage(rgba.data, width, height, width * 4, QImage.Format.Format_RGBA8888)
    # QImage does not own the NumPy buffer; detach before it goes out of scope.
    return image.copy()


__all__ = ["qimage_to_rgb_array", "rgb_array_to_qimage"]
