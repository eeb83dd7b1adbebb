"""Tests for the NumPy pixel transform executor."""

import numpy as np
import pytest

from iDarkroom.core.filters.numpy_executor import (
    apply_channel_shift,
    apply_convolution,
    apply_global_filter,
    apply_invert,
    apply_lut,
    apply_overlay,
    apply_pixel_transform,
    fractal_noise,
    vignette_alpha,
)
from iDarkroom.core.pipeline import (
    BlendMode,
    ChannelShiftStage,
    ColorWashOverlay,
    ConvolutionStage,
    GlobalFilterStage,
    InvertStage,
    LutStage,
    VignetteOverlay,
    build_pixel_transform,
)
from iDarkroom.domain.adjustments import Adjustments


def _column_image(width: int = 6, height: int = 2, column: int = 2) -> np.ndarray:
    pixels = np.zeros((height, width, 3), dtype=np.float32)
    pixels[:, column, :] = 1.0
    return pixels


def test_identity_lut_keeps_levels():
    table = np.repeat((np.arange(256) / 255.0)[:, None], 3, axis=1)
    pixels = np.random.default_rng(1).integers(0, 256, size=(4, 5, 3)).astype(np.float32) / 255.0
    out = apply_lut(pixels, LutStage(table=table))
    np.testing.assert_allclose(out, pixels, atol=1e-6)


def test_channel_shift_moves_red_right_and_blue_left():
    out = apply_channel_shift(_column_image(), ChannelShiftStage(red_dx=1.0, blue_dx=-1.0))
    assert out[0, 3, 0] == pytest.approx(1.0)
    assert out[0, 2, 0] == pytest.approx(0.0)
    assert out[0, 1, 2] == pytest.approx(1.0)
    assert out[0, 2, 2] == pytest.approx(0.0)
    # Green stays put.
    assert out[0, 2, 1] == pytest.approx(1.0)


def test_identity_kernel_keeps_pixels():
    pixels = _column_image()
    kernel = (0.0, 0.0, 0.0, 0.0, 1.0, 0.0, 0.0, 0.0, 0.0)
    np.testing.assert_allclose(apply_convolution(pixels, ConvolutionStage(kernel=kernel)), pixels)


def test_sharpen_keeps_flat_regions():
    pixels = np.full((4, 4, 3), 0.4, dtype=np.float32)
    kernel = (0.0, -1.0, 0.0, -1.0, 5.0, -1.0, 0.0, -1.0, 0.0)
    np.testing.assert_allclose(apply_convolution(pixels, ConvolutionStage(kernel=kernel)), pixels, atol=1e-6)


def test_global_filter_identity():
    pixels = np.random.default_rng(2).random((3, 3, 3), dtype=np.float32)
    np.testing.assert_allclose(apply_global_filter(pixels, GlobalFilterStage()), pixels, atol=1e-6)


def test_zero_saturation_gives_grey():
    pixels = np.zeros((1, 1, 3), dtype=np.float32)
    pixels[0, 0] = (1.0, 0.0, 0.0)
    out = apply_global_filter(pixels, GlobalFilterStage(saturation=0.0))
    assert out[0, 0, 0] == pytest.approx(out[0, 0, 1], abs=1e-5)
    assert out[0, 0, 1] == pytest.approx(out[0, 0, 2], abs=1e-5)


def test_blur_spreads_a_bright_column():
    out = apply_global_filter(_column_image(width=9, height=9, column=4), GlobalFilterStage(blur=2.0))
    assert out[4, 4, 0] < 1.0
    assert out[4, 3, 0] > 0.0


def test_invert():
    pixels = np.full((2, 2, 3), 0.25, dtype=np.float32)
    np.testing.assert_allclose(apply_invert(pixels, InvertStage()), 0.75)


def test_multiply_wash_with_black_darkens():
    pixels = np.full((2, 2, 3), 0.8, dtype=np.float32)
    overlay = ColorWashOverlay(color=(0, 0, 0), opacity=0.5, blend=BlendMode.MULTIPLY)
    np.testing.assert_allclose(apply_overlay(pixels, overlay), 0.4, atol=1e-6)


def test_vignette_alpha_is_zero_at_centre_and_full_in_corners():
    overlay = VignetteOverlay(
        color=(0, 0, 0), opacity=1.0, inner_stop=50.0, outer_stop=100.0, blend=BlendMode.MULTIPLY
    )
    alpha = vignette_alpha(40, 40, overlay)
    assert alpha.shape == (40, 40)
    assert alpha[20, 20] == pytest.approx(0.0)
    assert alpha[0, 0] > 0.9


def test_fractal_noise_is_deterministic_and_bounded():
    first = fractal_noise(16, 8, 0.7, 3)
    second = fractal_noise(16, 8, 0.7, 3)
    assert first.shape == (8, 16)
    np.testing.assert_array_equal(first, second)
    assert first.min() >= 0.0
    assert first.max() <= 1.0


def test_default_transform_is_identity_on_uint8():
    pixels = np.random.default_rng(3).integers(0, 256, size=(5, 4, 3), dtype=np.uint8)
    out = apply_pixel_transform(pixels, build_pixel_transform(Adjustments()))
    assert out.dtype == np.float32
    np.testing.assert_allclose(out, pixels / 255.0, atol=1e-6)


def test_negative_conversion_inverts_output():
    pixels = np.full((2, 2, 3), 51, dtype=np.uint8)
    out = apply_pixel_transform(pixels, build_pixel_transform(Adjustments(enable_negative_conversion=True)))
    np.testing.assert_allclose(out, 0.8, atol=1e-6)
