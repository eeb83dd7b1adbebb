"""Tests for display/image coordinate conversion and image geometry."""

import pytest
from PySide6.QtCore import QPointF

from iDarkroom.core.coordinates import (
    RenderSize,
    display_length_to_image,
    display_to_image,
    image_length_to_display,
    image_to_crop,
    image_to_display,
)
from iDarkroom.core.geometry import (
    TransformOp,
    crop_inset_percentages,
    image_transform,
    oriented_dimensions,
    transform_to_qtransform,
    uncropped_render_size,
)
from iDarkroom.domain.adjustments import Adjustments, CropRect


@pytest.fixture
def render_size():
    return RenderSize(width=800, height=600, scale=0.5, offset_x=40, offset_y=10)


def test_display_to_image_applies_offset_scale_and_crop(render_size):
    point = display_to_image(QPointF(140, 60), render_size, (300, 200))
    assert point.x() == pytest.approx((140 - 40) / 0.5 + 300)
    assert point.y() == pytest.approx((60 - 10) / 0.5 + 200)


@pytest.mark.parametrize("x,y", [(0, 0), (123.5, 456.25), (-20, 900)])
def test_roundtrip_returns_original_point(render_size, x, y):
    original = QPointF(x, y)
    image = display_to_image(original, render_size, (17, 33))
    back = image_to_display(image, render_size, (17, 33))
    assert back.x() == pytest.approx(x)
    assert back.y() == pytest.approx(y)


def test_zero_scale_returns_none():
    zero = RenderSize(width=0, height=0, scale=0.0)
    assert display_to_image(QPointF(1, 1), zero) is None
    assert image_to_display(QPointF(1, 1), zero) is None
    assert display_length_to_image(10, zero) is None
    assert image_length_to_display(10, zero) is None


def test_length_conversion(render_size):
    assert display_length_to_image(25, render_size) == pytest.approx(50)
    assert image_length_to_display(50, render_size) == pytest.approx(25)


def test_image_to_crop():
    point = image_to_crop(QPointF(120, 80), (100, 50))
    assert (point.x(), point.y()) == (20, 30)


def test_oriented_dimensions_swap_on_odd_steps():
    assert oriented_dimensions(4000, 3000, 0) == (4000, 3000)
    assert oriented_dimensions(4000, 3000, 1) == (3000, 4000)
    assert oriented_dimensions(4000, 3000, 2) == (4000, 3000)
    assert oriented_dimensions(4000, 3000, 3) == (3000, 4000)


def test_crop_insets_use_oriented_dimensions():
    crop = CropRect(x=100, y=200, width=2000, height=1000)
    top, right, bottom, left = crop_inset_percentages(crop, 4000, 3000, 1)
    # Oriented base is 3000 x 4000.
    assert top == pytest.approx(200 / 4000 * 100)
    assert left == pytest.approx(100 / 3000 * 100)
    assert right == pytest.approx((3000 - 2100) / 3000 * 100)
    assert bottom == pytest.approx((4000 - 1200) / 4000 * 100)


def test_no_crop_means_no_insets():
    assert crop_inset_percentages(None, 4000, 3000) is None


def test_uncropped_render_size_fits_viewport():
    # Cropped render occupies 400x400 centred in a 1000x600 viewport.
    render = RenderSize(width=400, height=400, scale=0.2, offset_x=300, offset_y=100)
    fitted = uncropped_render_size(4000, 2000, 0, render)
    assert fitted.scale == pytest.approx(min(1000 / 4000, 600 / 2000))
    assert fitted.width == pytest.approx(1000)
    assert fitted.height == pytest.approx(500)


def test_uncropped_render_size_degenerate():
    render = RenderSize(width=400, height=400, scale=0.2)
    assert uncropped_render_size(0, 2000, 0, render) is None


def test_image_transform_order():
    adjustments = Adjustments(rotation=3.5, orientation_steps=1, flip_horizontal=True, flip_vertical=True)
    assert image_transform(adjustments) == [
        TransformOp("rotate", 3.5),
        TransformOp("rotate", 90.0),
        TransformOp("scaleX", -1.0),
        TransformOp("scaleY", -1.0),
    ]
    assert image_transform(Adjustments()) == []


def test_transform_to_qtransform_flips_x():
    transform = transform_to_qtransform([TransformOp("scaleX", -1.0)])
    mapped = transform.map(QPointF(10, 5))
    assert mapped.x() == pytest.approx(-10)
    assert mapped.y() == pytest.approx(5)
