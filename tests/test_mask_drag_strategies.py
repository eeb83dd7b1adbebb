"""Tests for the mask drag strategies."""

import pytest
from PySide6.QtCore import QPointF

from iDarkroom.core.coordinates import RenderSize
from iDarkroom.domain.masks import LinearParams, RadialParams
from iDarkroom.gui.mask_overlay.strategies import (
    DragSession,
    LinearEndpointStrategy,
    LinearMoveStrategy,
    RadialMoveStrategy,
    RadialTransformStrategy,
)

UNIT = RenderSize(width=1000, height=1000, scale=1.0)


def _session(params, press, render_size=UNIT, crop_origin=(0.0, 0.0)):
    return DragSession(
        shape_id="shape",
        original_params=params,
        current_pointer=QPointF(press),
        press_pointer=QPointF(press),
        render_size=render_size,
        crop_origin=crop_origin,
    )


def test_pointer_delta():
    session = _session(RadialParams(0, 0, 1, 1), QPointF(10, 10))
    session.current_pointer = QPointF(15, 7)
    assert session.pointer_delta() == QPointF(5, -3)


def test_radial_move_keeps_grab_offset():
    strategy = RadialMoveStrategy(_session(RadialParams(100, 100, 50, 30), QPointF(110, 100)))
    params = strategy.on_drag(QPointF(140, 120))
    assert (params.center_x, params.center_y) == (130, 120)
    assert strategy.session.current_pointer == QPointF(140, 120)


def test_radial_move_respects_crop_origin():
    session = _session(RadialParams(300, 300, 50, 30), QPointF(200, 200), crop_origin=(100, 100))
    params = RadialMoveStrategy(session).on_drag(QPointF(210, 200))
    assert (params.center_x, params.center_y) == (310, 300)


def test_invalid_render_size_returns_original():
    original = RadialParams(100, 100, 50, 30)
    strategy = RadialMoveStrategy(_session(original, QPointF(0, 0), render_size=RenderSize(0, 0, 0.0)))
    assert strategy.on_drag(QPointF(50, 50)) is original


def test_radial_transform_scales_both_axes_from_diagonal_press():
    strategy = RadialTransformStrategy(_session(RadialParams(100, 100, 50, 30), QPointF(130, 120)))
    params = strategy.on_drag(QPointF(160, 140))
    assert strategy.last_scale == pytest.approx((2.0, 2.0))
    assert params.radius_x == pytest.approx(100)
    assert params.radius_y == pytest.approx(60)


def test_linear_move_translates_band():
    params = LinearParams(0, 0, 100, 0, range=20)
    strategy = LinearMoveStrategy(_session(params, QPointF(50, 0)))
    moved = strategy.on_drag(QPointF(55, 30))
    assert moved == LinearParams(5, 30, 105, 30, range=20)


def test_linear_endpoint_rejects_unknown_endpoint():
    with pytest.raises(ValueError):
        LinearEndpointStrategy(_session(LinearParams(0, 0, 1, 1), QPointF()), "middle")
    strategy = LinearEndpointStrategy(_session(LinearParams(0, 0, 100, 0), QPointF()), "start")
    assert strategy.endpoint == "start"
    moved = strategy.on_drag(QPointF(-20, 5))
    assert (moved.start_x, moved.start_y, moved.end_x) == (-20, 5, 100)
