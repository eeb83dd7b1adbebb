"""Tests for the adjustments and mask domain model."""

import pytest

from iDarkroom.core.curve_resolver import CurveParams
from iDarkroom.domain.adjustments import Adjustments, CropRect
from iDarkroom.domain.masks import (
    BrushParams,
    DrawnLine,
    LinearParams,
    MaskContainer,
    MaskType,
    RadialParams,
    SelectorParams,
    SubMask,
    SubMaskMode,
    ToolType,
    find_sub_mask,
    merge_parameters,
)
from iDarkroom.errors import (
    AdjustmentsValidationError,
    MaskParameterMismatchError,
    UnknownMaskError,
)


def _radial(sub_id: str = "r1") -> SubMask:
    return SubMask(
        id=sub_id,
        type=MaskType.RADIAL,
        parameters=RadialParams(center_x=100, center_y=100, radius_x=50, radius_y=30),
    )


def _payload():
    return {
        "exposure": 0.5,
        "contrast": 10,
        "orientationSteps": 5,
        "flipHorizontal": True,
        "crop": {"x": 10, "y": 20, "width": 300, "height": 200},
        "colorCalibration": {"shadowsTint": -20},
        "masks": [
            {
                "id": "m1",
                "name": "Sky",
                "subMasks": [
                    {
                        "id": "s1",
                        "type": "linear",
                        "mode": "subtractive",
                        "parameters": {"startX": 0, "startY": 0, "endX": 100, "endY": 0, "range": 25},
                    },
                    {
                        "id": "s2",
                        "type": "brush",
                        "parameters": {
                            "lines": [
                                {"brushSize": 20, "points": [{"x": 1, "y": 2}], "tool": "eraser"}
                            ]
                        },
                    },
                ],
            }
        ],
    }


def test_defaults():
    adjustments = Adjustments()
    assert adjustments.crop is None
    assert adjustments.crop_origin == (0.0, 0.0)
    assert adjustments.vignette_midpoint == 50
    assert adjustments.grain_size == 25
    assert adjustments.containers() == ()


def test_from_mapping_parses_nested_payload():
    adjustments = Adjustments.from_mapping(_payload(), validate=True)
    assert adjustments.exposure == 0.5
    assert adjustments.orientation_steps == 1
    assert adjustments.flip_horizontal is True
    assert adjustments.crop == CropRect(10, 20, 300, 200)
    assert adjustments.crop_origin == (10, 20)
    assert adjustments.shadows_tint == -20

    container = adjustments.masks[0]
    linear = container.find("s1")
    assert linear.mode is SubMaskMode.SUBTRACTIVE
    assert linear.parameters == LinearParams(start_x=0, start_y=0, end_x=100, end_y=0, range=25)
    brush = container.find("s2").parameters
    assert isinstance(brush, BrushParams)
    assert brush.lines[0].tool is ToolType.ERASER
    assert brush.lines[0].points == ((1.0, 2.0),)


def test_mapping_roundtrip():
    adjustments = Adjustments.from_mapping(_payload())
    assert Adjustments.from_mapping(adjustments.to_mapping()) == adjustments


def test_validation_rejects_out_of_range_slider():
    with pytest.raises(AdjustmentsValidationError) as excinfo:
        Adjustments.from_mapping({"contrast": 250}, validate=True)
    assert "contrast" in str(excinfo.value)


def test_validation_rejects_unknown_mask_type():
    payload = {"masks": [{"id": "m", "subMasks": [{"id": "x", "type": "lasso"}]}]}
    with pytest.raises(AdjustmentsValidationError):
        Adjustments.from_mapping(payload, validate=True)


def test_fresh_selector_without_rectangle_loads():
    payload = {
        "masks": [
            {
                "id": "m",
                "subMasks": [
                    {"id": "a", "type": "ai-subject", "parameters": {}},
                    {"id": "q", "type": "quick-eraser"},
                ],
            }
        ]
    }
    adjustments = Adjustments.from_mapping(payload, validate=True)
    ai, eraser = adjustments.masks[0].sub_masks
    assert ai.parameters == SelectorParams()
    assert not eraser.parameters.has_area()


@pytest.mark.parametrize(
    "sub_mask",
    [
        {"id": "r", "type": "radial"},
        {"id": "r", "type": "radial", "parameters": {"centerX": 1, "centerY": 2}},
        {"id": "l", "type": "linear", "parameters": {}},
    ],
)
def test_validation_requires_shape_parameters(sub_mask):
    payload = {"masks": [{"id": "m", "subMasks": [sub_mask]}]}
    with pytest.raises(AdjustmentsValidationError):
        Adjustments.from_mapping(payload, validate=True)


def test_unvalidated_load_reports_missing_parameters():
    payload = {"masks": [{"id": "m", "subMasks": [{"id": "r", "type": "radial"}]}]}
    with pytest.raises(AdjustmentsValidationError) as excinfo:
        Adjustments.from_mapping(payload)
    assert "radiusX" in str(excinfo.value)


def test_merged_returns_new_instance_and_keeps_original():
    original = Adjustments()
    updated = original.merged({"temperature": 30, "curves": None})
    assert original.temperature == 0
    assert updated.temperature == 30
    assert updated.curves == CurveParams()


def test_merged_without_changes_returns_same_object():
    original = Adjustments()
    assert original.merged({}) is original


def test_merged_clears_crop():
    cropped = Adjustments(crop=CropRect(0, 0, 10, 10))
    assert cropped.merged({"crop": None}).crop is None


def test_sub_mask_rejects_mismatched_parameters():
    with pytest.raises(MaskParameterMismatchError):
        SubMask(id="x", type=MaskType.RADIAL, parameters=LinearParams(0, 0, 1, 1))
    with pytest.raises(MaskParameterMismatchError):
        SubMask(id="y", type=MaskType.BRUSH, parameters=SelectorParams(0, 0, 1, 1))


def test_selector_types_share_parameters():
    for mask_type in (MaskType.AI_SUBJECT, MaskType.QUICK_ERASER):
        sub_mask = SubMask(id="s", type=mask_type, parameters=SelectorParams(0, 0, 10, 5))
        assert sub_mask.parameters.width == 10
        assert sub_mask.parameters.height == 5
        assert sub_mask.parameters.has_area()


def test_sub_mask_merged_updates_fields():
    sub_mask = _radial()
    updated = sub_mask.merged({"parameters": {"centerX": 150.0}, "visible": False})
    assert updated.parameters.center_x == 150
    assert updated.parameters.radius_x == 50
    assert updated.visible is False
    assert sub_mask.visible is True


def test_merge_brush_lines_from_mappings():
    params = merge_parameters(
        BrushParams(), {"lines": [{"brushSize": 4, "points": [{"x": 0, "y": 0}]}]}
    )
    assert params.lines == (DrawnLine(brush_size=4, points=((0.0, 0.0),)),)


def test_container_update_and_lookup():
    container = MaskContainer(id="c", sub_masks=(_radial("a"), _radial("b")))
    updated = container.with_sub_mask("b", {"parameters": {"rotation": 15.0}})
    assert updated.find("b").parameters.rotation == 15
    assert updated.find("a").parameters.rotation == 0
    with pytest.raises(UnknownMaskError):
        container.with_sub_mask("missing", {})


def test_find_sub_mask_across_containers():
    first = MaskContainer(id="c1", sub_masks=(_radial("a"),))
    second = MaskContainer(id="c2", sub_masks=(_radial("b"),))
    container, sub_mask = find_sub_mask([first, second], "b")
    assert container.id == "c2"
    assert sub_mask.id == "b"
    assert find_sub_mask([first, second], None) is None
    assert find_sub_mask([first, second], "zzz") is None
