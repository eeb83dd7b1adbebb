import pytest

pytest.importorskip("PySide6", reason="PySide6 is required for edit session tests", exc_type=ImportError)
pytest.importorskip("PySide6.QtTest", reason="Qt test utilities unavailable", exc_type=ImportError)

from PySide6.QtTest import QSignalSpy

from iDarkroom.domain.adjustments import Adjustments
from iDarkroom.domain.masks import (
    LinearParams,
    MaskContainer,
    MaskType,
    RadialParams,
    SelectorParams,
    SubMask,
)
from iDarkroom.errors import UnknownMaskError
from iDarkroom.gui.edit_session import EditSession


def _masked_adjustments() -> Adjustments:
    radial = SubMask(id="r", type=MaskType.RADIAL, parameters=RadialParams(10, 10, 5, 5))
    linear = SubMask(id="l", type=MaskType.LINEAR, parameters=LinearParams(0, 0, 10, 0))
    patch = SubMask(id="p", type=MaskType.QUICK_ERASER, parameters=SelectorParams(0, 0, 4, 4))
    return Adjustments(
        masks=(MaskContainer(id="m", sub_masks=(radial, linear)),),
        ai_patches=(MaskContainer(id="a", sub_masks=(patch,)),),
    )


def test_set_image_emits_identity_and_state(qapp) -> None:
    session = EditSession()
    image_spy = QSignalSpy(session.imageChanged)
    adjustments_spy = QSignalSpy(session.adjustmentsChanged)

    session.set_image("IMG_0001", _masked_adjustments())

    assert image_spy.count() == 1
    assert image_spy.at(0)[0] == "IMG_0001"
    assert adjustments_spy.count() == 1
    assert session.image_id() == "IMG_0001"
    assert session.find_sub_mask("p") is not None


def test_update_merges_partial_payload(qapp) -> None:
    session = EditSession()
    spy = QSignalSpy(session.adjustmentsChanged)

    session.update({"exposure": 1.0, "vignetteAmount": -20})
    session.update({"exposure": 1.0})

    assert spy.count() == 1
    assert session.adjustments().exposure == 1.0
    assert session.pixel_transform().overlay_names() == ("vignette",)


def test_update_submask_replaces_fields_and_is_idempotent(qapp) -> None:
    session = EditSession()
    session.set_image("x", _masked_adjustments())
    sub_spy = QSignalSpy(session.subMaskChanged)

    partial = {"parameters": RadialParams(40, 40, 5, 5)}
    session.update_submask("r", partial)
    first = session.adjustments()
    session.update_submask("r", partial)

    assert sub_spy.count() == 1
    sub_id, sub_mask = sub_spy.at(0)
    assert sub_id == "r"
    assert sub_mask.parameters.center_x == 40
    assert session.adjustments() is first
    # Siblings untouched.
    assert session.find_sub_mask("l").parameters == LinearParams(0, 0, 10, 0)


def test_update_submask_reaches_ai_patches(qapp) -> None:
    session = EditSession()
    session.set_image("x", _masked_adjustments())
    session.update_submask("p", {"visible": False})
    assert session.find_sub_mask("p").visible is False
    assert session.adjustments().masks == _masked_adjustments().masks


def test_update_unknown_submask_raises(qapp) -> None:
    session = EditSession()
    session.set_image("x", _masked_adjustments())
    with pytest.raises(UnknownMaskError):
        session.update_submask("nope", {"visible": False})


def test_reset_keeps_image(qapp) -> None:
    session = EditSession()
    session.set_image("x", _masked_adjustments())
    reset_spy = QSignalSpy(session.resetPerformed)

    session.reset()

    assert reset_spy.count() == 1
    assert session.adjustments() == Adjustments()
    assert session.image_id() == "x"
