import json
from pathlib import Path

import pytest
from jsonschema.exceptions import ValidationError

from iDarkroom.errors import SettingsLoadError, SettingsValidationError
from iDarkroom.settings.manager import SettingsManager
from iDarkroom.settings.schema import DEFAULT_SETTINGS, merge_with_defaults, validate_settings


def test_load_creates_defaults(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.load()
    assert path.exists()
    assert json.loads(path.read_text(encoding="utf-8")) == DEFAULT_SETTINGS
    assert manager.get("white_balance.sample_radius") == 5
    assert manager.get("masks.brush.size") == 50.0


def test_load_merges_partial_file(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"masks": {"brush": {"feather": 20}}}), encoding="utf-8")
    manager = SettingsManager(path)
    manager.load()
    assert manager.get("masks.brush.feather") == 20
    assert manager.get("masks.brush.size") == 50.0
    assert manager.get("masks.hit_padding") == DEFAULT_SETTINGS["masks"]["hit_padding"]


def test_get_missing_key_returns_default(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    assert manager.get("masks.unknown", "fallback") == "fallback"
    assert manager.get("white_balance.sample_radius.deeper") is None


def test_set_persists_and_notifies(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    manager = SettingsManager(path)
    manager.load()
    received = []
    manager.settingsChanged.connect(lambda key, value: received.append((key, value)))

    manager.set("white_balance.sample_radius", 8)

    assert received == [("white_balance.sample_radius", 8)]
    assert json.loads(path.read_text(encoding="utf-8"))["white_balance"]["sample_radius"] == 8


def test_invalid_value_is_rejected_and_state_kept(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()
    with pytest.raises(SettingsValidationError):
        manager.set("masks.brush.feather", 500)
    assert manager.get("masks.brush.feather") == 50.0


def test_corrupt_file_raises_load_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text("{not json", encoding="utf-8")
    with pytest.raises(SettingsLoadError):
        SettingsManager(path).load()


def test_schema_mismatch_raises_validation_error(tmp_path: Path) -> None:
    path = tmp_path / "settings.json"
    path.write_text(json.dumps({"white_balance": {"sample_radius": -1}}), encoding="utf-8")
    with pytest.raises(SettingsValidationError):
        SettingsManager(path).load()


def test_merge_with_defaults_does_not_mutate_defaults() -> None:
    merged = merge_with_defaults({"masks": {"brush": {"size": 12}}})
    assert merged["masks"]["brush"]["size"] == 12
    assert DEFAULT_SETTINGS["masks"]["brush"]["size"] == 50.0


def test_validate_settings_rejects_wrong_schema_tag() -> None:
    payload = merge_with_defaults(None)
    validate_settings(payload)
    payload["schema"] = "iDarkroom/settings@0"
    with pytest.raises(ValidationError):
        validate_settings(payload)


def test_typed_accessors_follow_stored_values(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()
    manager.set("masks.brush.size", 120)
    manager.set("masks.hit_padding", 4)

    brush = manager.brush_settings()
    assert brush.size == 120.0
    assert brush.feather == 50.0
    assert manager.hit_padding() == 4.0
    assert manager.sample_radius() == 5


def test_set_creates_missing_sections(tmp_path: Path) -> None:
    manager = SettingsManager(tmp_path / "settings.json")
    manager.load()
    manager.set("export.last_directory", tmp_path)
    assert manager.get("export.last_directory") == str(tmp_path)
