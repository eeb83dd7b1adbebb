"""Persistent engine settings with schema validation and change signals."""

from __future__ import annotations

import os
import sys
from copy import deepcopy
from pathlib import Path
from typing import Any

from jsonschema.exceptions import ValidationError
from PySide6.QtCore import QObject, Signal

from ..config import MASK_HIT_PADDING, WB_SAMPLE_RADIUS
from ..domain.masks import BrushSettings
from ..errors import JsonDocumentError, SettingsLoadError, SettingsValidationError
from ..utils.jsonio import read_json, write_json
from ..utils.logging import get_logger
from .schema import DEFAULT_SETTINGS, merge_with_defaults

logger = get_logger(__name__)

_APP_DIR = "iDarkroom"
_FILE_NAME = "settings.json"


def _config_root() -> Path:
    if os.name == "nt":
        appdata = os.environ.get("APPDATA")
        return Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    if sys.platform == "darwin":
        return Path.home() / "Library" / "Application Support"
    xdg = os.environ.get("XDG_CONFIG_HOME")
    return Path(xdg) if xdg else Path.home() / ".config"


def default_settings_path() -> Path:
    """Return the per-user settings file location for this platform."""

    return _config_root() / _APP_DIR / _FILE_NAME


class SettingsManager(QObject):
    """Own the engine settings document.

    Keys are addressed with dotted paths such as ``"masks.brush.size"``.
    Every write is validated against the settings schema before it replaces
    the in-memory document, so a rejected value leaves the previous state
    untouched.
    """

    settingsChanged = Signal(str, object)
    """Emitted with the dotted key and its new value after a successful write."""

    def __init__(self, path: Path | None = None, parent: QObject | None = None) -> None:
        super().__init__(parent)
        self._path = path
        self._data: dict[str, Any] = deepcopy(DEFAULT_SETTINGS)

    def path(self) -> Path:
        if self._path is None:
            self._path = default_settings_path()
        return self._path

    # ------------------------------------------------------------------
    # Persistence
    # ------------------------------------------------------------------
    def load(self) -> None:
        """Read the settings file, fill in defaults and write the result back."""

        path = self.path()
        payload: dict[str, Any] | None = None
        if path.exists():
            try:
                payload = read_json(path)
            except JsonDocumentError as exc:
                raise SettingsLoadError(str(exc)) from exc
        self._data = self._validated(payload)
        logger.debug("Loaded settings from %s", path)
        self._save()

    def get(self, key: str, default: Any | None = None) -> Any:
        node: Any = self._data
        for part in key.split("."):
            if not isinstance(node, dict) or part not in node:
                return default
            node = node[part]
        return node

    def set(self, key: str, value: Any) -> None:
        """Store *value* under the dotted *key* and persist the document."""

        if isinstance(value, Path):
            value = str(value)
        *parents, leaf = key.split(".")
        candidate = deepcopy(self._data)
        node = candidate
        for part in parents:
            child = node.get(part)
            if not isinstance(child, dict):
                child = node[part] = {}
            node = child
        node[leaf] = value

        self._data = self._validated(candidate)
        self._save()
        self.settingsChanged.emit(key, value)

    # ------------------------------------------------------------------
    # Typed accessors
    # ------------------------------------------------------------------
    def sample_radius(self) -> int:
        return int(self.get("white_balance.sample_radius", WB_SAMPLE_RADIUS))

    def hit_padding(self) -> float:
        return float(self.get("masks.hit_padding", MASK_HIT_PADDING))

    def brush_settings(self) -> BrushSettings:
        """Return the stored brush size and feather as :class:`BrushSettings`."""

        defaults = BrushSettings()
        return BrushSettings(
            size=float(self.get("masks.brush.size", defaults.size)),
            feather=float(self.get("masks.brush.feather", defaults.feather)),
        )

    # ------------------------------------------------------------------
    # Internal utilities
    # ------------------------------------------------------------------
    @staticmethod
    def _validated(payload: dict[str, Any] | None) -> dict[str, Any]:
        try:
            return merge_with_defaults(payload)
        except ValidationError as exc:
            raise SettingsValidationError(exc.message) from exc

    def _save(self) -> None:
        path = self.path()
        path.parent.mkdir(parents=True, exist_ok=True)
        write_json(path, self._data)


__all__ = ["SettingsManager", "default_settings_path"]
