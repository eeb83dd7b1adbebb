"""Mask containers, sub-masks and their per-type parameter variants.

Every sub-mask stores its geometry in original image-pixel space.  The
parameter object is a tagged union keyed by :class:`MaskType`; constructing a
:class:`SubMask` whose parameters do not match its type is rejected so the
rest of the engine can match on the variant without runtime field checks.
"""

from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping
from dataclasses import MISSING, dataclass, field, fields, replace
from typing import Any, Union

from ..config import DEFAULT_LINEAR_RANGE
from ..errors import AdjustmentsValidationError, MaskParameterMismatchError, UnknownMaskError


class MaskType(str, enum.Enum):
    """Geometric or selection kind of a sub-mask."""

    RADIAL = "radial"
    LINEAR = "linear"
    BRUSH = "brush"
    AI_SUBJECT = "ai-subject"
    QUICK_ERASER = "quick-eraser"


class SubMaskMode(str, enum.Enum):
    """How a sub-mask combines with the rest of its container."""

    ADDITIVE = "additive"
    SUBTRACTIVE = "subtractive"


class ToolType(str, enum.Enum):
    """Tool that produced a drawn stroke."""

    BRUSH = "brush"
    ERASER = "eraser"
    AI_SELECTOR = "ai-selector"


@dataclass(frozen=True)
class DrawnLine:
    """A single brush stroke in image space."""

    brush_size: float
    points: tuple[tuple[float, float], ...]
    tool: ToolType = ToolType.BRUSH
    feather: float | None = None

    def to_mapping(self) -> dict[str, Any]:
        payload: dict[str, Any] = {
            "brushSize": float(self.brush_size),
            "points": [{"x": float(x), "y": float(y)} for x, y in self.points],
            "tool": self.tool.value,
        }
        if self.feather is not None:
            payload["feather"] = float(self.feather)
        return payload

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "DrawnLine":
        raw_points = data.get("points") or []
        points = tuple((float(p["x"]), float(p["y"])) for p in raw_points)
        feather = data.get("feather")
        return DrawnLine(
            brush_size=float(data.get("brushSize", 0.0)),
            points=points,
            tool=ToolType(data.get("tool", ToolType.BRUSH.value)),
            feather=None if feather is None else float(feather),
        )


@dataclass(frozen=True)
class BrushSettings:
    """Brush configuration supplied by the interaction layer (display units)."""

    size: float = 50.0
    feather: float = 50.0
    tool: ToolType = ToolType.BRUSH


# ---------------------------------------------------------------------------
# Parameter variants
# ---------------------------------------------------------------------------

@dataclass(frozen=True)
class RadialParams:
    center_x: float
    center_y: float
    radius_x: float
    radius_y: float
    rotation: float = 0.0


@dataclass(frozen=True)
class LinearParams:
    start_x: float
    start_y: float
    end_x: float
    end_y: float
    range: float = DEFAULT_LINEAR_RANGE


@dataclass(frozen=True)
class BrushParams:
    lines: tuple[DrawnLine, ...] = ()


@dataclass(frozen=True)
class SelectorParams:
    """Rectangle drawn for AI subject selection or quick erasing."""

    start_x: float = 0.0
    start_y: float = 0.0
    end_x: float = 0.0
    end_y: float = 0.0

    @property
    def width(self) -> float:
        return self.end_x - self.start_x

    @property
    def height(self) -> float:
        return self.end_y - self.start_y

    def has_area(self) -> bool:
        return self.end_x > self.start_x and self.end_y > self.start_y


MaskParameters = Union[RadialParams, LinearParams, BrushParams, SelectorParams]

PARAMETER_TYPES: dict[MaskType, type] = {
    MaskType.RADIAL: RadialParams,
    MaskType.LINEAR: LinearParams,
    MaskType.BRUSH: BrushParams,
    MaskType.AI_SUBJECT: SelectorParams,
    MaskType.QUICK_ERASER: SelectorParams,
}

# Persisted camelCase key for each dataclass field.
_FIELD_KEYS: dict[str, str] = {
    "center_x": "centerX",
    "center_y": "centerY",
    "radius_x": "radiusX",
    "radius_y": "radiusY",
    "rotation": "rotation",
    "start_x": "startX",
    "start_y": "startY",
    "end_x": "endX",
    "end_y": "endY",
    "range": "range",
}


def parameters_to_mapping(params: MaskParameters) -> dict[str, Any]:
    """Serialise *params* using the persisted camelCase keys."""

    if isinstance(params, BrushParams):
        return {"lines": [line.to_mapping() for line in params.lines]}
    return {_FIELD_KEYS[f.name]: float(getattr(params, f.name)) for f in fields(params)}


def parameters_from_mapping(mask_type: MaskType, data: Mapping[str, Any]) -> MaskParameters:
    """Build the parameter variant for *mask_type* from a persisted mapping."""

    cls = PARAMETER_TYPES[mask_type]
    if cls is BrushParams:
        return BrushParams(lines=tuple(DrawnLine.from_mapping(item) for item in data.get("lines") or []))
    kwargs: dict[str, float] = {}
    missing = []
    for f in fields(cls):
        key = _FIELD_KEYS[f.name]
        if key in data:
            kwargs[f.name] = float(data[key])
        elif f.default is MISSING:
            missing.append(key)
    if missing:
        raise AdjustmentsValidationError(
            f"{mask_type.value} parameters missing: {', '.join(missing)}"
        )
    return cls(**kwargs)


def merge_parameters(params: MaskParameters, partial: Mapping[str, Any]) -> MaskParameters:
    """Return *params* with the camelCase fields in *partial* replaced."""

    if isinstance(params, BrushParams):
        if "lines" not in partial:
            return params
        lines = partial["lines"]
        return BrushParams(
            lines=tuple(
                line if isinstance(line, DrawnLine) else DrawnLine.from_mapping(line)
                for line in lines
            )
        )
    updates: dict[str, float] = {}
    for f in fields(params):
        key = _FIELD_KEYS[f.name]
        if key in partial:
            updates[f.name] = float(partial[key])
    return replace(params, **updates) if updates else params


@dataclass(frozen=True)
class SubMask:
    """One editable region inside a :class:`MaskContainer`."""

    id: str
    type: MaskType
    parameters: MaskParameters
    mode: SubMaskMode = SubMaskMode.ADDITIVE
    visible: bool = True

    def __post_init__(self) -> None:
        expected = PARAMETER_TYPES[self.type]
        if not isinstance(self.parameters, expected):
            raise MaskParameterMismatchError(
                f"{self.type.value} sub-mask requires {expected.__name__}, "
                f"got {type(self.parameters).__name__}"
            )

    def merged(self, partial: Mapping[str, Any]) -> "SubMask":
        """Apply a partial-field update and return the new sub-mask.

        ``parameters`` may be a full variant instance (replaces wholesale) or a
        mapping of camelCase fields (merged into the current variant).
        """

        changes: dict[str, Any] = {}
        if "parameters" in partial:
            new_params = partial["parameters"]
            if isinstance(new_params, Mapping):
                new_params = merge_parameters(self.parameters, new_params)
            changes["parameters"] = new_params
        if "visible" in partial:
            changes["visible"] = bool(partial["visible"])
        if "mode" in partial:
            changes["mode"] = SubMaskMode(partial["mode"])
        return replace(self, **changes) if changes else self

    def to_mapping(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "type": self.type.value,
            "mode": self.mode.value,
            "visible": self.visible,
            "parameters": parameters_to_mapping(self.parameters),
        }

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "SubMask":
        mask_type = MaskType(data["type"])
        return SubMask(
            id=str(data["id"]),
            type=mask_type,
            parameters=parameters_from_mapping(mask_type, data.get("parameters") or {}),
            mode=SubMaskMode(data.get("mode", SubMaskMode.ADDITIVE.value)),
            visible=bool(data.get("visible", True)),
        )


@dataclass(frozen=True)
class MaskContainer:
    """An ordered stack of sub-masks sharing one set of local adjustments."""

    id: str
    sub_masks: tuple[SubMask, ...] = field(default_factory=tuple)
    name: str = ""
    visible: bool = True

    def find(self, sub_mask_id: str | None) -> SubMask | None:
        if sub_mask_id is None:
            return None
        for sub_mask in self.sub_masks:
            if sub_mask.id == sub_mask_id:
                return sub_mask
        return None

    def contains(self, sub_mask_id: str) -> bool:
        return self.find(sub_mask_id) is not None

    def with_sub_mask(self, sub_mask_id: str, partial: Mapping[str, Any]) -> "MaskContainer":
        """Return a copy with *sub_mask_id* merged with *partial*."""

        if not self.contains(sub_mask_id):
            raise UnknownMaskError(f"sub-mask {sub_mask_id!r} not in container {self.id!r}")
        updated = tuple(
            sub_mask.merged(partial) if sub_mask.id == sub_mask_id else sub_mask
            for sub_mask in self.sub_masks
        )
        return replace(self, sub_masks=updated)

    def to_mapping(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.name,
            "visible": self.visible,
            "subMasks": [sub_mask.to_mapping() for sub_mask in self.sub_masks],
        }

    @staticmethod
    def from_mapping(data: Mapping[str, Any]) -> "MaskContainer":
        return MaskContainer(
            id=str(data["id"]),
            sub_masks=tuple(SubMask.from_mapping(item) for item in data.get("subMasks") or []),
            name=str(data.get("name", "")),
            visible=bool(data.get("visible", True)),
        )


def find_sub_mask(
    containers: Iterable[MaskContainer], sub_mask_id: str | None
) -> tuple[MaskContainer, SubMask] | None:
    """Locate *sub_mask_id* across *containers*."""

    for container in containers:
        sub_mask = container.find(sub_mask_id)
        if sub_mask is not None:
            return container, sub_mask
    return None


__all__ = [
    "BrushParams",
    "BrushSettings",
    "DrawnLine",
    "LinearParams",
    "MaskContainer",
    "MaskParameters",
    "MaskType",
    "PARAMETER_TYPES",
    "RadialParams",
    "SelectorParams",
    "SubMask",
    "SubMaskMode",
    "ToolType",
    "find_sub_mask",
    "merge_parameters",
    "parameters_from_mapping",
    "parameters_to_mapping",
]
