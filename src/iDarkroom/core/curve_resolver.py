"""Curve adjustment data structures and LUT generation utilities."""

from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any, List, Tuple

import numpy as np

from ..config import CURVE_MAX, CURVE_TABLE_SIZE

_LEVELS = np.arange(CURVE_TABLE_SIZE, dtype=np.float64)


@dataclass(frozen=True)
class CurvePoint:
    """A single control point on a curve, in 8-bit level units."""
    x: float
    y: float

    @staticmethod
    def from_any(value: Any) -> "CurvePoint":
        if isinstance(value, CurvePoint):
            return value
        if isinstance(value, Mapping):
            return CurvePoint(float(value["x"]), float(value["y"]))
        x, y = value
        return CurvePoint(float(x), float(y))


@dataclass(frozen=True)
class CurveChannel:
    """Control points for a single channel curve.

    An empty point list is the identity curve.
    """
    points: Tuple[CurvePoint, ...] = ()

    def to_list(self) -> List[dict[str, float]]:
        return [{"x": p.x, "y": p.y} for p in self.points]

    @staticmethod
    def from_list(points: Iterable[Any] | None) -> "CurveChannel":
        return CurveChannel(points=tuple(CurvePoint.from_any(p) for p in points or ()))

    def is_identity(self) -> bool:
        """Return True if this curve is effectively identity (no adjustment)."""
        return all(abs(p.x - p.y) < 1e-6 for p in self.points)


@dataclass(frozen=True)
class CurveParams:
    """Curve adjustment parameters for the master (luma) and colour channels."""
    luma: CurveChannel = field(default_factory=CurveChannel)
    red: CurveChannel = field(default_factory=CurveChannel)
    green: CurveChannel = field(default_factory=CurveChannel)
    blue: CurveChannel = field(default_factory=CurveChannel)

    def is_identity(self) -> bool:
        """Return True if all curves are identity (no adjustment)."""
        return (
            self.luma.is_identity() and
            self.red.is_identity() and
            self.green.is_identity() and
            self.blue.is_identity()
        )

    def to_dict(self) -> dict:
        """Serialize curve params to a dictionary for storage."""
        return {
            "luma": self.luma.to_list(),
            "red": self.red.to_list(),
            "green": self.green.to_list(),
            "blue": self.blue.to_list(),
        }

    @staticmethod
    def from_dict(data: Mapping[str, Any] | None) -> "CurveParams":
        """Deserialize curve params from a dictionary."""
        data = data or {}
        return CurveParams(
            luma=CurveChannel.from_list(data.get("luma")),
            red=CurveChannel.from_list(data.get("red")),
            green=CurveChannel.from_list(data.get("green")),
            blue=CurveChannel.from_list(data.get("blue")),
        )


def normalise_points(points: Sequence[CurvePoint]) -> List[CurvePoint]:
    """Sort *points* by x and extend them to cover ``[0, 255]``.

    Unsorted input is never rejected.  A missing start gains ``(0, 0)`` and a
    missing end gains ``(255, 255)``.
    """

    ordered = sorted(points, key=lambda p: p.x)
    if ordered[0].x > 0:
        ordered.insert(0, CurvePoint(0.0, 0.0))
    if ordered[-1].x < CURVE_MAX:
        ordered.append(CurvePoint(CURVE_MAX, CURVE_MAX))
    return ordered


def _tangents(x: np.ndarray, y: np.ndarray) -> np.ndarray:
    """Return the Hermite tangent at every control point.

    Interior tangents average the adjoining secants but flatten to zero where
    the secants disagree in sign so local extrema never overshoot.
    """

    dx = np.diff(x)
    dy = np.diff(y)
    safe_dx = np.where(dx != 0.0, dx, 1.0)
    slope = np.where(dx != 0.0, dy / safe_dx, 0.0)

    m = np.zeros_like(x)
    m[0] = slope[0]
    m[-1] = slope[-1]
    if len(x) > 2:
        left = slope[:-1]
        right = slope[1:]
        m[1:-1] = np.where(left * right <= 0.0, 0.0, (left + right) * 0.5)
    return m


def interpolate_curve(points: Sequence[Any] | None) -> np.ndarray:
    """Return a 256-entry table in ``[0, 1]`` sampled from *points*.

    *points* are ``(x, y)`` pairs (or :class:`CurvePoint` / ``{"x", "y"}``
    mappings) in ``[0, 255]``.  Monotone cubic Hermite interpolation is used
    between consecutive points.  With no points the identity ramp is returned.
    """

    if not points:
        return _LEVELS / CURVE_MAX

    ordered = normalise_points([CurvePoint.from_any(p) for p in points])
    x = np.array([p.x for p in ordered], dtype=np.float64)
    y = np.array([p.y for p in ordered], dtype=np.float64)
    m = _tangents(x, y)

    # First segment whose right end reaches the sample level.
    segment = np.searchsorted(x[1:], _LEVELS, side="left")
    segment = np.clip(segment, 0, len(x) - 2)

    x0 = x[segment]
    x1 = x[segment + 1]
    y0 = y[segment]
    y1 = y[segment + 1]
    h = x1 - x0
    safe_h = np.where(h != 0.0, h, 1.0)
    t = np.where(h != 0.0, (_LEVELS - x0) / safe_h, 0.0)
    t2 = t * t
    t3 = t2 * t

    h00 = 2.0 * t3 - 3.0 * t2 + 1.0
    h10 = t3 - 2.0 * t2 + t
    h01 = -2.0 * t3 + 3.0 * t2
    h11 = t3 - t2

    values = h00 * y0 + h10 * h * m[segment] + h01 * y1 + h11 * h * m[segment + 1]
    return np.clip(values, 0.0, CURVE_MAX) / CURVE_MAX


def remap_through(table: np.ndarray, values: np.ndarray) -> np.ndarray:
    """Look *values* (``[0, 1]``) up in *table* using nearest-level indexing."""

    index = np.clip(np.floor(values * CURVE_MAX + 0.5), 0, CURVE_MAX).astype(np.intp)
    return table[index]


def generate_curve_lut(params: CurveParams) -> np.ndarray:
    """Generate a 256x3 LUT from curve parameters.

    Each colour channel is evaluated through its own curve and then remapped
    through the luma curve, which acts as the master tone curve.

    Returns:
        numpy array of shape (256, 3) with float64 values in [0, 1] range.
        Each row contains [R, G, B] output values for the corresponding input level.
    """
    luma_table = interpolate_curve(params.luma.points)

    r_final = remap_through(luma_table, interpolate_curve(params.red.points))
    g_final = remap_through(luma_table, interpolate_curve(params.green.points))
    b_final = remap_through(luma_table, interpolate_curve(params.blue.points))

    return np.stack([r_final, g_final, b_final], axis=1)


def apply_curve_lut_to_image(
    image_array: np.ndarray,
    lut: np.ndarray,
) -> np.ndarray:
    """Apply a curve LUT to an image array.

    Args:
        image_array: numpy array of shape (H, W, 3) or (H, W, 4) with uint8 values
        lut: numpy array of shape (256, 3) with float values in [0, 1]

    Returns:
        numpy array of same shape as input with curve applied
    """
    result = image_array.copy()
    for c in range(min(3, result.shape[2])):
        lut_channel = np.round(lut[:, c] * 255.0).astype(np.uint8)
        result[:, :, c] = lut_channel[result[:, :, c]]
    return result


__all__ = [
    "CurveChannel",
    "CurveParams",
    "CurvePoint",
    "apply_curve_lut_to_image",
    "generate_curve_lut",
    "interpolate_curve",
    "normalise_points",
    "remap_through",
]
