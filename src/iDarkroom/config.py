"""Default configuration values for iDarkroom."""

from __future__ import annotations

from typing import Final

# Curve tables always carry one entry per 8-bit level.
CURVE_TABLE_SIZE: Final[int] = 256
CURVE_MAX: Final[float] = 255.0

# Denominator guard shared by the tone and white balance formulas.
EPSILON: Final[float] = 1e-4

# ---------------------------------------------------------------------------
# White balance picking
# ---------------------------------------------------------------------------

WB_SAMPLE_RADIUS: Final[int] = 5
WB_GAMMA: Final[float] = 2.2
WB_TEMPERATURE_GAIN: Final[float] = 125.0
WB_TINT_GAIN: Final[float] = 400.0
WB_SLIDER_RANGE: Final[tuple[float, float]] = (-100.0, 100.0)

# ---------------------------------------------------------------------------
# Pixel transform constants
# ---------------------------------------------------------------------------

# One pixel of channel shift per five slider units.
CHROMATIC_ABERRATION_DIVISOR: Final[float] = 5.0
SHARPEN_DIVISOR: Final[float] = 20.0
BLUR_DIVISOR: Final[float] = 20.0
TEMP_TINT_MAX_OPACITY: Final[float] = 0.5
GRAIN_OCTAVES: Final[int] = 3

WARM_COLOR: Final[tuple[int, int, int]] = (255, 160, 0)
COOL_COLOR: Final[tuple[int, int, int]] = (0, 100, 255)
MAGENTA_COLOR: Final[tuple[int, int, int]] = (255, 0, 255)
GREEN_COLOR: Final[tuple[int, int, int]] = (0, 255, 0)

DEFAULT_VIGNETTE_MIDPOINT: Final[float] = 50.0
DEFAULT_VIGNETTE_FEATHER: Final[float] = 50.0
DEFAULT_GRAIN_SIZE: Final[float] = 25.0

# ---------------------------------------------------------------------------
# Mask interaction
# ---------------------------------------------------------------------------

DEFAULT_LINEAR_RANGE: Final[float] = 50.0
# Brush width used for selector drags, in display pixels.
SELECTOR_STROKE_SIZE: Final[float] = 2.0
LINEAR_HANDLE_RADIUS: Final[float] = 8.0
LINEAR_HIT_STROKE: Final[float] = 20.0
MASK_HIT_PADDING: Final[float] = 6.0
