"""
Drag strategies for mask editing.

This package implements the Strategy pattern for the different shape
interactions (moving, resizing, range and endpoint drags), keeping each
gesture's math separate from event routing.
"""

from .abstract import DragSession, MaskDragStrategy
from .linear_strategy import LinearEndpointStrategy, LinearMoveStrategy, LinearRangeStrategy
from .radial_strategy import RadialMoveStrategy, RadialTransformStrategy

__all__ = [
    "DragSession",
    "LinearEndpointStrategy",
    "LinearMoveStrategy",
    "LinearRangeStrategy",
    "MaskDragStrategy",
    "RadialMoveStrategy",
    "RadialTransformStrategy",
]
