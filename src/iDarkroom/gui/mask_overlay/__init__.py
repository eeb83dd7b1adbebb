"""
Mask overlay interaction module.

This package provides the pointer interaction logic for editing mask shapes
on top of the preview, implementing the Strategy pattern for shape drags.
"""

from .controller import CursorPreview, MaskInteractionController, ToolMode
from .hit_tester import MaskHandle, MaskHitTester
from .strategies import DragSession

__all__ = [
    "CursorPreview",
    "DragSession",
    "MaskHandle",
    "MaskHitTester",
    "MaskInteractionController",
    "ToolMode",
]
