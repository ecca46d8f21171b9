"""Quad warp rendering and the interactive editor that drives it."""

from .editor import EditorState, PointerEvent, PointerType, QuadEditorController
from .geometry import Point, Quad, default_quad, make_quad
from .warp import CompositeMode, QuadWarpRenderer, WarpConfig, compose

__all__ = [
    "CompositeMode",
    "EditorState",
    "Point",
    "PointerEvent",
    "PointerType",
    "Quad",
    "QuadEditorController",
    "QuadWarpRenderer",
    "WarpConfig",
    "compose",
    "default_quad",
    "make_quad",
]
