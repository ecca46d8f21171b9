from __future__ import annotations

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional, Union

from PySide6.QtCore import QObject, Signal

from quadfit.core._handle_style import PICK_RADIUS
from quadfit.core.geometry import (
    ZERO_QUAD,
    Point,
    Quad,
    clamp_quad,
    default_quad,
    is_unset,
    make_quad,
    point_in_quad,
    replace_vertex,
    translate_quad,
)
from quadfit.core.warp import CompositeMode, WarpConfig

logger = logging.getLogger(__name__)


class EditorState(Enum):
    IDLE = "idle"
    MOVING_QUAD = "moving_quad"
    DRAGGING_VERTEX = "dragging_vertex"


class PointerType(Enum):
    DOWN = "down"
    MOVE = "move"
    UP = "up"
    CANCEL = "cancel"


@dataclass(frozen=True)
class PointerEvent:
    type: PointerType
    x: float
    y: float
    pointer_id: int = 0

    @property
    def point(self) -> Point:
        return Point(float(self.x), float(self.y))


@dataclass(frozen=True)
class MoveWhole:
    anchor: Point
    snapshot: Quad


@dataclass(frozen=True)
class DragVertex:
    index: int


DragState = Optional[Union[MoveWhole, DragVertex]]


class QuadEditorController(QObject):
    """Owns the destination quad and turns pointer input into edits.

    States are idle, moving the whole quad, or dragging a single vertex.
    Every quad mutation emits ``quad_changed`` followed by
    ``render_requested``; the controller never draws anything itself.
    """

    quad_changed = Signal(object)
    config_changed = Signal(object)
    state_changed = Signal(object)
    render_requested = Signal()

    def __init__(
        self,
        width: float = 0,
        height: float = 0,
        default_config: Optional[WarpConfig] = None,
        pick_radius: float = PICK_RADIUS,
    ):
        super().__init__()
        self.pick_radius = float(pick_radius)
        self._default_config = default_config or WarpConfig()
        self._config = self._default_config
        self._quad: Quad = ZERO_QUAD
        self._seeded = False
        self._drag: DragState = None
        self._pointer_id: Optional[int] = None
        self._image_ready = False
        self._width = 0.0
        self._height = 0.0
        if width or height:
            self.set_surface_size(width, height)

    # ------------------------------------------------------------------
    @property
    def quad(self) -> Quad:
        return self._quad

    @property
    def config(self) -> WarpConfig:
        return self._config

    @property
    def drag_state(self) -> DragState:
        return self._drag

    @property
    def state(self) -> EditorState:
        if isinstance(self._drag, DragVertex):
            return EditorState.DRAGGING_VERTEX
        if isinstance(self._drag, MoveWhole):
            return EditorState.MOVING_QUAD
        return EditorState.IDLE

    @property
    def active_vertex(self) -> Optional[int]:
        if isinstance(self._drag, DragVertex):
            return self._drag.index
        return None

    @property
    def surface_size(self) -> tuple[float, float]:
        return self._width, self._height

    @property
    def image_ready(self) -> bool:
        return self._image_ready

    # ------------------------------------------------------------------
    def set_surface_size(self, width: float, height: float) -> None:
        """Record the surface size, seeding the quad on first non-zero size.

        A quad the user already adjusted is kept across resizes.
        """

        self._width = float(max(0, width))
        self._height = float(max(0, height))
        if self._width > 0 and self._height > 0 and not self._seeded:
            logger.debug("Seeding quad for %gx%g surface", self._width, self._height)
            self._seeded = True
            self._set_quad(default_quad(self._width, self._height))
        else:
            self.render_requested.emit()

    def set_image_ready(self, ready: bool) -> None:
        ready = bool(ready)
        if ready == self._image_ready:
            return
        self._image_ready = ready
        if not ready:
            self._set_drag(None)
        self.render_requested.emit()

    def set_quad(self, points) -> None:
        quad = make_quad(points)
        self._seeded = self._seeded or not is_unset(quad)
        self._set_quad(quad)

    # ------------------------------------------------------------------
    # Pointer input
    # ------------------------------------------------------------------
    def _has_surface(self) -> bool:
        return self._width > 0 and self._height > 0

    def hit_test_vertex(self, point: Point) -> Optional[int]:
        if not self._has_surface():
            return None
        for index, vertex in enumerate(self._quad):
            if vertex.distance_to(point) <= self.pick_radius:
                return index
        return None

    def hit_test(self, point: Point) -> EditorState:
        """Return the state a pointer-down at *point* would enter."""

        if self.hit_test_vertex(point) is not None:
            return EditorState.DRAGGING_VERTEX
        if self._has_surface() and point_in_quad(point, self._quad):
            return EditorState.MOVING_QUAD
        return EditorState.IDLE

    def pointer_down(self, point: Point, pointer_id: int = 0) -> EditorState:
        if not self._image_ready:
            logger.debug("Ignoring pointer down before the image is ready")
            return self.state

        point = Point(float(point.x), float(point.y))
        index = self.hit_test_vertex(point)
        if index is not None:
            self._pointer_id = pointer_id
            self._set_drag(DragVertex(index))
        elif self._has_surface() and point_in_quad(point, self._quad):
            self._pointer_id = pointer_id
            self._set_drag(MoveWhole(point, self._quad))
        else:
            self._set_drag(None)
        return self.state

    def pointer_move(self, point: Point, pointer_id: int = 0) -> None:
        drag = self._drag
        if drag is None or not self._image_ready:
            return
        if self._pointer_id is not None and pointer_id != self._pointer_id:
            return

        if isinstance(drag, DragVertex):
            clamped = Point(float(point.x), float(point.y)).clamped(
                self._width, self._height
            )
            self._set_quad(replace_vertex(self._quad, drag.index, clamped))
        else:
            dx = point.x - drag.anchor.x
            dy = point.y - drag.anchor.y
            moved = translate_quad(drag.snapshot, dx, dy)
            self._set_quad(clamp_quad(moved, self._width, self._height))

    def pointer_up(self, pointer_id: int = 0) -> None:
        self._set_drag(None)

    def pointer_cancel(self, pointer_id: int = 0) -> None:
        self._set_drag(None)

    def handle_event(self, event: PointerEvent) -> None:
        if event.type is PointerType.DOWN:
            self.pointer_down(event.point, event.pointer_id)
        elif event.type is PointerType.MOVE:
            self.pointer_move(event.point, event.pointer_id)
        elif event.type is PointerType.UP:
            self.pointer_up(event.pointer_id)
        elif event.type is PointerType.CANCEL:
            self.pointer_cancel(event.pointer_id)

    # ------------------------------------------------------------------
    # Configuration
    # ------------------------------------------------------------------
    def set_config(self, config: WarpConfig) -> None:
        if config == self._config:
            return
        self._config = config
        self.config_changed.emit(config)
        self.render_requested.emit()

    def set_opacity(self, opacity: float) -> None:
        self._update_config(opacity=opacity)

    def set_composite_mode(self, mode) -> None:
        self._update_config(composite_mode=CompositeMode.parse(mode))

    def set_subdivisions(self, subdivisions: int) -> None:
        self._update_config(subdivisions=subdivisions)

    def set_show_handles(self, visible: bool) -> None:
        self._update_config(show_handles=visible)

    def _update_config(self, **changes) -> None:
        values = {
            "opacity": self._config.opacity,
            "composite_mode": self._config.composite_mode,
            "subdivisions": self._config.subdivisions,
            "show_handles": self._config.show_handles,
        }
        values.update(changes)
        self.set_config(WarpConfig(**values))

    # ------------------------------------------------------------------
    def reset(self) -> None:
        """Re-seed the quad and restore the default configuration."""

        self._set_drag(None)
        self.set_config(self._default_config)
        self._seeded = self._has_surface()
        if self._seeded:
            self._set_quad(default_quad(self._width, self._height))
        else:
            self._set_quad(ZERO_QUAD)

    # ------------------------------------------------------------------
    def _set_drag(self, drag: DragState) -> None:
        previous = self.state
        self._drag = drag
        if drag is None:
            self._pointer_id = None
        current = self.state
        if current != previous or isinstance(drag, DragVertex):
            self.state_changed.emit(current)
            # Vertex highlight follows the drag state.
            self.render_requested.emit()

    def _set_quad(self, quad: Quad) -> None:
        if quad == self._quad:
            return
        self._quad = quad
        self.quad_changed.emit(quad)
        self.render_requested.emit()
