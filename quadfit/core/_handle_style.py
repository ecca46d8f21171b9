"""Shared styling helpers for the quad editing handles."""

from PySide6.QtCore import Qt
from PySide6.QtGui import QColor, QCursor


# ``QCursor`` needs a running ``QGuiApplication``; the canvas builds cursors
# from these shapes once the application exists.
VERTEX_CURSOR_SHAPE = Qt.CrossCursor
MOVE_CURSOR_SHAPE = Qt.OpenHandCursor
DRAG_CURSOR_SHAPE = Qt.ClosedHandCursor


def make_cursor(shape) -> QCursor:
    return QCursor(shape)


HANDLE_RADIUS = 8.0
PICK_RADIUS = 14.0

HANDLE_BASE_COLOR = QColor("#ffffff")
HANDLE_ACTIVE_COLOR = QColor("#ffc800")
HANDLE_OUTLINE_COLOR = QColor(0, 0, 0, 200)
QUAD_OUTLINE_COLOR = QColor(255, 255, 255, 220)
