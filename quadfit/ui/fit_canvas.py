import logging

from PySide6.QtCore import QEvent, QRectF, QSize, Qt
from PySide6.QtGui import QColor, QImage, QMouseEvent, QPainter
from PySide6.QtWidgets import QApplication, QSizePolicy, QWidget

from quadfit.core._handle_style import (
    DRAG_CURSOR_SHAPE,
    MOVE_CURSOR_SHAPE,
    VERTEX_CURSOR_SHAPE,
    make_cursor,
)
from quadfit.core.editor import EditorState, QuadEditorController
from quadfit.core.geometry import Point
from quadfit.core.warp import QuadWarpRenderer, compose

logger = logging.getLogger(__name__)

_CANCEL_EVENTS = {
    QEvent.TouchCancel,
    QEvent.WindowDeactivate,
}


class FitCanvas(QWidget):
    """Displays the model photo with the garment warped onto the quad.

    Mouse input is translated into pointer events for the
    :class:`QuadEditorController`; the canvas repaints whenever the
    controller asks for it.
    """

    def __init__(self, controller=None, renderer=None, parent=None):
        super().__init__(parent)
        self.controller = controller or QuadEditorController()
        self.renderer = renderer or QuadWarpRenderer()
        self.model_image = QImage()
        self.garment_image = QImage()
        self.background_color = QColor(38, 38, 42)
        self._filter_installed = False

        self.setMouseTracking(True)
        self.setFocusPolicy(Qt.StrongFocus)
        self.setSizePolicy(QSizePolicy.Expanding, QSizePolicy.Expanding)

        self.controller.render_requested.connect(self.update)

    def sizeHint(self):
        return QSize(640, 720)

    # ------------------------------------------------------------------
    # Images
    # ------------------------------------------------------------------
    def set_model_image(self, image: QImage):
        self.model_image = QImage(image) if image is not None else QImage()
        self.update()

    def set_garment_image(self, image: QImage):
        self.garment_image = QImage(image) if image is not None else QImage()
        self.controller.set_image_ready(not self.garment_image.isNull())
        self.update()

    def model_target_rect(self) -> QRectF:
        """Return where the model photo is drawn, letterboxed into the widget."""

        if self.model_image.isNull() or self.width() <= 0 or self.height() <= 0:
            return QRectF()
        size = self.model_image.size().scaled(self.size(), Qt.KeepAspectRatio)
        x = (self.width() - size.width()) / 2.0
        y = (self.height() - size.height()) / 2.0
        return QRectF(x, y, size.width(), size.height())

    def composite_image(self) -> QImage:
        """Render the model photo and the warped garment without handles."""

        background = QImage(self.size(), QImage.Format_ARGB32_Premultiplied)
        if background.isNull():
            return background
        background.fill(self.background_color)
        painter = QPainter(background)
        self._draw_model(painter)
        painter.end()
        return compose(
            background,
            self.garment_image,
            self.controller.quad,
            self.controller.config,
            self.renderer,
        )

    # ------------------------------------------------------------------
    # Qt events
    # ------------------------------------------------------------------
    def resizeEvent(self, event):
        # Only the surface buffer follows the widget; an edited quad is kept.
        size = event.size()
        self.controller.set_surface_size(size.width(), size.height())
        super().resizeEvent(event)

    def paintEvent(self, event):
        painter = QPainter(self)
        painter.fillRect(self.rect(), self.background_color)
        if self.width() <= 0 or self.height() <= 0:
            painter.end()
            return
        self._draw_model(painter)
        if self.controller.image_ready and not self.garment_image.isNull():
            self.renderer.render(
                painter, self.garment_image, self.controller.quad, self.controller.config
            )
            if self.controller.config.show_handles:
                self.renderer.draw_handles(
                    painter, self.controller.quad, self.controller.active_vertex
                )
        painter.end()

    def _draw_model(self, painter):
        target = self.model_target_rect()
        if target.isEmpty():
            return
        painter.save()
        painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
        painter.drawImage(target, self.model_image)
        painter.restore()

    def mousePressEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return
        state = self.controller.pointer_down(Point.from_qpoint(event.position()))
        if state is not EditorState.IDLE:
            self._install_drag_filter()
            shape = (
                VERTEX_CURSOR_SHAPE
                if state is EditorState.DRAGGING_VERTEX
                else DRAG_CURSOR_SHAPE
            )
            self.setCursor(make_cursor(shape))

    def mouseMoveEvent(self, event: QMouseEvent):
        point = Point.from_qpoint(event.position())
        if self.controller.state is not EditorState.IDLE:
            self.controller.pointer_move(point)
            return
        self._update_hover_cursor(point)

    def mouseReleaseEvent(self, event: QMouseEvent):
        if event.button() != Qt.LeftButton:
            return
        self._end_drag(cancel=False)
        self._update_hover_cursor(Point.from_qpoint(event.position()))

    def focusOutEvent(self, event):
        if self.controller.state is not EditorState.IDLE:
            self._end_drag(cancel=True)
        super().focusOutEvent(event)

    def eventFilter(self, watched, event):
        event_type = event.type()
        if event_type == QEvent.MouseButtonRelease and watched is not self:
            if event.button() == Qt.LeftButton:
                self._end_drag(cancel=False)
        elif event_type in _CANCEL_EVENTS:
            self._end_drag(cancel=True)
        return False

    # ------------------------------------------------------------------
    def _update_hover_cursor(self, point: Point):
        target = self.controller.hit_test(point) if self.controller.image_ready else EditorState.IDLE
        if target is EditorState.DRAGGING_VERTEX:
            self.setCursor(make_cursor(VERTEX_CURSOR_SHAPE))
        elif target is EditorState.MOVING_QUAD:
            self.setCursor(make_cursor(MOVE_CURSOR_SHAPE))
        else:
            self.unsetCursor()

    def _end_drag(self, cancel: bool):
        if cancel:
            if self.controller.state is not EditorState.IDLE:
                logger.debug("Drag cancelled")
            self.controller.pointer_cancel()
        else:
            self.controller.pointer_up()
        self._remove_drag_filter()

    def _install_drag_filter(self):
        app = QApplication.instance()
        if app is None or self._filter_installed:
            return
        app.installEventFilter(self)
        self._filter_installed = True

    def _remove_drag_filter(self):
        if not self._filter_installed:
            return
        app = QApplication.instance()
        if app is not None:
            app.removeEventFilter(self)
        self._filter_installed = False
