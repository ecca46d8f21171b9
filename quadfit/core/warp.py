"""Piecewise-affine rendering of an image onto an arbitrary quad.

The source rectangle is split into an ``n x n`` grid. Each cell is mapped onto
the destination quad through bilinear interpolation of the quad corners and
drawn as two affine triangles, each clipped to its destination outline.
``subdivisions=1`` is the two-triangle fast path; larger values approximate a
projective warp more closely at ``O(n**2)`` draw calls.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, Optional, Tuple

from PySide6.QtCore import QPointF, Qt
from PySide6.QtGui import QBrush, QImage, QPainter, QPainterPath, QPen, QTransform

from quadfit.core._handle_style import (
    HANDLE_ACTIVE_COLOR,
    HANDLE_BASE_COLOR,
    HANDLE_OUTLINE_COLOR,
    HANDLE_RADIUS,
    QUAD_OUTLINE_COLOR,
)
from quadfit.core.geometry import (
    Point,
    Quad,
    affine_from_triangles,
    bilinear_point,
    quad_to_polygon,
)

logger = logging.getLogger(__name__)

FAST_PATH_SUBDIVISIONS = 1
DEFAULT_SUBDIVISIONS = 6
DEFAULT_OPACITY = 0.85

Triangle = Tuple[Point, Point, Point]


class CompositeMode(Enum):
    """Blend operators available when drawing the warped image."""

    NORMAL = "normal"
    MULTIPLY = "multiply"
    OVERLAY = "overlay"
    SOFT_LIGHT = "soft-light"

    @classmethod
    def parse(cls, value) -> "CompositeMode":
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise ValueError(f"Unknown composite mode: {value!r}") from None

    @property
    def label(self) -> str:
        return self.value.replace("-", " ").title()


def composition_mode(mode: CompositeMode) -> QPainter.CompositionMode:
    if mode is CompositeMode.NORMAL:
        return QPainter.CompositionMode_SourceOver
    if mode is CompositeMode.MULTIPLY:
        return QPainter.CompositionMode_Multiply
    if mode is CompositeMode.OVERLAY:
        return QPainter.CompositionMode_Overlay
    if mode is CompositeMode.SOFT_LIGHT:
        return QPainter.CompositionMode_SoftLight
    raise ValueError(f"Unsupported composite mode: {mode!r}")


@dataclass(frozen=True)
class WarpConfig:
    opacity: float = DEFAULT_OPACITY
    composite_mode: CompositeMode = CompositeMode.NORMAL
    subdivisions: int = DEFAULT_SUBDIVISIONS
    show_handles: bool = True

    def __post_init__(self):
        # Frozen dataclass: normalise through object.__setattr__.
        object.__setattr__(self, "opacity", max(0.0, min(1.0, float(self.opacity))))
        object.__setattr__(
            self, "composite_mode", CompositeMode.parse(self.composite_mode)
        )
        object.__setattr__(self, "subdivisions", max(1, int(self.subdivisions)))
        object.__setattr__(self, "show_handles", bool(self.show_handles))


@dataclass(frozen=True)
class WarpTriangle:
    source: Triangle
    destination: Triangle
    transform: QTransform = field(compare=False)


def warp_triangles(
    quad: Quad, width: float, height: float, subdivisions: int = DEFAULT_SUBDIVISIONS
) -> Iterator[WarpTriangle]:
    """Yield the source/destination triangle pairs covering the quad."""

    n = max(1, int(subdivisions))
    for row in range(n):
        v0 = row / n
        v1 = (row + 1) / n
        for col in range(n):
            u0 = col / n
            u1 = (col + 1) / n

            src_tl = Point(u0 * width, v0 * height)
            src_tr = Point(u1 * width, v0 * height)
            src_br = Point(u1 * width, v1 * height)
            src_bl = Point(u0 * width, v1 * height)

            dst_tl = bilinear_point(quad, u0, v0)
            dst_tr = bilinear_point(quad, u1, v0)
            dst_br = bilinear_point(quad, u1, v1)
            dst_bl = bilinear_point(quad, u0, v1)

            for src, dst in (
                ((src_tl, src_tr, src_br), (dst_tl, dst_tr, dst_br)),
                ((src_tl, src_br, src_bl), (dst_tl, dst_br, dst_bl)),
            ):
                yield WarpTriangle(src, dst, affine_from_triangles(src, dst))


def _triangle_path(triangle: Triangle) -> QPainterPath:
    path = QPainterPath()
    path.moveTo(triangle[0].to_qpointf())
    path.lineTo(triangle[1].to_qpointf())
    path.lineTo(triangle[2].to_qpointf())
    path.closeSubpath()
    return path


class QuadWarpRenderer:
    """Draws an image warped onto a quad through a ``QPainter``."""

    def __init__(self, handle_radius: float = HANDLE_RADIUS):
        self.handle_radius = handle_radius

    @staticmethod
    def _surface_is_empty(painter: QPainter) -> bool:
        device = painter.device()
        return device is None or device.width() <= 0 or device.height() <= 0

    def render(
        self,
        painter: QPainter,
        image: QImage,
        quad: Quad,
        config: WarpConfig,
        base_transform: Optional[QTransform] = None,
    ) -> int:
        """Draw *image* warped onto *quad* and return the triangle count.

        Pixels outside the quad are left untouched. *base_transform* maps
        canvas coordinates to device coordinates and is composed after every
        per-triangle transform.
        """

        if image is None or image.isNull() or image.width() <= 0 or image.height() <= 0:
            return 0
        if self._surface_is_empty(painter):
            return 0

        base = QTransform(base_transform) if base_transform is not None else QTransform()
        operator = composition_mode(config.composite_mode)
        origin = QPointF(0.0, 0.0)

        drawn = 0
        for triangle in warp_triangles(
            quad, image.width(), image.height(), config.subdivisions
        ):
            painter.save()
            painter.setTransform(base)
            painter.setOpacity(config.opacity)
            painter.setCompositionMode(operator)
            painter.setRenderHint(QPainter.SmoothPixmapTransform, True)
            painter.setClipPath(_triangle_path(triangle.destination))
            painter.setTransform(triangle.transform * base)
            painter.drawImage(origin, image)
            painter.restore()
            drawn += 1

        logger.debug(
            "Rendered %d triangles (subdivisions=%d, mode=%s)",
            drawn,
            config.subdivisions,
            config.composite_mode.value,
        )
        return drawn

    def draw_handles(
        self,
        painter: QPainter,
        quad: Quad,
        active_index: Optional[int] = None,
        base_transform: Optional[QTransform] = None,
    ) -> None:
        """Draw the quad outline and a marker on every vertex.

        The painter is reset to *base_transform* (identity by default), so
        markers keep their size whatever transform the warp left behind.
        """

        if self._surface_is_empty(painter):
            return

        painter.save()
        painter.setTransform(
            QTransform(base_transform) if base_transform is not None else QTransform()
        )
        painter.setOpacity(1.0)
        painter.setCompositionMode(QPainter.CompositionMode_SourceOver)
        painter.setRenderHint(QPainter.Antialiasing, True)

        outline_pen = QPen(QUAD_OUTLINE_COLOR)
        outline_pen.setWidthF(1.5)
        outline_pen.setCosmetic(True)
        painter.setPen(outline_pen)
        painter.setBrush(Qt.NoBrush)
        painter.drawPolygon(quad_to_polygon(quad))

        handle_pen = QPen(HANDLE_OUTLINE_COLOR)
        handle_pen.setWidthF(1.0)
        handle_pen.setCosmetic(True)
        painter.setPen(handle_pen)
        for index, point in enumerate(quad):
            color = HANDLE_ACTIVE_COLOR if index == active_index else HANDLE_BASE_COLOR
            painter.setBrush(QBrush(color))
            painter.drawEllipse(point.to_qpointf(), self.handle_radius, self.handle_radius)

        painter.restore()


def compose(
    background: QImage,
    image: QImage,
    quad: Quad,
    config: WarpConfig,
    renderer: Optional[QuadWarpRenderer] = None,
) -> QImage:
    """Return a copy of *background* with *image* warped onto *quad*."""

    result = background.convertToFormat(QImage.Format_ARGB32_Premultiplied)
    if result.isNull():
        return result
    renderer = renderer or QuadWarpRenderer()
    painter = QPainter(result)
    try:
        renderer.render(painter, image, quad, config)
    finally:
        painter.end()
    return result.convertToFormat(QImage.Format_ARGB32)
