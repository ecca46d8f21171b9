"""Value types and pure geometry used by the quad warp and its editor."""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Iterable, Tuple

from PySide6.QtCore import QPointF
from PySide6.QtGui import QPolygonF, QTransform


DEGENERATE_EPSILON = 1e-9

# Default seed box, as fractions of the surface size.
DEFAULT_BOX_WIDTH = 0.42
DEFAULT_BOX_HEIGHT = 0.48
DEFAULT_CENTER_X = 0.50
DEFAULT_CENTER_Y = 0.45


@dataclass(frozen=True)
class Point:
    x: float
    y: float

    def translated(self, dx: float, dy: float) -> "Point":
        return Point(self.x + dx, self.y + dy)

    def clamped(self, width: float, height: float) -> "Point":
        """Return the point clamped per axis to ``[0, width] x [0, height]``."""

        return Point(
            min(max(self.x, 0.0), float(max(0.0, width))),
            min(max(self.y, 0.0), float(max(0.0, height))),
        )

    def distance_to(self, other: "Point") -> float:
        return math.hypot(self.x - other.x, self.y - other.y)

    def to_qpointf(self) -> QPointF:
        return QPointF(self.x, self.y)

    @staticmethod
    def from_qpoint(point) -> "Point":
        return Point(float(point.x()), float(point.y()))


Quad = Tuple[Point, Point, Point, Point]

TOP_LEFT, TOP_RIGHT, BOTTOM_RIGHT, BOTTOM_LEFT = range(4)

ZERO_QUAD: Quad = (Point(0.0, 0.0),) * 4


def make_quad(points: Iterable) -> Quad:
    """Build a :data:`Quad` from four points.

    Accepts :class:`Point` instances, ``QPointF``-like objects or ``(x, y)``
    pairs and always stores fresh :class:`Point` values.
    """

    converted = []
    for point in points:
        if isinstance(point, Point):
            converted.append(Point(point.x, point.y))
        elif hasattr(point, "x") and callable(point.x):
            converted.append(Point.from_qpoint(point))
        else:
            x, y = point
            converted.append(Point(float(x), float(y)))
    if len(converted) != 4:
        raise ValueError(f"A quad needs exactly 4 points, got {len(converted)}")
    return tuple(converted)


def is_unset(quad: Quad) -> bool:
    return all(point.x == 0.0 and point.y == 0.0 for point in quad)


def default_quad(width: float, height: float) -> Quad:
    """Return the centered seed box for a surface of the given size."""

    box_w = width * DEFAULT_BOX_WIDTH
    box_h = height * DEFAULT_BOX_HEIGHT
    cx = width * DEFAULT_CENTER_X
    cy = height * DEFAULT_CENTER_Y
    left = cx - box_w / 2.0
    right = cx + box_w / 2.0
    top = cy - box_h / 2.0
    bottom = cy + box_h / 2.0
    return (
        Point(left, top),
        Point(right, top),
        Point(right, bottom),
        Point(left, bottom),
    )


def replace_vertex(quad: Quad, index: int, point: Point) -> Quad:
    points = list(quad)
    points[index] = Point(point.x, point.y)
    return tuple(points)


def translate_quad(quad: Quad, dx: float, dy: float) -> Quad:
    return tuple(point.translated(dx, dy) for point in quad)


def clamp_quad(quad: Quad, width: float, height: float) -> Quad:
    # Each corner is clamped on its own; the shape may distort at the edges.
    return tuple(point.clamped(width, height) for point in quad)


def lerp(a: Point, b: Point, t: float) -> Point:
    return Point(a.x + (b.x - a.x) * t, a.y + (b.y - a.y) * t)


def bilinear_point(quad: Quad, u: float, v: float) -> Point:
    """Map ``(u, v)`` in the unit square onto the quad.

    ``u`` runs along the top and bottom edges, ``v`` from the top edge down
    to the bottom edge, so ``(0, 0)`` is ``quad[0]`` and ``(1, 1)`` is
    ``quad[2]``.
    """

    top = lerp(quad[TOP_LEFT], quad[TOP_RIGHT], u)
    bottom = lerp(quad[BOTTOM_LEFT], quad[BOTTOM_RIGHT], u)
    return lerp(top, bottom, v)


def affine_from_triangles(src, dst) -> QTransform:
    """Solve the affine transform mapping triangle *src* onto *dst*.

    A degenerate source triangle yields the identity transform.
    """

    p0, p1, p2 = src
    q0, q1, q2 = dst

    den = p0.x * (p1.y - p2.y) + p1.x * (p2.y - p0.y) + p2.x * (p0.y - p1.y)
    if abs(den) < DEGENERATE_EPSILON:
        return QTransform()

    # Cofactors of the source matrix, shared by both output rows.
    ky0, ky1, ky2 = p1.y - p2.y, p2.y - p0.y, p0.y - p1.y
    kx0, kx1, kx2 = p2.x - p1.x, p0.x - p2.x, p1.x - p0.x
    kc0 = p1.x * p2.y - p2.x * p1.y
    kc1 = p2.x * p0.y - p0.x * p2.y
    kc2 = p0.x * p1.y - p1.x * p0.y

    m11 = (q0.x * ky0 + q1.x * ky1 + q2.x * ky2) / den
    m21 = (q0.x * kx0 + q1.x * kx1 + q2.x * kx2) / den
    dx = (q0.x * kc0 + q1.x * kc1 + q2.x * kc2) / den

    m12 = (q0.y * ky0 + q1.y * ky1 + q2.y * ky2) / den
    m22 = (q0.y * kx0 + q1.y * kx1 + q2.y * kx2) / den
    dy = (q0.y * kc0 + q1.y * kc1 + q2.y * kc2) / den

    return QTransform(m11, m12, m21, m22, dx, dy)


def map_point(transform: QTransform, point: Point) -> Point:
    return Point.from_qpoint(transform.map(point.to_qpointf()))


def point_in_quad(point: Point, quad: Quad) -> bool:
    """Even-odd ray casting test against the quad polygon."""

    inside = False
    j = len(quad) - 1
    for i in range(len(quad)):
        xi, yi = quad[i].x, quad[i].y
        xj, yj = quad[j].x, quad[j].y
        # The straddle check excludes horizontal edges, so yj - yi != 0 below.
        if (yi > point.y) != (yj > point.y):
            crossing = (xj - xi) * (point.y - yi) / (yj - yi) + xi
            if point.x < crossing:
                inside = not inside
        j = i
    return inside


def quad_to_polygon(quad: Quad) -> QPolygonF:
    return QPolygonF([point.to_qpointf() for point in quad])
