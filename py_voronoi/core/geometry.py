"""
Epsilon-tolerant planar geometry helpers for the sweepline.

Every comparison of roots, slopes or heights in the core goes through
``nearly_equal`` so that the same absolute tolerance is applied everywhere.
"""

import math
from dataclasses import dataclass
from typing import Iterable, NamedTuple, Optional, Tuple

import numpy as np

EPSILON = 1e-9

Point = Tuple[float, float]


def nearly_equal(a: float, b: float, epsilon: float = EPSILON) -> bool:
    """Absolute-tolerance float comparison (infinities compare by identity)."""
    if a == b:
        return True
    return abs(a - b) <= epsilon


def points_coincide(a: Point, b: Point, epsilon: float = EPSILON) -> bool:
    """True when both coordinates of two points are within tolerance."""
    return nearly_equal(a[0], b[0], epsilon) and nearly_equal(a[1], b[1], epsilon)


class Circle(NamedTuple):
    """Circle through three sites, used to schedule a circle event."""
    x: float
    y: float
    radius: float

    @property
    def center(self) -> Point:
        return (self.x, self.y)

    @property
    def bottom(self) -> Point:
        """Point where the sweepline (moving towards +y) last touches the circle."""
        return (self.x, self.y + self.radius)


def circle_from_points(a: Point, b: Point, c: Point) -> Optional[Circle]:
    """
    Compute the circumscribed circle of three points.

    Args:
        a, b, c: Points on the circle

    Returns:
        Circle, or None when the points are collinear
    """
    abx = a[0] - b[0]
    aby = a[1] - b[1]
    bcx = b[0] - c[0]
    bcy = b[1] - c[1]

    d = abx * bcy - bcx * aby
    if nearly_equal(d, 0.0):
        return None

    u = (a[0] * a[0] - b[0] * b[0] + a[1] * a[1] - b[1] * b[1]) / 2.0
    v = (b[0] * b[0] - c[0] * c[0] + b[1] * b[1] - c[1] * c[1]) / 2.0

    x = (u * bcy - v * aby) / d
    y = (v * abx - u * bcx) / d

    return Circle(x, y, math.hypot(a[0] - x, a[1] - y))


def are_convergent(left: Point, middle: Point, right: Point) -> bool:
    """
    Check whether the two breakpoints around the middle arc move towards each other.

    Uses the cross product of the vectors from the middle point to its
    neighbors; a negative or near-zero value means the breakpoints diverge
    or run parallel (collinear sites).
    """
    dx0 = right[0] - middle[0]
    dy0 = right[1] - middle[1]
    dx1 = left[0] - middle[0]
    dy1 = left[1] - middle[1]

    cross = dx0 * dy1 - dy0 * dx1
    if cross < 0 or nearly_equal(cross, 0.0):
        return False
    return True


def edge_direction(left: Point, right: Point) -> Point:
    """Unit direction travelled by the breakpoint between a left and a right site."""
    dx = -(right[1] - left[1])
    dy = right[0] - left[0]
    length = math.hypot(dx, dy)
    if length == 0:
        raise ValueError("Sites of an edge must be distinct")
    return (dx / length, dy / length)


@dataclass(frozen=True)
class Bounds:
    """Axis-aligned extent of a set of points."""
    min_x: float
    min_y: float
    max_x: float
    max_y: float

    @property
    def width(self) -> float:
        return self.max_x - self.min_x

    @property
    def height(self) -> float:
        return self.max_y - self.min_y

    @classmethod
    def from_points(cls, points: Iterable[Point]) -> "Bounds":
        """Bounding box of the points, or a zero box at the origin when there are none."""
        arr = np.asarray(list(points), dtype=float).reshape(-1, 2)
        if len(arr) == 0:
            return cls(0.0, 0.0, 0.0, 0.0)
        mins = arr.min(axis=0)
        maxs = arr.max(axis=0)
        return cls(float(mins[0]), float(mins[1]), float(maxs[0]), float(maxs[1]))

    def union(self, other: "Bounds") -> "Bounds":
        return Bounds(
            min(self.min_x, other.min_x),
            min(self.min_y, other.min_y),
            max(self.max_x, other.max_x),
            max(self.max_y, other.max_y),
        )

    def grow(self, amount: float) -> "Bounds":
        return Bounds(
            self.min_x - amount,
            self.min_y - amount,
            self.max_x + amount,
            self.max_y + amount,
        )
