"""
Parabola model for the shoreline.

A site's arc at a fixed sweep height is the set of points equidistant from
the site and the sweepline, expressed as ``y = f(x)``. Depending on how far
the site is from the sweepline that function degenerates, so it is modelled
as a small tagged variant instead of a class hierarchy:

- QUADRATIC: ``a*x^2 + b*x + c`` (site strictly away from the sweepline)
- LINEAR: ``b*x + c`` (difference of two parabolas with equal curvature)
- HORIZONTAL: ``c`` (the proxy site, and the zero baseline used for root finding)
- VERTICAL: ``x = x0`` (site lying exactly on the sweepline, zero-width arc)

Intersections between two functions are computed by subtracting one from the
other and finding the zeros of the difference.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

from .errors import VoronoiStructureError
from .geometry import Point, nearly_equal


class FunctionKind(Enum):
    """Degenerate forms a shoreline function can take."""
    QUADRATIC = "quadratic"
    LINEAR = "linear"
    HORIZONTAL = "horizontal"
    VERTICAL = "vertical"


@dataclass(frozen=True)
class Function:
    """A ``y = f(x)`` function (or a vertical line) with per-kind coefficients."""
    kind: FunctionKind
    a: float = 0.0
    b: float = 0.0
    c: float = 0.0
    x0: float = 0.0  # VERTICAL only

    @classmethod
    def from_coefficients(cls, a: float, b: float, c: float) -> "Function":
        """Build the most specific polynomial kind for the given coefficients."""
        if nearly_equal(a, 0.0):
            if nearly_equal(b, 0.0):
                return cls.horizontal(c)
            return cls(FunctionKind.LINEAR, 0.0, b, c)
        return cls(FunctionKind.QUADRATIC, a, b, c)

    @classmethod
    def horizontal(cls, y: float) -> "Function":
        return cls(FunctionKind.HORIZONTAL, 0.0, 0.0, y)

    @classmethod
    def vertical(cls, x: float) -> "Function":
        return cls(FunctionKind.VERTICAL, x0=x)

    @classmethod
    def from_point_and_line(cls, point_x: float, point_y: float, line_y: float) -> "Function":
        """
        Parabola of points equidistant from a site and a horizontal sweepline.

        Args:
            point_x, point_y: Site coordinates
            line_y: Sweepline height

        Returns:
            Quadratic function in general position, or a vertical line when
            the site sits on the sweepline
        """
        delta_y = point_y - line_y
        if nearly_equal(delta_y, 0.0):
            return cls.vertical(point_x)

        reciprocal = 1.0 / delta_y
        a = 0.5 * reciprocal
        b = -point_x * reciprocal
        c = 0.5 * (point_x * point_x + point_y * point_y - line_y * line_y) * reciprocal
        return cls.from_coefficients(a, b, c)

    @property
    def is_vertical(self) -> bool:
        return self.kind is FunctionKind.VERTICAL

    def apply(self, x: float) -> float:
        """Evaluate at x. A vertical line has no single value and returns NaN."""
        if self.kind is FunctionKind.VERTICAL:
            return math.nan
        return self.a * x * x + self.b * x + self.c

    def zeros(self) -> "IntersectionResult":
        """Real roots of the function, as an intersection with the zero baseline."""
        if self.kind is FunctionKind.VERTICAL:
            return IntersectionResult.of_zeros(self, (self.x0,))

        if self.kind is FunctionKind.HORIZONTAL:
            if nearly_equal(self.c, 0.0):
                return IntersectionResult(self, ZERO_LINE, infinite=True)
            return IntersectionResult(self, ZERO_LINE)

        if self.kind is FunctionKind.LINEAR:
            return IntersectionResult.of_zeros(self, (-self.c / self.b,))

        a, b, c = self.a, self.b, self.c
        discriminant = b * b - 4.0 * a * c
        if nearly_equal(discriminant, 0.0):
            return IntersectionResult.of_zeros(self, (-b / (2.0 * a),))
        if discriminant < 0:
            return IntersectionResult(self, ZERO_LINE)

        root = math.sqrt(discriminant)
        x1 = (-b - root) / (2.0 * a)
        x2 = (-b + root) / (2.0 * a)
        return IntersectionResult.of_zeros(self, (min(x1, x2), max(x1, x2)))

    def intersect(self, other: "Function") -> "IntersectionResult":
        """
        Intersect two functions.

        Pairs are handled explicitly:
        - vertical / vertical: infinite overlap when the lines coincide, else empty
        - vertical / polynomial: the single point on the vertical line
        - polynomial / polynomial: zeros of the difference, evaluated on ``self``
        """
        if self.is_vertical and other.is_vertical:
            if nearly_equal(self.x0, other.x0):
                return IntersectionResult(self, other, infinite=True)
            return IntersectionResult(self, other)

        if self.is_vertical:
            return IntersectionResult(self, other, ((self.x0, other.apply(self.x0)),))

        if other.is_vertical:
            return IntersectionResult(self, other, ((other.x0, self.apply(other.x0)),))

        # Keep the leading coefficient of the difference positive so that
        # its zeros come back in ascending order.
        if self.a > other.a:
            difference = Function.from_coefficients(
                self.a - other.a, self.b - other.b, self.c - other.c)
        else:
            difference = Function.from_coefficients(
                other.a - self.a, other.b - self.b, other.c - self.c)

        return difference.zeros().to_intersections(self, other)


@dataclass(frozen=True)
class IntersectionResult:
    """Outcome of intersecting two functions: discrete points or infinite overlap."""
    function_a: Function
    function_b: Function
    intersections: Tuple[Point, ...] = ()
    infinite: bool = False

    @classmethod
    def of_zeros(cls, function: Function, xs: Tuple[float, ...]) -> "IntersectionResult":
        return cls(function, ZERO_LINE, tuple((x, 0.0) for x in xs))

    @property
    def has_intersections(self) -> bool:
        return self.infinite or len(self.intersections) > 0

    @property
    def points(self) -> Tuple[Point, ...]:
        if self.infinite:
            raise VoronoiStructureError("Infinite overlap has no discrete intersection points")
        return self.intersections

    def to_intersections(self, function_a: Function, function_b: Function) -> "IntersectionResult":
        """Turn zeros of a difference function into points on ``function_a``."""
        if self.function_b != ZERO_LINE:
            raise VoronoiStructureError("Result does not represent zeros")
        if self.infinite:
            return IntersectionResult(function_a, function_b, infinite=True)
        points = tuple((x, function_a.apply(x)) for x, _ in self.intersections)
        return IntersectionResult(function_a, function_b, points)


ZERO_LINE = Function.horizontal(0.0)
