"""Sweepline progress and the point order used by every event queue."""

import math
from typing import Tuple

from .errors import SweeplineError
from .geometry import Point, nearly_equal


def point_key(point: Point) -> Tuple[float, float]:
    """Sort key for the sweepline order: height first, then horizontal position."""
    return (point[1], point[0])


class Sweepline:
    """
    Horizontal line moving towards +y through the sites and circle events.

    It orders points by the moment it reaches them and records how far it
    has progressed. Progress never decreases.
    """

    def __init__(self):
        self.progress = -math.inf
        self.initialized = False

    def advance(self, point: Point) -> None:
        """
        Move the sweepline to the height of the given point.

        A point lower than the current progress by no more than the shared
        epsilon leaves progress unchanged; anything lower is a fatal
        ordering violation.
        """
        y = point[1]
        if y < self.progress and not nearly_equal(y, self.progress):
            raise SweeplineError(
                f"Cannot advance backwards from {self.progress!r} to {y!r}")
        self.initialized = True
        self.progress = max(self.progress, y)

    def compare(self, a: Point, b: Point) -> int:
        """Three-way comparison in sweepline order."""
        key_a = point_key(a)
        key_b = point_key(b)
        if key_a < key_b:
            return -1
        if key_a > key_b:
            return 1
        return 0

    def __repr__(self) -> str:
        return f"Sweepline(progress={self.progress!r})"
