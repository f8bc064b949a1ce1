"""
The shoreline (beach line) of Fortune's algorithm.

The shoreline is the left-to-right sequence of parabolic arcs closest to the
sweepline. Adjacent arcs meet at breakpoints, which trace the edges of the
diagram as the sweepline advances.

Arcs and breakpoints live in two arenas addressed by integer ids. Neighbor
links are ids, so splitting and merging arcs only rewrites a few fields and
nothing holds a reference cycle. Removed arcs and breakpoints stay in their
arena, flagged inactive, so ids held by events and edges remain resolvable.

Breakpoint positions are never stored; they are recomputed from the two
arcs' parabolas at the current sweep height (and cached for that height).
"""

import math
from dataclasses import dataclass, field
from typing import Iterator, List, Optional, Tuple

from .errors import DuplicateSiteError, VoronoiStructureError
from .events import CircleEvent
from .functions import Function
from .geometry import (
    Circle,
    Point,
    are_convergent,
    circle_from_points,
    nearly_equal,
    points_coincide,
)
from .site import Site
from .sweepline import Sweepline

# Debugging slack for check_invariants only. Breakpoint positions are
# recomputed from parabolas near the sweepline, where rounding grows well past
# EPSILON; geometric decisions never use this tolerance.
ORDER_TOLERANCE = 1e-6


def site_function(site: Site, sweep_y: float) -> Function:
    """Shoreline function of a site's arc; the proxy arc is its horizontal line."""
    if site.is_proxy:
        return Function.horizontal(site.y)
    return Function.from_point_and_line(site.x, site.y, sweep_y)


def compute_breakpoint(left: Site, right: Site, sweep_y: float,
                       left_function: Optional[Function] = None,
                       right_function: Optional[Function] = None) -> Optional[Point]:
    """
    Locate the breakpoint between a left arc and a right arc.

    The two parabolas usually meet twice; the breakpoint with the left arc on
    its left is the left intersection when the left site is farther from the
    sweepline, and the right intersection otherwise. When they meet once
    (sites at the same height) the breakpoint only exists if the left site
    really is on the left. A vertical arc (site on the sweepline) meets its
    neighbor at exactly one point, which is accepted as is.

    Args:
        left: Site of the left arc
        right: Site of the right arc
        sweep_y: Current sweepline height
        left_function, right_function: Precomputed arc functions, if cached

    Returns:
        Breakpoint location, or None when no valid breakpoint exists yet

    Raises:
        DuplicateSiteError: The two arcs overlap everywhere
        VoronoiStructureError: Two proxy arcs, or an inconsistent intersection
    """
    if left.is_proxy and right.is_proxy:
        raise VoronoiStructureError("A proxy arc cannot meet another proxy arc")

    if left_function is None:
        left_function = site_function(left, sweep_y)
    if right_function is None:
        right_function = site_function(right, sweep_y)

    result = left_function.intersect(right_function)
    if result.infinite:
        raise DuplicateSiteError(f"Infinite overlap between arcs of {left!r} and {right!r}")
    if not result.has_intersections:
        return None

    points = result.points
    if left_function.is_vertical or right_function.is_vertical:
        if len(points) != 1:
            raise VoronoiStructureError("Expected a single intersection with a vertical arc")
        return points[0]

    if len(points) == 1:
        if left.x < right.x:
            return points[0]
        return None

    left_delta = abs(left.y - sweep_y)
    right_delta = abs(right.y - sweep_y)
    if left_delta > right_delta:
        return points[0]
    return points[1]


def _proxy_line_circle(proxy_y: float, left: Point, right: Point) -> Optional[Circle]:
    """Circle centered where the left/right bisector crosses the proxy line."""
    mid_x = (left[0] + right[0]) * 0.5
    mid_y = (left[1] + right[1]) * 0.5

    delta_x = right[0] - left[0]
    delta_y = right[1] - left[1]
    distance = math.hypot(delta_x, delta_y)
    ortho_x = -delta_y / distance
    ortho_y = delta_x / distance

    if nearly_equal(ortho_y, 0.0):
        return None

    t = (proxy_y - mid_y) / ortho_y
    x = mid_x + ortho_x * t
    y = mid_y + ortho_y * t
    return Circle(x, y, math.hypot(x - left[0], y - left[1]))


def compute_event_circle(left: Site, middle: Site, right: Site) -> Optional[Circle]:
    """
    Circle whose bottom is the moment the middle arc collapses, if it ever does.

    Triples of real sites collapse when their breakpoints converge. Triples
    touching the proxy arc collapse on the proxy line instead.
    """
    if left.is_proxy or middle.is_proxy or right.is_proxy:
        if middle.is_proxy and not left.is_proxy and not right.is_proxy:
            # A proxy stretch between two real arcs always closes, if ordered.
            if left.x > right.x or nearly_equal(left.x, right.x):
                return None
            return _proxy_line_circle(middle.y, left.point, right.point)

        if left.is_proxy and not middle.is_proxy and not right.is_proxy:
            # The middle arc is squeezed against the proxy line only when its
            # site is lower than, and to the right of, the right site.
            if middle.y > right.y or nearly_equal(middle.y, right.y):
                return None
            if middle.x < right.x or nearly_equal(middle.x, right.x):
                return None
            return _proxy_line_circle(left.y, middle.point, right.point)

        if right.is_proxy and not left.is_proxy and not middle.is_proxy:
            if middle.y > left.y or nearly_equal(middle.y, left.y):
                return None
            if middle.x > left.x or nearly_equal(middle.x, left.x):
                return None
            return _proxy_line_circle(right.y, left.point, middle.point)

        if left.is_proxy and right.is_proxy and not middle.is_proxy:
            return None

        raise VoronoiStructureError("Two proxy arcs should never be adjacent")

    if not are_convergent(left.point, middle.point, right.point):
        return None
    return circle_from_points(left.point, middle.point, right.point)


@dataclass(eq=False)
class Arc:
    """An active shoreline segment owned by one site."""
    id: int
    site: Site
    left_breakpoint: Optional[int] = None
    right_breakpoint: Optional[int] = None
    circle_event: Optional[CircleEvent] = None
    active: bool = True
    _sweep_y: float = field(default=math.nan, repr=False)
    _function: Optional[Function] = field(default=None, repr=False)

    def parabola(self, sweep_y: float) -> Function:
        """Shoreline function of this arc at the given height (cached per height)."""
        if self._function is None or self._sweep_y != sweep_y:
            self._sweep_y = sweep_y
            self._function = site_function(self.site, sweep_y)
        return self._function


@dataclass(eq=False)
class Breakpoint:
    """Moving boundary between two adjacent arcs; owns the edge it traces."""
    id: int
    left_arc: int
    right_arc: int
    edge: Optional[int] = None
    active: bool = True
    _sweep_y: float = field(default=math.nan, repr=False)
    _location: Optional[Point] = field(default=None, repr=False)


@dataclass(frozen=True)
class InsertResult:
    """Outcome of inserting a site's arc into the shoreline."""
    first_arc: bool
    new_arc: int
    old_arc: Optional[int] = None
    left_arc: Optional[int] = None
    right_arc: Optional[int] = None
    left_breakpoint: Optional[int] = None
    right_breakpoint: Optional[int] = None
    split_point: Optional[Point] = None


@dataclass(frozen=True)
class RemoveResult:
    """Outcome of collapsing an arc at a circle event."""
    old_arc: int
    old_left_breakpoint: int
    old_right_breakpoint: int
    new_breakpoint: int
    left_arc: int
    right_arc: int


class Shoreline:
    """Ordered, mutable sequence of arcs separated by breakpoints."""

    def __init__(self):
        self._arcs: List[Arc] = []
        self._breakpoints: List[Breakpoint] = []
        self._order: List[int] = []  # active arc ids, left to right

    def arc(self, arc_id: int) -> Arc:
        return self._arcs[arc_id]

    def breakpoint(self, breakpoint_id: int) -> Breakpoint:
        return self._breakpoints[breakpoint_id]

    def arcs(self) -> Iterator[Arc]:
        """Active arcs, left to right."""
        for arc_id in self._order:
            yield self._arcs[arc_id]

    def breakpoints(self) -> List[Breakpoint]:
        """Active breakpoints, left to right."""
        return [self._breakpoints[self._arcs[arc_id].right_breakpoint]
                for arc_id in self._order[:-1]]

    def __iter__(self) -> Iterator[Arc]:
        return self.arcs()

    def __len__(self) -> int:
        return len(self._order)

    def left_site(self, breakpoint: Breakpoint) -> Site:
        return self._arcs[breakpoint.left_arc].site

    def right_site(self, breakpoint: Breakpoint) -> Site:
        return self._arcs[breakpoint.right_arc].site

    def _new_arc(self, site: Site) -> Arc:
        arc = Arc(len(self._arcs), site)
        self._arcs.append(arc)
        return arc

    def _new_breakpoint(self, left_arc: int, right_arc: int) -> Breakpoint:
        breakpoint = Breakpoint(len(self._breakpoints), left_arc, right_arc)
        self._breakpoints.append(breakpoint)
        return breakpoint

    def breakpoint_location(self, breakpoint_id: int, sweep_y: float) -> Point:
        """
        Position of a breakpoint at the given sweep height.

        Raises:
            VoronoiStructureError: The breakpoint has no valid location
        """
        breakpoint = self._breakpoints[breakpoint_id]
        if breakpoint._location is None or breakpoint._sweep_y != sweep_y:
            left = self._arcs[breakpoint.left_arc]
            right = self._arcs[breakpoint.right_arc]
            location = compute_breakpoint(
                left.site, right.site, sweep_y,
                left.parabola(sweep_y), right.parabola(sweep_y))
            if location is None:
                raise VoronoiStructureError(
                    f"Breakpoint between {left.site!r} and {right.site!r} does not exist "
                    f"at sweep height {sweep_y!r}")
            breakpoint._sweep_y = sweep_y
            breakpoint._location = location
        return breakpoint._location

    def _locate(self, x: float, sweep_y: float) -> int:
        """Index in the arc order of the arc covering horizontal position x."""
        lo, hi = 0, len(self._order) - 1
        while lo < hi:
            mid = (lo + hi) // 2
            breakpoint_id = self._arcs[self._order[mid]].right_breakpoint
            if breakpoint_id is None:
                raise VoronoiStructureError("Inner arc is missing its right breakpoint")
            if x <= self.breakpoint_location(breakpoint_id, sweep_y)[0]:
                hi = mid
            else:
                lo = mid + 1
        return lo

    def _check_duplicate(self, site: Site, index: int) -> None:
        for neighbor in range(max(index - 1, 0), min(index + 2, len(self._order))):
            other = self._arcs[self._order[neighbor]].site
            if not other.is_proxy and points_coincide(site.point, other.point):
                raise DuplicateSiteError(f"{site!r} coincides with {other!r}")

    def insert_arc(self, site: Site, sweepline: Sweepline) -> InsertResult:
        """
        Insert the arc of a site the sweepline just reached.

        The arc currently above the site is split into a left and a right
        copy with the new arc between them, joined by two new breakpoints.

        Raises:
            DuplicateSiteError: The site coincides with a neighboring arc's site
            VoronoiStructureError: The shoreline is corrupt
        """
        if not self._order:
            arc = self._new_arc(site)
            self._order.append(arc.id)
            return InsertResult(first_arc=True, new_arc=arc.id)

        sweep_y = sweepline.progress
        index = self._locate(site.x, sweep_y)
        self._check_duplicate(site, index)

        old_arc = self._arcs[self._order[index]]
        old_function = old_arc.parabola(sweep_y)
        if old_function.is_vertical:
            raise VoronoiStructureError(f"{site!r} landed on the zero-width arc of {old_arc.site!r}")
        split_point = (site.x, old_function.apply(site.x))

        left_arc = self._new_arc(old_arc.site)
        new_arc = self._new_arc(site)
        right_arc = self._new_arc(old_arc.site)

        left_breakpoint = self._new_breakpoint(left_arc.id, new_arc.id)
        right_breakpoint = self._new_breakpoint(new_arc.id, right_arc.id)

        far_left = old_arc.left_breakpoint
        far_right = old_arc.right_breakpoint
        if far_left is not None:
            self._breakpoints[far_left].right_arc = left_arc.id
        if far_right is not None:
            self._breakpoints[far_right].left_arc = right_arc.id

        left_arc.left_breakpoint = far_left
        left_arc.right_breakpoint = left_breakpoint.id
        new_arc.left_breakpoint = left_breakpoint.id
        new_arc.right_breakpoint = right_breakpoint.id
        right_arc.left_breakpoint = right_breakpoint.id
        right_arc.right_breakpoint = far_right

        old_arc.active = False
        self._order[index:index + 1] = [left_arc.id, new_arc.id, right_arc.id]

        return InsertResult(
            first_arc=False,
            new_arc=new_arc.id,
            old_arc=old_arc.id,
            left_arc=left_arc.id,
            right_arc=right_arc.id,
            left_breakpoint=left_breakpoint.id,
            right_breakpoint=right_breakpoint.id,
            split_point=split_point,
        )

    def remove_arc(self, arc_id: int) -> RemoveResult:
        """
        Collapse an arc whose circle event fired.

        Its two breakpoints are replaced by one new breakpoint between the
        former left and right neighbors.

        Raises:
            VoronoiStructureError: The arc is not on the shoreline, has no
                valid circle event, or lacks a neighbor
        """
        arc = self._arcs[arc_id]
        if not arc.active:
            raise VoronoiStructureError(f"Arc {arc_id} is not on the shoreline")
        if arc.circle_event is None or not arc.circle_event.valid:
            raise VoronoiStructureError(f"Arc {arc_id} has no valid circle event")
        if arc.left_breakpoint is None or arc.right_breakpoint is None:
            raise VoronoiStructureError(f"Arc {arc_id} cannot collapse without both breakpoints")

        old_left = self._breakpoints[arc.left_breakpoint]
        old_right = self._breakpoints[arc.right_breakpoint]
        left_arc = self._arcs[old_left.left_arc]
        right_arc = self._arcs[old_right.right_arc]

        new_breakpoint = self._new_breakpoint(left_arc.id, right_arc.id)
        left_arc.right_breakpoint = new_breakpoint.id
        right_arc.left_breakpoint = new_breakpoint.id

        try:
            index = self._order.index(arc_id)
        except ValueError:
            raise VoronoiStructureError(f"Arc {arc_id} is active but missing from the order")
        del self._order[index]

        arc.active = False
        old_left.active = False
        old_right.active = False

        return RemoveResult(
            old_arc=arc_id,
            old_left_breakpoint=old_left.id,
            old_right_breakpoint=old_right.id,
            new_breakpoint=new_breakpoint.id,
            left_arc=left_arc.id,
            right_arc=right_arc.id,
        )

    def event_circle(self, arc_id: int) -> Optional[Tuple[Circle, Tuple[int, int, int]]]:
        """Circle of the arc's neighborhood and the (left, middle, right) site ids, if any."""
        arc = self._arcs[arc_id]
        if arc.left_breakpoint is None or arc.right_breakpoint is None:
            return None

        left = self.left_site(self._breakpoints[arc.left_breakpoint])
        right = self.right_site(self._breakpoints[arc.right_breakpoint])
        circle = compute_event_circle(left, arc.site, right)
        if circle is None:
            return None
        return circle, (left.id, arc.site.id, right.id)

    def check_invariants(self, sweepline: Sweepline) -> None:
        """
        Verify neighbor links and left-to-right breakpoint order.

        Breakpoints may sit left of their predecessor by ORDER_TOLERANCE,
        relative to their magnitude, before this counts as an inversion.

        Raises:
            VoronoiStructureError: On the first inconsistency found
        """
        sweep_y = sweepline.progress
        last = len(self._order) - 1
        previous_x = -math.inf
        for index, arc_id in enumerate(self._order):
            arc = self._arcs[arc_id]
            if not arc.active:
                raise VoronoiStructureError(f"Inactive arc {arc_id} in shoreline order")
            if (arc.left_breakpoint is None) != (index == 0):
                raise VoronoiStructureError(f"Arc {arc_id} has a wrong left breakpoint")
            if (arc.right_breakpoint is None) != (index == last):
                raise VoronoiStructureError(f"Arc {arc_id} has a wrong right breakpoint")
            if arc.circle_event is not None and arc.circle_event.arc != arc_id:
                raise VoronoiStructureError(f"Arc {arc_id} holds another arc's circle event")
            if index == last:
                break

            next_arc = self._arcs[self._order[index + 1]]
            breakpoint = self._breakpoints[arc.right_breakpoint]
            if (next_arc.left_breakpoint != breakpoint.id
                    or breakpoint.left_arc != arc_id
                    or breakpoint.right_arc != next_arc.id):
                raise VoronoiStructureError(f"Broken links around breakpoint {breakpoint.id}")
            if arc.site.is_proxy and next_arc.site.is_proxy:
                raise VoronoiStructureError("Two proxy arcs are adjacent")

            if sweepline.initialized:
                x = self.breakpoint_location(breakpoint.id, sweep_y)[0]
                if x < previous_x - ORDER_TOLERANCE * max(1.0, abs(x)):
                    raise VoronoiStructureError(
                        f"Breakpoint {breakpoint.id} at x={x!r} is left of its predecessor")
                previous_x = max(previous_x, x)

    def __repr__(self) -> str:
        parts = []
        for arc in self.arcs():
            parts.append("P" if arc.site.is_proxy else str(arc.site.id))
        return "Shoreline[" + " | ".join(parts) + "]"
