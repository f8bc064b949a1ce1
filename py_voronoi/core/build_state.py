"""
Incremental, interruptible construction of a Voronoi diagram.

This module drives Fortune's sweepline over a fixed set of sites:
- Initialization (event schedule, bounds and proxy site)
- Event processing, one event per unit of work
- Finishing (assembly of the output diagram)

The work is sliced so that a driver such as a render loop can call
``do_work`` or ``do_timed_work`` repeatedly and inspect the half-built
shoreline between calls.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Callable, List, Optional, Tuple

import numpy as np
import structlog

from ..config import settings as default_settings
from .diagram import PartialEdge, VoronoiDiagram, assemble_diagram
from .errors import VoronoiStructureError
from .events import CircleEvent, Event, EventSchedule, EventType, SiteEvent
from .geometry import Bounds, Point, nearly_equal, points_coincide
from .shoreline import Shoreline
from .site import Site
from .sweepline import Sweepline, point_key

logger = structlog.get_logger()


@dataclass
class VoronoiOptions:
    """Sweepline build options."""
    min_site_distance: float = 1.0  # Minimum distance between accepted sites
    sanitize_input: bool = True  # Reject sites closer than min_site_distance
    bounds_padding: float = 10.0  # Padding added around the site extent
    proxy_depth_factor: float = 2.0  # Proxy depth below the sites, in bounds heights
    work_budget_ms: int = 16  # Default slice length for do_timed_work

    @classmethod
    def from_settings(cls, config=None) -> "VoronoiOptions":
        """Options taken from the environment-driven settings."""
        config = config or default_settings
        return cls(
            min_site_distance=config.min_site_distance,
            sanitize_input=config.sanitize_input,
            bounds_padding=config.bounds_padding,
            proxy_depth_factor=config.proxy_depth_factor,
            work_budget_ms=config.work_budget_ms,
        )


class BuildProgressStep(Enum):
    """Phases of a build, in order."""
    INITIALIZATION = "initialization"
    PROCESSING_EVENTS = "processing_events"
    FINISHING = "finishing"
    FINISHED = "finished"


class VoronoiBuildState:
    """Resumable state of one sweepline run."""

    def __init__(self, points, options: Optional[VoronoiOptions] = None):
        """
        Prepare a build over the given sites.

        Args:
            points: Array-like of shape (N, 2); row i becomes site i.
                Sites are expected to be distinct.
            options: Build options, defaults come from the settings
        """
        self.options = options or VoronoiOptions.from_settings()

        coords = np.asarray(points, dtype=float)
        if coords.size == 0:
            coords = coords.reshape(0, 2)
        if coords.ndim != 2 or coords.shape[1] != 2:
            raise ValueError(f"Expected points of shape (N, 2), got {coords.shape}")
        if not np.all(np.isfinite(coords)):
            raise ValueError("Points must have finite coordinates")

        self.sites: List[Site] = [Site(i, float(x), float(y)) for i, (x, y) in enumerate(coords)]
        self.progress_step = BuildProgressStep.INITIALIZATION

        self.sweepline = Sweepline()
        self.shoreline = Shoreline()
        self.schedule = EventSchedule()

        self.bounds: Optional[Bounds] = None
        self.proxy_site: Optional[Site] = None

        # Output under construction
        self.partial_edges: List[PartialEdge] = []
        self.vertices: List[Point] = []
        self.completed_events: List[Event] = []

        # Counters
        self.site_events_processed = 0
        self.vertex_events_processed = 0  # circle events of three real sites
        self.vertex_events_merged = 0  # vertex events landing on an earlier vertex
        self.boundary_events_processed = 0  # circle events touching the proxy
        self.invalid_events_skipped = 0

        self._vertex_height: Optional[float] = None
        self._vertices_at_height: List[int] = []
        self._diagram: Optional[VoronoiDiagram] = None

    @property
    def is_finished(self) -> bool:
        return self.progress_step is BuildProgressStep.FINISHED

    @property
    def pending_events(self) -> List[Event]:
        """Scheduled events in processing order (invalidated circle events included)."""
        return list(self.schedule)

    def do_work(self) -> None:
        """Perform the smallest unit of progress: one phase transition or one event."""
        if self.progress_step is BuildProgressStep.INITIALIZATION:
            self._initialize()
        elif self.progress_step is BuildProgressStep.PROCESSING_EVENTS:
            self._process_event()
        elif self.progress_step is BuildProgressStep.FINISHING:
            self._finish()

    def step(self) -> None:
        self.do_work()

    def do_timed_work(self, budget_ms: Optional[float] = None,
                      clock: Optional[Callable[[], int]] = None) -> int:
        """
        Keep doing units of work until finished or the time budget runs out.

        At least one unit is performed per call, even with a zero budget.
        The clock is only read between units, never in the middle of one.

        Args:
            budget_ms: Suggested maximum time in milliseconds, defaults to
                the configured work_budget_ms
            clock: Monotonic clock in nanoseconds, defaults to time.monotonic_ns

        Returns:
            Number of units of work performed
        """
        if budget_ms is None:
            budget_ms = self.options.work_budget_ms
        if budget_ms < 0:
            raise ValueError(f"Time budget must not be negative, got {budget_ms}")
        if self.is_finished:
            return 0

        clock = clock or time.monotonic_ns
        deadline = clock() + int(budget_ms * 1_000_000)

        units = 0
        while True:
            self.do_work()
            units += 1
            if self.is_finished or clock() >= deadline:
                break
        return units

    def diagram(self) -> VoronoiDiagram:
        """
        Diagram of the edges traced so far.

        Once the build is finished this is the final diagram; before that it
        is a snapshot useful for visualization only.
        """
        if self._diagram is not None:
            return self._diagram
        if self.bounds is None:
            raise VoronoiStructureError("Build state has not been initialized yet")
        return assemble_diagram(self.sites, self.partial_edges, self.vertices,
                                self.bounds, self.proxy_site.y)

    def _initialize(self):
        ordered = sorted(self.sites, key=lambda site: point_key(site.point))
        self.schedule = EventSchedule(SiteEvent(site) for site in ordered)

        self.bounds = Bounds.from_points(site.point for site in self.sites).grow(
            self.options.bounds_padding)
        proxy_x = (self.bounds.min_x + self.bounds.max_x) * 0.5
        proxy_y = self.bounds.min_y - self.bounds.height * self.options.proxy_depth_factor
        self.proxy_site = Site.proxy(proxy_x, proxy_y)
        self.shoreline.insert_arc(self.proxy_site, self.sweepline)

        self.progress_step = BuildProgressStep.PROCESSING_EVENTS
        logger.info("Sweepline build initialized",
                    sites=len(self.sites),
                    proxy=self.proxy_site.point,
                    bounds=self.bounds)

    def _process_event(self):
        event = self.schedule.poll()
        if event is None:
            self.progress_step = BuildProgressStep.FINISHING
            return

        self.completed_events.append(event)

        if event.type is EventType.CIRCLE and not event.valid:
            self.invalid_events_skipped += 1
            logger.debug("Skipped invalid circle event", arc=event.arc, point=event.point)
            return

        self.sweepline.advance(event.point)

        if event.type is EventType.SITE:
            self._process_site_event(event)
        else:
            self._process_circle_event(event)

        logger.debug("Processed event",
                     kind=event.type.value,
                     point=event.point,
                     sweepline=self.sweepline.progress,
                     arcs=len(self.shoreline))

    def _process_site_event(self, event: SiteEvent):
        result = self.shoreline.insert_arc(event.site, self.sweepline)
        self.site_events_processed += 1
        if result.first_arc:
            return

        old_arc = self.shoreline.arc(result.old_arc)
        if old_arc.circle_event is not None:
            old_arc.circle_event.mark_invalid()
            old_arc.circle_event = None

        for arc_id in (result.left_arc, result.new_arc, result.right_arc):
            self._schedule_circle_event(arc_id)

        # Both halves start at the split point and grow apart
        left_half = self._open_edge(result.left_breakpoint, result.split_point, False)
        right_half = self._open_edge(result.right_breakpoint, result.split_point, False)
        left_half.twin = right_half.id
        right_half.twin = left_half.id

    def _process_circle_event(self, event: CircleEvent):
        result = self.shoreline.remove_arc(event.arc)

        for arc_id in (result.left_arc, result.right_arc):
            neighbor = self.shoreline.arc(arc_id)
            if neighbor.circle_event is not None:
                neighbor.circle_event.mark_invalid()
                neighbor.circle_event = None

        if event.is_vertex:
            center, merged = self._record_vertex(event)
            self.vertex_events_processed += 1
            if merged:
                self.vertex_events_merged += 1
                logger.debug("Merged cocircular vertex event", center=center, sites=event.sites)
        else:
            center = event.center
            self.boundary_events_processed += 1

        for breakpoint_id in (result.old_left_breakpoint, result.old_right_breakpoint):
            edge = self._traced_edge(breakpoint_id)
            edge.close(center, event.is_vertex)
            # Cocircular sites: an edge can end where it started
            if event.is_vertex and points_coincide(edge.start, center):
                edge.degenerate = True
        self._open_edge(result.new_breakpoint, center, event.is_vertex)

        self._schedule_circle_event(result.left_arc)
        self._schedule_circle_event(result.right_arc)

    def _record_vertex(self, event: CircleEvent) -> Tuple[Point, bool]:
        """
        Vertex of a circle event and whether it was already recorded.

        Four or more cocircular sites fire several events at the same center
        and sweep height; they all share the vertex recorded by the first one.
        """
        height = event.point[1]
        if self._vertex_height is None or not nearly_equal(height, self._vertex_height):
            self._vertex_height = height
            self._vertices_at_height = []

        for index in self._vertices_at_height:
            if points_coincide(self.vertices[index], event.center):
                return self.vertices[index], True

        self._vertices_at_height.append(len(self.vertices))
        self.vertices.append(event.center)
        return event.center, False

    def _schedule_circle_event(self, arc_id: int):
        arc = self.shoreline.arc(arc_id)
        if arc.circle_event is not None:
            arc.circle_event.mark_invalid()
            arc.circle_event = None

        found = self.shoreline.event_circle(arc_id)
        if found is None:
            return

        circle, sites = found
        event = CircleEvent(arc_id, circle, sites)
        arc.circle_event = event
        self.schedule.push(event)

    def _open_edge(self, breakpoint_id: int, start: Point, start_is_vertex: bool) -> PartialEdge:
        breakpoint = self.shoreline.breakpoint(breakpoint_id)
        edge = PartialEdge(
            id=len(self.partial_edges),
            left_site=self.shoreline.left_site(breakpoint),
            right_site=self.shoreline.right_site(breakpoint),
            start=start,
            start_is_vertex=start_is_vertex,
        )
        self.partial_edges.append(edge)
        breakpoint.edge = edge.id
        return edge

    def _traced_edge(self, breakpoint_id: int) -> PartialEdge:
        breakpoint = self.shoreline.breakpoint(breakpoint_id)
        if breakpoint.edge is None:
            raise VoronoiStructureError(f"Breakpoint {breakpoint_id} does not trace an edge")
        return self.partial_edges[breakpoint.edge]

    def _finish(self):
        self._diagram = assemble_diagram(self.sites, self.partial_edges, self.vertices,
                                         self.bounds, self.proxy_site.y)
        self.progress_step = BuildProgressStep.FINISHED
        logger.info("Sweepline build finished",
                    sites=len(self.sites),
                    edges=len(self._diagram.edges),
                    open_edges=len(self._diagram.open_edges),
                    vertices=len(self.vertices),
                    merged_vertex_events=self.vertex_events_merged,
                    boundary_events=self.boundary_events_processed,
                    invalid_events=self.invalid_events_skipped)

    def __repr__(self) -> str:
        return (f"VoronoiBuildState(step={self.progress_step.value}, "
                f"sites={len(self.sites)}, sweepline={self.sweepline.progress!r})")
