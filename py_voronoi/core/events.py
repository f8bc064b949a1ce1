"""
Sweepline events and the schedule that orders them.

Site events are known up front and sorted once; circle events appear and
disappear while the shoreline changes. The schedule keeps the two sources
apart and only compares their heads, so inserting a circle event never
re-sorts the site events.
"""

import heapq
import itertools
from collections import deque
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from .geometry import Circle, Point
from .site import PROXY_SITE_ID, Site
from .sweepline import point_key


class EventType(Enum):
    """Kinds of sweepline events."""
    SITE = "site"
    CIRCLE = "circle"


@dataclass(eq=False)
class SiteEvent:
    """The sweepline reaches a site: a new arc is inserted."""
    site: Site

    @property
    def type(self) -> EventType:
        return EventType.SITE

    @property
    def point(self) -> Point:
        return self.site.point

    def __repr__(self) -> str:
        return f"SiteEvent(site={self.site.id})"


@dataclass(eq=False)
class CircleEvent:
    """
    The sweepline reaches the bottom of a circle through three sites.

    The arc between the outer two sites collapses at that moment. The event
    is never removed from the schedule early; it is marked invalid instead
    and skipped when popped.
    """
    arc: int
    circle: Circle
    sites: Tuple[int, int, int]  # left, middle, right site ids
    valid: bool = True

    @property
    def type(self) -> EventType:
        return EventType.CIRCLE

    @property
    def point(self) -> Point:
        return self.circle.bottom

    @property
    def center(self) -> Point:
        return self.circle.center

    @property
    def radius(self) -> float:
        return self.circle.radius

    @property
    def is_vertex(self) -> bool:
        """False for boundary events involving the proxy site."""
        return PROXY_SITE_ID not in self.sites

    def mark_invalid(self) -> None:
        self.valid = False

    def __repr__(self) -> str:
        state = "" if self.valid else ", invalid"
        return f"CircleEvent(arc={self.arc}, sites={self.sites}, point={self.point}{state})"


Event = Union[SiteEvent, CircleEvent]


class EventSchedule:
    """Merge of the pre-sorted site events and the circle event heap."""

    def __init__(self, site_events: Iterable[SiteEvent] = ()):
        # Callers pass site events already in sweepline order.
        self._site_events = deque(site_events)
        self._circle_events: List[Tuple[float, float, int, CircleEvent]] = []
        self._sequence = itertools.count()

    def push(self, event: CircleEvent) -> None:
        """Schedule a circle event. Ties at the same point pop in insertion order."""
        y, x = point_key(event.point)
        heapq.heappush(self._circle_events, (y, x, next(self._sequence), event))

    def _site_head_wins(self) -> bool:
        if not self._circle_events:
            return True
        if not self._site_events:
            return False
        site_key = point_key(self._site_events[0].point)
        circle_key = self._circle_events[0][:2]
        return site_key <= circle_key

    def peek(self) -> Optional[Event]:
        """Next event without removing it, or None when the schedule is empty."""
        if not self:
            return None
        if self._site_head_wins():
            return self._site_events[0]
        return self._circle_events[0][3]

    def poll(self) -> Optional[Event]:
        """Remove and return the smallest event across both sources."""
        if not self:
            return None
        if self._site_head_wins():
            return self._site_events.popleft()
        return heapq.heappop(self._circle_events)[3]

    @property
    def site_events(self) -> List[SiteEvent]:
        return list(self._site_events)

    @property
    def circle_events(self) -> List[CircleEvent]:
        """Pending circle events in schedule order, including invalidated ones."""
        return [entry[3] for entry in sorted(self._circle_events)]

    def __iter__(self) -> Iterator[Event]:
        """Pending events in the order they would be polled."""
        sites = ((point_key(e.point), 0, i, e) for i, e in enumerate(self._site_events))
        circles = ((entry[:2], 1, entry[2], entry[3]) for entry in self._circle_events)
        for _, _, _, event in sorted(itertools.chain(sites, circles), key=lambda item: item[:3]):
            yield event

    def __len__(self) -> int:
        return len(self._site_events) + len(self._circle_events)

    def __bool__(self) -> bool:
        return bool(self._site_events) or bool(self._circle_events)
