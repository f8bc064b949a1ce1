"""Edges under construction and the diagram handed to consumers."""

from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

import numpy as np
import structlog

from .errors import VoronoiStructureError
from .geometry import Bounds, Point, edge_direction
from .site import Site

logger = structlog.get_logger()


@dataclass(eq=False)
class PartialEdge:
    """
    Half of a diagram edge, traced by one breakpoint.

    The start is fixed when the breakpoint appears; the end stays open until
    a circle event collapses one of the breakpoint's arcs.
    """
    id: int
    left_site: Site
    right_site: Site
    start: Point
    start_is_vertex: bool = False
    end: Optional[Point] = None
    end_is_vertex: bool = False
    twin: Optional[int] = None  # other half of an edge born at a site event
    degenerate: bool = False  # closed where it started (cocircular sites)

    @property
    def is_closed(self) -> bool:
        return self.end is not None

    @property
    def involves_proxy(self) -> bool:
        return self.left_site.is_proxy or self.right_site.is_proxy

    def close(self, point: Point, is_vertex: bool) -> None:
        """Record the end point. Closed edges are immutable."""
        if self.end is not None:
            raise VoronoiStructureError(f"Edge {self.id} is already closed at {self.end}")
        self.end = point
        self.end_is_vertex = is_vertex


@dataclass(frozen=True)
class VoronoiEdge:
    """
    Edge between the cells of two real sites.

    A missing endpoint means the edge is unbounded on that side. Endpoints
    not flagged as vertices lie on the proxy line, where the sweep
    truncated the edge.
    """
    site_a: int
    site_b: int
    start: Optional[Point]
    end: Optional[Point]
    start_is_vertex: bool
    end_is_vertex: bool
    anchor: Point  # finite point on the edge's line
    direction: Point  # unit vector from the start side to the end side

    @property
    def sites(self) -> Tuple[int, int]:
        return (self.site_a, self.site_b)

    @property
    def is_complete(self) -> bool:
        return self.start is not None and self.end is not None

    @property
    def is_bounded(self) -> bool:
        """Both endpoints are Voronoi vertices."""
        return self.is_complete and self.start_is_vertex and self.end_is_vertex


@dataclass
class VoronoiDiagram:
    """Sites, edges and vertices produced by one build."""
    sites: np.ndarray          # N x 2, row index is the site id
    edges: List[VoronoiEdge]
    vertices: np.ndarray       # M x 2 centers of circle events of real sites
    bounds: Bounds             # padded site extent used to place the proxy
    proxy_y: float             # height of the proxy line truncating edges
    _site_edges: Optional[List[List[int]]] = field(default=None, repr=False)

    @property
    def completed_edges(self) -> List[VoronoiEdge]:
        return [edge for edge in self.edges if edge.is_complete]

    @property
    def open_edges(self) -> List[VoronoiEdge]:
        return [edge for edge in self.edges if not edge.is_complete]

    @property
    def bounded_edges(self) -> List[VoronoiEdge]:
        return [edge for edge in self.edges if edge.is_bounded]

    def extent(self) -> Bounds:
        """Box holding the padded site extent and every vertex, for clipping open edges."""
        if len(self.vertices) == 0:
            return self.bounds
        return self.bounds.union(Bounds.from_points(self.vertices))

    def ridge_points(self) -> np.ndarray:
        """Site id pairs of every edge, smaller id first (E x 2)."""
        if not self.edges:
            return np.empty((0, 2), dtype=int)
        pairs = np.array([edge.sites for edge in self.edges], dtype=int)
        return np.sort(pairs, axis=1)

    def edges_of(self, site_id: int) -> List[VoronoiEdge]:
        """Edges bordering the cell of one site."""
        if self._site_edges is None:
            self._site_edges = [[] for _ in range(len(self.sites))]
            for index, edge in enumerate(self.edges):
                self._site_edges[edge.site_a].append(index)
                self._site_edges[edge.site_b].append(index)
        return [self.edges[index] for index in self._site_edges[site_id]]


def assemble_diagram(sites: Iterable[Site],
                     partial_edges: List[PartialEdge],
                     vertices: Iterable[Point],
                     bounds: Bounds,
                     proxy_y: float) -> VoronoiDiagram:
    """
    Turn the half-edges traced so far into consumer-facing edges.

    Half-edges touching the proxy site are dropped, as are edges that start
    and end at the same vertex (left behind when four or more sites are
    cocircular). The two halves of an edge born at a site event are merged,
    the split point between them being interior to the edge. Works on a
    partially built state too; the result then reflects the edges traced up
    to the current sweep height.

    Args:
        sites: Real sites, ordered by id
        partial_edges: Every half-edge, indexed by id
        vertices: Centers of circle events between real sites
        bounds: Padded site extent
        proxy_y: Height of the proxy line

    Returns:
        Assembled diagram
    """
    edges = []
    for half in partial_edges:
        if half.involves_proxy:
            continue

        if half.twin is None:
            if half.degenerate:
                continue
            edges.append(VoronoiEdge(
                site_a=half.left_site.id,
                site_b=half.right_site.id,
                start=half.start,
                end=half.end,
                start_is_vertex=half.start_is_vertex,
                end_is_vertex=half.end_is_vertex,
                anchor=half.start,
                direction=edge_direction(half.left_site.point, half.right_site.point),
            ))
            continue

        # Emit each twin pair once, from the half created first. That half
        # traces the left breakpoint, so the edge runs from the other half's
        # end to its own.
        if half.twin < half.id:
            continue
        other = partial_edges[half.twin]
        if half.degenerate and other.degenerate:
            continue
        start = other.end
        end = half.end
        if start is not None:
            anchor = start
        elif end is not None:
            anchor = end
        else:
            anchor = half.start
        edges.append(VoronoiEdge(
            site_a=half.left_site.id,
            site_b=half.right_site.id,
            start=start,
            end=end,
            start_is_vertex=other.end_is_vertex,
            end_is_vertex=half.end_is_vertex,
            anchor=anchor,
            direction=edge_direction(half.left_site.point, half.right_site.point),
        ))

    site_array = np.array([site.point for site in sites], dtype=float).reshape(-1, 2)
    vertex_array = np.array(list(vertices), dtype=float).reshape(-1, 2)

    logger.debug("Assembled diagram",
                 edges=len(edges),
                 vertices=len(vertex_array),
                 half_edges=len(partial_edges))

    return VoronoiDiagram(
        sites=site_array,
        edges=edges,
        vertices=vertex_array,
        bounds=bounds,
        proxy_y=proxy_y,
    )
