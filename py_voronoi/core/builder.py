"""
Collects input sites and hands them to a build state.

Near-duplicate sites break the sweepline (two arcs overlapping everywhere),
so by default every site closer than ``min_site_distance`` to an already
accepted one is rejected and reported back to the caller.
"""

import math
from typing import List, Optional

import numpy as np
import structlog

from .build_state import VoronoiBuildState, VoronoiOptions
from .diagram import VoronoiDiagram
from .geometry import Point
from .site_index import SiteIndex

logger = structlog.get_logger()


class VoronoiBuilder:
    """Accumulates sites for a Voronoi diagram."""

    def __init__(self, options: Optional[VoronoiOptions] = None):
        self.options = options or VoronoiOptions.from_settings()
        self.sanitize = self.options.sanitize_input
        self._sites: List[Point] = []
        self._index = SiteIndex()

    def __len__(self) -> int:
        return len(self._sites)

    @property
    def sites(self) -> np.ndarray:
        """Copy of the accepted sites, shape (N, 2), in insertion order."""
        return np.array(self._sites, dtype=float).reshape(-1, 2)

    def add_site(self, point) -> bool:
        """
        Add one site.

        Returns:
            True if accepted, False if it is too close to an accepted site
            while sanitizing is enabled
        """
        site = _as_point(point)
        if self._accept(site):
            return True
        logger.warning("Site rejected by proximity check",
                       site=site,
                       min_site_distance=self.options.min_site_distance)
        return False

    def add_sites(self, points, rejected: Optional[list] = None) -> int:
        """
        Add many sites.

        Args:
            points: Iterable of (x, y) pairs
            rejected: Optional list that receives every rejected point

        Returns:
            Number of sites accepted
        """
        accepted = 0
        failed = 0
        for point in points:
            site = _as_point(point)
            if self._accept(site):
                accepted += 1
                continue
            failed += 1
            logger.debug("Site rejected by proximity check", site=site)
            if rejected is not None:
                rejected.append(site)

        logger.info("Sites added", accepted=accepted, rejected=failed, total=len(self._sites))
        return accepted

    def remove_site(self, point) -> bool:
        """Remove a previously added site. Returns False if it was never added."""
        site = _as_point(point)
        try:
            self._sites.remove(site)
        except ValueError:
            return False
        self._index.remove(site)
        return True

    def clear(self) -> None:
        self._sites = []
        self._index.clear()

    def create_build_state(self) -> VoronoiBuildState:
        """Fresh build state over the current sites; later changes do not affect it."""
        return VoronoiBuildState(self.sites, self.options)

    def build(self) -> VoronoiDiagram:
        """Run a build to completion in one go."""
        state = self.create_build_state()
        while not state.is_finished:
            state.do_work()
        return state.diagram()

    def _accept(self, site: Point) -> bool:
        if self.sanitize and self._index.count_within(site, self.options.min_site_distance) > 0:
            return False
        self._index.add(site)
        self._sites.append(site)
        return True


def _as_point(point) -> Point:
    values = np.asarray(point, dtype=float).ravel()
    if values.shape != (2,):
        raise ValueError(f"Expected an (x, y) pair, got {point!r}")
    x, y = float(values[0]), float(values[1])
    if not (math.isfinite(x) and math.isfinite(y)):
        raise ValueError(f"Site coordinates must be finite, got {point!r}")
    return (x, y)
