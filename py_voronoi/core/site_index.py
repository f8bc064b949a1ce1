"""Proximity index used to reject near-duplicate sites."""

from typing import List, Optional

import numpy as np
from sklearn.neighbors import KDTree

from .geometry import Point


class SiteIndex:
    """
    Points accepted so far, searchable by distance.

    KDTree is static, so new points are kept in a small pending buffer that
    is scanned directly; the tree is rebuilt once the buffer fills up.
    """

    def __init__(self, rebuild_threshold: int = 64):
        self.rebuild_threshold = rebuild_threshold
        self._indexed = np.empty((0, 2), dtype=float)
        self._tree: Optional[KDTree] = None
        self._pending: List[Point] = []

    def __len__(self) -> int:
        return len(self._indexed) + len(self._pending)

    def add(self, point: Point) -> None:
        self._pending.append((float(point[0]), float(point[1])))
        if len(self._pending) >= self.rebuild_threshold:
            self._rebuild()

    def remove(self, point: Point) -> bool:
        """Remove one stored copy of an exact point. Returns False if absent."""
        target = (float(point[0]), float(point[1]))
        if target in self._pending:
            self._pending.remove(target)
            return True

        matches = np.flatnonzero(np.all(self._indexed == target, axis=1))
        if len(matches) == 0:
            return False
        self._indexed = np.delete(self._indexed, matches[0], axis=0)
        self._tree = KDTree(self._indexed) if len(self._indexed) else None
        return True

    def clear(self) -> None:
        self._indexed = np.empty((0, 2), dtype=float)
        self._tree = None
        self._pending = []

    def count_within(self, point: Point, radius: float) -> int:
        """Number of stored points at distance <= radius from point."""
        x, y = float(point[0]), float(point[1])
        count = 0

        if self._tree is not None:
            count += int(self._tree.query_radius([[x, y]], r=radius, count_only=True)[0])

        if self._pending:
            pending = np.asarray(self._pending)
            distances = np.hypot(pending[:, 0] - x, pending[:, 1] - y)
            count += int(np.count_nonzero(distances <= radius))

        return count

    def _rebuild(self):
        self._indexed = np.vstack([self._indexed, np.asarray(self._pending, dtype=float)])
        self._tree = KDTree(self._indexed)
        self._pending = []
