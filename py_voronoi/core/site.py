"""Input sites of the diagram."""

from dataclasses import dataclass

from .geometry import Point

PROXY_SITE_ID = -1


@dataclass(frozen=True)
class Site:
    """An input point with a stable id (its index among the accepted sites)."""
    id: int
    x: float
    y: float

    @classmethod
    def proxy(cls, x: float, y: float) -> "Site":
        """Sentinel site placed far below the real sites."""
        return cls(PROXY_SITE_ID, x, y)

    @property
    def point(self) -> Point:
        return (self.x, self.y)

    @property
    def is_proxy(self) -> bool:
        return self.id == PROXY_SITE_ID

    def __repr__(self) -> str:
        if self.is_proxy:
            return f"ProxySite(x={self.x!r}, y={self.y!r})"
        return f"Site(id={self.id}, x={self.x!r}, y={self.y!r})"
