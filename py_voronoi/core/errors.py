"""Exceptions raised by the sweepline core."""


class VoronoiStructureError(RuntimeError):
    """Raised when the shoreline or event schedule is in an impossible state.

    These indicate corrupted state or a defect, never bad-but-valid input.
    The build state that raised it cannot be resumed.
    """


class DuplicateSiteError(VoronoiStructureError):
    """Two sites at the same position reached the shoreline."""


class SweeplineError(VoronoiStructureError):
    """The sweepline was asked to move backwards."""
