"""
Error taxonomy for the grid posterior engine.

All errors derive from ValueError so callers that already guard numerical
code with ``except ValueError`` keep working.
"""


class PosteriorError(ValueError):
    """Base class for posterior computation errors."""


class InvalidObservation(PosteriorError):
    """Counts are negative, non-integer, or successes exceed trials."""


class DegenerateDistribution(PosteriorError):
    """No grid point carries positive posterior mass; normalisation is undefined."""


class GridMismatch(PosteriorError):
    """Grids, masses, priors or sample arrays have inconsistent shapes."""
