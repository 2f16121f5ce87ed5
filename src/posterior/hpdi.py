"""
Highest posterior density interval (HPDI) on a discretised posterior.

Starting from the mode, the interval grows one grid point at a time towards
whichever neighbour carries more mass, until the enclosed mass reaches the
target coverage α. On an exact tie the left neighbour is taken first; this
policy is fixed so that interval fixtures stay reproducible.

The greedy expansion is only minimal for unimodal mass functions. For
multimodal input the contiguous window can over-cover or hide a separate
mode, so ``find_hpdi`` checks the number of modes and warns (or raises).
"""

from dataclasses import dataclass
from typing import Tuple
import warnings
import numpy as np
from numpy.typing import ArrayLike, NDArray


@dataclass(frozen=True)
class HPDIResult:
    """
    Contiguous index window of an HPDI.

    Attributes
    ----------
    low : int
        First index inside the interval.
    high : int
        Last index inside the interval (inclusive).
    mass : float
        Posterior mass enclosed by [low, high].
    """

    low: int
    high: int
    mass: float

    def bounds(self, grid: ArrayLike) -> Tuple[float, float]:
        """Map the index window to grid values (lower, upper)."""
        values = np.asarray(grid, dtype=np.float64)
        return float(values[self.low]), float(values[self.high])

    @property
    def width(self) -> int:
        """Number of grid points inside the interval."""
        return self.high - self.low + 1


def count_modes(mass: ArrayLike, rel_threshold: float = 1e-6) -> int:
    """
    Count local maxima of a 1-D mass function.

    Runs of equal values are collapsed first so that a flat top counts once.
    Maxima lower than ``rel_threshold * max(mass)`` are treated as noise.

    Parameters
    ----------
    mass : ArrayLike
        Mass per grid point, shape (n,).
    rel_threshold : float
        Relative height below which a local maximum is ignored.

    Returns
    -------
    int
        Number of significant local maxima (>= 1 for non-empty input).
    """
    p = np.asarray(mass, dtype=np.float64).ravel()
    if p.size == 0:
        return 0

    # Collapse plateaus
    keep = np.concatenate(([True], np.diff(p) != 0))
    q = p[keep]

    padded = np.concatenate(([-np.inf], q, [-np.inf]))
    is_peak = (q > padded[:-2]) & (q > padded[2:])
    return int(np.sum(is_peak & (q >= rel_threshold * q.max())))


def _validate_mass(p: NDArray[np.float64], alpha: float) -> None:
    """Check the mass vector and target coverage."""
    if not (0.0 < alpha < 1.0):
        raise ValueError(f"alpha must be in (0, 1). Got {alpha}")
    if p.ndim != 1:
        raise ValueError(f"mass must be 1-D. Got shape {p.shape}")
    if p.size == 0:
        raise ValueError("mass must contain at least one grid point")
    if not np.all(np.isfinite(p)) or np.any(p < 0):
        raise ValueError("mass must be finite and non-negative")


def find_hpdi(
    mass: ArrayLike,
    alpha: float = 0.95,
    multimodal: str = "warn",
) -> HPDIResult:
    """
    Smallest contiguous window around the mode enclosing mass >= alpha.

    Parameters
    ----------
    mass : ArrayLike
        Normalised posterior mass per grid point, shape (n,).
    alpha : float
        Target coverage in (0, 1). Default 0.95.
    multimodal : str
        What to do when the mass has more than one mode: "warn" (default,
        RuntimeWarning), "raise" (ValueError) or "ignore".

    Returns
    -------
    HPDIResult
        Index window [low, high] and enclosed mass. The mass is >= alpha
        unless the whole grid is exhausted first (floating-point shortfall
        for alpha close to 1), in which case the full grid is returned.

    Raises
    ------
    ValueError
        If alpha is outside (0, 1), the mass is not a valid 1-D mass
        function, or multimodal="raise" and several modes are found.
    """
    if multimodal not in ("warn", "raise", "ignore"):
        raise ValueError(
            f"multimodal must be 'warn', 'raise' or 'ignore'. Got {multimodal!r}"
        )

    p = np.asarray(mass, dtype=np.float64)
    _validate_mass(p, alpha)

    if multimodal != "ignore":
        n_modes = count_modes(p)
        if n_modes > 1:
            msg = (
                f"Posterior mass has {n_modes} modes; the contiguous HPDI "
                "assumes a unimodal distribution and may misrepresent the "
                "credible region."
            )
            if multimodal == "raise":
                raise ValueError(msg)
            warnings.warn(msg, RuntimeWarning, stacklevel=2)

    n = p.size
    idx = int(np.argmax(p))
    cum_p = float(p[idx])
    left = idx - 1
    right = idx + 1

    while cum_p < alpha:
        left_ok = left >= 0
        right_ok = right < n
        if left_ok and (not right_ok or p[left] >= p[right]):
            cum_p += float(p[left])
            left = max(left - 1, -1)
        elif right_ok:
            cum_p += float(p[right])
            right = min(right + 1, n)
        else:
            # Both ends exhausted: return the full grid
            break

    return HPDIResult(low=left + 1, high=right - 1, mass=cum_p)
