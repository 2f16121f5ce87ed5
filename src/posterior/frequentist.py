"""
Frequentist counterparts of the grid posterior, for comparison.

- Maximum likelihood estimate θ̂ = N⁺ / N
- Wald confidence interval θ̂ ± z_{(1+level)/2} · sqrt(θ̂(1 − θ̂) / N)
- Pearson χ² test of equal success rates for two sellers
"""

from typing import Dict, Tuple
import numpy as np
from scipy.stats import chi2_contingency, norm

from posterior.observation import Observation


def maximum_likelihood_estimate(observation: Observation) -> float:
    """
    MLE of the success probability.

    Raises
    ------
    ValueError
        If the observation has no trials.
    """
    if observation.trials == 0:
        raise ValueError("MLE is undefined for zero trials")
    return observation.successes / observation.trials


def wald_confidence_interval(
    observation: Observation,
    level: float = 0.9,
) -> Tuple[float, float]:
    """
    Normal-approximation confidence interval for the success probability.

    For (N⁺=7, N=10) at level 0.9 this gives about (0.46, 0.94).

    Parameters
    ----------
    observation : Observation
        Observed successes out of trials.
    level : float
        Confidence level in (0, 1). Default 0.9.

    Returns
    -------
    Tuple[float, float]
        (lower, upper), clipped into [0, 1].
    """
    if not (0.0 < level < 1.0):
        raise ValueError(f"level must be in (0, 1). Got {level}")

    theta_hat = maximum_likelihood_estimate(observation)
    se = np.sqrt(theta_hat * (1.0 - theta_hat) / observation.trials)
    z = norm.ppf(0.5 + level / 2.0)
    lower = max(0.0, theta_hat - z * se)
    upper = min(1.0, theta_hat + z * se)
    return float(lower), float(upper)


def chi_square_test(
    observation_a: Observation,
    observation_b: Observation,
    correction: bool = False,
) -> Dict[str, float]:
    """
    Pearson χ² test of H0: both sellers share the same success rate.

    Parameters
    ----------
    observation_a, observation_b : Observation
        Observed data for each seller.
    correction : bool
        Apply Yates' continuity correction. Default False.

    Returns
    -------
    Dict[str, float]
        - statistic: χ² statistic
        - p_value: probability under H0 of a statistic at least as extreme
        - dof: degrees of freedom
    """
    table = np.array([
        [observation_a.successes, observation_a.failures],
        [observation_b.successes, observation_b.failures],
    ])
    if np.any(table.sum(axis=0) == 0) or np.any(table.sum(axis=1) == 0):
        raise ValueError(
            "Contingency table has an empty row or column; the test is undefined"
        )

    statistic, p_value, dof, _ = chi2_contingency(table, correction=correction)
    return {
        "statistic": float(statistic),
        "p_value": float(p_value),
        "dof": float(dof),
    }
