"""
MCMC sampling and convergence diagnostics for black-box log densities.

Orchestrates PyMC sampling of models built by ``ModelBuilder``, collects the
posterior draws per parameter, computes convergence diagnostics with ArviZ
and performs posterior predictive checks.

Key diagnostics:
- Rhat (potential scale reduction): <1.01 indicates convergence
- ESS (effective sample size): >400 in total recommended
- Posterior predictive p-value: should be ~0.5 for well-specified model
"""

import logging
import time
from typing import Dict, List, Optional, Sequence
import numpy as np
from numpy.typing import NDArray
import pymc as pm
import arviz as az

from inference.model_builder import LogDensityFn, ModelBuilder

logger = logging.getLogger(__name__)

STEP_METHODS = {
    "slice": pm.Slice,
    "metropolis": pm.Metropolis,
    "demetropolisz": pm.DEMetropolisZ,
}


class PosteriorSampleSet:
    """
    Posterior draws per named parameter.

    Attributes
    ----------
    draws : Dict[str, NDArray[np.float64]]
        Draws per parameter, each of shape (chains, draws).
    parameter_names : List[str]
        Parameter names in model order.
    """

    def __init__(self, draws: Dict[str, NDArray[np.float64]]) -> None:
        """
        Parameters
        ----------
        draws : Dict[str, NDArray[np.float64]]
            Draws per parameter, each of shape (chains, draws).

        Raises
        ------
        ValueError
            If the arrays are not 2-D or do not share a shape.
        """
        if not draws:
            raise ValueError("At least one parameter is required")
        shapes = {np.shape(v) for v in draws.values()}
        if len(shapes) != 1 or len(next(iter(shapes))) != 2:
            raise ValueError(
                f"All draws must share a (chains, draws) shape. Got {shapes}"
            )

        self.draws = {k: np.asarray(v, dtype=np.float64) for k, v in draws.items()}
        self.parameter_names: List[str] = list(draws)
        self.n_chains, self.n_draws = next(iter(shapes))

    @classmethod
    def from_idata(cls, idata, var_name: str = "theta") -> "PosteriorSampleSet":
        """
        Split a vector variable of an InferenceData into named parameters.

        Parameters
        ----------
        idata : arviz.InferenceData
            Sampler output with posterior[var_name] of dims
            (chain, draw, parameter).
        var_name : str
            Name of the vector variable. Default "theta".
        """
        posterior = idata.posterior[var_name]
        names = [str(n) for n in posterior.coords["parameter"].values]
        values = posterior.values
        return cls({name: values[:, :, i] for i, name in enumerate(names)})

    def flat(self, name: str) -> NDArray[np.float64]:
        """All draws of one parameter with chains pooled, shape (chains*draws,)."""
        if name not in self.draws:
            raise KeyError(f"Unknown parameter {name!r}. Known: {self.parameter_names}")
        return self.draws[name].reshape(-1)

    def matrix(self, names: Optional[Sequence[str]] = None) -> NDArray[np.float64]:
        """
        Pooled draws as a matrix of shape (chains*draws, len(names)).

        Columns follow names, which defaults to parameter_names.
        """
        names = self.parameter_names if names is None else list(names)
        return np.column_stack([self.flat(name) for name in names])

    def mean(self) -> Dict[str, float]:
        """Posterior mean per parameter."""
        return {name: float(np.mean(self.draws[name])) for name in self.parameter_names}

    def std(self) -> Dict[str, float]:
        """Posterior standard deviation per parameter."""
        return {name: float(np.std(self.draws[name])) for name in self.parameter_names}

    @property
    def total_samples(self) -> int:
        return self.n_chains * self.n_draws

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"PosteriorSampleSet(parameters={self.parameter_names}, "
            f"chains={self.n_chains}, draws={self.n_draws})"
        )


class InferenceSummary:
    """Summary of an MCMC run: draws, diagnostics and timing."""

    def __init__(
        self,
        idata,  # arviz.InferenceData
        n_draws: int,
        n_tune: int,
        n_chains: int,
        sampling_time: float,
    ) -> None:
        """
        Initialize inference summary.

        Parameters
        ----------
        idata : arviz.InferenceData
            Posterior inference data from PyMC
        n_draws : int
            Number of post-warmup draws per chain
        n_tune : int
            Number of warmup steps per chain
        n_chains : int
            Number of chains
        sampling_time : float
            Total sampling time (seconds)
        """
        self.idata = idata
        self.n_draws = n_draws
        self.n_tune = n_tune
        self.n_chains = n_chains
        self.sampling_time = sampling_time
        self.total_samples = n_draws * n_chains
        self.samples = PosteriorSampleSet.from_idata(idata)
        self.diagnostics = DiagnosticsComputer.from_idata(idata)

    def __repr__(self) -> str:
        """String representation."""
        return (
            f"InferenceSummary(draws={self.n_draws}, tune={self.n_tune}, "
            f"chains={self.n_chains}, time={self.sampling_time:.1f}s)"
        )


class LogDensitySampler:
    """
    Gradient-free MCMC sampler for models built from a log-joint-density.

    The black-box op has no gradient, so NUTS is not available; one of
    PyMC's gradient-free step methods is used instead.
    """

    def __init__(self, step: str = "slice") -> None:
        """
        Initialize sampler.

        Parameters
        ----------
        step : str
            Step method: "slice" (default), "metropolis" or "demetropolisz".
        """
        if step not in STEP_METHODS:
            raise ValueError(
                f"step must be one of {sorted(STEP_METHODS)}. Got {step!r}"
            )
        self.step = step

    def sample(
        self,
        model: pm.Model,
        draws: int = 1000,
        tune: int = 1000,
        chains: int = 2,
        cores: int = 1,
        random_seed: Optional[int] = None,
        progressbar: bool = False,
    ) -> InferenceSummary:
        """
        Run MCMC on a PyMC model.

        Parameters
        ----------
        model : pm.Model
            PyMC model (from ModelBuilder.build())
        draws : int
            Number of post-warmup samples per chain. Default 1000.
        tune : int
            Number of warmup steps per chain. Default 1000.
        chains : int
            Number of chains. Default 2.
        cores : int
            Number of processes. Default 1 (the op runs in-process).
        random_seed : int, optional
            Random seed for reproducibility.
        progressbar : bool
            Show progress bar. Default False.

        Returns
        -------
        summary : InferenceSummary
            Summary with posterior draws, diagnostics, timing.
        """
        if draws <= 0 or chains <= 0 or tune < 0:
            raise ValueError(
                f"draws and chains must be positive and tune non-negative. Got "
                f"draws={draws}, chains={chains}, tune={tune}"
            )

        logger.info(
            "Sampling %d chains x %d draws (%d tune) with %s",
            chains, draws, tune, self.step,
        )
        start_time = time.time()

        with model:
            step = STEP_METHODS[self.step]()
            idata = pm.sample(
                draws=draws,
                tune=tune,
                chains=chains,
                cores=cores,
                step=step,
                random_seed=random_seed,
                progressbar=progressbar,
                return_inferencedata=True,
                discard_tuned_samples=True,
                compute_convergence_checks=False,
            )

        sampling_time = time.time() - start_time
        logger.info("Sampling finished in %.1fs", sampling_time)

        return InferenceSummary(
            idata=idata,
            n_draws=draws,
            n_tune=tune,
            n_chains=chains,
            sampling_time=sampling_time,
        )

    def __repr__(self) -> str:
        """String representation."""
        return f"LogDensitySampler(step={self.step!r})"


def sample_log_density(
    log_density: LogDensityFn,
    parameter_names: Sequence[str],
    initial_point: Optional[Sequence[float]] = None,
    draws: int = 1000,
    chains: int = 2,
    tune: int = 1000,
    random_seed: Optional[int] = None,
    step: str = "slice",
) -> InferenceSummary:
    """
    Sample the posterior defined by a log-joint-density function.

    Parameters
    ----------
    log_density : Callable
        Maps a parameter vector (K,) to log p(θ, D).
    parameter_names : Sequence[str]
        Names of the K parameters.
    initial_point : Sequence[float], optional
        Starting point with finite log density. If None, zeros.
    draws, chains, tune : int
        Post-warmup draws per chain, number of chains, warmup steps.
    random_seed : int, optional
        Random seed for reproducibility.
    step : str
        Gradient-free step method, see ``LogDensitySampler``.

    Returns
    -------
    InferenceSummary
        ``.samples`` holds the draws, ``.diagnostics`` the ESS / Rhat.
    """
    model = ModelBuilder(log_density, parameter_names, initial_point).build()
    return LogDensitySampler(step=step).sample(
        model,
        draws=draws,
        tune=tune,
        chains=chains,
        random_seed=random_seed,
    )


class DiagnosticsComputer:
    """
    Convergence diagnostics from posterior samples.

    Includes: bulk/tail ESS and Rhat per parameter.
    """

    @staticmethod
    def from_idata(idata, var_name: str = "theta") -> Dict[str, Dict[str, float]]:
        """
        ESS and Rhat per parameter.

        Rhat needs at least 2 chains; with a single chain it is NaN.

        Parameters
        ----------
        idata : arviz.InferenceData
            Posterior inference data
        var_name : str
            Vector variable with a "parameter" dimension. Default "theta".

        Returns
        -------
        diagnostics : Dict[str, Dict[str, float]]
            {parameter: {"ess_bulk", "ess_tail", "r_hat"}}
        """
        ess_bulk = az.ess(idata, var_names=[var_name], method="bulk")[var_name]
        ess_tail = az.ess(idata, var_names=[var_name], method="tail")[var_name]
        n_chains = idata.posterior.sizes["chain"]
        if n_chains >= 2:
            r_hat = az.rhat(idata, var_names=[var_name])[var_name].values
        else:
            r_hat = np.full(ess_bulk.shape, np.nan)

        names = [str(n) for n in idata.posterior[var_name].coords["parameter"].values]
        return {
            name: {
                "ess_bulk": float(ess_bulk.values[i]),
                "ess_tail": float(ess_tail.values[i]),
                "r_hat": float(r_hat[i]),
            }
            for i, name in enumerate(names)
        }

    @staticmethod
    def converged(
        diagnostics: Dict[str, Dict[str, float]],
        max_rhat: float = 1.01,
        min_ess: float = 400.0,
    ) -> bool:
        """
        True when every parameter has Rhat < max_rhat and bulk ESS >= min_ess.

        Parameters
        ----------
        diagnostics : Dict[str, Dict[str, float]]
            Output of ``from_idata``.
        max_rhat : float
            Rhat threshold. Default 1.01.
        min_ess : float
            Bulk ESS floor. Default 400.
        """
        for stats in diagnostics.values():
            if not np.isfinite(stats["r_hat"]) or stats["r_hat"] >= max_rhat:
                return False
            if stats["ess_bulk"] < min_ess:
                return False
        return True


class PosteriorPredictiveCheck:
    """
    Posterior predictive checks for model validation.

    Compares observed data to draws from posterior predictive distribution
    to assess whether the model generates plausible data.
    """

    @staticmethod
    def compute_ppcheck(
        pp_draws: NDArray[np.float64],
        observed_data: NDArray[np.float64],
    ) -> Dict[str, float]:
        """
        Compute posterior predictive check statistics.

        Parameters
        ----------
        pp_draws : NDArray[np.float64]
            Simulated datasets, shape (S, N): one row per posterior draw
        observed_data : NDArray[np.float64]
            Observed data, shape (N,)

        Returns
        -------
        ppc_stats : Dict[str, float]
            Posterior predictive p-values:
            - mean_pvalue: p-value for mean
            - std_pvalue: p-value for std
            - max_pvalue: p-value for max absolute value
        """
        pp_draws = np.asarray(pp_draws, dtype=np.float64)
        observed_data = np.asarray(observed_data, dtype=np.float64).ravel()
        if pp_draws.ndim != 2 or pp_draws.shape[1] != observed_data.size:
            raise ValueError(
                f"pp_draws must have shape (S, {observed_data.size}). "
                f"Got {pp_draws.shape}"
            )

        mean_pvalue = float(np.mean(pp_draws.mean(axis=1) >= observed_data.mean()))
        std_pvalue = float(np.mean(pp_draws.std(axis=1) >= observed_data.std()))
        max_pvalue = float(
            np.mean(np.abs(pp_draws).max(axis=1) >= np.abs(observed_data).max())
        )

        return {
            "mean_pvalue": mean_pvalue,
            "std_pvalue": std_pvalue,
            "max_pvalue": max_pvalue,
        }
