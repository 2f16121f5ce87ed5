"""
PyMC model builder for black-box log-joint densities.

The regression models in this package define their posterior through a plain
NumPy function

    log p(θ, D) = log p(θ) + log p(D | θ),      θ ∈ R^K

This module hands such a function to PyMC without re-expressing it in
pytensor: the function is wrapped in a pytensor ``Op`` and attached to a flat
(improper, unconstrained) parameter vector through ``pm.Potential``.

Mathematical model:
    θ ~ Flat(R^K)
    potential: log p(θ, D)           # prior + likelihood, supplied by caller

The op has no gradient, so the model must be sampled with a gradient-free
step method (slice, Metropolis, DEMetropolisZ); see ``sampler.py``.
"""

import logging
from typing import Callable, List, Optional, Sequence
import numpy as np
from numpy.typing import NDArray
import pymc as pm
import pytensor.tensor as pt
from pytensor.graph import Apply, Op

logger = logging.getLogger(__name__)

LogDensityFn = Callable[[NDArray[np.float64]], float]


class LogDensityOp(Op):
    """Pytensor op evaluating a NumPy log-density on a float64 vector."""

    def __init__(self, log_density: LogDensityFn) -> None:
        self.log_density = log_density

    def make_node(self, theta) -> Apply:
        theta = pt.as_tensor_variable(theta)
        return Apply(self, [theta], [pt.dscalar()])

    def perform(self, node, inputs, outputs) -> None:
        (theta,) = inputs
        outputs[0][0] = np.asarray(self.log_density(theta), dtype=np.float64)


class ModelBuilder:
    """
    Assemble a PyMC model from a log-joint-density function.

    Attributes
    ----------
    log_density : Callable
        Maps a parameter vector of shape (K,) to log p(θ, D).
    parameter_names : List[str]
        Names of the K parameters (used as the "parameter" coordinate).
    initial_point : NDArray[np.float64]
        Starting point for every chain; must have finite log density.
    model : pm.Model or None
        PyMC model (None until built)
    """

    def __init__(
        self,
        log_density: LogDensityFn,
        parameter_names: Sequence[str],
        initial_point: Optional[Sequence[float]] = None,
    ) -> None:
        """
        Initialize model builder.

        Parameters
        ----------
        log_density : Callable
            Log-joint-density of the parameter vector.
        parameter_names : Sequence[str]
            Unique parameter names, one per vector entry.
        initial_point : Sequence[float], optional
            Starting point. If None, the zero vector.

        Raises
        ------
        ValueError
            If names are empty or duplicated, or the initial point has the
            wrong length.
        """
        names = list(parameter_names)
        if not names:
            raise ValueError("At least one parameter name is required")
        if len(set(names)) != len(names):
            raise ValueError(f"Parameter names must be unique. Got {names}")

        if initial_point is None:
            start = np.zeros(len(names))
        else:
            start = np.asarray(initial_point, dtype=np.float64)
        if start.shape != (len(names),):
            raise ValueError(
                f"initial_point must have shape ({len(names)},). Got {start.shape}"
            )

        self.log_density = log_density
        self.parameter_names: List[str] = names
        self.initial_point = start
        self.model: Optional[pm.Model] = None

    def _check_initial_point(self) -> float:
        """Evaluate the log density at the initial point; it must be finite."""
        value = float(self.log_density(self.initial_point))
        if not np.isfinite(value):
            raise ValueError(
                f"Log density at the initial point {self.initial_point} is {value}; "
                "choose a starting point inside the posterior support."
            )
        return value

    def build(self) -> pm.Model:
        """
        Build the PyMC model.

        Returns
        -------
        model : pm.Model
            Model with a single vector variable "theta" (dims "parameter")
            and a potential "log_joint" holding the log-joint-density.
        """
        start_logp = self._check_initial_point()

        with pm.Model(coords={"parameter": self.parameter_names}) as model:
            theta = pm.Flat("theta", dims="parameter", initval=self.initial_point)
            pm.Potential("log_joint", LogDensityOp(self.log_density)(theta))

        logger.debug(
            "Built model with %d parameters, log density at start = %.4g",
            len(self.parameter_names),
            start_logp,
        )
        self.model = model
        return model

    def get_model(self) -> pm.Model:
        """
        Get the built model.

        Raises
        ------
        RuntimeError
            If model has not been built yet.
        """
        if self.model is None:
            raise RuntimeError("Model has not been built. Call .build() first.")
        return self.model

    def __repr__(self) -> str:
        """String representation."""
        return f"ModelBuilder(parameters={self.parameter_names})"
