"""
Synthetic data module for Bayesian teaching examples.

This module provides reproducible datasets for the grid posteriors and the
regression models:
- Bernoulli outcomes and repeated binomial experiments
- Linear regression data, with optional outliers
- Heteroscedastic regression data

**Usage:**
```python
from simulation.simulator import DataSimulator

sim = DataSimulator(n_obs=50)
x, y = sim.linear_data(beta0=3.0, beta1=3.0, sigma2=0.5, random_seed=100)
x_out, y_out = sim.add_outliers(x, y)
```
"""

from simulation.simulator import DataSimulator

__all__ = [
    "DataSimulator",
]
