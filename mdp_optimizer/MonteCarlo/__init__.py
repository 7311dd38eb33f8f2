"""Monte Carlo rollout of finite MDPs.

Modules
-------
data_structures
    EpisodeResult, MonteCarloSummary and path statistics dataclasses
sampling
    Seedable random generators and inverse-CDF outcome sampling
simulation
    Episode simulation (random or policy-following) and aggregation
"""

from .data_structures import EpisodeResult, MonteCarloSummary, PathAnalysis, PathCount
from .sampling import make_rng, spawn_rngs, sample_outcome, uniform_choice
from .simulation import (
    simulate_episode,
    simulate_policy_episode,
    estimate_policy_value,
    run_monte_carlo,
)

__all__ = [
    # Data structures
    "EpisodeResult",
    "MonteCarloSummary",
    "PathAnalysis",
    "PathCount",
    # Sampling
    "make_rng",
    "spawn_rngs",
    "sample_outcome",
    "uniform_choice",
    # Simulation
    "simulate_episode",
    "simulate_policy_episode",
    "estimate_policy_value",
    "run_monte_carlo",
]
