"""Solver configuration and algorithm constants."""

from dataclasses import dataclass, fields, replace
from typing import Any, Dict, Optional

from ..Models.mdp import MDP

# Discount used when neither the config nor the MDP supplies one.
DEFAULT_GAMMA = 0.9

# Step size for Q-learning, SARSA and TD(lambda).
DEFAULT_LEARNING_RATE = 0.1

# Actor-critic preferences move through a softmax, so they take smaller steps.
ACTOR_CRITIC_LEARNING_RATE = 0.01

# Policy evaluation inside policy iteration stops after this many sweeps
# even if the tolerance has not been met.
POLICY_EVALUATION_SWEEPS = 100

# Every model-free episode is truncated at this many steps, independent of
# max_iterations, so that MDPs without terminal states still finish.
EPISODE_STEP_CAP = 100

# Monte Carlo policy search runs exactly this many improvement rounds and
# spends episodes // POLICY_SEARCH_ROUNDS rollouts estimating each round.
POLICY_SEARCH_ROUNDS = 50

# Rollouts used to score each alternative action during policy search.
POLICY_SEARCH_TRIAL_EPISODES = 10

# External (camelCase) names accepted by SolverConfig.from_dict.
_ALIASES = {
    "maxIterations": "max_iterations",
    "learningRate": "learning_rate",
    "lambda": "trace_decay",
    "lambda_": "trace_decay",
}

# Fields used as loop bounds; JSON numbers like 100.0 are cast.
_INTEGER_FIELDS = ("max_iterations", "episodes")


@dataclass
class SolverConfig:
    """Configuration shared by every solver.

    Attributes
    ----------
    max_iterations : int
        Sweep cap for value/policy iteration
    tolerance : float
        Convergence threshold on the max value change per sweep
    gamma : float, optional
        Discount override; falls back to the MDP's gamma, then DEFAULT_GAMMA
    learning_rate : float, optional
        Step size; each solver supplies its own default when None
    epsilon : float
        Exploration rate for epsilon-greedy selection
    episodes : int
        Episode budget for simulation-based solvers
    trace_decay : float
        Eligibility trace decay (lambda) for TD(lambda)
    """
    max_iterations: int = 1000
    tolerance: float = 1e-6
    gamma: Optional[float] = None
    learning_rate: Optional[float] = None
    epsilon: float = 0.1
    episodes: int = 1000
    trace_decay: float = 0.7

    def resolve_gamma(self, mdp: MDP) -> float:
        if self.gamma is not None:
            return self.gamma
        if mdp.gamma is not None:
            return mdp.gamma
        return DEFAULT_GAMMA

    def resolve_learning_rate(self, default: float) -> float:
        return self.learning_rate if self.learning_rate is not None else default

    def replace(self, **changes: Any) -> "SolverConfig":
        return replace(self, **changes)

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "SolverConfig":
        """Build a config from snake_case or camelCase keys.

        Raises
        ------
        ValueError
            On a key that names no configuration field.
        """
        if not data:
            return cls()
        known = {f.name for f in fields(cls)}
        kwargs = {}
        for key, value in data.items():
            name = _ALIASES.get(key, key)
            if name not in known:
                raise ValueError(f"Unknown solver config key: {key}")
            kwargs[name] = int(value) if name in _INTEGER_FIELDS else value
        return cls(**kwargs)


def as_config(config: "SolverConfig | Dict[str, Any] | None") -> SolverConfig:
    """Normalise None, a dict or a SolverConfig into a SolverConfig."""
    if config is None:
        return SolverConfig()
    if isinstance(config, SolverConfig):
        return config
    return SolverConfig.from_dict(config)
