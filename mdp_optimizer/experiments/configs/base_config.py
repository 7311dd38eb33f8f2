"""Base configuration classes for experiments."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ...Solvers.config import SolverConfig, as_config
from ...Solvers.registry import METHODS

# Solvers the hyperparameter tuner and multi-objective search draw from.
TUNABLE_METHOD_KEYS = [
    "value-iteration",
    "policy-iteration",
    "q-learning",
    "sarsa",
    "actor-critic",
    "td-lambda",
]

TUNING_METRICS = ("value", "convergence", "efficiency")

OBJECTIVES = ("value", "convergence", "efficiency", "robustness", "complexity")


def _check_method(key: Optional[str]) -> None:
    if key is not None and key not in METHODS:
        raise ValueError(f"Unknown optimization method: {key}")


def _check_ranges(ranges: Dict[str, Tuple[float, float]]) -> None:
    known = set(SolverConfig.__dataclass_fields__)
    for name, (low, high) in ranges.items():
        if name not in known:
            raise ValueError(f"Unknown tunable parameter: {name}")
        if low > high:
            raise ValueError(f"Empty range for {name}: ({low}, {high})")


@dataclass
class ConfigurationSweepConfig:
    """Configuration for the discount / reward-scale sweep.

    Each gamma is tried on the base rewards and each reward scale on the
    base gamma, one variant at a time (not a cross product).
    """

    # Sweep grid
    gammas: List[float] = field(default_factory=lambda: [0.7, 0.8, 0.9, 0.95, 0.99])
    reward_scales: List[float] = field(default_factory=lambda: [0.5, 1.0, 1.5, 2.0])

    # Solver: a registry key, or None for the robust orchestrator
    method_key: Optional[str] = None
    solver_config: SolverConfig = None

    # Validation
    validation_episodes: int = 1000

    # Reproducibility and output
    seed: Optional[int] = None
    verbose: bool = False
    results_path: Optional[str] = None

    def __post_init__(self):
        self.solver_config = as_config(self.solver_config)
        _check_method(self.method_key)


@dataclass
class TuningConfig:
    """Configuration for random-search hyperparameter tuning of one solver."""

    method_key: str = "value-iteration"

    # SolverConfig field -> (low, high); episodes and max_iterations are floored
    parameter_ranges: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "gamma": (0.7, 0.99),
        "max_iterations": (100, 1000),
        "tolerance": (1e-6, 1e-4),
    })

    max_trials: int = 20
    metric: str = "value"

    seed: Optional[int] = None
    verbose: bool = False

    def __post_init__(self):
        _check_method(self.method_key)
        if self.metric not in TUNING_METRICS:
            raise ValueError(f"Unknown tuning metric: {self.metric}. "
                             f"Available: {', '.join(TUNING_METRICS)}")
        _check_ranges(self.parameter_ranges)


@dataclass
class MultiObjectiveConfig:
    """Configuration for the multi-objective (Pareto) configuration search."""

    iterations: int = 50
    method_keys: List[str] = field(default_factory=lambda: list(TUNABLE_METHOD_KEYS))

    parameter_ranges: Dict[str, Tuple[float, float]] = field(default_factory=lambda: {
        "gamma": (0.7, 1.0),
        "learning_rate": (0.01, 0.2),
        "epsilon": (0.1, 0.3),
        "episodes": (500, 1500),
        "trace_decay": (0.5, 1.0),
        "max_iterations": (100, 1000),
        "tolerance": (1e-6, 1e-6 + 1e-4),
    })

    weights: Dict[str, float] = field(default_factory=lambda: {
        "value": 0.4,
        "convergence": 0.2,
        "efficiency": 0.2,
        "robustness": 0.1,
        "complexity": 0.1,
    })

    seed: Optional[int] = None
    verbose: bool = False

    def __post_init__(self):
        if not self.method_keys:
            raise ValueError("method_keys must not be empty")
        for key in self.method_keys:
            _check_method(key)
        _check_ranges(self.parameter_ranges)
        unknown = set(self.weights) - set(OBJECTIVES)
        if unknown:
            raise ValueError(f"Unknown objectives in weights: {sorted(unknown)}")
