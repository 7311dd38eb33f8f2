"""Random-search hyperparameter tuning for a single solver."""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

import numpy as np

from ..Models.mdp import MDP, State
from ..MonteCarlo.sampling import RngLike, make_rng, spawn_rngs
from ..Solvers.config import SolverConfig
from ..Solvers.registry import run_method
from ..Solvers.results import OptimizationResult
from .configs.base_config import TuningConfig

# SolverConfig fields that take whole numbers.
INTEGER_PARAMETERS = ("episodes", "max_iterations")


def score_result(result: OptimizationResult, metric: str) -> float:
    """Score a solver result; higher is better.

    value: best_value
    convergence: -iterations (fewer is better)
    efficiency: best_value / max(1, iterations)
    """
    if metric == "value":
        return float(result.best_value)
    elif metric == "convergence":
        return -float(result.iterations)
    elif metric == "efficiency":
        return float(result.best_value) / max(1, result.iterations)
    raise ValueError(f"Unknown tuning metric: {metric}")


def sample_config(
    parameter_ranges: Dict[str, Tuple[float, float]],
    rng: RngLike = None,
    base: Optional[SolverConfig] = None,
) -> SolverConfig:
    """Draw each parameter uniformly from its [low, high) range.

    Integer parameters are floored. Parameters without a range keep their
    value from base (or the SolverConfig default).
    """
    rng = make_rng(rng)
    base = base if base is not None else SolverConfig()
    changes = {}
    for name, (low, high) in parameter_ranges.items():
        value = low + rng.random() * (high - low)
        changes[name] = int(np.floor(value)) if name in INTEGER_PARAMETERS else float(value)
    return base.replace(**changes)


@dataclass
class TuningTrial:
    trial: int
    config: SolverConfig
    result: OptimizationResult
    score: float


@dataclass
class TuningResult:
    """All trials of a tuning run and the best one (earliest on ties)."""
    method_key: str
    metric: str
    best: TuningTrial
    trials: List[TuningTrial] = field(default_factory=list)

    @property
    def scores(self) -> np.ndarray:
        return np.array([t.score for t in self.trials])

    def __str__(self) -> str:
        lines = [
            "=" * 40,
            f"Hyperparameter Tuning: {self.method_key}",
            "=" * 40,
            f"Trials:      {len(self.trials)}",
            f"Metric:      {self.metric}",
            f"Best trial:  {self.best.trial}",
            f"Best score:  {self.best.score:.4f}",
            f"Best config: {self.best.config}",
            "=" * 40,
        ]
        return "\n".join(lines)


def tune_hyperparameters(
    mdp: MDP,
    start_state: State,
    config: Optional[TuningConfig] = None,
) -> TuningResult:
    """Random search over config.parameter_ranges for config.method_key.

    Each trial samples a SolverConfig, runs the solver with its own random
    stream and scores the result with config.metric.
    """
    config = config if config is not None else TuningConfig()
    if config.max_trials <= 0:
        raise ValueError(f"max_trials must be positive, got {config.max_trials}")

    sampler_rng, *trial_rngs = spawn_rngs(config.seed, config.max_trials + 1)

    if config.verbose:
        print("=" * 70)
        print(f"HYPERPARAMETER TUNING - {config.method_key.upper()}")
        print(f"Ranges: {config.parameter_ranges}")
        print(f"Trials: {config.max_trials}, metric: {config.metric}")
        print("=" * 70)

    trials: List[TuningTrial] = []
    best: Optional[TuningTrial] = None

    for i, trial_rng in enumerate(trial_rngs):
        solver_config = sample_config(config.parameter_ranges, sampler_rng)
        result = run_method(config.method_key, mdp, start_state, solver_config, trial_rng)
        trial = TuningTrial(i, solver_config, result, score_result(result, config.metric))
        trials.append(trial)

        if best is None or trial.score > best.score:
            best = trial

        if config.verbose:
            print(f"  Trial {i + 1}/{config.max_trials}: score={trial.score:.4f} "
                  f"(best={best.score:.4f})")

    tuning = TuningResult(config.method_key, config.metric, best, trials)
    if config.verbose:
        print(tuning)
    return tuning
