"""Multi-objective search over solvers and their configurations.

Every iteration draws a random solver configuration, runs a randomly chosen
solver and measures five objectives, all oriented so that higher is better:

- value: best_value
- convergence: -iterations
- efficiency: best_value / max(1, iterations)
- robustness: 1 / (1 + |last convergence entry|)
- complexity: -(number of states the policy covers)

Candidates not dominated by any other get Pareto rank 1, the rest rank 2.
"""

from dataclasses import dataclass, field
from typing import Dict, List, Optional, Sequence

import numpy as np

from ..Models.mdp import MDP, State
from ..MonteCarlo.sampling import spawn_rngs
from ..Solvers.config import SolverConfig
from ..Solvers.registry import get_method
from ..Solvers.results import OptimizationResult
from .configs.base_config import OBJECTIVES, MultiObjectiveConfig
from .hyperparameter_tuning import sample_config


def objective_metrics(result: OptimizationResult) -> Dict[str, float]:
    last = result.convergence_history[-1] if result.convergence_history else 0.0
    return {
        "value": float(result.best_value),
        "convergence": -float(result.iterations),
        "efficiency": float(result.best_value) / max(1, result.iterations),
        "robustness": 1.0 / (1.0 + abs(last)),
        "complexity": -float(len(result.best_policy)),
    }


def pareto_ranks(metrics: Sequence[Dict[str, float]]) -> List[int]:
    """Rank 1 for non-dominated candidates, 2 otherwise.

    b dominates a when b is at least as good on every objective and
    strictly better on at least one.
    """
    if not metrics:
        return []
    m = np.array([[row[o] for o in OBJECTIVES] for row in metrics])
    # ge[j, i]: candidate j is at least as good as i everywhere
    ge = np.all(m[:, None, :] >= m[None, :, :], axis=2)
    gt = np.any(m[:, None, :] > m[None, :, :], axis=2)
    dominated = np.any(ge & gt, axis=0)
    return [2 if d else 1 for d in dominated]


def weighted_score(metrics: Dict[str, float], weights: Dict[str, float]) -> float:
    return float(sum(metrics[o] * weights.get(o, 0.0) for o in OBJECTIVES))


@dataclass
class MultiObjectiveCandidate:
    iteration: int
    method: str
    config: SolverConfig
    result: OptimizationResult
    metrics: Dict[str, float]
    pareto_rank: int = 0
    score: float = 0.0


@dataclass
class MultiObjectiveResult:
    candidates: List[MultiObjectiveCandidate] = field(default_factory=list)

    @property
    def pareto_front(self) -> List[MultiObjectiveCandidate]:
        return [c for c in self.candidates if c.pareto_rank == 1]

    def ranked(self) -> List[MultiObjectiveCandidate]:
        """Candidates by descending weighted score (stable on ties)."""
        return sorted(self.candidates, key=lambda c: -c.score)

    @property
    def best(self) -> Optional[MultiObjectiveCandidate]:
        ranked = self.ranked()
        return ranked[0] if ranked else None


def multi_objective_search(
    mdp: MDP,
    start_state: State,
    config: Optional[MultiObjectiveConfig] = None,
) -> MultiObjectiveResult:
    """Run config.iterations random (solver, configuration) trials and rank them.

    Parameters
    ----------
    mdp : MDP
        The model to solve
    start_state : any
        Start state for the learners
    config : MultiObjectiveConfig, optional
        Iteration count, solver pool, parameter ranges, weights and seed

    Returns
    -------
    MultiObjectiveResult
        Every candidate with its objectives, Pareto rank and weighted score
    """
    config = config if config is not None else MultiObjectiveConfig()
    sampler_rng, *run_rngs = spawn_rngs(config.seed, config.iterations + 1)

    if config.verbose:
        print("=" * 70)
        print("MULTI-OBJECTIVE SEARCH")
        print(f"Methods: {config.method_keys}")
        print(f"Iterations: {config.iterations}")
        print(f"Weights: {config.weights}")
        print("=" * 70)

    candidates: List[MultiObjectiveCandidate] = []
    for i, run_rng in enumerate(run_rngs):
        solver_config = sample_config(config.parameter_ranges, sampler_rng)
        key = config.method_keys[int(sampler_rng.integers(len(config.method_keys)))]
        method = get_method(key)
        result = method.optimize(mdp, start_state, solver_config, run_rng, None, None)
        metrics = objective_metrics(result)
        candidates.append(MultiObjectiveCandidate(
            iteration=i,
            method=method.name,
            config=solver_config,
            result=result,
            metrics=metrics,
            score=weighted_score(metrics, config.weights),
        ))

        if config.verbose:
            print(f"  Iteration {i + 1}/{config.iterations}: {method.name:<26} "
                  f"value={metrics['value']:8.3f} iterations={result.iterations}")

    for candidate, rank in zip(candidates, pareto_ranks([c.metrics for c in candidates])):
        candidate.pareto_rank = rank

    outcome = MultiObjectiveResult(candidates)
    if config.verbose:
        print(f"\nPareto front: {len(outcome.pareto_front)} of {len(candidates)} candidates")
    return outcome
