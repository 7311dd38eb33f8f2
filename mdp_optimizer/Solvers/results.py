"""Result types returned by solvers and the robust orchestrator.

Every result carries a ``kind`` discriminant: ``"basic"`` for a single
solver's output and ``"robust"`` for the orchestrator's validated choice.
Algorithm-specific subclasses add fields but keep ``kind == "basic"``.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

BASIC = "basic"
ROBUST = "robust"

Policy = Dict[Any, Any]
ValueFunction = Dict[Any, float]
QTable = Dict[Any, Dict[Any, float]]


@dataclass
class OptimizationResult:
    """Output shared by every solver.

    Attributes
    ----------
    best_policy : dict
        State -> chosen action; states without actions are omitted
    best_value : float
        Maximum over the value function (or the solver's own best estimate)
    iterations : int
        Iterations or episodes actually performed
    convergence_history : list of float
        One entry per iteration (delta, or per-episode reward for learners)
    policy_history : list of dict
        Policy snapshots, at minimum the final policy
    value_function : dict
        State -> estimated discounted return
    method : str
        Display name of the producing solver
    """
    best_policy: Policy
    best_value: float
    iterations: int
    convergence_history: List[float] = field(default_factory=list)
    policy_history: List[Policy] = field(default_factory=list)
    value_function: ValueFunction = field(default_factory=dict)
    method: str = ""
    kind: str = field(default=BASIC, init=False)


@dataclass
class ValueIterationResult(OptimizationResult):
    delta_history: List[float] = field(default_factory=list)


@dataclass
class PolicyIterationResult(OptimizationResult):
    delta_history: List[float] = field(default_factory=list)


@dataclass
class QLearningResult(OptimizationResult):
    """Result of Q-learning or SARSA."""
    q_table: QTable = field(default_factory=dict)
    learning_curve: List[float] = field(default_factory=list)


@dataclass
class ActorCriticResult(OptimizationResult):
    preferences: QTable = field(default_factory=dict)
    learning_curve: List[float] = field(default_factory=list)


@dataclass
class TDLambdaResult(OptimizationResult):
    eligibility_traces: ValueFunction = field(default_factory=dict)
    learning_curve: List[float] = field(default_factory=list)


@dataclass
class ValidationResults:
    """Empirical performance of a policy measured by simulation.

    Attributes
    ----------
    mc_reward : float
        Mean discounted return
    mc_std_dev : float
        Population standard deviation of the return
    success_rate : float
        Fraction of episodes with strictly positive return
    path_efficiency : float
        mc_reward divided by the heuristic mean path length
    mean_steps : float
        Realised mean episode length
    episodes : int
        Number of validation episodes
    success_rate_ci : tuple of float
        Clopper-Pearson 95% interval on success_rate
    """
    mc_reward: float
    mc_std_dev: float
    success_rate: float
    path_efficiency: float
    mean_steps: float = 0.0
    episodes: int = 0
    success_rate_ci: Tuple[float, float] = (0.0, 1.0)


@dataclass
class CandidateResult:
    """A solver output together with its validation and composite score."""
    method: str
    result: OptimizationResult
    validation: ValidationResults
    score: float


@dataclass
class MethodFailure:
    method: str
    error: str


@dataclass
class RobustOptimizationResult(OptimizationResult):
    """The orchestrator's validated pick among several solvers."""
    actual_performance: float = 0.0
    confidence: float = 0.0
    validation_results: Optional[ValidationResults] = None
    # The winning candidate, whose result keeps solver-specific fields
    # such as q_table, delta_history or learning_curve.
    best_candidate: Optional[CandidateResult] = None
    candidates: List[CandidateResult] = field(default_factory=list)
    failures: List[MethodFailure] = field(default_factory=list)
    kind: str = field(default=ROBUST, init=False)


def summarize_result(result: OptimizationResult) -> Dict[str, Any]:
    """Flatten a result into display-ready key/value pairs.

    Raises
    ------
    ValueError
        If result.kind is not a known discriminant.
    """
    summary: Dict[str, Any] = {
        "method": result.method,
        "best_value": result.best_value,
        "iterations": result.iterations,
        "policy": dict(result.best_policy),
    }
    if result.kind == BASIC:
        return summary
    elif result.kind == ROBUST:
        validation = result.validation_results
        summary.update({
            "actual_performance": result.actual_performance,
            "confidence": result.confidence,
            "mc_reward": validation.mc_reward if validation else None,
            "mc_std_dev": validation.mc_std_dev if validation else None,
            "success_rate": validation.success_rate if validation else None,
            "path_efficiency": validation.path_efficiency if validation else None,
            "candidates": {c.method: c.score for c in result.candidates},
        })
        return summary
    raise ValueError(f"Unknown result kind: {result.kind}")
