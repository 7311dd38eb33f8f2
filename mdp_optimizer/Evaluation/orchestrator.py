"""Robust optimization: run several solvers, validate each, keep the best.

Solvers can disagree or fail on awkward models (ties, unreachable states,
sparse rewards). The orchestrator runs each of a fixed set of methods on
the same model, validates every returned policy by simulation, ranks the
candidates by composite score and reports the winner with a confidence
score.
"""

from typing import Any, Dict, List, Optional, Sequence
import logging

from ..Models.mdp import MDP, State
from ..MonteCarlo.sampling import RngLike, spawn_rngs
from ..Solvers.config import SolverConfig, as_config
from ..Solvers.progress import CancellationToken, ProgressLike, as_listener
from ..Solvers.registry import ROBUST_METHOD_KEYS, get_method
from ..Solvers.results import CandidateResult, MethodFailure, RobustOptimizationResult
from .metrics import calculate_confidence, composite_score
from .validator import validate_policy_with_monte_carlo

logger = logging.getLogger(__name__)


class NoOptimizationMethodSucceeded(RuntimeError):
    """Raised when every candidate method failed, leaving nothing to choose."""

    def __init__(self, failures: Sequence[MethodFailure] = ()):
        self.failures = list(failures)
        detail = "; ".join(f"{f.method}: {f.error}" for f in self.failures)
        message = "No optimization methods succeeded"
        super().__init__(f"{message} ({detail})" if detail else message)


def select_best(candidates: Sequence[CandidateResult]) -> CandidateResult:
    """Highest-scoring candidate; the earliest wins ties."""
    if not candidates:
        raise NoOptimizationMethodSucceeded()
    best = candidates[0]
    for candidate in candidates[1:]:
        if candidate.score > best.score:
            best = candidate
    return best


def robust_optimize_mdp(
    mdp: MDP,
    start_state: State,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    method_keys: Sequence[str] = ROBUST_METHOD_KEYS,
    validation_episodes: int = 1000,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> RobustOptimizationResult:
    """Run, validate and rank several solvers on one MDP.

    Methods run sequentially, each with its own random stream spawned from
    rng, so results do not depend on the order or number of methods. A
    method that raises is logged and recorded as a MethodFailure; it does
    not stop the others.

    Parameters
    ----------
    mdp : MDP
        The model to solve
    start_state : any
        Start state for learners and for validation
    config : SolverConfig or dict, optional
        Shared solver configuration
    rng : Generator, int or None
        Random source or seed
    method_keys : sequence of str
        Registry keys of the methods to compare
    validation_episodes : int
        Episodes per policy validation
    progress : ProgressListener or callable, optional
        Forwarded to every solver; events carry the solver's name
    cancel_token : CancellationToken, optional
        Forwarded to every solver

    Returns
    -------
    RobustOptimizationResult
        The winning solver's result with its validation, confidence, and
        every candidate and failure

    Raises
    ------
    NoOptimizationMethodSucceeded
        If every method failed.
    """
    config = as_config(config)
    listener = as_listener(progress)
    methods = [get_method(key) for key in method_keys]
    streams = spawn_rngs(rng, len(methods))

    candidates: List[CandidateResult] = []
    failures: List[MethodFailure] = []

    for method, stream in zip(methods, streams):
        solve_rng, validation_rng = spawn_rngs(stream, 2)
        logger.info("Trying %s...", method.name)
        try:
            result = method.optimize(mdp, start_state, config, solve_rng, listener, cancel_token)
            validation = validate_policy_with_monte_carlo(
                mdp, result.best_policy, start_state,
                episodes=validation_episodes, rng=validation_rng,
            )
        except Exception as exc:
            logger.warning("%s failed: %s", method.name, exc)
            failures.append(MethodFailure(method.name, f"{type(exc).__name__}: {exc}"))
            continue

        candidates.append(CandidateResult(
            method=method.name,
            result=result,
            validation=validation,
            score=composite_score(validation),
        ))

    if not candidates:
        raise NoOptimizationMethodSucceeded(failures)

    best = select_best(candidates)
    chosen = best.result

    return RobustOptimizationResult(
        best_policy=chosen.best_policy,
        best_value=chosen.best_value,
        iterations=chosen.iterations,
        convergence_history=chosen.convergence_history,
        policy_history=chosen.policy_history,
        value_function=chosen.value_function,
        method=best.method,
        actual_performance=best.validation.mc_reward,
        confidence=calculate_confidence(best.validation),
        validation_results=best.validation,
        best_candidate=best,
        candidates=candidates,
        failures=failures,
    )
