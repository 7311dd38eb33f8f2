"""Registry giving every solver one call signature.

Each OptimizationMethod.optimize takes
(mdp, start_state, config, rng, progress, cancel_token) regardless of
whether the underlying algorithm needs a start state or randomness.
"""

from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Tuple

from ..Models.mdp import MDP, State
from ..MonteCarlo.sampling import RngLike
from .actor_critic import actor_critic
from .config import SolverConfig
from .dynamic_programming import policy_iteration, value_iteration
from .policy_search import monte_carlo_policy_search
from .progress import CancellationToken, ProgressLike
from .results import OptimizationResult
from .temporal_difference import q_learning, sarsa, td_lambda


@dataclass(frozen=True)
class OptimizationMethod:
    key: str
    name: str
    description: str
    optimize: Callable[..., OptimizationResult]


METHODS: Dict[str, OptimizationMethod] = {
    m.key: m for m in [
        OptimizationMethod(
            "value-iteration", "Value Iteration",
            "Classical dynamic programming approach",
            lambda mdp, start, config, rng, progress, cancel:
                value_iteration(mdp, config, progress, cancel),
        ),
        OptimizationMethod(
            "policy-iteration", "Policy Iteration",
            "Iterative policy improvement",
            lambda mdp, start, config, rng, progress, cancel:
                policy_iteration(mdp, config, rng, progress, cancel),
        ),
        OptimizationMethod(
            "q-learning", "Q-Learning",
            "Model-free off-policy reinforcement learning",
            q_learning,
        ),
        OptimizationMethod(
            "sarsa", "SARSA",
            "Model-free on-policy reinforcement learning",
            sarsa,
        ),
        OptimizationMethod(
            "actor-critic", "Actor-Critic",
            "Softmax policy gradient with a learned critic",
            actor_critic,
        ),
        OptimizationMethod(
            "td-lambda", "TD(lambda)",
            "Value prediction with eligibility traces",
            td_lambda,
        ),
        OptimizationMethod(
            "monte-carlo-policy-search", "Monte Carlo Policy Search",
            "Direct policy optimization via simulation",
            monte_carlo_policy_search,
        ),
    ]
}

# Methods the robust orchestrator compares.
ROBUST_METHOD_KEYS: Tuple[str, ...] = (
    "value-iteration",
    "policy-iteration",
    "q-learning",
    "monte-carlo-policy-search",
)


def get_method(key: str) -> OptimizationMethod:
    if key not in METHODS:
        raise ValueError(f"Unknown optimization method: {key}. "
                         f"Available: {', '.join(METHODS)}")
    return METHODS[key]


def run_method(
    key: str,
    mdp: MDP,
    start_state: Optional[State] = None,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> OptimizationResult:
    """Run the solver registered under key."""
    return get_method(key).optimize(mdp, start_state, config, rng, progress, cancel_token)
