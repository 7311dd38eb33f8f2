"""Dynamic-programming and reinforcement-learning solvers for finite MDPs.

Modules
-------
config
    SolverConfig and named algorithm constants
results
    Result dataclasses (basic and robust variants)
progress
    Progress events, listeners, bounded channel and cancellation
bellman
    One-step lookahead and greedy/epsilon-greedy helpers
dynamic_programming
    Value iteration and policy iteration
temporal_difference
    Q-learning, SARSA and TD(lambda)
actor_critic
    Tabular softmax actor-critic
policy_search
    Monte Carlo policy search
registry
    Uniform access to every solver by key
"""

from .config import (
    SolverConfig,
    as_config,
    DEFAULT_GAMMA,
    DEFAULT_LEARNING_RATE,
    ACTOR_CRITIC_LEARNING_RATE,
    POLICY_EVALUATION_SWEEPS,
    EPISODE_STEP_CAP,
    POLICY_SEARCH_ROUNDS,
    POLICY_SEARCH_TRIAL_EPISODES,
)
from .results import (
    OptimizationResult,
    ValueIterationResult,
    PolicyIterationResult,
    QLearningResult,
    ActorCriticResult,
    TDLambdaResult,
    ValidationResults,
    CandidateResult,
    MethodFailure,
    RobustOptimizationResult,
    summarize_result,
)
from .progress import (
    ProgressEvent,
    ProgressListener,
    ProgressChannel,
    CallbackListener,
    CancellationToken,
)
from .bellman import action_value, greedy_action, greedy_policy
from .dynamic_programming import value_iteration, policy_iteration, evaluate_policy
from .temporal_difference import q_learning, sarsa, td_lambda
from .actor_critic import actor_critic
from .policy_search import monte_carlo_policy_search
from .registry import OptimizationMethod, METHODS, ROBUST_METHOD_KEYS, get_method, run_method

__all__ = [
    # Configuration
    "SolverConfig",
    "as_config",
    "DEFAULT_GAMMA",
    "DEFAULT_LEARNING_RATE",
    "ACTOR_CRITIC_LEARNING_RATE",
    "POLICY_EVALUATION_SWEEPS",
    "EPISODE_STEP_CAP",
    "POLICY_SEARCH_ROUNDS",
    "POLICY_SEARCH_TRIAL_EPISODES",
    # Results
    "OptimizationResult",
    "ValueIterationResult",
    "PolicyIterationResult",
    "QLearningResult",
    "ActorCriticResult",
    "TDLambdaResult",
    "ValidationResults",
    "CandidateResult",
    "MethodFailure",
    "RobustOptimizationResult",
    "summarize_result",
    # Progress
    "ProgressEvent",
    "ProgressListener",
    "ProgressChannel",
    "CallbackListener",
    "CancellationToken",
    # Helpers
    "action_value",
    "greedy_action",
    "greedy_policy",
    # Solvers
    "value_iteration",
    "policy_iteration",
    "evaluate_policy",
    "q_learning",
    "sarsa",
    "td_lambda",
    "actor_critic",
    "monte_carlo_policy_search",
    # Registry
    "OptimizationMethod",
    "METHODS",
    "ROBUST_METHOD_KEYS",
    "get_method",
    "run_method",
]
