"""Model-based solvers: value iteration and policy iteration."""

from typing import Any, Dict, Optional, Tuple

from ..Models.mdp import MDP, Action, State
from ..MonteCarlo.sampling import RngLike, make_rng, uniform_choice
from .bellman import action_value, best_of, greedy_action, greedy_policy
from .config import POLICY_EVALUATION_SWEEPS, SolverConfig, as_config
from .progress import CancellationToken, ProgressLike, ProgressReporter
from .results import PolicyIterationResult, ValueIterationResult

VALUE_ITERATION = "Value Iteration"
POLICY_ITERATION = "Policy Iteration"


def value_iteration(
    mdp: MDP,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ValueIterationResult:
    """Solve the Bellman optimality equation by in-place sweeps.

    Each sweep updates V(s) = max_a sum_o P(o) (r(o) + gamma V(next(o)))
    state by state, reusing values already updated in the same sweep.
    Stops when the largest change in a sweep drops below tolerance or after
    max_iterations sweeps. The policy is extracted greedily from the final
    value function with ties going to the first enumerated action.

    Parameters
    ----------
    mdp : MDP
        The model to solve
    config : SolverConfig or dict, optional
        Uses max_iterations, tolerance and gamma
    progress : ProgressListener or callable, optional
        Receives a ProgressEvent after every sweep
    cancel_token : CancellationToken, optional
        Checked before every sweep

    Returns
    -------
    ValueIterationResult
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    reporter = ProgressReporter(VALUE_ITERATION, progress, cancel_token)

    values: Dict[State, float] = {s: 0.0 for s in mdp.states}
    delta_history = []

    for iteration in range(config.max_iterations):
        if reporter.should_stop():
            break

        delta = 0.0
        for s in mdp.states:
            actions = mdp.available_actions(s)
            if not actions:
                continue
            best = max(action_value(mdp, s, a, values, gamma) for a in actions)
            delta = max(delta, abs(best - values[s]))
            values[s] = best

        delta_history.append(delta)

        if reporter.active:
            reporter.publish(iteration, delta, values, greedy_policy(mdp, values, gamma))

        if delta < config.tolerance:
            break

    policy = greedy_policy(mdp, values, gamma)

    return ValueIterationResult(
        best_policy=policy,
        best_value=best_of(values),
        iterations=len(delta_history),
        convergence_history=list(delta_history),
        policy_history=[dict(policy)],
        value_function=values,
        method=VALUE_ITERATION,
        delta_history=delta_history,
    )


def evaluate_policy(
    mdp: MDP,
    policy: Dict[State, Action],
    gamma: float,
    tolerance: float,
    max_sweeps: int = POLICY_EVALUATION_SWEEPS,
) -> Tuple[Dict[State, float], float]:
    """Iterative policy evaluation from an all-zero value function.

    Returns the value function and the delta of the last sweep performed.
    """
    values: Dict[State, float] = {s: 0.0 for s in mdp.states}
    delta = 0.0
    for _ in range(max_sweeps):
        delta = 0.0
        for s in mdp.states:
            a = policy.get(s)
            if a is None:
                continue
            new_value = action_value(mdp, s, a, values, gamma)
            delta = max(delta, abs(new_value - values[s]))
            values[s] = new_value
        if delta < tolerance:
            break
    return values, delta


def policy_iteration(
    mdp: MDP,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> PolicyIterationResult:
    """Alternate policy evaluation and greedy improvement until stable.

    Starts from a uniformly random policy. Evaluation runs at most
    POLICY_EVALUATION_SWEEPS sweeps; improvement re-picks every state's
    greedy action. Terminates when an improvement pass changes nothing or
    after max_iterations outer rounds.
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    rng = make_rng(rng)
    reporter = ProgressReporter(POLICY_ITERATION, progress, cancel_token)

    policy: Dict[State, Action] = {}
    for s in mdp.states:
        actions = mdp.available_actions(s)
        if actions:
            policy[s] = uniform_choice(actions, rng)

    values: Dict[State, float] = {s: 0.0 for s in mdp.states}
    policy_history = []
    delta_history = []

    for iteration in range(config.max_iterations):
        if reporter.should_stop():
            break

        values, delta = evaluate_policy(mdp, policy, gamma, config.tolerance)

        stable = True
        for s in mdp.states:
            best = greedy_action(mdp, s, values, gamma)
            if best is None:
                continue
            if policy.get(s) != best:
                policy[s] = best
                stable = False

        policy_history.append(dict(policy))
        delta_history.append(delta)
        reporter.publish(iteration, delta, values, policy)

        if stable:
            break

    if not policy_history:
        policy_history.append(dict(policy))

    return PolicyIterationResult(
        best_policy=dict(policy),
        best_value=best_of(values),
        iterations=len(delta_history),
        convergence_history=list(delta_history),
        policy_history=policy_history,
        value_function=values,
        method=POLICY_ITERATION,
        delta_history=delta_history,
    )
