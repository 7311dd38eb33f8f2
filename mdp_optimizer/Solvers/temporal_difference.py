"""Model-free temporal-difference solvers: Q-learning, SARSA and TD(lambda).

All three learn from episodes sampled from start_state, each truncated at
EPISODE_STEP_CAP steps. The learning curve records the undiscounted reward
collected per episode.
"""

from typing import Any, Dict, List, Optional

from ..Models.mdp import MDP, Action, State
from ..MonteCarlo.sampling import RngLike, make_rng, sample_outcome, uniform_choice
from .bellman import best_of, epsilon_greedy, greedy_policy, table_policy
from .config import DEFAULT_LEARNING_RATE, EPISODE_STEP_CAP, SolverConfig, as_config
from .progress import CancellationToken, ProgressLike, ProgressReporter
from .results import QLearningResult, TDLambdaResult

Q_LEARNING = "Q-Learning"
SARSA = "SARSA"
TD_LAMBDA = "TD(lambda)"


def init_q_table(mdp: MDP) -> Dict[State, Dict[Action, float]]:
    """Zero Q-value for every (state, action) pair present in transitions.

    States without actions still get an (empty) row.
    """
    q_table: Dict[State, Dict[Action, float]] = {s: {} for s in mdp.states}
    for (s, a) in mdp.transitions:
        q_table.setdefault(s, {})[a] = 0.0
    return q_table


def q_values_to_value_function(
    mdp: MDP, q_table: Dict[State, Dict[Action, float]]
) -> Dict[State, float]:
    """V(s) = max_a Q(s, a), 0 for terminal states."""
    values = {}
    for s in mdp.states:
        row = q_table.get(s, {})
        actions = mdp.available_actions(s)
        values[s] = max(row.get(a, 0.0) for a in actions) if actions else 0.0
    return values


def resolve_start(mdp: MDP, start_state: Optional[State]) -> Optional[State]:
    """The given start state, else the first state, else None for an MDP
    without states. Episode loops are skipped when this returns None.
    """
    if start_state is not None:
        return start_state
    return mdp.states[0] if mdp.states else None


def q_learning(
    mdp: MDP,
    start_state: Optional[State] = None,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> QLearningResult:
    """Off-policy TD control.

    Per step: pick an epsilon-greedy action, sample the outcome, then
    Q(s,a) += alpha * (r + gamma * max_a' Q(s',a') - Q(s,a)).

    Parameters
    ----------
    mdp : MDP
        The model to sample from
    start_state : any, optional
        Start of every episode; defaults to the first state
    config : SolverConfig or dict, optional
        Uses episodes, learning_rate (default 0.1), epsilon and gamma
    rng : Generator, int or None
        Random source or seed
    progress : ProgressListener or callable, optional
        Receives a ProgressEvent after every episode; delta is the largest
        absolute Q update of the episode
    cancel_token : CancellationToken, optional
        Checked before every episode

    Returns
    -------
    QLearningResult
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    alpha = config.resolve_learning_rate(DEFAULT_LEARNING_RATE)
    rng = make_rng(rng)
    start_state = resolve_start(mdp, start_state)
    reporter = ProgressReporter(Q_LEARNING, progress, cancel_token)

    q_table = init_q_table(mdp)
    learning_curve: List[float] = []

    for episode in range(config.episodes if start_state is not None else 0):
        if reporter.should_stop():
            break

        state = start_state
        total_reward = 0.0
        max_update = 0.0

        for _ in range(EPISODE_STEP_CAP):
            actions = mdp.available_actions(state)
            if not actions:
                break

            action = epsilon_greedy(q_table[state], actions, config.epsilon, rng)
            outcomes = mdp.outcomes(state, action)
            if not outcomes:
                break

            t = sample_outcome(outcomes, rng)
            next_state = t.next_state

            next_actions = mdp.available_actions(next_state)
            next_row = q_table.get(next_state, {})
            max_next_q = max(next_row.get(a, 0.0) for a in next_actions) if next_actions else 0.0

            current = q_table[state][action]
            update = alpha * (t.reward + gamma * max_next_q - current)
            q_table[state][action] = current + update
            max_update = max(max_update, abs(update))

            total_reward += t.reward
            state = next_state

        learning_curve.append(total_reward)

        if reporter.active:
            reporter.publish(
                episode, max_update,
                q_values_to_value_function(mdp, q_table), table_policy(mdp, q_table),
            )

    return _q_result(mdp, q_table, learning_curve, Q_LEARNING)


def sarsa(
    mdp: MDP,
    start_state: Optional[State] = None,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> QLearningResult:
    """On-policy TD control.

    The next action is chosen epsilon-greedily before the update, and the
    target uses Q(s', a') for that action rather than the max.
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    alpha = config.resolve_learning_rate(DEFAULT_LEARNING_RATE)
    rng = make_rng(rng)
    start_state = resolve_start(mdp, start_state)
    reporter = ProgressReporter(SARSA, progress, cancel_token)

    q_table = init_q_table(mdp)
    learning_curve: List[float] = []

    for episode in range(config.episodes if start_state is not None else 0):
        if reporter.should_stop():
            break

        state = start_state
        total_reward = 0.0
        max_update = 0.0

        actions = mdp.available_actions(state)
        action = epsilon_greedy(q_table[state], actions, config.epsilon, rng) if actions else None

        for _ in range(EPISODE_STEP_CAP):
            if action is None:
                break
            outcomes = mdp.outcomes(state, action)
            if not outcomes:
                break

            t = sample_outcome(outcomes, rng)
            next_state = t.next_state

            next_actions = mdp.available_actions(next_state)
            if next_actions:
                next_action = epsilon_greedy(
                    q_table.setdefault(next_state, {}), next_actions, config.epsilon, rng
                )
                next_q = q_table[next_state].get(next_action, 0.0)
            else:
                next_action = None
                next_q = 0.0

            current = q_table[state][action]
            update = alpha * (t.reward + gamma * next_q - current)
            q_table[state][action] = current + update
            max_update = max(max_update, abs(update))

            total_reward += t.reward
            state, action = next_state, next_action

        learning_curve.append(total_reward)

        if reporter.active:
            reporter.publish(
                episode, max_update,
                q_values_to_value_function(mdp, q_table), table_policy(mdp, q_table),
            )

    return _q_result(mdp, q_table, learning_curve, SARSA)


def _q_result(
    mdp: MDP,
    q_table: Dict[State, Dict[Action, float]],
    learning_curve: List[float],
    method: str,
) -> QLearningResult:
    policy = table_policy(mdp, q_table)
    values = q_values_to_value_function(mdp, q_table)
    return QLearningResult(
        best_policy=policy,
        best_value=best_of(values),
        iterations=len(learning_curve),
        convergence_history=list(learning_curve),
        policy_history=[dict(policy)],
        value_function=values,
        method=method,
        q_table=q_table,
        learning_curve=learning_curve,
    )


def td_lambda(
    mdp: MDP,
    start_state: Optional[State] = None,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> TDLambdaResult:
    """TD(lambda) prediction with accumulating eligibility traces.

    Actions are drawn uniformly at random, so the learned values describe
    the random policy. The reported policy is derived afterwards by one-step
    lookahead over those values.

    Per step: delta = r + gamma V(s') - V(s); e(s) += 1; then for every
    state with a positive trace V += alpha * delta * e and
    e *= gamma * lambda. Traces reset at the start of each episode.
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    alpha = config.resolve_learning_rate(DEFAULT_LEARNING_RATE)
    decay = gamma * config.trace_decay
    rng = make_rng(rng)
    start_state = resolve_start(mdp, start_state)
    reporter = ProgressReporter(TD_LAMBDA, progress, cancel_token)

    values: Dict[State, float] = {s: 0.0 for s in mdp.states}
    traces: Dict[State, float] = {s: 0.0 for s in mdp.states}
    learning_curve: List[float] = []

    for episode in range(config.episodes if start_state is not None else 0):
        if reporter.should_stop():
            break

        traces = {s: 0.0 for s in mdp.states}
        state = start_state
        total_reward = 0.0
        max_update = 0.0

        for _ in range(EPISODE_STEP_CAP):
            actions = mdp.available_actions(state)
            if not actions:
                break

            action = uniform_choice(actions, rng)
            outcomes = mdp.outcomes(state, action)
            if not outcomes:
                break

            t = sample_outcome(outcomes, rng)
            next_state = t.next_state

            td_error = t.reward + gamma * values.get(next_state, 0.0) - values.get(state, 0.0)
            traces[state] = traces.get(state, 0.0) + 1.0

            for s, e in traces.items():
                if e <= 0.0:
                    continue
                update = alpha * td_error * e
                values[s] = values.get(s, 0.0) + update
                max_update = max(max_update, abs(update))
                traces[s] = e * decay

            total_reward += t.reward
            state = next_state

        learning_curve.append(total_reward)

        if reporter.active:
            reporter.publish(episode, max_update, values, greedy_policy(mdp, values, gamma))

    policy = greedy_policy(mdp, values, gamma)

    return TDLambdaResult(
        best_policy=policy,
        best_value=best_of(values),
        iterations=len(learning_curve),
        convergence_history=list(learning_curve),
        policy_history=[dict(policy)],
        value_function=values,
        method=TD_LAMBDA,
        eligibility_traces=dict(traces),
        learning_curve=learning_curve,
    )
