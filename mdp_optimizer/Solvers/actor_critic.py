"""One-step actor-critic with a tabular softmax actor."""

from typing import Any, Dict, List, Optional, Sequence

import numpy as np

from ..Models.mdp import MDP, Action, State
from ..MonteCarlo.sampling import RngLike, make_rng, sample_outcome
from .bellman import best_of, table_policy
from .config import ACTOR_CRITIC_LEARNING_RATE, EPISODE_STEP_CAP, SolverConfig, as_config
from .progress import CancellationToken, ProgressLike, ProgressReporter
from .results import ActorCriticResult
from .temporal_difference import init_q_table, resolve_start

ACTOR_CRITIC = "Actor-Critic"


def softmax(preferences: Sequence[float]) -> np.ndarray:
    """Numerically stable softmax (max preference subtracted first)."""
    prefs = np.asarray(preferences, dtype=float)
    exp = np.exp(prefs - prefs.max())
    return exp / exp.sum()


def actor_critic(
    mdp: MDP,
    start_state: Optional[State] = None,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> ActorCriticResult:
    """Learn action preferences (actor) and state values (critic).

    Actions are sampled from softmax(preferences[s]). After each step the
    TD error delta = r + gamma V(s') - V(s) moves the critic by
    alpha * delta and every preference of s by
    alpha * delta * (1[a == chosen] - pi(a|s)).

    The reported policy is the highest-preference action per state.
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    alpha = config.resolve_learning_rate(ACTOR_CRITIC_LEARNING_RATE)
    rng = make_rng(rng)
    start_state = resolve_start(mdp, start_state)
    reporter = ProgressReporter(ACTOR_CRITIC, progress, cancel_token)

    preferences = init_q_table(mdp)
    values: Dict[State, float] = {s: 0.0 for s in mdp.states}
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

            row = preferences[state]
            probs = softmax([row[a] for a in actions])
            idx = int(rng.choice(len(actions), p=probs))
            action: Action = actions[idx]

            outcomes = mdp.outcomes(state, action)
            if not outcomes:
                break

            t = sample_outcome(outcomes, rng)
            next_state = t.next_state

            td_error = t.reward + gamma * values.get(next_state, 0.0) - values.get(state, 0.0)
            values[state] = values.get(state, 0.0) + alpha * td_error
            max_update = max(max_update, abs(alpha * td_error))

            for i, a in enumerate(actions):
                indicator = 1.0 if i == idx else 0.0
                row[a] += float(alpha * td_error * (indicator - probs[i]))

            total_reward += t.reward
            state = next_state

        learning_curve.append(total_reward)

        if reporter.active:
            reporter.publish(episode, max_update, values, table_policy(mdp, preferences))

    policy = table_policy(mdp, preferences)

    return ActorCriticResult(
        best_policy=policy,
        best_value=best_of(values),
        iterations=len(learning_curve),
        convergence_history=list(learning_curve),
        policy_history=[dict(policy)],
        value_function=values,
        method=ACTOR_CRITIC,
        preferences=preferences,
        learning_curve=learning_curve,
    )
