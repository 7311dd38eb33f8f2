"""Monte Carlo policy search: hill-climbing directly in policy space."""

from typing import Any, Dict, List, Optional

import numpy as np

from ..Models.mdp import MDP, Action, State
from ..MonteCarlo.sampling import RngLike, make_rng, uniform_choice
from ..MonteCarlo.simulation import estimate_policy_value
from .config import (
    EPISODE_STEP_CAP,
    POLICY_SEARCH_ROUNDS,
    POLICY_SEARCH_TRIAL_EPISODES,
    SolverConfig,
    as_config,
)
from .progress import CancellationToken, ProgressLike, ProgressReporter
from .results import OptimizationResult
from .temporal_difference import resolve_start

MONTE_CARLO_POLICY_SEARCH = "Monte Carlo Policy Search"


def monte_carlo_policy_search(
    mdp: MDP,
    start_state: Optional[State] = None,
    config: "SolverConfig | Dict[str, Any] | None" = None,
    rng: RngLike = None,
    progress: ProgressLike = None,
    cancel_token: Optional[CancellationToken] = None,
) -> OptimizationResult:
    """Improve a random policy by simulated trial swaps.

    Each of POLICY_SEARCH_ROUNDS rounds estimates the current policy's
    return from episodes // POLICY_SEARCH_ROUNDS rollouts, then visits every
    state with more than one action and tries each alternative action with
    POLICY_SEARCH_TRIAL_EPISODES rollouts, keeping the alternative whose
    average return beats the best seen so far for that state.

    The best policy and value are the running best across rounds, not
    necessarily the last round. The value function is estimated afterwards
    by rolling out the best policy from every non-terminal state.

    Parameters
    ----------
    mdp : MDP
        The model to simulate
    start_state : any, optional
        Start of every rollout; defaults to the first state
    config : SolverConfig or dict, optional
        Uses episodes and gamma
    rng : Generator, int or None
        Random source or seed
    progress : ProgressListener or callable, optional
        Receives a ProgressEvent after every round; delta is the change in
        estimated return since the previous round
    cancel_token : CancellationToken, optional
        Checked before every round

    Returns
    -------
    OptimizationResult
        convergence_history holds the per-round average return
    """
    config = as_config(config)
    gamma = config.resolve_gamma(mdp)
    rng = make_rng(rng)
    start_state = resolve_start(mdp, start_state)
    reporter = ProgressReporter(MONTE_CARLO_POLICY_SEARCH, progress, cancel_token)

    episodes_per_round = max(1, config.episodes // POLICY_SEARCH_ROUNDS)

    def rollout(policy: Dict[State, Action], start: State, episodes: int) -> float:
        return estimate_policy_value(
            mdp, policy, start, episodes=episodes,
            max_steps=EPISODE_STEP_CAP, gamma=gamma, rng=rng,
        )

    policy: Dict[State, Action] = {}
    for s in mdp.states:
        actions = mdp.available_actions(s)
        if actions:
            policy[s] = uniform_choice(actions, rng)

    best_policy = dict(policy)
    best_reward = -np.inf
    convergence_history: List[float] = []
    policy_history: List[Dict[State, Action]] = []

    rounds = POLICY_SEARCH_ROUNDS if start_state is not None else 0
    for round_idx in range(rounds):
        if reporter.should_stop():
            break

        avg_reward = rollout(policy, start_state, episodes_per_round)
        delta = abs(avg_reward - convergence_history[-1]) if convergence_history else 0.0
        convergence_history.append(avg_reward)

        if avg_reward > best_reward:
            best_reward = avg_reward
            best_policy = dict(policy)

        for s in mdp.states:
            actions = mdp.available_actions(s)
            if len(actions) <= 1:
                continue

            best_action = policy[s]
            best_action_reward = avg_reward

            for a in actions:
                if a == policy[s]:
                    continue
                trial_policy = dict(policy)
                trial_policy[s] = a
                trial_reward = rollout(trial_policy, start_state, POLICY_SEARCH_TRIAL_EPISODES)
                if trial_reward > best_action_reward:
                    best_action = a
                    best_action_reward = trial_reward

            policy[s] = best_action

        policy_history.append(dict(policy))
        reporter.publish(round_idx, delta, {start_state: avg_reward}, policy)

    values: Dict[State, float] = {}
    for s in mdp.states:
        if s in best_policy:
            values[s] = rollout(best_policy, s, POLICY_SEARCH_TRIAL_EPISODES)
        else:
            values[s] = 0.0

    policy_history.append(dict(best_policy))

    return OptimizationResult(
        best_policy=best_policy,
        best_value=float(best_reward) if convergence_history else 0.0,
        iterations=len(convergence_history),
        convergence_history=convergence_history,
        policy_history=policy_history,
        value_function=values,
        method=MONTE_CARLO_POLICY_SEARCH,
    )
