"""Core Monte Carlo simulation functions.

This module provides the low-level functions for rolling out episodes of an
MDP, either under uniformly random action choice or under a fixed policy,
and for aggregating many episodes into a MonteCarloSummary.
"""

from typing import Any, Dict, List, Optional

import numpy as np

from ..Models.mdp import MDP, Action, State
from .data_structures import EpisodeResult, MonteCarloSummary, PathAnalysis, PathCount
from .sampling import RngLike, make_rng, sample_outcome, uniform_choice

# Discount used when neither the MDP nor the caller supplies one.
SIMULATION_GAMMA = 1.0
POLICY_GAMMA = 0.9


def simulate_episode(
    mdp: MDP,
    start_state: State,
    max_steps: int = 100,
    rng: RngLike = None,
) -> EpisodeResult:
    """Roll out one episode choosing uniformly among available actions.

    Terminates when max_steps is reached, the current state has no
    available actions, or the chosen action has no outcomes.

    Parameters
    ----------
    mdp : MDP
        The model to simulate
    start_state : any
        Starting state
    max_steps : int
        Maximum number of transitions
    rng : Generator, int or None
        Random source or seed

    Returns
    -------
    EpisodeResult
        Discounted return, step count, terminal state, visits, path, actions
    """
    rng = make_rng(rng)
    gamma = mdp.gamma if mdp.gamma is not None else SIMULATION_GAMMA

    s = start_state
    reward_sum = 0.0
    discount = 1.0
    visited: Dict[State, int] = {}
    path: List[State] = [s]
    actions: List[Action] = []

    for step in range(max_steps):
        visited[s] = visited.get(s, 0) + 1

        available = mdp.available_actions(s)
        if not available:
            return EpisodeResult(reward_sum, step, s, visited, path, actions)

        a = uniform_choice(available, rng)
        outcomes = mdp.outcomes(s, a)
        if not outcomes:
            return EpisodeResult(reward_sum, step, s, visited, path, actions)

        t = sample_outcome(outcomes, rng)

        reward_sum += discount * t.reward
        discount *= gamma
        s = t.next_state
        path.append(s)
        actions.append(a)

    return EpisodeResult(reward_sum, max_steps, s, visited, path, actions)


def simulate_policy_episode(
    mdp: MDP,
    policy: Dict[State, Action],
    start_state: State,
    max_steps: int = 100,
    gamma: Optional[float] = None,
    rng: RngLike = None,
) -> EpisodeResult:
    """Roll out one episode strictly following policy.

    The episode ends early when the policy has no action for the current
    state or that action has no outcomes.
    """
    rng = make_rng(rng)
    if gamma is None:
        gamma = mdp.gamma if mdp.gamma is not None else POLICY_GAMMA

    s = start_state
    reward_sum = 0.0
    discount = 1.0
    visited: Dict[State, int] = {}
    path: List[State] = [s]
    actions: List[Action] = []

    for step in range(max_steps):
        visited[s] = visited.get(s, 0) + 1

        a = policy.get(s)
        if a is None:
            return EpisodeResult(reward_sum, step, s, visited, path, actions)

        outcomes = mdp.outcomes(s, a)
        if not outcomes:
            return EpisodeResult(reward_sum, step, s, visited, path, actions)

        t = sample_outcome(outcomes, rng)

        reward_sum += discount * t.reward
        discount *= gamma
        s = t.next_state
        path.append(s)
        actions.append(a)

    return EpisodeResult(reward_sum, max_steps, s, visited, path, actions)


def estimate_policy_value(
    mdp: MDP,
    policy: Dict[State, Action],
    start_state: State,
    episodes: int = 1000,
    max_steps: int = 100,
    gamma: Optional[float] = None,
    rng: RngLike = None,
) -> float:
    """Mean discounted return of policy from start_state over episodes rollouts."""
    if episodes <= 0:
        return 0.0
    rng = make_rng(rng)
    total = 0.0
    for _ in range(episodes):
        total += simulate_policy_episode(
            mdp, policy, start_state, max_steps=max_steps, gamma=gamma, rng=rng
        ).total_reward
    return total / episodes


def run_monte_carlo(
    mdp: MDP,
    start_state: State,
    episodes: int = 1000,
    max_steps: int = 100,
    rng: RngLike = None,
    top_k: int = 5,
) -> MonteCarloSummary:
    """Simulate many random-action episodes and aggregate their statistics.

    Parameters
    ----------
    mdp : MDP
        The model to simulate
    start_state : any
        Starting state of every episode
    episodes : int
        Number of episodes
    max_steps : int
        Maximum steps per episode
    rng : Generator, int or None
        Random source or seed
    top_k : int
        How many of the most frequent full paths to report

    Returns
    -------
    MonteCarloSummary
        Aggregated statistics
    """
    if episodes <= 0:
        return MonteCarloSummary(episodes=0, avg_total_reward=0.0, avg_steps=0.0)

    rng = make_rng(rng)

    rewards: List[float] = []
    steps: List[int] = []
    path_lengths: List[int] = []
    terminals: Dict[Any, int] = {}
    visits: Dict[Any, int] = {}
    transition_counts: Dict[str, int] = {}
    action_counts: Dict[Any, int] = {}
    path_counts: Dict[str, int] = {}

    for _ in range(episodes):
        res = simulate_episode(mdp, start_state, max_steps=max_steps, rng=rng)
        rewards.append(res.total_reward)
        steps.append(res.steps)
        path_lengths.append(len(res.path))

        terminals[res.terminal] = terminals.get(res.terminal, 0) + 1

        for st, c in res.visited.items():
            visits[st] = visits.get(st, 0) + c

        for j, action in enumerate(res.actions):
            key = f"{res.path[j]}-{action}->{res.path[j + 1]}"
            transition_counts[key] = transition_counts.get(key, 0) + 1
            action_counts[action] = action_counts.get(action, 0) + 1

        path_key = "->".join(str(st) for st in res.path)
        path_counts[path_key] = path_counts.get(path_key, 0) + 1

    # sorted() is stable, so equally frequent paths keep first-seen order
    most_common = sorted(path_counts.items(), key=lambda kv: -kv[1])[:top_k]

    return MonteCarloSummary(
        episodes=episodes,
        avg_total_reward=float(np.mean(rewards)),
        avg_steps=float(np.mean(steps)),
        terminal_dist=terminals,
        visit_counts=visits,
        rewards=rewards,
        transition_counts=transition_counts,
        action_counts=action_counts,
        path_analysis=PathAnalysis(
            avg_path_length=float(np.mean(path_lengths)),
            min_path_length=int(min(path_lengths)),
            max_path_length=int(max(path_lengths)),
            most_common_paths=[PathCount(path, count) for path, count in most_common],
        ),
    )
