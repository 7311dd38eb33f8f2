"""One-step lookahead and greedy selection helpers shared by the solvers.

Ties are always broken by enumeration order: the first action, in the
order MDP.available_actions returns them, that attains the maximum wins.
"""

from typing import Dict, Optional, Sequence

import numpy as np

from ..Models.mdp import MDP, Action, State
from ..MonteCarlo.sampling import uniform_choice


def action_value(
    mdp: MDP,
    state: State,
    action: Action,
    values: Dict[State, float],
    gamma: float,
) -> float:
    """Expected one-step return sum_o P(o) * (r(o) + gamma * V(next(o)))."""
    total = 0.0
    for t in mdp.outcomes(state, action):
        total += t.probability * (t.reward + gamma * values.get(t.next_state, 0.0))
    return total


def greedy_action(
    mdp: MDP,
    state: State,
    values: Dict[State, float],
    gamma: float,
) -> Optional[Action]:
    """Best action in state under values, or None if state is terminal."""
    best_action = None
    best_value = -np.inf
    for a in mdp.available_actions(state):
        q = action_value(mdp, state, a, values, gamma)
        if q > best_value:
            best_value = q
            best_action = a
    return best_action


def greedy_policy(
    mdp: MDP,
    values: Dict[State, float],
    gamma: float,
) -> Dict[State, Action]:
    """Greedy policy by one-step lookahead; terminal states are omitted."""
    policy = {}
    for s in mdp.states:
        a = greedy_action(mdp, s, values, gamma)
        if a is not None:
            policy[s] = a
    return policy


def argmax_action(row: Dict[Action, float], actions: Sequence[Action]) -> Action:
    """First action in actions with the highest row value (missing -> 0)."""
    best = actions[0]
    for a in actions[1:]:
        if row.get(a, 0.0) > row.get(best, 0.0):
            best = a
    return best


def epsilon_greedy(
    row: Dict[Action, float],
    actions: Sequence[Action],
    epsilon: float,
    rng: np.random.Generator,
) -> Action:
    """Uniform random action with probability epsilon, else argmax_action."""
    if rng.random() < epsilon:
        return uniform_choice(actions, rng)
    return argmax_action(row, actions)


def table_policy(
    mdp: MDP,
    table: Dict[State, Dict[Action, float]],
) -> Dict[State, Action]:
    """Greedy policy from a per-state action table (Q-values or preferences)."""
    policy = {}
    for s in mdp.states:
        actions = mdp.available_actions(s)
        if actions:
            policy[s] = argmax_action(table.get(s, {}), actions)
    return policy


def best_of(values: Dict[State, float]) -> float:
    """Maximum of a value function, 0.0 when it is empty."""
    return float(max(values.values())) if values else 0.0
