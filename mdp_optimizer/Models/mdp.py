"""Markov Decision Process model."""

from dataclasses import dataclass, field, replace
from typing import Any, Dict, Hashable, List, Optional, Tuple

State = Hashable
Action = Hashable


@dataclass(frozen=True)
class Transition:
    """A single outcome of taking an action in a state.

    next_state: successor state (must be a member of MDP.states)
    probability: P(next_state | state, action), in [0, 1]
    reward: reward received on this outcome
    """
    next_state: State
    probability: float
    reward: float = 0.0


@dataclass
class MDP:
    """
    Finite Markov Decision Process.

    states: ordered list of all states
    actions: ordered list of all actions
    transitions: mapping (s, a) -> list of Transition outcomes
    gamma: discount factor, or None to let each call site pick its default

    A pair (s, a) missing from transitions means a is not enabled in s.
    A state with no enabled actions is terminal.
    """
    states: List[State]
    actions: List[Action]
    transitions: Dict[Tuple[State, Action], List[Transition]]
    gamma: Optional[float] = None
    _enabled: Dict[State, Tuple[Action, ...]] = field(
        init=False, repr=False, compare=False
    )

    def __post_init__(self):
        # Enumeration order follows the insertion order of transitions.
        enabled: Dict[State, List[Action]] = {}
        for (s, a) in self.transitions:
            acts = enabled.setdefault(s, [])
            if a not in acts:
                acts.append(a)
        self._enabled = {s: tuple(acts) for s, acts in enabled.items()}

    def available_actions(self, state: State) -> Tuple[Action, ...]:
        """Actions enabled in state, in deterministic enumeration order."""
        return self._enabled.get(state, ())

    def outcomes(self, state: State, action: Action) -> List[Transition]:
        """Outcome list for (state, action), empty if the pair is absent."""
        return self.transitions.get((state, action), [])

    def is_terminal(self, state: State) -> bool:
        return not self._enabled.get(state)


def mdp_with_gamma(mdp: MDP, gamma: float) -> MDP:
    """Return a copy of mdp with a different discount factor."""
    return MDP(list(mdp.states), list(mdp.actions), dict(mdp.transitions), gamma)


def scale_mdp_rewards(mdp: MDP, multiplier: float) -> MDP:
    """Return a copy of mdp with every transition reward multiplied uniformly."""
    scaled = {
        key: [replace(t, reward=t.reward * multiplier) for t in outcomes]
        for key, outcomes in mdp.transitions.items()
    }
    return MDP(list(mdp.states), list(mdp.actions), scaled, mdp.gamma)


def validate_transition_mass(mdp: MDP, tolerance: float = 1e-6) -> List[str]:
    """Check that outcome probabilities of every (s, a) pair sum to one.

    Returns a list of error messages, empty when the model is well formed.
    """
    errors = []
    for (s, a), outcomes in mdp.transitions.items():
        total = sum(t.probability for t in outcomes)
        if abs(total - 1.0) > tolerance:
            errors.append(f"{s}|{a} sums to {total}")
    return errors


def mdp_from_dict(data: Dict[str, Any]) -> MDP:
    """Build an MDP from its JSON-shaped description.

    Expected keys: "states", "actions", "transitions" (keyed by
    "{state}|{action}", each an array of {"nextState", "probability",
    "reward"?} records) and optionally "gamma".
    """
    transitions: Dict[Tuple[State, Action], List[Transition]] = {}
    for key, records in data.get("transitions", {}).items():
        if "|" not in key:
            raise ValueError(f"Transition key {key!r} is not of the form 'state|action'")
        s, a = key.split("|", 1)
        transitions[(s, a)] = [
            Transition(
                next_state=r["nextState"],
                probability=float(r["probability"]),
                reward=float(r.get("reward", 0.0) or 0.0),
            )
            for r in records
        ]

    gamma = data.get("gamma")
    return MDP(
        states=list(data["states"]),
        actions=list(data["actions"]),
        transitions=transitions,
        gamma=float(gamma) if gamma is not None else None,
    )


def mdp_to_dict(mdp: MDP) -> Dict[str, Any]:
    """Inverse of mdp_from_dict."""
    data: Dict[str, Any] = {
        "states": list(mdp.states),
        "actions": list(mdp.actions),
        "transitions": {
            f"{s}|{a}": [
                {"nextState": t.next_state, "probability": t.probability, "reward": t.reward}
                for t in outcomes
            ]
            for (s, a), outcomes in mdp.transitions.items()
        },
    }
    if mdp.gamma is not None:
        data["gamma"] = mdp.gamma
    return data
