"""Shared pytest fixtures: small hand-checkable MDPs."""

import pytest

from .Models import MDP, Transition


@pytest.fixture
def chain_mdp():
    """A -> B -> C, deterministic, reward 1 then 10, C absorbing."""
    return MDP(
        states=["A", "B", "C"],
        actions=["go"],
        transitions={
            ("A", "go"): [Transition("B", 1.0, 1.0)],
            ("B", "go"): [Transition("C", 1.0, 10.0)],
        },
        gamma=0.9,
    )


@pytest.fixture
def dominant_mdp():
    """Two states; from S the action "good" strictly dominates "bad"."""
    return MDP(
        states=["S", "T"],
        actions=["bad", "good"],
        transitions={
            ("S", "bad"): [Transition("T", 1.0, 1.0)],
            ("S", "good"): [Transition("T", 1.0, 10.0)],
        },
        gamma=0.9,
    )


@pytest.fixture
def absorbing_mdp():
    """A single state with no outgoing transitions."""
    return MDP(states=["X"], actions=["stay"], transitions={}, gamma=0.9)


@pytest.fixture
def gridlike_mdp():
    """Stochastic four-state MDP with a risky shortcut and a safe detour.

    From start, "risky" reaches goal directly 50% of the time and falls into
    pit otherwise; "safe" goes to mid, from which "advance" reaches goal.
    """
    return MDP(
        states=["start", "mid", "goal", "pit"],
        actions=["risky", "safe", "advance"],
        transitions={
            ("start", "risky"): [
                Transition("goal", 0.5, 10.0),
                Transition("pit", 0.5, -10.0),
            ],
            ("start", "safe"): [Transition("mid", 1.0, 0.0)],
            ("mid", "advance"): [
                Transition("goal", 0.9, 10.0),
                Transition("mid", 0.1, 0.0),
            ],
        },
        gamma=0.95,
    )
