"""Finite Markov Decision Process model."""

from .mdp import (
    MDP,
    Transition,
    State,
    Action,
    mdp_with_gamma,
    scale_mdp_rewards,
    validate_transition_mass,
    mdp_from_dict,
    mdp_to_dict,
)

__all__ = [
    'MDP', 'Transition', 'State', 'Action',
    'mdp_with_gamma', 'scale_mdp_rewards', 'validate_transition_mass',
    'mdp_from_dict', 'mdp_to_dict',
]
