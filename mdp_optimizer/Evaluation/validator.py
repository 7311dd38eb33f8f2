"""Monte Carlo validation of a policy, independent of any solver's estimates.

A solver's value function says what a policy should earn; the validator
measures what it does earn by following it in simulation.
"""

from typing import Dict, Optional

import numpy as np

from ..Models.mdp import MDP, Action, State
from ..MonteCarlo.sampling import RngLike, make_rng
from ..MonteCarlo.simulation import simulate_policy_episode
from ..Solvers.config import EPISODE_STEP_CAP
from ..Solvers.results import ValidationResults
from .metrics import clopper_pearson_ci

# Heuristic episode lengths used for path efficiency.
SUCCESS_PATH_LENGTH = 50
FAILURE_PATH_LENGTH = 100


def validate_policy_with_monte_carlo(
    mdp: MDP,
    policy: Dict[State, Action],
    start_state: State,
    episodes: int = 1000,
    rng: RngLike = None,
    max_steps: int = EPISODE_STEP_CAP,
    gamma: Optional[float] = None,
) -> ValidationResults:
    """Follow policy from start_state for many episodes and summarise returns.

    An episode counts as a success when its discounted return is strictly
    positive. Path efficiency divides the mean return by a heuristic mean
    path length (SUCCESS_PATH_LENGTH for successes, FAILURE_PATH_LENGTH
    otherwise); the realised mean step count is reported separately as
    mean_steps.

    Parameters
    ----------
    mdp : MDP
        The model to simulate
    policy : dict
        State -> action; episodes end where the policy is undefined
    start_state : any
        Start of every episode
    episodes : int
        Number of validation episodes
    rng : Generator, int or None
        Random source or seed
    max_steps : int
        Step cap per episode
    gamma : float, optional
        Discount; defaults to the MDP's gamma, then 0.9

    Returns
    -------
    ValidationResults
        Mean and population standard deviation of the return, success rate
        with its Clopper-Pearson interval, and path efficiency.
    """
    if episodes <= 0:
        raise ValueError(f"episodes must be positive, got {episodes}")

    rng = make_rng(rng)

    rewards = np.empty(episodes)
    steps = np.empty(episodes)
    for i in range(episodes):
        res = simulate_policy_episode(
            mdp, policy, start_state, max_steps=max_steps, gamma=gamma, rng=rng
        )
        rewards[i] = res.total_reward
        steps[i] = res.steps

    successes = rewards > 0
    n_success = int(successes.sum())
    heuristic_lengths = np.where(successes, SUCCESS_PATH_LENGTH, FAILURE_PATH_LENGTH)

    mean_reward = float(rewards.mean())

    return ValidationResults(
        mc_reward=mean_reward,
        mc_std_dev=float(rewards.std()),
        success_rate=n_success / episodes,
        path_efficiency=mean_reward / float(heuristic_lengths.mean()),
        mean_steps=float(steps.mean()),
        episodes=episodes,
        success_rate_ci=clopper_pearson_ci(n_success, episodes),
    )
