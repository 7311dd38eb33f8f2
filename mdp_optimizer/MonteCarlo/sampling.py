"""Random number plumbing and outcome sampling.

All randomness flows through an explicit numpy Generator so that runs are
reproducible from a seed and independent runs can own independent streams.
"""

from typing import List, Optional, Sequence, TypeVar, Union

import numpy as np

from ..Models.mdp import Transition

T = TypeVar("T")

RngLike = Union[None, int, np.random.Generator]


def make_rng(rng: RngLike = None) -> np.random.Generator:
    """Return rng if it is already a Generator, else seed a new one from it."""
    if isinstance(rng, np.random.Generator):
        return rng
    return np.random.default_rng(rng)


def spawn_rngs(rng: RngLike, n: int) -> List[np.random.Generator]:
    """Derive n statistically independent child generators from rng."""
    return list(make_rng(rng).spawn(n))


def uniform_choice(items: Sequence[T], rng: np.random.Generator) -> T:
    """Pick one element of a non-empty sequence uniformly at random."""
    if not items:
        raise ValueError("Cannot choose from an empty sequence")
    return items[int(rng.integers(len(items)))]


def sample_outcome(
    outcomes: Sequence[Transition],
    rng: np.random.Generator,
    r: Optional[float] = None,
) -> Transition:
    """Sample one outcome by inverse-CDF over cumulative probability.

    Walks the outcomes accumulating probability and returns the first whose
    cumulative mass reaches r. If rounding leaves r unmatched the last
    outcome is returned.

    Parameters
    ----------
    outcomes : sequence of Transition
        Outcome list for a (state, action) pair
    rng : np.random.Generator
        Source of the uniform draw
    r : float, optional
        Pre-drawn uniform value in [0, 1); drawn from rng when omitted

    Raises
    ------
    ValueError
        If outcomes is empty: an action was offered with nothing to sample.
    """
    if not outcomes:
        raise ValueError("No transitions available")

    if r is None:
        r = rng.random()

    acc = 0.0
    for t in outcomes:
        acc += t.probability
        if r <= acc:
            return t
    return outcomes[-1]
