"""Scoring of validated policies.

Provides the composite score used to rank candidate solvers, the
confidence score attached to the chosen one, and the binomial confidence
interval reported alongside success rates.
"""

from typing import Tuple
import math

from scipy import stats

from ..Solvers.results import ValidationResults

# ============================================================
# Score weights
# ============================================================

# Composite score: mean reward, success rate, consistency, path efficiency.
SCORE_WEIGHTS = (0.4, 0.3, 0.2, 0.1)

# Confidence: success rate, relative spread, path efficiency, positive mean.
CONFIDENCE_WEIGHTS = (0.4, 0.3, 0.2, 0.1)


def _finite(x: float, default: float = 0.0) -> float:
    return x if math.isfinite(x) else default


def composite_score(validation: ValidationResults) -> float:
    """Weighted ranking score of a validated policy.

    score = 0.4 mean + 0.3 success + 0.2 / (1 + std) + 0.1 path_efficiency

    Non-finite inputs contribute 0 so that a degenerate candidate can never
    win through a NaN comparison.
    """
    w_reward, w_success, w_consistency, w_efficiency = SCORE_WEIGHTS
    mean = _finite(validation.mc_reward)
    std = _finite(validation.mc_std_dev, default=math.inf)
    consistency = 1.0 / (1.0 + std) if math.isfinite(std) else 0.0
    return (
        w_reward * mean
        + w_success * _finite(validation.success_rate)
        + w_consistency * consistency
        + w_efficiency * _finite(validation.path_efficiency)
    )


def calculate_confidence(validation: ValidationResults) -> float:
    """Confidence in a validated policy, clamped to [0, 1].

    A zero mean reward is treated as 1 in the relative-spread term.
    """
    w_success, w_spread, w_efficiency, w_positive = CONFIDENCE_WEIGHTS
    mean = _finite(validation.mc_reward)
    std = _finite(validation.mc_std_dev, default=math.inf)
    denominator = abs(mean) if mean != 0.0 else 1.0

    spread = max(0.0, 1.0 - std / denominator) if math.isfinite(std) else 0.0
    efficiency = min(1.0, max(0.0, _finite(validation.path_efficiency)))

    confidence = (
        w_success * _finite(validation.success_rate)
        + w_spread * spread
        + w_efficiency * efficiency
        + w_positive * (1.0 if mean > 0 else 0.0)
    )
    return min(1.0, max(0.0, confidence))


def clopper_pearson_ci(
    successes: int, trials: int, alpha: float = 0.05
) -> Tuple[float, float]:
    """Compute Clopper-Pearson exact binomial confidence interval.

    Parameters
    ----------
    successes : number of successes
    trials : total number of trials
    alpha : significance level (default 0.05 for 95% CI)

    Returns
    -------
    (lower, upper) : bounds of the CI
    """
    if trials == 0:
        return (0.0, 1.0)
    if successes == 0:
        lower = 0.0
    else:
        lower = stats.beta.ppf(alpha / 2, successes, trials - successes + 1)
    if successes == trials:
        upper = 1.0
    else:
        upper = stats.beta.ppf(1 - alpha / 2, successes + 1, trials - successes)
    return (float(lower), float(upper))
