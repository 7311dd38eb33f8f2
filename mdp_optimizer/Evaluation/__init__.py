"""Policy validation and robust multi-solver optimization.

Modules
-------
metrics
    Composite score, confidence score and binomial confidence intervals
validator
    Monte Carlo validation of a policy
orchestrator
    Runs several solvers, validates and ranks their policies
"""

from .metrics import calculate_confidence, clopper_pearson_ci, composite_score
from .validator import validate_policy_with_monte_carlo
from .orchestrator import NoOptimizationMethodSucceeded, robust_optimize_mdp, select_best

__all__ = [
    # Scoring
    "composite_score",
    "calculate_confidence",
    "clopper_pearson_ci",
    # Validation
    "validate_policy_with_monte_carlo",
    # Orchestration
    "robust_optimize_mdp",
    "select_best",
    "NoOptimizationMethodSucceeded",
]
