"""Experiment drivers built on the solvers and the robust orchestrator.

Modules
-------
configuration_sweep
    Discount / reward-scale sweep scored by validated reward x confidence
hyperparameter_tuning
    Random-search tuning of one solver's configuration
multi_objective
    Random search over solvers with Pareto ranking of five objectives
experiment_io
    Metadata collection and JSON / tidy CSV output
"""

from .configs import ConfigurationSweepConfig, MultiObjectiveConfig, TuningConfig
from .configuration_sweep import (
    ConfigurationSweepResult,
    SweepEntry,
    build_variants,
    optimize_mdp_configuration,
)
from .hyperparameter_tuning import TuningResult, TuningTrial, sample_config, score_result, tune_hyperparameters
from .multi_objective import (
    MultiObjectiveCandidate,
    MultiObjectiveResult,
    multi_objective_search,
    objective_metrics,
    pareto_ranks,
    weighted_score,
)
from .experiment_io import build_metadata, save_experiment_results

__all__ = [
    # Configs
    "ConfigurationSweepConfig",
    "TuningConfig",
    "MultiObjectiveConfig",
    # Configuration sweep
    "ConfigurationSweepResult",
    "SweepEntry",
    "build_variants",
    "optimize_mdp_configuration",
    # Hyperparameter tuning
    "TuningResult",
    "TuningTrial",
    "sample_config",
    "score_result",
    "tune_hyperparameters",
    # Multi-objective search
    "MultiObjectiveCandidate",
    "MultiObjectiveResult",
    "multi_objective_search",
    "objective_metrics",
    "pareto_ranks",
    "weighted_score",
    # I/O
    "build_metadata",
    "save_experiment_results",
]
