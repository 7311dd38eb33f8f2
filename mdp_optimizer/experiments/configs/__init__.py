"""Experiment configuration dataclasses."""

from .base_config import (
    ConfigurationSweepConfig,
    TuningConfig,
    MultiObjectiveConfig,
    TUNABLE_METHOD_KEYS,
    TUNING_METRICS,
    OBJECTIVES,
)

__all__ = [
    "ConfigurationSweepConfig",
    "TuningConfig",
    "MultiObjectiveConfig",
    "TUNABLE_METHOD_KEYS",
    "TUNING_METRICS",
    "OBJECTIVES",
]
