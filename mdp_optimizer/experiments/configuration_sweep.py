"""Discount / reward-scale sweep over variants of one MDP.

Tries each discount factor on the base rewards and each reward multiplier
on the base discount, solves every variant (robust orchestrator or a single
solver), validates the resulting policy, and keeps the variant with the
highest mc_reward x confidence.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple
import logging
import time

from ..Evaluation.metrics import calculate_confidence
from ..Evaluation.orchestrator import NoOptimizationMethodSucceeded, robust_optimize_mdp
from ..Evaluation.validator import validate_policy_with_monte_carlo
from ..Models.mdp import MDP, State, mdp_with_gamma, scale_mdp_rewards
from ..MonteCarlo.sampling import spawn_rngs
from ..Solvers.registry import run_method
from ..Solvers.results import MethodFailure, OptimizationResult, ValidationResults
from .configs.base_config import ConfigurationSweepConfig
from .experiment_io import build_metadata, save_experiment_results

logger = logging.getLogger(__name__)

GAMMA = "gamma"
REWARD_SCALE = "reward_scale"


@dataclass
class SweepEntry:
    """One evaluated MDP variant.

    Attributes
    ----------
    parameter : str
        "gamma" or "reward_scale"
    value : float
        The discount or multiplier applied to the base MDP
    mdp : MDP
        The variant itself
    result : OptimizationResult
        Robust or single-solver result for the variant
    validation : ValidationResults
        Monte Carlo validation of the variant's policy
    confidence : float
        Confidence score of the validation
    score : float
        mc_reward x confidence
    """
    parameter: str
    value: float
    mdp: MDP
    result: OptimizationResult
    validation: ValidationResults
    confidence: float
    score: float

    @property
    def label(self) -> str:
        return f"{self.parameter}={self.value}"


@dataclass
class ConfigurationSweepResult:
    best_mdp: MDP
    best_result: OptimizationResult
    best_score: float
    history: List[SweepEntry] = field(default_factory=list)
    failures: List[MethodFailure] = field(default_factory=list)

    @property
    def best_entry(self) -> SweepEntry:
        return max(self.history, key=lambda e: e.score)

    def __str__(self) -> str:
        lines = [
            "=" * 40,
            "Configuration Sweep",
            "=" * 40,
            f"Variants evaluated: {len(self.history)}",
            f"Variants failed:    {len(self.failures)}",
            f"Best variant:       {self.best_entry.label}",
            f"Best score:         {self.best_score:.4f}",
            f"Best method:        {self.best_result.method}",
            "=" * 40,
        ]
        return "\n".join(lines)


def build_variants(base_mdp: MDP, config: ConfigurationSweepConfig) -> List[Tuple[str, float, MDP]]:
    """The gamma variants followed by the reward-scale variants."""
    variants = [(GAMMA, g, mdp_with_gamma(base_mdp, g)) for g in config.gammas]
    variants += [(REWARD_SCALE, m, scale_mdp_rewards(base_mdp, m)) for m in config.reward_scales]
    return variants


def _evaluate_variant(
    mdp: MDP,
    start_state: State,
    config: ConfigurationSweepConfig,
    rng,
) -> Tuple[OptimizationResult, ValidationResults, float]:
    if config.method_key is None:
        result = robust_optimize_mdp(
            mdp, start_state, config.solver_config, rng=rng,
            validation_episodes=config.validation_episodes,
        )
        return result, result.validation_results, result.confidence

    solve_rng, validation_rng = spawn_rngs(rng, 2)
    result = run_method(config.method_key, mdp, start_state, config.solver_config, solve_rng)
    validation = validate_policy_with_monte_carlo(
        mdp, result.best_policy, start_state,
        episodes=config.validation_episodes, rng=validation_rng,
    )
    return result, validation, calculate_confidence(validation)


def optimize_mdp_configuration(
    base_mdp: MDP,
    start_state: State,
    config: Optional[ConfigurationSweepConfig] = None,
) -> ConfigurationSweepResult:
    """Run the configuration sweep.

    Variants are evaluated sequentially, each with its own random stream
    spawned from config.seed. A variant whose solve or validation raises is
    logged and skipped. Ties keep the earlier variant.

    Parameters
    ----------
    base_mdp : MDP
        The model whose variants are tried; it is never modified
    start_state : any
        Start state for learners and validation
    config : ConfigurationSweepConfig, optional
        Grid, solver choice, validation budget, seed and output settings

    Returns
    -------
    ConfigurationSweepResult

    Raises
    ------
    NoOptimizationMethodSucceeded
        If every variant failed.
    """
    config = config if config is not None else ConfigurationSweepConfig()
    variants = build_variants(base_mdp, config)
    streams = spawn_rngs(config.seed, len(variants))
    solver_name = config.method_key or "robust"

    if config.verbose:
        print("=" * 70)
        print("MDP CONFIGURATION SWEEP")
        print(f"Gammas: {config.gammas}")
        print(f"Reward scales: {config.reward_scales}")
        print(f"Solver: {solver_name}")
        print(f"Total variants: {len(variants)}")
        print("=" * 70)

    t0 = time.time()
    history: List[SweepEntry] = []
    failures: List[MethodFailure] = []
    best: Optional[SweepEntry] = None

    for (parameter, value, mdp), stream in zip(variants, streams):
        try:
            result, validation, confidence = _evaluate_variant(mdp, start_state, config, stream)
        except Exception as exc:
            logger.warning("%s %s failed: %s", parameter, value, exc)
            failures.append(MethodFailure(f"{parameter}={value}", f"{type(exc).__name__}: {exc}"))
            continue

        entry = SweepEntry(
            parameter=parameter,
            value=value,
            mdp=mdp,
            result=result,
            validation=validation,
            confidence=confidence,
            score=validation.mc_reward * confidence,
        )
        history.append(entry)

        if config.verbose:
            print(f"  {entry.label:<20} method={result.method:<26} "
                  f"reward={validation.mc_reward:8.3f} conf={confidence:.3f} "
                  f"score={entry.score:8.3f}")

        if best is None or entry.score > best.score:
            best = entry

    if best is None:
        raise NoOptimizationMethodSucceeded(failures)

    sweep = ConfigurationSweepResult(
        best_mdp=best.mdp,
        best_result=best.result,
        best_score=best.score,
        history=history,
        failures=failures,
    )

    total_time = time.time() - t0
    if config.verbose:
        print(f"\nTotal sweep time: {total_time:.1f}s")
        print(sweep)

    if config.results_path:
        metadata = build_metadata(config, extra={"total_time_s": total_time})
        save_experiment_results(
            config.results_path, sweep_summary(sweep), metadata, tidy_rows=tidy_rows(sweep)
        )
        if config.verbose:
            print(f"Results saved to {config.results_path}")

    return sweep


def tidy_rows(sweep: ConfigurationSweepResult) -> List[Dict[str, Any]]:
    """One flat row per evaluated variant."""
    rows = []
    for entry in sweep.history:
        v = entry.validation
        rows.append({
            "parameter": entry.parameter,
            "value": entry.value,
            "method": entry.result.method,
            "mc_reward": v.mc_reward,
            "mc_std_dev": v.mc_std_dev,
            "success_rate": v.success_rate,
            "success_rate_ci_low": v.success_rate_ci[0],
            "success_rate_ci_high": v.success_rate_ci[1],
            "path_efficiency": v.path_efficiency,
            "mean_steps": v.mean_steps,
            "confidence": entry.confidence,
            "score": entry.score,
        })
    return rows


def sweep_summary(sweep: ConfigurationSweepResult) -> Dict[str, Any]:
    best = sweep.best_entry
    return {
        "best_variant": {"parameter": best.parameter, "value": best.value},
        "best_score": sweep.best_score,
        "best_method": sweep.best_result.method,
        "best_policy": sweep.best_result.best_policy,
        "failures": [{"variant": f.method, "error": f.error} for f in sweep.failures],
    }
