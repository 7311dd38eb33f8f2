"""Tests for the validator, scoring and the robust orchestrator."""

import logging
import math

import pytest

from ..Models import MDP, Transition
from ..Solvers.registry import METHODS, OptimizationMethod
from ..Solvers.results import CandidateResult, OptimizationResult, ValidationResults
from .metrics import calculate_confidence, clopper_pearson_ci, composite_score
from .orchestrator import NoOptimizationMethodSucceeded, robust_optimize_mdp, select_best
from .validator import validate_policy_with_monte_carlo


def _raise(*args, **kwargs):
    raise RuntimeError("solver exploded")


# ============================================================
# Validator
# ============================================================

class TestValidator:
    """Tests for validate_policy_with_monte_carlo."""

    def test_deterministic_chain(self, chain_mdp):
        v = validate_policy_with_monte_carlo(chain_mdp, {"A": "go", "B": "go"}, "A",
                                             episodes=200, rng=0)
        assert v.mc_reward == pytest.approx(10.0)
        assert v.mc_std_dev == pytest.approx(0.0)
        assert v.success_rate == 1.0
        assert v.path_efficiency == pytest.approx(10.0 / 50)
        assert v.mean_steps == 2.0
        assert v.episodes == 200
        assert v.success_rate_ci[1] == 1.0
        assert 0.97 < v.success_rate_ci[0] < 1.0

    def test_missing_policy_entry_ends_episode(self, chain_mdp):
        v = validate_policy_with_monte_carlo(chain_mdp, {}, "A", episodes=10, rng=0)
        assert v.mc_reward == 0.0
        assert v.success_rate == 0.0
        assert v.path_efficiency == 0.0
        assert v.mean_steps == 0.0
        assert v.success_rate_ci[0] == 0.0

    def test_stochastic_policy_statistics(self, gridlike_mdp):
        v = validate_policy_with_monte_carlo(gridlike_mdp, {"start": "risky"}, "start",
                                             episodes=4000, rng=1)
        assert v.mc_reward == pytest.approx(0.0, abs=1.0)
        # Returns are +10 or -10, so the population std is close to 10.
        assert v.mc_std_dev == pytest.approx(10.0, abs=0.1)
        assert v.success_rate == pytest.approx(0.5, abs=0.05)
        expected_length = v.success_rate * 50 + (1 - v.success_rate) * 100
        assert v.path_efficiency == pytest.approx(v.mc_reward / expected_length)
        low, high = v.success_rate_ci
        assert low < v.success_rate < high

    def test_population_std(self):
        mdp = MDP(["s", "t"], ["a"], {("s", "a"): [Transition("t", 0.5, 2.0),
                                                    Transition("t", 0.5, 0.0)]})
        v = validate_policy_with_monte_carlo(mdp, {"s": "a"}, "s", episodes=2000, rng=3)
        # Population std of a fair {0, 2} coin is sqrt(mean * (2 - mean)).
        assert v.mc_std_dev == pytest.approx(math.sqrt(v.mc_reward * (2 - v.mc_reward)))

    def test_rejects_zero_episodes(self, chain_mdp):
        with pytest.raises(ValueError):
            validate_policy_with_monte_carlo(chain_mdp, {}, "A", episodes=0)


# ============================================================
# Scoring
# ============================================================

class TestScoring:
    """Tests for composite_score, calculate_confidence and clopper_pearson_ci."""

    def test_composite_score_weights(self):
        v = ValidationResults(mc_reward=10.0, mc_std_dev=1.0, success_rate=0.5,
                              path_efficiency=0.2)
        assert composite_score(v) == pytest.approx(4.0 + 0.15 + 0.1 + 0.02)

    def test_confidence_deterministic_success(self):
        v = ValidationResults(10.0, 0.0, 1.0, 0.2)
        assert calculate_confidence(v) == pytest.approx(0.4 + 0.3 + 0.04 + 0.1)

    def test_confidence_zero_mean_uses_unit_denominator(self):
        assert calculate_confidence(ValidationResults(0.0, 0.5, 0.0, 0.0)) == pytest.approx(0.15)
        assert calculate_confidence(ValidationResults(0.0, 2.0, 0.0, 0.0)) == 0.0

    def test_confidence_clamped(self):
        v = ValidationResults(-5.0, 100.0, 0.0, -3.0)
        assert calculate_confidence(v) == 0.0
        v = ValidationResults(5.0, 0.0, 1.0, 7.0)
        assert calculate_confidence(v) == pytest.approx(1.0)

    def test_nan_inputs_do_not_propagate(self):
        nan = float("nan")
        v = ValidationResults(nan, nan, 0.5, nan)
        assert composite_score(v) == pytest.approx(0.15)
        assert calculate_confidence(v) == pytest.approx(0.2)

    def test_clopper_pearson_edges(self):
        assert clopper_pearson_ci(0, 0) == (0.0, 1.0)
        low, high = clopper_pearson_ci(0, 20)
        assert low == 0.0 and 0.0 < high < 0.2
        low, high = clopper_pearson_ci(20, 20)
        assert high == 1.0 and 0.8 < low < 1.0

    def test_clopper_pearson_contains_rate(self):
        low, high = clopper_pearson_ci(30, 100)
        assert low < 0.3 < high


# ============================================================
# Orchestrator
# ============================================================

class TestRobustOptimizer:
    """Tests for robust_optimize_mdp and select_best."""

    def test_dominant_action_recovered_by_every_method(self, dominant_mdp):
        result = robust_optimize_mdp(dominant_mdp, "S", {"episodes": 300}, rng=0,
                                     validation_episodes=200)
        assert result.kind == "robust"
        assert result.best_policy == {"S": "good"}
        assert len(result.candidates) == 4
        assert result.failures == []
        for candidate in result.candidates:
            assert candidate.result.best_policy == {"S": "good"}

        winner = max(result.candidates, key=lambda c: c.score)
        assert all(winner.score >= c.score for c in result.candidates)
        assert result.actual_performance == pytest.approx(10.0)
        assert result.confidence == pytest.approx(0.84)

    def test_ties_keep_first_method(self, dominant_mdp):
        result = robust_optimize_mdp(dominant_mdp, "S", {"episodes": 300}, rng=0,
                                     validation_episodes=100)
        # Every candidate validates identically, so enumeration order decides.
        assert result.method == "Value Iteration"

    def test_winner_keeps_solver_specific_fields(self, dominant_mdp):
        result = robust_optimize_mdp(dominant_mdp, "S", {"episodes": 100}, rng=0,
                                     validation_episodes=20, method_keys=["q-learning"])
        winner = result.best_candidate
        assert winner is result.candidates[0]
        assert winner.method == result.method == "Q-Learning"
        assert set(winner.result.q_table["S"]) == {"good", "bad"}
        assert len(winner.result.learning_curve) == 100
        assert winner.result.best_policy == result.best_policy

    def test_method_subset(self, chain_mdp):
        result = robust_optimize_mdp(chain_mdp, "A", rng=1, validation_episodes=50,
                                     method_keys=["sarsa", "td-lambda"])
        assert [c.method for c in result.candidates] == ["SARSA", "TD(lambda)"]
        assert result.best_policy == {"A": "go", "B": "go"}

    def test_failing_method_is_logged_and_skipped(self, dominant_mdp, monkeypatch, caplog):
        monkeypatch.setitem(METHODS, "broken", OptimizationMethod("broken", "Broken", "", _raise))
        with caplog.at_level(logging.WARNING):
            result = robust_optimize_mdp(dominant_mdp, "S", rng=0, validation_episodes=50,
                                         method_keys=["broken", "value-iteration"])
        assert result.method == "Value Iteration"
        assert [f.method for f in result.failures] == ["Broken"]
        assert "solver exploded" in result.failures[0].error
        assert "Broken failed" in caplog.text

    def test_all_methods_failing_raises(self, dominant_mdp, monkeypatch):
        monkeypatch.setitem(METHODS, "broken", OptimizationMethod("broken", "Broken", "", _raise))
        with pytest.raises(NoOptimizationMethodSucceeded, match="solver exploded") as info:
            robust_optimize_mdp(dominant_mdp, "S", rng=0, method_keys=["broken"])
        assert len(info.value.failures) == 1

    def test_unknown_method_key(self, dominant_mdp):
        with pytest.raises(ValueError):
            robust_optimize_mdp(dominant_mdp, "S", method_keys=["nope"])

    def test_progress_events_name_each_solver(self, chain_mdp):
        seen = set()
        robust_optimize_mdp(chain_mdp, "A", {"episodes": 50}, rng=0, validation_episodes=20,
                            progress=lambda e: seen.add(e.method))
        assert seen == {"Value Iteration", "Policy Iteration", "Q-Learning",
                        "Monte Carlo Policy Search"}

    def test_select_best(self):
        v = ValidationResults(0.0, 0.0, 0.0, 0.0)
        r = OptimizationResult({}, 0.0, 0)
        a = CandidateResult("a", r, v, 1.0)
        b = CandidateResult("b", r, v, 2.0)
        c = CandidateResult("c", r, v, 2.0)
        assert select_best([a, b, c]) is b
        with pytest.raises(NoOptimizationMethodSucceeded):
            select_best([])
