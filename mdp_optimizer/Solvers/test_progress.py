"""Tests for solver configuration, progress reporting and result types."""

import logging

import pytest

from ..Models import MDP
from .config import SolverConfig, as_config
from .progress import (
    CallbackListener,
    CancellationToken,
    ProgressChannel,
    ProgressEvent,
    ProgressReporter,
    as_listener,
)
from .registry import METHODS, ROBUST_METHOD_KEYS, get_method, run_method
from .results import (
    OptimizationResult,
    RobustOptimizationResult,
    ValidationResults,
    summarize_result,
)


def _event(i=0):
    return ProgressEvent("m", i, 0.0, {}, {})


# ============================================================
# Configuration
# ============================================================

class TestSolverConfig:

    def test_defaults(self):
        config = SolverConfig()
        assert config.max_iterations == 1000
        assert config.tolerance == 1e-6
        assert config.epsilon == 0.1
        assert config.episodes == 1000
        assert config.trace_decay == 0.7

    def test_from_dict_accepts_camel_case(self):
        config = SolverConfig.from_dict(
            {"maxIterations": 5, "learningRate": 0.2, "lambda": 0.9, "gamma": 0.5}
        )
        assert config.max_iterations == 5
        assert config.learning_rate == 0.2
        assert config.trace_decay == 0.9
        assert config.gamma == 0.5

    def test_from_dict_rejects_unknown_key(self):
        with pytest.raises(ValueError, match="alpha"):
            SolverConfig.from_dict({"alpha": 0.1})

    def test_gamma_resolution_order(self, chain_mdp):
        assert SolverConfig(gamma=0.3).resolve_gamma(chain_mdp) == 0.3
        assert SolverConfig().resolve_gamma(chain_mdp) == 0.9
        no_gamma = MDP(["X"], ["stay"], {})
        assert SolverConfig().resolve_gamma(no_gamma) == 0.9

    def test_from_dict_casts_loop_bounds_to_int(self, dominant_mdp):
        config = SolverConfig.from_dict({"episodes": 40.0, "maxIterations": 50.0})
        assert config.episodes == 40 and isinstance(config.episodes, int)
        assert config.max_iterations == 50 and isinstance(config.max_iterations, int)
        assert config.gamma is None
        result = run_method("q-learning", dominant_mdp, "S", {"episodes": 40.0}, rng=0)
        assert result.iterations == 40

    def test_as_config(self):
        config = SolverConfig(episodes=3)
        assert as_config(config) is config
        assert as_config(None) == SolverConfig()
        assert as_config({"episodes": 7}).episodes == 7


# ============================================================
# Progress
# ============================================================

class TestProgress:

    def test_channel_drops_oldest(self):
        channel = ProgressChannel(maxsize=2)
        for i in range(5):
            channel.on_progress(_event(i))
        assert len(channel) == 2
        assert channel.dropped == 3
        assert [e.iteration for e in channel.drain()] == [3, 4]
        assert len(channel) == 0

    def test_channel_rejects_non_positive_size(self):
        with pytest.raises(ValueError):
            ProgressChannel(maxsize=0)

    def test_callback_errors_are_logged(self, caplog):
        def boom(event):
            raise RuntimeError("listener broke")

        listener = CallbackListener(boom)
        with caplog.at_level(logging.WARNING):
            listener.on_progress(_event(3))
        assert listener.errors == 1
        assert "listener broke" in caplog.text

    def test_as_listener(self):
        channel = ProgressChannel()
        assert as_listener(channel) is channel
        assert as_listener(None) is None
        assert isinstance(as_listener(lambda e: None), CallbackListener)
        with pytest.raises(TypeError):
            as_listener(42)

    def test_reporter_copies_snapshots(self):
        channel = ProgressChannel()
        reporter = ProgressReporter("m", channel)
        values = {"s": 1.0}
        reporter.publish(0, 0.5, values, {"s": "a"})
        values["s"] = 2.0
        event = channel.drain()[0]
        assert event.value_function == {"s": 1.0}
        assert event.method == "m"

    def test_reporter_without_listener(self):
        reporter = ProgressReporter("m")
        assert not reporter.active
        reporter.publish(0, 0.0, {}, {})
        assert not reporter.should_stop()

    def test_cancellation_token(self):
        token = CancellationToken()
        reporter = ProgressReporter("m", cancel_token=token)
        assert not reporter.should_stop()
        token.cancel()
        assert token.cancelled
        assert reporter.should_stop()


# ============================================================
# Results and registry
# ============================================================

class TestResultsAndRegistry:

    def test_kind_discriminant(self):
        basic = OptimizationResult({}, 0.0, 0)
        robust = RobustOptimizationResult({}, 0.0, 0)
        assert basic.kind == "basic"
        assert robust.kind == "robust"

    def test_summarize_basic(self):
        result = OptimizationResult({"s": "a"}, 2.0, 4, method="X")
        assert summarize_result(result) == {
            "method": "X", "best_value": 2.0, "iterations": 4, "policy": {"s": "a"},
        }

    def test_summarize_robust(self):
        validation = ValidationResults(5.0, 1.0, 0.8, 0.1)
        result = RobustOptimizationResult(
            {"s": "a"}, 2.0, 4, method="X",
            actual_performance=5.0, confidence=0.7, validation_results=validation,
        )
        summary = summarize_result(result)
        assert summary["mc_reward"] == 5.0
        assert summary["confidence"] == 0.7
        assert summary["candidates"] == {}

    def test_summarize_unknown_kind(self):
        result = OptimizationResult({}, 0.0, 0)
        result.kind = "mystery"
        with pytest.raises(ValueError, match="mystery"):
            summarize_result(result)

    def test_registry_contents(self):
        assert len(METHODS) == 7
        assert set(ROBUST_METHOD_KEYS) <= set(METHODS)
        assert get_method("q-learning").name == "Q-Learning"
        with pytest.raises(ValueError, match="Unknown optimization method"):
            get_method("simulated-annealing")

    @pytest.mark.parametrize("key", sorted(METHODS))
    def test_every_method_handles_mdp_without_states(self, key):
        empty = MDP(states=[], actions=[], transitions={})
        result = run_method(key, empty, None, {"episodes": 50}, rng=0)
        assert result.best_policy == {}
        assert result.best_value == 0.0
        assert result.value_function == {}
        # Sweep-based solvers record one empty sweep; episode-based ones none.
        assert result.iterations <= 1

    @pytest.mark.parametrize("key", sorted(METHODS))
    def test_every_method_finds_dominant_action(self, dominant_mdp, key):
        config = {"episodes": 300, "learningRate": 0.1}
        result = run_method(key, dominant_mdp, "S", config, rng=0)
        assert result.best_policy == {"S": "good"}
        assert result.method == METHODS[key].name
