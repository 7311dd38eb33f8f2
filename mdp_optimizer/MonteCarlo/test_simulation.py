"""Tests for Monte Carlo simulation."""

import numpy as np
import pytest

from ..Models import MDP, Transition
from .sampling import make_rng, sample_outcome, spawn_rngs, uniform_choice
from .simulation import (
    estimate_policy_value,
    run_monte_carlo,
    simulate_episode,
    simulate_policy_episode,
)


# ============================================================
# Sampling Tests
# ============================================================

class TestSampling:
    """Tests for inverse-CDF outcome sampling."""

    def test_empty_outcomes_raise(self):
        with pytest.raises(ValueError):
            sample_outcome([], make_rng(0))

    def test_picks_first_outcome_reaching_r(self):
        outcomes = [Transition("a", 0.2), Transition("b", 0.5), Transition("c", 0.3)]
        rng = make_rng(0)
        assert sample_outcome(outcomes, rng, r=0.0).next_state == "a"
        assert sample_outcome(outcomes, rng, r=0.2).next_state == "a"
        assert sample_outcome(outcomes, rng, r=0.25).next_state == "b"
        assert sample_outcome(outcomes, rng, r=0.71).next_state == "c"

    def test_fallback_to_last_when_mass_falls_short(self):
        # Cumulative mass never reaches r because of rounding
        outcomes = [Transition("a", 0.5), Transition("b", 0.4999999)]
        picked = sample_outcome(outcomes, make_rng(0), r=0.99999999)
        assert picked.next_state == "b"

    def test_r_approaching_one_never_raises(self):
        outcomes = [Transition(f"s{i}", 0.1) for i in range(10)]
        r = float(np.nextafter(1.0, 0.0))
        for _ in range(100):
            assert sample_outcome(outcomes, make_rng(1), r=r).next_state == "s9"

    def test_empirical_frequencies(self):
        outcomes = [Transition("a", 0.25), Transition("b", 0.75)]
        rng = make_rng(42)
        draws = [sample_outcome(outcomes, rng).next_state for _ in range(4000)]
        assert draws.count("a") / len(draws) == pytest.approx(0.25, abs=0.03)

    def test_uniform_choice_empty_raises(self):
        with pytest.raises(ValueError):
            uniform_choice([], make_rng(0))

    def test_make_rng_passes_generator_through(self):
        rng = np.random.default_rng(3)
        assert make_rng(rng) is rng

    def test_spawned_streams_are_independent_and_reproducible(self):
        first = [g.random() for g in spawn_rngs(7, 3)]
        second = [g.random() for g in spawn_rngs(7, 3)]
        assert first == second
        assert len(set(first)) == 3


# ============================================================
# Episode Simulation Tests
# ============================================================

class TestSimulateEpisode:
    """Tests for single-episode rollout."""

    def test_absorbing_start_returns_immediately(self, absorbing_mdp):
        res = simulate_episode(absorbing_mdp, "X", rng=0)
        assert res.steps == 0
        assert res.terminal == "X"
        assert res.total_reward == 0
        assert res.path == ["X"]
        assert res.actions == []
        assert res.visited == {"X": 1}

    def test_chain_discounts_along_path(self, chain_mdp):
        res = simulate_episode(chain_mdp, "A", rng=0)
        assert res.steps == 2
        assert res.terminal == "C"
        assert res.path == ["A", "B", "C"]
        assert res.actions == ["go", "go"]
        assert res.total_reward == pytest.approx(1.0 + 0.9 * 10.0)

    def test_undiscounted_when_gamma_missing(self, chain_mdp):
        chain_mdp.gamma = None
        res = simulate_episode(chain_mdp, "A", rng=0)
        assert res.total_reward == pytest.approx(11.0)

    def test_max_steps_bounds_episode(self):
        loop = MDP(["s"], ["stay"], {("s", "stay"): [Transition("s", 1.0, 1.0)]}, gamma=1.0)
        res = simulate_episode(loop, "s", max_steps=7, rng=0)
        assert res.steps == 7
        assert res.total_reward == pytest.approx(7.0)
        assert len(res.path) == 8

    def test_action_without_outcomes_ends_episode(self):
        mdp = MDP(["s", "t"], ["a"], {("s", "a"): []}, gamma=0.9)
        res = simulate_episode(mdp, "s", rng=0)
        assert res.steps == 0
        assert res.terminal == "s"

    def test_seeded_runs_are_reproducible(self, gridlike_mdp):
        a = simulate_episode(gridlike_mdp, "start", rng=123)
        b = simulate_episode(gridlike_mdp, "start", rng=123)
        assert a == b


class TestPolicyEpisode:
    """Tests for policy-following rollout."""

    def test_follows_policy(self, dominant_mdp):
        res = simulate_policy_episode(dominant_mdp, {"S": "good"}, "S", rng=0)
        assert res.actions == ["good"]
        assert res.total_reward == pytest.approx(10.0)

    def test_missing_policy_entry_ends_episode(self, dominant_mdp):
        res = simulate_policy_episode(dominant_mdp, {}, "S", rng=0)
        assert res.steps == 0
        assert res.total_reward == 0.0

    def test_policy_gamma_default(self, chain_mdp):
        chain_mdp.gamma = None
        policy = {"A": "go", "B": "go"}
        res = simulate_policy_episode(chain_mdp, policy, "A", rng=0)
        assert res.total_reward == pytest.approx(1.0 + 0.9 * 10.0)

    def test_estimate_policy_value(self, gridlike_mdp):
        value = estimate_policy_value(
            gridlike_mdp, {"start": "risky"}, "start", episodes=2000, rng=5
        )
        assert value == pytest.approx(0.0, abs=1.0)
        assert estimate_policy_value(gridlike_mdp, {}, "start", episodes=0) == 0.0


# ============================================================
# Aggregation Tests
# ============================================================

class TestRunMonteCarlo:
    """Tests for Monte Carlo aggregation."""

    def test_chain_summary(self, chain_mdp):
        summary = run_monte_carlo(chain_mdp, "A", episodes=50, rng=0)
        assert summary.episodes == 50
        assert summary.avg_total_reward == pytest.approx(10.0)
        assert summary.avg_steps == 2
        assert summary.terminal_dist == {"C": 50}
        assert summary.visit_counts == {"A": 50, "B": 50, "C": 50}
        assert summary.transition_counts == {"A-go->B": 50, "B-go->C": 50}
        assert summary.action_counts == {"go": 100}
        assert len(summary.rewards) == 50
        assert summary.path_analysis.avg_path_length == 3
        assert summary.path_analysis.most_common_paths[0].path == "A->B->C"
        assert summary.path_analysis.most_common_paths[0].count == 50

    def test_top_k_paths(self, gridlike_mdp):
        summary = run_monte_carlo(gridlike_mdp, "start", episodes=300, rng=1, top_k=2)
        paths = summary.path_analysis.most_common_paths
        assert len(paths) == 2
        assert paths[0].count >= paths[1].count
        assert sum(summary.terminal_dist.values()) == 300

    def test_zero_episodes(self, chain_mdp):
        summary = run_monte_carlo(chain_mdp, "A", episodes=0)
        assert summary.episodes == 0
        assert summary.avg_total_reward == 0.0
        assert summary.rewards == []

    def test_str_mentions_terminal_states(self, chain_mdp):
        text = str(run_monte_carlo(chain_mdp, "A", episodes=5, rng=0))
        assert "Terminal States" in text
        assert "C: 5" in text
