"""Data structures for Monte Carlo rollout of an MDP."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class EpisodeResult:
    """Result from a single simulated episode.

    Attributes
    ----------
    total_reward : float
        Discounted return accumulated along the realised path
    steps : int
        Number of transitions taken
    terminal : any
        State the episode ended in
    visited : dict
        Per-state visit counts
    path : list
        Ordered states visited, starting with the start state
    actions : list
        Ordered actions taken (len(path) - 1 entries)
    """
    total_reward: float
    steps: int
    terminal: Any
    visited: Dict[Any, int] = field(default_factory=dict)
    path: List[Any] = field(default_factory=list)
    actions: List[Any] = field(default_factory=list)


@dataclass
class PathCount:
    """A full path (states joined by "->") and how often it occurred."""
    path: str
    count: int


@dataclass
class PathAnalysis:
    """Path-length statistics and most frequent full paths.

    Path length counts states, so an episode with k steps has length k + 1.
    """
    avg_path_length: float
    min_path_length: int
    max_path_length: int
    most_common_paths: List[PathCount] = field(default_factory=list)


@dataclass
class MonteCarloSummary:
    """Aggregated statistics from repeated episode simulation.

    Attributes
    ----------
    episodes : int
        Number of episodes simulated
    avg_total_reward : float
        Mean discounted return
    avg_steps : float
        Mean episode length in steps
    terminal_dist : dict
        Terminal state -> number of episodes ending there
    visit_counts : dict
        State -> total visits across all episodes
    rewards : list of float
        Raw per-episode returns
    transition_counts : dict
        "{from}-{action}->{to}" -> count
    action_counts : dict
        Action -> number of times taken
    path_analysis : PathAnalysis
        Path-length statistics and top-K paths
    """
    episodes: int
    avg_total_reward: float
    avg_steps: float
    terminal_dist: Dict[Any, int] = field(default_factory=dict)
    visit_counts: Dict[Any, int] = field(default_factory=dict)
    rewards: List[float] = field(default_factory=list)
    transition_counts: Dict[str, int] = field(default_factory=dict)
    action_counts: Dict[Any, int] = field(default_factory=dict)
    path_analysis: PathAnalysis = field(
        default_factory=lambda: PathAnalysis(0.0, 0, 0)
    )

    def __str__(self) -> str:
        """Format summary for display."""
        lines = [
            "Monte Carlo Summary",
            "=" * 40,
            f"Episodes: {self.episodes}",
            f"Avg Total Reward: {self.avg_total_reward:.4f}",
            f"Avg Steps: {self.avg_steps:.2f}",
            f"Avg Path Length: {self.path_analysis.avg_path_length:.2f}",
        ]
        if self.terminal_dist:
            lines.append("\nTerminal States:")
            for state, count in self.terminal_dist.items():
                share = count / self.episodes if self.episodes else 0.0
                lines.append(f"  {state}: {count} ({share:.1%})")
        if self.path_analysis.most_common_paths:
            lines.append("\nMost Common Paths:")
            for pc in self.path_analysis.most_common_paths:
                lines.append(f"  {pc.path}: {pc.count}")
        return "\n".join(lines)
