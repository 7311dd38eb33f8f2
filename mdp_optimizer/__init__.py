"""Solve, simulate and validate finite Markov Decision Processes.

Subpackages
-----------
Models
    The MDP model and conversion from the external dictionary schema
MonteCarlo
    Episode simulation and Monte Carlo statistics
Solvers
    Dynamic-programming and reinforcement-learning solvers
Evaluation
    Policy validation and the robust multi-solver orchestrator
experiments
    Configuration sweep, hyperparameter tuning and multi-objective search
"""

__version__ = "0.1.0"

from . import Models, MonteCarlo, Solvers, Evaluation, experiments
