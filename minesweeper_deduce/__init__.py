"""
Minesweeper Deduction Solver

Plays Minesweeper by taking only certain actions, one per turn:
- Heuristics: a number whose unknown neighbors are all mines, or whose flags
  already account for it
- Subset elimination: facts "exactly M of these cells are mines" are compared
  pairwise; a fact containing another yields safe cells, mines, or a smaller fact
The knowledge base is rebuilt from the visible board on every turn.
"""

from .analysis import (
    LEVELS,
    format_solver_moves,
    run_solver_level_analysis,
    run_solver_many_tests,
    run_solver_single_test,
    summarize_method_mix,
)
from .deduce import DEFAULT_MAX_STEPS, deduce_pair, propagate
from .engine import Board, play_cli
from .errors import ContradictionError, InvariantViolationError, SolverError
from .knowledge import Conclusion, Fact, KnowledgeBase
from .pipeline import TurnResult, advance, plan_turn, seed_knowledge
from .solver import MinesweeperSolver
from .utils import Coord

__version__ = "1.0.0"

__all__ = [
    # Core classes
    "Board",
    "Coord",
    "Fact",
    "Conclusion",
    "KnowledgeBase",
    "MinesweeperSolver",
    "TurnResult",
    # Engine
    "advance",
    "plan_turn",
    "seed_knowledge",
    "deduce_pair",
    "propagate",
    "DEFAULT_MAX_STEPS",
    # Errors
    "SolverError",
    "ContradictionError",
    "InvariantViolationError",
    # CLI
    "play_cli",
    # Analysis functions
    "LEVELS",
    "format_solver_moves",
    "run_solver_single_test",
    "run_solver_many_tests",
    "run_solver_level_analysis",
    "summarize_method_mix",
]
