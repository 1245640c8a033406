"""Analysis and benchmarking tools for the Minesweeper solver."""

from collections import defaultdict
from typing import Dict, List, Optional, Tuple

import matplotlib.pyplot as plt
import numpy as np

from .deduce import DEFAULT_MAX_STEPS
from .engine import Board
from .solver import MinesweeperSolver

# Standard square difficulty levels: name -> (size, mines)
LEVELS: Dict[str, Tuple[int, int]] = {
    "beginner": (8, 10),
    "intermediate": (16, 40),
    "expert": (22, 99),
}

_METHOD_COUNTERS: Tuple[str, ...] = ("heuristic_count", "seed_count", "deduced_count")


def format_solver_moves(
    moves_sequence: List[Tuple[int, int, str]], *, per_line: int = 8
) -> str:
    """
    Format a solver's move sequence as a compact human-readable string.

    Args:
        moves_sequence: (x, y, verdict) triples as recorded by the solver.
        per_line: Number of moves per output line.

    Returns:
        Lines like "S(4,4) M(3,5) ...", where S is a reveal and M a flag.
    """
    if per_line <= 0:
        raise ValueError("per_line must be positive.")
    tokens = [f"{verdict}({x},{y})" for x, y, verdict in moves_sequence]
    return "\n".join(
        " ".join(tokens[i:i + per_line]) for i in range(0, len(tokens), per_line)
    )


def run_solver_single_test(
    size: int,
    mines_count: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    show_boards: bool = False,
    use_heuristics: bool = True,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Dict[str, object]:
    """
    Run one end-to-end game with MinesweeperSolver on a fresh board.

    Args:
        size: Board side length.
        mines_count: Total number of mines on the board.
        mines_generation_algorithm: Mine placement rule
            ("safe_first_action_rule" or "safe_neighborhood_rule").
        show_boards: If True, print the underlying board and the final
            visible state.
        use_heuristics: Whether the solver tries the trivial rules first.
        max_steps: Maximum pair comparisons per turn.

    Returns:
        The solver's terminal payload augmented with "status"
        (-1 loss, 0 stuck, 1 win).
    """
    board = Board(size, mines_count, mines_generation_algorithm=mines_generation_algorithm)
    solver = MinesweeperSolver(
        board, max_steps=max_steps, use_heuristics=use_heuristics, record_steps=False
    )

    status, payload = solver.solve()

    if show_boards:
        print(f"Generation mode: {mines_generation_algorithm}")
        print("Underlying board (mines visible):")
        print(board.format_board(reveal_all=True))
        print()
        print("Final visible board:")
        print(board.format_board(reveal_all=False))
        print()
        print(f"Finished with status {status}.")

    out: Dict[str, object] = dict(payload)
    out["status"] = status
    return out


def run_solver_many_tests(
    size: int,
    mines_count: int,
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    use_heuristics: bool = True,
    max_steps: int = DEFAULT_MAX_STEPS,
) -> Dict[str, float]:
    """
    Run many independent games and return averaged metrics plus outcome rates.

    Args:
        size: Board side length.
        mines_count: Total number of mines on the board.
        runs: Number of independent games to run.
        mines_generation_algorithm: Mine placement rule.
        use_heuristics: Whether the solver tries the trivial rules first.
        max_steps: Maximum pair comparisons per turn.

    Returns:
        Averages of the numeric solver metrics (prefixed with "avg_"), plus
        win_rate, stuck_rate, loss_rate and the fraction of actions that
        came from each method (heuristic_frac, seed_frac, deduced_frac).
    """
    if runs <= 0:
        raise ValueError("runs must be positive.")

    sums: Dict[str, float] = defaultdict(float)
    outcomes: Dict[int, int] = {-1: 0, 0: 0, 1: 0}

    for _ in range(runs):
        payload = run_solver_single_test(
            size,
            mines_count,
            mines_generation_algorithm,
            use_heuristics=use_heuristics,
            max_steps=max_steps,
        )
        status = payload.pop("status")
        if status not in outcomes:
            raise RuntimeError(f"Unexpected solver status: {status}")
        outcomes[status] += 1  # type: ignore[index]

        for k, v in payload.items():
            if isinstance(v, (int, float)) and not isinstance(v, bool):
                sums[f"avg_{k}"] += float(v)

    out: Dict[str, float] = {k: total / runs for k, total in sums.items()}
    out["win_rate"] = outcomes[1] / runs
    out["stuck_rate"] = outcomes[0] / runs
    out["loss_rate"] = outcomes[-1] / runs

    method_total = sum(out.get(f"avg_{k}", 0.0) for k in _METHOD_COUNTERS)
    for k in _METHOD_COUNTERS:
        frac_key = k.replace("_count", "_frac")
        out[frac_key] = out.get(f"avg_{k}", 0.0) / method_total if method_total > 0 else 0.0

    return out


def run_solver_level_analysis(
    runs: int,
    mines_generation_algorithm: str = "safe_neighborhood_rule",
    *,
    levels: Optional[Dict[str, Tuple[int, int]]] = None,
    show: bool = True,
) -> Dict[str, Dict[str, float]]:
    """
    Run aggregated solver tests on each difficulty level and plot summaries.

    Args:
        runs: Number of independent games to run per level.
        mines_generation_algorithm: Mine placement rule.
        levels: Mapping level name -> (size, mines); defaults to LEVELS.
        show: If True, display the matplotlib figures.

    Returns:
        Mapping from level name to statistics dict returned by
        run_solver_many_tests().
    """
    levels = levels if levels is not None else LEVELS

    results: Dict[str, Dict[str, float]] = {}
    for level, (size, mines) in levels.items():
        results[level] = run_solver_many_tests(
            size, mines, runs, mines_generation_algorithm
        )

    level_names = list(levels.keys())
    x = np.arange(len(level_names))
    bar_w = 0.25

    # 1) Actions taken (by method)
    plt.figure()  # type: ignore[misc]
    for offset, key, label in (
        (-bar_w, "avg_heuristic_count", "heuristic"),
        (0.0, "avg_seed_count", "seed"),
        (bar_w, "avg_deduced_count", "deduce"),
    ):
        values = [results[n].get(key, 0.0) for n in level_names]
        plt.bar(x + offset, values, width=bar_w, label=label)  # type: ignore[misc]
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Average actions")  # type: ignore[misc]
    plt.title("Average actions by method (per game)")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    # 2) Outcome rates by level
    plt.figure()  # type: ignore[misc]
    bottom = np.zeros(len(level_names))
    for key, label in (("win_rate", "win"), ("stuck_rate", "stuck"), ("loss_rate", "loss")):
        values = np.array([results[n][key] for n in level_names])
        plt.bar(x, values, bottom=bottom, label=label)  # type: ignore[misc]
        bottom += values
    plt.xticks(x, level_names)  # type: ignore[misc]
    plt.ylabel("Rate")  # type: ignore[misc]
    plt.ylim(0.0, 1.0)  # type: ignore[misc]
    plt.title("Outcome by difficulty level")  # type: ignore[misc]
    plt.legend()  # type: ignore[misc]
    plt.tight_layout()

    if show:
        plt.show()  # type: ignore[misc]

    return results


def summarize_method_mix(
    results: Dict[str, Dict[str, float]], *, level: str = "expert"
) -> Dict[str, float]:
    """
    Summarize where one level's actions came from and how hard deduction worked.

    Args:
        results: Dict[level_name -> metrics_dict] from run_solver_level_analysis().
        level: Which level to summarize.

    Returns:
        Dict with heuristic_frac, seed_frac, deduced_frac, win_rate,
        steps_per_deduction and derived_per_deduction.
    """
    if level not in results:
        raise KeyError(f"Level {level!r} not found in results.")
    m = results[level]

    deduced = float(m.get("avg_deduced_count", 0.0))
    return {
        "heuristic_frac": float(m.get("heuristic_frac", 0.0)),
        "seed_frac": float(m.get("seed_frac", 0.0)),
        "deduced_frac": float(m.get("deduced_frac", 0.0)),
        "win_rate": float(m["win_rate"]),
        "steps_per_deduction": (
            float(m.get("avg_propagation_steps", 0.0)) / deduced if deduced > 0 else 0.0
        ),
        "derived_per_deduction": (
            float(m.get("avg_derived_facts_count", 0.0)) / deduced if deduced > 0 else 0.0
        ),
    }
