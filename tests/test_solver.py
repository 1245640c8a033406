"""Tests for the turn-based solver and its heuristics."""

import pytest

from minesweeper_deduce import (
    Board,
    Conclusion,
    Coord,
    MinesweeperSolver,
    TurnResult,
)

from .conftest import COIN_FLIP_LAYOUT, TOP_ROW_LAYOUT


def test_find_obvious_mine() -> None:
    """A 1 with a single hidden neighbor points at the mine."""
    board = Board.from_layout(COIN_FLIP_LAYOUT)
    for x, y in ((1, 0), (0, 1), (1, 1)):
        board.reveal(x, y)

    solver = MinesweeperSolver(board)
    assert solver.find_obvious_mine() == Conclusion(Coord(0, 0), "M")
    assert solver.find_obvious_safe() is None


def test_find_obvious_safe(top_row_board: Board) -> None:
    """A number satisfied by flags clears its other hidden neighbors."""
    solver = MinesweeperSolver(top_row_board)
    assert solver.find_obvious_mine() is None
    assert solver.find_obvious_safe() is None

    top_row_board.set_flag(2, 0, True)
    assert solver.find_obvious_safe() == Conclusion(Coord(1, 0), "S")


def test_step_on_stuck_board_counts_stuck(coin_flip_board: Board) -> None:
    """A stuck turn is counted and leaves no move behind."""
    solver = MinesweeperSolver(coin_flip_board)

    assert solver.step() is TurnResult.STUCK
    assert solver.turns_count == 1
    assert solver.stuck_count == 1
    assert solver.moves_sequence == []
    assert solver.steps_history == []


def test_solve_wins_with_mixed_methods() -> None:
    """First move, deduction and heuristics each contribute one action."""
    board = Board.from_layout(TOP_ROW_LAYOUT)
    solver = MinesweeperSolver(board, start_cell=(1, 2))

    status, payload = solver.solve()

    assert status == 1
    assert payload["moves_sequence"] == [(1, 2, "S"), (2, 0, "M"), (1, 0, "S")]
    assert [s["method"] for s in payload["steps_history"]] == [
        "first_move",
        "deduce",
        "heuristic",
    ]
    assert payload["turns_count"] == 3
    assert payload["markings_count"] == 1
    assert payload["reveal_moves_count"] == 2
    assert payload["heuristic_count"] == 1
    assert payload["deduced_count"] == 1
    assert payload["revealed_cells_count"] == 7


def test_solve_without_heuristics_uses_seeded_facts() -> None:
    """With heuristics off, a flag-reduced number becomes a seeded conclusion."""
    board = Board.from_layout(TOP_ROW_LAYOUT)
    solver = MinesweeperSolver(board, use_heuristics=False, start_cell=(1, 2))

    status, payload = solver.solve()

    assert status == 1
    assert payload["heuristic_count"] == 0
    assert payload["deduced_count"] == 1
    assert payload["seed_count"] == 1
    assert payload["propagation_steps"] == 1


def test_steps_history_snapshots() -> None:
    """Each recorded step carries the visible grid after its action."""
    board = Board.from_layout(TOP_ROW_LAYOUT)
    solver = MinesweeperSolver(board, start_cell=(1, 2))
    solver.solve()

    first, second = solver.steps_history[:2]
    assert first["action"] == "reveal"
    assert first["cell"] == (1, 2)
    assert first["step_number"] == 0
    assert first["knowledge_snapshot"][2] == ["0", "0", "0"]
    assert second["action"] == "mark"
    assert second["knowledge_snapshot"][0] == [None, None, "M"]


def test_record_steps_disabled() -> None:
    """Benchmarks can skip step recording."""
    board = Board.from_layout(TOP_ROW_LAYOUT)
    solver = MinesweeperSolver(board, record_steps=False, start_cell=(1, 2))
    status, payload = solver.solve()

    assert status == 1
    assert payload["steps_history"] == []
    assert len(payload["moves_sequence"]) == 3


@pytest.mark.parametrize("start, expected", [((1, 1), 0), ((0, 0), -1)])
def test_solve_stuck_or_lost(start, expected) -> None:
    """A blind first move may lose; afterwards the solver stops rather than guess."""
    board = Board.from_layout(COIN_FLIP_LAYOUT)
    status, payload = MinesweeperSolver(board, start_cell=start).solve()

    assert status == expected
    assert payload["turns_count"] == (2 if expected == 0 else 1)


def test_solve_respects_turn_limit() -> None:
    """Running out of turns on an unfinished board is not a win."""
    board = Board.from_layout(TOP_ROW_LAYOUT)
    status, payload = MinesweeperSolver(board, start_cell=(1, 2)).solve(max_turns=1)

    assert status == 0
    assert payload["turns_count"] == 1


def test_random_games_never_lose() -> None:
    """Every flag is checked against the mines and no deduced reveal hits one."""
    for _ in range(10):
        board = Board(9, 10)
        status, payload = MinesweeperSolver(board, verify_flags=True, record_steps=False).solve()

        assert status in (0, 1)
        assert not board.has_revealed_mines()
        assert payload["markings_count"] == board.flags_count()
        if status == 1:
            assert board.complete()


def test_rejects_non_positive_step_cap() -> None:
    """The per-turn comparison cap must be positive."""
    with pytest.raises(ValueError):
        MinesweeperSolver(Board(5, 3), max_steps=0)
