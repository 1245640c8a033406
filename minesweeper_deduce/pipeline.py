"""One solver turn: seed facts from the board, propagate, apply a single action."""

import logging
from enum import Enum
from typing import List, NamedTuple, Optional, Tuple

from .deduce import DEFAULT_MAX_STEPS, propagate
from .engine import Board
from .errors import InvariantViolationError
from .knowledge import Conclusion, KnowledgeBase
from .utils import Coord

logger = logging.getLogger(__name__)


class TurnResult(Enum):
    ACTION_TAKEN = "action taken"
    STUCK = "stuck"


class TurnPlan(NamedTuple):
    """
    Outcome of planning a turn, before anything touches the board.

    method:
        "first_move" -> fresh board, reveal the start cell
        "seed"       -> a fact read off the board was already a conclusion
        "deduce"     -> the conclusion came out of pairwise propagation
        None         -> stuck
    """

    conclusion: Optional[Conclusion]
    method: Optional[str]
    facts_count: int = 0
    derived_count: int = 0
    steps: int = 0


def default_start_cell(board: Board) -> Coord:
    """
    Canonical first reveal for a fresh board.

    The corner for boards that only guarantee the first cell, otherwise the
    centre so the guaranteed-safe neighborhood opens as much as possible.
    """
    if board.mines_generation_algorithm == "safe_first_action_rule":
        return Coord(0, 0)
    return Coord(board.size // 2, board.size // 2)


def seed_knowledge(board: Board) -> Tuple[KnowledgeBase, Optional[Conclusion]]:
    """
    Build a fresh knowledge base from the visible board state.

    Adds the global fact (unflagged mines among all unknown cells) and one
    fact per revealed numbered cell over its unknown neighbors. Stops early
    when an inserted fact is already a conclusion.

    Args:
        board: Board to read; it is not modified.

    Returns:
        Tuple of (knowledge base, conclusion found while seeding or None).
    """
    kb = KnowledgeBase()
    n = board.size

    unknown = board.unknown_cells()
    if unknown:
        fact = kb.add_fact(board.mines_count - board.flags_count(), frozenset(unknown))
        if fact is not None and fact.is_conclusion:
            return kb, fact.conclusion()

    for y in range(n):
        for x in range(n):
            if not board.is_revealed(x, y) or board.has_mine(x, y):
                continue
            number = board.neighbor_mine_count(x, y)
            if number == 0:
                continue

            cells: List[Coord] = []
            unfound_mines = number
            for nx, ny in board.neighbors(x, y):
                if board.has_flag(nx, ny):
                    unfound_mines -= 1
                elif not board.is_revealed(nx, ny):
                    cells.append(Coord(nx, ny))

            if not cells:
                continue
            fact = kb.add_fact(unfound_mines, frozenset(cells))
            if fact is not None and fact.is_conclusion:
                return kb, fact.conclusion()

    return kb, None


def plan_turn(
    board: Board,
    max_steps: int = DEFAULT_MAX_STEPS,
    start_cell: Optional[Tuple[int, int]] = None,
) -> TurnPlan:
    """
    Decide the single action for this turn without mutating the board.

    Args:
        board: Board to read.
        max_steps: Upper bound on pair comparisons during propagation.
        start_cell: First reveal on a fresh board; defaults to
            ``default_start_cell(board)``.

    Returns:
        The TurnPlan; ``conclusion`` is None when stuck.

    Raises:
        ContradictionError: If the visible state is inconsistent.
        InvariantViolationError: If a malformed fact is produced.
    """
    if not board.has_reveals():
        cell = Coord(*start_cell) if start_cell is not None else default_start_cell(board)
        return TurnPlan(Conclusion(cell, "S"), "first_move")

    kb, conclusion = seed_knowledge(board)
    if conclusion is not None:
        return TurnPlan(conclusion, "seed", len(kb))

    result = propagate(kb, max_steps)
    if result.conclusion is None:
        logger.debug(
            "Stuck after %d steps over %d facts (%d derived).",
            result.steps,
            len(kb),
            kb.derived_count,
        )
        return TurnPlan(None, None, len(kb), kb.derived_count, result.steps)

    return TurnPlan(result.conclusion, "deduce", len(kb), kb.derived_count, result.steps)


def apply_conclusion(
    board: Board,
    conclusion: Conclusion,
    *,
    verify_flags: bool = False,
    expect_safe: bool = True,
) -> bool:
    """
    Perform the one board mutation a conclusion calls for.

    Args:
        board: Board to mutate.
        conclusion: Cell and verdict to act on.
        verify_flags: If True, fail when a flagged cell holds no mine.
        expect_safe: If True, revealing a mine is treated as a solver defect.
            The blind first move passes False.

    Returns:
        Whether a mine was revealed (only possible with ``expect_safe=False``).

    Raises:
        InvariantViolationError: If a deduced reveal hits a mine or a
            verified flag lands on a safe cell.
    """
    x, y = conclusion.cell
    if conclusion.is_mine:
        logger.debug("Flagging %s", conclusion.cell)
        if verify_flags and not board.has_mine(x, y):
            raise InvariantViolationError(
                f"Solver flagged {conclusion.cell}, which holds no mine."
            )
        board.set_flag(x, y, True)
        return False

    logger.debug("Revealing %s", conclusion.cell)
    hit_mine = board.reveal(x, y)
    if hit_mine and expect_safe:
        raise InvariantViolationError(f"Solver revealed a mine at {conclusion.cell}.")
    return hit_mine


def advance(
    board: Board,
    *,
    max_steps: int = DEFAULT_MAX_STEPS,
    start_cell: Optional[Tuple[int, int]] = None,
    verify_flags: bool = False,
) -> TurnResult:
    """
    Run one full solver turn against the board.

    A fresh knowledge base is built every call and discarded afterwards, so
    calling this twice on a stuck board is stuck twice with no change.

    Args:
        board: Board to read and mutate.
        max_steps: Upper bound on pair comparisons during propagation.
        start_cell: First reveal on a fresh board.
        verify_flags: Check deduced mines against the board before flagging.

    Returns:
        TurnResult.ACTION_TAKEN if exactly one cell was flagged or revealed,
        TurnResult.STUCK if nothing could be deduced (board untouched).
    """
    plan = plan_turn(board, max_steps, start_cell)
    if plan.conclusion is None:
        return TurnResult.STUCK

    apply_conclusion(
        board,
        plan.conclusion,
        verify_flags=verify_flags,
        expect_safe=plan.method != "first_move",
    )
    return TurnResult.ACTION_TAKEN
