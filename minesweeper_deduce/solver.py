"""Minesweeper solver that takes one certain action per turn."""

import copy
import logging
from typing import Any, Dict, Iterator, List, Optional, Tuple

from .deduce import DEFAULT_MAX_STEPS
from .engine import Board
from .knowledge import Conclusion
from .pipeline import TurnResult, apply_conclusion, default_start_cell, plan_turn
from .utils import Coord

logger = logging.getLogger(__name__)


class MinesweeperSolver:
    """
    Deduction-only Minesweeper solver.

    Each turn tries, in order:
    1. First move: reveal the start cell on a fresh board
    2. Heuristics: a number whose unknown neighbors are all mines, or whose
       flags already account for it
    3. Subset elimination over the facts rebuilt from the board

    and applies exactly one action. The solver never guesses; when nothing
    is certain the turn reports TurnResult.STUCK.
    """

    def __init__(
        self,
        board: Board,
        max_steps: int = DEFAULT_MAX_STEPS,
        use_heuristics: bool = True,
        record_steps: bool = True,
        start_cell: Optional[Tuple[int, int]] = None,
        verify_flags: bool = False,
    ) -> None:
        """
        Initialize a solving agent bound to a specific board.

        Args:
            board: The board to read and act on.
            max_steps: Maximum pair comparisons per turn before giving up.
            use_heuristics: If True, try the two trivial single-cell rules
                before building the knowledge base.
            record_steps: If True, record step history for replay functionality.
                Set to False for benchmarks to improve performance.
            start_cell: First reveal on a fresh board; defaults to the corner
                or centre depending on the board's mine generation rule.
            verify_flags: If True, check every flag against the hidden mine
                layout and fail loudly when the solver is wrong.
        """
        if max_steps <= 0:
            raise ValueError("max_steps must be positive.")
        self.board = board
        self.max_steps = max_steps
        self.use_heuristics = use_heuristics
        self.record_steps = record_steps
        self.start_cell: Coord = (
            Coord(*start_cell) if start_cell is not None else default_start_cell(board)
        )
        self.verify_flags = verify_flags

        # Metrics / counters (for analysis)
        self.turns_count: int = 0
        self.stuck_count: int = 0
        self.reveal_moves_count: int = 0
        self.markings_count: int = 0
        self.heuristic_count: int = 0
        self.seed_count: int = 0
        self.deduced_count: int = 0
        self.derived_facts_count: int = 0
        self.propagation_steps: int = 0

        self.moves_sequence: List[Tuple[int, int, str]] = []

        # Each step is a dict with: action, cell, method, step_number, knowledge_snapshot
        self.steps_history: List[Dict[str, Any]] = []

    # -------------------------------------------------------------------------
    # Heuristics
    # -------------------------------------------------------------------------

    def _numbered_cells(self) -> Iterator[Tuple[int, int, int]]:
        b = self.board
        for y in range(b.size):
            for x in range(b.size):
                if b.is_revealed(x, y) and not b.has_mine(x, y):
                    yield x, y, b.neighbor_mine_count(x, y)

    def find_obvious_mine(self) -> Optional[Conclusion]:
        """
        Find a number whose unrevealed neighbors must all be mines.

        Returns:
            A mine Conclusion on the first such unflagged neighbor, or None.
        """
        b = self.board
        for x, y, number in self._numbered_cells():
            if number == 0:
                continue
            unrevealed = [n for n in b.neighbors(x, y) if not b.is_revealed(*n)]
            if len(unrevealed) != number:
                continue
            for n in unrevealed:
                if not b.has_flag(*n):
                    return Conclusion(n, "M")
        return None

    def find_obvious_safe(self) -> Optional[Conclusion]:
        """
        Find a number already satisfied by flags; its other neighbors are safe.

        Returns:
            A safe Conclusion on the first such neighbor, or None.
        """
        b = self.board
        for x, y, number in self._numbered_cells():
            nbrs = b.neighbors(x, y)
            if sum(1 for n in nbrs if b.has_flag(*n)) != number:
                continue
            for n in nbrs:
                if not b.is_revealed(*n) and not b.has_flag(*n):
                    return Conclusion(n, "S")
        return None

    # -------------------------------------------------------------------------
    # Turns
    # -------------------------------------------------------------------------

    def _record_step(self, conclusion: Conclusion, method: str) -> None:
        """Record a step for replay functionality."""
        if not self.record_steps:
            return
        self.steps_history.append({
            "action": "mark" if conclusion.is_mine else "reveal",
            "cell": tuple(conclusion.cell),
            "method": method,
            "step_number": len(self.steps_history),
            "knowledge_snapshot": copy.deepcopy(self.board.visible_grid()),
        })

    def _choose(self) -> Tuple[Optional[Conclusion], Optional[str]]:
        if self.use_heuristics and self.board.has_reveals():
            conclusion = self.find_obvious_mine() or self.find_obvious_safe()
            if conclusion is not None:
                self.heuristic_count += 1
                return conclusion, "heuristic"

        plan = plan_turn(self.board, self.max_steps, self.start_cell)
        self.derived_facts_count += plan.derived_count
        self.propagation_steps += plan.steps
        if plan.method == "seed":
            self.seed_count += 1
        elif plan.method == "deduce":
            self.deduced_count += 1
        return plan.conclusion, plan.method

    def step(self) -> TurnResult:
        """
        Take a single turn: at most one flag or reveal on the board.

        Returns:
            TurnResult.ACTION_TAKEN or TurnResult.STUCK.

        Raises:
            SolverError: If the engine finds a contradiction or its own
                action turns out to be wrong.
        """
        self.turns_count += 1
        conclusion, method = self._choose()
        if conclusion is None or method is None:
            self.stuck_count += 1
            return TurnResult.STUCK

        x, y = conclusion.cell
        self.moves_sequence.append((x, y, conclusion.verdict))
        apply_conclusion(
            self.board,
            conclusion,
            verify_flags=self.verify_flags,
            expect_safe=method != "first_move",
        )
        if conclusion.is_mine:
            self.markings_count += 1
        else:
            self.reveal_moves_count += 1

        logger.debug("Turn %d: %s %s via %s", self.turns_count, conclusion.verdict, conclusion.cell, method)
        self._record_step(conclusion, method)
        return TurnResult.ACTION_TAKEN

    def metrics(self) -> Dict[str, Any]:
        """Return the solver's counters as a payload dictionary."""
        return {
            "turns_count": self.turns_count,
            "stuck_count": self.stuck_count,
            "reveal_moves_count": self.reveal_moves_count,
            "markings_count": self.markings_count,
            "heuristic_count": self.heuristic_count,
            "seed_count": self.seed_count,
            "deduced_count": self.deduced_count,
            "derived_facts_count": self.derived_facts_count,
            "propagation_steps": self.propagation_steps,
            "moves_sequence": self.moves_sequence,
            "steps_history": self.steps_history,
        }

    # -------------------------------------------------------------------------
    # Main solving loop
    # -------------------------------------------------------------------------

    def solve(self, max_turns: Optional[int] = None) -> Tuple[int, Dict[str, Any]]:
        """
        Play turns until the game is won, lost, or the solver is stuck.

        Args:
            max_turns: Upper bound on turns; defaults to twice the cell count.

        Returns:
            Tuple of (status, payload) where status is 1 (win), -1 (loss) or
            0 (stuck), and payload is the solver's metrics dictionary.
        """
        if max_turns is None:
            max_turns = 2 * self.board.size * self.board.size

        status = 0
        for _ in range(max_turns):
            if self.board.complete():
                status = 1
                break
            if self.step() is TurnResult.STUCK:
                break
            if self.board.has_revealed_mines():
                status = -1
                break
        else:
            if self.board.complete():
                status = 1
            else:
                logger.warning("Gave up after %d turns.", max_turns)

        payload = self.metrics()
        payload["revealed_cells_count"] = sum(
            sum(row) for row in self.board.revealed
        )
        return status, payload
