"""Counted-subset facts and the per-turn knowledge base that indexes them."""

import logging
from collections import defaultdict, deque
from typing import (
    AbstractSet,
    DefaultDict,
    Deque,
    Dict,
    FrozenSet,
    Iterable,
    List,
    NamedTuple,
    Optional,
    Set,
    Tuple,
)

from .errors import ContradictionError, InvariantViolationError
from .utils import Coord

logger = logging.getLogger(__name__)


class Conclusion(NamedTuple):
    """
    A certain verdict about a single cell.

    verdict:
        "M" -> the cell is a mine and should be flagged
        "S" -> the cell is safe and should be revealed
    """

    cell: Coord
    verdict: str

    @property
    def is_mine(self) -> bool:
        return self.verdict == "M"


class Fact:
    """
    Assertion that exactly ``mine_count`` of ``cells`` are mines.

    Facts are immutable values: two facts are equal iff their cell sets and
    mine counts are equal.
    """

    __slots__ = ("mine_count", "cells")

    def __init__(self, mine_count: int, cells: Iterable[Tuple[int, int]]) -> None:
        """
        Build a fact, validating its invariants.

        Args:
            mine_count: Number of mines among ``cells``.
            cells: Coordinates the fact refers to.

        Raises:
            InvariantViolationError: If ``cells`` is empty or ``mine_count``
                is outside ``[0, len(cells)]``.
        """
        frozen: FrozenSet[Coord] = frozenset(Coord(x, y) for x, y in cells)
        if not frozen:
            raise InvariantViolationError("A fact must reference at least one cell.")
        if mine_count < 0 or mine_count > len(frozen):
            raise InvariantViolationError(
                f"Fact claims {mine_count} mines in {len(frozen)} cells."
            )
        object.__setattr__(self, "mine_count", mine_count)
        object.__setattr__(self, "cells", frozen)

    def __setattr__(self, name: str, value: object) -> None:
        raise AttributeError("Fact is immutable.")

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Fact):
            return NotImplemented
        return self.mine_count == other.mine_count and self.cells == other.cells

    def __hash__(self) -> int:
        return hash((self.mine_count, self.cells))

    def __repr__(self) -> str:
        cells = ", ".join(str(c) for c in sorted(self.cells))
        return f"Fact({self.mine_count} in {{{cells}}})"

    @property
    def definite_mine(self) -> bool:
        """Whether every cell of the fact is a mine."""
        return self.mine_count == len(self.cells)

    @property
    def definite_safe(self) -> bool:
        """Whether every cell of the fact is safe."""
        return self.mine_count == 0

    @property
    def is_conclusion(self) -> bool:
        return self.definite_mine or self.definite_safe

    def conclusion(self) -> Conclusion:
        """
        Translate a conclusion fact into a single-cell verdict.

        The smallest coordinate is chosen so the result is deterministic.

        Raises:
            InvariantViolationError: If the fact is not a conclusion.
        """
        if not self.is_conclusion:
            raise InvariantViolationError(f"{self!r} is not a conclusion.")
        return Conclusion(min(self.cells), "S" if self.definite_safe else "M")


class KnowledgeBase:
    """
    Incrementally built collection of facts for a single solver turn.

    Keeps:
      - the accepted facts, in insertion order
      - an index cell -> facts referencing that cell
      - a FIFO worklist of fact pairs that share at least one cell and have
        not been compared yet

    A pair is enqueued once, when its second fact is accepted; the deducer
    tries both orientations, so the reverse pair is never queued.
    """

    def __init__(self) -> None:
        self._facts: List[Fact] = []
        self._by_cells: Dict[FrozenSet[Coord], Fact] = {}
        self._index: DefaultDict[Coord, List[Fact]] = defaultdict(list)
        self._pending: Deque[Tuple[Fact, Fact]] = deque()

        # Counters (for analysis)
        self.derived_count: int = 0

    # -------------------------------------------------------------------------
    # Queries
    # -------------------------------------------------------------------------

    @property
    def facts(self) -> Tuple[Fact, ...]:
        return tuple(self._facts)

    @property
    def pending_count(self) -> int:
        return len(self._pending)

    def __len__(self) -> int:
        return len(self._facts)

    def __contains__(self, fact: object) -> bool:
        return isinstance(fact, Fact) and self._by_cells.get(fact.cells) == fact

    def facts_for(self, cell: Tuple[int, int]) -> Tuple[Fact, ...]:
        """Return every accepted fact that references ``cell``."""
        return tuple(self._index.get(Coord(*cell), ()))

    def has_pending(self) -> bool:
        return bool(self._pending)

    def take_next(self) -> Optional[Tuple[Fact, Fact]]:
        """Pop the oldest pending fact pair, or None when the worklist is empty."""
        if not self._pending:
            return None
        return self._pending.popleft()

    # -------------------------------------------------------------------------
    # Insertion
    # -------------------------------------------------------------------------

    def add_fact(
        self,
        mine_count: int,
        cells: AbstractSet[Tuple[int, int]],
        *,
        derived: bool = False,
    ) -> Optional[Fact]:
        """
        Accept a new fact and queue it against every related fact.

        Args:
            mine_count: Number of mines among ``cells``.
            cells: Coordinates the fact refers to.
            derived: True when the fact was produced by deduction rather than
                read off the board; only affects bookkeeping and logging.

        Returns:
            The accepted fact, or None if an equal fact was already known.
            Callers should check ``is_conclusion`` on the result; a singleton
            conclusion has no partner to be compared against.

        Raises:
            InvariantViolationError: If the fact itself is malformed.
            ContradictionError: If a known fact covers the same cells with a
                different mine count.
        """
        fact = Fact(mine_count, cells)

        existing = self._by_cells.get(fact.cells)
        if existing is not None:
            if existing.mine_count != fact.mine_count:
                raise ContradictionError(
                    f"Contradiction between {existing!r} and {fact!r}."
                )
            return None

        seen: Set[int] = set()
        for cell in sorted(fact.cells):
            for other in self._index[cell]:
                if id(other) in seen:
                    continue
                seen.add(id(other))
                self._pending.append((fact, other))
            self._index[cell].append(fact)

        self._facts.append(fact)
        self._by_cells[fact.cells] = fact
        if derived:
            self.derived_count += 1

        logger.debug("+ %r%s", fact, " (derived)" if derived else "")
        return fact
