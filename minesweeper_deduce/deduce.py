"""Pairwise subset elimination over the facts of a knowledge base."""

import logging
from typing import NamedTuple, Optional, Union

from .errors import ContradictionError
from .knowledge import Conclusion, Fact, KnowledgeBase
from .utils import difference, is_equal, is_strict_subset

logger = logging.getLogger(__name__)

DEFAULT_MAX_STEPS: int = 100_000

Deduction = Union[None, Fact, Conclusion]


class PropagationResult(NamedTuple):
    conclusion: Optional[Conclusion]
    steps: int
    capped: bool


def _deduce_subset(big: Fact, small: Fact) -> Deduction:
    """
    Apply subset elimination where ``small.cells`` is a strict subset of ``big.cells``.

    Returns:
        A Conclusion when the difference is certainly all safe or all mines,
        otherwise the derived Fact covering the difference.

    Raises:
        ContradictionError: If the counts cannot both hold.
    """
    diff = difference(big.cells, small.cells)
    remaining_mines = big.mine_count - small.mine_count

    if remaining_mines < 0 or remaining_mines > len(diff):
        raise ContradictionError(
            f"Contradiction between {big!r} and its subset {small!r}."
        )

    if remaining_mines == 0:
        return Conclusion(min(diff), "S")
    if remaining_mines == len(diff):
        return Conclusion(min(diff), "M")

    return Fact(remaining_mines, diff)


def deduce_pair(a: Fact, b: Fact) -> Deduction:
    """
    Run subset elimination on two related facts.

    The rule is directional, so ``a`` is tried as the superset first and
    then ``b``. Overlapping facts with no subset relation yield nothing.

    Args:
        a: First fact of the pair.
        b: Second fact of the pair.

    Returns:
        None when nothing follows, a derived Fact to insert, or a terminal
        Conclusion naming one cell and its verdict.

    Raises:
        ContradictionError: If the facts disagree about the same cells, or a
            subset claims more mines than its superset allows.
    """
    if is_equal(a.cells, b.cells):
        if a.mine_count != b.mine_count:
            raise ContradictionError(f"Contradiction between {a!r} and {b!r}.")
        return None

    if is_strict_subset(a.cells, b.cells):
        return _deduce_subset(a, b)
    if is_strict_subset(b.cells, a.cells):
        return _deduce_subset(b, a)
    return None


def propagate(
    kb: KnowledgeBase, max_steps: int = DEFAULT_MAX_STEPS
) -> PropagationResult:
    """
    Drain the knowledge base worklist until a conclusion is found.

    Derived facts are fed back through ``kb.add_fact`` and may queue further
    pairs. Stops on the first conclusion, on an empty worklist, or after
    ``max_steps`` pair comparisons.

    Args:
        kb: Knowledge base seeded for the current turn.
        max_steps: Upper bound on pair comparisons.

    Returns:
        PropagationResult with the conclusion (or None), the number of pairs
        compared and whether the step cap was hit.
    """
    steps = 0
    while kb.has_pending():
        if steps >= max_steps:
            logger.warning(
                "Deduction stopped after %d steps with %d pairs pending.",
                steps,
                kb.pending_count,
            )
            return PropagationResult(None, steps, True)

        pair = kb.take_next()
        if pair is None:
            break
        steps += 1

        result = deduce_pair(*pair)
        if result is None:
            continue
        if isinstance(result, Conclusion):
            logger.debug("%r & %r -> %s %s", pair[0], pair[1], result.verdict, result.cell)
            return PropagationResult(result, steps, False)

        added = kb.add_fact(result.mine_count, result.cells, derived=True)
        if added is not None and added.is_conclusion:
            return PropagationResult(added.conclusion(), steps, False)

    return PropagationResult(None, steps, False)
