"""Tests for facts and the knowledge base index/worklist."""

import pytest

from minesweeper_deduce import (
    Conclusion,
    ContradictionError,
    Coord,
    Fact,
    InvariantViolationError,
    KnowledgeBase,
)

T1, T2, T3, T4 = Coord(0, 0), Coord(1, 0), Coord(2, 0), Coord(3, 0)


def test_fact_equality_and_hash() -> None:
    """Facts are equal iff cells and mine count match."""
    assert Fact(1, [T1, T2]) == Fact(1, {(1, 0), (0, 0)})
    assert Fact(1, [T1, T2]) != Fact(2, [T1, T2])
    assert Fact(1, [T1, T2]) != Fact(1, [T1, T3])
    assert len({Fact(1, [T1, T2]), Fact(1, [T2, T1])}) == 1


def test_fact_is_immutable() -> None:
    """Attributes cannot be reassigned after construction."""
    fact = Fact(1, [T1])
    with pytest.raises(AttributeError):
        fact.mine_count = 0  # type: ignore[misc]


@pytest.mark.parametrize(
    "mine_count, cells",
    [(-1, [T1]), (3, [T1, T2]), (0, [])],
)
def test_fact_rejects_invalid_counts(mine_count, cells) -> None:
    """Counts outside [0, |cells|] and empty cell sets fail fast."""
    with pytest.raises(InvariantViolationError):
        Fact(mine_count, cells)


def test_conclusions() -> None:
    """Only all-safe and all-mine facts are conclusions."""
    safe = Fact(0, [T2, T1])
    mines = Fact(2, [T3, T2])
    open_fact = Fact(1, [T1, T2])

    assert safe.is_conclusion and safe.definite_safe
    assert mines.is_conclusion and mines.definite_mine
    assert not open_fact.is_conclusion

    assert safe.conclusion() == Conclusion(T1, "S")
    assert mines.conclusion() == Conclusion(T2, "M")
    assert mines.conclusion().is_mine
    with pytest.raises(InvariantViolationError):
        open_fact.conclusion()


def test_add_fact_ignores_duplicates() -> None:
    """Adding an equal fact twice is a no-op."""
    kb = KnowledgeBase()
    first = kb.add_fact(1, {T1, T2})
    again = kb.add_fact(1, {T2, T1})

    assert first == Fact(1, [T1, T2])
    assert again is None
    assert len(kb) == 1
    assert first in kb
    assert not kb.has_pending()


def test_add_fact_detects_contradiction() -> None:
    """Two counts over the same cells abort instead of picking one."""
    kb = KnowledgeBase()
    kb.add_fact(1, {T1})
    with pytest.raises(ContradictionError):
        kb.add_fact(0, {T1})


def test_add_fact_queues_related_pairs_once() -> None:
    """A new fact is paired once with each fact sharing any cell."""
    kb = KnowledgeBase()
    a = kb.add_fact(2, {T1, T2, T3})
    b = kb.add_fact(1, {T1, T2})
    c = kb.add_fact(0, {T4})
    d = kb.add_fact(1, {T2, T3, T4})

    assert kb.pending_count == 4
    assert kb.take_next() == (b, a)
    assert kb.take_next() == (d, a)
    assert kb.take_next() == (d, b)
    assert kb.take_next() == (d, c)
    assert kb.take_next() is None
    assert c not in kb.facts_for(T1)


def test_index_tracks_cells() -> None:
    """facts_for returns every fact referencing a cell, in insertion order."""
    kb = KnowledgeBase()
    a = kb.add_fact(1, {T1, T2})
    b = kb.add_fact(1, {T2, T3})

    assert kb.facts_for(T2) == (a, b)
    assert kb.facts_for((0, 0)) == (a,)
    assert kb.facts_for(T4) == ()
    assert kb.facts == (a, b)


def test_derived_facts_are_counted() -> None:
    """Derived insertions are tallied separately from board facts."""
    kb = KnowledgeBase()
    kb.add_fact(1, {T1, T2})
    kb.add_fact(1, {T3, T4}, derived=True)
    kb.add_fact(1, {T3, T4}, derived=True)

    assert kb.derived_count == 1
    assert len(kb) == 2
