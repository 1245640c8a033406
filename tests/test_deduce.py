"""Tests for subset elimination and worklist propagation."""

import itertools
import random
from typing import FrozenSet, List

import pytest

from minesweeper_deduce import (
    Conclusion,
    ContradictionError,
    Coord,
    Fact,
    KnowledgeBase,
    deduce_pair,
    propagate,
)

T1, T2, T3 = Coord(0, 0), Coord(1, 0), Coord(2, 0)


def _consistent_assignments(cells: List[Coord], *facts: Fact) -> List[FrozenSet[Coord]]:
    """Brute-force every mine placement over ``cells`` that satisfies all facts."""
    out = []
    for bits in itertools.product((False, True), repeat=len(cells)):
        mines = frozenset(c for c, is_mine in zip(cells, bits) if is_mine)
        if all(len(mines & f.cells) == f.mine_count for f in facts):
            out.append(mines)
    return out


def test_scenario_exact_match_reveals_remainder() -> None:
    """1 in {T1,T2,T3} and 1 in {T2,T3} means T1 is safe."""
    a = Fact(1, [T1, T2, T3])
    b = Fact(1, [T2, T3])

    assert deduce_pair(a, b) == Conclusion(T1, "S")
    assert deduce_pair(b, a) == Conclusion(T1, "S")


def test_scenario_derives_intermediate_fact() -> None:
    """2 in {T1,T2,T3} and 1 in {T1} leaves 1 in {T2,T3}, no action yet."""
    a = Fact(2, [T1, T2, T3])
    b = Fact(1, [T1])

    assert deduce_pair(a, b) == Fact(1, [T2, T3])


def test_scenario_chained_derivation_finds_mine() -> None:
    """The derived fact plus 0 in {T2} pins the mine on T3."""
    derived = deduce_pair(Fact(2, [T1, T2, T3]), Fact(1, [T1]))
    assert isinstance(derived, Fact)

    assert deduce_pair(derived, Fact(0, [T2])) == Conclusion(T3, "M")
    assert deduce_pair(Fact(0, [T2]), derived) == Conclusion(T3, "M")


def test_propagate_feeds_derived_facts_back() -> None:
    """A derived fact is inserted and compared against the facts it overlaps."""
    kb = KnowledgeBase()
    kb.add_fact(2, {T1, T2, T3})
    kb.add_fact(1, {T1})

    result = propagate(kb)
    assert Fact(1, [T2, T3]) in kb
    assert kb.derived_count == 1
    # 2 in {T1,T2,T3} minus the derived 1 in {T2,T3} leaves T1 a mine
    assert result.conclusion == Conclusion(T1, "M")
    assert result.steps == 2


def test_mine_conservation_marks_difference() -> None:
    """When the extra mines fill the difference, every cell in it is a mine."""
    a = Fact(3, [T1, T2, T3])
    b = Fact(1, [T1])

    assert deduce_pair(a, b) == Conclusion(T2, "M")


def test_overlap_without_subset_gives_nothing() -> None:
    """Pairwise elimination only fires on a strict subset relation."""
    assert deduce_pair(Fact(1, [T1, T2]), Fact(1, [T2, T3])) is None
    assert deduce_pair(Fact(1, [T1, T2]), Fact(1, [T1, T2])) is None


@pytest.mark.parametrize(
    "a, b",
    [
        (Fact(1, [T1, T2]), Fact(0, [T1, T2])),
        (Fact(0, [T1, T2]), Fact(1, [T1])),
        (Fact(3, [T1, T2, T3]), Fact(0, [T1])),
    ],
)
def test_inconsistent_pairs_raise(a, b) -> None:
    """Incompatible counts are a hard failure in either orientation."""
    with pytest.raises(ContradictionError):
        deduce_pair(a, b)
    with pytest.raises(ContradictionError):
        deduce_pair(b, a)


def test_deductions_are_sound_against_brute_force() -> None:
    """Every verdict and derived fact holds in all placements consistent with the pair."""
    rng = random.Random(7)
    cells = [Coord(x, 0) for x in range(6)]

    for _ in range(300):
        hidden = frozenset(c for c in cells if rng.random() < 0.4)
        big_cells = frozenset(rng.sample(cells, rng.randint(2, 6)))
        small_cells = frozenset(rng.sample(sorted(big_cells), rng.randint(1, len(big_cells) - 1)))
        big = Fact(len(hidden & big_cells), big_cells)
        small = Fact(len(hidden & small_cells), small_cells)

        result = deduce_pair(big, small)
        worlds = _consistent_assignments(cells, big, small)
        assert worlds

        if isinstance(result, Conclusion):
            assert result.cell in big_cells - small_cells
            if result.is_mine:
                assert all(result.cell in w for w in worlds)
            else:
                assert all(result.cell not in w for w in worlds)
        else:
            assert isinstance(result, Fact)
            assert 0 < result.mine_count < len(result.cells)
            assert result.cells == big_cells - small_cells
            assert all(len(w & result.cells) == result.mine_count for w in worlds)


def test_propagate_stops_at_first_conclusion() -> None:
    """Propagation returns as soon as one pair yields an action."""
    kb = KnowledgeBase()
    kb.add_fact(1, {T1, T2, T3})
    kb.add_fact(1, {T2, T3})
    kb.add_fact(1, {T3, Coord(3, 0)})

    result = propagate(kb)
    assert result.conclusion == Conclusion(T1, "S")
    assert result.steps == 1
    assert not result.capped
    assert kb.has_pending()


def test_propagate_exhausts_worklist_when_stuck() -> None:
    """Overlapping facts without subsets leave the engine stuck."""
    kb = KnowledgeBase()
    kb.add_fact(1, {T1, T2})
    kb.add_fact(1, {T2, T3})

    result = propagate(kb)
    assert result.conclusion is None
    assert result.steps == 1
    assert not kb.has_pending()


def test_propagate_respects_step_cap() -> None:
    """Hitting the step cap reports no conclusion and leaves work pending."""
    kb = KnowledgeBase()
    kb.add_fact(1, {T1, T2})
    kb.add_fact(1, {T2, T3})
    kb.add_fact(1, {T1, T2, T3})

    result = propagate(kb, max_steps=1)
    assert result.conclusion is None
    assert result.capped
    assert result.steps == 1
    assert kb.has_pending()
