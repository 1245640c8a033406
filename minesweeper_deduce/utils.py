"""Coordinates, set algebra and neighborhood helpers shared by the solver."""

from typing import AbstractSet, Dict, FrozenSet, List, NamedTuple, Set, Tuple, TypeVar

T = TypeVar("T")


class Coord(NamedTuple):
    """A cell position on the grid; x is the column, y is the row."""

    x: int
    y: int

    def __str__(self) -> str:
        return f"<{self.x}, {self.y}>"


# -------------------------------------------------------------------------
# Set algebra
# -------------------------------------------------------------------------


def union(*sets: AbstractSet[T]) -> FrozenSet[T]:
    """Return the union of all given sets (empty for no arguments)."""
    out: Set[T] = set()
    for s in sets:
        out |= s
    return frozenset(out)


def intersection(*sets: AbstractSet[T]) -> FrozenSet[T]:
    """Return the intersection of all given sets (empty for no arguments)."""
    if not sets:
        return frozenset()
    first, *rest = sets
    return frozenset(v for v in first if all(v in s for s in rest))


def difference(a: AbstractSet[T], b: AbstractSet[T]) -> FrozenSet[T]:
    """Return ``a \\ b``."""
    return frozenset(v for v in a if v not in b)


def is_subset(superset: AbstractSet[T], subset: AbstractSet[T]) -> bool:
    """Return whether ``subset`` is a (non-strict) subset of ``superset``."""
    return all(v in superset for v in subset)


def is_strict_subset(superset: AbstractSet[T], subset: AbstractSet[T]) -> bool:
    """Return whether ``subset`` is a strict subset of ``superset``."""
    return is_subset(superset, subset) and not is_subset(subset, superset)


def is_equal(a: AbstractSet[T], b: AbstractSet[T]) -> bool:
    """Return whether two sets hold the same elements."""
    return is_subset(a, b) and is_subset(b, a)


# -------------------------------------------------------------------------
# Grid geometry
# -------------------------------------------------------------------------

# Module-level cache: size -> {Coord: (Coord, ...), ...}
_NEIGHBORHOODS_CACHE: Dict[int, Dict[Coord, Tuple[Coord, ...]]] = {}


def get_neighborhoods(size: int) -> Dict[Coord, Tuple[Coord, ...]]:
    """
    Precompute and cache 8-connected neighbor coordinates for every cell of a square grid.

    Args:
        size: Grid side length. Must be positive.

    Returns:
        Mapping from each cell to a tuple of its neighbors, clipped at the
        grid edges and excluding the cell itself.

    Raises:
        ValueError: If size is non-positive.
    """
    if size <= 0:
        raise ValueError("size must be positive.")

    cached = _NEIGHBORHOODS_CACHE.get(size)
    if cached is not None:
        return cached

    neighborhoods: Dict[Coord, Tuple[Coord, ...]] = {}
    for y in range(size):
        for x in range(size):
            nbrs: List[Coord] = []
            for dy in (-1, 0, 1):
                for dx in (-1, 0, 1):
                    if dx == 0 and dy == 0:
                        continue
                    nx, ny = x + dx, y + dy
                    if 0 <= nx < size and 0 <= ny < size:
                        nbrs.append(Coord(nx, ny))
            neighborhoods[Coord(x, y)] = tuple(nbrs)

    _NEIGHBORHOODS_CACHE[size] = neighborhoods
    return neighborhoods


def neighbors(cell: Tuple[int, int], size: int) -> Tuple[Coord, ...]:
    """Return the neighbors of ``cell`` on a ``size x size`` grid."""
    x, y = cell
    if not (0 <= x < size and 0 <= y < size):
        raise ValueError("Cell coordinates are outside the board.")
    return get_neighborhoods(size)[Coord(x, y)]
