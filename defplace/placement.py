"""Grid snapping, greedy site assignment and cluster refinement for standard cells."""

from __future__ import annotations

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field


@dataclass
class Row:
    """A placement row as declared in a DEF file."""

    row_name: str
    site_name: str
    x: int
    y: int
    orientation: str
    num_x: int
    num_y: int
    step_x: int
    step_y: int


@dataclass(eq=False)
class Cell:
    """A movable cell: where the input put it and where legalization puts it."""

    inst_name: str
    macro_name: str
    original_x: int
    original_y: int
    orientation: str
    later_x: int = 0
    later_y: int = 0
    distance: int = 0

    def _move(self, x: int, y: int) -> None:
        self.later_x = x
        self.later_y = y
        self.distance = abs(self.original_x - x) + abs(self.original_y - y)


@dataclass
class Cluster:
    """Neighbouring cells of one row together with the x sites they occupy.

    ``keys`` give each cell's position in the list it was taken from; the
    permutation search enumerates orders in ascending order of these keys,
    starting at the order the cells are listed in.  Empty keys mean the listed
    order is taken as the smallest one, so every order is tried.
    """

    cells: list[Cell] = field(default_factory=list)
    sites: list[int] = field(default_factory=list)
    original_max_disp: int = 0
    keys: list[int] = field(default_factory=list)


@dataclass
class PermResult:
    """The best order of a cluster's cells and its largest x displacement."""

    order: list[Cell]
    max_disp: int


def _grid_index(value: int, limit: int, step: int) -> int:
    if 0 <= value < limit:
        return value // step
    if value < 0:
        return 0
    return (limit - 1) // step


def snap_to_grid(
    cells: Iterable[Cell], site_width: int, site_height: int, die_x: int, die_y: int
) -> None:
    """Move every cell to the grid point at or below its original position, inside the die."""
    for cell in cells:
        column = _grid_index(cell.original_x, die_x, site_width)
        row = _grid_index(cell.original_y, die_y, site_height)
        cell._move(column * site_width, row * site_height)


def place_cell(
    row_sites: list[list[bool]],
    cell: Cell,
    cell_size: int,
    site_width: int,
    site_height: int,
) -> None:
    """Put *cell* on the free run of sites closest to its original position.

    The first run found at the smallest Manhattan distance wins; its sites are
    marked as taken.  Raises ValueError when no run of *cell_size* free sites
    exists.
    """
    if cell_size < 1:
        raise ValueError(f"cell size must be positive, got {cell_size}")
    best: tuple[int, int, int] | None = None
    for r, sites in enumerate(row_sites):
        y = r * site_height
        for c in range(len(sites) - cell_size + 1):
            if any(sites[c:c + cell_size]):
                continue
            distance = abs(cell.original_x - c * site_width) + abs(cell.original_y - y)
            if best is None or distance < best[0]:
                best = (distance, r, c)
    if best is None:
        raise ValueError(f"no free sites left for cell {cell.inst_name!r}")
    _, r, c = best
    cell._move(c * site_width, r * site_height)
    row_sites[r][c:c + cell_size] = [True] * cell_size


def top_displaced(cells: list[Cell], count: int) -> list[Cell]:
    """Sort *cells* in place by falling displacement and return the first *count*."""
    if count < 0:
        raise ValueError(f"count must not be negative, got {count}")
    cells.sort(key=lambda cell: cell.distance, reverse=True)
    return cells[:count]


def form_cluster(center: Cell, cells: Sequence[Cell], radius: int = 3) -> Cluster:
    """Collect up to *radius* row neighbours on each side of *center*.

    Cells sharing *center*'s row are ordered by x; if *center* is not among
    *cells* the cluster is empty.
    """
    cluster = Cluster(original_max_disp=center.distance)
    same_row = sorted(
        ((index, cell) for index, cell in enumerate(cells) if cell.later_y == center.later_y),
        key=lambda pair: pair[1].later_x,
    )
    position = next(
        (i for i, (_, cell) in enumerate(same_row) if cell is center), None
    )
    if position is None:
        return cluster
    start = max(0, position - radius)
    stop = min(len(same_row) - 1, position + radius)
    for index, cell in same_row[start:stop + 1]:
        cluster.cells.append(cell)
        cluster.sites.append(cell.later_x)
        cluster.keys.append(index)
        cluster.original_max_disp = max(cluster.original_max_disp, cell.distance)
    return cluster


_Allowed = Callable[[int, int], bool]


def _matchable(cells: Iterable[int], positions: Iterable[int], allowed: _Allowed) -> bool:
    """True if *cells* can fill *positions* one to one using only allowed pairs."""
    cells = list(cells)
    positions = list(positions)
    if len(cells) != len(positions):
        return False
    owner: dict[int, int] = {}

    def augment(cell: int, seen: set[int]) -> bool:
        for pos in positions:
            if pos in seen or not allowed(cell, pos):
                continue
            seen.add(pos)
            if pos not in owner or augment(owner[pos], seen):
                owner[pos] = cell
                return True
        return False

    return all(augment(cell, set()) for cell in cells)


def _smallest_completion(
    pool: set[int], first: int, n: int, keys: Sequence[int], allowed: _Allowed
) -> list[int]:
    order: list[int] = []
    pool = set(pool)
    for pos in range(first, n):
        for cell in sorted(pool, key=keys.__getitem__):
            rest = pool - {cell}
            if allowed(cell, pos) and _matchable(rest, range(pos + 1, n), allowed):
                order.append(cell)
                pool = rest
                break
    return order


def _first_order_from_start(n: int, keys: Sequence[int], allowed: _Allowed) -> list[int] | None:
    """Smallest order, by keys, not below the listed order that respects *allowed*."""
    if all(allowed(cell, cell) for cell in range(n)):
        return list(range(n))
    for k in range(n - 1, -1, -1):
        if not all(allowed(cell, cell) for cell in range(k)):
            continue
        remaining = set(range(k, n))
        candidates = sorted(
            (c for c in remaining if keys[c] > keys[k] and allowed(c, k)),
            key=keys.__getitem__,
        )
        for cell in candidates:
            rest = remaining - {cell}
            if _matchable(rest, range(k + 1, n), allowed):
                return list(range(k)) + [cell] + _smallest_completion(rest, k + 1, n, keys, allowed)
    return None


def best_permutation(cluster: Cluster) -> PermResult:
    """Find the order of the cluster's cells over its sites with the least largest x shift.

    Orders are considered from the listed one upward in key order; the first
    order reaching the minimum is returned.
    """
    n = len(cluster.cells)
    if n == 0:
        return PermResult([], 0)
    keys = cluster.keys if cluster.keys else list(range(n))
    cost = [[abs(cell.original_x - site) for site in cluster.sites] for cell in cluster.cells]
    for limit in sorted({value for row in cost for value in row}):
        order = _first_order_from_start(n, keys, lambda c, p, t=limit: cost[c][p] <= t)
        if order is not None:
            return PermResult(
                [cluster.cells[c] for c in order],
                max(cost[c][p] for p, c in enumerate(order)),
            )
    raise AssertionError("the listed order always satisfies its own largest cost")


def apply_cluster(cluster: Cluster, best: PermResult) -> None:
    """Move the cells of *best* onto the cluster's sites, in order."""
    for cell, site in zip(best.order, cluster.sites):
        cell._move(site, cell.later_y)