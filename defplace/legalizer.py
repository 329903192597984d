"""Legalize standard-cell placement from a DEF file onto row sites."""

from __future__ import annotations

import argparse
import sys
from collections.abc import Sequence

from defplace.def_io import Design, parse_design, write_def
from defplace.placement import (
    apply_cluster,
    best_permutation,
    form_cluster,
    place_cell,
    snap_to_grid,
    top_displaced,
)


def legalize(
    design: Design,
    cell_size: int,
    rounds: int = 50,
    top_k: int = 6,
    radius: int = 5,
) -> Design:
    """Place every cell of *design* on free row sites and refine the worst displacements.

    Cells are snapped to the site grid, placed greedily from the most displaced
    down, then for *rounds* rounds the *top_k* most displaced cells have their
    row neighbourhoods reordered when that lowers the largest displacement.
    The design's cells are changed in place; the design is returned.
    """
    if not design.rows:
        raise ValueError("the design has no rows")
    site_width = design.rows[0].step_x
    site_height = design.die_y // len(design.rows)
    if site_width <= 0 or site_height <= 0:
        raise ValueError("site width and row height must be positive")

    cells = design.cells
    snap_to_grid(cells, site_width, site_height, design.die_x, design.die_y)
    cells.sort(key=lambda cell: cell.distance, reverse=True)

    row_sites = [[False] * row.num_x for row in design.rows]
    for cell in cells:
        place_cell(row_sites, cell, cell_size, site_width, site_height)

    count = min(top_k, len(cells))
    for _ in range(rounds):
        for cell in top_displaced(cells, count):
            cluster = form_cluster(cell, cells, radius)
            best = best_permutation(cluster)
            if best.max_disp < cluster.original_max_disp:
                apply_cluster(cluster, best)
    return design


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry: ``CELL_SIZE ALPHA INPUT.def OUTPUT`` writes ``OUTPUT.def``."""
    parser = argparse.ArgumentParser(description="Legalize a DEF placement onto row sites.")
    parser.add_argument("cell_size", type=int, help="cell width in sites")
    parser.add_argument("alpha", type=float, help="weight of the largest displacement in the score")
    parser.add_argument("input", help="input DEF file")
    parser.add_argument("output", help="output name; '.def' is appended")
    args = parser.parse_args(argv)

    try:
        with open(args.input, encoding="utf-8") as handle:
            design = parse_design(handle)
    except OSError as exc:
        print(f"cannot read {args.input}: {exc}", file=sys.stderr)
        return 1

    try:
        legalize(design, args.cell_size)
        write_def(design, args.output)
    except ValueError as exc:
        print(f"cannot legalize {args.input}: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"cannot write {args.output}.def: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())