"""Gnuplot drawing of a legalized placement: rows as lines, cells as rectangles."""

from __future__ import annotations

import os
import subprocess
import sys
from collections.abc import Iterable, Sequence
from pathlib import Path

from defplace.placement import Cell, Row

_ROW_COLOR = "#D0D0D0"
_CELL_COLOR = "#00CACA"
_MARGIN = 50


def render_placement_script(
    rows: Iterable[Row],
    cells: Sequence[Cell],
    output_path: str,
    cell_size: int,
    site_width: int,
    site_height: int,
    die_x: int,
    die_y: int,
) -> str:
    """Return a gnuplot script that draws *cells* at their legalized positions into *output_path*."""
    cell_width = cell_size * site_width
    out = [
        "reset",
        'set title "result"',
        'set xlabel "X"',
        'set ylabel "Y"',
    ]
    out.extend(
        f"set arrow from 0 , {row.y} to {row.step_x * row.num_x},{row.y}"
        f' nohead lw 2 lc rgb "{_ROW_COLOR}"'
        for row in rows
    )
    for index, cell in enumerate(cells, start=1):
        x1, y1 = cell.later_x, cell.later_y
        out.append(
            f"set object {index} rect from {x1},{y1} to {x1 + cell_width},{y1 + site_height}"
            f' lw 1 fs solid fc rgb "{_CELL_COLOR}"'
        )

    max_x = max([die_x, *(cell.later_x + cell_width for cell in cells)])
    max_y = max([die_y, *(cell.later_y + site_height for cell in cells)])
    out.extend(
        [
            f"set xrange [0:{max_x + _MARGIN}]",
            f"set yrange [0:{max_y + _MARGIN}]",
            "plot 0 notitle",
            "set terminal pngcairo size 6000,4000 enhanced font 'Arial,10'",
            f'set output "{output_path}"',
            "replot",
        ]
    )
    return "\n".join(out) + "\n"


def draw_placement(
    rows: Iterable[Row],
    cells: Sequence[Cell],
    output_path: str,
    cell_size: int,
    site_width: int,
    site_height: int,
    die_x: int,
    die_y: int,
    script_path: str | os.PathLike[str] = "draw_placement.gp",
) -> int:
    """Write the drawing script to *script_path* and run gnuplot on it.

    Returns gnuplot's exit status; a failure is reported as a warning on stderr.
    """
    script = Path(script_path)
    script.write_text(
        render_placement_script(
            rows, cells, output_path, cell_size, site_width, site_height, die_x, die_y
        ),
        encoding="utf-8",
    )
    try:
        code = subprocess.run(["gnuplot", str(script)], check=False).returncode
    except OSError as exc:
        print(f"Warning: gnuplot could not be started: {exc}", file=sys.stderr)
        return 127
    if code != 0:
        print(f"Warning: gnuplot failed with code {code}", file=sys.stderr)
    return code