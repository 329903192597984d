"""Reading rows and components from a DEF file and writing the legalized result."""

from __future__ import annotations

import os
import re
from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from pathlib import Path

from defplace.placement import Cell, Row

_INT = re.compile(r"[+-]?\d+")


@dataclass
class Design:
    """A design's name, die size, placement rows and cells."""

    name: str = ""
    die_x: int = 0
    die_y: int = 0
    rows: list[Row] = field(default_factory=list)
    cells: list[Cell] = field(default_factory=list)


class _Tokens:
    """Whitespace-separated words of one line, read in order."""

    def __init__(self, line: str) -> None:
        self._line = line
        self._words: Iterator[str] = iter(line.split())

    def word(self) -> str:
        try:
            return next(self._words)
        except StopIteration:
            raise ValueError(f"line ends too early: {self._line.strip()!r}") from None

    def skip(self, count: int) -> None:
        for _ in range(count):
            self.word()

    def int(self) -> int:
        token = self.word()
        match = _INT.match(token)
        if match is None:
            raise ValueError(f"expected an integer, got {token!r} in {self._line.strip()!r}")
        return int(match.group())


def parse_design(lines: Iterable[str]) -> Design:
    """Build a :class:`Design` from the DESIGN, DIEAREA, ROW and component lines of a DEF file."""
    design = Design()
    for line in lines:
        tokens = _Tokens(line)
        words = line.split()
        if not words:
            continue
        keyword = tokens.word()
        if keyword == "DIEAREA":
            tokens.skip(5)
            design.die_x = tokens.int()
            design.die_y = tokens.int()
        elif keyword == "ROW":
            row_name = tokens.word()
            site_name = tokens.word()
            x = tokens.int()
            y = tokens.int()
            orientation = tokens.word()
            tokens.word()
            num_x = tokens.int()
            tokens.word()
            num_y = tokens.int()
            tokens.word()
            step_x = tokens.int()
            step_y = tokens.int()
            design.rows.append(
                Row(row_name, site_name, x, y, orientation, num_x, num_y, step_x, step_y)
            )
        elif keyword == "-":
            inst_name = tokens.word()
            macro_name = tokens.word()
            tokens.skip(3)
            x = tokens.int()
            y = tokens.int()
            tokens.word()
            orientation = tokens.word()
            design.cells.append(Cell(inst_name, macro_name, x, y, orientation))
        elif keyword == "DESIGN":
            design.name = tokens.word()
    return design


def _trunc_div(a: int, b: int) -> int:
    q = abs(a) // abs(b)
    return q if (a >= 0) == (b > 0) else -q


def format_def(design: Design) -> str:
    """Render the design with every cell at its legalized position.

    Each cell takes the orientation of the first row if it sits in an even
    row and of the second row otherwise.  At least two rows are needed.
    """
    if len(design.rows) < 2:
        raise ValueError("at least two rows are needed to tell row orientations apart")
    row_height = design.rows[1].y
    if row_height == 0:
        raise ValueError("the second row must not start at y = 0")
    even = design.rows[0].orientation
    odd = design.rows[1].orientation

    out = [
        "VERSION 5.8 ;",
        'DIVIDERCHAR "/" ;',
        'BUSBITCHARS "[]" ;',
        f"DESIGN {design.name} ;",
        "UNITS DISTANCE MICRONS 1000 ;",
        "",
        f"DIEAREA (0 0) ( {design.die_x} {design.die_y} );",
    ]
    out.extend(
        f"ROW {r.row_name} {r.site_name} {r.x} {r.y} {r.orientation} DO {r.num_x}"
        f" BY {r.num_y} STEP {r.step_x} {r.step_y};"
        for r in design.rows
    )
    out.append("")
    out.append(f"COMPONENTS {len(design.cells)} ;")
    for cell in design.cells:
        orientation = even if _trunc_div(cell.later_y, row_height) % 2 == 0 else odd
        out.append(
            f"- {cell.inst_name} {cell.macro_name} + PLACED ( {cell.later_x} {cell.later_y} )"
            f" {orientation} ;"
        )
    out.append("END COMPONENTS")
    out.append("")
    out.append("END DESIGN")
    return "\n".join(out)


def write_def(design: Design, path: str | os.PathLike[str]) -> Path:
    """Write the design to *path* with ``.def`` appended and return the file written."""
    target = Path(os.fspath(path) + ".def")
    target.write_text(format_def(design), encoding="utf-8")
    return target