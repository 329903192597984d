"""Read component and special-net placements from a DEF file and emit a gnuplot script."""

from __future__ import annotations

import argparse
import re
import sys
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from pathlib import Path

_INT = re.compile(r"[+-]?\d+")
_CASE_NAME = re.compile(r"CS[0-9]+x[0-9]+")

_COMPONENT_COLOR = "#00CACA"
_NET_COLOR = "#1AFD9C"
_METAL3_COLOR = "#c38b13"


@dataclass
class DieArea:
    """Die outline; the lower-left corner is always the origin."""

    x1: int = 0
    y1: int = 0
    x2: int = 0
    y2: int = 0


@dataclass
class Component:
    """A placed component, lower-left corner first, upper-right second."""

    name: str
    x1: int
    y1: int
    x2: int
    y2: int


@dataclass
class SpecialNet:
    """A special-net stripe, lower-left corner first, upper-right second."""

    name: str
    x1: int
    y1: int
    x2: int
    y2: int


@dataclass
class ChipDesign:
    """Components and special nets on a die, with a fixed component size."""

    component_width: int
    component_height: int
    die: DieArea = field(default_factory=DieArea)
    components: list[Component] = field(default_factory=list)
    special_nets: list[SpecialNet] = field(default_factory=list)

    def set_die_area(self, x2: int, y2: int) -> None:
        self.die.x2 = x2
        self.die.y2 = y2

    def add_component(self, name: str, x: int, y: int) -> None:
        self.components.append(
            Component(name, x, y, x + self.component_width, y + self.component_height)
        )

    def add_special_net(self, name: str, x1: int, y1: int, x2: int, y2: int) -> None:
        self.special_nets.append(SpecialNet(name, x1, y1, x2, y2))


class _LineScanner:
    """Whitespace-delimited reading of one line, in the manner of a stream."""

    def __init__(self, text: str) -> None:
        self._text = text
        self._pos = 0

    def _skip_space(self) -> None:
        while self._pos < len(self._text) and self._text[self._pos].isspace():
            self._pos += 1

    def word(self) -> str:
        self._skip_space()
        start = self._pos
        while self._pos < len(self._text) and not self._text[self._pos].isspace():
            self._pos += 1
        return self._text[start:self._pos]

    def skip_words(self, count: int) -> None:
        for _ in range(count):
            self.word()

    def try_int(self) -> int | None:
        self._skip_space()
        match = _INT.match(self._text, self._pos)
        if match is None:
            return None
        self._pos = match.end()
        return int(match.group())

    def int(self) -> int:
        value = self.try_int()
        if value is None:
            raise ValueError(f"expected an integer in line {self._text!r}")
        return value

    def skip_chars(self, count: int = 1) -> None:
        self._pos = min(len(self._text), self._pos + count)


def _half(value: int) -> int:
    """Halve, truncating toward zero."""
    return value // 2 if value >= 0 else -((-value) // 2)


def escape_subscript(text: str) -> str:
    """Escape underscores so gnuplot does not treat them as subscripts."""
    return "".join("\\\\_" if ch == "_" else ch for ch in text)


def find_output_name(path: str) -> str:
    """Derive the PNG name from a case tag such as ``CS7100x6600`` in *path*."""
    match = _CASE_NAME.search(path)
    return match.group() + ".png" if match else "output.png"


def parse_def(lines: Iterable[str], component_width: int, component_height: int) -> ChipDesign:
    """Build a :class:`ChipDesign` from the lines of a DEF file."""
    chip = ChipDesign(component_width, component_height)
    it = iter(lines)
    for line in it:
        scanner = _LineScanner(line)
        keyword = scanner.word()
        if keyword == "DIEAREA":
            scanner.skip_words(5)
            x = scanner.int()
            y = scanner.int()
            chip.set_die_area(x, y)
        elif keyword == "-":
            name = escape_subscript(scanner.word())
            try:
                detail = next(it)
            except StopIteration:
                raise ValueError(f"missing placement line for {name!r}") from None
            body = _LineScanner(detail)
            body.word()
            kind = body.word()
            if kind == "PLACED":
                body.word()
                x = body.int()
                y = body.int()
                chip.add_component(name, x, y)
            else:
                body.word()
                width = body.int()
                body.word()
                x1 = body.int()
                y1 = body.int()
                body.skip_words(2)
                x2 = body.try_int()
                if x2 is not None:
                    y2 = y1
                    y1 -= _half(width)
                    y2 += _half(width)
                else:
                    body.skip_chars(1)
                    y2 = body.int()
                    x2 = x1
                    x1 -= _half(width)
                    x2 += _half(width)
                chip.add_special_net(name, x1, y1, x2, y2)
    return chip


def render_gnuplot(chip: ChipDesign, output_name: str) -> str:
    """Return a gnuplot script drawing *chip* into the PNG file *output_name*."""
    out = [
        "reset",
        'set title "result"',
        'set xlabel "X"',
        'set ylabel "Y"',
    ]
    index = 1
    for comp in chip.components:
        out.append(
            f"set object {index} rect from {comp.x1},{comp.y1} to {comp.x2},{comp.y2}"
            f' lw 1 fs solid fc rgb "{_COMPONENT_COLOR}"'
        )
        out.append(
            f'set label "{{{comp.name}}}" at {_half(comp.x1 + comp.x2)},'
            f'{_half(comp.y1 + comp.y2)} center font ",8"'
        )
        index += 1
    for net in chip.special_nets:
        cx = _half(net.x1 + net.x2)
        if not net.name.startswith("Metal3"):
            out.append(
                f"set object {index} rect from {net.x1},{net.y1} to {net.x2},{net.y2}"
                f' lw 1 fs solid fc rgb "{_NET_COLOR}"'
            )
            out.append(
                f'set label "{{{net.name}}}" at {cx},{_half(net.y1 + net.y2)}'
                ' center font ",6"'
            )
        else:
            out.append(
                f"set object {index} rect from {net.x1},{net.y1} to {net.x2},{net.y2}"
                f' lw 1 fs solid fc rgb "{_METAL3_COLOR}"'
            )
            out.append(
                f'set label "{{{net.name}}}" at {cx},{chip.die.y2}'
                ' rotate by 270 font ",6"'
            )
        index += 1
    out.extend(
        [
            f'set label 1 "Die size: {chip.die.x2}x{chip.die.y2}" at screen 0.1, 0.01 font ",12"',
            "set xtics auto",
            "set ytics auto",
            f"plot [0:{chip.die.x2}][0:{chip.die.y2}] 0 with lines",
            "set terminal png size 1024,768",
            f'set output "{output_name}"',
        ]
    )
    return "\n".join(out) + "\nreplot"


def main(argv: Sequence[str] | None = None) -> int:
    """Command entry: ``WIDTH HEIGHT INPUT.def OUTPUT.gp``."""
    parser = argparse.ArgumentParser(description="Write a gnuplot script for a DEF placement.")
    parser.add_argument("width", type=int, help="component width")
    parser.add_argument("height", type=int, help="component height")
    parser.add_argument("input", help="input DEF file")
    parser.add_argument("output", help="output gnuplot script")
    args = parser.parse_args(argv)

    output_name = find_output_name(args.input)
    try:
        with open(args.input, encoding="utf-8") as handle:
            chip = parse_def(handle, args.width, args.height)
    except OSError as exc:
        print(f"cannot read {args.input}: {exc}", file=sys.stderr)
        return 1

    try:
        Path(args.output).write_text(render_gnuplot(chip, output_name), encoding="utf-8")
    except OSError as exc:
        print(f"cannot write {args.output}: {exc}", file=sys.stderr)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())