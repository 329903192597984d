import subprocess
from unittest import mock

from defplace.placement import Cell, Row
from defplace.placement_plot import draw_placement, render_placement_script


def _rows():
    return [
        Row("row0", "core", 0, 0, "N", 10, 1, 10, 0),
        Row("row1", "core", 0, 20, "FS", 10, 1, 10, 0),
    ]


def _cells():
    a = Cell("a", "INV", 3, 4, "N", later_x=0, later_y=0)
    b = Cell("b", "INV", 40, 22, "N", later_x=40, later_y=20)
    return [a, b]


def _render(cells=None, die_x=100, die_y=40):
    cells = _cells() if cells is None else cells
    return render_placement_script(_rows(), cells, "placement.png", 2, 10, 20, die_x, die_y)


def test_header_and_trailer():
    lines = _render().splitlines()
    assert lines[:4] == ["reset", 'set title "result"', 'set xlabel "X"', 'set ylabel "Y"']
    assert lines[-1] == "replot"
    assert 'set output "placement.png"' in lines
    assert "set terminal pngcairo size 6000,4000 enhanced font 'Arial,10'" in lines
    assert _render().endswith("replot\n")


def test_one_arrow_per_row_at_row_height():
    lines = [l for l in _render().splitlines() if l.startswith("set arrow")]
    assert len(lines) == 2
    for line, row in zip(lines, _rows()):
        assert line.startswith(f"set arrow from 0 , {row.y} to ")
        assert line.endswith(f',{row.y} nohead lw 2 lc rgb "#D0D0D0"')


def test_cell_rectangles_use_legalized_positions():
    lines = [l for l in _render().splitlines() if l.startswith("set object")]
    assert len(lines) == 2
    for index, (line, cell) in enumerate(zip(lines, _cells()), start=1):
        assert line.startswith(f"set object {index} rect from {cell.later_x},{cell.later_y} to ")
        assert line.endswith('lw 1 fs solid fc rgb "#00CACA"')


def test_ranges_cover_die_and_cells():
    text = _render(die_x=10, die_y=10)
    xr = next(l for l in text.splitlines() if l.startswith("set xrange"))
    yr = next(l for l in text.splitlines() if l.startswith("set yrange"))
    xmax = int(xr[len("set xrange [0:"):-1])
    ymax = int(yr[len("set yrange [0:"):-1])
    for cell in _cells():
        assert xmax >= cell.later_x + 2 * 10
        assert ymax >= cell.later_y + 20


def test_ranges_without_cells_follow_die():
    text = _render(cells=[], die_x=100, die_y=40)
    assert "set xrange [0:150]" in text
    assert "set yrange [0:90]" in text
    assert "set object" not in text


def test_draw_placement_writes_script_and_runs_gnuplot(tmp_path):
    script = tmp_path / "draw.gp"
    done = subprocess.CompletedProcess(["gnuplot"], 0)
    with mock.patch("defplace.placement_plot.subprocess.run", return_value=done) as run:
        code = draw_placement(_rows(), _cells(), "placement.png", 2, 10, 20, 100, 40, script)
    assert code == 0
    assert script.read_text(encoding="utf-8") == _render()
    assert run.call_args.args[0] == ["gnuplot", str(script)]


def test_draw_placement_warns_on_failure(tmp_path, capsys):
    done = subprocess.CompletedProcess(["gnuplot"], 3)
    with mock.patch("defplace.placement_plot.subprocess.run", return_value=done):
        code = draw_placement(
            _rows(), _cells(), "p.png", 2, 10, 20, 100, 40, tmp_path / "d.gp"
        )
    assert code == 3
    assert "gnuplot failed with code 3" in capsys.readouterr().err


def test_draw_placement_warns_when_gnuplot_missing(tmp_path, capsys):
    with mock.patch(
        "defplace.placement_plot.subprocess.run", side_effect=FileNotFoundError("gnuplot")
    ):
        code = draw_placement(
            _rows(), _cells(), "p.png", 2, 10, 20, 100, 40, tmp_path / "d.gp"
        )
    assert code != 0
    assert "Warning" in capsys.readouterr().err