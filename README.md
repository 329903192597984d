# defplace

Two small tools for working with DEF (Design Exchange Format) layouts:

- **defplace-plot** reads a DEF file that has a die area, placed components
  and special nets. It writes a gnuplot script that draws them.
- **defplace-legalize** reads a DEF file that has rows and components. It
  moves every component onto free row sites so that no two cells overlap,
  keeps displacement small, and writes the legalized placement out as DEF.

## Installation

```
pip install .
```

The package has no runtime dependencies. You need `gnuplot`, installed
separately, to render the scripts it writes.

## Plotting a layout

```
defplace-plot COMPONENT_WIDTH COMPONENT_HEIGHT input.def output.gp
```

Each `- NAME` entry is followed by a detail line.

- **Component:** if the detail line says `PLACED`, the entry is a component.
  It is drawn as a rectangle of the given width and height, with its lower-left
  corner at the placement point.
- **Special net:** any other entry is a special net. It is drawn as a bar whose
  thickness is the net width, centred on the route. Nets whose name starts with
  `Metal3` get their own colour, with a rotated label at the top of the die.

Underscores in names are escaped so that gnuplot does not print them as
subscripts.

The script asks gnuplot for a 1024x768 PNG. The PNG is named after the first
`CS<w>x<h>` pattern found in the input path, for example `CS1x2.png`. If the
path has no such pattern, the PNG is named `output.png`.

Render the image with:

```
gnuplot output.gp
```

The command exits with status 1 if the input cannot be read or the output
cannot be written.

## Legalizing a placement

```
defplace-legalize CELL_SIZE ALPHA input.def output
```

- `CELL_SIZE` is the width of every cell, counted in sites.
- `ALPHA` must be given as a number. It does not affect the result.
- The result is written to `output.def`.

The site width is the first row's `STEP` x value. The row height is the die
height divided by the number of rows. The legalizer then works in three steps:

1. **Snap.** Each cell moves to the site grid point at or below its original
   position, clamped to the die.
2. **Place greedily.** Cells are placed most displaced first. Each cell goes on
   the free run of sites closest to its original position, by Manhattan
   distance.
3. **Refine.** This runs for 50 rounds. In each round, the 6 most displaced
   cells are taken in turn. For each one, the cell is grouped with up to 5
   neighbours on each side in its row, and the group is reordered over the
   sites it occupies. The order chosen is the one that gives the smallest
   largest horizontal displacement. It is applied only if it lowers that
   group's largest displacement.

In the output, each cell takes the orientation of the first row when it lies in
an even row, and the orientation of the second row otherwise. The input must
therefore declare at least two rows, and the second row must not start at
y = 0.

The command exits with status 1 in these cases:

- the input cannot be read;
- the design cannot be legalized, for example because no free run of sites is
  left for a cell;
- the output cannot be written.

## Using it as a library

```python
from defplace.def_io import parse_design, write_def
from defplace.legalizer import legalize

with open("input.def") as fh:
    design = parse_design(fh)

legalize(design, cell_size=2, rounds=50, top_k=6, radius=5)
write_def(design, "output")  # writes output.def
```

- **`defplace.def_io`** has:
  - `Design`;
  - `parse_design`;
  - `format_def`, which returns the DEF text;
  - `write_def`.
- **`defplace.placement`** has the individual steps, working on `Row`, `Cell`,
  `Cluster` and `PermResult` objects:
  - `snap_to_grid`;
  - `place_cell`;
  - `top_displaced`;
  - `form_cluster`;
  - `best_permutation`;
  - `apply_cluster`.
- **`defplace.placement_plot`** draws a legalized placement:
  - `render_placement_script` returns a gnuplot script. The script shows the
    rows as lines and the cells as rectangles, and sets gnuplot to write a
    large PNG.
  - `draw_placement` writes that script (to `draw_placement.gp` by default),
    runs `gnuplot` on it, and returns gnuplot's exit status.
- **`defplace.die_plot`** has what `defplace-plot` uses:
  - `ChipDesign`;
  - `parse_def`;
  - `render_gnuplot`;
  - `find_output_name`;
  - `escape_subscript`.

## What it does not do

There is no command for drawing a legalized placement. Call
`defplace.placement_plot.draw_placement` from Python instead. The legalizer
reports no displacement score.

## Running the tests

```
pip install .[test]
pytest
```