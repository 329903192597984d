"""DEF layout plotting with gnuplot and row-based standard cell legalization."""

__version__ = "0.1.0"