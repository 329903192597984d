[build-system]
requires = ["hatchling"]
build-backend = "hatchling.build"

[project]
name = "defplace"
version = "0.1.0"
description = "DEF layout plotting with gnuplot and a row-based standard cell legalizer"
requires-python = ">=3.10"
dependencies = []
keywords = ["DEF", "placement", "legalization", "gnuplot", "EDA", "VLSI"]
classifiers = [
    "Development Status :: 3 - Alpha",
    "Environment :: Console",
    "Intended Audience :: Science/Research",
    "Intended Audience :: Education",
    "Operating System :: OS Independent",
    "Programming Language :: Python :: 3",
    "Programming Language :: Python :: 3 :: Only",
    "Programming Language :: Python :: 3.10",
    "Programming Language :: Python :: 3.11",
    "Programming Language :: Python :: 3.12",
    "Programming Language :: Python :: 3.13",
    "Topic :: Scientific/Engineering :: Electronic Design Automation (EDA)",
]

[project.optional-dependencies]
test = ["pytest"]

[project.scripts]
defplace-plot = "defplace.die_plot:main"
defplace-legalize = "defplace.legalizer:main"

[tool.hatch.build.targets.wheel]
packages = ["defplace"]

[tool.pytest.ini_options]
testpaths = ["tests"]
addopts = "-ra"
