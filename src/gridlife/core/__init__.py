"""Core cellular automaton logic."""

from .errors import (
    GridLifeError,
    OutOfBounds,
    InvalidRange,
    InvalidArgument,
    MalformedFile,
    UnknownFormat,
)
from .grid import Cell, CellRef, Grid
from .world import World
from .patterns import Pattern, PatternLibrary
from .runner import SimulationConfig, run_simulation
from . import zoo

__all__ = [
    "GridLifeError",
    "OutOfBounds",
    "InvalidRange",
    "InvalidArgument",
    "MalformedFile",
    "UnknownFormat",
    "Cell",
    "CellRef",
    "Grid",
    "World",
    "Pattern",
    "PatternLibrary",
    "SimulationConfig",
    "run_simulation",
    "zoo",
]
