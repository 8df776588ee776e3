"""Cellular automaton engine with Conway's Game of Life and grid file codecs."""

__version__ = "0.1.0"

from .core.grid import Cell, Grid
from .core.world import World
from .core.patterns import Pattern, PatternLibrary
from .core import zoo

__all__ = ["Cell", "Grid", "World", "Pattern", "PatternLibrary", "zoo"]
