"""Configuration-driven simulation runs."""

import logging
import time
from dataclasses import dataclass
from typing import Optional

from .grid import Grid
from .patterns import PatternLibrary
from .world import World
from . import zoo

logger = logging.getLogger(__name__)


@dataclass
class SimulationConfig:
    """Configuration for a simulation run."""
    width: int = 32
    height: int = 32
    toroidal: bool = False
    generations: int = 0
    pattern: Optional[str] = None
    pattern_x: Optional[int] = None
    pattern_y: Optional[int] = None
    input_path: Optional[str] = None
    output_path: Optional[str] = None


def build_world(config: SimulationConfig, library: Optional[PatternLibrary] = None) -> World:
    """Create the initial world described by a configuration.

    A grid file named by ``input_path`` takes precedence; otherwise an empty
    ``width`` x ``height`` world is created and the named pattern, if any, is
    placed at ``(pattern_x, pattern_y)`` or centred when those are unset.

    Raises:
        KeyError: If the pattern name is not in the library
        OutOfBounds: If the pattern does not fit at the requested position
    """
    if config.input_path is not None:
        return World.from_grid(zoo.load(config.input_path))

    grid = Grid(config.width, config.height)
    if config.pattern:
        library = library or PatternLibrary()
        pattern = library.get_pattern(config.pattern)
        if pattern is None:
            raise KeyError(f"Unknown pattern '{config.pattern}'")

        pattern_width, pattern_height = pattern.get_size()
        x = config.pattern_x
        y = config.pattern_y
        if x is None:
            x = max(0, (config.width - pattern_width) // 2)
        if y is None:
            y = max(0, (config.height - pattern_height) // 2)
        pattern.place(grid, x, y)

    return World.from_grid(grid)


def run_simulation(config: SimulationConfig, library: Optional[PatternLibrary] = None) -> World:
    """Run a single simulation.

    Args:
        config: What to simulate and for how long
        library: Pattern source (defaults to the built-in patterns)

    Returns:
        The world after ``config.generations`` steps
    """
    world = build_world(config, library)
    logger.info(
        f"Running {world.width}x{world.height} world for {config.generations} generations "
        f"(toroidal: {config.toroidal}, initial population: {world.alive_count})"
    )

    start_time = time.time()
    world.advance(config.generations, config.toroidal)
    duration = time.time() - start_time

    logger.info(f"Finished at generation {world.generation} with {world.alive_count} living cells in {duration:.3f}s")

    if config.output_path is not None:
        zoo.save(config.output_path, world.state)

    return world
