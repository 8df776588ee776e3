"""Conway's Game of Life simulation over a pair of grid buffers."""

from typing import Optional
import numpy as np
import torch
import torch.nn.functional as F

from .errors import InvalidArgument
from .grid import Cell, Grid


class World:
    """Conway's Game of Life simulation engine.

    Holds two equally sized grids: ``current`` and ``next``. Each step reads
    ``current``, writes the new generation into ``next`` and swaps the two,
    so the previous generation's buffer is reused on the following step.

    Implements the classic rules:
    - Live cell with 2-3 neighbors survives
    - Dead cell with exactly 3 neighbors becomes alive
    - All other cells die or stay dead
    """

    def __init__(self, width: int = 0, height: Optional[int] = None) -> None:
        """Initialize a world with every cell dead.

        Args:
            width: Number of columns
            height: Number of rows (defaults to ``width`` for a square world)
        """
        self._current = Grid(width, height)
        self._next = Grid(width, height)
        self._generation = 0

        # Set single-threaded; the convolution buffers belong to this world only
        torch.set_num_threads(1)
        self._torch_kernel = (
            torch.tensor([[1, 1, 1], [1, 0, 1], [1, 1, 1]], dtype=torch.float32).unsqueeze(0).unsqueeze(0)
        )
        self._allocate_input()

    @classmethod
    def from_grid(cls, initial_state: Grid) -> "World":
        """Create a world whose buffers both start as copies of ``initial_state``."""
        world = cls(initial_state.width, initial_state.height)
        world._current = initial_state.copy()
        world._next = initial_state.copy()
        return world

    def _allocate_input(self) -> None:
        self._torch_input = torch.zeros(1, 1, self.height, self.width, dtype=torch.float32)

    def _sync_buffers(self) -> None:
        if self._next.shape != self._current.shape:
            self._next = Grid(self.width, self.height)
        if tuple(self._torch_input.shape[2:]) != (self.height, self.width):
            self._allocate_input()

    @property
    def width(self) -> int:
        return self._current.width

    @property
    def height(self) -> int:
        return self._current.height

    @property
    def total_cells(self) -> int:
        return self._current.total_cells

    @property
    def alive_count(self) -> int:
        """Current number of living cells."""
        return self._current.alive_count

    @property
    def dead_count(self) -> int:
        return self._current.dead_count

    @property
    def generation(self) -> int:
        """Number of generations computed so far."""
        return self._generation

    @property
    def state(self) -> Grid:
        """The current generation (not a copy).

        Resize through ``World.resize``; a grid resized directly is picked up
        on the next step, with the spare buffer reallocated to match.
        """
        return self._current

    def resize(self, width: int, height: Optional[int] = None) -> None:
        """Resize the world, keeping the overlapping cells of the current state.

        Args:
            width: New number of columns
            height: New number of rows (defaults to ``width``)
        """
        self._current.resize(width, height)
        self._next = Grid(self._current.width, self._current.height)
        self._allocate_input()

    def count_neighbours(self, x: int, y: int, toroidal: bool = False) -> int:
        """Count living neighbours of a single cell.

        Args:
            x: Column coordinate
            y: Row coordinate
            toroidal: Whether edges wrap around

        Returns:
            Number of living neighbours (0-8)

        Raises:
            OutOfBounds: If the coordinates lie outside the world
        """
        self._current.get(x, y)  # bounds check
        cells = self._current.cells
        count = 0
        for dx in [-1, 0, 1]:
            for dy in [-1, 0, 1]:
                if dx == 0 and dy == 0:
                    continue

                nx, ny = x + dx, y + dy

                if toroidal:
                    nx = nx % self.width
                    ny = ny % self.height
                    count += cells[ny, nx]
                elif 0 <= nx < self.width and 0 <= ny < self.height:
                    count += cells[ny, nx]

        return int(count)

    def count_all_neighbours(self, toroidal: bool = False) -> np.ndarray:
        """Count neighbours for all cells using a torch convolution.

        Returns:
            Array of shape ``(height, width)`` with the count for each cell
        """
        self._sync_buffers()
        if self.total_cells == 0:
            return np.zeros((self.height, self.width), dtype=np.int8)

        self._torch_input[0, 0] = torch.from_numpy(self._current.cells.astype(np.float32))

        if toroidal:
            # Circular padding gives the same wrap as a non-negative modulo
            padded = F.pad(self._torch_input, (1, 1, 1, 1), mode="circular")
            neighbours = F.conv2d(padded, self._torch_kernel)
        else:
            # Zero padding: cells beyond the edge count as dead
            neighbours = F.conv2d(self._torch_input, self._torch_kernel, padding=1)

        return neighbours[0, 0].numpy().astype(np.int8)

    def step(self, toroidal: bool = False) -> None:
        """Advance the simulation by one generation.

        Args:
            toroidal: Whether edges wrap around
        """
        neighbour_counts = self.count_all_neighbours(toroidal)
        cells = self._current.cells

        alive = cells == Cell.ALIVE
        # Survival: live cell with 2 or 3 neighbours
        survive = alive & ((neighbour_counts == 2) | (neighbour_counts == 3))
        # Birth: dead cell with exactly 3 neighbours
        birth = ~alive & (neighbour_counts == 3)

        np.copyto(self._next.cells, survive | birth, casting="unsafe")

        self._current, self._next = self._next, self._current
        self._generation += 1

    def advance(self, steps: int, toroidal: bool = False) -> None:
        """Advance the simulation by several generations.

        Args:
            steps: Number of generations (must be non-negative)
            toroidal: Whether edges wrap around

        Raises:
            InvalidArgument: If ``steps`` is negative
        """
        if steps < 0:
            raise InvalidArgument(f"Cannot advance a negative number of steps ({steps})")

        for _ in range(steps):
            self.step(toroidal)

    def __str__(self) -> str:
        return str(self._current)
