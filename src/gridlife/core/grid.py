"""Grid data structure for cellular automata."""

from enum import IntEnum
from typing import Optional, Tuple
import numpy as np

from .errors import InvalidRange, OutOfBounds


class Cell(IntEnum):
    """State of a single grid cell."""

    DEAD = 0
    ALIVE = 1


class CellRef:
    """Handle to one cell of a grid's buffer.

    The location is resolved once when the handle is created, so repeated
    reads and writes through ``value`` skip the bounds check. A handle is
    invalidated by ``Grid.resize``, which replaces the buffer.
    """

    __slots__ = ("_buffer", "_index")

    def __init__(self, buffer: np.ndarray, index: int) -> None:
        self._buffer = buffer
        self._index = index

    @property
    def value(self) -> Cell:
        """Current state of the referenced cell."""
        return Cell(int(self._buffer[self._index]))

    @value.setter
    def value(self, value: Cell) -> None:
        self._buffer[self._index] = Cell(value)

    def __bool__(self) -> bool:
        return bool(self._buffer[self._index])

    def __eq__(self, other: object) -> bool:
        if isinstance(other, CellRef):
            return self.value == other.value
        if isinstance(other, int):
            return int(self._buffer[self._index]) == other
        return NotImplemented

    def __repr__(self) -> str:
        return f"CellRef({self.value.name})"


class Grid:
    """Represents a finite 2D grid of cells.

    Cells live in a contiguous numpy buffer of shape ``(height, width)`` so
    that cell ``(x, y)`` sits at flat index ``y * width + x``. Every access
    is bounds-checked; there is no wraparound at this level.
    """

    def __init__(self, width: int = 0, height: Optional[int] = None) -> None:
        """Initialize a new grid with every cell dead.

        Args:
            width: Number of columns
            height: Number of rows (defaults to ``width`` for a square grid)

        Raises:
            InvalidRange: If either dimension is negative
        """
        if height is None:
            height = width
        _check_dimensions(width, height)
        self._cells = np.zeros((height, width), dtype=np.int8)

    @classmethod
    def _from_array(cls, cells: np.ndarray) -> "Grid":
        grid = cls.__new__(cls)
        grid._cells = np.ascontiguousarray(cells, dtype=np.int8)
        return grid

    @property
    def cells(self) -> np.ndarray:
        """Get the cell buffer, indexed as ``cells[y, x]``."""
        return self._cells

    @property
    def width(self) -> int:
        return self._cells.shape[1]

    @property
    def height(self) -> int:
        return self._cells.shape[0]

    @property
    def shape(self) -> Tuple[int, int]:
        """Get grid dimensions as (width, height)."""
        return (self.width, self.height)

    @property
    def total_cells(self) -> int:
        return self._cells.size

    @property
    def alive_count(self) -> int:
        """Get the number of living cells."""
        return int(np.count_nonzero(self._cells))

    @property
    def dead_count(self) -> int:
        return self.total_cells - self.alive_count

    def _check_bounds(self, x: int, y: int) -> None:
        if not (0 <= x < self.width and 0 <= y < self.height):
            raise OutOfBounds(
                f"Coordinates ({x}, {y}) out of bounds for {self.width}x{self.height} grid"
            )

    def get(self, x: int, y: int) -> Cell:
        """Get the state of a cell.

        Args:
            x: Column coordinate
            y: Row coordinate

        Returns:
            The cell's state

        Raises:
            OutOfBounds: If the coordinates lie outside the grid
        """
        self._check_bounds(x, y)
        return Cell(int(self._cells[y, x]))

    def set(self, x: int, y: int, value: Cell) -> None:
        """Set the state of a cell.

        Args:
            x: Column coordinate
            y: Row coordinate
            value: New state

        Raises:
            OutOfBounds: If the coordinates lie outside the grid
            ValueError: If ``value`` is not a valid Cell
        """
        self._check_bounds(x, y)
        self._cells[y, x] = Cell(value)

    def __getitem__(self, key: Tuple[int, int]) -> Cell:
        x, y = key
        return self.get(x, y)

    def __setitem__(self, key: Tuple[int, int], value: Cell) -> None:
        x, y = key
        self.set(x, y, value)

    def cell(self, x: int, y: int) -> CellRef:
        """Get a handle to a cell for repeated access.

        Raises:
            OutOfBounds: If the coordinates lie outside the grid
        """
        self._check_bounds(x, y)
        return CellRef(self._cells.reshape(-1), y * self.width + x)

    def clear(self) -> None:
        """Clear all cells (set all to dead)."""
        self._cells.fill(Cell.DEAD)

    def copy(self) -> "Grid":
        """Return an independent copy of this grid."""
        return Grid._from_array(self._cells.copy())

    def resize(self, width: int, height: Optional[int] = None) -> None:
        """Resize the grid in place.

        Cells in the region shared by the old and new sizes keep their
        state; every other cell of the new grid is dead.

        Args:
            width: New number of columns
            height: New number of rows (defaults to ``width``)

        Raises:
            InvalidRange: If either dimension is negative
        """
        if height is None:
            height = width
        _check_dimensions(width, height)
        resized = np.zeros((height, width), dtype=np.int8)
        keep_w = min(width, self.width)
        keep_h = min(height, self.height)
        resized[:keep_h, :keep_w] = self._cells[:keep_h, :keep_w]
        self._cells = resized

    def crop(self, x0: int, y0: int, x1: int, y1: int) -> "Grid":
        """Copy the window ``[x0, x1) x [y0, y1)`` into a new grid.

        Raises:
            InvalidRange: If the window is inverted or exceeds the grid
        """
        if not (0 <= x0 <= self.width and 0 <= x1 <= self.width):
            raise InvalidRange(f"Crop x range [{x0}, {x1}) outside grid width {self.width}")
        if not (0 <= y0 <= self.height and 0 <= y1 <= self.height):
            raise InvalidRange(f"Crop y range [{y0}, {y1}) outside grid height {self.height}")
        if x0 > x1:
            raise InvalidRange(f"x0 ({x0}) cannot be greater than x1 ({x1})")
        if y0 > y1:
            raise InvalidRange(f"y0 ({y0}) cannot be greater than y1 ({y1})")

        return Grid._from_array(self._cells[y0:y1, x0:x1].copy())

    def merge(self, other: "Grid", x0: int, y0: int, alive_only: bool = False) -> None:
        """Paste another grid into this one with its top-left corner at (x0, y0).

        Args:
            other: Source grid
            x0: Column of the placement
            y0: Row of the placement
            alive_only: If True, cells already alive here are never killed

        Raises:
            OutOfBounds: If ``other`` does not fit entirely inside this grid
        """
        if x0 < 0 or y0 < 0:
            raise OutOfBounds(f"Merge offset ({x0}, {y0}) must be non-negative")
        if x0 + other.width > self.width or y0 + other.height > self.height:
            raise OutOfBounds(
                f"{other.width}x{other.height} grid at ({x0}, {y0}) does not fit "
                f"within {self.width}x{self.height} grid"
            )

        source = other._cells.copy() if other is self else other._cells
        region = self._cells[y0:y0 + other.height, x0:x0 + other.width]
        if alive_only:
            np.maximum(region, source, out=region)
        else:
            region[:] = source

    def rotate(self, rotation: int) -> "Grid":
        """Return a copy rotated clockwise by ``rotation`` quarter turns.

        Any integer is accepted; it is reduced modulo 4 before rotating.
        """
        quarter_turns = rotation % 4
        # np.rot90 turns counter-clockwise when row 0 is drawn at the top
        return Grid._from_array(np.rot90(self._cells, -quarter_turns).copy())

    def __eq__(self, other: object) -> bool:
        """Check if two grids are equal."""
        if not isinstance(other, Grid):
            return False
        return self.shape == other.shape and np.array_equal(self._cells, other._cells)

    def __repr__(self) -> str:
        return f"Grid(width={self.width}, height={self.height}, alive={self.alive_count})"

    def __str__(self) -> str:
        """Bordered rendering with living cells as '#' and dead as ' '."""
        border = "+" + "-" * self.width + "+\n"
        rows = ["|" + "".join("#" if cell else " " for cell in row) + "|\n" for row in self._cells]
        return border + "".join(rows) + border


def _check_dimensions(width: int, height: int) -> None:
    if width < 0 or height < 0:
        raise InvalidRange(f"Grid dimensions must be non-negative, got {width}x{height}")
