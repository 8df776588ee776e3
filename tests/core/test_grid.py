"""Tests for the Grid class."""

import numpy as np
import pytest
from gridlife.core.errors import InvalidRange, OutOfBounds
from gridlife.core.grid import Cell, CellRef, Grid


def make_grid(width, height, alive):
    grid = Grid(width, height)
    for x, y in alive:
        grid.set(x, y, Cell.ALIVE)
    return grid


def alive_cells(grid):
    return {(x, y) for y in range(grid.height) for x in range(grid.width) if grid.get(x, y) == Cell.ALIVE}


class TestGrid:
    """Test cases for the Grid class."""

    def test_initialization(self):
        """Test grid initialization."""
        grid = Grid(10, 20)
        assert grid.width == 10
        assert grid.height == 20
        assert grid.shape == (10, 20)
        assert grid.total_cells == 200
        assert grid.alive_count == 0
        assert grid.dead_count == 200

    def test_default_is_empty(self):
        """Test that a default grid has no cells."""
        grid = Grid()
        assert grid.shape == (0, 0)
        assert grid.total_cells == 0
        assert grid.alive_count == 0
        assert grid.dead_count == 0

    def test_square_initialization(self):
        """Test single-size construction makes a square grid."""
        grid = Grid(4)
        assert grid.shape == (4, 4)

    def test_negative_dimensions(self):
        """Test that negative sizes are rejected."""
        with pytest.raises(InvalidRange):
            Grid(-1, 3)
        with pytest.raises(InvalidRange):
            Grid(3, -1)

    def test_buffer_layout(self):
        """Test that the buffer is row-major with x varying fastest."""
        grid = Grid(4, 3)
        grid.set(2, 1, Cell.ALIVE)
        assert grid.cells.shape == (3, 4)
        assert grid.cells.flags["C_CONTIGUOUS"]
        assert grid.cells.reshape(-1)[1 * 4 + 2] == 1

    def test_cell_operations(self):
        """Test basic cell get/set operations."""
        grid = Grid(5, 5)

        # Initially all cells should be dead
        assert grid.get(0, 0) == Cell.DEAD
        assert grid.get(2, 3) == Cell.DEAD

        # Set some cells alive
        grid.set(1, 1, Cell.ALIVE)
        grid.set(2, 3, Cell.ALIVE)

        assert grid.get(1, 1) == Cell.ALIVE
        assert grid.get(2, 3) == Cell.ALIVE
        assert grid.get(3, 2) == Cell.DEAD

        # Set cell dead
        grid.set(1, 1, Cell.DEAD)
        assert grid.get(1, 1) == Cell.DEAD

    def test_get_returns_cell(self):
        """Test that reads come back as Cell members."""
        grid = Grid(2, 2)
        grid.set(0, 1, Cell.ALIVE)
        assert grid.get(0, 1) is Cell.ALIVE
        assert grid.get(1, 1) is Cell.DEAD

    def test_invalid_cell_value(self):
        """Test that only DEAD and ALIVE can be stored."""
        grid = Grid(2, 2)
        with pytest.raises(ValueError):
            grid.set(0, 0, 2)
        assert grid.get(0, 0) == Cell.DEAD

    def test_out_of_bounds(self):
        """Test bounds checking on every accessor."""
        grid = Grid(3, 2)

        for x, y in [(3, 0), (0, 2), (-1, 0), (0, -1), (10, 10)]:
            with pytest.raises(OutOfBounds):
                grid.get(x, y)
            with pytest.raises(OutOfBounds):
                grid.set(x, y, Cell.ALIVE)
            with pytest.raises(OutOfBounds):
                grid[x, y]
            with pytest.raises(OutOfBounds):
                grid.cell(x, y)

        # Still catchable as a plain IndexError
        with pytest.raises(IndexError):
            grid.get(3, 0)

    def test_item_access(self):
        """Test grid[x, y] indexing."""
        grid = Grid(4, 4)
        grid[3, 1] = Cell.ALIVE
        assert grid[3, 1] == Cell.ALIVE
        assert grid.get(3, 1) == Cell.ALIVE
        assert grid[1, 3] == Cell.DEAD

    def test_cell_handle(self):
        """Test that cell handles alias the grid's storage."""
        grid = Grid(4, 3)
        ref = grid.cell(2, 1)
        assert isinstance(ref, CellRef)
        assert ref.value == Cell.DEAD
        assert not ref

        ref.value = Cell.ALIVE
        assert grid.get(2, 1) == Cell.ALIVE
        assert ref == Cell.ALIVE
        assert ref

        grid.set(2, 1, Cell.DEAD)
        assert ref.value == Cell.DEAD

        # Neighbouring cells are untouched
        assert grid.alive_count == 0

    def test_counts(self):
        """Test alive, dead and total counts."""
        grid = Grid(5, 4)
        assert grid.alive_count + grid.dead_count == grid.total_cells == 20

        grid.set(0, 0, Cell.ALIVE)
        grid.set(4, 3, Cell.ALIVE)
        assert grid.alive_count == 2
        assert grid.dead_count == 18
        assert grid.alive_count + grid.dead_count == grid.total_cells

        grid.set(0, 0, Cell.DEAD)
        assert grid.alive_count == 1

    def test_clear(self):
        """Test grid clearing."""
        grid = make_grid(5, 5, [(1, 1), (2, 2), (3, 3)])
        assert grid.alive_count == 3

        grid.clear()
        assert grid.alive_count == 0
        assert grid.shape == (5, 5)

    def test_copy_is_independent(self):
        """Test that copies do not share storage."""
        grid = make_grid(3, 3, [(1, 1)])
        duplicate = grid.copy()
        assert duplicate == grid

        duplicate.set(0, 0, Cell.ALIVE)
        assert grid.get(0, 0) == Cell.DEAD
        assert duplicate != grid


class TestResize:
    """Test cases for Grid.resize."""

    def test_grow_keeps_cells(self):
        """Test growing keeps old cells and adds dead ones."""
        grid = make_grid(3, 3, [(0, 0), (2, 2)])
        grid.resize(5, 4)

        assert grid.shape == (5, 4)
        assert alive_cells(grid) == {(0, 0), (2, 2)}

    def test_shrink_drops_cells(self):
        """Test shrinking drops cells outside the new bounds."""
        grid = make_grid(4, 4, [(0, 0), (3, 3), (1, 2)])
        grid.resize(2, 3)

        assert grid.shape == (2, 3)
        assert alive_cells(grid) == {(0, 0), (1, 2)}

    def test_square_resize(self):
        """Test single-size resize makes a square grid."""
        grid = Grid(2, 5)
        grid.resize(3)
        assert grid.shape == (3, 3)

    def test_resize_round_trip(self):
        """Test shrinking and regrowing keeps the overlap and kills the rest."""
        grid = make_grid(4, 4, [(0, 0), (1, 1), (3, 3), (3, 0)])
        grid.resize(2, 2)
        grid.resize(4, 4)

        assert grid.shape == (4, 4)
        assert alive_cells(grid) == {(0, 0), (1, 1)}

    def test_grow_then_shrink_is_identity(self):
        """Test growing then shrinking back restores the original grid."""
        grid = make_grid(3, 2, [(0, 1), (2, 0)])
        original = grid.copy()

        grid.resize(6, 7)
        grid.resize(3, 2)
        assert grid == original

    def test_resize_to_empty(self):
        """Test resizing to zero area."""
        grid = make_grid(3, 3, [(1, 1)])
        grid.resize(0, 3)
        assert grid.shape == (0, 3)
        assert grid.total_cells == 0

    def test_negative_resize(self):
        """Test that negative sizes are rejected."""
        grid = Grid(3, 3)
        with pytest.raises(InvalidRange):
            grid.resize(-2, 3)
        assert grid.shape == (3, 3)


class TestCropAndMerge:
    """Test cases for Grid.crop and Grid.merge."""

    def test_crop(self):
        """Test cropping copies the requested window."""
        grid = make_grid(5, 5, [(1, 1), (2, 3), (4, 4)])
        cropped = grid.crop(1, 1, 4, 4)

        assert cropped.shape == (3, 3)
        assert alive_cells(cropped) == {(0, 0), (1, 2)}

    def test_crop_whole_and_empty(self):
        """Test full-size and zero-size crops."""
        grid = make_grid(3, 2, [(2, 1)])
        assert grid.crop(0, 0, 3, 2) == grid

        empty = grid.crop(1, 1, 1, 1)
        assert empty.shape == (0, 0)

    def test_crop_is_independent(self):
        """Test that a crop does not alias its source."""
        grid = make_grid(3, 3, [(1, 1)])
        cropped = grid.crop(0, 0, 3, 3)
        cropped.set(0, 0, Cell.ALIVE)
        assert grid.get(0, 0) == Cell.DEAD

    @pytest.mark.parametrize(
        "window",
        [
            (2, 0, 1, 3),  # x0 > x1
            (0, 2, 3, 1),  # y0 > y1
            (0, 0, 4, 3),  # x1 past width
            (0, 0, 3, 4),  # y1 past height
            (-1, 0, 2, 2),
            (0, -1, 2, 2),
        ],
    )
    def test_crop_invalid_range(self, window):
        """Test that bad windows are rejected."""
        grid = Grid(3, 3)
        with pytest.raises(InvalidRange):
            grid.crop(*window)

    def test_merge_overwrites(self):
        """Test a plain merge copies every cell of the source region."""
        grid = make_grid(5, 5, [(1, 1), (4, 4)])
        other = make_grid(2, 2, [(1, 0)])
        grid.merge(other, 1, 1)

        assert alive_cells(grid) == {(2, 1), (4, 4)}

    def test_merge_alive_only(self):
        """Test that an alive-only merge never kills a cell."""
        grid = make_grid(5, 5, [(1, 1), (4, 4)])
        other = make_grid(2, 2, [(1, 0)])
        grid.merge(other, 1, 1, alive_only=True)

        assert alive_cells(grid) == {(1, 1), (2, 1), (4, 4)}

    def test_merge_alive_only_is_monotonic(self):
        """Test alive-only merges against random sources."""
        rng = np.random.default_rng(7)
        for _ in range(20):
            grid = Grid(6, 6)
            grid.cells[:] = rng.integers(0, 2, size=(6, 6))
            before = alive_cells(grid)

            other = Grid(3, 4)
            other.cells[:] = rng.integers(0, 2, size=(4, 3))
            grid.merge(other, 2, 1, alive_only=True)

            assert before <= alive_cells(grid)

    def test_crop_then_merge_restores_region(self):
        """Test merging a crop back at its offset reproduces the region."""
        rng = np.random.default_rng(3)
        source = Grid(7, 5)
        source.cells[:] = rng.integers(0, 2, size=(5, 7))

        cropped = source.crop(2, 1, 6, 4)
        target = Grid(7, 5)
        target.merge(cropped, 2, 1)

        assert target.crop(2, 1, 6, 4) == cropped
        assert np.array_equal(target.cells[1:4, 2:6], source.cells[1:4, 2:6])

    def test_merge_into_self(self):
        """Test merging a grid into itself."""
        grid = make_grid(3, 3, [(0, 0), (2, 1)])
        grid.merge(grid, 0, 0)
        assert alive_cells(grid) == {(0, 0), (2, 1)}

    @pytest.mark.parametrize("offset", [(-1, 0), (0, -1), (4, 0), (0, 4), (4, 4)])
    def test_merge_out_of_bounds(self, offset):
        """Test that placements that do not fit are rejected."""
        grid = Grid(5, 5)
        other = Grid(2, 2)
        with pytest.raises(OutOfBounds):
            grid.merge(other, *offset)

    def test_merge_too_large(self):
        """Test merging a grid bigger than the target."""
        with pytest.raises(OutOfBounds):
            Grid(2, 2).merge(Grid(3, 1), 0, 0)


class TestRotate:
    """Test cases for Grid.rotate."""

    def test_column_becomes_row(self):
        """Test a 1x3 column rotated once becomes a 3x1 row."""
        grid = make_grid(1, 3, [(0, 0)])
        rotated = grid.rotate(1)

        assert rotated.shape == (3, 1)
        # The top cell swings round to the right
        assert alive_cells(rotated) == {(2, 0)}

    def test_clockwise_quarter_turn(self):
        """Test the corner mapping of a clockwise quarter turn."""
        grid = make_grid(3, 2, [(0, 0), (2, 1)])
        rotated = grid.rotate(1)

        assert rotated.shape == (2, 3)
        assert alive_cells(rotated) == {(1, 0), (0, 2)}

    def test_half_and_three_quarter_turns(self):
        """Test 180 and 270 degree rotations."""
        grid = make_grid(3, 2, [(0, 0)])

        half = grid.rotate(2)
        assert half.shape == (3, 2)
        assert alive_cells(half) == {(2, 1)}

        three_quarters = grid.rotate(3)
        assert three_quarters.shape == (2, 3)
        assert alive_cells(three_quarters) == {(0, 2)}
        assert three_quarters == grid.rotate(-1)

    def test_rotation_is_periodic(self):
        """Test that rotations repeat every four quarter turns."""
        grid = make_grid(4, 3, [(0, 0), (1, 0), (3, 2)])
        for rotation in range(-9, 10):
            assert grid.rotate(rotation) == grid.rotate(rotation + 4)

    def test_identity_and_large_rotations(self):
        """Test zero and very large rotation counts."""
        grid = make_grid(4, 3, [(0, 1), (3, 2)])
        assert grid.rotate(0) == grid
        assert grid.rotate(4 * 10**12) == grid
        assert grid.rotate(10**12 + 1) == grid.rotate(1)
        assert grid.rotate(-(10**12) - 1) == grid.rotate(3)

    def test_rotate_is_pure(self):
        """Test that rotating leaves the source unchanged."""
        grid = make_grid(3, 2, [(0, 0)])
        original = grid.copy()
        rotated = grid.rotate(1)

        rotated.set(0, 0, Cell.ALIVE)
        assert grid == original


class TestRendering:
    """Test cases for equality and text rendering."""

    def test_equality(self):
        """Test grid equality comparison."""
        grid1 = Grid(3, 3)
        grid2 = Grid(3, 3)

        # Empty grids should be equal
        assert grid1 == grid2

        # Set same pattern in both
        grid1.set(1, 1, Cell.ALIVE)
        grid2.set(1, 1, Cell.ALIVE)
        assert grid1 == grid2

        # Different patterns
        grid2.set(2, 2, Cell.ALIVE)
        assert grid1 != grid2

        # Different sizes
        assert Grid(3, 3) != Grid(4, 4)
        assert Grid(2, 3) != Grid(3, 2)

        # Compare with non-grid
        assert grid1 != "not a grid"

    def test_string_representation(self):
        """Test bordered string rendering."""
        grid = make_grid(3, 2, [(0, 0), (2, 1)])
        expected = "+---+\n" "|#  |\n" "|  #|\n" "+---+\n"
        assert str(grid) == expected

    def test_empty_string_representation(self):
        """Test rendering of a grid with no cells."""
        assert str(Grid()) == "++\n++\n"
        assert str(Grid(0, 2)) == "++\n||\n||\n++\n"

    def test_repr(self):
        """Test the debugging representation."""
        grid = make_grid(2, 2, [(1, 1)])
        assert repr(grid) == "Grid(width=2, height=2, alive=1)"
