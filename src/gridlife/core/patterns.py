"""Common Conway's Game of Life patterns and pattern management."""

from typing import Dict, List, Tuple, Optional, Any

from .grid import Cell, Grid


class Pattern:
    """Represents a Game of Life pattern."""

    def __init__(
        self,
        name: str,
        cells: List[Tuple[int, int]],
        description: str = "",
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        """Initialize a pattern.

        Args:
            name: Pattern name
            cells: List of (x, y) coordinates for living cells
            description: Optional description
            metadata: Optional metadata dictionary
        """
        self.name = name
        self.cells = list(cells)
        self.description = description
        self.metadata = metadata or {}

    def copy(self) -> "Pattern":
        """Return an independent copy of this pattern."""
        return Pattern(self.name, list(self.cells), self.description, self.metadata.copy())

    def get_bounding_box(self) -> Tuple[int, int, int, int]:
        """Get bounding box of the pattern.

        Returns:
            Tuple of (min_x, min_y, max_x, max_y)
        """
        if not self.cells:
            return (0, 0, 0, 0)

        xs, ys = zip(*self.cells)
        return (min(xs), min(ys), max(xs), max(ys))

    def get_size(self) -> Tuple[int, int]:
        """Get pattern size.

        Returns:
            Tuple of (width, height), (0, 0) for an empty pattern
        """
        if not self.cells:
            return (0, 0)

        min_x, min_y, max_x, max_y = self.get_bounding_box()
        return (max_x - min_x + 1, max_y - min_y + 1)

    def normalize(self) -> "Pattern":
        """Return a new pattern with coordinates normalized to start at (0, 0).

        Returns:
            New Pattern instance with normalized coordinates
        """
        if not self.cells:
            return Pattern(self.name, [], self.description, self.metadata.copy())

        min_x, min_y, _, _ = self.get_bounding_box()
        normalized_cells = [(x - min_x, y - min_y) for x, y in self.cells]

        return Pattern(
            self.name, normalized_cells, self.description, self.metadata.copy()
        )

    def to_grid(self) -> Grid:
        """Build a grid sized exactly to the pattern's bounding box.

        Returns:
            New Grid with the pattern's cells alive
        """
        width, height = self.get_size()
        grid = Grid(width, height)
        for x, y in self.normalize().cells:
            grid.set(x, y, Cell.ALIVE)
        return grid

    def place(self, grid: Grid, x: int = 0, y: int = 0) -> None:
        """Overlay this pattern on a grid without killing any living cell.

        Args:
            grid: Target grid
            x: Column of the pattern's top-left corner
            y: Row of the pattern's top-left corner

        Raises:
            OutOfBounds: If the pattern does not fit at that position
        """
        grid.merge(self.to_grid(), x, y, alive_only=True)

    @classmethod
    def from_grid(cls, grid: Grid, name: str, description: str = "") -> "Pattern":
        """Create pattern from current grid state.

        Args:
            grid: Source grid
            name: Pattern name
            description: Optional description

        Returns:
            New Pattern instance
        """
        cells = []
        for y in range(grid.height):
            for x in range(grid.width):
                if grid.get(x, y) == Cell.ALIVE:
                    cells.append((x, y))

        metadata = {"source_grid_size": grid.shape, "population": len(cells)}

        return cls(name, cells, description, metadata)


class PatternLibrary:
    """Manages a collection of patterns."""

    def __init__(self) -> None:
        """Initialize pattern library with the built-in patterns."""
        self._patterns: Dict[str, Pattern] = {}
        self._load_builtin_patterns()

    def _load_builtin_patterns(self) -> None:
        """Load built-in common patterns."""
        # Still life patterns
        self.add_pattern(
            Pattern("Block", [(0, 0), (0, 1), (1, 0), (1, 1)], "2x2 still life block")
        )

        self.add_pattern(
            Pattern(
                "Beehive",
                [(1, 0), (2, 0), (0, 1), (3, 1), (1, 2), (2, 2)],
                "Beehive still life",
            )
        )

        self.add_pattern(
            Pattern(
                "Loaf",
                [(1, 0), (2, 0), (0, 1), (3, 1), (1, 2), (3, 2), (2, 3)],
                "Loaf still life",
            )
        )

        # Oscillators
        self.add_pattern(
            Pattern("Blinker", [(0, 1), (1, 1), (2, 1)], "Period-2 oscillator")
        )

        self.add_pattern(
            Pattern(
                "Toad",
                [(1, 0), (2, 0), (3, 0), (0, 1), (1, 1), (2, 1)],
                "Period-2 oscillator",
            )
        )

        self.add_pattern(
            Pattern(
                "Beacon",
                [(0, 0), (1, 0), (0, 1), (3, 2), (2, 3), (3, 3)],
                "Period-2 oscillator",
            )
        )

        # One quadrant, mirrored into the other three
        quadrant = [
            (2, 0), (3, 0), (4, 0),
            (0, 2), (0, 3), (0, 4),
            (5, 2), (5, 3), (5, 4),
            (2, 5), (3, 5), (4, 5),
        ]
        pulsar = sorted(
            {(qx, qy) for x, y in quadrant for qx in (x, 12 - x) for qy in (y, 12 - y)}
        )
        self.add_pattern(Pattern("Pulsar", pulsar, "Period-3 oscillator"))

        # Spaceships
        self.add_pattern(
            Pattern(
                "Glider",
                [(1, 0), (2, 1), (0, 2), (1, 2), (2, 2)],
                "Smallest spaceship, period-4",
            )
        )

        self.add_pattern(
            Pattern(
                "Lightweight Spaceship",
                [
                    (1, 0),
                    (4, 0),
                    (0, 1),
                    (0, 2),
                    (4, 2),
                    (0, 3),
                    (1, 3),
                    (2, 3),
                    (3, 3),
                ],
                "LWSS - Period-4 spaceship",
            )
        )

        # Methuselahs
        self.add_pattern(
            Pattern(
                "R-pentomino",
                [(1, 0), (2, 0), (0, 1), (1, 1), (1, 2)],
                "Famous methuselah that stabilizes after 1103 generations",
            )
        )

        self.add_pattern(
            Pattern(
                "Diehard",
                [(6, 0), (0, 1), (1, 1), (1, 2), (5, 2), (6, 2), (7, 2)],
                "Dies after exactly 130 generations",
            )
        )

        self.add_pattern(
            Pattern(
                "Acorn",
                [(1, 0), (3, 1), (0, 2), (1, 2), (4, 2), (5, 2), (6, 2)],
                "Takes 5206 generations to stabilize",
            )
        )

    def add_pattern(self, pattern: Pattern) -> None:
        """Add a pattern to the library, replacing any with the same name.

        Args:
            pattern: Pattern to add
        """
        self._patterns[pattern.name.lower()] = pattern

    def get_pattern(self, name: str) -> Optional[Pattern]:
        """Get a pattern by name (case-insensitive).

        Args:
            name: Pattern name

        Returns:
            Pattern instance or None if not found
        """
        return self._patterns.get(name.lower())

    def list_patterns(self) -> List[str]:
        """Get list of all pattern names.

        Returns:
            List of pattern names
        """
        return [pattern.name for pattern in self._patterns.values()]

    def get_patterns_by_category(self) -> Dict[str, List[str]]:
        """Get patterns organized by category.

        Returns:
            Dictionary mapping categories to pattern name lists
        """
        categories = {
            "Still Life": ["Block", "Beehive", "Loaf"],
            "Oscillators": ["Blinker", "Toad", "Beacon", "Pulsar"],
            "Spaceships": ["Glider", "Lightweight Spaceship"],
            "Methuselahs": ["R-pentomino", "Diehard", "Acorn"],
            "Custom": [],
        }

        # Add any custom patterns to the Custom category
        all_builtin = set()
        for cat_patterns in categories.values():
            all_builtin.update(cat_patterns)

        for name in self.list_patterns():
            if name not in all_builtin:
                categories["Custom"].append(name)

        # Remove empty categories
        return {cat: patterns for cat, patterns in categories.items() if patterns}


_BUILTIN = PatternLibrary()


def builtin_pattern(name: str) -> Pattern:
    """Look up one of the built-in patterns.

    Returns a copy, so callers cannot alter the shared catalogue.

    Raises:
        KeyError: If no built-in pattern has that name
    """
    pattern = _BUILTIN.get_pattern(name)
    if pattern is None:
        raise KeyError(f"Unknown pattern '{name}'")
    return pattern.copy()
