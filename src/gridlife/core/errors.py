"""Exception types raised by the grid, world and zoo modules."""

from typing import Optional


class GridLifeError(Exception):
    """Base class for all gridlife errors."""


class OutOfBounds(GridLifeError, IndexError):
    """A coordinate or placement falls outside the grid."""


class InvalidRange(GridLifeError, ValueError):
    """A crop or resize was given inverted or negative bounds."""


class InvalidArgument(GridLifeError, ValueError):
    """An argument is outside the values an operation accepts."""


class UnknownFormat(GridLifeError, ValueError):
    """A path has no recognised grid file suffix."""


class MalformedFile(GridLifeError, ValueError):
    """A grid file does not match its declared format."""

    def __init__(self, message: str, path: Optional[str] = None) -> None:
        self.path = path
        if path is not None:
            message = f"{path}: {message}"
        super().__init__(message)
