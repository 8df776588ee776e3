"""Creature constructors and grid file codecs.

Two on-disk formats are supported:

``.gol`` (ASCII)
    A header line ``"<width> <height>\\n"`` followed by ``height`` lines of
    exactly ``width`` characters, ``'#'`` for alive and ``' '`` for dead,
    each terminated by ``'\\n'``.

``.bgol`` (binary)
    Little-endian 32-bit signed width and height, then ``ceil(width*height/8)``
    bytes holding one bit per cell in row-major order, least significant bit
    first within each byte. Padding bits in the final byte are zero.
"""

import logging
import os
from pathlib import Path
from typing import Tuple, Union
import numpy as np

from .errors import MalformedFile, UnknownFormat
from .grid import Grid
from .patterns import builtin_pattern

# Get module logger
logger = logging.getLogger(__name__)

PathLike = Union[str, os.PathLike]

ASCII_SUFFIX = ".gol"
BINARY_SUFFIX = ".bgol"

_ALIVE_BYTE = ord("#")
_DEAD_BYTE = ord(" ")
_HEADER_DTYPE = np.dtype("<i4")
_HEADER_SIZE = 2 * _HEADER_DTYPE.itemsize


def glider() -> Grid:
    """3x3 grid holding a glider heading down and to the right."""
    return builtin_pattern("Glider").to_grid()


def r_pentomino() -> Grid:
    """3x3 grid holding the R-pentomino methuselah."""
    return builtin_pattern("R-pentomino").to_grid()


def light_weight_spaceship() -> Grid:
    """5x4 grid holding a lightweight spaceship heading left."""
    return builtin_pattern("Lightweight Spaceship").to_grid()


def load_ascii(path: PathLike) -> Grid:
    """Load a grid from a ``.gol`` file.

    Args:
        path: File to read

    Returns:
        The parsed grid

    Raises:
        OSError: If the file cannot be opened
        MalformedFile: If the header or body does not match the format
    """
    with open(path, "rb") as f:
        width, height = _parse_ascii_header(f.readline(), path)
        # Reject truncated files before allocating what the header declares
        expected = height * (width + 1)
        available = _remaining_bytes(f)
        if available < expected:
            raise MalformedFile(f"Body is {available} bytes, {width}x{height} needs {expected}", str(path))

        grid = Grid(width, height)
        cells = grid.cells
        for y in range(height):
            line = f.readline()
            if not line.endswith(b"\n"):
                raise MalformedFile(f"Row {y} is missing or not terminated by a newline", str(path))
            if len(line) != width + 1:
                raise MalformedFile(f"Row {y} has {len(line) - 1} cells, expected {width}", str(path))

            row = np.array(bytearray(line[:-1]), dtype=np.uint8)
            is_alive = row == _ALIVE_BYTE
            if not np.all(is_alive | (row == _DEAD_BYTE)):
                bad_x = int(np.argmax(~is_alive & (row != _DEAD_BYTE)))
                raise MalformedFile(f"Invalid cell character {chr(row[bad_x])!r} at ({bad_x}, {y})", str(path))
            cells[y] = is_alive

    logger.debug(f"Loaded {width}x{height} grid from {path}")
    return grid


def _remaining_bytes(f) -> int:
    return os.fstat(f.fileno()).st_size - f.tell()


def _parse_ascii_header(line: bytes, path: PathLike) -> Tuple[int, int]:
    if not line.endswith(b"\n"):
        raise MalformedFile("Header is missing or not terminated by a newline", str(path))

    fields = line[:-1].split(b" ")
    if len(fields) != 2 or not all(field.isdigit() for field in fields):
        raise MalformedFile(f"Header must be '<width> <height>', got {line!r}", str(path))

    return int(fields[0]), int(fields[1])


def save_ascii(path: PathLike, grid: Grid) -> None:
    """Save a grid to a ``.gol`` file.

    Args:
        path: Destination file
        grid: Grid to write

    Raises:
        OSError: If the file cannot be opened for writing
    """
    rows = np.where(grid.cells != 0, _ALIVE_BYTE, _DEAD_BYTE).astype(np.uint8)
    with open(path, "wb") as f:
        f.write(f"{grid.width} {grid.height}\n".encode("ascii"))
        for row in rows:
            f.write(row.tobytes() + b"\n")

    logger.debug(f"Saved {grid.width}x{grid.height} grid to {path}")


def load_binary(path: PathLike) -> Grid:
    """Load a grid from a ``.bgol`` file.

    Args:
        path: File to read

    Returns:
        The decoded grid

    Raises:
        OSError: If the file cannot be opened
        MalformedFile: If the header is short or invalid, or the body is truncated
    """
    with open(path, "rb") as f:
        header = f.read(_HEADER_SIZE)
        if len(header) < _HEADER_SIZE:
            raise MalformedFile(f"Header is {len(header)} bytes, expected {_HEADER_SIZE}", str(path))

        width, height = (int(value) for value in np.frombuffer(header, dtype=_HEADER_DTYPE))
        if width < 0 or height < 0:
            raise MalformedFile(f"Negative dimensions {width}x{height}", str(path))

        total = width * height
        num_bytes = (total + 7) // 8
        available = _remaining_bytes(f)
        if available < num_bytes:
            raise MalformedFile(f"Cell data is {available} bytes, expected {num_bytes}", str(path))
        body = f.read(num_bytes)

    bits = np.unpackbits(np.array(bytearray(body), dtype=np.uint8), count=total, bitorder="little")
    grid = Grid(width, height)
    grid.cells[:] = bits.reshape(height, width)

    logger.debug(f"Loaded {width}x{height} grid from {path}")
    return grid


def save_binary(path: PathLike, grid: Grid) -> None:
    """Save a grid to a ``.bgol`` file.

    Args:
        path: Destination file
        grid: Grid to write

    Raises:
        OSError: If the file cannot be opened for writing
    """
    header = np.array([grid.width, grid.height], dtype=_HEADER_DTYPE).tobytes()
    # packbits zero-fills the unused bits of the last byte
    body = np.packbits(grid.cells.reshape(-1) != 0, bitorder="little").tobytes()
    with open(path, "wb") as f:
        f.write(header)
        f.write(body)

    logger.debug(f"Saved {grid.width}x{grid.height} grid to {path}")


def load(path: PathLike) -> Grid:
    """Load a grid, choosing the codec from the file suffix.

    Raises:
        UnknownFormat: If the suffix is neither ``.gol`` nor ``.bgol``
    """
    suffix = Path(path).suffix.lower()
    if suffix == ASCII_SUFFIX:
        return load_ascii(path)
    if suffix == BINARY_SUFFIX:
        return load_binary(path)
    raise UnknownFormat(f"Cannot tell the grid format of '{path}' (expected {ASCII_SUFFIX} or {BINARY_SUFFIX})")


def save(path: PathLike, grid: Grid) -> None:
    """Save a grid, choosing the codec from the file suffix.

    Raises:
        UnknownFormat: If the suffix is neither ``.gol`` nor ``.bgol``
    """
    suffix = Path(path).suffix.lower()
    if suffix == ASCII_SUFFIX:
        save_ascii(path, grid)
    elif suffix == BINARY_SUFFIX:
        save_binary(path, grid)
    else:
        raise UnknownFormat(f"Cannot tell the grid format of '{path}' (expected {ASCII_SUFFIX} or {BINARY_SUFFIX})")
