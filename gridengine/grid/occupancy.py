"""
Occupancy Grid

Cell index recording which node id (if any) covers each cell. The grid has a
fixed width and a height that only ever grows. It is a derived cache of node
footprints: it applies whatever it is told and leaves placement policy and
collision checks to the resolver.

Rows past the current height read as empty, so a placement that runs off the
bottom simply grows the grid. An optional max_height caps that growth.
"""

import logging
from typing import Iterator, List, Optional

from ..errors import GridFullError, OutOfBoundsError

logger = logging.getLogger(__name__)


class OccupancyGrid:
    """Fixed-width, growable-height matrix of node ids."""

    def __init__(self, width: int, height: int, max_height: Optional[int] = None):
        """
        Args:
            width: Number of columns (immutable)
            height: Initial number of rows
            max_height: Optional cap on growth. None means unbounded.
        """
        if width <= 0:
            raise OutOfBoundsError(f"Grid width must be positive, got {width}")
        if height < 0:
            raise OutOfBoundsError(f"Grid height must not be negative, got {height}")
        if max_height is not None and max_height < height:
            raise GridFullError(height, max_height)

        self._width = width
        self._max_height = max_height
        self._rows: List[List[Optional[str]]] = [
            [None] * width for _ in range(height)
        ]

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return len(self._rows)

    @property
    def max_height(self) -> Optional[int]:
        return self._max_height

    def fits_height(self, y: int, h: int) -> bool:
        """Check if rows [y, y+h) are allowed under the height cap."""
        return self._max_height is None or y + h <= self._max_height

    def _check_cell(self, x: int, y: int):
        if not 0 <= x < self._width:
            raise OutOfBoundsError(
                f"Column {x} outside grid width {self._width}", x=x, y=y
            )
        if y < 0 or (self._max_height is not None and y >= self._max_height):
            raise OutOfBoundsError(f"Row {y} outside grid", x=x, y=y)

    def occupied_by(self, x: int, y: int) -> Optional[str]:
        """
        Get the id of the node covering a cell.

        Rows at or past the current height are reported as empty.

        Raises:
            OutOfBoundsError: If x is outside the width, y is negative,
                              or y is past the height cap
        """
        self._check_cell(x, y)
        if y >= len(self._rows):
            return None
        return self._rows[y][x]

    def grow_to(self, new_height: int):
        """
        Extend the addressable height. Never shrinks.

        Raises:
            GridFullError: If new_height exceeds max_height
        """
        current = len(self._rows)
        if new_height <= current:
            return
        if self._max_height is not None and new_height > self._max_height:
            raise GridFullError(new_height, self._max_height)

        for _ in range(new_height - current):
            self._rows.append([None] * self._width)
        logger.info("Grid grew from %d to %d rows", current, new_height)

    def place(self, node_id: str, x: int, y: int, w: int, h: int):
        """
        Mark a footprint as covered by node_id, growing the grid if needed.

        Overwrites whatever the cells held; callers validate collisions first.
        """
        if x < 0 or y < 0 or x + w > self._width:
            raise OutOfBoundsError(
                f"Footprint ({x}, {y}, {w}x{h}) outside grid width {self._width}",
                x=x, y=y,
            )
        self.grow_to(y + h)
        for row in self._rows[y:y + h]:
            row[x:x + w] = [node_id] * w

    def clear(self, node_id: str, x: Optional[int] = None, y: Optional[int] = None,
              w: Optional[int] = None, h: Optional[int] = None):
        """
        Unmark cells covered by node_id.

        With a footprint only that rectangle is visited; without one the
        whole grid is scanned. Cells held by other ids are left alone.
        """
        if x is None or y is None or w is None or h is None:
            x, y, w, h = 0, 0, self._width, len(self._rows)

        for row in self._rows[max(y, 0):y + h]:
            for cx in range(max(x, 0), min(x + w, self._width)):
                if row[cx] == node_id:
                    row[cx] = None

    def ids_in(self, x: int, y: int, w: int, h: int,
               ignore: Optional[str] = None) -> List[str]:
        """
        Get ids covering any cell of a rectangle.

        Ids are returned in first-encounter order scanning rows top to bottom,
        each row left to right.
        """
        found: List[str] = []
        seen = set()
        for row in self._rows[y:y + h]:
            for cell in row[x:x + w]:
                if cell is not None and cell != ignore and cell not in seen:
                    seen.add(cell)
                    found.append(cell)
        return found

    def is_free(self, x: int, y: int, w: int, h: int,
                ignore: Optional[str] = None) -> bool:
        """Check if no node (other than ignore) covers the rectangle."""
        for row in self._rows[y:y + h]:
            for cell in row[x:x + w]:
                if cell is not None and cell != ignore:
                    return False
        return True

    def rows(self) -> Iterator[List[Optional[str]]]:
        """Iterate copies of each row, top to bottom."""
        for row in self._rows:
            yield list(row)

    def copy(self) -> "OccupancyGrid":
        """Independent copy for scratch planning."""
        clone = OccupancyGrid.__new__(OccupancyGrid)
        clone._width = self._width
        clone._max_height = self._max_height
        clone._rows = [list(row) for row in self._rows]
        return clone

    def __eq__(self, other) -> bool:
        if not isinstance(other, OccupancyGrid):
            return NotImplemented
        return (self._width == other._width and
                self._max_height == other._max_height and
                self._rows == other._rows)

    def __repr__(self) -> str:
        return (f"OccupancyGrid(width={self._width}, height={self.height}, "
                f"max_height={self._max_height})")
