"""Read-only snapshots of an engine's layout.

A GridView copies the nodes and cells of an engine at one point in time, so
it can be inspected, compared or dumped as text while the engine keeps
changing. The text dump is a debugging aid used by the command-line shell.
"""

from typing import Any, Dict, List, Optional, Tuple

from .grid.node import Node


class GridView:
    """Immutable copy of an engine's nodes and occupancy cells."""

    def __init__(self, width: int, nodes: List[Node], rows: List[List[Optional[str]]]):
        self._width = width
        self._nodes = {node.id: node.copy() for node in nodes}
        self._rows = [tuple(row) for row in rows]

    @classmethod
    def from_engine(cls, engine) -> "GridView":
        width, _ = engine.bounds()
        return cls(width, engine.get_nodes(), list(engine.grid.rows()))

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return len(self._rows)

    def get_nodes(self) -> List[Node]:
        """Copies of the nodes, sorted by id."""
        return [self._nodes[node_id].copy() for node_id in sorted(self._nodes)]

    def get_node(self, node_id: str) -> Optional[Node]:
        node = self._nodes.get(node_id)
        return node.copy() if node else None

    def cell(self, x: int, y: int) -> Optional[str]:
        """Id covering a cell; cells outside the snapshot read as empty."""
        if 0 <= y < len(self._rows) and 0 <= x < self._width:
            return self._rows[y][x]
        return None

    def check_overlaps(self) -> List[Tuple[str, str]]:
        """
        Pairs of node ids whose footprints intersect.

        An empty list means the layout is legal. Uses node geometry, not the
        cells, so it also catches a grid that drifted from its nodes.
        """
        nodes = self.get_nodes()
        overlaps = []
        for i, first in enumerate(nodes):
            for second in nodes[i + 1:]:
                if first.intersects(second):
                    overlaps.append((first.id, second.id))
        return overlaps

    def check_cells(self) -> List[Tuple[int, int]]:
        """
        Cells whose recorded id disagrees with node geometry.

        Returns:
            (x, y) of every mismatched cell; empty when cells and nodes agree
        """
        expected: Dict[Tuple[int, int], str] = {}
        for node in self._nodes.values():
            for cell in node.cells():
                expected[cell] = node.id

        mismatched = []
        for y, row in enumerate(self._rows):
            for x, value in enumerate(row):
                if value != expected.pop((x, y), None):
                    mismatched.append((x, y))
        # Footprint cells past the recorded height
        mismatched.extend(sorted(expected))
        return mismatched

    def format(self, cell_space: int = 1) -> str:
        """
        Text dump of the cells.

        Columns are numbered across the top, rows are zero-padded on the
        left, and each cell prints as [id] or as blanks when empty.
        """
        lines = ["  " + "".join(f" {i} " for i in range(self._width))]
        for row_number, row in enumerate(self._rows):
            cells = "".join(
                f"[{value}]" if value is not None else f"[{' ' * cell_space}]"
                for value in row
            )
            lines.append(f"{row_number:02d}{cells}")
        return "\n".join(lines) + "\n"

    def to_dict(self) -> Dict[str, Any]:
        """Plain structure for debugging and tests."""
        return {
            "width": self._width,
            "height": self.height,
            "nodes": [node.to_dict() for node in self.get_nodes()],
        }

    def __eq__(self, other) -> bool:
        if not isinstance(other, GridView):
            return NotImplemented
        return (self._width == other._width and self._rows == other._rows and
                self.get_nodes() == other.get_nodes())

    def __str__(self) -> str:
        return self.format()
