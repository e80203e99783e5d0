"""
Node representation for grid items.

A node is a rectangle of whole grid cells anchored at its top-left corner.
Nodes are owned by the NodeRegistry; everything else refers to them by id.
"""

from dataclasses import dataclass, field
from typing import Any, Dict, Iterator, Tuple


@dataclass
class Node:
    """An item placed on the grid."""
    id: str
    x: int  # column of the top-left cell
    y: int  # row of the top-left cell
    w: int  # width in cells
    h: int  # height in cells

    # Opaque caller data, never inspected by the engine. Copies share the
    # values, only the mapping itself is duplicated.
    metadata: Dict[str, Any] = field(default_factory=dict)

    @property
    def position(self) -> Tuple[int, int]:
        return (self.x, self.y)

    @property
    def size(self) -> Tuple[int, int]:
        return (self.w, self.h)

    @property
    def right(self) -> int:
        """First column past the node."""
        return self.x + self.w

    @property
    def bottom(self) -> int:
        """First row below the node."""
        return self.y + self.h

    def cells(self) -> Iterator[Tuple[int, int]]:
        """
        Iterate the footprint cells.

        Columns are the outer loop, so a 2x2 node at (1, 2) yields
        (1, 2), (1, 3), (2, 2), (2, 3).
        """
        for cx in range(self.x, self.x + self.w):
            for cy in range(self.y, self.y + self.h):
                yield (cx, cy)

    def intersects(self, other: "Node") -> bool:
        """Check if the footprints share at least one cell."""
        return not (self.right <= other.x or other.right <= self.x or
                    self.bottom <= other.y or other.bottom <= self.y)

    def with_geometry(self, x: int, y: int, w: int, h: int) -> "Node":
        """Return a copy at a different position/size."""
        return Node(self.id, x, y, w, h, metadata=dict(self.metadata))

    def copy(self) -> "Node":
        return self.with_geometry(self.x, self.y, self.w, self.h)

    def to_dict(self) -> Dict[str, Any]:
        d = {"id": self.id, "x": self.x, "y": self.y, "w": self.w, "h": self.h}
        if self.metadata:
            d["metadata"] = dict(self.metadata)
        return d
