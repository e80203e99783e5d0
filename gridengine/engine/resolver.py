"""
Collision Resolver

Turns a requested add, move or resize into a collision-free layout. Three
outcomes are tried in order of preference:

1. Direct placement - the requested footprint is free.
2. Cascading displacement (move/resize) - nodes in the way are pushed
   straight down below the node that hit them, settling top to bottom, and
   push the nodes in their own way in turn.
3. Grid growth - rows are appended when a placement runs off the bottom.

Adds never displace existing nodes. A colliding add is relocated to the
first free slot found by scanning rows from the requested row downward and
each row from column 0 rightward, so among equally valid slots the smallest
row, then the smallest column, wins.

The resolver never mutates the registry or the live grid. Every plan is
computed against a scratch copy of the grid and returned as a Placement for
the engine to commit in one step, so a plan that fails (GridFullError under a
height cap) leaves nothing behind.
"""

import heapq
import logging
from dataclasses import dataclass, field
from typing import Dict, List, Optional, Tuple

from ..errors import GridFullError, OutOfBoundsError
from ..grid.node import Node
from ..grid.occupancy import OccupancyGrid
from ..grid.registry import NodeRegistry

logger = logging.getLogger(__name__)


@dataclass
class Placement:
    """Result of planning one operation."""
    target: Node  # final state of the node the caller asked about
    grid: OccupancyGrid  # scratch grid holding the final layout
    # Final state of every node displaced as a side effect, in the order
    # they settled
    displaced: Dict[str, Node] = field(default_factory=dict)
    cascade_steps: int = 0  # placements performed while resolving

    def nodes(self) -> List[Node]:
        """Target first, then displaced nodes."""
        return [self.target] + list(self.displaced.values())


class CollisionResolver:
    """
    Computes legal placements against a registry and occupancy grid.

    The resolver holds references, not copies, so it always sees the
    engine's current state.
    """

    def __init__(self, registry: NodeRegistry, grid: OccupancyGrid):
        self.registry = registry
        self.grid = grid

    def validate_geometry(self, x: int, y: int, w: int, h: int):
        """
        Check the hard bounds: positive size, non-negative position, and the
        footprint inside the grid width. Height is not bounded here.

        Raises:
            OutOfBoundsError: If any check fails
        """
        for name, value in (("x", x), ("y", y), ("w", w), ("h", h)):
            if isinstance(value, bool) or not isinstance(value, int):
                raise OutOfBoundsError(f"{name} must be an integer, got {value!r}")
        if w <= 0 or h <= 0:
            raise OutOfBoundsError(f"Size must be positive, got {w}x{h}", x=x, y=y)
        if x < 0 or y < 0:
            raise OutOfBoundsError(f"Position must not be negative, got ({x}, {y})", x=x, y=y)
        if x + w > self.grid.width:
            raise OutOfBoundsError(
                f"Footprint ({x}, {y}, {w}x{h}) exceeds grid width {self.grid.width}",
                x=x, y=y,
            )

    def find_free_slot(self, w: int, h: int, start_y: int = 0,
                       grid: Optional[OccupancyGrid] = None) -> Tuple[int, int]:
        """
        Find the first free w x h slot at or below start_y.

        Rows are scanned top to bottom from start_y and each row left to
        right. Rows past the current height are empty, so without a height
        cap the scan always succeeds.

        Returns:
            (x, y) of the slot

        Raises:
            OutOfBoundsError: If w is wider than the grid
            GridFullError: If no slot fits under max_height
        """
        grid = grid or self.grid
        if w > grid.width:
            raise OutOfBoundsError(f"Width {w} exceeds grid width {grid.width}")

        y = max(start_y, 0)
        while True:
            if not grid.fits_height(y, h):
                raise GridFullError(y + h, grid.max_height)
            for x in range(0, grid.width - w + 1):
                if grid.is_free(x, y, w, h):
                    return (x, y)
            y += 1

    def plan_add(self, node: Node) -> Placement:
        """
        Plan placing a new node.

        The node keeps its requested position when free; otherwise it is
        relocated by find_free_slot() starting at the requested row.
        """
        self.validate_geometry(node.x, node.y, node.w, node.h)

        x, y = node.x, node.y
        if not (self.grid.fits_height(y, node.h) and self.grid.is_free(x, y, node.w, node.h)):
            x, y = self.find_free_slot(node.w, node.h, start_y=node.y)
            logger.debug(
                "Add %s: (%d, %d) occupied, relocated to (%d, %d)",
                node.id, node.x, node.y, x, y,
            )

        scratch = self.grid.copy()
        scratch.place(node.id, x, y, node.w, node.h)
        return Placement(target=node.with_geometry(x, y, node.w, node.h),
                         grid=scratch, cascade_steps=1)

    def plan_move(self, node_id: str, x: int, y: int) -> Placement:
        """Plan moving a node, displacing whatever is in the way."""
        node = self.registry.get(node_id)
        return self._cascade(node, x, y, node.w, node.h)

    def plan_resize(self, node_id: str, w: int, h: int) -> Placement:
        """Plan resizing a node anchored at its top-left corner."""
        node = self.registry.get(node_id)
        return self._cascade(node, node.x, node.y, w, h)

    def _cascade(self, node: Node, x: int, y: int, w: int, h: int) -> Placement:
        """
        Place node at (x, y, w, h) and push colliding nodes down.

        Nodes in the way are lifted off the scratch grid and queued to land in
        their own column at the bottom of the node that hit them. The queue is
        keyed on (row, column, id), so nodes settle from the top down. A
        settled node never moves again: a queued node that would land on one
        slides down its column until it clears every settled node, then
        pushes whatever unsettled nodes are still in its way. Each node
        settles at most once, which bounds the cascade.
        """
        self.validate_geometry(x, y, w, h)
        if not self.grid.fits_height(y, h):
            raise GridFullError(y + h, self.grid.max_height)

        scratch = self.grid.copy()
        scratch.clear(node.id, node.x, node.y, node.w, node.h)

        sizes: Dict[str, Tuple[int, int]] = {node.id: (w, h)}
        settled: Dict[str, Node] = {}
        heap: List[Tuple[int, int, str]] = [(y, x, node.id)]
        steps = 0

        while heap:
            cy, cx, current_id = heapq.heappop(heap)
            cw, ch = sizes[current_id]
            cy = self._settle_row(scratch, settled, current_id, cx, cy, cw, ch)
            steps += 1

            # Only unsettled nodes are left in the way, still where the
            # registry has them
            for other_id in scratch.ids_in(cx, cy, cw, ch, ignore=current_id):
                other = self.registry.get(other_id)
                sizes[other_id] = other.size
                scratch.clear(other_id, other.x, other.y, other.w, other.h)
                heapq.heappush(heap, (cy + ch, other.x, other_id))
                if logger.isEnabledFor(logging.DEBUG):
                    logger.debug(
                        "%s at (%d, %d) pushes %s from row %d to row %d",
                        current_id, cx, cy, other_id, other.y, cy + ch,
                    )

            scratch.place(current_id, cx, cy, cw, ch)
            settled[current_id] = self.registry.get(current_id).with_geometry(cx, cy, cw, ch)

        target = settled.pop(node.id)
        return Placement(target=target, grid=scratch, displaced=settled,
                         cascade_steps=steps)

    @staticmethod
    def _settle_row(grid: OccupancyGrid, settled: Dict[str, Node],
                    node_id: str, x: int, y: int, w: int, h: int) -> int:
        """
        First row at or below y where a w x h footprint in column x overlaps
        no settled node.

        Raises:
            GridFullError: If that row would put the node past max_height
        """
        while True:
            if not grid.fits_height(y, h):
                raise GridFullError(y + h, grid.max_height)
            blockers = [
                other_id for other_id in grid.ids_in(x, y, w, h, ignore=node_id)
                if other_id in settled
            ]
            if not blockers:
                return y
            # Every row above the lowest blocker's bottom still overlaps it
            y = max(settled[other_id].bottom for other_id in blockers)
