"""
Grid Engine

Public facade over the node registry, occupancy grid, collision resolver and
event emitter. Manages a fixed-width grid of rectangular items with:

- Automatic collision handling (relocation on add, push-down on move/resize)
- Dynamic vertical growth, optionally capped by max_height
- One change record per successful mutation, delivered to listeners

Every mutating call is all-or-nothing: it either commits a complete,
collision-free layout and notifies listeners, or raises without changing
anything and without notifying anyone.

Example:
    engine = GridEngine(12, 10)
    engine.add_item("item1", 2, 2, 2, 4)
    engine.move_item("item1", 4, 4)
    engine.resize_item("item1", 3, 3)
    engine.remove_item("item1")
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

from ..config import GridConfig
from ..errors import DuplicateIdError, ReentrantMutationError
from ..grid.node import Node
from ..grid.occupancy import OccupancyGrid
from ..grid.registry import NodeRegistry
from ..view import GridView
from .events import (
    AddChange,
    Change,
    ChangeRecord,
    GridEvents,
    MoveChange,
    RemoveChange,
    ResizeChange,
)
from .resolver import CollisionResolver, Placement

logger = logging.getLogger(__name__)


class GridEngine:
    """
    Manages items on a fixed-width, vertically growing grid.

    Single-threaded: calls must be serialized by the caller if the engine is
    shared between threads. Listeners must not call mutating methods.
    """

    def __init__(self, width: int, height: int, max_height: Optional[int] = None):
        """
        Args:
            width: Number of columns, fixed for the engine's lifetime
            height: Initial number of rows
            max_height: Optional cap on growth. None means unbounded.
        """
        self._registry = NodeRegistry()
        self._grid = OccupancyGrid(width, height, max_height)
        self._resolver = CollisionResolver(self._registry, self._grid)
        self.events = GridEvents()
        self._dispatching = False

    @classmethod
    def from_config(cls, config: GridConfig) -> "GridEngine":
        """Create an engine from a (validated) GridConfig."""
        config.validate()
        return cls(config.width, config.height, config.max_height)

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def grid(self) -> OccupancyGrid:
        """
        The live occupancy grid, for inspection only.

        Mutate through the engine's methods, never through the grid.
        """
        return self._grid

    @property
    def max_height(self) -> Optional[int]:
        return self._grid.max_height

    def bounds(self) -> Tuple[int, int]:
        """Current (width, height)."""
        return (self._grid.width, self._grid.height)

    def get_item(self, item_id: str) -> Node:
        """
        Get a copy of an item.

        Raises:
            NotFoundError: If the id is unknown
        """
        return self._registry.get(item_id).copy()

    def item_at(self, x: int, y: int) -> Optional[str]:
        """
        Id of the item covering a cell, or None.

        Raises:
            OutOfBoundsError: If x is outside the width or y is negative
                              or past the height cap
        """
        return self._grid.occupied_by(x, y)

    def get_nodes(self) -> List[Node]:
        """Copies of all items, sorted by id."""
        return [node.copy() for node in self._registry.sorted_nodes()]

    def find_free_slot(self, w: int, h: int, start_y: int = 0) -> Tuple[int, int]:
        """
        First (x, y) where a w x h item would fit without displacing anything.

        Pure query: the grid is not grown even if the slot lies past the
        current height.
        """
        self._resolver.validate_geometry(0, max(start_y, 0), w, h)
        return self._resolver.find_free_slot(w, h, start_y=start_y)

    def view(self) -> GridView:
        """Read-only snapshot of the current layout."""
        return GridView.from_engine(self)

    # ------------------------------------------------------------------
    # Mutations
    # ------------------------------------------------------------------

    def add_item(self, item_id: str, x: int, y: int, w: int, h: int,
                 metadata: Optional[Dict[str, Any]] = None) -> Node:
        """
        Add an item.

        If the requested footprint is occupied, the item is placed at the
        first free slot at or below row y (smallest row, then smallest
        column). Existing items never move. The grid grows if needed.

        Returns:
            Copy of the placed item

        Raises:
            DuplicateIdError: If item_id is already on the grid
            OutOfBoundsError: If the geometry is invalid or too wide
            GridFullError: If no slot fits under max_height
        """
        self._ensure_not_dispatching("add_item")
        if not isinstance(item_id, str):
            raise TypeError(f"Item id must be a string, got {type(item_id).__name__}")
        if item_id in self._registry:
            raise DuplicateIdError(item_id)

        node = Node(item_id, x, y, w, h, metadata=dict(metadata or {}))
        placement = self._resolver.plan_add(node)

        self._commit(placement, inserted=placement.target)
        record = ChangeRecord("add", (AddChange(placement.target.copy()),))
        logger.debug("Added %s at (%d, %d) size %dx%d", item_id,
                     placement.target.x, placement.target.y, w, h)
        self._publish(record)
        return placement.target.copy()

    def move_item(self, item_id: str, x: int, y: int) -> Node:
        """
        Move an item, pushing colliding items down.

        Returns:
            Copy of the moved item

        Raises:
            NotFoundError: If item_id is unknown
            OutOfBoundsError: If the new footprint is invalid or too wide
            GridFullError: If the cascade would exceed max_height
        """
        self._ensure_not_dispatching("move_item")
        placement = self._resolver.plan_move(item_id, x, y)
        return self._apply_cascade("move", placement)

    def resize_item(self, item_id: str, w: int, h: int) -> Node:
        """
        Resize an item anchored at its top-left corner, pushing colliding
        items down.

        Returns:
            Copy of the resized item

        Raises:
            NotFoundError: If item_id is unknown
            OutOfBoundsError: If the new size is invalid or too wide
            GridFullError: If the cascade would exceed max_height
        """
        self._ensure_not_dispatching("resize_item")
        placement = self._resolver.plan_resize(item_id, w, h)
        return self._apply_cascade("resize", placement)

    def remove_item(self, item_id: str) -> Node:
        """
        Remove an item. Other items are not repacked.

        Returns:
            The removed item

        Raises:
            NotFoundError: If item_id is unknown
        """
        self._ensure_not_dispatching("remove_item")
        node = self._registry.get(item_id)

        scratch = self._grid.copy()
        scratch.clear(node.id, node.x, node.y, node.w, node.h)
        self._commit(Placement(target=node, grid=scratch), removed=item_id)

        logger.debug("Removed %s from (%d, %d)", item_id, node.x, node.y)
        self._publish(ChangeRecord("remove", (RemoveChange(node.copy()),)))
        return node

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self):
        """Drop all listeners. The layout itself is kept."""
        self.events.clear()

    def __enter__(self) -> "GridEngine":
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def __contains__(self, item_id) -> bool:
        return item_id in self._registry

    def __len__(self) -> int:
        return len(self._registry)

    def __repr__(self) -> str:
        width, height = self.bounds()
        return f"GridEngine(width={width}, height={height}, items={len(self)})"

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _apply_cascade(self, operation: str, placement: Placement) -> Node:
        """Commit a move/resize plan and publish its net changes."""
        changes: List[Change] = []
        for planned in placement.nodes():
            current = self._registry.get(planned.id)
            if planned.size != current.size:
                changes.append(ResizeChange(planned.copy(), current.size, planned.size))
            if planned.position != current.position:
                changes.append(MoveChange(planned.copy(), current.position, planned.position))

        self._commit(placement)

        if logger.isEnabledFor(logging.DEBUG):
            target = placement.target
            logger.debug(
                "%s %s -> (%d, %d) size %dx%d, displaced %s in %d steps",
                operation, target.id, target.x, target.y, target.w, target.h,
                list(placement.displaced) or "nothing", placement.cascade_steps,
            )
        self._publish(ChangeRecord(operation, tuple(changes)))
        return placement.target.copy()

    def _commit(self, placement: Placement, inserted: Optional[Node] = None,
                removed: Optional[str] = None):
        """
        Single choke point for state changes: swaps in the planned grid and
        brings the registry in line with it. Nothing in here can fail once
        the plan exists.
        """
        if inserted is not None:
            self._registry.insert(inserted.copy())
        elif removed is not None:
            self._registry.remove(removed)
        else:
            for planned in placement.nodes():
                self._registry.update_geometry(
                    planned.id, x=planned.x, y=planned.y, w=planned.w, h=planned.h
                )

        self._grid = placement.grid
        self._resolver.grid = placement.grid

    def _publish(self, record: ChangeRecord):
        self._dispatching = True
        try:
            self.events.trigger_changes_event(record)
        finally:
            self._dispatching = False

    def _ensure_not_dispatching(self, operation: str):
        if self._dispatching:
            raise ReentrantMutationError(operation)
