"""
Change events for the grid engine.

Every successful mutating call on the engine produces exactly one
ChangeRecord describing its net effect: the node that was added, moved,
resized or removed, plus one entry per node displaced as a side effect.
Listeners receive the whole record at once, synchronously and in
registration order, before the mutating call returns.

Example:
    engine = GridEngine(12, 10)
    handle = engine.events.add_changes_listener(lambda record: print(record))
    engine.add_item("box1", 0, 0, 2, 2)   # prints one record
    engine.events.remove_listener(handle)
"""

import logging
import uuid
from dataclasses import dataclass, field
from enum import Enum
from typing import Callable, Iterator, List, Optional, Tuple, Union

from ..grid.node import Node

logger = logging.getLogger(__name__)


class ChangeKind(Enum):
    """Kind of a single change entry."""
    ADD = "add"
    REMOVE = "remove"
    MOVE = "move"
    RESIZE = "resize"


@dataclass(frozen=True)
class AddChange:
    """A node was added. node is its placed state."""
    node: Node
    kind: ChangeKind = field(default=ChangeKind.ADD, init=False)


@dataclass(frozen=True)
class RemoveChange:
    """A node was removed. node is its last state."""
    node: Node
    kind: ChangeKind = field(default=ChangeKind.REMOVE, init=False)


@dataclass(frozen=True)
class MoveChange:
    """A node changed position."""
    node: Node
    old_position: Tuple[int, int]
    new_position: Tuple[int, int]
    kind: ChangeKind = field(default=ChangeKind.MOVE, init=False)


@dataclass(frozen=True)
class ResizeChange:
    """A node changed size. Position is unchanged."""
    node: Node
    old_size: Tuple[int, int]
    new_size: Tuple[int, int]
    kind: ChangeKind = field(default=ChangeKind.RESIZE, init=False)


Change = Union[AddChange, RemoveChange, MoveChange, ResizeChange]


@dataclass(frozen=True)
class ChangeRecord:
    """All changes produced by one public operation, in order."""
    operation: str
    changes: Tuple[Change, ...] = ()

    def ids(self) -> List[str]:
        """Ids of changed nodes, in change order."""
        return [change.node.id for change in self.changes]

    def of_kind(self, kind: ChangeKind) -> List[Change]:
        return [change for change in self.changes if change.kind is kind]

    def get(self, node_id: str) -> Optional[Change]:
        """First change for node_id, if any."""
        for change in self.changes:
            if change.node.id == node_id:
                return change
        return None

    def __iter__(self) -> Iterator[Change]:
        return iter(self.changes)

    def __len__(self) -> int:
        return len(self.changes)


ChangesListener = Callable[[ChangeRecord], None]


@dataclass
class ListenerFunction:
    """A registered listener and its handle."""
    id: str
    function: ChangesListener


class GridEvents:
    """
    Listener registry owned by one engine.

    Listeners are process-local to the engine that owns this object and are
    dropped by clear() when the engine is closed.
    """

    def __init__(self):
        self._changes_listeners: List[ListenerFunction] = []

    def add_changes_listener(self, function: ChangesListener) -> str:
        """
        Register a listener.

        Returns:
            Handle to pass to remove_listener()
        """
        if not callable(function):
            raise TypeError(f"Listener must be callable, got {type(function).__name__}")
        listener_id = str(uuid.uuid4())
        self._changes_listeners.append(ListenerFunction(id=listener_id, function=function))
        logger.debug("Registered changes listener %s", listener_id)
        return listener_id

    def remove_listener(self, listener_id: str) -> bool:
        """
        Unregister a listener.

        Returns:
            True if a listener was removed, False if the handle was unknown
        """
        before = len(self._changes_listeners)
        self._changes_listeners = [
            listener for listener in self._changes_listeners
            if listener.id != listener_id
        ]
        return len(self._changes_listeners) < before

    # Name used by the engine's original event API
    remove_changes_listener = remove_listener

    def trigger_changes_event(self, record: ChangeRecord):
        """
        Deliver a record to every listener in registration order.

        The listener list is snapshotted first, so listeners added or removed
        during dispatch take effect from the next record. An exception from a
        listener propagates and stops delivery of this record.
        """
        listeners = list(self._changes_listeners)
        if logger.isEnabledFor(logging.DEBUG):
            logger.debug(
                "Dispatching %s record with %d changes to %d listeners",
                record.operation, len(record), len(listeners),
            )
        for listener in listeners:
            listener.function(record)

    def clear(self):
        """Drop all listeners."""
        self._changes_listeners.clear()

    def __len__(self) -> int:
        return len(self._changes_listeners)
