"""Placement engine: collision resolution, change events and the public facade."""

from .events import (
    AddChange,
    Change,
    ChangeKind,
    ChangeRecord,
    GridEvents,
    MoveChange,
    RemoveChange,
    ResizeChange,
)
from .resolver import CollisionResolver, Placement
from .engine import GridEngine

__all__ = [
    "AddChange",
    "Change",
    "ChangeKind",
    "ChangeRecord",
    "GridEvents",
    "MoveChange",
    "RemoveChange",
    "ResizeChange",
    "CollisionResolver",
    "Placement",
    "GridEngine",
]
