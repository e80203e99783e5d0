"""
gridengine - Collision-Resolving Grid Layout Engine

Places rectangular items on a fixed-width grid that grows downward on
demand. Items can be added, moved, resized and removed; the engine resolves
collisions automatically and reports every change through an event feed.
"""

__version__ = "0.1.0"

from .config import GridConfig, load_config
from .engine import (
    AddChange,
    ChangeKind,
    ChangeRecord,
    GridEngine,
    MoveChange,
    RemoveChange,
    ResizeChange,
)
from .errors import (
    ConfigError,
    DuplicateIdError,
    GridEngineError,
    GridFullError,
    NotFoundError,
    OutOfBoundsError,
    ReentrantMutationError,
)
from .grid import Node
from .view import GridView

__all__ = [
    "GridEngine",
    "GridConfig",
    "load_config",
    "Node",
    "GridView",
    "ChangeRecord",
    "ChangeKind",
    "AddChange",
    "RemoveChange",
    "MoveChange",
    "ResizeChange",
    "GridEngineError",
    "DuplicateIdError",
    "NotFoundError",
    "OutOfBoundsError",
    "GridFullError",
    "ReentrantMutationError",
    "ConfigError",
]
