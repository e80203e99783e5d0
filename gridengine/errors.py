"""
Grid Engine Errors

Every failure the engine reports is a subclass of GridEngineError so callers
can catch the whole family or a single kind. Mutating operations raise before
touching any state, so catching one of these never leaves a half-applied
change behind.
"""

from typing import Optional


class GridEngineError(Exception):
    """Base class for all grid engine errors."""


class DuplicateIdError(GridEngineError):
    """An item with this id is already on the grid."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item already exists: {item_id}")


class NotFoundError(GridEngineError, KeyError):
    """No item with this id is on the grid."""

    def __init__(self, item_id: str):
        self.item_id = item_id
        super().__init__(f"Item not found: {item_id}")

    def __str__(self) -> str:
        # KeyError would otherwise repr() the message
        return self.args[0]


class OutOfBoundsError(GridEngineError, ValueError):
    """Geometry or coordinates fall outside the grid."""

    def __init__(self, message: str, x: Optional[int] = None, y: Optional[int] = None):
        self.x = x
        self.y = y
        super().__init__(message)


class GridFullError(GridEngineError):
    """Growing the grid would exceed the configured maximum height."""

    def __init__(self, required_height: int, max_height: int):
        self.required_height = required_height
        self.max_height = max_height
        super().__init__(
            f"Grid full: placement needs height {required_height}, "
            f"max height is {max_height}"
        )


class ReentrantMutationError(GridEngineError, RuntimeError):
    """A change listener tried to mutate the engine while being notified."""

    def __init__(self, operation: str):
        self.operation = operation
        super().__init__(
            f"Cannot call {operation}() from inside a change listener"
        )


class ConfigError(GridEngineError, ValueError):
    """Invalid grid configuration."""
