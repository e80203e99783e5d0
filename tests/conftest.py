"""
Shared test fixtures for gridengine tests.

Provides engines in a few common states plus a listener that records every
change record it receives.
"""

import pytest
from typing import List

from gridengine import ChangeRecord, GridEngine


class RecordingListener:
    """Collects change records delivered to it."""

    def __init__(self):
        self.records: List[ChangeRecord] = []

    def __call__(self, record: ChangeRecord):
        self.records.append(record)

    @property
    def last(self) -> ChangeRecord:
        return self.records[-1]


@pytest.fixture
def engine() -> GridEngine:
    """An empty 10 wide, 12 high grid."""
    return GridEngine(10, 12)


@pytest.fixture
def recorder(engine, make_recorder) -> RecordingListener:
    """A listener registered on the engine fixture."""
    return make_recorder(engine)


@pytest.fixture
def side_by_side(engine) -> GridEngine:
    """box1 at (0, 0) and box2 at (2, 0), both 2x2."""
    engine.add_item("box1", 0, 0, 2, 2)
    engine.add_item("box2", 2, 0, 2, 2)
    return engine


@pytest.fixture
def stacked(engine) -> GridEngine:
    """a at (0, 0) and b directly below at (0, 2), both 2x2."""
    engine.add_item("a", 0, 0, 2, 2)
    engine.add_item("b", 0, 2, 2, 2)
    return engine


@pytest.fixture
def capped_engine() -> GridEngine:
    """A 2 wide grid that may not grow past 4 rows, holding two 2x2 items."""
    engine = GridEngine(2, 4, max_height=4)
    engine.add_item("a", 0, 0, 2, 2)
    engine.add_item("b", 0, 2, 2, 2)
    return engine


@pytest.fixture
def make_recorder():
    """Factory attaching a fresh RecordingListener to an engine."""
    def _make(engine: GridEngine) -> RecordingListener:
        listener = RecordingListener()
        engine.events.add_changes_listener(listener)
        return listener
    return _make


def _geometry(engine: GridEngine):
    return {node.id: (node.x, node.y, node.w, node.h) for node in engine.get_nodes()}


def _assert_consistent(engine: GridEngine):
    view = engine.view()
    assert view.check_overlaps() == []
    assert view.check_cells() == []
    width, height = engine.bounds()
    for node in engine.get_nodes():
        assert 0 <= node.x and node.right <= width
        assert 0 <= node.y and node.bottom <= height


@pytest.fixture
def geometry():
    """Function mapping an engine to {id: (x, y, w, h)} for every item."""
    return _geometry


@pytest.fixture
def assert_consistent():
    """Function checking no overlaps, cells match nodes, all inside the bounds."""
    return _assert_consistent
