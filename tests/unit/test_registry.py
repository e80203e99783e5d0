"""Tests for the node registry and nodes."""

import pytest

from gridengine.errors import DuplicateIdError, NotFoundError
from gridengine.grid import Node, NodeRegistry


@pytest.fixture
def registry():
    registry = NodeRegistry()
    registry.insert(Node("b", 0, 0, 2, 2))
    registry.insert(Node("a", 2, 0, 1, 1))
    return registry


class TestNode:
    """Tests for Node geometry helpers."""

    def test_node_creation(self):
        node = Node("test_node", 1, 2, 3, 4)

        assert node.id == "test_node"
        assert node.position == (1, 2)
        assert node.size == (3, 4)
        assert (node.right, node.bottom) == (4, 6)
        assert node.metadata == {}

    def test_cells_column_major(self):
        """Should visit all cells in the node's area, column by column."""
        node = Node("test_node", 1, 2, 2, 2)
        assert list(node.cells()) == [(1, 2), (1, 3), (2, 2), (2, 3)]

    def test_intersects(self):
        node = Node("a", 0, 0, 2, 2)

        assert node.intersects(Node("b", 1, 1, 2, 2))
        assert not node.intersects(Node("c", 2, 0, 2, 2))
        assert not node.intersects(Node("d", 0, 2, 2, 2))

    def test_copy_duplicates_metadata_mapping_only(self):
        tags = ["x"]
        node = Node("a", 0, 0, 1, 1, metadata={"tags": tags})
        clone = node.copy()
        clone.metadata["owner"] = "b"

        assert node.metadata == {"tags": ["x"]}
        assert clone.metadata["tags"] is tags

    def test_to_dict(self):
        assert Node("a", 1, 2, 3, 4).to_dict() == {"id": "a", "x": 1, "y": 2, "w": 3, "h": 4}


class TestNodeRegistry:
    """Tests for registry storage and lookup."""

    def test_insert_duplicate(self, registry):
        with pytest.raises(DuplicateIdError):
            registry.insert(Node("a", 5, 5, 1, 1))
        assert registry.get("a").position == (2, 0)

    def test_get_missing(self, registry):
        with pytest.raises(NotFoundError):
            registry.get("missing")

    def test_remove(self, registry):
        removed = registry.remove("a")

        assert removed.id == "a"
        assert "a" not in registry
        with pytest.raises(NotFoundError):
            registry.remove("a")

    def test_update_geometry_partial(self, registry):
        registry.update_geometry("b", y=4, h=3)
        assert registry.get("b") == Node("b", 0, 4, 2, 3)

    def test_update_geometry_missing(self, registry):
        with pytest.raises(NotFoundError):
            registry.update_geometry("missing", x=1)

    def test_iteration_orders(self, registry):
        assert list(registry) == ["b", "a"]
        assert [n.id for n in registry.nodes()] == ["b", "a"]
        assert [n.id for n in registry.sorted_nodes()] == ["a", "b"]
        assert len(registry) == 2

    def test_copy_is_independent(self, registry):
        clone = registry.copy()
        clone.update_geometry("a", x=9)
        assert registry.get("a").x == 2
