"""Canonical storage for placed nodes, keyed by id."""

from typing import Dict, Iterator, List, Optional

from ..errors import DuplicateIdError, NotFoundError
from .node import Node


class NodeRegistry:
    """
    Owns every live Node.

    Pure storage and lookup: geometry legality is the resolver's job.
    Iteration follows insertion order.
    """

    def __init__(self):
        self._nodes: Dict[str, Node] = {}

    def insert(self, node: Node):
        if node.id in self._nodes:
            raise DuplicateIdError(node.id)
        self._nodes[node.id] = node

    def remove(self, node_id: str) -> Node:
        try:
            return self._nodes.pop(node_id)
        except KeyError:
            raise NotFoundError(node_id) from None

    def get(self, node_id: str) -> Node:
        node = self._nodes.get(node_id)
        if node is None:
            raise NotFoundError(node_id)
        return node

    def update_geometry(self, node_id: str, x: Optional[int] = None,
                        y: Optional[int] = None, w: Optional[int] = None,
                        h: Optional[int] = None) -> Node:
        """Update position and/or size in place. Omitted fields are kept."""
        node = self.get(node_id)
        if x is not None:
            node.x = x
        if y is not None:
            node.y = y
        if w is not None:
            node.w = w
        if h is not None:
            node.h = h
        return node

    def nodes(self) -> List[Node]:
        return list(self._nodes.values())

    def sorted_nodes(self) -> List[Node]:
        """Nodes ordered by id."""
        return sorted(self._nodes.values(), key=lambda n: n.id)

    def copy(self) -> "NodeRegistry":
        clone = NodeRegistry()
        clone._nodes = {node_id: node.copy() for node_id, node in self._nodes.items()}
        return clone

    def __contains__(self, node_id) -> bool:
        return node_id in self._nodes

    def __len__(self) -> int:
        return len(self._nodes)

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._nodes))
