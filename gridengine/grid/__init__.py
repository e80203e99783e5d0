"""Spatial storage: nodes, the node registry and the occupancy grid."""

from .node import Node
from .registry import NodeRegistry
from .occupancy import OccupancyGrid

__all__ = [
    "Node",
    "NodeRegistry",
    "OccupancyGrid",
]
