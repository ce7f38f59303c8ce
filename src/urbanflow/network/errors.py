"""Exception types raised on caller contract violations."""

from __future__ import annotations


class UrbanFlowError(Exception):
    """Base class for every error raised by the network model."""


class NodeIndexError(UrbanFlowError, IndexError):
    """A node handle lies outside the valid index space."""

    def __init__(self, node: object, num_nodes: int, where: str = "graph") -> None:
        super().__init__(f"Invalid node id {node!r} in {where} ({num_nodes} nodes)")
        self.node = node
        self.num_nodes = num_nodes


class EdgeIndexError(UrbanFlowError, IndexError):
    """An edge handle lies outside the valid index space."""

    def __init__(self, edge_id: object, num_edges: int) -> None:
        super().__init__(f"Invalid edge id {edge_id!r} (graph has {num_edges} edges)")
        self.edge_id = edge_id


class DuplicateIntersectionError(UrbanFlowError, ValueError):
    """An intersection with the same name is already registered."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Intersection with same name already exists: {name}")
        self.name = name


class IntersectionNotFoundError(UrbanFlowError, KeyError):
    """No intersection is registered under the given name."""

    def __init__(self, name: str) -> None:
        super().__init__(f"Intersection not found: {name}")
        self.name = name

    def __str__(self) -> str:
        return str(self.args[0])


__all__ = [
    "DuplicateIntersectionError",
    "EdgeIndexError",
    "IntersectionNotFoundError",
    "NodeIndexError",
    "UrbanFlowError",
]
