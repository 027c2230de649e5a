"""
Graph model: a mutable, undirected, weighted graph with no algorithm knowledge.

Nodes carry display annotations (distance, visited flag, state) that only the
embedding layer writes, through apply_annotations(). Traversal engines read
the node and edge lists and never mutate them.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from graphstep.errors import GraphFormatError, InvalidWeightError, UnknownNodeError

logger = logging.getLogger(__name__)


class NodeState(str, Enum):
    """Display classification of a node."""

    DEFAULT = "default"
    START = "start"
    END = "end"
    PROCESSING = "processing"
    VISITED = "visited"
    PATH = "path"
    MST_VISITED = "mst-visited"


@dataclass
class Node:
    """
    A graph node.

    Attributes:
        id: Unique integer id (assigned in increasing order)
        label: Display label, defaults to the stringified id
        x: Horizontal editor position
        y: Vertical editor position
        distance: Last displayed tentative distance
        visited: Last displayed settled flag
        degree: Number of incident edges
        state: Display classification
    """

    id: int
    label: str = ""
    x: float = 0.0
    y: float = 0.0
    distance: float = math.inf
    visited: bool = False
    degree: int = 0
    state: NodeState = NodeState.DEFAULT

    def __post_init__(self) -> None:
        if not self.label:
            self.label = str(self.id)


@dataclass
class Edge:
    """
    An undirected weighted edge between nodes a and b.

    Attributes:
        a: First endpoint id
        b: Second endpoint id
        weight: Non-negative edge weight
        highlight: Transient display highlight
        in_mst: Display flag for edges picked by Prim
    """

    a: int
    b: int
    weight: float
    highlight: bool = field(default=False, compare=False)
    in_mst: bool = field(default=False, compare=False)

    def connects(self, u: int, v: int) -> bool:
        """Whether this edge joins u and v (in either order)."""
        return (self.a == u and self.b == v) or (self.a == v and self.b == u)

    def other(self, u: int) -> int:
        """Endpoint opposite to u."""
        if u == self.a:
            return self.b
        if u == self.b:
            return self.a
        raise ValueError(f"Node {u} is not an endpoint of edge {self.a}-{self.b}")


def _check_weight(weight: Any) -> float:
    try:
        value = float(weight)
    except (TypeError, ValueError) as e:
        raise InvalidWeightError(f"Edge weight must be a number, got {weight!r}") from e
    if math.isnan(value) or math.isinf(value) or value < 0:
        raise InvalidWeightError(f"Edge weight must be finite and non-negative, got {weight!r}")
    return value


def parse_node_id(value: Any) -> int:
    """
    Node id from plain data. Integral floats such as 2.0 are accepted.

    Raises:
        GraphFormatError: If value is not an integer (bools and 1.5 included)
    """
    if isinstance(value, bool):
        raise GraphFormatError(f"Node id must be an integer, got {value!r}")
    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    raise GraphFormatError(f"Node id must be an integer, got {value!r}")


class Graph:
    """
    Undirected weighted graph with at most one edge per node pair.

    Node and edge order is insertion order. Prim's tie-break depends on it,
    so it is preserved through copies and graph files.
    """

    def __init__(self) -> None:
        self._nodes: list[Node] = []
        self._by_id: dict[int, Node] = {}
        self._edges: list[Edge] = []
        self._next_id = 0
        self.start_id: int | None = None
        self.end_id: int | None = None

    # =========================================================================
    # Nodes
    # =========================================================================

    def add_node(self, x: float = 0.0, y: float = 0.0, label: str | None = None) -> int:
        """
        Add a node and return its id.

        Args:
            x: Horizontal editor position
            y: Vertical editor position
            label: Display label (defaults to the id)

        Returns:
            The newly assigned node id
        """
        node_id = self._next_id
        self._next_id += 1
        node = Node(id=node_id, label=label or str(node_id), x=float(x), y=float(y))
        self._nodes.append(node)
        self._by_id[node_id] = node
        logger.debug(f"Added node {node_id} ({node.label})")
        return node_id

    def nodes(self) -> tuple[Node, ...]:
        return tuple(self._nodes)

    def node_ids(self) -> list[int]:
        return [n.id for n in self._nodes]

    def find_node(self, node_id: int) -> Node | None:
        return self._by_id.get(node_id)

    def has_node(self, node_id: int) -> bool:
        return node_id in self._by_id

    def label_for(self, node_id: int) -> str:
        """Display label for a node, or the stringified id if unknown."""
        node = self._by_id.get(node_id)
        return node.label if node else str(node_id)

    @property
    def node_count(self) -> int:
        return len(self._nodes)

    def _require(self, node_id: int) -> Node:
        node = self._by_id.get(node_id)
        if node is None:
            raise UnknownNodeError(node_id)
        return node

    # =========================================================================
    # Edges
    # =========================================================================

    def add_edge(self, a: int, b: int, weight: float) -> Edge | None:
        """
        Add an undirected edge.

        Self loops and duplicates of an existing pair are silently rejected
        (the existing edge is kept as-is, weights are never merged).

        Returns:
            The new Edge, or None if the edge was rejected

        Raises:
            UnknownNodeError: If either endpoint does not exist
            InvalidWeightError: If weight is negative, NaN, or infinite
        """
        value = _check_weight(weight)
        node_a = self._require(a)
        node_b = self._require(b)

        if a == b:
            logger.debug(f"Rejected self loop on node {a}")
            return None
        if self.find_edge(a, b) is not None:
            logger.debug(f"Rejected duplicate edge {a}-{b}")
            return None

        edge = Edge(a=a, b=b, weight=value)
        self._edges.append(edge)
        node_a.degree += 1
        node_b.degree += 1
        logger.debug(f"Added edge {a}-{b} (w={value:g})")
        return edge

    def edges(self) -> tuple[Edge, ...]:
        return tuple(self._edges)

    def find_edge(self, a: int, b: int) -> Edge | None:
        for edge in self._edges:
            if edge.connects(a, b):
                return edge
        return None

    @property
    def edge_count(self) -> int:
        return len(self._edges)

    def degree_table(self) -> list[tuple[str, int]]:
        """(label, degree) for every node in insertion order."""
        return [(n.label, n.degree) for n in self._nodes]

    # =========================================================================
    # Selection
    # =========================================================================

    def set_start(self, node_id: int | None) -> None:
        """Select the start node (None clears the selection)."""
        if node_id is not None:
            self._require(node_id)
        self.start_id = node_id
        self._refresh_selection_states()

    def set_end(self, node_id: int | None) -> None:
        """Select the end node (None clears the selection)."""
        if node_id is not None:
            self._require(node_id)
        self.end_id = node_id
        self._refresh_selection_states()

    def _refresh_selection_states(self) -> None:
        for node in self._nodes:
            if node.id == self.start_id:
                node.state = NodeState.START
            elif node.id == self.end_id:
                node.state = NodeState.END
            elif node.state in (NodeState.START, NodeState.END):
                node.state = NodeState.DEFAULT

    # =========================================================================
    # Annotations
    # =========================================================================

    def clear(self) -> None:
        """Remove all nodes and edges and restart id assignment."""
        self._nodes = []
        self._by_id = {}
        self._edges = []
        self._next_id = 0
        self.start_id = None
        self.end_id = None
        logger.debug("Graph cleared")

    def reset_states(self) -> None:
        """Drop all run annotations, keeping the start/end selection."""
        for node in self._nodes:
            node.distance = math.inf
            node.visited = False
            node.state = NodeState.DEFAULT
        for edge in self._edges:
            edge.highlight = False
            edge.in_mst = False
        self._refresh_selection_states()

    def apply_annotations(
        self,
        distance: Mapping[int, float] | None = None,
        visited: Iterable[int] | None = None,
        states: Mapping[int, NodeState] | None = None,
        highlight_edges: Iterable[tuple[int, int]] | None = None,
        mst_edges: Iterable[tuple[int, int]] | None = None,
    ) -> None:
        """
        Mirror a traversal snapshot onto nodes and edges for display.

        Ids that are not in the graph are ignored. Arguments left as None
        leave the corresponding annotation untouched.
        """
        if distance is not None:
            for node in self._nodes:
                node.distance = distance.get(node.id, math.inf)
        if visited is not None:
            visited_ids = set(visited)
            for node in self._nodes:
                node.visited = node.id in visited_ids
        if states is not None:
            for node_id, state in states.items():
                node = self._by_id.get(node_id)
                if node is not None:
                    node.state = NodeState(state)
        if highlight_edges is not None:
            pairs = list(highlight_edges)
            for edge in self._edges:
                edge.highlight = any(edge.connects(u, v) for u, v in pairs)
        if mst_edges is not None:
            pairs = list(mst_edges)
            for edge in self._edges:
                edge.in_mst = any(edge.connects(u, v) for u, v in pairs)

    # =========================================================================
    # Serialization
    # =========================================================================

    def to_dict(self) -> dict[str, Any]:
        """Plain-data form of the graph structure (no run annotations)."""
        return {
            "nodes": [
                {"id": n.id, "label": n.label, "x": n.x, "y": n.y}
                for n in self._nodes
            ],
            "edges": [
                {"a": e.a, "b": e.b, "weight": e.weight}
                for e in self._edges
            ],
            "start": self.start_id,
            "end": self.end_id,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> Graph:
        """
        Build a graph from to_dict() output.

        Node ids are preserved; the id counter continues after the largest id.
        Non-integral ids raise GraphFormatError. Duplicate node ids and edges
        to unknown nodes raise the same errors add_node/add_edge would.
        """
        graph = cls()
        for raw in data.get("nodes", []):
            node_id = parse_node_id(raw["id"])
            if node_id in graph._by_id:
                raise ValueError(f"Duplicate node id {node_id}")
            node = Node(
                id=node_id,
                label=str(raw.get("label") or node_id),
                x=float(raw.get("x", 0.0)),
                y=float(raw.get("y", 0.0)),
            )
            graph._nodes.append(node)
            graph._by_id[node_id] = node
            graph._next_id = max(graph._next_id, node_id + 1)

        for raw in data.get("edges", []):
            graph.add_edge(parse_node_id(raw["a"]), parse_node_id(raw["b"]), raw["weight"])

        if data.get("start") is not None:
            graph.set_start(parse_node_id(data["start"]))
        if data.get("end") is not None:
            graph.set_end(parse_node_id(data["end"]))
        return graph

    def __repr__(self) -> str:
        return f"Graph(nodes={self.node_count}, edges={self.edge_count})"
