"""
Algorithm-local run state.

A fresh state object is built for every run and thrown away when it ends.
Nothing here is shared with the Graph model.
"""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable
from dataclasses import dataclass, field
from types import MappingProxyType

from graphstep.engine.events import MstEdge
from graphstep.engine.heap import MinHeap
from graphstep.graph.model import Edge

logger = logging.getLogger(__name__)

# node id -> [(neighbor id, weight), ...]
Adjacency = dict[int, list[tuple[int, float]]]


def build_adjacency(node_ids: Iterable[int], edges: Iterable[Edge]) -> Adjacency:
    """
    Derive the undirected adjacency view for one run.

    Each edge contributes an entry in both directions. Edges that reference
    a node outside node_ids are skipped.
    """
    adjacency: Adjacency = {node_id: [] for node_id in node_ids}
    for edge in edges:
        if edge.a not in adjacency or edge.b not in adjacency:
            logger.debug(f"Skipping dangling edge {edge.a}-{edge.b}")
            continue
        adjacency[edge.a].append((edge.b, edge.weight))
        adjacency[edge.b].append((edge.a, edge.weight))
    return adjacency


@dataclass
class DijkstraState:
    """
    Working state of one Dijkstra run.

    Attributes:
        distance: Tentative distance per node (infinity until reached)
        predecessor: Parent on the best known path, None if none yet
        visited: Settled node ids
        frontier: Min-heap of (node id, tentative distance); may hold stale
            entries for already-settled nodes
    """

    distance: dict[int, float]
    predecessor: dict[int, int | None]
    visited: set[int] = field(default_factory=set)
    frontier: MinHeap[int] = field(default_factory=MinHeap)

    @classmethod
    def fresh(cls, node_ids: Iterable[int], start: int) -> DijkstraState:
        ids = list(node_ids)
        state = cls(
            distance={node_id: math.inf for node_id in ids},
            predecessor={node_id: None for node_id in ids},
        )
        state.distance[start] = 0.0
        state.frontier.push(start, 0.0)
        return state

    def snapshot_distance(self) -> MappingProxyType[int, float]:
        """Read-only copy of the distance map."""
        return MappingProxyType(dict(self.distance))

    def snapshot_predecessor(self) -> MappingProxyType[int, int | None]:
        return MappingProxyType(dict(self.predecessor))

    def snapshot_visited(self) -> frozenset[int]:
        return frozenset(self.visited)

    def reconstruct_path(self, start: int, end: int | None) -> tuple[int, ...]:
        """
        Walk predecessors back from end to start.

        Returns:
            Node ids from start to end, or () if end is None or not settled
        """
        if end is None or end not in self.visited:
            return ()

        path = []
        current: int | None = end
        seen: set[int] = set()
        while current is not None and current not in seen:
            seen.add(current)
            path.append(current)
            current = self.predecessor.get(current)
        path.reverse()

        if path[0] != start:
            return ()
        return tuple(path)


@dataclass
class PrimState:
    """
    Working state of one Prim run.

    Attributes:
        visited: Node ids inside the tree
        tree_edges: Chosen edges in the order they were added
        total_cost: Running sum of chosen edge weights
    """

    visited: set[int] = field(default_factory=set)
    tree_edges: list[MstEdge] = field(default_factory=list)
    total_cost: float = 0.0

    def add(self, edge: MstEdge) -> None:
        self.tree_edges.append(edge)
        self.total_cost += edge.weight
        self.visited.add(edge.a)
        self.visited.add(edge.b)

    def snapshot_edges(self) -> tuple[MstEdge, ...]:
        return tuple(self.tree_edges)

    def snapshot_visited(self) -> frozenset[int]:
        return frozenset(self.visited)
