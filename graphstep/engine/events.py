"""
Step events and final results emitted by the traversal engines.

Every mapping and set inside an event is an immutable copy taken at the
moment the event was produced, so observers can keep or render them without
touching in-flight algorithm state.
"""

from __future__ import annotations

import math
from collections.abc import Mapping
from dataclasses import dataclass
from enum import Enum
from typing import Any, ClassVar


class RunStatus(str, Enum):
    """How a traversal run ended."""

    COMPLETED = "completed"
    CANCELLED = "cancelled"


def _finite_or_none(value: float) -> float | None:
    return None if math.isinf(value) else value


def distance_to_json(distance: Mapping[int, float]) -> dict[str, float | None]:
    """JSON-safe copy of a distance map (infinity becomes None)."""
    return {str(k): _finite_or_none(v) for k, v in distance.items()}


@dataclass(frozen=True)
class MstEdge:
    """An edge chosen for the minimum spanning tree."""

    a: int
    b: int
    weight: float

    def to_dict(self) -> dict[str, Any]:
        return {"a": self.a, "b": self.b, "weight": self.weight}


# =============================================================================
# Step Events
# =============================================================================

@dataclass(frozen=True)
class VisitEvent:
    """
    Dijkstra settled a node.

    Attributes:
        node: Id of the node just settled
        distance: Snapshot of tentative distances
        visited: Snapshot of settled node ids
        line: Pseudocode line being executed
        explanation: Narration of the step
    """

    kind: ClassVar[str] = "visit"

    node: int
    distance: Mapping[int, float]
    visited: frozenset[int]
    line: int = 4
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "node": self.node,
            "distance": distance_to_json(self.distance),
            "visited": sorted(self.visited),
            "line": self.line,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class RelaxEvent:
    """
    Dijkstra found a strictly shorter path to target through source.

    Attributes:
        source: Settled node the improvement goes through
        target: Node whose distance improved
        distance: Snapshot of tentative distances (after the update)
        visited: Snapshot of settled node ids
        line: Pseudocode line being executed
        explanation: Narration of the step
    """

    kind: ClassVar[str] = "relax"

    source: int
    target: int
    distance: Mapping[int, float]
    visited: frozenset[int]
    line: int = 8
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "source": self.source,
            "target": self.target,
            "distance": distance_to_json(self.distance),
            "visited": sorted(self.visited),
            "line": self.line,
            "explanation": self.explanation,
        }


@dataclass(frozen=True)
class TreeEvent:
    """
    Prim grew the tree.

    The first event of a run has edge=None and marks the start node only.

    Attributes:
        edge: Edge just added, or None for the start node
        tree_edges: All tree edges so far, in the order they were added
        total_cost: Sum of tree edge weights so far
        visited: Snapshot of nodes in the tree
        line: Pseudocode line being executed
        explanation: Narration of the step
    """

    kind: ClassVar[str] = "tree"

    edge: MstEdge | None
    tree_edges: tuple[MstEdge, ...]
    total_cost: float
    visited: frozenset[int]
    line: int = 5
    explanation: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {
            "kind": self.kind,
            "edge": self.edge.to_dict() if self.edge else None,
            "tree_edges": [e.to_dict() for e in self.tree_edges],
            "total_cost": self.total_cost,
            "visited": sorted(self.visited),
            "line": self.line,
            "explanation": self.explanation,
        }


TraversalEvent = VisitEvent | RelaxEvent | TreeEvent


# =============================================================================
# Results
# =============================================================================

@dataclass(frozen=True)
class DijkstraResult:
    """
    Final output of a Dijkstra run.

    Attributes:
        start: Start node id
        end: End node id, or None when all distances were computed
        distance: Final distances (infinity for unreached nodes)
        predecessor: Parent of each node on its shortest path (None for
            the start and for unreached nodes)
        path: Node ids from start to end, empty if end was not reached
            or not given
        visited: Nodes settled before the run stopped
        status: Whether the run completed or was cancelled
    """

    start: int
    end: int | None
    distance: Mapping[int, float]
    predecessor: Mapping[int, int | None]
    path: tuple[int, ...]
    visited: frozenset[int] = frozenset()
    status: RunStatus = RunStatus.COMPLETED

    @property
    def cost(self) -> float:
        """Distance to the end node (infinity if unreached or no end)."""
        if self.end is None:
            return math.inf
        return self.distance.get(self.end, math.inf)

    @property
    def reachable(self) -> bool:
        return bool(self.path)

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": "dijkstra",
            "start": self.start,
            "end": self.end,
            "distance": distance_to_json(self.distance),
            "predecessor": {str(k): v for k, v in self.predecessor.items()},
            "path": list(self.path),
            "visited": sorted(self.visited),
            "cost": _finite_or_none(self.cost),
            "status": self.status.value,
        }


@dataclass(frozen=True)
class PrimResult:
    """
    Final output of a Prim run.

    Attributes:
        start: Node the tree was grown from
        tree_edges: Tree edges in the order they were added
        total_cost: Sum of tree edge weights
        visited: Nodes covered by the tree
        node_count: Number of nodes in the graph at run time
        status: Whether the run completed or was cancelled
    """

    start: int
    tree_edges: tuple[MstEdge, ...]
    total_cost: float
    visited: frozenset[int]
    node_count: int
    status: RunStatus = RunStatus.COMPLETED

    @property
    def spanning(self) -> bool:
        """True when the tree reaches every node (graph was connected)."""
        return len(self.visited) == self.node_count

    @property
    def cancelled(self) -> bool:
        return self.status is RunStatus.CANCELLED

    def to_dict(self) -> dict[str, Any]:
        return {
            "algorithm": "prim",
            "start": self.start,
            "tree_edges": [e.to_dict() for e in self.tree_edges],
            "total_cost": self.total_cost,
            "visited": sorted(self.visited),
            "spanning": self.spanning,
            "status": self.status.value,
        }
