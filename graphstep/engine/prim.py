"""
Stepable Prim minimum spanning tree.

Each iteration scans the whole edge list, in insertion order, for the
lightest edge with exactly one endpoint in the tree. Only a strictly lighter
edge replaces the current pick, so among equal weights the edge inserted
first wins. On a disconnected graph the tree covers only the start node's
component; that is a normal result, not an error.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from graphstep.engine.events import MstEdge, PrimResult, RunStatus, TreeEvent
from graphstep.engine.state import PrimState
from graphstep.errors import EmptyGraphError, InvalidStartError
from graphstep.graph.model import Edge, Graph

logger = logging.getLogger(__name__)

PSEUDOCODE = (
    "visited <- {start}",
    "while some node is not visited:",
    "    e <- lightest edge with exactly one visited endpoint",
    "    if there is no such edge: stop",
    "    add e to the tree; total += w(e)",
    "    mark both endpoints of e visited",
)

LINE_START = 1
LINE_ADD = 5


class PrimSearch:
    """
    Prim's algorithm over a Graph, one tree edge per step.

    Usage:
        search = PrimSearch(graph, start=0)
        for event in search.steps():
            ...
        search.result.total_cost
    """

    def __init__(self, graph: Graph, start: int) -> None:
        """
        Raises:
            EmptyGraphError: If the graph has no nodes
            InvalidStartError: If start is not in the graph
        """
        if graph.node_count == 0:
            raise EmptyGraphError("Graph has no nodes")
        if not graph.has_node(start):
            raise InvalidStartError(start)

        self._graph = graph
        self.start = start
        self._state: PrimState | None = None
        self._result: PrimResult | None = None

    @property
    def result(self) -> PrimResult | None:
        """Final result, or None while the run is still in progress."""
        return self._result

    def steps(self) -> Iterator[TreeEvent]:
        """Grow the tree, yielding the start event and then one event per edge."""
        graph = self._graph
        node_ids = set(graph.node_ids())
        edges = [e for e in graph.edges() if e.a in node_ids and e.b in node_ids]
        state = PrimState()
        self._state = state
        self._result = None

        state.visited.add(self.start)
        yield TreeEvent(
            edge=None,
            tree_edges=state.snapshot_edges(),
            total_cost=state.total_cost,
            visited=state.snapshot_visited(),
            line=LINE_START,
            explanation=f"Starting MST from node {graph.label_for(self.start)}.",
        )

        while len(state.visited) < len(node_ids):
            best = _lightest_crossing_edge(edges, state.visited)
            if best is None:
                logger.info(
                    f"Prim stopped with {len(state.visited)}/{len(node_ids)} nodes: "
                    "graph is disconnected"
                )
                break

            chosen = MstEdge(a=best.a, b=best.b, weight=best.weight)
            state.add(chosen)
            yield TreeEvent(
                edge=chosen,
                tree_edges=state.snapshot_edges(),
                total_cost=state.total_cost,
                visited=state.snapshot_visited(),
                line=LINE_ADD,
                explanation=(
                    f"Adding edge ({graph.label_for(chosen.a)}, {graph.label_for(chosen.b)}) "
                    f"with weight {chosen.weight:g} to MST."
                ),
            )

        self._result = self.snapshot(RunStatus.COMPLETED)

    def snapshot(self, status: RunStatus) -> PrimResult:
        """Result built from the current run state."""
        state = self._state or PrimState(visited={self.start})
        return PrimResult(
            start=self.start,
            tree_edges=state.snapshot_edges(),
            total_cost=state.total_cost,
            visited=state.snapshot_visited(),
            node_count=self._graph.node_count,
            status=status,
        )

    def run(self) -> PrimResult:
        """Run to completion without pausing and return the result."""
        for _ in self.steps():
            pass
        return self._result


def _lightest_crossing_edge(edges: list[Edge], visited: set[int]) -> Edge | None:
    """First minimum-weight edge with exactly one endpoint in visited."""
    best: Edge | None = None
    for edge in edges:
        if (edge.a in visited) != (edge.b in visited):
            if best is None or edge.weight < best.weight:
                best = edge
    return best
