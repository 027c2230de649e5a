"""
Stepable Dijkstra shortest-path search.

DijkstraSearch.steps() is a generator: it yields a VisitEvent each time a
node is settled and a RelaxEvent each time a tentative distance strictly
improves, and does nothing further until the consumer asks for the next
event. Pacing, manual stepping, and cancellation all live in the consumer
(see engine.runner); the search itself is pure and never touches the graph.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator

from graphstep.engine.events import DijkstraResult, RelaxEvent, RunStatus, VisitEvent
from graphstep.engine.state import DijkstraState, build_adjacency
from graphstep.errors import EmptyGraphError, InvalidEndError, InvalidStartError
from graphstep.graph.model import Graph

logger = logging.getLogger(__name__)

# Pseudocode shown alongside the run; events reference these line numbers.
PSEUDOCODE = (
    "dist[v] <- inf for every node v",
    "dist[start] <- 0; push (start, 0)",
    "while the queue is not empty:",
    "    u <- pop min; skip u if already visited; mark u visited",
    "    for each unvisited neighbor v of u:",
    "        alt <- dist[u] + w(u, v)",
    "        if alt < dist[v]:",
    "            dist[v] <- alt; prev[v] <- u",
    "            push (v, alt)",
    "    if u = end: stop",
)

LINE_VISIT = 4
LINE_RELAX = 8


class DijkstraSearch:
    """
    Dijkstra over a Graph with a lazy-deletion min-heap.

    The heap may hold several entries for the same node; entries popped for
    an already-settled node are stale and are skipped. Relaxation uses a
    strict < comparison, so among equal-cost paths the first one discovered
    keeps its predecessor.

    Usage:
        search = DijkstraSearch(graph, start=0, end=3)
        for event in search.steps():
            ...
        search.result.path
    """

    def __init__(self, graph: Graph, start: int, end: int | None = None) -> None:
        """
        Validate inputs. No run state is created until steps() is iterated.

        Args:
            graph: Graph to search
            start: Start node id
            end: Optional target; None computes distances to every node

        Raises:
            EmptyGraphError: If the graph has no nodes
            InvalidStartError: If start is not in the graph
            InvalidEndError: If end is given but not in the graph
        """
        if graph.node_count == 0:
            raise EmptyGraphError("Graph has no nodes")
        if not graph.has_node(start):
            raise InvalidStartError(start)
        if end is not None and not graph.has_node(end):
            raise InvalidEndError(end)

        self._graph = graph
        self.start = start
        self.end = end
        self._state: DijkstraState | None = None
        self._result: DijkstraResult | None = None

    @property
    def result(self) -> DijkstraResult | None:
        """Final result, or None while the run is still in progress."""
        return self._result

    def steps(self) -> Iterator[VisitEvent | RelaxEvent]:
        """Run the search, yielding one event per observable step."""
        graph = self._graph
        node_ids = graph.node_ids()
        adjacency = build_adjacency(node_ids, graph.edges())
        state = DijkstraState.fresh(node_ids, self.start)
        self._state = state
        self._result = None

        logger.debug(
            f"Dijkstra from {self.start}"
            + (f" to {self.end}" if self.end is not None else " to all nodes")
        )

        while state.frontier:
            entry = state.frontier.pop()
            u = entry.item
            if u in state.visited:
                continue

            state.visited.add(u)
            yield VisitEvent(
                node=u,
                distance=state.snapshot_distance(),
                visited=state.snapshot_visited(),
                line=LINE_VISIT,
                explanation=(
                    f"Selecting {graph.label_for(u)}, the unvisited node with the "
                    f"smallest tentative distance ({state.distance[u]:g})."
                ),
            )

            for v, weight in adjacency[u]:
                if v in state.visited:
                    continue
                candidate = state.distance[u] + weight
                if candidate < state.distance[v]:
                    state.distance[v] = candidate
                    state.predecessor[v] = u
                    state.frontier.push(v, candidate)
                    yield RelaxEvent(
                        source=u,
                        target=v,
                        distance=state.snapshot_distance(),
                        visited=state.snapshot_visited(),
                        line=LINE_RELAX,
                        explanation=(
                            f"Found a shorter path to {graph.label_for(v)} via "
                            f"{graph.label_for(u)}: {candidate:g}."
                        ),
                    )

            if self.end is not None and u == self.end:
                break

        self._result = self.snapshot(RunStatus.COMPLETED)
        logger.debug(f"Dijkstra settled {len(state.visited)}/{len(node_ids)} nodes")

    def snapshot(self, status: RunStatus) -> DijkstraResult:
        """
        Result built from the current run state.

        Used for the final result and for runs cancelled part way through.
        """
        state = self._state
        if state is None:
            state = DijkstraState.fresh(self._graph.node_ids(), self.start)
        return DijkstraResult(
            start=self.start,
            end=self.end,
            distance=state.snapshot_distance(),
            predecessor=state.snapshot_predecessor(),
            path=state.reconstruct_path(self.start, self.end),
            visited=state.snapshot_visited(),
            status=status,
        )

    def run(self) -> DijkstraResult:
        """Run to completion without pausing and return the result."""
        for _ in self.steps():
            pass
        return self._result
