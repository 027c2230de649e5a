"""
Traversal runner: drives a stepable search and reports it through callbacks.

The runner pulls events from DijkstraSearch / PrimSearch, hands each one to
the caller's callbacks, and then suspends on the StepController before
asking for the next event. It is the only place where pacing, manual
stepping and cancellation meet the algorithms.

Event order is the order the algorithm produces: a visit always precedes
the relaxations out of that node, and on_finish (or on_cancel) is always
the last callback of a run.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable, Iterator, Mapping
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any

from graphstep.config import PRIM_PACING_MS, relax_pacing
from graphstep.engine.controller import StepController
from graphstep.engine.dijkstra import DijkstraSearch
from graphstep.engine.events import (
    DijkstraResult,
    PrimResult,
    RelaxEvent,
    RunStatus,
    TraversalEvent,
    TreeEvent,
    VisitEvent,
)
from graphstep.engine.prim import PrimSearch
from graphstep.errors import TraversalBusyError, TraversalCancelled
from graphstep.graph.model import Graph, NodeState

logger = logging.getLogger(__name__)


@dataclass
class TraversalCallbacks:
    """
    Observer hooks for a run. Every hook is optional.

    Attributes:
        on_visit: (node, distance, visited) - Dijkstra settled a node
        on_update: Dijkstra: (source, target, distance, visited) after a
            relaxation; Prim: (event) after the tree grew
        on_finish: Dijkstra: (distance, predecessor, path);
            Prim: (tree_edges, total_cost)
        on_cancel: (result) - run was cancelled; replaces on_finish
        on_event: (event) - every step event, before the specific hook
    """

    on_visit: Callable[[int, Mapping[int, float], frozenset[int]], Any] | None = None
    on_update: Callable[..., Any] | None = None
    on_finish: Callable[..., Any] | None = None
    on_cancel: Callable[[DijkstraResult | PrimResult], Any] | None = None
    on_event: Callable[[TraversalEvent], Any] | None = None


class TraversalRunner:
    """
    Runs traversals over one Graph, one at a time.

    Without a controller runs are free-running (no suspension at all).
    The owner of the controller resets it (StepController.reset) before
    starting a new run, so an advance or cancel sent while the run thread
    is still starting up is not lost.
    With annotate=True the runner mirrors each step onto the graph's display
    annotations (node state / distance / visited, edge highlights) through
    Graph.apply_annotations; the searches themselves never write to the
    graph.
    """

    def __init__(
        self,
        graph: Graph,
        controller: StepController | None = None,
        annotate: bool = True,
    ) -> None:
        self.graph = graph
        self.controller = controller
        self._annotate = annotate
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._lock.locked()

    # =========================================================================
    # Dijkstra
    # =========================================================================

    def run_dijkstra(
        self,
        start: int,
        end: int | None = None,
        pacing_ms: float | None = None,
        callbacks: TraversalCallbacks | None = None,
    ) -> DijkstraResult:
        """
        Run Dijkstra from start, optionally stopping once end is settled.

        Args:
            start: Start node id
            end: Optional target node id
            pacing_ms: Auto-mode delay after each visit (relaxations use a
                shorter delay); None uses the controller's pacing
            callbacks: Observer hooks

        Returns:
            DijkstraResult (status is CANCELLED if the run was cancelled)

        Raises:
            TraversalBusyError: If another run is in progress
            EmptyGraphError / InvalidStartError / InvalidEndError: Before
                any callback fires
        """
        callbacks = callbacks or TraversalCallbacks()
        with self._exclusive():
            search = DijkstraSearch(self.graph, start, end)
            logger.info(
                f"Running Dijkstra: {self.graph.label_for(start)} -> "
                f"{self.graph.label_for(end) if end is not None else '*'}"
            )
            self._begin()

            def dispatch(event: VisitEvent | RelaxEvent) -> None:
                if callbacks.on_event:
                    callbacks.on_event(event)
                if isinstance(event, VisitEvent):
                    if self._annotate:
                        self._annotate_visit(event)
                    if callbacks.on_visit:
                        callbacks.on_visit(event.node, event.distance, event.visited)
                    self._suspend(pacing_ms, relaxation=False)
                else:
                    if self._annotate:
                        self._annotate_relax(event)
                    if callbacks.on_update:
                        callbacks.on_update(event.source, event.target, event.distance, event.visited)
                    self._suspend(pacing_ms, relaxation=True)

            started = time.monotonic()
            status = self._drive(search.steps(), dispatch)
            result = search.result if status is RunStatus.COMPLETED else search.snapshot(status)

            if self._annotate:
                self._annotate_dijkstra_result(result)
            self._finish(
                result,
                callbacks,
                lambda: callbacks.on_finish(result.distance, result.predecessor, list(result.path)),
                started,
            )
            return result

    # =========================================================================
    # Prim
    # =========================================================================

    def run_prim(
        self,
        start: int,
        pacing_ms: float | None = PRIM_PACING_MS,
        callbacks: TraversalCallbacks | None = None,
    ) -> PrimResult:
        """
        Grow a minimum spanning tree from start.

        Args:
            start: Node to grow the tree from
            pacing_ms: Auto-mode delay after each tree event (None uses the
                controller's pacing)
            callbacks: Observer hooks (on_update receives the TreeEvent)

        Returns:
            PrimResult (a spanning forest fragment on disconnected graphs)

        Raises:
            TraversalBusyError: If another run is in progress
            EmptyGraphError / InvalidStartError: Before any callback fires
        """
        callbacks = callbacks or TraversalCallbacks()
        with self._exclusive():
            search = PrimSearch(self.graph, start)
            logger.info(f"Running Prim from {self.graph.label_for(start)}")
            self._begin()

            def dispatch(event: TreeEvent) -> None:
                if callbacks.on_event:
                    callbacks.on_event(event)
                if self._annotate:
                    self._annotate_tree(event)
                if callbacks.on_update:
                    callbacks.on_update(event)
                self._suspend(pacing_ms, relaxation=False)

            started = time.monotonic()
            status = self._drive(search.steps(), dispatch)
            result = search.result if status is RunStatus.COMPLETED else search.snapshot(status)

            if not result.spanning and not result.cancelled:
                logger.info(
                    f"Spanning forest fragment: {len(result.tree_edges)} edges for "
                    f"{result.node_count} nodes"
                )
            self._finish(
                result,
                callbacks,
                lambda: callbacks.on_finish(list(result.tree_edges), result.total_cost),
                started,
            )
            return result

    # =========================================================================
    # Run Plumbing
    # =========================================================================

    @contextmanager
    def _exclusive(self) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise TraversalBusyError("A traversal is already running on this graph")
        try:
            yield
        finally:
            self._lock.release()

    def _begin(self) -> None:
        if self._annotate:
            self.graph.reset_states()

    def _drive(self, steps: Iterator[Any], dispatch: Callable[[Any], None]) -> RunStatus:
        """Feed every event to dispatch; a cancellation ends the run early."""
        try:
            for event in steps:
                if self.controller is not None:
                    self.controller.begin_step()
                dispatch(event)
        except TraversalCancelled:
            return RunStatus.CANCELLED
        finally:
            steps.close()
        return RunStatus.COMPLETED

    def _suspend(self, pacing_ms: float | None, relaxation: bool) -> None:
        controller = self.controller
        if controller is None:
            return
        delay = controller.pacing_ms if pacing_ms is None else pacing_ms
        if relaxation:
            delay = relax_pacing(int(delay))
        controller.wait(delay)

    def _finish(
        self,
        result: DijkstraResult | PrimResult,
        callbacks: TraversalCallbacks,
        notify_finish: Callable[[], Any],
        started: float,
    ) -> None:
        elapsed_ms = (time.monotonic() - started) * 1000
        if result.cancelled:
            logger.info(f"Traversal cancelled after {elapsed_ms:.0f}ms")
            if callbacks.on_cancel:
                callbacks.on_cancel(result)
            return

        logger.info(f"Traversal finished in {elapsed_ms:.0f}ms")
        if callbacks.on_finish:
            notify_finish()

    # =========================================================================
    # Display Annotations
    # =========================================================================

    def _selection_states(self) -> dict[int, NodeState]:
        states = {}
        if self.graph.start_id is not None:
            states[self.graph.start_id] = NodeState.START
        if self.graph.end_id is not None:
            states[self.graph.end_id] = NodeState.END
        return states

    def _annotate_visit(self, event: VisitEvent) -> None:
        states = {
            node_id: NodeState.VISITED for node_id in event.visited if node_id != event.node
        }
        states[event.node] = NodeState.PROCESSING
        states.update(self._selection_states())
        self.graph.apply_annotations(
            distance=event.distance,
            visited=event.visited,
            states=states,
            highlight_edges=(),
        )

    def _annotate_relax(self, event: RelaxEvent) -> None:
        self.graph.apply_annotations(
            distance=event.distance,
            visited=event.visited,
            highlight_edges=[(event.source, event.target)],
        )

    def _annotate_dijkstra_result(self, result: DijkstraResult) -> None:
        states = {node_id: NodeState.VISITED for node_id in result.visited}
        states.update(self._selection_states())
        states.update({node_id: NodeState.PATH for node_id in result.path})
        self.graph.apply_annotations(
            distance=result.distance,
            visited=result.visited,
            states=states,
            highlight_edges=list(zip(result.path, result.path[1:])),
        )

    def _annotate_tree(self, event: TreeEvent) -> None:
        self.graph.apply_annotations(
            visited=event.visited,
            states={node_id: NodeState.MST_VISITED for node_id in event.visited},
            mst_edges=[(e.a, e.b) for e in event.tree_edges],
            highlight_edges=[(event.edge.a, event.edge.b)] if event.edge else (),
        )

