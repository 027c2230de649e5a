"""
Exception hierarchy for graphstep.

Every error derives from GraphStepError and also from the builtin a caller
would naturally catch (KeyError for unknown ids, ValueError for bad input),
so both styles of handling work.

Unreachable targets and disconnected graphs are NOT errors - they come back
as ordinary results (infinite distance / empty path / partial tree).
"""

from __future__ import annotations


class GraphStepError(Exception):
    """Base class for all graphstep errors."""


# =============================================================================
# Graph Model
# =============================================================================

class GraphError(GraphStepError):
    """Invalid operation on the graph model."""


class UnknownNodeError(GraphError, KeyError):
    """A node id does not exist in the graph."""

    def __init__(self, node_id: int) -> None:
        super().__init__(node_id)
        self.node_id = node_id

    def __str__(self) -> str:
        return f"Unknown node id: {self.node_id}"


class InvalidWeightError(GraphError, ValueError):
    """Edge weight is negative, NaN, or infinite."""


class GraphFormatError(GraphError, ValueError):
    """A graph document could not be parsed."""


# =============================================================================
# Traversal
# =============================================================================

class TraversalError(GraphStepError):
    """A traversal could not be started."""


class EmptyGraphError(TraversalError, ValueError):
    """The graph has no nodes to traverse."""


class InvalidStartError(TraversalError, ValueError):
    """The start node id is not present in the graph."""

    def __init__(self, node_id: int) -> None:
        super().__init__(f"Start node {node_id!r} not in graph")
        self.node_id = node_id


class InvalidEndError(TraversalError, ValueError):
    """The end node id is not present in the graph."""

    def __init__(self, node_id: int) -> None:
        super().__init__(f"End node {node_id!r} not in graph")
        self.node_id = node_id


class TraversalBusyError(TraversalError, RuntimeError):
    """Another traversal is already running on this graph."""


class TraversalCancelled(TraversalError):
    """Raised at a suspension point once the run has been cancelled."""


# =============================================================================
# Priority Queue
# =============================================================================

class EmptyQueueError(GraphStepError, IndexError):
    """pop() or peek() on an empty priority queue."""
