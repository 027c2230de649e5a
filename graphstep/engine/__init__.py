"""
Traversal engine module.

Provides the stepable algorithms and the machinery that paces them:
- MinHeap: Lazy-deletion binary min-heap
- DijkstraSearch: Step-by-step shortest paths
- PrimSearch: Step-by-step minimum spanning tree
- StepController: Auto / manual suspension with cancellation
- TraversalRunner: Drives a search and reports it through callbacks
"""

from graphstep.engine.controller import StepController, StepMode
from graphstep.engine.dijkstra import DijkstraSearch
from graphstep.engine.events import (
    DijkstraResult,
    MstEdge,
    PrimResult,
    RelaxEvent,
    RunStatus,
    TreeEvent,
    VisitEvent,
)
from graphstep.engine.heap import HeapEntry, MinHeap
from graphstep.engine.prim import PrimSearch
from graphstep.engine.runner import TraversalCallbacks, TraversalRunner

__all__ = [
    "MinHeap",
    "HeapEntry",
    "DijkstraSearch",
    "PrimSearch",
    "StepController",
    "StepMode",
    "TraversalRunner",
    "TraversalCallbacks",
    "VisitEvent",
    "RelaxEvent",
    "TreeEvent",
    "MstEdge",
    "DijkstraResult",
    "PrimResult",
    "RunStatus",
]
