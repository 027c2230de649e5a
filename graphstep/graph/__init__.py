"""
Graph model module.

Provides the editable graph and its file formats:
- Graph: Mutable undirected weighted graph
- Node / Edge: Graph records with display annotations
- save_graph / load_graph: JSON and msgpack graph files
- get_preset: Built-in example graphs
"""

from graphstep.graph.io import load_graph, save_graph
from graphstep.graph.model import Edge, Graph, Node, NodeState
from graphstep.graph.presets import get_preset

__all__ = [
    "Graph",
    "Node",
    "Edge",
    "NodeState",
    "load_graph",
    "save_graph",
    "get_preset",
]
