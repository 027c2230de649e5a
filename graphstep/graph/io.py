"""
Graph file IO.

Graphs are stored as plain documents ({"nodes": [...], "edges": [...]}),
either JSON (.json) or msgpack (.msgpack / .mpk). Only the graph structure
and start/end selection are written - never algorithm state.
"""

from __future__ import annotations

import json
import logging
from pathlib import Path
from typing import Any

import msgpack

from graphstep.errors import GraphError, GraphFormatError
from graphstep.graph.model import Graph

logger = logging.getLogger(__name__)

MSGPACK_SUFFIXES = {".msgpack", ".mpk"}


def save_graph(graph: Graph, path: str | Path) -> Path:
    """
    Write a graph to disk. Format is chosen from the file suffix.

    Returns:
        The path written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    data = graph.to_dict()

    if path.suffix.lower() in MSGPACK_SUFFIXES:
        with open(path, "wb") as f:
            msgpack.pack(data, f)
    else:
        with open(path, "w", encoding="utf-8") as f:
            json.dump(data, f, indent=2)

    logger.info(f"Saved graph ({graph.node_count} nodes, {graph.edge_count} edges) to {path}")
    return path


def load_graph(path: str | Path) -> Graph:
    """
    Load a graph written by save_graph().

    Raises:
        FileNotFoundError: If the file does not exist
        GraphFormatError: If the document is malformed
    """
    path = Path(path)
    logger.info(f"Loading graph from {path}...")

    try:
        if path.suffix.lower() in MSGPACK_SUFFIXES:
            with open(path, "rb") as f:
                data = msgpack.unpack(f, strict_map_key=False)
        else:
            with open(path, encoding="utf-8") as f:
                data = json.load(f)
    except (json.JSONDecodeError, msgpack.UnpackException, ValueError) as e:
        raise GraphFormatError(f"Could not parse graph file {path}: {e}") from e

    graph = graph_from_document(data)
    logger.info(f"Loaded {graph.node_count} nodes, {graph.edge_count} edges")
    return graph


def graph_from_document(data: Any) -> Graph:
    """Validate a decoded document and build a Graph from it."""
    _validate_document(data)
    try:
        return Graph.from_dict(data)
    except GraphFormatError:
        raise
    except (GraphError, KeyError, TypeError, ValueError) as e:
        raise GraphFormatError(f"Invalid graph document: {e}") from e


def _validate_document(data: Any) -> None:
    if not isinstance(data, dict):
        raise GraphFormatError("Graph document must be an object")
    if "nodes" not in data or "edges" not in data:
        raise GraphFormatError("Graph document must contain 'nodes' and 'edges'")
    if not isinstance(data["nodes"], list):
        raise GraphFormatError("'nodes' must be a list")
    if not isinstance(data["edges"], list):
        raise GraphFormatError("'edges' must be a list")
    for node in data["nodes"]:
        if not isinstance(node, dict) or "id" not in node:
            raise GraphFormatError("node entries must be objects with an 'id'")
    for edge in data["edges"]:
        if not isinstance(edge, dict):
            raise GraphFormatError("edge entries must be objects")
        if "a" not in edge or "b" not in edge or "weight" not in edge:
            raise GraphFormatError("edge missing 'a', 'b' or 'weight'")
