"""
Built-in example graphs.
"""

from __future__ import annotations

from collections.abc import Callable

from graphstep.graph.model import Graph

# Editor positions for the sample graph (purely cosmetic)
_SAMPLE_POSITIONS = [(80.0, 200.0), (260.0, 80.0), (260.0, 320.0), (440.0, 200.0)]

# (a, b, weight) in insertion order
_SAMPLE_EDGES = [
    (0, 1, 4),
    (0, 2, 1),
    (2, 1, 2),
    (1, 3, 5),
    (2, 3, 8),
]


def sample_graph() -> Graph:
    """
    Four-node graph where the cheapest 0 -> 3 route is indirect.

    Shortest path 0 -> 3 is 0-2-1-3 (cost 8); the MST is {0-2, 2-1, 1-3}
    (cost 8).
    """
    graph = Graph()
    for x, y in _SAMPLE_POSITIONS:
        graph.add_node(x, y)
    for a, b, weight in _SAMPLE_EDGES:
        graph.add_edge(a, b, weight)
    graph.set_start(0)
    graph.set_end(3)
    return graph


def disconnected_sample_graph() -> Graph:
    """The sample graph plus an isolated node 4 (selected as the end)."""
    graph = sample_graph()
    isolated = graph.add_node(440.0, 360.0)
    graph.set_end(isolated)
    return graph


PRESETS: dict[str, Callable[[], Graph]] = {
    "sample": sample_graph,
    "disconnected": disconnected_sample_graph,
}


def get_preset(name: str) -> Graph:
    """
    Build a preset graph by name.

    Raises:
        ValueError: If the preset name is unknown
    """
    if name not in PRESETS:
        available = ", ".join(PRESETS.keys())
        raise ValueError(f"Unknown preset '{name}'. Available: {available}")
    return PRESETS[name]()
