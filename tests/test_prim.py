"""
Unit tests for the stepable Prim search.
"""

import pytest

from graphstep.engine import MstEdge, PrimSearch, RunStatus
from graphstep.errors import EmptyGraphError, InvalidStartError
from graphstep.graph import Graph


class TestMinimumSpanningTree:
    """Test tree selection on the sample graph."""

    def test_sample_tree(self, graph):
        """The sample MST is 0-2, 2-1, 1-3 with total cost 8."""
        result = PrimSearch(graph, 0).run()
        assert result.tree_edges == (
            MstEdge(0, 2, 1),
            MstEdge(2, 1, 2),
            MstEdge(1, 3, 5),
        )
        assert result.total_cost == 8
        assert result.spanning is True
        assert result.status is RunStatus.COMPLETED

    def test_tree_has_n_minus_one_edges(self, graph):
        """A connected graph's tree has one edge fewer than it has nodes."""
        result = PrimSearch(graph, 3).run()
        assert len(result.tree_edges) == graph.node_count - 1
        assert result.total_cost == 8

    def test_tie_breaks_by_insertion_order(self):
        """Among equal weights the edge inserted first is chosen."""
        graph = Graph()
        for _ in range(3):
            graph.add_node()
        graph.add_edge(0, 2, 2)
        graph.add_edge(0, 1, 2)
        graph.add_edge(1, 2, 5)
        result = PrimSearch(graph, 0).run()
        assert result.tree_edges[0] == MstEdge(0, 2, 2)

    def test_graph_not_mutated(self, graph):
        """The search never writes to the graph."""
        PrimSearch(graph, 0).run()
        assert not any(e.in_mst for e in graph.edges())


class TestDisconnected:
    """Test partial trees on disconnected graphs."""

    def test_partial_forest(self, disconnected_graph):
        """The tree covers only the start node's component."""
        result = PrimSearch(disconnected_graph, 0).run()
        assert len(result.tree_edges) == 3
        assert result.visited == frozenset({0, 1, 2, 3})
        assert result.spanning is False
        assert result.status is RunStatus.COMPLETED

    def test_isolated_start(self, disconnected_graph):
        """Starting on an isolated node gives an empty tree."""
        result = PrimSearch(disconnected_graph, 4).run()
        assert result.tree_edges == ()
        assert result.total_cost == 0
        assert result.visited == frozenset({4})


class TestEvents:
    """Test the tree event stream."""

    def test_start_event_then_one_per_edge(self, graph):
        """The first event marks the start; each later one adds an edge."""
        events = list(PrimSearch(graph, 0).steps())
        assert len(events) == 4
        assert events[0].edge is None
        assert events[0].visited == frozenset({0})
        assert events[0].line == 1
        assert [e.edge for e in events[1:]] == list(PrimSearch(graph, 0).run().tree_edges)

    def test_running_total(self, graph):
        """total_cost grows with each added edge."""
        totals = [e.total_cost for e in PrimSearch(graph, 0).steps()]
        assert totals == [0, 1, 3, 8]

    def test_explanation_names_edge(self, graph):
        """Edge events narrate the edge and its weight."""
        events = list(PrimSearch(graph, 0).steps())
        assert events[1].explanation == "Adding edge (0, 2) with weight 1 to MST."

    def test_to_dict(self, graph):
        """Events serialize to plain data."""
        data = list(PrimSearch(graph, 0).steps())[1].to_dict()
        assert data["kind"] == "tree"
        assert data["edge"] == {"a": 0, "b": 2, "weight": 1.0}
        assert data["visited"] == [0, 2]


class TestPreconditions:
    """Test validation performed before a run starts."""

    def test_empty_graph(self):
        """An empty graph is rejected."""
        with pytest.raises(EmptyGraphError):
            PrimSearch(Graph(), 0)

    def test_invalid_start(self, graph):
        """A start id not in the graph is rejected."""
        with pytest.raises(InvalidStartError):
            PrimSearch(graph, 7)
