"""
Unit tests for the Graph model.
"""

import math

import pytest

from graphstep.errors import GraphFormatError, InvalidWeightError, UnknownNodeError
from graphstep.graph import Graph, NodeState


class TestNodes:
    """Test node creation and lookup."""

    def test_ids_increase_from_zero(self):
        """Node ids are assigned 0, 1, 2, ... in insertion order."""
        graph = Graph()
        assert [graph.add_node() for _ in range(3)] == [0, 1, 2]
        assert graph.node_ids() == [0, 1, 2]

    def test_label_defaults_to_id(self):
        """A node without a label is labelled with its id."""
        graph = Graph()
        node_id = graph.add_node(10, 20)
        node = graph.find_node(node_id)
        assert node.label == "0"
        assert (node.x, node.y) == (10.0, 20.0)

    def test_new_node_has_no_annotations(self):
        """Fresh nodes start unvisited at infinite distance."""
        graph = Graph()
        node = graph.find_node(graph.add_node(label="A"))
        assert node.label == "A"
        assert math.isinf(node.distance)
        assert node.visited is False
        assert node.state is NodeState.DEFAULT

    def test_label_for_unknown_id(self):
        """label_for falls back to the stringified id."""
        assert Graph().label_for(7) == "7"

    def test_clear_restarts_ids(self, graph):
        """clear() empties the graph and restarts id assignment."""
        graph.clear()
        assert graph.node_count == 0
        assert graph.edge_count == 0
        assert graph.start_id is None
        assert graph.add_node() == 0


class TestEdges:
    """Test edge insertion rules."""

    def test_degrees_follow_edges(self, graph):
        """Each edge adds one to both endpoint degrees."""
        assert graph.degree_table() == [("0", 2), ("1", 3), ("2", 3), ("3", 2)]

    def test_self_loop_rejected(self, graph):
        """Self loops are ignored without changing degrees."""
        assert graph.add_edge(1, 1, 3) is None
        assert graph.edge_count == 5
        assert graph.find_node(1).degree == 3

    def test_duplicate_rejected_either_direction(self, graph):
        """A second edge between the same pair is ignored, keeping the first weight."""
        assert graph.add_edge(1, 0, 99) is None
        assert graph.find_edge(0, 1).weight == 4
        assert graph.edge_count == 5

    def test_zero_weight_allowed(self):
        """Zero is a valid weight."""
        graph = Graph()
        a, b = graph.add_node(), graph.add_node()
        assert graph.add_edge(a, b, 0).weight == 0

    @pytest.mark.parametrize("weight", [-1, float("nan"), float("inf"), "heavy"])
    def test_invalid_weight_raises(self, weight):
        """Negative, NaN, infinite and non-numeric weights are rejected."""
        graph = Graph()
        a, b = graph.add_node(), graph.add_node()
        with pytest.raises(InvalidWeightError):
            graph.add_edge(a, b, weight)
        assert graph.edge_count == 0

    def test_unknown_endpoint_raises(self):
        """Edges to missing nodes raise UnknownNodeError (a KeyError)."""
        graph = Graph()
        graph.add_node()
        with pytest.raises(KeyError):
            graph.add_edge(0, 5, 1)

    def test_edge_other(self, graph):
        """Edge.other returns the opposite endpoint."""
        edge = graph.find_edge(0, 2)
        assert edge.other(0) == 2
        assert edge.other(2) == 0
        with pytest.raises(ValueError):
            edge.other(3)


class TestSelection:
    """Test start/end selection and display states."""

    def test_select_marks_states(self, graph):
        """Start and end nodes carry their display states."""
        assert graph.find_node(0).state is NodeState.START
        assert graph.find_node(3).state is NodeState.END

    def test_reselect_clears_old_state(self, graph):
        """Moving the start resets the previous start node's state."""
        graph.set_start(1)
        assert graph.find_node(0).state is NodeState.DEFAULT
        assert graph.find_node(1).state is NodeState.START

    def test_select_unknown_raises(self, graph):
        """Selecting a missing node raises UnknownNodeError."""
        with pytest.raises(UnknownNodeError) as exc:
            graph.set_end(42)
        assert exc.value.node_id == 42

    def test_clear_selection(self, graph):
        """None clears the selection."""
        graph.set_end(None)
        assert graph.end_id is None
        assert graph.find_node(3).state is NodeState.DEFAULT


class TestAnnotations:
    """Test display annotations."""

    def test_apply_and_reset(self, graph):
        """apply_annotations writes display fields; reset_states drops them."""
        graph.apply_annotations(
            distance={0: 0, 2: 1},
            visited=[0],
            states={2: NodeState.PROCESSING},
            highlight_edges=[(2, 0)],
            mst_edges=[(1, 3)],
        )
        assert graph.find_node(2).distance == 1
        assert graph.find_node(0).visited is True
        assert graph.find_node(2).state is NodeState.PROCESSING
        assert graph.find_edge(0, 2).highlight is True
        assert graph.find_edge(1, 3).in_mst is True

        graph.reset_states()
        assert math.isinf(graph.find_node(2).distance)
        assert graph.find_node(0).visited is False
        assert graph.find_node(2).state is NodeState.DEFAULT
        assert graph.find_node(0).state is NodeState.START
        assert not any(e.highlight or e.in_mst for e in graph.edges())

    def test_unknown_ids_ignored(self, graph):
        """Annotations for ids not in the graph are skipped."""
        graph.apply_annotations(states={99: NodeState.PATH})
        assert graph.find_node(99) is None


class TestSerialization:
    """Test to_dict / from_dict."""

    def test_round_trip_preserves_structure(self, graph):
        """Ids, labels, weights, edge order and selection survive a round trip."""
        copy = Graph.from_dict(graph.to_dict())
        assert copy.to_dict() == graph.to_dict()
        assert copy.degree_table() == graph.degree_table()

    def test_ids_continue_after_largest(self):
        """New nodes after from_dict get ids past the largest loaded id."""
        graph = Graph.from_dict({"nodes": [{"id": 5}], "edges": []})
        assert graph.add_node() == 6

    @pytest.mark.parametrize("bad_id", [1.5, "1", True, None])
    def test_non_integral_node_id_raises(self, bad_id):
        """Ids that are not whole numbers are rejected, never truncated."""
        with pytest.raises(GraphFormatError):
            Graph.from_dict({"nodes": [{"id": bad_id}], "edges": []})

    def test_non_integral_edge_endpoint_raises(self):
        """Edge endpoints must be whole numbers too."""
        document = {"nodes": [{"id": 0}, {"id": 1}], "edges": [{"a": 0, "b": 0.5, "weight": 1}]}
        with pytest.raises(GraphFormatError):
            Graph.from_dict(document)

    def test_integral_float_id_accepted(self):
        """A float id with no fractional part, as some encoders write, is accepted."""
        graph = Graph.from_dict({"nodes": [{"id": 2.0}], "edges": [], "start": 2.0})
        assert graph.node_ids() == [2]
        assert graph.start_id == 2

    def test_duplicate_node_id_raises(self):
        """Duplicate ids in a document are rejected."""
        with pytest.raises(ValueError):
            Graph.from_dict({"nodes": [{"id": 1}, {"id": 1}], "edges": []})
