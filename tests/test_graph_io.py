"""
Tests for graph files and presets.
"""

import json

import pytest

from graphstep.errors import GraphFormatError
from graphstep.graph import get_preset, load_graph, save_graph
from graphstep.graph.io import graph_from_document


class TestGraphFiles:
    """Test save/load through JSON and msgpack."""

    @pytest.mark.parametrize("name", ["graph.json", "graph.msgpack", "graph.mpk"])
    def test_round_trip(self, graph, tmp_path, name):
        """Saved graphs load back with the same ids, labels, weights and selection."""
        path = save_graph(graph, tmp_path / name)
        loaded = load_graph(path)
        assert loaded.to_dict() == graph.to_dict()
        assert loaded.start_id == 0
        assert loaded.end_id == 3

    def test_creates_parent_dirs(self, graph, tmp_path):
        """save_graph creates missing directories."""
        path = save_graph(graph, tmp_path / "nested" / "dir" / "graph.json")
        assert path.exists()

    def test_json_is_readable(self, graph, tmp_path):
        """The JSON form is a plain nodes/edges document."""
        path = save_graph(graph, tmp_path / "graph.json")
        data = json.loads(path.read_text(encoding="utf-8"))
        assert [n["id"] for n in data["nodes"]] == [0, 1, 2, 3]
        assert data["edges"][0] == {"a": 0, "b": 1, "weight": 4.0}

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_graph(tmp_path / "nope.json")

    def test_malformed_json(self, tmp_path):
        """Unparseable JSON raises GraphFormatError."""
        path = tmp_path / "bad.json"
        path.write_text("{nodes: ", encoding="utf-8")
        with pytest.raises(GraphFormatError):
            load_graph(path)

    def test_malformed_msgpack(self, tmp_path):
        """Unparseable msgpack raises GraphFormatError."""
        path = tmp_path / "bad.msgpack"
        path.write_bytes(b"\xc1")
        with pytest.raises(GraphFormatError):
            load_graph(path)


class TestDocumentValidation:
    """Test graph_from_document checks."""

    @pytest.mark.parametrize(
        "document",
        [
            [],
            {"nodes": []},
            {"nodes": {}, "edges": []},
            {"nodes": [{"label": "no id"}], "edges": []},
            {"nodes": [{"id": 0}], "edges": [{"a": 0, "b": 1}]},
            {"nodes": [{"id": 1.5}], "edges": []},
        ],
    )
    def test_bad_shape(self, document):
        """Structurally invalid documents are rejected."""
        with pytest.raises(GraphFormatError):
            graph_from_document(document)

    def test_edge_to_unknown_node(self):
        """Edges referencing missing nodes are rejected."""
        with pytest.raises(GraphFormatError):
            graph_from_document({"nodes": [{"id": 0}], "edges": [{"a": 0, "b": 9, "weight": 1}]})

    def test_negative_weight(self):
        """Negative weights in a document are rejected."""
        document = {
            "nodes": [{"id": 0}, {"id": 1}],
            "edges": [{"a": 0, "b": 1, "weight": -2}],
        }
        with pytest.raises(GraphFormatError):
            graph_from_document(document)


class TestPresets:
    """Test built-in graphs."""

    def test_sample(self):
        """The sample preset has four nodes, five edges, start 0 and end 3."""
        graph = get_preset("sample")
        assert (graph.node_count, graph.edge_count) == (4, 5)
        assert (graph.start_id, graph.end_id) == (0, 3)

    def test_disconnected(self):
        """The disconnected preset ends on an isolated node."""
        graph = get_preset("disconnected")
        assert graph.end_id == 4
        assert graph.find_node(4).degree == 0

    def test_presets_are_fresh(self):
        """Each call builds a new graph."""
        assert get_preset("sample") is not get_preset("sample")

    def test_unknown(self):
        """Unknown preset names raise ValueError."""
        with pytest.raises(ValueError, match="Unknown preset"):
            get_preset("nope")
