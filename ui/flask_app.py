"""
Flask front end for graphstep: edit a graph and step through algorithms.

A single in-process Workspace holds the graph, the step controller, and the
background thread a run executes in. Browser controls post discrete signals
(advance, mode switch, cancel) that the controller hands to the suspended run.
"""

from __future__ import annotations

import logging
import math
import threading
from collections.abc import Iterator
from contextlib import contextmanager
from typing import Any

from flask import Flask, jsonify, render_template_string, request

from graphstep.config import (
    DEFAULT_PACING_MS,
    LOG_DATEFMT,
    LOG_FORMAT,
    LOG_LEVEL,
    PORT,
    RUN_JOIN_TIMEOUT,
    SECRET_KEY,
)
from graphstep.engine import (
    DijkstraResult,
    PrimResult,
    StepController,
    StepMode,
    TraversalCallbacks,
    TraversalRunner,
)
from graphstep.engine.events import TraversalEvent, VisitEvent
from graphstep.errors import (
    EmptyGraphError,
    GraphFormatError,
    GraphStepError,
    InvalidStartError,
    TraversalBusyError,
    UnknownNodeError,
)
from graphstep.graph import Graph, get_preset
from graphstep.graph.io import graph_from_document
from graphstep.graph.model import parse_node_id

logger = logging.getLogger(__name__)

app = Flask(__name__)
app.secret_key = SECRET_KEY

ALGORITHMS = ("dijkstra", "prim")


# ====================
# Workspace
# ====================

class Workspace:
    """
    The graph being edited plus the state of its current or last run.

    Only one run may be active at a time; graph edits are refused while a
    run is in progress.
    """

    def __init__(self) -> None:
        self.graph = Graph()
        self.controller = StepController()
        self.runner = TraversalRunner(self.graph, self.controller)
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()
        self._reset_run_view()

    def _reset_run_view(self) -> None:
        self.algorithm: str | None = None
        self.status = "idle"
        self.current_node: int | None = None
        self.last_event: TraversalEvent | None = None
        self.result: DijkstraResult | PrimResult | None = None
        self.error = ""
        self.step_count = 0

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def ensure_idle(self) -> None:
        if self.running:
            raise TraversalBusyError("A traversal is running; cancel it or wait for it to finish")

    # ---- graph editing ----

    @contextmanager
    def edit(self) -> Iterator[Graph]:
        """
        Hold the workspace lock for a graph edit.

        A run cannot start until the edit is done, and the edit is refused
        if a run is already active.

        Raises:
            TraversalBusyError: If a run is in progress
        """
        with self._lock:
            self.ensure_idle()
            yield self.graph

    def replace_graph(self, graph: Graph) -> None:
        with self._lock:
            self.ensure_idle()
            self.graph = graph
            self.runner = TraversalRunner(self.graph, self.controller)
            self._reset_run_view()

    def clear(self) -> None:
        with self.edit() as graph:
            graph.clear()
            self._reset_run_view()

    def reset(self) -> None:
        with self.edit() as graph:
            graph.reset_states()
            self._reset_run_view()

    # ---- runs ----

    def start_run(self, algorithm: str, mode: str, pacing_ms: float | None) -> None:
        """
        Validate the selection and start a run in a background thread.

        Raises:
            TraversalBusyError: If a run is already active
            EmptyGraphError / InvalidStartError: If there is nothing to run on
            ValueError: If algorithm or mode is unknown
        """
        if algorithm not in ALGORITHMS:
            raise ValueError(f"Unknown algorithm '{algorithm}'. Available: {', '.join(ALGORITHMS)}")
        step_mode = StepMode(mode)

        with self._lock:
            self.ensure_idle()
            if self.graph.node_count == 0:
                raise EmptyGraphError("No graph to run on. Add some nodes first.")
            start = self.graph.start_id
            if start is None or not self.graph.has_node(start):
                raise InvalidStartError(start)

            self._reset_run_view()
            self.algorithm = algorithm
            self.status = "running"
            self.controller.reset()
            self.controller.set_mode(step_mode)
            if pacing_ms is not None:
                self.controller.set_pacing(pacing_ms)

            self._thread = threading.Thread(
                target=self._run,
                args=(algorithm, start, self.graph.end_id),
                name=f"graphstep-{algorithm}",
                daemon=True,
            )
            self._thread.start()

    def _run(self, algorithm: str, start: int, end: int | None) -> None:
        callbacks = TraversalCallbacks(on_event=self._record_event)
        try:
            if algorithm == "dijkstra":
                result = self.runner.run_dijkstra(start, end, pacing_ms=None, callbacks=callbacks)
            else:
                result = self.runner.run_prim(start, pacing_ms=None, callbacks=callbacks)
            # result is stored before status leaves "running"
            self.result = result
            self.status = "cancelled" if result.cancelled else "finished"
        except GraphStepError as e:
            logger.error(f"Run failed: {e}")
            self.error = str(e)
            self.status = "error"
        finally:
            self.current_node = None

    def _record_event(self, event: TraversalEvent) -> None:
        self.last_event = event
        self.step_count += 1
        if isinstance(event, VisitEvent):
            self.current_node = event.node

    def cancel(self) -> None:
        self.controller.cancel()
        self.join(RUN_JOIN_TIMEOUT)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the active run to end. Returns True if no run is active."""
        thread = self._thread
        if thread is not None:
            thread.join(timeout)
        return not self.running

    # ---- views ----

    def graph_view(self) -> dict[str, Any]:
        graph = self.graph
        return {
            "nodes": [
                {
                    "id": n.id,
                    "label": n.label,
                    "x": n.x,
                    "y": n.y,
                    "distance": None if math.isinf(n.distance) else n.distance,
                    "visited": n.visited,
                    "degree": n.degree,
                    "state": n.state.value,
                }
                for n in graph.nodes()
            ],
            "edges": [
                {"a": e.a, "b": e.b, "weight": e.weight, "highlight": e.highlight, "in_mst": e.in_mst}
                for e in graph.edges()
            ],
            "start": graph.start_id,
            "end": graph.end_id,
        }

    def run_view(self) -> dict[str, Any]:
        return {
            "algorithm": self.algorithm,
            "status": self.status,
            "mode": self.controller.mode.value,
            "pacing_ms": self.controller.pacing_ms,
            "waiting": self.controller.waiting,
            "current_node": self.current_node,
            "step_count": self.step_count,
            "last_event": self.last_event.to_dict() if self.last_event else None,
            "result": self.result.to_dict() if self.result else None,
            "error": self.error,
        }


workspace = Workspace()


# ====================
# Error Handling
# ====================

@app.errorhandler(GraphStepError)
def handle_graphstep_error(e: GraphStepError):
    if isinstance(e, UnknownNodeError):
        status = 404
    elif isinstance(e, TraversalBusyError):
        status = 409
    else:
        status = 400
    return jsonify({"error": str(e)}), status


@app.errorhandler(ValueError)
def handle_value_error(e: ValueError):
    return jsonify({"error": str(e)}), 400


def _payload() -> dict[str, Any]:
    return request.get_json(silent=True) or {}


def _optional_id(value: Any) -> int | None:
    if value is None or value == "":
        return None
    return parse_node_id(value)


# ====================
# Graph API
# ====================

@app.route("/api/graph")
def get_graph():
    return jsonify(workspace.graph_view())


@app.route("/api/graph", methods=["PUT"])
def put_graph():
    """Replace the whole graph with a posted document."""
    workspace.replace_graph(graph_from_document(_payload()))
    return jsonify(workspace.graph_view())


@app.route("/api/presets/<name>", methods=["GET", "POST"])
def load_preset(name: str):
    workspace.replace_graph(get_preset(name))
    return jsonify(workspace.graph_view())


@app.route("/api/nodes", methods=["POST"])
def add_node():
    data = _payload()
    with workspace.edit() as graph:
        node_id = graph.add_node(
            x=float(data.get("x", 0.0)),
            y=float(data.get("y", 0.0)),
            label=data.get("label"),
        )
    return jsonify({"id": node_id}), 201


@app.route("/api/edges", methods=["POST"])
def add_edge():
    data = _payload()
    try:
        a, b = parse_node_id(data["a"]), parse_node_id(data["b"])
    except (KeyError, GraphFormatError):
        return jsonify({"error": "Edge needs integer 'a' and 'b'"}), 400
    with workspace.edit() as graph:
        edge = graph.add_edge(a, b, data.get("weight", 1))
    if edge is None:
        return jsonify({"added": False}), 200
    return jsonify({"added": True, "a": edge.a, "b": edge.b, "weight": edge.weight}), 201


@app.route("/api/select", methods=["POST"])
def select_nodes():
    """Pick start and/or end nodes ({"start": id, "end": id})."""
    data = _payload()
    with workspace.edit() as graph:
        if "start" in data:
            graph.set_start(_optional_id(data["start"]))
        if "end" in data:
            graph.set_end(_optional_id(data["end"]))
        return jsonify({"start": graph.start_id, "end": graph.end_id})


@app.route("/api/clear", methods=["POST"])
def clear_graph():
    workspace.clear()
    return jsonify(workspace.graph_view())


@app.route("/api/reset", methods=["POST"])
def reset_run():
    workspace.reset()
    return jsonify(workspace.graph_view())


# ====================
# Run API
# ====================

@app.route("/api/run", methods=["POST"])
def start_run():
    data = _payload()
    pacing = data.get("pacing_ms")
    workspace.start_run(
        algorithm=data.get("algorithm", "dijkstra"),
        mode=data.get("mode", StepMode.MANUAL.value),
        pacing_ms=float(pacing) if pacing is not None else None,
    )
    return jsonify(workspace.run_view()), 202


@app.route("/api/advance", methods=["POST"])
def advance():
    workspace.controller.advance()
    return "", 204


@app.route("/api/mode", methods=["POST"])
def set_mode():
    data = _payload()
    workspace.controller.set_mode(data.get("mode", StepMode.AUTO.value))
    if data.get("pacing_ms") is not None:
        workspace.controller.set_pacing(float(data["pacing_ms"]))
    return jsonify(workspace.run_view())


@app.route("/api/cancel", methods=["POST"])
def cancel():
    workspace.cancel()
    return jsonify(workspace.run_view())


@app.route("/api/state")
def get_state():
    return jsonify({"graph": workspace.graph_view(), "run": workspace.run_view()})


# ====================
# Sidebar Page
# ====================

BASE_TEMPLATE = """
<!DOCTYPE html>
<html>
<head>
    <meta charset="utf-8">
    <title>graphstep</title>
    <style>
        * { box-sizing: border-box; margin: 0; padding: 0; }
        body { font-family: system-ui, -apple-system, sans-serif; background: #0f172a; color: #e2e8f0; }
        .header { background: #1e293b; padding: 15px 30px; display: flex; justify-content: space-between; align-items: center; }
        .container { max-width: 760px; margin: 0 auto; padding: 20px; }
        .card { background: #1e293b; border-radius: 12px; padding: 20px; margin-bottom: 20px; }
        .banner { background: rgba(16,185,129,0.08); border: 1px solid rgba(16,185,129,0.25); color: #6ee7b7; border-radius: 6px; padding: 10px; margin-bottom: 20px; font-weight: 600; }
        .explain { color: #fbbf24; margin-top: 10px; }
        table { width: 100%; border-collapse: collapse; }
        th, td { border-bottom: 1px solid #334155; padding: 6px 10px; text-align: left; }
        button { background: #4ecdc4; color: #0f172a; border: none; padding: 8px 18px; border-radius: 6px; cursor: pointer; margin-right: 8px; }
        button.danger { background: #e74c3c; color: white; }
    </style>
</head>
<body>
<div class="header"><h1>graphstep</h1><span>{{ run.status }}</span></div>
<div class="container">
    {% if banner %}<div class="banner">{% for line in banner %}<div>{{ line }}</div>{% endfor %}</div>{% endif %}
    <div class="card">
        <p>Current: {{ current }} &nbsp; Start: {{ start }} &nbsp; End: {{ end }}</p>
        <p>Mode: {{ run.mode }} &nbsp; Pacing: {{ run.pacing_ms }}ms &nbsp; Steps: {{ run.step_count }}</p>
        {% if explanation %}<p class="explain">{{ explanation }}</p>{% endif %}
        <div style="margin-top:15px;">
            <button onclick="post('/api/run', {algorithm: 'dijkstra', mode: 'manual'})">Dijkstra</button>
            <button onclick="post('/api/run', {algorithm: 'prim', mode: 'manual'})">Prim</button>
            <button onclick="post('/api/advance')">Next step</button>
            <button onclick="post('/api/mode', {mode: 'auto'})">Auto</button>
            <button onclick="post('/api/mode', {mode: 'manual'})">Manual</button>
            <button class="danger" onclick="post('/api/cancel')">Cancel</button>
        </div>
    </div>
    <div class="card">
        <table>
            <thead><tr><th>Node</th><th>Distance</th><th>Visited</th><th>Degree</th></tr></thead>
            <tbody>
            {% for row in rows %}
                <tr><td>{{ row.label }}</td><td>{{ row.distance }}</td><td>{{ row.visited }}</td><td>{{ row.degree }}</td></tr>
            {% endfor %}
            </tbody>
        </table>
    </div>
</div>
<script>
function post(url, body) {
    fetch(url, {method: 'POST', headers: {'Content-Type': 'application/json'}, body: JSON.stringify(body || {})})
        .then(() => location.reload());
}
{% if run.status == 'running' and run.mode == 'auto' %}
setTimeout(() => location.reload(), {{ run.pacing_ms }});
{% endif %}
</script>
</body>
</html>
"""


def _format_distance(value: float) -> str:
    return "∞" if math.isinf(value) else f"{value:g}"


def completion_banner(graph: Graph, result: DijkstraResult | PrimResult | None) -> list[str]:
    """Lines for the completion banner, empty while nothing has finished."""
    if result is None:
        return []
    if result.cancelled:
        return ["Run cancelled."]
    if isinstance(result, PrimResult):
        lines = [f"MST complete! Total cost: {result.total_cost:g}."]
        if not result.spanning:
            lines.append(f"Graph is disconnected: tree covers {len(result.visited)} of {result.node_count} nodes.")
        return lines
    if result.end is not None and result.path:
        return [
            "Shortest Path: " + " → ".join(graph.label_for(n) for n in result.path),
            f"Cost: {_format_distance(result.cost)}",
        ]
    lines = ["Run complete. Final distances:"]
    lines.extend(
        f"{graph.label_for(n.id)} : {_format_distance(result.distance.get(n.id, math.inf))}"
        for n in graph.nodes()
    )
    return lines


@app.route("/")
def sidebar():
    """Render the current node, selections, distance table and banner."""
    graph = workspace.graph
    run = workspace.run_view()
    current = workspace.current_node
    event = workspace.last_event
    rows = [
        {
            "label": n.label,
            "distance": _format_distance(n.distance),
            "visited": "✓" if n.visited else "",
            "degree": n.degree,
        }
        for n in graph.nodes()
    ]
    return render_template_string(
        BASE_TEMPLATE,
        run=run,
        rows=rows,
        current="—" if current is None else graph.label_for(current),
        start="—" if graph.start_id is None else graph.label_for(graph.start_id),
        end="—" if graph.end_id is None else graph.label_for(graph.end_id),
        explanation=event.explanation if event and workspace.running else "",
        banner=completion_banner(graph, workspace.result),
    )


# ====================
# Main
# ====================

if __name__ == "__main__":
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT, datefmt=LOG_DATEFMT)
    workspace.controller.set_pacing(DEFAULT_PACING_MS)
    print("\n=== graphstep ===")
    print(f"Open http://localhost:{PORT} in your browser\n")
    app.run(host="0.0.0.0", port=PORT, debug=False)
