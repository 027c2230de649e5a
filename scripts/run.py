#!/usr/bin/env python3
"""
graphstep CLI - step through Dijkstra or Prim on a graph file or preset.

Usage:
    python scripts/run.py --preset sample
    python scripts/run.py --preset sample --algorithm prim --mode auto --pacing 200
    python scripts/run.py --graph city.json --start 0 --end 5
    python scripts/run.py --preset disconnected --save disconnected.msgpack

Modes:
    manual  - Press Enter to advance one step ('q' cancels the run)
    auto    - Steps advance on their own every --pacing milliseconds

Graph files:
    .json or .msgpack / .mpk documents written by --save (or by the web UI).
"""

from __future__ import annotations

import argparse
import logging
import math
import sys
import threading
from pathlib import Path

# Add project root to path
project_root = Path(__file__).parent.parent
sys.path.insert(0, str(project_root))

from graphstep.config import DEFAULT_PACING_MS, GRAPHS_DIR, LOG_DATEFMT, LOG_FORMAT  # noqa: E402
from graphstep.engine import (  # noqa: E402
    DijkstraResult,
    PrimResult,
    StepController,
    StepMode,
    TraversalCallbacks,
    TraversalRunner,
)
from graphstep.engine.events import TraversalEvent, TreeEvent  # noqa: E402
from graphstep.errors import GraphStepError  # noqa: E402
from graphstep.graph import Graph, get_preset, load_graph, save_graph  # noqa: E402
from graphstep.graph.presets import PRESETS  # noqa: E402

# Seconds between checks for "run is waiting for Enter"
POLL_INTERVAL = 0.05


def parse_args() -> argparse.Namespace:
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        description="Step through graph algorithms in the terminal",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=__doc__,
    )

    source = parser.add_mutually_exclusive_group()
    source.add_argument(
        "--graph",
        type=Path,
        help="Graph file to load (.json / .msgpack)",
    )
    source.add_argument(
        "--preset",
        type=str,
        choices=sorted(PRESETS),
        default="sample",
        help="Built-in graph to use when --graph is not given (default: sample)",
    )
    parser.add_argument(
        "--algorithm",
        type=str,
        default="dijkstra",
        choices=["dijkstra", "prim"],
        help="Algorithm to run (default: dijkstra)",
    )
    parser.add_argument(
        "--start",
        type=int,
        default=None,
        help="Start node id (default: the graph's selected start)",
    )
    parser.add_argument(
        "--end",
        type=int,
        default=None,
        help="End node id for Dijkstra (default: the graph's selected end)",
    )
    parser.add_argument(
        "--mode",
        type=str,
        default=StepMode.MANUAL.value,
        choices=[m.value for m in StepMode],
        help="Stepping mode (default: manual)",
    )
    parser.add_argument(
        "--pacing",
        type=int,
        default=DEFAULT_PACING_MS,
        help=f"Auto-mode delay per step in ms (default: {DEFAULT_PACING_MS})",
    )
    parser.add_argument(
        "--save",
        type=Path,
        default=None,
        help="Write the graph to this file before running",
    )
    parser.add_argument(
        "--verbose",
        "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    return parser.parse_args()


def resolve_graph_path(path: Path) -> Path:
    """Bare file names refer to the graphs directory."""
    if path.parent == Path(".") and not path.exists():
        return GRAPHS_DIR / path
    return path


def format_distance(value: float) -> str:
    return "inf" if math.isinf(value) else f"{value:g}"


def print_event(graph: Graph, event: TraversalEvent) -> None:
    """Print one step: its narration plus the distance table or tree so far."""
    print("\n" + "-" * 60)
    print(f"[line {event.line}] {event.explanation}")
    print("-" * 60)
    if isinstance(event, TreeEvent):
        for edge in event.tree_edges:
            print(f"  {graph.label_for(edge.a)} - {graph.label_for(edge.b)}  (w={edge.weight:g})")
        print(f"  Total cost: {event.total_cost:g}")
        return

    print(f"  {'Node':<10} {'Distance':>10}  Visited")
    for node_id in graph.node_ids():
        distance = format_distance(event.distance.get(node_id, math.inf))
        mark = "x" if node_id in event.visited else ""
        print(f"  {graph.label_for(node_id):<10} {distance:>10}  {mark}")


class EventPrinter:
    """on_event callback that prints each step and counts how many it printed."""

    def __init__(self, graph: Graph):
        self.graph = graph
        self.count = 0

    def __call__(self, event: TraversalEvent) -> None:
        print_event(self.graph, event)
        self.count += 1


def print_summary(graph: Graph, result: DijkstraResult | PrimResult) -> None:
    """Print the completion banner."""
    print("\n" + "=" * 60)
    if result.cancelled:
        print("Run cancelled.")
    elif isinstance(result, PrimResult):
        print(f"MST complete! Total cost: {result.total_cost:g}")
        if not result.spanning:
            print(
                f"Graph is disconnected: tree covers {len(result.visited)} "
                f"of {result.node_count} nodes"
            )
    elif result.end is not None:
        if result.reachable:
            print("Shortest Path: " + " -> ".join(graph.label_for(n) for n in result.path))
            print(f"Cost: {format_distance(result.cost)}")
        else:
            print(f"No path from {graph.label_for(result.start)} to {graph.label_for(result.end)}")
    else:
        print("Final distances:")
        for node_id in graph.node_ids():
            print(f"  {graph.label_for(node_id)} : {format_distance(result.distance[node_id])}")
    print("=" * 60)


def drive_manually(controller: StepController, worker: threading.Thread, printer: EventPrinter) -> None:
    """
    Feed Enter presses to the controller until the run ends.

    Prompts once per printed step. waiting stays True for a moment after
    advance(), so a prompt also needs a step newer than the last one prompted.
    """
    prompted = 0
    while worker.is_alive():
        if not controller.waiting or printer.count <= prompted:
            worker.join(POLL_INTERVAL)
            continue
        prompted = printer.count
        choice = input("Enter = next step, a = auto, q = cancel > ").strip().lower()
        if choice == "q":
            controller.cancel()
        elif choice == "a":
            controller.set_mode(StepMode.AUTO)
        else:
            controller.advance()
    worker.join()


def main() -> int:
    """Main entry point."""
    args = parse_args()

    # Set up logging
    log_level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(level=log_level, format=LOG_FORMAT, datefmt=LOG_DATEFMT)

    try:
        graph = load_graph(resolve_graph_path(args.graph)) if args.graph else get_preset(args.preset)
    except (OSError, GraphStepError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.save:
        save_graph(graph, resolve_graph_path(args.save))

    start = args.start if args.start is not None else graph.start_id
    end = args.end if args.end is not None else graph.end_id
    if start is None:
        print("Error: no start node (use --start)", file=sys.stderr)
        return 1

    print("\n" + "=" * 60)
    print(f"graphstep - {args.algorithm}")
    print("=" * 60)
    print(f"  Graph: {graph.node_count} nodes, {graph.edge_count} edges")
    print(f"  Start: {graph.label_for(start)}")
    if args.algorithm == "dijkstra":
        print(f"  End:   {graph.label_for(end) if end is not None else '(all nodes)'}")
    print(f"  Mode:  {args.mode} ({args.pacing}ms)" if args.mode == "auto" else f"  Mode:  {args.mode}")
    print("=" * 60)

    controller = StepController(mode=args.mode, pacing_ms=args.pacing)
    runner = TraversalRunner(graph, controller)
    printer = EventPrinter(graph)
    callbacks = TraversalCallbacks(on_event=printer)
    outcome: dict[str, object] = {}

    def target() -> None:
        try:
            if args.algorithm == "dijkstra":
                outcome["result"] = runner.run_dijkstra(start, end, pacing_ms=None, callbacks=callbacks)
            else:
                outcome["result"] = runner.run_prim(start, pacing_ms=None, callbacks=callbacks)
        except GraphStepError as e:
            outcome["error"] = e

    worker = threading.Thread(target=target, name="graphstep-cli", daemon=True)
    worker.start()

    try:
        if controller.mode is StepMode.MANUAL:
            drive_manually(controller, worker, printer)
        else:
            worker.join()
    except (KeyboardInterrupt, EOFError):
        controller.cancel()
        worker.join()
        print("\n\nRun interrupted by user")
        return 130

    if "error" in outcome:
        print(f"Error: {outcome['error']}", file=sys.stderr)
        return 1

    result = outcome["result"]
    print_summary(graph, result)
    return 0 if not result.cancelled else 1


if __name__ == "__main__":
    sys.exit(main())
