"""
graphstep - step-by-step graph algorithm visualizer.

Build a weighted undirected graph and watch Dijkstra shortest paths and
Prim minimum spanning trees execute one observable step at a time,
either free-running or under manual control.
"""

__version__ = "0.1.0"
