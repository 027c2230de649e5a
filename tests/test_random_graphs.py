"""
Property tests on seeded random graphs.

Dijkstra is checked against Floyd-Warshall and Prim against Kruskal over
the start node's component.
"""

import math
import random

import pytest

from graphstep.engine import DijkstraSearch, PrimSearch
from graphstep.graph import Graph

SEEDS = range(25)


def random_graph(seed: int) -> Graph:
    """Up to 9 nodes, random edges with integer weights 0-10."""
    rng = random.Random(seed)
    graph = Graph()
    n = rng.randint(1, 9)
    for _ in range(n):
        graph.add_node(rng.uniform(0, 500), rng.uniform(0, 500))
    density = rng.choice([0.2, 0.4, 0.7])
    for a in range(n):
        for b in range(a + 1, n):
            if rng.random() < density:
                graph.add_edge(a, b, rng.randint(0, 10))
    return graph


def floyd_warshall(graph: Graph) -> dict[int, dict[int, float]]:
    ids = graph.node_ids()
    dist = {u: {v: (0 if u == v else math.inf) for v in ids} for u in ids}
    for edge in graph.edges():
        dist[edge.a][edge.b] = min(dist[edge.a][edge.b], edge.weight)
        dist[edge.b][edge.a] = min(dist[edge.b][edge.a], edge.weight)
    for k in ids:
        for i in ids:
            for j in ids:
                if dist[i][k] + dist[k][j] < dist[i][j]:
                    dist[i][j] = dist[i][k] + dist[k][j]
    return dist


def component(graph: Graph, start: int) -> set[int]:
    seen = {start}
    stack = [start]
    while stack:
        u = stack.pop()
        for edge in graph.edges():
            if u in (edge.a, edge.b):
                v = edge.other(u)
                if v not in seen:
                    seen.add(v)
                    stack.append(v)
    return seen


def kruskal_cost(graph: Graph, nodes: set[int]) -> float:
    parent = {u: u for u in nodes}

    def find(u):
        while parent[u] != u:
            parent[u] = parent[parent[u]]
            u = parent[u]
        return u

    total = 0.0
    for edge in sorted(graph.edges(), key=lambda e: e.weight):
        if edge.a not in nodes:
            continue
        ra, rb = find(edge.a), find(edge.b)
        if ra != rb:
            parent[ra] = rb
            total += edge.weight
    return total


class TestDijkstraProperties:
    """Dijkstra agrees with a brute-force all-pairs reference."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_distances_match_reference(self, seed):
        """Every final distance equals the true shortest-path distance."""
        graph = random_graph(seed)
        reference = floyd_warshall(graph)
        for start in graph.node_ids():
            result = DijkstraSearch(graph, start).run()
            assert dict(result.distance) == reference[start]

    @pytest.mark.parametrize("seed", SEEDS)
    def test_paths_are_valid_and_optimal(self, seed):
        """Each path is a chain of real edges whose weights sum to distance[end]."""
        graph = random_graph(seed)
        reference = floyd_warshall(graph)
        for start in graph.node_ids():
            for end in graph.node_ids():
                result = DijkstraSearch(graph, start, end).run()
                if math.isinf(reference[start][end]):
                    assert result.path == ()
                    assert math.isinf(result.distance[end])
                    continue
                path = result.path
                assert path[0] == start
                assert path[-1] == end
                assert len(set(path)) == len(path)
                total = sum(graph.find_edge(u, v).weight for u, v in zip(path, path[1:]))
                assert total == result.distance[end] == reference[start][end]


class TestPrimProperties:
    """Prim agrees with Kruskal on the start node's component."""

    @pytest.mark.parametrize("seed", SEEDS)
    def test_tree_matches_reference(self, seed):
        """The tree spans the component with size - 1 edges at minimum cost."""
        graph = random_graph(seed)
        for start in graph.node_ids():
            nodes = component(graph, start)
            result = PrimSearch(graph, start).run()
            assert result.visited == frozenset(nodes)
            assert len(result.tree_edges) == len(nodes) - 1
            assert result.total_cost == kruskal_cost(graph, nodes)
            assert result.spanning == (len(nodes) == graph.node_count)

    @pytest.mark.parametrize("seed", SEEDS)
    def test_tree_edges_join_new_nodes(self, seed):
        """Every tree edge brings exactly one new node into the tree."""
        graph = random_graph(seed)
        events = list(PrimSearch(graph, 0).steps())
        for before, after in zip(events, events[1:]):
            edge = after.edge
            assert (edge.a in before.visited) != (edge.b in before.visited)
            assert len(after.visited) == len(before.visited) + 1
