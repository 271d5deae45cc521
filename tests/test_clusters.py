"""
Unit tests for clustering.

Tests connected components, centers, coherence and dominant categories.
"""

import networkx as nx
import numpy as np
import pytest
from cognisig.encoding import SignatureEncoder
from cognisig.memory import ClusterEngine, SimilarityGraph


@pytest.fixture
def encode():
    return SignatureEncoder().encode


def table_scorer(table):
    """Scorer reading strengths from a {frozenset(ids): strength} table."""
    def scorer(a, b):
        if a.node_id == b.node_id:
            return 1.0
        return table.get(frozenset((a.node_id, b.node_id)), 0.0)
    return scorer


def build(encode, shapes, scorer=None):
    kwargs = {} if scorer is None else {'scorer': scorer}
    graph = SimilarityGraph(**kwargs)
    for node_id, shape in shapes:
        graph.upsert_node(node_id, encode(shape, node_id))
    engine = ClusterEngine(**kwargs)
    return graph, engine


class TestClusterEngine:
    """Test ClusterEngine class."""

    def test_empty_graph(self):
        """Test that an empty graph has no clusters."""
        graph = SimilarityGraph()

        assert ClusterEngine().compute(graph.snapshot()) == []

    def test_identical_nodes_and_singleton(self, encode):
        """Test three identical [2, 2] nodes plus one [3, 5] node."""
        graph, engine = build(encode, [
            ("a", [2, 2]), ("b", [2, 2]), ("c", [2, 2]), ("d", [3, 5]),
        ])

        clusters = engine.compute(graph.snapshot())

        assert len(clusters) == 2
        first, second = clusters
        assert first.members == ("a", "b", "c")
        assert first.size == 3
        assert first.coherence == 1.0
        assert first.dominant_category == "matrix"
        assert second.members == ("d",)
        assert second.coherence == 1.0
        assert second.center == "d"
        assert [c.cluster_id for c in clusters] == [1, 2]

    def test_weak_edges_do_not_merge(self, encode):
        """Test that 0.7 edges exist but do not join clusters."""
        graph, engine = build(encode, [("a", [2, 2]), ("d", [3, 5])])

        assert graph.edge_strength("a", "d") == 0.7
        assert len(engine.compute(graph.snapshot())) == 2

    def test_center_tie_goes_to_earliest(self, encode):
        """Test that equal connectivity picks the first inserted member."""
        graph, engine = build(encode, [
            ("a", [2, 2]), ("b", [2, 2]), ("c", [2, 2]), ("d", [3, 5]),
        ])

        assert engine.compute(graph.snapshot())[0].center == "a"

    def test_center_uses_all_edges(self, encode):
        """Test that weak edges outside the component count toward the center."""
        scorer = table_scorer({
            frozenset(("a", "b")): 0.9,
            frozenset(("b", "c")): 0.5,
        })
        graph, engine = build(encode, [("a", [2]), ("b", [3]), ("c", [5])], scorer)

        clusters = engine.compute(graph.snapshot())

        assert clusters[0].members == ("a", "b")
        assert clusters[0].center == "b"
        assert clusters[1].members == ("c",)

    def test_coherence_includes_non_edge_pairs(self, encode):
        """Test coherence recomputed from encodings over all pairs."""
        scorer = table_scorer({
            frozenset(("a", "b")): 0.8,
            frozenset(("b", "c")): 0.8,
        })
        graph, engine = build(encode, [("a", [2]), ("b", [3]), ("c", [5])], scorer)

        cluster = engine.compute(graph.snapshot())[0]

        assert cluster.members == ("a", "b", "c")
        assert cluster.center == "b"
        assert cluster.coherence == pytest.approx((0.8 + 0.0 + 0.8) / 3)

    def test_chain_is_one_component(self, encode):
        """Test transitive membership through a long chain."""
        n = 500
        table = {frozenset((i, i + 1)): 0.9 for i in range(n - 1)}
        graph, engine = build(encode, [(i, [2]) for i in range(n)], table_scorer(table))

        clusters = engine.compute(graph.snapshot())

        assert len(clusters) == 1
        assert clusters[0].members == tuple(range(n))

    def test_dominant_category(self, encode):
        """Test the most frequent category wins."""
        graph, engine = build(encode, [
            ("a", [2, 3, 4]), ("b", [2, 3]), ("c", [2, 3]),
        ], table_scorer({
            frozenset(("a", "b")): 0.9,
            frozenset(("b", "c")): 0.9,
        }))

        assert engine.compute(graph.snapshot())[0].dominant_category == "matrix"

    def test_dominant_category_tie(self, encode):
        """Test that a tie goes to the first category seen."""
        scorer = table_scorer({frozenset(("a", "b")): 0.9})

        graph, engine = build(encode, [("a", [5]), ("b", [2, 3])], scorer)
        assert engine.compute(graph.snapshot())[0].dominant_category == "vector"

        graph, engine = build(encode, [("b", [2, 3]), ("a", [5])], scorer)
        assert engine.compute(graph.snapshot())[0].dominant_category == "matrix"

    def test_idempotent(self, encode):
        """Test that clustering twice gives identical results."""
        graph, engine = build(encode, [
            ("a", [4, 4]), ("b", [8, 2]), ("c", [2, 2]), ("d", [7]), ("e", [3, 5, 7]),
        ])
        snapshot = graph.snapshot()

        assert engine.compute(snapshot) == engine.compute(snapshot)
        assert engine.compute(graph.snapshot()) == engine.compute(snapshot)

    def test_matches_networkx_components(self, encode):
        """Test membership against networkx connected components."""
        rng = np.random.RandomState(42)
        dims = [1, 2, 3, 4, 5, 6, 7, 8, 12, 16]
        shapes = []
        for i in range(60):
            rank = rng.randint(1, 4)
            shapes.append((i, [int(d) for d in rng.choice(dims, size=rank)]))
        graph, engine = build(encode, shapes)

        G = graph.to_networkx()
        strong = nx.Graph()
        strong.add_nodes_from(G.nodes)
        strong.add_edges_from((u, v) for u, v, w in G.edges(data='weight') if w > 0.7)
        expected = {frozenset(c) for c in nx.connected_components(strong)}

        clusters = engine.compute(graph.snapshot())

        assert {frozenset(c.members) for c in clusters} == expected
        assert sum(c.size for c in clusters) == 60

    def test_reproducible_from_same_sequence(self, encode):
        """Test that the same upsert sequence yields the same clusters."""
        shapes = [("x", [2, 2]), ("y", [4, 4]), ("z", [3]), ("x", [8, 2]), ("w", [2, 2])]

        results = []
        for _ in range(2):
            graph, engine = build(encode, shapes)
            results.append(engine.compute(graph.snapshot()))

        assert results[0] == results[1]


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
