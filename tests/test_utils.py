"""
Unit tests for graph metrics and edge statistics.
"""

import numpy as np
import pytest
from cognisig.encoding import SignatureEncoder
from cognisig.memory import SimilarityGraph
from cognisig.utils import analyze_edge_distribution, compute_metrics


@pytest.fixture
def graph():
    encoder = SignatureEncoder()
    g = SimilarityGraph()
    for node_id, shape in [("a", [2, 2]), ("b", [2, 2]), ("c", [3, 5]), ("d", [7])]:
        g.upsert_node(node_id, encoder.encode(shape, node_id))
    return g


class TestMetrics:
    """Test compute_metrics."""

    def test_counts(self, graph):
        """Test node and edge counts."""
        metrics = compute_metrics(graph.snapshot())

        # a-b 1.0, a-c 0.7, b-c 0.7; d shares nothing
        assert metrics['num_nodes'] == 4
        assert metrics['num_edges'] == 3
        assert metrics['density'] == pytest.approx(0.5)
        assert metrics['mean_degree'] == pytest.approx(1.5)
        assert metrics['max_strength'] == 1.0
        assert metrics['mean_connectivity'] == pytest.approx(4.8 / 4)

    def test_empty(self):
        """Test metrics of an empty graph."""
        metrics = compute_metrics(SimilarityGraph().snapshot())

        assert metrics['num_nodes'] == 0
        assert metrics['density'] == 0.0
        assert metrics['mean_strength'] == 0.0


class TestEdgeDistribution:
    """Test analyze_edge_distribution."""

    def test_histogram(self, graph):
        """Test that every edge lands in a bin."""
        stats = analyze_edge_distribution(graph.snapshot(), num_bins=10)
        hist, bin_edges = stats['hist']

        assert hist.sum() == 3
        assert len(bin_edges) == 11
        assert stats['mean'] == pytest.approx(2.4 / 3)
        assert stats['max'] == 1.0

    def test_empty(self):
        """Test statistics with no edges."""
        stats = analyze_edge_distribution(SimilarityGraph().snapshot(), num_bins=5)

        assert stats['num_edges'] == 0
        assert np.all(stats['hist'][0] == 0)


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
