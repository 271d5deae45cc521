"""
Unit tests for gestalt field synthesis.

Verifies field energy, coherence and signature entropy formulas.
"""

import math

import numpy as np
import pytest
from cognisig.encoding import SignatureEncoder
from cognisig.energy.gestalt import (
    dimensional_complexity,
    field_coherence,
    signature_entropy,
    synthesize_field,
)


@pytest.fixture
def encode():
    return SignatureEncoder().encode


class TestFieldEnergy:
    """Test field energy."""

    def test_dimensional_complexity(self):
        """Test product of ln(d + 1)."""
        assert dimensional_complexity([2, 3]) == pytest.approx(math.log(3) * math.log(4))
        assert dimensional_complexity([1]) == pytest.approx(math.log(2))

    def test_energy(self, encode):
        """Test activity-weighted complexity sum."""
        field = synthesize_field([
            ("a", encode([2, 3]), 2.0),
            ("b", encode([7]), 0.5),
        ])

        expected = 2.0 * math.log(3) * math.log(4) + 0.5 * math.log(8)
        assert field.energy == pytest.approx(expected)

    def test_zero_activity_contributes_nothing(self, encode):
        """Test that inactive nodes add no energy."""
        field = synthesize_field([("a", encode([64, 64]), 0.0)])

        assert field.energy == 0.0


class TestFieldCoherence:
    """Test field coherence."""

    def test_equal_activity(self, encode):
        """Test that two equally active nodes are fully coherent."""
        field = synthesize_field([
            ("a", encode([2, 3]), 0.8),
            ("b", encode([5]), 0.8),
        ])

        assert field.coherence == 1.0

    def test_variance(self):
        """Test exp(-variance)."""
        assert field_coherence([0.0, 2.0]) == pytest.approx(math.exp(-1.0))
        assert field_coherence([1.0]) == 1.0
        assert field_coherence([]) == 0.0

    def test_null_encodings_count_toward_coherence(self, encode):
        """Test that nodes without encodings still add their activity."""
        field = synthesize_field([
            ("a", encode([2]), 1.0),
            ("b", None, 3.0),
        ])

        assert len(field) == 1
        assert field.coherence == pytest.approx(math.exp(-1.0))


class TestSignatureEntropy:
    """Test signature entropy."""

    def test_all_distinct(self):
        """Test maximal entropy for distinct signatures."""
        summary = signature_entropy(["a", "b", "c", "d"])

        assert summary.normalized_entropy == pytest.approx(1.0)
        assert summary.entropy == pytest.approx(math.log(4))
        assert summary.signature_diversity == 4

    def test_single_signature(self):
        """Test zero entropy when one signature dominates entirely."""
        summary = signature_entropy(["a", "a", "a"])

        assert summary.entropy == 0.0
        assert summary.normalized_entropy == 0.0
        assert summary.dominant_signatures == [("a", 3, 1.0)]

    def test_single_node(self):
        """Test that one node has zero entropy."""
        assert signature_entropy(["a"]).normalized_entropy == 0.0

    def test_empty(self):
        """Test that no signatures give an empty summary."""
        assert signature_entropy([]).signature_diversity == 0

    def test_mixed(self):
        """Test a two-to-one split."""
        summary = signature_entropy(["a", "b", "a"])
        p = np.array([2 / 3, 1 / 3])
        entropy = -np.sum(p * np.log(p))

        assert summary.entropy == pytest.approx(entropy)
        assert summary.normalized_entropy == pytest.approx(entropy / math.log(3))

    def test_dominant_share(self):
        """Test the dominance threshold."""
        signatures = ["a"] * 9 + ["b"]

        assert [s for s, _, _ in signature_entropy(signatures, 0.1).dominant_signatures] == ["a", "b"]
        assert [s for s, _, _ in signature_entropy(signatures, 0.2).dominant_signatures] == ["a"]


class TestSynthesizeField:
    """Test full field synthesis."""

    def test_entropy_ignores_unencoded_nodes(self, encode):
        """Test that nodes without encodings stay out of the entropy denominator."""
        field = synthesize_field([
            ("a", encode([2, 3]), 1.0),
            ("b", encode([7]), 1.0),
            ("c", None, 1.0),
        ])

        assert field.normalized_entropy == pytest.approx(1.0)

    def test_no_encodings(self):
        """Test that a field without encoded nodes is None."""
        assert synthesize_field([]) is None
        assert synthesize_field([("a", None, 1.0)]) is None

    def test_components_and_summary(self, encode):
        """Test components and dimensional summary."""
        field = synthesize_field([
            ("a", encode([2, 3]), 1.0),
            ("b", encode([2, 3]), 1.0),
            ("c", encode([7]), 1.0),
        ])

        assert [c.node_id for c in field.components] == ["a", "b", "c"]
        assert field.components[0].signature == "matrix_p2:p3"
        assert field.dimensional_summary == {
            'dimension_distribution': {2: 2, 1: 1},
            'shape_frequencies': {"2x3": 2, "7": 1},
            'total_components': 3,
        }
        assert field.entropy.signature_diversity == 2
        assert 0.0 < field.normalized_entropy < 1.0


if __name__ == '__main__':
    pytest.main([__file__, '-v'])
