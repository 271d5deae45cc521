"""
KernelConfig - tunables for the cognitive signature kernel.
"""

from dataclasses import dataclass, asdict


@dataclass
class KernelConfig:
    """
    Configuration for factorization, graph construction and clustering.

    Attributes:
        cache_capacity: Maximum entries held by the dynamic factorization cache
        large_number_threshold: Inputs at or above this use cycle-detection factorization
        factorization_strategy: "trial" or "wheel" for inputs below the threshold
        use_precomputed: Consult the static table of common dimensions first
        edge_threshold: Similarity an edge must exceed to be stored
        cluster_threshold: Edge strength a link must exceed to join a cluster
        resonance_factor: Amplifier applied to same-category similarity
        dominant_signature_share: Minimum prevalence for a dominant signature
        strict: Raise on invalid input instead of returning empty results
    """

    # Factorization
    cache_capacity: int = 1000
    large_number_threshold: int = 1_000_000
    factorization_strategy: str = "trial"  # "trial", "wheel"
    use_precomputed: bool = True

    # Graph and clusters
    edge_threshold: float = 0.3
    cluster_threshold: float = 0.7
    resonance_factor: float = 1.2

    # Gestalt synthesis
    dominant_signature_share: float = 0.1

    strict: bool = False

    def __post_init__(self):
        """Validate configuration."""
        assert self.cache_capacity >= 0, "Cache capacity must be non-negative"
        assert self.large_number_threshold > 1, "Large number threshold must exceed 1"
        assert self.factorization_strategy in ["trial", "wheel"], \
            f"Unknown factorization strategy: {self.factorization_strategy}"
        assert 0.0 <= self.edge_threshold < 1.0, "Edge threshold must be in [0, 1)"
        assert self.edge_threshold < self.cluster_threshold <= 1.0, \
            "Cluster threshold must be strictly greater than edge threshold"
        assert self.resonance_factor > 0, "Resonance factor must be positive"
        assert 0.0 <= self.dominant_signature_share <= 1.0, \
            "Dominant signature share must be in [0, 1]"

    def to_dict(self) -> dict:
        return asdict(self)
