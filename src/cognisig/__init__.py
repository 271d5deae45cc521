"""
Cognisig: cognitive signatures for tensor shapes.

Turns integer tensor shapes into comparable symbolic fingerprints built from
the prime factorization of each dimension, scores pairwise similarity between
fingerprints, and incrementally grows a similarity graph that is clustered
into groups with summary statistics.

The pieces, leaves first:
- FactorizationCache: memoized prime factorization with several strategies
- SignatureEncoder: shape -> category + deterministic signature string
- similarity: weighted category/shape/prime-structure score in [0, 1]
- SimilarityGraph / ClusterEngine: thresholded edges and connected components
- synthesize_field: field energy, coherence and signature entropy

CognitiveKernel wires them together behind one injectable object.
"""

__version__ = "0.1.0"

from cognisig.config import KernelConfig
from cognisig.engine import CognitiveKernel

__all__ = ["CognitiveKernel", "KernelConfig"]
