"""
Gestalt field synthesis: global summaries over active nodes.

For the nodes that carry an encoding:

    complexity(shape) = Π_d ln(d + 1)
    E_field = Σ activity_i * complexity(shape_i)

Field coherence is exp(-Var(activity)) over every supplied node, so equal
activity gives coherence 1. Signature entropy is the Shannon entropy of
the signature distribution divided by ln(number of components). Nodes
without an encoding are not components: they count toward coherence but
not toward the entropy denominator. Entropy is 0 for a single component or
a single signature.
"""

import math
import time
from collections import Counter
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional, Sequence, Tuple

import numpy as np

from cognisig.encoding import ShapeEncoding


@dataclass
class FieldComponent:
    """One node's contribution to the field."""
    node_id: Any
    shape: Tuple[int, ...]
    activity: float
    signature: str


@dataclass
class SignatureEntropy:
    """
    Diversity of signatures across the field.

    Attributes:
        entropy: Raw Shannon entropy (nats)
        normalized_entropy: entropy / ln(total), in [0, 1]
        signature_diversity: Number of distinct signatures
        dominant_signatures: (signature, count, prevalence) for signatures at or
            above the dominance share, most prevalent first
    """
    entropy: float = 0.0
    normalized_entropy: float = 0.0
    signature_diversity: int = 0
    dominant_signatures: List[Tuple[str, int, float]] = field(default_factory=list)


@dataclass
class GestaltField:
    """
    Snapshot of the gestalt field.

    Attributes:
        components: Contributing nodes in insertion order
        energy: Total field energy
        coherence: exp(-variance of activities)
        entropy: Signature entropy summary
        dimensional_summary: Rank distribution, shape frequencies, component count
        synthesized_at: Timestamp of synthesis
    """
    components: List[FieldComponent]
    energy: float
    coherence: float
    entropy: SignatureEntropy
    dimensional_summary: Dict[str, Any]
    synthesized_at: float = field(default_factory=time.time)

    @property
    def normalized_entropy(self) -> float:
        return self.entropy.normalized_entropy

    def __len__(self):
        return len(self.components)


def dimensional_complexity(shape: Sequence[int]) -> float:
    """Product of ln(d + 1) over the dimensions."""
    return float(np.prod([math.log(d + 1) for d in shape]))


def field_energy(components: Iterable[FieldComponent]) -> float:
    return float(sum(c.activity * dimensional_complexity(c.shape) for c in components))


def field_coherence(activities: Sequence[float]) -> float:
    """
    exp(-variance) of the activity levels.

    Returns:
        float: Coherence in (0, 1]; 0.0 for no activities
    """
    if len(activities) == 0:
        return 0.0
    return float(np.exp(-np.var(np.asarray(activities, dtype=float))))


def signature_entropy(signatures: Sequence[str], dominant_share: float = 0.1) -> SignatureEntropy:
    """
    Normalized Shannon entropy of a list of signatures.

    Args:
        signatures: One signature per component
        dominant_share: Minimum prevalence for a signature to count as dominant

    Returns:
        SignatureEntropy summary
    """
    total = len(signatures)
    if total == 0:
        return SignatureEntropy()

    counts = Counter(signatures)
    probs = np.array(list(counts.values()), dtype=float) / total
    entropy = float(-np.sum(probs * np.log(probs)))

    if total > 1 and len(counts) > 1:
        normalized = entropy / math.log(total)
    else:
        normalized = 0.0

    dominant = [
        (sig, count, count / total)
        for sig, count in counts.items()
        if count >= total * dominant_share
    ]
    # Stable sort keeps first-seen order among equal counts
    dominant.sort(key=lambda item: item[1], reverse=True)

    return SignatureEntropy(
        entropy=entropy,
        normalized_entropy=normalized,
        signature_diversity=len(counts),
        dominant_signatures=dominant,
    )


def summarize_dimensions(components: Sequence[FieldComponent]) -> Dict[str, Any]:
    rank_counts = Counter(len(c.shape) for c in components)
    shape_counts = Counter("x".join(str(d) for d in c.shape) for c in components)
    return {
        'dimension_distribution': dict(rank_counts),
        'shape_frequencies': dict(shape_counts),
        'total_components': len(components),
    }


def synthesize_field(nodes: Iterable[Tuple[Any, Optional[ShapeEncoding], float]],
                     dominant_share: float = 0.1) -> Optional[GestaltField]:
    """
    Synthesize the gestalt field for a set of nodes.

    Args:
        nodes: (node_id, encoding, activity) triples; encoding may be None
        dominant_share: Prevalence threshold for dominant signatures

    Returns:
        GestaltField, or None when no node carries an encoding
    """
    activities = []
    components = []
    for node_id, encoding, activity in nodes:
        activities.append(float(activity))
        if encoding is not None:
            components.append(FieldComponent(
                node_id=node_id,
                shape=encoding.shape,
                activity=float(activity),
                signature=encoding.signature,
            ))

    if not components:
        return None

    return GestaltField(
        components=components,
        energy=field_energy(components),
        coherence=field_coherence(activities),
        entropy=signature_entropy([c.signature for c in components], dominant_share),
        dimensional_summary=summarize_dimensions(components),
    )
