"""Similarity scoring and gestalt field synthesis."""

from cognisig.energy.gestalt import (
    FieldComponent,
    GestaltField,
    SignatureEntropy,
    dimensional_complexity,
    field_coherence,
    field_energy,
    signature_entropy,
    synthesize_field,
)
from cognisig.energy.similarity import (
    edit_distance,
    prime_overlap,
    resonance,
    signature_distance,
    similarity,
    similarity_matrix,
)

__all__ = [
    "FieldComponent",
    "GestaltField",
    "SignatureEntropy",
    "dimensional_complexity",
    "field_coherence",
    "field_energy",
    "signature_entropy",
    "synthesize_field",
    "edit_distance",
    "prime_overlap",
    "resonance",
    "signature_distance",
    "similarity",
    "similarity_matrix",
]
