"""Shape categories and signature encoding."""

from cognisig.encoding.signature import (
    DEFAULT_GRAMMAR,
    Category,
    GrammarRule,
    ShapeEncoding,
    SignatureEncoder,
    build_signature,
    dimension_token,
)

__all__ = [
    "DEFAULT_GRAMMAR",
    "Category",
    "GrammarRule",
    "ShapeEncoding",
    "SignatureEncoder",
    "build_signature",
    "dimension_token",
]
