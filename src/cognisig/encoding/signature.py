"""
Signature encoding: tensor shapes to deterministic symbolic fingerprints.

A shape (2, 12) becomes

    matrix_p2:c2*2*3

i.e. the category, an underscore, and one token per dimension joined by
colons. A dimension of 1 is "0", a prime p is "p<p>", a composite is
"c" followed by its prime factors joined by "*". The signature depends on
the shape alone, so two encodings share a signature iff their shapes are
equal (for a fixed set of grammar rules).
"""

import logging
import operator
import time
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Sequence, Tuple, Union

from cognisig.errors import InvalidInputError
from cognisig.factorization import FactorizationCache

logger = logging.getLogger(__name__)


class Category(str, Enum):
    """Rank-based shape category."""
    SCALAR = "scalar"
    VECTOR = "vector"
    MATRIX = "matrix"
    TENSOR = "tensor"

    @classmethod
    def from_rank(cls, rank: int) -> "Category":
        if rank == 0:
            return cls.SCALAR
        if rank == 1:
            return cls.VECTOR
        if rank == 2:
            return cls.MATRIX
        return cls.TENSOR


Classifier = Callable[[Tuple[int, ...]], Optional[str]]


@dataclass
class GrammarRule:
    """
    A named grammar rule.

    Rules without a classifier only describe a pattern. A rule with a
    classifier may relabel shapes: it receives the shape tuple and returns
    a category label, or None to leave the shape to later rules.

    Attributes:
        name: Unique rule name
        pattern: Human-readable pattern description
        cognitive_weight: Relative weight of shapes matching the rule
        interaction_range: Similarity radius associated with the rule
        classifier: Optional shape -> label override
    """
    name: str
    pattern: str = ""
    cognitive_weight: float = 1.0
    interaction_range: float = 0.0
    classifier: Optional[Classifier] = None

    def classify(self, shape: Tuple[int, ...]) -> Optional[str]:
        if self.classifier is None:
            return None
        label = self.classifier(shape)
        if label is None:
            return None
        label = str(label)
        return label or None


DEFAULT_GRAMMAR: Tuple[GrammarRule, ...] = (
    GrammarRule("scalar", "1", 1.0, 0.1),
    GrammarRule("vector", "N", 1.2, 0.2),
    GrammarRule("matrix", "NxM", 1.5, 0.3),
    GrammarRule("tensor", "NxMx...", 2.0, 0.4),
    GrammarRule("prime_simple", "p", 0.8, 0.15),
    GrammarRule("prime_composite", "p*q*...", 1.8, 0.35),
)


@dataclass(frozen=True)
class ShapeEncoding:
    """
    Immutable encoding of one tensor shape.

    Attributes:
        shape: Dimension sizes
        node_id: Opaque id of the node the shape was observed on
        factors: Prime factors per dimension, parallel to ``shape``
        kind: Rank-based category
        category: Effective category label (``kind`` unless a rule relabeled it)
        tokens: Per-dimension signature tokens
        signature: Full signature string
        encoded_at: Creation timestamp
    """
    shape: Tuple[int, ...]
    node_id: Any
    factors: Tuple[Tuple[int, ...], ...]
    kind: Category
    category: str
    tokens: Tuple[str, ...]
    signature: str
    encoded_at: float = field(default_factory=time.time, compare=False)

    @property
    def rank(self) -> int:
        return len(self.shape)

    @property
    def shape_key(self) -> str:
        """Shape rendered as "AxBxC"."""
        return "x".join(str(d) for d in self.shape)

    def with_node_id(self, node_id: Any) -> "ShapeEncoding":
        return replace(self, node_id=node_id)


def dimension_token(factors: Sequence[int]) -> str:
    """Signature token for one dimension's prime factors."""
    if len(factors) == 0:
        return "0"
    if len(factors) == 1:
        return f"p{factors[0]}"
    return "c" + "*".join(str(f) for f in factors)


def build_signature(category: str, factors: Iterable[Sequence[int]]) -> str:
    return f"{category}_" + ":".join(dimension_token(f) for f in factors)


class SignatureEncoder:
    """
    Converts shapes into ShapeEncodings.

    Holds the grammar rule table. Classifier rules are consulted in
    registration order and the first label returned wins; otherwise the
    rank-based category applies.
    """

    def __init__(self, cache: Optional[FactorizationCache] = None, strict: bool = False):
        """
        Args:
            cache: Factorization cache to use (a private one is created if None)
            strict: Raise InvalidInputError for invalid shapes
        """
        self.cache = cache if cache is not None else FactorizationCache()
        self.strict = strict
        self.grammar_rules: Dict[str, GrammarRule] = {
            rule.name: replace(rule) for rule in DEFAULT_GRAMMAR
        }

    def add_grammar_rule(self, name: str,
                         rule: Union[GrammarRule, Mapping, Classifier, None]) -> bool:
        """
        Register or replace a grammar rule.

        Args:
            name: Rule name
            rule: A GrammarRule, a mapping of GrammarRule fields, or a bare
                classifier callable

        Returns:
            bool: False if name or rule is missing, True otherwise
        """
        if not name or rule is None:
            return False

        if isinstance(rule, GrammarRule):
            rule = replace(rule, name=name)
        elif isinstance(rule, Mapping):
            fields = {k: v for k, v in rule.items() if k != 'name'}
            rule = GrammarRule(name=name, **fields)
        elif callable(rule):
            rule = GrammarRule(name=name, classifier=rule)
        else:
            raise TypeError(f"Unsupported grammar rule type: {type(rule).__name__}")

        self.grammar_rules[name] = rule
        logger.debug("Registered grammar rule %r", name)
        return True

    def categorize(self, shape: Sequence[int]) -> Tuple[Category, str]:
        """
        Category of a shape.

        Returns:
            Tuple of (rank-based kind, effective label)
        """
        shape = tuple(shape)
        kind = Category.from_rank(len(shape))
        for rule in self.grammar_rules.values():
            label = rule.classify(shape)
            if label is not None:
                return kind, label
        return kind, kind.value

    def encode(self, shape: Sequence[int], node_id: Any = None) -> Optional[ShapeEncoding]:
        """
        Encode a shape.

        Args:
            shape: Non-empty sequence of positive integers
            node_id: Opaque node identifier carried on the encoding

        Returns:
            ShapeEncoding, or None for an invalid shape outside strict mode

        Raises:
            InvalidInputError: For an invalid shape in strict mode
        """
        dims = self._validate(shape)
        if dims is None:
            return None

        factors = tuple(tuple(f) for f in self.cache.batch_factorize(dims))
        kind, category = self.categorize(dims)
        tokens = tuple(dimension_token(f) for f in factors)

        return ShapeEncoding(
            shape=dims,
            node_id=node_id,
            factors=factors,
            kind=kind,
            category=category,
            tokens=tokens,
            signature=build_signature(category, factors),
        )

    def _validate(self, shape) -> Optional[Tuple[int, ...]]:
        problem = None
        dims: List[int] = []
        if shape is None:
            problem = "shape is None"
        else:
            try:
                dims = [operator.index(d) for d in shape]
            except TypeError:
                problem = f"shape {shape!r} has non-integer dimensions"
            else:
                if not dims:
                    problem = "shape is empty"
                elif any(d <= 0 for d in dims):
                    problem = f"shape {tuple(dims)} has non-positive dimensions"

        if problem is None:
            return tuple(dims)
        if self.strict:
            raise InvalidInputError(problem)
        logger.warning("Cannot encode: %s", problem)
        return None

    def __repr__(self):
        return f"SignatureEncoder(rules={len(self.grammar_rules)}, cache={self.cache!r})"
