"""
Similarity metrics between shape encodings.

The weighted score is the sum of three terms, clamped to [0, 1]:

1. Category term: 0.4 if both encodings share a category label
2. Shape term (equal ranks only): 0.3 for the matching rank plus
   0.3 * (positions with equal dimension) / rank
3. Prime term (equal ranks only): 0.2 * mean over positions of
   |F_a ∩ F_b| / max(|F_a|, |F_b|), multiset intersection, 1.0 when both are empty

Identical shapes therefore saturate at 1.0. Scores are rounded to 12
decimal places so that threshold comparisons do not depend on the order
in which the terms were added.
"""

from collections import Counter
from typing import Optional, Sequence

import numpy as np

from cognisig.encoding import ShapeEncoding


CATEGORY_WEIGHT = 0.4
SHAPE_WEIGHT = 0.3
PRIME_WEIGHT = 0.2

_PRECISION = 12


def category_term(a: ShapeEncoding, b: ShapeEncoding) -> float:
    return CATEGORY_WEIGHT if a.category == b.category else 0.0


def shape_term(a: ShapeEncoding, b: ShapeEncoding) -> float:
    """Rank bonus plus fraction of positions with equal dimensions."""
    if a.rank != b.rank:
        return 0.0
    if a.rank == 0:
        return 2 * SHAPE_WEIGHT
    matches = sum(1 for x, y in zip(a.shape, b.shape) if x == y)
    return SHAPE_WEIGHT + SHAPE_WEIGHT * matches / a.rank


def prime_overlap(factors_a: Sequence[int], factors_b: Sequence[int]) -> float:
    """
    Fraction of shared prime factors between two dimensions.

    Args:
        factors_a: Prime factors of the first dimension
        factors_b: Prime factors of the second dimension

    Returns:
        float: Multiset intersection size over the longer list, in [0, 1]
    """
    longest = max(len(factors_a), len(factors_b))
    if longest == 0:
        return 1.0
    common = sum((Counter(factors_a) & Counter(factors_b)).values())
    return common / longest


def prime_term(a: ShapeEncoding, b: ShapeEncoding) -> float:
    if a.rank != b.rank or a.rank == 0:
        return 0.0
    overlaps = [prime_overlap(fa, fb) for fa, fb in zip(a.factors, b.factors)]
    return PRIME_WEIGHT * float(np.mean(overlaps))


def similarity(a: Optional[ShapeEncoding], b: Optional[ShapeEncoding]) -> float:
    """
    Weighted cognitive similarity between two encodings.

    Args:
        a: First encoding (None is allowed)
        b: Second encoding (None is allowed)

    Returns:
        float: Similarity in [0, 1]; 0.0 if either encoding is None
    """
    if a is None or b is None:
        return 0.0

    score = category_term(a, b) + shape_term(a, b) + prime_term(a, b)
    return round(min(1.0, max(0.0, score)), _PRECISION)


def resonance(a: Optional[ShapeEncoding], b: Optional[ShapeEncoding],
              resonance_factor: float = 1.2) -> float:
    """
    Similarity amplified by ``resonance_factor`` when categories agree.

    Unlike similarity, resonance is not clamped and may exceed 1.
    """
    score = similarity(a, b)
    if a is not None and b is not None and a.category == b.category:
        score *= resonance_factor
    return score


def edit_distance(s: str, t: str) -> int:
    """
    Levenshtein distance, computed one row at a time.

    Deletions and substitutions are vectorized; insertions are folded in
    with a running minimum over (row - j).
    """
    if len(s) < len(t):
        s, t = t, s
    if not t:
        return len(s)

    target = np.array(list(t))
    offsets = np.arange(len(t) + 1)
    previous = offsets.copy()

    for i, ch in enumerate(s, start=1):
        current = np.empty_like(previous)
        current[0] = i
        cost = (target != ch).astype(previous.dtype)
        current[1:] = np.minimum(previous[1:] + 1, previous[:-1] + cost)
        current = np.minimum.accumulate(current - offsets) + offsets
        previous = current

    return int(previous[-1])


def signature_distance(a: Optional[ShapeEncoding], b: Optional[ShapeEncoding]) -> float:
    """
    Normalized edit distance between two signature strings.

    Returns:
        float: 0.0 for identical signatures, 1.0 if either encoding is None
    """
    if a is None or b is None:
        return 1.0
    if a.signature == b.signature:
        return 0.0
    longest = max(len(a.signature), len(b.signature))
    return edit_distance(a.signature, b.signature) / longest


def similarity_matrix(encodings: Sequence[Optional[ShapeEncoding]]) -> np.ndarray:
    """
    Pairwise similarity for a list of encodings.

    Args:
        encodings: n encodings (None entries score 0 against everything)

    Returns:
        np.ndarray: Shape (n, n), symmetric, S_ii = 1 for non-null entries
    """
    n = len(encodings)
    S = np.zeros((n, n))
    for i in range(n):
        S[i, i] = similarity(encodings[i], encodings[i])
        for j in range(i + 1, n):
            S[i, j] = S[j, i] = similarity(encodings[i], encodings[j])
    return S
