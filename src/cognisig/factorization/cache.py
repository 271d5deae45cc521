"""
Factorization Cache: memoized prime factorization of tensor dimensions.

Lookups go through three tiers: the static table of common dimensions, a
bounded dynamic cache, and finally one of the factorization strategies.
A full cache is not an error; new results are simply not stored.
"""

import logging
import operator
import threading
from typing import Dict, Iterable, List, Optional, Tuple

from cognisig.errors import InvalidInputError
from cognisig.factorization.strategies import (
    COMMON_DIMENSIONS,
    LARGE_NUMBER_THRESHOLD,
    PRECOMPUTED_FACTORS,
    pollard_rho,
    trial_division,
    wheel_factorize,
)

logger = logging.getLogger(__name__)

_STRATEGIES = {
    'trial': trial_division,
    'wheel': wheel_factorize,
}


class FactorizationCache:
    """
    Owned, injectable factorization cache.

    Attributes:
        capacity (int): Maximum number of dynamic entries
        large_number_threshold (int): Inputs at or above use cycle detection
        strategy (str): Name of the strategy used below the threshold
        use_precomputed (bool): Whether the static table is consulted
        strict (bool): Raise InvalidInputError for negative inputs
    """

    def __init__(self, capacity: int = 1000,
                 large_number_threshold: int = LARGE_NUMBER_THRESHOLD,
                 strategy: str = 'trial', use_precomputed: bool = True,
                 strict: bool = False):
        """
        Initialize an empty cache.

        Args:
            capacity: Maximum number of dynamic entries (default 1000)
            large_number_threshold: Cycle-detection cutoff (default 10^6)
            strategy: "trial" or "wheel"
            use_precomputed: Consult the static table first
            strict: Raise on negative inputs instead of returning []
        """
        if strategy not in _STRATEGIES:
            raise ValueError(f"Unknown strategy: {strategy}. Choose from {sorted(_STRATEGIES)}")

        self.capacity = capacity
        self.large_number_threshold = large_number_threshold
        self.strategy = strategy
        self.use_precomputed = use_precomputed
        self.strict = strict

        self._table: Dict[int, Tuple[int, ...]] = {}
        self._lock = threading.RLock()
        self._hits = 0
        self._misses = 0
        self._precomputed_hits = 0

    def factorize(self, n: int) -> List[int]:
        """
        Prime factors of n in non-decreasing order.

        Args:
            n: Non-negative integer

        Returns:
            List[int]: Factors whose product is n; [] for n <= 1

        Raises:
            InvalidInputError: For negative n in strict mode
        """
        n = operator.index(n)
        if n < 0:
            if self.strict:
                raise InvalidInputError(f"Cannot factorize negative integer {n}")
            logger.warning("Ignoring negative integer %d", n)
            return []
        if n <= 1:
            return []

        if self.use_precomputed and n in PRECOMPUTED_FACTORS:
            with self._lock:
                self._precomputed_hits += 1
            return list(PRECOMPUTED_FACTORS[n])

        with self._lock:
            cached = self._table.get(n)
            if cached is not None:
                self._hits += 1
                return list(cached)
            self._misses += 1

        factors = tuple(self._compute(n))
        logger.debug("Factorized %d -> %s", n, factors)

        with self._lock:
            if n not in self._table and len(self._table) < self.capacity:
                self._table[n] = factors

        return list(factors)

    def _compute(self, n: int) -> List[int]:
        if n >= self.large_number_threshold:
            return pollard_rho(n, self.large_number_threshold)
        return _STRATEGIES[self.strategy](n)

    def batch_factorize(self, numbers: Iterable[int]) -> List[List[int]]:
        """
        Factorize several integers, preserving the caller's order.

        Numbers are processed in ascending order so that repeated and
        neighbouring values hit the cache back to back.

        Args:
            numbers: Sequence of non-negative integers

        Returns:
            List of factor lists, same length and order as ``numbers``
        """
        numbers = list(numbers)
        results: List[Optional[List[int]]] = [None] * len(numbers)

        for idx in sorted(range(len(numbers)), key=lambda i: numbers[i]):
            results[idx] = self.factorize(numbers[idx])

        return results

    def precompute_common_dimensions(self) -> int:
        """
        Warm the dynamic cache with the common tensor dimensions.

        Returns:
            int: Number of entries added
        """
        added = 0
        with self._lock:
            for n in COMMON_DIMENSIONS:
                if n <= 1 or n in self._table:
                    continue
                if len(self._table) >= self.capacity:
                    break
                self._table[n] = PRECOMPUTED_FACTORS[n]
                added += 1
        logger.debug("Precomputed %d common dimensions", added)
        return added

    def clear(self):
        """Drop every dynamic entry and reset the counters."""
        with self._lock:
            self._table = {}
            self._hits = 0
            self._misses = 0
            self._precomputed_hits = 0

    def stats(self) -> Dict:
        """
        Cache statistics.

        Returns:
            dict: size, capacity, hits, misses, precomputed_hits, hit_ratio
        """
        with self._lock:
            lookups = self._hits + self._misses + self._precomputed_hits
            hits = self._hits + self._precomputed_hits
            return {
                'size': len(self._table),
                'capacity': self.capacity,
                'hits': self._hits,
                'misses': self._misses,
                'precomputed_hits': self._precomputed_hits,
                'hit_ratio': hits / lookups if lookups > 0 else 0.0,
            }

    def __contains__(self, n) -> bool:
        with self._lock:
            return n in self._table

    def __len__(self):
        with self._lock:
            return len(self._table)

    def __repr__(self):
        return f"FactorizationCache(size={len(self)}, capacity={self.capacity}, strategy={self.strategy!r})"
