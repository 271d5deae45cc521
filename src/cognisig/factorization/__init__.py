"""Prime factorization of tensor dimensions."""

from cognisig.factorization.cache import FactorizationCache
from cognisig.factorization.strategies import (
    COMMON_DIMENSIONS,
    PRECOMPUTED_FACTORS,
    is_prime,
    pollard_rho,
    trial_division,
    wheel_factorize,
)

__all__ = [
    "FactorizationCache",
    "COMMON_DIMENSIONS",
    "PRECOMPUTED_FACTORS",
    "is_prime",
    "pollard_rho",
    "trial_division",
    "wheel_factorize",
]
