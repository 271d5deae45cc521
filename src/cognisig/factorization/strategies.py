"""
Factorization strategies for tensor dimensions.

All strategies return the prime factors of n in non-decreasing order, with
multiplicity, so that their product equals n. Inputs n <= 1 factor to [].

Bounds are computed with math.isqrt and refreshed after every extracted
factor; no floating point square roots are involved.
"""

import math
from typing import Dict, List, Tuple


LARGE_NUMBER_THRESHOLD = 1_000_000

# Bases for Miller-Rabin; deterministic for n < 3.3e24
_WITNESSES = (2, 3, 5, 7, 11, 13, 17, 19, 23, 29, 31, 37)

# Gaps between candidates coprime to 30, starting from 7
_WHEEL_30_GAPS = (4, 2, 4, 2, 4, 6, 2, 6)


def trial_division(n: int) -> List[int]:
    """
    Optimized trial division.

    Strips the factor 2, then tests odd candidates from 3 upward while
    candidate <= isqrt(remaining). Whatever remains above 1 is prime.

    Args:
        n: Integer to factorize

    Returns:
        List[int]: Prime factors in ascending order
    """
    factors = []
    if n <= 1:
        return factors

    while n % 2 == 0:
        factors.append(2)
        n //= 2

    candidate = 3
    bound = math.isqrt(n)
    while candidate <= bound:
        while n % candidate == 0:
            factors.append(candidate)
            n //= candidate
            bound = math.isqrt(n)  # remaining shrank
        candidate += 2

    if n > 1:
        factors.append(n)

    return factors


def wheel_factorize(n: int) -> List[int]:
    """
    Wheel factorization over the 2*3*5 wheel.

    After removing 2, 3 and 5, only candidates coprime to 30 are tested,
    which skips roughly 73% of the integers trial division would visit.
    """
    factors = []
    if n <= 1:
        return factors

    for p in (2, 3, 5):
        while n % p == 0:
            factors.append(p)
            n //= p

    candidate = 7
    position = 0
    bound = math.isqrt(n)
    while candidate <= bound:
        while n % candidate == 0:
            factors.append(candidate)
            n //= candidate
            bound = math.isqrt(n)
        candidate += _WHEEL_30_GAPS[position]
        position = (position + 1) % len(_WHEEL_30_GAPS)

    if n > 1:
        factors.append(n)

    return factors


def is_prime(n: int) -> bool:
    """Miller-Rabin primality test with fixed witnesses."""
    if n < 2:
        return False
    for p in _WITNESSES:
        if n % p == 0:
            return n == p

    d, s = n - 1, 0
    while d % 2 == 0:
        d //= 2
        s += 1

    for a in _WITNESSES:
        x = pow(a, d, n)
        if x == 1 or x == n - 1:
            continue
        for _ in range(s - 1):
            x = x * x % n
            if x == n - 1:
                break
        else:
            return False
    return True


def pollard_rho(n: int, threshold: int = LARGE_NUMBER_THRESHOLD) -> List[int]:
    """
    Cycle-detection factorization for large inputs.

    Iterates x <- x^2 + 1 mod n with y moving twice as fast and takes
    d = gcd(|x - y|, n). A proper divisor splits n and both halves are
    factorized recursively; d == n means the walk failed and trial division
    takes over. Inputs below ``threshold`` go straight to trial division.

    Args:
        n: Integer to factorize
        threshold: Smallest input handled by the cycle walk

    Returns:
        List[int]: Prime factors in ascending order
    """
    if n <= 1:
        return []
    if n < threshold:
        return trial_division(n)
    if is_prime(n):
        return [n]
    if n % 2 == 0:
        twos = []
        while n % 2 == 0:
            twos.append(2)
            n //= 2
        return twos + pollard_rho(n, threshold)

    x = y = 2
    d = 1
    while d == 1:
        x = (x * x + 1) % n
        y = (y * y + 1) % n
        y = (y * y + 1) % n
        d = math.gcd(abs(x - y), n)

    if d == n:
        return trial_division(n)

    return sorted(pollard_rho(d, threshold) + pollard_rho(n // d, threshold))


# Powers of two up to 2^12 plus dimensions that keep showing up in models:
# image sides, channel counts, batch sizes, conv feature map sizes.
COMMON_DIMENSIONS = tuple(sorted(set(
    [2 ** k for k in range(13)] +
    [3, 5, 6, 7, 9, 10, 12, 14, 15, 18, 20, 21, 24, 25, 27, 28, 30, 36, 40,
     42, 48, 49, 50, 54, 56, 60, 72, 81, 84, 96, 100, 108, 112, 120, 144,
     192, 224, 299, 331, 384, 448, 640, 768, 896, 1280, 1536, 1920]
)))

PRECOMPUTED_FACTORS: Dict[int, Tuple[int, ...]] = {
    n: tuple(trial_division(n)) for n in COMMON_DIMENSIONS
}
