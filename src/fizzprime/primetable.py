# -----------------------------------------------------------------------------
#  primetable.py
#  Bucketed table of proven primes for deterministic primality checks
# -----------------------------------------------------------------------------

from __future__ import annotations

import time
from dataclasses import dataclass
from math import prod

from gmpy2 import gcd, isqrt, mpz, next_prime

from fizzprime.fmt import abbr_int_fast, format_duration
from fizzprime.progress import Diagnostics

SEED_PRIMES = (2, 3, 5, 7, 11, 13)
DEFAULT_DIGIT_THRESHOLD = 500
DEFAULT_CAPACITY = 100_000


class OutOfCapacity(Exception):
    """The table would need more buckets than its capacity allows."""

    def __init__(self, capacity: int, bound: int, frontier: int):
        self.capacity = capacity
        self.bound = bound
        self.frontier = frontier
        super().__init__(
            f"prime table capacity of {capacity} bucket(s) reached at "
            f"{abbr_int_fast(frontier)}, short of {abbr_int_fast(bound)}"
        )


@dataclass(slots=True)
class Bucket:
    min: mpz          # smallest prime folded into this bucket
    product: mpz      # product of consecutive primes starting at min
    count: int = 1    # number of primes in product


def _is_small_prime(n: int) -> bool:
    """Plain trial division; only used for values at or below the frontier."""
    n = int(n)
    if n < 2:
        return False
    if n % 2 == 0:
        return n == 2
    return all(n % d for d in range(3, int(isqrt(n)) + 1, 2))


class PrimeTable:
    """
    Every prime up to the frontier, grouped into buckets.
    Each bucket stores the product of a run of consecutive primes, so a single
    gcd() against a candidate checks the whole run at once.

    Not safe for concurrent access: use it from one thread, or guard it with
    an external lock.
    """

    def __init__(self, *, capacity: int = DEFAULT_CAPACITY,
                 digit_threshold: int = DEFAULT_DIGIT_THRESHOLD,
                 diagnostics: Diagnostics | None = None):
        if capacity < 1:
            raise ValueError(f"capacity must be >= 1, got {capacity}")
        if digit_threshold < 1:
            raise ValueError(f"digit_threshold must be >= 1, got {digit_threshold}")
        self.capacity = int(capacity)
        self.digit_threshold = int(digit_threshold)
        self.diagnostics = diagnostics or Diagnostics()
        # products must stay below 10**digit_threshold
        self._product_limit = mpz(10) ** self.digit_threshold

        # The seed primes always share the first bucket, whatever the threshold.
        self.buckets: list[Bucket] = [
            Bucket(min=mpz(SEED_PRIMES[0]), product=mpz(prod(SEED_PRIMES)), count=len(SEED_PRIMES))
        ]
        self.frontier: mpz = mpz(SEED_PRIMES[-1])

    def __len__(self) -> int:
        return len(self.buckets)

    def __repr__(self) -> str:
        return (f"PrimeTable(buckets={len(self.buckets)}/{self.capacity}, "
                f"primes={self.prime_count}, frontier={abbr_int_fast(self.frontier)})")

    @property
    def prime_count(self) -> int:
        return sum(b.count for b in self.buckets)

    def covers(self, bound: int) -> bool:
        return self.frontier >= bound

    # --- Trial division ------------------------------------------------------

    def is_prime_witness(self, candidate: int) -> bool:
        """
        Return True if candidate has no prime factor up to isqrt(candidate).

        Only buckets whose min is within isqrt(candidate) + 1 are consulted.
        Raises ValueError if the frontier does not reach isqrt(candidate).
        """
        c = mpz(candidate)
        if c < 2:
            return False
        root = isqrt(c)
        if self.frontier < root:
            raise ValueError(
                f"table frontier {abbr_int_fast(self.frontier)} is below "
                f"isqrt(candidate) = {abbr_int_fast(root)}"
            )

        limit = root + 1
        for bucket in self.buckets:
            if bucket.min > limit:
                break
            g = gcd(c, bucket.product)
            if g == 1:
                continue
            if g != c:
                return False
            # c divides the product: it is a tabulated prime or a product of
            # several. An untabulated prime cannot divide, so c > frontier
            # means composite; otherwise c is small enough to check directly.
            return c <= self.frontier and _is_small_prime(c)
        return True

    # --- Growth --------------------------------------------------------------

    def _next_verified_prime(self) -> mpz:
        # next_prime() is probabilistic; every entry must be a proven prime
        p = next_prime(self.frontier)
        while not self.is_prime_witness(p):
            self.diagnostics.debug(f"next_prime() returned composite {abbr_int_fast(p)}; skipping")
            p = next_prime(p)
        return p

    def _fold(self, p: mpz, bound: int) -> None:
        last = self.buckets[-1]
        grown = last.product * p
        if grown < self._product_limit:
            last.product = grown
            last.count += 1
        else:
            if len(self.buckets) >= self.capacity:
                raise OutOfCapacity(self.capacity, bound, self.frontier)
            self.buckets.append(Bucket(min=p, product=p))
        self.frontier = p

    def extend_to(self, bound: int) -> None:
        """
        Grow the table until frontier >= bound.

        A no-op when the frontier already covers bound. Raises OutOfCapacity
        when a new bucket would exceed capacity; primes folded before that
        point stay in the table.
        """
        bound = mpz(bound)
        if self.covers(bound):
            return

        t0 = time.perf_counter()
        folded = 0
        try:
            while not self.covers(bound):
                self._fold(self._next_verified_prime(), bound)
                folded += 1
                self.diagnostics.progress("primes in table", self.prime_count)
        finally:
            if folded:
                self.diagnostics.progress("primes in table", self.prime_count, force=True)
                self.diagnostics.progress_done()
                self.diagnostics.debug(
                    f"prime table +{folded} primes in {format_duration(time.perf_counter() - t0)}: {self!r}"
                )
