# -----------------------------------------------------------------------------
#  oracle.py
#  Probabilistic primality with optional deterministic confirmation
# -----------------------------------------------------------------------------

from __future__ import annotations

from enum import Enum

from gmpy2 import is_prime, isqrt_rem, mpz

from fizzprime.fmt import abbr_int_fast
from fizzprime.primetable import (
    DEFAULT_CAPACITY,
    DEFAULT_DIGIT_THRESHOLD,
    SEED_PRIMES,
    OutOfCapacity,
    PrimeTable,
)
from fizzprime.progress import Diagnostics

# With 50 rounds P(composite reported as prime) <= 4**-50
DEFAULT_PASSES = 50


class Verdict(Enum):
    COMPOSITE = "composite"
    PROBABLE_PRIME = "probable prime"
    CONFIRMED_PRIME = "confirmed prime"

    @property
    def is_prime(self) -> bool:
        return self is not Verdict.COMPOSITE


def sqrt_bound(candidate: int) -> mpz:
    """
    Upper bound for the smallest prime factor of a composite candidate.

    Exact roots are returned as-is; otherwise the truncated root is raised
    by 2, which keeps its parity and is never below the true square root.
    """
    root, rem = isqrt_rem(mpz(candidate))
    return root if rem == 0 else root + 2


class PrimalityOracle:
    """
    Three-way primality classifier.

    Every candidate first goes through gmpy2.is_prime() with `passes`
    Miller-Rabin rounds. In deterministic mode, probable primes are then
    confirmed by trial division against a PrimeTable that grows to cover
    the candidate's square root.

    If the table runs out of capacity, deterministic mode is switched off
    for the lifetime of the oracle and the table is released.

    A ready-made `table` may be passed only together with deterministic=True.
    """

    def __init__(self, *, deterministic: bool = False, passes: int = DEFAULT_PASSES,
                 capacity: int = DEFAULT_CAPACITY, digit_threshold: int = DEFAULT_DIGIT_THRESHOLD,
                 diagnostics: Diagnostics | None = None, table: PrimeTable | None = None):
        if passes < 1:
            raise ValueError(f"passes must be >= 1, got {passes}")
        if table is not None and not deterministic:
            raise ValueError("a prime table was given but deterministic mode is off")
        self.passes = int(passes)
        self.diagnostics = diagnostics or Diagnostics()
        self.degraded = False
        if table is None and deterministic:
            table = PrimeTable(capacity=capacity, digit_threshold=digit_threshold,
                               diagnostics=self.diagnostics)
        self._table = table

    @property
    def deterministic(self) -> bool:
        return self._table is not None

    @property
    def table(self) -> PrimeTable | None:
        return self._table

    def _degrade(self, exc: OutOfCapacity) -> None:
        self._table = None
        self.degraded = True
        self.diagnostics.warn(
            f"{exc}; deterministic primality checks disabled, "
            f"continuing with {self.passes}-pass probabilistic checks."
        )

    def classify(self, candidate: int) -> Verdict:
        """
        Classify candidate (>= 2). Callers are expected to have filtered out
        multiples of 3 and 5; the verdict is correct either way.
        """
        c = mpz(candidate)
        if c < 2:
            raise ValueError(f"candidate must be >= 2, got {candidate}")
        if c in SEED_PRIMES:
            return Verdict.CONFIRMED_PRIME

        if not is_prime(c, self.passes):
            return Verdict.COMPOSITE

        table = self._table
        if table is None:
            return Verdict.PROBABLE_PRIME

        bound = sqrt_bound(c)
        if not table.covers(bound):
            try:
                table.extend_to(bound)
            except OutOfCapacity as e:
                self._degrade(e)
                return Verdict.PROBABLE_PRIME

        if table.is_prime_witness(c):
            return Verdict.CONFIRMED_PRIME

        self.diagnostics.info(
            1, f"{abbr_int_fast(c)} passed {self.passes} rounds but shares a factor with the prime table"
        )
        return Verdict.PROBABLE_PRIME
