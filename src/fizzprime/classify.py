from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass

from gmpy2 import mpz

from fizzprime.oracle import PrimalityOracle, Verdict
from fizzprime.sequence import take

# 3 and 5 are Fibonacci numbers, primes, and divisible by 3 and 5
SMALL_FIB_PRIMES = (3, 5)


# ---------- Data models -------------------------------------------------------

@dataclass(frozen=True)
class TermReport:
    n: int
    value: mpz
    fizz: bool                       # divisible by 5
    buzz: bool                       # divisible by 3
    verdict: Verdict | None = None   # None unless the oracle was consulted
    small_prime: bool = False        # 3 or 5, reported as prime as well

    @property
    def is_prime(self) -> bool:
        return self.small_prime or (self.verdict is not None and self.verdict.is_prime)


# ---------- Classification ----------------------------------------------------

def classify_term(n: int, value: int, oracle: PrimalityOracle, *,
                  suppress_small_primes: bool = False) -> TermReport:
    """
    Divisibility first; only terms not divisible by 3 or 5 reach the oracle.
    0 and 1 are neither prime nor composite and are reported literally.
    """
    v = mpz(value)
    fizz = v % 5 == 0
    buzz = v % 3 == 0

    if fizz or buzz:
        small = (not suppress_small_primes) and v in SMALL_FIB_PRIMES
        return TermReport(n=n, value=v, fizz=fizz, buzz=buzz, small_prime=small)

    if v < 2:
        return TermReport(n=n, value=v, fizz=False, buzz=False)

    return TermReport(n=n, value=v, fizz=False, buzz=False, verdict=oracle.classify(v))


def run(n_terms: int | None, oracle: PrimalityOracle, *, zero_is_fib: bool = False,
        suppress_small_primes: bool = False) -> Iterator[TermReport]:
    """Classify the first n_terms Fibonacci terms (None means no limit)."""
    for n, value in take(n_terms, zero_is_fib=zero_is_fib):
        yield classify_term(n, value, oracle, suppress_small_primes=suppress_small_primes)
