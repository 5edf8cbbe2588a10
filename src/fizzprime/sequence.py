# -----------------------------------------------------------------------------
#  sequence.py
#  Fibonacci term generation
# -----------------------------------------------------------------------------

from __future__ import annotations

from collections.abc import Iterator
from itertools import islice

from gmpy2 import mpz


def fibonacci_terms(*, zero_is_fib: bool = False) -> Iterator[tuple[int, mpz]]:
    """
    Yield (n, F) pairs with 1-based n, without end.

    Default:          (1, 1), (2, 1), (3, 2), (4, 3), ...
    zero_is_fib=True: (1, 0), (2, 1), (3, 1), (4, 2), ...
    """
    a, b = (mpz(0), mpz(1)) if zero_is_fib else (mpz(1), mpz(1))
    n = 1
    while True:
        yield n, a
        a, b = b, a + b
        n += 1


def take(n_terms: int | None, *, zero_is_fib: bool = False) -> Iterator[tuple[int, mpz]]:
    """First n_terms terms; None or 0 means unbounded."""
    terms = fibonacci_terms(zero_is_fib=zero_is_fib)
    return islice(terms, n_terms) if n_terms else terms
