from __future__ import annotations

from gmpy2 import mpfr, mpz, sqrt

from fizzprime.classify import TermReport
from fizzprime.oracle import Verdict

FIZZ = "Fizz"
BUZZ = "Buzz"
PRIME = BUZZ + FIZZ
UNCONFIRMED_MARK = "*"


def render_term(report: TermReport, verbose: int = 0) -> str:
    """
    One output line (without newline) for a classified term.

      verbose >= 1: "F_<n>: " prefix, "*" after unconfirmed primes
      verbose >= 2: also "<value>: "
    """
    parts: list[str] = []
    if verbose > 0:
        parts.append(f"F_{report.n}: ")
    if verbose > 1:
        parts.append(f"{report.value}: ")

    # Fizz first, so a multiple of 15 reads FizzBuzz
    if report.fizz:
        parts.append(FIZZ)
    if report.buzz:
        parts.append(BUZZ)
    if report.small_prime:
        parts.append(f" {PRIME}")

    if not (report.fizz or report.buzz):
        if report.verdict is Verdict.CONFIRMED_PRIME:
            parts.append(PRIME)
        elif report.verdict is Verdict.PROBABLE_PRIME:
            parts.append(PRIME + (UNCONFIRMED_MARK if verbose else ""))
        else:
            parts.append(str(report.value))

    return "".join(parts)


def estimate_largest_term(n_terms: int, zero_is_fib: bool = False) -> tuple[mpz, mpfr]:
    """Rough size of the last term of a bounded run: (phi**(n-2), its square root)."""
    phi = (1 + sqrt(mpfr(5))) / 2
    approx = phi ** (n_terms - (2 + int(zero_is_fib)))
    return mpz(approx), sqrt(approx)


def estimate_banner(n_terms: int, zero_is_fib: bool = False) -> str:
    approx, root = estimate_largest_term(n_terms, zero_is_fib)
    return (
        f"approx(F_{n_terms}) will be approximately: {approx}.\n"
        f"sqrt( approx(F_{n_terms}) ) == {root:.6f}"
    )
