# tests/test_classify.py
"""
Tests for the Fibonacci terms, per-term classification and line rendering.

Run: pytest -v
"""

from __future__ import annotations

from itertools import islice

import pytest
from sympy import fibonacci, isprime

from fizzprime.classify import classify_term, run
from fizzprime.display import estimate_banner, estimate_largest_term, render_term
from fizzprime.oracle import PrimalityOracle, Verdict
from fizzprime.sequence import fibonacci_terms, take

# First 20 terms, default settings, no verbosity
EXPECTED_PLAIN = [
    "1", "1", "BuzzFizz", "Buzz BuzzFizz", "Fizz BuzzFizz",
    "8", "BuzzFizz", "Buzz", "34", "Fizz",
    "BuzzFizz", "Buzz", "BuzzFizz", "377", "Fizz",
    "Buzz", "BuzzFizz", "2584", "4181", "FizzBuzz",
]


def _lines(n_terms, oracle=None, *, verbose=0, **kw):
    oracle = oracle or PrimalityOracle()
    return [render_term(r, verbose) for r in run(n_terms, oracle, **kw)]


# ---------- sequence ----------------------------------------------------------


def test_fibonacci_terms_start_at_one():
    got = [(n, int(f)) for n, f in islice(fibonacci_terms(), 30)]
    assert got == [(k, int(fibonacci(k))) for k in range(1, 31)]


def test_fibonacci_terms_with_zero_first():
    got = [int(f) for _, f in islice(fibonacci_terms(zero_is_fib=True), 30)]
    assert got == [int(fibonacci(k)) for k in range(0, 30)]


@pytest.mark.parametrize("n_terms,expected", [(1, 1), (7, 7), (0, None), (None, None)], ids=str)
def test_take_bounds_the_sequence(n_terms, expected):
    terms = take(n_terms)
    if expected is None:
        assert len(list(islice(terms, 500))) == 500
    else:
        assert len(list(terms)) == expected


def test_large_terms_have_no_string_digit_limit():
    *_, (n, f) = take(25_000)
    assert n == 25_000
    assert len(str(f)) > 5000


# ---------- classification ----------------------------------------------------


def test_plain_output_for_first_twenty_terms():
    assert _lines(20) == EXPECTED_PLAIN


def test_deterministic_mode_gives_same_plain_output():
    assert _lines(20, PrimalityOracle(deterministic=True)) == EXPECTED_PLAIN


def test_multiples_of_three_and_five_never_reach_the_oracle(monkeypatch):
    oracle = PrimalityOracle()
    seen = []
    real = oracle.classify

    def spy(c):
        seen.append(int(c))
        return real(c)

    monkeypatch.setattr(oracle, "classify", spy)
    list(run(40, oracle))
    assert seen
    assert all(c % 3 and c % 5 and c >= 2 for c in seen)


@pytest.mark.parametrize("value", [0, 1], ids=str)
def test_zero_and_one_are_literal(value):
    report = classify_term(1, value, PrimalityOracle())
    assert report.verdict is None
    assert not report.is_prime


def test_small_primes_three_and_five():
    oracle = PrimalityOracle()
    three = classify_term(4, 3, oracle)
    assert three.buzz and three.small_prime and three.is_prime
    five = classify_term(5, 5, oracle, suppress_small_primes=True)
    assert five.fizz and not five.small_prime and not five.is_prime
    assert render_term(five) == "Fizz"


def test_primality_matches_sympy_over_many_terms():
    oracle = PrimalityOracle(deterministic=True)
    for report in run(45, oracle):
        assert report.is_prime == isprime(int(report.value)), report
        if report.verdict is not None and report.verdict.is_prime:
            assert report.verdict is Verdict.CONFIRMED_PRIME, report


# ---------- rendering ---------------------------------------------------------


@pytest.mark.parametrize(
    "deterministic,verbose,expected",
    [
        (False, 0, "BuzzFizz"),
        (False, 1, "F_11: BuzzFizz*"),
        (True, 1, "F_11: BuzzFizz"),
        (False, 2, "F_11: 89: BuzzFizz*"),
        (True, 3, "F_11: 89: BuzzFizz"),
    ],
    ids=["plain", "v-probable", "v-confirmed", "vv-probable", "vvv-confirmed"],
)
def test_render_prime_line(deterministic, verbose, expected):
    lines = _lines(11, PrimalityOracle(deterministic=deterministic), verbose=verbose)
    assert lines[-1] == expected


def test_render_with_zero_first():
    lines = _lines(7, verbose=1, zero_is_fib=True)
    assert lines[0] == "F_1: FizzBuzz"
    assert lines[4] == "F_5: Buzz BuzzFizz"
    assert lines[6] == "F_7: 8"


def test_render_suppressed_small_primes():
    assert _lines(5, suppress_small_primes=True)[3:] == ["Buzz", "Fizz"]


def test_composite_is_printed_literally():
    assert _lines(19, verbose=2)[-1] == "F_19: 4181: 4181"


# ---------- estimate ----------------------------------------------------------


def test_estimate_is_close_to_actual_term():
    approx, root = estimate_largest_term(60)
    actual = int(fibonacci(60))
    assert 0.5 < int(approx) / actual < 2
    assert abs(float(root) ** 2 - float(approx)) / float(approx) < 1e-9


def test_estimate_banner_format():
    banner = estimate_banner(10)
    first, second = banner.splitlines()
    assert first.startswith("approx(F_10) will be approximately: ")
    assert second.startswith("sqrt( approx(F_10) ) == ")
