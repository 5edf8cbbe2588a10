# tests/test_config.py
"""
Tests for profiles, the runtime settings store and small utilities.

Run: pytest -v
"""

from __future__ import annotations

import io

import pytest

import fizzprime.runtime as runtime_mod
from fizzprime import config as CONFIG
from fizzprime.fmt import abbr_int_fast, format_duration, strip_ansi
from fizzprime.progress import Diagnostics
from fizzprime.runtime import APPLY, CFG
from fizzprime.runtime import current as rt_current
from fizzprime.utility import (
    UserInputError,
    dec_digits,
    flatten_dotted,
    parse_term_count,
    validate_output_setting,
)

# ---------- profiles ----------------------------------------------------------


def _write_profile(workspace, name, text):
    (workspace / "profiles" / f"{name}.toml").write_text(text, encoding="utf-8")


def test_packaged_profiles_are_seeded(workspace):
    assert CONFIG.list_all_profiles() == ["default", "deterministic", "tiny-table"]
    descs = dict(CONFIG.list_profiles_with_descriptions())
    assert "probabilistic" in descs["default"].lower()


def test_default_profile_values():
    s = CONFIG.load_settings("default")
    assert s.name == "default"
    assert s.data["PRIMALITY"] == {"PASSES": 50, "DETERMINISTIC": False}
    assert s.data["PRIME_TABLE"] == {"DIGIT_THRESHOLD": 500, "CAPACITY": 100_000}
    assert "_PROFILE_" not in s.data


def test_partial_profile_is_merged_over_defaults(workspace):
    _write_profile(workspace, "mine", "[PRIMALITY]\nDETERMINISTIC = true\n")
    s = CONFIG.load_settings("mine")
    assert s.name == "mine"
    assert s.description == "(no description)"
    assert s.data["PRIMALITY"]["DETERMINISTIC"] is True
    assert s.data["PRIMALITY"]["PASSES"] == 50
    assert s.data["PRIME_TABLE"]["CAPACITY"] == 100_000


@pytest.mark.parametrize(
    "text,needle",
    [
        ("[PRIMALITY]\nPASSES = 'many'\n", "must be an integer"),
        ("[PRIMALITY]\nPASSES = 0\n", "must be >= 1"),
        ("[PRIMALITY]\nDETERMINISTIC = 1\n", "true or false"),
        ("[PRIME_TABLE]\nCAPACITY = true\n", "must be an integer"),
        ("[OUTPUT]\nOUTPUT_FILE = 3\n", "must be a string"),
        ("PRIMALITY = 3\n", "must be a table"),
        ("[PRIMALITY\n", "line 1"),
    ],
    ids=["str-int", "zero", "int-bool", "bool-int", "int-str", "not-table", "syntax"],
)
def test_invalid_profiles_raise_user_errors(workspace, text, needle):
    _write_profile(workspace, "bad", text)
    with pytest.raises(UserInputError) as exc:
        CONFIG.load_settings("bad")
    assert needle in str(exc.value)


def test_missing_profile():
    assert not CONFIG.has_profile("nope")
    with pytest.raises(UserInputError):
        CONFIG.load_settings("nope")


def test_current_profile_roundtrip():
    assert CONFIG.read_current_profile() is None
    CONFIG.write_current_profile("deterministic.toml")
    assert CONFIG.read_current_profile() == "deterministic"


# ---------- runtime -----------------------------------------------------------


def test_apply_and_dotted_lookup():
    APPLY(CONFIG.load_settings("deterministic"))
    rt = rt_current()
    assert rt.profile_name == "deterministic"
    assert rt.verbose == 1
    assert CFG("PRIMALITY.DETERMINISTIC") is True
    assert CFG("PRIME_TABLE.CAPACITY") == 100_000
    assert CFG("PRIME_TABLE.MISSING", "x") == "x"
    assert CFG("", 7) == 7


def test_apply_plain_dict():
    APPLY({"BEHAVIOUR": {"DEBUG": True, "VERBOSE": 2}})
    assert rt_current().debug is True
    assert rt_current().verbose == 2


def test_apply_keeps_its_own_copy():
    data = {"PRIMALITY": {"PASSES": 9}}
    APPLY(data)
    data["SEQUENCE"] = {"ZERO_IS_FIB": True}
    assert CFG("PRIMALITY.PASSES") == 9
    assert CFG("SEQUENCE.ZERO_IS_FIB") is None


def test_missing_dependency_is_reported_as_error(monkeypatch, capsys):
    monkeypatch.setattr(runtime_mod, "find_spec", lambda name: None)
    assert runtime_mod.ensure_runtime_deps(strict=True) is False
    assert runtime_mod.ensure_runtime_deps(strict=False) is True
    err = capsys.readouterr().err
    assert "Error:" in err
    assert "missing dependencies: gmpy2" in err


# ---------- diagnostics -------------------------------------------------------


def test_diagnostics_levels():
    out = io.StringIO()
    diag = Diagnostics(verbose=1, stream=out)
    diag.info(1, "shown")
    diag.info(2, "hidden")
    diag.debug("hidden too")
    diag.warn("careful")
    diag.error("broken")
    text = strip_ansi(out.getvalue())
    assert text.splitlines() == ["shown", "Warning: careful", "Error: broken"]


# ---------- utilities ---------------------------------------------------------


@pytest.mark.parametrize("n", [0, 1, 9, 10, 99, 100, 10**50 - 1, 10**50, 2**4000], ids=lambda n: str(n)[:12])
def test_dec_digits(n):
    assert dec_digits(n) == len(str(n))


@pytest.mark.parametrize(
    "text,expected",
    [(None, None), ("0", None), ("12", 12), ("0x10", 16), ("1_000", 1000), (5, 5)],
    ids=str,
)
def test_parse_term_count(text, expected):
    assert parse_term_count(text) == expected


@pytest.mark.parametrize("text", ["-1", "twelve", "1.5"], ids=str)
def test_parse_term_count_rejects(text):
    with pytest.raises(UserInputError):
        parse_term_count(text)


@pytest.mark.parametrize("target", ["out.txt", "runs/fib.log", "", None], ids=str)
def test_validate_output_accepts(target):
    assert validate_output_setting(target) == target


@pytest.mark.parametrize("target", ["x.py", "NOTES.MD", "nul", "runs/", ".", "pyproject.toml"], ids=str)
def test_validate_output_rejects(target):
    with pytest.raises(ValueError):
        validate_output_setting(target)


def test_flatten_dotted():
    assert flatten_dotted({"A": {"B": 1, "C": {"D": 2}}, "E": 3}) == {"A.B": 1, "A.C.D": 2, "E": 3}


def test_formatting_helpers():
    assert abbr_int_fast(12345) == "12345"
    assert abbr_int_fast(10**40 + 7) == "1000000000…0000000007"
    assert strip_ansi("\x1b[31mError:\x1b[0m x") == "Error: x"
    assert format_duration(0.25) == "250 ms"
    assert format_duration(75.5) == "1:15.500"
