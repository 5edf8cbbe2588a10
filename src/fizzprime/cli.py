# src/fizzprime/cli.py

"""
FizzPrime - FizzBuzz over the Fibonacci sequence, with primes

Description:
    Prints one line per Fibonacci term: "Fizz" if divisible by 5, "Buzz" if
    divisible by 3, "BuzzFizz" if prime, otherwise the term itself.

    Primality is decided with Miller-Rabin (gmpy2). With -d, probable primes
    are confirmed by trial division against a growing table of proven primes;
    when the table is full the run continues with probabilistic checks only.

usage: see fizzprime -h
"""

from __future__ import annotations

import argparse
import faulthandler
import os
import sys
import textwrap
import traceback
from dataclasses import dataclass

from colorama import Fore, Style
from colorama import deinit as colorama_deinit
from colorama import init as colorama_init

from fizzprime import __version__ as _ver
from fizzprime import config as CONFIG
from fizzprime.classify import run
from fizzprime.display import estimate_banner, render_term
from fizzprime.oracle import PrimalityOracle
from fizzprime.output_manager import OutputManager
from fizzprime.progress import Diagnostics
from fizzprime.runtime import APPLY, CFG, ensure_runtime_deps
from fizzprime.runtime import current as _rt_current
from fizzprime.runtime import reset as _rt_reset
from fizzprime.utility import (
    UserInputError,
    flatten_dotted,
    parse_term_count,
    typename,
    validate_output_setting,
)
from fizzprime.workspace import ensure_workspace_seeded, workspace_dir

COMMANDS = ("profiles", "where")


@dataclass
class RunOptions:
    n_terms: int | None
    deterministic: bool
    passes: int
    capacity: int
    digit_threshold: int
    zero_is_fib: bool
    suppress_small_primes: bool
    verbose: int
    output_file: str | None
    quiet: bool


def _install_loud_error_handlers(debug: bool) -> None:
    if not debug:
        return
    # Always show full Python tracebacks
    try:
        faulthandler.enable()
    except (OSError, ValueError):
        pass  # stderr has no file descriptor (redirected in-process)

    def _excepthook(exc_type, exc, tb):
        sys.stderr.write("\n[UNCAUGHT EXCEPTION]\n")
        traceback.print_exception(exc_type, exc, tb, file=sys.stderr)
        sys.stderr.flush()
    sys.excepthook = _excepthook


# ---- argparse ----
def _build_parser() -> argparse.ArgumentParser:

    epilog = textwrap.dedent("""\
    commands:
      profiles
          List the available profiles with their descriptions.

      where
          Show the workspace path (set FIZZPRIME_HOME to move it).
    """)

    p = argparse.ArgumentParser(
        prog="fizzprime",
        description="FizzBuzz over the Fibonacci sequence, with primes",
        usage=(
            "fizzprime [<n>] [-d] [-v] [-z] [-s3,5p] [--profile NAME] [--output FILE] [--quiet] [--debug]\n"
            "       fizzprime profiles | where\n"
            "       fizzprime -h | --help\n"
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=epilog,
    )
    p.add_argument("items", nargs="*", metavar="<n>",
                   help="consider only the first <n> Fibonacci numbers (default: run forever)")
    p.add_argument("-d", dest="deterministic", action="store_true",
                   help="use a deterministic prime number check")
    p.add_argument("-v", dest="verbose", action="count", default=0,
                   help="increase verbosity; may be given several times (-vv, -vvv)")
    p.add_argument("-z", dest="zero_is_fib", action="store_true",
                   help="use zero as the first Fibonacci number")
    p.add_argument("-s3,5p", "--suppress-small-primes", dest="suppress_small_primes", action="store_true",
                   help="suppress the report of 3 and 5 as primes")
    p.add_argument("--passes", type=int, default=None, help="Miller-Rabin rounds per candidate")
    p.add_argument("--capacity", type=int, default=None, help="maximum number of prime table buckets")
    p.add_argument("--digit-threshold", type=int, default=None,
                   help="decimal digits per prime table bucket product")
    p.add_argument("--profile", default=None, help="profile to load from the workspace")
    p.add_argument("--output", default=None, help="append results to a file (also prints unless --quiet)")
    p.add_argument("--quiet", action="store_true", help="do not print results to the screen")
    p.add_argument("--debug", action="store_true", help="show effective settings and full tracebacks")
    p.add_argument("--version", action="version", version=f"%(prog)s {_ver}")

    return p


def main(argv=None) -> int:
    """Thin wrapper: catch friendly errors, hide tracebacks unless debug."""
    colorama_init(autoreset=True)
    try:
        return _main_impl(argv)
    except UserInputError as e:
        Diagnostics().error(str(e))
        return 2
    except KeyboardInterrupt:
        print("Aborted by user.", file=sys.stderr)
        return 130
    except BrokenPipeError:
        # e.g. `fizzprime | head`; silence the flush at interpreter exit
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        return 0
    except Exception as e:
        debug = "--debug" in (argv if argv is not None else sys.argv)
        if debug:
            raise
        Diagnostics().error(f"unexpected {e.__class__.__name__}: {e}")
        print("Run with --debug for a full traceback.", file=sys.stderr)
        return 1
    finally:
        colorama_deinit()


def _select_profile_name(explicit: str | None) -> str:
    """
    Precedence:
      1) explicit --profile
      2) last used (from workspace)
      3) 'default'
    """
    if explicit:
        return explicit
    last = CONFIG.read_current_profile()
    if last and CONFIG.has_profile(last):
        return last
    return "default"


def _print_debug_settings(selected) -> None:
    print(f"[debug] active profile: {selected.name}", file=sys.stderr)
    src_path = getattr(selected, "_source", None)
    if src_path:
        print(f"[debug] profile file: {src_path}", file=sys.stderr)
    print("[debug] profile settings (key → value/type):", file=sys.stderr)
    flat = flatten_dotted(_rt_current().settings)
    for k in sorted(flat.keys(), key=str.lower):
        v = flat[k]
        print(f"        {k:.<40} {v!r} ({typename(v)})", file=sys.stderr)
    print(file=sys.stderr)


def _positive(value: int | None, name: str) -> int | None:
    if value is not None and value < 1:
        raise UserInputError(f"Invalid input: {name} must be >= 1, got {value}.")
    return value


def _resolve_options(args, n_terms: int | None) -> RunOptions:
    """Command-line flags override the active profile."""
    rt = _rt_current()
    passes = _positive(args.passes, "--passes")
    capacity = _positive(args.capacity, "--capacity")
    digit_threshold = _positive(args.digit_threshold, "--digit-threshold")

    try:
        output = validate_output_setting(args.output if args.output is not None
                                         else CFG("OUTPUT.OUTPUT_FILE", ""))
    except ValueError as e:
        raise UserInputError(f"--output: {e}") from None

    return RunOptions(
        n_terms=n_terms,
        deterministic=bool(args.deterministic or CFG("PRIMALITY.DETERMINISTIC", False)),
        passes=passes or int(CFG("PRIMALITY.PASSES", 50)),
        capacity=capacity or int(CFG("PRIME_TABLE.CAPACITY", 100_000)),
        digit_threshold=digit_threshold or int(CFG("PRIME_TABLE.DIGIT_THRESHOLD", 500)),
        zero_is_fib=bool(args.zero_is_fib or CFG("SEQUENCE.ZERO_IS_FIB", False)),
        suppress_small_primes=bool(args.suppress_small_primes or CFG("SEQUENCE.SUPPRESS_SMALL_PRIMES", False)),
        verbose=args.verbose or rt.verbose,
        output_file=output or None,
        quiet=args.quiet,
    )


def execute_request(opts: RunOptions, diag: Diagnostics) -> int:
    oracle = PrimalityOracle(
        deterministic=opts.deterministic,
        passes=opts.passes,
        capacity=opts.capacity,
        digit_threshold=opts.digit_threshold,
        diagnostics=diag,
    )
    om = OutputManager(output_file=opts.output_file, quiet=opts.quiet)
    try:
        if opts.verbose > 1 and opts.n_terms:
            om.write(estimate_banner(opts.n_terms, opts.zero_is_fib))
        for report in run(opts.n_terms, oracle, zero_is_fib=opts.zero_is_fib,
                          suppress_small_primes=opts.suppress_small_primes):
            om.write(render_term(report, opts.verbose))
    finally:
        om.close()
    diag.debug(f"{om.lines_written} line(s) written; deterministic={oracle.deterministic}, degraded={oracle.degraded}")
    return 0


# ---- main ----
def _main_impl(argv=None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    rt = _rt_reset()
    rt.debug = bool(args.debug)

    _install_loud_error_handlers(args.debug)

    if not ensure_runtime_deps(strict=True):
        return 1

    # Ensure a first-run workspace seed silently
    ensure_workspace_seeded()

    command = args.items[0] if args.items and args.items[0] in COMMANDS else None
    if command == "profiles":
        for name, desc in CONFIG.list_profiles_with_descriptions():
            print(f"{Fore.YELLOW}{name:<16}{Style.RESET_ALL} {desc}")
        return 0
    if command == "where":
        print(f"Workspace: {workspace_dir()}")
        return 0

    if len(args.items) > 1:
        parser.error(f"expected at most one term count, got: {' '.join(args.items)}")
    n_terms = parse_term_count(args.items[0] if args.items else None)

    # Choose profile: explicit → last-used → default
    profile_name = _select_profile_name(args.profile)
    if args.profile and not CONFIG.has_profile(args.profile):
        raise UserInputError(
            f"Unknown profile: '{args.profile}'. Available profiles: {', '.join(CONFIG.list_all_profiles())}"
        )

    selected = CONFIG.load_settings(profile_name) if CONFIG.has_profile(profile_name) else CONFIG.default_settings()
    APPLY(selected)
    rt.debug = rt.debug or bool(args.debug)
    if args.profile:
        CONFIG.write_current_profile(args.profile)

    if rt.debug:
        _print_debug_settings(selected)

    opts = _resolve_options(args, n_terms)
    diag = Diagnostics(opts.verbose, debug=rt.debug)
    diag.debug(f"options: {opts}")
    return execute_request(opts, diag)


if __name__ == "__main__":
    raise SystemExit(main())
