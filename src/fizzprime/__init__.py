from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("fizzprime")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .classify import TermReport, classify_term, run
from .config import has_profile, load_settings, read_current_profile
from .oracle import PrimalityOracle, Verdict, sqrt_bound
from .primetable import Bucket, OutOfCapacity, PrimeTable
from .runtime import APPLY, CFG
from .sequence import fibonacci_terms
from .workspace import workspace_dir

__all__ = [
    "APPLY",
    "CFG",
    "Bucket",
    "OutOfCapacity",
    "PrimalityOracle",
    "PrimeTable",
    "TermReport",
    "Verdict",
    "__version__",
    "classify_term",
    "fibonacci_terms",
    "has_profile",
    "load_settings",
    "read_current_profile",
    "run",
    "sqrt_bound",
    "workspace_dir",
]
