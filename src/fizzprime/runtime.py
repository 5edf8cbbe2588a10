# runtime.py
from __future__ import annotations

from contextvars import ContextVar
from dataclasses import dataclass, field
from importlib.util import find_spec
from typing import Any

from colorama import Fore, Style

from fizzprime.progress import Diagnostics


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False  # controls tracebacks and [debug] lines
    verbose: int = 0     # 0 = plain output, 1+ = F_n prefixes and progress

    def apply(self, settings: Any) -> None:
        self.profile_name = (
            getattr(settings, "name", None)
            or getattr(settings, "_source", None)
            or "default"
        )

        self.settings = dict(settings.as_dict() if hasattr(settings, "as_dict") else settings)

        # sync runtime flags from profile
        dbg = self.get("BEHAVIOUR.DEBUG", None)
        if isinstance(dbg, bool):
            self.debug = dbg

        vb = self.get("BEHAVIOUR.VERBOSE", None)
        if isinstance(vb, int) and not isinstance(vb, bool):
            self.verbose = max(0, vb)

    def get(self, key: str, default: Any = None) -> Any:
        """Support dotted lookups, e.g., 'PRIME_TABLE.CAPACITY'."""
        if not key:
            return default
        cur = self.settings
        if isinstance(key, str) and "." in key:
            for part in key.split("."):
                if isinstance(cur, dict) and part in cur:
                    cur = cur[part]
                else:
                    return default
            return cur
        return cur.get(key, default)


# --- Context management ---

_current_runtime: ContextVar[Runtime | None] = ContextVar("fizzprime_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = Runtime()
        _current_runtime.set(rt)
    return rt


def reset() -> Runtime:
    """Install a fresh Runtime (used between CLI invocations and in tests)."""
    rt = Runtime()
    _current_runtime.set(rt)
    return rt


def APPLY(settings: Any) -> None:
    current().apply(settings)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)


# ---- Dependency check --------------------------------------------------------

def ensure_runtime_deps(strict: bool = True) -> bool:
    """
    Verify core runtime deps are available. Uses find_spec() to avoid importing
    inside this function.
    If strict=True, prints a friendly error and returns False when missing.
    """
    required = ("gmpy2",)
    missing = [name for name in required if find_spec(name) is None]

    if not missing:
        return True

    names = ", ".join(missing)
    Diagnostics().error(
        f"missing dependencies: {names}\n"
        f"Install with: {Fore.YELLOW}pip install {' '.join(missing)}{Style.RESET_ALL}"
    )
    return not strict
