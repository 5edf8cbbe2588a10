# src/fizzprime/progress.py
from __future__ import annotations

import sys
import time
from typing import TextIO

from colorama import Fore, Style

from fizzprime.utility import get_terminal_width


class Progress:
    """In-place `\\r` counter line, throttled to avoid flicker."""

    def __init__(self, *, stream: TextIO | None = None, enabled: bool = True, throttle: float = 0.05):
        self.stream = stream
        self.enabled = enabled
        self.throttle = throttle
        self.last_draw = 0.0
        self.drawn = False
        self.spin = "|/-\\"
        self.i = 0

    def update(self, label: str, count: int, *, force: bool = False):
        if not self.enabled:
            return
        now = time.perf_counter()
        if not force and now - self.last_draw < self.throttle:
            return
        self.last_draw = now
        self.i = (self.i + 1) % len(self.spin)
        msg = f"\r[{self.spin[self.i]}] {label}: {count}"
        out = self.stream or sys.stderr
        out.write(msg[: max(20, get_terminal_width() - 1)])
        out.flush()
        self.drawn = True

    def done(self):
        if not self.enabled or not self.drawn:
            return
        out = self.stream or sys.stderr
        out.write("\n")
        out.flush()
        self.drawn = False


class Diagnostics:
    """
    Verbosity-gated, human-readable diagnostics on stderr.

    Nothing written here influences control flow; callers may pass
    Diagnostics(verbose=0) to silence everything except warnings and errors.
    """

    def __init__(self, verbose: int = 0, *, stream: TextIO | None = None, debug: bool = False):
        self.verbose = verbose
        self.debug_enabled = debug
        self._stream = stream
        self._progress = Progress(stream=stream, enabled=verbose > 0)

    @property
    def stream(self) -> TextIO:
        # resolved lazily so pytest's capsys sees the redirected stderr
        return self._stream or sys.stderr

    def _emit(self, msg: str) -> None:
        self._progress.done()
        print(msg, file=self.stream, flush=True)

    def info(self, level: int, msg: str) -> None:
        if self.verbose >= level:
            self._emit(msg)

    def warn(self, msg: str) -> None:
        self._emit(f"{Fore.YELLOW}Warning:{Style.RESET_ALL} {msg}")

    def error(self, msg: str) -> None:
        self._emit(f"{Fore.RED}Error:{Style.RESET_ALL} {msg}")

    def debug(self, msg: str) -> None:
        if self.debug_enabled:
            self._emit(f"[debug] {msg}")

    def progress(self, label: str, count: int, *, force: bool = False) -> None:
        self._progress.update(label, count, force=force)

    def progress_done(self) -> None:
        self._progress.done()
