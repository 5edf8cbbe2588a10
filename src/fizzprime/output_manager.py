# output_manager.py
from __future__ import annotations

import os

from fizzprime.fmt import strip_ansi
from fizzprime.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)
    if os.path.isabs(path):
        return os.path.normpath(path)
    return os.path.normpath(os.path.join(workspace_root, path))


class OutputManager:
    """
    Handles all printing/output, to screen and/or a file.

    Usage:
        om = OutputManager(output_file="runs/fib.txt")
        om.write("BuzzFizz")   # prints and appends to <workspace>/runs/fib.txt
        om.close()
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False):
        """
        Parameters:
            output_file:
                None or ""       => screen only
                path/to/file.txt => append all lines to this file
            quiet: if True, no output to screen (only to file)
        """
        self.quiet = quiet
        self.output_file = output_file or ""
        self.path: str | None = None
        self._fh = None
        self.lines_written = 0

        if self.output_file:
            path = resolve_output_path(self.output_file, str(workspace_dir()))
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self.path = path
            self._fh = open(path, "a", encoding="utf-8")  # noqa: SIM115 (closed in close())

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        if not self.quiet:
            print(text, end="", flush=True)
        if self._fh is not None:
            self._fh.write(strip_ansi(text))
        self.lines_written += 1

    def close(self) -> None:
        """Flush and close the output file, if any."""
        if self._fh is not None:
            self._fh.close()
            self._fh = None
