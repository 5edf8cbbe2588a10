# -----------------------------------------------------------------------------
#  Utility functions
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import shutil


class UserInputError(Exception):
    pass


def dec_digits(n: int) -> int:
    """Exact decimal digit count without str(); handles ints and gmpy2.mpz."""
    n = abs(n)
    if n == 0:
        return 1
    # lower/upper estimates via bit_length
    # floor(log10(n)) ~= floor(bitlen*log10(2))
    bl = n.bit_length()
    # 0.30102999566 ~ log10(2)
    est = int((bl * 30103) // 100000)
    # bring into correct decade with at most a couple of steps
    p10 = 10 ** est
    if n < p10:
        while n < p10:
            est -= 1
            p10 //= 10
    else:
        p10 *= 10
        while n >= p10:
            est += 1
            p10 *= 10
    return est + 1


def parse_term_count(text: str | int | None) -> int | None:
    """
    Parse the requested number of Fibonacci terms.

    None or 0 means "no limit" and returns None. Accepts decimal, 0x.. and 0o..
    spellings, like int(text, 0).
    """
    if text is None:
        return None
    if isinstance(text, int):
        value = text
    else:
        s = str(text).strip().replace("_", "")
        try:
            value = int(s, 0)
        except ValueError:
            raise UserInputError(f"Invalid input: '{text}' is not a term count.") from None
    if value < 0:
        raise UserInputError(f"Invalid input: term count must be >= 0, got {value}.")
    return value or None


def get_terminal_width(default=80):
    """
    Return the terminal's character width if detected, else the default
    value (80 by default).
    """
    try:
        return shutil.get_terminal_size().columns
    except Exception:
        return default


def validate_output_setting(output_file: str | None) -> str | None:
    """
    Validate output setting.
    - None / "" => ok (screen only)
    - path/to/file => must not be a directory, a forbidden base name or extension
    Returns the output_file, or raises ValueError.
    """
    FORBIDDEN_FILENAMES = {
        ".gitignore",
        "LICENSE",
        "pyproject.toml",
        # Windows reserved device names (case-insensitive on Windows)
        "con", "prn", "aux", "nul",
        "com1", "com2", "com3", "com4", "com5", "com6", "com7", "com8", "com9",
        "lpt1", "lpt2", "lpt3", "lpt4", "lpt5", "lpt6", "lpt7", "lpt8", "lpt9",
    }

    FORBIDDEN_EXTENSIONS = {".py", ".md", ".toml"}

    if not output_file:
        return output_file  # screen only

    if output_file in (".", "./") or output_file.endswith(("/", os.sep)):
        raise ValueError(f"Output must be a file, not a directory: {output_file}")

    basename = os.path.basename(output_file)
    name_no_ext, ext = os.path.splitext(basename)
    ext = ext.lower()

    # On Windows, device names are forbidden regardless of extension
    if basename.lower() in FORBIDDEN_FILENAMES or name_no_ext.lower() in FORBIDDEN_FILENAMES:
        raise ValueError(f"Forbidden output filename: {basename}")

    if ext in FORBIDDEN_EXTENSIONS:
        raise ValueError(f"Forbidden output file extension: {ext}")

    return output_file


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
