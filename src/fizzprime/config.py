from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Any

try:
    import tomllib as toml
except Exception:
    import tomli as toml  # type: ignore

from fizzprime.utility import UserInputError
from fizzprime.workspace import ensure_workspace_seeded, workspace_dir

# Built-in values used when a profile omits a key.
DEFAULTS: dict[str, dict[str, Any]] = {
    "PRIMALITY": {"PASSES": 50, "DETERMINISTIC": False},
    "PRIME_TABLE": {"DIGIT_THRESHOLD": 500, "CAPACITY": 100_000},
    "SEQUENCE": {"ZERO_IS_FIB": False, "SUPPRESS_SMALL_PRIMES": False},
    "OUTPUT": {"OUTPUT_FILE": ""},
    "BEHAVIOUR": {"DEBUG": False, "VERBOSE": 0},
}

# (section, key) -> minimum accepted value for integer settings
_INT_MINIMUMS = {
    ("PRIMALITY", "PASSES"): 1,
    ("PRIME_TABLE", "DIGIT_THRESHOLD"): 1,
    ("PRIME_TABLE", "CAPACITY"): 1,
    ("BEHAVIOUR", "VERBOSE"): 0,
}


@dataclass
class Settings:
    """
    Wrap the full TOML dict (without the [_PROFILE_] section), merged over DEFAULTS.
    .as_dict() feeds runtime.apply().
    """
    data: dict[str, Any]
    name: str
    description: str
    _source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


# --- Paths -----------------------------------------------------------------

def _profiles_dir() -> Path:
    return workspace_dir() / "profiles"


def _profile_path(name: str) -> Path:
    return _profiles_dir() / f"{name}.toml"


# --- I/O -------------------------------------------------------------------


def _load_toml(path: Path) -> dict[str, object]:
    try:
        with path.open("rb") as f:
            return toml.load(f)
    except Exception as e:
        lineno = getattr(e, "lineno", None)
        colno = getattr(e, "colno", None)
        msg = getattr(e, "msg", str(e))
        where = []
        if lineno is not None:
            where.append(f"line {lineno}")
        if colno is not None:
            where.append(f"column {colno}")
        loc = f" (at {', '.join(where)})" if where else ""
        # No traceback chaining
        raise UserInputError(f"reading {path.name}: {msg}{loc}.") from None


# --- Metadata handling -----------------------------------------------------


def _sanitize_oneline(s: str) -> str:
    return " ".join(str(s).split()) or "(no description)"


def _split_profile_data(raw: dict[str, Any], fallback_name: str) -> tuple[dict[str, Any], str, str]:
    """
    Extract [_PROFILE_] meta (name, description) and return:
      (settings_without_profile, resolved_name, resolved_description)
    """
    meta = raw.get("_PROFILE_") or {}
    raw = {k: v for k, v in raw.items() if k != "_PROFILE_"}

    name = str(meta.get("name") or fallback_name)
    description = _sanitize_oneline(str(meta.get("description") or ""))

    return raw, name, description


def _merge_defaults(data: dict[str, Any], source: str) -> dict[str, Any]:
    """Overlay profile sections on DEFAULTS and type-check the known keys."""
    merged: dict[str, Any] = {}
    for section, keys in DEFAULTS.items():
        given = data.get(section) or {}
        if not isinstance(given, dict):
            raise UserInputError(f"{source}: [{section}] must be a table.")
        sect = dict(keys)
        for key, value in given.items():
            default = keys.get(key)
            if isinstance(default, bool):
                if not isinstance(value, bool):
                    raise UserInputError(f"{source}: {section}.{key} must be true or false, got {value!r}.")
            elif isinstance(default, int):
                if isinstance(value, bool) or not isinstance(value, int):
                    raise UserInputError(f"{source}: {section}.{key} must be an integer, got {value!r}.")
                minimum = _INT_MINIMUMS.get((section, key))
                if minimum is not None and value < minimum:
                    raise UserInputError(f"{source}: {section}.{key} must be >= {minimum}, got {value}.")
            elif isinstance(default, str) and not isinstance(value, str):
                raise UserInputError(f"{source}: {section}.{key} must be a string, got {value!r}.")
            sect[key] = value
        merged[section] = sect

    # Unknown sections are kept as-is (type-preserving from TOML)
    for section, value in data.items():
        merged.setdefault(section, value)
    return merged


# --- Public API ------------------------------------------------------------


def default_settings() -> Settings:
    """Settings built only from DEFAULTS (no profile file)."""
    return Settings(data=_merge_defaults({}, "defaults"), name="default", description="built-in defaults")


def list_all_profiles() -> list[str]:
    """
    Return the list of available profile *names* (filename stems).
    """
    ensure_workspace_seeded()
    pdir = _profiles_dir()
    if not pdir.exists():
        return []
    return sorted(p.stem for p in pdir.glob("*.toml"))


def list_profiles_with_descriptions() -> list[tuple[str, str]]:
    """
    Return [(name, description), ...] for all profiles.
    Profiles lacking [_PROFILE_] get "(no description)".
    """
    items: list[tuple[str, str]] = []
    for p in _profiles_dir().glob("*.toml"):
        try:
            raw = _load_toml(p)
            _, nm, desc = _split_profile_data(raw, p.stem)
            items.append((nm, desc))
        except UserInputError:
            # Best-effort listing; fall back to filename
            items.append((p.stem, "(no description)"))
    return sorted(items, key=lambda t: t[0].lower())


def has_profile(name: str) -> bool:
    return _profile_path(name).exists()


def load_settings(name: str | None) -> Settings:
    """
    Load a profile by name (default 'default'), strip the [_PROFILE_] metadata,
    merge it over DEFAULTS and return
    Settings(data=..., name=..., description=..., _source=path).
    """
    if not name:
        name = "default"

    path = _profile_path(name)
    if not path.exists():
        raise UserInputError(f"Profile '{name}' not found at {path}")

    raw = _load_toml(path)

    # Pull out metadata (name/description) and remove [_PROFILE_] from settings
    data, resolved_name, description = _split_profile_data(raw, path.stem)

    return Settings(
        data=_merge_defaults(data, path.name),
        name=resolved_name,
        description=description,
        _source=path,
    )


def _current_profile_path() -> Path:
    p = _profiles_dir()
    p.mkdir(parents=True, exist_ok=True)
    return p / ".current"


def read_current_profile() -> str | None:
    try:
        s = _current_profile_path().read_text(encoding="utf-8").strip()
    except OSError:
        return None
    return s[:-5] if s.lower().endswith(".toml") else (s or None)


def write_current_profile(name: str) -> None:
    nm = (name or "").strip()
    if nm.lower().endswith(".toml"):
        nm = nm[:-5]
    _current_profile_path().write_text(nm, encoding="utf-8")
