# config.py
# Profiles are TOML files in <workspace>/profiles: a [PROFILE] table with the
# name and description, then the settings sections read through runtime.CFG.
from __future__ import annotations

import tomllib
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from athena.runtime import validate_settings
from athena.utility import UserInputError
from athena.workspace import PROFILES, ensure_workspace_seeded, workspace_dir

DEFAULT_PROFILE = "default"
NO_DESCRIPTION = "(no description)"
_CURRENT = ".current"  # last profile switched to, one name per file


@dataclass(frozen=True)
class Profile:
    name: str
    description: str
    data: dict[str, Any] = field(default_factory=dict)
    source: Path | None = None

    def as_dict(self) -> dict[str, Any]:
        return self.data


def profiles_dir() -> Path:
    return workspace_dir() / PROFILES


def _stem(name: str | None) -> str:
    nm = (name or "").strip()
    return nm[:-5] if nm.lower().endswith(".toml") else nm


def _path(name: str | None) -> Path:
    return profiles_dir() / f"{_stem(name)}.toml"


def _read(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise UserInputError(f"{path.name} is not valid TOML: {e}") from None


def _metadata(raw: dict[str, Any], path: Path) -> tuple[str, str]:
    """Remove [PROFILE] from `raw`; return (name, one-line description)."""
    meta = raw.pop("PROFILE", None)
    if not isinstance(meta, dict):
        meta = {}
    name = str(meta.get("name") or path.stem).strip()
    description = " ".join(str(meta.get("description") or "").split())
    return name, description or NO_DESCRIPTION


def has_profile(name: str | None) -> bool:
    return bool(_stem(name)) and _path(name).is_file()


def profile_names() -> list[str]:
    """File stems of all profiles; seeds the packaged ones on first use."""
    ensure_workspace_seeded()
    return sorted(p.stem for p in profiles_dir().glob("*.toml"))


def profile_catalog() -> list[tuple[str, str]]:
    """(name, description) for every profile. A broken file is listed by its file name."""
    rows: list[tuple[str, str]] = []
    for stem in profile_names():
        path = _path(stem)
        try:
            rows.append(_metadata(_read(path), path))
        except (UserInputError, OSError):
            rows.append((stem, NO_DESCRIPTION))
    return sorted(rows, key=lambda r: r[0].lower())


def load_profile(name: str | None = None) -> Profile:
    """
    Read and check a profile. Raises FileNotFoundError when it does not exist and
    UserInputError for invalid TOML or a setting of the wrong type.
    """
    path = _path(name or DEFAULT_PROFILE)
    if not path.is_file():
        raise FileNotFoundError(f"profile '{path.stem}' not found at {path}")
    raw = _read(path)
    pname, description = _metadata(raw, path)
    return Profile(pname, description, validate_settings(raw, path.name), path)


def last_profile() -> str | None:
    try:
        return _stem((profiles_dir() / _CURRENT).read_text(encoding="utf-8")) or None
    except OSError:
        return None


def remember_profile(name: str) -> None:
    folder = profiles_dir()
    folder.mkdir(parents=True, exist_ok=True)
    (folder / _CURRENT).write_text(_stem(name), encoding="utf-8")
