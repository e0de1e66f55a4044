# workspace.py
# The user's workspace: ~/Documents/Athena, or $ATHENA_HOME, with profiles/ and data/
from __future__ import annotations

import os
from collections.abc import Iterator
from fnmatch import fnmatch
from importlib.resources import files as pkg_files
from importlib.resources.abc import Traversable
from pathlib import Path

PROFILES = "profiles"
DATA = "data"
SUBDIRS = (PROFILES, DATA)

# Packaged files that belong in each workspace folder
_PACKAGED = {PROFILES: "*.toml", DATA: "systems.toml"}


def workspace_dir() -> Path:
    home = os.environ.get("ATHENA_HOME")
    base = Path(home).expanduser() if home else Path.home() / "Documents" / "Athena"
    return base.resolve()


def _packaged(sub: str) -> Iterator[Traversable]:
    folder = pkg_files("athena").joinpath(sub)
    if not folder.is_dir():
        return
    for entry in folder.iterdir():
        if entry.is_file() and fnmatch(entry.name, _PACKAGED[sub]):
            yield entry


def seed_workspace(*, overwrite: bool = False, subsets: set[str] | None = None) -> tuple[Path, dict[str, int]]:
    """
    Create the workspace folders and copy packaged files into them.

    subsets defaults to {"profiles"}: a workspace data/systems.toml replaces the
    packaged numeral table, so it is only copied when asked for.
    overwrite=True replaces files that already exist (developer use, guarded in the CLI).

    Returns (workspace_path, {folder: files_copied}).
    """
    root = workspace_dir()
    wanted = subsets or {PROFILES}
    copied = dict.fromkeys(SUBDIRS, 0)

    for sub in SUBDIRS:
        folder = root / sub
        folder.mkdir(parents=True, exist_ok=True)
        if sub not in wanted:
            continue
        for entry in _packaged(sub):
            target = folder / entry.name
            if target.exists() and not overwrite:
                continue
            target.write_bytes(entry.read_bytes())
            copied[sub] += 1

    return root, copied


def ensure_workspace_seeded() -> tuple[Path, bool, dict[str, int]]:
    """Copy-if-missing seeding run at every start. Returns (root, anything_copied, counts)."""
    root, copied = seed_workspace()
    return root, any(copied.values()), copied
