# src/athena/dataio.py
from __future__ import annotations

import tomllib as _toml
from importlib.resources import as_file
from importlib.resources import files as pkg_files
from pathlib import Path

from athena.utility import SchemaError
from athena.workspace import workspace_dir


def _workspace() -> Path | None:
    """
    Returns the user workspace root (e.g., ~/Documents/Athena),
    or None if it cannot be resolved.
    """
    try:
        return workspace_dir()
    except (OSError, RuntimeError):
        return None


def data_path(rel: str) -> Path:
    """
    Resolve a data file path with override semantics:

      1) <Workspace>/data/<rel>  (if present)
      2) Packaged resource: athena/data/<rel>

    Returns a filesystem Path you can open.
    """
    rel = rel.lstrip("/\\")
    ws = _workspace()
    if ws:
        p = ws / "data" / rel
        if p.exists():
            return p

    ref = pkg_files("athena") / "data" / rel
    # materialize to a real path (needed for zip/egg resources)
    with as_file(ref) as real:
        return Path(real)


def load_system_table(path: Path) -> list[dict]:
    """
    Read the raw numeral-system table. Canonical format:

      [[systems]]
      id       = "roman"
      name     = "Roman Numerals"
      logic    = "additive"              # or "positional"
      base     = 10
      symbols  = [[1000, "M"], [900, "CM"], ...]   # additive: descending pairs
      max      = 3999                    # optional, additive only
      zero     = "Θ"                     # optional
      renderer = "latin"                 # opaque tag for the front end
      compose  = [[5, "—"], [1, "•"]]    # optional, positional digit strokes

    Only the container shape is checked here; field validation happens in
    the registry. Any problem reading the file is a SchemaError.
    """
    try:
        with path.open("rb") as f:
            doc = _toml.load(f)
    except FileNotFoundError:
        raise SchemaError(f"numeral system table not found: {path}") from None
    except _toml.TOMLDecodeError as e:
        raise SchemaError(f"reading {path.name}: {e}") from None

    raw = doc.get("systems")
    if not isinstance(raw, list) or not raw:
        raise SchemaError(f"{path.name}: expected a non-empty [[systems]] array")

    items: list[dict] = []
    for i, it in enumerate(raw):
        if not isinstance(it, dict):
            raise SchemaError(f"{path.name}: entry #{i + 1} is not a table")
        items.append(it)
    return items
