# tests/conftest.py
from __future__ import annotations

import textwrap
from pathlib import Path

import pytest

import athena
from athena import cli, runtime
from athena.registry import default_registry, load_registry


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path, monkeypatch):
    """Every test gets its own empty workspace and a fresh runtime."""
    ws = tmp_path / "athena-home"
    monkeypatch.setenv("ATHENA_HOME", str(ws))
    monkeypatch.delenv("ATHENA_DEV", raising=False)
    runtime.reset()
    default_registry.cache_clear()
    cli.clear_history()
    yield ws
    default_registry.cache_clear()
    runtime.reset()


@pytest.fixture(scope="session")
def registry():
    """The packaged numeral system table, loaded once."""
    return load_registry(Path(athena.__file__).parent / "data" / "systems.toml")


@pytest.fixture
def write_table(tmp_path):
    """Write a TOML system table and return its path."""
    def _write(body: str, name: str = "systems.toml"):
        p = tmp_path / name
        p.write_text(textwrap.dedent(body), encoding="utf-8")
        return p
    return _write
