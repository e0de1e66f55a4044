# src/athena/registry.py
from __future__ import annotations

from collections import OrderedDict
from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from functools import lru_cache
from pathlib import Path
from types import MappingProxyType
from typing import Any

from athena.dataio import data_path, load_system_table
from athena.utility import SchemaError, UnknownSystemError


class LogicType(str, Enum):
    POSITIONAL = "positional"
    ADDITIVE = "additive"


@dataclass(frozen=True)
class SystemDefinition:
    id: str
    name: str
    base: int
    logic: LogicType
    symbols: tuple[tuple[int, str], ...]    # positional: ascending digits; additive: descending values
    zero_glyph: str | None = None
    renderer: str = "plain"                 # opaque; interpreted by the front end only
    max_value: int | None = None            # additive cap, None = unbounded
    region: str = ""
    description: str = ""

    _by_value: Mapping[int, str] = field(init=False, repr=False, compare=False)
    _by_glyph: Mapping[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self):
        by_value = dict(self.symbols)
        by_glyph = {g: v for v, g in self.symbols}
        if self.zero_glyph is not None:
            by_glyph.setdefault(self.zero_glyph, 0)
        object.__setattr__(self, "_by_value", MappingProxyType(by_value))
        object.__setattr__(self, "_by_glyph", MappingProxyType(by_glyph))

    @property
    def is_positional(self) -> bool:
        return self.logic is LogicType.POSITIONAL

    @property
    def denominations(self) -> tuple[int, ...]:
        return tuple(v for v, _ in self.symbols)

    @property
    def glyphs(self) -> tuple[str, ...]:
        return tuple(g for _, g in self.symbols)

    def glyph(self, value: int) -> str:
        """Glyph for a digit (positional) or denomination (additive)."""
        return self._by_value[value]

    def value_of(self, glyph: str) -> int | None:
        return self._by_glyph.get(glyph)


@dataclass(frozen=True)
class Registry:
    systems: Mapping[str, SystemDefinition]   # id -> definition, table order
    source: Path | None = None

    def get(self, system_id: str) -> SystemDefinition:
        key = system_id.strip().lower() if isinstance(system_id, str) else system_id
        try:
            return self.systems[key]
        except (KeyError, TypeError):
            raise UnknownSystemError(system_id, self.ids()) from None

    def list(self) -> tuple[SystemDefinition, ...]:
        return tuple(self.systems.values())

    def ids(self) -> tuple[str, ...]:
        return tuple(self.systems)

    def __contains__(self, system_id: object) -> bool:
        return isinstance(system_id, str) and system_id.strip().lower() in self.systems

    def __len__(self) -> int:
        return len(self.systems)


# --------------------- Table → definitions (validated) ----------------------


def _is_int(x: Any) -> bool:
    return isinstance(x, int) and not isinstance(x, bool)


def _glyph(x: Any, where: str) -> str:
    if not isinstance(x, str) or not x:
        raise SchemaError(f"{where}: glyph must be a non-empty string, got {x!r}")
    return x


def _pairs(raw: Any, where: str) -> list[tuple[int, str]]:
    """Accept [[value, glyph], ...] or {value = glyph} and return (int, str) pairs."""
    items = raw.items() if isinstance(raw, dict) else raw
    if not isinstance(raw, (dict, list)):
        raise SchemaError(f"{where}: expected a table or a list of [value, glyph] pairs")
    out: list[tuple[int, str]] = []
    for item in items:
        if not isinstance(item, (list, tuple)) or len(item) != 2:  # noqa: PLR2004
            raise SchemaError(f"{where}: bad entry {item!r}")
        v, g = item
        if isinstance(v, str) and v.strip().isdigit():
            v = int(v)
        if not _is_int(v) or v < 0:
            raise SchemaError(f"{where}: value must be a non-negative integer, got {v!r}")
        out.append((v, _glyph(g, where)))
    return out


def _compose_digit(d: int, parts: list[tuple[int, str]]) -> str:
    out = []
    rest = d
    for value, stroke in parts:
        count, rest = divmod(rest, value)
        out.append(stroke * count)
    return "".join(out)


def _positional_symbols(raw: dict, sid: str, base: int, zero: str | None) -> tuple[tuple[int, str], ...]:
    where = f"system {sid!r}"
    explicit = dict(_pairs(raw.get("symbols", {}) or {}, f"{where} symbols"))
    for d in explicit:
        if d >= base:
            raise SchemaError(f"{where}: digit {d} outside 0..{base - 1}")

    compose = _pairs(raw.get("compose", []) or [], f"{where} compose")
    if compose:
        values = [v for v, _ in compose]
        if values != sorted(set(values), reverse=True) or values[-1] != 1:
            raise SchemaError(f"{where}: compose values must be strictly descending and end with 1")

    table: dict[int, str] = {}
    for d in range(base):
        if d in explicit:
            table[d] = explicit[d]
        elif d == 0 and zero is not None:
            table[d] = zero
        elif d > 0 and compose:
            table[d] = _compose_digit(d, compose)
        else:
            raise SchemaError(f"{where}: no glyph for digit {d}")

    seen: dict[str, int] = {}
    for d, g in table.items():
        if g in seen:
            raise SchemaError(f"{where}: digits {seen[g]} and {d} share glyph {g!r}")
        seen[g] = d
    return tuple(sorted(table.items()))


def _additive_symbols(raw: dict, sid: str) -> tuple[tuple[int, str], ...]:
    where = f"system {sid!r}"
    pairs = _pairs(raw.get("symbols", []) or [], f"{where} symbols")
    if not pairs:
        raise SchemaError(f"{where}: additive system needs symbols")
    values = [v for v, _ in pairs]
    if any(v <= 0 for v in values):
        raise SchemaError(f"{where}: additive values must be positive")
    if any(a <= b for a, b in zip(values, values[1:])):
        raise SchemaError(f"{where}: additive values must be strictly descending")
    if values[-1] != 1:
        # without a unit some remainders can never be decomposed
        raise SchemaError(f"{where}: additive values must end with 1")
    glyphs = [g for _, g in pairs]
    if len(set(glyphs)) != len(glyphs):
        raise SchemaError(f"{where}: duplicate glyphs")
    zero = raw.get("zero")
    if zero is not None and zero in glyphs:
        raise SchemaError(f"{where}: zero glyph {zero!r} also used for a value")
    return tuple(pairs)


def _build_system(raw: dict) -> SystemDefinition:
    sid = raw.get("id")
    if not isinstance(sid, str) or not sid.strip():
        raise SchemaError(f"system without a valid id: {raw!r}")
    sid = sid.strip().lower()
    where = f"system {sid!r}"

    try:
        logic = LogicType(str(raw.get("logic", "")).strip().lower())
    except ValueError:
        raise SchemaError(f"{where}: logic must be 'positional' or 'additive', got {raw.get('logic')!r}") from None

    base = raw.get("base", 10)
    if not _is_int(base) or base < (2 if logic is LogicType.POSITIONAL else 1):  # noqa: PLR2004
        raise SchemaError(f"{where}: bad base {base!r}")

    zero = raw.get("zero")
    if zero is not None:
        zero = _glyph(zero, f"{where} zero")

    max_value = raw.get("max")
    if max_value is not None and (not _is_int(max_value) or max_value <= 0):
        raise SchemaError(f"{where}: max must be a positive integer, got {max_value!r}")
    if max_value is not None and logic is LogicType.POSITIONAL:
        raise SchemaError(f"{where}: max applies to additive systems only")

    if logic is LogicType.POSITIONAL:
        symbols = _positional_symbols(raw, sid, base, zero)
    else:
        symbols = _additive_symbols(raw, sid)

    return SystemDefinition(
        id=sid,
        name=str(raw.get("name") or sid.title()),
        base=base,
        logic=logic,
        symbols=symbols,
        zero_glyph=zero,
        renderer=str(raw.get("renderer") or "plain"),
        max_value=max_value,
        region=str(raw.get("region") or ""),
        description=" ".join(str(raw.get("description") or "").split()),
    )


def load_registry(path: Path | None = None) -> Registry:
    """Read and validate a numeral-system table; any violation raises SchemaError."""
    src = path if path is not None else data_path("systems.toml")
    systems: OrderedDict[str, SystemDefinition] = OrderedDict()
    for raw in load_system_table(src):
        sysdef = _build_system(raw)
        if sysdef.id in systems:
            raise SchemaError(f"{src.name}: duplicate system id {sysdef.id!r}")
        systems[sysdef.id] = sysdef
    return Registry(systems=MappingProxyType(systems), source=src)


@lru_cache(maxsize=1)
def default_registry() -> Registry:
    """The process-wide registry, loaded on first use and never mutated."""
    return load_registry()


def get_system(system_id: str, registry: Registry | None = None) -> SystemDefinition:
    return (registry or default_registry()).get(system_id)


def list_systems(registry: Registry | None = None) -> tuple[SystemDefinition, ...]:
    return (registry or default_registry()).list()
