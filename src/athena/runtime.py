# runtime.py
# Settings of the running session. Profiles are checked against KEY_TYPES when
# applied, so CFG("SECTION.KEY") always returns a value of the documented type.
from __future__ import annotations

from collections.abc import Callable, Mapping
from contextvars import ContextVar
from dataclasses import dataclass, field
from typing import Any

from athena.utility import UserInputError

PUZZLE_KINDS = ("decode", "sequence")
MAX_OPTIONS = 10  # answer options are lettered a) .. j)


def _flag(v: Any) -> bool:
    if isinstance(v, bool):
        return v
    raise ValueError("true or false")


def _whole(lo: int, hi: int | None = None) -> Callable[[Any], int]:
    def check(v: Any) -> int:
        if isinstance(v, bool) or not isinstance(v, int) or v < lo or (hi is not None and v > hi):
            raise ValueError(f"an integer in {lo}..{hi}" if hi is not None else f"an integer ≥ {lo}")
        return v
    return check


def _text(v: Any) -> str:
    if isinstance(v, str):
        return v.strip()
    raise ValueError("a string")


def _system_id(v: Any) -> str:
    s = _text(v).lower()
    if not s:
        raise ValueError("a numeral system id, e.g. \"roman\"")
    return s


def _puzzle_kind(v: Any) -> str:
    s = _text(v).lower()
    if s not in PUZZLE_KINDS:
        raise ValueError(" or ".join(f'"{k}"' for k in PUZZLE_KINDS))
    return s


def _levels(v: Any) -> dict[str, dict[str, int]]:
    if not isinstance(v, Mapping):
        raise ValueError("a table of [PUZZLE.LEVELS.<NAME>] ranges")
    out: dict[str, dict[str, int]] = {}
    for name, bounds in v.items():
        lo = bounds.get("MIN") if isinstance(bounds, Mapping) else None
        hi = bounds.get("MAX") if isinstance(bounds, Mapping) else None
        try:
            lo, hi = _whole(0)(lo), _whole(0)(hi)
        except ValueError:
            raise ValueError(f"integer MIN and MAX for level {name!r}") from None
        if lo > hi:
            raise ValueError(f"MIN ≤ MAX for level {name!r}")
        out[str(name).strip().upper()] = {"MIN": lo, "MAX": hi}
    return out


# Every setting Athena reads, with its check. Unknown keys are kept as written.
KEY_TYPES: dict[str, Callable[[Any], Any]] = {
    "BEHAVIOUR.DEFAULT_SYSTEM": _system_id,
    "BEHAVIOUR.MAX_VALUE": _whole(0),
    "BEHAVIOUR.DEBUG": _flag,
    "PUZZLE.KIND": _puzzle_kind,
    "PUZZLE.REVEAL_COUNT": _whole(1),
    "PUZZLE.DISTRACTORS": _whole(0, MAX_OPTIONS - 1),
    "PUZZLE.LEVELS": _levels,
    "DISPLAY.SHOW_TRACE": _flag,
    "DISPLAY.COLOR": _flag,
    "OUTPUT.OUTPUT_FILE": _text,
}
SECTIONS = frozenset(k.split(".", 1)[0] for k in KEY_TYPES)


def validate_settings(data: Mapping[str, Any], origin: str = "profile") -> dict[str, Any]:
    """
    Return a checked copy of `data` (a dict of TOML sections).
    Known keys are normalized (ids lower-cased, level names upper-cased);
    a wrong type or range raises UserInputError naming `origin` and the key.
    """
    clean: dict[str, Any] = {}
    for section, body in data.items():
        if section in SECTIONS and not isinstance(body, Mapping):
            raise UserInputError(f"{origin}: [{section}] must be a table, got {body!r}")
        clean[section] = dict(body) if isinstance(body, Mapping) else body

    for key, check in KEY_TYPES.items():
        section, name = key.split(".", 1)
        body = clean.get(section)
        if body is None or name not in body:
            continue
        try:
            body[name] = check(body[name])
        except ValueError as e:
            raise UserInputError(f"{origin}: {key} must be {e}, got {body[name]!r}") from None
    return clean


@dataclass
class Runtime:
    profile_name: str = "default"
    settings: dict[str, Any] = field(default_factory=dict)
    debug: bool = False  # [debug] lines and tracebacks
    system_id: str | None = None  # numeral system chosen at the prompt

    def apply(self, profile: Any) -> None:
        """Install a config.Profile, or a plain dict of sections."""
        data = profile.as_dict() if hasattr(profile, "as_dict") else profile
        source = getattr(profile, "source", None)
        origin = source.name if source is not None else "settings"

        self.settings = validate_settings(data, origin)
        self.profile_name = getattr(profile, "name", None) or "default"

        debug = self.get("BEHAVIOUR.DEBUG")
        if debug is not None:
            self.debug = debug
        system_id = self.get("BEHAVIOUR.DEFAULT_SYSTEM")
        if system_id:
            self.system_id = system_id

    def get(self, key: str, default: Any = None) -> Any:
        """Dotted lookup, e.g. 'PUZZLE.LEVELS.EASY.MAX'."""
        if not key:
            return default
        node: Any = self.settings
        for part in key.split("."):
            if not isinstance(node, Mapping) or part not in node:
                return default
            node = node[part]
        return node


_current_runtime: ContextVar[Runtime | None] = ContextVar("athena_runtime", default=None)


def current() -> Runtime:
    rt = _current_runtime.get()
    if rt is None:
        rt = reset()
    return rt


def reset() -> Runtime:
    """Install a fresh Runtime (tests, profile reloads)."""
    rt = Runtime()
    _current_runtime.set(rt)
    return rt


def APPLY(profile: Any) -> None:
    current().apply(profile)


def CFG(key: str, default: Any = None) -> Any:
    return current().get(key, default)
