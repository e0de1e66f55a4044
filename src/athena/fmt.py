# src/athena/fmt.py
from __future__ import annotations

import re
from collections.abc import Iterable

from colorama import Fore, Style

from athena.trace import place_values, spell
from athena.utility import get_terminal_width

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_SUPERSCRIPT = str.maketrans("0123456789-", "⁰¹²³⁴⁵⁶⁷⁸⁹⁻")


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)


def visible_len(s: str | None) -> int:
    """Printable length (without ANSI)."""
    return len(strip_ansi(s))


def superscript(n: int) -> str:
    return str(n).translate(_SUPERSCRIPT)


def wrap_after_label(label: str, text: str, *, width: int | None = None) -> str:
    """
    ANSI-safe wrap where the body (text) may contain color codes.
    First line capacity = width - visible_len(label)
    Subsequent lines    = same indent under the label.
    Long tokens are moved wholly to the next line, never chopped.
    """
    W = max(20, int(width or get_terminal_width()))
    start = visible_len(label)
    cap = max(5, W - start)

    s = text or ""
    if not s:
        return label

    lines: list[str] = []
    cur, cur_len = "", 0
    for tok in re.split(r"(\s+)", s):
        vis = visible_len(tok)
        is_space = tok.strip() == ""
        if cur_len == 0 and is_space:
            continue
        if cur_len + vis <= cap:
            cur += tok
            cur_len += vis
            continue
        lines.append(cur.rstrip())
        cur, cur_len = ("", 0) if is_space else (tok, vis)
    if cur:
        lines.append(cur.rstrip())

    pad = " " * start
    return label + ("\n" + pad).join(lines)


def format_glyphs(glyphs: Iterable[str], positional: bool, *, color: str = Fore.CYAN) -> str:
    """Glyphs as one bright line; positional places are space separated."""
    return f"{color}{Style.BRIGHT}{spell(glyphs, positional)}{Style.RESET_ALL}"


def format_digits(values: Iterable[int]) -> str:
    """Raw positional digits the way the original screens showed them: [4, 19, 14]."""
    return "[" + ", ".join(str(v) for v in values) + "]"


def format_place_values(value: int, digits: Iterable[int], base: int) -> str:
    """
    Place-value expansion, e.g. 1994 base 20 -> '1994 = 4×20² + 19×20¹ + 14×20⁰'.
    Zero places are kept so the position of every digit stays visible.
    """
    terms = [f"{d}×{base}{superscript(p)}" for d, p, _ in place_values(digits, base)]
    return f"{value} = " + " + ".join(terms)


def format_additive_sum(values: Iterable[int]) -> str:
    """Denominations as a sum, runs collapsed: [1000, 900, 90, 4] -> '1000 + 900 + 90 + 4'."""
    vals = list(values)
    parts: list[str] = []
    i = 0
    while i < len(vals):
        j = i
        while j < len(vals) and vals[j] == vals[i]:
            j += 1
        run = j - i
        parts.append(f"{run}×{vals[i]}" if run > 1 else str(vals[i]))
        i = j
    return " + ".join(parts)
