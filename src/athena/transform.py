# transform.py
# To transform numeral glyphs and typed numeral text back into integers

from __future__ import annotations

import re
from collections.abc import Sequence

from athena.convert import convert_with
from athena.registry import Registry, SystemDefinition, get_system
from athena.trace import spell
from athena.utility import InvalidInputError, UnrepresentableValueError

# "[4, 19, 14]" style raw digit lists, as positional results are shown in text
_RAW_DIGITS_RE = re.compile(r"^\[\s*\d+(?:\s*[,;]\s*\d+)*\s*\]$")


def _glyphs_value(glyphs: Sequence[str], sysdef: SystemDefinition) -> int:
    if not glyphs:
        raise InvalidInputError(f"empty {sysdef.name} numeral")

    values: list[int] = []
    for g in glyphs:
        v = sysdef.value_of(g)
        if v is None:
            raise InvalidInputError(f"{g!r} is not a {sysdef.name} symbol")
        values.append(v)

    if sysdef.is_positional:
        total = 0
        for d in values:
            total = total * sysdef.base + d
        return total

    if len(values) > 1 and 0 in values:
        raise InvalidInputError(f"the zero symbol of {sysdef.name} must stand alone")
    return sum(values)


def glyphs_to_int(glyphs: Sequence[str], system_id: str, registry: Registry | None = None) -> int:
    """
    Inverse of convert(): evaluate a glyph sequence (most-significant first).
    Positional glyphs are read as place values, additive glyphs are summed.
    """
    return _glyphs_value(list(glyphs), get_system(system_id, registry))


# -----------------------------
# Typed numeral text
# -----------------------------

def _tokenize_additive(text: str, sysdef: SystemDefinition) -> list[str]:
    """Longest-match tokenization over the glyph table, e.g. 'MCMXCIV' -> M CM XC IV."""
    s = re.sub(r"\s+", "", text)
    table = sorted(set(sysdef.glyphs) | ({sysdef.zero_glyph} if sysdef.zero_glyph else set()),
                   key=len, reverse=True)
    # Latin letters are typed in either case
    if all(g.isascii() for g in table):
        s = s.upper()

    out: list[str] = []
    i = 0
    while i < len(s):
        for g in table:
            if s.startswith(g, i):
                out.append(g)
                i += len(g)
                break
        else:
            raise InvalidInputError(f"unexpected {s[i]!r} in {sysdef.name} numeral {text!r}")
    return out


def _tokenize_positional(text: str, sysdef: SystemDefinition) -> list[str]:
    s = text.strip()
    # single-character glyphs can be typed without separators
    if all(len(g) == 1 for g in sysdef.glyphs):
        return [ch for ch in s if not ch.isspace() and ch not in ",.;"]
    return [tok for tok in re.split(r"[\s,;|]+", s) if tok]


def parse_numeral(text: str, system_id: str, *, strict: bool = True, registry: Registry | None = None) -> int:
    """
    Parse typed numeral text under `system_id`.

    Accepts:
      - glyph text: 'MCMXCIV' (additive), '—•••• ——————••••' (positional,
        places separated by whitespace unless every glyph is one character)
      - raw positional digits in brackets: '[4, 19, 14]'

    strict=True rejects spellings that convert() would not produce
    (e.g. 'IIII', 'IC', a leading zero place). Raises InvalidInputError.
    """
    sysdef = get_system(system_id, registry)
    if not isinstance(text, str):
        raise InvalidInputError(f"{sysdef.name} numeral must be text, got {type(text).__name__} {text!r}")
    s = text.strip()
    if not s:
        raise InvalidInputError(f"empty {sysdef.name} numeral")

    if _RAW_DIGITS_RE.match(s):
        if not sysdef.is_positional:
            raise InvalidInputError(f"{sysdef.name} is not positional; write it with symbols")
        digits = [int(x) for x in re.findall(r"\d+", s)]
        bad = [d for d in digits if d >= sysdef.base]
        if bad:
            raise InvalidInputError(f"digit {bad[0]} is out of range for base {sysdef.base}")
        tokens = [sysdef.glyph(d) for d in digits]
    elif sysdef.is_positional:
        tokens = _tokenize_positional(s, sysdef)
    else:
        tokens = _tokenize_additive(s, sysdef)

    value = _glyphs_value(tokens, sysdef)

    if strict:
        try:
            canonical = convert_with(value, sysdef).glyphs
        except UnrepresentableValueError as e:
            raise InvalidInputError(f"{text!r}: {e}") from None
        if tuple(tokens) != canonical:
            raise InvalidInputError(
                f"{text!r} is not a canonical {sysdef.name} numeral (expected {spell(canonical, sysdef.is_positional)} for {value})"
            )

    return value
