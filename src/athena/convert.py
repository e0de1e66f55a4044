"""
The numeral transpiler: one entry point that turns a non-negative integer
into the glyphs of a registered numeral system.

Positional systems are handled by repeated division by the base; additive
systems by greedy decomposition over the descending value list. Both record
every step they perform so the trace generator can explain the result.
"""

from __future__ import annotations

from dataclasses import dataclass

from athena.registry import LogicType, Registry, SystemDefinition, get_system
from athena.trace import CompletionStep, DivisionStep, Step, SubtractionStep, ZeroStep, explain
from athena.utility import UnrepresentableValueError, require_natural


@dataclass(frozen=True)
class ConversionResult:
    value: int
    system_id: str
    renderer: str
    glyphs: tuple[str, ...]       # most-significant first
    values: tuple[int, ...]       # digit values or denominations behind each glyph
    steps: tuple[Step, ...]
    trace: tuple[str, ...]


# ---------- Converters --------------------------------------------------------


def _convert_positional(n: int, sysdef: SystemDefinition) -> tuple[list[int], list[Step]]:
    steps: list[Step] = []
    if n == 0:
        steps.append(ZeroStep(sysdef.glyph(0)))
        return [0], steps

    base = sysdef.base
    remainders: list[int] = []
    while n > 0:
        q, r = divmod(n, base)
        steps.append(DivisionStep(n, base, q, r, sysdef.glyph(r)))
        remainders.append(r)
        n = q

    remainders.reverse()
    glyphs = tuple(sysdef.glyph(d) for d in remainders)
    steps.append(CompletionStep(True, tuple(remainders), glyphs))
    return remainders, steps


def _convert_additive(n: int, sysdef: SystemDefinition) -> tuple[list[int], list[Step]]:
    steps: list[Step] = []
    if sysdef.max_value is not None and n > sysdef.max_value:
        raise UnrepresentableValueError(
            f"{n} exceeds the largest value {sysdef.name} can write ({sysdef.max_value})"
        )
    if n == 0:
        if sysdef.zero_glyph is None:
            raise UnrepresentableValueError(f"{sysdef.name} has no symbol for zero")
        steps.append(ZeroStep(sysdef.zero_glyph))
        return [0], steps

    used: list[int] = []
    remaining = n
    pairs = sysdef.symbols
    i = 0
    while remaining > 0:
        # values are descending, so the cursor never has to move back
        while i < len(pairs) and pairs[i][0] > remaining:
            i += 1
        if i == len(pairs):
            raise UnrepresentableValueError(
                f"{sysdef.name} has no symbol for a remainder of {remaining} (incomplete value list)"
            )
        value, glyph = pairs[i]
        steps.append(SubtractionStep(remaining, value, glyph))
        used.append(value)
        remaining -= value

    steps.append(CompletionStep(False, tuple(used), tuple(sysdef.glyph(v) for v in used)))
    return used, steps


def convert_with(value: int, sysdef: SystemDefinition) -> ConversionResult:
    """Convert under an already resolved definition."""
    n = require_natural(value)

    if sysdef.logic is LogicType.POSITIONAL:
        values, steps = _convert_positional(n, sysdef)
    elif sysdef.logic is LogicType.ADDITIVE:
        values, steps = _convert_additive(n, sysdef)
    else:  # pragma: no cover - LogicType is closed
        raise UnrepresentableValueError(f"unsupported logic {sysdef.logic!r}")

    if n == 0:
        glyphs = (steps[0].glyph,)
    else:
        glyphs = tuple(sysdef.glyph(v) for v in values)

    return ConversionResult(
        value=n,
        system_id=sysdef.id,
        renderer=sysdef.renderer,
        glyphs=glyphs,
        values=tuple(values),
        steps=tuple(steps),
        trace=explain(steps),
    )


def convert(value: int, system_id: str, registry: Registry | None = None) -> ConversionResult:
    """
    Convert a non-negative integer into the numeral system `system_id`.

    Raises UnknownSystemError, InvalidInputError (negative, bool or
    non-integer input) or UnrepresentableValueError (additive cap exceeded,
    no zero symbol, or an incomplete value list).
    """
    return convert_with(value, get_system(system_id, registry))
