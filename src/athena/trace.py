# src/athena/trace.py
# Step records produced by the converters, and their human-readable form.

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from enum import Enum


class StepKind(str, Enum):
    ZERO = "zero"
    DIVISION = "division"
    SUBTRACTION = "subtraction"
    COMPLETION = "completion"


@dataclass(frozen=True)
class ZeroStep:
    glyph: str
    kind: StepKind = StepKind.ZERO


@dataclass(frozen=True)
class DivisionStep:
    dividend: int
    base: int
    quotient: int
    remainder: int
    glyph: str
    kind: StepKind = StepKind.DIVISION


@dataclass(frozen=True)
class SubtractionStep:
    remaining: int
    value: int
    glyph: str
    kind: StepKind = StepKind.SUBTRACTION

    @property
    def left(self) -> int:
        return self.remaining - self.value


@dataclass(frozen=True)
class CompletionStep:
    positional: bool
    values: tuple[int, ...]
    glyphs: tuple[str, ...]
    kind: StepKind = StepKind.COMPLETION


Step = ZeroStep | DivisionStep | SubtractionStep | CompletionStep


def spell(glyphs: Iterable[str], positional: bool) -> str:
    """Glyphs as one line of text: places are space separated, additive symbols run together."""
    return (" " if positional else "").join(glyphs)


def describe(step: Step) -> str:
    """One line of explanation for a single step."""
    if isinstance(step, ZeroStep):
        return f"Value is 0: write the zero symbol {step.glyph}."

    if isinstance(step, DivisionStep):
        return (
            f"{step.dividend} div {step.base} = {step.quotient}, "
            f"{step.dividend} mod {step.base} = {step.remainder} → digit {step.remainder} ({step.glyph})"
        )

    if isinstance(step, SubtractionStep):
        return f"Remaining {step.remaining}, subtract {step.value} → {step.glyph}. Left: {step.left}"

    if isinstance(step, CompletionStep):
        if step.positional:
            digits = ", ".join(str(v) for v in step.values)
            return f"Quotient is 0: read the remainders from last to first [{digits}] → {spell(step.glyphs, True)}"
        parts = " + ".join(step.glyphs)
        return f"Remaining is 0: {parts} = {spell(step.glyphs, False)}"

    raise TypeError(f"not a conversion step: {step!r}")


def explain(steps: Iterable[Step]) -> tuple[str, ...]:
    """Every step, in the order performed, including the terminal one."""
    return tuple(describe(s) for s in steps)


def place_values(values: Iterable[int], base: int) -> list[tuple[int, int, int]]:
    """
    Expand positional digits (most-significant first) into
    (digit, power, contribution) triples, e.g. [4, 19, 14] base 20 ->
    [(4, 2, 1600), (19, 1, 380), (14, 0, 14)].
    """
    digits = list(values)
    top = len(digits) - 1
    return [(d, top - i, d * base ** (top - i)) for i, d in enumerate(digits)]
