# -----------------------------------------------------------------------------
#  puzzle.py
#  Procedural pattern-recognition exercises
# -----------------------------------------------------------------------------

from __future__ import annotations

import random
from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from enum import Enum
from itertools import count as _count
from typing import Any

from athena.convert import ConversionResult, convert_with
from athena.registry import Registry, SystemDefinition, get_system
from athena.runtime import CFG
from athena.trace import spell
from athena.transform import parse_numeral
from athena.utility import (
    InsufficientRangeError,
    InvalidInputError,
    UnrepresentableValueError,
)

Glyphs = tuple[str, ...]

# Fallback ranges when the profile has no [PUZZLE.LEVELS] table
DEFAULT_LEVELS: dict[str, tuple[int, int]] = {
    "EASY": (1, 20),
    "MEDIUM": (1, 100),
    "HARD": (1, 3999),
}

_SEQUENCE_MAX_STEP = 3


class PuzzleKind(str, Enum):
    DECODE = "decode"        # random distinct samples, one hidden
    SEQUENCE = "sequence"    # arithmetic progression, the next term hidden


@dataclass(frozen=True)
class Difficulty:
    min: int
    max: int

    def __post_init__(self):
        for name in ("min", "max"):
            v = getattr(self, name)
            if isinstance(v, bool) or not isinstance(v, int):
                raise InvalidInputError(f"difficulty {name} must be an integer, got {v!r}")
        if self.min < 0:
            raise InvalidInputError(f"difficulty min must be non-negative, got {self.min}")
        if self.min > self.max:
            raise InvalidInputError(f"difficulty min {self.min} is larger than max {self.max}")

    @property
    def size(self) -> int:
        return self.max - self.min + 1

    @classmethod
    def preset(cls, name: str) -> Difficulty:
        """Named range from PUZZLE.LEVELS in the active profile, else the built-in defaults."""
        key = str(name).strip().upper()
        levels = CFG("PUZZLE.LEVELS", {}) or {}
        bounds = levels.get(key)
        if isinstance(bounds, dict) and "MIN" in bounds and "MAX" in bounds:
            return cls(bounds["MIN"], bounds["MAX"])
        if key in DEFAULT_LEVELS:
            return cls(*DEFAULT_LEVELS[key])
        known = sorted(set(levels) | set(DEFAULT_LEVELS))
        raise InvalidInputError(f"unknown difficulty level {name!r} (known: {', '.join(known)})")

    @classmethod
    def coerce(cls, value: Any) -> Difficulty:
        """Accept a Difficulty, a (min, max) pair, a {'min':..,'max':..} mapping or a level name."""
        if isinstance(value, Difficulty):
            return value
        if isinstance(value, str):
            return cls.preset(value)
        if isinstance(value, Mapping):
            try:
                return cls(value["min"], value["max"])
            except KeyError as e:
                raise InvalidInputError(f"difficulty is missing {e.args[0]!r}") from None
        if isinstance(value, Sequence) and len(value) == 2:  # noqa: PLR2004
            return cls(value[0], value[1])
        raise InvalidInputError(f"cannot read a difficulty from {value!r}")


@dataclass(frozen=True)
class HiddenChallenge:
    value: int
    glyphs: Glyphs
    withheld: str          # "glyphs" or "value"


@dataclass(frozen=True)
class PuzzleDefinition:
    system_id: str
    kind: PuzzleKind
    difficulty: Difficulty
    revealed: tuple[tuple[int, Glyphs], ...]
    hidden: HiddenChallenge
    distractors: tuple[Glyphs, ...]
    distractor_values: tuple[int, ...]
    hint: str

    @property
    def answer(self) -> int | Glyphs:
        """The withheld side of the hidden pair."""
        return self.hidden.glyphs if self.hidden.withheld == "glyphs" else self.hidden.value

    def options(self, rng: random.Random | int | None = None) -> list[int | Glyphs]:
        """Answer plus distractors, shuffled, in the form of the withheld side."""
        if self.hidden.withheld == "glyphs":
            opts: list[int | Glyphs] = [self.hidden.glyphs, *self.distractors]
        else:
            opts = [self.hidden.value, *self.distractor_values]
        _as_rng(rng).shuffle(opts)
        return opts


# ---------- helpers -----------------------------------------------------------

def _as_rng(rng: random.Random | int | None) -> random.Random:
    if isinstance(rng, random.Random):
        return rng
    return random.Random(rng)


def _domain(sysdef: SystemDefinition) -> tuple[int, int | None]:
    """Smallest and largest value the system can write (None = unbounded)."""
    lo = 0 if (sysdef.is_positional or sysdef.zero_glyph is not None) else 1
    return lo, sysdef.max_value


def _in_domain(v: int, lo: int, hi: int | None) -> bool:
    return v >= lo and (hi is None or v <= hi)


def _horner(digits: Sequence[int], base: int) -> int:
    total = 0
    for d in digits:
        total = total * base + d
    return total


def _positional_perturbations(digits: list[int], base: int) -> Iterator[int]:
    n = len(digits)

    def canonical(ds: list[int]) -> bool:
        return bool(ds) and (ds[0] != 0 or len(ds) == 1)

    # one digit ±1
    for i in range(n):
        for delta in (1, -1):
            d = digits[i] + delta
            if 0 <= d < base:
                ds = digits[:i] + [d] + digits[i + 1:]
                if canonical(ds):
                    yield _horner(ds, base)
    # drop one place
    if n > 1:
        for i in range(n):
            ds = digits[:i] + digits[i + 1:]
            if canonical(ds):
                yield _horner(ds, base)
    # duplicate one place
    for i in range(n):
        ds = digits[:i + 1] + digits[i:]
        if canonical(ds):
            yield _horner(ds, base)
    # swap two neighbouring places
    for i in range(n - 1):
        ds = list(digits)
        ds[i], ds[i + 1] = ds[i + 1], ds[i]
        if canonical(ds):
            yield _horner(ds, base)


def _additive_perturbations(values: list[int], denoms: tuple[int, ...]) -> Iterator[int]:
    total = sum(values)
    # drop one symbol / duplicate one symbol
    for v in values:
        yield total - v
        yield total + v
    # one symbol shifted to the neighbouring denomination
    for v in values:
        if v not in denoms:
            continue
        idx = denoms.index(v)
        for j in (idx - 1, idx + 1):
            if 0 <= j < len(denoms):
                yield total - v + denoms[j]


def _neighbours(value: int) -> Iterator[int]:
    for k in _count(1):
        yield value - k
        yield value + k


def make_distractors(
    truth: ConversionResult,
    sysdef: SystemDefinition,
    count: int,
    rng: random.Random,
) -> list[tuple[Glyphs, int]]:
    """
    Perturb the true answer structurally, re-render every candidate through the
    converter (so it is well-formed), and keep `count` distinct ones that differ
    from the answer. Neighbouring values fill in if perturbations run out.
    """
    if count <= 0:
        return []

    lo, hi = _domain(sysdef)
    if sysdef.is_positional:
        cands = list(_positional_perturbations(list(truth.values), sysdef.base))
    else:
        cands = list(_additive_perturbations(list(truth.values), sysdef.denominations))
    rng.shuffle(cands)

    seen: set[Glyphs] = {truth.glyphs}
    out: list[tuple[Glyphs, int]] = []

    def take(v: int) -> None:
        if v == truth.value or not _in_domain(v, lo, hi):
            return
        g = convert_with(v, sysdef).glyphs
        if g in seen:
            return
        seen.add(g)
        out.append((g, v))

    for v in cands:
        take(v)
        if len(out) == count:
            return out

    # the domain holds hi - lo + 1 values, one of them the answer
    available = None if hi is None else hi - lo
    for v in _neighbours(truth.value):
        if len(out) == count:
            return out
        if available is not None and len(seen) - 1 >= available:
            break
        take(v)

    if len(out) < count:
        raise InsufficientRangeError(
            f"only {len(out)} distinct distractors exist for {truth.value} in {sysdef.name}; {count} requested"
        )
    return out


def _hint(sysdef: SystemDefinition, kind: PuzzleKind, step: int | None) -> str:
    if kind is PuzzleKind.SEQUENCE and step is not None:
        return f"Identify the gap between the numbers. It seems to be increasing by {step}."
    if sysdef.is_positional:
        return f"Remember, this is a base-{sysdef.base} system: each place is worth {sysdef.base} times the one to its right."
    if any(len(g) > 1 for g in sysdef.glyphs):
        return "Symbol values add up; a smaller symbol written before a larger one is subtracted from it."
    return "Symbol values add up, largest first."


# ---------- Main API ----------------------------------------------------------

def generate_puzzle(  # noqa: PLR0913
    system_id: str,
    difficulty: Difficulty | Mapping | Sequence[int] | str,
    reveal_count: int,
    *,
    kind: PuzzleKind | str = PuzzleKind.DECODE,
    distractor_count: int = 3,
    withheld: str | None = None,
    rng: random.Random | int | None = None,
    registry: Registry | None = None,
) -> PuzzleDefinition:
    """
    Build a self-consistent exercise under `system_id`.

    decode:   reveal_count + 1 distinct values are sampled without replacement
              from the difficulty range; the last one becomes the hidden pair.
    sequence: reveal_count terms of an arithmetic progression (step 1..3) fit
              inside the range; the hidden pair is the next term.

    Raises UnknownSystemError, InvalidInputError (bad parameters),
    UnrepresentableValueError (range outside what the system can write) or
    InsufficientRangeError (not enough distinct values or distractors).
    """
    sysdef = get_system(system_id, registry)
    diff = Difficulty.coerce(difficulty)

    if isinstance(reveal_count, bool) or not isinstance(reveal_count, int) or reveal_count < 1:
        raise InvalidInputError(f"reveal count must be a positive integer, got {reveal_count!r}")
    if isinstance(distractor_count, bool) or not isinstance(distractor_count, int) or distractor_count < 0:
        raise InvalidInputError(f"distractor count must be a non-negative integer, got {distractor_count!r}")
    try:
        kind = PuzzleKind(kind)
    except ValueError:
        raise InvalidInputError(f"unknown puzzle kind {kind!r} (decode or sequence)") from None
    if withheld is None:
        withheld = "glyphs" if kind is PuzzleKind.DECODE else "value"
    if withheld not in ("glyphs", "value"):
        raise InvalidInputError(f"withheld must be 'glyphs' or 'value', got {withheld!r}")

    lo, hi = _domain(sysdef)
    if not _in_domain(diff.min, lo, hi) or not _in_domain(diff.max, lo, hi):
        upper = "∞" if hi is None else str(hi)
        raise UnrepresentableValueError(
            f"{sysdef.name} can write {lo}..{upper}; range {diff.min}..{diff.max} falls outside"
        )

    gen = _as_rng(rng)
    need = reveal_count + 1
    step: int | None = None

    if kind is PuzzleKind.DECODE:
        if need > diff.size:
            raise InsufficientRangeError(
                f"{need} distinct values requested but {diff.min}..{diff.max} holds only {diff.size}"
            )
        picks = gen.sample(range(diff.min, diff.max + 1), need)
        shown = sorted(picks[:-1])
        target = picks[-1]
    else:
        max_step = (diff.size - 1) // reveal_count
        if max_step < 1:
            raise InsufficientRangeError(
                f"a sequence of {need} terms does not fit in {diff.min}..{diff.max}"
            )
        step = gen.randint(1, min(_SEQUENCE_MAX_STEP, max_step))
        start = gen.randint(diff.min, diff.max - step * reveal_count)
        shown = [start + i * step for i in range(reveal_count)]
        target = start + reveal_count * step

    revealed = tuple((v, convert_with(v, sysdef).glyphs) for v in shown)
    truth = convert_with(target, sysdef)
    picked = make_distractors(truth, sysdef, distractor_count, gen)

    return PuzzleDefinition(
        system_id=sysdef.id,
        kind=kind,
        difficulty=diff,
        revealed=revealed,
        hidden=HiddenChallenge(truth.value, truth.glyphs, withheld),
        distractors=tuple(g for g, _ in picked),
        distractor_values=tuple(v for _, v in picked),
        hint=_hint(sysdef, kind, step),
    )


def check_answer(puzzle: PuzzleDefinition, answer: Any, registry: Registry | None = None) -> bool:
    """
    True if `answer` matches the withheld side of the hidden pair.

    withheld == "glyphs": a glyph sequence or canonical numeral text of the system.
    withheld == "value":  an int or a string of decimal digits.

    The shown side never counts as an answer.
    """
    hidden = puzzle.hidden
    if isinstance(answer, bool) or answer is None:
        return False

    if hidden.withheld == "glyphs":
        if isinstance(answer, (tuple, list)):
            return tuple(answer) == hidden.glyphs
        if not isinstance(answer, str):
            return False
        try:
            return parse_numeral(answer, puzzle.system_id, strict=True, registry=registry) == hidden.value
        except InvalidInputError:
            return False

    if isinstance(answer, int):
        return answer == hidden.value
    if isinstance(answer, str):
        s = answer.strip()
        if not s.isdecimal():
            return False
        try:
            return int(s) == hidden.value
        except ValueError:
            return False
    return False


def describe_puzzle(puzzle: PuzzleDefinition, registry: Registry | None = None) -> str:
    """One-line question text for a puzzle, e.g. for a quiz prompt."""
    sysdef = get_system(puzzle.system_id, registry)
    pos = sysdef.is_positional
    if puzzle.kind is PuzzleKind.SEQUENCE:
        terms = ", ".join(spell(g, pos) for _, g in puzzle.revealed)
        return f"Find the next number: {terms}, ..."
    if puzzle.hidden.withheld == "glyphs":
        return f"Convert the number {puzzle.hidden.value} into {sysdef.name}."
    return f"Which number is {spell(puzzle.hidden.glyphs, pos)}?"


__all__ = [
    "DEFAULT_LEVELS",
    "Difficulty",
    "HiddenChallenge",
    "PuzzleDefinition",
    "PuzzleKind",
    "check_answer",
    "describe_puzzle",
    "generate_puzzle",
    "make_distractors",
]
