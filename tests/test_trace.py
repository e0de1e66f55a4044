# tests/test_trace.py
from __future__ import annotations

import pytest

from athena import convert
from athena.trace import (
    CompletionStep,
    DivisionStep,
    StepKind,
    SubtractionStep,
    ZeroStep,
    describe,
    explain,
    place_values,
    spell,
)


def test_positional_steps_mayan_1994():
    res = convert(1994, "mayan")
    assert res.steps == (
        DivisionStep(1994, 20, 99, 14, "——••••"),
        DivisionStep(99, 20, 4, 19, "———••••"),
        DivisionStep(4, 20, 0, 4, "••••"),
        CompletionStep(True, (4, 19, 14), ("••••", "———••••", "——••••")),
    )
    assert res.trace[0] == "1994 div 20 = 99, 1994 mod 20 = 14 → digit 14 (——••••)"
    assert res.trace[-1].startswith("Quotient is 0")
    assert "[4, 19, 14]" in res.trace[-1]


def test_additive_steps_roman_1994():
    res = convert(1994, "roman")
    kinds = [s.kind for s in res.steps]
    assert kinds == [StepKind.SUBTRACTION] * 4 + [StepKind.COMPLETION]
    first = res.steps[0]
    assert first == SubtractionStep(1994, 1000, "M")
    assert first.left == 994
    assert res.trace[0] == "Remaining 1994, subtract 1000 → M. Left: 994"
    assert res.trace[-1] == "Remaining is 0: M + CM + XC + IV = MCMXCIV"


def test_zero_trace_is_one_line():
    res = convert(0, "babylonian")
    assert res.steps == (ZeroStep("␣"),)
    assert res.trace == ("Value is 0: write the zero symbol ␣.",)


@pytest.mark.parametrize("sid, n", [("roman", 3888), ("mayan", 8000), ("babylonian", 216_000), ("binary", 255)])
def test_trace_matches_steps_in_order(sid, n):
    res = convert(n, sid)
    assert res.trace == explain(res.steps)
    assert res.trace == tuple(describe(s) for s in res.steps)
    assert res.steps[-1].kind is StepKind.COMPLETION


def test_explain_empty():
    assert explain(()) == ()


def test_describe_rejects_foreign_objects():
    with pytest.raises(TypeError):
        describe("not a step")


def test_place_values():
    assert place_values([4, 19, 14], 20) == [(4, 2, 1600), (19, 1, 380), (14, 0, 14)]
    assert sum(c for _, _, c in place_values([1, 0, 1, 0], 2)) == 10


@pytest.mark.parametrize(
    "glyphs, positional, expected",
    [
        (("M", "CM"), False, "MCM"),
        (("•", "Θ"), True, "• Θ"),
        ((), True, ""),
    ],
)
def test_spell(glyphs, positional, expected):
    assert spell(glyphs, positional) == expected
