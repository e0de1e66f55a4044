# tests/test_convert.py
"""
Conversion into positional and additive systems, checked against sympy as an
independent oracle for digit expansions and integer logarithms.

Run: pytest -v
"""

from __future__ import annotations

import pytest
from sympy import integer_log
from sympy.ntheory.digits import digits as sympy_digits

from athena import convert
from athena.convert import convert_with
from athena.registry import LogicType, SystemDefinition, load_registry
from athena.transform import glyphs_to_int
from athena.utility import InvalidInputError, UnknownSystemError, UnrepresentableValueError

POSITIONAL = ["mayan", "babylonian", "binary"]

# ---------- known values ------------------------------------------------------

TEST_CASES = [
    # (system, n, glyphs joined the way they are displayed)
    ("roman", 1, "I"),
    ("roman", 4, "IV"),
    ("roman", 9, "IX"),
    ("roman", 14, "XIV"),
    ("roman", 40, "XL"),
    ("roman", 88, "LXXXVIII"),
    ("roman", 444, "CDXLIV"),
    ("roman", 1994, "MCMXCIV"),
    ("roman", 2024, "MMXXIV"),
    ("roman", 3999, "MMMCMXCIX"),
    ("mayan", 0, "Θ"),
    ("mayan", 19, "———••••"),
    ("mayan", 20, "• Θ"),
    ("mayan", 1994, "•••• ———•••• ——••••"),
    ("babylonian", 59, "𒌋𒌋𒌋𒌋𒌋𒁹𒁹𒁹𒁹𒁹𒁹𒁹𒁹𒁹"),
    ("babylonian", 60, "𒁹 ␣"),
    ("babylonian", 3661, "𒁹 𒁹 𒁹"),
    ("binary", 0, "0"),
    ("binary", 10, "1 0 1 0"),
]


@pytest.mark.parametrize("sid, n, expected", TEST_CASES)
def test_known_values(sid, n, expected):
    res = convert(n, sid)
    sep = "" if sid == "roman" else " "
    assert sep.join(res.glyphs) == expected
    assert res.value == n
    assert res.system_id == sid


def test_result_carries_renderer_and_digits():
    res = convert(1994, "mayan")
    assert res.renderer == "mayan"
    assert res.values == (4, 19, 14)
    assert len(res.trace) == len(res.steps)


def test_roman_values_are_denominations():
    assert convert(1994, "roman").values == (1000, 900, 90, 4)


# ---------- properties --------------------------------------------------------


@pytest.mark.parametrize("sid", POSITIONAL)
def test_positional_round_trip(sid):
    for n in range(0, 10_001):
        res = convert(n, sid)
        assert glyphs_to_int(res.glyphs, sid) == n


@pytest.mark.parametrize("sid, base", [("mayan", 20), ("babylonian", 60), ("binary", 2)])
@pytest.mark.parametrize("n", [1, 2, 19, 20, 59, 60, 399, 400, 3599, 3600, 7999, 8000, 10**6, 2**40 + 3])
def test_positional_length_is_ceil_log(sid, base, n):
    res = convert(n, sid)
    exponent, _ = integer_log(n, base)
    assert len(res.glyphs) == int(exponent) + 1


@pytest.mark.parametrize("sid, base", [("mayan", 20), ("babylonian", 60), ("binary", 2)])
@pytest.mark.parametrize("n", [0, 7, 1994, 123_456, 987_654_321])
def test_positional_digits_match_sympy(sid, base, n):
    # sympy returns [base, d1, d2, ...]
    assert list(convert(n, sid).values) == [int(d) for d in sympy_digits(n, base)[1:]]


def test_roman_round_trip():
    for n in range(1, 4000):
        res = convert(n, "roman")
        assert glyphs_to_int(res.glyphs, "roman") == n


@pytest.mark.parametrize("sid", POSITIONAL)
def test_zero_is_single_glyph_with_one_step(sid):
    res = convert(0, sid)
    assert len(res.glyphs) == 1
    assert len(res.steps) == 1
    assert len(res.trace) == 1


def test_never_empty():
    for sid in POSITIONAL:
        for n in range(0, 50):
            assert convert(n, sid).glyphs


# ---------- errors ------------------------------------------------------------

ERROR_CASES = [
    (-1, "mayan", InvalidInputError),
    (-1, "roman", InvalidInputError),
    (2.5, "binary", InvalidInputError),
    ("12", "binary", InvalidInputError),
    (True, "roman", InvalidInputError),
    (None, "mayan", InvalidInputError),
    (5, "nonexistent", UnknownSystemError),
    (0, "roman", UnrepresentableValueError),
    (4000, "roman", UnrepresentableValueError),
]


@pytest.mark.parametrize("n, sid, exc", ERROR_CASES)
def test_conversion_errors(n, sid, exc):
    with pytest.raises(exc):
        convert(n, sid)


def test_incomplete_value_list_is_unrepresentable():
    # built directly, bypassing load-time validation
    broken = SystemDefinition(id="broken", name="Broken", base=10, logic=LogicType.ADDITIVE,
                              symbols=((10, "X"), (5, "V")))
    with pytest.raises(UnrepresentableValueError):
        convert_with(7, broken)


NULLA = """
    [[systems]]
    id = "nulla"
    name = "Roman with nulla"
    logic = "additive"
    max = 39
    zero = "N"
    symbols = [[10, "X"], [9, "IX"], [5, "V"], [4, "IV"], [1, "I"]]
"""


def test_additive_zero_glyph(write_table):
    reg = load_registry(write_table(NULLA))
    res = convert(0, "nulla", reg)
    assert res.glyphs == ("N",)
    assert res.values == (0,)
    assert res.trace == ("Value is 0: write the zero symbol N.",)
    assert convert(14, "nulla", reg).glyphs == ("X", "IV")
