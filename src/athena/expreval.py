# src/athena/expreval.py
# Reading integers typed at the prompt: literals and a safe arithmetic subset.

from __future__ import annotations

import ast
import operator as op
import re

from athena.utility import UserInputError

# ---- simple number parsing helpers ----
_THIN_SPACES = ("\u2009", "\u202F", "\u00A0")  # thin, narrow no-break, no-break
_SEP_CLASS = r"[ ,._\u00A0\u2009\u202F]"      # spaces/commas/dots/underscores & NBSP variants
_GROUPED_RE = re.compile(rf"^[+-]?\d{{1,3}}(?:{_SEP_CLASS}\d{{3}})+$")

# ---- allowed operators (safe subset) ----
_ALLOWED_BINOPS = {
    ast.Add:      op.add,
    ast.Sub:      op.sub,
    ast.Mult:     op.mul,
    ast.FloorDiv: op.floordiv,
    ast.Mod:      op.mod,
}
_ALLOWED_UNARYOPS = {
    ast.UAdd: op.pos,
    ast.USub: op.neg,
}

_MAX_NODES = 64         # sanity guard
_MAX_RESULT_BITS = 65_536  # refuse powers with a result wider than this


class _IntExprError(Exception):
    pass


_COMPLEX_INPUT_RE = re.compile(
    r"""
    ^\s*
    [+-]?\d+(?:\.\d+)?      # optional real part
    \s*[+-]\s*
    \d+(?:\.\d+)?[ij]       # imaginary part with i or j
    \s*$
    |
    ^\s*
    [+-]?\d+(?:\.\d+)?[ij]  # pure imaginary: 2i, -3.5j, etc.
    \s*$
    """,
    re.IGNORECASE | re.VERBOSE,
)

_DECIMAL_FRACTION_RE = re.compile(r"^\s*[+-]?\d*\.\d+\s*$")


def looks_like_complex(s: str) -> bool:
    return bool(_COMPLEX_INPUT_RE.match(s))


def _parse_int_literal(text: str) -> int | None:
    """Accepts: 42  -7  1_000_000  0xFF  0b1010  123.456.789  123 456 789
       Rejects: 3.14  1,23  12.34.56  0xG1"""

    if text is None:
        return None

    s = text.strip()

    if not s:
        return None

    for ch in _THIN_SPACES:
        s = s.replace(ch, " ")

    if s.lower().startswith(("0x", "0b", "0o")):
        try:
            return int(s.replace("_", ""), 0)
        except ValueError:
            return None

    if re.fullmatch(r"[+-]?\d[\d_]*", s):
        try:
            return int(s.replace("_", ""))
        except ValueError:
            return None

    if _GROUPED_RE.match(s):
        compact = re.sub(_SEP_CLASS, "", s)
        try:
            return int(compact)
        except ValueError:
            return None

    return None


def _eval_int_expr(expr: str) -> int:
    """
    Evaluate a *safe* integer expression.

    Allowed: integers, parentheses, + - * // % **, unary +/-.
    Disallowed: names, calls, attributes, subscripts, floats.
    Negative exponents are rejected (to avoid floats).
    """
    try:
        tree = ast.parse(expr, mode="eval")
    except SyntaxError as e:
        raise _IntExprError("invalid integer expression") from e

    if sum(1 for _ in ast.walk(tree)) > _MAX_NODES:
        raise _IntExprError("expression too large")

    def _eval(node) -> int:
        if isinstance(node, ast.Expression):
            return _eval(node.body)

        if isinstance(node, ast.Constant):
            if isinstance(node.value, bool) or not isinstance(node.value, int):
                raise _IntExprError("only integers are allowed")
            return node.value

        if isinstance(node, ast.UnaryOp) and type(node.op) in _ALLOWED_UNARYOPS:
            return _ALLOWED_UNARYOPS[type(node.op)](_eval(node.operand))

        if isinstance(node, ast.BinOp):
            op_type = type(node.op)
            if op_type is ast.Pow:
                base = _eval(node.left)
                exp = _eval(node.right)
                if exp < 0:
                    raise UserInputError("negative exponents are not allowed in integer expressions")
                if abs(base) > 1 and exp * abs(base).bit_length() > _MAX_RESULT_BITS:
                    raise UserInputError(f"{base}**{exp} is far too large to write in any numeral system")
                return pow(base, exp)
            if op_type in _ALLOWED_BINOPS:
                left = _eval(node.left)
                right = _eval(node.right)
                if op_type in (ast.FloorDiv, ast.Mod) and right == 0:
                    raise UserInputError("division by zero")
                return _ALLOWED_BINOPS[op_type](left, right)

        raise _IntExprError(f"unsupported syntax: {type(node).__name__}")

    return _eval(tree)


# ---- public entry point ----
def parse_int_or_expr(s: str) -> int | None:
    """
    Return the integer typed in `s`, or None if it is not an integer at all
    (so the caller can treat the text as a command or a numeral).
    Raises UserInputError for numbers the engine can never accept.
    """
    n = _parse_int_literal(s)
    if n is not None:
        return n

    if looks_like_complex(s):
        raise UserInputError("numeral systems write whole numbers only (ℤ, not ℂ).")
    if _DECIMAL_FRACTION_RE.match(s):
        raise UserInputError(f"{s.strip()!r} is not a whole number.")

    try:
        return _eval_int_expr(s)
    except _IntExprError:
        return None
