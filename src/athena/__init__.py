from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("athena-numerals")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .convert import ConversionResult, convert
from .puzzle import Difficulty, PuzzleDefinition, PuzzleKind, check_answer, generate_puzzle
from .registry import LogicType, SystemDefinition, get_system, list_systems, load_registry
from .runtime import APPLY, CFG
from .trace import explain
from .transform import glyphs_to_int, parse_numeral
from .utility import (
    InsufficientRangeError,
    InvalidInputError,
    NumeralError,
    SchemaError,
    UnknownSystemError,
    UnrepresentableValueError,
)

__all__ = [
    "APPLY",
    "CFG",
    "ConversionResult",
    "Difficulty",
    "InsufficientRangeError",
    "InvalidInputError",
    "LogicType",
    "NumeralError",
    "PuzzleDefinition",
    "PuzzleKind",
    "SchemaError",
    "SystemDefinition",
    "UnknownSystemError",
    "UnrepresentableValueError",
    "__version__",
    "check_answer",
    "convert",
    "explain",
    "generate_puzzle",
    "get_system",
    "glyphs_to_int",
    "list_systems",
    "load_registry",
    "parse_numeral",
]
