# -----------------------------------------------------------------------------
#  Utility functions and the error taxonomy
# -----------------------------------------------------------------------------

from __future__ import annotations

import os
import shutil
import sys


class UserInputError(Exception):
    pass


# --- Domain errors ------------------------------------------------------------
# Raised synchronously by the engine; the CLI turns them into one-line messages.

class NumeralError(Exception):
    """Base class for every error raised by the numeral engine."""


class UnknownSystemError(NumeralError, LookupError):
    def __init__(self, system_id: object, known: tuple[str, ...] = ()):
        self.system_id = system_id
        self.known = tuple(known)
        msg = f"unknown numeral system {system_id!r}"
        if self.known:
            msg += f" (known: {', '.join(self.known)})"
        super().__init__(msg)


class InvalidInputError(NumeralError, ValueError):
    pass


class UnrepresentableValueError(NumeralError):
    pass


class InsufficientRangeError(NumeralError):
    pass


class SchemaError(NumeralError):
    """A numeral-system table violates the data model; fatal at load time."""


def require_natural(value: object, what: str = "value") -> int:
    """Return value as int if it is a non-negative integer, else raise InvalidInputError."""
    # bool is an int subclass but never a quantity
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidInputError(f"{what} must be a non-negative integer, got {type(value).__name__} {value!r}")
    if value < 0:
        raise InvalidInputError(f"{what} must be a non-negative integer, got {value}")
    return int(value)


def clear_screen(keep_scrollback: bool = False) -> None:
    if not sys.stdout.isatty():
        return
    if os.name == "nt":
        os.system("cls")
        return
    seq = "\x1b[H\x1b[2J" if keep_scrollback else "\x1b[H\x1b[2J\x1b[3J"
    sys.stdout.write(seq)
    sys.stdout.flush()


def get_terminal_width(default=80):
    """
    Return the terminal's character width if detected, else the default
    value (80 by default).
    """
    try:
        return shutil.get_terminal_size().columns
    except Exception:
        return default


def get_terminal_height(default=24):
    """
    Get the number of terminal lines.
    """
    try:
        return shutil.get_terminal_size().lines
    except Exception:
        return default


def validate_output_setting(output_file: str | None) -> str | None:
    """
    Validate output setting.
    - None / "" => ok (screen only)
    - path/to/file => must not be a reserved name or a source/document extension
    Returns the output_file, or raises ValueError.
    """
    FORBIDDEN_FILENAMES = {
        ".gitignore",
        "LICENSE",
        "pyproject.toml",
        "systems.toml",
        # Windows reserved device names (case-insensitive on Windows)
        "con", "prn", "aux", "nul",
        "com1", "com2", "com3", "com4", "com5", "com6", "com7", "com8", "com9",
        "lpt1", "lpt2", "lpt3", "lpt4", "lpt5", "lpt6", "lpt7", "lpt8", "lpt9",
    }

    FORBIDDEN_EXTENSIONS = {".py", ".md", ".toml"}

    if not output_file:
        return output_file  # screen only

    if output_file.endswith(("/", "\\")):
        raise ValueError("Output must be a file, not a directory")

    basename = os.path.basename(output_file)
    name_no_ext, ext = os.path.splitext(basename)
    ext = ext.lower()

    if basename.lower() in FORBIDDEN_FILENAMES or name_no_ext.lower() in FORBIDDEN_FILENAMES:
        raise ValueError(f"Forbidden output filename: {basename}")

    if ext in FORBIDDEN_EXTENSIONS:
        raise ValueError(f"Forbidden output file extension: {ext}")

    return output_file


def typename(v: object) -> str:
    return type(v).__name__


def flatten_dotted(d: dict, prefix: str = "") -> dict[str, object]:
    out: dict[str, object] = {}
    for k, v in (d or {}).items():
        key = f"{prefix}.{k}" if prefix else str(k)
        if isinstance(v, dict):
            out.update(flatten_dotted(v, key))
        else:
            out[key] = v
    return out
