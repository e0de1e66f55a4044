# output_manager.py

from __future__ import annotations

import os
import sys

from athena.fmt import strip_ansi
from athena.workspace import workspace_dir


def resolve_output_path(path: str, workspace_root: str | os.PathLike) -> str:
    """
    Resolve user-provided output path.

    Rules:
    - '~' expanded to user home
    - Absolute paths unchanged
    - Relative paths are relative to workspace_root
    """
    if not path:
        raise ValueError("Output path is empty")

    path = os.path.expanduser(path)

    if os.path.isabs(path):
        return os.path.normpath(path)

    return os.path.normpath(os.path.join(os.fspath(workspace_root), path))


class OutputManager:
    """
    Handles all printing/output, to screen and optionally to one file.

    Usage:
        om = OutputManager(output_file="results/athena.txt")
        om.write("MCMXCIV")   # prints and appends (ANSI stripped) to the file
        om.close()            # blank line between runs
    """

    def __init__(self, output_file: str | None = None, quiet: bool = False):
        """
        Parameters:
            output_file:
                None or ""       => screen only
                path/to/file.txt => append all runs to this file
                                    (relative paths live in the workspace)
            quiet: if True, no output to screen (only to file)
        """
        self.quiet = quiet
        self.output_file = output_file or ""
        self._buffer: list[str] = []
        self._path: str | None = None
        self._file_failed = False

        if self.output_file:
            path = resolve_output_path(self.output_file, workspace_dir())
            parent = os.path.dirname(path)
            if parent:
                os.makedirs(parent, exist_ok=True)
            self._path = path

    @property
    def path(self) -> str | None:
        return self._path

    def write(self, *args, sep: str = " ", end: str = "\n") -> None:
        """Write to screen and file (if configured)."""
        text = sep.join(str(a) for a in args) + end
        self._buffer.append(text)

        if not self.quiet:
            print(text, end="")

        self._append(strip_ansi(text))

    def getvalue(self) -> str:
        """Returns everything written (with color codes)."""
        return "".join(self._buffer)

    def _append(self, text: str) -> None:
        if not self._path or self._file_failed:
            return
        try:
            with open(self._path, "a", encoding="utf-8") as fh:
                fh.write(text)
        except OSError as e:
            # warn once; screen output carries on
            self._file_failed = True
            print(f"[WARNING] Could not write output file: {self._path} ({type(e).__name__}: {e})", file=sys.stderr)

    def close(self) -> None:
        """Add a separator line between runs in the output file."""
        if self._buffer:
            self._append("\n")
