# SPDX-License-Identifier: MIT
"""Source buffers and positions within them.

A SourceFile owns the text of one description file. Locations and ranges
are character offsets into that text; they are only turned into
line/column pairs when rendered for a diagnostic.
"""

from __future__ import annotations

import bisect
from dataclasses import dataclass, field
from pathlib import Path


class SourceFile:
    """The text of a description file (or an in-memory buffer).

    Attributes:
        path: Path the text was read from, or None for a buffer.
        name: Display name used in diagnostics.
        text: The complete source text.
    """

    def __init__(
        self, text: str, *, name: str = "<buffer>", path: Path | None = None
    ) -> None:
        self.text = text
        self.path = path
        self.name = str(path) if path is not None else name
        self._lines = [0]
        for index, char in enumerate(text):
            if char == "\n":
                self._lines.append(index + 1)

    @classmethod
    def from_path(cls, path: Path | str) -> SourceFile:
        """Read a UTF-8 source file from disk."""
        path = Path(path)
        return cls(path.read_text(encoding="utf-8"), path=path)

    @property
    def directory(self) -> Path | None:
        return self.path.parent if self.path is not None else None

    def position(self, index: int) -> tuple[int, int]:
        """Convert an offset into a 1-based (line, column) pair."""
        line = bisect.bisect_right(self._lines, index)
        column = index - self._lines[line - 1] + 1
        return line, column

    def location(self, index: int) -> SourceLocation:
        return SourceLocation(self, index)

    def range(self, start: int, end: int) -> SourceRange:
        return SourceRange(self, start, end)

    def __len__(self) -> int:
        return len(self.text)

    def __repr__(self) -> str:
        return f"SourceFile({self.name!r})"


@dataclass(frozen=True)
class SourceLocation:
    """A single offset within a source file."""

    file: SourceFile = field(repr=False)
    index: int

    @property
    def line(self) -> int:
        return self.file.position(self.index)[0]

    @property
    def column(self) -> int:
        return self.file.position(self.index)[1]

    def __str__(self) -> str:
        line, column = self.file.position(self.index)
        return f"{self.file.name}:{line}:{column}"


@dataclass(frozen=True)
class SourceRange:
    """A half-open range of offsets ``[start, end)`` within a source file."""

    file: SourceFile = field(repr=False)
    start: int
    end: int

    @property
    def text(self) -> str:
        return self.file.text[self.start : self.end]

    @property
    def location(self) -> SourceLocation:
        return SourceLocation(self.file, self.start)

    def extended(self, upto: int) -> SourceRange:
        """Return a range from this range's start up to ``upto``."""
        if upto < self.end:
            raise ValueError("a range can only be extended forwards")
        return SourceRange(self.file, self.start, upto)

    def __str__(self) -> str:
        line, column = self.file.position(self.start)
        head = f"{self.file.name}:{line}:{column}"
        if self.start == self.end:
            return head
        end_line, end_column = self.file.position(self.end)
        if end_line == line:
            return f"{head}-{end_column}"
        return f"{head}-{end_line}:{end_column}"
