# SPDX-License-Identifier: MIT
"""Structured parser diagnostics."""

from __future__ import annotations

from collections.abc import Iterator
from dataclasses import dataclass
from enum import Enum

from antimony.dsl.source import SourceRange


class Severity(Enum):
    NOTE = "note"
    WARNING = "warning"
    ERROR = "error"


@dataclass(frozen=True)
class Diagnostic:
    """A message attached to a range of a source file.

    Attributes:
        severity: How serious the problem is.
        message: Human-readable description.
        range: The offending source range.
        notes: Additional note-level diagnostics.
    """

    severity: Severity
    message: str
    range: SourceRange
    notes: tuple[Diagnostic, ...] = ()

    def __post_init__(self) -> None:
        if any(note.severity is not Severity.NOTE for note in self.notes):
            raise ValueError("diagnostic notes must have note severity")

    @classmethod
    def note(cls, message: str, range: SourceRange) -> Diagnostic:
        return cls(Severity.NOTE, message, range)

    @classmethod
    def warning(
        cls, message: str, range: SourceRange, notes: tuple[Diagnostic, ...] = ()
    ) -> Diagnostic:
        return cls(Severity.WARNING, message, range, notes)

    @classmethod
    def error(
        cls, message: str, range: SourceRange, notes: tuple[Diagnostic, ...] = ()
    ) -> Diagnostic:
        return cls(Severity.ERROR, message, range, notes)

    def sort_key(self) -> tuple[str, int, str]:
        return (self.range.file.name, self.range.start, self.message)

    def __str__(self) -> str:
        text = f"{self.range.location}: {self.severity.value}: {self.message}"
        for note in self.notes:
            text += f"\n{note}"
        return text


class DiagnosticSet:
    """An unordered, de-duplicated collection of diagnostics.

    Rendering sorts by file, then offset, so output is stable.
    """

    def __init__(self) -> None:
        self._elements: set[Diagnostic] = set()
        self.errors = False

    def insert(self, diagnostic: Diagnostic) -> bool:
        """Add a diagnostic; returns False if it was already present."""
        self.errors = self.errors or diagnostic.severity is Severity.ERROR
        if diagnostic in self._elements:
            return False
        self._elements.add(diagnostic)
        return True

    @property
    def empty(self) -> bool:
        return not self._elements

    def sorted(self) -> list[Diagnostic]:
        return sorted(self._elements, key=Diagnostic.sort_key)

    def __iter__(self) -> Iterator[Diagnostic]:
        return iter(self.sorted())

    def __len__(self) -> int:
        return len(self._elements)

    def __bool__(self) -> bool:
        return bool(self._elements)

    def __str__(self) -> str:
        return "\n".join(str(diagnostic) for diagnostic in self.sorted())
