# SPDX-License-Identifier: MIT
"""Custom exceptions for antimony.

All antimony exceptions inherit from AntimonyError, which includes
optional source location information for better error messages.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from antimony.dsl.diagnostics import DiagnosticSet
    from antimony.dsl.source import SourceRange


class AntimonyError(Exception):
    """Base class for all antimony exceptions.

    Attributes:
        message: The error message.
        location: Optional source range where the error occurred.
    """

    def __init__(
        self,
        message: str,
        location: SourceRange | None = None,
    ) -> None:
        self.message = message
        self.location = location
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        if self.location:
            return f"{self.location}: {self.message}"
        return self.message


class ParseError(AntimonyError):
    """A description file could not be parsed.

    The lexer and parser accumulate diagnostics rather than stopping at the
    first problem; a non-empty set is surfaced once per file as this error.

    Attributes:
        diagnostics: Every diagnostic recorded while parsing the file.
    """

    def __init__(self, diagnostics: DiagnosticSet) -> None:
        self.diagnostics = diagnostics
        super().__init__(str(diagnostics))


class ExecutionError(AntimonyError):
    """Error while evaluating a description file.

    Raised for type mismatches, arity mismatches, undefined variables,
    targets declared where they are not permitted, and failed assertions.
    """


class ResolutionError(AntimonyError):
    """A label could not be resolved or its description file loaded."""


class MissingDependencyError(ResolutionError):
    """A dependency label names a target that does not exist.

    Attributes:
        label: The label that could not be found.
        dependent: The label of the target that referenced it, or None
            for a requested root.
    """

    def __init__(
        self,
        label: str,
        dependent: str | None = None,
        location: SourceRange | None = None,
    ) -> None:
        self.label = label
        self.dependent = dependent
        message = f"unknown target '{label}'"
        if dependent is not None:
            message += f" (referenced by '{dependent}')"
        super().__init__(message, location)


class DependencyCycleError(AntimonyError):
    """Circular dependency detected in the build graph.

    Attributes:
        cycle: The labels forming the cycle.
    """

    def __init__(
        self,
        cycle: list[str],
        location: SourceRange | None = None,
    ) -> None:
        self.cycle = cycle
        cycle_str = " -> ".join(cycle)
        super().__init__(f"dependency cycle: {cycle_str}", location)


class GenerateError(AntimonyError):
    """Error during the generate phase.

    Raised when build file generation fails.
    """
