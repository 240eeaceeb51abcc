# SPDX-License-Identifier: MIT
"""AST nodes for the description language.

Nodes are immutable and each carries the source range it was parsed
from so that evaluation errors can point back at the text.
"""

from __future__ import annotations

from dataclasses import dataclass

from antimony.dsl.source import SourceRange
from antimony.dsl.token import Token, TokenKind

ASSIGNMENT_OPERATORS = frozenset(
    {TokenKind.EQUAL, TokenKind.PLUS_EQUAL, TokenKind.MINUS_EQUAL}
)


class Expression:
    """Base class for all nodes."""

    range: SourceRange

    @property
    def is_assignment(self) -> bool:
        return False


@dataclass(frozen=True)
class ArrayExpression(Expression):
    elements: tuple[Expression, ...]
    range: SourceRange


@dataclass(frozen=True)
class BinaryOperandExpression(Expression):
    operation: Token
    lhs: Expression
    rhs: Expression

    @property
    def range(self) -> SourceRange:  # type: ignore[override]
        return self.lhs.range.extended(self.rhs.range.end)

    @property
    def is_assignment(self) -> bool:
        return self.operation.kind in ASSIGNMENT_OPERATORS


@dataclass(frozen=True)
class UnaryOperandExpression(Expression):
    operation: Token
    operand: Expression

    @property
    def range(self) -> SourceRange:  # type: ignore[override]
        return self.operation.range.extended(self.operand.range.end)


@dataclass(frozen=True)
class BlockExpression(Expression):
    statements: tuple[Expression, ...]
    range: SourceRange


@dataclass(frozen=True)
class ConditionalExpression(Expression):
    """``if (condition) { positive } else negative``.

    ``negative`` is a block, another conditional (``else if``), or None.
    """

    condition: Expression
    positive: BlockExpression
    negative: Expression | None
    range: SourceRange


@dataclass(frozen=True)
class DeclarationReferenceExpression(Expression):
    name: str
    range: SourceRange


@dataclass(frozen=True)
class FunctionCallExpression(Expression):
    callee: DeclarationReferenceExpression
    arguments: tuple[Expression, ...]
    range: SourceRange
    scope: BlockExpression | None = None


@dataclass(frozen=True)
class BooleanLiteralExpression(Expression):
    value: bool
    range: SourceRange


@dataclass(frozen=True)
class IntegerLiteralExpression(Expression):
    value: int
    range: SourceRange


@dataclass(frozen=True)
class StringLiteralExpression(Expression):
    value: str
    range: SourceRange
