# SPDX-License-Identifier: MIT
"""Parser for description files.

Statements and blocks are parsed by recursive descent; expressions use
precedence climbing. Problems are recorded as diagnostics rather than
raised immediately: after a broken top-level statement the parser skips
ahead to the next line that can start a statement and carries on, and
the complete diagnostic set is raised as a ParseError at the end.
"""

from __future__ import annotations

from collections import deque
from enum import IntEnum

from antimony.core.errors import ParseError
from antimony.dsl.ast import (
    ASSIGNMENT_OPERATORS,
    ArrayExpression,
    BinaryOperandExpression,
    BlockExpression,
    BooleanLiteralExpression,
    ConditionalExpression,
    DeclarationReferenceExpression,
    Expression,
    FunctionCallExpression,
    IntegerLiteralExpression,
    StringLiteralExpression,
    UnaryOperandExpression,
)
from antimony.dsl.diagnostics import Diagnostic, DiagnosticSet
from antimony.dsl.lexer import Lexer
from antimony.dsl.source import SourceFile, SourceRange
from antimony.dsl.token import Token, TokenKind

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1


class Precedence(IntEnum):
    NONE = 0
    ASSIGNMENT = 1
    OR = 2
    AND = 3
    EQUALITY = 4
    RELATION = 5
    SUM = 6
    PREFIX = 7
    CALL = 8


_PRECEDENCE: dict[TokenKind, Precedence] = {
    TokenKind.EQUAL: Precedence.ASSIGNMENT,
    TokenKind.PLUS_EQUAL: Precedence.ASSIGNMENT,
    TokenKind.MINUS_EQUAL: Precedence.ASSIGNMENT,
    TokenKind.PIPE_PIPE: Precedence.OR,
    TokenKind.AMPERSAND_AMPERSAND: Precedence.AND,
    TokenKind.EQUAL_EQUAL: Precedence.EQUALITY,
    TokenKind.BANG_EQUAL: Precedence.EQUALITY,
    TokenKind.LESS: Precedence.RELATION,
    TokenKind.LESS_EQUAL: Precedence.RELATION,
    TokenKind.GREATER: Precedence.RELATION,
    TokenKind.GREATER_EQUAL: Precedence.RELATION,
    TokenKind.PLUS: Precedence.SUM,
    TokenKind.MINUS: Precedence.SUM,
    TokenKind.DOT: Precedence.CALL,
    TokenKind.LBRACKET: Precedence.CALL,
}

# Tokens that always end the expression being parsed.
_TERMINATORS = frozenset(
    {
        TokenKind.IDENTIFIER,
        TokenKind.LBRACE,
        TokenKind.RBRACE,
        TokenKind.IF,
        TokenKind.ELSE,
    }
)


def unescape(body: str) -> str:
    """Decode the ``\\"`` and ``\\\\`` escapes of a string literal body."""
    chars: list[str] = []
    index = 0
    while index < len(body):
        char = body[index]
        if char == "\\" and index + 1 < len(body) and body[index + 1] in "\"\\":
            chars.append(body[index + 1])
            index += 2
        else:
            chars.append(char)
            index += 1
    return "".join(chars)


class ParserState:
    """Token cursor with a lookahead queue, diagnostics, and brace depth."""

    def __init__(self, source: SourceFile) -> None:
        self.source = source
        self.lexer = Lexer(source)
        self.diagnostics = DiagnosticSet()
        self.cursor = 0
        self.depth = 0
        self._lookahead: deque[Token] = deque()

    def peek(self, n: int = 0) -> Token | None:
        """Return the token ``n`` positions ahead without consuming it."""
        while len(self._lookahead) <= n:
            token = next(self.lexer, None)
            if token is None:
                return None
            self._lookahead.append(token)
        return self._lookahead[n]

    def take(self, kind: TokenKind | None = None) -> Token | None:
        """Consume the next token, optionally only if it has ``kind``."""
        token = self.peek()
        if token is None or (kind is not None and token.kind is not kind):
            return None
        self._lookahead.popleft()
        self.cursor = token.range.end
        if token.kind is TokenKind.LBRACE:
            self.depth += 1
        elif token.kind is TokenKind.RBRACE:
            self.depth = max(0, self.depth - 1)
        return token

    def here(self) -> SourceRange:
        return self.source.range(self.cursor, self.cursor)

    def starts_line(self, token: Token) -> bool:
        """True if a newline separates ``token`` from the last consumed one."""
        between = self.source.text[self.cursor : token.range.start]
        return self.cursor == 0 or "\n" in between

    def error(self, message: str, range: SourceRange | None = None) -> None:
        self.diagnostics.insert(Diagnostic.error(message, range or self.here()))

    def expected(self, kind: TokenKind) -> None:
        self.error(f"expected '{kind}'")


class Parser:
    """Parses one source file into a list of top-level statements.

    Example:
        statements = Parser(SourceFile("x = 1 + 2")).parse()
    """

    def __init__(self, source: SourceFile) -> None:
        self.source = source
        self._state = ParserState(source)

    @property
    def diagnostics(self) -> DiagnosticSet:
        return self._state.diagnostics

    def parse(self) -> list[Expression]:
        """Parse the whole file.

        Raises:
            ParseError: If any diagnostic was recorded.
        """
        state = self._state
        statements: list[Expression] = []
        while state.peek() is not None:
            start = state.cursor
            statement = self._statement()
            if statement is None:
                self._synchronize(progressed=state.cursor != start)
                continue
            statements.append(statement)

        if state.diagnostics:
            raise ParseError(state.diagnostics)

        assert state.peek() is None, "expected end of file"
        return statements

    def _synchronize(self, progressed: bool) -> None:
        # Skip to the next identifier or 'if' that begins a line outside
        # of any block.
        state = self._state
        if not progressed:
            state.take()
        while (token := state.peek()) is not None:
            if (
                state.depth == 0
                and token.kind in (TokenKind.IDENTIFIER, TokenKind.IF)
                and state.starts_line(token)
            ):
                return
            state.take()

    # Statements

    def _statement(self) -> Expression | None:
        state = self._state
        token = state.peek()
        if token is None:
            return None
        if token.kind is TokenKind.IF:
            return self._condition()

        before = len(state.diagnostics)
        expression = self._expression(Precedence.NONE)
        if expression is not None and (
            isinstance(expression, FunctionCallExpression) or expression.is_assignment
        ):
            return expression
        if len(state.diagnostics) == before:
            state.error(
                "expected assignment or function call",
                expression.range if expression is not None else None,
            )
        return None

    def _block(self) -> BlockExpression | None:
        state = self._state
        lbrace = state.take(TokenKind.LBRACE)
        if lbrace is None:
            state.expected(TokenKind.LBRACE)
            return None

        statements: list[Expression] = []
        while True:
            token = state.peek()
            if token is None:
                state.error(
                    "expected '}' at end of block", lbrace.range.extended(state.cursor)
                )
                return None
            if token.kind is TokenKind.RBRACE:
                break
            statement = self._statement()
            if statement is None:
                return None
            statements.append(statement)

        rbrace = state.take(TokenKind.RBRACE)
        assert rbrace is not None
        return BlockExpression(
            tuple(statements), lbrace.range.extended(rbrace.range.end)
        )

    def _condition(self) -> ConditionalExpression | None:
        state = self._state
        keyword = state.take(TokenKind.IF)
        assert keyword is not None

        if state.take(TokenKind.LPAREN) is None:
            state.expected(TokenKind.LPAREN)
            return None
        condition = self._expression(Precedence.NONE)
        if condition is None:
            return None
        if condition.is_assignment:
            state.error("assignment is not permitted in 'if'", condition.range)
            return None
        if state.take(TokenKind.RPAREN) is None:
            state.expected(TokenKind.RPAREN)
            return None

        if (token := state.peek()) is None or token.kind is not TokenKind.LBRACE:
            state.expected(TokenKind.LBRACE)
            return None
        positive = self._block()
        if positive is None:
            return None

        negative: Expression | None = None
        if state.take(TokenKind.ELSE) is not None:
            token = state.peek()
            if token is not None and token.kind is TokenKind.LBRACE:
                negative = self._block()
            elif token is not None and token.kind is TokenKind.IF:
                negative = self._condition()
            else:
                state.error("expected '{' or 'if' after 'else'")
                return None
            if negative is None:
                return None

        end = (negative or positive).range.end
        return ConditionalExpression(
            condition, positive, negative, keyword.range.extended(end)
        )

    # Expressions

    def _expression(self, precedence: Precedence) -> Expression | None:
        state = self._state
        lhs = self._primary()
        while lhs is not None:
            token = state.peek()
            if token is None or token.kind in _TERMINATORS:
                break
            operator = _PRECEDENCE.get(token.kind)
            if operator is None or operator < precedence:
                break

            if token.kind is TokenKind.DOT:
                state.error("member access is not supported", token.range)
                return None
            if token.kind is TokenKind.LBRACKET:
                state.error("subscripts are not supported", token.range)
                return None

            if token.kind in ASSIGNMENT_OPERATORS:
                lhs = self._assignment(lhs)
            else:
                lhs = self._binary(lhs, operator)
        return lhs

    def _primary(self) -> Expression | None:
        state = self._state
        token = state.peek()
        if token is None:
            state.error("unexpected end of file")
            return None

        kind = token.kind
        if kind is TokenKind.INTEGER:
            state.take()
            value = int(token.text)
            if not INT64_MIN <= value <= INT64_MAX:
                state.error("integer literal does not fit in 64 bits", token.range)
                return None
            return IntegerLiteralExpression(value, token.range)

        if kind is TokenKind.STRING:
            state.take()
            return StringLiteralExpression(unescape(token.text[1:-1]), token.range)

        if kind in (TokenKind.TRUE, TokenKind.FALSE):
            state.take()
            return BooleanLiteralExpression(kind is TokenKind.TRUE, token.range)

        if kind is TokenKind.BANG:
            state.take()
            operand = self._expression(Precedence.PREFIX)
            if operand is None:
                return None
            return UnaryOperandExpression(token, operand)

        if kind is TokenKind.LPAREN:
            state.take()
            inner = self._expression(Precedence.OR)
            if inner is None:
                return None
            if state.take(TokenKind.RPAREN) is None:
                state.expected(TokenKind.RPAREN)
                return None
            return inner

        if kind is TokenKind.LBRACKET:
            lbracket = state.take()
            assert lbracket is not None
            elements = self._list(lbracket, TokenKind.RBRACKET, trailing_comma=True)
            if elements is None:
                return None
            rbracket = state.take(TokenKind.RBRACKET)
            assert rbracket is not None
            return ArrayExpression(
                elements, lbracket.range.extended(rbracket.range.end)
            )

        if kind is TokenKind.IDENTIFIER:
            return self._apply()

        if kind is TokenKind.INVALID:
            if token.text.startswith('"'):
                state.error("unterminated string literal", token.range)
            else:
                state.error(f"invalid character '{token.text}'", token.range)
            return None

        state.error(f"unexpected '{token.text}'", token.range)
        return None

    def _list(
        self, opener: Token, terminator: TokenKind, *, trailing_comma: bool = False
    ) -> tuple[Expression, ...] | None:
        """Parse comma separated elements up to (not including) ``terminator``.

        Elements are parsed above assignment precedence so that a bare
        comma always separates elements.
        """
        state = self._state
        elements: list[Expression] = []
        if (token := state.peek()) is not None and token.kind is terminator:
            return ()

        while True:
            element = self._expression(Precedence.OR)
            if element is None:
                return None
            elements.append(element)

            token = state.peek()
            if token is None:
                state.error(
                    "unexpected end of file in list",
                    opener.range.extended(state.cursor),
                )
                return None
            if token.kind is terminator:
                return tuple(elements)
            if state.take(TokenKind.COMMA) is None:
                state.expected(TokenKind.COMMA)
                return None
            if trailing_comma and (token := state.peek()) is not None:
                if token.kind is terminator:
                    return tuple(elements)

    def _apply(self) -> Expression | None:
        state = self._state
        identifier = state.take(TokenKind.IDENTIFIER)
        assert identifier is not None
        reference = DeclarationReferenceExpression(identifier.text, identifier.range)

        lparen = state.take(TokenKind.LPAREN)
        if lparen is None:
            return reference

        arguments = self._list(lparen, TokenKind.RPAREN)
        if arguments is None:
            return None
        rparen = state.take(TokenKind.RPAREN)
        if rparen is None:
            state.expected(TokenKind.RPAREN)
            return None

        range = identifier.range.extended(rparen.range.end)
        scope: BlockExpression | None = None
        if (token := state.peek()) is not None and token.kind is TokenKind.LBRACE:
            scope = self._block()
            if scope is None:
                return None
        return FunctionCallExpression(reference, arguments, range, scope)

    def _assignment(self, lhs: Expression) -> Expression | None:
        state = self._state
        operation = state.take()
        assert operation is not None
        if not isinstance(lhs, DeclarationReferenceExpression):
            state.error(
                "the left-hand side of an assignment must be an identifier", lhs.range
            )
            return None

        before = len(state.diagnostics)
        value = self._expression(Precedence.OR)
        if value is None:
            if len(state.diagnostics) == before:
                state.error("expected right-hand side for assignment")
            return None
        return BinaryOperandExpression(operation, lhs, value)

    def _binary(self, lhs: Expression, precedence: Precedence) -> Expression | None:
        state = self._state
        operation = state.take()
        assert operation is not None

        before = len(state.diagnostics)
        rhs = self._expression(Precedence(precedence + 1))
        if rhs is None:
            if len(state.diagnostics) == before:
                state.error(
                    f"expected right-hand side expression for '{operation.kind}'"
                )
            return None
        return BinaryOperandExpression(operation, lhs, rhs)


def parse(source: SourceFile | str) -> list[Expression]:
    """Parse a description file into its top-level statements.

    Raises:
        ParseError: If the file has syntax errors.
    """
    if isinstance(source, str):
        source = SourceFile(source)
    return Parser(source).parse()
