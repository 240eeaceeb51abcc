# SPDX-License-Identifier: MIT
"""Token kinds produced by the lexer."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from antimony.dsl.source import SourceRange


class TokenKind(Enum):
    """All token kinds.

    Operator and punctuation kinds carry their spelling as the value so
    diagnostics can quote them.
    """

    INVALID = "invalid"
    COMMENT = "comment"
    IDENTIFIER = "identifier"
    INTEGER = "integer literal"
    STRING = "string literal"

    # keywords
    ELSE = "else"
    FALSE = "false"
    IF = "if"
    TRUE = "true"

    # assignment operators
    EQUAL = "="
    PLUS_EQUAL = "+="
    MINUS_EQUAL = "-="

    # unary operators
    BANG = "!"

    # binary operators
    PLUS = "+"
    MINUS = "-"
    LESS = "<"
    LESS_EQUAL = "<="
    GREATER = ">"
    GREATER_EQUAL = ">="
    EQUAL_EQUAL = "=="
    BANG_EQUAL = "!="
    AMPERSAND_AMPERSAND = "&&"
    PIPE_PIPE = "||"

    # punctuation
    LPAREN = "("
    RPAREN = ")"
    LBRACE = "{"
    RBRACE = "}"
    LBRACKET = "["
    RBRACKET = "]"
    COMMA = ","
    DOT = "."

    @property
    def is_literal(self) -> bool:
        return self in (TokenKind.INTEGER, TokenKind.STRING)

    @property
    def is_keyword(self) -> bool:
        return self in KEYWORDS.values()

    def __str__(self) -> str:
        return self.value


KEYWORDS: dict[str, TokenKind] = {
    "else": TokenKind.ELSE,
    "false": TokenKind.FALSE,
    "if": TokenKind.IF,
    "true": TokenKind.TRUE,
}

# Longest spellings first so that two-character operators win.
OPERATORS: tuple[tuple[str, TokenKind], ...] = (
    ("+=", TokenKind.PLUS_EQUAL),
    ("-=", TokenKind.MINUS_EQUAL),
    ("==", TokenKind.EQUAL_EQUAL),
    ("!=", TokenKind.BANG_EQUAL),
    ("<=", TokenKind.LESS_EQUAL),
    (">=", TokenKind.GREATER_EQUAL),
    ("&&", TokenKind.AMPERSAND_AMPERSAND),
    ("||", TokenKind.PIPE_PIPE),
    ("+", TokenKind.PLUS),
    ("-", TokenKind.MINUS),
    ("!", TokenKind.BANG),
    ("=", TokenKind.EQUAL),
    ("<", TokenKind.LESS),
    (">", TokenKind.GREATER),
    (".", TokenKind.DOT),
    (",", TokenKind.COMMA),
    ("(", TokenKind.LPAREN),
    (")", TokenKind.RPAREN),
    ("[", TokenKind.LBRACKET),
    ("]", TokenKind.RBRACKET),
    ("{", TokenKind.LBRACE),
    ("}", TokenKind.RBRACE),
)


@dataclass(frozen=True)
class Token:
    """A lexical token and the source range it covers."""

    kind: TokenKind
    range: SourceRange

    @property
    def text(self) -> str:
        return self.range.text

    def __repr__(self) -> str:
        return f"Token({self.kind.name}, {self.text!r})"
