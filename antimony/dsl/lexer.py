# SPDX-License-Identifier: MIT
"""Lexical scanner for description files.

The lexer is a forward-only iterator: each call to ``next()`` scans one
token starting at the cursor. It never raises on bad input; unrecognised
characters and unterminated strings become ``INVALID`` tokens which the
parser turns into diagnostics.
"""

from __future__ import annotations

from collections.abc import Iterator

from antimony.dsl.source import SourceFile
from antimony.dsl.token import KEYWORDS, OPERATORS, Token, TokenKind

# Tokens after which a '-' is a binary operator rather than a sign.
_OPERAND_END = frozenset(
    {
        TokenKind.IDENTIFIER,
        TokenKind.INTEGER,
        TokenKind.STRING,
        TokenKind.TRUE,
        TokenKind.FALSE,
        TokenKind.RPAREN,
        TokenKind.RBRACKET,
    }
)


def _is_identifier_head(char: str) -> bool:
    return char.isalpha() or char == "_"


def _is_identifier_tail(char: str) -> bool:
    return char.isalpha() or char.isdigit() or char == "_"


def _is_digit(char: str) -> bool:
    return "0" <= char <= "9"


class Lexer:
    """Iterator over the tokens of a source file.

    Example:
        for token in Lexer(SourceFile('x = "y"')):
            print(token.kind, token.text)

    Args:
        source: The file to scan.
        keep_comments: Yield ``COMMENT`` tokens instead of skipping them.
    """

    def __init__(self, source: SourceFile, *, keep_comments: bool = False) -> None:
        self.source = source
        self.keep_comments = keep_comments
        self._text = source.text
        self._cursor = 0
        self._previous: TokenKind | None = None

    def __iter__(self) -> Iterator[Token]:
        return self

    def __next__(self) -> Token:
        while True:
            token = self._scan()
            if token is None:
                raise StopIteration
            if token.kind is TokenKind.COMMENT and not self.keep_comments:
                continue
            if token.kind is not TokenKind.COMMENT:
                self._previous = token.kind
            return token

    def _peek(self, offset: int = 0) -> str:
        index = self._cursor + offset
        return self._text[index] if index < len(self._text) else ""

    def _token(self, kind: TokenKind, start: int) -> Token:
        return Token(kind, self.source.range(start, self._cursor))

    def _scan(self) -> Token | None:
        text = self._text
        end = len(text)

        while self._cursor < end and text[self._cursor].isspace():
            self._cursor += 1
        if self._cursor == end:
            return None

        start = self._cursor
        head = text[start]

        if head == "#":
            newline = text.find("\n", start)
            self._cursor = end if newline == -1 else newline
            return self._token(TokenKind.COMMENT, start)

        if _is_identifier_head(head):
            while self._cursor < end and _is_identifier_tail(text[self._cursor]):
                self._cursor += 1
            word = text[start : self._cursor]
            return self._token(KEYWORDS.get(word, TokenKind.IDENTIFIER), start)

        if _is_digit(head) or (
            head == "-"
            and _is_digit(self._peek(1))
            and self._previous not in _OPERAND_END
        ):
            self._cursor += 1
            while self._cursor < end and _is_digit(text[self._cursor]):
                self._cursor += 1
            return self._token(TokenKind.INTEGER, start)

        if head == '"':
            return self._scan_string(start)

        for spelling, kind in OPERATORS:
            if text.startswith(spelling, start):
                self._cursor += len(spelling)
                return self._token(kind, start)

        self._cursor += 1
        return self._token(TokenKind.INVALID, start)

    def _scan_string(self, start: int) -> Token:
        text = self._text
        end = len(text)
        self._cursor = start + 1
        escape = False
        while self._cursor < end:
            char = text[self._cursor]
            self._cursor += 1
            if char == '"' and not escape:
                return self._token(TokenKind.STRING, start)
            escape = char == "\\" and not escape
        # Unterminated: the literal runs to the end of input.
        return self._token(TokenKind.INVALID, start)


def tokenize(source: SourceFile | str, *, keep_comments: bool = False) -> list[Token]:
    """Scan a whole buffer into a list of tokens."""
    if isinstance(source, str):
        source = SourceFile(source)
    return list(Lexer(source, keep_comments=keep_comments))
