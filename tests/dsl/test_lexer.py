# SPDX-License-Identifier: MIT
"""Tests for antimony.dsl.lexer."""

from antimony.dsl.lexer import Lexer, tokenize
from antimony.dsl.source import SourceFile
from antimony.dsl.token import TokenKind


def kinds(text: str, **kwargs) -> list[TokenKind]:
    return [token.kind for token in tokenize(text, **kwargs)]


class TestLexerBasics:
    def test_empty_input(self):
        """Test that blank input yields no tokens."""
        assert tokenize("") == []
        assert tokenize("   \n\t ") == []

    def test_lexer_is_lazy_iterator(self):
        """Test that tokens are produced on demand."""
        lexer = Lexer(SourceFile("a b"))
        assert iter(lexer) is lexer
        assert next(lexer).text == "a"
        assert next(lexer).text == "b"
        assert next(lexer, None) is None

    def test_identifiers_and_keywords(self):
        """Test telling keywords from identifiers."""
        tokens = tokenize("if else true false sources _private x1")
        assert [t.kind for t in tokens] == [
            TokenKind.IF,
            TokenKind.ELSE,
            TokenKind.TRUE,
            TokenKind.FALSE,
            TokenKind.IDENTIFIER,
            TokenKind.IDENTIFIER,
            TokenKind.IDENTIFIER,
        ]
        assert tokens[-1].text == "x1"

    def test_keyword_prefix_is_identifier(self):
        """Test that a word starting with a keyword is an identifier."""
        assert kinds("iffy elsewhere") == [TokenKind.IDENTIFIER, TokenKind.IDENTIFIER]

    def test_token_ranges(self):
        """Test token line and column ranges."""
        tokens = tokenize('name = "value"')
        spans = [(t.range.start, t.range.end) for t in tokens]
        assert spans == [(0, 4), (5, 6), (7, 14)]


class TestLexerLiterals:
    def test_integer(self):
        tokens = tokenize("42")
        assert [t.kind for t in tokens] == [TokenKind.INTEGER]
        assert tokens[0].text == "42"

    def test_negative_integer_after_operator(self):
        """Test that a minus after an operator starts a negative literal."""
        tokens = tokenize("x = -12")
        assert tokens[2].kind is TokenKind.INTEGER
        assert tokens[2].text == "-12"

    def test_minus_after_operand_is_subtraction(self):
        """Test that a minus after an operand is subtraction."""
        assert kinds("a -1") == [
            TokenKind.IDENTIFIER,
            TokenKind.MINUS,
            TokenKind.INTEGER,
        ]

    def test_string_with_escaped_quotes(self):
        """Test a string containing escaped quotes."""
        text = r'"foo \"bar\" baz"'
        tokens = tokenize(text)
        assert len(tokens) == 1
        assert tokens[0].kind is TokenKind.STRING
        assert tokens[0].text == text

    def test_string_ending_in_escaped_backslash(self):
        """Test that an escaped backslash does not escape the closing quote."""
        tokens = tokenize(r'"a\\" b')
        assert [t.kind for t in tokens] == [TokenKind.STRING, TokenKind.IDENTIFIER]

    def test_unterminated_string_is_invalid(self):
        """Test that an unterminated string becomes an invalid token."""
        tokens = tokenize('x = "abc')
        assert tokens[-1].kind is TokenKind.INVALID
        assert tokens[-1].text == '"abc'

    def test_trailing_backslash_is_bounded(self):
        """Test a string ending in a lone backslash."""
        tokens = tokenize('"abc\\')
        assert [t.kind for t in tokens] == [TokenKind.INVALID]


class TestLexerOperators:
    def test_compound_assignment(self):
        tokens = tokenize("a+=1")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER,
            TokenKind.PLUS_EQUAL,
            TokenKind.INTEGER,
        ]
        assert [t.text for t in tokens] == ["a", "+=", "1"]

    def test_two_character_operators_are_greedy(self):
        """Test that two-character operators win over their prefixes."""
        assert kinds("-= == != <= >= && ||") == [
            TokenKind.MINUS_EQUAL,
            TokenKind.EQUAL_EQUAL,
            TokenKind.BANG_EQUAL,
            TokenKind.LESS_EQUAL,
            TokenKind.GREATER_EQUAL,
            TokenKind.AMPERSAND_AMPERSAND,
            TokenKind.PIPE_PIPE,
        ]

    def test_single_character_punctuation(self):
        assert kinds("+ - ! = < > . , ( ) [ ] { }") == [
            TokenKind.PLUS,
            TokenKind.MINUS,
            TokenKind.BANG,
            TokenKind.EQUAL,
            TokenKind.LESS,
            TokenKind.GREATER,
            TokenKind.DOT,
            TokenKind.COMMA,
            TokenKind.LPAREN,
            TokenKind.RPAREN,
            TokenKind.LBRACKET,
            TokenKind.RBRACKET,
            TokenKind.LBRACE,
            TokenKind.RBRACE,
        ]

    def test_unrecognised_character_is_invalid(self):
        """Test that unknown characters become invalid tokens."""
        tokens = tokenize("a @ b")
        assert [t.kind for t in tokens] == [
            TokenKind.IDENTIFIER,
            TokenKind.INVALID,
            TokenKind.IDENTIFIER,
        ]
        assert tokens[1].text == "@"


class TestLexerComments:
    def test_comments_are_skipped(self):
        """Test that comments are dropped by default."""
        assert kinds("# leading\nx = 1 # trailing\n") == [
            TokenKind.IDENTIFIER,
            TokenKind.EQUAL,
            TokenKind.INTEGER,
        ]

    def test_keep_comments(self):
        """Test keeping comment tokens for the formatter."""
        tokens = tokenize("x # note\n", keep_comments=True)
        assert [t.kind for t in tokens] == [TokenKind.IDENTIFIER, TokenKind.COMMENT]
        assert tokens[1].text == "# note"

    def test_comment_does_not_affect_sign(self):
        """Test that a comment between operator and minus keeps the sign."""
        # The comment sits between '=' and '-1'; '-1' is still a literal.
        assert kinds("x = # c\n-1") == [
            TokenKind.IDENTIFIER,
            TokenKind.EQUAL,
            TokenKind.INTEGER,
        ]
