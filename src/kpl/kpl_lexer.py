"""
Lexical analyzer for the KPL programming language.

This module turns raw KPL source text into the token stream consumed by the parser:

Classes:
    CharacterStream: Stream abstraction for reading characters with line/column tracking.
    Token: Immutable token with type, value, and source location.
    Lexer: Pulls tokens one at a time out of a CharacterStream.

Features:
    - Skips whitespace and `(* ... *)` comments
    - Case-insensitive keywords; identifiers keep their spelling
    - Integer numbers (value is an ``int``) and `'c'` character constants
    - Two-character symbols (`:=`, `<=`, `>=`, `<>`, `!=`) and the `(.` / `.)` index digraphs

Raises:
    LexicalError: On unterminated comments, over-long identifiers, malformed
        character constants and unknown symbols.

Example:
    >>> lexer = Lexer(CharacterStream("program P;"))
    >>> lexer.next_token()
    Token(PROGRAM, None)

Exports:
    - CharacterStream
    - Token
    - Lexer
    - tokenize
"""

from typing import Any

from kpl.kpl_constants import (
    CHARCONST,
    EOF,
    IDENT,
    MAX_IDENT_LEN,
    NUMBER,
    keyword_hashmap,
    symbol_hashmap,
)
from kpl.kpl_errors import ErrorCode, LexicalError


def is_letter(ch: str) -> bool:
    return ch.isascii() and ch.isalpha()


def is_digit(ch: str) -> bool:
    return ch.isascii() and ch.isdigit()


class CharacterStream:
    """
    A utility for reading characters from a string source with line and column tracking.

    Attributes:
        source (str): The input source string.
        position (int): Current index in the source.
        line (int): Current line number (1-indexed).
        column (int): Current column number (1-indexed).
    """

    def __init__(self, source: str):
        self.source = source
        self.position = 0
        self.line = 1
        self.column = 1

    def next(self) -> str:
        """
        Consumes and returns the next character in the stream.

        Returns:
            str: The consumed character. Line and column advance past it.

        Raises:
            EOFError: If reading past the end of the source.
        """
        if self.position >= len(self.source):
            raise EOFError(
                f"Attempted to read past end of source at position=<{self.position}>, line=<{self.line}>"
            )
        char = self.source[self.position]
        if char == "\n":
            self.line += 1
            self.column = 1
        else:
            self.column += 1
        self.position += 1
        return char

    def peek(self, offset: int = 0) -> str:
        """
        Looks ahead without consuming.

        Args:
            offset (int): Distance from the current position.

        Returns:
            str: The character at ``position + offset``, or "" when out of bounds.
        """
        index = self.position + offset
        if index < 0 or index >= len(self.source):
            return ""
        return self.source[index]

    def end_of_file(self) -> bool:
        """
        Returns:
            bool: True once every character has been consumed.
        """
        return self.position >= len(self.source)


class Token:
    """Represents a single lexical token of a KPL program.

    Tokens are immutable once built.

    Attributes:
        type (str): The token type (e.g. 'IDENT', 'NUMBER', 'BEGIN', 'SEMICOLON', 'EOF').
        value (str | int | None): Identifier text, numeric value or character; None
            for keywords, symbols and the end-marker.
        line (int): The 1-based line number where the token starts.
        col (int): The 1-based column number where the token starts.
    """

    __slots__ = ("type", "value", "line", "col")

    def __init__(
        self, type_: str, value: str | int | None = None, line: int = 0, col: int = 0
    ):
        object.__setattr__(self, "type", type_)
        object.__setattr__(self, "value", value)
        object.__setattr__(self, "line", line)
        object.__setattr__(self, "col", col)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError(f"Token is immutable; cannot set {name!r}")

    def __repr__(self) -> str:
        return f"Token({self.type}, {self.value})"

    def __str__(self) -> str:
        """Transcript form: ``line-col:TYPE`` or ``line-col:TYPE(value)``."""
        if self.value is None or self.type not in (IDENT, NUMBER, CHARCONST):
            return f"{self.line}-{self.col}:{self.type}"
        if self.type == CHARCONST:
            return f"{self.line}-{self.col}:{self.type}('{self.value}')"
        return f"{self.line}-{self.col}:{self.type}({self.value})"

    def __eq__(self, other: Any) -> bool:
        return (
            isinstance(other, Token)
            and self.type == other.type
            and self.value == other.value
            and self.line == other.line
            and self.col == other.col
        )

    def __hash__(self) -> int:
        return hash((self.type, self.value, self.line, self.col))


class Lexer:
    """Lexical analyzer for KPL.

    Produces tokens lazily: each call to :meth:`next_token` scans just enough
    input for one token. Once the input is exhausted every call returns an
    ``EOF`` token positioned at the end of the source.

    Attributes:
        stream (CharacterStream): The source stream to tokenize.
    """

    def __init__(self, stream: CharacterStream) -> None:
        self.stream = stream

    def peek(self, offset: int = 0) -> str:
        return self.stream.peek(offset)

    def advance(self) -> str:
        return self.stream.next()

    def skip_blanks_and_comments(self) -> None:
        while not self.stream.end_of_file():
            if self.peek().isspace():
                self.advance()
            elif self.peek() == "(" and self.peek(1) == "*":
                self.skip_comment()
            else:
                break

    def skip_comment(self) -> None:
        """Consumes a `(* ... *)` comment, including its delimiters."""
        self.advance()
        self.advance()
        while not self.stream.end_of_file():
            if self.peek() == "*" and self.peek(1) == ")":
                self.advance()
                self.advance()
                return
            self.advance()
        raise LexicalError(ErrorCode.END_OF_COMMENT, self.stream.line, self.stream.column)

    def read_ident_or_keyword(self, line: int, col: int) -> Token:
        ident = ""
        while not self.stream.end_of_file() and (
            is_letter(self.peek()) or is_digit(self.peek())
        ):
            ident += self.advance()
        if len(ident) > MAX_IDENT_LEN:
            raise LexicalError(ErrorCode.IDENT_TOO_LONG, line, col)
        keyword = keyword_hashmap.get(ident.upper())
        if keyword:
            return Token(keyword, None, line, col)
        return Token(IDENT, ident, line, col)

    def read_number(self, line: int, col: int) -> Token:
        digits = ""
        while not self.stream.end_of_file() and is_digit(self.peek()):
            digits += self.advance()
        return Token(NUMBER, int(digits), line, col)

    def read_char_constant(self, line: int, col: int) -> Token:
        self.advance()  # opening quote
        ch = self.peek()
        if ch == "" or not ch.isprintable() or ch == "'" or self.peek(1) != "'":
            raise LexicalError(ErrorCode.INVALID_CHAR_CONSTANT, line, col)
        self.advance()
        self.advance()  # closing quote
        return Token(CHARCONST, ch, line, col)

    def read_symbol(self, line: int, col: int) -> Token:
        """Matches the longest symbol at the current position."""
        pair = self.peek() + self.peek(1)
        if len(pair) == 2 and pair in symbol_hashmap:
            self.advance()
            self.advance()
            return Token(symbol_hashmap[pair], None, line, col)
        if self.peek() in symbol_hashmap:
            return Token(symbol_hashmap[self.advance()], None, line, col)
        raise LexicalError(ErrorCode.INVALID_SYMBOL, line, col)

    def next_token(self) -> Token:
        """Consumes and returns the next Token from the stream.

        Raises:
            LexicalError: If a malformed token is encountered.
        """
        self.skip_blanks_and_comments()

        line, col = self.stream.line, self.stream.column
        if self.stream.end_of_file():
            return Token(EOF, None, line, col)

        ch = self.peek()

        if is_letter(ch):
            return self.read_ident_or_keyword(line, col)
        if is_digit(ch):
            return self.read_number(line, col)
        if ch == "'":
            return self.read_char_constant(line, col)
        return self.read_symbol(line, col)


def tokenize(source: str) -> list[Token]:
    """Scans a whole source string, returning its tokens up to and including EOF."""
    lexer = Lexer(CharacterStream(source))
    tokens = []
    while True:
        tok = lexer.next_token()
        tokens.append(tok)
        if tok.type == EOF:
            break
    return tokens


__all__ = ["CharacterStream", "Lexer", "Token", "tokenize"]
