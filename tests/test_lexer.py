import pytest
from hypothesis import given
from hypothesis import strategies as st

from kpl.kpl_errors import ErrorCode, LexicalError
from kpl.kpl_lexer import CharacterStream, Lexer, Token, tokenize


def types_of(source: str) -> list[str]:
    return [tok.type for tok in tokenize(source)]


def test_program_header_tokens() -> None:
    assert tokenize("program P;") == [
        Token("PROGRAM", None, 1, 1),
        Token("IDENT", "P", 1, 9),
        Token("SEMICOLON", None, 1, 10),
        Token("EOF", None, 1, 11),
    ]


def test_symbol_tokens() -> None:
    code = ":= <= >= <> != ( ) [ ] (. .) + - * / = , ; : . < >"
    expected = [
        "ASSIGN",
        "LE",
        "GE",
        "NEQ",
        "NEQ",
        "LPAREN",
        "RPAREN",
        "LSEL",
        "RSEL",
        "LSEL",
        "RSEL",
        "PLUS",
        "MINUS",
        "TIMES",
        "SLASH",
        "EQ",
        "COMMA",
        "SEMICOLON",
        "COLON",
        "PERIOD",
        "LT",
        "GT",
        "EOF",
    ]
    assert types_of(code) == expected


def test_keywords_are_case_insensitive() -> None:
    assert types_of("Begin END wHiLe") == ["BEGIN", "END", "WHILE", "EOF"]


def test_identifier_keeps_spelling() -> None:
    tok = Lexer(CharacterStream("myVar2")).next_token()
    assert tok.type == "IDENT"
    assert tok.value == "myVar2"


def test_number_value_is_int() -> None:
    tok = Lexer(CharacterStream("123")).next_token()
    assert tok.type == "NUMBER"
    assert tok.value == 123


def test_char_constant() -> None:
    tok = Lexer(CharacterStream("'a'")).next_token()
    assert tok.type == "CHARCONST"
    assert tok.value == "a"


def test_index_digraphs_after_number() -> None:
    assert types_of("a(.1.)") == ["IDENT", "LSEL", "NUMBER", "RSEL", "EOF"]


def test_period_after_end() -> None:
    assert types_of("end.") == ["END", "PERIOD", "EOF"]


def test_line_and_column_tracking() -> None:
    tokens = tokenize("x\n  y")
    assert (tokens[1].line, tokens[1].col) == (2, 3)


def test_comment_is_skipped() -> None:
    tokens = tokenize("(* a comment *) x")
    assert tokens[0].type == "IDENT"
    assert tokens[0].col == 17


def test_unterminated_comment_raises() -> None:
    with pytest.raises(LexicalError) as excinfo:
        tokenize("(* x")
    assert excinfo.value.code is ErrorCode.END_OF_COMMENT
    assert (excinfo.value.line, excinfo.value.col) == (1, 5)


def test_identifier_length_limit() -> None:
    assert tokenize("a" * 15)[0].type == "IDENT"
    with pytest.raises(LexicalError) as excinfo:
        tokenize("a" * 16)
    assert excinfo.value.code is ErrorCode.IDENT_TOO_LONG


@pytest.mark.parametrize("source", ["'ab'", "''", "'a"])  # type: ignore[misc]
def test_invalid_char_constant(source: str) -> None:
    with pytest.raises(LexicalError) as excinfo:
        tokenize(source)
    assert excinfo.value.code is ErrorCode.INVALID_CHAR_CONSTANT
    assert (excinfo.value.line, excinfo.value.col) == (1, 1)


def test_invalid_symbol_reports_position() -> None:
    with pytest.raises(LexicalError) as excinfo:
        tokenize("x ? y")
    assert excinfo.value.code is ErrorCode.INVALID_SYMBOL
    assert str(excinfo.value) == "1-3:Invalid symbol!"


def test_eof_is_repeated() -> None:
    lexer = Lexer(CharacterStream(""))
    assert lexer.next_token() == Token("EOF", None, 1, 1)
    assert lexer.next_token() == Token("EOF", None, 1, 1)


def test_token_repr_eq_and_hash() -> None:
    t1 = Token("NUMBER", 42, 1, 2)
    t2 = Token("NUMBER", 42, 1, 2)
    t3 = Token("IDENT", "x")

    assert repr(t1) == "Token(NUMBER, 42)"
    assert t1 == t2
    assert t1 != t3
    assert len({t1, t2, t3}) == 2


def test_token_is_immutable() -> None:
    tok = Token("IDENT", "x", 1, 1)
    with pytest.raises(AttributeError):
        tok.value = "y"  # type: ignore[misc]


@pytest.mark.parametrize(
    "token,expected",
    [
        (Token("IDENT", "x", 1, 9), "1-9:IDENT(x)"),
        (Token("NUMBER", 5, 2, 3), "2-3:NUMBER(5)"),
        (Token("CHARCONST", "a", 1, 1), "1-1:CHARCONST('a')"),
        (Token("BEGIN", None, 4, 1), "4-1:BEGIN"),
    ],
)  # type: ignore[misc]
def test_token_transcript_form(token: Token, expected: str) -> None:
    assert str(token) == expected


def test_character_stream_next_past_eof_raises() -> None:
    stream = CharacterStream("")
    with pytest.raises(EOFError, match="Attempted to read past end of source"):
        stream.next()


def test_character_stream_starts_at_line_one_column_one() -> None:
    stream = CharacterStream("a\nb")
    assert (stream.position, stream.line, stream.column) == (0, 1, 1)
    assert stream.next() == "a"
    assert stream.next() == "\n"
    assert (stream.position, stream.line, stream.column) == (2, 2, 1)
    assert stream.peek() == "b"
    assert not stream.end_of_file()


def test_peek_beyond_end_returns_empty() -> None:
    stream = CharacterStream("ab")
    stream.next()
    stream.next()
    assert stream.end_of_file()
    assert stream.peek() == ""
    assert stream.peek(5) == ""


@given(st.text(alphabet=st.characters(blacklist_categories=["Cs"]), max_size=100))  # type: ignore[misc]
def test_lexer_only_raises_lexical_errors(text: str) -> None:
    try:
        tokens = tokenize(text)
    except LexicalError:
        return
    assert tokens[-1].type == "EOF"
