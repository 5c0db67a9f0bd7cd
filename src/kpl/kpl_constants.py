"""
Token vocabulary for the KPL language.

Token types are plain strings, shared by the lexer, the parser and the test suite.

Exports:
    - keyword_hashmap: upper-cased keyword spelling -> token type
    - symbol_hashmap: symbol spelling -> token type
    - token_descriptions: token type -> human-readable form used in "Missing ..." errors
    - basic_types, add_ops, mult_ops, comparison_ops, statement_follow: token-type sets
      the parser branches on
    - MAX_IDENT_LEN: longest identifier the lexer accepts
"""

MAX_IDENT_LEN = 15

# Token classes
IDENT = "IDENT"
NUMBER = "NUMBER"
CHARCONST = "CHARCONST"
EOF = "EOF"

# Keywords
PROGRAM = "PROGRAM"
CONST = "CONST"
TYPE = "TYPE"
VAR = "VAR"
INTEGER = "INTEGER"
CHAR = "CHAR"
ARRAY = "ARRAY"
OF = "OF"
FUNCTION = "FUNCTION"
PROCEDURE = "PROCEDURE"
BEGIN = "BEGIN"
END = "END"
CALL = "CALL"
IF = "IF"
THEN = "THEN"
ELSE = "ELSE"
WHILE = "WHILE"
DO = "DO"
FOR = "FOR"
TO = "TO"
REPEAT = "REPEAT"
UNTIL = "UNTIL"

# Symbols
SEMICOLON = "SEMICOLON"
COLON = "COLON"
PERIOD = "PERIOD"
COMMA = "COMMA"
ASSIGN = "ASSIGN"
EQ = "EQ"
NEQ = "NEQ"
LT = "LT"
LE = "LE"
GT = "GT"
GE = "GE"
PLUS = "PLUS"
MINUS = "MINUS"
TIMES = "TIMES"
SLASH = "SLASH"
LPAREN = "LPAREN"
RPAREN = "RPAREN"
LSEL = "LSEL"
RSEL = "RSEL"

keywords: tuple[str, ...] = (
    PROGRAM,
    CONST,
    TYPE,
    VAR,
    INTEGER,
    CHAR,
    ARRAY,
    OF,
    FUNCTION,
    PROCEDURE,
    BEGIN,
    END,
    CALL,
    IF,
    THEN,
    ELSE,
    WHILE,
    DO,
    FOR,
    TO,
    REPEAT,
    UNTIL,
)

# Keywords are spelled the same as their token type
keyword_hashmap: dict[str, str] = {kw: kw for kw in keywords}

symbol_hashmap: dict[str, str] = {
    ";": SEMICOLON,
    ":": COLON,
    ".": PERIOD,
    ",": COMMA,
    ":=": ASSIGN,
    "=": EQ,
    "<>": NEQ,
    "!=": NEQ,
    "<": LT,
    "<=": LE,
    ">": GT,
    ">=": GE,
    "+": PLUS,
    "-": MINUS,
    "*": TIMES,
    "/": SLASH,
    "(": LPAREN,
    ")": RPAREN,
    "[": LSEL,
    "]": RSEL,
    "(.": LSEL,
    ".)": RSEL,
}

token_descriptions: dict[str, str] = {
    IDENT: "an identification",
    NUMBER: "a number",
    CHARCONST: "a constant char",
    EOF: "end of file",
    **{kw: f"keyword {kw}" for kw in keywords},
    SEMICOLON: "';'",
    COLON: "':'",
    PERIOD: "'.'",
    COMMA: "','",
    ASSIGN: "':='",
    EQ: "'='",
    NEQ: "'<>'",
    LT: "'<'",
    LE: "'<='",
    GT: "'>'",
    GE: "'>='",
    PLUS: "'+'",
    MINUS: "'-'",
    TIMES: "'*'",
    SLASH: "'/'",
    LPAREN: "'('",
    RPAREN: "')'",
    LSEL: "'['",
    RSEL: "']'",
}

basic_types: frozenset[str] = frozenset({INTEGER, CHAR})
add_ops: frozenset[str] = frozenset({PLUS, MINUS})
mult_ops: frozenset[str] = frozenset({TIMES, SLASH})
comparison_ops: frozenset[str] = frozenset({EQ, NEQ, LT, LE, GT, GE})
subroutine_keywords: frozenset[str] = frozenset({FUNCTION, PROCEDURE})

# Tokens that may directly follow a statement, so an empty statement is legal there
statement_follow: frozenset[str] = frozenset({SEMICOLON, END, ELSE, UNTIL})


def describe(token_type: str) -> str:
    """Return the human-readable form of a token type, e.g. ``"keyword BEGIN"``."""
    return token_descriptions.get(token_type, token_type)
