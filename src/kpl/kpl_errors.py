"""
Error types raised by the KPL front end.

Every error is fatal: the lexer and parser raise on the first violation and never
resume. Errors render as ``"<line>-<col>:<message>"``.

Classes:
    ErrorCode: Enumeration of lexical and syntactic error kinds with their messages.
    KPLError: Base class; a ``SyntaxError`` carrying an error code and source position.
    LexicalError: Raised by the lexer on malformed input characters.
    KPLSyntaxError: Raised by the parser when a production's expectations are violated.
    MissingTokenError: Raised by the parser when a specific token was expected.
"""

from enum import Enum

from kpl.kpl_constants import describe


class ErrorCode(Enum):
    END_OF_COMMENT = "End of comment expected!"
    IDENT_TOO_LONG = "Identification too long!"
    INVALID_CHAR_CONSTANT = "Invalid const char!"
    INVALID_SYMBOL = "Invalid symbol!"
    INVALID_CONSTANT = "Invalid constant!"
    INVALID_TYPE = "Invalid type!"
    INVALID_BASICTYPE = "Invalid basic type!"
    INVALID_PARAM = "Invalid parameter!"
    INVALID_STATEMENT = "Invalid statement!"
    INVALID_ARGUMENTS = "Invalid arguments!"
    INVALID_FACTOR = "Invalid factor!"
    MISSING_TOKEN = "Missing {expected}"


class KPLError(SyntaxError):
    """Base class for all KPL front-end errors.

    Attributes:
        code (ErrorCode): The error kind.
        line (int): 1-based line of the offending token.
        col (int): 1-based column of the offending token.
    """

    def __init__(self, code: ErrorCode, line: int, col: int) -> None:
        self.code = code
        self.line = line
        self.col = col
        super().__init__(self.render())

    @property
    def message(self) -> str:
        return self.code.value

    def render(self) -> str:
        return f"{self.line}-{self.col}:{self.message}"

    def __str__(self) -> str:
        return self.render()


class LexicalError(KPLError):
    pass


class KPLSyntaxError(KPLError):
    pass


class MissingTokenError(KPLSyntaxError):
    """Raised when the lookahead is not the token a production requires.

    Attributes:
        expected (str): The token type that was required.
    """

    def __init__(self, expected: str, line: int, col: int) -> None:
        self.expected = expected
        super().__init__(ErrorCode.MISSING_TOKEN, line, col)

    @property
    def message(self) -> str:
        return self.code.value.format(expected=describe(self.expected))


__all__ = [
    "ErrorCode",
    "KPLError",
    "KPLSyntaxError",
    "LexicalError",
    "MissingTokenError",
]
