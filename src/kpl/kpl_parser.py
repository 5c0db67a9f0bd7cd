"""
KPL Language Parser

Checks that a stream of KPL tokens forms a syntactically valid program.

This module implements a predictive (LL(1)) recursive-descent parser. Every
production picks its alternative by inspecting a single lookahead token; there is
no backtracking. The parser builds no tree: a successful parse simply returns,
and the first violation raises.

Supported Constructs
--------------------
- Program and block structure: `PROGRAM name; <block>.`
- Declarations: `CONST`, `TYPE` and `VAR` sections, nested `FUNCTION` and
  `PROCEDURE` declarations with optional parameter lists
- Types: `INTEGER`, `CHAR`, type aliases and `ARRAY [n] OF <type>` to any depth
- Statements: assignment (including multi-target `a, b := 1, 2`), `CALL`,
  `BEGIN ... END`, `IF/THEN/ELSE`, `WHILE/DO`, `FOR/TO/DO`, `REPEAT/UNTIL`
  and the empty statement
- Expressions: unary sign, `+ -`, `* /`, parentheses, indexed variables and
  function calls used as values
- Conditions: an expression optionally compared with `= <> < <= > >=`

Parser Behavior
---------------
- The cursor holds exactly two tokens: `current_token` (last matched) and
  `look_ahead` (next unconsumed). `eat()` is the only way input is consumed.
- Each matched token is written to an optional transcript stream, one per line.
- Trace records (`Parsing a Block ....`) go to the `kpl.kpl_parser` logger at
  DEBUG level.
- Panic mode: the first violation raises and nothing is caught internally.

Entry Points
------------
- `Parser(source).parse()`: Parse a full program from a lexer or token iterable.
- `parse_source()`: Lex and parse a source string.

Raises
------
KPLSyntaxError
    When a production's expectations are violated (invalid statement, factor, ...).
MissingTokenError
    When a required token is absent.
LexicalError
    Propagated from the lexer when the token source itself fails.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Iterator
from typing import Protocol, TextIO

from kpl.kpl_constants import (
    ARRAY,
    ASSIGN,
    BEGIN,
    CALL,
    CHARCONST,
    COLON,
    COMMA,
    CONST,
    DO,
    ELSE,
    END,
    EOF,
    EQ,
    FOR,
    FUNCTION,
    IDENT,
    IF,
    LPAREN,
    LSEL,
    NUMBER,
    OF,
    PERIOD,
    PROCEDURE,
    PROGRAM,
    REPEAT,
    RPAREN,
    RSEL,
    SEMICOLON,
    THEN,
    TO,
    TYPE,
    UNTIL,
    VAR,
    WHILE,
    add_ops,
    basic_types,
    comparison_ops,
    mult_ops,
    statement_follow,
    subroutine_keywords,
)
from kpl.kpl_errors import ErrorCode, KPLSyntaxError, MissingTokenError
from kpl.kpl_lexer import CharacterStream, Lexer, Token

logger = logging.getLogger(__name__)


class TokenSource(Protocol):
    def next_token(self) -> Token: ...  # pragma: no cover


class _IterableSource:
    """Adapts a plain iterable of tokens to the pull-based ``next_token`` interface.

    Once the iterable runs dry, every pull yields an EOF token placed at the
    position of the last token seen.
    """

    def __init__(self, tokens: Iterable[Token]) -> None:
        self._tokens: Iterator[Token] = iter(tokens)
        self._last: Token | None = None

    def next_token(self) -> Token:
        tok = next(self._tokens, None)
        if tok is None:
            line, col = (self._last.line, self._last.col) if self._last else (0, 0)
            return Token(EOF, None, line, col)
        self._last = tok
        return tok


class Parser:
    """
    KPL Parser Class

    Drives one parse over a token source. All cursor state lives on the instance;
    each grammar nonterminal is one `parse_*` method.

    Attributes
    ----------
    source : TokenSource
        The token producer (a `Lexer`, or an adapted iterable of `Token`).
    current_token : Token | None
        The most recently matched token; None before the first match.
    look_ahead : Token | None
        The next unconsumed token. All decisions are made on its type.
    transcript : TextIO | None
        Optional stream receiving one line per matched token.

    Methods
    -------
    scan()
        Shift the two-token window forward by one token.
    eat(token_type)
        Match the lookahead against `token_type` and advance, or raise.
    parse()
        Parse a complete program and release the cursor.

    Raises
    ------
    KPLSyntaxError
        When an invalid construct or malformed syntax is encountered.
    """

    def __init__(
        self,
        source: TokenSource | Iterable[Token],
        transcript: TextIO | None = None,
    ) -> None:
        if hasattr(source, "next_token"):
            self.source: TokenSource = source  # type: ignore[assignment]
        else:
            self.source = _IterableSource(source)  # type: ignore[arg-type]
        self.transcript = transcript
        self.current_token: Token | None = None
        self.look_ahead: Token | None = self.source.next_token()

    # ---------------------------------------------------------------- cursor

    def scan(self) -> None:
        self.current_token = self.look_ahead
        self.look_ahead = self.source.next_token()

    def eat(self, token_type: str) -> None:
        tok = self.peek()
        if tok.type != token_type:
            raise MissingTokenError(token_type, tok.line, tok.col)
        if self.transcript is not None:
            self.transcript.write(f"{tok}\n")
        self.scan()

    def peek(self) -> Token:
        if self.look_ahead is None:
            raise RuntimeError("Parser has already finished; create a new Parser")
        return self.look_ahead

    def error(self, code: ErrorCode) -> KPLSyntaxError:
        """Build the error for `code` at the lookahead position."""
        tok = self.peek()
        return KPLSyntaxError(code, tok.line, tok.col)

    def eat_comma_ident_list(self) -> int:
        """Consume `(',' ident)*`; return how many identifiers were eaten."""
        count = 0
        while self.peek().type == COMMA:
            self.eat(COMMA)
            self.eat(IDENT)
            count += 1
        return count

    def close(self) -> None:
        """Release both cursor slots."""
        self.current_token = None
        self.look_ahead = None

    # ------------------------------------------------------- program / block

    def parse(self) -> None:
        """Parse a full KPL program. The cursor is released whether or not it succeeds."""
        try:
            self.parse_program()
        finally:
            self.close()

    def parse_program(self) -> None:
        logger.debug("Parsing a Program ....")
        self.eat(PROGRAM)
        self.eat(IDENT)
        self.eat(SEMICOLON)
        self.parse_block()
        self.eat(PERIOD)
        logger.debug("Program parsed!")

    def parse_block(self) -> None:
        """Block -> [CONST ...] [TYPE ...] [VAR ...] SubDecl* BEGIN Statements END"""
        logger.debug("Parsing a Block ....")
        if self.peek().type == CONST:
            self.eat(CONST)
            self.parse_const_decl()
            self.parse_const_decls()

        if self.peek().type == TYPE:
            self.eat(TYPE)
            self.parse_type_decl()
            self.parse_type_decls()

        if self.peek().type == VAR:
            self.eat(VAR)
            self.parse_var_decl()
            self.parse_var_decls()

        self.parse_sub_decls()

        self.eat(BEGIN)
        self.parse_statements()
        self.eat(END)
        logger.debug("Block parsed!")

    # ---------------------------------------------------------- declarations

    def parse_const_decls(self) -> None:
        while self.peek().type == IDENT:
            self.parse_const_decl()

    def parse_const_decl(self) -> None:
        self.eat(IDENT)
        self.eat_comma_ident_list()
        self.eat(EQ)
        self.parse_constant()
        self.eat(SEMICOLON)

    def parse_type_decls(self) -> None:
        while self.peek().type == IDENT:
            self.parse_type_decl()

    def parse_type_decl(self) -> None:
        self.eat(IDENT)
        self.eat_comma_ident_list()
        self.eat(EQ)
        self.parse_type()
        self.eat(SEMICOLON)

    def parse_var_decls(self) -> None:
        while self.peek().type == IDENT:
            self.parse_var_decl()

    def parse_var_decl(self) -> None:
        self.eat(IDENT)
        self.eat_comma_ident_list()
        self.eat(COLON)
        self.parse_type()
        self.eat(SEMICOLON)

    def parse_sub_decls(self) -> None:
        logger.debug("Parsing subroutines ....")
        while self.peek().type in subroutine_keywords:
            if self.peek().type == FUNCTION:
                self.parse_func_decl()
            else:
                self.parse_proc_decl()
        logger.debug("Subroutines parsed ....")

    def parse_func_decl(self) -> None:
        logger.debug("Parsing a function ....")
        self.eat(FUNCTION)
        self.eat(IDENT)
        self.parse_params()
        self.eat(COLON)
        self.parse_basic_type()
        self.eat(SEMICOLON)
        self.parse_block()
        self.eat(SEMICOLON)
        logger.debug("Function parsed ....")

    def parse_proc_decl(self) -> None:
        logger.debug("Parsing a procedure ....")
        self.eat(PROCEDURE)
        self.eat(IDENT)
        self.parse_params()
        self.eat(SEMICOLON)
        self.parse_block()
        self.eat(SEMICOLON)
        logger.debug("Procedure parsed ....")

    # ------------------------------------------------------ types / constants

    def parse_unsigned_constant(self) -> None:
        if self.peek().type not in (NUMBER, CHARCONST):
            raise self.error(ErrorCode.INVALID_CONSTANT)
        self.eat(self.peek().type)

    def parse_constant(self) -> None:
        if self.peek().type in add_ops:
            self.eat(self.peek().type)
        self.parse_unsigned_constant()

    def parse_type(self) -> None:
        """Type -> INTEGER | CHAR | ident | ARRAY '[' number ']' OF Type

        Array nesting is consumed iteratively, so depth is unbounded.
        """
        while self.peek().type == ARRAY:
            self.eat(ARRAY)
            self.eat(LSEL)
            self.eat(NUMBER)
            self.eat(RSEL)
            self.eat(OF)
        tok_type = self.peek().type
        if tok_type not in basic_types and tok_type != IDENT:
            raise self.error(ErrorCode.INVALID_TYPE)
        self.eat(tok_type)

    def parse_basic_type(self) -> None:
        if self.peek().type not in basic_types:
            raise self.error(ErrorCode.INVALID_BASICTYPE)
        self.eat(self.peek().type)

    # ------------------------------------------------------------ parameters

    def parse_params(self) -> None:
        if self.peek().type != LPAREN:
            return
        self.eat(LPAREN)
        self.parse_param()
        while self.peek().type == SEMICOLON:
            self.eat(SEMICOLON)
            self.parse_param()
        self.eat(RPAREN)

    def parse_param(self) -> None:
        if self.peek().type == VAR:
            self.eat(VAR)
        if self.peek().type != IDENT:
            raise self.error(ErrorCode.INVALID_PARAM)
        self.eat(IDENT)
        self.eat(COLON)
        self.parse_basic_type()

    # ------------------------------------------------------------ statements

    def parse_statements(self) -> None:
        self.parse_statement()
        while True:
            tok_type = self.peek().type
            if tok_type == SEMICOLON:
                self.eat(SEMICOLON)
                self.parse_statement()
            elif tok_type in (END, UNTIL):
                return
            else:
                # eat() raises here: the lookahead cannot be ';' on this branch
                self.eat(SEMICOLON)
                raise self.error(ErrorCode.INVALID_STATEMENT)

    def parse_statement(self) -> None:
        tok_type = self.peek().type
        if tok_type == IDENT:
            self.parse_assign_st()
        elif tok_type == CALL:
            self.parse_call_st()
        elif tok_type == BEGIN:
            self.parse_group_st()
        elif tok_type == IF:
            self.parse_if_st()
        elif tok_type == WHILE:
            self.parse_while_st()
        elif tok_type == FOR:
            self.parse_for_st()
        elif tok_type == REPEAT:
            self.parse_repeat_st()
        elif tok_type in statement_follow:
            # empty statement
            return
        else:
            raise self.error(ErrorCode.INVALID_STATEMENT)

    def parse_assign_st(self) -> None:
        """Assign -> ident [Indexes] (',' ident)* ':=' Expression (',' Expression)*

        The number of targets must equal the number of expressions.
        """
        logger.debug("Parsing an assign statement ....")
        self.eat(IDENT)
        if self.peek().type == LSEL:
            self.parse_indexes()
        targets = 1 + self.eat_comma_ident_list()

        self.eat(ASSIGN)
        self.parse_expression()
        values = 1
        while self.peek().type == COMMA:
            self.eat(COMMA)
            self.parse_expression()
            values += 1

        if targets != values:
            logger.debug(
                "Assignment arity mismatch: %d target(s), %d value(s)", targets, values
            )
            raise self.error(ErrorCode.INVALID_STATEMENT)
        logger.debug("Assign statement parsed ....")

    def parse_call_st(self) -> None:
        logger.debug("Parsing a call statement ....")
        self.eat(CALL)
        self.eat(IDENT)
        self.parse_arguments()
        logger.debug("Call statement parsed ....")

    def parse_group_st(self) -> None:
        logger.debug("Parsing a group statement ....")
        self.eat(BEGIN)
        self.parse_statements()
        self.eat(END)
        logger.debug("Group statement parsed ....")

    def parse_if_st(self) -> None:
        logger.debug("Parsing an if statement ....")
        self.eat(IF)
        self.parse_condition()
        self.eat(THEN)
        self.parse_statement()
        if self.peek().type == ELSE:
            self.parse_else_st()
        logger.debug("If statement parsed ....")

    def parse_else_st(self) -> None:
        self.eat(ELSE)
        self.parse_statement()

    def parse_while_st(self) -> None:
        logger.debug("Parsing a while statement ....")
        self.eat(WHILE)
        self.parse_condition()
        self.eat(DO)
        self.parse_statement()
        logger.debug("While statement parsed ....")

    def parse_for_st(self) -> None:
        logger.debug("Parsing a for statement ....")
        self.eat(FOR)
        self.eat(IDENT)
        self.eat(ASSIGN)
        self.parse_expression()
        self.eat(TO)
        self.parse_expression()
        self.eat(DO)
        self.parse_statement()
        logger.debug("For statement parsed ....")

    def parse_repeat_st(self) -> None:
        logger.debug("Parsing a repeat statement ....")
        self.eat(REPEAT)
        self.parse_statements()
        self.eat(UNTIL)
        self.parse_condition()
        logger.debug("Repeat statement parsed ....")

    # ------------------------------------------------- expressions/conditions

    def parse_arguments(self) -> None:
        if self.peek().type != LPAREN:
            return
        self.eat(LPAREN)
        self.parse_expression()
        while True:
            tok_type = self.peek().type
            if tok_type == COMMA:
                self.eat(COMMA)
                self.parse_expression()
            elif tok_type in (RPAREN, EOF):
                # input ending inside the list is reported as the missing ')'
                break
            else:
                raise self.error(ErrorCode.INVALID_ARGUMENTS)
        self.eat(RPAREN)

    def parse_condition(self) -> None:
        self.parse_expression()
        if self.peek().type in comparison_ops:
            self.eat(self.peek().type)
            self.parse_expression()

    def parse_expression(self) -> None:
        """Expression -> ['+'|'-'] Term (('+'|'-') Term)*"""
        logger.debug("Parsing an expression")
        if self.peek().type in add_ops:
            self.eat(self.peek().type)
        self.parse_term()
        while self.peek().type in add_ops:
            self.eat(self.peek().type)
            self.parse_term()
        logger.debug("Expression parsed")

    def parse_term(self) -> None:
        self.parse_factor()
        while self.peek().type in mult_ops:
            self.eat(self.peek().type)
            self.parse_factor()

    def parse_factor(self) -> None:
        """Factor -> number | charconst | ident [Indexes | Arguments] | '(' Expression ')'"""
        tok_type = self.peek().type
        if tok_type in (NUMBER, CHARCONST):
            self.eat(tok_type)
        elif tok_type == IDENT:
            self.eat(IDENT)
            if self.peek().type == LSEL:
                self.parse_indexes()
            elif self.peek().type == LPAREN:
                self.parse_arguments()
        elif tok_type == LPAREN:
            self.eat(LPAREN)
            self.parse_expression()
            self.eat(RPAREN)
        else:
            raise self.error(ErrorCode.INVALID_FACTOR)

    def parse_indexes(self) -> None:
        while self.peek().type == LSEL:
            self.eat(LSEL)
            self.parse_expression()
            self.eat(RSEL)


def parse_source(source: str, transcript: TextIO | None = None) -> None:
    """Lex and parse KPL source text.

    Raises:
        KPLError: On the first lexical or syntax error.
    """
    Parser(Lexer(CharacterStream(source)), transcript=transcript).parse()


__all__ = ["Parser", "TokenSource", "parse_source"]
