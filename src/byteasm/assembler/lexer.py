"""
Assembly Language Lexer
=======================

This module implements the lexer (tokenizer) for byteasm assembly source.
The compiler pulls tokens on demand with next() and peeks with
lookahead(); there is no separate tokenize-everything pass.

Token Types
-----------
- INSTRUCTION: An identifier naming a catalog mnemonic (mov, jmp, ...)
- REGISTER: An identifier naming a register (a, b, c, d)
- KEYWORD: db or equ
- NAME: Any other identifier (labels, constants)
- NUMBER: A numeric literal, kept as raw text
- OPERATOR: + or -
- CHAR: Any other single character (',', ':', '$', ...)
- EOF: End of input

Newlines
--------
Newlines are skipped by default. Passing skip_newline=False returns a
newline as a CHAR token instead, which is how the compiler tells an
instruction without operands from one whose operands continue.

Numbers
-------
A number is a run of digits, continued through any letters and digits
that follow, so 0x1F, 0b101 and 12h all come out as single NUMBER tokens.
Interpreting the text (and rejecting 12h) is left to the compiler.

Comments
--------
A semicolon starts a comment that runs to the end of the line.

The lexer never raises: characters it does not recognise become CHAR
tokens and are reported by the compiler where they are unexpected.

Example
-------
>>> lexer = Lexer("start: jmp start")
>>> lexer.next()
Token(NAME, 'start', 0:0)
>>> lexer.next()
Token(CHAR, ':', 0:5)
"""

from dataclasses import dataclass
from enum import Enum, auto
from typing import Iterable, Optional
import string

from byteasm.errors import SourceLocation
from byteasm.assembler.opcodes import DEFAULT_CATALOG, KEYWORDS


# =============================================================================
# Token Type Enumeration
# =============================================================================

class TokenType(Enum):
    """Token classifications."""
    INSTRUCTION = auto()
    NUMBER = auto()
    NAME = auto()
    CHAR = auto()
    REGISTER = auto()
    EOF = auto()
    KEYWORD = auto()
    OPERATOR = auto()


# =============================================================================
# Token Data Class
# =============================================================================

@dataclass(frozen=True)
class Token:
    """
    A single token from the source code.

    Attributes:
        type: The TokenType classification
        value: The raw token text (None for EOF)
        line: Line number in source (0-indexed)
        column: Column number in source (0-indexed)
        filename: Name of the source file
    """
    type: TokenType
    value: Optional[str]
    line: int
    column: int
    filename: str = "<input>"

    def __str__(self) -> str:
        """Render the token as it appears in diagnostics."""
        if self.type is TokenType.EOF:
            return "<eof>"
        return repr(self.value)

    def __repr__(self) -> str:
        if self.value is not None:
            return f"Token({self.type.name}, {self.value!r}, {self.line}:{self.column})"
        return f"Token({self.type.name}, {self.line}:{self.column})"

    @property
    def location(self) -> SourceLocation:
        """Return a SourceLocation for error reporting."""
        return SourceLocation(self.filename, self.line, self.column)

    def is_char(self, char: str) -> bool:
        """Check for a specific CHAR token."""
        return self.type is TokenType.CHAR and self.value == char


# =============================================================================
# Lexer Implementation
# =============================================================================

class Lexer:
    """
    Tokenizes assembly source on demand.

    Usage:
        lexer = Lexer(source_text, filename)
        while (token := lexer.next()).type is not TokenType.EOF:
            ...

    Attributes:
        source: The source code being tokenized
        filename: Name of the source file (for error reporting)
    """

    IDENT_START = string.ascii_letters + "_"
    IDENT_CHARS = string.ascii_letters + string.digits + "_"
    WHITESPACE = " \t\r"
    OPERATORS = "+-"

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        mnemonics: Optional[Iterable[str]] = None,
        registers: Optional[Iterable[str]] = None,
    ):
        """
        Args:
            source: The assembly source code to tokenize
            filename: Name of the source file (for error messages)
            mnemonics: Identifiers classified as INSTRUCTION
                       (default: the default catalog's mnemonics)
            registers: Identifiers classified as REGISTER
        """
        self.source = source
        self.filename = filename
        self.mnemonics = frozenset(
            DEFAULT_CATALOG.mnemonics if mnemonics is None else mnemonics
        )
        self.registers = frozenset(
            DEFAULT_CATALOG.registers if registers is None else registers
        )

        self._pos = 0
        self._line = 0
        self._column = 0

        # Split lazily, only needed for error context
        self._lines: Optional[list[str]] = None

    # =========================================================================
    # Public Interface
    # =========================================================================

    def next(self, skip_newline: bool = True) -> Token:
        """
        Consume and return the next token.

        Args:
            skip_newline: If False, a newline is returned as a CHAR token
        """
        self._skip_blank(skip_newline)

        char = self._peek()
        if not char:
            return self._make_token(TokenType.EOF, None)
        if char in self.IDENT_START:
            return self._read_name()
        if char in string.digits:
            return self._read_number()

        token = self._make_token(
            TokenType.OPERATOR if char in self.OPERATORS else TokenType.CHAR,
            char,
        )
        self._advance()
        return token

    def lookahead(self, skip_newline: bool = True) -> Token:
        """Return the next token without consuming it."""
        saved = (self._pos, self._line, self._column)
        token = self.next(skip_newline)
        self._pos, self._line, self._column = saved
        return token

    def line_text(self, line: int) -> str:
        """Return the text of a source line (0-indexed), without newline."""
        if self._lines is None:
            self._lines = self.source.split("\n")
        if 0 <= line < len(self._lines):
            return self._lines[line].rstrip("\r")
        return ""

    # =========================================================================
    # Character Access
    # =========================================================================

    def _peek(self) -> str:
        """Current character, or empty string at end of source."""
        if self._pos >= len(self.source):
            return ""
        return self.source[self._pos]

    def _advance(self) -> str:
        """Consume the current character, updating line and column."""
        char = self._peek()
        if not char:
            return ""
        self._pos += 1
        if char == "\n":
            self._line += 1
            self._column = 0
        else:
            self._column += 1
        return char

    def _make_token(self, token_type: TokenType, value: Optional[str],
                    line: Optional[int] = None,
                    column: Optional[int] = None) -> Token:
        return Token(
            type=token_type,
            value=value,
            line=self._line if line is None else line,
            column=self._column if column is None else column,
            filename=self.filename,
        )

    # =========================================================================
    # Whitespace and Comment Handling
    # =========================================================================

    def _skip_blank(self, skip_newline: bool) -> None:
        """Skip whitespace, comments and (optionally) newlines."""
        while True:
            char = self._peek()
            # Note: '' is in every string, so check for end of source first
            if char and (char in self.WHITESPACE or (skip_newline and char == "\n")):
                self._advance()
            elif char == ";":
                while self._peek() and self._peek() != "\n":
                    self._advance()
            else:
                return

    # =========================================================================
    # Token Scanners
    # =========================================================================

    def _read_name(self) -> Token:
        """Scan an identifier and classify it."""
        line, column = self._line, self._column
        start = self._pos
        while self._peek() and self._peek() in self.IDENT_CHARS:
            self._advance()
        name = self.source[start:self._pos]

        if name in self.mnemonics:
            token_type = TokenType.INSTRUCTION
        elif name in self.registers:
            token_type = TokenType.REGISTER
        elif name in KEYWORDS:
            token_type = TokenType.KEYWORD
        else:
            token_type = TokenType.NAME
        return self._make_token(token_type, name, line, column)

    def _read_number(self) -> Token:
        """Scan a digit run plus any trailing letters and digits."""
        line, column = self._line, self._column
        start = self._pos
        while self._peek() and self._peek() in string.digits:
            self._advance()
        while self._peek() and self._peek() in string.ascii_letters + string.digits:
            self._advance()
        return self._make_token(TokenType.NUMBER, self.source[start:self._pos],
                                line, column)
