"""
Single-Pass Compiler
====================

This module contains the Compiler, which turns source text into machine
code in one pass. It pulls tokens from the Lexer, parses each statement,
matches instructions against the InstructionCatalog and appends bytes to
the output buffer.

Statements
----------
    mnemonic [operand (, operand)*]    instruction
    name:                              label at the current address
    name db expr (, expr)*             label followed by data bytes
    name equ expr                      constant, emits nothing

Forward References
------------------
A symbol may be used before its definition. The compiler emits a
placeholder byte, remembers its offset, and records a pending reference.
When the definition arrives every pending reference to that name is
resolved and the placeholder bytes are patched in place. References still
pending at the end of input are reported as unresolved.

Errors
------
Problems in the source never stop compilation. Each one is added to an
ErrorCollector and the rest of the offending line is skipped. Bytes
emitted before the error stay in the output.

Example
-------
>>> compiler = Compiler("start: jmp start")
>>> compiler.compile()
b'\\x10\\x00'
>>> compiler.symbols
{'start': 0}
"""

from collections import deque
from dataclasses import dataclass
from typing import Callable, Optional
import logging
import string

from byteasm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    DuplicateSymbolError,
    ErrorCollector,
    InvalidNumberError,
    MemoryOverflowError,
    SourceLocation,
    UndefinedSymbolError,
    UnknownCommandError,
)
from byteasm.assembler.lexer import Lexer, Token, TokenType
from byteasm.assembler.opcodes import (
    DEFAULT_CATALOG,
    InstructionCatalog,
    Operand,
    OperandType,
)
from byteasm.assembler.expressions import RefExpression

logger = logging.getLogger(__name__)

# Size of the target address space in bytes
MEMORY_SIZE = 256

# Valid digits for each number base
_BASE_DIGITS = {
    2: "01",
    8: "01234567",
    10: string.digits,
    16: string.hexdigits,
}


@dataclass
class PendingReference:
    """A use of a symbol that has not been defined yet."""
    name: str
    callback: Callable[[int], None]
    location: SourceLocation


class Compiler:
    """
    Compiles one source text into machine code.

    A Compiler instance is single use: create it with the source, call
    compile(), then read code, symbols and errors.

    Attributes:
        catalog: Instruction set used for matching
        code: Output buffer
        symbols: Defined symbols (name -> value)
        pending: References waiting for a definition
    """

    def __init__(
        self,
        source: str,
        filename: str = "<input>",
        catalog: Optional[InstructionCatalog] = None,
        symbols: Optional[dict[str, int]] = None,
    ):
        """
        Args:
            source: Assembly source code
            filename: Name used in error locations
            catalog: Instruction set (default: DEFAULT_CATALOG)
            symbols: Predefined symbols, visible to the whole source
        """
        self.filename = filename
        self.catalog = catalog if catalog is not None else DEFAULT_CATALOG
        self.lexer = Lexer(
            source,
            filename,
            mnemonics=self.catalog.mnemonics,
            registers=self.catalog.registers,
        )

        self.code = bytearray()
        self.symbols: dict[str, int] = dict(symbols or {})
        self.pending: list[PendingReference] = []

        self._definitions: dict[str, Optional[SourceLocation]] = {
            name: None for name in self.symbols
        }
        self._errors = ErrorCollector()
        self._compiled = False

        # Definitions waiting to be bound, see _define()
        self._queued: deque[tuple[str, int, SourceLocation]] = deque()
        self._binding = False

    # =========================================================================
    # Public Interface
    # =========================================================================

    def compile(self) -> bytes:
        """
        Compile the whole source.

        Returns:
            The machine code, possibly longer than MEMORY_SIZE (check errors)
        """
        if self._compiled:
            return bytes(self.code)
        self._compiled = True

        while (token := self.lexer.next()).type is not TokenType.EOF:
            if token.type is TokenType.INSTRUCTION:
                ok = self._compile_instruction(token)
            elif token.type is TokenType.NAME:
                ok = self._compile_definition(token)
            else:
                self._unexpected(token)
                ok = False

            if not ok:
                self._skip_line()

        self._finish()

        logger.debug(
            f"Compiled {self.filename}: {len(self.code)} bytes, "
            f"{len(self.symbols)} symbols, {self._errors.error_count()} errors"
        )
        return bytes(self.code)

    @property
    def errors(self) -> list[AssemblerError]:
        """Diagnostics in the order they were found."""
        return list(self._errors.errors)

    def has_errors(self) -> bool:
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        return self._errors.report()

    # =========================================================================
    # Statements
    # =========================================================================

    def _compile_instruction(self, token: Token) -> bool:
        """Parse operands, pick an encoding and emit it."""
        operands = self._parse_operands()
        if operands is None:
            return False

        entry = self.catalog.match(token.value, operands)
        if entry is None:
            self._errors.add(UnknownCommandError(
                token.value,
                token.location,
                source_line=self._source_line(token.location),
                signatures=self.catalog.signatures(token.value),
            ))
            return False

        self.code.append(entry.opcode)
        for expected, operand in zip(entry.operands, operands):
            if expected is OperandType.BYTE:
                self._emit_operand(operand)
        return True

    def _compile_definition(self, token: Token) -> bool:
        """Handle 'name:', 'name db ...' and 'name equ ...'."""
        name = token.value
        following = self.lexer.lookahead()

        if following.is_char(":"):
            self.lexer.next()
            self._define(name, len(self.code), token.location)
            return True

        if following.type is TokenType.KEYWORD and following.value == "db":
            self.lexer.next()
            self._define(name, len(self.code), token.location)
            while True:
                offset = len(self.code)
                self.code.append(0x00)
                if not self._parse_expression(
                        lambda value, offset=offset: self._patch(offset, value)):
                    return False
                if not self.lexer.lookahead().is_char(","):
                    return True
                self.lexer.next()

        if following.type is TokenType.KEYWORD and following.value == "equ":
            self.lexer.next()
            return self._parse_expression(
                lambda value: self._define(name, value, token.location)
            )

        self._unexpected(following)
        return False

    # =========================================================================
    # Operands and Expressions
    # =========================================================================

    def _parse_operands(self) -> Optional[list[Operand]]:
        """
        Parse a comma-separated operand list.

        Returns:
            The operands ([] when the instruction ends the line),
            or None after reporting an error
        """
        token = self.lexer.lookahead(skip_newline=False)
        if token.type is TokenType.EOF or token.is_char("\n"):
            return []

        operands = []
        while True:
            operand = self._parse_operand()
            if operand is None:
                return None
            operands.append(operand)

            if not self.lexer.lookahead().is_char(","):
                return operands
            self.lexer.next()

    def _parse_operand(self) -> Optional[Operand]:
        token = self.lexer.lookahead()
        operand = Operand(token.location)

        if token.type is TokenType.REGISTER:
            self.lexer.next()
            operand.type = self.catalog.register_type(token.value)
            return operand

        if self._parse_expression(operand.resolve):
            operand.type = OperandType.BYTE
            return operand
        return None

    def _parse_expression(self, callback: Callable[[int], None]) -> bool:
        """
        Parse value (('+' | '-') value)* into a RefExpression.

        The callback fires once every value is known, which may be
        immediately or when a later definition resolves a reference.
        """
        ref = RefExpression(callback)
        if not self._parse_value(ref.set):
            return False

        while (token := self.lexer.lookahead()).type is TokenType.OPERATOR:
            self.lexer.next()
            setter = ref.add() if token.value == "+" else ref.sub()
            if not self._parse_value(setter):
                return False

        ref.close()
        return True

    def _parse_value(self, setter: Callable[[int], None]) -> bool:
        token = self.lexer.lookahead()

        if token.type is TokenType.NAME:
            if token.value in self.symbols:
                setter(self.symbols[token.value])
            else:
                self.pending.append(
                    PendingReference(token.value, setter, token.location)
                )
        elif token.type is TokenType.NUMBER:
            value = self._parse_number(token)
            if value is not None:
                setter(value)
        elif token.is_char("$"):
            setter(len(self.code))
        else:
            self._unexpected(token)
            return False

        self.lexer.next()
        return True

    def _parse_number(self, token: Token) -> Optional[int]:
        """
        Interpret a NUMBER token.

        Decimal by default; a two character literal starting with 0 is a
        single octal digit; 0x/0X is hexadecimal; 0b/0B is binary.
        """
        text = token.value
        base, digits = 10, text
        if text[0] == "0" and len(text) > 1:
            if len(text) == 2:
                base, digits = 8, text[1:]
            elif text[1] in "xX":
                base, digits = 16, text[2:]
            elif text[1] in "bB":
                base, digits = 2, text[2:]

        if digits and all(c in _BASE_DIGITS[base] for c in digits):
            try:
                return int(digits, base)
            except ValueError:
                # Decimal literals beyond the interpreter's digit limit
                pass

        self._errors.add(InvalidNumberError(
            text, token.location, self._source_line(token.location)
        ))
        return None

    # =========================================================================
    # Output and Symbols
    # =========================================================================

    def _emit_operand(self, operand: Operand) -> None:
        """Emit a byte operand, or a placeholder patched on resolution."""
        if operand.value is not None:
            self.code.append(operand.value & 0xFF)
            return

        offset = len(self.code)
        self.code.append(0x00)
        operand.patch = lambda value: self._patch(offset, value)

    def _patch(self, offset: int, value: int) -> None:
        self.code[offset] = value & 0xFF
        logger.debug(f"Patched offset ${offset:02X} with ${value & 0xFF:02X}")

    def _define(self, name: str, value: int, location: SourceLocation) -> None:
        """
        Bind a symbol and resolve everything waiting for it.

        Resolving a reference can complete an equ, which defines another
        symbol. Those definitions are queued and bound by the outermost
        call, so a long chain of forward constants does not nest calls.
        """
        self._queued.append((name, value, location))
        if self._binding:
            return

        self._binding = True
        try:
            while self._queued:
                self._bind(*self._queued.popleft())
        finally:
            self._binding = False

    def _bind(self, name: str, value: int, location: SourceLocation) -> None:
        """
        Record one definition and fire the references waiting for it.

        A second definition is reported and ignored; the first value stays.
        """
        if name in self.symbols:
            self._errors.add(DuplicateSymbolError(
                name,
                location,
                original_location=self._definitions.get(name),
                source_line=self._source_line(location),
            ))
            return

        self.symbols[name] = value
        self._definitions[name] = location
        logger.debug(f"Defined {name} = {value}")

        waiting = [ref for ref in self.pending if ref.name == name]
        if waiting:
            # Callbacks may define further symbols, so detach first
            self.pending = [ref for ref in self.pending if ref.name != name]
            for ref in waiting:
                ref.callback(value)

    def _finish(self) -> None:
        """Report leftover references and overflow."""
        for ref in self.pending:
            self._errors.add(UndefinedSymbolError(
                ref.name,
                ref.location,
                source_line=self._source_line(ref.location),
                similar_symbols=self._find_similar_symbols(ref.name),
            ))

        if len(self.code) > MEMORY_SIZE:
            self._errors.add(
                MemoryOverflowError(len(self.code), MEMORY_SIZE, self.filename)
            )

    # =========================================================================
    # Error Helpers
    # =========================================================================

    def _unexpected(self, token: Token) -> None:
        self._errors.add(AssemblySyntaxError(
            str(token), token.location, self._source_line(token.location)
        ))

    def _skip_line(self) -> None:
        """Discard tokens up to the end of the current line."""
        while True:
            token = self.lexer.lookahead(skip_newline=False)
            if token.type is TokenType.EOF or token.is_char("\n"):
                return
            self.lexer.next(skip_newline=False)

    def _source_line(self, location: SourceLocation) -> str:
        return self.lexer.line_text(location.line)

    def _find_similar_symbols(self, name: str) -> list[str]:
        """
        Find symbols with similar names for error hints.

        Uses simple edit distance heuristic.
        """
        name_lower = name.lower()
        similar = []

        for sym in self.symbols:
            sym_lower = sym.lower()
            if (
                sym_lower == name_lower or
                abs(len(sym) - len(name)) <= 1 and
                _edit_distance(name_lower, sym_lower) <= 2
            ):
                similar.append(sym)

        return similar[:3]


def _edit_distance(s1: str, s2: str) -> int:
    """Calculate Levenshtein edit distance between two strings."""
    if len(s1) < len(s2):
        s1, s2 = s2, s1

    distances = list(range(len(s2) + 1))
    for i, c1 in enumerate(s1):
        new_distances = [i + 1]
        for j, c2 in enumerate(s2):
            if c1 == c2:
                new_distances.append(distances[j])
            else:
                new_distances.append(
                    1 + min(distances[j], distances[j + 1], new_distances[-1])
                )
        distances = new_distances
    return distances[-1]
