"""
byteasm Error Hierarchy
=======================

This module defines the exception hierarchy for the assembler. All
exceptions inherit from ByteAsmError, allowing callers to catch all
assembler-related errors with a single except clause if desired.

Exception Hierarchy
-------------------
ByteAsmError (base)
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - unexpected token in a statement or operand
    ├── UnknownCommandError - no catalog entry matches the instruction
    ├── DuplicateSymbolError - label defined more than once
    ├── UndefinedSymbolError - reference never resolved
    ├── InvalidNumberError - numeric literal fails to parse
    └── MemoryOverflowError - output exceeds the 256 byte address space

Diagnostics, Not Control Flow
-----------------------------
The compiler never raises these for problems in the source text. It
creates them as records and adds them to an ErrorCollector, then keeps
going so a single run reports as many problems as possible. Callers that
want an exception can raise the collected errors themselves.

Positions are stored zero-based (as the compiler counts them) and printed
one-based:
    filename:line:column: error: description
    source_line_text
        ^ (pointer to error location)
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class ByteAsmError(Exception):
    """
    Base exception for all byteasm errors.

        try:
            assembler.assemble_file("program.asm")
        except ByteAsmError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (0-indexed)
        column: Column number (0-indexed)
    """
    filename: str
    line: int
    column: int

    @property
    def position(self) -> tuple[int, int]:
        """Return the zero-based (line, column) pair."""
        return (self.line, self.column)

    def __str__(self) -> str:
        """Format as 'filename:line:column' (1-indexed) for error messages."""
        return f"{self.filename}:{self.line + 1}:{self.column + 1}"


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(ByteAsmError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    @property
    def position(self) -> tuple[int, int]:
        """Zero-based (line, column) of the error, (0, 0) if unknown."""
        if self.location is None:
            return (0, 0)
        return self.location.position

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            hello.asm:3:9: error: unresolved prnt
                jmp     prnt
                        ^
            hint: did you mean 'print'?
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            padding = " " * (4 + self.location.column)
            parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    A statement or operand could not be parsed.

    The lexer never fails, so unrecognised characters surface here as
    unexpected tokens once the compiler tries to use them.
    """

    def __init__(
        self,
        token: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.token = token
        super().__init__(
            f"unexpected {token}",
            location=location,
            source_line=source_line,
        )


class UnknownCommandError(AssemblerError):
    """
    No catalog entry matches the mnemonic and operand shape.

    Example:
        mov 5, a    ; no overload takes an immediate destination
    """

    def __init__(
        self,
        mnemonic: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        signatures: Optional[list[str]] = None,
    ):
        self.mnemonic = mnemonic
        self.signatures = signatures or []

        hint = None
        if self.signatures:
            hint = f"{mnemonic} accepts: {'; '.join(self.signatures)}"

        super().__init__(
            "unknown command",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UndefinedSymbolError(AssemblerError):
    """
    A referenced symbol was never defined.

    Reported at the end of compilation for every reference still pending,
    at the position where the reference was written.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
        similar_symbols: Optional[list[str]] = None,
    ):
        self.symbol = symbol
        self.similar_symbols = similar_symbols or []

        hint = None
        if self.similar_symbols:
            suggestions = ", ".join(f"'{s}'" for s in self.similar_symbols[:3])
            hint = f"did you mean {suggestions}?"

        super().__init__(
            f"unresolved {symbol}",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class DuplicateSymbolError(AssemblerError):
    """
    A label or constant is defined more than once.

    The first definition stays in effect; the later one is ignored.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        original_location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        self.original_location = original_location

        hint = None
        if original_location:
            hint = f"'{symbol}' was first defined at {original_location}"

        super().__init__(
            f"label {symbol} is already defined",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class InvalidNumberError(AssemblerError):
    """
    A numeric literal does not parse in the base its prefix selects.

    Examples:
        08      ; two-character literal is octal, 8 is not an octal digit
        0xZZ    ; not hexadecimal
        12h     ; suffixes are not supported
    """

    def __init__(
        self,
        text: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.text = text
        super().__init__(
            f"invalid number {text}",
            location=location,
            source_line=source_line,
        )


class MemoryOverflowError(AssemblerError):
    """
    The assembled program does not fit in the target's address space.

    Always reported at the start of the source; the over-length output is
    still returned so the caller can inspect it.
    """

    def __init__(self, size: int, capacity: int, filename: str = "<input>"):
        self.size = size
        self.capacity = capacity
        super().__init__(
            "memory overflow",
            location=SourceLocation(filename, 0, 0),
            hint=f"program is {size} bytes, memory holds {capacity}",
        )


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects errors for batch reporting.

    The compiler uses this to continue processing after encountering
    an error, collecting all errors before reporting them together.

    Example:
        collector = ErrorCollector()
        collector.add(UndefinedSymbolError("loop", location))

        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self):
        self.errors: list[AssemblerError] = []

    def add(self, error: AssemblerError) -> None:
        """Add an error to the collection."""
        self.errors.append(error)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def report(self) -> str:
        """
        Format all errors for display.

        Returns:
            Formatted string with all errors and a summary line
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        error_word = "error" if len(self.errors) == 1 else "errors"
        lines.append(f"{len(self.errors)} {error_word}")

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors."""
        self.errors.clear()
