"""
byteasm - Single-Pass Assembler for a 256 Byte Machine
======================================================

This package assembles line-oriented assembly source into machine code
for a minimal 8-bit target whose whole address space is 256 bytes.

Main Components
---------------
- **assembler**: Lexer, instruction catalog, expression resolver and the
  single-pass compiler, plus the Assembler front end
- **cli**: The byteasm command-line tool
- **errors**: Diagnostic types and the error collector

Quick Start
-----------
Assemble a program:
    >>> from byteasm import assemble
    >>> result = assemble("start: jmp start")
    >>> list(result.code)
    [16, 0]

Diagnostics never raise; inspect them instead:
    >>> result = assemble("jmp nowhere")
    >>> [(e.position, e.message) for e in result.errors]
    [((0, 4), 'unresolved nowhere')]

Or use the command-line tool:
    $ byteasm program.asm -o program.bin
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from byteasm.assembler import (
    Assembler,
    AssemblyResult,
    Compiler,
    InstructionCatalog,
    InstructionInfo,
    OperandType,
    DEFAULT_CATALOG,
    MEMORY_SIZE,
    assemble,
    assemble_file,
)
from byteasm.errors import (
    ByteAsmError,
    AssemblerError,
    AssemblySyntaxError,
    UnknownCommandError,
    DuplicateSymbolError,
    UndefinedSymbolError,
    InvalidNumberError,
    MemoryOverflowError,
    ErrorCollector,
    SourceLocation,
)

__all__ = [
    "__version__",
    # Assembler
    "Assembler",
    "AssemblyResult",
    "Compiler",
    "InstructionCatalog",
    "InstructionInfo",
    "OperandType",
    "DEFAULT_CATALOG",
    "MEMORY_SIZE",
    "assemble",
    "assemble_file",
    # Exception hierarchy
    "ByteAsmError",
    "AssemblerError",
    "AssemblySyntaxError",
    "UnknownCommandError",
    "DuplicateSymbolError",
    "UndefinedSymbolError",
    "InvalidNumberError",
    "MemoryOverflowError",
    "ErrorCollector",
    "SourceLocation",
]
