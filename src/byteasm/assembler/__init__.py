"""
byteasm Assembler
=================

Single-pass assembler for a minimal 8-bit target with a 256 byte address
space.

Main Components
---------------
- **Assembler**: Main assembler class (files, predefined symbols, output)
- **Compiler**: Single-pass driver that parses, encodes and patches
- **Lexer**: On-demand tokenizer with one-token lookahead
- **InstructionCatalog**: Ordered instruction encodings and overload matching
- **RefExpression**: Deferred arithmetic for expressions with forward references

Assembly Process
----------------
The compiler reads each statement once. Values that are already known
are emitted directly; forward references emit a placeholder byte that is
patched when the symbol is defined. At the end of input any reference
still pending is reported, as is output that does not fit in memory.

Example Usage
-------------
>>> from byteasm.assembler import assemble
>>> result = assemble('''
...     jmp start
... msg db 1, 2, 3
... start:
...     mov a, msg
...     hlt
... ''')
>>> result.code.hex()
'1005010203240201'
"""

from byteasm.assembler.assembler import (
    Assembler,
    AssemblyResult,
    assemble,
    assemble_file,
)
from byteasm.assembler.compiler import Compiler, MEMORY_SIZE
from byteasm.assembler.lexer import Lexer, Token, TokenType
from byteasm.assembler.opcodes import (
    DEFAULT_CATALOG,
    KEYWORDS,
    REGISTERS,
    InstructionCatalog,
    InstructionInfo,
    Operand,
    OperandType,
)
from byteasm.assembler.expressions import RefExpression

__all__ = [
    # Main class and functions
    "Assembler",
    "AssemblyResult",
    "assemble",
    "assemble_file",
    # Compiler
    "Compiler",
    "MEMORY_SIZE",
    # Lexer
    "Lexer",
    "Token",
    "TokenType",
    # Instruction catalog
    "DEFAULT_CATALOG",
    "KEYWORDS",
    "REGISTERS",
    "InstructionCatalog",
    "InstructionInfo",
    "Operand",
    "OperandType",
    # Expressions
    "RefExpression",
]
