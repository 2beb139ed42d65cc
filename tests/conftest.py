"""
Shared pytest fixtures for the byteasm test suite.

Provides small synthetic instruction catalogs so compiler behaviour can
be checked independently of the default instruction set.
"""

import pytest

from byteasm.assembler import (
    Compiler,
    InstructionCatalog,
    InstructionInfo,
    OperandType,
)


@pytest.fixture
def jump_catalog():
    """
    Minimal catalog: a zero form and a byte form of 'ld', plus 'jmp'.

    ld a, 0    -> $01
    ld a, byte -> $02 byte
    jmp byte   -> $10 byte
    ret        -> $FF
    """
    return InstructionCatalog(
        [
            InstructionInfo("ld", (OperandType.A, OperandType.ZERO), 0x01),
            InstructionInfo("ld", (OperandType.A, OperandType.BYTE), 0x02),
            InstructionInfo("jmp", (OperandType.BYTE,), 0x10),
            InstructionInfo("ret", (), 0xFF),
        ],
        registers=("a",),
    )


@pytest.fixture
def compile_source():
    """Return a helper that compiles source and returns the Compiler."""

    def _compile(source: str, catalog=None, symbols=None) -> Compiler:
        compiler = Compiler(source, "<test>", catalog=catalog, symbols=symbols)
        compiler.compile()
        return compiler

    return _compile
