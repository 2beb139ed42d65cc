"""
byteasm Assembler - Main Interface
==================================

This module provides the Assembler class, the primary interface for
assembling source files. It wraps the single-pass Compiler with file
handling, predefined symbols and output writers.

Example Usage
-------------
>>> from byteasm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> asm.assemble_string('''
... start:  mov a, 0
... loop:   inc a
...         jmp loop
... ''')
b'\\x20\\x70\\x10\\x01'
>>> asm.get_symbols()
{'start': 0, 'loop': 1}
>>> asm.write_binary("loop.bin")

Or, when only the result is needed:

>>> result = assemble("jmp end\\nend: hlt")
>>> result.code, result.ok
(b'\\x10\\x02\\x01', True)

Command-Line Usage
------------------
    $ byteasm program.asm -o program.bin -s program.sym

Options:
    -o, --output FILE      Output binary file
    -s, --symbols FILE     Generate symbol file
    -D, --define SYM=VAL   Pre-define symbol
    -v, --verbose          Verbose output
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional
import logging

from byteasm.assembler.compiler import Compiler
from byteasm.assembler.opcodes import DEFAULT_CATALOG, InstructionCatalog
from byteasm.errors import AssemblerError, ErrorCollector

logger = logging.getLogger(__name__)


@dataclass
class AssemblyResult:
    """
    Output of a convenience assembly call.

    Attributes:
        code: The machine code (may exceed 256 bytes, see errors)
        errors: Diagnostics in source order
    """
    code: bytes
    errors: list[AssemblerError] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        """True if assembly produced no diagnostics."""
        return not self.errors


class Assembler:
    """
    Main assembler class.

    Each call to assemble_string() or assemble_file() starts from a clean
    state apart from symbols added with define_symbol().

    Attributes:
        catalog: Instruction set passed to the compiler
    """

    def __init__(self, catalog: Optional[InstructionCatalog] = None,
                 defines: Optional[dict[str, int]] = None):
        """
        Initialize the assembler.

        Args:
            catalog: Instruction set (default: DEFAULT_CATALOG)
            defines: Dictionary of pre-defined symbols
        """
        self.catalog = catalog if catalog is not None else DEFAULT_CATALOG
        self._defines: dict[str, int] = {}
        self._source_file: Optional[Path] = None
        self._compiler: Optional[Compiler] = None

        if defines:
            for name, value in defines.items():
                self.define_symbol(name, value)

    # =========================================================================
    # Configuration
    # =========================================================================

    def define_symbol(self, name: str, value: int) -> None:
        """
        Pre-define a symbol (like -D on command line).

        Args:
            name: Symbol name
            value: Symbol value
        """
        self._defines[name] = value

    # =========================================================================
    # Assembly Methods
    # =========================================================================

    def assemble_string(self, source: str, filename: str = "<input>") -> bytes:
        """
        Assemble source code from a string.

        Diagnostics do not raise; check has_errors() afterwards.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Generated machine code
        """
        logger.debug(f"Assembling {filename}")
        self._compiler = Compiler(
            source, filename, catalog=self.catalog, symbols=self._defines
        )
        code = self._compiler.compile()

        if self._compiler.has_errors():
            logger.info(
                f"{filename}: {len(self._compiler.errors)} error(s), "
                f"{len(code)} bytes"
            )
        else:
            logger.debug(f"Generated {len(code)} bytes of code")
        return code

    def assemble_file(self, filepath: str | Path) -> bytes:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Generated machine code

        Raises:
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath
        source = filepath.read_text()
        return self.assemble_string(source, str(filepath))

    # =========================================================================
    # Results
    # =========================================================================

    def get_code(self) -> bytes:
        """Get the generated machine code (empty before assembly)."""
        if self._compiler is None:
            return b""
        return bytes(self._compiler.code)

    def get_symbols(self) -> dict[str, int]:
        """
        Get the symbol table, predefined symbols included.

        Returns:
            Dictionary mapping symbol names to values
        """
        if self._compiler is None:
            return dict(self._defines)
        return dict(self._compiler.symbols)

    def get_errors(self) -> list[AssemblerError]:
        """Diagnostics from the last assembly, in source order."""
        if self._compiler is None:
            return []
        return self._compiler.errors

    def has_errors(self) -> bool:
        """True if the last assembly produced diagnostics."""
        return bool(self.get_errors())

    def get_error_report(self) -> str:
        """Get formatted error report."""
        collector = ErrorCollector()
        for error in self.get_errors():
            collector.add(error)
        return collector.report()

    # =========================================================================
    # Output Methods
    # =========================================================================

    def write_binary(self, filepath: str | Path) -> None:
        """
        Write raw machine code.

        Args:
            filepath: Output file path
        """
        code = self.get_code()
        Path(filepath).write_bytes(code)
        logger.debug(f"Wrote {len(code)} bytes to {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol table file.

        Format: name value (one per line, sorted by name)
        """
        with open(filepath, "w") as f:
            f.write("# Symbol table\n")
            f.write("# Generated by byteasm\n")
            for name, value in sorted(self.get_symbols().items()):
                f.write(f"{name} ${value & 0xFF:02X}\n")
        logger.debug(f"Wrote symbols to {filepath}")


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>",
             catalog: Optional[InstructionCatalog] = None) -> AssemblyResult:
    """
    Assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors
        catalog: Instruction set (default: DEFAULT_CATALOG)

    Returns:
        The machine code together with any diagnostics
    """
    asm = Assembler(catalog=catalog)
    code = asm.assemble_string(source, filename)
    return AssemblyResult(code, asm.get_errors())


def assemble_file(filepath: str | Path,
                  catalog: Optional[InstructionCatalog] = None) -> AssemblyResult:
    """
    Assemble a source file.

    Raises:
        FileNotFoundError: If source file not found
    """
    asm = Assembler(catalog=catalog)
    code = asm.assemble_file(filepath)
    return AssemblyResult(code, asm.get_errors())
