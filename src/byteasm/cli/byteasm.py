"""
byteasm - Assembler Command-Line Interface
==========================================

This module implements the command-line interface for the assembler.

Usage Examples
--------------
Basic assembly (writes program.bin):
    $ byteasm program.asm

With output and symbol files:
    $ byteasm program.asm -o out.bin -s out.sym

With predefined symbols:
    $ byteasm -D PORT=0x10 -D DEBUG program.asm

Verbose mode:
    $ byteasm -v program.asm
"""

import logging
import sys
from pathlib import Path
from typing import Optional

import click

from byteasm import __version__
from byteasm.assembler import Assembler, MEMORY_SIZE
from byteasm.cli.errors import ExitCode, handle_cli_exception


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    level = logging.DEBUG if verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(levelname)s: %(message)s" if verbose else "%(message)s",
    )


def parse_define(defn: str) -> tuple[str, int]:
    """
    Parse a -D argument.

    Accepts NAME=VALUE (decimal, $hex or 0x hex) or a bare NAME,
    which defaults to 1.

    Raises:
        ValueError: If VALUE is not a number
    """
    if "=" not in defn:
        return defn.strip(), 1

    name, value_str = defn.split("=", 1)
    value_str = value_str.strip()
    if value_str.startswith("$"):
        value = int(value_str[1:], 16)
    elif value_str.startswith("0x") or value_str.startswith("0X"):
        value = int(value_str[2:], 16)
    else:
        value = int(value_str)
    return name.strip(), value


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output binary file (default: input.bin)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol file",
)
@click.option(
    "-D", "--define",
    multiple=True,
    help="Define symbol (format: NAME=VALUE)",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="byteasm")
def main(
    input_file: Path,
    output: Optional[Path],
    symbols: Optional[Path],
    define: tuple[str, ...],
    verbose: bool,
) -> None:
    """
    Assemble source code into a raw binary.

    INPUT_FILE is the assembly source file (.asm) to assemble. Nothing is
    written when the source has errors.

    \b
    Examples:
        byteasm hello.asm              # Outputs hello.bin
        byteasm hello.asm -o out.bin   # Specify output file
        byteasm -D BASE=0x80 a.asm     # Define symbol
    """
    setup_logging(verbose)
    output_file = output if output is not None else input_file.with_suffix(".bin")

    asm = Assembler()
    for defn in define:
        try:
            name, value = parse_define(defn)
        except ValueError:
            click.echo(f"Error: invalid value in -D {defn}", err=True)
            sys.exit(ExitCode.INVALID_ARGS)
        asm.define_symbol(name, value)

    try:
        if verbose:
            click.echo(f"Assembling {input_file}...")

        code = asm.assemble_file(input_file)

        if asm.has_errors():
            click.echo(asm.get_error_report(), err=True)
            sys.exit(ExitCode.BUILD_ERROR)

        asm.write_binary(output_file)
        if verbose:
            click.echo(f"Wrote {len(code)} bytes to {output_file}")

        if symbols:
            asm.write_symbols(symbols)
            if verbose:
                click.echo(f"Wrote symbols to {symbols}")

        if verbose:
            click.echo(
                f"Assembly complete: {len(code)}/{MEMORY_SIZE} bytes, "
                f"{len(asm.get_symbols())} symbols"
            )

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
