"""
sicasm - SIC/XE Assembler Command-Line Interface
================================================

This module implements the command-line interface for the SIC/XE
two-pass assembler.

Usage Examples
--------------
Basic assembly:
    $ sicasm copy.asm

With output file:
    $ sicasm copy.asm -o copy.obj

Generate all output files:
    $ sicasm copy.asm -o copy.obj -s copy.sym -L copy.lit

With an instruction catalog file:
    $ sicasm -c inst.data copy.asm

Verbose mode:
    $ sicasm -v copy.asm
"""

import logging
from pathlib import Path
from typing import Optional

import click

from sicxe_asm import __version__
from sicxe_asm.assembler import Assembler
from sicxe_asm.cli.errors import handle_cli_exception
from sicxe_asm.cpu import InstructionCatalog


def setup_logging(verbose: bool) -> None:
    """Configure logging based on verbosity."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )


# =============================================================================
# CLI Definition
# =============================================================================

@click.command()
@click.argument(
    "input_file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
)
@click.option(
    "-c", "--catalog",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    help="Instruction catalog file (default: built-in SIC/XE instruction set)",
)
@click.option(
    "-o", "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Output object program file (default: input.obj)",
)
@click.option(
    "-s", "--symbols",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate symbol listing",
)
@click.option(
    "-L", "--literals",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Generate literal listing",
)
@click.option(
    "-v", "--verbose",
    is_flag=True,
    help="Verbose output",
)
@click.version_option(version=__version__, prog_name="sicasm")
def main(
    input_file: Path,
    catalog: Optional[Path],
    output: Optional[Path],
    symbols: Optional[Path],
    literals: Optional[Path],
    verbose: bool,
) -> None:
    """
    Assemble SIC/XE source code into an object program.

    INPUT_FILE is the tab-delimited assembly source file to assemble.

    \b
    Examples:
        sicasm copy.asm                    # Outputs copy.obj
        sicasm copy.asm -o out.obj         # Specify output file
        sicasm copy.asm -s copy.sym        # Also write the symbol listing
        sicasm -c inst.data copy.asm       # Use a catalog file
    """
    setup_logging(verbose)
    output_file = output if output is not None else input_file.with_suffix(".obj")

    try:
        instruction_catalog = (
            InstructionCatalog.from_file(catalog) if catalog is not None else None
        )
        if verbose and instruction_catalog is not None:
            click.echo(f"Loaded {len(instruction_catalog)} instructions from {catalog}")

        asm = Assembler(catalog=instruction_catalog, verbose=verbose)
        asm.assemble_file(input_file)

        for warning in asm.get_warnings():
            click.echo(f"warning: {warning}", err=True)

        asm.write_object(output_file)

        if symbols:
            asm.write_symbols(symbols)

        if literals:
            asm.write_literals(literals)

        if verbose:
            sections = asm.get_sections()
            total = sum(section.length for section in sections)
            click.echo(f"Assembly complete: {len(sections)} sections, {total} bytes")

    except Exception as e:
        handle_cli_exception(e, verbose=verbose, error_type="Assembly")


if __name__ == "__main__":
    main()
