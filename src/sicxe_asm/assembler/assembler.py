"""
SIC/XE Assembler - Main Interface
=================================

This module provides the main Assembler class, the primary interface for
assembling SIC/XE source code. It coordinates the parser, the two passes,
and the record assembler to produce a linkable object program.

Example Usage
-------------
>>> from sicxe_asm.assembler import Assembler
>>>
>>> asm = Assembler()
>>> program = asm.assemble_string(
...     "PROG\\tSTART\\t0\\n"
...     "FIRST\\tLDA\\t#3\\n"
...     "\\tEND\\tFIRST\\n"
... )
>>> print(program, end="")
HPROG  000000000003
T00000003010003
E000000
<BLANKLINE>
>>>
>>> asm.write_symbols("prog.sym")

Command-Line Usage
------------------
The assembler can also be invoked from the command line:

    $ sicasm copy.asm -o copy.obj -s copy.sym -L copy.lit

Options:
    -c, --catalog FILE     Instruction catalog (default: built-in SIC/XE set)
    -o, --output FILE      Output object program file
    -s, --symbols FILE     Generate symbol listing
    -L, --literals FILE    Generate literal listing
    -v, --verbose          Verbose output
"""

import logging
from collections.abc import Iterable
from pathlib import Path
from typing import Optional

from sicxe_asm.assembler.parser import Section, parse_source
from sicxe_asm.assembler.pass1 import Pass1Resolver
from sicxe_asm.assembler.pass2 import Pass2Generator
from sicxe_asm.assembler.records import RecordAssembler
from sicxe_asm.cpu import InstructionCatalog
from sicxe_asm.errors import AssemblyFailedError, ErrorCollector


logger = logging.getLogger(__name__)


class Assembler:
    """
    Main SIC/XE assembler class.

    This class provides a high-level interface for assembling SIC/XE
    source code into the H/D/R/T/M/E object program format.

    The assembler supports:
    - Formats 1-4 of the SIC/XE instruction set
    - Simple, immediate, indirect and indexed addressing
    - PC-relative and base-relative (BASE/NOBASE) displacements
    - Literals with LTORG/END literal pools
    - Control sections with EXTDEF/EXTREF linkage
    - Object program, symbol listing and literal listing output

    Attributes:
        verbose: If True, print progress messages
        catalog: Instruction catalog used for mnemonic lookup
    """

    def __init__(self, catalog: Optional[InstructionCatalog] = None,
                 verbose: bool = False,
                 max_errors: int = 100):
        """
        Initialize the assembler.

        Args:
            catalog: Instruction catalog; defaults to the built-in SIC/XE set
            verbose: Enable verbose output
            max_errors: Errors collected before assembly is abandoned
        """
        self._verbose = verbose
        self._catalog = catalog if catalog is not None else InstructionCatalog.default()
        self._errors = ErrorCollector(max_errors=max_errors)
        self._sections: list[Section] = []
        self._source_file: Optional[Path] = None

    @property
    def verbose(self) -> bool:
        return self._verbose

    @property
    def catalog(self) -> InstructionCatalog:
        return self._catalog

    # =========================================================================
    # Assembly
    # =========================================================================

    def assemble_lines(self, lines: Iterable[str], filename: str = "<input>") -> str:
        """
        Assemble source lines.

        The assembly pipeline is:
        1. Parse lines into statements grouped by control section
        2. Pass 1 over all sections (addresses, symbols, literal pools)
        3. Pass 2 over all sections (record kinds and object code)

        Args:
            lines: Source lines (tab-delimited fields)
            filename: Virtual filename for error messages

        Returns:
            Object program text

        Raises:
            AssemblySyntaxError: If a statement precedes the first section
            AssemblyFailedError: If either pass reports errors
        """
        self._errors.clear()
        self._sections = []

        sections = parse_source(lines, filename)
        if self._verbose:
            print(f"Parsed {len(sections)} control sections")

        Pass1Resolver(self._catalog, self._errors).resolve(sections)
        self._check_errors("pass 1")
        if self._verbose:
            for section in sections:
                print(f"  {section.name}: {section.length:04X} bytes, "
                      f"{len(section.symbols)} symbols, {len(section.literals)} literals")

        Pass2Generator(self._catalog, self._errors).generate(sections)
        self._check_errors("pass 2")

        self._sections = sections
        if self._errors.warning_count():
            logger.info(f"{filename}: assembled with {self._errors.warning_count()} warnings")
        return self.get_object_program()

    def assemble_string(self, source: str, filename: str = "<input>") -> str:
        """
        Assemble source code from a string.

        Args:
            source: Assembly source code
            filename: Virtual filename for error messages

        Returns:
            Object program text

        Raises:
            AssemblerError: If assembly fails
        """
        if self._verbose:
            print("Assembling from string...")
        return self.assemble_lines(source.splitlines(), filename)

    def assemble_file(self, filepath: str | Path) -> str:
        """
        Assemble source code from a file.

        Args:
            filepath: Path to assembly source file

        Returns:
            Object program text

        Raises:
            AssemblerError: If assembly fails
            FileNotFoundError: If source file not found
        """
        filepath = Path(filepath)
        self._source_file = filepath

        if self._verbose:
            print(f"Assembling {filepath}...")

        source = filepath.read_text()
        return self.assemble_lines(source.splitlines(), str(filepath))

    def _check_errors(self, stage: str) -> None:
        if not self._errors.has_errors():
            return
        logger.debug(f"{stage} finished with {self._errors.error_count()} errors")
        raise AssemblyFailedError(self._errors.errors, self._errors.report())

    # =========================================================================
    # Output Methods
    # =========================================================================

    def get_sections(self) -> list[Section]:
        """
        Get the assembled control sections.

        Returns:
            Sections in source order (empty before a successful assembly)
        """
        return list(self._sections)

    def get_symbols(self) -> dict[str, dict[str, int]]:
        """
        Get the symbol tables.

        Returns:
            Section name -> {symbol name: value}
        """
        return {section.name: section.symbols.as_dict() for section in self._sections}

    def get_object_program(self) -> str:
        """Get the object program text."""
        return RecordAssembler(self._sections).object_program()

    def get_symbol_listing(self) -> str:
        """Get the symbol listing text."""
        return RecordAssembler(self._sections).symbol_listing()

    def get_literal_listing(self) -> str:
        """Get the literal listing text."""
        return RecordAssembler(self._sections).literal_listing()

    def write_object(self, filepath: str | Path) -> None:
        """
        Write the object program file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_object_program())

        if self._verbose:
            print(f"Wrote {filepath}")

    def write_symbols(self, filepath: str | Path) -> None:
        """
        Write symbol listing file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_symbol_listing())

        if self._verbose:
            print(f"Wrote symbols to {filepath}")

    def write_literals(self, filepath: str | Path) -> None:
        """
        Write literal listing file.

        Args:
            filepath: Output file path
        """
        Path(filepath).write_text(self.get_literal_listing())

        if self._verbose:
            print(f"Wrote literals to {filepath}")

    # =========================================================================
    # Error Handling
    # =========================================================================

    def has_errors(self) -> bool:
        """
        Check if assembly produced errors.

        Returns:
            True if errors occurred
        """
        return self._errors.has_errors()

    def get_error_report(self) -> str:
        """
        Get formatted error report.

        Returns:
            Error report string
        """
        return self._errors.report()

    def get_warnings(self) -> list[str]:
        """Warnings from the last assembly (redefinitions, unreachable targets)."""
        return list(self._errors.warnings)


# =============================================================================
# Convenience Functions
# =============================================================================

def assemble(source: str, filename: str = "<input>",
             catalog: Optional[InstructionCatalog] = None) -> str:
    """
    Convenience function to assemble source code.

    Args:
        source: Assembly source code
        filename: Virtual filename for errors
        catalog: Instruction catalog (default: built-in SIC/XE set)

    Returns:
        Object program text

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(catalog=catalog)
    return asm.assemble_string(source, filename)


def assemble_file(filepath: str | Path,
                  catalog: Optional[InstructionCatalog] = None) -> str:
    """
    Convenience function to assemble a file.

    Args:
        filepath: Path to source file
        catalog: Instruction catalog (default: built-in SIC/XE set)

    Returns:
        Object program text

    Raises:
        AssemblerError: If assembly fails
    """
    asm = Assembler(catalog=catalog)
    return asm.assemble_file(filepath)
