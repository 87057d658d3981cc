"""
SIC/XE Assembler - Two-Pass Assembler for the SIC/XE Educational CPU
====================================================================

This package assembles programs for SIC/XE, the extended Simplified
Instructional Computer described in Beck's "System Software". Output is
the textual object program read by a linking loader.

Main Components
---------------
- **assembler**: Two-pass assembler (sicasm)
    Converts tab-delimited assembly source to H/D/R/T/M/E object records,
    plus symbol and literal listings

- **cpu**: SIC/XE architecture definitions
    Instruction catalog, register numbers and nixbpe flag bits

Quick Start
-----------
Assemble a program:
    >>> from sicxe_asm import Assembler
    >>> asm = Assembler()
    >>> program = asm.assemble_file("copy.asm")
    >>> asm.write_object("copy.obj")

Use a custom instruction catalog:
    >>> from sicxe_asm import InstructionCatalog
    >>> catalog = InstructionCatalog.from_file("inst.data")
    >>> asm = Assembler(catalog=catalog)

Or use the command-line tool:
    $ sicasm copy.asm -o copy.obj -s copy.sym -L copy.lit

Version History
---------------
1.0.0 - Initial release
"""

__version__ = "1.0.0"

# =============================================================================
# Public API Exports
# =============================================================================

from sicxe_asm.assembler import Assembler, assemble, assemble_file
from sicxe_asm.cpu import InstructionCatalog, InstructionSpec
from sicxe_asm.errors import (
    SicxeError,
    SourceLocation,
    CatalogError,
    AssemblerError,
    AssemblySyntaxError,
    UndefinedSymbolError,
    UnknownInstructionError,
    OperandError,
    AddressingModeError,
    AssemblyFailedError,
    TooManyErrors,
    ErrorCollector,
)

__all__ = [
    # Version info
    "__version__",
    # Assembler
    "Assembler",
    "assemble",
    "assemble_file",
    # Instruction catalog
    "InstructionCatalog",
    "InstructionSpec",
    # Exception hierarchy
    "SicxeError",
    "SourceLocation",
    "CatalogError",
    "AssemblerError",
    "AssemblySyntaxError",
    "UndefinedSymbolError",
    "UnknownInstructionError",
    "OperandError",
    "AddressingModeError",
    "AssemblyFailedError",
    "TooManyErrors",
    "ErrorCollector",
]
