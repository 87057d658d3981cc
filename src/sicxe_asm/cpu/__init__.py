"""
SIC/XE CPU Package
==================

CPU architecture definitions shared by the assembler stages: the
instruction catalog, register numbering and nixbpe flag bits.

Usage:
    from sicxe_asm.cpu import InstructionCatalog, REGISTER_CODES

    catalog = InstructionCatalog.default()
    spec = catalog.lookup("LDA")
"""

from sicxe_asm.cpu.sicxe import (
    # Core types
    InstructionSpec,
    InstructionCatalog,
    # Instruction set data
    SICXE_INSTRUCTIONS,
    REGISTER_CODES,
    # nixbpe flags
    FLAG_N,
    FLAG_I,
    FLAG_X,
    FLAG_B,
    FLAG_P,
    FLAG_E,
    # Encoding limits
    EXTENDED_PREFIX,
    PC_RELATIVE_RANGE,
    BASE_RELATIVE_RANGE,
    # Catalog parsing
    parse_catalog_line,
)

__all__ = [
    "InstructionSpec",
    "InstructionCatalog",
    "SICXE_INSTRUCTIONS",
    "REGISTER_CODES",
    "FLAG_N",
    "FLAG_I",
    "FLAG_X",
    "FLAG_B",
    "FLAG_P",
    "FLAG_E",
    "EXTENDED_PREFIX",
    "PC_RELATIVE_RANGE",
    "BASE_RELATIVE_RANGE",
    "parse_catalog_line",
]
