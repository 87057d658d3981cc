"""
SIC/XE Instruction Set Definition
=================================

This module defines the SIC/XE instruction catalog: every mnemonic with its
instruction format, opcode, and operand count, plus the register numbering
and the nixbpe flag bits used when encoding instructions.

Instruction Formats
-------------------
1. **Format 1** (1 byte): opcode only (FIX, FLOAT, HIO, NORM, SIO, TIO)

2. **Format 2** (2 bytes): opcode + two 4-bit register fields
   - Example: COMPR A,S -> $A004

3. **Format 3** (3 bytes): 6-bit opcode, nixbpe flags, 12-bit displacement
   - Example: STL RETADR -> $172027 (PC-relative)

4. **Format 4** (4 bytes): format 3 with e=1 and a 20-bit address
   - Selected in source with a leading '+': +JSUB RDREC -> $4B100000

Catalog File Format
-------------------
A catalog file has one instruction per line, tab or space separated:

    mnemonic  format  opcode(hex)  operand_count
    ADD       3/4     18           1
    CLEAR     2       B4           1

Blank lines and lines starting with '#' are ignored. A format of "3/4" is
read as format 3; format 4 is always selected per statement with '+'.
"""

from dataclasses import dataclass
from pathlib import Path
from types import MappingProxyType
from collections.abc import Iterable, Iterator, Mapping
from typing import Optional

from sicxe_asm.errors import CatalogError


# =============================================================================
# Instruction Information
# =============================================================================

@dataclass(frozen=True)
class InstructionSpec:
    """
    Catalog entry for one SIC/XE mnemonic.

    Frozen so the shared catalog cannot be modified after it is built.

    Attributes:
        mnemonic: Upper-case instruction name
        format: Instruction format (1, 2 or 3; 3 may be extended to 4 with '+')
        opcode: Opcode byte (low two bits are zero for formats 3/4)
        operand_count: Number of operands the instruction takes
    """
    mnemonic: str
    format: int
    opcode: int
    operand_count: int

    def __repr__(self) -> str:
        return (
            f"InstructionSpec({self.mnemonic}, format={self.format}, "
            f"opcode=${self.opcode:02X}, operands={self.operand_count})"
        )


# =============================================================================
# Register and Flag Definitions
# =============================================================================

# Register numbers for format 2 operands. Code 7 is reserved.
REGISTER_CODES: dict[str, int] = {
    "A": 0,
    "X": 1,
    "L": 2,
    "B": 3,
    "S": 4,
    "T": 5,
    "F": 6,
    "PC": 8,
    "SW": 9,
}

# nixbpe flag bits, as they sit in the 6-bit field after the opcode
FLAG_N = 0x20   # indirect addressing when set alone
FLAG_I = 0x10   # immediate addressing when set alone
FLAG_X = 0x08   # indexed
FLAG_B = 0x04   # base-relative
FLAG_P = 0x02   # PC-relative
FLAG_E = 0x01   # extended (format 4)

# Prefix marking the extended (format 4) form of an instruction
EXTENDED_PREFIX = "+"

# Signed PC-relative displacement limit
PC_RELATIVE_RANGE = 0x7FF

# Unsigned base-relative displacement limit
BASE_RELATIVE_RANGE = 0xFFF


# =============================================================================
# Built-in Instruction Table
# =============================================================================
# Key: mnemonic
# Value: InstructionSpec(mnemonic, format, opcode, operand_count)
# =============================================================================

SICXE_INSTRUCTIONS: dict[str, InstructionSpec] = {
    spec.mnemonic: spec for spec in (
        # Format 3/4: memory reference
        InstructionSpec("ADD", 3, 0x18, 1),
        InstructionSpec("ADDF", 3, 0x58, 1),
        InstructionSpec("AND", 3, 0x40, 1),
        InstructionSpec("COMP", 3, 0x28, 1),
        InstructionSpec("COMPF", 3, 0x88, 1),
        InstructionSpec("DIV", 3, 0x24, 1),
        InstructionSpec("DIVF", 3, 0x64, 1),
        InstructionSpec("J", 3, 0x3C, 1),
        InstructionSpec("JEQ", 3, 0x30, 1),
        InstructionSpec("JGT", 3, 0x34, 1),
        InstructionSpec("JLT", 3, 0x38, 1),
        InstructionSpec("JSUB", 3, 0x48, 1),
        InstructionSpec("LDA", 3, 0x00, 1),
        InstructionSpec("LDB", 3, 0x68, 1),
        InstructionSpec("LDCH", 3, 0x50, 1),
        InstructionSpec("LDF", 3, 0x70, 1),
        InstructionSpec("LDL", 3, 0x08, 1),
        InstructionSpec("LDS", 3, 0x6C, 1),
        InstructionSpec("LDT", 3, 0x74, 1),
        InstructionSpec("LDX", 3, 0x04, 1),
        InstructionSpec("LPS", 3, 0xD0, 1),
        InstructionSpec("MUL", 3, 0x20, 1),
        InstructionSpec("MULF", 3, 0x60, 1),
        InstructionSpec("OR", 3, 0x44, 1),
        InstructionSpec("RD", 3, 0xD8, 1),
        InstructionSpec("RSUB", 3, 0x4C, 0),
        InstructionSpec("SSK", 3, 0xEC, 1),
        InstructionSpec("STA", 3, 0x0C, 1),
        InstructionSpec("STB", 3, 0x78, 1),
        InstructionSpec("STCH", 3, 0x54, 1),
        InstructionSpec("STF", 3, 0x80, 1),
        InstructionSpec("STI", 3, 0xD4, 1),
        InstructionSpec("STL", 3, 0x14, 1),
        InstructionSpec("STS", 3, 0x7C, 1),
        InstructionSpec("STSW", 3, 0xE8, 1),
        InstructionSpec("STT", 3, 0x84, 1),
        InstructionSpec("STX", 3, 0x10, 1),
        InstructionSpec("SUB", 3, 0x1C, 1),
        InstructionSpec("SUBF", 3, 0x5C, 1),
        InstructionSpec("TD", 3, 0xE0, 1),
        InstructionSpec("TIX", 3, 0x2C, 1),
        InstructionSpec("WD", 3, 0xDC, 1),

        # Format 2: register-register
        InstructionSpec("ADDR", 2, 0x90, 2),
        InstructionSpec("CLEAR", 2, 0xB4, 1),
        InstructionSpec("COMPR", 2, 0xA0, 2),
        InstructionSpec("DIVR", 2, 0x9C, 2),
        InstructionSpec("MULR", 2, 0x98, 2),
        InstructionSpec("RMO", 2, 0xAC, 2),
        InstructionSpec("SHIFTL", 2, 0xA4, 2),
        InstructionSpec("SHIFTR", 2, 0xA8, 2),
        InstructionSpec("SUBR", 2, 0x94, 2),
        InstructionSpec("SVC", 2, 0xB0, 1),
        InstructionSpec("TIXR", 2, 0xB8, 1),

        # Format 1: no operand
        InstructionSpec("FIX", 1, 0xC4, 0),
        InstructionSpec("FLOAT", 1, 0xC0, 0),
        InstructionSpec("HIO", 1, 0xF4, 0),
        InstructionSpec("NORM", 1, 0xC8, 0),
        InstructionSpec("SIO", 1, 0xF0, 0),
        InstructionSpec("TIO", 1, 0xF8, 0),
    )
}


# =============================================================================
# Instruction Catalog
# =============================================================================

class InstructionCatalog(Mapping[str, InstructionSpec]):
    """
    Read-only mnemonic -> InstructionSpec lookup.

    The catalog is built once and shared by every section; its backing
    mapping is a MappingProxyType so it cannot be mutated afterwards.

    Usage:
        catalog = InstructionCatalog.default()
        spec = catalog.lookup("+JSUB")   # extended marker is ignored
        catalog = InstructionCatalog.from_file("inst.data")
    """

    def __init__(self, specs: Iterable[InstructionSpec]):
        self._specs: Mapping[str, InstructionSpec] = MappingProxyType(
            {spec.mnemonic.upper(): spec for spec in specs}
        )

    @classmethod
    def default(cls) -> "InstructionCatalog":
        """Return the built-in SIC/XE catalog."""
        return _DEFAULT_CATALOG

    @classmethod
    def from_lines(cls, lines: Iterable[str]) -> "InstructionCatalog":
        """
        Build a catalog from catalog-file lines.

        Raises:
            CatalogError: If a line is malformed
        """
        specs = []
        for number, line in enumerate(lines, start=1):
            spec = parse_catalog_line(line, number)
            if spec is not None:
                specs.append(spec)
        return cls(specs)

    @classmethod
    def from_file(cls, filepath: str | Path) -> "InstructionCatalog":
        """
        Load a catalog file.

        Raises:
            CatalogError: If a line is malformed
            FileNotFoundError: If the file does not exist
        """
        text = Path(filepath).read_text()
        return cls.from_lines(text.splitlines())

    def lookup(self, operator: str) -> Optional[InstructionSpec]:
        """
        Look up an operator, ignoring a leading extended-format marker.

        Returns:
            The InstructionSpec, or None for directives and unknown names
        """
        return self._specs.get(operator.lstrip(EXTENDED_PREFIX).upper())

    def __getitem__(self, mnemonic: str) -> InstructionSpec:
        return self._specs[mnemonic.upper()]

    def __iter__(self) -> Iterator[str]:
        return iter(self._specs)

    def __len__(self) -> int:
        return len(self._specs)


def parse_catalog_line(line: str, number: Optional[int] = None) -> Optional[InstructionSpec]:
    """
    Parse one catalog line.

    Args:
        line: Raw line text
        number: Line number for error messages

    Returns:
        InstructionSpec, or None for blank and comment lines

    Raises:
        CatalogError: If the line does not hold four valid fields
    """
    stripped = line.strip()
    if not stripped or stripped.startswith("#"):
        return None

    fields = stripped.split()
    if len(fields) != 4:
        raise CatalogError(f"expected 4 fields, got {len(fields)}: {stripped!r}", number)

    mnemonic, format_field, opcode_field, count_field = fields

    # "3/4" means a format 3 instruction that may be extended with '+'
    format_field = format_field.split("/")[0]
    try:
        fmt = int(format_field)
        opcode = int(opcode_field, 16)
        operand_count = int(count_field)
    except ValueError:
        raise CatalogError(f"invalid numeric field in {stripped!r}", number) from None

    if fmt == 4:
        fmt = 3
    if fmt not in (1, 2, 3):
        raise CatalogError(f"invalid instruction format {fmt} for {mnemonic}", number)
    if not 0 <= opcode <= 0xFF:
        raise CatalogError(f"opcode {opcode_field} for {mnemonic} is not a byte", number)

    return InstructionSpec(mnemonic.upper(), fmt, opcode, operand_count)


_DEFAULT_CATALOG = InstructionCatalog(SICXE_INSTRUCTIONS.values())
