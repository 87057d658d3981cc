"""
SIC/XE Addressing Mode Encoder
==============================

Computes the nixbpe flag field and the displacement/address field for one
machine instruction.

nixbpe Flags
------------
```
 n  i  x  b  p  e
 32 16  8  4  2  1
```
- n=1 i=1: simple addressing (the default)
- n=0 i=1: immediate (#value)
- n=1 i=0: indirect (@name)
- x: indexed, second operand is X (BUFFER,X)
- b / p: base-relative / PC-relative displacement
- e: extended format 4 (+OP)

Target Resolution
-----------------
The operand is looked up in the section symbol table, then in the literal
table. Then:

1. distance = target - (address + size); if |distance| <= 0x7FF the
   displacement is PC-relative (p=1).
2. Otherwise base-relative (b=1). With a BASE directive in effect the
   displacement is target - base; without one it stays 0.
3. An unresolved operand is an external reference: b=p=0, displacement 0,
   and a modification record asks the loader to patch the address field.

Format 2 instructions take register operands instead:

    A=0 X=1 L=2 B=3 S=4 T=5 F=6 PC=8 SW=9
"""

import logging
from dataclasses import dataclass
from typing import Optional

from sicxe_asm.assembler.parser import RecordKind, Section, Statement
from sicxe_asm.assembler.tables import parse_literal
from sicxe_asm.cpu import (
    BASE_RELATIVE_RANGE,
    FLAG_B,
    FLAG_E,
    FLAG_I,
    FLAG_N,
    FLAG_P,
    FLAG_X,
    PC_RELATIVE_RANGE,
    REGISTER_CODES,
    InstructionSpec,
)
from sicxe_asm.errors import AddressingModeError, ErrorCollector, OperandError


logger = logging.getLogger(__name__)


IMMEDIATE_PREFIX = "#"
INDIRECT_PREFIX = "@"
INDEX_REGISTER = "X"

# Format 2 instructions whose second operand is a shift count n (encoded n-1)
SHIFT_INSTRUCTIONS = frozenset({"SHIFTL", "SHIFTR"})

# Width of the modification for a format 4 address field, in half-bytes
ADDRESS_FIELD_HALF_BYTES = 5


@dataclass
class Encoding:
    """
    Result of encoding one instruction's operand.

    Attributes:
        flags: nixbpe bits
        displacement: Signed displacement or address value
        modification: M record statement for an external reference
    """
    flags: int = 0
    displacement: int = 0
    modification: Optional[Statement] = None

    @property
    def is_pc_relative(self) -> bool:
        return bool(self.flags & FLAG_P)

    @property
    def is_base_relative(self) -> bool:
        return bool(self.flags & FLAG_B)

    @property
    def is_immediate(self) -> bool:
        return self.flags & (FLAG_N | FLAG_I) == FLAG_I


class AddressingModeEncoder:
    """
    Per-section nixbpe and displacement calculator.

    The encoder tracks the base register value declared with BASE; the
    pass 2 generator calls set_base()/clear_base() as it meets BASE and
    NOBASE statements.

    Usage:
        encoder = AddressingModeEncoder(section, errors)
        encoding = encoder.encode(stmt, spec)
    """

    def __init__(self, section: Section, errors: Optional[ErrorCollector] = None):
        self._section = section
        self._errors = errors
        self.base: Optional[int] = None

    def set_base(self, value: int) -> None:
        self.base = value

    def clear_base(self) -> None:
        self.base = None

    def encode(self, stmt: Statement, spec: InstructionSpec) -> Encoding:
        """
        Encode the operand of an instruction statement.

        Raises:
            OperandError: Bad register name or non-numeric immediate value
            AddressingModeError: Target out of PC and base range
        """
        if spec.format == 1:
            return Encoding()
        if spec.format == 2:
            return Encoding(displacement=self._register_field(stmt, spec))
        return self._encode_memory(stmt)

    # =========================================================================
    # Format 2
    # =========================================================================

    def _register_field(self, stmt: Statement, spec: InstructionSpec) -> int:
        """Pack up to two register numbers as r1 << 4 | r2."""
        codes = []
        for index, operand in enumerate(stmt.operands[:2]):
            codes.append(self._register_code(stmt, spec, operand, index))

        r1 = codes[0] if codes else 0
        r2 = codes[1] if len(codes) > 1 else 0
        return (r1 << 4) | r2

    def _register_code(self, stmt: Statement, spec: InstructionSpec,
                       operand: str, index: int) -> int:
        name = operand.upper()
        if name in REGISTER_CODES:
            return REGISTER_CODES[name]

        numeric_allowed = (
            (spec.mnemonic in SHIFT_INSTRUCTIONS and index == 1)
            or (spec.mnemonic == "SVC" and index == 0)
        )
        if numeric_allowed and operand.isdigit():
            value = int(operand)
            if spec.mnemonic in SHIFT_INSTRUCTIONS:
                value -= 1
            if 0 <= value <= 0xF:
                return value

        raise OperandError(
            f"'{operand}' is not a valid operand for {spec.mnemonic}",
            location=stmt.source,
            hint="registers are " + ", ".join(REGISTER_CODES),
            source_line=stmt.source_line,
        )

    # =========================================================================
    # Formats 3 and 4
    # =========================================================================

    def _encode_memory(self, stmt: Statement) -> Encoding:
        operand = stmt.first_operand
        encoding = Encoding(flags=FLAG_N | FLAG_I)

        if operand.startswith(IMMEDIATE_PREFIX):
            encoding.flags &= ~FLAG_N
        elif operand.startswith(INDIRECT_PREFIX):
            encoding.flags &= ~FLAG_I

        if len(stmt.operands) > 1 and stmt.operands[1] == INDEX_REGISTER:
            encoding.flags |= FLAG_X

        if stmt.size == 4:
            encoding.flags |= FLAG_E

        if encoding.is_immediate:
            encoding.displacement = self._immediate_value(stmt, operand[1:])
            return encoding

        name = operand.lstrip(INDIRECT_PREFIX)
        target = self._resolve(name)

        if target is None:
            if name:
                encoding.modification = self._modification(stmt, name)
            return encoding

        distance = target - stmt.end_address
        if -PC_RELATIVE_RANGE <= distance <= PC_RELATIVE_RANGE:
            encoding.flags |= FLAG_P
            encoding.displacement = distance
            return encoding

        encoding.flags |= FLAG_B
        encoding.displacement = self._base_displacement(stmt, target)
        return encoding

    def _resolve(self, name: str) -> Optional[int]:
        """Look the operand up as a symbol, then as a literal."""
        target = self._section.symbols.resolve(name)
        if target is not None:
            return target
        literal = parse_literal(name)
        if literal is not None:
            return self._section.literals.resolve(*literal)
        return None

    def _immediate_value(self, stmt: Statement, text: str) -> int:
        if not text.lstrip("-").isdigit():
            raise OperandError(
                f"immediate operand '#{text}' is not a decimal number",
                location=stmt.source,
                source_line=stmt.source_line,
            )
        value = int(text)
        bits = 20 if stmt.size == 4 else 12
        if not -(1 << (bits - 1)) <= value < (1 << bits):
            raise OperandError(
                f"immediate value {value} does not fit in {bits} bits",
                location=stmt.source,
                hint=None if stmt.size == 4 else f"use extended format (+{stmt.mnemonic})",
                source_line=stmt.source_line,
            )
        return value

    def _base_displacement(self, stmt: Statement, target: int) -> int:
        if self.base is None:
            message = (
                f"{stmt.source}: '{stmt.mnemonic}' target {target:04X} is out of "
                f"PC-relative range and no BASE is in effect; displacement set to 0"
            )
            logger.warning(message)
            if self._errors is not None:
                self._errors.add_warning(message)
            return 0

        displacement = target - self.base
        if not 0 <= displacement <= BASE_RELATIVE_RANGE:
            raise AddressingModeError(
                stmt.mnemonic, target,
                location=stmt.source,
                source_line=stmt.source_line,
            )
        return displacement

    def _modification(self, stmt: Statement, name: str) -> Statement:
        """M record for an external reference in the address field."""
        literal = parse_literal(name)
        symbol = literal[0] if literal else name
        address = stmt.address + 1
        logger.debug(f"{self._section.name}: external reference '{symbol}' at {address:06X}")
        return Statement.synthetic(
            RecordKind.MODIFICATION,
            f"{address:06X}{ADDRESS_FIELD_HALF_BYTES:02X}+{symbol}",
            address=address,
        )
