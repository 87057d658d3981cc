"""
Pass 2: Object Code Generation
==============================

Pass 2 walks every section again with the addresses and tables from pass 1
and tags each statement with an object record kind and a hex payload:

| Statement        | Record | Payload                                     |
|------------------|--------|---------------------------------------------|
| START / CSECT    | H      | name(6) 000000 length(6)                    |
| EXTDEF a,b       | D      | name(6) address(6) per name                 |
| EXTREF a,b       | R      | name(6) per name                            |
| instruction      | T      | 2, 4, 6 or 8 hex digits by format           |
| BYTE / WORD      | T      | constant value, padded to its size          |
| LTORG / END      | T      | literals placed there, only if any          |
| BASE / NOBASE    | none   | sets or clears the base register            |

Modification records (external references) and the end record are
generated as synthetic statements and appended to Section.trailer.

Instruction Layout
------------------
```
format 1:  opcode                                       (8 bits)
format 2:  opcode | r1 | r2                              (16 bits)
format 3:  opcode[7:2] | n i x b p e | disp              (24 bits)
format 4:  opcode[7:2] | n i x b p e | address           (32 bits)
```
"""

import logging
from typing import Optional

from sicxe_asm.assembler.addressing import AddressingModeEncoder
from sicxe_asm.assembler.parser import (
    POOL_DIRECTIVES,
    SECTION_DIRECTIVES,
    RecordKind,
    Section,
    Statement,
)
from sicxe_asm.assembler.tables import constant_value, format_hex, parse_constant
from sicxe_asm.cpu import InstructionCatalog, InstructionSpec
from sicxe_asm.errors import (
    AssemblerError,
    ErrorCollector,
    OperandError,
    UndefinedSymbolError,
)


logger = logging.getLogger(__name__)


# Width of a WORD modification, in half-bytes
WORD_FIELD_HALF_BYTES = 6

# Values a 3-byte WORD can hold (signed or unsigned)
WORD_MIN = -0x800000
WORD_MAX = 0xFFFFFF


class Pass2Generator:
    """
    Produces record kinds and payloads for every statement.

    Errors raised while generating one statement are collected and the
    statement is left without a record.

    Usage:
        generator = Pass2Generator(catalog, errors)
        generator.generate(sections)
    """

    def __init__(self, catalog: InstructionCatalog, errors: ErrorCollector):
        self._catalog = catalog
        self._errors = errors

    def generate(self, sections: list[Section]) -> None:
        """Run pass 2 over every section."""
        entry = self.entry_point(sections)
        for section in sections:
            self.generate_section(section, entry)

    def generate_section(self, section: Section, entry: int = 0) -> None:
        """
        Run pass 2 over one section.

        Args:
            section: Section resolved by pass 1
            entry: Execution start address written to the main section's
                end record
        """
        section.trailer = []
        encoder = AddressingModeEncoder(section, self._errors)

        for stmt in section.statements:
            try:
                self._generate_statement(section, stmt, encoder)
            except AssemblerError as e:
                stmt.record = None
                stmt.payload = ""
                self._errors.add(e)

        section.trailer.append(self._end_record(section, entry))

    @staticmethod
    def entry_point(sections: list[Section]) -> int:
        """
        Address named by the END operand, resolved in the START section.

        Returns 0 when there is no START section, no END operand, or the
        operand is not a symbol of the START section.
        """
        main = next((section for section in sections if section.is_main), None)
        if main is None:
            return 0

        for section in sections:
            for stmt in section.statements:
                if stmt.operator == "END" and stmt.first_operand:
                    value = main.symbols.resolve(stmt.first_operand)
                    if value is None:
                        logger.warning(
                            f"{stmt.source}: END operand '{stmt.first_operand}' "
                            f"is not defined in {main.name}; entry point set to 0"
                        )
                        return 0
                    return value
        return 0

    # =========================================================================
    # Dispatch
    # =========================================================================

    def _generate_statement(self, section: Section, stmt: Statement,
                            encoder: AddressingModeEncoder) -> None:
        operator = stmt.operator

        if operator in SECTION_DIRECTIVES:
            self._emit(stmt, RecordKind.HEADER,
                       f"{section.name:<6.6}000000{section.length:06X}")
        elif operator == "EXTDEF":
            self._emit(stmt, RecordKind.DEFINITION, self._definitions(section, stmt))
        elif operator == "EXTREF":
            self._emit(stmt, RecordKind.REFERENCE,
                       "".join(f"{name:<6.6}" for name in stmt.operands))
        elif operator in POOL_DIRECTIVES:
            if stmt.literals:
                self._emit(stmt, RecordKind.TEXT,
                           "".join(literal.to_hex() for literal in stmt.literals))
        elif operator == "BYTE":
            text, kind = parse_constant(stmt.first_operand)
            self._emit(stmt, RecordKind.TEXT,
                       format_hex(constant_value(text, kind), stmt.size * 2))
        elif operator == "WORD":
            value = self._word_value(section, stmt)
            self._emit(stmt, RecordKind.TEXT, format_hex(value, 6))
        elif operator == "BASE":
            encoder.set_base(self._base_value(section, stmt))
            logger.debug(f"{section.name}: base register set to {encoder.base:04X}")
        elif operator == "NOBASE":
            encoder.clear_base()
        else:
            spec = self._catalog.lookup(operator)
            if spec is not None:
                self._instruction(section, stmt, spec, encoder)

    @staticmethod
    def _emit(stmt: Statement, record: RecordKind, payload: str) -> None:
        stmt.record = record
        stmt.payload = payload

    # =========================================================================
    # Linkage Records
    # =========================================================================

    def _definitions(self, section: Section, stmt: Statement) -> str:
        parts = []
        for name in stmt.operands:
            value = section.symbols.resolve(name)
            if value is None:
                raise UndefinedSymbolError(
                    name,
                    location=stmt.source,
                    hint=f"EXTDEF names must be defined in section {section.name}",
                    source_line=stmt.source_line,
                )
            parts.append(f"{name:<6.6}{format_hex(value, 6)}")
        return "".join(parts)

    @staticmethod
    def _end_record(section: Section, entry: int) -> Statement:
        payload = format_hex(entry, 6) if section.is_main else ""
        return Statement.synthetic(RecordKind.END, payload, address=section.length)

    # =========================================================================
    # Data Directives
    # =========================================================================

    def _word_value(self, section: Section, stmt: Statement) -> int:
        """
        Evaluate a WORD operand and check that it fits in 3 bytes.

        Raises:
            OperandError: Missing operand or value outside WORD_MIN..WORD_MAX
        """
        value = self._word_expression(section, stmt)
        if not WORD_MIN <= value <= WORD_MAX:
            raise OperandError(
                f"WORD value {value} does not fit in 3 bytes",
                location=stmt.source,
                hint=f"WORD holds {WORD_MIN} to {WORD_MAX}",
                source_line=stmt.source_line,
            )
        return value

    def _word_expression(self, section: Section, stmt: Statement) -> int:
        """
        Evaluate a WORD operand, adding modification records for externals.

        number     -> the number
        A-B        -> A - B when both are local, otherwise 0 and one
                      M record per external name (+A, -B)
        NAME       -> its value, or 0 and +NAME when external
        """
        operand = stmt.first_operand
        if not operand:
            raise OperandError(
                "WORD needs a value",
                location=stmt.source,
                source_line=stmt.source_line,
            )

        if operand.lstrip("-").isdigit():
            return int(operand)

        if "-" in operand:
            left, right = (term.strip() for term in operand.split("-", 1))
            terms = [("+", left, section.symbols.resolve(left)),
                     ("-", right, section.symbols.resolve(right))]
        else:
            terms = [("+", operand, section.symbols.resolve(operand))]

        values = [value for _, _, value in terms]
        if None not in values:
            return values[0] - values[1] if len(values) == 2 else values[0]

        for sign, name, value in terms:
            if value is None:
                self._word_modification(section, stmt, sign, name)
        return 0

    def _word_modification(self, section: Section, stmt: Statement,
                           sign: str, name: str) -> None:
        logger.debug(f"{section.name}: WORD external '{sign}{name}' at {stmt.address:06X}")
        section.trailer.append(Statement.synthetic(
            RecordKind.MODIFICATION,
            f"{stmt.address:06X}{WORD_FIELD_HALF_BYTES:02X}{sign}{name}",
            address=stmt.address,
        ))

    def _base_value(self, section: Section, stmt: Statement) -> int:
        operand = stmt.first_operand
        if operand == "*":
            return stmt.address
        if operand.isdigit():
            return int(operand)

        value: Optional[int] = section.symbols.resolve(operand)
        if value is None:
            raise UndefinedSymbolError(
                operand,
                location=stmt.source,
                hint="BASE needs a symbol defined in this section",
                source_line=stmt.source_line,
            )
        return value

    # =========================================================================
    # Instructions
    # =========================================================================

    def _instruction(self, section: Section, stmt: Statement, spec: InstructionSpec,
                     encoder: AddressingModeEncoder) -> None:
        encoding = encoder.encode(stmt, spec)
        stmt.flags = encoding.flags
        stmt.displacement = encoding.displacement

        if encoding.modification is not None:
            section.trailer.append(encoding.modification)

        self._emit(stmt, RecordKind.TEXT, encode_instruction(
            spec.opcode, stmt.size, stmt.flags, stmt.displacement))


def encode_instruction(opcode: int, size: int, flags: int, displacement: int) -> str:
    """
    Pack an instruction into hex digits.

    Args:
        opcode: Catalog opcode
        size: Instruction length in bytes (1-4)
        flags: nixbpe bits (formats 3 and 4)
        displacement: Register field (format 2), displacement (format 3)
            or address (format 4)

    Returns:
        size * 2 upper-case hex digits

    Example:
        >>> encode_instruction(0x14, 3, 0x32, 0x27)
        '172027'
    """
    if size == 1:
        return format_hex(opcode, 2)
    if size == 2:
        return format_hex((opcode << 8) | (displacement & 0xFF), 4)
    if size == 3:
        return format_hex((((opcode << 4) | flags) << 12) | (displacement & 0xFFF), 6)
    return format_hex((((opcode << 4) | flags) << 20) | (displacement & 0xFFFFF), 8)
