"""
Pass 1: Location and Symbol Resolution
======================================

Pass 1 walks every control section once, in source order:

- Records the location counter as each statement's address
- Calculates each statement's size and advances the counter
- Enters labels into the section symbol table (evaluating EQU)
- Registers literals on first use (=C'..', =X'..')
- Places pending literals at LTORG and END (the literal pool)
- Stores the final counter as the section length

Statement Sizes
---------------
| Operator          | Size                                   |
|-------------------|----------------------------------------|
| instruction       | catalog format (+1 with '+' prefix)    |
| RESW n            | 3 * n                                  |
| RESB n            | n                                      |
| WORD              | 3                                      |
| BYTE X'..'        | hex digits / 2                         |
| BYTE C'..'        | character count                        |
| LTORG / END       | total size of the literals placed      |
| other directives  | 0                                      |
"""

import logging
from typing import Optional

from sicxe_asm.assembler.parser import DIRECTIVES, POOL_DIRECTIVES, Section, Statement
from sicxe_asm.assembler.tables import LiteralKind, constant_value, parse_constant, parse_literal
from sicxe_asm.cpu import InstructionCatalog
from sicxe_asm.errors import (
    AssemblerError,
    AssemblySyntaxError,
    ErrorCollector,
    OperandError,
    UnknownInstructionError,
)


logger = logging.getLogger(__name__)


class Pass1Resolver:
    """
    Assigns addresses and builds the symbol and literal tables.

    Statement errors (unknown operators, malformed counts and constants)
    are added to the error collector and the statement is given size 0,
    so the rest of the section is still resolved.

    Usage:
        resolver = Pass1Resolver(catalog, errors)
        resolver.resolve(sections)
    """

    def __init__(self, catalog: InstructionCatalog, errors: ErrorCollector):
        self._catalog = catalog
        self._errors = errors

    def resolve(self, sections: list[Section]) -> None:
        """Run pass 1 over every section."""
        for section in sections:
            self.resolve_section(section)

    def resolve_section(self, section: Section) -> None:
        """Run pass 1 over one section, starting its location counter at 0."""
        locctr = 0

        for stmt in section.statements:
            stmt.address = locctr
            try:
                stmt.size = self.statement_size(stmt)
            except AssemblerError as e:
                stmt.size = 0
                self._errors.add(e)
            locctr += stmt.size

            if stmt.label:
                self._define_label(section, stmt)

            try:
                self._register_literal(section, stmt)
            except AssemblerError as e:
                self._errors.add(e)

            if stmt.operator in POOL_DIRECTIVES and section.literals.has_pending():
                stmt.literals = section.literals.place_pending(locctr)
                pool_size = sum(literal.size for literal in stmt.literals)
                stmt.size += pool_size
                locctr += pool_size
                logger.debug(
                    f"{section.name}: {stmt.operator} placed {len(stmt.literals)} "
                    f"literal(s) at {stmt.address:04X}, {pool_size} bytes"
                )

        if section.literals.has_pending():
            names = ", ".join(literal.text for literal in section.literals.pending())
            message = f"{section.name}: literals {names} never placed (no LTORG or END)"
            self._errors.add_warning(message)
            logger.warning(message)

        section.length = locctr
        logger.debug(f"{section.name}: length {locctr:04X}, {len(section.symbols)} symbols")

    # =========================================================================
    # Sizes
    # =========================================================================

    def statement_size(self, stmt: Statement) -> int:
        """
        Calculate the bytes a statement occupies (literal pool excluded).

        Raises:
            UnknownInstructionError: Operator is not a mnemonic or directive
            OperandError: Malformed RESW/RESB count or BYTE constant
        """
        spec = self._catalog.lookup(stmt.operator)
        if spec is not None:
            if stmt.is_extended:
                if spec.format != 3:
                    raise AssemblySyntaxError(
                        f"'{spec.mnemonic}' is a format {spec.format} instruction "
                        f"and has no extended form",
                        location=stmt.source,
                        source_line=stmt.source_line,
                    )
                return 4
            return spec.format

        operator = stmt.operator
        if operator == "RESW":
            return 3 * self._count(stmt)
        if operator == "RESB":
            return self._count(stmt)
        if operator == "WORD":
            return 3
        if operator == "BYTE":
            return self._byte_size(stmt)
        if operator in DIRECTIVES or not operator:
            return 0

        raise UnknownInstructionError(operator, stmt.source, stmt.source_line)

    def _count(self, stmt: Statement) -> int:
        operand = stmt.first_operand
        if not operand.isdigit():
            raise OperandError(
                f"'{stmt.operator}' needs a decimal count, got '{operand}'",
                location=stmt.source,
                source_line=stmt.source_line,
            )
        return int(operand)

    def _byte_size(self, stmt: Statement) -> int:
        parsed = parse_constant(stmt.first_operand)
        if parsed is None:
            raise OperandError(
                f"BYTE constant must be X'..' or C'..', got '{stmt.first_operand}'",
                location=stmt.source,
                source_line=stmt.source_line,
            )
        text, kind = parsed
        self._check_constant(stmt, text, kind)
        if kind is LiteralKind.HEX:
            return len(text) // 2
        return len(text)

    def _check_constant(self, stmt: Statement, text: str, kind: LiteralKind) -> None:
        """Reject constants that would not fill whole bytes."""
        try:
            if not text:
                raise ValueError("empty constant")
            constant_value(text, kind)
        except ValueError as e:
            raise OperandError(
                f"invalid constant {kind.value}'{text}': {e}",
                location=stmt.source,
                source_line=stmt.source_line,
            ) from None

    # =========================================================================
    # Symbols
    # =========================================================================

    def _define_label(self, section: Section, stmt: Statement) -> None:
        """Enter the statement's label, evaluating EQU operands."""
        if stmt.operator == "EQU":
            value = self._evaluate_equ(section, stmt)
        else:
            value = stmt.address

        if section.symbols.define(stmt.label, value, stmt.source):
            message = f"{stmt.source}: symbol '{stmt.label}' redefined as {value:04X}"
            self._errors.add_warning(message)
            logger.warning(message)

    def _evaluate_equ(self, section: Section, stmt: Statement) -> int:
        """
        Evaluate an EQU operand.

        *      -> address of the EQU statement
        A-B    -> value(A) - value(B); own address if either is unresolved
        NAME   -> value(NAME); 0 if unresolved (external)
        number -> the number
        """
        operand = stmt.first_operand

        if operand == "*" or not operand:
            return stmt.address

        if "-" in operand:
            left, right = operand.split("-", 1)
            left_value = self._term_value(section, left)
            right_value = self._term_value(section, right)
            if left_value is None or right_value is None:
                return stmt.address
            return left_value - right_value

        value = self._term_value(section, operand)
        return 0 if value is None else value

    @staticmethod
    def _term_value(section: Section, term: str) -> Optional[int]:
        term = term.strip()
        if term.isdigit():
            return int(term)
        return section.symbols.resolve(term)

    # =========================================================================
    # Literals
    # =========================================================================

    def _register_literal(self, section: Section, stmt: Statement) -> None:
        parsed = parse_literal(stmt.first_operand)
        if parsed is None:
            return
        text, kind = parsed
        self._check_constant(stmt, text, kind)
        if section.literals.register(text, kind):
            logger.debug(f"{section.name}: literal '{text}' registered at {stmt.address:04X}")
