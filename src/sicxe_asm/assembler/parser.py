"""
SIC/XE Statement Model and Section Parser
=========================================

This module turns tokenized source lines into Statement objects grouped
by control section.

A control section starts at every START or CSECT line and runs until the
next one. Sections are independent address spaces: each has its own
symbol table, literal table and location counter starting at 0.

Statement Lifecycle
-------------------
A Statement is created once per source line and then filled in:

1. Parsing: label, operator, operands, comment, source position
2. Pass 1: address, size, and the literals flushed at LTORG/END
3. Pass 2: nixbpe flags, displacement, record kind and hex payload

Pass 2 also creates synthetic statements for modification (M) and end (E)
records. Those go into Section.trailer, never into the statement list
being walked.
"""

from collections.abc import Iterable, Iterator
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from sicxe_asm.assembler.lexer import tokenize_line
from sicxe_asm.assembler.tables import Literal, LiteralTable, SymbolTable
from sicxe_asm.cpu import EXTENDED_PREFIX
from sicxe_asm.errors import AssemblySyntaxError, SourceLocation


# =============================================================================
# Record Kinds and Directives
# =============================================================================

class RecordKind(Enum):
    """Object program record types; the value is the record's first character."""
    HEADER = "H"
    DEFINITION = "D"
    REFERENCE = "R"
    TEXT = "T"
    MODIFICATION = "M"
    END = "E"

    def __str__(self) -> str:
        return self.value


# Operators that open a new control section
SECTION_DIRECTIVES = frozenset({"START", "CSECT"})

# Operators at which pending literals are placed
POOL_DIRECTIVES = frozenset({"LTORG", "END"})

DIRECTIVES = frozenset({
    "START", "CSECT", "EXTDEF", "EXTREF",
    "RESW", "RESB", "WORD", "BYTE",
    "EQU", "LTORG", "END", "BASE", "NOBASE",
})


# =============================================================================
# Statement
# =============================================================================

@dataclass
class Statement:
    """
    One source statement, annotated in place by both passes.

    Attributes:
        label: Label field ("" when absent)
        operator: Mnemonic or directive, with '+' for extended format
        operands: Operand list
        comment: Comment field
        source: Source position, None for synthetic statements
        source_line: Original line text for error context
        address: Location counter value at this statement (pass 1)
        size: Bytes occupied, including any flushed literal pool (pass 1)
        literals: Literals placed at this statement (pass 1, LTORG/END only)
        flags: nixbpe bits (pass 2)
        displacement: Displacement or address field (pass 2)
        record: Object record kind, None if no record (pass 2)
        payload: Record payload; hex digits for text records (pass 2)
    """
    label: str = ""
    operator: str = ""
    operands: list[str] = field(default_factory=list)
    comment: str = ""
    source: Optional[SourceLocation] = None
    source_line: Optional[str] = None

    address: int = 0
    size: int = 0
    literals: list[Literal] = field(default_factory=list)

    flags: int = 0
    displacement: int = 0
    record: Optional[RecordKind] = None
    payload: str = ""

    @property
    def mnemonic(self) -> str:
        """Operator without the extended-format marker."""
        return self.operator.lstrip(EXTENDED_PREFIX)

    @property
    def is_extended(self) -> bool:
        return self.operator.startswith(EXTENDED_PREFIX)

    @property
    def end_address(self) -> int:
        return self.address + self.size

    @property
    def first_operand(self) -> str:
        return self.operands[0] if self.operands else ""

    @classmethod
    def synthetic(cls, record: RecordKind, payload: str, address: int = 0) -> "Statement":
        """Create a generated statement (M or E record) with no source line."""
        return cls(address=address, record=record, payload=payload)

    def __str__(self) -> str:
        operands = ",".join(self.operands)
        return f"{self.label}\t{self.operator}\t{operands}".rstrip()


# =============================================================================
# Control Section
# =============================================================================

@dataclass
class Section:
    """
    One control section and its private tables.

    Attributes:
        name: Section name (label of the START/CSECT line)
        kind: "START" or "CSECT"
        statements: Source statements in order
        symbols: Section symbol table
        literals: Section literal table
        length: Total section length in bytes (pass 1)
        trailer: Generated M and E statements (pass 2)
    """
    name: str
    kind: str = "CSECT"
    statements: list[Statement] = field(default_factory=list)
    symbols: SymbolTable = field(default_factory=SymbolTable)
    literals: LiteralTable = field(default_factory=LiteralTable)
    length: int = 0
    trailer: list[Statement] = field(default_factory=list)

    @property
    def is_main(self) -> bool:
        """True for the section opened by START."""
        return self.kind == "START"

    def all_statements(self) -> Iterator[Statement]:
        """Source statements followed by the generated trailer."""
        yield from self.statements
        yield from self.trailer


# =============================================================================
# Parsing
# =============================================================================

def parse_source(source: str | Iterable[str], filename: str = "<input>") -> list[Section]:
    """
    Tokenize source text and group the statements into control sections.

    Args:
        source: Source text, or an iterable of lines
        filename: Name used in error locations

    Returns:
        Sections in source order

    Raises:
        AssemblySyntaxError: If a statement appears before the first
            START/CSECT line
    """
    lines = source.splitlines() if isinstance(source, str) else source

    sections: list[Section] = []
    for number, raw in enumerate(lines, start=1):
        raw = raw.rstrip("\r\n")
        tokens = tokenize_line(raw)
        if tokens is None:
            continue

        stmt = Statement(
            label=tokens.label,
            operator=tokens.operator,
            operands=tokens.operands,
            comment=tokens.comment,
            source=SourceLocation(filename, number, 1),
            source_line=raw,
        )

        if stmt.operator in SECTION_DIRECTIVES:
            sections.append(Section(name=stmt.label, kind=stmt.operator))
        elif not sections:
            raise AssemblySyntaxError(
                f"'{stmt.operator or stmt.label}' appears before any control section",
                location=stmt.source,
                hint="programs begin with a START line",
                source_line=raw,
            )

        sections[-1].statements.append(stmt)

    return sections
