"""
SIC/XE Source Line Tokenizer
============================

SIC/XE source is column oriented: every line holds up to four
tab-separated fields.

    label <TAB> operator <TAB> operand[,operand...] <TAB> comment

Any field may be empty. A line whose first field is the comment marker
'.' is a full-line comment and produces no tokens; blank lines are skipped
the same way.

Example
-------
>>> from sicxe_asm.assembler.lexer import tokenize_line
>>> tokenize_line("CLOOP\\t+JSUB\\tRDREC\\tread record")
SourceLine(label='CLOOP', operator='+JSUB', operands=['RDREC'], comment='read record')
>>> tokenize_line(".\\tSUBROUTINE TO READ RECORD") is None
True
"""

from dataclasses import dataclass, field
from typing import Optional


# Full-line comment marker (first field)
COMMENT_MARKER = "."

FIELD_SEPARATOR = "\t"
OPERAND_SEPARATOR = ","


@dataclass
class SourceLine:
    """
    One tokenized source line.

    Attributes:
        label: Label field ("" when absent)
        operator: Mnemonic or directive, may carry the '+' extended marker
        operands: Comma-split operand field (empty list when absent)
        comment: Trailing comment field
    """
    label: str = ""
    operator: str = ""
    operands: list[str] = field(default_factory=list)
    comment: str = ""


def split_operands(text: str) -> list[str]:
    """Split an operand field on commas; an empty field gives no operands."""
    text = text.strip()
    if not text:
        return []
    return [operand.strip() for operand in text.split(OPERAND_SEPARATOR)]


def is_comment(line: str) -> bool:
    """Return True for full-line comments and blank lines."""
    if not line.strip():
        return True
    first_field = line.split(FIELD_SEPARATOR, 1)[0].strip()
    return first_field == COMMENT_MARKER


def tokenize_line(line: str) -> Optional[SourceLine]:
    """
    Split one raw source line into its fields.

    Never raises: fields that are not present default to empty.

    Args:
        line: Raw source line (a trailing newline is ignored)

    Returns:
        SourceLine, or None for comment and blank lines
    """
    line = line.rstrip("\r\n")
    if is_comment(line):
        return None

    # The comment field may itself contain tabs; keep them
    fields = line.split(FIELD_SEPARATOR, 3)
    fields += [""] * (4 - len(fields))

    return SourceLine(
        label=fields[0].strip(),
        operator=fields[1].strip().upper(),
        operands=split_operands(fields[2]),
        comment=fields[3].strip(),
    )
