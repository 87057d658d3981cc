"""
Object Program and Listing Output
=================================

Serializes assembled sections into the three text outputs.

Object Program
--------------
One block per control section, records in statement order followed by the
section trailer, and a blank line after each block:

```
HCOPY  000000001033          H name(6) start(6) length(6)
DBUFFER000033BUFEND001033    D (name(6) address(6))*
RRDREC WRREC                 R (name(6))*
T0000001D172027...           T start(6) length(2) code
M00000405+RDREC              M address(6) half-bytes(2) sign name
E000000                      E [entry(6)]
```

Consecutive text statements are merged into one T record while their
addresses are contiguous and the merged code stays within 30 (0x1E) bytes.
Statements without a record (RESW, EQU, ...) do not break a run; the
address gap they leave does.

Listings
--------
Symbol and literal listings hold one ``NAME\\tADDR`` line per entry, name
padded or cut to 6 characters, address as 4 hex digits (6 when it does
not fit in 4), and a blank line after each section.
"""

from collections.abc import Iterable, Iterator

from sicxe_asm.assembler.parser import RecordKind, Section
from sicxe_asm.assembler.tables import format_hex


# Maximum object code bytes in one text record
MAX_TEXT_BYTES = 0x1E


class RecordAssembler:
    """
    Builds the object program and listings for assembled sections.

    Usage:
        records = RecordAssembler(sections)
        text = records.object_program()
    """

    def __init__(self, sections: Iterable[Section]):
        self._sections = list(sections)

    def object_program(self) -> str:
        """Object program text for every section."""
        return "".join(
            _block(self.section_records(section)) for section in self._sections
        )

    def section_records(self, section: Section) -> list[str]:
        """Object records of one section, one string per record."""
        statements = list(section.all_statements())
        records = []

        index = 0
        while index < len(statements):
            stmt = statements[index]
            index += 1

            if stmt.record is None:
                continue
            if stmt.record is not RecordKind.TEXT:
                records.append(f"{stmt.record}{stmt.payload}")
                continue

            start = stmt.address
            code = stmt.payload
            while index < len(statements):
                following = statements[index]
                if following.record is None:
                    index += 1
                    continue
                if (following.record is RecordKind.TEXT
                        and following.address == start + len(code) // 2
                        and (len(code) + len(following.payload)) // 2 <= MAX_TEXT_BYTES):
                    code += following.payload
                    index += 1
                    continue
                break

            records.extend(text_records(start, code))

        return records

    def symbol_listing(self) -> str:
        """Symbol table of every section, in definition order."""
        return "".join(
            _block(_listing_line(symbol.name, symbol.value) for symbol in section.symbols)
            for section in self._sections
        )

    def literal_listing(self) -> str:
        """Placed literals of every section, in pool order."""
        return "".join(
            _block(
                _listing_line(literal.text, literal.address)
                for literal in section.literals if literal.is_placed
            )
            for section in self._sections
        )


def text_records(start: int, code: str) -> Iterator[str]:
    """
    Format object code as T records.

    Code longer than MAX_TEXT_BYTES (only possible for a single large
    literal pool or constant) is split across consecutive records.
    """
    step = MAX_TEXT_BYTES * 2
    for offset in range(0, len(code), step):
        chunk = code[offset:offset + step]
        yield f"{RecordKind.TEXT}{start + offset // 2:06X}{len(chunk) // 2:02X}{chunk}"


def _listing_line(name: str, value: int) -> str:
    digits = 4 if -0x8000 <= value <= 0xFFFF else 6
    return f"{name:<6.6}\t{format_hex(value, digits)}"


def _block(lines: Iterable[str]) -> str:
    return "".join(f"{line}\n" for line in lines) + "\n"
