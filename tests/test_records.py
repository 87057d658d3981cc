# =============================================================================
# test_records.py - Object Program and Listing Tests
# =============================================================================
# Tests for text record merging, the per-section record layout and the
# symbol / literal listings.
# =============================================================================

import pytest

from sicxe_asm.assembler import RecordAssembler, RecordKind, Statement
from sicxe_asm.assembler.records import MAX_TEXT_BYTES, text_records


def text(address, payload):
    return Statement(address=address, size=len(payload) // 2,
                     record=RecordKind.TEXT, payload=payload)


def blank(address, size):
    return Statement(address=address, size=size)


# =============================================================================
# Text Record Merging
# =============================================================================

class TestTextMerging:
    """Test how consecutive text statements share T records."""

    def test_contiguous_merge(self, statement_records):
        """Statements at 0x10 and 0x13, 3 bytes each, share one record."""
        assert statement_records([text(0x10, "032016"), text(0x13, "0F2016")]) == [
            "T000010060320160F2016",
        ]

    def test_gap_splits(self, statement_records):
        """A gap in addresses starts a new record."""
        assert statement_records([
            text(0x00, "3E2000"),
            blank(0x03, 6),
            text(0x09, "454F46"),
        ]) == ["T000000033E2000", "T00000903454F46"]

    def test_no_record_statements_skipped(self, statement_records):
        """Zero-size statements without a record do not break a run."""
        assert statement_records([
            text(0x00, "B410"),
            blank(0x02, 0),
            text(0x02, "B400"),
        ]) == ["T00000004B410B400"]

    def test_length_limit(self, statement_records):
        """A record never exceeds 30 bytes."""
        statements = [text(offset, "010203") for offset in range(0, 33, 3)]
        records = statement_records(statements)
        assert records[0] == "T0000001E" + "010203" * 10
        assert records[1] == "T00001E03010203"
        for record in records:
            assert int(record[7:9], 16) <= MAX_TEXT_BYTES

    def test_whole_statements_only(self, statement_records):
        """A statement that would overflow the record starts the next one."""
        records = statement_records([
            text(0x00, "00" * 29),
            text(0x1D, "112233"),
        ])
        assert records == ["T0000001D" + "00" * 29, "T00001D03112233"]

    def test_other_records_break_runs(self, statement_records):
        """M and E records are written on their own lines."""
        statements = [
            text(0x00, "4B100000"),
            Statement.synthetic(RecordKind.MODIFICATION, "00000105+RDREC", 0x01),
            Statement.synthetic(RecordKind.END, "000000"),
        ]
        assert statement_records(statements) == [
            "T000000044B100000", "M00000105+RDREC", "E000000",
        ]

    def test_long_payload_split(self):
        """A single payload over 30 bytes is split across records."""
        records = list(text_records(0x100, "AB" * 40))
        assert records == [
            "T0001001E" + "AB" * 30,
            "T00011E0A" + "AB" * 10,
        ]


# =============================================================================
# Full Program Output
# =============================================================================

class TestCopyOutput:
    """Test record assembly for the COPY example."""

    @pytest.fixture
    def records(self, copy_source, run_passes):
        return RecordAssembler(run_passes(copy_source))

    def test_text_records_contiguous(self, copy_source, run_passes):
        """Every T record covers exactly the bytes its statements occupy."""
        sections = run_passes(copy_source)
        assembler = RecordAssembler(sections)
        for section in sections:
            for record in assembler.section_records(section):
                if record.startswith("T"):
                    assert len(record) == 9 + 2 * int(record[7:9], 16)

    def test_symbol_listing(self, records):
        """One NAME<TAB>ADDR line per symbol, blank line per section."""
        listing = records.symbol_listing()
        assert listing.startswith(
            "COPY  \t0000\n"
            "FIRST \t0000\n"
            "CLOOP \t0003\n"
        )
        assert "BUFEND\t1033\nMAXLEN\t1000\n\nRDREC \t0000\n" in listing
        assert listing.endswith("WRREC \t0000\nWLOOP \t0006\n\n")

    def test_literal_listing(self, records):
        """Literals listed per section, sections without any stay blank."""
        assert records.literal_listing() == "EOF   \t0030\n\n\n05    \t001B\n\n"

    def test_listing_past_0xffff(self, make_source, run_passes):
        """Addresses too wide for 4 digits are listed with 6."""
        sections = run_passes(make_source(
            ("PROG", "START", "0"),
            ("BIG", "RESB", "70000"),
            ("AFTER", "RESB", "1"),
        ))
        listing = RecordAssembler(sections).symbol_listing()
        assert listing == "PROG  \t0000\nBIG   \t0000\nAFTER \t011170\n\n"
