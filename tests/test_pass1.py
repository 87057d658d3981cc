# =============================================================================
# test_pass1.py - Pass 1 (Location and Symbol Resolution) Tests
# =============================================================================
# Tests for address assignment, statement sizes, symbol definition, EQU
# evaluation and literal pool placement.
# =============================================================================

import pytest

from sicxe_asm.assembler import LiteralKind, Pass1Resolver, parse_source
from sicxe_asm.errors import (
    AssemblySyntaxError,
    OperandError,
    UnknownInstructionError,
)


def header(name="PROG"):
    return (name, "START", "0")


# =============================================================================
# Statement Sizes
# =============================================================================

class TestStatementSizes:
    """Test the size of each statement kind."""

    @pytest.mark.parametrize("row,size", [
        (("", "LDA", "#3"), 3),
        (("", "+JSUB", "RDREC"), 4),
        (("", "CLEAR", "X"), 2),
        (("", "FIX", ""), 1),
        (("", "RESW", "2"), 6),
        (("", "RESB", "4096"), 4096),
        (("", "WORD", "5"), 3),
        (("", "BYTE", "X'F1'"), 1),
        (("", "BYTE", "X'0A0B0C'"), 3),
        (("", "BYTE", "C'EOF'"), 3),
        (("", "EXTREF", "RDREC"), 0),
        (("", "BASE", "FIRST"), 0),
    ])
    def test_size(self, make_source, run_pass1, errors, row, size):
        """Each statement kind occupies the documented number of bytes."""
        sections = run_pass1(make_source(header(), ("FIRST",) + row[1:]))
        stmt = sections[0].statements[1]
        assert stmt.size == size
        assert not errors.has_errors()

    def test_format2_cannot_extend(self, make_source, run_pass1, errors):
        """'+' on a format 2 instruction is a syntax error."""
        run_pass1(make_source(header(), ("", "+CLEAR", "X")))
        assert isinstance(errors.errors[0], AssemblySyntaxError)


# =============================================================================
# Location Counter
# =============================================================================

class TestLocationCounter:
    """Test address assignment."""

    def test_addresses_are_running_sum(self, copy_source, run_pass1):
        """Every address equals the sum of the preceding sizes."""
        for section in run_pass1(copy_source):
            locctr = 0
            for stmt in section.statements:
                assert stmt.address == locctr
                locctr += stmt.size
            assert section.length == locctr

    def test_each_section_starts_at_zero(self, copy_source, run_pass1):
        """Control sections have independent location counters."""
        sections = run_pass1(copy_source)
        assert [section.name for section in sections] == ["COPY", "RDREC", "WRREC"]
        assert all(section.statements[0].address == 0 for section in sections)

    def test_section_lengths(self, copy_source, run_pass1):
        """Section lengths of the COPY program."""
        sections = run_pass1(copy_source)
        assert [section.length for section in sections] == [0x1033, 0x2B, 0x1C]


# =============================================================================
# Symbols
# =============================================================================

class TestSymbols:
    """Test symbol definition."""

    def test_copy_symbols(self, copy_source, run_pass1):
        """Labels resolve to their statement's address."""
        copy, rdrec, wrrec = run_pass1(copy_source)
        assert copy.symbols.as_dict() == {
            "COPY": 0x0, "FIRST": 0x0, "CLOOP": 0x3, "ENDFIL": 0x17,
            "RETADR": 0x2A, "LENGTH": 0x2D, "BUFFER": 0x33,
            "BUFEND": 0x1033, "MAXLEN": 0x1000,
        }
        assert rdrec.symbols.as_dict() == {
            "RDREC": 0x0, "RLOOP": 0x9, "EXIT": 0x20, "INPUT": 0x27, "MAXLEN": 0x28,
        }
        assert wrrec.symbols.as_dict() == {"WRREC": 0x0, "WLOOP": 0x6}

    def test_symbols_are_per_section(self, copy_source, run_pass1):
        """A name defined in one section is unknown in another."""
        copy, rdrec, _ = run_pass1(copy_source)
        assert copy.symbols.resolve("BUFFER") == 0x33
        assert rdrec.symbols.resolve("BUFFER") is None

    def test_redefinition_warns(self, make_source, run_pass1, errors):
        """A label defined twice keeps the last value and records a warning."""
        sections = run_pass1(make_source(
            header(),
            ("DUP", "RESB", "4"),
            ("DUP", "RESB", "4"),
        ))
        assert sections[0].symbols.resolve("DUP") == 4
        assert errors.warning_count() == 1
        assert not errors.has_errors()


# =============================================================================
# EQU
# =============================================================================

class TestEqu:
    """Test EQU operand evaluation."""

    def test_equ_star(self, make_source, run_pass1):
        """EQU * at address 0x20 binds 0x20."""
        sections = run_pass1(make_source(
            header(),
            ("", "RESB", "32"),
            ("HERE", "EQU", "*"),
        ))
        assert sections[0].symbols.resolve("HERE") == 0x20

    def test_equ_difference(self, make_source, run_pass1):
        """EQU A-B is the difference of two local symbols."""
        sections = run_pass1(make_source(
            header(),
            ("BUF", "RESB", "10"),
            ("BUFEND", "EQU", "*"),
            ("LEN", "EQU", "BUFEND-BUF"),
        ))
        assert sections[0].symbols.resolve("LEN") == 10

    def test_equ_difference_unresolved(self, make_source, run_pass1):
        """EQU A-B falls back to its own address when a term is unknown."""
        sections = run_pass1(make_source(
            header(),
            ("", "RESB", "6"),
            ("LEN", "EQU", "EXT-BUF"),
        ))
        assert sections[0].symbols.resolve("LEN") == 6

    def test_equ_name_and_number(self, make_source, run_pass1):
        """EQU NAME copies a value; EQU number is that number; unknown is 0."""
        sections = run_pass1(make_source(
            header(),
            ("", "RESB", "3"),
            ("MARK", "EQU", "*"),
            ("ALIAS", "EQU", "MARK"),
            ("COUNT", "EQU", "4096"),
            ("UNKNOWN", "EQU", "ELSEWHERE"),
        ))
        symbols = sections[0].symbols
        assert symbols.resolve("ALIAS") == 3
        assert symbols.resolve("COUNT") == 4096
        assert symbols.resolve("UNKNOWN") == 0


# =============================================================================
# Literal Pools
# =============================================================================

class TestLiteralPools:
    """Test literal registration and placement at LTORG/END."""

    def test_ltorg_pool(self, copy_source, run_pass1):
        """=C'EOF' is placed at the LTORG after LENGTH."""
        copy = run_pass1(copy_source)[0]
        ltorg = next(stmt for stmt in copy.statements if stmt.operator == "LTORG")
        assert copy.literals.resolve("EOF", LiteralKind.CHAR) == 0x30
        assert ltorg.address == 0x30
        assert ltorg.size == 3
        assert [literal.text for literal in ltorg.literals] == ["EOF"]

    def test_end_pool(self, copy_source, run_pass1):
        """=X'05' is used twice and placed once, at END."""
        wrrec = run_pass1(copy_source)[2]
        end = wrrec.statements[-1]
        assert wrrec.literals.resolve("05", LiteralKind.HEX) == 0x1B
        assert len(wrrec.literals) == 1
        assert end.size == 1

    def test_pool_without_gaps(self, make_source, run_pass1):
        """A pool lays literals out back to back in first-use order."""
        sections = run_pass1(make_source(
            header(),
            ("", "LDA", "=C'ABC'"),
            ("", "LDA", "=X'0102'"),
            ("", "LDA", "=C'ABC'"),
            ("", "LTORG", ""),
            ("AFTER", "RESB", "1"),
        ))
        section = sections[0]
        assert section.literals.resolve("ABC", LiteralKind.CHAR) == 9
        assert section.literals.resolve("0102", LiteralKind.HEX) == 12
        assert section.symbols.resolve("AFTER") == 14

    def test_empty_pool(self, make_source, run_pass1):
        """LTORG with nothing pending has size 0."""
        sections = run_pass1(make_source(header(), ("", "LTORG", "")))
        assert sections[0].statements[1].size == 0
        assert sections[0].statements[1].literals == []

    def test_unplaced_literal_warns(self, make_source, run_pass1, errors):
        """A literal with no following LTORG or END is reported."""
        run_pass1(make_source(header(), ("", "LDA", "=X'05'")))
        assert errors.warning_count() == 1

    def test_bad_hex_literal(self, make_source, run_pass1, errors):
        """A hex literal with non-hex digits is an operand error."""
        run_pass1(make_source(header(), ("", "LDA", "=X'ZZ'"), ("", "END", "")))
        assert isinstance(errors.errors[0], OperandError)

    def test_odd_hex_literal(self, make_source, run_pass1, errors):
        """=X'F' is half a byte and is rejected, not placed as 0 bytes."""
        run_pass1(make_source(header(), ("", "LDA", "=X'F'"), ("", "END", "")))
        assert errors.error_count() == 1
        assert isinstance(errors.errors[0], OperandError)
        assert "odd number of hex digits" in str(errors.errors[0])

    def test_odd_hex_byte_reported(self, make_source, run_pass1, errors):
        """BYTE X'ABC' names the constant in the error."""
        run_pass1(make_source(header(), ("", "BYTE", "X'ABC'")))
        assert "X'ABC'" in str(errors.errors[0])


# =============================================================================
# Errors
# =============================================================================

class TestPass1Errors:
    """Test per-statement error collection."""

    def test_unknown_operator(self, make_source, run_pass1, errors):
        """STDX is neither a mnemonic nor a directive."""
        sections = run_pass1(make_source(
            header(),
            ("FIRST", "STDX", "RETADR"),
            ("NEXT", "LDA", "#0"),
        ))
        assert errors.error_count() == 1
        error = errors.errors[0]
        assert isinstance(error, UnknownInstructionError)
        assert error.operator == "STDX"
        assert error.location.line == 2
        # the bad statement takes no space and resolution continues
        assert sections[0].symbols.resolve("NEXT") == 0

    @pytest.mark.parametrize("row", [
        ("", "RESW", "MANY"),
        ("", "RESB", ""),
        ("", "BYTE", "F1"),
        ("", "BYTE", "X'GG'"),
        ("", "BYTE", "X'ABC'"),
        ("", "BYTE", "X''"),
        ("", "BYTE", "C''"),
    ])
    def test_bad_operands(self, make_source, run_pass1, errors, row):
        """Malformed counts and constants are operand errors."""
        run_pass1(make_source(header(), row))
        assert isinstance(errors.errors[0], OperandError)

    def test_statement_before_section(self, make_source):
        """Source must begin with START or CSECT."""
        with pytest.raises(AssemblySyntaxError, match="before any control section"):
            parse_source(make_source(("", "LDA", "#3"), header()))

    def test_resolve_section_directly(self, catalog, errors, make_source):
        """resolve_section() runs one section on its own."""
        sections = parse_source(make_source(header(), ("", "RESW", "1")))
        Pass1Resolver(catalog, errors).resolve_section(sections[0])
        assert sections[0].length == 3
