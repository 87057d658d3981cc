# =============================================================================
# test_errors.py - Error Hierarchy Tests
# =============================================================================
# Tests for error message formatting and the error collector.
# =============================================================================

import pytest

from sicxe_asm.errors import (
    AddressingModeError,
    AssemblerError,
    AssemblyFailedError,
    CatalogError,
    ErrorCollector,
    OperandError,
    SicxeError,
    SourceLocation,
    TooManyErrors,
    UndefinedSymbolError,
    UnknownInstructionError,
)


class TestMessages:
    """Test error message formatting."""

    def test_location_and_context(self):
        """Errors show location, source line, caret and hint."""
        error = UnknownInstructionError(
            "STDX", SourceLocation("copy.asm", 4), "FIRST\tSTDX\tRETADR",
        )
        assert str(error).splitlines() == [
            "copy.asm:4:1: error: unknown operator 'STDX'",
            "    FIRST\tSTDX\tRETADR",
            "    ^",
            "hint: not a SIC/XE mnemonic or assembler directive",
        ]

    def test_without_location(self):
        """Errors without a location have a plain prefix."""
        assert str(OperandError("bad operand")) == "error: bad operand"

    def test_addressing_mode_error(self):
        """The target address is part of the message."""
        error = AddressingModeError("LDA", 0x1FA3)
        assert "'LDA' target 001FA3" in str(error)
        assert error.target == 0x1FA3

    def test_undefined_symbol(self):
        """The symbol name is kept on the exception."""
        error = UndefinedSymbolError("MISSING")
        assert error.symbol == "MISSING"
        assert "undefined symbol 'MISSING'" in str(error)

    def test_catalog_error_line(self):
        """Catalog errors name the catalog line."""
        assert str(CatalogError("bad", line=3)) == "line 3: bad"

    @pytest.mark.parametrize("error", [
        CatalogError("x"),
        OperandError("x"),
        AssemblyFailedError([], ""),
        TooManyErrors(),
    ])
    def test_hierarchy(self, error):
        """Every error derives from SicxeError."""
        assert isinstance(error, SicxeError)


class TestErrorCollector:
    """Test multiple-error collection."""

    def test_collect_and_report(self):
        """Errors and warnings are reported together."""
        collector = ErrorCollector()
        collector.add(OperandError("first"))
        collector.add(OperandError("second"))
        collector.add_warning("symbol 'DUP' redefined")

        report = collector.report()
        assert collector.has_errors()
        assert collector.error_count() == 2
        assert collector.warning_count() == 1
        assert "error: first" in report
        assert "Warnings:\n  symbol 'DUP' redefined" in report
        assert report.endswith("2 errors, 1 warning")

    def test_limit(self):
        """Reaching max_errors raises TooManyErrors."""
        collector = ErrorCollector(max_errors=2)
        collector.add(OperandError("one"))
        with pytest.raises(TooManyErrors):
            collector.add(OperandError("two"))

    def test_clear(self):
        """clear() empties errors and warnings."""
        collector = ErrorCollector()
        collector.add(OperandError("x"))
        collector.add_warning("w")
        collector.clear()
        assert not collector.has_errors()
        assert collector.warning_count() == 0

    def test_failed_error_carries_errors(self):
        """AssemblyFailedError keeps the individual errors."""
        errors = [OperandError("a"), OperandError("b")]
        failed = AssemblyFailedError(errors, "report text")
        assert failed.errors == errors
        assert isinstance(failed, AssemblerError)
        assert str(failed).startswith("error: Assembly failed with 2 errors:")
