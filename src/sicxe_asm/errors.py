"""
SIC/XE Assembler Error Hierarchy
================================

This module defines the exception hierarchy for the whole package.
All exceptions inherit from SicxeError, allowing callers to catch every
assembler-related error with a single except clause if desired.

Exception Hierarchy
-------------------
SicxeError (base)
├── CatalogError - malformed instruction catalog file
└── AssemblerError (assembler-related)
    ├── AssemblySyntaxError - statement outside a control section, bad line
    ├── UndefinedSymbolError - EXTDEF of a name the section never defines
    ├── UnknownInstructionError - operator is neither a mnemonic nor a directive
    ├── OperandError - malformed numeric or register operand
    ├── AddressingModeError - no addressing mode can reach the target
    ├── AssemblyFailedError - one pass finished with collected errors
    └── TooManyErrors - error limit reached

Error messages follow this format:
    filename:line:column: error: description
        source_line_text
        ^
    hint: suggestion for fixing (when available)
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
# Base Exception Class
# =============================================================================

class SicxeError(Exception):
    """
    Base exception for all errors raised by this package.

        try:
            assembler.assemble_file("copy.asm")
        except SicxeError as e:
            print(f"Error: {e}")
    """
    pass


# =============================================================================
# Source Location Tracking
# =============================================================================

@dataclass(frozen=True)
class SourceLocation:
    """
    A location in source code for error reporting.

    Attributes:
        filename: Name of the source file (or "<input>" for string input)
        line: Line number (1-indexed)
        column: Column number (1-indexed)
    """
    filename: str
    line: int
    column: int = 1

    def __str__(self) -> str:
        """Format as 'filename:line:column' for error messages."""
        return f"{self.filename}:{self.line}:{self.column}"


# =============================================================================
# Catalog Exceptions
# =============================================================================

class CatalogError(SicxeError):
    """
    Invalid instruction catalog entry.

    Raised when a catalog file line does not have the four expected fields
    (mnemonic, format, opcode, operand count) or a field cannot be parsed.
    """

    def __init__(self, message: str, line: Optional[int] = None):
        self.line = line
        if line is not None:
            message = f"line {line}: {message}"
        super().__init__(message)


# =============================================================================
# Assembler Exceptions
# =============================================================================

class AssemblerError(SicxeError):
    """
    Base exception for all assembler-related errors.

    Attributes:
        message: The error description
        location: Where in the source the error occurred (optional)
        hint: A suggestion for fixing the error (optional)
        source_line: The actual source text at the error location (optional)
    """

    def __init__(
        self,
        message: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.message = message
        self.location = location
        self.hint = hint
        self.source_line = source_line
        super().__init__(self._format_message())

    def _format_message(self) -> str:
        """
        Format the error message with location, source context, and hint.

        Example output:
            copy.asm:4:1: error: unknown operator 'STDX'
                FIRST	STDX	RETADR
                ^
            hint: not a SIC/XE mnemonic or assembler directive
        """
        parts = []

        if self.location:
            parts.append(f"{self.location}: error: {self.message}")
        else:
            parts.append(f"error: {self.message}")

        if self.source_line is not None and self.location is not None:
            parts.append(f"    {self.source_line}")
            if self.location.column > 0:
                padding = " " * (4 + self.location.column - 1)
                parts.append(f"{padding}^")

        if self.hint:
            parts.append(f"hint: {self.hint}")

        return "\n".join(parts)


class AssemblySyntaxError(AssemblerError):
    """
    Structural error in the assembly source.

    Examples:
        - A statement appears before the first START/CSECT line
        - A BYTE constant is not of the form X'..' or C'..'
    """
    pass


class UndefinedSymbolError(AssemblerError):
    """
    Reference to a symbol that must be defined locally but is not.

    Ordinary operand references never raise this: an unresolved operand is
    treated as an external reference and produces a modification record.
    It is raised for EXTDEF names, whose addresses must come from the
    section's own symbol table.
    """

    def __init__(
        self,
        symbol: str,
        location: Optional[SourceLocation] = None,
        hint: Optional[str] = None,
        source_line: Optional[str] = None,
    ):
        self.symbol = symbol
        super().__init__(
            f"undefined symbol '{symbol}'",
            location=location,
            hint=hint,
            source_line=source_line,
        )


class UnknownInstructionError(AssemblerError):
    """
    Operator that is neither a catalog mnemonic nor a known directive.

    The statement produces no object code, so silently skipping it would
    shift every address that follows. It is always reported.
    """

    def __init__(
        self,
        operator: str,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.operator = operator
        super().__init__(
            f"unknown operator '{operator}'",
            location=location,
            hint="not a SIC/XE mnemonic or assembler directive",
            source_line=source_line,
        )


class OperandError(AssemblerError):
    """
    Malformed operand.

    Raised where a number or register name is expected but the operand text
    cannot be interpreted as one:
        - RESW/RESB with a non-numeric count
        - immediate operand (#value) that is not a decimal number
        - register operand that is not a SIC/XE register
        - BYTE or literal constant that is empty or not whole bytes
        - WORD value outside 24 bits
    """
    pass


class AddressingModeError(AssemblerError):
    """
    Target cannot be reached with any addressing mode.

    Raised when a target is outside the PC-relative range and the base
    register (set with BASE) does not cover it either.
    """

    def __init__(
        self,
        mnemonic: str,
        target: int,
        location: Optional[SourceLocation] = None,
        source_line: Optional[str] = None,
    ):
        self.mnemonic = mnemonic
        self.target = target
        super().__init__(
            f"'{mnemonic}' target {target:06X} is out of PC-relative and base-relative range",
            location=location,
            hint=f"use extended format (+{mnemonic}) or move the BASE directive",
            source_line=source_line,
        )


class AssemblyFailedError(AssemblerError):
    """
    One assembly pass finished with errors.

    Carries every error collected during the pass so callers can inspect
    them individually; the message is the formatted report.
    """

    def __init__(self, errors: list[AssemblerError], report: str):
        self.errors = list(errors)
        super().__init__(
            f"Assembly failed with {len(self.errors)} errors:\n\n{report}"
        )


# =============================================================================
# Error Collection for Multiple Error Reporting
# =============================================================================

class ErrorCollector:
    """
    Collects multiple errors for batch reporting.

    The assembler uses this to keep processing after a bad statement,
    collecting all errors of a pass before reporting them together.

    Example:
        collector = ErrorCollector(max_errors=100)
        collector.add(UnknownInstructionError("STDX", location))
        if collector.has_errors():
            print(collector.report())
    """

    def __init__(self, max_errors: int = 100):
        """
        Initialize the error collector.

        Args:
            max_errors: Maximum errors to collect before raising TooManyErrors
        """
        self.errors: list[AssemblerError] = []
        self.warnings: list[str] = []
        self.max_errors = max_errors

    def add(self, error: AssemblerError) -> None:
        """
        Add an error to the collection.

        Raises:
            TooManyErrors: If max_errors has been reached
        """
        self.errors.append(error)
        if len(self.errors) >= self.max_errors:
            raise TooManyErrors(f"Too many errors ({self.max_errors}), stopping")

    def add_warning(self, message: str) -> None:
        """Add a warning message."""
        self.warnings.append(message)

    def has_errors(self) -> bool:
        """Return True if any errors have been collected."""
        return len(self.errors) > 0

    def error_count(self) -> int:
        """Return the number of collected errors."""
        return len(self.errors)

    def warning_count(self) -> int:
        """Return the number of collected warnings."""
        return len(self.warnings)

    def report(self) -> str:
        """
        Format all errors and warnings for display.

        Returns:
            Formatted string with all errors and warnings
        """
        lines = []

        for error in self.errors:
            lines.append(str(error))
            lines.append("")

        if self.warnings:
            lines.append("Warnings:")
            for warning in self.warnings:
                lines.append(f"  {warning}")

        error_word = "error" if len(self.errors) == 1 else "errors"
        warning_word = "warning" if len(self.warnings) == 1 else "warnings"
        lines.append(
            f"\n{len(self.errors)} {error_word}, {len(self.warnings)} {warning_word}"
        )

        return "\n".join(lines)

    def clear(self) -> None:
        """Clear all collected errors and warnings."""
        self.errors.clear()
        self.warnings.clear()


class TooManyErrors(AssemblerError):
    """
    Raised when too many errors have been encountered.
    """

    def __init__(self, message: str = "Too many errors"):
        super().__init__(message)
