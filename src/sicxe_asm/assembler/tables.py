"""
Symbol and Literal Tables
=========================

Every control section owns one SymbolTable and one LiteralTable. Both are
insertion-ordered dictionaries: lookups are O(1) and iteration follows
definition order, which is the order the listings are written in.

Literals
--------
A literal is a constant written directly in an operand:

    =C'EOF'   character literal, 3 bytes: 45 4F 46
    =X'05'    hex literal, 1 byte: 05

Literals are registered in pass 1 when first used, but only get an
address at the next pool flush point (LTORG or END).
"""

import string
from dataclasses import dataclass
from enum import Enum
from typing import Iterator, Optional

from sicxe_asm.errors import SourceLocation


# =============================================================================
# Symbol Table
# =============================================================================

@dataclass
class Symbol:
    """
    Symbol table entry.

    Attributes:
        name: Symbol name (unique within its section)
        value: Resolved address or EQU value (may be negative)
        location: Where the symbol was defined
    """
    name: str
    value: int
    location: Optional[SourceLocation] = None


class SymbolTable:
    """
    Ordered name -> Symbol mapping for one section.

    A name is stored at most once. insert() refuses duplicates and
    update() refuses unknown names, so a redefinition always goes through
    an explicit update.
    """

    def __init__(self) -> None:
        self._symbols: dict[str, Symbol] = {}

    def insert(self, name: str, value: int,
               location: Optional[SourceLocation] = None) -> Symbol:
        """
        Add a new symbol.

        Raises:
            KeyError: If the name is already present
        """
        if name in self._symbols:
            raise KeyError(f"symbol '{name}' already defined")
        symbol = Symbol(name, value, location)
        self._symbols[name] = symbol
        return symbol

    def update(self, name: str, value: int) -> Symbol:
        """
        Change the value of an existing symbol.

        Raises:
            KeyError: If the name is not present
        """
        symbol = self._symbols[name]
        symbol.value = value
        return symbol

    def define(self, name: str, value: int,
               location: Optional[SourceLocation] = None) -> bool:
        """
        Insert the symbol, or update it when already present.

        Returns:
            True if an existing definition was overwritten
        """
        if name in self._symbols:
            self.update(name, value)
            return True
        self.insert(name, value, location)
        return False

    def resolve(self, name: str) -> Optional[int]:
        """Return the value bound to name, or None if it is not defined here."""
        symbol = self._symbols.get(name)
        return symbol.value if symbol else None

    def get(self, name: str) -> Optional[Symbol]:
        return self._symbols.get(name)

    def items(self) -> Iterator[tuple[str, int]]:
        """Iterate (name, value) pairs in definition order."""
        for name, symbol in self._symbols.items():
            yield name, symbol.value

    def as_dict(self) -> dict[str, int]:
        return dict(self.items())

    def __contains__(self, name: object) -> bool:
        return name in self._symbols

    def __iter__(self) -> Iterator[Symbol]:
        return iter(self._symbols.values())

    def __len__(self) -> int:
        return len(self._symbols)

    def __repr__(self) -> str:
        return f"SymbolTable({self.as_dict()!r})"


# =============================================================================
# Literal Table
# =============================================================================

class LiteralKind(Enum):
    """Literal type, named after its prefix character."""
    HEX = "X"
    CHAR = "C"


@dataclass
class Literal:
    """
    Literal pool entry.

    Attributes:
        text: Literal content between the quotes (e.g. "EOF" or "05")
        kind: HEX or CHAR
        address: Pool address, None until the pool is flushed
    """
    text: str
    kind: LiteralKind
    address: Optional[int] = None

    @property
    def size(self) -> int:
        """Byte length: two hex digits per byte, one character per byte."""
        if self.kind is LiteralKind.HEX:
            return len(self.text) // 2
        return len(self.text)

    @property
    def value(self) -> int:
        """Numeric value of the literal bytes."""
        return constant_value(self.text, self.kind)

    def to_hex(self) -> str:
        """Format the literal as a zero-padded hex string of its own size."""
        return format_hex(self.value, self.size * 2)

    @property
    def is_placed(self) -> bool:
        return self.address is not None


class LiteralTable:
    """
    Ordered (kind, text) -> Literal mapping for one section.

    The kind is part of the key, so =X'41' and =C'41' are separate literals.

    Literals keep their first-use order. Pending literals (registered but
    not yet placed) are flushed together by place_pending().
    """

    def __init__(self) -> None:
        self._literals: dict[tuple[LiteralKind, str], Literal] = {}

    def register(self, text: str, kind: LiteralKind) -> bool:
        """
        Register a literal without an address.

        Returns:
            True if the literal was new
        """
        key = (kind, text)
        if key in self._literals:
            return False
        self._literals[key] = Literal(text, kind)
        return True

    def pending(self) -> list[Literal]:
        """Literals registered but not yet given an address, in first-use order."""
        return [lit for lit in self._literals.values() if not lit.is_placed]

    def has_pending(self) -> bool:
        return any(not lit.is_placed for lit in self._literals.values())

    def place_pending(self, address: int) -> list[Literal]:
        """
        Assign consecutive addresses to every pending literal.

        Args:
            address: Address of the first literal in the pool

        Returns:
            The literals placed, in the order they were laid out
        """
        placed = self.pending()
        for literal in placed:
            literal.address = address
            address += literal.size
        return placed

    def resolve(self, text: str, kind: LiteralKind) -> Optional[int]:
        """Return the address of a placed literal, or None."""
        literal = self._literals.get((kind, text))
        return literal.address if literal else None

    def get(self, text: str, kind: LiteralKind) -> Optional[Literal]:
        return self._literals.get((kind, text))

    def __contains__(self, key: object) -> bool:
        """Membership by (kind, text) pair."""
        return key in self._literals

    def __iter__(self) -> Iterator[Literal]:
        return iter(self._literals.values())

    def __len__(self) -> int:
        return len(self._literals)


# =============================================================================
# Constant Helpers
# =============================================================================

HEX_DIGITS = frozenset(string.hexdigits)


def parse_literal(operand: str) -> Optional[tuple[str, LiteralKind]]:
    """
    Split literal operand syntax into (text, kind).

    =X'05' -> ("05", HEX), =C'EOF' -> ("EOF", CHAR). Any other prefix
    letter is treated as a character literal.

    Returns:
        (text, kind), or None if the operand is not a literal
    """
    if not operand.startswith("="):
        return None
    body = operand[1:]
    kind = LiteralKind.HEX if body[:1].upper() == "X" else LiteralKind.CHAR
    return strip_quotes(body), kind


def parse_constant(operand: str) -> Optional[tuple[str, LiteralKind]]:
    """
    Split a BYTE constant (X'F1' or C'EOF') into (text, kind).

    Returns:
        (text, kind), or None if the operand is not quoted constant syntax
    """
    if len(operand) < 3 or operand[1] != "'" or not operand.endswith("'"):
        return None
    prefix = operand[0].upper()
    if prefix == "X":
        return operand[2:-1], LiteralKind.HEX
    if prefix == "C":
        return operand[2:-1], LiteralKind.CHAR
    return None


def strip_quotes(text: str) -> str:
    """Remove the type letter and quotes around a constant: X'05' -> 05."""
    if len(text) >= 2 and text[1] == "'":
        text = text[2:]
    return text.rstrip("'")


def constant_value(text: str, kind: LiteralKind) -> int:
    """
    Numeric value of a constant.

    Hex text is read as a base-16 number. Character text packs each
    character's 8-bit code, most significant first.

    Raises:
        ValueError: If hex text is empty, contains a non-hex digit, or has
            an odd number of digits (it would not fill whole bytes)
    """
    if kind is LiteralKind.HEX:
        if not text or any(char not in HEX_DIGITS for char in text):
            raise ValueError(f"'{text}' is not a hex constant")
        if len(text) % 2:
            raise ValueError(f"'{text}' has an odd number of hex digits")
        return int(text, 16)
    value = 0
    for char in text:
        value = (value << 8) | (ord(char) & 0xFF)
    return value


def format_hex(value: int, digits: int) -> str:
    """
    Zero-padded upper-case hex of a fixed width.

    Negative values are written as two's complement of the field width.

    Raises:
        ValueError: If the value does not fit in the field
    """
    if digits <= 0:
        return ""
    bits = digits * 4
    if not -(1 << bits) < value < (1 << bits):
        raise ValueError(f"{value} does not fit in {digits} hex digits")
    if value < 0:
        value &= (1 << bits) - 1
    return f"{value:0{digits}X}"
