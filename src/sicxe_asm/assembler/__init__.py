"""
SIC/XE Two-Pass Assembler
=========================

This package turns SIC/XE assembly source into a linkable object program
made of header, definition, reference, text, modification and end records.

Main Components
---------------
- **Assembler**: Main assembler class that orchestrates the assembly process
- **lexer**: Splits tab-delimited source lines into fields
- **parser**: Builds Statement objects grouped into control sections
- **Pass1Resolver**: Addresses, symbol tables and literal pools
- **AddressingModeEncoder**: nixbpe flags and displacements
- **Pass2Generator**: Object code and linkage records
- **RecordAssembler**: Object program and listing text

Assembly Process
----------------
1. **Parsing**: every START or CSECT line opens a control section; each
   section gets its own symbol table, literal table and location counter.

2. **Pass 1 (Pass1Resolver)**:
   - Assign an address to every statement
   - Define labels and evaluate EQU
   - Place literals at LTORG and END

3. **Pass 2 (Pass2Generator)**:
   - Encode instructions (formats 1-4)
   - Emit H, D, R records and M records for external references
   - Append the E record

Example Usage
-------------
>>> from sicxe_asm.assembler import Assembler
>>> asm = Assembler()
>>> program = asm.assemble_file("copy.asm")
>>> asm.write_object("copy.obj")
>>> asm.write_symbols("copy.sym")
>>> asm.write_literals("copy.lit")
"""

from sicxe_asm.assembler.assembler import Assembler, assemble, assemble_file
from sicxe_asm.assembler.lexer import SourceLine, tokenize_line
from sicxe_asm.assembler.parser import RecordKind, Section, Statement, parse_source
from sicxe_asm.assembler.tables import Literal, LiteralKind, LiteralTable, Symbol, SymbolTable
from sicxe_asm.assembler.pass1 import Pass1Resolver
from sicxe_asm.assembler.addressing import AddressingModeEncoder, Encoding
from sicxe_asm.assembler.pass2 import Pass2Generator, encode_instruction
from sicxe_asm.assembler.records import RecordAssembler, MAX_TEXT_BYTES

__all__ = [
    "Assembler",
    "assemble",
    "assemble_file",
    "SourceLine",
    "tokenize_line",
    "RecordKind",
    "Section",
    "Statement",
    "parse_source",
    "Literal",
    "LiteralKind",
    "LiteralTable",
    "Symbol",
    "SymbolTable",
    "Pass1Resolver",
    "AddressingModeEncoder",
    "Encoding",
    "Pass2Generator",
    "encode_instruction",
    "RecordAssembler",
    "MAX_TEXT_BYTES",
]
