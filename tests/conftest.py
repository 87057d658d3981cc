"""
sicxe-asm Test Configuration
============================

Shared fixtures for the assembler test suite.

It provides:
- The COPY example program (three control sections) and its catalog file
- A builder for small tab-delimited programs
- Helpers that run pass 1 / pass 2 on parsed sections
- A record builder for hand-made statement lists
"""

from pathlib import Path

import pytest

from sicxe_asm.assembler import (
    Pass1Resolver,
    Pass2Generator,
    RecordAssembler,
    Section,
    parse_source,
)
from sicxe_asm.cpu import InstructionCatalog
from sicxe_asm.errors import ErrorCollector


EXAMPLES_DIR = Path(__file__).parent.parent / "examples"


# ═══════════════════════════════════════════════════════════════════════════════
# SOURCE FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture(scope="session")
def copy_source_path() -> Path:
    """Fixture: path of the COPY example program."""
    return EXAMPLES_DIR / "copy.asm"


@pytest.fixture(scope="session")
def copy_source(copy_source_path) -> str:
    """Fixture: text of the COPY example program."""
    return copy_source_path.read_text()


@pytest.fixture(scope="session")
def catalog_path() -> Path:
    """Fixture: path of the example instruction catalog file."""
    return EXAMPLES_DIR / "inst.data"


@pytest.fixture
def make_source():
    """
    Fixture: build tab-delimited source from rows of fields.

    Usage:
        source = make_source(("PROG", "START", "0"), ("", "LDA", "#3"))
    """
    def build(*rows: tuple[str, ...]) -> str:
        return "".join("\t".join(row) + "\n" for row in rows)
    return build


# ═══════════════════════════════════════════════════════════════════════════════
# PIPELINE FIXTURES
# ═══════════════════════════════════════════════════════════════════════════════


@pytest.fixture
def catalog() -> InstructionCatalog:
    """Fixture: the built-in SIC/XE catalog."""
    return InstructionCatalog.default()


@pytest.fixture
def errors() -> ErrorCollector:
    """Fixture: a fresh error collector."""
    return ErrorCollector()


@pytest.fixture
def run_pass1(catalog, errors):
    """
    Fixture: parse source and run pass 1.

    Returns a function source -> list[Section].
    """
    def run(source: str):
        sections = parse_source(source)
        Pass1Resolver(catalog, errors).resolve(sections)
        return sections
    return run


@pytest.fixture
def run_passes(catalog, errors, run_pass1):
    """
    Fixture: parse source and run both passes.

    Returns a function source -> list[Section].
    """
    def run(source: str):
        sections = run_pass1(source)
        Pass2Generator(catalog, errors).generate(sections)
        return sections
    return run


@pytest.fixture
def statement_records():
    """
    Fixture: object records for a hand-made list of statements.

    The statements are wrapped in an unnamed section, so no parsing or
    passes are involved. Returns a function statements -> list[str].
    """
    def build(statements):
        section = Section(name="", statements=list(statements))
        return RecordAssembler([section]).section_records(section)
    return build
