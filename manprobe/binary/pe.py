#!/usr/bin/env python3
"""
PE variant of the executable container interface.

Go does not emit dedicated sections for its runtime tables in PE files.
Instead the linker brackets each table with a pair of COFF symbols
(runtime.pclntab / runtime.epclntab, or the unprefixed names used by Go 1.3
and earlier) whose values are offsets into the section that holds the table.
pefile does not decode the COFF symbol table, so the symbols are read
through LIEF.
"""

import logging
from dataclasses import dataclass
from typing import List, Optional, Sequence, Tuple

import lief
import pefile

from ..exceptions import CorruptTableError, MissingSectionError, MissingSymbolPairError
from ..models import ContainerFormat
from .base import BUILDINFO_SEARCH_LIMIT, ExecutableContainer

logger = logging.getLogger(__name__)

IMAGE_SCN_CNT_INITIALIZED_DATA = 0x00000040
IMAGE_SCN_MEM_READ = 0x40000000
IMAGE_SCN_MEM_WRITE = 0x80000000

# Boundary symbol pairs, newest naming first
PCLNTAB_SYMBOLS = (('runtime.pclntab', 'runtime.epclntab'), ('pclntab', 'epclntab'))
SYMTAB_SYMBOLS = (('runtime.symtab', 'runtime.esymtab'), ('symtab', 'esymtab'))


@dataclass
class CoffSymbol:
    """A COFF symbol table record"""
    name: str
    value: int
    section_number: int


def _symbol_name(symbol) -> str:
    name = symbol.name
    return name.decode('utf-8', errors='replace') if isinstance(name, bytes) else str(name)


def _section_number(symbol) -> int:
    # lief.COFF.Symbol (LIEF 0.17+) calls the field section_idx
    number = getattr(symbol, 'section_idx', None)
    return symbol.section_number if number is None else number


def coff_symbols(data: bytes) -> List[CoffSymbol]:
    """Read the COFF symbol table of a PE image.

    Args:
        data: The whole file image

    Returns:
        List of primary symbol records, empty when the image has no table

    Raises:
        CorruptTableError: If LIEF cannot parse the image
    """
    binary = lief.PE.parse(list(data))
    if binary is None:
        raise CorruptTableError("LIEF could not parse the PE file")
    return [
        CoffSymbol(name=_symbol_name(symbol), value=symbol.value,
                   section_number=_section_number(symbol))
        for symbol in binary.symbols
    ]


def _find_symbol(symbols: Sequence[CoffSymbol], name: str, section_count: int) -> CoffSymbol:
    for symbol in symbols:
        if symbol.name != name:
            continue
        if symbol.section_number <= 0:
            raise MissingSymbolPairError(
                f"symbol {name}: invalid section number {symbol.section_number}")
        if symbol.section_number > section_count:
            raise MissingSymbolPairError(
                f"symbol {name}: section number {symbol.section_number} "
                f"is larger than max {section_count}")
        return symbol
    raise MissingSymbolPairError(f"no {name} symbol found")


def find_symbol_range(symbols: Sequence[CoffSymbol], start_name: str, end_name: str,
                      section_count: int) -> Tuple[int, int, int]:
    """Locate the byte range bracketed by a start/end boundary symbol pair.

    Args:
        symbols: Decoded COFF symbols
        start_name: Name of the symbol marking the table start
        end_name: Name of the symbol marking the table end
        section_count: Number of sections in the image

    Returns:
        Tuple of (1-based section number, start offset, end offset)

    Raises:
        MissingSymbolPairError: If either symbol is missing, the two refer to
            different sections, or the range is reversed
    """
    start = _find_symbol(symbols, start_name, section_count)
    end = _find_symbol(symbols, end_name, section_count)
    if start.section_number != end.section_number:
        raise MissingSymbolPairError(
            f"{start_name} and {end_name} symbols must be in the same section")
    if end.value < start.value:
        raise MissingSymbolPairError(
            f"{end_name} (0x{end.value:x}) precedes {start_name} (0x{start.value:x})")
    return start.section_number, start.value, end.value


def find_table_range(symbols: Sequence[CoffSymbol], pairs: Sequence[Tuple[str, str]],
                     section_count: int) -> Tuple[int, int, int]:
    """Try each boundary pair in order and return the first usable range.

    When no pair works, the error for the first (preferred) pair is raised.
    """
    first_error = None
    for start_name, end_name in pairs:
        try:
            return find_symbol_range(symbols, start_name, end_name, section_count)
        except MissingSymbolPairError as e:
            logger.debug("Boundary pair %s/%s unusable: %s", start_name, end_name, e)
            if first_error is None:
                first_error = e
    raise first_error


def _section_name(section) -> str:
    return section.Name.rstrip(b'\x00').decode('utf-8', errors='replace')


class PeContainer(ExecutableContainer):
    """PE executable backed by pefile"""

    format = ContainerFormat.PE

    TEXT_SECTION = '.text'

    def __init__(self, stream, path=None):
        super().__init__(stream, path)
        stream.seek(0)
        self.data = stream.read()
        self.pe = pefile.PE(data=self.data, fast_load=True)

        magic = self.pe.OPTIONAL_HEADER.Magic
        if magic not in (pefile.OPTIONAL_HEADER_MAGIC_PE, pefile.OPTIONAL_HEADER_MAGIC_PE_PLUS):
            raise pefile.PEFormatError(f"unsupported optional header magic 0x{magic:x}")
        self.image_base = self.pe.OPTIONAL_HEADER.ImageBase
        self._symbols = None

    @property
    def symbols(self) -> List[CoffSymbol]:
        """COFF symbols, decoded on first use."""
        if self._symbols is None:
            self._symbols = coff_symbols(self.data)
        return self._symbols

    def section(self, name: str):
        """Return the first pefile section with the given name."""
        for section in self.pe.sections:
            if _section_name(section) == name:
                return section
        return None

    def _load_table(self, pairs: Sequence[Tuple[str, str]]) -> bytes:
        number, start, end = find_table_range(self.symbols, pairs, len(self.pe.sections))
        data = self.pe.sections[number - 1].get_data()
        if end > len(data):
            raise MissingSymbolPairError(
                f"{pairs[0][0]} range 0x{start:x}-0x{end:x} exceeds its section")
        return data[start:end]

    def text_start(self) -> int:
        text = self.section(self.TEXT_SECTION)
        if text is None:
            raise MissingSectionError(f"no {self.TEXT_SECTION} section")
        address = self.image_base + text.VirtualAddress
        if address == 0:
            raise MissingSectionError(f"{self.TEXT_SECTION} section is unmapped")
        return address

    def line_table(self) -> bytes:
        return self._load_table(PCLNTAB_SYMBOLS)

    def symbol_table(self) -> Optional[bytes]:
        try:
            return self._load_table(SYMTAB_SYMBOLS)
        except MissingSymbolPairError as e:
            logger.debug("%s: no symbol table: %s", self.path, e)
            return None

    def read_at(self, address: int, size: int) -> Optional[bytes]:
        rva = address - self.image_base
        for section in self.pe.sections:
            start = section.VirtualAddress
            length = max(section.Misc_VirtualSize, section.SizeOfRawData)
            if start <= rva and rva + size <= start + length:
                offset = rva - start
                chunk = section.get_data()[offset:offset + size]
                return chunk if len(chunk) == size else None
        return None

    def buildinfo_candidates(self) -> List[Tuple[int, bytes]]:
        wanted = IMAGE_SCN_CNT_INITIALIZED_DATA | IMAGE_SCN_MEM_READ | IMAGE_SCN_MEM_WRITE
        for section in self.pe.sections:
            if section.VirtualAddress == 0 or section.SizeOfRawData == 0:
                continue
            if section.Characteristics & wanted == wanted:
                data = section.get_data()[:BUILDINFO_SEARCH_LIMIT]
                return [(self.image_base + section.VirtualAddress, data)]
        return []
