#!/usr/bin/env python3
"""
Mach-O variant of the executable container interface.

Parsing is delegated to LIEF. Universal (fat) files are opened through
their first slice, which is enough to find a Go binary's own module.
"""

import logging
from typing import List, Optional, Tuple

import lief

from ..exceptions import MissingSectionError
from ..models import ContainerFormat
from .base import BUILDINFO_SEARCH_LIMIT, ExecutableContainer

logger = logging.getLogger(__name__)

# LIEF logs parse problems to stderr itself; failures surface as exceptions here
lief.logging.disable()


class MachOParseError(Exception):
    """Exception raised when Mach-O parsing fails"""
    pass


def parse_macho(data: bytes):
    """Parse a Mach-O image and return its first (or only) slice.

    Raises:
        MachOParseError: If the data is not a complete Mach-O file
    """
    raw = list(data)
    if not lief.is_macho(raw):
        raise MachOParseError(f"invalid Mach-O magic {data[:4].hex()}")

    parsed = lief.MachO.parse(raw)
    if parsed is None:
        raise MachOParseError("LIEF could not parse the Mach-O file")
    binary = parsed.at(0) if isinstance(parsed, lief.MachO.FatBinary) else parsed
    if binary is None:
        raise MachOParseError("universal Mach-O file has no slices")

    if len(binary.commands) != binary.header.nb_cmds:
        raise MachOParseError(
            f"truncated load commands ({len(binary.commands)} of {binary.header.nb_cmds})")
    return binary


class MachOContainer(ExecutableContainer):
    """Mach-O executable backed by LIEF"""

    format = ContainerFormat.MACHO

    TEXT_SECTION = '__text'
    PCLNTAB_SECTION = '__gopclntab'
    SYMTAB_SECTION = '__gosymtab'
    BUILDINFO_SECTIONS = ('__go_buildinfo', '__data')

    def __init__(self, stream, path=None):
        super().__init__(stream, path)
        stream.seek(0)
        self.binary = parse_macho(stream.read())
        self.sections = list(self.binary.sections)

    def section(self, name: str):
        """Return the first section with the given name."""
        for section in self.sections:
            if section.name == name:
                return section
        return None

    def text_start(self) -> int:
        text = self.section(self.TEXT_SECTION)
        if text is None or text.virtual_address == 0:
            raise MissingSectionError(f"no usable {self.TEXT_SECTION} section")
        return text.virtual_address

    def line_table(self) -> bytes:
        section = self.section(self.PCLNTAB_SECTION)
        if section is None:
            raise MissingSectionError(f"no {self.PCLNTAB_SECTION} section")
        return bytes(section.content)

    def symbol_table(self) -> Optional[bytes]:
        section = self.section(self.SYMTAB_SECTION)
        if section is None:
            logger.debug("%s: no %s section", self.path, self.SYMTAB_SECTION)
            return None
        return bytes(section.content)

    def read_at(self, address: int, size: int) -> Optional[bytes]:
        for section in self.sections:
            start = section.virtual_address
            if start <= address and address + size <= start + section.size:
                offset = address - start
                chunk = bytes(section.content)[offset:offset + size]
                return chunk if len(chunk) == size else None
        return None

    def buildinfo_candidates(self) -> List[Tuple[int, bytes]]:
        for name in self.BUILDINFO_SECTIONS:
            section = self.section(name)
            if section is not None:
                return [(section.virtual_address, bytes(section.content)[:BUILDINFO_SEARCH_LIMIT])]
        return []
