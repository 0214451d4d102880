#!/usr/bin/env python3
"""
ELF variant of the executable container interface.

Go's ELF binaries keep their runtime tables in dedicated named sections, so
extraction is a matter of section lookup by name.
"""

import logging
from typing import List, Optional, Tuple

from elftools.elf.elffile import ELFFile
from elftools.common.exceptions import ELFError

from ..exceptions import CorruptTableError, MissingSectionError
from ..models import ContainerFormat
from .base import BUILDINFO_SEARCH_LIMIT, ExecutableContainer

logger = logging.getLogger(__name__)

SHF_WRITE = 0x1
SHF_ALLOC = 0x2


class ElfContainer(ExecutableContainer):
    """ELF executable backed by pyelftools"""

    format = ContainerFormat.ELF

    TEXT_SECTION = '.text'
    PCLNTAB_SECTION = '.gopclntab'
    SYMTAB_SECTION = '.gosymtab'
    BUILDINFO_SECTION = '.go.buildinfo'

    def __init__(self, stream, path=None):
        super().__init__(stream, path)
        self.elffile = ELFFile(stream)

    def _section_data(self, section) -> bytes:
        """Read section contents, translating pyelftools errors."""
        if section['sh_type'] == 'SHT_NOBITS':
            return b''
        try:
            return section.data()
        except (ELFError, IOError, OSError) as e:
            raise CorruptTableError(
                f"cannot read section {section.name}: {e}") from e

    def text_start(self) -> int:
        text = self.elffile.get_section_by_name(self.TEXT_SECTION)
        if text is None or text['sh_addr'] == 0:
            raise MissingSectionError(f"no usable {self.TEXT_SECTION} section")
        return text['sh_addr']

    def line_table(self) -> bytes:
        section = self.elffile.get_section_by_name(self.PCLNTAB_SECTION)
        if section is None:
            raise MissingSectionError(f"no {self.PCLNTAB_SECTION} section")
        return self._section_data(section)

    def symbol_table(self) -> Optional[bytes]:
        section = self.elffile.get_section_by_name(self.SYMTAB_SECTION)
        if section is None:
            logger.debug("%s: no %s section", self.path, self.SYMTAB_SECTION)
            return None
        return self._section_data(section)

    def read_at(self, address: int, size: int) -> Optional[bytes]:
        for section in self.elffile.iter_sections():
            start = section['sh_addr']
            if not (section['sh_flags'] & SHF_ALLOC) or start == 0:
                continue
            if start <= address and address + size <= start + section['sh_size']:
                data = self._section_data(section)
                offset = address - start
                chunk = data[offset:offset + size]
                return chunk if len(chunk) == size else None
        return None

    def buildinfo_candidates(self) -> List[Tuple[int, bytes]]:
        section = self.elffile.get_section_by_name(self.BUILDINFO_SECTION)
        if section is not None:
            return [(section['sh_addr'], self._section_data(section))]

        # Older linkers put the record at the start of the writable data
        for section in self.elffile.iter_sections():
            flags = section['sh_flags']
            if (flags & SHF_ALLOC and flags & SHF_WRITE
                    and section['sh_type'] == 'SHT_PROGBITS'):
                data = self._section_data(section)[:BUILDINFO_SEARCH_LIMIT]
                return [(section['sh_addr'], data)]
        return []
