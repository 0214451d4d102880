#!/usr/bin/env python3
"""
Decoder for the Go program counter / line number table (pclntab).

The pclntab is emitted by the Go linker into every Go executable. It maps
code addresses to function names, source files and line numbers. Four
layouts are understood, identified by the table's magic number:

* Go 1.2 - 1.15   (0xfffffffb): offsets relative to the table start,
  function entries stored as absolute pointers
* Go 1.16 - 1.17  (0xfffffffa): header points at separate sub-tables
  (function names, compilation units, files, pc-value programs)
* Go 1.18 - 1.19  (0xfffffff0): function entries become 32-bit offsets
  from the start of the text section
* Go 1.20+        (0xfffffff1): same layout as 1.18

Tables from Go 1.1 and earlier use an entirely different encoding and are
reported as unsupported.
"""

import bisect
import struct
import logging
from dataclasses import dataclass
from enum import IntEnum
from typing import Dict, List, Optional

from ..exceptions import CorruptTableError

logger = logging.getLogger(__name__)


class PclnVersion(IntEnum):
    """pclntab layout revisions"""
    GO12 = 12
    GO116 = 116
    GO118 = 118
    GO120 = 120


MAGIC_VERSIONS: Dict[int, PclnVersion] = {
    0xfffffffb: PclnVersion.GO12,
    0xfffffffa: PclnVersion.GO116,
    0xfffffff0: PclnVersion.GO118,
    0xfffffff1: PclnVersion.GO120,
}

# Header word indexes of the sub-table offsets, per layout:
# (funcnametab, cutab, filetab, pctab, funcdata)
HEADER_WORDS = {
    PclnVersion.GO116: (2, 3, 4, 5, 6),
    PclnVersion.GO118: (3, 4, 5, 6, 7),
    PclnVersion.GO120: (3, 4, 5, 6, 7),
}

NO_FILE = 0xffffffff


@dataclass
class Func:
    """A function described by the line table"""
    name: str
    entry: int
    end: int


class LineTable:
    """Random access view over a pclntab blob"""

    def __init__(self, data: bytes, text_start: int):
        """Parse the table header.

        Args:
            data: Raw pclntab bytes
            text_start: Virtual address of the text section, used to
                relocate entry offsets in Go 1.18+ tables

        Raises:
            CorruptTableError: If the header is invalid or truncated
        """
        self.data = bytes(data)
        self.text_start = text_start
        self._entries: Optional[List[int]] = None
        self._parse_header()

    def _parse_header(self) -> None:
        data = self.data
        if (len(data) < 16 or data[4] != 0 or data[5] != 0
                or data[6] not in (1, 2, 4) or data[7] not in (4, 8)):
            raise CorruptTableError("invalid pclntab header")

        for order in ('<', '>'):
            magic = struct.unpack_from(order + 'I', data)[0]
            if magic in MAGIC_VERSIONS:
                self.order = order
                self.version = MAGIC_VERSIONS[magic]
                break
        else:
            raise CorruptTableError(
                f"unsupported pclntab magic 0x{struct.unpack_from('<I', data)[0]:08x}")

        self.quantum = data[6]
        self.ptrsize = data[7]
        self.field_size = 4 if self.version >= PclnVersion.GO118 else self.ptrsize

        if self.version == PclnVersion.GO12:
            self.nfunctab = self._uintptr(8)
            self.funcnametab = 0
            self.funcdata = 0
            self.pctab = 0
            self.functab = 8 + self.ptrsize
            functab_size = (self.nfunctab * 2 + 1) * self.field_size
            self.filetab = self._u32(self.functab + functab_size)
            self.nfiletab = self._u32(self.filetab)
            self.cutab = 0
        else:
            self.nfunctab = self._header_word(0)
            self.nfiletab = self._header_word(1)
            names, cus, files, pcs, funcdata = HEADER_WORDS[self.version]
            self.funcnametab = self._header_word(names)
            self.cutab = self._header_word(cus)
            self.filetab = self._header_word(files)
            self.pctab = self._header_word(pcs)
            self.funcdata = self._header_word(funcdata)
            self.functab = self.funcdata
            functab_size = (self.nfunctab * 2 + 1) * self.field_size

        for name in ('funcnametab', 'cutab', 'filetab', 'pctab', 'funcdata'):
            if getattr(self, name) > len(data):
                raise CorruptTableError(f"pclntab {name} offset out of range")
        if self.functab + functab_size > len(data):
            raise CorruptTableError(
                f"pclntab function table truncated ({self.nfunctab} functions)")

        logger.debug("pclntab: Go %s layout, %d functions, quantum %d, ptrsize %d",
                     self.version.name, self.nfunctab, self.quantum, self.ptrsize)

    # Raw readers

    def _u32(self, offset: int) -> int:
        if offset < 0 or offset + 4 > len(self.data):
            raise CorruptTableError(f"pclntab read at 0x{offset:x} out of range")
        return struct.unpack_from(self.order + 'I', self.data, offset)[0]

    def _uintptr(self, offset: int) -> int:
        if self.ptrsize == 4:
            return self._u32(offset)
        if offset < 0 or offset + 8 > len(self.data):
            raise CorruptTableError(f"pclntab read at 0x{offset:x} out of range")
        return struct.unpack_from(self.order + 'Q', self.data, offset)[0]

    def _header_word(self, word: int) -> int:
        return self._uintptr(8 + word * self.ptrsize)

    def _field(self, offset: int) -> int:
        return self._u32(offset) if self.field_size == 4 else self._uintptr(offset)

    def _cstring(self, offset: int) -> str:
        if offset < 0 or offset >= len(self.data):
            raise CorruptTableError(f"pclntab string at 0x{offset:x} out of range")
        end = self.data.find(b'\x00', offset)
        if end < 0:
            end = len(self.data)
        return self.data[offset:end].decode('utf-8', errors='replace')

    def _varint(self, offset: int):
        value = 0
        shift = 0
        while True:
            if offset >= len(self.data) or shift > 28:
                raise CorruptTableError("truncated pc-value program")
            byte = self.data[offset]
            offset += 1
            value |= (byte & 0x7f) << shift
            if not byte & 0x80:
                return value & 0xffffffff, offset
            shift += 7

    # Function table

    def _func_pc(self, index: int) -> int:
        pc = self._field(self.functab + 2 * index * self.field_size)
        if self.version >= PclnVersion.GO118:
            pc += self.text_start
        return pc

    def _func_offset(self, index: int) -> int:
        """Return the offset of the index'th _func record within the table."""
        return self.funcdata + self._field(self.functab + (2 * index + 1) * self.field_size)

    def _func_field(self, func_offset: int, n: int) -> int:
        """Return the n'th 32-bit field (n >= 1) of a _func record."""
        first = 4 if self.version >= PclnVersion.GO118 else self.ptrsize
        return self._u32(func_offset + first + (n - 1) * 4)

    def _func_entry(self, func_offset: int) -> int:
        if self.version >= PclnVersion.GO118:
            return self._u32(func_offset) + self.text_start
        return self._uintptr(func_offset)

    def _entry_pcs(self) -> List[int]:
        if self._entries is None:
            self._entries = [self._func_pc(i) for i in range(self.nfunctab + 1)]
        return self._entries

    def funcs(self) -> List[Func]:
        """Return every function in the table in address order."""
        entries = self._entry_pcs()
        funcs = []
        for i in range(self.nfunctab):
            name_offset = self._func_field(self._func_offset(i), 1)
            funcs.append(Func(
                name=self._cstring(self.funcnametab + name_offset),
                entry=entries[i],
                end=entries[i + 1],
            ))
        return funcs

    def _find_func(self, pc: int) -> Optional[int]:
        """Return the _func record offset of the function containing pc."""
        entries = self._entry_pcs()
        if not entries or pc < entries[0] or pc >= entries[-1]:
            return None
        index = bisect.bisect_right(entries, pc) - 1
        return self._func_offset(index)

    def _pcvalue(self, program: int, entry: int, target: int) -> int:
        """Run a pc-value program and return its value at the target pc."""
        if program == 0:
            return -1
        offset = self.pctab + program
        value = -1
        pc = entry
        while True:
            first = pc == entry
            uvdelta, offset = self._varint(offset)
            if uvdelta == 0 and not first:
                return -1
            if uvdelta & 1:
                vdelta = -((uvdelta >> 1) + 1)
            else:
                vdelta = uvdelta >> 1
            pcdelta, offset = self._varint(offset)
            pc += pcdelta * self.quantum
            value += vdelta
            if target < pc:
                return value

    # Queries

    def pc_to_file(self, pc: int) -> str:
        """Return the source file for pc, or an empty string if unknown."""
        func = self._find_func(pc)
        if func is None:
            return ""
        fno = self._pcvalue(self._func_field(func, 5), self._func_entry(func), pc)

        if self.version == PclnVersion.GO12:
            if fno <= 0 or fno >= self.nfiletab:
                return ""
            return self._cstring(self._u32(self.filetab + 4 * fno))

        if fno < 0:
            return ""
        cu_offset = self._func_field(func, 8)
        name_offset = self._u32(self.cutab + (cu_offset + fno) * 4)
        if name_offset == NO_FILE:
            return ""
        return self._cstring(self.filetab + name_offset)

    def pc_to_line(self, pc: int) -> int:
        """Return the source line for pc, or -1 if unknown."""
        func = self._find_func(pc)
        if func is None:
            return -1
        return self._pcvalue(self._func_field(func, 6), self._func_entry(func), pc)
