#!/usr/bin/env python3
"""
Reader for the legacy Go symbol table (.gosymtab).

Go 1.0 and 1.1 linkers wrote a separate symbol table next to the pclntab;
from Go 1.3 on the section is kept but left empty. The index built here is
only a fallback for name lookups the pclntab cannot answer.
"""

import struct
import logging
from dataclasses import dataclass
from typing import Dict, Iterator, Optional

from ..exceptions import CorruptTableError

logger = logging.getLogger(__name__)

BIG_ENDIAN_SYMTAB = b'\xff\xff\xff\xfd\x00\x00\x00'
LITTLE_ENDIAN_SYMTAB = b'\xfd\xff\xff\xff\x00\x00\x00'
OLD_LITTLE_ENDIAN_SYMTAB = b'\xfe\xff\xff\xff\x00\x00'

TEXT_SYMBOL_TYPES = ('T', 't', 'L', 'l')


@dataclass
class Sym:
    """A legacy symbol table entry"""
    name: str
    type: str
    value: int
    gotype: int = 0


def walk_symtab(data: bytes) -> Iterator[Sym]:
    """Yield every entry of a legacy Go symbol table.

    Raises:
        CorruptTableError: If an entry is truncated or malformed
    """
    if not data:
        return

    order = '>'
    new_table = False
    start = 0
    if data.startswith(OLD_LITTLE_ENDIAN_SYMTAB):
        start = 6
        order = '<'
    elif data.startswith(BIG_ENDIAN_SYMTAB):
        new_table = True
    elif data.startswith(LITTLE_ENDIAN_SYMTAB):
        new_table = True
        order = '<'

    ptrsize = 0
    if new_table:
        if len(data) < 8:
            raise CorruptTableError("symtab header truncated")
        ptrsize = data[7]
        if ptrsize not in (4, 8):
            raise CorruptTableError(f"symtab has invalid pointer size {ptrsize}")
        start = 8
    pointer_format = order + ('Q' if ptrsize == 8 else 'I')

    end = len(data)
    p = start
    while end - p >= 4:
        gotype = 0
        if new_table:
            tag = data[p]
            code = tag & 0x3f
            sym_type = chr(code + ord('A')) if code < 26 else chr(code - 26 + ord('a'))
            p += 1
            if tag & 0x40:
                if end - p < ptrsize:
                    raise CorruptTableError("symtab value truncated")
                value = struct.unpack_from(pointer_format, data, p)[0]
                p += ptrsize
            else:
                value = 0
                shift = 0
                while p < end and data[p] & 0x80:
                    value |= (data[p] & 0x7f) << shift
                    shift += 7
                    p += 1
                if p >= end:
                    raise CorruptTableError("symtab value truncated")
                value |= data[p] << shift
                p += 1
            if tag & 0x80:
                if end - p < ptrsize:
                    raise CorruptTableError("symtab Go type truncated")
                gotype = struct.unpack_from(pointer_format, data, p)[0]
                p += ptrsize
        else:
            value = struct.unpack_from(order + 'I', data, p)[0]
            if end - p < 5:
                raise CorruptTableError("symtab entry truncated")
            code = data[p + 4]
            if not code & 0x80:
                raise CorruptTableError(f"bad symbol type 0x{code:02x} at {p + 4}")
            sym_type = chr(code & 0x7f)
            p += 5

        nul = data.find(b'\x00', p)
        if nul < 0:
            length, nnul = end - p, 0
        else:
            length, nnul = nul - p, 1

        # File path symbols hold a sequence of 16-bit components ending in 0x0000
        if sym_type in ('z', 'Z'):
            p += length + nnul
            length = 0
            while length + 2 <= end - p:
                if data[p + length] == 0 and data[p + length + 1] == 0:
                    nnul = 2
                    break
                length += 2

        if end - p < length + nnul:
            raise CorruptTableError("symtab name truncated")
        name = data[p:p + length].decode('utf-8', errors='replace')
        p += length + nnul

        if not new_table:
            if end - p < 4:
                raise CorruptTableError("symtab Go type truncated")
            gotype = struct.unpack_from(order + 'I', data, p)[0]
            p += 4

        yield Sym(name=name, type=sym_type, value=value, gotype=gotype)


class SymbolIndex:
    """Name to address index over the text symbols of a legacy symbol table"""

    def __init__(self, data: Optional[bytes]):
        self._addresses: Dict[str, int] = {}
        for sym in walk_symtab(data or b''):
            if sym.type in TEXT_SYMBOL_TYPES and sym.name not in self._addresses:
                self._addresses[sym.name] = sym.value
        logger.debug("symtab: %d text symbols", len(self._addresses))

    def __len__(self) -> int:
        return len(self._addresses)

    def lookup(self, name: str) -> Optional[int]:
        """Return the address of a text symbol, or None."""
        return self._addresses.get(name)
