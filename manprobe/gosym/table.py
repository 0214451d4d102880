#!/usr/bin/env python3
"""
Combined view over the pclntab and the legacy symbol table.
"""

import logging
from typing import Dict, Optional, Tuple

from ..exceptions import CorruptTableError
from ..models import SectionBundle
from .pclntab import Func, LineTable
from .symtab import SymbolIndex

logger = logging.getLogger(__name__)


class Table:
    """Decoded Go runtime tables of one executable"""

    def __init__(self, line_table: LineTable, symbols: SymbolIndex):
        self.line_table = line_table
        self.symbols = symbols
        self._funcs_by_name: Optional[Dict[str, Func]] = None

    def _index(self) -> Dict[str, Func]:
        if self._funcs_by_name is None:
            self._funcs_by_name = {}
            for func in self.line_table.funcs():
                self._funcs_by_name.setdefault(func.name, func)
        return self._funcs_by_name

    def lookup_func(self, name: str) -> Optional[Func]:
        """Find a function by name.

        The pclntab's function list is consulted first, then the legacy
        symbol table.
        """
        func = self._index().get(name)
        if func is not None:
            return func

        address = self.symbols.lookup(name)
        if address is not None:
            return Func(name=name, entry=address, end=address)
        return None

    def pc_to_line(self, pc: int) -> Tuple[str, int]:
        """Return (file, line) for a code address; ("", -1) when unknown."""
        return self.line_table.pc_to_file(pc), self.line_table.pc_to_line(pc)


def decode(bundle: SectionBundle) -> Table:
    """Build the lookup structure for a section bundle.

    Raises:
        CorruptTableError: If either table is structurally invalid
    """
    try:
        line_table = LineTable(bundle.pclntab, bundle.text_start)
        symbols = SymbolIndex(bundle.symtab)
    except CorruptTableError as e:
        e.with_context(fmt=bundle.format)
        raise
    return Table(line_table, symbols)
