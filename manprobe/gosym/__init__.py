#!/usr/bin/env python3
"""
Decoders for the symbol and line tables the Go toolchain embeds in executables.
"""

from .pclntab import Func, LineTable, PclnVersion
from .symtab import SymbolIndex, walk_symtab
from .table import Table, decode

__all__ = ['Func', 'LineTable', 'PclnVersion', 'SymbolIndex', 'walk_symtab', 'Table', 'decode']
