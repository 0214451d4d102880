#!/usr/bin/env python3
"""
Entry point location.

Maps the program's entry function to the source file the compiler recorded
for it. Used when an executable carries no build-info record.
"""

import logging
from typing import Tuple

from .exceptions import SymbolNotFoundError
from .gosym.table import Table

logger = logging.getLogger(__name__)

DEFAULT_ENTRY = 'main.main'


def locate(table: Table, entry_name: str = DEFAULT_ENTRY) -> Tuple[str, int]:
    """Find the source file of the entry function.

    Args:
        table: Decoded Go tables
        entry_name: Fully qualified name of the entry function

    Returns:
        Tuple of (source file path, entry address)

    Raises:
        SymbolNotFoundError: If the function is missing or has no file
    """
    func = table.lookup_func(entry_name)
    if func is None:
        raise SymbolNotFoundError(f"no {entry_name} function in line table")

    source_path, line = table.pc_to_line(func.entry)
    if not source_path:
        raise SymbolNotFoundError(
            f"{entry_name} at 0x{func.entry:x} has no source file")

    logger.debug("%s at 0x%x -> %s:%d", entry_name, func.entry, source_path, line)
    return source_path, func.entry
