#!/usr/bin/env python3
"""
Executable container parsing for ELF, Mach-O and PE files.

This package detects an executable's container format and extracts the
Go runtime tables the provenance resolver works from.
"""

from .base import ExecutableContainer
from .elf import ElfContainer
from .macho import MachOContainer
from .pe import PeContainer, find_symbol_range
from .sniffer import detect, detect_format
from .extractor import extract

__all__ = [
    'ExecutableContainer', 'ElfContainer', 'MachOContainer', 'PeContainer',
    'find_symbol_range', 'detect', 'detect_format', 'extract',
]
