#!/usr/bin/env python3
"""
Data models shared across the provenance resolver and README finder.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional


class ContainerFormat(Enum):
    """Supported executable container formats"""
    ELF = "ELF"
    MACHO = "Mach-O"
    PE = "PE"


@dataclass
class SectionBundle:
    """Raw Go runtime tables pulled out of an executable"""
    format: ContainerFormat
    text_start: int             # Virtual address of the first code byte
    pclntab: bytes              # Program counter / line number table
    symtab: Optional[bytes]     # Legacy symbol table, None when absent


@dataclass(frozen=True)
class BuildInfo:
    """Contents of the build-info record embedded by the Go linker"""
    go_version: str
    path: str                   # Import path of the main package
    module_path: str
    module_version: str


@dataclass(frozen=True)
class ResolvedProvenance:
    """Where a binary's source code lives"""
    module_path: str
    version: str = ""
    format: Optional[ContainerFormat] = None
    source: str = ""            # "buildinfo" or "symtab"


@dataclass(frozen=True)
class Readme:
    """README content and the file or URL it came from"""
    content: bytes
    location: str
