#!/usr/bin/env python3
"""
manprobe - the missing man pages for Go binaries.

Resolves the source module of a compiled Go executable from the metadata
embedded in the binary and retrieves the project's README.
"""

from .exceptions import (
    ProvenanceError,
    FileOpenError,
    UnrecognizedFormatError,
    MissingSectionError,
    MissingSymbolPairError,
    CorruptTableError,
    SymbolNotFoundError,
    ReadmeNotFoundError,
    ExecutableNotFoundError,
)
from .models import BuildInfo, ContainerFormat, Readme, ResolvedProvenance, SectionBundle
from .paths import normalize, split_version
from .readme import find_readme
from .resolver import resolve

__all__ = [
    'resolve', 'find_readme', 'normalize', 'split_version',
    'BuildInfo', 'ContainerFormat', 'Readme', 'ResolvedProvenance', 'SectionBundle',
    'ProvenanceError', 'FileOpenError', 'UnrecognizedFormatError', 'MissingSectionError',
    'MissingSymbolPairError', 'CorruptTableError', 'SymbolNotFoundError',
    'ReadmeNotFoundError', 'ExecutableNotFoundError',
]
