#!/usr/bin/env python3
"""
Binary provenance resolution.

resolve() runs the whole pipeline for one executable: format detection,
build-info lookup and, for binaries without build info, table extraction,
decoding, entry point location and path normalization.
"""

import struct
import logging
import posixpath
from pathlib import Path
from typing import Optional, Union

import pefile
from elftools.common.exceptions import ELFError

from .binary import detect, extract
from .binary.base import ExecutableContainer
from .buildinfo import read_buildinfo
from .exceptions import CorruptTableError, FileOpenError, ProvenanceError, SymbolNotFoundError
from .gosym import decode
from .locator import DEFAULT_ENTRY, locate
from .models import ResolvedProvenance
from .paths import normalize, split_version

logger = logging.getLogger(__name__)

# Package path Go records for binaries built from a list of .go files
COMMAND_LINE_PACKAGE = 'command-line-arguments'


def _from_buildinfo(container: ExecutableContainer) -> Optional[ResolvedProvenance]:
    info = read_buildinfo(container)
    if info is None:
        return None

    module_path = info.path or info.module_path
    if not module_path or module_path == COMMAND_LINE_PACKAGE:
        logger.debug("%s: build info has no usable package path", container.path)
        return None

    return ResolvedProvenance(
        module_path=module_path,
        version=info.module_version,
        format=container.format,
        source='buildinfo',
    )


def _from_symtab(container: ExecutableContainer, entry_name: str) -> ResolvedProvenance:
    bundle = extract(container)
    table = decode(bundle)
    source_file, _ = locate(table, entry_name)

    source_dir = posixpath.dirname(source_file.replace('\\', '/'))
    module_path, version = split_version(normalize(source_dir))
    return ResolvedProvenance(
        module_path=module_path,
        version=version,
        format=container.format,
        source='symtab',
    )


def resolve(path: Union[str, Path], entry_name: str = DEFAULT_ENTRY) -> ResolvedProvenance:
    """Determine the module path and version a Go executable was built from.

    Build-info records are preferred; the line table is only consulted for
    binaries built before module-aware toolchains.

    Args:
        path: Path to the executable
        entry_name: Entry function used for line table lookup

    Returns:
        ResolvedProvenance with a non-empty module path

    Raises:
        FileOpenError: If the file cannot be opened
        UnrecognizedFormatError: If the file is not ELF, Mach-O or PE
        MissingSectionError: If required sections are absent
        MissingSymbolPairError: If PE table boundary symbols are unusable
        CorruptTableError: If Go tables are malformed
        SymbolNotFoundError: If the entry function cannot be mapped to a file
    """
    path = str(path)
    try:
        stream = open(path, 'rb')
    except OSError as e:
        raise FileOpenError(f"cannot open file: {e.strerror or e}", path=path) from e

    with stream:
        container = detect(stream, path)
        try:
            provenance = _from_buildinfo(container)
            if provenance is None:
                provenance = _from_symtab(container, entry_name)
        except ProvenanceError as e:
            e.with_context(path, container.format)
            logger.debug("Resolution failed: %s", e)
            raise
        except (ELFError, pefile.PEFormatError, struct.error, IndexError, OSError) as e:
            raise CorruptTableError(
                f"malformed executable: {e}", path=path, fmt=container.format) from e

    if not provenance.module_path:
        raise SymbolNotFoundError(
            f"{entry_name} source path does not name a module",
            path=path, fmt=provenance.format)

    logger.debug("%s: %s %s (from %s)", path, provenance.module_path,
                 provenance.version or '(no version)', provenance.source)
    return provenance
