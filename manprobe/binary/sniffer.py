#!/usr/bin/env python3
"""
Container format detection.

Each supported format parser is tried in a fixed order and the first one
that accepts the file header wins.
"""

import logging
from typing import BinaryIO, Dict, Optional

from ..exceptions import UnrecognizedFormatError
from ..models import ContainerFormat
from .base import ExecutableContainer
from .elf import ElfContainer
from .macho import MachOContainer
from .pe import PeContainer

logger = logging.getLogger(__name__)

# Ordered by how common each platform is, not by precedence
CONTAINER_TYPES = (ElfContainer, MachOContainer, PeContainer)


def detect(stream: BinaryIO, path: Optional[str] = None) -> ExecutableContainer:
    """Open the stream as the first container format that parses.

    Args:
        stream: Seekable binary stream of the executable
        path: File path for diagnostics

    Returns:
        The parsed container

    Raises:
        UnrecognizedFormatError: If no format accepts the file; the error's
            ``errors`` mapping holds each parser's failure message
    """
    errors: Dict[str, str] = {}
    for container_type in CONTAINER_TYPES:
        stream.seek(0)
        try:
            container = container_type(stream, path)
        except Exception as e:  # pylint: disable=broad-exception-caught
            errors[container_type.format.value] = str(e) or type(e).__name__
            logger.debug("%s: not %s: %s", path, container_type.format.value, e)
            continue
        logger.debug("%s: detected %s", path, container_type.format.value)
        return container

    raise UnrecognizedFormatError(
        "not an ELF, Mach-O or PE executable", path=path, errors=errors)


def detect_format(stream: BinaryIO, path: Optional[str] = None) -> ContainerFormat:
    """Return only the detected container format."""
    return detect(stream, path).format
