#!/usr/bin/env python3
"""
Common interface for executable container formats.

Each supported format (ELF, Mach-O, PE) is a variant of ExecutableContainer
that knows how to find the code start address and the Go runtime tables in
its own layout. Everything downstream of the extractor only talks to this
interface.
"""

from abc import ABC, abstractmethod
from typing import BinaryIO, List, Optional, Tuple

from ..models import ContainerFormat

# Go's build-info record is located within the first 64KB of the data segment
BUILDINFO_SEARCH_LIMIT = 64 * 1024


class ExecutableContainer(ABC):
    """An opened executable of one specific container format"""

    format: ContainerFormat = None

    def __init__(self, stream: BinaryIO, path: Optional[str] = None):
        """Parse the container header from an open binary stream.

        Args:
            stream: Seekable binary stream positioned anywhere; owned by the caller
            path: File path, used only for diagnostics

        Raises:
            Exception: Any parse error from the format backend when the
                stream does not hold this container format
        """
        self.stream = stream
        self.path = path

    @abstractmethod
    def text_start(self) -> int:
        """Return the virtual address where the code section starts.

        Raises:
            MissingSectionError: If the code section is absent or unmapped
        """

    @abstractmethod
    def line_table(self) -> bytes:
        """Return the raw Go pclntab bytes.

        Raises:
            MissingSectionError: If the table section is absent (ELF, Mach-O)
            MissingSymbolPairError: If the boundary symbols are unusable (PE)
        """

    @abstractmethod
    def symbol_table(self) -> Optional[bytes]:
        """Return the raw legacy Go symbol table, or None when absent."""

    @abstractmethod
    def read_at(self, address: int, size: int) -> Optional[bytes]:
        """Read size bytes mapped at a virtual address, or None if unmapped."""

    @abstractmethod
    def buildinfo_candidates(self) -> List[Tuple[int, bytes]]:
        """Return (address, data) regions that may hold the build-info record."""
