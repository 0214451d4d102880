#!/usr/bin/env python3
"""
Exception types raised while resolving a binary's source provenance.

Every resolver failure derives from ProvenanceError and carries the path of
the binary and, once known, the container format that was being processed.
"""

from typing import Dict, Optional


class ProvenanceError(Exception):
    """Base class for failures of a single resolution call"""

    def __init__(self, message: str, path: Optional[str] = None, fmt=None):
        super().__init__(message)
        self.message = message
        self.path = path
        self.format = fmt

    def with_context(self, path: Optional[str] = None, fmt=None) -> 'ProvenanceError':
        """Attach file path and format if they are not already set."""
        if self.path is None and path is not None:
            self.path = str(path)
        if self.format is None and fmt is not None:
            self.format = fmt
        return self

    def __str__(self) -> str:
        parts = []
        if self.path:
            parts.append(self.path)
        if self.format is not None:
            parts.append(getattr(self.format, 'value', str(self.format)))
        if parts:
            return f"{': '.join(parts)}: {self.message}"
        return self.message


class FileOpenError(ProvenanceError):
    """Exception raised when the executable cannot be opened or read"""


class UnrecognizedFormatError(ProvenanceError):
    """Exception raised when no supported container format accepts the file"""

    def __init__(self, message: str, path: Optional[str] = None,
                 errors: Optional[Dict[str, str]] = None):
        super().__init__(message, path)
        self.errors = errors or {}

    def __str__(self) -> str:
        base = super().__str__()
        if not self.errors:
            return base
        details = '; '.join(f"{name}: {err}" for name, err in self.errors.items())
        return f"{base} ({details})"


class MissingSectionError(ProvenanceError):
    """Exception raised when a required section is absent"""


class MissingSymbolPairError(ProvenanceError):
    """Exception raised when a PE boundary symbol pair cannot be used"""


class CorruptTableError(ProvenanceError):
    """Exception raised when Go runtime tables are structurally invalid"""


class SymbolNotFoundError(ProvenanceError):
    """Exception raised when the entry function is not in the decoded table"""


class ReadmeNotFoundError(Exception):
    """Exception raised when no README could be found locally or remotely"""
    pass


class ExecutableNotFoundError(Exception):
    """Exception raised when a command name cannot be mapped to a file"""
    pass
