#!/usr/bin/env python3
"""
Extraction of Go runtime tables from a detected container.
"""

import logging

from ..exceptions import ProvenanceError
from ..models import SectionBundle
from .base import ExecutableContainer

logger = logging.getLogger(__name__)


def extract(container: ExecutableContainer) -> SectionBundle:
    """Pull the code start address and Go tables out of a container.

    Args:
        container: Parsed executable from the format sniffer

    Returns:
        SectionBundle with the raw pclntab and optional symtab

    Raises:
        MissingSectionError: If the code section or line table section is absent
        MissingSymbolPairError: If a PE line table boundary pair is unusable
        CorruptTableError: If section contents cannot be read
    """
    try:
        text_start = container.text_start()
        pclntab = container.line_table()
        symtab = container.symbol_table()
    except ProvenanceError as e:
        e.with_context(container.path, container.format)
        raise

    logger.debug("%s: text at 0x%x, pclntab %d bytes, symtab %s",
                 container.path, text_start, len(pclntab),
                 'absent' if symtab is None else f'{len(symtab)} bytes')

    return SectionBundle(
        format=container.format,
        text_start=text_start,
        pclntab=pclntab,
        symtab=symtab,
    )
