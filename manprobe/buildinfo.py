#!/usr/bin/env python3
"""
Reader for the build-info record Go 1.13+ linkers embed in executables.

The record starts with a 14-byte magic string on a 16-byte boundary near
the start of the writable data. Go 1.18 and later store the version and
module strings inline after the 32-byte header; older toolchains store two
pointers to Go string headers that have to be followed through the
executable's address space.
"""

import struct
import logging
from typing import Optional, Tuple

from .binary.base import ExecutableContainer
from .models import BuildInfo

logger = logging.getLogger(__name__)

BUILDINFO_MAGIC = b'\xff Go buildinf:'
BUILDINFO_ALIGN = 16
BUILDINFO_HEADER_SIZE = 32

FLAG_BIG_ENDIAN = 0x1
FLAG_VERSIONS_INLINE = 0x2

# Sentinels cmd/go wraps around the module info string
MODINFO_SENTINEL_SIZE = 16

DEVEL_VERSION = '(devel)'
MAX_STRING_SIZE = 1 << 20


def find_header(data: bytes) -> Optional[int]:
    """Return the offset of an aligned build-info header in data, or None."""
    start = 0
    while True:
        index = data.find(BUILDINFO_MAGIC, start)
        if index < 0 or len(data) - index < BUILDINFO_HEADER_SIZE:
            return None
        if index % BUILDINFO_ALIGN == 0:
            return index
        start = (index + BUILDINFO_ALIGN - 1) & ~(BUILDINFO_ALIGN - 1)


def _uvarint(data: bytes, offset: int) -> Tuple[int, int]:
    value = 0
    shift = 0
    while offset < len(data) and shift <= 63:
        byte = data[offset]
        offset += 1
        value |= (byte & 0x7f) << shift
        if not byte & 0x80:
            return value, offset
        shift += 7
    raise ValueError("truncated varint")


def _inline_string(data: bytes, offset: int) -> Tuple[bytes, int]:
    length, offset = _uvarint(data, offset)
    if length > MAX_STRING_SIZE or offset + length > len(data):
        raise ValueError("inline string out of range")
    return data[offset:offset + length], offset + length


def _pointer_string(container: ExecutableContainer, address: int, ptrsize: int,
                    order: str) -> bytes:
    header = container.read_at(address, 2 * ptrsize)
    if header is None:
        return b''
    data_address, length = struct.unpack(order + ('II' if ptrsize == 4 else 'QQ'), header)
    if length > MAX_STRING_SIZE:
        return b''
    data = container.read_at(data_address, length)
    return b'' if data is None else data


def decode_record(record: bytes, container: Optional[ExecutableContainer] = None) -> Tuple[str, str]:
    """Decode the Go version and raw module info from a build-info record.

    Args:
        record: Bytes starting at the magic string
        container: Needed to follow pointers in pre-1.18 records

    Returns:
        Tuple of (go_version, modinfo); modinfo has its sentinels removed
        and is empty when the binary was built outside module mode

    Raises:
        ValueError: If the record is malformed
    """
    ptrsize = record[14]
    flags = record[15]

    if flags & FLAG_VERSIONS_INLINE:
        version, offset = _inline_string(record, BUILDINFO_HEADER_SIZE)
        modinfo, _ = _inline_string(record, offset)
    else:
        if ptrsize not in (4, 8):
            raise ValueError(f"invalid pointer size {ptrsize}")
        if container is None:
            raise ValueError("pointer-based record needs the executable")
        order = '>' if flags & FLAG_BIG_ENDIAN else '<'
        pointer_format = 'I' if ptrsize == 4 else 'Q'
        version_address, modinfo_address = struct.unpack_from(
            order + pointer_format * 2, record, 16)
        version = _pointer_string(container, version_address, ptrsize, order)
        modinfo = _pointer_string(container, modinfo_address, ptrsize, order)

    if not version:
        raise ValueError("record has no Go version")

    # Sentinel bytes are not valid UTF-8; slice them off before decoding
    if (len(modinfo) >= 2 * MODINFO_SENTINEL_SIZE + 1
            and modinfo[-MODINFO_SENTINEL_SIZE - 1:-MODINFO_SENTINEL_SIZE] == b'\n'):
        modinfo = modinfo[MODINFO_SENTINEL_SIZE:-MODINFO_SENTINEL_SIZE]
    else:
        modinfo = b''
    return version.decode('utf-8', errors='replace'), modinfo.decode('utf-8', errors='replace')


def parse_modinfo(go_version: str, modinfo: str) -> BuildInfo:
    """Extract the main package and module from the module info text."""
    path = ''
    module_path = ''
    module_version = ''
    for line in modinfo.splitlines():
        fields = line.split('\t')
        if fields[0] == 'path' and len(fields) >= 2:
            path = fields[1]
        elif fields[0] == 'mod' and len(fields) >= 2:
            module_path = fields[1]
            module_version = fields[2] if len(fields) >= 3 else ''

    if module_version == DEVEL_VERSION:
        module_version = ''
    return BuildInfo(
        go_version=go_version,
        path=path,
        module_path=module_path,
        module_version=module_version,
    )


def read_buildinfo(container: ExecutableContainer) -> Optional[BuildInfo]:
    """Read the build-info record of an executable.

    Returns:
        BuildInfo, or None when the executable carries no usable record
    """
    for address, data in container.buildinfo_candidates():
        offset = find_header(data)
        if offset is None:
            continue
        try:
            go_version, modinfo = decode_record(data[offset:], container)
        except (ValueError, IndexError, struct.error) as e:
            logger.debug("%s: malformed build info at 0x%x: %s",
                         container.path, address + offset, e)
            continue
        info = parse_modinfo(go_version, modinfo)
        logger.debug("%s: build info %s path=%r mod=%r %r", container.path,
                     info.go_version, info.path, info.module_path, info.module_version)
        return info
    return None
