#!/usr/bin/env python3
"""
Normalization of build-machine source paths into portable module paths.

A Go binary records the absolute paths its sources had on the build
machine, e.g. ``/home/user/go/src/github.com/org/repo/main.go`` or
``/home/user/go/pkg/mod/github.com/org/repo@v1.2.3/main.go``. Stripping
everything up to the GOPATH source tree or module cache marker yields the
import path the README finder works with.
"""

import re
import logging
from typing import Tuple

logger = logging.getLogger(__name__)

SOURCE_TREE_MARKER = '/src/'
MODULE_CACHE_MARKER = '/pkg/mod/'

_DRIVE_PATH = re.compile(r'^[A-Za-z]:/')


def is_absolute(path: str) -> bool:
    """Whether a slash-separated path is absolute on POSIX or Windows."""
    return path.startswith('/') or bool(_DRIVE_PATH.match(path))


def normalize(raw_path: str) -> str:
    """Strip the build-environment prefix from a recorded source path.

    Args:
        raw_path: Path as recorded by the compiler

    Returns:
        The host-relative module path. Relative input is returned with
        slash separators only; absolute paths without a known marker are
        returned unchanged.

    Examples:
        >>> normalize('/home/user/go/src/github.com/org/repo')
        'github.com/org/repo'

        >>> normalize('relative/path')
        'relative/path'
    """
    path = raw_path.replace('\\', '/')

    # Repeat until the result is relative so that normalize is idempotent
    while is_absolute(path):
        for marker in (SOURCE_TREE_MARKER, MODULE_CACHE_MARKER):
            index = path.find(marker)
            if index >= 0:
                path = path[index + len(marker):]
                break
        else:
            # TODO: report this as a resolution failure once callers can tell
            # local development builds apart from unknown layouts
            logger.debug("No GOPATH or module cache marker in %s", path)
            return path
    return path


def split_version(module_path: str) -> Tuple[str, str]:
    """Split a module cache path into path and version.

    Examples:
        >>> split_version('github.com/org/repo@v1.2.3')
        ('github.com/org/repo', 'v1.2.3')

        >>> split_version('github.com/org/repo@v1.2.3/cmd/tool')
        ('github.com/org/repo/cmd/tool', 'v1.2.3')
    """
    head, sep, tail = module_path.partition('@')
    if not sep:
        return module_path, ''
    version, slash, rest = tail.partition('/')
    return head + slash + rest, version
