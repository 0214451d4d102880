#!/usr/bin/env python3
"""
README discovery for resolved module paths.

This package looks for a module's README in the local GOPATH and module
cache and falls back to the raw file URLs of the hosting service.
"""

from .finder import find_readme, remote_candidates
from .local import find_local_readme, gopath_roots, README_NAMES
from .remote import ReadmeFetcher
from .sources import readme_urls, sources

__all__ = [
    'find_readme', 'remote_candidates', 'find_local_readme', 'gopath_roots',
    'README_NAMES', 'ReadmeFetcher', 'readme_urls', 'sources',
]
