"""README discovery: local GOPATH first, then the remote repository."""

import logging
from typing import Optional, Sequence

from ..exceptions import ReadmeNotFoundError
from ..models import Readme
from .local import find_local_readme
from .remote import ReadmeFetcher
from .sources import readme_urls, sources

logger = logging.getLogger(__name__)


def remote_candidates(module_path: str, version: str = '') -> list:
    """All remote base URLs for a module path, in the order they are tried."""
    urls = []
    for source in sources(module_path):
        for url in readme_urls(source, version):
            if url not in urls:
                urls.append(url)
    return urls


def find_readme(module_path: str, version: str = '', remote_only: bool = False,
                roots: Optional[Sequence[str]] = None,
                fetcher: Optional[ReadmeFetcher] = None) -> Readme:
    """
    Find the README of a module.

    Args:
        module_path: Import path from the provenance resolver
        version: Module version, empty when unknown
        remote_only: Skip the local search (the local copy may be outdated)
        roots: GOPATH entries to search (default: from the environment)
        fetcher: HTTP fetcher to use (default: a new ReadmeFetcher)

    Returns:
        The README and where it was found

    Raises:
        ReadmeNotFoundError: If neither the local nor the remote search succeeds
    """
    if not remote_only:
        try:
            return find_local_readme(module_path, version, roots)
        except ReadmeNotFoundError as e:
            logger.debug("%s", e)

    if fetcher is None:
        fetcher = ReadmeFetcher()
    try:
        return fetcher.fetch(remote_candidates(module_path, version))
    except ReadmeNotFoundError as e:
        raise ReadmeNotFoundError(
            f"Did not find a README for {module_path} locally nor in the remote repository"
        ) from e
