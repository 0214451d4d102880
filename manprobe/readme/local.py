"""Local README lookup in GOPATH source trees and the module cache."""

import os
import logging
from pathlib import Path
from typing import List, Mapping, Optional, Sequence

from ..exceptions import ReadmeNotFoundError
from ..models import Readme
from .sources import sources

logger = logging.getLogger(__name__)

README_NAMES = ('README.md', 'README', 'README.txt', 'README.markdown')


def gopath_roots(env: Optional[Mapping[str, str]] = None) -> List[str]:
    """
    Return the GOPATH entries to search.

    Args:
        env: Environment mapping (default: os.environ)

    Returns:
        GOPATH split on the platform path separator, or the default
        ~/go when GOPATH is unset
    """
    if env is None:
        env = os.environ
    gopath = env.get('GOPATH', '')
    if not gopath:
        return [str(Path.home() / 'go')]
    return [entry for entry in gopath.split(os.pathsep) if entry]


def escape_module_path(module_path: str) -> str:
    """Apply the module cache's case encoding ('A' -> '!a')."""
    return ''.join(f"!{c.lower()}" if c.isupper() else c for c in module_path)


def candidate_files(module_path: str, version: str, roots: Sequence[str]) -> List[Path]:
    """List README file locations in search order."""
    candidates = []
    for root in roots:
        for name in README_NAMES:
            for source in sources(module_path):
                candidates.append(Path(root) / 'src' / source / name)
                if version:
                    cached = f"{escape_module_path(source)}@{escape_module_path(version)}"
                    candidates.append(Path(root) / 'pkg' / 'mod' / cached / name)
    return candidates


def find_local_readme(module_path: str, version: str = '',
                      roots: Optional[Sequence[str]] = None) -> Readme:
    """
    Find a README below the local GOPATH.

    Raises:
        ReadmeNotFoundError: If none of the candidate files can be read
    """
    if roots is None:
        roots = gopath_roots()

    for path in candidate_files(module_path, version, roots):
        try:
            content = path.read_bytes()
        except OSError:
            continue
        logger.debug("Found local README at %s", path)
        return Readme(content=content, location=str(path))

    raise ReadmeNotFoundError(
        f"No README found for {module_path} in any of {os.pathsep.join(roots)}")
