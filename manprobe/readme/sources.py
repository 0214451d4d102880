"""Candidate module paths and README URLs for a resolved module path."""

import re
from typing import List

KNOWN_HOSTS = ('github.com', 'gitlab.com', 'bitbucket.org')
CMD_SEGMENT = '/cmd/'
BRANCHES = ('main', 'trunk', 'master')

_MAJOR_VERSION = re.compile(r'^v[0-9]+$')
_PSEUDO_VERSION = re.compile(r'[.-](?:0\.)?\d{14}-([0-9a-f]{12})$')


def _dedupe(items: List[str]) -> List[str]:
    seen = set()
    return [item for item in items if not (item in seen or seen.add(item))]


def _first_version_index(parts: List[str]) -> int:
    """Index of the /vN major version segment, or -1."""
    start = 3 if parts[0] in KNOWN_HOSTS else 1
    for index in range(start, len(parts)):
        if _MAJOR_VERSION.match(parts[index]):
            return index
    return -1


def major_version(module_path: str) -> str:
    """Return the /vN segment of a module path, e.g. 'v2', or ''."""
    parts = module_path.split('/')
    index = _first_version_index(parts)
    return parts[index] if index >= 0 else ''


def strip_major_version(module_path: str) -> str:
    """Remove the /vN segment from a module path."""
    parts = module_path.split('/')
    index = _first_version_index(parts)
    if index < 0:
        return module_path
    return '/'.join(parts[:index] + parts[index + 1:])


def repository_root(module_path: str) -> str:
    """
    Return the repository part of a module path.

    For hosts with an <owner>/<repo> layout this is the first three path
    segments; elsewhere it is everything before a /cmd/ segment.

    Examples:
        >>> repository_root('github.com/user/repo/cmd/tool')
        'github.com/user/repo'

        >>> repository_root('npf.io/gorram/cmd/gorram')
        'npf.io/gorram'
    """
    parts = module_path.split('/')
    if parts[0] in KNOWN_HOSTS and len(parts) >= 3:
        return '/'.join(parts[:3])
    if CMD_SEGMENT in module_path:
        return module_path[:module_path.index(CMD_SEGMENT)]
    return module_path


def sources(module_path: str) -> List[str]:
    """
    List the module paths to search for a README, most specific first.

    Subcommands rarely have a README of their own, so the repository root
    is tried after the full path, with and without the major version.

    Examples:
        >>> sources('github.com/user/repo/cmd/name')
        ['github.com/user/repo/cmd/name', 'github.com/user/repo']
    """
    unversioned = strip_major_version(module_path)
    root = repository_root(unversioned)
    version = major_version(module_path)

    candidates = [module_path, unversioned]
    if version:
        candidates.append(f"{root}/{version}")
    candidates.append(root)
    return _dedupe(candidates)


def version_ref(version: str) -> str:
    """
    Map a module version to a git ref that can appear in a raw file URL.

    Pseudo-versions map to their commit hash, tagged versions to the tag.
    """
    if not version:
        return ''
    version = version.replace('+incompatible', '')
    match = _PSEUDO_VERSION.search(version)
    if match:
        return match.group(1)
    return version


def readme_urls(module_path: str, version: str = '') -> List[str]:
    """
    Build the base URLs (with trailing slash) that may hold a README.

    Examples:
        >>> readme_urls('github.com/user/repo')[0]
        'https://raw.githubusercontent.com/user/repo/main/'

        >>> readme_urls('npf.io/gorram')
        ['https://npf.io/gorram/']
    """
    parts = module_path.strip('/').split('/')
    if parts[0] not in KNOWN_HOSTS or len(parts) < 3:
        return [f"https://{module_path.strip('/')}/"]

    host, owner, repo = parts[:3]
    subpath = ''.join(f"{part}/" for part in parts[3:])
    ref = version_ref(version)
    refs = _dedupe(([ref] if ref else []) + list(BRANCHES))

    if host == 'github.com':
        template = 'https://raw.githubusercontent.com/{owner}/{repo}/{ref}/{subpath}'
    elif host == 'gitlab.com':
        template = 'https://gitlab.com/{owner}/{repo}/-/raw/{ref}/{subpath}'
    else:
        template = 'https://bitbucket.org/{owner}/{repo}/raw/{ref}/{subpath}'

    return [template.format(owner=owner, repo=repo, ref=r, subpath=subpath) for r in refs]
