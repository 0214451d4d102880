"""Shared pytest fixtures for manprobe tests."""

import os
from contextlib import contextmanager
from pathlib import Path
from unittest.mock import patch

import pytest

from binfixtures import build_go_elf, build_go_macho, build_go_pe


@contextmanager
def gopath_context(*roots):
    """
    Context manager that points GOPATH at the given directories.

    Args:
        roots: GOPATH entries, joined with the platform path separator

    Yields:
        The GOPATH value that was set
    """
    value = os.pathsep.join(str(root) for root in roots)
    with patch.dict(os.environ, {'GOPATH': value}):
        yield value


def make_readme(root, relative_dir, name='README.md', content=b'# Project\n'):
    """
    Create a README file below a GOPATH root.

    Args:
        root: GOPATH root directory
        relative_dir: Directory below the root, e.g. 'src/github.com/acme/tool'
        name: README file name (default: 'README.md')
        content: File contents

    Returns:
        Path of the created file
    """
    directory = Path(root) / relative_dir
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / name
    path.write_bytes(content)
    return path


def write_binary(directory, name, data):
    """Write executable bytes to directory/name and return the path as a string."""
    path = Path(directory) / name
    path.write_bytes(data)
    return str(path)


@pytest.fixture
def gopath(tmp_path):
    """An empty GOPATH root set in the environment."""
    root = tmp_path / 'gopath'
    root.mkdir()
    with gopath_context(root):
        yield root


@pytest.fixture
def go_elf_binary(tmp_path):
    """An ELF Go binary without build info."""
    return write_binary(tmp_path, 'tool', build_go_elf())


@pytest.fixture
def go_macho_binary(tmp_path):
    """A Mach-O Go binary without build info."""
    return write_binary(tmp_path, 'tool-darwin', build_go_macho())


@pytest.fixture
def go_pe_binary(tmp_path):
    """A PE Go binary without build info."""
    return write_binary(tmp_path, 'tool.exe', build_go_pe())
