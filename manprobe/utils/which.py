"""Executable lookup by command name."""

import os
import shutil
import logging
from pathlib import Path
from typing import Optional, Sequence

from ..exceptions import ExecutableNotFoundError
from ..readme.local import gopath_roots

logger = logging.getLogger(__name__)


def find_executable(name: str, path_env: Optional[str] = None,
                    gopath: Optional[Sequence[str]] = None,
                    cwd: Optional[str] = None) -> str:
    """
    Determine the file a command name refers to.

    Names containing a path separator are taken as file paths. Bare names
    are looked up in PATH, then in each GOPATH bin directory, then in the
    current directory.

    Args:
        name: Command name or path
        path_env: PATH value to search (default: the PATH environment variable)
        gopath: GOPATH entries (default: from the environment)
        cwd: Directory searched last (default: the working directory)

    Returns:
        Path of the executable

    Raises:
        ExecutableNotFoundError: If nothing matches
    """
    if '/' in name or os.sep in name:
        if Path(name).is_file():
            return name
        raise ExecutableNotFoundError(f"{name}: no such file")

    found = shutil.which(name, path=path_env)
    if found:
        return found

    if gopath is None:
        gopath = gopath_roots()
    for root in gopath:
        found = shutil.which(name, path=os.path.join(root, 'bin'))
        if found:
            logger.debug("Found %s in GOPATH %s", name, root)
            return found

    if cwd is None:
        cwd = os.getcwd()
    found = shutil.which(name, path=cwd)
    if found:
        return found

    searched = os.pathsep.join([path_env or os.environ.get('PATH', '')] + list(gopath) + [cwd])
    raise ExecutableNotFoundError(f"{name} not found in any of {searched}")
