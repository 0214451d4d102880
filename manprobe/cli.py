#!/usr/bin/env python3
"""
Command-line interface: show the README of a Go binary's source project.

Usage:
    manprobe <go binary>
    manprobe <go binary> | less -R
"""

import sys
import argparse
import logging
from typing import List, Optional

from .exceptions import ExecutableNotFoundError, ProvenanceError, ReadmeNotFoundError
from .locator import DEFAULT_ENTRY
from .readme import find_readme
from .render import render_markdown
from .resolver import resolve
from .utils.which import find_executable

logger = logging.getLogger(__name__)

HELP_WORDS = ('help', '-help', '-?', '/?')


def build_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog='manprobe',
        description=(
            'manprobe is man for Go binaries. It locates the source project of a\n'
            'Go executable and displays its README in the terminal.'
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
examples:
  manprobe gopls
  manprobe ~/go/bin/staticcheck | less -R
  manprobe --which ./tool.exe
        """
    )
    parser.add_argument('binary', help='Name or path of a Go executable')
    parser.add_argument('-v', '--verbose', action='store_true',
                        help='Verbose error output')
    parser.add_argument('-r', '--remote-only', action='store_true',
                        help='Skip local search (as the local file may be outdated)')
    parser.add_argument('--which', action='store_true',
                        help='Only print the module path and version')
    parser.add_argument('--entry', default=DEFAULT_ENTRY,
                        help='Entry function used for line table lookup (default: %(default)s)')
    parser.add_argument('--width', type=int, default=None,
                        help='Render width in columns (default: terminal width)')
    return parser


def run(args: argparse.Namespace) -> int:
    """
    Resolve, fetch and print the README for args.binary.

    Returns:
        Exit code (0 for success, 1 for error)
    """
    try:
        exec_path = find_executable(args.binary)
    except ExecutableNotFoundError as e:
        logger.error("%s: command not found", args.binary)
        logger.debug("%s", e, exc_info=True)
        return 1

    try:
        provenance = resolve(exec_path, entry_name=args.entry)
    except ProvenanceError as e:
        logger.error("No source path in %s - %s is perhaps no Go binary", exec_path, args.binary)
        logger.debug("%s", e, exc_info=True)
        return 1

    if args.which:
        print(f"{provenance.module_path} {provenance.version}".rstrip())
        return 0

    try:
        readme = find_readme(provenance.module_path, provenance.version,
                             remote_only=args.remote_only)
    except ReadmeNotFoundError as e:
        logger.error("No README found for %s at %s", args.binary, provenance.module_path)
        logger.debug("%s", e, exc_info=True)
        return 1

    text = readme.content.decode('utf-8', errors='replace')
    print(render_markdown(text, width=args.width))
    print(f"\n(Source: {readme.location})\n")
    return 0


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    parser = build_parser()
    argv = sys.argv[1:] if argv is None else argv

    if len(argv) == 1 and argv[0] in HELP_WORDS:
        parser.print_help()
        return 0

    args = parser.parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format='%(levelname)s: %(message)s'
    )
    return run(args)


if __name__ == "__main__":
    sys.exit(main())
