#!/usr/bin/env python3

"""
test_cli.py - Tests for the command-line interface and its helpers

The resolver and README finder are patched out where the test is about
argument handling and output; executable lookup and markdown rendering are
exercised directly.
"""

import io
import os
import re
import shutil
import stat
import tempfile
import unittest
from contextlib import redirect_stdout
from pathlib import Path
from unittest.mock import patch

from binfixtures import build_buildinfo, build_go_elf

from manprobe import cli
from manprobe.exceptions import ExecutableNotFoundError, ReadmeNotFoundError, SymbolNotFoundError
from manprobe.models import ContainerFormat, Readme, ResolvedProvenance
from manprobe.render import render_markdown
from manprobe.utils.which import find_executable

PROVENANCE = ResolvedProvenance('github.com/acme/tool', 'v1.4.0', ContainerFormat.ELF, 'buildinfo')


def _run(argv):
    out = io.StringIO()
    with redirect_stdout(out):
        code = cli.main(argv)
    return code, out.getvalue()


class TestArgumentParsing(unittest.TestCase):
    """Parser options"""

    def test_defaults(self):
        args = cli.build_parser().parse_args(['gopls'])
        self.assertEqual(args.binary, 'gopls')
        self.assertFalse(args.verbose)
        self.assertFalse(args.remote_only)
        self.assertFalse(args.which)
        self.assertEqual(args.entry, 'main.main')

    def test_flags(self):
        args = cli.build_parser().parse_args(['-v', '-r', '--entry', 'main.run', 'x'])
        self.assertTrue(args.verbose)
        self.assertTrue(args.remote_only)
        self.assertEqual(args.entry, 'main.run')

    def test_help_words(self):
        for word in cli.HELP_WORDS:
            with self.subTest(word=word):
                code, output = _run([word])
                self.assertEqual(code, 0)
                self.assertIn('usage: manprobe', output)

    def test_single_dash_help(self):
        """-help would otherwise be read as combined short options"""
        code, output = _run(['-help'])
        self.assertEqual(code, 0)
        self.assertIn('--remote-only', output)

    def test_missing_argument(self):
        with self.assertRaises(SystemExit) as ctx:
            cli.build_parser().parse_args([])
        self.assertEqual(ctx.exception.code, 2)


@patch('manprobe.cli.find_executable', return_value='/usr/local/bin/tool')
class TestRun(unittest.TestCase):
    """Exit codes and output of the main flow"""

    @patch('manprobe.cli.resolve', return_value=PROVENANCE)
    def test_which(self, mock_resolve, _mock_find):
        code, output = _run(['--which', 'tool'])
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), 'github.com/acme/tool v1.4.0')
        mock_resolve.assert_called_once_with('/usr/local/bin/tool', entry_name='main.main')

    @patch('manprobe.cli.find_readme')
    @patch('manprobe.cli.resolve', return_value=PROVENANCE)
    def test_prints_readme(self, _mock_resolve, mock_find_readme, _mock_find):
        mock_find_readme.return_value = Readme(b'# Tool\n\nDoes things.', '/go/src/x/README.md')
        code, output = _run(['-r', '--width', '60', 'tool'])
        self.assertEqual(code, 0)
        self.assertIn('Tool', output)
        self.assertIn('Does things.', output)
        self.assertIn('(Source: /go/src/x/README.md)', output)
        mock_find_readme.assert_called_once_with('github.com/acme/tool', 'v1.4.0', remote_only=True)

    @patch('manprobe.cli.resolve', side_effect=SymbolNotFoundError('no main.main'))
    def test_resolution_failure(self, _mock_resolve, _mock_find):
        with self.assertLogs('manprobe.cli', level='ERROR') as logs:
            code, output = _run(['tool'])
        self.assertEqual(code, 1)
        self.assertEqual(output, '')
        self.assertIn('perhaps no Go binary', logs.output[0])

    @patch('manprobe.cli.find_readme', side_effect=ReadmeNotFoundError('none'))
    @patch('manprobe.cli.resolve', return_value=PROVENANCE)
    def test_readme_failure(self, _mock_resolve, _mock_find_readme, _mock_find):
        with self.assertLogs('manprobe.cli', level='ERROR') as logs:
            code, _ = _run(['tool'])
        self.assertEqual(code, 1)
        self.assertIn('No README found', logs.output[0])

    def test_command_not_found(self, mock_find):
        mock_find.side_effect = ExecutableNotFoundError('nope')
        with self.assertLogs('manprobe.cli', level='ERROR') as logs:
            code, _ = _run(['nope'])
        self.assertEqual(code, 1)
        self.assertIn('command not found', logs.output[0])


class TestEndToEnd(unittest.TestCase):
    """CLI against a real file, README found in a local GOPATH"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_local_readme(self):
        binary = self.temp_dir / 'tool'
        binary.write_bytes(build_go_elf(buildinfo=build_buildinfo()))
        readme_dir = self.temp_dir / 'gopath' / 'src' / 'github.com' / 'acme' / 'tool'
        readme_dir.mkdir(parents=True)
        (readme_dir / 'README.md').write_text('# Acme Tool\n')

        with patch.dict(os.environ, {'GOPATH': str(self.temp_dir / 'gopath')}):
            code, output = _run(['--width', '40', str(binary)])
        self.assertEqual(code, 0)
        self.assertIn('Acme Tool', output)
        self.assertIn(str(readme_dir / 'README.md'), output)

    def test_which_on_file(self):
        binary = self.temp_dir / 'tool'
        binary.write_bytes(build_go_elf())
        code, output = _run(['--which', str(binary)])
        self.assertEqual(code, 0)
        self.assertEqual(output.strip(), 'github.com/acme/tool')


class TestFindExecutable(unittest.TestCase):
    """Command name lookup"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def _make_executable(self, directory, name='tool'):
        directory.mkdir(parents=True, exist_ok=True)
        path = directory / name
        path.write_bytes(b'\x7fELF')
        path.chmod(path.stat().st_mode | stat.S_IXUSR | stat.S_IXGRP | stat.S_IXOTH)
        return path

    def test_explicit_path(self):
        path = self._make_executable(self.temp_dir)
        self.assertEqual(find_executable(str(path)), str(path))

    def test_explicit_path_missing(self):
        with self.assertRaises(ExecutableNotFoundError):
            find_executable(str(self.temp_dir / 'nothere'))

    def test_search_path(self):
        path = self._make_executable(self.temp_dir / 'bin1')
        found = find_executable('tool', path_env=str(self.temp_dir / 'bin1'), gopath=[], cwd='/nonexistent')
        self.assertEqual(Path(found), path)

    def test_gopath_bin(self):
        path = self._make_executable(self.temp_dir / 'gopath' / 'bin')
        found = find_executable('tool', path_env=str(self.temp_dir / 'empty'),
                                gopath=[str(self.temp_dir / 'gopath')], cwd='/nonexistent')
        self.assertEqual(Path(found), path)

    def test_current_directory(self):
        path = self._make_executable(self.temp_dir / 'work')
        found = find_executable('tool', path_env=str(self.temp_dir / 'empty'), gopath=[],
                                cwd=str(self.temp_dir / 'work'))
        self.assertEqual(Path(found), path)

    def test_not_found(self):
        with self.assertRaises(ExecutableNotFoundError) as ctx:
            find_executable('tool', path_env=str(self.temp_dir), gopath=[], cwd=str(self.temp_dir))
        self.assertIn('tool', str(ctx.exception))


class TestRenderMarkdown(unittest.TestCase):
    """Terminal rendering"""

    def test_ansi_output(self):
        output = render_markdown('# Title\n\nSome *text*.', width=40)
        self.assertIn('Title', output)
        self.assertIn('text', output)
        self.assertIn('\x1b[', output)

    def test_width_respected(self):
        output = render_markdown('word ' * 50, width=30)
        for line in output.splitlines():
            self.assertLessEqual(len(_strip_ansi(line)), 30)


def _strip_ansi(text):
    return re.sub(r'\x1b\[[0-9;]*m', '', text)


if __name__ == '__main__':
    unittest.main()
