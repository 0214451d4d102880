#!/usr/bin/env python3

"""
test_readme.py - Unit tests for README discovery

Covers candidate module paths, raw file URLs for the known hosting
services, the local GOPATH search and remote retrieval with a mocked
requests session.
"""

import os
import shutil
import tempfile
import unittest
from pathlib import Path
from unittest.mock import Mock, patch

import requests

from conftest import gopath_context, make_readme

from manprobe.exceptions import ReadmeNotFoundError
from manprobe.models import Readme
from manprobe.readme import (
    ReadmeFetcher, find_local_readme, find_readme, gopath_roots, readme_urls,
    remote_candidates, sources,
)
from manprobe.readme.local import escape_module_path
from manprobe.readme.sources import major_version, repository_root, version_ref


def _response(status_code, content=b''):
    response = Mock()
    response.status_code = status_code
    response.content = content
    return response


class TestSources(unittest.TestCase):
    """Module paths tried for a README, most specific first"""

    def test_cmd_subpackage(self):
        self.assertEqual(sources('github.com/user/repo/cmd/name'), [
            'github.com/user/repo/cmd/name',
            'github.com/user/repo',
        ])

    def test_major_version_before_cmd(self):
        self.assertEqual(sources('github.com/user/repo/v2/cmd/name'), [
            'github.com/user/repo/v2/cmd/name',
            'github.com/user/repo/cmd/name',
            'github.com/user/repo/v2',
            'github.com/user/repo',
        ])

    def test_major_version_in_subdirectory(self):
        self.assertEqual(sources('github.com/mholt/caddy/caddy/v2'), [
            'github.com/mholt/caddy/caddy/v2',
            'github.com/mholt/caddy/caddy',
            'github.com/mholt/caddy/v2',
            'github.com/mholt/caddy',
        ])

    def test_repository_root_only(self):
        self.assertEqual(sources('github.com/user/repo'), ['github.com/user/repo'])

    def test_vanity_import_path(self):
        self.assertEqual(sources('npf.io/gorram/cmd/gorram'), [
            'npf.io/gorram/cmd/gorram',
            'npf.io/gorram',
        ])

    def test_repo_named_like_version(self):
        """Owner and repository segments are never taken as a major version"""
        self.assertEqual(major_version('github.com/v1/v2'), '')
        self.assertEqual(repository_root('github.com/v1/v2/cmd/x'), 'github.com/v1/v2')


class TestReadmeUrls(unittest.TestCase):
    """Raw file URLs per hosting service"""

    def test_github_branches(self):
        self.assertEqual(readme_urls('github.com/user/repo'), [
            'https://raw.githubusercontent.com/user/repo/main/',
            'https://raw.githubusercontent.com/user/repo/trunk/',
            'https://raw.githubusercontent.com/user/repo/master/',
        ])

    def test_github_version_first(self):
        urls = readme_urls('github.com/user/repo/cmd/name', 'v1.2.0')
        self.assertEqual(urls[0], 'https://raw.githubusercontent.com/user/repo/v1.2.0/cmd/name/')
        self.assertEqual(len(urls), 4)

    def test_gitlab(self):
        self.assertEqual(readme_urls('gitlab.com/group/proj')[0],
                         'https://gitlab.com/group/proj/-/raw/main/')

    def test_bitbucket(self):
        self.assertEqual(readme_urls('bitbucket.org/team/repo')[2],
                         'https://bitbucket.org/team/repo/raw/master/')

    def test_other_host(self):
        self.assertEqual(readme_urls('npf.io/gorram', 'v1.0.0'), ['https://npf.io/gorram/'])

    def test_version_refs(self):
        self.assertEqual(version_ref(''), '')
        self.assertEqual(version_ref('v1.2.3'), 'v1.2.3')
        self.assertEqual(version_ref('v2.0.1+incompatible'), 'v2.0.1')
        self.assertEqual(version_ref('v0.0.0-20210101120000-0123456789ab'), '0123456789ab')
        self.assertEqual(version_ref('v1.2.4-0.20210101120000-0123456789ab'), '0123456789ab')

    def test_remote_candidates_order(self):
        urls = remote_candidates('github.com/user/repo/cmd/name')
        self.assertEqual(urls[0], 'https://raw.githubusercontent.com/user/repo/main/cmd/name/')
        self.assertEqual(urls[3], 'https://raw.githubusercontent.com/user/repo/main/')
        self.assertEqual(len(urls), len(set(urls)))


class TestLocalReadme(unittest.TestCase):
    """README lookup below GOPATH roots"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_gopath_src(self):
        path = make_readme(self.temp_dir, 'src/github.com/acme/tool')
        readme = find_local_readme('github.com/acme/tool', roots=[str(self.temp_dir)])
        self.assertEqual(readme.location, str(path))
        self.assertEqual(readme.content, b'# Project\n')

    def test_falls_back_to_repository_root(self):
        make_readme(self.temp_dir, 'src/github.com/acme/tool', content=b'root')
        readme = find_local_readme('github.com/acme/tool/cmd/tool', roots=[str(self.temp_dir)])
        self.assertEqual(readme.content, b'root')

    def test_subcommand_readme_preferred(self):
        make_readme(self.temp_dir, 'src/github.com/acme/tool', content=b'root')
        make_readme(self.temp_dir, 'src/github.com/acme/tool/cmd/tool', content=b'cmd')
        readme = find_local_readme('github.com/acme/tool/cmd/tool', roots=[str(self.temp_dir)])
        self.assertEqual(readme.content, b'cmd')

    def test_module_cache(self):
        make_readme(self.temp_dir, 'pkg/mod/github.com/!burnt!sushi/toml@v1.3.2', content=b'toml')
        readme = find_local_readme('github.com/BurntSushi/toml', 'v1.3.2',
                                   roots=[str(self.temp_dir)])
        self.assertEqual(readme.content, b'toml')

    def test_alternative_names(self):
        make_readme(self.temp_dir, 'src/example.com/x', name='README', content=b'plain')
        readme = find_local_readme('example.com/x', roots=[str(self.temp_dir)])
        self.assertEqual(readme.content, b'plain')

    def test_second_root(self):
        empty = self.temp_dir / 'first'
        empty.mkdir()
        make_readme(self.temp_dir / 'second', 'src/example.com/x')
        readme = find_local_readme('example.com/x', roots=[str(empty), str(self.temp_dir / 'second')])
        self.assertIn('second', readme.location)

    def test_not_found(self):
        with self.assertRaises(ReadmeNotFoundError):
            find_local_readme('example.com/x', roots=[str(self.temp_dir)])

    def test_roots_from_environment(self):
        make_readme(self.temp_dir, 'src/example.com/x', content=b'env')
        with gopath_context(self.temp_dir):
            self.assertEqual(find_local_readme('example.com/x').content, b'env')

    def test_gopath_roots(self):
        first, second = str(self.temp_dir / 'a'), str(self.temp_dir / 'b')
        self.assertEqual(gopath_roots({'GOPATH': first + os.pathsep + second}), [first, second])

    def test_default_gopath(self):
        with patch.object(Path, 'home', return_value=Path('/home/gopher')):
            self.assertEqual(gopath_roots({}), [str(Path('/home/gopher') / 'go')])

    def test_escape_module_path(self):
        self.assertEqual(escape_module_path('github.com/Azure/SDK'), 'github.com/!azure/!s!d!k')


class TestReadmeFetcher(unittest.TestCase):
    """Remote retrieval through requests"""

    def setUp(self):
        self.session = Mock()
        self.session.headers = {}
        self.fetcher = ReadmeFetcher(session=self.session, timeout=5)

    def test_user_agent(self):
        self.assertTrue(self.session.headers['User-Agent'].startswith('manprobe/'))

    def test_first_success_wins(self):
        self.session.get.side_effect = [
            _response(404),
            _response(200, b'# Hello'),
        ]
        readme = self.fetcher.fetch(['https://example.com/a/'], names=('README.md', 'README'))
        self.assertEqual(readme, Readme(b'# Hello', 'https://example.com/a/README'))
        self.session.get.assert_called_with('https://example.com/a/README', timeout=5)

    def test_network_errors_skipped(self):
        self.session.get.side_effect = [
            requests.exceptions.Timeout(),
            requests.exceptions.ConnectionError('refused'),
            requests.exceptions.TooManyRedirects(),
            _response(200, b'ok'),
        ]
        readme = self.fetcher.fetch(['https://a/', 'https://b/'], names=('R1', 'R2'))
        self.assertEqual(readme.location, 'https://b/R2')

    def test_nothing_found(self):
        self.session.get.return_value = _response(500)
        with self.assertRaises(ReadmeNotFoundError) as ctx:
            self.fetcher.fetch(['https://a/'], names=('README.md', 'README'))
        self.assertIn('2 URLs', str(ctx.exception))

    def test_redirect_status_rejected(self):
        self.session.get.return_value = _response(301, b'moved')
        self.assertIsNone(self.fetcher.fetch_url('https://a/README.md'))


class TestFindReadme(unittest.TestCase):
    """Local search first, remote fallback"""

    def setUp(self):
        self.temp_dir = Path(tempfile.mkdtemp())
        self.fetcher = Mock()

    def tearDown(self):
        shutil.rmtree(self.temp_dir)

    def test_local_preferred(self):
        make_readme(self.temp_dir, 'src/example.com/x', content=b'local')
        readme = find_readme('example.com/x', roots=[str(self.temp_dir)], fetcher=self.fetcher)
        self.assertEqual(readme.content, b'local')
        self.fetcher.fetch.assert_not_called()

    def test_remote_only_skips_local(self):
        make_readme(self.temp_dir, 'src/example.com/x', content=b'local')
        self.fetcher.fetch.return_value = Readme(b'remote', 'https://example.com/x/README.md')
        readme = find_readme('example.com/x', remote_only=True, roots=[str(self.temp_dir)],
                             fetcher=self.fetcher)
        self.assertEqual(readme.content, b'remote')
        self.fetcher.fetch.assert_called_once_with(['https://example.com/x/'])

    def test_remote_fallback_uses_version(self):
        self.fetcher.fetch.return_value = Readme(b'remote', 'url')
        find_readme('github.com/user/repo', 'v1.0.0', roots=[str(self.temp_dir)],
                    fetcher=self.fetcher)
        urls = self.fetcher.fetch.call_args[0][0]
        self.assertEqual(urls[0], 'https://raw.githubusercontent.com/user/repo/v1.0.0/')

    def test_not_found_anywhere(self):
        self.fetcher.fetch.side_effect = ReadmeNotFoundError('none')
        with self.assertRaises(ReadmeNotFoundError) as ctx:
            find_readme('example.com/x', roots=[str(self.temp_dir)], fetcher=self.fetcher)
        self.assertIn('example.com/x', str(ctx.exception))


def test_find_readme_from_environment_gopath(gopath):
    make_readme(gopath, 'src/example.com/y', content=b'y')
    fetcher = Mock()
    assert find_readme('example.com/y', fetcher=fetcher).content == b'y'
    fetcher.fetch.assert_not_called()


if __name__ == '__main__':
    unittest.main()
