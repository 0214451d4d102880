"""
Fetch READMEs from code hosting services

Provides ReadmeFetcher for retrieving raw README files over HTTP using the
requests library. Every failed request just moves on to the next candidate.
"""

import logging
from importlib.metadata import PackageNotFoundError, version
from typing import Iterable, Optional, Sequence

import requests

from ..exceptions import ReadmeNotFoundError
from ..models import Readme
from .local import README_NAMES

logger = logging.getLogger(__name__)

REQUEST_TIMEOUT = 10

try:
    PACKAGE_VERSION = version('manprobe')
except PackageNotFoundError:
    PACKAGE_VERSION = 'dev'


class ReadmeFetcher:  # pylint: disable=too-few-public-methods
    """Retrieves README files from a list of candidate base URLs"""

    def __init__(self, session: Optional[requests.Session] = None,
                 timeout: float = REQUEST_TIMEOUT):
        self.timeout = timeout
        self.session = session or requests.Session()
        self.session.headers.update({
            'User-Agent': f'manprobe/{PACKAGE_VERSION}'
        })

    def fetch_url(self, url: str) -> Optional[bytes]:
        """
        Download one URL

        Args:
            url: Full URL of the README file

        Returns:
            Response body, or None on timeout, connection failure or any
            status other than 200
        """
        try:
            response = self.session.get(url, timeout=self.timeout)
        except requests.exceptions.Timeout:
            logger.debug("Request to %s timed out after %s seconds", url, self.timeout)
            return None
        except requests.exceptions.ConnectionError as e:
            logger.debug("Failed to connect to %s: %s", url, e)
            return None
        except requests.exceptions.RequestException as e:
            logger.debug("Request to %s failed: %s", url, e)
            return None

        if response.status_code != 200:
            logger.debug("HTTP GET returned %s for URL %s", response.status_code, url)
            return None
        return response.content

    def fetch(self, base_urls: Iterable[str],
              names: Sequence[str] = README_NAMES) -> Readme:
        """
        Try every README name below every base URL, in order

        Raises:
            ReadmeNotFoundError: If no candidate could be retrieved
        """
        tried = 0
        for base in base_urls:
            for name in names:
                url = base + name
                tried += 1
                content = self.fetch_url(url)
                if content is not None:
                    logger.debug("Fetched README from %s", url)
                    return Readme(content=content, location=url)

        raise ReadmeNotFoundError(f"Failed to retrieve README ({tried} URLs tried)")
