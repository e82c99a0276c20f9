"""
Latest image lookup against the public release listing.

The listing is an HTML index whose entries look like
`<a href="./minio.RELEASE.2020-06-18T02-23-35Z">`. The newest entry is the
last one listed. Any failure means "no update available".
"""

import logging
import re
from typing import Optional, Protocol

import requests

from console.config import RELEASE_URL

logger = logging.getLogger(__name__)

RELEASE_RE = re.compile(r"\./(minio\.RELEASE\.[0-9]{4}-[0-9]{2}-[0-9]{2}T[0-9]{2}-[0-9]{2}-[0-9]{2}Z)\"")


class HTTPFetcher(Protocol):
    def get(self, url: str, timeout: Optional[float] = None) -> requests.Response:
        ...


def extract_latest_image(body: str) -> Optional[str]:
    matches = RELEASE_RE.findall(body or "")
    if not matches:
        return None
    return matches[-1]


class LatestImageLookup:
    def __init__(self, fetcher: Optional[HTTPFetcher] = None, url: str = RELEASE_URL):
        self.fetcher = fetcher or requests.Session()
        self.url = url

    def latest(self, timeout: Optional[float] = None) -> Optional[str]:
        """Return the newest image reference, or None if it cannot be determined."""
        try:
            response = self.fetcher.get(self.url, timeout=timeout)
            response.raise_for_status()
            image = extract_latest_image(response.text)
        except (requests.RequestException, ValueError) as e:
            logger.warning(f"Latest image lookup at {self.url} failed: {e}")
            return None
        except Exception as e:
            logger.warning(f"Latest image lookup error: {e}", exc_info=True)
            return None

        if image is None:
            logger.warning(f"Latest image lookup at {self.url}: no release found in response")
        return image
