# src/page_fetcher/utils/url_utils.py
import logging
from urllib.parse import urlparse

logger = logging.getLogger(__name__)


class UrlUtils:
    """A collection of static methods for URL parsing and manipulation."""

    @staticmethod
    def get_base_url(url: str) -> str | None:
        """
        Extracts and returns the core URL (scheme + netloc) from a given URL.
        """
        if isinstance(url, bytes):
            url = url.decode('utf-8')

        if not url.startswith(('http://', 'https://')):
            url = 'http://' + url

        try:
            parsed_url = urlparse(url)
            if not parsed_url.scheme or not parsed_url.netloc:
                logger.debug(f"Invalid URL format: {url}")
                return None
            return f"{parsed_url.scheme}://{parsed_url.netloc}"
        except ValueError:
            logger.debug(f"Could not parse invalid URL: {url}")
            return None

    @staticmethod
    def prepare_request_url(url: str) -> str | None:
        """
        Turns user input into a fetchable absolute URL.
        A missing scheme defaults to http://; anything without a host is rejected.
        """
        if not url:
            return None
        url = url.strip()
        if not url.startswith(('http://', 'https://')):
            url = 'http://' + url

        if UrlUtils.get_base_url(url) is None:
            return None
        return url
