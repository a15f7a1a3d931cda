# src/page_fetcher/services/http_request_service.py
import asyncio
import logging
import time
from typing import Dict, Optional, List

import aiohttp

from page_fetcher.model import FetchError, FetchResult

logger = logging.getLogger(__name__)

DEFAULT_USER_AGENT = (
    "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36 "
    "(KHTML, like Gecko) Chrome/91.0.4472.124 Safari/537.36"
)


class HttpRequestService:
    """
    Central service for fetching pages over HTTP.
    Manages the aiohttp session, concurrency (semaphore), and error handling.
    """

    def __init__(self, config: Optional[Dict] = None, user_agent: Optional[str] = None):
        self.config = config or {}

        session_config = self.config.get('session', {})
        self.user_agent = user_agent or session_config.get('user_agent') or DEFAULT_USER_AGENT
        self.max_concurrency = int(session_config.get('concurrency', 8))
        self.timeout = float(session_config.get('time_out', 10))
        self.read_timeout = float(session_config.get('client_read_timeout', 15.0))

        self.semaphore = asyncio.Semaphore(self.max_concurrency)
        self.session: Optional[aiohttp.ClientSession] = None

    async def __aenter__(self):
        await self.initialize()
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        await self.close()

    async def initialize(self):
        if not self.session or self.session.closed:
            timeout_obj = aiohttp.ClientTimeout(total=self.timeout)
            default_headers = {
                'Accept-Encoding': 'gzip, deflate',
                'User-Agent': self.user_agent
            }
            self.session = aiohttp.ClientSession(
                timeout=timeout_obj, headers=default_headers
            )
            logger.debug("HttpRequestService: Session initialized.")

    async def close(self):
        if self.session and not self.session.closed:
            await self.session.close()
            logger.debug("HttpRequestService: Session closed.")

    async def perform_request(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Fetches a single URL with GET, following redirects.

        Raises:
            FetchError: on connection problems, timeouts and invalid URLs.
        """
        start_time = time.perf_counter()

        if not self.session or self.session.closed:
            await self.initialize()

        timeout_val = float(timeout) if timeout is not None else self.timeout

        try:
            async with self.semaphore:
                async with self.session.get(
                        url,
                        allow_redirects=True,
                        timeout=aiohttp.ClientTimeout(total=timeout_val)
                ) as response:
                    headers = {k: v for k, v in response.headers.items()}
                    content = await self._read_content(response, url)

                    return FetchResult(
                        url=url,
                        final_url=str(response.url),
                        status=response.status,
                        content_type=response.headers.get("Content-Type", ""),
                        content=content,
                        headers=headers,
                        elapsed_time=round(time.perf_counter() - start_time, 4)
                    )

        except asyncio.TimeoutError as e:
            logger.warning("Timeout after %.1fs fetching %s", timeout_val, url)
            raise FetchError(url, f"timeout of {timeout_val:g}s exceeded") from e
        except (aiohttp.ClientError, ValueError) as e:
            logger.warning("Request failed for %s: %s", url, e)
            raise FetchError(url, str(e) or e.__class__.__name__) from e

    async def fetch_many(self, urls: List[str], timeout: Optional[float] = None) -> List[FetchResult | FetchError]:
        """
        Fetches several URLs concurrently (bounded by the semaphore).
        Results come back in input order; failed fetches are returned as FetchError instances.
        """
        async def _guarded(u: str):
            try:
                return await self.perform_request(u, timeout=timeout)
            except FetchError as e:
                return e

        return list(await asyncio.gather(*(_guarded(u) for u in urls)))

    async def _read_content(self, response, url) -> Optional[str]:
        """Helper to read response body text safely."""
        content = None
        try:
            content = await asyncio.wait_for(response.text(), timeout=self.read_timeout)
        except asyncio.TimeoutError:
            logger.warning("Timeout reading response body for %s", url)
        except UnicodeDecodeError:
            # Fallback decoding
            content_bytes = await response.read()
            content = content_bytes.decode('utf-8', errors='replace')
        return content
