import logging
from typing import Any, Callable, Dict, List, Optional

from hashlink_auditor.dom.classifier import HashLinkAuditor
from hashlink_auditor.dom.document import DocumentTree, InvalidDocument
from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache
from hashlink_auditor.model import HashLinkReport
from hashlink_shell.core.loop_runner import run_on_main_loop
from page_fetcher.model import FetchError, FetchResult, SitemapParseError
from page_fetcher.services.http_request_service import HttpRequestService
from page_fetcher.services.sitemap_parse_service import SitemapParseService
from page_fetcher.utils.url_utils import UrlUtils

logger = logging.getLogger(__name__)

NOT_A_SITEMAP = "The provided URL does not appear to be a valid sitemap"


def failure_payload(url: str, error: str) -> Dict[str, Any]:
    """Response body for a page that could not be checked."""
    return {
        "success": False,
        "url": url,
        "error": error,
        "hasHashLinks": False,
        "hashLinks": [],
        "headerHashLinks": [],
        "footerHashLinks": []
    }


class PageCheckController:
    """
    Orchestrates fetch -> parse -> audit for single pages and explicit URL batches,
    and exposes the raw page and sitemap lookups used by the front end.
    """

    def __init__(
            self,
            cache: ProcessedHeaderCache,
            config: Optional[Dict[str, Any]] = None,
            fetcher_factory: Callable[..., HttpRequestService] = HttpRequestService
    ):
        self.cache = cache
        self.config = config or {}
        self.fetcher_factory = fetcher_factory
        self.auditor = HashLinkAuditor(cache)
        self.sitemap_service = SitemapParseService()

        session_config = self.config.get('session', {})
        self.default_timeout = float(session_config.get('time_out', 10))
        self.check_timeout = float(session_config.get('check_page_timeout', 15))

    # --- Fetching ---

    async def _fetch_one(self, url: str, timeout: float) -> FetchResult:
        async with self.fetcher_factory(self.config) as fetcher:
            return await fetcher.perform_request(url, timeout=timeout)

    async def _fetch_all(self, urls: List[str], timeout: float) -> List[FetchResult | FetchError]:
        async with self.fetcher_factory(self.config) as fetcher:
            return await fetcher.fetch_many(urls, timeout=timeout)

    def fetch(self, url: str, timeout: Optional[float] = None) -> FetchResult:
        """
        Fetches one URL on the background loop.

        Raises:
            FetchError: when the URL is invalid, the request fails or the
                server answers with a 4xx/5xx status.
        """
        prepared = UrlUtils.prepare_request_url(url)
        if not prepared:
            raise FetchError(url, f"Invalid URL: {url!r}")
        result = run_on_main_loop(self._fetch_one(prepared, timeout or self.default_timeout))
        if result.status >= 400:
            raise FetchError(url, f"Request failed with status code {result.status}")
        return result

    # --- Auditing ---

    def audit_html(self, html: Optional[str], url: Optional[str] = None) -> HashLinkReport:
        """Parses and audits an already fetched body. Raises InvalidDocument."""
        tree = DocumentTree.from_html(html, url=url)
        return self.auditor.audit(tree)

    def _audit_fetch_result(self, url: str, result: FetchResult) -> Dict[str, Any]:
        if result.status >= 400:
            return failure_payload(url, f"Request failed with status code {result.status}")
        if not result.is_html:
            return failure_payload(url, "Not an HTML page")

        try:
            report = self.audit_html(result.content, url=url)
        except InvalidDocument as e:
            logger.warning("Could not audit %s: %s", url, e)
            return failure_payload(url, str(e))

        return {"success": True, "url": url, **report.to_json_dict()}

    def check_page(self, url: str) -> Dict[str, Any]:
        """Fetches a page and reports its dead hash links. Never raises for fetch problems."""
        try:
            result = self.fetch(url, timeout=self.check_timeout)
        except FetchError as e:
            logger.error("Error checking page %s for hash links: %s", url, e.message)
            return failure_payload(url, e.message)

        return self._audit_fetch_result(url, result)

    def check_pages(
            self,
            urls: List[str],
            progress_callback: Optional[Callable[[int, int], None]] = None
    ) -> List[Dict[str, Any]]:
        """
        Checks an explicit list of URLs.
        Pages are fetched concurrently but audited one by one in input order, so the
        header cache sees them in a deterministic sequence.
        """
        prepared: List[Optional[str]] = [UrlUtils.prepare_request_url(u) for u in urls]
        fetchable = [p for p in prepared if p]
        fetched = run_on_main_loop(self._fetch_all(fetchable, self.check_timeout)) if fetchable else []
        by_url = dict(zip(fetchable, fetched))

        results = []
        total = len(urls)
        for i, (url, prepared_url) in enumerate(zip(urls, prepared)):
            outcome = by_url.get(prepared_url) if prepared_url else None
            if outcome is None:
                results.append(failure_payload(url, f"Invalid URL: {url!r}"))
            elif isinstance(outcome, FetchError):
                results.append(failure_payload(url, outcome.message))
            else:
                results.append(self._audit_fetch_result(url, outcome))

            if progress_callback:
                progress_callback(i + 1, total)

        return results

    # --- Raw page & sitemap lookups ---

    def fetch_page(self, url: str) -> Dict[str, Any]:
        """
        Returns the raw body of a URL. XML bodies are additionally parsed as sitemap.

        Raises:
            FetchError: when the page cannot be retrieved.
        """
        result = self.fetch(url)
        payload: Dict[str, Any] = {
            "success": True,
            "content": result.content,
            "isXml": result.is_xml
        }

        if result.is_xml:
            try:
                doc = self.sitemap_service.parse(result.content or "")
                payload["parsedXml"] = doc.model_dump()
            except SitemapParseError as e:
                logger.error("Error parsing XML from %s: %s", url, e)
                payload["xmlParseError"] = str(e)

        return payload

    def process_sitemap_index(self, url: str) -> Dict[str, Any]:
        """
        Lists the child sitemaps (for an index) or page URLs (for a urlset).
        Nothing listed is fetched.

        Raises:
            FetchError: when the sitemap cannot be retrieved.
            SitemapParseError: when the body is not a sitemap.
        """
        result = self.fetch(url)
        content = result.content or ""
        if not self.sitemap_service.looks_like_sitemap(content):
            raise SitemapParseError(NOT_A_SITEMAP)

        doc = self.sitemap_service.parse(content)
        return {
            "success": True,
            "isSitemapIndex": doc.is_sitemap_index,
            "sitemapUrls": [entry.model_dump() for entry in doc.sitemaps],
            "pageUrls": [entry.model_dump() for entry in doc.urls]
        }

    # --- Cache administration ---

    def cache_status(self) -> Dict[str, Any]:
        return {
            "totalHeadersProcessed": len(self.cache),
            "maxContainers": self.cache.max_containers
        }

    def reset_cache(self) -> Dict[str, Any]:
        self.cache.reset()
        return self.cache_status()
