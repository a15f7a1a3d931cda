import pytest

from hashlink_auditor.controllers.page_check_controller import PageCheckController
from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache
from page_fetcher.model import FetchError


class FakeFetcher:
    """Stands in for HttpRequestService; serves canned FetchResults by URL."""

    def __init__(self, pages, config=None):
        self.pages = pages
        self.config = config

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return False

    async def perform_request(self, url, timeout=None):
        page = self.pages.get(url)
        if page is None:
            raise FetchError(url, "connect ECONNREFUSED")
        return page

    async def fetch_many(self, urls, timeout=None):
        results = []
        for url in urls:
            try:
                results.append(await self.perform_request(url, timeout=timeout))
            except FetchError as e:
                results.append(e)
        return results


@pytest.fixture
def pages():
    return {}


@pytest.fixture
def controller(pages):
    return PageCheckController(
        ProcessedHeaderCache(),
        config={"session": {"time_out": 5, "check_page_timeout": 5}},
        fetcher_factory=lambda config: FakeFetcher(pages, config)
    )
