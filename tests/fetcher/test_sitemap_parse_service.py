import warnings

import pytest
from bs4 import XMLParsedAsHTMLWarning

from page_fetcher.model import SitemapParseError
from page_fetcher.services.sitemap_parse_service import SitemapParseService

SITEMAP_INDEX = """<?xml version="1.0" encoding="UTF-8"?>
<sitemapindex xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <sitemap>
    <loc> https://example.com/sitemap-pages.xml </loc>
    <lastmod>2024-01-01</lastmod>
  </sitemap>
  <sitemap><loc>https://example.com/sitemap-posts.xml</loc></sitemap>
  <sitemap><lastmod>2024-02-02</lastmod></sitemap>
</sitemapindex>"""

URLSET = """<?xml version="1.0" encoding="UTF-8"?>
<urlset xmlns="http://www.sitemaps.org/schemas/sitemap/0.9">
  <url>
    <loc>https://example.com/</loc>
    <lastmod>2024-03-01</lastmod>
    <changefreq>daily</changefreq>
    <priority>1.0</priority>
  </url>
  <url><loc>https://example.com/about</loc></url>
</urlset>"""


@pytest.fixture
def service():
    return SitemapParseService()


def test_parse_sitemap_index(service):
    doc = service.parse(SITEMAP_INDEX)

    assert doc.is_sitemap_index is True
    assert [s.loc for s in doc.sitemaps] == [
        "https://example.com/sitemap-pages.xml",
        "https://example.com/sitemap-posts.xml",
    ]
    assert doc.sitemaps[0].lastmod == "2024-01-01"
    assert doc.sitemaps[1].lastmod == ""
    assert doc.urls == []


def test_parse_urlset(service):
    doc = service.parse(URLSET)

    assert doc.is_sitemap_index is False
    assert doc.sitemaps == []
    assert [u.loc for u in doc.urls] == ["https://example.com/", "https://example.com/about"]

    first = doc.urls[0]
    assert first.changefreq == "daily"
    assert first.priority == "1.0"
    assert doc.urls[1].lastmod == ""


@pytest.mark.parametrize("xml", ["", "   ", "<html><body>Hi</body></html>", "<?xml version='1.0'?><rss></rss>"])
def test_non_sitemaps_are_rejected(service, xml):
    with pytest.raises(SitemapParseError):
        service.parse(xml)


def test_looks_like_sitemap():
    assert SitemapParseService.looks_like_sitemap(SITEMAP_INDEX)
    assert SitemapParseService.looks_like_sitemap(URLSET)
    assert not SitemapParseService.looks_like_sitemap("<html></html>")
    assert not SitemapParseService.looks_like_sitemap("")


def test_parse_does_not_warn_or_change_global_warning_filters(service):
    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        service.parse(URLSET)
        filters_after = list(warnings.filters)

    assert not [w for w in caught if issubclass(w.category, XMLParsedAsHTMLWarning)]
    assert not [f for f in filters_after if f[2] is XMLParsedAsHTMLWarning]
