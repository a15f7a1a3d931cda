# src/page_fetcher/services/sitemap_parse_service.py
import logging
import warnings

from bs4 import BeautifulSoup, XMLParsedAsHTMLWarning

from page_fetcher.model import SitemapDocument, SitemapEntry, SitemapParseError, SitemapUrl

logger = logging.getLogger(__name__)


class SitemapParseService:
    """
    Maps <sitemapindex> and <urlset> documents onto SitemapDocument objects.
    Listed URLs are only reported, never fetched.
    """

    @staticmethod
    def looks_like_sitemap(xml: str) -> bool:
        """Cheap pre-check used before attempting a full parse."""
        return bool(xml) and ("<sitemapindex" in xml or "<urlset" in xml)

    def parse(self, xml: str) -> SitemapDocument:
        if not xml or not xml.strip():
            raise SitemapParseError("Empty sitemap document")

        with warnings.catch_warnings():
            warnings.simplefilter("ignore", XMLParsedAsHTMLWarning)
            soup = BeautifulSoup(xml, "html.parser")
        index_root = soup.find("sitemapindex")
        urlset_root = soup.find("urlset")

        if index_root is None and urlset_root is None:
            raise SitemapParseError("Document has neither a <sitemapindex> nor a <urlset> root")

        doc = SitemapDocument(is_sitemap_index=index_root is not None)

        if index_root is not None:
            for node in index_root.find_all("sitemap"):
                loc = self._child_text(node, "loc")
                if loc:
                    doc.sitemaps.append(SitemapEntry(loc=loc, lastmod=self._child_text(node, "lastmod")))

        if urlset_root is not None:
            for node in urlset_root.find_all("url"):
                loc = self._child_text(node, "loc")
                if not loc:
                    continue
                doc.urls.append(SitemapUrl(
                    loc=loc,
                    lastmod=self._child_text(node, "lastmod"),
                    changefreq=self._child_text(node, "changefreq"),
                    priority=self._child_text(node, "priority")
                ))

        logger.debug(
            "Parsed sitemap: index=%s, %d child sitemaps, %d urls",
            doc.is_sitemap_index, len(doc.sitemaps), len(doc.urls)
        )
        return doc

    @staticmethod
    def _child_text(node, name: str) -> str:
        child = node.find(name)
        return child.get_text(strip=True) if child else ""
