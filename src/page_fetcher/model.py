from typing import Optional, List, Dict
from pydantic import BaseModel, Field


class FetchError(Exception):
    """Raised when a page could not be retrieved (network error, timeout, bad URL)."""

    def __init__(self, url: str, message: str):
        super().__init__(message)
        self.url = url
        self.message = message


class FetchResult(BaseModel):
    """
    Outcome of a single GET request.
    The body is kept as decoded text; binary payloads are not the concern of this service.
    """
    url: str
    final_url: Optional[str] = None
    status: int
    content_type: str = ""
    content: Optional[str] = None
    headers: Dict[str, str] = Field(default_factory=dict)
    elapsed_time: float = 0.0

    @property
    def is_html(self) -> bool:
        """True for content types the hash-link checker accepts (html or any text type)."""
        ct = self.content_type.lower()
        return "html" in ct or "text" in ct

    @property
    def is_xml(self) -> bool:
        """True when the header or the body itself says this is an XML document (e.g. a sitemap)."""
        if "xml" in self.content_type.lower():
            return True
        if not self.content:
            return False
        head = self.content.lstrip()[:100]
        return head.startswith(("<?xml", "<urlset", "<sitemapindex"))


class SitemapParseError(ValueError):
    """Raised when a document is not a <urlset> or <sitemapindex> sitemap."""


class SitemapEntry(BaseModel):
    """One <sitemap> entry of a sitemap index."""
    loc: str
    lastmod: str = ""


class SitemapUrl(BaseModel):
    """One <url> entry of a regular sitemap."""
    loc: str
    lastmod: str = ""
    changefreq: str = ""
    priority: str = ""


class SitemapDocument(BaseModel):
    """Structural mapping of a sitemap or sitemap index document."""
    is_sitemap_index: bool = False
    sitemaps: List[SitemapEntry] = Field(default_factory=list)
    urls: List[SitemapUrl] = Field(default_factory=list)
