# src/hashlink_auditor/dom/document.py
import logging
from typing import Iterator, List, Optional, Union

from bs4 import BeautifulSoup, Tag
from bs4.builder import ParserRejectedMarkup

logger = logging.getLogger(__name__)


class InvalidDocument(ValueError):
    """Raised when there is no usable HTML document to audit."""


class DocumentTree:
    """
    Request-scoped, read-only view over one parsed HTML body.

    Element references handed out by this class are plain `bs4.Tag` objects and
    are only meaningful while the tree itself is alive.
    """

    def __init__(self, soup: BeautifulSoup, url: Optional[str] = None):
        if not isinstance(soup, BeautifulSoup):
            raise InvalidDocument(f"Expected a BeautifulSoup document, got {type(soup).__name__}")
        self.soup = soup
        self.url = url

    @classmethod
    def from_html(cls, html: Union[str, bytes, None], url: Optional[str] = None) -> "DocumentTree":
        """
        Parses raw HTML into a DocumentTree.

        Raises:
            InvalidDocument: if the markup is missing, empty or rejected by the parser.
        """
        if html is None:
            raise InvalidDocument("No HTML content to parse")
        if isinstance(html, bytes):
            html = html.decode("utf-8", errors="replace")
        if not isinstance(html, str):
            raise InvalidDocument(f"Unsupported document type: {type(html).__name__}")

        # Basic cleanup of potentially dirty HTML (e.g., BOM)
        clean_html = html.replace('\ufeff', '').strip()
        if not clean_html:
            raise InvalidDocument("HTML content is empty")

        try:
            soup = BeautifulSoup(clean_html, 'html.parser')
        except ParserRejectedMarkup as e:
            raise InvalidDocument(f"HTML could not be parsed: {e}") from e

        return cls(soup, url=url)

    @property
    def root(self) -> BeautifulSoup:
        return self.soup

    def anchors(self) -> List[Tag]:
        """All <a> elements in document order."""
        return self.soup.find_all("a")

    def select(self, css: str) -> List[Tag]:
        return self.soup.select(css)

    @staticmethod
    def ancestors(element: Tag, include_self: bool = True) -> Iterator[Tag]:
        """
        Yields the element (optionally) and its ancestors, innermost first.
        Stops before the BeautifulSoup object itself.
        """
        current = element if include_self else element.parent
        while current is not None and not isinstance(current, BeautifulSoup):
            yield current
            current = current.parent
