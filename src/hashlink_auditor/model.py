from typing import Optional, List, Dict, Any
from pydantic import BaseModel, ConfigDict, Field


class ZoneInfo(BaseModel):
    """
    Structural zone of a dead link: which catalogue rule matched and on which container.
    `container` is a readable description such as 'nav (id=main) (class=navbar dark)'.
    """
    model_config = ConfigDict(populate_by_name=True)

    kind: str  # 'header' or 'footer'
    selector_label: str = Field(alias="selectorLabel")  # e.g. 'nav', '.navbar', '#footer'
    container: str = ""


class LinkRecord(BaseModel):
    """One dead anchor occurrence as returned to the caller."""
    text: str
    href: str
    context: str
    zone: Optional[ZoneInfo] = None


class HeaderStats(BaseModel):
    """Deduplication counters for one request plus the cumulative cache size."""
    model_config = ConfigDict(populate_by_name=True)

    new_headers_found: int = Field(default=0, alias="newHeadersFound")
    skipped_links: int = Field(default=0, alias="skippedLinks")
    total_headers_processed: int = Field(default=0, alias="totalHeadersProcessed")


class HashLinkReport(BaseModel):
    """
    The audit result for one document.
    Zone-less links go to `hash_links`; header and footer links are only listed
    when the dedup cache has not seen them inside an identical container before.
    """
    model_config = ConfigDict(populate_by_name=True)

    hash_links: List[LinkRecord] = Field(default_factory=list, alias="hashLinks")
    header_hash_links: List[LinkRecord] = Field(default_factory=list, alias="headerHashLinks")
    footer_hash_links: List[LinkRecord] = Field(default_factory=list, alias="footerHashLinks")
    header_stats: HeaderStats = Field(default_factory=HeaderStats, alias="headerStats")

    @property
    def has_hash_links(self) -> bool:
        return bool(self.hash_links or self.header_hash_links or self.footer_hash_links)

    def to_json_dict(self) -> Dict[str, Any]:
        """Serializes the report to the public camelCase JSON shape."""
        data = self.model_dump(by_alias=True, exclude_none=True)
        data["hasHashLinks"] = self.has_hash_links
        data["hasHeaderHashLinks"] = bool(self.header_hash_links)
        data["hasFooterHashLinks"] = bool(self.footer_hash_links)
        return data
