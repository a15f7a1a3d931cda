# src/hashlink_auditor/dom/classifier.py
import logging
from typing import List, NamedTuple, Optional, Sequence

from .document import DocumentTree, InvalidDocument
from .elements.link import (
    extract_context,
    format_label,
    is_dead_href,
    link_identity_key,
    normalized_href,
)
from .zones import FOOTER, ZONE_CATALOGUE, ZoneLocator, ZoneMembership, ZoneRule, describe_container
from ..managers.header_cache_manager import FingerprintDeduplicator, ProcessedHeaderCache
from ..model import HashLinkReport, LinkRecord, ZoneInfo

logger = logging.getLogger(__name__)


class DeadLink(NamedTuple):
    """A dead anchor before deduplication."""
    record: LinkRecord
    membership: Optional[ZoneMembership]


class HashLinkAuditor:
    """
    Finds anchors pointing at '#', '/#' or '#/' and sorts them into header,
    footer and content lists.

    Header and footer links are filtered through the shared ProcessedHeaderCache so
    the same boilerplate link is reported only once per container shape.
    """

    def __init__(self, cache: ProcessedHeaderCache, catalogue: Sequence[ZoneRule] = ZONE_CATALOGUE):
        self.cache = cache
        self.catalogue = tuple(catalogue)

    def find_dead_links(self, tree: DocumentTree) -> List[DeadLink]:
        """
        Every dead anchor of the document, in document order, with its zone.

        Raises:
            InvalidDocument: if `tree` is not a DocumentTree.
        """
        if not isinstance(tree, DocumentTree):
            raise InvalidDocument("A parsed DocumentTree is required")

        locator = ZoneLocator(tree, self.catalogue)
        dead_links: List[DeadLink] = []

        for anchor in tree.anchors():
            href = normalized_href(anchor)
            if not is_dead_href(href):
                continue

            membership = locator.locate(anchor)
            zone = None
            if membership:
                zone = ZoneInfo(
                    kind=membership.kind,
                    selector_label=membership.selector,
                    container=describe_container(membership.container)
                )

            record = LinkRecord(
                text=format_label(anchor),
                href=href,
                context=extract_context(anchor),
                zone=zone
            )
            dead_links.append(DeadLink(record, membership))

        return dead_links

    def audit(self, tree: DocumentTree) -> HashLinkReport:
        """Runs the classifier and the deduplicator and assembles the report."""
        dedup = FingerprintDeduplicator(self.cache)
        report = HashLinkReport()

        for record, membership in self.find_dead_links(tree):
            if membership is None:
                report.hash_links.append(record)
                continue

            key = link_identity_key(record.text, record.href, membership.selector)
            if not dedup.should_report(membership.container, key):
                continue

            if membership.kind == FOOTER:
                report.footer_hash_links.append(record)
            else:
                report.header_hash_links.append(record)

        report.header_stats = dedup.stats()

        logger.debug(
            "Audit %s: %d content, %d header, %d footer dead links (%d skipped)",
            tree.url or "<document>", len(report.hash_links), len(report.header_hash_links),
            len(report.footer_hash_links), dedup.skipped_links
        )
        return report
