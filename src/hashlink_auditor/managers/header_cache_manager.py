# src/hashlink_auditor/managers/header_cache_manager.py
import hashlib
import logging
import re
import threading
from collections import OrderedDict
from enum import Enum
from typing import Set

from bs4 import Tag

from hashlink_auditor.model import HeaderStats

logger = logging.getLogger(__name__)

FINGERPRINT_MARKUP_LIMIT = 200

_WHITESPACE = re.compile(r"\s+")


def create_container_fingerprint(container: Tag) -> str:
    """
    Lossy structural identity of a zone container: tag name, sorted class list and
    a short digest of the first 200 characters of its whitespace-normalized inner
    markup. Containers that only differ after that boundary share a fingerprint.
    """
    tag_name = (container.name or "").lower()
    classes = container.get("class") or []
    if not isinstance(classes, list):
        classes = str(classes).split()
    class_list = " ".join(sorted(classes))

    inner_html = _WHITESPACE.sub(" ", container.decode_contents()).strip()
    inner_html = inner_html[:FINGERPRINT_MARKUP_LIMIT]
    digest = hashlib.sha1(inner_html.encode("utf-8")).hexdigest()[:12]

    return f"{tag_name}-{class_list}-{digest}"


class CacheOutcome(Enum):
    NEW_CONTAINER = "new_container"
    NEW_LINK = "new_link"
    DUPLICATE = "duplicate"


class ProcessedHeaderCache:
    """
    Remembers which dead links were already reported per container fingerprint.

    One instance is shared by every request of a server (or every page of a batch
    run) and must be passed in explicitly. Access is serialized with a lock since
    Flask serves requests on several threads.

    Eviction: when `max_containers` is positive, the least recently touched
    fingerprint is dropped once the cap is exceeded. `reset()` empties the cache.
    """

    def __init__(self, max_containers: int = 0):
        self.max_containers = max(0, int(max_containers or 0))
        self._entries: "OrderedDict[str, Set[str]]" = OrderedDict()
        self._lock = threading.Lock()

    def record(self, fingerprint: str, link_key: str) -> CacheOutcome:
        """Registers a (fingerprint, link) sighting and tells whether it was new."""
        with self._lock:
            seen = self._entries.get(fingerprint)
            if seen is None:
                self._entries[fingerprint] = {link_key}
                self._evict_if_needed()
                return CacheOutcome.NEW_CONTAINER

            self._entries.move_to_end(fingerprint)
            if link_key in seen:
                return CacheOutcome.DUPLICATE

            seen.add(link_key)
            return CacheOutcome.NEW_LINK

    def _evict_if_needed(self) -> None:
        if not self.max_containers:
            return
        while len(self._entries) > self.max_containers:
            evicted, _ = self._entries.popitem(last=False)
            logger.debug("Header cache full (%d), evicted fingerprint %s", self.max_containers, evicted)

    def reset(self) -> None:
        with self._lock:
            count = len(self._entries)
            self._entries.clear()
        logger.info("Header cache reset (%d fingerprints dropped)", count)

    def links_for(self, fingerprint: str) -> Set[str]:
        with self._lock:
            return set(self._entries.get(fingerprint, ()))

    def __contains__(self, fingerprint: str) -> bool:
        with self._lock:
            return fingerprint in self._entries

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class FingerprintDeduplicator:
    """Per-request view on the shared cache that also keeps the request's counters."""

    def __init__(self, cache: ProcessedHeaderCache):
        self.cache = cache
        self.new_headers_found = 0
        self.skipped_links = 0

    def should_report(self, container: Tag, link_key: str) -> bool:
        outcome = self.cache.record(create_container_fingerprint(container), link_key)
        if outcome is CacheOutcome.NEW_CONTAINER:
            self.new_headers_found += 1
        elif outcome is CacheOutcome.DUPLICATE:
            self.skipped_links += 1
            return False
        return True

    def stats(self) -> HeaderStats:
        return HeaderStats(
            new_headers_found=self.new_headers_found,
            skipped_links=self.skipped_links,
            total_headers_processed=len(self.cache)
        )
