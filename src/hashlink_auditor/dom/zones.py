# src/hashlink_auditor/dom/zones.py
import logging
from typing import List, NamedTuple, Optional, Sequence, Set, Tuple

from bs4 import Tag

from .document import DocumentTree

logger = logging.getLogger(__name__)

HEADER = "header"
FOOTER = "footer"


class ZoneRule(NamedTuple):
    """
    One catalogue entry: which zone kind an element belongs to when it matches.
    matcher is one of 'tag', 'class', 'id' or 'role'.
    """
    kind: str
    matcher: str
    value: str

    @property
    def css(self) -> str:
        if self.matcher == "tag":
            return self.value
        if self.matcher == "class":
            return f".{self.value}"
        if self.matcher == "id":
            return f"#{self.value}"
        return f'[role="{self.value}"]'

    @property
    def label(self) -> str:
        """The selector as reported to the user; identical to the CSS form."""
        return self.css


# Header rules come first: on the same element, catalogue order decides.
ZONE_CATALOGUE: Tuple[ZoneRule, ...] = (
    ZoneRule(HEADER, "tag", "header"),
    ZoneRule(HEADER, "tag", "nav"),
    ZoneRule(HEADER, "class", "header"),
    ZoneRule(HEADER, "id", "header"),
    ZoneRule(HEADER, "class", "navigation"),
    ZoneRule(HEADER, "id", "navigation"),
    ZoneRule(HEADER, "class", "main-nav"),
    ZoneRule(HEADER, "id", "main-nav"),
    ZoneRule(HEADER, "class", "navbar"),
    ZoneRule(HEADER, "id", "navbar"),

    ZoneRule(FOOTER, "tag", "footer"),
    ZoneRule(FOOTER, "class", "footer"),
    ZoneRule(FOOTER, "id", "footer"),
    ZoneRule(FOOTER, "class", "footer-bottom"),
    ZoneRule(FOOTER, "class", "footer__menu"),
    ZoneRule(FOOTER, "class", "footer__links"),
    ZoneRule(FOOTER, "class", "site-footer"),
    ZoneRule(FOOTER, "id", "site-footer"),
    ZoneRule(FOOTER, "class", "bottom-footer"),
    ZoneRule(FOOTER, "class", "page-footer"),
    ZoneRule(FOOTER, "class", "copyright-footer"),
    ZoneRule(FOOTER, "role", "contentinfo"),
)


class ZoneMembership(NamedTuple):
    """The nearest enclosing zone of an element."""
    kind: str
    container: Tag
    selector: str


def describe_container(container: Tag) -> str:
    """Readable container description, e.g. 'div (id=top) (class=navbar fixed)'."""
    description = container.name.lower()
    el_id = container.get("id")
    if el_id:
        description += f" (id={el_id})"
    classes = container.get("class")
    if classes:
        class_str = " ".join(classes) if isinstance(classes, list) else str(classes)
        if class_str.strip():
            description += f" (class={class_str})"
    return description


class ZoneLocator:
    """
    Resolves the nearest header/footer zone for elements of one document.

    The catalogue is evaluated once at construction; each rule is turned into the
    set of matching elements. Membership is tracked by object identity because
    bs4 compares tags structurally, and two identical navigation blocks are still
    two different containers.
    """

    def __init__(self, tree: DocumentTree, catalogue: Sequence[ZoneRule] = ZONE_CATALOGUE):
        self.tree = tree
        self.catalogue = tuple(catalogue)
        self._materialized: List[Tuple[ZoneRule, Set[int]]] = [
            (rule, {id(el) for el in tree.select(rule.css)})
            for rule in self.catalogue
        ]
        logger.debug(
            "Zone catalogue materialized: %d of %d rules matched at least one element",
            sum(1 for _, members in self._materialized if members), len(self.catalogue)
        )

    def locate(self, element: Tag) -> Optional[ZoneMembership]:
        """
        Walks from the element (inclusive) up to the root; the first ancestor that
        matches any rule decides, with rules tried in catalogue order.
        """
        for node in DocumentTree.ancestors(element, include_self=True):
            node_id = id(node)
            for rule, members in self._materialized:
                if node_id in members:
                    return ZoneMembership(rule.kind, node, rule.label)
        return None


def locate_zone(element: Tag, tree: DocumentTree) -> Optional[ZoneMembership]:
    """One-off lookup; build a ZoneLocator directly when classifying many elements."""
    return ZoneLocator(tree).locate(element)
