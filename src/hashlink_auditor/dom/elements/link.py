from typing import Optional
from bs4 import BeautifulSoup, NavigableString, Tag
from bs4.element import PreformattedString

DEAD_HREFS = frozenset({"#", "/#", "#/"})

NO_TEXT = "[No text]"
NO_CONTEXT = "No context available"

CONTEXT_MAX_DEPTH = 3
CONTEXT_MAX_LENGTH = 100


def normalized_href(anchor: Tag) -> Optional[str]:
    """Returns the trimmed href attribute, or None when the anchor has none."""
    href = anchor.get("href")
    if href is None:
        return None
    if isinstance(href, list):
        href = " ".join(href)
    return href.strip()


def is_dead_href(href: Optional[str]) -> bool:
    """
    True for fragment-only targets that do nothing when clicked.
    Missing and empty hrefs are never dead.
    """
    if not href:
        return False
    return href.strip() in DEAD_HREFS


def _is_text_run(node) -> bool:
    # Comments, CDATA, doctypes etc. are NavigableStrings too but carry no visible text.
    return isinstance(node, NavigableString) and not isinstance(node, PreformattedString)


def format_label(anchor: Tag) -> str:
    """
    Builds a readable label for an anchor.

    Plain anchors return their trimmed text. Anchors that wrap elements (icon +
    label spans, for instance) get one segment per direct text run and per direct
    child element, in document order, joined with ' | '. Empty segments are dropped.
    """
    full_text = anchor.get_text().strip()

    if anchor.find(True, recursive=False) is None:
        return full_text or NO_TEXT

    parts = []
    for child in anchor.children:
        if isinstance(child, Tag):
            text = child.get_text().strip()
        elif _is_text_run(child):
            text = child.strip()
        else:
            continue
        if text:
            parts.append(text)

    return " | ".join(parts) or full_text or NO_TEXT


def extract_context(anchor: Tag) -> str:
    """
    Describes where an anchor lives.

    Looks at most three ancestors up (starting with the parent) for an id, then a
    class list. Without either, falls back to an excerpt of the parent's text,
    provided the parent says more than the link itself.
    """
    ancestor = anchor.parent
    depth = 0
    while ancestor is not None and not isinstance(ancestor, BeautifulSoup) and depth < CONTEXT_MAX_DEPTH:
        el_id = (ancestor.get("id") or "").strip()
        if el_id:
            return f'Inside element with id="{el_id}"'

        classes = ancestor.get("class") or []
        class_str = (" ".join(classes) if isinstance(classes, list) else str(classes)).strip()
        if class_str:
            return f'Inside element with class="{class_str}"'

        ancestor = ancestor.parent
        depth += 1

    parent = anchor.parent
    if parent is not None:
        parent_text = parent.get_text().strip()
        if parent_text and len(parent_text) > len(anchor.get_text().strip()):
            excerpt = parent_text[:CONTEXT_MAX_LENGTH]
            if len(parent_text) > CONTEXT_MAX_LENGTH:
                excerpt += "..."
            return f'Near text: "{excerpt}"'

    return NO_CONTEXT


def link_identity_key(text: str, href: str, selector_label: str) -> str:
    """Key under which a zoned dead link is remembered by the header cache."""
    return f"{text}-{href}-{selector_label}"
