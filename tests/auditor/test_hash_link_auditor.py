import pytest

from hashlink_auditor.dom.classifier import HashLinkAuditor
from hashlink_auditor.dom.document import DocumentTree, InvalidDocument
from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache

SAMPLE_PAGE = (
    '<header><nav><a href="#">Home</a></nav></header>'
    '<footer><a href="/#">Top</a></footer>'
    '<p><a href="#/">Jump</a></p>'
)

SITE_HEADER = '<header class="site"><nav><a href="#">Menu</a><a href="/shop">Shop</a></nav></header>'


@pytest.fixture
def auditor():
    return HashLinkAuditor(ProcessedHeaderCache())


def _audit(auditor, html, url=None):
    return auditor.audit(DocumentTree.from_html(html, url=url))


def test_end_to_end_sample_page(auditor):
    data = _audit(auditor, SAMPLE_PAGE).to_json_dict()

    assert data["hasHashLinks"] is True
    assert [link["text"] for link in data["headerHashLinks"]] == ["Home"]
    assert [link["text"] for link in data["footerHashLinks"]] == ["Top"]
    assert [link["text"] for link in data["hashLinks"]] == ["Jump"]

    assert data["hasHeaderHashLinks"] is True
    assert data["hasFooterHashLinks"] is True
    assert data["headerStats"] == {"newHeadersFound": 2, "skippedLinks": 0, "totalHeadersProcessed": 2}


def test_zone_details_are_reported(auditor):
    data = _audit(auditor, SAMPLE_PAGE).to_json_dict()

    header_link = data["headerHashLinks"][0]
    assert header_link["href"] == "#"
    assert header_link["zone"] == {"kind": "header", "selectorLabel": "nav", "container": "nav"}

    content_link = data["hashLinks"][0]
    assert content_link["href"] == "#/"
    assert "zone" not in content_link


def test_page_without_dead_links(auditor):
    data = _audit(auditor, '<p><a href="/about">About</a><a href="#section">Jump</a><a>none</a></p>').to_json_dict()
    assert data["hasHashLinks"] is False
    assert data["hashLinks"] == []
    assert data["headerHashLinks"] == []
    assert data["footerHashLinks"] == []


def test_one_record_per_dead_anchor_in_document_order(auditor):
    html = '<p><a href="#">A</a><a href="/x">skip</a><a href=" /# ">B</a></p><div><a href="#/">C</a></div>'
    dead = auditor.find_dead_links(DocumentTree.from_html(html))
    assert [d.record.text for d in dead] == ["A", "B", "C"]
    assert [d.record.href for d in dead] == ["#", "/#", "#/"]


def test_unzoned_links_are_never_deduplicated(auditor):
    html = '<main><a href="#">Read more</a></main>'
    _audit(auditor, html)
    second = _audit(auditor, html)
    assert len(second.hash_links) == 1


def test_repeated_header_is_reported_once_across_pages(auditor):
    first = _audit(auditor, f"{SITE_HEADER}<p>Page one</p>", url="https://example.com/1")
    second = _audit(auditor, f"{SITE_HEADER}<p>Page two</p>", url="https://example.com/2")

    assert [link.text for link in first.header_hash_links] == ["Menu"]
    assert first.header_stats.new_headers_found == 1
    assert first.header_stats.total_headers_processed == 1

    assert second.header_hash_links == []
    assert second.header_stats.new_headers_found == 0
    assert second.header_stats.skipped_links == 1
    assert second.header_stats.total_headers_processed == 1


def test_changed_header_is_a_new_container(auditor):
    _audit(auditor, SITE_HEADER)
    other = _audit(auditor, '<header class="site"><nav><a href="#">Account</a></nav></header>')

    assert [link.text for link in other.header_hash_links] == ["Account"]
    assert other.header_stats.new_headers_found == 1
    assert other.header_stats.total_headers_processed == 2


def test_duplicate_container_on_same_page_is_suppressed(auditor):
    html = '<nav><a href="#">Menu</a></nav><nav><a href="#">Menu</a></nav>'
    report = _audit(auditor, html)
    assert len(report.header_hash_links) == 1
    assert report.header_stats.skipped_links == 1


def test_fresh_cache_reports_again():
    _audit(HashLinkAuditor(ProcessedHeaderCache()), SITE_HEADER)
    report = _audit(HashLinkAuditor(ProcessedHeaderCache()), SITE_HEADER)
    assert len(report.header_hash_links) == 1


def test_links_in_footer_role_are_footer_links(auditor):
    report = _audit(auditor, '<div role="contentinfo"><a href="#">Privacy</a></div>')
    assert [link.text for link in report.footer_hash_links] == ["Privacy"]
    assert report.footer_hash_links[0].zone.selector_label == '[role="contentinfo"]'


def test_audit_requires_a_document_tree(auditor):
    with pytest.raises(InvalidDocument):
        auditor.audit(None)


@pytest.mark.parametrize("html", [None, "", "   \n ", "\ufeff"])
def test_missing_or_empty_html_is_invalid(html):
    with pytest.raises(InvalidDocument):
        DocumentTree.from_html(html)
