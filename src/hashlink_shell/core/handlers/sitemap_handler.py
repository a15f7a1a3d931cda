# src/hashlink_shell/core/handlers/sitemap_handler.py
import argparse
import logging
from typing import Optional

from hashlink_auditor.controllers.page_check_controller import PageCheckController
from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache
from hashlink_shell.core.managers.config_manager import config_manager
from page_fetcher.model import FetchError, SitemapParseError

logger = logging.getLogger(__name__)


def handle_sitemap(args: list[str], controller: Optional[PageCheckController] = None) -> int:
    """
    Handler for the 'sitemap' command: lists what a sitemap (index) points to.
    The listed URLs can be fed to 'check' by the user; they are not visited here.
    """
    parser = argparse.ArgumentParser(prog="hashlink sitemap", description="List the URLs in a sitemap.")
    parser.add_argument("url", help="URL of a sitemap.xml or sitemap index.")
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    if controller is None:
        controller = PageCheckController(ProcessedHeaderCache(), config_manager.get_all())

    try:
        data = controller.process_sitemap_index(parsed_args.url)
    except SitemapParseError as e:
        print(f"❌ {e}")
        return 1
    except FetchError as e:
        print(f"❌ Failed to fetch sitemap: {e.message}")
        return 1

    if data["isSitemapIndex"]:
        print(f"🗂️  Sitemap index with {len(data['sitemapUrls'])} sitemap(s):")
        for entry in data["sitemapUrls"]:
            lastmod = f"  (lastmod {entry['lastmod']})" if entry.get("lastmod") else ""
            print(f"  - {entry['loc']}{lastmod}")

    if data["pageUrls"]:
        print(f"📄 {len(data['pageUrls'])} page URL(s):")
        for entry in data["pageUrls"]:
            print(f"  {entry['loc']}")

    if not data["isSitemapIndex"] and not data["pageUrls"]:
        print("ℹ️  The sitemap is empty.")

    return 0
