# src/hashlink_shell/core/handlers/check_handler.py
import argparse
import json
import logging
import time
from pathlib import Path
from typing import Any, Dict, List, Optional

import pandas as pd
from tqdm.auto import tqdm

from hashlink_auditor.controllers.page_check_controller import PageCheckController
from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache
from hashlink_shell.core.managers.config_manager import config_manager
from hashlink_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)

EXPORT_COLUMNS = ["URL", "Zone", "Selector", "Container", "Text", "Href", "Context"]


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="hashlink check", description="Check pages for dead hash links.")
    parser.add_argument("urls", nargs="*", help="Page URLs to check, in order.")
    parser.add_argument("--urls-file", type=str, default=None, help="File with one URL per line.")
    parser.add_argument("--export", type=str, default=None, help="Write all dead links to a CSV file.")
    parser.add_argument("--json", action="store_true", help="Print the raw JSON reports instead of a summary.")
    return parser


def _read_urls_file(path: str) -> List[str]:
    lines = Path(path).read_text(encoding="utf-8").splitlines()
    return [line.strip() for line in lines if line.strip() and not line.lstrip().startswith("#")]


def handle_check(args: list[str], controller: Optional[PageCheckController] = None) -> int:
    """
    Handler for the 'check' command.
    Only the URLs given on the command line (or in --urls-file) are visited.
    """
    parser = _build_parser()
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    urls = list(parsed_args.urls)
    if parsed_args.urls_file:
        try:
            urls.extend(_read_urls_file(parsed_args.urls_file))
        except OSError as e:
            print(f"❌ Could not read URL file: {e}")
            return 1

    if not urls:
        parser.print_help()
        return 1

    if controller is None:
        config = config_manager.get_all()
        cache = ProcessedHeaderCache(max_containers=config_manager.get_nested("cache.max_containers", 0))
        controller = PageCheckController(cache, config)

    print(f"🚀 Checking {len(urls)} page(s) for dead hash links...")

    pbar = tqdm(total=len(urls), desc="Checking", unit="page", disable=parsed_args.json)

    def progress_update(current, total):
        pbar.n = current
        pbar.refresh()

    start = time.perf_counter()
    results = controller.check_pages(urls, progress_callback=progress_update)
    duration = time.perf_counter() - start
    pbar.close()

    if parsed_args.json:
        print(json.dumps(results, indent=2, ensure_ascii=False))
    else:
        _print_summary(results, duration)

    if parsed_args.export:
        _handle_export(parsed_args.export, flatten_results(results))

    return 0 if all(r.get("success") for r in results) else 2


def flatten_results(results: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
    """One row per reported dead link, across all checked pages."""
    rows = []
    for result in results:
        if not result.get("success"):
            continue
        for bucket, zone_name in (("headerHashLinks", "header"), ("footerHashLinks", "footer"), ("hashLinks", "content")):
            for link in result.get(bucket, []):
                zone = link.get("zone") or {}
                rows.append({
                    "URL": result["url"],
                    "Zone": zone_name,
                    "Selector": zone.get("selectorLabel", ""),
                    "Container": zone.get("container", ""),
                    "Text": link["text"],
                    "Href": link["href"],
                    "Context": link["context"]
                })
    return rows


def _print_summary(results: List[Dict[str, Any]], duration: float) -> None:
    print("\n" + "=" * 78)
    print("📊 HASH LINK SUMMARY")
    print("=" * 78)
    print(f"{'URL':<48} | {'HEADER':>6} | {'FOOTER':>6} | {'CONTENT':>7}")
    print("-" * 78)

    failed = 0
    for r in results:
        url = r.get("url", "")
        short_url = url if len(url) <= 48 else url[:45] + "..."
        if not r.get("success"):
            failed += 1
            print(f"{short_url:<48} | ❌ {r.get('error', 'unknown error')}")
            continue
        print(
            f"{short_url:<48} | {len(r['headerHashLinks']):>6} | "
            f"{len(r['footerHashLinks']):>6} | {len(r['hashLinks']):>7}"
        )

    stats = next((r["headerStats"] for r in reversed(results) if r.get("success")), None)
    print("-" * 78)
    print(f"Pages Checked:        {len(results)} ({failed} failed)")
    if stats:
        print(f"Containers in cache:  {stats['totalHeadersProcessed']}")
    print(f"Duration:             {duration:.2f} seconds")
    print("=" * 78 + "\n")


def _handle_export(filename: str, rows: List[Dict[str, Any]]) -> None:
    if not rows:
        print("ℹ️  No dead links to export.")
        return
    try:
        if not filename.endswith(".csv"):
            filename += ".csv"
        out_path = Path(filename)
        if out_path.parent == Path("."):
            out_path = PathUtils.get_export_dir() / out_path.name
        pd.DataFrame(rows, columns=EXPORT_COLUMNS).to_csv(out_path, index=False)
        print(f"✅ Report exported to: {out_path}")
    except Exception as e:
        logger.error("Export failed: %s", e)
        print(f"❌ Error exporting: {e}")
