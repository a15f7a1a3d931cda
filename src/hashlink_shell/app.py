from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from hashlink_shell.core.handlers.check_handler import handle_check
from hashlink_shell.core.handlers.sitemap_handler import handle_sitemap
from hashlink_shell.core.loop_runner import ensure_background_loop
from hashlink_shell.core.managers.config_manager import config_manager
from hashlink_shell.core.utils.configure_logging import configure_logger

logger = logging.getLogger(__name__)

COMMANDS = ("serve", "check", "sitemap")


def _setup_logging() -> None:
    configure_logger(
        config_manager.get_nested("debug.level", "INFO"),
        module_specific_levels=config_manager.get_nested("debug.module_levels"),
        silenced_loggers=config_manager.get_nested("debug.silenced_loggers")
    )


def _setup_windows_event_loop_if_needed() -> None:
    """Installs Windows compatible asyncio policy if possible."""
    if not sys.platform.startswith("win"):
        return
    try:
        policy = asyncio.WindowsSelectorEventLoopPolicy()
        asyncio.set_event_loop_policy(policy)
        logger.info("Using WindowsSelectorEventLoopPolicy for asyncio on Windows.")
    except Exception as exc:  # pragma: no cover
        logger.warning("Could not set WindowsSelectorEventLoopPolicy: %s", exc)


def handle_serve(args: list[str]) -> int:
    parser = argparse.ArgumentParser(prog="hashlink serve", description="Run the hash-link API server.")
    parser.add_argument("--host", type=str, default=config_manager.get_nested("server.host", "127.0.0.1"))
    parser.add_argument("--port", type=int, default=config_manager.get_nested("server.port", 3000))
    parser.add_argument("--debug", action="store_true", help="Enable Flask debug mode.")
    try:
        parsed_args = parser.parse_args(args)
    except SystemExit:
        return 1

    # Flask is only imported for 'serve'
    from hashlink_auditor.server.app import run_server
    run_server(parsed_args.host, parsed_args.port, debug=parsed_args.debug)
    return 0


def main(argv: list[str] | None = None) -> int:
    """Entry point of the 'hashlink' command."""
    argv = list(sys.argv[1:] if argv is None else argv)

    if not argv or argv[0] not in COMMANDS:
        print("usage: hashlink {serve,check,sitemap} ...")
        print("  serve     run the API server")
        print("  check     check one or more pages for dead hash links")
        print("  sitemap   list the URLs of a sitemap or sitemap index")
        return 0 if not argv or argv[0] in ("-h", "--help") else 1

    _setup_logging()
    _setup_windows_event_loop_if_needed()
    ensure_background_loop()
    logger.debug("Background asyncio event loop is running.")

    command, rest = argv[0], argv[1:]
    if command == "serve":
        return handle_serve(rest)
    if command == "check":
        return handle_check(rest)
    return handle_sitemap(rest)


if __name__ == "__main__":
    sys.exit(main())
