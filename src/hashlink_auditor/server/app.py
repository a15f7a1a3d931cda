"""
Hash-Link Auditor - API Server
Flask application exposing the dead hash-link checker and the page/sitemap lookups.
"""

import logging
from typing import Any, Dict, Optional

from flask import Flask

from hashlink_auditor.controllers.page_check_controller import PageCheckController
from hashlink_auditor.managers.header_cache_manager import ProcessedHeaderCache
from hashlink_auditor.server.routers.page_api_router import page_api_router
from hashlink_shell.core.loop_runner import ensure_background_loop
from hashlink_shell.core.managers.config_manager import config_manager

logger = logging.getLogger(__name__)


def create_app(
        config: Optional[Dict[str, Any]] = None,
        cache: Optional[ProcessedHeaderCache] = None,
        controller: Optional[PageCheckController] = None
) -> Flask:
    """
    Application factory. The header cache lives as long as the app; pass one in
    to share it (or to start from a fresh one in tests).
    """
    flask_app = Flask(__name__)
    config = config if config is not None else config_manager.get_all()

    # 1. Shared dedup state
    if cache is None:
        max_containers = config.get('cache', {}).get('max_containers', 0)
        cache = ProcessedHeaderCache(max_containers=max_containers)

    # 2. Controller (fetching happens on the background loop)
    if controller is None:
        ensure_background_loop()
        controller = PageCheckController(cache, config)

    flask_app.config['PAGE_CHECK_CONTROLLER'] = controller
    flask_app.config['CORS_ORIGIN'] = config.get('server', {}).get('cors_origin', '*')

    # 3. Register Blueprints
    flask_app.register_blueprint(page_api_router, url_prefix='/api')

    @flask_app.after_request
    def add_cors_headers(response):
        response.headers['Access-Control-Allow-Origin'] = flask_app.config['CORS_ORIGIN']
        response.headers['Access-Control-Allow-Methods'] = 'GET, DELETE, OPTIONS'
        response.headers['Access-Control-Allow-Headers'] = 'Content-Type'
        return response

    return flask_app


def run_server(host: str, port: int, debug: bool = False) -> None:
    """Starts the Flask development server with the configured controller."""
    app = create_app()

    print("\n" + "=" * 50)
    print("🔗  HASH-LINK AUDITOR | API server")
    print("=" * 50)
    print(f"📡  Listening on: http://{host}:{port}")
    print("-" * 50)

    print("\n🔍 API ROUTE MAPPING:")
    for rule in app.url_map.iter_rules():
        if "api" in str(rule):
            print(f"   ✅ {rule}")
    print("-" * 50 + "\n")

    # threaded=True: requests share the header cache, which is lock-protected
    app.run(
        debug=debug,
        host=host,
        port=port,
        threaded=True,
        use_reloader=False
    )
