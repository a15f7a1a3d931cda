import logging
from flask import Blueprint, jsonify, request, current_app

from hashlink_auditor.controllers.page_check_controller import PageCheckController
from page_fetcher.model import FetchError, SitemapParseError

logger = logging.getLogger(__name__)

page_api_router = Blueprint('page_api_router', __name__)


# --- HELPER FUNCTIONS ---

def get_page_check_controller() -> PageCheckController:
    """Retrieves the page check controller from the Flask application context."""
    controller = current_app.config.get('PAGE_CHECK_CONTROLLER')
    if not controller:
        raise RuntimeError("PageCheckController is not set in app.config['PAGE_CHECK_CONTROLLER']")
    return controller


def _missing_url():
    return jsonify({"error": "URL parameter is required"}), 400


# --- API ROUTES ---

@page_api_router.route('/check-page-for-hash', methods=['GET'])
def check_page_for_hash():
    """
    Checks a single page for dead hash links (#, /#, #/).
    Fetch problems are reported in the body with success=false, not as HTTP errors.
    """
    url = request.args.get('url')
    if not url:
        return _missing_url()

    try:
        return jsonify(get_page_check_controller().check_page(url))
    except Exception as e:
        logger.error(f"Unexpected error checking {url}: {e}", exc_info=True)
        return jsonify({"error": str(e), "url": url, "success": False}), 500


@page_api_router.route('/fetch-page', methods=['GET'])
def fetch_page():
    """Returns the raw content of a page; sitemap XML is parsed as well."""
    url = request.args.get('url')
    if not url:
        return _missing_url()

    try:
        return jsonify(get_page_check_controller().fetch_page(url))
    except FetchError as e:
        logger.error(f"Error fetching page {url}: {e.message}")
        return jsonify({"error": "Failed to fetch the page", "message": e.message}), 500
    except Exception as e:
        logger.error(f"Unexpected error fetching {url}: {e}", exc_info=True)
        return jsonify({"error": "Failed to fetch the page", "message": str(e)}), 500


@page_api_router.route('/process-sitemap-index', methods=['GET'])
def process_sitemap_index():
    """Lists the sitemaps of a sitemap index, or the pages of a regular sitemap."""
    url = request.args.get('url')
    if not url:
        return _missing_url()

    try:
        return jsonify(get_page_check_controller().process_sitemap_index(url))
    except SitemapParseError as e:
        return jsonify({"error": str(e)}), 400
    except FetchError as e:
        logger.error(f"Error processing sitemap index {url}: {e.message}")
        return jsonify({"error": "Failed to process the sitemap index", "message": e.message}), 500
    except Exception as e:
        logger.error(f"Unexpected error processing sitemap {url}: {e}", exc_info=True)
        return jsonify({"error": "Failed to process the sitemap index", "message": str(e)}), 500


@page_api_router.route('/header-cache', methods=['GET', 'DELETE'])
def header_cache():
    """Shows the size of the header dedup cache, or empties it (DELETE)."""
    try:
        controller = get_page_check_controller()
        if request.method == 'DELETE':
            return jsonify(controller.reset_cache())
        return jsonify(controller.cache_status())
    except Exception as e:
        logger.error(f"Error accessing header cache: {e}")
        return jsonify({"error": str(e)}), 500
