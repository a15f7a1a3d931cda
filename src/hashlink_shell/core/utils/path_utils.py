# src/hashlink_shell/core/utils/path_utils.py
import logging
from pathlib import Path

logger = logging.getLogger(__name__)


class PathUtils:
    """
    A central utility for reliably retrieving important project paths.
    """

    @staticmethod
    def get_content_root() -> Path:
        """Returns the directory that holds the top-level packages (the 'src' folder)."""
        return Path(__file__).resolve().parents[3]

    @staticmethod
    def get_shell_package_root() -> Path:
        return PathUtils.get_content_root() / "hashlink_shell"

    @staticmethod
    def get_settings_file() -> Path:
        return PathUtils.get_shell_package_root() / "settings.json"

    @staticmethod
    def get_export_dir() -> Path:
        """
        Returns the default directory for CSV exports (current working directory).
        Created on demand.
        """
        export_dir = Path.cwd() / "exports"
        export_dir.mkdir(parents=True, exist_ok=True)
        return export_dir
