# src/hashlink_shell/core/managers/config_manager.py
import json
import logging
from typing import Any, Dict, Optional

from hashlink_shell.core.utils.path_utils import PathUtils

logger = logging.getLogger(__name__)


class ConfigManager:
    """
    Singleton holding the settings of the server and the CLI.
    Loaded from the package's settings.json; read through dotted key paths.
    """
    _instance = None

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super(ConfigManager, cls).__new__(cls)
            cls._instance._config = {}
            cls._instance.reset()
        return cls._instance

    def get_all(self) -> Dict[str, Any]:
        """The complete settings tree, as passed to the controller and the app factory."""
        return self._config

    def get_nested(self, key_path: str, default: Optional[Any] = None) -> Any:
        """
        Looks up e.g. 'session.check_page_timeout'.
        Missing keys, and paths that run through a non-dict value, give `default`.
        """
        value: Any = self._config
        for key in key_path.split('.'):
            if not isinstance(value, dict) or key not in value:
                return default
            value = value[key]
        return default if value is None else value

    def reset(self):
        """(Re)loads settings.json; a missing or broken file leaves an empty config."""
        config_path = PathUtils.get_settings_file()
        if not config_path.exists():
            logger.warning("settings.json not found at %s. Using empty config.", config_path)
            self._config = {}
            return

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                self._config = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.error("Failed to load %s: %s", config_path, e)
            self._config = {}
            return
        logger.debug("Configuration loaded from %s", config_path)


config_manager = ConfigManager()
