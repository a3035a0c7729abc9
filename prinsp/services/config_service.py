"""
Configuration service for PrinSp.

PrinSp persists a single setting: the global capture shortcut. It is
stored as JSON in ~/.config/prinsp/config.json, read once at startup and
written whenever the user changes it.
"""

import copy
import json
from pathlib import Path
from typing import Any, Dict, Optional

from prinsp.services.logging_service import get_logger


DEFAULT_CONFIG_DIR = Path.home() / ".config" / "prinsp"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.json"

SHORTCUT_KEY = "shortcut"
DEFAULT_SHORTCUT = "Ctrl+Shift+A"

DEFAULT_CONFIG: Dict[str, Any] = {
    # Modifier/key tokens joined by '+', e.g. "Ctrl+Shift+A"
    SHORTCUT_KEY: DEFAULT_SHORTCUT,
}


class ConfigService:
    """
    Service for loading and saving the shortcut setting.

    Falls back to defaults when the file is missing or corrupted, and
    recreates it so the next start finds a valid file.
    """

    def __init__(self, config_path: Optional[Path] = None) -> None:
        """
        Initialize the ConfigService.

        Args:
            config_path: Optional path to config file. Defaults to
                        ~/.config/prinsp/config.json
        """
        self._logger = get_logger(__name__)
        self._config_path = Path(config_path) if config_path else DEFAULT_CONFIG_FILE
        self._config: Dict[str, Any] = {}

        self._load()

    @property
    def path(self) -> Path:
        return self._config_path

    def _load(self) -> None:
        """Load configuration from file, using defaults if needed."""
        self._config = copy.deepcopy(DEFAULT_CONFIG)

        if not self._config_path.exists():
            self._logger.info(
                f"Config file not found at {self._config_path}. Using defaults."
            )
            self._save_to_file()
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                loaded_config = json.load(f)

            if not isinstance(loaded_config, dict):
                raise ValueError("Config file does not contain a valid JSON object")

            shortcut = loaded_config.get(SHORTCUT_KEY)
            if shortcut is not None and not isinstance(shortcut, str):
                raise ValueError(f"'{SHORTCUT_KEY}' must be a string")
            if shortcut:
                self._config[SHORTCUT_KEY] = shortcut

            self._logger.info(f"Configuration loaded from {self._config_path}")

        except (json.JSONDecodeError, ValueError) as e:
            self._logger.warning(
                f"Config file corrupted or invalid: {e}. Recreating with defaults."
            )
            self._config = copy.deepcopy(DEFAULT_CONFIG)
            self._save_to_file()

        except OSError as e:
            self._logger.warning(f"Could not read config file: {e}. Using defaults.")

    def _save_to_file(self) -> bool:
        """Write the current configuration; returns False on failure."""
        try:
            self._config_path.parent.mkdir(parents=True, exist_ok=True)

            with open(self._config_path, "w", encoding="utf-8") as f:
                json.dump(self._config, f, indent=2)

            self._logger.debug(f"Configuration saved to {self._config_path}")
            return True

        except OSError as e:
            self._logger.error(f"Could not save config file: {e}")
            return False

    # ─── Shortcut Setting ─────────────────────────────────────────────────

    @property
    def shortcut(self) -> str:
        """The current global capture shortcut."""
        return self._config.get(SHORTCUT_KEY, DEFAULT_SHORTCUT)

    def set_shortcut(self, shortcut: str) -> bool:
        """
        Store and persist a new shortcut string.

        Args:
            shortcut: The shortcut as typed by the user.

        Returns:
            True if the file was written.
        """
        self._config[SHORTCUT_KEY] = shortcut
        self._logger.info(f"Shortcut set to '{shortcut}'")
        return self._save_to_file()
