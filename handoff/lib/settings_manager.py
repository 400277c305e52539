"""Notifier settings with config file persistence."""

from __future__ import annotations

import configparser
import logging
import os
from pathlib import Path
from typing import Any

from handoff.lib.get_platform import get_data_directory

logger = logging.getLogger(__name__)

SECTION = "NOTIFIER"


class SettingsManager:
    """Single source of truth for notifier settings.

    Stores settings in handoff.ini under the [NOTIFIER] section and converts
    stored strings back to bool/int/float on read.
    """

    DEFAULTS = {
        "thread_safe": True,
        "log_dispatch": False,
        "error_log_level": "ERROR",
    }

    _WORDS = {"true": True, "yes": True, "on": True, "false": False, "no": False, "off": False}

    def __init__(self, config_file_path: str | Path = "handoff.ini") -> None:
        """Initialize with a config path.

        Args:
            config_file_path: Path to the ini file (relative paths go in the data directory)
        """
        self._config_obj = configparser.ConfigParser()

        if not os.path.isabs(config_file_path):
            self.config_file_path = os.path.join(get_data_directory(), config_file_path)
        else:
            self.config_file_path = str(config_file_path)

        logger.debug(f"Using config file: {self.config_file_path}")

    def get(self, setting: str, default_value: Any = None) -> Any:
        """Read one [NOTIFIER] value from disk, typed by _convert_value."""
        # Re-read on every call so edits to the ini file show up without a restart
        self._config_obj.read(self.config_file_path, encoding="utf-8")
        raw = self._config_obj.get(SECTION, setting, fallback=None)
        return default_value if raw is None else self._convert_value(raw)

    def get_or_default(self, setting: str) -> Any:
        return self.get(setting, self.DEFAULTS.get(setting))

    def set(self, setting: str, val: Any) -> tuple[bool, str]:
        """Update a setting and persist it to the config file.

        Returns (success, message) tuple.
        """
        logger.debug(f"Changing setting << {setting} >> to {val}")
        try:
            # Read existing config to preserve other settings
            self._config_obj.read(self.config_file_path, encoding="utf-8")

            if SECTION not in self._config_obj:
                self._config_obj.add_section(SECTION)

            self._config_obj[SECTION][setting] = str(val)

            with open(self.config_file_path, "w", encoding="utf-8") as conf:
                self._config_obj.write(conf)

            return (True, "Settings were changed successfully")
        except OSError as e:
            logger.error(f"Failed to change setting << {setting} >>: {e}")
            return (False, "Something went wrong! Settings were not changed")

    def clear(self) -> tuple[bool, str]:
        """Remove all settings by deleting the config file. Returns (success, message)."""
        try:
            if os.path.exists(self.config_file_path):
                os.remove(self.config_file_path)
                logger.info(f"Cleared settings: deleted {self.config_file_path}")
            # Drop cached values so they don't outlive the file
            self._config_obj.clear()
            return (True, "Settings were cleared successfully")
        except OSError as e:
            logger.error(f"Failed to clear settings: {e}")
            return (False, "Something went wrong! Settings were not cleared")

    def as_kwargs(self) -> dict[str, Any]:
        """All settings resolved against DEFAULTS, as Notifier keyword arguments."""
        return {setting: self.get_or_default(setting) for setting in self.DEFAULTS}

    def _convert_value(self, val: Any) -> Any:
        """Turn an ini string into bool, int or float where it reads as one."""
        if not isinstance(val, str):
            return val
        if val.lower() in self._WORDS:
            return self._WORDS[val.lower()]
        for number in (int, float):
            try:
                return number(val)
            except ValueError:
                pass
        return val
