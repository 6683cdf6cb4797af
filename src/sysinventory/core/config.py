"""
Configuration management for sysinventory.
Reads an optional YAML configuration file and exposes typed settings.
"""

import logging
import os
from typing import Any, Dict, Optional

import yaml

from src.i18n import _

DEFAULT_CONFIG_NAME = "sysinventory.yaml"
SYSTEM_CONFIG_PATH = "/etc/sysinventory.yaml"
LOCAL_CONFIG_PATH = "./sysinventory.yaml"


class ConfigManager:
    """Manages configuration for sysinventory."""

    def __init__(self, config_file: Optional[str] = None):
        self.logger = logging.getLogger(__name__)

        self.explicit = config_file is not None
        self.config_file = self._determine_config_path(
            config_file or DEFAULT_CONFIG_NAME
        )
        self.config_data: Dict[str, Any] = {}
        self.load_config()

    def _determine_config_path(self, filename: str) -> Optional[str]:
        """
        Determine which configuration file to read.

        Priority order:
        1. An absolute path is used directly
        2. /etc/sysinventory.yaml
        3. ./sysinventory.yaml
        4. The given filename relative to the working directory

        Returns None when nothing was requested and nothing exists, in which
        case built-in defaults apply.
        """
        if os.path.isabs(filename):
            return filename

        for candidate in (SYSTEM_CONFIG_PATH, LOCAL_CONFIG_PATH, filename):
            if os.path.exists(candidate):
                return candidate

        if self.explicit:
            return filename
        return None

    def load_config(self) -> None:
        """Load configuration from the YAML file, if there is one."""
        if self.config_file is None:
            self.logger.debug("No configuration file found, using defaults")
            self.config_data = {}
            return

        if not os.path.exists(self.config_file):
            raise FileNotFoundError(
                _("Configuration file '%s' not found. Expected locations: %s")
                % (self.config_file, f"{SYSTEM_CONFIG_PATH} or {LOCAL_CONFIG_PATH}")
            )

        try:
            with open(self.config_file, "r", encoding="utf-8") as file:
                data = yaml.safe_load(file) or {}
        except yaml.YAMLError as e:
            raise ValueError(_("Invalid YAML in configuration file: %s") % e) from e
        except Exception as e:
            raise RuntimeError(_("Failed to load configuration file: %s") % e) from e

        if not isinstance(data, dict):
            raise ValueError(
                _("Configuration file '%s' must contain a mapping") % self.config_file
            )
        self.config_data = data

    def get(self, key_path: str, default: Any = None) -> Any:
        """
        Get configuration value using dot notation.

        Args:
            key_path: Dot-separated path to the key (e.g., 'logging.level')
            default: Value returned when any part of the path is missing

        Returns:
            Configuration value or default
        """
        value: Any = self.config_data
        try:
            for key in key_path.split("."):
                value = value[key]
            return value
        except (KeyError, TypeError):
            return default

    def get_logging_config(self) -> Dict[str, Any]:
        """Get logging configuration section."""
        return self.get("logging", {})

    def get_collection_config(self) -> Dict[str, Any]:
        """Get collection configuration section."""
        return self.get("collection", {})

    def get_log_level(self) -> str:
        """Get logging level; for pipe-separated lists the first entry wins."""
        level = str(self.get("logging.level", "INFO"))
        if "|" in level:
            level = level.split("|")[0]
        return level.strip().upper() or "INFO"

    def get_log_file(self) -> Optional[str]:
        """Get log file path if specified."""
        return self.get("logging.file")

    def get_log_format(self) -> str:
        """Get log format string."""
        return self.get("logging.format", "%(levelname)s %(name)s: %(message)s")

    def get_language(self) -> str:
        """Get configured language/locale."""
        return self.get("i18n.language", "en")

    def get_command_timeout(self) -> int:
        """Get the timeout, in seconds, applied to every source command."""
        return int(self.get("collection.command_timeout", 30))

    def get_capture_dir(self) -> Optional[str]:
        """Get the directory of captured command outputs to replay, if any."""
        return self.get("collection.capture_dir")

    def get_mounts_file(self) -> str:
        """Get the Linux mount table path."""
        return self.get("collection.mounts_file", "/proc/self/mounts")

    def get_uuid_dir(self) -> str:
        """Get the directory whose entries name file system UUIDs."""
        return self.get("collection.uuid_dir", "/dev/disk/by-uuid")

    def get_file_nr_path(self) -> str:
        """Get the Linux file descriptor counter path."""
        return self.get("collection.file_nr", "/proc/sys/fs/file-nr")

    def get_output_indent(self) -> Optional[int]:
        """Get JSON indentation for CLI output; 0 or null means compact."""
        indent = self.get("output.indent", 2)
        return int(indent) if indent else None
