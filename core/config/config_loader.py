"""Configuration loading and management."""

import copy
import yaml
import logging
from pathlib import Path
from typing import Dict, Any, Optional

from core.models.caps import RAW_VIDEO_CAPS

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Exception raised when configuration is invalid."""
    pass


DEFAULT_CONFIG: Dict[str, Any] = {
    "detect": {
        "name": "autovideosrc0",
        "filter_caps": RAW_VIDEO_CAPS,
        "min_rank": "marginal",
        "classes": ["Source", "Video"]
    },
    "registry": {
        "rank_overrides": {}
    },
    "sources": {
        "v4l2src": {
            "device": "/dev/video0",
            "blocksize": 614400
        },
        "screensrc": {
            "monitor": 1
        },
        "videotestsrc": {
            "pattern": "smpte",
            "width": 320,
            "height": 240,
            "framerate": 30
        }
    },
    "logging": {
        "level": "INFO",
        "console_colors": True,
        "log_to_file": False,
        "log_file": "/tmp/autovideo/logs/autovideo.log"
    }
}


def _merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    merged = copy.deepcopy(base)
    for key, value in override.items():
        if isinstance(value, dict) and isinstance(merged.get(key), dict):
            merged[key] = _merge(merged[key], value)
        else:
            merged[key] = value
    return merged


class ConfigLoader:
    """Configuration loader for autovideo."""

    def __init__(self):
        """Initialize the config loader."""
        self.config: Optional[Dict[str, Any]] = None

    def load_from_file(self, config_path: str) -> Dict[str, Any]:
        """Load configuration from YAML file.

        Values from the file are merged over the defaults, so a file only
        needs to name the settings it changes.

        Args:
            config_path: Path to config file

        Returns:
            Dictionary containing configuration

        Raises:
            ConfigurationError: If config file not found or invalid
        """
        path = Path(config_path)

        if not path.exists():
            raise ConfigurationError(f"Config file not found: {path}")

        logger.info(f"Loading configuration from: {path}")

        try:
            with open(path, 'r') as f:
                loaded = yaml.safe_load(f)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in config file: {e}")
        except Exception as e:
            raise ConfigurationError(f"Error reading config file: {e}")

        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(f"Config file must contain a mapping, got {type(loaded).__name__}")

        self.config = _merge(DEFAULT_CONFIG, loaded)
        logger.info("Configuration loaded successfully")
        return self.config

    def load_defaults(self) -> Dict[str, Any]:
        """Load default configuration.

        Returns:
            Dictionary containing default configuration
        """
        self.config = copy.deepcopy(DEFAULT_CONFIG)
        logger.info("Loaded default configuration")
        return self.config
