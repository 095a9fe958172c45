"""
Low-level config file I/O for Sigcheck.

Handles reading and validating the on-disk config.json.  Sigcheck never
writes configuration; the file is maintained by hand.
"""

from __future__ import annotations

__all__ = [
    "CONFIG_DIR",
    "CONFIG_FILE",
    "load_config",
    "load_raw_config",
]

import json
import logging
from pathlib import Path
from typing import Any, TypedDict, cast

_logger = logging.getLogger(__name__)

CONFIG_DIR = Path.home() / ".sigcheck"
CONFIG_FILE = CONFIG_DIR / "config.json"


class ConfigDict(TypedDict, total=False):
    """Type definition for the config file structure."""

    validation_time: str
    log_level: str


def load_raw_config() -> dict[str, object]:
    """Load raw config dict from disk, preserving all keys."""
    try:
        data: Any = json.loads(CONFIG_FILE.read_text(encoding="utf-8"))
        if isinstance(data, dict):
            return cast("dict[str, object]", data)
        _logger.warning("Config file is not a JSON object, ignoring")
    except FileNotFoundError:
        pass
    except json.JSONDecodeError as e:
        _logger.warning("Config file corrupted, ignoring: %s", e)
    except OSError as e:
        _logger.warning("Cannot read config file: %s", e)
    return {}


def _validate_config_dict(data: dict[str, object]) -> ConfigDict:
    """Validate and return config dict, picking only known keys with correct types."""
    result: ConfigDict = {}
    for key in ("validation_time", "log_level"):
        val = data.get(key)
        if isinstance(val, str):
            result[key] = val  # type: ignore[literal-required]  # dynamic key from known set
        elif val is not None:
            _logger.warning("Config key %r must be a string, ignoring", key)
    return result


def load_config() -> ConfigDict:
    """Load config from disk, returning only known typed keys."""
    return _validate_config_dict(load_raw_config())
