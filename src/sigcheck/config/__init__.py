"""
Configuration management.

Import from this package directly rather than from the submodules.
"""

from __future__ import annotations

from ._storage import CONFIG_FILE, load_config
from .config import VerifierSettings, get_settings, parse_log_level, parse_validation_time

__all__ = [
    "CONFIG_FILE",
    "VerifierSettings",
    "get_settings",
    "load_config",
    "parse_log_level",
    "parse_validation_time",
]
