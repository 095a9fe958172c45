"""
Settings resolution for Sigcheck.

Priority: env vars > config file (~/.sigcheck/config.json) > defaults.
The verification pipeline never reads settings itself; the CLI resolves
them once and injects them into the crypto backend.
"""

from __future__ import annotations

__all__ = [
    "VerifierSettings",
    "get_settings",
    "parse_log_level",
    "parse_validation_time",
]

import datetime
import logging
import os
from dataclasses import dataclass

from ..constants import ENV_LOG_LEVEL, ENV_VALIDATION_TIME
from ..errors import ConfigError
from ._storage import load_config

_logger = logging.getLogger(__name__)

_LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass(frozen=True)
class VerifierSettings:
    """Resolved settings for a verification session.

    Attributes:
        validation_time: Moment at which certificate validity is judged.
            None means "now".
        log_level: Name of the root logger level.
    """

    validation_time: datetime.datetime | None = None
    log_level: str = "WARNING"


def parse_validation_time(value: str) -> datetime.datetime:
    """Parse an ISO-8601 timestamp; naive values are taken as UTC.

    Raises:
        ConfigError: If the value is not a valid timestamp.
    """
    try:
        moment = datetime.datetime.fromisoformat(value.strip())
    except ValueError as e:
        raise ConfigError(f"Invalid validation time {value!r}: {e}") from e
    if moment.tzinfo is None:
        moment = moment.replace(tzinfo=datetime.timezone.utc)
    return moment


def parse_log_level(value: str) -> str:
    """Normalize a log level name.

    Raises:
        ConfigError: If the name is not a standard logging level.
    """
    level = value.strip().upper()
    if level not in _LOG_LEVELS:
        raise ConfigError(f"Invalid log level {value!r}, expected one of {', '.join(_LOG_LEVELS)}")
    return level


def get_settings() -> VerifierSettings:
    """Resolve settings from env vars, config file and defaults.

    Invalid values from the config file are ignored with a warning;
    invalid values from env vars raise, since they were set on purpose.

    Raises:
        ConfigError: If an environment variable holds an invalid value.
    """
    config = load_config()

    validation_time = None
    env_time = os.environ.get(ENV_VALIDATION_TIME, "").strip()
    if env_time:
        validation_time = parse_validation_time(env_time)
    elif "validation_time" in config:
        try:
            validation_time = parse_validation_time(config["validation_time"])
        except ConfigError as e:
            _logger.warning("Ignoring config validation_time: %s", e)

    log_level = VerifierSettings.log_level
    env_level = os.environ.get(ENV_LOG_LEVEL, "").strip()
    if env_level:
        log_level = parse_log_level(env_level)
    elif "log_level" in config:
        try:
            log_level = parse_log_level(config["log_level"])
        except ConfigError as e:
            _logger.warning("Ignoring config log_level: %s", e)

    return VerifierSettings(validation_time=validation_time, log_level=log_level)
