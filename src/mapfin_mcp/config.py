"""Environment-based configuration."""

import logging
import os
from dataclasses import dataclass

from .formatting import DisplaySettings


logger = logging.getLogger(__name__)

DEFAULT_API_URL = "http://localhost:3001/api"
DEFAULT_TIMEOUT = 30.0
DEFAULT_EXCHANGE_RATE = 83.5
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


def _env_float(name: str, default: float) -> float:
    raw = os.environ.get(name)
    if not raw:
        return default
    try:
        return float(raw)
    except ValueError:
        logger.warning("Invalid %s=%r, using %s", name, raw, default)
        return default


def _env_choice(name: str, choices: tuple[str, ...], default: str) -> str:
    raw = os.environ.get(name, "").strip()
    if not raw:
        return default
    for choice in choices:
        if raw.lower() == choice.lower():
            return choice
    logger.warning("Invalid %s=%r, using %s", name, raw, default)
    return default


@dataclass(frozen=True)
class Settings:
    """Runtime settings for the MCP server.

    Attributes:
        api_url: Base URL of the spreadsheet REST proxy.
        timeout: HTTP timeout in seconds.
        currency: Display currency ("INR" or "USD").
        number_format: "indian" or "western" digit grouping.
        exchange_rate: INR per USD.
        log_level: Logging level name.
    """

    api_url: str = DEFAULT_API_URL
    timeout: float = DEFAULT_TIMEOUT
    currency: str = "INR"
    number_format: str = "indian"
    exchange_rate: float = DEFAULT_EXCHANGE_RATE
    log_level: str = "INFO"

    @classmethod
    def from_env(cls) -> "Settings":
        """Build settings from MAPFIN_* environment variables."""
        return cls(
            api_url=os.environ.get("MAPFIN_API_URL", DEFAULT_API_URL).rstrip("/"),
            timeout=_env_float("MAPFIN_TIMEOUT", DEFAULT_TIMEOUT),
            currency=_env_choice("MAPFIN_CURRENCY", ("INR", "USD"), "INR"),
            number_format=_env_choice("MAPFIN_NUMBER_FORMAT", ("indian", "western"), "indian"),
            exchange_rate=_env_float("MAPFIN_EXCHANGE_RATE", DEFAULT_EXCHANGE_RATE),
            log_level=_env_choice("MAPFIN_LOG_LEVEL", LOG_LEVELS, "INFO"),
        )

    @property
    def display(self) -> DisplaySettings:
        """Display options passed explicitly to formatting."""
        return DisplaySettings(
            currency=self.currency,
            number_format=self.number_format,
            exchange_rate=self.exchange_rate,
        )
