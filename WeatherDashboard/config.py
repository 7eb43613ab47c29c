"""Process-wide configuration, read once at startup from the environment."""
import logging
import os
from dataclasses import dataclass
from typing import Optional, Tuple

from dotenv import load_dotenv

from openweather_provider import DEFAULT_BASE_URL

DEFAULT_LANG = "es"
DEFAULT_TIMEOUT = 10.0


@dataclass(frozen=True)
class DashboardConfig:
    """Read-only settings injected into the provider and dashboard."""
    base_url: str = DEFAULT_BASE_URL
    api_key: Optional[str] = None
    lang: str = DEFAULT_LANG
    timeout: float = DEFAULT_TIMEOUT
    cities: Optional[Tuple[str, ...]] = None  # None means the built-in list

    @property
    def has_api_key(self) -> bool:
        return bool(self.api_key)


def parse_cities(raw: Optional[str]) -> Optional[Tuple[str, ...]]:
    """Split a ';'-separated city list, e.g. "Puebla,MX;Tijuana,MX"."""
    if not raw:
        return None
    cities = tuple(city.strip() for city in raw.split(";") if city.strip())
    return cities or None


def load_config() -> DashboardConfig:
    """
    Load configuration from the environment (and a .env file, if present).

    A missing API key is not an error here: each card reports it when it
    tries to fetch.

    Raises:
        SystemExit: If OPENWEATHER_TIMEOUT is not a positive number
    """
    load_dotenv()
    base_url = os.getenv("OPENWEATHER_BASE") or DEFAULT_BASE_URL
    api_key = os.getenv("OPENWEATHER_KEY") or None
    lang = os.getenv("OPENWEATHER_LANG", DEFAULT_LANG)
    timeout_raw = os.getenv("OPENWEATHER_TIMEOUT", str(DEFAULT_TIMEOUT))

    try:
        timeout = float(timeout_raw)
    except ValueError as exc:
        raise SystemExit(f"Invalid OPENWEATHER_TIMEOUT: {exc}") from exc
    if timeout <= 0:
        raise SystemExit(f"Invalid OPENWEATHER_TIMEOUT: {timeout_raw} (must be > 0)")

    if not api_key:
        logging.warning("OPENWEATHER_KEY is not set; every card will report a configuration error")

    config = DashboardConfig(
        base_url=base_url,
        api_key=api_key,
        lang=lang,
        timeout=timeout,
        cities=parse_cities(os.getenv("WEATHER_CITIES")),
    )
    logging.info("Configuration loaded: base=%s lang=%s timeout=%s", config.base_url, config.lang, config.timeout)
    return config
