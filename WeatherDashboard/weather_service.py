"""Weather service - runs blocking provider calls off the event loop."""
import asyncio
import logging
import time
from typing import Optional
from weather_provider import WeatherProviderBase, WeatherProviderError
from weather_data import WeatherSnapshot


class WeatherService:
    """
    Async front for a weather provider.

    Every call goes straight to the provider: there is no cache, no
    deduplication between cities and no automatic retry. The provider's
    blocking HTTP request runs in a worker thread so one slow city never
    stalls the event loop or the other cards.
    """

    def __init__(self, provider: WeatherProviderBase):
        """
        Initialize weather service.

        Args:
            provider: Weather provider to use
        """
        self.provider = provider

    async def fetch(self, city: str) -> Optional[WeatherSnapshot]:
        """
        Fetch current weather for a city.

        Args:
            city: City identifier, e.g. "Guadalajara,MX"

        Returns:
            WeatherSnapshot, or None when the provider had no usable payload

        Raises:
            WeatherProviderError: If the provider fails
        """
        started = time.monotonic()
        logging.debug(f"Fetching weather for {city}...")
        try:
            snapshot = await asyncio.to_thread(self.provider.get_current, city)
        except WeatherProviderError as e:
            logging.warning(f"Weather fetch for {city} failed after {time.monotonic() - started:.2f}s: {e}")
            raise
        logging.info(f"Weather fetch for {city} finished in {time.monotonic() - started:.2f}s")
        return snapshot
