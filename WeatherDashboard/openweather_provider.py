"""OpenWeather Current Weather API provider implementation."""
import logging
import requests
from typing import Optional
from weather_provider import (
    HttpError,
    MissingConfigurationError,
    NetworkFailure,
    ResponseFormatError,
    WeatherProviderBase,
)
from weather_data import WeatherCondition, WeatherSnapshot


DEFAULT_BASE_URL = "https://api.openweathermap.org/data/2.5"
ICON_URL_TEMPLATE = "https://openweathermap.org/img/wn/{icon}@4x.png"


def icon_url(icon: str) -> str:
    """Resolve a provider icon code (e.g. "01d") to its image URL."""
    return ICON_URL_TEMPLATE.format(icon=icon)


class OpenWeatherProvider(WeatherProviderBase):
    """
    Weather provider using OpenWeather Current Weather API.

    Looks cities up by name ("q" parameter) on the free Current Weather API:
    https://openweathermap.org/current
    """

    def __init__(
        self,
        api_key: Optional[str],
        base_url: str = DEFAULT_BASE_URL,
        units: str = "metric",
        lang: str = "es",
        timeout: float = 10
    ):
        """
        Initialize OpenWeather provider.

        Args:
            api_key: OpenWeather API key. May be empty; every fetch then fails
                with MissingConfigurationError without touching the network.
            base_url: API root, without the trailing "/weather"
            units: Temperature units ("metric", "imperial", or "standard")
            lang: Language code for descriptions (e.g., "es", "en")
            timeout: HTTP request timeout in seconds
        """
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self.units = units
        self.lang = lang
        self.timeout = timeout

    @property
    def url(self) -> str:
        return f"{self.base_url}/weather"

    def get_current(self, city: str) -> Optional[WeatherSnapshot]:
        """
        Fetch current weather for a city from OpenWeather.

        Args:
            city: City identifier, e.g. "Guadalajara,MX"

        Returns:
            WeatherSnapshot, or None if the API answered with an empty body

        Raises:
            MissingConfigurationError: No API key configured
            HttpError: Non-success HTTP status
            NetworkFailure: The request could not complete
            ResponseFormatError: The response body could not be parsed
        """
        if not self.api_key:
            logging.error("OpenWeather API key missing, not requesting %s", city)
            raise MissingConfigurationError("API key no encontrada en OPENWEATHER_KEY")

        params = {
            "q": city,
            "units": self.units,
            "appid": self.api_key,
            "lang": self.lang,
        }

        try:
            logging.info(f"Making OpenWeather API request for {city}: {self.url}")
            logging.debug(f"Request parameters: q={city}, units={self.units}, lang={self.lang}")

            response = requests.get(self.url, params=params, timeout=self.timeout)

            logging.info(f"API response status for {city}: {response.status_code}")
        except requests.exceptions.RequestException as e:
            logging.error(f"Network error during API request for {city}: {e}")
            raise NetworkFailure(str(e) or e.__class__.__name__) from e

        if not response.ok:
            self._handle_error_response(response)

        # JSONDecodeError subclasses RequestException; keep it out of the transport handler
        try:
            data = response.json()
        except ValueError as e:
            logging.error(f"Response for {city} is not valid JSON: {e}")
            raise ResponseFormatError(f"Failed to parse response: {e}") from e

        if not data or not isinstance(data, dict):
            logging.warning(f"OpenWeather returned no usable payload for {city}")
            return None

        logging.debug(f"API response (truncated): {str(data)[:500]}...")
        return self._parse(data)

    def _parse(self, data: dict) -> WeatherSnapshot:
        try:
            main_data = data.get("main")
            if not main_data:
                raise ResponseFormatError("Response missing 'main' block")

            conditions = tuple(
                WeatherCondition(
                    description=item.get("description", ""),
                    icon=item.get("icon", ""),
                )
                for item in data.get("weather") or []
            )

            wind_data = data.get("wind") or {}
            sys_data = data.get("sys") or {}

            snapshot = WeatherSnapshot(
                temp=float(main_data["temp"]),
                feels_like=float(main_data["feels_like"]),
                humidity=float(main_data["humidity"]),
                wind_speed=float(wind_data.get("speed", 0.0)),
                conditions=conditions,
                name=data.get("name", ""),
                country=sys_data.get("country", ""),
                timestamp=int(data.get("dt", 0)),
            )
        except (KeyError, ValueError, TypeError, AttributeError) as e:
            logging.error(f"Failed to parse API response: {e}", exc_info=True)
            raise ResponseFormatError(f"Failed to parse response: {e}") from e

        logging.info(f"Parsed weather for {snapshot.name}: {snapshot.temp}°C, {snapshot.description}")
        return snapshot

    def _handle_error_response(self, response: requests.Response) -> None:
        """Log the OpenWeather error body and raise HttpError for the status."""
        try:
            error_data = response.json()
            logging.error(
                f"OpenWeather API error {error_data.get('cod', response.status_code)}: "
                f"{error_data.get('message', 'Unknown error')}"
            )
        except (ValueError, AttributeError):
            logging.error(f"Non-JSON error response: HTTP {response.status_code}, body: {response.text[:200]}")
        raise HttpError(response.status_code)
