"""Weather provider abstraction - allows swapping different weather APIs."""
from abc import ABC, abstractmethod
from typing import Optional
from weather_data import WeatherSnapshot


class WeatherProviderBase(ABC):
    """Abstract base class for weather data providers."""

    @abstractmethod
    def get_current(self, city: str) -> Optional[WeatherSnapshot]:
        """
        Fetch current weather for one city.

        Args:
            city: City identifier, e.g. "Guadalajara,MX"

        Returns:
            WeatherSnapshot, or None when the provider answered without
            a usable payload

        Raises:
            WeatherProviderError: If the provider fails to fetch data
        """
        pass


class WeatherProviderError(Exception):
    """Exception raised when a weather provider fails."""
    pass


class MissingConfigurationError(WeatherProviderError):
    """Raised before any request is made when no API key is configured."""
    pass


class HttpError(WeatherProviderError):
    """Non-success HTTP status from the provider."""

    def __init__(self, status: int, message: Optional[str] = None):
        self.status = status
        super().__init__(message or f"Error {status}")


class NetworkFailure(WeatherProviderError):
    """The request could not complete (DNS, timeout, connection reset...)."""

    def __init__(self, reason: str):
        self.reason = reason
        super().__init__(reason)


class ResponseFormatError(WeatherProviderError):
    """The provider answered 2xx but the body could not be parsed."""
    pass
