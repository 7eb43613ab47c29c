"""Weather domain model - pure data structures independent of any API."""
from dataclasses import dataclass
from typing import Optional, Tuple


@dataclass(frozen=True)
class WeatherCondition:
    """One condition descriptor reported by the provider."""
    description: str  # e.g., "cielo claro", "lluvia ligera"
    icon: str  # provider icon code, e.g., "01d"


@dataclass(frozen=True)
class WeatherSnapshot:
    """Most recent weather for one city, replaced wholesale on every fetch."""
    temp: float
    feels_like: float
    humidity: float
    wind_speed: float
    conditions: Tuple[WeatherCondition, ...]
    name: str  # resolved place name
    country: str  # ISO country code
    timestamp: int  # UNIX timestamp (UTC) of the observation

    @property
    def primary_condition(self) -> Optional[WeatherCondition]:
        """First reported condition, or None when the provider sent none."""
        return self.conditions[0] if self.conditions else None

    @property
    def description(self) -> Optional[str]:
        condition = self.primary_condition
        return condition.description if condition else None

    @property
    def icon(self) -> Optional[str]:
        condition = self.primary_condition
        return condition.icon if condition else None
