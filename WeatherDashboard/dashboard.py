"""Dashboard container - a fixed, ordered list of independent city cards."""
import asyncio
import logging
from datetime import datetime
from typing import Callable, List, Optional, Sequence

from city_card import CLOCK_INTERVAL_SECONDS, CardView, CityCard
from weather_service import WeatherService

DEFAULT_CITIES = (
    "Ciudad de México,MX",
    "Guadalajara,MX",
    "Monterrey,MX",
    "Puebla,MX",
    "Cancún,MX",
    "Tijuana,MX",
)

TITLE = "Clima MX"
SUBTITLE = "Pronóstico en tiempo real"
FOOTER = "Datos proporcionados por OpenWeatherMap"


class Dashboard:
    """
    Holds the city list and exactly one card per city, in list order.

    The list is fixed for the dashboard's lifetime. Cards never talk to each
    other or to the dashboard; a failing card only affects itself.
    """

    def __init__(
        self,
        service: WeatherService,
        cities: Sequence[str] = DEFAULT_CITIES,
        clock_interval: float = CLOCK_INTERVAL_SECONDS,
        now: Callable[[], datetime] = datetime.now,
        on_change: Optional[Callable[[CityCard], None]] = None,
    ):
        self.cities = tuple(cities)
        self.cards: List[CityCard] = [
            CityCard(city, service, clock_interval=clock_interval, now=now, on_change=on_change)
            for city in self.cities
        ]
        self.mounted = False

    def mount(self) -> List[asyncio.Task]:
        """Start every card. Must be called from a running event loop."""
        logging.info(f"Mounting dashboard with {len(self.cards)} cards")
        self.mounted = True
        return [card.start() for card in self.cards]

    def unmount(self) -> None:
        for card in self.cards:
            card.destroy()
        self.mounted = False
        logging.info("Dashboard unmounted")

    def refresh(self, index: int) -> asyncio.Task:
        """
        Manually refresh one card.

        Args:
            index: 0-based position of the card in the city list

        Raises:
            IndexError: If no card sits at that position
        """
        if not 0 <= index < len(self.cards):
            raise IndexError(f"No card at position {index + 1} (have {len(self.cards)})")
        return self.cards[index].refresh()

    def refresh_all(self) -> List[asyncio.Task]:
        return [card.refresh() for card in self.cards]

    async def wait_idle(self) -> None:
        """Wait until no card has a fetch in flight."""
        while True:
            pending = [card.pending_fetch for card in self.cards if card.pending_fetch is not None]
            if not pending:
                return
            await asyncio.gather(*pending, return_exceptions=True)

    def views(self) -> List[CardView]:
        return [card.view() for card in self.cards]
