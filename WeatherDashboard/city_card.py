"""Per-city card: owns its fetch lifecycle, display state and clock label."""
import asyncio
import logging
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Callable, Optional

from weather_data import WeatherSnapshot
from weather_provider import WeatherProviderError
from weather_service import WeatherService

CLOCK_INTERVAL_SECONDS = 60.0
GENERIC_ERROR = "Error al obtener clima"


class CardState(Enum):
    LOADING = "loading"
    ERROR = "error"
    READY = "ready"


@dataclass(frozen=True)
class CardView:
    """Immutable copy of everything a renderer needs for one card."""
    city: str
    state: CardState
    snapshot: Optional[WeatherSnapshot] = None
    error: Optional[str] = None
    clock_label: str = ""


def format_clock(moment: datetime) -> str:
    """
    Format a local time as the card's "last updated" label.

    Fixed 12-hour clock with minute granularity in the dashboard's locale,
    e.g. "03:07 p.m.".
    """
    hour = moment.hour % 12 or 12
    suffix = "a.m." if moment.hour < 12 else "p.m."
    return f"{hour:02d}:{moment.minute:02d} {suffix}"


class CityCard:
    """
    State machine for one city's card.

    LOADING -> READY | ERROR, and back to LOADING on every fetch. Two event
    producers drive it: fetches (on start and on manual refresh) and a
    periodic timer that only refreshes the clock label. Nothing here is
    shared with other cards.

    Every fetch takes a generation number; a fetch that completes after a
    newer one was started is discarded, so the latest trigger always wins.
    """

    def __init__(
        self,
        city: str,
        service: WeatherService,
        clock_interval: float = CLOCK_INTERVAL_SECONDS,
        now: Callable[[], datetime] = datetime.now,
        on_change: Optional[Callable[["CityCard"], None]] = None,
    ):
        """
        Args:
            city: City identifier, e.g. "Guadalajara,MX"
            service: Service used to fetch weather
            clock_interval: Seconds between clock label refreshes
            now: Local clock, injectable for tests
            on_change: Called with the card after every visible change
        """
        self.city = city
        self.service = service
        self.clock_interval = clock_interval
        self._now = now
        self._on_change = on_change

        self.state = CardState.LOADING
        self.snapshot: Optional[WeatherSnapshot] = None
        self.error: Optional[str] = None
        self.clock_label = ""
        self.ticks = 0

        self._generation = 0
        self._fetch_task: Optional[asyncio.Task] = None
        self._clock_task: Optional[asyncio.Task] = None
        self._destroyed = False

    @property
    def timer_active(self) -> bool:
        return self._clock_task is not None and not self._clock_task.done()

    @property
    def pending_fetch(self) -> Optional[asyncio.Task]:
        """The most recent fetch task, if it has not finished yet."""
        if self._fetch_task is not None and not self._fetch_task.done():
            return self._fetch_task
        return None

    @property
    def destroyed(self) -> bool:
        return self._destroyed

    def view(self) -> CardView:
        return CardView(
            city=self.city,
            state=self.state,
            snapshot=self.snapshot if self.state is CardState.READY else None,
            error=self.error if self.state is CardState.ERROR else None,
            clock_label=self.clock_label,
        )

    def start(self) -> asyncio.Task:
        """Mount the card: fetch once and start the clock timer."""
        if self._destroyed:
            raise RuntimeError(f"Card for {self.city} was already destroyed")
        if self._clock_task is None:
            self._clock_task = asyncio.create_task(self._clock_loop(), name=f"clock:{self.city}")
        logging.info(f"Card {self.city} mounted")
        return self.refresh()

    def refresh(self) -> asyncio.Task:
        """Manual trigger ("Reintentar" / "Actualizar los datos")."""
        if self._destroyed:
            raise RuntimeError(f"Card for {self.city} was already destroyed")
        self._fetch_task = asyncio.create_task(self.fetch_weather(), name=f"fetch:{self.city}")
        return self._fetch_task

    def destroy(self) -> None:
        """Unmount the card: cancel the clock timer and any in-flight fetch."""
        self._destroyed = True
        for task in (self._clock_task, self._fetch_task):
            if task is not None and not task.done():
                task.cancel()
        logging.info(f"Card {self.city} destroyed")

    def refresh_clock(self) -> None:
        self.clock_label = format_clock(self._now())
        self._notify()

    async def fetch_weather(self) -> None:
        """Fetch weather for this card's city and settle into READY or ERROR."""
        self._generation += 1
        generation = self._generation

        self.state = CardState.LOADING
        self.error = None
        self._notify()

        try:
            snapshot = await self.service.fetch(self.city)
        except WeatherProviderError as e:
            if self._is_superseded(generation):
                return
            logging.warning(f"Card {self.city}: {e.__class__.__name__}: {e}")
            self._fail(str(e) or GENERIC_ERROR)
            return
        except Exception:
            if self._is_superseded(generation):
                return
            logging.exception(f"Card {self.city}: unexpected error while fetching weather")
            self._fail(GENERIC_ERROR)
            return

        if self._is_superseded(generation):
            return
        self.snapshot = snapshot
        self.state = CardState.READY
        logging.info(f"Card {self.city} ready")
        self.refresh_clock()

    def _fail(self, message: str) -> None:
        self.error = message
        self.state = CardState.ERROR
        self._notify()

    def _is_superseded(self, generation: int) -> bool:
        if generation != self._generation:
            logging.debug(f"Card {self.city}: discarding result of superseded fetch #{generation}")
            return True
        return False

    async def _clock_loop(self) -> None:
        while True:
            await asyncio.sleep(self.clock_interval)
            self.ticks += 1
            self.refresh_clock()

    def _notify(self) -> None:
        if self._on_change is None:
            return
        try:
            self._on_change(self)
        except Exception:
            logging.exception(f"Card {self.city}: change callback failed")
