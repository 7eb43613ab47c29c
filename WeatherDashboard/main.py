"""Terminal weather dashboard: one live card per city."""
import argparse
import asyncio
import logging
import os
import signal
import sys
import threading
from typing import List, Optional

from city_card import CLOCK_INTERVAL_SECONDS, CardState
from config import DashboardConfig, load_config
from dashboard import DEFAULT_CITIES, Dashboard
from dashboard_canvas import PILCanvas, TextCanvas
from layout import dashboard_size, render_dashboard
from openweather_provider import OpenWeatherProvider
from weather_service import WeatherService

BASE_DIR = os.path.dirname(os.path.abspath(__file__))
DEFAULT_LOG_FILE = os.path.join(BASE_DIR, "weather-dashboard.log")
CLEAR_SCREEN = "\x1b[2J\x1b[H"
PROMPT = "Comandos: <número> actualiza una tarjeta, a = todas, q = salir"


def parse_args(argv: Optional[List[str]] = None) -> argparse.Namespace:
    parser = argparse.ArgumentParser("Terminal weather dashboard")
    parser.add_argument("--log-file", default=DEFAULT_LOG_FILE)
    parser.add_argument("--columns", type=int, default=3, help="Cards per row")
    parser.add_argument("--clock-interval", type=float, default=CLOCK_INTERVAL_SECONDS,
                        help="Seconds between 'last updated' clock refreshes")
    parser.add_argument("--once", action="store_true", help="Fetch every city once, print and exit")
    parser.add_argument("--png", default=None, help="Also render the dashboard to this PNG file")
    parser.add_argument("--verbose", action="store_true")
    args = parser.parse_args(argv)
    if args.columns < 1:
        parser.error("--columns must be at least 1")
    if args.clock_interval <= 0:
        parser.error("--clock-interval must be positive")
    return args


def setup_logging(log_file: str, verbose: bool) -> None:
    log_level = logging.DEBUG if verbose else logging.INFO
    # stdout belongs to the dashboard itself
    logging.basicConfig(
        level=log_level,
        format="%(asctime)s - %(levelname)s - %(message)s",
        handlers=[
            logging.StreamHandler(sys.stderr),
            logging.FileHandler(log_file)
        ]
    )


def build_weather_service(config: DashboardConfig) -> WeatherService:
    provider = OpenWeatherProvider(
        api_key=config.api_key,
        base_url=config.base_url,
        units="metric",
        lang=config.lang,
        timeout=config.timeout,
    )
    logging.info("Weather service ready (base=%s)", config.base_url)
    return WeatherService(provider)


def render_text(dashboard: Dashboard, columns: int) -> str:
    width, height = dashboard_size(len(dashboard.cards), columns)
    canvas = TextCanvas(width, height)
    render_dashboard(canvas, dashboard.views(), columns)
    return canvas.to_text()


def save_png(dashboard: Dashboard, filename: str, columns: int) -> None:
    width, height = dashboard_size(len(dashboard.cards), columns)
    canvas = PILCanvas(width, height)
    render_dashboard(canvas, dashboard.views(), columns)
    canvas.save(filename)


async def run_once(dashboard: Dashboard, columns: int, png: Optional[str] = None) -> int:
    """
    Fetch every card once, print the dashboard and tear it down.

    Returns:
        0 if no card ended in an error, 1 otherwise
    """
    dashboard.mount()
    try:
        await dashboard.wait_idle()
        print(render_text(dashboard, columns))
        if png:
            save_png(dashboard, png, columns)
    finally:
        dashboard.unmount()
    failed = [card.city for card in dashboard.cards if card.state is CardState.ERROR]
    if failed:
        logging.warning("Cards in error: %s", ", ".join(failed))
        return 1
    return 0


def handle_command(dashboard: Dashboard, command: str, stop: asyncio.Event) -> None:
    """
    Apply one interactive command.

    "q" stops, "a" refreshes every card, a card number (1-based) refreshes
    that card; anything else is logged and ignored.
    """
    command = command.strip().lower()
    if not command:
        return
    if command == "q":
        stop.set()
    elif command == "a":
        dashboard.refresh_all()
    elif command.isdigit():
        try:
            dashboard.refresh(int(command) - 1)
        except IndexError as e:
            logging.warning(str(e))
    else:
        logging.warning("Unknown command: %r", command)


def _read_stdin(loop: asyncio.AbstractEventLoop, queue: asyncio.Queue) -> None:
    for line in sys.stdin:
        if loop.is_closed():
            return
        loop.call_soon_threadsafe(queue.put_nowait, line)
    if not loop.is_closed():
        loop.call_soon_threadsafe(queue.put_nowait, None)


async def _consume_commands(dashboard: Dashboard, queue: asyncio.Queue, stop: asyncio.Event) -> None:
    while not stop.is_set():
        line = await queue.get()
        if line is None:
            logging.info("stdin closed, shutting down")
            stop.set()
            return
        handle_command(dashboard, line, stop)


def _draw(dashboard: Dashboard, columns: int) -> None:
    output = render_text(dashboard, columns)
    if sys.stdout.isatty():
        sys.stdout.write(CLEAR_SCREEN)
    sys.stdout.write(f"{output}\n\n{PROMPT}\n")
    sys.stdout.flush()


async def run_interactive(dashboard: Dashboard, changed: asyncio.Event, columns: int,
                          png: Optional[str] = None) -> int:
    """Keep the dashboard on screen, redrawing whenever a card changes."""
    loop = asyncio.get_running_loop()
    stop = asyncio.Event()

    def signal_handler(signum):
        logging.info("Received signal %s, shutting down", signum)
        stop.set()

    for signum in (signal.SIGINT, signal.SIGTERM):
        loop.add_signal_handler(signum, signal_handler, signum)

    queue: asyncio.Queue = asyncio.Queue()
    threading.Thread(target=_read_stdin, args=(loop, queue), daemon=True).start()
    commands = asyncio.create_task(_consume_commands(dashboard, queue, stop))

    dashboard.mount()
    try:
        while not stop.is_set():
            changed.clear()
            _draw(dashboard, columns)
            waiters = [asyncio.create_task(changed.wait()), asyncio.create_task(stop.wait())]
            _, pending = await asyncio.wait(waiters, return_when=asyncio.FIRST_COMPLETED)
            for task in pending:
                task.cancel()
    finally:
        commands.cancel()
        dashboard.unmount()
        for signum in (signal.SIGINT, signal.SIGTERM):
            loop.remove_signal_handler(signum)
        if png:
            save_png(dashboard, png, columns)
    logging.info("Stopping dashboard")
    return 0


async def run(config: DashboardConfig, args: argparse.Namespace) -> int:
    changed = asyncio.Event()
    dashboard = Dashboard(
        build_weather_service(config),
        cities=config.cities or DEFAULT_CITIES,
        clock_interval=args.clock_interval,
        on_change=lambda card: changed.set(),
    )
    if args.once:
        return await run_once(dashboard, args.columns, args.png)
    return await run_interactive(dashboard, changed, args.columns, args.png)


def main(argv: Optional[List[str]] = None) -> int:
    args = parse_args(argv)
    setup_logging(args.log_file, args.verbose)
    config = load_config()
    return asyncio.run(run(config, args))


if __name__ == "__main__":
    sys.exit(main())
