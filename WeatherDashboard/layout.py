"""Layout and rendering logic for the dashboard - pure functions for testability."""
import textwrap
from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, List, Sequence, Tuple

from city_card import CardState, CardView
from dashboard import FOOTER, SUBTITLE, TITLE
from openweather_provider import icon_url
from weather_data import WeatherSnapshot

# Card geometry, in character cells
CARD_WIDTH = 36
CARD_HEIGHT = 18
CARD_GAP_X = 2
CARD_GAP_Y = 1
HEADER_HEIGHT = 3
FOOTER_HEIGHT = 2

LOADING_CAPTION = "Cargando datos climáticos..."
RETRY_LABEL = "Reintentar"
UPDATE_LABEL = "Actualizar los datos"
UPDATED_CAPTION = "Actualizado"

WHITE = (255, 255, 255)
MUTED = (160, 170, 185)
BORDER = (90, 100, 120)
ERROR_RED = (252, 165, 165)


class DrawOp:
    """Represents a drawing operation (for testing/layout calculation)."""
    def __init__(self, op_type: str, **kwargs):
        self.op_type = op_type
        self.kwargs = kwargs

    def shifted(self, dx: int, dy: int) -> "DrawOp":
        kwargs = dict(self.kwargs)
        kwargs["x"] += dx
        kwargs["y"] += dy
        return DrawOp(self.op_type, **kwargs)

    def __repr__(self) -> str:
        return f"DrawOp({self.op_type!r}, {self.kwargs!r})"


def round_half_away(value: float) -> int:
    """Round to the nearest integer, ties away from zero (2.5 -> 3, -2.5 -> -3)."""
    return int(Decimal(value).quantize(Decimal(1), rounding=ROUND_HALF_UP))


def format_number(value: float) -> str:
    """Show a number as-is, dropping a trailing ".0" (55.0 -> "55")."""
    return f"{value:g}"


def format_fields(snapshot: WeatherSnapshot) -> Dict[str, str]:
    """
    Display strings for one snapshot.

    Args:
        snapshot: Weather snapshot to format

    Returns:
        Dict with "temperature", "feels_like", "humidity", "wind" and
        "description" entries
    """
    return {
        "temperature": f"{round_half_away(snapshot.temp)}°C",
        "feels_like": f"{round_half_away(snapshot.feels_like)}°C",
        "humidity": f"{format_number(snapshot.humidity)}%",
        "wind": f"{round_half_away(snapshot.wind_speed)} km/h",
        "description": snapshot.description or "",
    }


def get_temperature_color(temp_c: float) -> Tuple[int, int, int]:
    """
    Get RGB color for temperature using a simple gradient.

    Cold (< 0°C) = blue
    Cool (0-15°C) = cyan
    Mild (15-25°C) = green/yellow
    Warm (25-35°C) = yellow/orange
    Hot (> 35°C) = red

    Args:
        temp_c: Temperature in Celsius

    Returns:
        Tuple of (r, g, b) values (0-255)
    """
    if temp_c < 0:
        return (0, 0, 255)
    elif temp_c < 15:
        ratio = temp_c / 15.0
        return (0, int(255 * ratio), 255)
    elif temp_c < 25:
        ratio = (temp_c - 15) / 10.0
        return (int(255 * ratio), 255, int(255 * (1 - ratio)))
    elif temp_c < 35:
        ratio = (temp_c - 25) / 10.0
        return (255, int(255 * (1 - ratio * 0.5)), 0)
    else:
        ratio = min((temp_c - 35) / 10.0, 1.0)
        return (255, int(255 * (1 - ratio)), 0)


def _text(x: int, y: int, text: str, color=WHITE) -> DrawOp:
    r, g, b = color
    return DrawOp("text", x=x, y=y, text=text, r=r, g=g, b=b)


def _centered(y: int, text: str, color=WHITE, width: int = CARD_WIDTH) -> DrawOp:
    return _text(max(0, (width - len(text)) // 2), y, text, color)


def _right_aligned(y: int, text: str, color=WHITE) -> DrawOp:
    return _text(max(0, CARD_WIDTH - 2 - len(text)), y, text, color)


def _frame() -> DrawOp:
    r, g, b = BORDER
    return DrawOp("box", x=0, y=0, width=CARD_WIDTH, height=CARD_HEIGHT, r=r, g=g, b=b)


def _metric(x: int, y: int, label: str, value: str) -> List[DrawOp]:
    width = (CARD_WIDTH - 4) // 2
    r, g, b = BORDER
    return [
        DrawOp("box", x=x, y=y, width=width, height=4, r=r, g=g, b=b),
        _text(x + 1, y + 1, label, MUTED),
        _text(x + 1, y + 2, value[:width - 2]),
    ]


def _button(y: int, label: str) -> DrawOp:
    return DrawOp("button", x=2, y=y, width=CARD_WIDTH - 4, label=label)


def calculate_card_layout(view: CardView) -> List[DrawOp]:
    """
    Calculate drawing operations for one card, relative to its top-left corner.

    LOADING shows a spinner and a caption, ERROR a warning, the message and a
    retry button, READY the full weather card. READY without a snapshot
    (the provider answered with nothing usable) draws nothing at all.

    Args:
        view: Card state to lay out

    Returns:
        List of DrawOp objects representing what to draw
    """
    if view.state is CardState.LOADING:
        return [
            _frame(),
            DrawOp("spinner", x=CARD_WIDTH // 2 - 1, y=6),
            _centered(9, LOADING_CAPTION, MUTED),
        ]

    if view.state is CardState.ERROR:
        ops = [_frame(), DrawOp("warning", x=CARD_WIDTH // 2 - 1, y=3)]
        lines = textwrap.wrap(f"Error: {view.error}", CARD_WIDTH - 4)[:5]
        for offset, line in enumerate(lines):
            ops.append(_centered(6 + offset, line, ERROR_RED))
        ops.append(_button(12, RETRY_LABEL))
        return ops

    snapshot = view.snapshot
    if snapshot is None:
        return []

    fields = format_fields(snapshot)
    ops = [
        _frame(),
        _text(2, 1, snapshot.name),
        _text(2, 2, snapshot.country, MUTED),
        _right_aligned(1, UPDATED_CAPTION, MUTED),
        _right_aligned(2, view.clock_label),
    ]

    text_x = 2
    if snapshot.icon:
        ops.append(DrawOp("icon", x=2, y=4, code=snapshot.icon, url=icon_url(snapshot.icon), alt=fields["description"]))
        text_x = 9
    ops.append(_text(text_x, 4, fields["temperature"], get_temperature_color(snapshot.temp)))
    ops.append(_text(text_x, 5, fields["description"], MUTED))

    ops += _metric(2, 7, "Sensación", fields["feels_like"])
    ops += _metric(18, 7, "Humedad", fields["humidity"])
    ops += _metric(2, 11, "Viento", fields["wind"])
    ops += _metric(18, 11, "Condición", fields["description"])
    ops.append(_button(16, UPDATE_LABEL))
    return ops


def dashboard_size(card_count: int, columns: int) -> Tuple[int, int]:
    """Width and height, in cells, of a dashboard with card_count cards."""
    columns = max(1, min(columns, card_count or 1))
    rows = (card_count + columns - 1) // columns
    width = columns * CARD_WIDTH + (columns - 1) * CARD_GAP_X
    height = HEADER_HEIGHT + rows * CARD_HEIGHT + max(rows - 1, 0) * CARD_GAP_Y + FOOTER_HEIGHT
    return width, height


def calculate_dashboard_layout(views: Sequence[CardView], columns: int = 3) -> List[DrawOp]:
    """
    Lay out the header, one card per view in order, and the footer.

    Cards fill rows left to right, top to bottom; list order is the only
    ordering.
    """
    columns = max(1, min(columns, len(views) or 1))
    width, height = dashboard_size(len(views), columns)

    ops = [
        _centered(0, TITLE, WHITE, width),
        _centered(1, SUBTITLE, MUTED, width),
    ]
    for index, view in enumerate(views):
        row, column = divmod(index, columns)
        dx = column * (CARD_WIDTH + CARD_GAP_X)
        dy = HEADER_HEIGHT + row * (CARD_HEIGHT + CARD_GAP_Y)
        ops += [op.shifted(dx, dy) for op in calculate_card_layout(view)]
    ops.append(_centered(height - 1, FOOTER, MUTED, width))
    return ops


def render_ops(canvas, ops: Sequence[DrawOp]) -> None:
    """
    Execute drawing operations on a canvas.

    Args:
        canvas: DashboardCanvas instance (text or image)
        ops: Operations from one of the calculate_* functions
    """
    for op in ops:
        kw = op.kwargs
        if op.op_type == "text":
            canvas.draw_text(kw["x"], kw["y"], kw["text"], kw["r"], kw["g"], kw["b"])
        elif op.op_type == "box":
            canvas.draw_box(kw["x"], kw["y"], kw["width"], kw["height"], kw["r"], kw["g"], kw["b"])
        elif op.op_type == "button":
            canvas.draw_button(kw["x"], kw["y"], kw["width"], kw["label"])
        elif op.op_type == "icon":
            canvas.draw_icon(kw["x"], kw["y"], kw["code"], kw["url"])
        elif op.op_type == "spinner":
            canvas.draw_spinner(kw["x"], kw["y"])
        elif op.op_type == "warning":
            canvas.draw_warning(kw["x"], kw["y"])
        else:
            raise ValueError(f"Unknown draw operation: {op.op_type}")


def render_dashboard(canvas, views: Sequence[CardView], columns: int = 3) -> None:
    """Clear the canvas and draw the whole dashboard on it."""
    canvas.clear()
    render_ops(canvas, calculate_dashboard_layout(views, columns))
