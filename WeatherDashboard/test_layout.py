"""Tests for layout and rendering logic."""
import pytest
from city_card import CardState, CardView
from dashboard_canvas import TextCanvas
from layout import (
    CARD_HEIGHT,
    CARD_WIDTH,
    LOADING_CAPTION,
    RETRY_LABEL,
    UPDATE_LABEL,
    calculate_card_layout,
    calculate_dashboard_layout,
    dashboard_size,
    format_fields,
    get_temperature_color,
    render_dashboard,
    round_half_away,
)
from weather_data import WeatherCondition, WeatherSnapshot


@pytest.fixture
def sample_weather():
    """The Guadalajara sample snapshot."""
    return WeatherSnapshot(
        temp=21.6,
        feels_like=20.9,
        humidity=55.0,
        wind_speed=3.2,
        conditions=(WeatherCondition("cielo claro", "01d"),),
        name="Guadalajara",
        country="MX",
        timestamp=1700000000
    )


def ready(snapshot, city="Guadalajara,MX", clock_label="03:07 p.m."):
    return CardView(city=city, state=CardState.READY, snapshot=snapshot, clock_label=clock_label)


def texts(ops):
    return [op.kwargs["text"] for op in ops if op.op_type == "text"]


def test_format_fields(sample_weather):
    """Test the displayed values for the Guadalajara sample."""
    fields = format_fields(sample_weather)

    assert fields == {
        "temperature": "22°C",
        "feels_like": "21°C",
        "humidity": "55%",
        "wind": "3 km/h",
        "description": "cielo claro",
    }


@pytest.mark.parametrize("value, expected", [
    (21.6, 22),
    (20.9, 21),
    (3.2, 3),
    (2.5, 3),
    (-2.5, -3),
    (0.5, 1),
    (-0.4, 0),
    (-21.6, -22),
    (0.49999999999999994, 0),
])
def test_round_half_away(value, expected):
    """Test nearest-integer rounding with ties away from zero."""
    assert round_half_away(value) == expected


def test_format_fields_non_integer_humidity(sample_weather):
    """Humidity is shown as reported, without rounding."""
    from dataclasses import replace
    fields = format_fields(replace(sample_weather, humidity=55.5))

    assert fields["humidity"] == "55.5%"


def test_temperature_color_ranges():
    """Test temperature color gradient."""
    assert get_temperature_color(-10) == (0, 0, 255)
    r, g, b = get_temperature_color(7.5)
    assert r == 0 and b == 255
    r, g, b = get_temperature_color(45)
    assert (r, g, b) == (255, 0, 0)


def test_loading_layout():
    """Test that LOADING shows a spinner and the caption, no data."""
    ops = calculate_card_layout(CardView(city="Guadalajara,MX", state=CardState.LOADING))

    assert [op.op_type for op in ops].count("spinner") == 1
    assert texts(ops) == [LOADING_CAPTION]
    assert not any(op.op_type == "button" for op in ops)


def test_error_layout():
    """Test that ERROR shows the warning, message and retry button."""
    view = CardView(city="Atlantis,XX", state=CardState.ERROR, error="Error 404")
    ops = calculate_card_layout(view)

    assert any(op.op_type == "warning" for op in ops)
    assert "Error: Error 404" in texts(ops)
    buttons = [op for op in ops if op.op_type == "button"]
    assert len(buttons) == 1
    assert buttons[0].kwargs["label"] == RETRY_LABEL


def test_error_layout_wraps_long_messages():
    """Test that long error messages stay inside the card."""
    view = CardView(city="X", state=CardState.ERROR,
                    error="API key no encontrada en OPENWEATHER_KEY")
    ops = calculate_card_layout(view)

    lines = [op for op in ops if op.op_type == "text"]
    assert len(lines) >= 2
    assert all(op.kwargs["x"] + len(op.kwargs["text"]) <= CARD_WIDTH for op in lines)


def test_ready_layout(sample_weather):
    """Test that READY shows every field and the update button."""
    ops = calculate_card_layout(ready(sample_weather))
    shown = texts(ops)

    for expected in ["Guadalajara", "MX", "03:07 p.m.", "22°C", "21°C", "55%", "3 km/h"]:
        assert expected in shown
    assert shown.count("cielo claro") == 2
    for label in ["Sensación", "Humedad", "Viento", "Condición"]:
        assert label in shown

    icons = [op for op in ops if op.op_type == "icon"]
    assert len(icons) == 1
    assert icons[0].kwargs["url"] == "https://openweathermap.org/img/wn/01d@4x.png"
    assert [op.kwargs["label"] for op in ops if op.op_type == "button"] == [UPDATE_LABEL]


def test_ready_layout_metric_grid(sample_weather):
    """Test that the four metrics sit on a 2x2 grid."""
    ops = calculate_card_layout(ready(sample_weather))
    boxes = [(op.kwargs["x"], op.kwargs["y"]) for op in ops if op.op_type == "box"][1:]

    assert len(boxes) == 4
    assert len({x for x, _ in boxes}) == 2
    assert len({y for _, y in boxes}) == 2


def test_ready_layout_without_icon(sample_weather):
    """Test a snapshot without conditions."""
    from dataclasses import replace
    ops = calculate_card_layout(ready(replace(sample_weather, conditions=())))

    assert not any(op.op_type == "icon" for op in ops)
    assert "22°C" in texts(ops)


def test_ready_without_snapshot_renders_nothing():
    """Test that a fetch with no usable payload draws nothing."""
    assert calculate_card_layout(ready(None)) == []


def test_layout_stays_inside_card(sample_weather):
    """Test that no card operation escapes the card bounds."""
    for view in [
        ready(sample_weather),
        CardView(city="X", state=CardState.LOADING),
        CardView(city="X", state=CardState.ERROR, error="Error 500"),
    ]:
        for op in calculate_card_layout(view):
            assert 0 <= op.kwargs["x"] < CARD_WIDTH
            assert 0 <= op.kwargs["y"] < CARD_HEIGHT


def test_dashboard_size():
    """Test grid sizing."""
    width, height = dashboard_size(6, 3)
    assert width == 3 * CARD_WIDTH + 2 * 2
    assert height == 3 + 2 * CARD_HEIGHT + 1 + 2

    assert dashboard_size(2, 5) == dashboard_size(2, 2)


def test_dashboard_renders_cards_in_order(sample_weather):
    """Test that cards appear in list order, header first."""
    from dataclasses import replace
    names = ["Ciudad de México", "Guadalajara", "Monterrey"]
    views = [ready(replace(sample_weather, name=name), city=f"{name},MX") for name in names]

    width, height = dashboard_size(len(views), 1)
    canvas = TextCanvas(width, height)
    render_dashboard(canvas, views, columns=1)
    output = canvas.to_text()

    positions = [output.index(name) for name in names]
    assert positions == sorted(positions)
    assert output.index("Clima MX") < positions[0]
    assert "OpenWeatherMap" in output.splitlines()[-1]


def test_dashboard_layout_columns(sample_weather):
    """Test that cards fill rows left to right."""
    views = [ready(sample_weather) for _ in range(4)]
    ops = calculate_dashboard_layout(views, columns=2)
    frames = [(op.kwargs["x"], op.kwargs["y"]) for op in ops
              if op.op_type == "box" and op.kwargs["width"] == CARD_WIDTH]

    assert frames == [(0, 3), (CARD_WIDTH + 2, 3), (0, 3 + CARD_HEIGHT + 1), (CARD_WIDTH + 2, 3 + CARD_HEIGHT + 1)]


def test_identical_snapshots_render_identically(sample_weather):
    """Test that rendering is deterministic for repeated identical fetches."""
    outputs = []
    for _ in range(2):
        width, height = dashboard_size(1, 1)
        canvas = TextCanvas(width, height)
        render_dashboard(canvas, [ready(sample_weather)], columns=1)
        outputs.append(canvas.to_text())

    assert outputs[0] == outputs[1]
