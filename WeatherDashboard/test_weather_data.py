"""Tests for weather_data module."""
import dataclasses

import pytest
from weather_data import WeatherCondition, WeatherSnapshot


def make_snapshot(conditions=(WeatherCondition("cielo claro", "01d"),)):
    return WeatherSnapshot(
        temp=21.6,
        feels_like=20.9,
        humidity=55.0,
        wind_speed=3.2,
        conditions=conditions,
        name="Guadalajara",
        country="MX",
        timestamp=1700000000
    )


def test_weather_snapshot_creation():
    """Test creating a snapshot with all fields."""
    weather = make_snapshot()

    assert weather.temp == 21.6
    assert weather.feels_like == 20.9
    assert weather.humidity == 55.0
    assert weather.wind_speed == 3.2
    assert weather.name == "Guadalajara"
    assert weather.country == "MX"
    assert weather.timestamp == 1700000000


def test_primary_condition_is_first():
    """Test that the first condition drives description and icon."""
    weather = make_snapshot(conditions=(
        WeatherCondition("lluvia ligera", "10n"),
        WeatherCondition("niebla", "50n"),
    ))

    assert weather.primary_condition == WeatherCondition("lluvia ligera", "10n")
    assert weather.description == "lluvia ligera"
    assert weather.icon == "10n"


def test_no_conditions():
    """Test a snapshot the provider sent without any condition."""
    weather = make_snapshot(conditions=())

    assert weather.primary_condition is None
    assert weather.description is None
    assert weather.icon is None


def test_snapshot_is_immutable():
    """Snapshots are replaced wholesale, never edited."""
    weather = make_snapshot()

    with pytest.raises(dataclasses.FrozenInstanceError):
        weather.temp = 30.0
