"""Unit tests for unit conversion."""

from itertools import permutations

import pytest

from src.shared.api.errors import UnsupportedUnitError
from src.shared.units import (
    DISTANCE_TO_KM,
    PRECIPITATION_TO_MM,
    PRESSURE_TO_HPA,
    SPEED_TO_MPS,
    TEMPERATURE_UNITS,
    QuantityKind,
    celsius_to_fahrenheit,
    convert,
    convert_distance,
    convert_precipitation,
    convert_pressure,
    convert_speed,
    convert_temperature,
    fahrenheit_to_celsius,
    kind_of,
)

UNIT_TABLES = (
    sorted(TEMPERATURE_UNITS),
    sorted(SPEED_TO_MPS),
    sorted(PRESSURE_TO_HPA),
    sorted(DISTANCE_TO_KM),
    sorted(PRECIPITATION_TO_MM),
)
ALL_UNITS = [unit for units in UNIT_TABLES for unit in units]
UNIT_PAIRS = [pair for units in UNIT_TABLES for pair in permutations(units, 2)]
SAMPLE_VALUES = (-40.0, 0.0, 0.37, 29.92, 1013.25)


class TestTemperature:
    """Tests for temperature conversion."""

    def test_freezing_and_boiling(self) -> None:
        assert celsius_to_fahrenheit(0.0) == 32.0
        assert celsius_to_fahrenheit(100.0) == 212.0
        assert fahrenheit_to_celsius(32.0) == 0.0

    def test_minus_forty_is_fixed_point(self) -> None:
        assert convert_temperature(-40.0, "celsius", "fahrenheit") == -40.0

    def test_same_unit_is_identity(self) -> None:
        assert convert_temperature(71.3, "fahrenheit", "fahrenheit") == 71.3

    def test_unknown_unit_raises(self) -> None:
        with pytest.raises(UnsupportedUnitError):
            convert_temperature(20.0, "kelvin", "celsius")


class TestLinearKinds:
    """Tests for speed, pressure, distance and precipitation."""

    def test_speed(self) -> None:
        assert convert_speed(1.0, "ms", "mph") == pytest.approx(2.23694, rel=1e-4)
        assert convert_speed(36.0, "kmh", "ms") == pytest.approx(10.0)
        assert convert_speed(1.0, "knots", "kmh") == pytest.approx(1.852)

    def test_pressure(self) -> None:
        assert convert_pressure(1013.25, "hPa", "inHg") == pytest.approx(29.92, abs=0.01)
        assert convert_pressure(101.325, "kPa", "hPa") == pytest.approx(1013.25)
        assert convert_pressure(760.0, "mmHg", "hPa") == pytest.approx(1013.25, abs=0.01)

    def test_distance(self) -> None:
        assert convert_distance(1.609344, "kilometers", "miles") == pytest.approx(1.0)

    def test_precipitation(self) -> None:
        assert convert_precipitation(25.4, "mm", "inches") == pytest.approx(1.0)

    def test_round_trip_within_tolerance(self) -> None:
        mph = convert_speed(7.3, "ms", "mph")

        assert convert_speed(mph, "mph", "ms") == pytest.approx(7.3)

    def test_unknown_unit_raises(self) -> None:
        with pytest.raises(UnsupportedUnitError) as exc_info:
            convert_speed(1.0, "furlongs_per_fortnight", "ms")

        assert exc_info.value.kind == "speed"


class TestConvert:
    """Tests for the generic dispatcher."""

    def test_kind_of(self) -> None:
        assert kind_of("celsius") is QuantityKind.TEMPERATURE
        assert kind_of("inHg") is QuantityKind.PRESSURE
        assert kind_of("miles") is QuantityKind.DISTANCE

    def test_dispatch(self) -> None:
        assert convert(10.0, "celsius", "fahrenheit") == 50.0
        assert convert(1.0, "inches", "mm") == pytest.approx(25.4)

    def test_mixed_kinds_rejected(self) -> None:
        with pytest.raises(UnsupportedUnitError):
            convert(1.0, "mph", "hPa")

    def test_unknown_tag_rejected(self) -> None:
        with pytest.raises(UnsupportedUnitError):
            kind_of("parsecs")


class TestConversionProperties:
    """Round-trip and identity over every supported unit."""

    @pytest.mark.parametrize(("from_unit", "to_unit"), UNIT_PAIRS)
    def test_round_trip(self, from_unit: str, to_unit: str) -> None:
        for value in SAMPLE_VALUES:
            there = convert(value, from_unit, to_unit)

            assert convert(there, to_unit, from_unit) == pytest.approx(value, abs=1e-9)

    @pytest.mark.parametrize("unit", ALL_UNITS)
    def test_same_unit_is_exact_identity(self, unit: str) -> None:
        for value in SAMPLE_VALUES:
            assert convert(value, unit, unit) == value

    def test_every_kind_covered(self) -> None:
        assert {kind_of(unit) for unit in ALL_UNITS} == set(QuantityKind)
