"""Unit conversion for temperature, speed, pressure, distance, and precipitation.

Every quantity kind converts through one base unit (m/s, hPa, km, mm);
temperature converts directly between Fahrenheit and Celsius. Converting a
value to its own unit returns it unchanged. Unknown unit tags raise
UnsupportedUnitError rather than passing values through.
"""

from enum import Enum

from src.shared.api.errors import UnsupportedUnitError


class QuantityKind(Enum):
    """Physical quantity kinds supported by the conversion library."""

    TEMPERATURE = "temperature"
    SPEED = "speed"
    PRESSURE = "pressure"
    DISTANCE = "distance"
    PRECIPITATION = "precipitation"


# Factor to the base unit of each kind: value * factor == value in base unit
SPEED_TO_MPS: dict[str, float] = {
    "ms": 1.0,
    "mph": 0.44704,
    "kmh": 1000.0 / 3600.0,
    "knots": 1852.0 / 3600.0,
}

PRESSURE_TO_HPA: dict[str, float] = {
    "hPa": 1.0,
    "inHg": 33.8638866667,
    "mmHg": 1.33322387415,
    "kPa": 10.0,
}

DISTANCE_TO_KM: dict[str, float] = {
    "kilometers": 1.0,
    "miles": 1.609344,
}

PRECIPITATION_TO_MM: dict[str, float] = {
    "mm": 1.0,
    "inches": 25.4,
}

TEMPERATURE_UNITS: frozenset[str] = frozenset({"fahrenheit", "celsius"})

_FACTOR_TABLES: dict[QuantityKind, dict[str, float]] = {
    QuantityKind.SPEED: SPEED_TO_MPS,
    QuantityKind.PRESSURE: PRESSURE_TO_HPA,
    QuantityKind.DISTANCE: DISTANCE_TO_KM,
    QuantityKind.PRECIPITATION: PRECIPITATION_TO_MM,
}


def fahrenheit_to_celsius(fahrenheit: float) -> float:
    """Convert Fahrenheit to Celsius."""
    return (fahrenheit - 32.0) * 5.0 / 9.0


def celsius_to_fahrenheit(celsius: float) -> float:
    """Convert Celsius to Fahrenheit."""
    return celsius * 9.0 / 5.0 + 32.0


def convert_temperature(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a temperature between ``fahrenheit`` and ``celsius``."""
    for unit in (from_unit, to_unit):
        if unit not in TEMPERATURE_UNITS:
            raise UnsupportedUnitError(unit, QuantityKind.TEMPERATURE.value)
    if from_unit == to_unit:
        return value
    if from_unit == "celsius":
        return celsius_to_fahrenheit(value)
    return fahrenheit_to_celsius(value)


def _convert_linear(value: float, from_unit: str, to_unit: str, kind: QuantityKind) -> float:
    table = _FACTOR_TABLES[kind]
    for unit in (from_unit, to_unit):
        if unit not in table:
            raise UnsupportedUnitError(unit, kind.value)
    if from_unit == to_unit:
        return value
    return value * table[from_unit] / table[to_unit]


def convert_speed(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a speed between ``mph``, ``kmh``, ``ms`` and ``knots``."""
    return _convert_linear(value, from_unit, to_unit, QuantityKind.SPEED)


def convert_pressure(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a pressure between ``inHg``, ``hPa``, ``mmHg`` and ``kPa``."""
    return _convert_linear(value, from_unit, to_unit, QuantityKind.PRESSURE)


def convert_distance(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a distance between ``miles`` and ``kilometers``."""
    return _convert_linear(value, from_unit, to_unit, QuantityKind.DISTANCE)


def convert_precipitation(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a precipitation depth between ``inches`` and ``mm``."""
    return _convert_linear(value, from_unit, to_unit, QuantityKind.PRECIPITATION)


def kind_of(unit: str) -> QuantityKind:
    """Get the quantity kind a unit tag belongs to.

    Raises:
        UnsupportedUnitError: If the tag is unknown
    """
    if unit in TEMPERATURE_UNITS:
        return QuantityKind.TEMPERATURE
    for kind, table in _FACTOR_TABLES.items():
        if unit in table:
            return kind
    raise UnsupportedUnitError(unit)


def convert(value: float, from_unit: str, to_unit: str) -> float:
    """Convert a value between two units of the same quantity kind.

    Args:
        value: Value expressed in ``from_unit``
        from_unit: Source unit tag (e.g. "celsius", "ms", "hPa")
        to_unit: Target unit tag

    Returns:
        Value expressed in ``to_unit``

    Raises:
        UnsupportedUnitError: If either tag is unknown or the kinds differ
    """
    kind = kind_of(from_unit)
    if kind_of(to_unit) is not kind:
        raise UnsupportedUnitError(to_unit, kind.value)
    if kind is QuantityKind.TEMPERATURE:
        return convert_temperature(value, from_unit, to_unit)
    return _convert_linear(value, from_unit, to_unit, kind)
