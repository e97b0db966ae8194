"""Upstream adapters normalizing provider data into canonical records."""

from src.adapters.thermostat import ThermostatAdapter
from src.adapters.weather import WeatherAdapter

__all__ = [
    "WeatherAdapter",
    "ThermostatAdapter",
]
