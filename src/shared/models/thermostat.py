"""Canonical thermostat data types."""

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class ThermostatMode(str, Enum):
    """Effective HVAC mode governing the target temperature."""

    HEAT = "heat"
    COOL = "cool"
    AUTO = "auto"
    OFF = "off"


class ThermostatSnapshotData(BaseModel):
    """One physical thermostat; mode and target are resolved values."""

    model_config = ConfigDict(from_attributes=True, use_enum_values=False)

    thermostat_id: str
    name: str = Field(..., description="Stable display label from the allow-list")
    temperature: float
    target_temperature: float | None = None
    humidity: float | None = None
    mode: ThermostatMode
    hvac_state: str | None = Field(None, description="Running equipment, e.g. 'idle'")
    occupied: bool = False
    timestamp: datetime
    last_updated: datetime


class ThermostatsResponse(BaseModel):
    """Current thermostats as served to the presentation layer."""

    thermostats: list[ThermostatSnapshotData] = Field(default_factory=list)
    cached: bool = False
    stale: bool = False
    last_updated: datetime | None = None
    error_message: str | None = None
