"""WeatherFlow adapter.

Fetches the latest discrete observation and the forecast current
conditions, merges them into one canonical reading, and records the
reading in the observation store.
"""

from src.analytics.weather_metrics import normalize_provider_trend
from src.shared.api.errors import KioskError, UpstreamFormatError
from src.shared.api.response_models import (
    CurrentConditions,
    WeatherFlowObservationRecord,
    epoch_to_datetime,
)
from src.shared.api.weatherflow import WeatherFlowClient
from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.constants import (
    CANONICAL_DISTANCE_UNIT,
    CANONICAL_PRECIPITATION_UNIT,
    CANONICAL_PRESSURE_UNIT,
    CANONICAL_SPEED_UNIT,
    CANONICAL_TEMPERATURE_UNIT,
)
from src.shared.db.repositories.observation import WeatherObservationRepository
from src.shared.models.weather import WeatherReading
from src.shared.units import convert

logger = get_logger(__name__)

# WeatherFlow reports metric units
PROVIDER_TEMPERATURE_UNIT = "celsius"
PROVIDER_SPEED_UNIT = "ms"
PROVIDER_PRESSURE_UNIT = "hPa"
PROVIDER_PRECIPITATION_UNIT = "mm"
PROVIDER_DISTANCE_UNIT = "kilometers"


def _temperature(value: float | None) -> float | None:
    if value is None:
        return None
    return convert(value, PROVIDER_TEMPERATURE_UNIT, CANONICAL_TEMPERATURE_UNIT)


def _speed(value: float | None) -> float | None:
    if value is None:
        return None
    return convert(value, PROVIDER_SPEED_UNIT, CANONICAL_SPEED_UNIT)


def _pressure(value: float | None) -> float | None:
    if value is None:
        return None
    return convert(value, PROVIDER_PRESSURE_UNIT, CANONICAL_PRESSURE_UNIT)


def _precipitation(value: float | None) -> float | None:
    if value is None:
        return None
    return convert(value, PROVIDER_PRECIPITATION_UNIT, CANONICAL_PRECIPITATION_UNIT)


def _distance(value: float | None) -> float | None:
    if value is None:
        return None
    return convert(value, PROVIDER_DISTANCE_UNIT, CANONICAL_DISTANCE_UNIT)


def _first(*values: float | None) -> float | None:
    for value in values:
        if value is not None:
            return value
    return None


def _first_str(*values: str | None) -> str | None:
    return next((v for v in values if v), None)


class WeatherAdapter:
    """Normalizes WeatherFlow data into canonical weather readings.

    Instantaneous fields come from the latest discrete observation. Feels
    like, dew point and the rain aggregates fall back to the forecast
    current conditions. When the station has no observations, the current
    conditions block stands in as the reading.
    """

    def __init__(
        self,
        client: WeatherFlowClient | None = None,
        observations: WeatherObservationRepository | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize weather adapter.

        Args:
            client: WeatherFlow client (created if not provided)
            observations: Observation store for ``fetch_and_record``
            settings: Settings (defaults to process settings)
        """
        self.settings = settings or get_settings()
        self.client = client if client is not None else WeatherFlowClient(settings=self.settings)
        self.observations = observations
        self._station_names: dict[str, str] = {}

    def station_name(self, station_id: str) -> str:
        """Display name for a station.

        The metadata call is cosmetic: on failure the configured fallback
        name is used and the lookup is retried on the next refresh.
        """
        cached = self._station_names.get(station_id)
        if cached:
            return cached

        try:
            station = self.client.get_station(station_id)
        except KioskError as e:
            logger.warning(
                "station_name_fallback",
                station_id=station_id,
                error=e.message,
                fallback=self.settings.weatherflow_station_name,
            )
            return self.settings.weatherflow_station_name

        name = next((s.display_name for s in station.stations if s.display_name), None)
        if not name:
            logger.warning("station_name_missing", station_id=station_id)
            return self.settings.weatherflow_station_name

        self._station_names[station_id] = name
        return name

    def fetch(self, station_id: str | None = None) -> WeatherReading:
        """Fetch and normalize the current weather for a station.

        Args:
            station_id: Station identifier (defaults to settings)

        Returns:
            Canonical reading

        Raises:
            ConfigurationError: If the API token is missing
            UpstreamFetchError: If a provider call fails
            UpstreamFormatError: If the payloads carry no usable reading
        """
        station_id = station_id or self.settings.weatherflow_station_id

        observation = self.client.get_latest_observation(station_id)
        forecast = self.client.get_forecast(station_id)
        current = forecast.current_conditions
        record = observation.latest

        name = self.station_name(station_id)

        if record is not None:
            reading = self._from_observation(station_id, name, record, current)
        elif current is not None and current.air_temperature is not None:
            logger.warning("weather_observation_missing_using_forecast", station_id=station_id)
            reading = self._from_current_conditions(station_id, name, current)
        else:
            raise UpstreamFormatError(
                message=f"No observation or current conditions for station {station_id}",
                endpoint=f"/observations/station/{station_id}",
            )

        logger.info(
            "weather_reading_normalized",
            station_id=station_id,
            timestamp=reading.timestamp.isoformat(),
            temperature=round(reading.temperature, 1),
        )
        return reading

    def fetch_and_record(self, station_id: str | None = None) -> WeatherReading:
        """Fetch a reading and append it to the observation store."""
        reading = self.fetch(station_id)
        if self.observations is not None:
            self.observations.add(reading.to_observation())
        return reading

    def _from_observation(
        self,
        station_id: str,
        name: str,
        record: WeatherFlowObservationRecord,
        current: CurrentConditions | None,
    ) -> WeatherReading:
        cc = current or CurrentConditions(time=record.timestamp)
        strikes = record.lightning_strike_count

        return WeatherReading(
            station_id=station_id,
            station_name=name,
            timestamp=record.observed_at,
            temperature=_temperature(record.air_temperature),
            feels_like=_temperature(_first(record.feels_like, cc.feels_like)),
            dew_point=_temperature(_first(record.dew_point, cc.dew_point)),
            humidity=record.relative_humidity,
            wind_speed=_speed(record.wind_avg),
            wind_gust=_speed(record.wind_gust),
            wind_direction=record.wind_direction,
            pressure=_pressure(_first(record.sea_level_pressure, record.station_pressure)),
            provider_pressure_trend=normalize_provider_trend(
                _first_str(record.pressure_trend, cc.pressure_trend)
            ),
            uv_index=record.uv,
            rain_interval=_precipitation(record.interval_rain),
            rain_today=_precipitation(
                _first(record.precip_accum_local_day, cc.precip_accum_local_day)
            ),
            rain_yesterday=_precipitation(
                _first(record.precip_accum_local_yesterday, cc.precip_accum_local_yesterday)
            ),
            lightning_strike_count=strikes,
            lightning_strike_distance=_distance(record.lightning_distance) if strikes else None,
        )

    def _from_current_conditions(
        self,
        station_id: str,
        name: str,
        current: CurrentConditions,
    ) -> WeatherReading:
        return WeatherReading(
            station_id=station_id,
            station_name=name,
            timestamp=epoch_to_datetime(current.time),
            temperature=_temperature(current.air_temperature),
            feels_like=_temperature(current.feels_like),
            dew_point=_temperature(current.dew_point),
            humidity=current.relative_humidity,
            wind_speed=_speed(current.wind_avg),
            wind_gust=_speed(current.wind_gust),
            wind_direction=current.wind_direction,
            pressure=_pressure(_first(current.sea_level_pressure, current.station_pressure)),
            provider_pressure_trend=normalize_provider_trend(current.pressure_trend),
            uv_index=current.uv,
            rain_today=_precipitation(current.precip_accum_local_day),
            rain_yesterday=_precipitation(current.precip_accum_local_yesterday),
        )
