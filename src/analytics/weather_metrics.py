"""Derived weather metrics.

Computes values that no single provider field supplies: daily temperature
extremes merged with the latest reading, pressure trend, most recent
lightning strike, and the wind direction compass label.
"""

from dataclasses import dataclass
from datetime import datetime, timedelta

from src.shared.config.logging import get_logger
from src.shared.config.settings import Settings, get_settings
from src.shared.constants import (
    CARDINAL_DIRECTIONS,
    PRESSURE_TRENDS,
    TREND_FALLING,
    TREND_RISING,
    TREND_STEADY,
)
from src.shared.db.repositories.observation import WeatherObservationRepository, local_today
from src.shared.models.weather import DailyExtremes, LightningStrike, WeatherReading

logger = get_logger(__name__)


def degrees_to_cardinal(degrees: float | None) -> str | None:
    """Map a bearing to its 16-point compass label.

    Args:
        degrees: Bearing in degrees (0 = north)

    Returns:
        Label such as "NNE", or None if no bearing
    """
    if degrees is None:
        return None
    # Half-sector bearings round up (11.25 is NNE)
    index = int((degrees % 360) / 22.5 + 0.5) % len(CARDINAL_DIRECTIONS)
    return CARDINAL_DIRECTIONS[index]


def normalize_provider_trend(raw: str | None) -> str | None:
    """Normalize a provider trend label; unknown labels are dropped."""
    if not raw:
        return None
    trend = raw.strip().lower()
    return trend if trend in PRESSURE_TRENDS else None


def classify_pressure_trend(current: float, reference: float, threshold: float) -> str:
    """Classify the change from ``reference`` to ``current`` pressure.

    Args:
        current: Current pressure (inHg)
        reference: Earlier pressure (inHg)
        threshold: Minimum change counted as rising/falling

    Returns:
        "rising", "falling" or "steady"
    """
    diff = current - reference
    if diff > threshold:
        return TREND_RISING
    if diff < -threshold:
        return TREND_FALLING
    return TREND_STEADY


def resolve_pressure_trend(
    current: float | None,
    provider_trend: str | None,
    reference: float | None,
    threshold: float,
) -> str | None:
    """Pick the provider's trend, else compute one locally.

    Without a reference reading the trend is steady; without a current
    pressure there is no trend.
    """
    normalized = normalize_provider_trend(provider_trend)
    if normalized:
        return normalized
    if current is None:
        return None
    if reference is None:
        return TREND_STEADY
    return classify_pressure_trend(current, reference, threshold)


def merge_daily_extremes(
    stored: DailyExtremes | None,
    current_temperature: float,
    now: datetime,
) -> DailyExtremes:
    """Merge stored extremes with the just-fetched reading.

    The current reading sets a new extreme (stamped ``now``) only when it
    strictly exceeds the stored one. With no stored data both extremes are
    the current reading.
    """
    if stored is None:
        return DailyExtremes(
            high=current_temperature,
            low=current_temperature,
            high_time=now,
            low_time=now,
        )

    high, high_time = stored.high, stored.high_time
    low, low_time = stored.low, stored.low_time
    if current_temperature > high:
        high, high_time = current_temperature, now
    if current_temperature < low:
        low, low_time = current_temperature, now
    return DailyExtremes(high=high, low=low, high_time=high_time, low_time=low_time)


@dataclass(frozen=True)
class DerivedWeatherMetrics:
    """Derived values for one weather refresh."""

    extremes: DailyExtremes
    pressure_trend: str | None
    lightning: LightningStrike | None
    wind_direction_cardinal: str | None


class WeatherMetricsEngine:
    """Computes derived metrics from the observation store and a reading."""

    def __init__(
        self,
        observations: WeatherObservationRepository,
        settings: Settings | None = None,
    ) -> None:
        """Initialize metrics engine.

        Args:
            observations: Observation store
            settings: Settings (defaults to process settings)
        """
        self.observations = observations
        self.settings = settings or get_settings()

    def daily_extremes(self, reading: WeatherReading, now: datetime) -> DailyExtremes:
        """Today's extremes in the display zone, merged with the reading.

        The refresh path records the reading before computing metrics, so a
        new high or low normally already sits in the store and keeps its
        observation timestamp. The merge stamps ``now`` only for a reading
        the store does not hold for today (not recorded, or dated another
        local day).
        """
        tz_name = self.settings.display_timezone
        stored = self.observations.get_daily_temperature_extremes(
            reading.station_id, local_today(tz_name, now), tz_name
        )
        if stored is None:
            logger.info("daily_extremes_fallback_to_current", station_id=reading.station_id)
        return merge_daily_extremes(stored, reading.temperature, now)

    def pressure_trend(self, reading: WeatherReading, now: datetime) -> str | None:
        """Provider trend if usable, else change over the trend window."""
        reference = None
        if normalize_provider_trend(reading.provider_pressure_trend) is None:
            window = timedelta(hours=self.settings.pressure_trend_window_hours)
            earlier = self.observations.get_pressure_reference(
                reading.station_id, window, now=now
            )
            reference = earlier.pressure if earlier else None

        return resolve_pressure_trend(
            reading.pressure,
            reading.provider_pressure_trend,
            reference,
            self.settings.pressure_trend_threshold_inhg,
        )

    def recent_lightning(self, station_id: str, now: datetime) -> LightningStrike | None:
        """Most recent strike within the lookback window, if any."""
        window = timedelta(minutes=self.settings.lightning_lookback_minutes)
        return self.observations.get_latest_lightning(station_id, window, now=now)

    def compute(self, reading: WeatherReading, now: datetime) -> DerivedWeatherMetrics:
        """Compute all derived metrics for a reading.

        The reading should already be in the observation store so it counts
        toward lightning recency.

        Args:
            reading: Normalized reading just fetched
            now: Reference instant

        Returns:
            Derived metrics
        """
        metrics = DerivedWeatherMetrics(
            extremes=self.daily_extremes(reading, now),
            pressure_trend=self.pressure_trend(reading, now),
            lightning=self.recent_lightning(reading.station_id, now),
            wind_direction_cardinal=degrees_to_cardinal(reading.wind_direction),
        )
        logger.debug(
            "weather_metrics_computed",
            station_id=reading.station_id,
            pressure_trend=metrics.pressure_trend,
            has_lightning=metrics.lightning is not None,
        )
        return metrics
