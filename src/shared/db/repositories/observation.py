"""Weather observation store.

Append-only time series of normalized observations per station, queried
by relative window, by absolute instant, and by calendar day in a
configured time zone.
"""

from datetime import date, datetime, time, timedelta

import pytz
from sqlalchemy import asc, delete, desc, select

from src.shared.config.logging import get_logger
from src.shared.db.connection import DatabaseManager
from src.shared.db.models import WeatherObservation
from src.shared.db.repositories.base import BaseRepository
from src.shared.models.weather import DailyExtremes, LightningStrike, WeatherObservationData

logger = get_logger(__name__)


def day_bounds(day: date, tz_name: str) -> tuple[datetime, datetime]:
    """Resolve a local calendar day into absolute UTC bounds.

    Local midnight of ``day`` and of the following day are each localized
    with the zone's own offset on that date, so days containing a DST
    transition are 23 or 25 hours long.

    Args:
        day: Calendar date in the target zone
        tz_name: IANA time zone name

    Returns:
        Tuple of (start, end) as aware UTC datetimes; the day is [start, end)
    """
    tz = pytz.timezone(tz_name)
    start = tz.localize(datetime.combine(day, time.min))
    end = tz.localize(datetime.combine(day + timedelta(days=1), time.min))
    return start.astimezone(pytz.utc), end.astimezone(pytz.utc)


def local_today(tz_name: str, now: datetime) -> date:
    """Calendar date of ``now`` in the given zone."""
    return now.astimezone(pytz.timezone(tz_name)).date()


class WeatherObservationRepository(BaseRepository[WeatherObservation]):
    """Repository for the observation time series.

    Example:
        >>> repo = WeatherObservationRepository(db_manager)
        >>> repo.add(reading.to_observation())
        >>> extremes = repo.get_daily_temperature_extremes("38335", date.today(), "America/New_York")
    """

    def __init__(self, db_manager: DatabaseManager) -> None:
        """Initialize observation repository.

        Args:
            db_manager: Database manager instance
        """
        super().__init__(db_manager, WeatherObservation)

    def add(self, data: WeatherObservationData) -> WeatherObservationData:
        """Append an observation.

        Args:
            data: Observation to persist (``id``/``created_at`` are assigned)

        Returns:
            Persisted observation
        """
        row = WeatherObservation(
            **data.model_dump(exclude={"id", "created_at"}),
            created_at=self._utc_now(),
        )
        with self._db.session() as session:
            session.add(row)
            session.flush()
            saved = WeatherObservationData.model_validate(row)

        logger.debug(
            "weather_observation_added",
            station_id=data.station_id,
            timestamp=data.timestamp.isoformat(),
            id=saved.id,
        )
        return saved

    def get_history(
        self,
        station_id: str,
        hours: float,
        now: datetime | None = None,
    ) -> list[WeatherObservationData]:
        """Get observations from the last ``hours`` hours, oldest first."""
        since = (now or self._utc_now()) - timedelta(hours=hours)
        return self.get_history_since(station_id, since)

    def get_history_since(
        self,
        station_id: str,
        since: datetime,
    ) -> list[WeatherObservationData]:
        """Get observations at or after ``since``, oldest first.

        Args:
            station_id: Station identifier
            since: Aware lower bound (inclusive)

        Returns:
            Observations ordered by observation timestamp
        """
        with self._db.session() as session:
            stmt = (
                select(WeatherObservation)
                .where(WeatherObservation.station_id == station_id)
                .where(WeatherObservation.timestamp >= since)
                .order_by(asc(WeatherObservation.timestamp))
            )
            rows = session.execute(stmt).scalars().all()
            return [WeatherObservationData.model_validate(r) for r in rows]

    def get_daily_temperature_extremes(
        self,
        station_id: str,
        day: date,
        tz_name: str,
    ) -> DailyExtremes | None:
        """Get the day's temperature high and low with their instants.

        Ties resolve to the earliest observation.

        Args:
            station_id: Station identifier
            day: Calendar date interpreted in ``tz_name``
            tz_name: IANA time zone name

        Returns:
            Extremes, or None if no observation falls within the day
        """
        start, end = day_bounds(day, tz_name)

        with self._db.session() as session:
            in_day = (
                select(WeatherObservation)
                .where(WeatherObservation.station_id == station_id)
                .where(WeatherObservation.timestamp >= start)
                .where(WeatherObservation.timestamp < end)
            )
            high = session.execute(
                in_day.order_by(
                    desc(WeatherObservation.temperature), asc(WeatherObservation.timestamp)
                ).limit(1)
            ).scalar_one_or_none()
            if high is None:
                logger.debug(
                    "daily_extremes_no_data", station_id=station_id, day=day.isoformat()
                )
                return None
            low = session.execute(
                in_day.order_by(
                    asc(WeatherObservation.temperature), asc(WeatherObservation.timestamp)
                ).limit(1)
            ).scalar_one()

            return DailyExtremes(
                high=high.temperature,
                low=low.temperature,
                high_time=high.timestamp,
                low_time=low.timestamp,
            )

    def get_latest_lightning(
        self,
        station_id: str,
        within: timedelta,
        now: datetime | None = None,
    ) -> LightningStrike | None:
        """Get the most recent observation with a positive strike count.

        Args:
            station_id: Station identifier
            within: Lookback window
            now: Reference instant (defaults to now)

        Returns:
            Strike distance and time, or None if no strike in the window
        """
        since = (now or self._utc_now()) - within
        with self._db.session() as session:
            stmt = (
                select(WeatherObservation)
                .where(WeatherObservation.station_id == station_id)
                .where(WeatherObservation.timestamp >= since)
                .where(WeatherObservation.lightning_strike_count > 0)
                .order_by(desc(WeatherObservation.timestamp))
                .limit(1)
            )
            row = session.execute(stmt).scalar_one_or_none()
            if row is None:
                return None
            return LightningStrike(distance=row.lightning_strike_distance, timestamp=row.timestamp)

    def get_pressure_reference(
        self,
        station_id: str,
        window: timedelta,
        now: datetime | None = None,
    ) -> WeatherObservationData | None:
        """Get the oldest observation with a pressure reading inside the window."""
        since = (now or self._utc_now()) - window
        with self._db.session() as session:
            stmt = (
                select(WeatherObservation)
                .where(WeatherObservation.station_id == station_id)
                .where(WeatherObservation.timestamp >= since)
                .where(WeatherObservation.pressure.is_not(None))
                .order_by(asc(WeatherObservation.timestamp))
                .limit(1)
            )
            row = session.execute(stmt).scalar_one_or_none()
            return WeatherObservationData.model_validate(row) if row else None

    def purge_older_than(
        self,
        days: int,
        tz_name: str,
        now: datetime | None = None,
    ) -> int:
        """Delete observations older than ``days`` days.

        The cutoff never passes local midnight of the current day, so the
        current day's extremes survive any retention setting.

        Args:
            days: Retention horizon in days
            tz_name: IANA zone defining the current calendar day
            now: Reference instant (defaults to now)

        Returns:
            Number of records deleted
        """
        now = now or self._utc_now()
        today_start, _ = day_bounds(local_today(tz_name, now), tz_name)
        cutoff = min(now - timedelta(days=days), today_start)

        with self._db.session() as session:
            stmt = delete(WeatherObservation).where(WeatherObservation.timestamp < cutoff)
            count = session.execute(stmt).rowcount

        logger.info("old_weather_observations_deleted", days=days, count=count)
        return count
