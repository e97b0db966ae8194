"""WeatherFlow (Tempest) REST API client.

Fetches station metadata, the latest discrete station observation, and
the forecast-derived current conditions for a station.
"""

from typing import Any

from pydantic import ValidationError

from src.shared.api.base import ProviderClient
from src.shared.api.errors import ConfigurationError, UpstreamFormatError
from src.shared.api.response_models import (
    WeatherFlowForecast,
    WeatherFlowStation,
    WeatherFlowStationObservation,
)
from src.shared.config.logging import get_logger, mask_secret
from src.shared.config.settings import Settings, get_settings

logger = get_logger(__name__)


class WeatherFlowClient(ProviderClient):
    """Client for the WeatherFlow REST API.

    Every call requires a personal access token; a client without one
    raises ConfigurationError before any network traffic.
    """

    provider = "weatherflow"

    def __init__(
        self,
        api_token: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        backoff_factor: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize WeatherFlow client.

        Args:
            api_token: Access token (defaults to settings)
            base_url: API base URL (defaults to settings)
            timeout_seconds: Request timeout (defaults to settings)
            max_retries: Retry count (defaults to settings)
            backoff_factor: Retry backoff (defaults to settings)
            settings: Settings (defaults to process settings)
        """
        settings = settings or get_settings()
        self.api_token = api_token if api_token is not None else settings.weatherflow_api_token
        super().__init__(
            base_url=base_url or settings.weatherflow_api_url,
            timeout_seconds=timeout_seconds or settings.http_timeout_seconds,
            max_retries=max_retries if max_retries is not None else settings.http_max_retries,
            backoff_factor=(
                backoff_factor if backoff_factor is not None else settings.http_backoff_factor
            ),
        )
        logger.debug("weatherflow_token_loaded", token=mask_secret(self.api_token))

    @property
    def is_configured(self) -> bool:
        """Whether an access token is available."""
        return bool(self.api_token)

    def _get(self, path: str, params: dict[str, Any] | None = None) -> Any:
        if not self.api_token:
            raise ConfigurationError("WeatherFlow API token not configured")
        return self._make_request(path, params=params, secret_params={"token": self.api_token})

    def _parse(self, model: type, data: Any, endpoint: str) -> Any:
        try:
            parsed = model.model_validate(data)
        except ValidationError as e:
            raise UpstreamFormatError(
                message=f"Unexpected WeatherFlow payload from {endpoint}",
                endpoint=endpoint,
                details={"errors": e.errors(include_url=False)[:5]},
            ) from e

        status = getattr(parsed, "status", None)
        if status is not None and status.status_code != 0:
            raise UpstreamFormatError(
                message=f"WeatherFlow reported status {status.status_code}: {status.status_message}",
                endpoint=endpoint,
            )
        return parsed

    def get_station(self, station_id: str) -> WeatherFlowStation:
        """Get station metadata.

        Args:
            station_id: WeatherFlow station identifier

        Returns:
            Parsed station metadata
        """
        path = f"/stations/{station_id}"
        logger.debug("fetching_station_metadata", station_id=station_id)
        return self._parse(WeatherFlowStation, self._get(path), path)

    def get_latest_observation(self, station_id: str) -> WeatherFlowStationObservation:
        """Get the latest discrete observation for a station.

        Args:
            station_id: WeatherFlow station identifier

        Returns:
            Parsed observation response (``obs`` may be empty)
        """
        path = f"/observations/station/{station_id}"
        logger.info("fetching_latest_observation", station_id=station_id)
        return self._parse(WeatherFlowStationObservation, self._get(path), path)

    def get_forecast(self, station_id: str) -> WeatherFlowForecast:
        """Get forecast-derived current conditions and daily forecast.

        Args:
            station_id: WeatherFlow station identifier

        Returns:
            Parsed forecast response
        """
        path = "/better_forecast"
        logger.info("fetching_forecast", station_id=station_id)
        data = self._get(path, params={"station_id": station_id})
        return self._parse(WeatherFlowForecast, data, path)
