"""Beestat API client for ecobee thermostats.

Reads all registered thermostats in one call and can ask Beestat to
sync fresh data from ecobee. Beestat serves cached data unless a sync
was requested recently, so callers should not poll faster than the
configured minimum sync interval.
"""

from typing import Any

from pydantic import ValidationError

from src.shared.api.base import ProviderClient
from src.shared.api.errors import ConfigurationError, UpstreamFormatError
from src.shared.api.response_models import BeestatResponse, BeestatThermostatResponse
from src.shared.config.logging import get_logger, mask_secret
from src.shared.config.settings import Settings, get_settings

logger = get_logger(__name__)


class BeestatClient(ProviderClient):
    """Client for the Beestat API."""

    provider = "beestat"

    def __init__(
        self,
        api_key: str | None = None,
        base_url: str | None = None,
        timeout_seconds: float | None = None,
        max_retries: int | None = None,
        backoff_factor: float | None = None,
        settings: Settings | None = None,
    ) -> None:
        """Initialize Beestat client.

        Args:
            api_key: Beestat API key (defaults to settings)
            base_url: API base URL (defaults to settings)
            timeout_seconds: Request timeout (defaults to settings)
            max_retries: Retry count (defaults to settings)
            backoff_factor: Retry backoff (defaults to settings)
            settings: Settings (defaults to process settings)
        """
        settings = settings or get_settings()
        self.api_key = api_key if api_key is not None else settings.beestat_api_key
        # Beestat serves every resource from the root path
        super().__init__(
            base_url=base_url or settings.beestat_api_url,
            timeout_seconds=timeout_seconds or settings.http_timeout_seconds,
            max_retries=max_retries if max_retries is not None else settings.http_max_retries,
            backoff_factor=(
                backoff_factor if backoff_factor is not None else settings.http_backoff_factor
            ),
        )
        logger.debug("beestat_api_key_loaded", api_key=mask_secret(self.api_key))

    @property
    def is_configured(self) -> bool:
        """Whether an API key is available."""
        return bool(self.api_key)

    def _call(self, resource: str, method: str) -> Any:
        if not self.api_key:
            raise ConfigurationError("Beestat API key not configured")
        return self._make_request(
            "/",
            params={"resource": resource, "method": method},
            secret_params={"api_key": self.api_key},
        )

    def read_thermostats(self) -> BeestatThermostatResponse:
        """Read all thermostats registered to the account.

        Returns:
            Parsed response keyed by Beestat thermostat id

        Raises:
            UpstreamFormatError: If the envelope reports failure or is malformed
        """
        logger.info("fetching_beestat_thermostats")
        data = self._call("thermostat", "read_id")

        try:
            envelope = BeestatResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamFormatError(
                message="Unexpected Beestat response envelope",
                endpoint="thermostat.read_id",
                details={"errors": e.errors(include_url=False)[:5]},
            ) from e

        if not envelope.success:
            raise UpstreamFormatError(
                message=f"Beestat reported failure: {envelope.data}",
                endpoint="thermostat.read_id",
            )

        try:
            parsed = BeestatThermostatResponse.model_validate(
                data, context={"raw_devices": data.get("data")}
            )
        except ValidationError as e:
            raise UpstreamFormatError(
                message="Unexpected Beestat thermostat payload",
                endpoint="thermostat.read_id",
                details={"errors": e.errors(include_url=False)[:5]},
            ) from e

        logger.debug("beestat_thermostats_received", count=len(parsed.data))
        return parsed

    def request_sync(self) -> bool:
        """Ask Beestat to pull fresh data from ecobee.

        Returns:
            True if Beestat accepted the request
        """
        logger.info("requesting_beestat_sync")
        data = self._call("thermostat", "sync")
        try:
            envelope = BeestatResponse.model_validate(data)
        except ValidationError as e:
            raise UpstreamFormatError(
                message="Unexpected Beestat response envelope",
                endpoint="thermostat.sync",
            ) from e

        if not envelope.success:
            logger.warning("beestat_sync_rejected", data=envelope.data)
        return envelope.success
