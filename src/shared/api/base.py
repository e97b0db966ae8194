"""Shared HTTP plumbing for upstream provider clients.

Configures a requests session with bounded retries and backoff, applies a
timeout to every call, and turns transport, HTTP, and JSON failures into
the typed upstream errors.
"""

from typing import Any

import requests
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

from src.shared.api.errors import UpstreamFormatError, UpstreamHTTPError, classify_error
from src.shared.config.logging import get_logger

logger = get_logger(__name__)

DEFAULT_USER_AGENT = "WeatherKiosk/1.0"


class ProviderClient:
    """Base class for provider API clients.

    Subclasses call ``_make_request`` with a path and query parameters and
    receive decoded JSON. Secrets passed in ``secret_params`` are sent but
    never logged.
    """

    provider = "provider"

    def __init__(
        self,
        base_url: str,
        timeout_seconds: float = 10.0,
        max_retries: int = 2,
        backoff_factor: float = 0.5,
        user_agent: str = DEFAULT_USER_AGENT,
    ) -> None:
        """Initialize provider client.

        Args:
            base_url: API base URL
            timeout_seconds: Per-request timeout
            max_retries: Retries for 429/5xx and connection failures
            backoff_factor: Exponential backoff factor between retries
            user_agent: User-Agent header value
        """
        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.user_agent = user_agent

        self.session = requests.Session()
        retry_strategy = Retry(
            total=max_retries,
            backoff_factor=backoff_factor,
            status_forcelist=[429, 500, 502, 503, 504],
            allowed_methods=["GET"],
            raise_on_status=False,
        )
        adapter = HTTPAdapter(max_retries=retry_strategy)
        self.session.mount("https://", adapter)
        self.session.mount("http://", adapter)

        logger.info(
            f"{self.provider}_client_initialized",
            base_url=self.base_url,
            timeout_seconds=timeout_seconds,
            max_retries=max_retries,
        )

    def _make_request(
        self,
        path: str,
        params: dict[str, Any] | None = None,
        secret_params: dict[str, Any] | None = None,
    ) -> Any:
        """Make a GET request and decode the JSON body.

        Args:
            path: Path appended to the base URL
            params: Loggable query parameters
            secret_params: Credential query parameters (not logged)

        Returns:
            Decoded JSON response

        Raises:
            UpstreamTimeoutError: If the request timed out
            UpstreamConnectionError: If the connection failed
            UpstreamHTTPError: If the provider returned an error status
            UpstreamFormatError: If the body is not valid JSON
        """
        url = f"{self.base_url}{path}"
        query = {**(params or {}), **(secret_params or {})}
        headers = {
            "User-Agent": self.user_agent,
            "Accept": "application/json",
        }

        logger.debug(f"{self.provider}_request", url=url, params=params)

        try:
            response = self.session.get(
                url, params=query, headers=headers, timeout=self.timeout_seconds
            )
        except requests.Timeout as e:
            logger.warning(f"{self.provider}_request_timeout", url=url, error=str(e))
            raise classify_error(e, endpoint=url) from e
        except requests.RequestException as e:
            logger.warning(f"{self.provider}_request_error", url=url, error=str(e))
            raise classify_error(e, endpoint=url) from e

        if response.status_code >= 400:
            raise UpstreamHTTPError(
                message=f"{self.provider} API error: {response.status_code} {response.reason}",
                status_code=response.status_code,
                endpoint=url,
                response_body=response.text,
            )

        try:
            data = response.json()
        except ValueError as e:
            raise UpstreamFormatError(
                message=f"{self.provider} returned a non-JSON body",
                endpoint=url,
                details={"status_code": response.status_code},
            ) from e

        logger.debug(f"{self.provider}_request_success", url=url, status=response.status_code)
        return data

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()
