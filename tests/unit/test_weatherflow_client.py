"""Unit tests for WeatherFlow API client."""

from unittest.mock import MagicMock, patch

import pytest
import requests

from src.shared.api.errors import (
    ConfigurationError,
    UpstreamConnectionError,
    UpstreamFormatError,
    UpstreamHTTPError,
    UpstreamTimeoutError,
)
from src.shared.api.weatherflow import WeatherFlowClient

OBSERVATION_PAYLOAD = {
    "station_id": 38335,
    "station_name": "Corner Rock Wx",
    "obs": [
        {
            "timestamp": 1719849600,
            "air_temperature": 27.5,
            "relative_humidity": 61,
            "wind_avg": 2.1,
            "sea_level_pressure": 1016.2,
            "lightning_strike_count": 0,
        }
    ],
    "status": {"status_code": 0, "status_message": "SUCCESS"},
}


def _response(status_code: int = 200, payload: object = None, text: str = "") -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.reason = "OK" if status_code < 400 else "Error"
    mock_response.json.return_value = payload
    mock_response.text = text
    return mock_response


class TestWeatherFlowClient:
    """Test suite for WeatherFlowClient."""

    def test_client_initialization(self) -> None:
        """Test client picks up defaults from settings."""
        client = WeatherFlowClient(api_token="abc123")

        assert client.base_url == "https://swd.weatherflow.com/swd/rest"
        assert client.timeout_seconds == 10.0
        assert client.is_configured is True

    def test_token_from_environment_alias(self, monkeypatch: pytest.MonkeyPatch) -> None:
        """Test the legacy TEMPEST_API_TOKEN variable is honored."""
        monkeypatch.setenv("TEMPEST_API_TOKEN", "legacy-token")

        client = WeatherFlowClient()

        assert client.api_token == "legacy-token"

    @patch("requests.Session.get")
    def test_missing_token_raises_before_request(self, mock_get: MagicMock) -> None:
        """Test a client without a token never reaches the network."""
        client = WeatherFlowClient(api_token="")

        with pytest.raises(ConfigurationError):
            client.get_latest_observation("38335")

        mock_get.assert_not_called()

    @patch("requests.Session.get")
    def test_get_latest_observation(self, mock_get: MagicMock) -> None:
        """Test observation retrieval and request shape."""
        mock_get.return_value = _response(payload=OBSERVATION_PAYLOAD)

        client = WeatherFlowClient(api_token="abc123")
        result = client.get_latest_observation("38335")

        assert result.latest is not None
        assert result.latest.air_temperature == 27.5
        call_args = mock_get.call_args
        assert call_args[0][0].endswith("/observations/station/38335")
        assert call_args[1]["params"]["token"] == "abc123"
        assert call_args[1]["timeout"] == 10.0

    @patch("requests.Session.get")
    def test_get_station(self, mock_get: MagicMock) -> None:
        """Test station metadata retrieval."""
        mock_get.return_value = _response(
            payload={
                "stations": [{"station_id": 38335, "name": "Corner Rock Wx"}],
                "status": {"status_code": 0},
            }
        )

        client = WeatherFlowClient(api_token="abc123")
        result = client.get_station("38335")

        assert result.stations[0].display_name == "Corner Rock Wx"
        assert mock_get.call_args[0][0].endswith("/stations/38335")

    @patch("requests.Session.get")
    def test_get_forecast_passes_station(self, mock_get: MagicMock) -> None:
        """Test forecast endpoint takes the station as a query parameter."""
        mock_get.return_value = _response(
            payload={"current_conditions": {"time": 1719849600, "air_temperature": 25.0}}
        )

        client = WeatherFlowClient(api_token="abc123")
        result = client.get_forecast("38335")

        assert result.current_conditions is not None
        assert mock_get.call_args[0][0].endswith("/better_forecast")
        assert mock_get.call_args[1]["params"]["station_id"] == "38335"

    @patch("requests.Session.get")
    def test_http_error(self, mock_get: MagicMock) -> None:
        """Test error status codes raise UpstreamHTTPError."""
        mock_get.return_value = _response(status_code=500, text="Internal Server Error")

        client = WeatherFlowClient(api_token="abc123")

        with pytest.raises(UpstreamHTTPError) as exc_info:
            client.get_latest_observation("38335")

        assert exc_info.value.status_code == 500
        assert exc_info.value.retryable is True

    @patch("requests.Session.get")
    def test_unauthorized_is_not_retryable(self, mock_get: MagicMock) -> None:
        """Test a rejected token surfaces as a non-retryable HTTP error."""
        mock_get.return_value = _response(status_code=401, text="Unauthorized")

        client = WeatherFlowClient(api_token="wrong")

        with pytest.raises(UpstreamHTTPError) as exc_info:
            client.get_station("38335")

        assert exc_info.value.retryable is False

    @patch("requests.Session.get")
    def test_timeout(self, mock_get: MagicMock) -> None:
        """Test request timeouts raise UpstreamTimeoutError."""
        mock_get.side_effect = requests.Timeout("read timed out")

        client = WeatherFlowClient(api_token="abc123")

        with pytest.raises(UpstreamTimeoutError):
            client.get_latest_observation("38335")

    @patch("requests.Session.get")
    def test_connection_error(self, mock_get: MagicMock) -> None:
        """Test connection failures raise UpstreamConnectionError."""
        mock_get.side_effect = requests.ConnectionError("refused")

        client = WeatherFlowClient(api_token="abc123")

        with pytest.raises(UpstreamConnectionError):
            client.get_latest_observation("38335")

    @patch("requests.Session.get")
    def test_non_json_body(self, mock_get: MagicMock) -> None:
        """Test an HTML body raises UpstreamFormatError."""
        mock_response = _response(text="<html>maintenance</html>")
        mock_response.json.side_effect = ValueError("Expecting value")
        mock_get.return_value = mock_response

        client = WeatherFlowClient(api_token="abc123")

        with pytest.raises(UpstreamFormatError):
            client.get_latest_observation("38335")

    @patch("requests.Session.get")
    def test_wrong_shape(self, mock_get: MagicMock) -> None:
        """Test a payload missing required fields raises UpstreamFormatError."""
        mock_get.return_value = _response(payload={"obs": [{"timestamp": 1}]})

        client = WeatherFlowClient(api_token="abc123")

        with pytest.raises(UpstreamFormatError):
            client.get_latest_observation("38335")

    @patch("requests.Session.get")
    def test_nonzero_status_code(self, mock_get: MagicMock) -> None:
        """Test a provider-level failure status raises UpstreamFormatError."""
        mock_get.return_value = _response(
            payload={
                "station_id": 38335,
                "obs": [],
                "status": {"status_code": 404, "status_message": "NOT FOUND"},
            }
        )

        client = WeatherFlowClient(api_token="abc123")

        with pytest.raises(UpstreamFormatError) as exc_info:
            client.get_latest_observation("38335")

        assert "404" in exc_info.value.message
