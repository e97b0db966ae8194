"""Unit tests for Beestat API client."""

from unittest.mock import MagicMock, patch

import pytest

from src.shared.api.beestat import BeestatClient
from src.shared.api.errors import ConfigurationError, UpstreamFormatError, UpstreamHTTPError

THERMOSTAT_PAYLOAD = {
    "success": True,
    "data": {
        "101": {
            "ecobee_thermostat_id": 101,
            "name": "Downstairs",
            "temperature": 71.4,
            "setpoint_heat": 68,
            "setpoint_cool": 76,
            "humidity": 44,
            "running_equipment": ["fan"],
            "unmodelled_field": {"anything": True},
        }
    },
}


def _response(payload: object, status_code: int = 200) -> MagicMock:
    mock_response = MagicMock()
    mock_response.status_code = status_code
    mock_response.reason = "OK" if status_code < 400 else "Error"
    mock_response.json.return_value = payload
    mock_response.text = ""
    return mock_response


class TestBeestatClient:
    """Test suite for BeestatClient."""

    def test_not_configured_without_key(self) -> None:
        client = BeestatClient()

        assert client.is_configured is False

    @patch("requests.Session.get")
    def test_missing_key_raises(self, mock_get: MagicMock) -> None:
        """Test reads without a key raise ConfigurationError."""
        client = BeestatClient(api_key="")

        with pytest.raises(ConfigurationError):
            client.read_thermostats()

        mock_get.assert_not_called()

    @patch("requests.Session.get")
    def test_read_thermostats(self, mock_get: MagicMock) -> None:
        """Test thermostat read parses devices and keeps raw payloads."""
        mock_get.return_value = _response(THERMOSTAT_PAYLOAD)

        client = BeestatClient(api_key="key-1")
        result = client.read_thermostats()

        thermostat = result.data["101"]
        assert thermostat.display_name == "Downstairs"
        assert thermostat.running_equipment == ["fan"]
        assert result.raw_device("101")["unmodelled_field"] == {"anything": True}

        params = mock_get.call_args[1]["params"]
        assert params == {"resource": "thermostat", "method": "read_id", "api_key": "key-1"}
        assert mock_get.call_args[0][0] == "https://api.beestat.io/"

    @patch("requests.Session.get")
    def test_envelope_failure(self, mock_get: MagicMock) -> None:
        """Test success=false raises UpstreamFormatError."""
        mock_get.return_value = _response({"success": False, "data": {"error_message": "bad key"}})

        client = BeestatClient(api_key="key-1")

        with pytest.raises(UpstreamFormatError):
            client.read_thermostats()

    @patch("requests.Session.get")
    def test_malformed_envelope(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"data": {}})

        client = BeestatClient(api_key="key-1")

        with pytest.raises(UpstreamFormatError):
            client.read_thermostats()

    @patch("requests.Session.get")
    def test_malformed_device(self, mock_get: MagicMock) -> None:
        """Test a device without an ecobee id raises UpstreamFormatError."""
        mock_get.return_value = _response({"success": True, "data": {"1": {"name": "X"}}})

        client = BeestatClient(api_key="key-1")

        with pytest.raises(UpstreamFormatError):
            client.read_thermostats()

    @patch("requests.Session.get")
    def test_http_error(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response(None, status_code=503)

        client = BeestatClient(api_key="key-1")

        with pytest.raises(UpstreamHTTPError) as exc_info:
            client.read_thermostats()

        assert exc_info.value.retryable is True

    @patch("requests.Session.get")
    def test_request_sync(self, mock_get: MagicMock) -> None:
        """Test sync requests report acceptance."""
        mock_get.return_value = _response({"success": True, "data": None})

        client = BeestatClient(api_key="key-1")

        assert client.request_sync() is True
        assert mock_get.call_args[1]["params"]["method"] == "sync"

    @patch("requests.Session.get")
    def test_request_sync_rejected(self, mock_get: MagicMock) -> None:
        mock_get.return_value = _response({"success": False, "data": "too soon"})

        client = BeestatClient(api_key="key-1")

        assert client.request_sync() is False
