"""Tests for the NOAA SWPC, NASA DONKI and satellite tracker clients.

Uses unittest.mock to mock HTTP calls.
"""

import pytest
import requests
from datetime import date
from unittest.mock import Mock, patch

from orbital.shell.donki_client import DONKIClient
from orbital.shell.iss_client import ISSClient
from orbital.shell.swpc_client import KP_PATH, SWPCClient


def json_response(payload):
    response = Mock()
    response.status_code = 200
    response.json.return_value = payload
    response.raise_for_status.return_value = None
    return response


class TestSWPCClient:
    """Tests for SWPCClient."""

    @patch("orbital.shell.swpc_client.requests.get")
    def test_fetch_kp(self, mock_get):
        rows = [["time_tag", "Kp"], ["2024-05-10 09:00:00.000", "5.33"]]
        mock_get.return_value = json_response(rows)

        result = SWPCClient(timeout=5).fetch_kp()

        assert result == rows
        mock_get.assert_called_once_with(
            "https://services.swpc.noaa.gov" + KP_PATH,
            timeout=5,
        )

    @patch("orbital.shell.swpc_client.requests.get")
    def test_http_error_propagates(self, mock_get):
        response = json_response([])
        response.raise_for_status.side_effect = requests.HTTPError("503")
        mock_get.return_value = response

        with pytest.raises(requests.HTTPError):
            SWPCClient().fetch_xray()


class TestDONKIClient:
    """Tests for DONKIClient."""

    @patch("orbital.shell.donki_client.requests.get")
    def test_fetch_cmes_query_window(self, mock_get):
        mock_get.return_value = json_response([{"activityID": "CME-1"}])

        result = DONKIClient(api_key="key", lookback_days=7).fetch_cmes(today=date(2024, 5, 10))

        assert result == [{"activityID": "CME-1"}]
        assert mock_get.call_args[0][0] == "https://api.nasa.gov/DONKI/CME"
        assert mock_get.call_args[1]["params"] == {
            "startDate": "2024-05-03",
            "endDate": "2024-05-10",
            "api_key": "key",
        }

    @patch("orbital.shell.donki_client.requests.get")
    def test_fetch_flares_endpoint(self, mock_get):
        mock_get.return_value = json_response([])

        DONKIClient().fetch_flares(today=date(2024, 5, 10))

        assert mock_get.call_args[0][0].endswith("/FLR")

    @patch("orbital.shell.donki_client.requests.get")
    def test_non_list_payload_is_empty(self, mock_get):
        mock_get.return_value = json_response({"error": "rate limited"})

        assert DONKIClient().fetch_cmes(today=date(2024, 5, 10)) == []


class TestISSClient:
    """Tests for ISSClient."""

    @patch("orbital.shell.iss_client.requests.get")
    def test_fetch_position(self, mock_get):
        mock_get.return_value = json_response({"latitude": 1.0, "longitude": 2.0})

        result = ISSClient().fetch_position()

        assert result["latitude"] == 1.0
        assert mock_get.call_args[0][0] == "https://api.wheretheiss.at/v1/satellites/25544"

    @patch("orbital.shell.iss_client.requests.get")
    def test_timeout_propagates(self, mock_get):
        mock_get.side_effect = requests.Timeout()

        with pytest.raises(requests.Timeout):
            ISSClient().fetch_position()
