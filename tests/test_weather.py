"""Unit tests for the weather lookup."""

import pytest
import requests
from unittest.mock import MagicMock, patch

from treedo.recovery import EnrichmentError
from treedo.weather import (
    FORECAST_URL, GEOCODE_URL, WeatherRequest, fetch_weather, run_weather_request,
)


def response(payload):
    resp = MagicMock()
    resp.json.return_value = payload
    resp.raise_for_status.return_value = None
    return resp


def forecast(temp):
    return response({'current': {'temperature_2m': temp}})


class TestFetchWeather:
    """Test geocoding and forecast parsing with a mocked session."""

    def test_known_coordinates_skip_geocoding(self):
        session = MagicMock()
        session.get.return_value = forecast(71.6)
        result = fetch_weather(WeatherRequest(city="Oslo", lat=59.9, lon=10.7), session=session)
        assert result.ok
        assert result.temp == "72°F"
        session.get.assert_called_once()
        url = session.get.call_args[0][0]
        params = session.get.call_args[1]['params']
        assert url == FORECAST_URL
        assert params['temperature_unit'] == 'fahrenheit'
        assert params['latitude'] == "59.9000"

    def test_geocodes_city(self):
        session = MagicMock()
        session.get.side_effect = [
            response({'results': [{'latitude': 59.91273, 'longitude': 10.74609}]}),
            forecast(21.7),
        ]
        result = fetch_weather(WeatherRequest(city="Oslo", lat=0.0, lon=0.0, unit="c"), timeout=2.0, session=session)
        assert result.temp == "22°C"
        assert result.lat == pytest.approx(59.91273)
        first_call = session.get.call_args_list[0]
        assert first_call[0][0] == GEOCODE_URL
        assert first_call[1]['timeout'] == 2.0

    def test_unknown_city(self):
        session = MagicMock()
        session.get.return_value = response({})
        with pytest.raises(EnrichmentError, match="no geocoding results"):
            fetch_weather(WeatherRequest(city="Atlantis", lat=0.0, lon=0.0), session=session)

    def test_network_error(self):
        session = MagicMock()
        session.get.side_effect = requests.exceptions.Timeout("slow")
        with pytest.raises(EnrichmentError):
            fetch_weather(WeatherRequest(city="", lat=1.0, lon=1.0), session=session)

    def test_malformed_payload(self):
        session = MagicMock()
        session.get.return_value = response({'current': {}})
        with pytest.raises(EnrichmentError, match="malformed forecast"):
            fetch_weather(WeatherRequest(city="", lat=1.0, lon=1.0), session=session)

    def test_invalid_json(self):
        session = MagicMock()
        bad = MagicMock()
        bad.json.side_effect = ValueError("not json")
        session.get.return_value = bad
        with pytest.raises(EnrichmentError, match="invalid JSON"):
            fetch_weather(WeatherRequest(city="", lat=1.0, lon=1.0), session=session)


class TestRunWeatherRequest:
    """Test folding failures into a result."""

    def test_failure_becomes_result(self):
        with patch('treedo.weather.fetch_weather', side_effect=EnrichmentError("down")):
            result = run_weather_request(WeatherRequest(city="Oslo", lat=0.0, lon=0.0))
        assert not result.ok
        assert result.error == "down"
