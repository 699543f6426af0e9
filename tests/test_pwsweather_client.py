"""Tests for the PWSWeather API client."""

import json
from datetime import datetime, timezone

import httpx
import pytest

from pws_bridge.api import (
    ApiError,
    AuthError,
    PWSWeatherClient,
    Station,
    find_station,
    format_dateutc,
)
from pws_bridge.processing.aggregator import Snapshot

STATION = Station(id=1234, station_id='MYSTATION1', name='Sailing Vessel', url='https://example.com', app_key='app-key')
NOW = datetime(2026, 10, 17, 12, 34, 56, tzinfo=timezone.utc)


def make_client(handler):
    return PWSWeatherClient(transport=httpx.MockTransport(handler))


class TestLogin:
    
    def test_login_returns_token(self):
        seen = {}
        
        def handler(request):
            seen['method'] = request.method
            seen['url'] = str(request.url)
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json={'response': {'token': 'abc123'}})
        
        with make_client(handler) as client:
            assert client.login('me@example.com', 'secret') == 'abc123'
        
        assert seen['method'] == 'POST'
        assert seen['url'] == PWSWeatherClient.LOGIN_URL
        assert seen['body'] == {'email': 'me@example.com', 'password': 'secret'}
    
    def test_login_rejected(self):
        client = make_client(lambda request: httpx.Response(401, json={'error': 'bad credentials'}))
        with pytest.raises(AuthError, match="HTTP 401"):
            client.login('me@example.com', 'wrong')
    
    def test_login_without_token(self):
        client = make_client(lambda request: httpx.Response(200, json={'response': {}}))
        with pytest.raises(AuthError, match="no token"):
            client.login('me@example.com', 'secret')
    
    def test_login_network_error(self):
        def handler(request):
            raise httpx.ConnectError("connection refused", request=request)
        
        with pytest.raises(AuthError, match="Network error"):
            make_client(handler).login('me@example.com', 'secret')


class TestStations:
    
    def test_list_stations(self):
        seen = {}
        
        def handler(request):
            seen['auth'] = request.headers['authorization']
            return httpx.Response(200, json={'response': {'stations': [
                {'id': 1, 'stationId': 'OTHER', 'name': 'Other', 'url': None, 'appKey': 'k1'},
                {'id': 1234, 'stationId': 'MYSTATION1', 'name': 'Sailing Vessel',
                 'url': 'https://example.com', 'appKey': 'app-key'},
            ]}})
        
        stations = make_client(handler).list_stations('abc123')
        
        assert seen['auth'] == 'Bearer abc123'
        assert len(stations) == 2
        assert stations[1] == STATION
    
    def test_list_stations_error(self):
        client = make_client(lambda request: httpx.Response(403, json={'error': 'expired'}))
        with pytest.raises(ApiError, match="HTTP 403"):
            client.list_stations('abc123')
    
    def test_list_stations_malformed(self):
        client = make_client(lambda request: httpx.Response(200, text='<html>'))
        with pytest.raises(ApiError, match="malformed"):
            client.list_stations('abc123')
    
    def test_list_stations_not_a_list(self):
        client = make_client(lambda request: httpx.Response(200, json={'response': {'stations': None}}))
        with pytest.raises(ApiError, match="malformed"):
            client.list_stations('abc123')
    
    def test_find_station_first_match_wins(self):
        duplicate = Station(id=99, station_id='MYSTATION1')
        assert find_station([STATION, duplicate], 'MYSTATION1') is STATION
        assert find_station([STATION], 'mystation1') is None
        assert find_station([], 'MYSTATION1') is None


class TestUpdateStationPosition:
    
    def test_request_shape(self):
        seen = {}
        
        def handler(request):
            seen['method'] = request.method
            seen['url'] = str(request.url)
            seen['auth'] = request.headers['authorization']
            seen['body'] = json.loads(request.content)
            return httpx.Response(200, json={'success': True})
        
        make_client(handler).update_station_position('abc123', STATION, 37.8, -122.4)
        
        assert seen['method'] == 'PUT'
        assert seen['url'] == 'https://api.pwsweather.com/user/station/1234'
        assert seen['auth'] == 'Bearer abc123'
        assert seen['body'] == {
            'name': 'Sailing Vessel',
            'url': 'https://example.com',
            'pressureType': 'mslp',
            'location': {'precision': '6', 'elev': 1, 'lat': 37.8, 'long': -122.4},
        }
    
    def test_error_reply_is_not_raised(self):
        client = make_client(lambda request: httpx.Response(500, text='down'))
        response = client.update_station_position('abc123', STATION, 1.0, 2.0)
        assert response.status_code == 500


class TestSubmitWeatherReport:
    
    def test_format_dateutc_pins_seconds(self):
        assert format_dateutc(NOW) == '2026-10-17 12:34:01'
    
    def test_format_dateutc_converts_to_utc(self):
        from datetime import timedelta
        local = datetime(2026, 10, 17, 14, 34, 56, tzinfo=timezone(timedelta(hours=2)))
        assert format_dateutc(local) == '2026-10-17 12:34:01'
    
    def test_query_parameters(self):
        seen = {}
        
        def handler(request):
            seen['method'] = request.method
            seen['params'] = dict(request.url.params)
            seen['host'] = request.url.host
            return httpx.Response(200, json={'success': True})
        
        snapshot = Snapshot(wind_speed=22.37, wind_gust=22.37, temperature=80.3, water_temperature=59.0)
        result = make_client(handler).submit_weather_report('MYSTATION1', 'app-key', snapshot, NOW)
        
        assert result.success
        assert result.status_code == 200
        assert seen['method'] == 'GET'
        assert seen['host'] == 'pwsupdate.pwsweather.com'
        assert seen['params'] == {
            'ID': 'MYSTATION1',
            'PASSWORD': 'app-key',
            'dateutc': '2026-10-17 12:34:01',
            'windspeedmph': '22.37',
            'windgustmph': '22.37',
            'tempf': '80.3',
            'softwaretype': 'PWSWeather Bridge',
            'action': 'updateraw',
        }
    
    def test_missing_station_key_is_omitted(self):
        client = PWSWeatherClient()
        params = client.build_report_params('MYSTATION1', None, Snapshot(), NOW)
        client.close()
        assert 'PASSWORD' not in params
        assert 'windspeedmph' not in params
    
    def test_success_requires_body_flag(self):
        client = make_client(lambda request: httpx.Response(200, json={'message': 'ok'}))
        result = client.submit_weather_report('MYSTATION1', 'app-key', Snapshot(), NOW)
        assert not result.success
        assert result.body == {'message': 'ok'}
    
    def test_success_flag_must_be_true(self):
        client = make_client(lambda request: httpx.Response(200, json={'success': 'true'}))
        assert not client.submit_weather_report('MYSTATION1', 'app-key', Snapshot(), NOW).success
    
    def test_http_error_is_failure(self):
        client = make_client(lambda request: httpx.Response(500, json={'success': True}))
        assert not client.submit_weather_report('MYSTATION1', 'app-key', Snapshot(), NOW).success
    
    def test_non_json_body_is_failure(self):
        client = make_client(lambda request: httpx.Response(200, text='success'))
        result = client.submit_weather_report('MYSTATION1', 'app-key', Snapshot(), NOW)
        assert not result.success
        assert result.body is None
    
    def test_network_error(self):
        def handler(request):
            raise httpx.ReadTimeout("timed out", request=request)
        
        with pytest.raises(ApiError, match="Network error"):
            make_client(handler).submit_weather_report('MYSTATION1', 'app-key', Snapshot(), NOW)
