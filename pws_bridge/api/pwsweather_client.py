"""
PWSWeather.com API client.

Covers the four calls the bridge needs: login, station list, station
position update and the raw weather report submission.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional

import httpx

from .exceptions import ApiError, AuthError
from ..processing.aggregator import Snapshot

SOFTWARE_TYPE = "PWSWeather Bridge"


@dataclass(frozen=True)
class Station:
    """A station registered on the PWSWeather account."""

    id: Any  # internal API id
    station_id: str  # user-facing station ID
    name: Optional[str] = None
    url: Optional[str] = None
    app_key: Optional[str] = None

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "Station":
        return cls(
            id=data.get("id"),
            station_id=data.get("stationId", ""),
            name=data.get("name"),
            url=data.get("url"),
            app_key=data.get("appKey"),
        )


@dataclass(frozen=True)
class SubmissionResult:
    success: bool
    status_code: Optional[int] = None
    body: Any = None


def format_dateutc(now: datetime) -> str:
    """Format a report timestamp as UTC with the seconds pinned to 01."""
    if now.tzinfo is not None:
        now = now.astimezone(timezone.utc)
    return now.strftime("%Y-%m-%d %H:%M:01")


def find_station(stations: List[Station], station_id: str) -> Optional[Station]:
    """Return the first station whose ID matches exactly."""
    for station in stations:
        if station.station_id == station_id:
            return station
    return None


class PWSWeatherClient:
    """
    Client for the PWSWeather.com account and submission APIs.

    Requests are never retried here. Callers decide what a failure means.
    """

    LOGIN_URL = "https://api.pwsweather.com/auth/login/"
    STATION_LIST_URL = "https://api.pwsweather.com/user/stations"
    UPDATE_STATION_URL_BASE = "https://api.pwsweather.com/user/station"
    SUBMIT_URL = "https://pwsupdate.pwsweather.com/api/v1/submitwx"

    def __init__(
        self,
        timeout: Optional[float] = None,
        transport: Optional[httpx.BaseTransport] = None,
    ):
        self.timeout = timeout
        self.logger = logging.getLogger(__name__)
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={
                "User-Agent": "pws-bridge/1.0.0",
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "PWSWeatherClient":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    @staticmethod
    def _auth_headers(token: Optional[str]) -> Dict[str, str]:
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _json_or_none(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError:
            return None

    def login(self, email: str, password: str) -> str:
        """
        Exchange account credentials for a session token.

        Raises:
            AuthError: On transport errors, non-200 replies or a reply without a token
        """
        self.logger.debug("Logging into PWSWeather.com")
        try:
            response = self._client.post(
                self.LOGIN_URL, json={"email": email, "password": password}
            )
        except httpx.RequestError as e:
            raise AuthError(f"Network error during login: {e}") from e

        body = self._json_or_none(response)
        if response.status_code != 200:
            raise AuthError(f"Login failed with HTTP {response.status_code}: {body}")

        try:
            token = body["response"]["token"]
        except (KeyError, TypeError) as e:
            raise AuthError(f"Login response carries no token: {body}") from e
        if not token:
            raise AuthError("Login response carries an empty token")

        self.logger.debug("Login successful")
        return token

    def list_stations(self, token: str) -> List[Station]:
        """
        Get every station registered on the account.

        Raises:
            ApiError: On transport errors, non-200 replies or a malformed body
        """
        self.logger.debug("Getting station list")
        try:
            response = self._client.get(
                self.STATION_LIST_URL, headers=self._auth_headers(token)
            )
        except httpx.RequestError as e:
            raise ApiError(f"Network error retrieving stations: {e}") from e

        body = self._json_or_none(response)
        if response.status_code != 200:
            raise ApiError(
                f"Station list failed with HTTP {response.status_code}: {body}"
            )

        try:
            raw_stations = body["response"]["stations"]
        except (KeyError, TypeError) as e:
            raise ApiError(f"Station list response is malformed: {body}") from e
        if not isinstance(raw_stations, list):
            raise ApiError(f"Station list response is malformed: {body}")

        return [Station.from_api(item) for item in raw_stations if isinstance(item, dict)]

    def update_station_position(
        self, token: str, station: Station, latitude: float, longitude: float
    ) -> Optional[httpx.Response]:
        """
        Move the station to a new position.

        The reply is logged and otherwise ignored.

        Raises:
            ApiError: Only on transport errors
        """
        payload = {
            "name": station.name,
            "url": station.url,
            "pressureType": "mslp",
            "location": {
                "precision": "6",
                "elev": 1,
                "lat": latitude,
                "long": longitude,
            },
        }
        try:
            response = self._client.put(
                f"{self.UPDATE_STATION_URL_BASE}/{station.id}",
                json=payload,
                headers=self._auth_headers(token),
            )
        except httpx.RequestError as e:
            raise ApiError(f"Network error updating station position: {e}") from e

        self.logger.debug(
            f"Position update reply ({response.status_code}): {response.text}"
        )
        return response

    def build_report_params(
        self,
        station_id: str,
        station_key: Optional[str],
        snapshot: Snapshot,
        now: datetime,
    ) -> Dict[str, Any]:
        """Query parameters for a raw report. Missing values are left out."""
        params = {
            "ID": station_id,
            "PASSWORD": station_key,
            "dateutc": format_dateutc(now),
            "winddir": snapshot.wind_direction,
            "windspeedmph": snapshot.wind_speed,
            "windgustmph": snapshot.wind_gust,
            "tempf": snapshot.temperature,
            "humidity": snapshot.humidity,
            "baromin": snapshot.pressure,
            "softwaretype": SOFTWARE_TYPE,
            "action": "updateraw",
        }
        return {key: value for key, value in params.items() if value is not None}

    def submit_weather_report(
        self,
        station_id: str,
        station_key: Optional[str],
        snapshot: Snapshot,
        now: Optional[datetime] = None,
    ) -> SubmissionResult:
        """
        Submit one weather report.

        Returns:
            SubmissionResult, successful only for HTTP 200 with ``success: true``

        Raises:
            ApiError: On transport errors
        """
        params = self.build_report_params(
            station_id, station_key, snapshot, now or datetime.now(timezone.utc)
        )
        self.logger.debug(f"Submitting data: {params}")

        try:
            response = self._client.get(self.SUBMIT_URL, params=params)
        except httpx.RequestError as e:
            raise ApiError(f"Network error submitting report: {e}") from e

        body = self._json_or_none(response)
        success = (
            response.status_code == 200
            and isinstance(body, dict)
            and body.get("success") is True
        )
        return SubmissionResult(success=success, status_code=response.status_code, body=body)
