"""PWSWeather reporting plugin.

Wires the data bus, sample window, API client and scheduler together:
bootstrap (login, station lookup, first position update) followed by the
status, position and submission tasks.
"""

import logging
import math
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from .api.exceptions import ApiError, AuthError, StationResolutionFailure
from .api.pwsweather_client import PWSWeatherClient, Station, find_station
from .config.config_manager import DEFAULT_SUBMIT_INTERVAL, ConfigError
from .processing.aggregator import SampleWindow
from .processing.delta_handler import (
    MAX_VALUE_AGE,
    POSITION_PATH,
    SUBSCRIBED_PATHS,
    DeltaHandler,
    read_fresh_value,
)
from .scheduling.scheduler import PeriodicTask, Scheduler

POLL_INTERVAL = 1  # seconds
STATUS_INTERVAL = 60  # seconds
UPDATE_POSITION_INTERVAL = 90  # minutes


def time_since(then: datetime, now: Optional[datetime] = None) -> str:
    """Human readable time elapsed since ``then``, e.g. '3 minutes'."""
    now = now or datetime.now(timezone.utc)
    seconds = math.floor((now - then).total_seconds())

    for unit, length in (
        ('year', 31536000),
        ('month', 2592000),
        ('day', 86400),
        ('hour', 3600),
        ('minute', 60),
    ):
        interval = seconds / length
        if interval > 1:
            count = math.floor(interval)
            return f"{count} {unit}" if count == 1 else f"{count} {unit}s"
    return f"{seconds} second" if seconds == 1 else f"{seconds} seconds"


class PWSWeatherPlugin:
    """Submits aggregated weather observations to PWSWeather.com.

    One instance owns all of its state. Every callback runs on the
    scheduler's thread, so a login triggered by a failed submission has
    finished before any later task reads the token.
    """

    id = "pws-bridge"
    name = "PWSWeather Bridge"
    description = "Reports Signal K weather data to PWSWeather.com"

    def __init__(self, bus, scheduler: Scheduler, client: PWSWeatherClient,
                 utcnow: Callable[[], datetime] = lambda: datetime.now(timezone.utc)) -> None:
        """Initialize the plugin.

        Args:
            bus: Host data bus (subscribe, get_self_path, set_status)
            scheduler: Scheduler the periodic tasks are armed on
            client: PWSWeather API client
            utcnow: Wall clock returning aware UTC datetimes
        """
        self.bus = bus
        self.scheduler = scheduler
        self.client = client
        self.utcnow = utcnow
        self.logger = logging.getLogger(__name__)

        self.options: Dict[str, Any] = {}
        self.token: Optional[str] = None
        self.station: Optional[Station] = None
        self.window = SampleWindow()
        self.delta_handler = DeltaHandler(self.window)
        self.last_successful_update: Optional[datetime] = None

        self._tasks: List[PeriodicTask] = []
        self._position_task: Optional[PeriodicTask] = None
        self._unsubscribes: List[Callable[[], None]] = []

    @property
    def started(self) -> bool:
        return bool(self._tasks)

    def start(self, options: Dict[str, Any]) -> None:
        """Validate options, bootstrap and arm the periodic tasks.

        Args:
            options: station_id, email, password and submit_interval (minutes)

        Raises:
            ConfigError: If email or password is missing. Nothing is armed.
        """
        if not options.get('email') or not options.get('password'):
            message = 'Email and password are required'
            self.logger.error(message)
            self.bus.set_status(message)
            raise ConfigError(message)

        self.options = dict(options)
        if self.options.get('station_id') is not None:
            self.options['station_id'] = str(self.options['station_id'])
        interval = options.get('submit_interval')
        submit_interval = float(interval) if interval is not None else DEFAULT_SUBMIT_INTERVAL
        self.options['submit_interval'] = submit_interval

        self.bootstrap()

        self.bus.set_status(f"Submitting weather report every {submit_interval:g} minutes")

        self._unsubscribes.append(
            self.bus.subscribe(SUBSCRIBED_PATHS, POLL_INTERVAL, self.delta_handler.handle_delta)
        )

        self.logger.debug(f"Starting submission process every {submit_interval:g} minutes")
        self._tasks.append(self.scheduler.every(STATUS_INTERVAL, self.report_status, name="status"))
        self._tasks.append(
            self.scheduler.every(submit_interval * 60, self.submit, name="submit")
        )

    def stop(self) -> None:
        """Cancel every task and subscription."""
        for task in self._tasks:
            self.scheduler.cancel(task)
        if self._position_task is not None:
            self.scheduler.cancel(self._position_task)
            self._position_task = None
        self._tasks = []

        for unsubscribe in self._unsubscribes:
            unsubscribe()
        self._unsubscribes = []

        self.bus.set_status('Plugin stopped')

    def bootstrap(self) -> bool:
        """Log in and resolve the configured station.

        Returns:
            True if the station identity is resolved
        """
        if not self.login():
            return False
        return self.resolve_station()

    def login(self) -> bool:
        """Obtain a new session token. Failures are logged, never raised."""
        try:
            self.token = self.client.login(self.options['email'], self.options['password'])
            return True
        except AuthError as e:
            self.logger.error(f"Login error: {e}")
            return False

    def resolve_station(self) -> bool:
        """Look up the configured station and arm the position task."""
        try:
            station = self._match_station(self.client.list_stations(self.token))
        except ApiError as e:
            self.logger.error(f"Station list retrieve error: {e}")
            return False
        except StationResolutionFailure as e:
            self.logger.error(str(e))
            return False

        self.logger.debug('Station details obtained')
        self.station = station
        self.update_station_position()
        if self._position_task is None:
            self._position_task = self.scheduler.every(
                UPDATE_POSITION_INTERVAL * 60, self.update_station_position, name="position"
            )
        return True

    def _match_station(self, stations: List[Station]) -> Station:
        station_id = self.options.get('station_id')
        station = find_station(stations, station_id)
        if station is None:
            raise StationResolutionFailure(f"Could not obtain station details for {station_id}")
        return station

    def update_station_position(self) -> bool:
        """Push the current vessel position to the station, best effort.

        Returns:
            True if a request was sent; its reply is not checked
        """
        self.logger.debug('Updating position')
        if self.station is None:
            self.logger.debug('No station resolved, position update skipped')
            return False

        position = read_fresh_value(self.bus, POSITION_PATH, MAX_VALUE_AGE, now=self.utcnow())
        if not position:
            self.logger.debug('No position, update failed')
            return False

        try:
            self.client.update_station_position(
                self.token, self.station, position.get('latitude'), position.get('longitude')
            )
        except ApiError as e:
            self.logger.warning(f"Position update failed: {e}")
        return True

    def report_status(self) -> None:
        if self.last_successful_update is None:
            return
        since = time_since(self.last_successful_update, self.utcnow())
        self.bus.set_status(f"Last successful submission was {since} ago")

    def submit(self) -> bool:
        """Submit the current window.

        On success the window is reset. On failure it is kept so the samples
        carry into the next cycle, and the plugin logs in again.
        """
        snapshot = self.window.snapshot()
        station_key = self.station.app_key if self.station else None
        if station_key is None:
            self.logger.warning('Submitting without a resolved station key')

        try:
            result = self.client.submit_weather_report(
                self.options.get('station_id'), station_key, snapshot, self.utcnow()
            )
            success = result.success
            detail = result.body
        except ApiError as e:
            success = False
            detail = e

        if success:
            self.logger.debug(f"Weather report successfully submitted: {detail}")
            self.last_successful_update = self.utcnow()
            self.window.reset()
            return True

        self.logger.warning(f"Error submitting to PWSWeather.com API: {detail}")
        self.logger.debug('Logging in again')
        if self.login() and self.station is None:
            self.resolve_station()
        return False
