"""Signal K REST poller that feeds the data bus."""

from typing import Any, Callable, Dict, Iterable, Optional

import httpx

from .data_bus import DataBus, DeltaCallback, PathValue, parse_timestamp
from ..scheduling.scheduler import PeriodicTask, Scheduler

SELF_API_PATH = "/signalk/v1/api/vessels/self"


class SignalKError(Exception):
    """Raised when the Signal K server cannot be read."""
    pass


class SignalKBus(DataBus):
    """Data bus backed by a Signal K server.

    Every subscription arms a poll task on the scheduler at the subscription
    period. A poll reads each subscribed path from the REST API and publishes
    whatever was found as one delta.
    """

    def __init__(self, url: str, scheduler: Scheduler, timeout: Optional[float] = 10.0,
                 transport: Optional[httpx.BaseTransport] = None) -> None:
        super().__init__()
        self.base_url = url.rstrip('/')
        self.scheduler = scheduler
        self._poll_task: Optional[PeriodicTask] = None
        self._client = httpx.Client(
            timeout=timeout,
            transport=transport,
            headers={"Accept": "application/json"},
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "SignalKBus":
        return self

    def __exit__(self, exc_type: Any, exc_val: Any, exc_tb: Any) -> None:
        self.close()

    def subscribe(self, paths: Iterable[str], period: float,
                  callback: DeltaCallback) -> Callable[[], None]:
        unsubscribe = super().subscribe(paths, period, callback)
        if self._poll_task is None or period < self._poll_task.interval:
            if self._poll_task is not None:
                self.scheduler.cancel(self._poll_task)
            self._poll_task = self.scheduler.every(period, self.poll, name="signalk-poll")

        def unsubscribe_and_stop() -> None:
            unsubscribe()
            if not self.subscribed_paths and self._poll_task is not None:
                self.scheduler.cancel(self._poll_task)
                self._poll_task = None

        return unsubscribe_and_stop

    def fetch_path(self, path: str) -> Optional[Dict[str, Any]]:
        """Read one path from the server.

        Returns:
            The raw ``{"value", "timestamp"}`` object, or None if the server
            has no value for the path

        Raises:
            SignalKError: On transport errors or unexpected status codes
        """
        url = f"{self.base_url}{SELF_API_PATH}/{path.replace('.', '/')}"
        try:
            response = self._client.get(url)
        except httpx.RequestError as e:
            raise SignalKError(f"Network error reading {path}: {e}") from e

        if response.status_code == 404:
            return None
        if response.status_code != 200:
            raise SignalKError(f"HTTP error {response.status_code} reading {path}")

        try:
            data = response.json()
        except ValueError as e:
            raise SignalKError(f"Invalid JSON for {path}: {e}") from e
        if not isinstance(data, dict) or 'value' not in data:
            return None
        return data

    def get_self_path(self, path: str) -> Optional[PathValue]:
        """Read the current value of a path from the server.

        Falls back to the last polled value when the server cannot be reached.
        """
        try:
            data = self.fetch_path(path)
        except SignalKError as e:
            self.logger.warning(f"Signal K read failed, using cached value: {e}")
            return super().get_self_path(path)
        if data is None:
            return None
        return PathValue(data['value'], parse_timestamp(data.get('timestamp')))

    def poll(self) -> int:
        """Poll all subscribed paths and publish the result.

        Returns:
            Number of values published
        """
        updates = []
        for path in self.subscribed_paths:
            try:
                data = self.fetch_path(path)
            except SignalKError as e:
                self.logger.warning(f"Signal K poll failed: {e}")
                continue
            if data is None:
                continue

            # One update per path, each with its own source timestamp
            updates.append({
                'timestamp': data.get('timestamp'),
                'values': [{'path': path, 'value': data['value']}],
            })

        if updates:
            self.publish({'context': 'vessels.self', 'updates': updates})
        return len(updates)
