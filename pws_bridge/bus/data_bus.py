"""In-memory host data bus.

Holds the latest value of every Signal K path seen, dispatches deltas to
subscribers and records the plugin status line.
"""

import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Iterable, List, Optional, Tuple

DeltaCallback = Callable[[Dict[str, Any]], None]


@dataclass(frozen=True)
class PathValue:
    value: Any
    timestamp: Optional[datetime]


def parse_timestamp(raw: Any) -> Optional[datetime]:
    """Parse a Signal K ISO-8601 timestamp into an aware UTC datetime."""
    if raw is None:
        return None
    if isinstance(raw, datetime):
        ts = raw
    else:
        try:
            ts = datetime.fromisoformat(str(raw).replace('Z', '+00:00'))
        except ValueError:
            return None
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts.astimezone(timezone.utc)


def make_delta(path: str, value: Any, timestamp: Optional[datetime] = None) -> Dict[str, Any]:
    """Build a single-value Signal K delta."""
    ts = timestamp or datetime.now(timezone.utc)
    return {
        'context': 'vessels.self',
        'updates': [{
            'timestamp': ts.isoformat().replace('+00:00', 'Z'),
            'values': [{'path': path, 'value': value}],
        }],
    }


class DataBus:
    """Subscription, point-read and status interface to the host."""

    def __init__(self) -> None:
        self.logger = logging.getLogger(__name__)
        self._values: Dict[str, PathValue] = {}
        self._subscriptions: List[Tuple[frozenset, float, DeltaCallback]] = []
        self.status: Optional[str] = None

    def subscribe(self, paths: Iterable[str], period: float,
                  callback: DeltaCallback) -> Callable[[], None]:
        """Register interest in a set of paths.

        Args:
            paths: Signal K paths to receive deltas for
            period: Poll period in seconds
            callback: Called with each delta touching one of the paths

        Returns:
            Function that removes the subscription
        """
        subscription = (frozenset(paths), period, callback)
        self._subscriptions.append(subscription)
        self.logger.debug(f"Subscribed to {len(subscription[0])} paths every {period}s")

        def unsubscribe() -> None:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

        return unsubscribe

    @property
    def subscribed_paths(self) -> List[str]:
        paths = set()
        for subscribed, _, _ in self._subscriptions:
            paths |= subscribed
        return sorted(paths)

    def publish(self, delta: Dict[str, Any]) -> None:
        """Store the values carried by a delta and hand it to subscribers."""
        touched = set()
        for update in delta.get('updates') or []:
            timestamp = parse_timestamp(update.get('timestamp'))
            for entry in update.get('values') or []:
                path = entry.get('path')
                if not path:
                    continue
                self._values[path] = PathValue(entry.get('value'), timestamp)
                touched.add(path)

        for paths, _, callback in list(self._subscriptions):
            if paths & touched:
                callback(delta)

    def get_self_path(self, path: str) -> Optional[PathValue]:
        return self._values.get(path)

    def set_status(self, message: str) -> None:
        self.status = message
        self.logger.info(message)
