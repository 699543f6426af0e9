"""Routes Signal K deltas into the sample window."""

import logging
from datetime import datetime, timezone
from typing import Any, Callable, Dict, Optional

from .aggregator import SampleWindow
from ..conversion.units import (
    fraction_to_percent,
    kelvin_to_fahrenheit,
    meters_per_second_to_mph,
    pascals_to_inches_hg,
    radians_to_degrees,
    round_half_away,
)

POSITION_PATH = 'navigation.position'
WIND_SPEED_PATH = 'environment.wind.speedOverGround'
WIND_DIRECTION_PATH = 'environment.wind.directionGround'
WATER_TEMPERATURE_PATH = 'environment.water.temperature'
OUTSIDE_TEMPERATURE_PATH = 'environment.outside.temperature'
OUTSIDE_PRESSURE_PATH = 'environment.outside.pressure'
OUTSIDE_HUMIDITY_PATH = 'environment.outside.humidity'

SUBSCRIBED_PATHS = (
    POSITION_PATH,
    WIND_DIRECTION_PATH,
    WIND_SPEED_PATH,
    WATER_TEMPERATURE_PATH,
    OUTSIDE_TEMPERATURE_PATH,
    OUTSIDE_PRESSURE_PATH,
    OUTSIDE_HUMIDITY_PATH,
)

MAX_VALUE_AGE = 60  # seconds


def read_fresh_value(bus, path: str, max_age: float = MAX_VALUE_AGE,
                     now: Optional[datetime] = None) -> Any:
    """Point-read a path, treating stale values as absent.

    Args:
        bus: Object with a ``get_self_path(path)`` accessor
        path: Signal K path
        max_age: Largest accepted age in seconds
        now: Reference time, defaults to the current UTC time

    Returns:
        The value, or None if it is missing, has no timestamp or is too old
    """
    data = bus.get_self_path(path)
    if data is None or data.value is None or data.timestamp is None:
        return None

    now = now or datetime.now(timezone.utc)
    age = (now - data.timestamp).total_seconds()
    if age <= max_age:
        return data.value
    return None


class DeltaHandler:
    """Converts delta values to PWSWeather units and folds them into a window."""
    
    def __init__(self, window: SampleWindow) -> None:
        self.window = window
        self.logger = logging.getLogger(__name__)
        self._routes: Dict[str, Callable[[Any], None]] = {
            POSITION_PATH: self._on_position,
            WIND_SPEED_PATH: self._on_wind_speed,
            WIND_DIRECTION_PATH: self._on_wind_direction,
            WATER_TEMPERATURE_PATH: self._on_water_temperature,
            OUTSIDE_TEMPERATURE_PATH: self._on_temperature,
            OUTSIDE_PRESSURE_PATH: self._on_pressure,
            OUTSIDE_HUMIDITY_PATH: self._on_humidity,
        }
    
    def handle_delta(self, delta: Dict[str, Any]) -> int:
        """Apply every path/value pair carried by a delta.
        
        Args:
            delta: Signal K delta with an ``updates`` list
            
        Returns:
            Number of values applied to the window
        """
        applied = 0
        for update in delta.get('updates') or []:
            for entry in update.get('values') or []:
                if self.handle_value(entry.get('path'), entry.get('value')):
                    applied += 1
        return applied
    
    def handle_value(self, path: Optional[str], value: Any) -> bool:
        """Route a single path/value pair.
        
        Returns:
            True if the value was recorded
        """
        route = self._routes.get(path)
        if route is None:
            self.logger.debug(f"Unknown path: {path}")
            return False
        if value is None:
            self.logger.debug(f"Ignoring empty value for {path}")
            return False
        
        route(value)
        return True
    
    def _on_position(self, value: Dict[str, float]) -> None:
        self.window.record_position(value.get('latitude'), value.get('longitude'))
    
    def _on_wind_speed(self, value: float) -> None:
        self.window.record_wind_speed(round_half_away(meters_per_second_to_mph(value), 2))
    
    def _on_wind_direction(self, value: float) -> None:
        self.window.record_wind_direction(radians_to_degrees(value))
    
    def _on_water_temperature(self, value: float) -> None:
        self.window.record_water_temperature(kelvin_to_fahrenheit(value))
    
    def _on_temperature(self, value: float) -> None:
        self.window.record_temperature(kelvin_to_fahrenheit(value))
    
    def _on_pressure(self, value: float) -> None:
        self.window.record_pressure(pascals_to_inches_hg(value))
    
    def _on_humidity(self, value: float) -> None:
        self.window.record_humidity(fraction_to_percent(value))
