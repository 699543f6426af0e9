"""In-memory aggregation of sensor samples between two submissions."""

from dataclasses import dataclass
from typing import List, Optional, Sequence


def median(values: Sequence[float]) -> Optional[float]:
    """Median of a sequence, or None when it is empty.

    An even number of values gives the mean of the two middle ones.
    """
    if not values:
        return None
    ordered = sorted(values)
    mid = len(ordered) // 2
    if len(ordered) % 2:
        return ordered[mid]
    return (ordered[mid - 1] + ordered[mid]) / 2


@dataclass(frozen=True)
class Position:
    latitude: float
    longitude: float


@dataclass(frozen=True)
class Snapshot:
    """Aggregated values read at submission time. Units are PWSWeather units."""

    wind_direction: Optional[int] = None  # degrees
    wind_speed: Optional[float] = None  # mph, median of the window
    wind_gust: Optional[float] = None  # mph, max of the window
    temperature: Optional[float] = None  # °F
    humidity: Optional[int] = None  # %
    pressure: Optional[float] = None  # inHg
    water_temperature: Optional[float] = None  # °F, not submitted


class SampleWindow:
    """Accumulates samples until the next successful submission.

    Wind speed samples are appended and summarised as a median. Every other
    field keeps only the latest value.
    """

    def __init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        """Clear the window. Wind direction is cleared too and only comes
        back with the next direction delta."""
        self.position: Optional[Position] = None
        self.wind_speeds: List[float] = []
        self.wind_gust: Optional[float] = None
        self.wind_direction: Optional[int] = None
        self.water_temperature: Optional[float] = None
        self.temperature: Optional[float] = None
        self.pressure: Optional[float] = None
        self.humidity: Optional[int] = None

    def record_position(self, latitude: float, longitude: float) -> None:
        self.position = Position(latitude, longitude)

    def record_wind_speed(self, mph: float) -> None:
        if self.wind_gust is None or mph > self.wind_gust:
            self.wind_gust = mph
        self.wind_speeds.append(mph)

    def record_wind_direction(self, degrees: int) -> None:
        self.wind_direction = degrees

    def record_temperature(self, fahrenheit: float) -> None:
        self.temperature = fahrenheit

    def record_water_temperature(self, fahrenheit: float) -> None:
        self.water_temperature = fahrenheit

    def record_pressure(self, inches_hg: float) -> None:
        self.pressure = inches_hg

    def record_humidity(self, percent: int) -> None:
        self.humidity = percent

    def snapshot(self) -> Snapshot:
        return Snapshot(
            wind_direction=self.wind_direction,
            wind_speed=median(self.wind_speeds),
            wind_gust=self.wind_gust,
            temperature=self.temperature,
            humidity=self.humidity,
            pressure=self.pressure,
            water_temperature=self.water_temperature,
        )
