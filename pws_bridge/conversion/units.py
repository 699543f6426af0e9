"""Unit conversions from Signal K (SI) units to the units PWSWeather expects."""

from decimal import Decimal, ROUND_HALF_UP
from typing import Union

MPH_PER_METER_PER_SECOND = 2.237
DEGREES_PER_RADIAN = 57.2958
PASCALS_PER_INCH_HG = 3386.388

Number = Union[int, float]


def round_half_away(value: Number, digits: int = 0) -> Number:
    """Round half away from zero.

    Python's round() rounds half to even, so round(2.5) would give 2.
    """
    quantum = Decimal(1).scaleb(-digits)
    rounded = Decimal(repr(value)).quantize(quantum, rounding=ROUND_HALF_UP)
    if digits <= 0:
        return int(rounded)
    return float(rounded)


def meters_per_second_to_mph(value: Number) -> float:
    return value * MPH_PER_METER_PER_SECOND


def radians_to_degrees(value: Number) -> int:
    return round_half_away(value * DEGREES_PER_RADIAN)


def kelvin_to_fahrenheit(value: Number) -> float:
    return round_half_away((value - 273.15) * 9 / 5 + 32, 1)


def pascals_to_inches_hg(value: Number) -> float:
    return round_half_away(value / PASCALS_PER_INCH_HG, 1)


def fraction_to_percent(value: Number) -> int:
    """Convert a relative humidity fraction in [0, 1] to a percentage."""
    return round_half_away(float(value) * 100)
