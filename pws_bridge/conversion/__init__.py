from .units import (
    fraction_to_percent,
    kelvin_to_fahrenheit,
    meters_per_second_to_mph,
    pascals_to_inches_hg,
    radians_to_degrees,
    round_half_away,
)

__all__ = [
    "fraction_to_percent",
    "kelvin_to_fahrenheit",
    "meters_per_second_to_mph",
    "pascals_to_inches_hg",
    "radians_to_degrees",
    "round_half_away",
]
