from .exceptions import ApiError, AuthError, PWSWeatherError, StationResolutionFailure
from .pwsweather_client import (
    PWSWeatherClient,
    Station,
    SubmissionResult,
    find_station,
    format_dateutc,
)

__all__ = [
    "ApiError",
    "AuthError",
    "PWSWeatherClient",
    "PWSWeatherError",
    "Station",
    "StationResolutionFailure",
    "SubmissionResult",
    "find_station",
    "format_dateutc",
]
