"""
Exceptions for PWSWeather operations.
"""


class PWSWeatherError(Exception):
    """Base exception for PWSWeather-related errors."""

    pass


class AuthError(PWSWeatherError):
    """Login failed or returned no token."""

    pass


class ApiError(PWSWeatherError):
    """Non-authentication request to the PWSWeather API failed."""

    pass


class StationResolutionFailure(PWSWeatherError):
    """Configured station ID is not in the account's station list."""

    pass
