"""
PWSWeather Bridge

Samples wind, temperature, pressure and humidity from a Signal K data bus,
aggregates them over a submission window and reports them to PWSWeather.com.
"""

__version__ = "1.0.0"
__author__ = "PWS Bridge Team"
