from .data_bus import DataBus, PathValue, make_delta, parse_timestamp
from .signalk_client import SignalKBus, SignalKError

__all__ = [
    "DataBus",
    "PathValue",
    "SignalKBus",
    "SignalKError",
    "make_delta",
    "parse_timestamp",
]
