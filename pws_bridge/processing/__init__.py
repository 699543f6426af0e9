from .aggregator import Position, SampleWindow, Snapshot, median
from .delta_handler import DeltaHandler, read_fresh_value

__all__ = [
    "DeltaHandler",
    "Position",
    "SampleWindow",
    "Snapshot",
    "median",
    "read_fresh_value",
]
