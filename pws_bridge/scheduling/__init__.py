from .scheduler import PeriodicTask, Scheduler

__all__ = ["PeriodicTask", "Scheduler"]
