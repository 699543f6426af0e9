"""Single-threaded scheduler for the bridge's periodic tasks."""

import time
import logging
from dataclasses import dataclass, field
from typing import Callable, List, Optional


@dataclass
class PeriodicTask:
    """A callback armed to run every ``interval`` seconds."""

    name: str
    interval: float
    callback: Callable[[], object]
    next_run: float
    cancelled: bool = False
    run_count: int = 0
    seq: int = field(default=0, repr=False)


class Scheduler:
    """Runs periodic tasks one at a time on the calling thread.

    Tasks never overlap. A task that raises is logged and stays armed, so a
    failure in one task never reaches the loop or the other tasks.
    """
    
    def __init__(self, clock: Callable[[], float] = time.monotonic,
                 sleep: Callable[[float], None] = time.sleep) -> None:
        """Initialize the scheduler.
        
        Args:
            clock: Monotonic time source in seconds
            sleep: Function used to wait between ticks
        """
        self.logger = logging.getLogger(__name__)
        self._clock = clock
        self._sleep = sleep
        self._tasks: List[PeriodicTask] = []
        self._seq = 0
        self.running = False
    
    @property
    def tasks(self) -> List[PeriodicTask]:
        return [task for task in self._tasks if not task.cancelled]
    
    def every(self, interval: float, callback: Callable[[], object],
              name: Optional[str] = None, run_immediately: bool = False) -> PeriodicTask:
        """Arm a periodic task.
        
        Args:
            interval: Seconds between runs
            callback: Function to call with no arguments
            name: Name used in log messages
            run_immediately: Make the first run due now instead of after one interval
            
        Returns:
            The armed task, usable with cancel()
        """
        if interval <= 0:
            raise ValueError(f"Task interval must be positive, got {interval}")
        
        self._seq += 1
        now = self._clock()
        task = PeriodicTask(
            name=name or getattr(callback, '__name__', 'task'),
            interval=interval,
            callback=callback,
            next_run=now if run_immediately else now + interval,
            seq=self._seq,
        )
        self._tasks.append(task)
        self.logger.debug(f"Armed task {task.name} every {interval}s")
        return task
    
    def cancel(self, task: PeriodicTask) -> None:
        task.cancelled = True
        if task in self._tasks:
            self._tasks.remove(task)
    
    def clear(self) -> None:
        """Cancel every armed task."""
        for task in list(self._tasks):
            self.cancel(task)
    
    def run_pending(self) -> int:
        """Run every task that is due, in the order they were armed.
        
        Returns:
            Number of task runs performed
        """
        now = self._clock()
        due = sorted(
            (task for task in self._tasks if task.next_run <= now),
            key=lambda task: (task.next_run, task.seq),
        )
        
        ran = 0
        for task in due:
            # An earlier task in this tick may have cancelled this one
            if task.cancelled:
                continue
            self._run_task(task)
            task.next_run += task.interval
            if task.next_run <= now:
                # Fell behind; skip the missed runs
                task.next_run = now + task.interval
            ran += 1
        return ran
    
    def _run_task(self, task: PeriodicTask) -> None:
        task.run_count += 1
        try:
            task.callback()
        except Exception:
            self.logger.exception(f"Task {task.name} failed")
    
    def seconds_until_next(self) -> Optional[float]:
        if not self._tasks:
            return None
        return max(0.0, min(task.next_run for task in self._tasks) - self._clock())
    
    def run_forever(self, tick: float = 1.0) -> None:
        """Run tasks until stop() is called or no tasks remain.
        
        Args:
            tick: Longest sleep between checks, in seconds
        """
        self.logger.info(f"Scheduler started with {len(self._tasks)} tasks")
        self.running = True
        
        while self.running:
            try:
                self.run_pending()
                
                wait = self.seconds_until_next()
                if wait is None:
                    self.logger.info("No tasks armed, scheduler exiting")
                    break
                
                if self.running:
                    self._sleep(min(wait, tick))
                
            except KeyboardInterrupt:
                self.logger.info("Received keyboard interrupt")
                break
        
        self.running = False
        self.logger.info("Scheduler stopped")
    
    def stop(self) -> None:
        self.running = False
