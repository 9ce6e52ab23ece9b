"""Tick sources for the analysis cycle: real timers and a manual clock for tests."""

import threading
import time
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Protocol

from ..logging_setup import get_logger

logger = get_logger("scheduler")


class Handle:
    """Handle for a scheduled task that can be cancelled."""

    def __init__(self, task_id: str):
        self.task_id = task_id
        self.cancelled = False

    def cancel(self) -> bool:
        """Cancel the task. Returns True if it was not already cancelled."""
        if not self.cancelled:
            self.cancelled = True
            return True
        return False


class Scheduler(Protocol):
    """Clock plus one-shot task scheduling."""

    def now(self) -> float:
        """Get current time in seconds."""
        ...

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Handle:
        """Schedule a function to be called after delay_s seconds."""
        ...

    def cancel(self, handle: Handle) -> bool:
        """Cancel a scheduled task."""
        ...

    def cancel_all(self) -> None:
        """Cancel all scheduled tasks."""
        ...


@dataclass
class ScheduledTask:
    """A task scheduled to run at a specific time."""

    handle: Handle
    due_time: float
    callback: Callable[[], None]
    seq: int


class RealScheduler:
    """Production scheduler using the monotonic clock and threading.Timer."""

    def __init__(self):
        self._tasks: Dict[str, threading.Timer] = {}
        self._task_counter = 0
        self._lock = threading.Lock()

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Handle:
        with self._lock:
            self._task_counter += 1
            task_id = f"task_{self._task_counter}"
            handle = Handle(task_id)

            def wrapper():
                with self._lock:
                    self._tasks.pop(task_id, None)
                if not handle.cancelled:
                    try:
                        fn()
                    except Exception as e:
                        logger.error(f"Error in scheduled task {task_id}: {e}", exc_info=True)

            timer = threading.Timer(delay_s, wrapper)
            timer.daemon = True
            timer.name = f"calmtrack-{task_id}"
            self._tasks[task_id] = timer
            timer.start()

            return handle

    def cancel(self, handle: Handle) -> bool:
        with self._lock:
            timer = self._tasks.pop(handle.task_id, None)
        handle.cancel()
        if timer:
            timer.cancel()
            return True
        return False

    def cancel_all(self) -> None:
        with self._lock:
            timers = list(self._tasks.values())
            self._tasks.clear()
        for timer in timers:
            timer.cancel()


class ManualScheduler:
    """Scheduler driven by explicit time advancement.

    Time only moves inside ``advance``. Tasks run in due order with the clock
    set to each task's due time, so a callback that reschedules itself inside
    the advanced interval runs again within the same call.
    """

    def __init__(self, start_time: float = 0.0):
        self._current_time = start_time
        self._tasks: List[ScheduledTask] = []
        self._task_counter = 0
        self._lock = threading.RLock()

    def now(self) -> float:
        with self._lock:
            return self._current_time

    def call_later(self, delay_s: float, fn: Callable[[], None]) -> Handle:
        if fn is None:
            raise ValueError("callback cannot be None")

        with self._lock:
            self._task_counter += 1
            handle = Handle(f"manual_task_{self._task_counter}")
            self._tasks.append(
                ScheduledTask(
                    handle=handle,
                    due_time=self._current_time + max(0.0, delay_s),
                    callback=fn,
                    seq=self._task_counter,
                )
            )
            self._tasks.sort(key=lambda t: (t.due_time, t.seq))
            return handle

    def cancel(self, handle: Handle) -> bool:
        with self._lock:
            for i, task in enumerate(self._tasks):
                if task.handle.task_id == handle.task_id:
                    self._tasks.pop(i)
                    handle.cancel()
                    return True
            return False

    def cancel_all(self) -> None:
        with self._lock:
            for task in self._tasks:
                task.handle.cancel()
            self._tasks.clear()

    def advance(self, dt_s: float) -> int:
        """Advance simulated time by dt_s seconds, running due tasks.

        Returns:
            Number of tasks executed.
        """
        executed_count = 0

        with self._lock:
            target = self._current_time + dt_s

        while True:
            with self._lock:
                self._tasks = [t for t in self._tasks if not t.handle.cancelled]
                if not self._tasks or self._tasks[0].due_time > target:
                    self._current_time = max(self._current_time, target)
                    break
                task = self._tasks.pop(0)
                self._current_time = max(self._current_time, task.due_time)

            # Run outside the lock so callbacks can reschedule
            try:
                task.callback()
                executed_count += 1
            except Exception as e:
                logger.error(f"Error in scheduled task {task.handle.task_id}: {e}")

        return executed_count

    def pending_count(self) -> int:
        with self._lock:
            return len([t for t in self._tasks if not t.handle.cancelled])

    def next_due_time(self) -> Optional[float]:
        with self._lock:
            active = [t.due_time for t in self._tasks if not t.handle.cancelled]
            return min(active) if active else None


class PeriodicTimer:
    """Repeats a callback every interval_s on top of a one-shot scheduler.

    Each start/stop begins a new generation. A firing task only reschedules
    while its generation is current, so a stop/start from inside the
    callback leaves exactly one pending tick.
    """

    def __init__(self, scheduler: Scheduler, interval_s: float, callback: Callable[[], None]):
        if interval_s <= 0:
            raise ValueError("interval_s must be positive")

        self._scheduler = scheduler
        self.interval_s = interval_s
        self._callback = callback
        self._handle: Optional[Handle] = None
        self._running = False
        self._generation = 0
        self._lock = threading.Lock()

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        with self._lock:
            if self._running:
                return
            self._running = True
            self._generation += 1
            self._schedule_next(self._generation)

    def stop(self) -> None:
        with self._lock:
            self._running = False
            self._generation += 1
            if self._handle is not None:
                self._scheduler.cancel(self._handle)
                self._handle = None

    def _schedule_next(self, generation: int) -> None:
        self._handle = self._scheduler.call_later(
            self.interval_s, lambda: self._fire(generation)
        )

    def _is_current(self, generation: int) -> bool:
        return self._running and generation == self._generation

    def _fire(self, generation: int) -> None:
        with self._lock:
            if not self._is_current(generation):
                return
        try:
            self._callback()
        finally:
            with self._lock:
                if self._is_current(generation):
                    self._schedule_next(generation)


def get_scheduler(test_mode: bool = False) -> Scheduler:
    """Get the appropriate scheduler based on mode."""
    if test_mode:
        return ManualScheduler()
    return RealScheduler()
