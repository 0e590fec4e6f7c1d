"""
Scheduler

Delayed, cancellable callbacks for the engine. Every callback runs while
holding the shared engine lock, which HTTP and WebSocket handlers also take,
so all game state is touched by one logical thread of control at a time.
"""

import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional


class TimerHandle:
    """Handle for a pending callback. Cancelling twice is harmless."""

    def __init__(self):
        self.cancelled = False
        self.fired = False

    @property
    def pending(self) -> bool:
        return not self.cancelled and not self.fired

    def cancel(self):
        self.cancelled = True


class Scheduler(ABC):
    """Source of time and delayed execution for sessions and reconcilers."""

    def __init__(self):
        self.lock = threading.RLock()

    def now(self) -> float:
        """Current time in seconds since the epoch."""
        return time.time()

    def now_ms(self) -> int:
        return int(self.now() * 1000)

    @abstractmethod
    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        """Run `callback` after `delay` seconds unless cancelled first."""


class ThreadingScheduler(Scheduler):
    """Production scheduler backed by `threading.Timer`."""

    def call_later(self, delay: float, callback: Callable[[], None]) -> TimerHandle:
        handle = TimerHandle()

        def fire():
            with self.lock:
                # Cancellation may race with the timer thread; re-check under the lock
                if handle.cancelled:
                    return
                handle.fired = True
                callback()

        timer = threading.Timer(max(delay, 0.0), fire)
        timer.daemon = True
        timer.start()
        return handle


def cancel_timer(handle: Optional[TimerHandle]) -> None:
    if handle is not None:
        handle.cancel()


# Global scheduler instance
_scheduler = None


def get_scheduler() -> Optional[Scheduler]:
    """Get the global scheduler instance."""
    return _scheduler


def initialize_scheduler(scheduler: Optional[Scheduler] = None) -> Scheduler:
    """Initialize the global scheduler instance."""
    global _scheduler
    _scheduler = scheduler or ThreadingScheduler()
    return _scheduler
