"""
Scheduled Retry

Shared polling abstraction used by the readiness gate and the conversion
orchestrator. Time is read through an injectable Clock so tests can drive
the schedule without sleeping.
"""

import logging
import threading
import time
from abc import ABC, abstractmethod
from typing import Callable, Optional, TypeVar

from ..errors import PollingCancelledError, PollingTimeoutError

logger = logging.getLogger(__name__)

T = TypeVar("T")


class Clock(ABC):
    """Time source for polling loops."""

    @abstractmethod
    def now(self) -> float:
        """Return a monotonic timestamp in seconds."""
        pass  # pragma: no cover

    @abstractmethod
    def sleep(self, seconds: float, cancel_event: Optional[threading.Event] = None) -> bool:
        """
        Wait for the given number of seconds.

        Returns:
            True if the wait was interrupted by the cancel event
        """
        pass  # pragma: no cover


class SystemClock(Clock):
    """Clock backed by time.monotonic and Event.wait."""

    def now(self) -> float:
        return time.monotonic()

    def sleep(self, seconds: float, cancel_event: Optional[threading.Event] = None) -> bool:
        if cancel_event is None:
            time.sleep(seconds)
            return False
        return cancel_event.wait(seconds)


class RetrySchedule:
    """
    Fixed-interval retry loop bounded by a deadline.

    The attempt callable returns None to ask for another try, anything else
    ends the loop and is returned to the caller. Exceptions raised by the
    attempt propagate unchanged.
    """

    def __init__(self, interval: float, timeout: float, clock: Optional[Clock] = None):
        if interval <= 0:
            raise ValueError(f"Polling interval must be positive, got {interval}")
        if timeout < 0:
            raise ValueError(f"Polling timeout cannot be negative, got {timeout}")

        self.interval = interval
        self.timeout = timeout
        self.clock = clock or SystemClock()

    def run(
        self,
        attempt: Callable[[], Optional[T]],
        cancel_event: Optional[threading.Event] = None,
        description: str = "operation",
    ) -> T:
        """
        Call attempt until it yields a result, the deadline passes, or the
        cancel event is set.

        Args:
            attempt: Callable returning a result or None
            cancel_event: Optional event that aborts the loop when set
            description: Label used in log and error messages

        Returns:
            First non-None result of attempt

        Raises:
            PollingTimeoutError: If the deadline passes without a result
            PollingCancelledError: If the cancel event is set
        """
        deadline = self.clock.now() + self.timeout
        attempts = 0

        while True:
            if cancel_event is not None and cancel_event.is_set():
                raise PollingCancelledError(f"{description} cancelled after {attempts} attempts")

            attempts += 1
            result = attempt()
            if result is not None:
                logger.debug(f"{description} completed after {attempts} attempts")
                return result

            remaining = deadline - self.clock.now()
            if remaining <= 0:
                raise PollingTimeoutError(
                    f"{description} did not complete within {self.timeout}s",
                    attempts=attempts,
                )

            if self.clock.sleep(min(self.interval, remaining), cancel_event):
                raise PollingCancelledError(f"{description} cancelled after {attempts} attempts")
