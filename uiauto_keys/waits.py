# uiauto_keys/waits.py
"""
@file waits.py
@brief Polling primitives shared by every wait in the testing layer.

Handle waits never call time.sleep themselves: they poll a projection of a
fresh snapshot through wait_for_value(), and gesture helpers repeat through
repeat_until(). Every finished poll is handed to the TimingLogger.
"""

from __future__ import annotations

import time
from typing import Any, Callable, Optional, TypeVar

from .exceptions import TimeoutError
from .timinglogger import TIMING_LOGGER

T = TypeVar("T")


def _now() -> float:
    return time.monotonic()


class _Poll:
    """Attempt counter and deadline of one wait."""

    def __init__(self, description: str, timeout: float, interval: float):
        self.description = description
        self.timeout = timeout
        self.interval = interval
        self.started = _now()
        self.attempts = 0
        self.last_error: Optional[BaseException] = None

    @property
    def elapsed(self) -> float:
        return _now() - self.started

    def pause(self) -> bool:
        """Sleep until the next attempt; False once the deadline has passed."""
        left = self.timeout - self.elapsed
        if left <= 0:
            return False
        time.sleep(min(self.interval, left))
        return True

    def finish(self, status: str) -> None:
        TIMING_LOGGER.record(
            "wait", self.description, status, self.attempts, self.elapsed,
            timeout=f"{self.timeout:g}",
        )

    def expired(self) -> TimeoutError:
        if self.last_error is not None:
            reason = f"{type(self.last_error).__name__}: {self.last_error}"
        else:
            reason = "condition never held"
        return TimeoutError(
            f"Timed out waiting for {self.description} after {self.timeout:g}s ({reason})",
            description=self.description,
            timeout=self.timeout,
            attempt_count=self.attempts,
            elapsed_time=self.elapsed,
            original_exception=self.last_error,
        )


def wait_until(
    predicate: Callable[[], T],
    timeout: float,
    interval: float = 0.1,
    description: str = "condition",
) -> T:
    """
    Evaluate predicate until it returns a truthy value and return that value.

    The predicate runs at least once, so a zero timeout is a single check.
    Exceptions raised by the predicate count as a falsy result; the last
    one is attached to the TimeoutError.

    @throws TimeoutError when the deadline passes
    """
    poll = _Poll(description, timeout, interval)
    while True:
        poll.attempts += 1
        try:
            result = predicate()
        except Exception as e:
            poll.last_error = e
        else:
            if result:
                poll.finish("success")
                return result
        if not poll.pause():
            break
    poll.finish("timeout")
    raise poll.expired()


def wait_until_not(
    predicate: Callable[[], Any],
    timeout: float,
    interval: float = 0.1,
    description: str = "condition to become false",
) -> None:
    wait_until(lambda: not predicate(), timeout=timeout, interval=interval, description=description)


def wait_for_value(
    projection: Callable[[], Any],
    expected: Any,
    timeout: float,
    interval: float = 0.1,
    description: str = "value",
) -> bool:
    """
    Poll a projection of live state until it equals expected.

    @return True when the value matched within timeout, False otherwise
    """
    try:
        wait_until(
            lambda: projection() == expected,
            timeout=timeout,
            interval=interval,
            description=f"{description} == {expected!r}",
        )
    except TimeoutError:
        return False
    return True


def repeat_until(
    action: Callable[[], Any],
    condition: Callable[[], bool],
    limit: int = 16,
    description: str = "action",
) -> bool:
    """
    Run action until condition holds, at most limit times.

    The condition is checked before the first run, so an already satisfied
    condition performs no action.

    @return True if the condition holds afterwards
    """
    started = _now()
    repeats = 0
    while not condition():
        if repeats >= limit:
            TIMING_LOGGER.record("repeat", description, "limit", repeats, _now() - started, limit=limit)
            return False
        action()
        repeats += 1
    TIMING_LOGGER.record("repeat", description, "success", repeats, _now() - started, limit=limit)
    return True
