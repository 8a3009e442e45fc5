# uiauto_keys/reporting.py
"""
@file reporting.py
@brief Test-failure channel for assertions and waits on testing handles.

Assertions never raise by themselves. They hand a failure to the active
FailureReporter, which either records it and lets the test continue
(accumulating mode, used by the pytest fixture) or raises AssertionFailure
at once (fail-fast mode, the process default outside pytest).

Each failure carries the file and line of the first caller outside this
package, so a failed handle.assert_text(...) points at the test line.
"""

from __future__ import annotations

import inspect
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Any, Generator, List, Optional, Tuple

from .artifacts import make_artifacts
from .context import ActionContextManager
from .exceptions import AssertionFailure
from .interfaces import INode

logger = logging.getLogger("uiauto_keys.reporting")

_PACKAGE = __name__.split(".")[0]

Location = Tuple[Optional[str], Optional[int]]


def caller_location() -> Location:
    """File and line of the nearest frame outside this package."""
    frame = inspect.currentframe()
    try:
        while frame is not None:
            module = frame.f_globals.get("__name__", "")
            if module != _PACKAGE and not module.startswith(_PACKAGE + "."):
                return frame.f_code.co_filename, frame.f_lineno
            frame = frame.f_back
        return None, None
    finally:
        del frame


@dataclass(frozen=True)
class Failure:
    """One reported failure."""
    message: str
    file: Optional[str] = None
    line: Optional[int] = None

    def __str__(self) -> str:
        if self.file:
            return f"{self.file}:{self.line}: {self.message}"
        return self.message


class FailureReporter:
    """
    Collects failures reported by assertions and waits.

    @param fail_fast Raise AssertionFailure on the first failure
    @param artifacts_dir When set, dump the element's subtree for each failure
    """

    def __init__(self, fail_fast: bool = False, artifacts_dir: Optional[str] = None):
        self.fail_fast = fail_fast
        self.artifacts_dir = artifacts_dir
        self._failures: List[Failure] = []
        self._lock = threading.Lock()

    @property
    def failures(self) -> Tuple[Failure, ...]:
        with self._lock:
            return tuple(self._failures)

    def __len__(self) -> int:
        with self._lock:
            return len(self._failures)

    def drain(self) -> List[Failure]:
        """Return and forget the recorded failures."""
        with self._lock:
            failures, self._failures = self._failures, []
        return failures

    def clear(self) -> None:
        with self._lock:
            self._failures = []

    def fail(
        self,
        message: str,
        location: Optional[Location] = None,
        node: Optional[INode] = None,
    ) -> Failure:
        """
        Report an unconditional failure.

        @param message Failure text
        @param location (file, line); captured from the caller when omitted
        @param node Snapshot subtree to dump when artifacts are enabled
        @throws AssertionFailure in fail-fast mode
        """
        file, line = location if location is not None else caller_location()

        action = ActionContextManager.current()
        if action is not None:
            message = f"{message}\n{action.format_trace()}"

        if self.artifacts_dir and node is not None:
            actions = [c.to_dict() for c in action.chain()] if action is not None else None
            paths = make_artifacts(node, self.artifacts_dir, "failure", actions)
            if paths:
                listed = ", ".join(f"{k}={v}" for k, v in paths.items())
                message = f"{message}\nArtifacts: {listed}"

        failure = Failure(message, file, line)
        logger.error("%s", failure)
        if self.fail_fast:
            raise AssertionFailure(message, file, line)
        with self._lock:
            self._failures.append(failure)
        return failure

    def record_true(
        self,
        condition: Any,
        message: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> bool:
        """Report a failure unless condition is truthy."""
        if condition:
            return True
        self.fail(
            message or "assert_that failed",
            location if location is not None else caller_location(),
        )
        return False

    def record_equal(
        self,
        actual: Any,
        expected: Any,
        message: Optional[str] = None,
        location: Optional[Location] = None,
    ) -> bool:
        """Report a failure unless actual == expected."""
        if actual == expected:
            return True
        text = f"({actual!r}) is not equal to ({expected!r})"
        if message:
            text = f"{message}: {text}"
        self.fail(text, location if location is not None else caller_location())
        return False


_local = threading.local()
_default_reporter = FailureReporter(fail_fast=True)


def current_reporter() -> FailureReporter:
    """Reporter installed on this thread, or the fail-fast process default."""
    reporter = getattr(_local, "reporter", None)
    return reporter if reporter is not None else _default_reporter


def install_reporter(reporter: Optional[FailureReporter]) -> None:
    """Install a reporter for this thread (None restores the default)."""
    _local.reporter = reporter


@contextmanager
def reporting(reporter: FailureReporter) -> Generator[FailureReporter, None, None]:
    """Route failures raised inside the block to reporter."""
    previous = getattr(_local, "reporter", None)
    _local.reporter = reporter
    try:
        yield reporter
    finally:
        _local.reporter = previous
