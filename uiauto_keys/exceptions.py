# uiauto_keys/exceptions.py
"""
@file exceptions.py
@brief Custom exception classes for the accessibility-key framework.

Lookups never raise: a missing element degrades to an empty handle.
These exceptions cover configuration mistakes, the low-level polling
primitive and fail-fast assertion reporting.
"""

from __future__ import annotations

from typing import Optional


class UIAutoError(Exception):
    """Base exception for the framework."""
    pass


class ConfigError(UIAutoError):
    """Raised when YAML configuration is invalid or frozen settings are changed."""
    pass


class DeclarationError(ConfigError):
    """Raised when a descriptor declaration or key path is invalid."""
    pass


class TimeoutError(UIAutoError):
    """
    A polled condition did not hold within its timeout.

    Only the polling primitives in waits.py raise it. Handle waits convert
    it into a reported failure, so tests meet it only when they poll
    directly.

    Attributes:
        description: What was being waited for
        timeout: The bound in seconds
        attempt_count: Number of times the condition was evaluated
        elapsed_time: Seconds spent polling
        original_exception: Last exception raised by the condition, if any
    """

    def __init__(
        self,
        message: str,
        *,
        description: Optional[str] = None,
        timeout: Optional[float] = None,
        attempt_count: Optional[int] = None,
        elapsed_time: Optional[float] = None,
        original_exception: Optional[BaseException] = None,
    ):
        super().__init__(message)
        self.description = description
        self.timeout = timeout
        self.attempt_count = attempt_count
        self.elapsed_time = elapsed_time
        self.original_exception = original_exception

    def __str__(self) -> str:
        details = []
        if self.original_exception is not None:
            details.append(f"Original exception: {type(self.original_exception).__name__}")
        if self.attempt_count is not None:
            details.append(f"Attempts: {self.attempt_count}")
        if self.elapsed_time is not None:
            details.append(f"Elapsed: {self.elapsed_time:.2f}s")
        message = super().__str__()
        return f"{message} [{', '.join(details)}]" if details else message

    def get_root_cause(self) -> Optional[BaseException]:
        """The deepest original_exception along the chain, or None."""
        cause = self.original_exception
        while getattr(cause, "original_exception", None) is not None:
            cause = cause.original_exception
        return cause


class AssertionFailure(UIAutoError, AssertionError):
    """
    Raised by a fail-fast reporter when an assertion or wait fails.

    Carries the caller location captured at the assertion call site.
    """

    def __init__(self, message: str, file: Optional[str] = None, line: Optional[int] = None):
        self.message = message
        self.file = file
        self.line = line
        super().__init__(self.__str__())

    def __str__(self) -> str:
        if self.file:
            return f"{self.file}:{self.line}: {self.message}"
        return self.message
