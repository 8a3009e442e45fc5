# uiauto_keys/pytest_plugin.py
"""
pytest integration. Enable it from a conftest.py:

    pytest_plugins = ["uiauto_keys.pytest_plugin"]

Tests that request `ui_reporter` run with an accumulating reporter: failed
assertions and waits on testing handles do not stop the test, and any
failure still recorded at teardown fails it. `--uiauto-fail-fast` makes
the first failure raise instead.
"""

from __future__ import annotations

from typing import Generator

import pytest

from .config import TimeConfig, reset_identifier_settings
from .context import ActionContextManager
from .memory import MemoryHost
from .reporting import FailureReporter, reporting


def pytest_addoption(parser: pytest.Parser) -> None:
    group = parser.getgroup("uiauto-keys")
    group.addoption(
        "--uiauto-fail-fast",
        action="store_true",
        default=False,
        help="Raise on the first failed handle assertion or wait",
    )
    group.addoption(
        "--uiauto-artifacts",
        action="store",
        default=None,
        help="Directory for element tree dumps written on failures",
    )


@pytest.fixture
def uiauto_isolation() -> Generator[None, None, None]:
    """Default timing, unfrozen identifier settings and an empty action stack."""
    TimeConfig.reset_to_defaults()
    reset_identifier_settings()
    ActionContextManager.clear()
    yield
    TimeConfig.reset_to_defaults()
    reset_identifier_settings()
    ActionContextManager.clear()


@pytest.fixture
def ui_reporter(
    request: pytest.FixtureRequest, uiauto_isolation: None
) -> Generator[FailureReporter, None, None]:
    """Accumulating failure reporter installed for the test."""
    reporter = FailureReporter(
        fail_fast=request.config.getoption("--uiauto-fail-fast"),
        artifacts_dir=request.config.getoption("--uiauto-artifacts"),
    )
    with reporting(reporter):
        yield reporter
    remaining = reporter.drain()
    if remaining:
        details = "\n\n".join(str(f) for f in remaining)
        pytest.fail(f"{len(remaining)} UI assertion(s) failed:\n{details}", pytrace=False)


@pytest.fixture
def memory_host(uiauto_isolation: None) -> MemoryHost:
    """An empty in-memory host."""
    return MemoryHost()
