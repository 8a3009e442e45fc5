# tests/test_waits.py
"""
Tests for the polling primitives and the timing history they feed.
"""

import time

import pytest

from uiauto_keys.exceptions import TimeoutError
from uiauto_keys.timinglogger import TIMING_LOGGER, PollRecord, TimingLogger
from uiauto_keys.waits import (repeat_until, wait_for_value, wait_until,
                               wait_until_not)


def counting(threshold):
    """Predicate that turns true on its threshold-th call."""
    calls = []

    def predicate():
        calls.append(1)
        return len(calls) >= threshold

    predicate.calls = calls
    return predicate


class TestWaitUntil:

    def test_truthy_result_is_returned(self):
        """Should return the predicate's truthy value."""
        assert wait_until(lambda: "Inbox", timeout=5) == "Inbox"

    def test_polls_until_true(self):
        """Should keep polling at the interval until the predicate holds."""
        predicate = counting(3)
        started = time.monotonic()
        assert wait_until(predicate, timeout=5, interval=0.1) is True
        assert len(predicate.calls) == 3
        assert 0.15 <= time.monotonic() - started < 1.0

    def test_zero_timeout_is_one_check(self):
        """A zero timeout still evaluates the predicate once."""
        predicate = counting(1)
        assert wait_until(predicate, timeout=0) is True
        assert len(predicate.calls) == 1

    def test_expiry(self):
        """Should raise TimeoutError carrying the poll metadata."""
        with pytest.raises(TimeoutError) as exc_info:
            wait_until(lambda: False, timeout=0.3, interval=0.1, description="panel")

        error = exc_info.value
        assert "Timed out waiting for panel" in str(error)
        assert error.description == "panel"
        assert error.timeout == 0.3
        assert error.attempt_count >= 2
        assert error.elapsed_time >= 0.3
        assert error.original_exception is None

    def test_last_predicate_error_is_kept(self):
        """Should attach the last exception raised by the predicate."""
        def broken():
            raise LookupError("no such row")

        with pytest.raises(TimeoutError) as exc_info:
            wait_until(broken, timeout=0.2, interval=0.05)

        error = exc_info.value
        assert isinstance(error.original_exception, LookupError)
        assert "LookupError: no such row" in str(error)
        assert error.get_root_cause() is error.original_exception


class TestWaitUntilNot:

    def test_returns_once_false(self):
        """Should return when the predicate becomes falsy."""
        remaining = {"n": 3}

        def visible():
            remaining["n"] -= 1
            return remaining["n"] > 0

        wait_until_not(visible, timeout=5, interval=0.05)
        assert remaining["n"] == 0

    def test_expires_while_true(self):
        """Should time out while the predicate stays truthy."""
        with pytest.raises(TimeoutError):
            wait_until_not(lambda: True, timeout=0.2, interval=0.05)


class TestWaitForValue:

    def test_matches_eventually(self):
        """Should return True once the projection reaches the value."""
        values = iter(["", "", "Done"])
        assert wait_for_value(lambda: next(values, "Done"), "Done", timeout=2, interval=0.05) is True

    def test_false_on_expiry(self):
        """Should return False instead of raising on timeout."""
        assert wait_for_value(lambda: "", "Done", timeout=0.2, interval=0.05) is False

    def test_none_never_matches(self):
        """A missing value never equals an expected False."""
        assert wait_for_value(lambda: None, False, timeout=0.1, interval=0.05) is False


class TestRepeatUntil:

    def test_satisfied_condition_runs_nothing(self):
        """Should not act when the condition already holds."""
        actions = []
        assert repeat_until(lambda: actions.append(1), lambda: True, limit=5) is True
        assert actions == []

    def test_runs_until_condition(self):
        """Should stop acting as soon as the condition holds."""
        actions = []
        assert repeat_until(lambda: actions.append(1), lambda: len(actions) == 3) is True
        assert len(actions) == 3

    def test_gives_up_at_limit(self):
        """Should act at most limit times and report failure."""
        actions = []
        assert repeat_until(lambda: actions.append(1), lambda: False, limit=4) is False
        assert len(actions) == 4


class TestTimeoutError:

    def test_root_cause_follows_chain(self):
        """Should follow original_exception to the innermost cause."""
        inner = ValueError("root cause")
        middle = TimeoutError("middle", original_exception=inner)
        outer = TimeoutError("outer", original_exception=middle)
        assert outer.get_root_cause() is inner

    def test_root_cause_without_chain(self):
        """Should return None when nothing was raised."""
        assert TimeoutError("plain").get_root_cause() is None

    def test_str_lists_details(self):
        """Should append attempts and elapsed time to the message."""
        error = TimeoutError("timeout", attempt_count=3, elapsed_time=1.5)
        assert str(error) == "timeout [Attempts: 3, Elapsed: 1.50s]"


class TestTimingLogger:

    @pytest.fixture
    def history(self):
        TIMING_LOGGER.clear()
        TIMING_LOGGER.enable()
        yield TIMING_LOGGER
        TIMING_LOGGER.disable()
        TIMING_LOGGER.clear()

    def test_disabled_records_nothing(self):
        """A disabled logger keeps no records."""
        sink = TimingLogger()
        assert sink.record("wait", "x", "success", 1, 0.0) is None
        assert sink.recent() == []

    def test_waits_are_recorded(self, history):
        """Should record one entry per finished wait with its status."""
        wait_until(lambda: True, timeout=1, description="banner")
        with pytest.raises(TimeoutError):
            wait_until(lambda: False, timeout=0.1, interval=0.05, description="footer")

        timeouts = history.recent("timeout")
        assert [r.target for r in timeouts] == ["footer"]
        assert timeouts[0].event == "wait"
        assert timeouts[0].attempts >= 2
        assert [r.target for r in history.recent("success")] == ["banner"]

    def test_repeat_limit_is_recorded(self, history):
        """Should record a repeat that hit its limit."""
        repeat_until(lambda: None, lambda: False, limit=2, description="swipe up")
        (entry,) = history.recent("limit")
        assert entry.event == "repeat"
        assert entry.attempts == 2
        assert entry.details == {"limit": 2}

    def test_history_is_bounded(self):
        """Should keep only the most recent records."""
        sink = TimingLogger(history=2)
        sink.enable()
        for n in range(3):
            sink.record("wait", f"t{n}", "success", 1, 0.0)
        assert [r.target for r in sink.recent()] == ["t1", "t2"]

    def test_file_output(self, tmp_path):
        """Should append formatted lines to the configured file."""
        path = tmp_path / "logs" / "timing.log"
        sink = TimingLogger()
        sink.configure(file_path=str(path))
        sink.enable()
        sink.record("wait", "'Listing.status'", "timeout", 41, 4.0031, timeout=4)
        line = path.read_text(encoding="utf-8").strip()
        assert line.startswith("[timeout] [timing] ")
        assert line.endswith("wait on 'Listing.status' attempts=41 elapsed=4.003s timeout=4")

    def test_record_format(self):
        """Should format event, target, attempts and elapsed time."""
        entry = PollRecord("repeat", "swipe", "success", 2, 0.5, at=0)
        assert "repeat on swipe attempts=2 elapsed=0.500s" in entry.format()
