"""Tests for polling utilities."""

import io

import pytest

from migledger.utils.retry import on_poll, poll_until_true


class TestOnPoll:
    """Test the poll callback."""

    def test_on_poll_logs_attempt(self, log_capture: io.StringIO) -> None:
        def try_lock() -> None:
            pass

        on_poll({"target": try_lock, "tries": 3, "elapsed": 2.0, "wait": 1.0})

        log_output = log_capture.getvalue()
        assert "Waiting on try_lock" in log_output
        assert "attempt=3" in log_output


class TestPollUntilTrue:
    """Test the polling decorator."""

    async def test_returns_once_target_succeeds(self) -> None:
        calls = 0

        @poll_until_true(0.001)
        async def attempt() -> bool:
            nonlocal calls
            calls += 1
            return calls >= 4

        assert await attempt() is True
        assert calls == 4

    async def test_exceptions_are_not_retried(self) -> None:
        calls = 0

        @poll_until_true(0.001)
        async def attempt() -> bool:
            nonlocal calls
            calls += 1
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await attempt()
        assert calls == 1

    async def test_success_on_first_try_does_not_wait(self, log_capture: io.StringIO) -> None:
        @poll_until_true(10.0)
        async def attempt() -> bool:
            return True

        assert await attempt() is True
        assert "Waiting on" not in log_capture.getvalue()
