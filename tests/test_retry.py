from __future__ import annotations

import asyncio

import pytest

from domain.exceptions import ProviderError, ProviderTimeoutError
from domain.models import RetryPolicy
from infrastructure.retry import retry_async


class Flaky:
    """Fails a fixed number of times, then returns a value."""

    def __init__(self, failures: list[Exception], value: str = "ok"):
        self._failures = list(failures)
        self._value = value
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self._failures:
            raise self._failures.pop(0)
        return self._value


class SleepRecorder:
    def __init__(self):
        self.delays: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.delays.append(seconds)


def test_succeeds_on_third_attempt_with_exponential_delays():
    op = Flaky([ProviderError("boom 1"), ProviderTimeoutError("boom 2")], value="done")
    sleep = SleepRecorder()

    result = asyncio.run(
        retry_async(op, RetryPolicy(max_attempts=3, base_delay_ms=2000), sleep=sleep)
    )

    assert result == "done"
    assert op.calls == 3
    assert sleep.delays == [2.0, 4.0]


def test_exhaustion_raises_last_error_only():
    first, second, last = ProviderError("first"), ProviderError("second"), ProviderError("last")
    op = Flaky([first, second, last])
    sleep = SleepRecorder()

    with pytest.raises(ProviderError) as excinfo:
        asyncio.run(retry_async(op, RetryPolicy(max_attempts=3, base_delay_ms=100), sleep=sleep))

    assert excinfo.value is last
    assert op.calls == 3
    # No delay after the final attempt.
    assert sleep.delays == [0.1, 0.2]


def test_single_attempt_never_sleeps():
    op = Flaky([ProviderError("nope")])
    sleep = SleepRecorder()

    with pytest.raises(ProviderError):
        asyncio.run(retry_async(op, RetryPolicy(max_attempts=1, base_delay_ms=5000), sleep=sleep))

    assert op.calls == 1
    assert sleep.delays == []


def test_first_success_is_not_retried():
    op = Flaky([])
    sleep = SleepRecorder()
    assert asyncio.run(retry_async(op, RetryPolicy(), sleep=sleep)) == "ok"
    assert op.calls == 1
    assert sleep.delays == []


def test_non_provider_errors_propagate_immediately():
    op = Flaky([KeyError("bug")])
    sleep = SleepRecorder()

    with pytest.raises(KeyError):
        asyncio.run(retry_async(op, RetryPolicy(max_attempts=3, base_delay_ms=10), sleep=sleep))

    assert op.calls == 1


@pytest.mark.parametrize(("attempts", "delay"), [(0, 0), (1, -1)])
def test_retry_policy_validation(attempts, delay):
    with pytest.raises(ValueError):
        RetryPolicy(max_attempts=attempts, base_delay_ms=delay)


def test_exhaustion_logs_once_and_keeps_original_traceback(caplog):
    last = ProviderTimeoutError("still down")
    op = Flaky([ProviderError("down"), last])

    with caplog.at_level("WARNING"), pytest.raises(ProviderTimeoutError) as excinfo:
        asyncio.run(retry_async(op, RetryPolicy(max_attempts=2, base_delay_ms=0), label="vision"))

    assert excinfo.value is last
    assert excinfo.traceback[-1].name == "__call__"
    assert caplog.text.count("all 2 attempt(s) failed") == 1
