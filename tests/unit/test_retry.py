"""Unit tests for the bounded backoff helper."""

from unittest.mock import AsyncMock

import pytest

from aura.core.retry import RetryPolicy, retry_with_backoff


class Transient(Exception):
    pass


class Permanent(Exception):
    pass


def no_jitter(**kwargs) -> RetryPolicy:
    return RetryPolicy(jitter=False, **kwargs)


class TestRetryPolicy:
    def test_delays_grow_and_are_capped(self):
        policy = no_jitter(initial_interval=0.5, backoff_factor=2.0, max_interval=1.5)
        assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [0.5, 1.0, 1.5, 1.5]

    def test_jitter_stays_within_bounds(self):
        policy = RetryPolicy(initial_interval=1.0, jitter=True)
        for _ in range(20):
            assert 0.5 <= policy.delay_for(1) <= 1.0


class TestRetryWithBackoff:
    async def test_returns_first_success(self):
        call = AsyncMock(return_value="ok")
        sleep = AsyncMock()

        assert await retry_with_backoff(call, no_jitter(), (Transient,), sleep=sleep) == "ok"
        assert call.await_count == 1
        sleep.assert_not_awaited()

    async def test_retries_transient_then_succeeds(self):
        call = AsyncMock(side_effect=[Transient(), Transient(), "ok"])
        sleep = AsyncMock()
        policy = no_jitter(max_attempts=3, initial_interval=0.5)

        assert await retry_with_backoff(call, policy, (Transient,), sleep=sleep) == "ok"
        assert [c.args[0] for c in sleep.await_args_list] == [0.5, 1.0]

    async def test_gives_up_after_max_attempts(self):
        call = AsyncMock(side_effect=Transient())
        sleep = AsyncMock()

        with pytest.raises(Transient):
            await retry_with_backoff(call, no_jitter(max_attempts=2), (Transient,), sleep=sleep)
        assert call.await_count == 2
        assert sleep.await_count == 1

    async def test_other_errors_are_not_retried(self):
        call = AsyncMock(side_effect=Permanent())
        sleep = AsyncMock()

        with pytest.raises(Permanent):
            await retry_with_backoff(call, no_jitter(), (Transient,), sleep=sleep)
        assert call.await_count == 1
        sleep.assert_not_awaited()
