from __future__ import annotations

import pytest

from article_agent.processors.ai.retry import backoff_delay, with_retries


@pytest.mark.parametrize("attempt,expected", [(0, 2.0), (1, 4.0), (2, 8.0), (3, 10.0), (10, 10.0)])
def test_backoff_is_exponential_and_capped(attempt, expected):
    assert backoff_delay(attempt) == expected


@pytest.mark.asyncio
async def test_with_retries_returns_first_success(recording_sleep):
    seen = []

    async def flaky(attempt):
        seen.append(attempt)
        if attempt < 1:
            raise TimeoutError("slow upstream")
        return "ok"

    hooks = []
    result = await with_retries(
        flaky, retries=3, sleep=recording_sleep, on_retry=lambda n, exc, d: hooks.append((n, str(exc), d))
    )
    assert result == "ok"
    assert seen == [0, 1]
    assert recording_sleep.delays == [2.0]
    assert hooks == [(1, "slow upstream", 2.0)]


@pytest.mark.asyncio
async def test_with_retries_reraises_last_error(recording_sleep):
    calls = []

    async def always_fails(attempt):
        calls.append(attempt)
        raise ValueError(f"bad {attempt}")

    with pytest.raises(ValueError, match="bad 2"):
        await with_retries(always_fails, retries=2, sleep=recording_sleep)
    assert calls == [0, 1, 2]
    assert recording_sleep.delays == [2.0, 4.0]
