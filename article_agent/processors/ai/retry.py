from __future__ import annotations

import asyncio
from typing import Awaitable, Callable, Optional, TypeVar

from ...utils.logging import get_logger

T = TypeVar("T")
logger = get_logger("ag.ai.retry")

Sleep = Callable[[float], Awaitable[None]]
RetryHook = Callable[[int, BaseException, float], None]


def backoff_delay(attempt: int, *, base_ms: int = 2000, cap_ms: int = 10000) -> float:
    """Seconds to wait after failed attempt ``attempt`` (0-based): min(base * 2^attempt, cap)."""
    return min(base_ms * (2 ** attempt), cap_ms) / 1000.0


async def with_retries(
    fn: Callable[[int], Awaitable[T]],
    *,
    retries: int = 2,
    base_ms: int = 2000,
    cap_ms: int = 10000,
    sleep: Sleep = asyncio.sleep,
    on_retry: Optional[RetryHook] = None,
) -> T:
    """Await ``fn(attempt)`` up to ``retries + 1`` times.

    ``on_retry(next_attempt, exc, delay_s)`` runs before each backoff sleep.
    The last exception is re-raised once attempts are exhausted.
    """
    last_exc: BaseException | None = None
    for attempt in range(retries + 1):
        try:
            return await fn(attempt)
        except Exception as exc:  # noqa: BLE001 - every failure counts as a failed attempt
            last_exc = exc
            if attempt >= retries:
                break
            delay = backoff_delay(attempt, base_ms=base_ms, cap_ms=cap_ms)
            logger.warning(
                "AI call failed (attempt %s/%s): %s; retrying in %.1fs", attempt + 1, retries + 1, exc, delay
            )
            if on_retry is not None:
                on_retry(attempt + 1, exc, delay)
            await sleep(delay)
    assert last_exc is not None
    raise last_exc
