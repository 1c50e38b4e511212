from __future__ import annotations

import asyncio
import random
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from opsdeck.core.config import get_settings
from opsdeck.core.errors import ApiError, ApiTransportError
from opsdeck.services.telemetry import increment_counter


def _default_retryable(exc: Exception) -> bool:
    # Retry only transient transport failures and 5xx answers.
    if isinstance(exc, (ApiTransportError, TimeoutError)):
        return True
    if isinstance(exc, ApiError) and exc.status_code >= 500:
        return True
    return False


@dataclass(frozen=True)
class RetryPolicy:
    # Centralize retry behavior so query policy changes stay in settings.
    max_attempts: int
    backoff_ms: int
    timeout_ms: int | None = None


def default_retry_policy() -> RetryPolicy:
    settings = get_settings()
    return RetryPolicy(
        max_attempts=settings.query_retry_max_attempts,
        backoff_ms=settings.query_retry_backoff_ms,
    )


async def retry_async(
    func: Callable[[], Awaitable[Any]],
    *,
    policy: RetryPolicy | None = None,
    retryable: Callable[[Exception], bool] | None = None,
) -> Any:
    # Retry helper with jittered backoff for transient failures only.
    policy = policy or default_retry_policy()
    retryable = retryable or _default_retryable
    attempt = 1
    while True:
        try:
            if policy.timeout_ms is None:
                return await func()
            return await asyncio.wait_for(func(), timeout=policy.timeout_ms / 1000.0)
        except Exception as exc:  # noqa: BLE001 - caller handles non-transient failures
            if attempt >= max(policy.max_attempts, 1) or not retryable(exc):
                raise
            increment_counter("query_retries_total")
            jitter = random.uniform(0.5, 1.5)
            sleep_s = (policy.backoff_ms / 1000.0) * (2 ** (attempt - 1)) * jitter
            await asyncio.sleep(sleep_s)
            attempt += 1
