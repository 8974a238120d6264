"""재시도 로직 설정 및 유틸리티(Retry logic configuration and utilities)."""
from __future__ import annotations

from typing import Any, Callable

import httpx
from tenacity import (
    retry,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from .config import get_settings


def is_retryable_exception(exc: BaseException) -> bool:
    """재시도 가능한 예외인지 확인(Check if exception is retryable).

    Retryable exceptions:
    - httpx.TransportError: connection failures and timeouts
    - httpx.HTTPStatusError with status 429: OSS Index rate limiting
    - httpx.HTTPStatusError with status 5xx: Server errors

    Non-retryable exceptions:
    - httpx.HTTPStatusError with other 4xx: Client errors (bad coordinates, auth)
    """
    if isinstance(exc, (httpx.ConnectError, httpx.TimeoutException)):
        return True

    if isinstance(exc, httpx.HTTPStatusError):
        status = exc.response.status_code
        return status == 429 or 500 <= status < 600

    return False


def get_retry_decorator(attempts: int | None = None) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """
    HTTP 어댑터용 재시도 데코레이터 생성(Create retry decorator for HTTP adapters).

    Configuration:
    - Max attempts: ``DA_RETRY_ATTEMPTS`` (default 3, original attempt included)
    - Backoff: Exponential (1s, 2s, 4s)
    - Retry on: transient network errors, 429 and 5xx responses
    - Last exception is re-raised unchanged

    Args:
        attempts: Override for the configured number of attempts

    Returns:
        Retry decorator function
    """
    max_attempts = attempts if attempts is not None else get_settings().retry_attempts
    return retry(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=wait_exponential(multiplier=1, min=1, max=4),
        retry=retry_if_exception(is_retryable_exception),
        reraise=True,
    )
