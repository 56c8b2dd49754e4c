"""Retry decision logic and exponential backoff for workbook downloads.

* :func:`should_retry` -- decide whether a failed download is retryable.
* :func:`compute_backoff` -- delay before the next attempt.
"""

from __future__ import annotations

import random

import httpx

# Published-sheet endpoints answer 429 under load and 5xx during outages.
RETRYABLE_STATUSES: frozenset[int] = frozenset({408, 429, 500, 502, 503, 504})

_RETRYABLE_EXCEPTIONS: tuple[type[Exception], ...] = (
    httpx.TimeoutException,
    httpx.NetworkError,
)


def should_retry(
    status_code: int | None,
    exception: Exception | None,
    attempt: int,
    max_attempts: int,
) -> bool:
    """Decide whether a download should be retried.

    Parameters
    ----------
    status_code:
        HTTP status of the response, or ``None`` if none was received.
    exception:
        The transport exception raised, or ``None`` if a response arrived.
    attempt:
        The current attempt number (0-indexed).
    max_attempts:
        Total attempts allowed, the first one included.
    """
    if attempt + 1 >= max_attempts:
        return False
    if exception is not None:
        return isinstance(exception, _RETRYABLE_EXCEPTIONS)
    if status_code is not None:
        return status_code in RETRYABLE_STATUSES
    return False


def compute_backoff(
    attempt: int,
    base: float = 1.0,
    maximum: float = 30.0,
    jitter: bool = True,
    retry_after: float | None = None,
) -> float:
    """Return the delay in seconds before retry number *attempt* + 1.

    A server-provided ``Retry-After`` wins (still capped at *maximum*);
    otherwise the delay is ``base * 2**attempt`` capped at *maximum*.
    Jitter scales the result to 50-100 % of its value.
    """
    if retry_after is not None:
        delay = min(retry_after, maximum)
    else:
        delay = min(base * (2 ** attempt), maximum)

    if jitter:
        delay *= 0.5 + random.random() * 0.5

    return delay


def parse_retry_after(response: httpx.Response) -> float | None:
    """Extract the ``Retry-After`` header value in seconds, or ``None``."""
    raw = response.headers.get("retry-after")
    if raw is None:
        return None
    try:
        return max(0.0, float(raw))
    except (ValueError, TypeError):
        return None
