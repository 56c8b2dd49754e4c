"""Workbook sources: published-spreadsheet download and local file.

:class:`HttpWorkbookSource` downloads the ``.xlsx`` export of a published
spreadsheet (for Google Sheets, a ``.../pub?output=xlsx`` link), retrying
timeouts, network errors, 429 and 5xx responses with exponential backoff.
Every attempt is bounded by ``timeout_seconds``.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from pathlib import Path

import httpx

from sheetdelta.config import SheetDeltaConfig
from sheetdelta.errors import FetchError, NetworkError, RetryExhaustedError
from sheetdelta.models import WorkbookData
from sheetdelta.observability import get_logger, resolve_metrics

from .retries import RETRYABLE_STATUSES, compute_backoff, parse_retry_after, should_retry
from .xlsx import parse_workbook

log = get_logger("sheetdelta.source")

USER_AGENT = "sheetdelta/0.1"
_ACCEPT = (
    "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet,"
    "application/octet-stream;q=0.9,*/*;q=0.1"
)


def _looks_like_html(response: httpx.Response) -> bool:
    content_type = response.headers.get("content-type", "")
    return "text/html" in content_type or response.content[:512].lstrip().lower().startswith(
        (b"<!doctype html", b"<html")
    )


class HttpWorkbookSource:
    """Download and parse a published ``.xlsx`` workbook.

    Parameters
    ----------
    url:
        Download URL of the workbook export.
    timeout_seconds:
        Per-attempt HTTP timeout.
    max_attempts:
        Total attempts for retryable failures.
    base_delay, max_delay, jitter:
        Backoff tuning, see :func:`compute_backoff`.
    client:
        Optional pre-built :class:`httpx.Client` (tests pass one with a
        mock transport).  A client created here is closed by :meth:`close`.
    sleep:
        Called with the backoff delay between attempts.
    metrics:
        Optional :class:`MetricsHook`.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 30.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 30.0,
        jitter: bool = True,
        client: httpx.Client | None = None,
        sleep: Callable[[float], None] = time.sleep,
        metrics: object | None = None,
    ) -> None:
        self._url = url
        self._max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay
        self._jitter = jitter
        self._sleep = sleep
        self._metrics = resolve_metrics(metrics)
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            follow_redirects=True,
            headers={"User-Agent": USER_AGENT, "Accept": _ACCEPT},
        )

    @classmethod
    def from_config(
        cls,
        config: SheetDeltaConfig,
        client: httpx.Client | None = None,
    ) -> HttpWorkbookSource:
        return cls(
            config.source_url,
            timeout_seconds=config.fetch_timeout_seconds,
            max_attempts=config.retry_max_attempts,
            base_delay=config.retry_base_delay,
            max_delay=config.retry_max_delay,
            jitter=config.retry_jitter,
            client=client,
            metrics=config.metrics,
        )

    def fetch(self) -> WorkbookData:
        return parse_workbook(self.download())

    def download(self) -> bytes:
        """Return the raw workbook bytes.

        Raises
        ------
        FetchError
            On a non-retryable status or an HTML (sign-in / error) page.
        NetworkError
            On a transport failure when only one attempt is allowed, or
            on a non-retryable transport error (redirect loop, protocol).
        RetryExhaustedError
            When every attempt ended in a retryable status or error.
        """
        last_status: int | None = None
        last_exception: Exception | None = None

        for attempt in range(self._max_attempts):
            try:
                response = self._client.get(self._url)
            except (httpx.TimeoutException, httpx.NetworkError) as exc:
                last_exception, last_status = exc, None
                log.warning(
                    "Workbook download network error",
                    extra={"extra_fields": {
                        "op": "fetch", "attempt": attempt + 1, "error": str(exc),
                    }},
                )
                if not should_retry(None, exc, attempt, self._max_attempts):
                    break
                self._backoff(attempt, reason="network_error")
                continue
            except httpx.HTTPError as exc:
                raise NetworkError(
                    message=f"Download of {self._url} failed: {exc}",
                    context={"url": self._url, "attempt": attempt + 1},
                    cause=exc,
                ) from exc

            last_exception, last_status = None, response.status_code

            if response.is_success:
                if _looks_like_html(response):
                    raise FetchError(
                        message=(
                            "Source returned an HTML page instead of a workbook. "
                            "Is the spreadsheet published to the web as .xlsx?"
                        ),
                        context={"url": self._url, "status_code": response.status_code},
                    )
                return response.content

            if response.status_code not in RETRYABLE_STATUSES:
                raise FetchError(
                    message=f"HTTP {response.status_code} downloading {self._url}",
                    context={
                        "url": self._url,
                        "status_code": response.status_code,
                        "body": response.text[:200],
                    },
                )

            log.warning(
                "Workbook download retryable status",
                extra={"extra_fields": {
                    "op": "fetch", "attempt": attempt + 1, "status_code": response.status_code,
                }},
            )
            if not should_retry(response.status_code, None, attempt, self._max_attempts):
                break
            self._backoff(
                attempt,
                reason="rate_limited" if response.status_code == 429 else "server_error",
                retry_after=parse_retry_after(response),
            )

        ctx = {"url": self._url, "attempts": self._max_attempts, "last_status_code": last_status}
        if last_exception is not None:
            if self._max_attempts == 1:
                raise NetworkError(
                    message=f"Network error downloading {self._url}: {last_exception}",
                    context=ctx,
                    cause=last_exception,
                ) from last_exception
            raise RetryExhaustedError(
                message=(
                    f"All {self._max_attempts} attempts failed for {self._url} "
                    f"(last error: {last_exception})"
                ),
                context=ctx,
                cause=last_exception,
            ) from last_exception
        raise RetryExhaustedError(
            message=(
                f"All {self._max_attempts} attempts failed for {self._url} "
                f"(last status: {last_status})"
            ),
            context=ctx,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def _backoff(self, attempt: int, *, reason: str, retry_after: float | None = None) -> None:
        delay = compute_backoff(
            attempt,
            base=self._base_delay,
            maximum=self._max_delay,
            jitter=self._jitter,
            retry_after=retry_after,
        )
        self._metrics.increment("sheetdelta.fetch_retries_total", tags={"reason": reason})
        self._sleep(delay)


class FileWorkbookSource:
    """Read an ``.xlsx`` workbook from the local filesystem."""

    def __init__(self, path: str | Path) -> None:
        self._path = Path(path)

    def fetch(self) -> WorkbookData:
        try:
            data = self._path.read_bytes()
        except OSError as exc:
            raise FetchError(
                message=f"Cannot read workbook {self._path}: {exc}",
                context={"path": str(self._path)},
                cause=exc,
            ) from exc
        return parse_workbook(data)
