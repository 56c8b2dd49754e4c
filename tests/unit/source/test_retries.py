"""Tests for source/retries.py: retry decisions and backoff."""

from unittest.mock import patch

import httpx
import pytest

from sheetdelta.source.retries import compute_backoff, parse_retry_after, should_retry


class TestShouldRetry:
    @pytest.mark.parametrize("status", [408, 429, 500, 502, 503, 504])
    def test_retryable_statuses(self, status):
        assert should_retry(status, None, 0, 3) is True

    @pytest.mark.parametrize("status", [400, 401, 403, 404, 410])
    def test_client_errors_not_retried(self, status):
        assert should_retry(status, None, 0, 3) is False

    def test_last_attempt_never_retried(self):
        assert should_retry(503, None, 2, 3) is False

    def test_transport_errors(self):
        assert should_retry(None, httpx.ConnectError("x"), 0, 3) is True
        assert should_retry(None, ValueError("x"), 0, 3) is False


class TestComputeBackoff:
    def test_exponential_and_capped(self):
        delays = [compute_backoff(a, base=1.0, maximum=5.0, jitter=False) for a in range(5)]
        assert delays == [1.0, 2.0, 4.0, 5.0, 5.0]

    def test_retry_after_capped(self):
        assert compute_backoff(0, maximum=10.0, jitter=False, retry_after=60.0) == 10.0

    def test_jitter_range(self):
        with patch("sheetdelta.source.retries.random.random", return_value=0.0):
            assert compute_backoff(1, base=1.0, jitter=True) == 1.0
        with patch("sheetdelta.source.retries.random.random", return_value=1.0):
            assert compute_backoff(1, base=1.0, jitter=True) == 2.0


class TestParseRetryAfter:
    def test_seconds(self):
        assert parse_retry_after(httpx.Response(429, headers={"Retry-After": "3"})) == 3.0

    def test_absent(self):
        assert parse_retry_after(httpx.Response(429)) is None

    def test_http_date_ignored(self):
        resp = httpx.Response(429, headers={"Retry-After": "Wed, 21 Oct 2026 07:28:00 GMT"})
        assert parse_retry_after(resp) is None
