"""JSON webhook notifier."""

from __future__ import annotations

import httpx

from sheetdelta.errors import NotifyError
from sheetdelta.models import ChangeNotification
from sheetdelta.observability import get_logger

from .report import build_subject, render_markdown

log = get_logger("sheetdelta.notify")


class WebhookNotifier:
    """POST the change set as JSON.

    The body is :meth:`ChangeNotification.to_dict` plus ``subject`` and a
    Markdown ``text`` rendering, which chat services accept as-is.  Any
    non-2xx answer is a delivery failure.

    Parameters
    ----------
    url:
        Endpoint to POST to.
    timeout_seconds:
        Request timeout.
    headers:
        Extra request headers (e.g. an authorization token).
    client:
        Optional pre-built :class:`httpx.Client`.
    """

    def __init__(
        self,
        url: str,
        *,
        timeout_seconds: float = 30.0,
        headers: dict[str, str] | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        self._url = url
        self._owns_client = client is None
        self._client = client or httpx.Client(
            timeout=httpx.Timeout(timeout_seconds),
            headers=headers or {},
        )

    def notify(self, notification: ChangeNotification) -> bool:
        payload = notification.to_dict()
        payload["subject"] = build_subject(notification)
        payload["text"] = render_markdown(notification)

        try:
            response = self._client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            raise NotifyError(
                message=f"Webhook POST to {self._url} failed: {exc}",
                context={"notifier": "webhook", "url": self._url},
                cause=exc,
            ) from exc

        if not response.is_success:
            raise NotifyError(
                message=f"Webhook answered HTTP {response.status_code}",
                context={
                    "notifier": "webhook",
                    "url": self._url,
                    "status_code": response.status_code,
                    "body": response.text[:200],
                },
            )

        log.info(
            "Change set posted to webhook",
            extra={"extra_fields": {"op": "notify", "status_code": response.status_code}},
        )
        return True

    def close(self) -> None:
        if self._owns_client:
            self._client.close()
