"""Deliver one notification through several notifiers."""

from __future__ import annotations

from sheetdelta.interfaces import Notifier
from sheetdelta.models import ChangeNotification


class FanoutNotifier:
    """Notify every wrapped notifier in order.

    Delivery succeeds only when all of them accept the notification; the
    first failure stops the fan-out and propagates.  Notifiers earlier in
    the list may therefore deliver again on the next run.
    """

    def __init__(self, notifiers: list[Notifier]) -> None:
        if not notifiers:
            raise ValueError("FanoutNotifier needs at least one notifier")
        self._notifiers = list(notifiers)

    def notify(self, notification: ChangeNotification) -> bool:
        for notifier in self._notifiers:
            if not notifier.notify(notification):
                return False
        return True

    def close(self) -> None:
        """Close every wrapped notifier that holds a client."""
        for notifier in self._notifiers:
            close = getattr(notifier, "close", None)
            if close is not None:
                close()
