"""Collaborator contracts consumed by the commit coordinator.

The coordinator only depends on these protocols; concrete sources,
notifiers and exporters are constructed by the caller and injected.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from sheetdelta.models import Attachment, ChangeNotification, WorkbookData


@runtime_checkable
class WorkbookSource(Protocol):
    """Produces the current tab names and raw text matrices."""

    def fetch(self) -> WorkbookData:
        """Fetch and decode the document.

        Raises :class:`FetchError` or :class:`ParseError` on failure, and
        must give up within its configured timeout.
        """
        ...


@runtime_checkable
class Notifier(Protocol):
    """Delivers a change set downstream."""

    def notify(self, notification: ChangeNotification) -> bool:
        """Deliver *notification* synchronously.

        Returns ``True`` once the payload is accepted.  ``False`` or a
        raised exception means delivery failed and nothing is committed.
        """
        ...


@runtime_checkable
class Exporter(Protocol):
    """Turns a tab matrix into an attachable artifact."""

    def export(self, tab: str, matrix: list[list[str]]) -> Attachment:
        ...
