"""Shared test fixtures for the sheetdelta test suite."""

from __future__ import annotations

import pytest

from sheetdelta.config import SheetDeltaConfig
from sheetdelta.models import ChangeNotification, WorkbookData


class FakeSource:
    """In-memory workbook source; swap ``workbook`` or ``error`` between runs."""

    def __init__(self, workbook: WorkbookData | None = None) -> None:
        self.workbook = workbook or WorkbookData(tab_names=[], matrices={})
        self.error: Exception | None = None
        self.calls = 0

    def fetch(self) -> WorkbookData:
        self.calls += 1
        if self.error is not None:
            raise self.error
        return self.workbook


class RecordingNotifier:
    """Notifier that records every notification it is handed."""

    def __init__(self, result: bool = True, error: Exception | None = None) -> None:
        self.result = result
        self.error = error
        self.notifications: list[ChangeNotification] = []

    def notify(self, notification: ChangeNotification) -> bool:
        self.notifications.append(notification)
        if self.error is not None:
            raise self.error
        return self.result


def workbook(**tabs: list[list[str]]) -> WorkbookData:
    return WorkbookData(tab_names=list(tabs), matrices=dict(tabs))


@pytest.fixture
def state_dir(tmp_path) -> str:
    return str(tmp_path / "state")


@pytest.fixture
def config(state_dir: str) -> SheetDeltaConfig:
    """Default test configuration rooted in a temporary state directory."""
    return SheetDeltaConfig(
        source_url="memory://workbook",
        state_dir=state_dir,
        retry_jitter=False,
    )


@pytest.fixture
def make_workbook():
    """Build a :class:`WorkbookData` from ``tab=matrix`` keyword arguments."""
    return workbook


@pytest.fixture
def source() -> FakeSource:
    return FakeSource()


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
