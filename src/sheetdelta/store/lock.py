"""Exclusive run lock with age-based staleness takeover.

The lock is a JSON file created with ``O_CREAT | O_EXCL``; creation is the
only exclusion primitive.  A marker whose modification time is older than
the staleness threshold is presumed abandoned by a crashed run: it is
deleted and creation is retried exactly once.

The check-then-recreate sequence is not atomic across processes.  Two
runs that both observe the same stale marker can race; one of them loses
the retry and reports contention.  This is a scheduled-job guard, not a
distributed lock.
"""

from __future__ import annotations

import json
import os
import socket
import time
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from datetime import datetime, timezone

from sheetdelta.config import DEFAULT_STALE_LOCK_MS
from sheetdelta.errors import LockContentionError, PersistError, StoreCorruptError
from sheetdelta.models import LockMarker
from sheetdelta.observability import get_logger, resolve_metrics
from sheetdelta.utils.atomic import read_json

log = get_logger("sheetdelta.lock")


def default_owner_id() -> str:
    return f"{socket.gethostname()}:{os.getpid()}"


class LockManager:
    """Acquire and release the run lock marker.

    Parameters
    ----------
    lock_path:
        Location of the marker file.
    stale_after_ms:
        Marker age beyond which it may be taken over.
    owner_id:
        Identifier written into the marker.  Defaults to ``host:pid``.
    clock:
        Returns the current time as epoch seconds; compared against the
        marker's mtime.
    metrics:
        Optional :class:`MetricsHook`.
    """

    def __init__(
        self,
        lock_path: str,
        stale_after_ms: int = DEFAULT_STALE_LOCK_MS,
        owner_id: str | None = None,
        clock: Callable[[], float] = time.time,
        metrics: object | None = None,
    ) -> None:
        self._path = lock_path
        self._stale_after_ms = stale_after_ms
        self._owner_id = owner_id or default_owner_id()
        self._clock = clock
        self._metrics = resolve_metrics(metrics)

    @property
    def path(self) -> str:
        return self._path

    def acquire(self) -> LockMarker:
        """Create the lock marker.

        Returns
        -------
        LockMarker
            The marker written, with ``recovered_from_stale`` set when an
            abandoned marker was replaced.

        Raises
        ------
        LockContentionError
            If a fresh marker exists, or a stale one was replaced by a
            competing run before the single retry.
        PersistError
            If the marker cannot be written for any other reason.
        """
        os.makedirs(os.path.dirname(os.path.abspath(self._path)), exist_ok=True)

        marker = self._try_create(recovered=False)
        if marker is not None:
            return marker

        age_ms = self._age_ms()
        if age_ms is None:
            # Holder released between our attempt and the stat.
            age_ms = 0.0
        context = {
            "lock_path": self._path,
            "age_ms": round(age_ms),
            "stale_after_ms": self._stale_after_ms,
        }
        if age_ms <= self._stale_after_ms:
            raise LockContentionError(
                message=f"Another run holds {self._path}",
                context=context,
            )

        log.warning(
            "Stale lock recovered",
            extra={"extra_fields": {"op": "lock", "holder": self.holder_id(), **context}},
        )
        self._remove()
        marker = self._try_create(recovered=True)
        if marker is None:
            raise LockContentionError(
                message=f"Lost the race to recreate stale lock {self._path}",
                context=context,
            )
        self._metrics.increment("sheetdelta.stale_lock_recovered_total")
        return marker

    def release(self) -> None:
        """Remove the marker; a missing marker is not an error."""
        self._remove()
        log.debug(
            "Lock released",
            extra={"extra_fields": {"op": "lock", "owner_id": self._owner_id}},
        )

    @contextmanager
    def held(self) -> Iterator[LockMarker]:
        """Hold the lock for the duration of the ``with`` block."""
        marker = self.acquire()
        try:
            yield marker
        finally:
            self.release()

    def read_marker(self) -> LockMarker | None:
        """Return the current marker, or ``None`` if unlocked or unreadable."""
        try:
            doc = read_json(self._path)
            return LockMarker.from_document(doc) if doc is not None else None
        except (StoreCorruptError, KeyError, TypeError, ValueError, AttributeError):
            return None

    def holder_id(self) -> str | None:
        marker = self.read_marker()
        return marker.owner_id if marker else None

    # -- internals ---------------------------------------------------------

    def _try_create(self, *, recovered: bool) -> LockMarker | None:
        try:
            fd = os.open(self._path, os.O_CREAT | os.O_EXCL | os.O_WRONLY, 0o644)
        except FileExistsError:
            return None
        except OSError as exc:
            raise PersistError(
                message=f"Cannot create lock {self._path}: {exc}",
                context={"path": self._path, "operation": "lock"},
                cause=exc,
            ) from exc

        marker = LockMarker(
            owner_id=self._owner_id,
            started_at=datetime.fromtimestamp(self._clock(), timezone.utc),
            recovered_from_stale=recovered,
        )
        try:
            try:
                os.write(fd, json.dumps(marker.to_document()).encode("utf-8"))
            finally:
                os.close(fd)
        except OSError as exc:
            self._remove()
            raise PersistError(
                message=f"Cannot write lock {self._path}: {exc}",
                context={"path": self._path, "operation": "lock"},
                cause=exc,
            ) from exc

        log.info(
            "Lock acquired",
            extra={"extra_fields": {
                "op": "lock",
                "owner_id": self._owner_id,
                "recovered_from_stale": recovered,
            }},
        )
        return marker

    def _age_ms(self) -> float | None:
        try:
            mtime = os.stat(self._path).st_mtime
        except FileNotFoundError:
            return None
        return (self._clock() - mtime) * 1000.0

    def _remove(self) -> None:
        try:
            os.remove(self._path)
        except FileNotFoundError:
            pass
