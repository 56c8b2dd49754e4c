"""Metrics hook protocol and no-op default implementation.

A run emits counters and timings at its phase boundaries.  Without a
configured backend a :class:`NoopMetricsHook` absorbs them, so call
sites never branch on whether metrics are enabled.  Any object with the
three methods of :class:`MetricsHook` can be passed as
``SheetDeltaConfig(metrics=...)`` to forward them to StatsD, Prometheus
push gateways, and the like.

Emitted metric names:

* ``sheetdelta.runs_total``                 -- counter, tag ``outcome``
* ``sheetdelta.run_duration_ms``            -- timing
* ``sheetdelta.tabs_total``                 -- counter, tag ``status``
* ``sheetdelta.changes_total``              -- counter, tag ``severity``
* ``sheetdelta.fetch_duration_ms``          -- timing
* ``sheetdelta.fetch_retries_total``        -- counter, tag ``reason``
* ``sheetdelta.notify_total``               -- counter, tag ``status``
* ``sheetdelta.stale_lock_recovered_total`` -- counter
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    *tags* are string key/value pairs; backends map them onto their own
    labelling scheme.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment counter *name* by *value*."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration of *ms* milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set gauge *name* to *value*."""
        ...


class NoopMetricsHook:
    """Metrics backend that discards every data point."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass


def resolve_metrics(hook: object | None) -> MetricsHook:
    """Return *hook*, or a :class:`NoopMetricsHook` when it is ``None``."""
    return hook if hook is not None else NoopMetricsHook()  # type: ignore[return-value]
