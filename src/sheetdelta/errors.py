"""Full error hierarchy for sheetdelta.

Every error class inherits from SheetDeltaError.  Each carries a
machine-readable ``code`` (from :class:`ErrorCode`), a human-readable
``message``, an optional structured ``context`` dict, and an optional
``cause`` (chained exception).

Error codes are defined as a :class:`str` enum so that they serialise
naturally to JSON and can be matched with simple ``==`` comparisons.
"""

from __future__ import annotations

from enum import Enum
from typing import Any

# ---------------------------------------------------------------------------
# Error code enum
# ---------------------------------------------------------------------------

class ErrorCode(str, Enum):
    """Machine-readable error codes for every error a run can raise."""

    LOCK_CONTENTION = "LOCK_CONTENTION"
    FETCH_ERROR = "FETCH_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    RETRY_EXHAUSTED = "RETRY_EXHAUSTED"
    PARSE_ERROR = "PARSE_ERROR"
    NOTIFY_ERROR = "NOTIFY_ERROR"
    PERSIST_ERROR = "PERSIST_ERROR"
    STORE_CORRUPT = "STORE_CORRUPT"
    INVALID_TRANSITION = "INVALID_TRANSITION"


# ---------------------------------------------------------------------------
# Base error
# ---------------------------------------------------------------------------

class SheetDeltaError(Exception):
    """Base exception for all sheetdelta errors.

    Parameters
    ----------
    code:
        A value from :class:`ErrorCode` (or any string) identifying the
        error category.
    message:
        A developer-friendly description of what went wrong.
    context:
        Arbitrary structured data providing extra diagnostic detail.
        Keys and expected types are documented per subclass.
    cause:
        The underlying exception, if this error wraps another.
    """

    def __init__(
        self,
        code: str,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        self.code: str = code
        self.message: str = message
        self.context: dict[str, Any] = context or {}
        self.cause: Exception | None = cause
        super().__init__(message)
        if cause is not None:
            self.__cause__ = cause

    def __repr__(self) -> str:
        ctx = f", context={self.context!r}" if self.context else ""
        return f"{type(self).__name__}(code={self.code!r}, message={self.message!r}{ctx})"


# ---------------------------------------------------------------------------
# Lock errors
# ---------------------------------------------------------------------------

class LockContentionError(SheetDeltaError):
    """Another run holds a fresh lock marker.

    Not a failure: the caller is expected to exit without side effects.

    Context keys: ``lock_path``, ``age_ms``, ``stale_after_ms``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.LOCK_CONTENTION,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Source errors
# ---------------------------------------------------------------------------

class FetchError(SheetDeltaError):
    """The workbook could not be retrieved from its source.

    Context keys: ``url`` or ``path``, ``status_code``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
        code: str = ErrorCode.FETCH_ERROR,
    ) -> None:
        super().__init__(
            code=code,
            message=message,
            context=context,
            cause=cause,
        )


class NetworkError(FetchError):
    """A transport-level failure occurred (timeout, DNS, connection reset).

    Context keys: ``url``, ``attempt``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            cause=cause,
            code=ErrorCode.NETWORK_ERROR,
        )


class RetryExhaustedError(FetchError):
    """All retry attempts have been exhausted for a retryable download.

    Context keys: ``attempts``, ``last_status_code``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            message=message,
            context=context,
            cause=cause,
            code=ErrorCode.RETRY_EXHAUSTED,
        )


class ParseError(SheetDeltaError):
    """The downloaded bytes are not a readable workbook.

    Context keys: ``size_bytes``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PARSE_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Notification errors
# ---------------------------------------------------------------------------

class NotifyError(SheetDeltaError):
    """The notification collaborator failed to deliver the change set.

    Context keys: ``notifier``, ``status_code``, ``host``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.NOTIFY_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


# ---------------------------------------------------------------------------
# Persistence errors
# ---------------------------------------------------------------------------

class PersistError(SheetDeltaError):
    """An atomic write or delete in the state directory failed.

    Context keys: ``path``, ``operation``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.PERSIST_ERROR,
            message=message,
            context=context,
            cause=cause,
        )


class StoreCorruptError(SheetDeltaError):
    """A persisted document exists but cannot be decoded.

    Context keys: ``path``, ``reason``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.STORE_CORRUPT,
            message=message,
            context=context,
            cause=cause,
        )


class InvalidTransitionError(SheetDeltaError):
    """The run state machine was asked for a transition it does not allow.

    Context keys: ``current_phase``, ``requested_phase``.
    """

    def __init__(
        self,
        message: str,
        context: dict[str, Any] | None = None,
        cause: Exception | None = None,
    ) -> None:
        super().__init__(
            code=ErrorCode.INVALID_TRANSITION,
            message=message,
            context=context,
            cause=cause,
        )
