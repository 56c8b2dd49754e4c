"""Tests for errors.py: codes, context and cause chaining."""

import pytest

from sheetdelta.errors import (
    ErrorCode,
    FetchError,
    InvalidTransitionError,
    LockContentionError,
    NetworkError,
    NotifyError,
    ParseError,
    PersistError,
    RetryExhaustedError,
    SheetDeltaError,
    StoreCorruptError,
)


@pytest.mark.parametrize(
    ("cls", "code"),
    [
        (LockContentionError, ErrorCode.LOCK_CONTENTION),
        (FetchError, ErrorCode.FETCH_ERROR),
        (NetworkError, ErrorCode.NETWORK_ERROR),
        (RetryExhaustedError, ErrorCode.RETRY_EXHAUSTED),
        (ParseError, ErrorCode.PARSE_ERROR),
        (NotifyError, ErrorCode.NOTIFY_ERROR),
        (PersistError, ErrorCode.PERSIST_ERROR),
        (StoreCorruptError, ErrorCode.STORE_CORRUPT),
        (InvalidTransitionError, ErrorCode.INVALID_TRANSITION),
    ],
)
def test_codes(cls, code):
    err = cls("boom", context={"k": 1})
    assert err.code == code
    assert err.message == "boom"
    assert err.context == {"k": 1}
    assert str(err) == "boom"
    assert isinstance(err, SheetDeltaError)


def test_fetch_hierarchy():
    assert issubclass(NetworkError, FetchError)
    assert issubclass(RetryExhaustedError, FetchError)


def test_cause_is_chained():
    cause = OSError("disk")
    err = PersistError("write failed", cause=cause)
    assert err.cause is cause
    assert err.__cause__ is cause


def test_context_defaults_to_empty_dict():
    assert NotifyError("x").context == {}


def test_repr():
    err = ParseError("bad", context={"size_bytes": 3})
    assert repr(err) == (
        "ParseError(code=<ErrorCode.PARSE_ERROR: 'PARSE_ERROR'>, "
        "message='bad', context={'size_bytes': 3})"
    )


def test_error_code_is_str():
    assert ErrorCode.STORE_CORRUPT == "STORE_CORRUPT"
