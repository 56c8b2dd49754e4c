"""Atomic file replacement for the state directory.

Every persisted document is written to a temporary file in the target's
own directory, flushed to disk, then moved over the target with
:func:`os.replace`.  Readers therefore see either the old document or the
new one, never a partial write.
"""

from __future__ import annotations

import json
import os
import tempfile
from typing import Any

from sheetdelta.errors import PersistError, StoreCorruptError


def atomic_write_text(path: str, text: str) -> None:
    """Atomically replace *path* with *text* (UTF-8).

    Raises
    ------
    PersistError
        If the temporary file cannot be written or moved into place.  The
        temporary file is removed and *path* is left untouched.
    """
    directory = os.path.dirname(os.path.abspath(path))
    tmp_path: str | None = None
    try:
        os.makedirs(directory, exist_ok=True)
        fd, tmp_path = tempfile.mkstemp(
            dir=directory, prefix=f".{os.path.basename(path)}.", suffix=".tmp",
        )
        with os.fdopen(fd, "w", encoding="utf-8", newline="") as fh:
            fh.write(text)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_path, path)
        tmp_path = None
    except OSError as exc:
        raise PersistError(
            message=f"Atomic write of {path} failed: {exc}",
            context={"path": path, "operation": "write"},
            cause=exc,
        ) from exc
    finally:
        if tmp_path is not None and os.path.exists(tmp_path):
            os.unlink(tmp_path)


def atomic_write_json(path: str, document: Any) -> None:
    """Atomically replace *path* with the pretty-printed JSON of *document*."""
    atomic_write_text(path, json.dumps(document, indent=2, ensure_ascii=False) + "\n")


def read_json(path: str) -> Any | None:
    """Load a JSON document, returning ``None`` when *path* does not exist.

    Raises
    ------
    StoreCorruptError
        If the file exists but is not valid UTF-8 JSON.
    """
    try:
        with open(path, encoding="utf-8") as fh:
            return json.load(fh)
    except FileNotFoundError:
        return None
    except (ValueError, UnicodeDecodeError) as exc:
        raise StoreCorruptError(
            message=f"Cannot decode {path}: {exc}",
            context={"path": path, "reason": str(exc)},
            cause=exc,
        ) from exc


def remove_file(path: str) -> bool:
    """Delete *path*; return ``False`` if it was already absent.

    Raises
    ------
    PersistError
        On any other filesystem error.
    """
    try:
        os.remove(path)
    except FileNotFoundError:
        return False
    except OSError as exc:
        raise PersistError(
            message=f"Deleting {path} failed: {exc}",
            context={"path": path, "operation": "delete"},
            cause=exc,
        ) from exc
    return True
