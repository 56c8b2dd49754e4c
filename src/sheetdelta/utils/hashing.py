"""SHA-256 helpers for tab fingerprints, row signatures and file names.

Fingerprints decide whether a tab is diffed at all, so unlike a cache key
they must not collide in practice; SHA-256 is used throughout.
"""

from __future__ import annotations

import hashlib
import json
import re
from typing import Any
from urllib.parse import quote


def sha256_hash(data: str) -> str:
    """Return the hex-encoded SHA-256 digest of *data* (UTF-8 encoded).

    Examples
    --------
    >>> sha256_hash("")[:16]
    'e3b0c44298fc1c14'
    """
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def canonical_json(value: Any) -> str:
    """Serialize *value* deterministically.

    Keys are sorted, separators are compact and non-ASCII text is kept
    as-is, so equal structures always produce identical strings.
    """
    return json.dumps(value, sort_keys=True, ensure_ascii=False, separators=(",", ":"))


def hash_json(value: Any) -> str:
    """Return the SHA-256 of the canonical JSON form of *value*.

    Examples
    --------
    >>> hash_json({"b": 2, "a": 1}) == hash_json({"a": 1, "b": 2})
    True
    """
    return sha256_hash(canonical_json(value))


# Leaves room for the ``.<name>.<random>.tmp`` affixes of atomic writes
# under the usual 255-byte NAME_MAX.
MAX_FILENAME_LENGTH = 160
_PARTIAL_ESCAPE_RE = re.compile(r"%[0-9A-Fa-f]?$")


def tab_filename(tab: str, suffix: str) -> str:
    """Map a tab title to a file name of bounded length.

    Short titles are percent-encoded whole.  A title whose encoding would
    exceed :data:`MAX_FILENAME_LENGTH` keeps a readable encoded prefix
    followed by the first 16 hex digits of its SHA-256, so distinct
    titles still map to distinct files.

    Examples
    --------
    >>> tab_filename("Q3 / Sales", ".json")
    'Q3%20%2F%20Sales.json'
    >>> len(tab_filename("売上データ" * 6, ".json")) <= MAX_FILENAME_LENGTH
    True
    """
    encoded = quote(tab, safe="")
    if len(encoded) + len(suffix) <= MAX_FILENAME_LENGTH:
        return encoded + suffix
    digest = sha256_hash(tab)[:16]
    stem = encoded[: MAX_FILENAME_LENGTH - len(suffix) - len(digest) - 1]
    stem = _PARTIAL_ESCAPE_RE.sub("", stem)
    return f"{stem}.{digest}{suffix}"
