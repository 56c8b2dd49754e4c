"""Tests for utils/atomic.py and utils/hashing.py."""

import os

import pytest

from sheetdelta.errors import PersistError, StoreCorruptError
from sheetdelta.utils import (
    atomic_write_json,
    atomic_write_text,
    canonical_json,
    hash_json,
    read_json,
    remove_file,
    sha256_hash,
)


class TestAtomicWrite:
    def test_writes_and_creates_directory(self, tmp_path):
        path = str(tmp_path / "deep" / "f.txt")
        atomic_write_text(path, "hello")
        with open(path, encoding="utf-8") as fh:
            assert fh.read() == "hello"

    def test_json_is_pretty_with_trailing_newline(self, tmp_path):
        path = str(tmp_path / "f.json")
        atomic_write_json(path, {"b": 1, "a": "é"})
        with open(path, encoding="utf-8") as fh:
            text = fh.read()
        assert text.endswith("}\n")
        assert "é" in text
        assert read_json(path) == {"b": 1, "a": "é"}

    def test_failed_replace_leaves_target_and_no_temp(self, tmp_path, monkeypatch):
        path = str(tmp_path / "f.txt")
        atomic_write_text(path, "old")

        def boom(src, dst):
            raise OSError("disk full")

        monkeypatch.setattr(os, "replace", boom)
        with pytest.raises(PersistError) as exc_info:
            atomic_write_text(path, "new")
        assert exc_info.value.context["operation"] == "write"
        with open(path, encoding="utf-8") as fh:
            assert fh.read() == "old"
        assert os.listdir(tmp_path) == ["f.txt"]


class TestReadJson:
    def test_missing(self, tmp_path):
        assert read_json(str(tmp_path / "nope.json")) is None

    def test_corrupt(self, tmp_path):
        path = tmp_path / "bad.json"
        path.write_text("{", encoding="utf-8")
        with pytest.raises(StoreCorruptError):
            read_json(str(path))


class TestRemoveFile:
    def test_remove(self, tmp_path):
        path = tmp_path / "f"
        path.write_text("x", encoding="utf-8")
        assert remove_file(str(path)) is True
        assert remove_file(str(path)) is False


class TestHashing:
    def test_canonical_json_sorts_keys(self):
        assert canonical_json({"b": 1, "a": [1, "é"]}) == '{"a":[1,"é"],"b":1}'

    def test_hash_json_key_order_independent(self):
        assert hash_json({"a": 1, "b": 2}) == hash_json({"b": 2, "a": 1})

    def test_sha256_known_value(self):
        assert sha256_hash("") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )
