from __future__ import annotations

import os

import pytest

from juice_cashier import storage
from juice_cashier.storage import BlobStore, StorageError, read_json_file, write_json_atomic


def test_blob_missing_key_is_none(blobs):
    assert blobs.get("presets.v1") is None


def test_blob_set_overwrites(blobs):
    blobs.set("k", b"one")
    blobs.set("k", b"two")
    assert blobs.get("k") == b"two"


def test_blob_persists_across_instances(blobs):
    blobs.set("k", b"\x00\x01payload")
    assert BlobStore(blobs.db_path).get("k") == b"\x00\x01payload"


def test_blob_store_on_unusable_path(tmp_path):
    target = tmp_path / "not-a-dir"
    target.write_text("file in the way", encoding="utf-8")

    with pytest.raises(StorageError):
        BlobStore(target / "cashier.db").get("k")


def test_read_missing_json_is_none(tmp_path):
    assert read_json_file(tmp_path / "absent.json") is None


def test_read_corrupt_json_raises(tmp_path):
    path = tmp_path / "bad.json"
    path.write_text("[1, 2", encoding="utf-8")
    with pytest.raises(StorageError):
        read_json_file(path)


def test_atomic_write_replaces_content(tmp_path):
    path = tmp_path / "nested" / "sales.json"
    write_json_atomic(path, [1])
    write_json_atomic(path, [{"total": "10.00"}])

    assert read_json_file(path) == [{"total": "10.00"}]
    assert sorted(os.listdir(path.parent)) == ["sales.json"]


def test_atomic_write_failure_leaves_old_file(monkeypatch, tmp_path):
    path = tmp_path / "sales.json"
    write_json_atomic(path, ["old"])

    def failing_replace(src, dst):
        raise OSError("rename failed")

    monkeypatch.setattr(storage.os, "replace", failing_replace)
    with pytest.raises(StorageError):
        write_json_atomic(path, ["new"])

    assert read_json_file(path) == ["old"]
    assert sorted(os.listdir(tmp_path)) == ["sales.json"]


def test_unserialisable_payload_raises(tmp_path):
    with pytest.raises(StorageError):
        write_json_atomic(tmp_path / "x.json", {"when": object()})
    assert not (tmp_path / "x.json").exists()
