"""Durable storage primitives: named blobs in SQLite and atomically replaced JSON files."""

from __future__ import annotations

import json
import os
import sqlite3
import tempfile
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from juice_cashier.app_logger import get_logger

logger = get_logger(__name__)


class StorageError(Exception):
    """A durable read or write did not complete; prior content is left intact."""


def _utc_now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class BlobStore:
    """Key/value blobs in a single SQLite table. Each ``set`` is one transaction."""

    def __init__(self, db_path: Path | str) -> None:
        self.db_path = Path(db_path)

    def _connect(self) -> sqlite3.Connection:
        self.db_path.parent.mkdir(parents=True, exist_ok=True)
        return sqlite3.connect(self.db_path)

    def bootstrap_schema(self) -> None:
        """Create the blob table if it does not already exist."""
        try:
            with self._connect() as conn:
                conn.execute(
                    """
                    CREATE TABLE IF NOT EXISTS blobs (
                        key TEXT PRIMARY KEY,
                        value BLOB NOT NULL,
                        updated_at TEXT NOT NULL
                    )
                    """
                )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot prepare blob store at {self.db_path}: {exc}") from exc

    def get(self, key: str) -> bytes | None:
        try:
            self.bootstrap_schema()
            with self._connect() as conn:
                row = conn.execute("SELECT value FROM blobs WHERE key = ?", (key,)).fetchone()
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot read blob {key!r}: {exc}") from exc
        if row is None:
            return None
        return bytes(row[0])

    def set(self, key: str, value: bytes) -> None:
        try:
            self.bootstrap_schema()
            with self._connect() as conn:
                with conn:
                    conn.execute(
                        """
                        INSERT INTO blobs (key, value, updated_at) VALUES (?, ?, ?)
                        ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
                        """,
                        (key, sqlite3.Binary(value), _utc_now_iso()),
                    )
        except (OSError, sqlite3.Error) as exc:
            raise StorageError(f"cannot write blob {key!r}: {exc}") from exc


def read_json_file(path: Path | str) -> Any | None:
    """Return parsed JSON, or ``None`` when the file does not exist."""
    path = Path(path)
    try:
        raw = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        return None
    except OSError as exc:
        raise StorageError(f"cannot read {path}: {exc}") from exc
    try:
        return json.loads(raw)
    except ValueError as exc:
        raise StorageError(f"cannot parse {path}: {exc}") from exc


def write_json_atomic(path: Path | str, payload: Any) -> None:
    """Replace ``path`` with ``payload`` as JSON.

    The data is written and fsynced to a sibling temp file, then swapped in with
    ``os.replace``; a failure at any step leaves the previous file untouched.
    """
    path = Path(path)
    try:
        encoded = json.dumps(payload, ensure_ascii=False, indent=2)
    except (TypeError, ValueError) as exc:
        raise StorageError(f"cannot serialise payload for {path}: {exc}") from exc

    tmp_name: str | None = None
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, tmp_name = tempfile.mkstemp(prefix=f".{path.name}.", suffix=".tmp", dir=path.parent)
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            fh.write(encoded)
            fh.flush()
            os.fsync(fh.fileno())
        os.replace(tmp_name, path)
        tmp_name = None
    except OSError as exc:
        raise StorageError(f"cannot write {path}: {exc}") from exc
    finally:
        if tmp_name is not None:
            try:
                os.unlink(tmp_name)
            except OSError:
                logger.warning("could not remove temp file %s", tmp_name)
