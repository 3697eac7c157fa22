"""SQLite storage for image metadata and perceptual hashes."""

from __future__ import annotations

import os
import sqlite3
from collections.abc import Iterator
from contextlib import contextmanager, suppress
from dataclasses import dataclass
from typing import Optional

_UINT64_MASK = (1 << 64) - 1
_SIGN_BIT = 1 << 63

_CREATE_TABLE = (
    "CREATE TABLE IF NOT EXISTS images ("
    "id INTEGER PRIMARY KEY AUTOINCREMENT,"
    "path TEXT UNIQUE,"
    "dhash INTEGER,"
    "phash INTEGER,"
    "timestamp INTEGER,"
    "file_size INTEGER,"
    "is_searched INTEGER DEFAULT 0);"
)
_MIGRATIONS = (
    "ALTER TABLE images ADD COLUMN file_size INTEGER;",
    "ALTER TABLE images ADD COLUMN is_searched INTEGER DEFAULT 0;",
)
_COLUMNS = "id, path, dhash, phash, timestamp, file_size, is_searched"


@dataclass
class ImageData:
    """An image's path, hashes and the file facts used to detect changes."""

    path: str
    dhash: int = 0
    phash: int = 0
    timestamp: int = 0
    file_size: int = 0
    is_searched: bool = False
    id: Optional[int] = None


class DatabaseError(Exception):
    """Raised when the image database cannot be opened or queried."""


def _to_signed(value: int) -> int:
    value &= _UINT64_MASK
    return value - (1 << 64) if value & _SIGN_BIT else value


def _to_unsigned(value: Optional[int]) -> int:
    return (value or 0) & _UINT64_MASK


def _row_to_image(row: tuple) -> ImageData:
    return ImageData(
        id=row[0],
        path=row[1],
        dhash=_to_unsigned(row[2]),
        phash=_to_unsigned(row[3]),
        timestamp=row[4] or 0,
        file_size=row[5] or 0,
        is_searched=bool(row[6]),
    )


class DatabaseManager:
    """Keeps image hashes in an SQLite database file."""

    def __init__(self, db_path):
        self.db_path = os.fspath(db_path)
        self._conn: Optional[sqlite3.Connection] = None

    def open(self) -> None:
        """Open the database and create or migrate its schema."""
        if self._conn is not None:
            return
        try:
            conn = sqlite3.connect(
                self.db_path, isolation_level=None, check_same_thread=False
            )
        except sqlite3.Error as exc:
            raise DatabaseError(f"Cannot open database: {exc}") from exc
        with suppress(sqlite3.Error):
            conn.execute("PRAGMA journal_mode=WAL;")
        self._conn = conn
        try:
            self._init_schema()
        except DatabaseError:
            self.close()
            raise

    def close(self) -> None:
        if self._conn is not None:
            self._conn.close()
            self._conn = None

    def __enter__(self) -> "DatabaseManager":
        self.open()
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise DatabaseError("database is not open")
        return self._conn

    def _execute(self, sql: str, params: tuple = ()) -> sqlite3.Cursor:
        try:
            return self._connection.execute(sql, params)
        except sqlite3.Error as exc:
            raise DatabaseError(f"SQL error: {exc}") from exc

    def _init_schema(self) -> None:
        self._execute(_CREATE_TABLE)
        for statement in _MIGRATIONS:
            with suppress(sqlite3.Error):
                self._connection.execute(statement)

    def add_image(self, data: ImageData) -> int:
        """Insert the image, replacing any row with the same path; return its id."""
        cursor = self._execute(
            "INSERT OR REPLACE INTO images "
            "(path, dhash, phash, timestamp, file_size, is_searched) "
            "VALUES (?, ?, ?, ?, ?, ?);",
            (
                data.path,
                _to_signed(data.dhash),
                _to_signed(data.phash),
                data.timestamp,
                data.file_size,
                1 if data.is_searched else 0,
            ),
        )
        return cursor.lastrowid

    def get_all_images(self) -> list[ImageData]:
        rows = self._execute(f"SELECT {_COLUMNS} FROM images;").fetchall()
        return [_row_to_image(row) for row in rows]

    def remove_image(self, path: str) -> bool:
        """Delete the image with this path; return whether a row was removed."""
        cursor = self._execute("DELETE FROM images WHERE path = ?;", (path,))
        return cursor.rowcount > 0

    def cleanup_stale_entries(self) -> list[str]:
        """Remove entries whose files no longer exist; return their paths."""
        stale = [img.path for img in self.get_all_images() if not os.path.exists(img.path)]
        with self.transaction():
            for path in stale:
                self.remove_image(path)
        return stale

    def begin_transaction(self) -> None:
        self._execute("BEGIN TRANSACTION;")

    def commit_transaction(self) -> None:
        self._execute("COMMIT;")

    def rollback_transaction(self) -> None:
        self._execute("ROLLBACK;")

    @contextmanager
    def transaction(self) -> Iterator["DatabaseManager"]:
        """Run the block in a transaction, rolling back if it raises."""
        self.begin_transaction()
        try:
            yield self
        except BaseException:
            self.rollback_transaction()
            raise
        self.commit_transaction()

    def get_image_by_path(self, path: str) -> Optional[ImageData]:
        row = self._execute(
            f"SELECT {_COLUMNS} FROM images WHERE path = ?;", (path,)
        ).fetchone()
        return _row_to_image(row) if row is not None else None

    def set_directory_searched_status(self, dir_path: str, is_searched: bool) -> int:
        """Mark every image under the directory; return the number of rows changed."""
        pattern = dir_path
        if pattern and not pattern.endswith(("/", "\\")):
            pattern += "/"
        pattern += "%"
        cursor = self._execute(
            "UPDATE images SET is_searched = ? WHERE path LIKE ?;",
            (1 if is_searched else 0, pattern),
        )
        return cursor.rowcount