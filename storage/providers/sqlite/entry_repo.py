"""SQLite repository for the flat markdown namespace table."""

from __future__ import annotations

import logging
import sqlite3
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from pathlib import Path

from storage.errors import StorageError
from storage.models import EntryRow

logger = logging.getLogger(__name__)

_COLUMNS = "id, path, name, is_directory, content"


def prefix_upper_bound(prefix: str) -> str:
    """Smallest string greater than every string starting with ``prefix``."""
    return prefix[:-1] + chr(ord(prefix[-1]) + 1)


class SQLiteEntryRepo:
    """Entry repository over one ``markdown_entries`` table.

    The connection is shared across worker threads; a re-entrant lock
    serializes calls and is held for the whole of a ``transaction()`` block.
    """

    def __init__(self, db_path: str | Path, conn: sqlite3.Connection | None = None) -> None:
        self._own_conn = conn is None
        if conn is not None:
            self._conn = conn
        else:
            if str(db_path) != ":memory:":
                Path(db_path).parent.mkdir(parents=True, exist_ok=True)
            self._conn = sqlite3.connect(str(db_path), check_same_thread=False)
        self._conn.row_factory = sqlite3.Row
        self._lock = threading.RLock()
        self._tx_depth = 0
        self._ensure_table()

    def close(self) -> None:
        if self._own_conn:
            self._conn.close()

    def get(self, path: str) -> EntryRow | None:
        with self._guard("get"):
            row = self._conn.execute(
                f"SELECT {_COLUMNS} FROM markdown_entries WHERE path = ?",
                (path,),
            ).fetchone()
        return self._row_to_entry(row) if row else None

    def exists(self, path: str) -> bool:
        with self._guard("exists"):
            row = self._conn.execute(
                "SELECT 1 FROM markdown_entries WHERE path = ? LIMIT 1",
                (path,),
            ).fetchone()
        return row is not None

    def scan_by_prefix(self, prefix: str) -> list[EntryRow]:
        with self._guard("scan_by_prefix"):
            if not prefix:
                rows = self._conn.execute(f"SELECT {_COLUMNS} FROM markdown_entries ORDER BY path").fetchall()
            else:
                # @@@prefix-range - range predicate keeps the scan on the unique path index
                rows = self._conn.execute(
                    f"""
                    SELECT {_COLUMNS} FROM markdown_entries
                    WHERE path >= ? AND path < ?
                    ORDER BY path
                    """,
                    (prefix, prefix_upper_bound(prefix)),
                ).fetchall()
        return [self._row_to_entry(row) for row in rows]

    def put(self, entry: EntryRow) -> None:
        with self._guard("put"):
            self._put(entry)
            self._commit()

    def put_all(self, entries: Iterable[EntryRow]) -> None:
        with self.transaction():
            with self._guard("put_all"):
                for entry in entries:
                    self._put(entry)

    def insert(self, entry: EntryRow) -> bool:
        with self._guard("insert"):
            cur = self._conn.execute(
                """
                INSERT OR IGNORE INTO markdown_entries (path, name, is_directory, content)
                VALUES (?, ?, ?, ?)
                """,
                (entry.path, entry.name, int(entry.is_directory), entry.content),
            )
            self._commit()
        if cur.rowcount != 1:
            return False
        entry.id = cur.lastrowid
        return True

    def delete_exact(self, path: str) -> int:
        with self._guard("delete_exact"):
            cur = self._conn.execute("DELETE FROM markdown_entries WHERE path = ?", (path,))
            self._commit()
        return cur.rowcount

    def delete_by_prefix(self, path: str) -> int:
        if not path:
            raise ValueError("delete_by_prefix requires a non-empty path")
        prefix = path + "/"
        with self._guard("delete_by_prefix"):
            cur = self._conn.execute(
                "DELETE FROM markdown_entries WHERE path = ? OR (path >= ? AND path < ?)",
                (path, prefix, prefix_upper_bound(prefix)),
            )
            self._commit()
        return cur.rowcount

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._tx_depth:
                # nested blocks join the outer transaction
                self._tx_depth += 1
                try:
                    yield
                finally:
                    self._tx_depth -= 1
                return

            with self._guard("begin"):
                if not self._conn.in_transaction:
                    self._conn.execute("BEGIN IMMEDIATE")
            self._tx_depth = 1
            try:
                yield
            except BaseException:
                self._tx_depth = 0
                with self._guard("rollback"):
                    self._conn.rollback()
                raise
            self._tx_depth = 0
            with self._guard("commit"):
                self._conn.commit()

    def _put(self, entry: EntryRow) -> None:
        values = (entry.path, entry.name, int(entry.is_directory), entry.content)
        if entry.id is not None:
            cur = self._conn.execute(
                """
                UPDATE markdown_entries
                SET path = ?, name = ?, is_directory = ?, content = ?
                WHERE id = ?
                """,
                (*values, entry.id),
            )
            if cur.rowcount:
                return
        self._conn.execute(
            """
            INSERT INTO markdown_entries (path, name, is_directory, content)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(path) DO UPDATE SET
                name = excluded.name,
                is_directory = excluded.is_directory,
                content = excluded.content
            """,
            values,
        )

    def _commit(self) -> None:
        if not self._tx_depth:
            self._conn.commit()

    @contextmanager
    def _guard(self, operation: str) -> Iterator[None]:
        with self._lock:
            try:
                yield
            except sqlite3.Error as exc:
                logger.error("SQLite entry repo %s failed: %s", operation, exc)
                raise StorageError(f"SQLite entry repo {operation} failed: {exc}") from exc

    @staticmethod
    def _row_to_entry(row: sqlite3.Row) -> EntryRow:
        return EntryRow(
            id=row["id"],
            path=row["path"],
            name=row["name"],
            is_directory=bool(row["is_directory"]),
            content=row["content"],
        )

    def _ensure_table(self) -> None:
        with self._guard("ensure_table"):
            self._conn.execute(
                """
                CREATE TABLE IF NOT EXISTS markdown_entries (
                    id INTEGER PRIMARY KEY AUTOINCREMENT,
                    path TEXT NOT NULL UNIQUE,
                    name TEXT NOT NULL,
                    is_directory INTEGER NOT NULL DEFAULT 0,
                    content TEXT
                )
                """
            )
            self._conn.commit()
