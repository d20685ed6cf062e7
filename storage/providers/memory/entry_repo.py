"""Dict-backed entry repository for tests and ephemeral servers."""

from __future__ import annotations

import copy
import threading
from collections.abc import Iterable, Iterator
from contextlib import contextmanager
from dataclasses import replace

from storage.errors import StorageError
from storage.models import EntryRow


class InMemoryEntryRepo:
    """Entry repository keeping rows in a path-keyed dict.

    Rows handed out are copies, so callers mutate them freely until ``put``.
    """

    def __init__(self, entries: Iterable[EntryRow] | None = None) -> None:
        self._rows: dict[str, EntryRow] = {}
        self._next_id = 1
        self._lock = threading.RLock()
        self._tx_depth = 0
        for entry in entries or ():
            self.put(entry)

    def close(self) -> None:
        return None

    def get(self, path: str) -> EntryRow | None:
        with self._lock:
            row = self._rows.get(path)
            return replace(row) if row else None

    def exists(self, path: str) -> bool:
        with self._lock:
            return path in self._rows

    def scan_by_prefix(self, prefix: str) -> list[EntryRow]:
        with self._lock:
            return [replace(row) for path, row in sorted(self._rows.items()) if path.startswith(prefix)]

    def put(self, entry: EntryRow) -> None:
        with self._lock:
            if entry.id is not None:
                current = self._path_for_id(entry.id)
                if current is not None:
                    if current != entry.path and entry.path in self._rows:
                        raise StorageError(f"In-memory entry repo put failed: path already taken: {entry.path}")
                    del self._rows[current]
                    self._rows[entry.path] = replace(entry)
                    return
            existing = self._rows.get(entry.path)
            row_id = existing.id if existing else self._allocate_id()
            self._rows[entry.path] = replace(entry, id=row_id)

    def put_all(self, entries: Iterable[EntryRow]) -> None:
        with self.transaction():
            for entry in entries:
                self.put(entry)

    def insert(self, entry: EntryRow) -> bool:
        with self._lock:
            if entry.path in self._rows:
                return False
            entry.id = self._allocate_id()
            self._rows[entry.path] = replace(entry)
            return True

    def delete_exact(self, path: str) -> int:
        with self._lock:
            return 1 if self._rows.pop(path, None) is not None else 0

    def delete_by_prefix(self, path: str) -> int:
        if not path:
            raise ValueError("delete_by_prefix requires a non-empty path")
        prefix = path + "/"
        with self._lock:
            doomed = [p for p in self._rows if p == path or p.startswith(prefix)]
            for p in doomed:
                del self._rows[p]
            return len(doomed)

    @contextmanager
    def transaction(self) -> Iterator[None]:
        with self._lock:
            if self._tx_depth:
                self._tx_depth += 1
                try:
                    yield
                finally:
                    self._tx_depth -= 1
                return
            snapshot = copy.deepcopy(self._rows)
            next_id = self._next_id
            self._tx_depth = 1
            try:
                yield
            except BaseException:
                self._rows = snapshot
                self._next_id = next_id
                raise
            finally:
                self._tx_depth = 0

    def _path_for_id(self, row_id: int) -> str | None:
        for path, row in self._rows.items():
            if row.id == row_id:
                return path
        return None

    def _allocate_id(self) -> int:
        row_id = self._next_id
        self._next_id += 1
        return row_id
