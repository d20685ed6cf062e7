"""Storage repository contracts."""

from __future__ import annotations

from collections.abc import Iterable
from contextlib import AbstractContextManager
from typing import Protocol

from storage.models import EntryRow


class EntryRepo(Protocol):
    """Flat, path-keyed collection of namespace entries.

    Prefix arguments are literal strings; no path semantics are applied here.
    """

    def get(self, path: str) -> EntryRow | None:
        """Exact lookup by canonical path."""

    def exists(self, path: str) -> bool:
        """Existence check by canonical path."""

    def scan_by_prefix(self, prefix: str) -> list[EntryRow]:
        """All entries whose path starts with ``prefix``."""

    def put(self, entry: EntryRow) -> None:
        """Insert or update.

        Rows carrying an ``id`` are updated in place (their path may change);
        rows without one are upserted by path.
        """

    def put_all(self, entries: Iterable[EntryRow]) -> None:
        """Bulk ``put`` applied as one unit."""

    def insert(self, entry: EntryRow) -> bool:
        """Insert only if the path is free. Returns False when it is taken."""

    def delete_exact(self, path: str) -> int:
        """Delete one entry. Returns the number of rows removed."""

    def delete_by_prefix(self, path: str) -> int:
        """Delete ``path`` and everything under ``path + '/'``. An empty ``path`` raises ``ValueError``."""

    def transaction(self) -> AbstractContextManager[None]:
        """Group calls into one atomic unit; roll back if the block raises."""

    def close(self) -> None:
        """Release provider resources."""
