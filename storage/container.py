"""Storage container with provider selection."""

from __future__ import annotations

from pathlib import Path
from typing import Literal

from .contracts import EntryRepo

StorageStrategy = Literal["sqlite", "memory"]

DEFAULT_DB_PATH = Path.home() / ".dok" / "dok.db"


class StorageContainer:
    """Composition root for storage repos."""

    _SUPPORTED_STRATEGIES = {"sqlite", "memory"}

    def __init__(
        self,
        db_path: str | Path | None = None,
        strategy: StorageStrategy = "sqlite",
    ) -> None:
        if strategy not in self._SUPPORTED_STRATEGIES:
            raise ValueError(
                f"Unsupported storage strategy: {strategy}. "
                f"Supported strategies: {', '.join(sorted(self._SUPPORTED_STRATEGIES))}"
            )
        self._db_path = Path(db_path) if db_path else DEFAULT_DB_PATH
        self._strategy: StorageStrategy = strategy

    @property
    def strategy(self) -> StorageStrategy:
        return self._strategy

    @property
    def db_path(self) -> Path:
        return self._db_path

    def entry_repo(self) -> EntryRepo:
        if self._strategy == "memory":
            from storage.providers.memory.entry_repo import InMemoryEntryRepo
            return InMemoryEntryRepo()
        from storage.providers.sqlite.entry_repo import SQLiteEntryRepo
        return SQLiteEntryRepo(db_path=self._db_path)
