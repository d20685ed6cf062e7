"""Shared storage domain models: provider-neutral data types."""

from __future__ import annotations

from dataclasses import dataclass, replace


@dataclass
class EntryRow:
    """One namespace entry; ``path`` is the canonical unique key."""

    path: str
    name: str
    is_directory: bool
    content: str | None = None
    id: int | None = None

    def moved_to(self, path: str) -> EntryRow:
        return replace(self, path=path)
