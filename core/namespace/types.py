"""Namespace result types."""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from storage.models import EntryRow


@dataclass(frozen=True)
class EntrySummary:
    """Projection of an entry returned by directory listings."""

    name: str
    path: str
    is_directory: bool

    @classmethod
    def from_row(cls, row: EntryRow) -> EntrySummary:
        return cls(name=row.name, path=row.path, is_directory=row.is_directory)

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)
