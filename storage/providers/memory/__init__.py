"""In-process storage provider implementations."""

from .entry_repo import InMemoryEntryRepo

__all__ = ["InMemoryEntryRepo"]
