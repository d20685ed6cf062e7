"""Provider-neutral storage failures."""

from __future__ import annotations


class StorageError(RuntimeError):
    """Raised by any repo when the underlying engine fails."""
