"""Domain error kinds raised by namespace operations."""

from __future__ import annotations


class NamespaceError(Exception):
    """Base class for every namespace failure surfaced to callers."""

    kind = "namespace_error"

    def __init__(self, message: str, path: str | None = None) -> None:
        super().__init__(message)
        self.message = message
        self.path = path


class NotFoundError(NamespaceError):
    kind = "not_found"


class AlreadyExistsError(NamespaceError):
    kind = "already_exists"


class InvalidOperationError(NamespaceError):
    kind = "invalid_operation"


class StorageFailureError(NamespaceError):
    """The storage collaborator failed; no retry is attempted here."""

    kind = "storage_failure"
