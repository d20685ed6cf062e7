"""Hierarchical markdown namespace emulated over a flat path-keyed store."""

from core.namespace.errors import (
    AlreadyExistsError,
    InvalidOperationError,
    NamespaceError,
    NotFoundError,
    StorageFailureError,
)
from core.namespace.paths import normalize
from core.namespace.render import MarkdownRenderer
from core.namespace.service import NamespaceService
from core.namespace.types import EntrySummary

__all__ = [
    "AlreadyExistsError",
    "EntrySummary",
    "InvalidOperationError",
    "MarkdownRenderer",
    "NamespaceError",
    "NamespaceService",
    "NotFoundError",
    "StorageFailureError",
    "normalize",
]
