"""Tree operations over the flat, path-keyed entry table.

The hierarchy is emulated: children, subtrees and moves are all expressed as
literal prefix scans and prefix rewrites against an ``EntryRepo``. Cascading
mutations (move of a directory, delete of a directory) run inside one repo
transaction so they are either fully applied or not at all.
"""

from __future__ import annotations

import logging
from collections.abc import Iterator
from contextlib import contextmanager

from storage.contracts import EntryRepo
from storage.errors import StorageError
from storage.models import EntryRow

from . import paths
from .errors import AlreadyExistsError, InvalidOperationError, NotFoundError, StorageFailureError
from .render import MarkdownRenderer, Renderer
from .types import EntrySummary

logger = logging.getLogger(__name__)

DEFAULT_FILE_CONTENT = "# New File\n"


class NamespaceService:
    """File and directory operations for the markdown document store."""

    def __init__(
        self,
        repo: EntryRepo,
        renderer: Renderer | None = None,
        *,
        default_file_content: str = DEFAULT_FILE_CONTENT,
    ) -> None:
        self._repo = repo
        self._renderer = renderer if renderer is not None else MarkdownRenderer()
        self._default_file_content = default_file_content

    @property
    def repo(self) -> EntryRepo:
        return self._repo

    def ensure_root(self) -> bool:
        """Seed the root directory entry. Returns True if it was missing."""
        with self._storage(paths.ROOT):
            created = self._repo.insert(EntryRow(path=paths.ROOT, name=paths.ROOT, is_directory=True))
        if created:
            logger.info("Seeded root directory entry")
        return created

    def exists(self, path: str | None) -> bool:
        normalized = paths.normalize(path)
        with self._storage(normalized):
            return self._repo.exists(normalized)

    def get_entry(self, path: str | None) -> EntryRow:
        normalized = paths.normalize(path)
        with self._storage(normalized):
            entry = self._repo.get(normalized)
        if entry is None:
            raise NotFoundError("File or directory not found.", normalized)
        return entry

    def list_children(self, path: str | None = paths.ROOT) -> list[EntrySummary]:
        """Direct children of a directory; empty for unknown directories."""
        prefix = paths.children_prefix(paths.normalize(path))
        with self._storage(prefix):
            rows = self._repo.scan_by_prefix(prefix)
        children = [EntrySummary.from_row(row) for row in rows if paths.is_direct_child(row.path, prefix)]
        children.sort(key=lambda c: (not c.is_directory, c.name))
        return children

    def read_content(self, path: str | None) -> str:
        entry = self._require_file(path, "Cannot read a directory.")
        return entry.content or ""

    def render_view(self, path: str | None) -> str:
        entry = self._require_file(path, "Cannot render a directory.")
        return self._renderer.render(entry.content or "")

    def save_content(self, path: str | None, content: str) -> str:
        normalized = paths.normalize(path)
        with self._storage(normalized):
            entry = self._repo.get(normalized)
            if entry is None:
                raise NotFoundError("File not found.", normalized)
            if entry.is_directory:
                raise InvalidOperationError("Cannot save content to a directory.", normalized)
            entry.content = content
            self._repo.put(entry)
        logger.info("Saved %s (%d chars)", normalized, len(content))
        return "File saved successfully!"

    def create_file(self, path: str | None) -> str:
        self._create(path, is_directory=False)
        return "File created successfully!"

    def create_directory(self, path: str | None) -> str:
        self._create(path, is_directory=True)
        return "Directory created successfully!"

    def move(self, source: str | None, destination: str | None) -> str:
        """Move an entry (and its subtree) into the destination directory.

        The leaf name is kept; only the ancestor prefix changes.
        """
        src = paths.normalize(source)
        dest_dir = paths.normalize(destination)
        if paths.is_root(src):
            raise InvalidOperationError("Cannot move the root directory.", src)

        with self._storage(src), self._repo.transaction():
            entry = self._repo.get(src)
            if entry is None:
                raise NotFoundError("Source file not found.", src)

            new_path = paths.join(dest_dir, entry.name)
            if entry.is_directory and paths.is_within(dest_dir, src):
                raise InvalidOperationError("Cannot move a directory into itself.", src)
            if self._repo.exists(new_path):
                logger.debug("Move of %s refused: %s already exists", src, new_path)
                raise AlreadyExistsError(
                    "A file or directory with that name already exists in the destination.", new_path
                )

            moved: list[EntryRow] = []
            if entry.is_directory:
                # entries may exist under new_path without new_path itself
                if self._repo.scan_by_prefix(paths.children_prefix(new_path)):
                    raise AlreadyExistsError(
                        "A file or directory with that name already exists in the destination.", new_path
                    )
                descendants = self._repo.scan_by_prefix(paths.children_prefix(src))
                moved = [child.moved_to(paths.rebase(child.path, src, new_path)) for child in descendants]
                self._repo.put_all(moved)

            self._repo.put(entry.moved_to(new_path))

        logger.info("Moved %s -> %s (%d descendants)", src, new_path, len(moved))
        return "Moved successfully!"

    def delete(self, path: str | None) -> str:
        normalized = paths.normalize(path)
        if paths.is_root(normalized):
            raise InvalidOperationError("Cannot delete the root directory.", normalized)

        with self._storage(normalized), self._repo.transaction():
            entry = self._repo.get(normalized)
            if entry is None:
                raise NotFoundError("File or directory not found.", normalized)
            if entry.is_directory:
                removed = self._repo.delete_by_prefix(normalized)
            else:
                removed = self._repo.delete_exact(normalized)

        logger.info("Deleted %s (%d entries)", normalized, removed)
        return "Deleted successfully!"

    def _create(self, path: str | None, *, is_directory: bool) -> None:
        normalized = paths.normalize(path)
        if paths.is_root(normalized):
            raise AlreadyExistsError("File or directory with this name already exists.", normalized)

        entry = EntryRow(
            path=normalized,
            name=paths.leaf_name(normalized),
            is_directory=is_directory,
            content=None if is_directory else self._default_file_content,
        )
        with self._storage(normalized), self._repo.transaction():
            if self._repo.exists(normalized) or not self._repo.insert(entry):
                logger.debug("Create refused: %s already exists", normalized)
                raise AlreadyExistsError("File or directory with this name already exists.", normalized)
        logger.info("Created %s %s", "directory" if is_directory else "file", normalized)

    def _require_file(self, path: str | None, directory_message: str) -> EntryRow:
        normalized = paths.normalize(path)
        with self._storage(normalized):
            entry = self._repo.get(normalized)
        if entry is None:
            raise NotFoundError("File not found in database.", normalized)
        if entry.is_directory:
            raise InvalidOperationError(directory_message, normalized)
        return entry

    @contextmanager
    def _storage(self, path: str) -> Iterator[None]:
        try:
            yield
        except StorageError as exc:
            logger.error("Storage failure while handling %s: %s", path, exc)
            raise StorageFailureError(str(exc), path) from exc
