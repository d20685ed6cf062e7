"""Pytest configuration for dok tests.

Ensures the project root is in sys.path so imports work correctly.
"""

import sys
from pathlib import Path

import pytest

# Add project root to sys.path
project_root = Path(__file__).parent.parent
if str(project_root) not in sys.path:
    sys.path.insert(0, str(project_root))

from core.namespace import NamespaceService  # noqa: E402
from storage.models import EntryRow  # noqa: E402
from storage.providers.memory.entry_repo import InMemoryEntryRepo  # noqa: E402
from storage.providers.sqlite.entry_repo import SQLiteEntryRepo  # noqa: E402


@pytest.fixture(params=["sqlite", "memory"])
def entry_repo(request, tmp_path):
    """Every provider must satisfy the same entry contract."""
    if request.param == "sqlite":
        repo = SQLiteEntryRepo(tmp_path / "dok.db")
    else:
        repo = InMemoryEntryRepo()
    try:
        yield repo
    finally:
        repo.close()


@pytest.fixture
def namespace(entry_repo) -> NamespaceService:
    service = NamespaceService(entry_repo)
    service.ensure_root()
    return service


@pytest.fixture
def seed(entry_repo):
    """Insert (path, is_directory) rows directly, bypassing the service."""

    def _seed(*specs: tuple[str, bool]) -> None:
        for path, is_directory in specs:
            name = "/" if path == "/" else path.rsplit("/", 1)[-1]
            entry_repo.put(
                EntryRow(
                    path=path,
                    name=name,
                    is_directory=is_directory,
                    content=None if is_directory else f"content of {name}",
                )
            )

    return _seed
