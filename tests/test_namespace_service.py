"""Tree operations over the flat entry store, run against every provider."""

import threading
from concurrent.futures import ThreadPoolExecutor

import pytest

from core.namespace import (
    AlreadyExistsError,
    InvalidOperationError,
    NamespaceService,
    NotFoundError,
    StorageFailureError,
)
from storage.errors import StorageError
from storage.providers.memory.entry_repo import InMemoryEntryRepo


def test_ensure_root_is_seeded_once(entry_repo):
    service = NamespaceService(entry_repo)

    assert service.ensure_root() is True
    assert service.ensure_root() is False
    root = entry_repo.get("/")
    assert (root.name, root.is_directory, root.content) == ("/", True, None)


def test_create_file_then_collision(namespace):
    assert namespace.create_file("/docs/new.md") == "File created successfully!"
    assert namespace.exists("/docs/new.md")

    with pytest.raises(AlreadyExistsError):
        namespace.create_file("/docs/new.md")
    with pytest.raises(AlreadyExistsError):
        namespace.create_directory("//docs/new.md/")


def test_create_file_gets_placeholder_and_leaf_name(namespace):
    namespace.create_file("/docs//guide.md")

    entry = namespace.get_entry("/docs/guide.md")
    assert entry.name == "guide.md"
    assert entry.is_directory is False
    assert entry.content == "# New File\n"


def test_create_does_not_require_parent(namespace):
    namespace.create_file("/a/b/c.md")

    assert namespace.exists("/a/b/c.md")
    assert not namespace.exists("/a/b")


def test_create_directory_has_no_content(namespace):
    assert namespace.create_directory("/docs/") == "Directory created successfully!"

    entry = namespace.get_entry("/docs")
    assert entry.is_directory is True
    assert entry.content is None


def test_create_root_is_a_collision(namespace):
    with pytest.raises(AlreadyExistsError):
        namespace.create_directory("/")


def test_custom_default_file_content(entry_repo):
    service = NamespaceService(entry_repo, default_file_content="")
    service.create_file("/blank.md")

    assert service.read_content("/blank.md") == ""


def test_list_children_returns_direct_children_only(namespace, seed):
    seed(
        ("/docs", True),
        ("/docs/file.md", False),
        ("/docs/subdir", True),
        ("/docs/subdir/grandchild.md", False),
        ("/docs-old", True),
    )

    children = namespace.list_children("/docs")

    assert [(c.name, c.path, c.is_directory) for c in children] == [
        ("subdir", "/docs/subdir", True),
        ("file.md", "/docs/file.md", False),
    ]


def test_list_children_of_root_excludes_root(namespace, seed):
    seed(("/docs", True), ("/docs/a.md", False), ("/readme.md", False))

    assert [c.path for c in namespace.list_children("/")] == ["/docs", "/readme.md"]
    assert [c.path for c in namespace.list_children(None)] == ["/docs", "/readme.md"]
    assert [c.path for c in namespace.list_children("//docs//")] == ["/docs/a.md"]


def test_list_children_of_unknown_directory_is_empty(namespace):
    assert namespace.list_children("/nope") == []


def test_read_and_render(namespace):
    namespace.create_file("/notes.md")
    namespace.save_content("/notes.md", "# Title\n\n| a | b |\n|---|---|\n| 1 | 2 |\n")

    assert namespace.read_content("/notes.md").startswith("# Title")
    html = namespace.render_view("/notes.md")
    assert "<h1" in html and "Title</h1>" in html
    assert "<table>" in html


def test_read_and_render_refuse_directories_and_missing(namespace):
    namespace.create_directory("/docs")

    with pytest.raises(InvalidOperationError, match="Cannot read a directory"):
        namespace.read_content("/docs")
    with pytest.raises(InvalidOperationError, match="Cannot render a directory"):
        namespace.render_view("/docs")
    with pytest.raises(NotFoundError):
        namespace.read_content("/missing.md")
    with pytest.raises(NotFoundError):
        namespace.render_view("/missing.md")


def test_render_uses_injected_renderer(entry_repo):
    class _Upper:
        def render(self, text: str) -> str:
            return text.upper()

    service = NamespaceService(entry_repo, _Upper())
    service.create_file("/a.md")

    assert service.render_view("/a.md") == "# NEW FILE\n"


def test_save_content(namespace):
    namespace.create_file("/docs/file.md")

    assert namespace.save_content("/docs/file.md/", "New content") == "File saved successfully!"
    assert namespace.read_content("/docs/file.md") == "New content"


def test_save_content_on_directory_leaves_it_unchanged(namespace, entry_repo):
    namespace.create_directory("/docs")
    before = entry_repo.get("/docs")

    with pytest.raises(InvalidOperationError):
        namespace.save_content("/docs", "text")

    assert entry_repo.get("/docs") == before


def test_save_content_missing_file(namespace):
    with pytest.raises(NotFoundError, match="File not found"):
        namespace.save_content("/ghost.md", "x")


def test_move_file_keeps_content(namespace, seed, entry_repo):
    seed(("/docs", True), ("/docs/source.md", False), ("/new-docs", True))

    assert namespace.move("/docs/source.md", "/new-docs") == "Moved successfully!"

    assert namespace.exists("/new-docs/source.md")
    assert not namespace.exists("/docs/source.md")
    moved = entry_repo.get("/new-docs/source.md")
    assert moved.name == "source.md"
    assert moved.content == "content of source.md"


def test_move_file_to_root(namespace, seed):
    seed(("/docs", True), ("/docs/a.md", False))

    namespace.move("/docs/a.md", "/")

    assert namespace.exists("/a.md")
    assert not namespace.exists("/docs/a.md")


def test_move_directory_moves_subtree(namespace, seed, entry_repo):
    seed(("/a", True), ("/a/x.md", False), ("/a/sub", True), ("/a/sub/a.md", False), ("/b", True), ("/ab", True))

    namespace.move("/a", "/b")

    assert [r.path for r in entry_repo.scan_by_prefix("/")] == [
        "/",
        "/ab",
        "/b",
        "/b/a",
        "/b/a/sub",
        "/b/a/sub/a.md",
        "/b/a/x.md",
    ]
    assert entry_repo.get("/b/a").name == "a"
    assert entry_repo.get("/b/a/sub/a.md").content == "content of a.md"


def test_move_collision_mutates_nothing(namespace, seed, entry_repo):
    seed(("/a", True), ("/a/x.md", False), ("/b", True), ("/b/a", True))
    before = entry_repo.scan_by_prefix("/")

    with pytest.raises(AlreadyExistsError):
        namespace.move("/a", "/b")

    assert entry_repo.scan_by_prefix("/") == before


def test_move_refuses_orphans_under_destination(namespace, seed, entry_repo):
    seed(("/a", True), ("/a/x.md", False), ("/b", True), ("/b/a/x.md", False))

    with pytest.raises(AlreadyExistsError):
        namespace.move("/a", "/b")

    assert entry_repo.exists("/a/x.md")
    assert entry_repo.get("/b/a/x.md").content == "content of x.md"


def test_move_missing_source(namespace):
    with pytest.raises(NotFoundError, match="Source file not found"):
        namespace.move("/nope.md", "/")


def test_move_root_and_into_own_subtree_are_refused(namespace, seed):
    seed(("/a", True), ("/a/b", True))

    with pytest.raises(InvalidOperationError):
        namespace.move("/", "/a")
    with pytest.raises(InvalidOperationError):
        namespace.move("/a", "/a/b")
    with pytest.raises(InvalidOperationError):
        namespace.move("/a", "/a")
    assert namespace.exists("/a/b")


def test_delete_directory_cascades(namespace, seed, entry_repo):
    seed(
        ("/docs", True),
        ("/docs/dir-to-delete", True),
        ("/docs/dir-to-delete/a.md", False),
        ("/docs/dir-to-delete/nested", True),
        ("/docs/dir-to-delete/nested/b.md", False),
        ("/docs/dir-to-delete-2", True),
    )

    assert namespace.delete("/docs/dir-to-delete") == "Deleted successfully!"

    assert [r.path for r in entry_repo.scan_by_prefix("/docs")] == ["/docs", "/docs/dir-to-delete-2"]


def test_delete_file(namespace, seed):
    seed(("/docs", True), ("/docs/file-to-delete.md", False))

    namespace.delete("/docs/file-to-delete.md")

    assert not namespace.exists("/docs/file-to-delete.md")
    assert namespace.exists("/docs")


@pytest.mark.parametrize("raw", ["/", "//", "", None])
def test_delete_root_always_refused(raw, entry_repo):
    service = NamespaceService(entry_repo)  # root not even seeded

    with pytest.raises(InvalidOperationError, match="root"):
        service.delete(raw)


def test_empty_path_is_root_and_cannot_wipe_the_namespace(namespace, entry_repo):
    namespace.create_directory("/docs")
    namespace.create_file("/docs/a.md")

    with pytest.raises(AlreadyExistsError):
        namespace.create_directory("")
    with pytest.raises(AlreadyExistsError):
        namespace.create_file("")
    with pytest.raises(InvalidOperationError):
        namespace.delete("")
    with pytest.raises(InvalidOperationError):
        namespace.move("", "/docs")

    assert [r.path for r in entry_repo.scan_by_prefix("")] == ["/", "/docs", "/docs/a.md"]


def test_concurrent_creates_of_one_path_have_a_single_winner(namespace):
    workers = 8
    barrier = threading.Barrier(workers)

    def attempt(_):
        barrier.wait()
        try:
            return namespace.create_file("/race.md")
        except AlreadyExistsError as e:
            return e

    with ThreadPoolExecutor(max_workers=workers) as pool:
        results = list(pool.map(attempt, range(workers)))

    assert results.count("File created successfully!") == 1
    assert sum(isinstance(r, AlreadyExistsError) for r in results) == workers - 1
    assert [c.path for c in namespace.list_children("/")] == ["/race.md"]


def test_delete_missing(namespace):
    with pytest.raises(NotFoundError):
        namespace.delete("/missing")


class _FailingRepo(InMemoryEntryRepo):
    def delete_exact(self, path: str) -> int:
        raise StorageError("disk unplugged")


def test_storage_faults_surface_as_storage_failure():
    repo = _FailingRepo()
    service = NamespaceService(repo)
    service.create_file("/a.md")

    with pytest.raises(StorageFailureError, match="disk unplugged") as exc_info:
        service.delete("/a.md")

    assert exc_info.value.kind == "storage_failure"
    assert exc_info.value.path == "/a.md"
    assert repo.exists("/a.md")


class _FailingPutAllRepo(InMemoryEntryRepo):
    def put(self, entry):
        if self._tx_depth and entry.path.endswith("y.md"):
            raise StorageError("write failed mid-batch")
        super().put(entry)


def test_failed_descendant_rewrite_rolls_back_whole_move():
    repo = _FailingPutAllRepo()
    service = NamespaceService(repo)
    service.ensure_root()
    for path in ("/a", "/b"):
        service.create_directory(path)
    service.create_file("/a/x.md")
    service.create_file("/a/y.md")

    with pytest.raises(StorageFailureError):
        service.move("/a", "/b")

    assert [r.path for r in repo.scan_by_prefix("/")] == ["/", "/a", "/a/x.md", "/a/y.md", "/b"]
