"""Canonical path handling for the document namespace.

Every store key, prefix computation and equality check works on the output of
``normalize``. The remaining helpers assume their inputs are already normalized.
"""

from __future__ import annotations

import re

ROOT = "/"
SEPARATOR = "/"

_SLASH_RUNS = re.compile(r"//+")


def normalize(raw: str | None) -> str:
    """Canonicalize a user supplied path.

    ``None`` and the empty string become the root, runs of ``/`` collapse to
    one, and a single trailing ``/`` is dropped unless the result is the root
    itself.
    """
    if not raw:
        return ROOT
    cleaned = _SLASH_RUNS.sub(SEPARATOR, raw)
    if len(cleaned) > 1 and cleaned.endswith(SEPARATOR):
        cleaned = cleaned[:-1]
    return cleaned


def is_root(path: str) -> bool:
    return path == ROOT


def children_prefix(dir_path: str) -> str:
    """Prefix shared by every descendant of ``dir_path``."""
    prefix = dir_path if dir_path.endswith(SEPARATOR) else dir_path + SEPARATOR
    # root would otherwise become "//"
    if prefix == SEPARATOR * 2:
        return ROOT
    return prefix


def leaf_name(path: str) -> str:
    if is_root(path):
        return ROOT
    return path[path.rfind(SEPARATOR) + 1:]


def parent_path(path: str) -> str:
    if is_root(path):
        return ROOT
    idx = path.rfind(SEPARATOR)
    if idx <= 0:
        return ROOT
    return path[:idx]


def join(dir_path: str, name: str) -> str:
    if is_root(dir_path):
        return ROOT + name
    return dir_path + SEPARATOR + name


def is_direct_child(path: str, prefix: str) -> bool:
    """True when ``path`` sits exactly one level below ``prefix``.

    ``prefix`` is a children prefix (trailing ``/``); the directory's own entry
    is not its child.
    """
    if path == prefix or path == normalize(prefix):
        return False
    if not path.startswith(prefix):
        return False
    return SEPARATOR not in path[len(prefix):]


def is_within(path: str, ancestor: str) -> bool:
    """True when ``path`` is ``ancestor`` or one of its descendants."""
    if path == ancestor:
        return True
    return path.startswith(children_prefix(ancestor))


def rebase(path: str, old_prefix: str, new_prefix: str) -> str:
    """Replace the leading ``old_prefix`` of ``path`` with ``new_prefix``.

    Only the leftmost occurrence is substituted, so the relative layout below
    the moved subtree is preserved verbatim.
    """
    if not path.startswith(old_prefix):
        raise ValueError(f"{path!r} is not under {old_prefix!r}")
    return new_prefix + path[len(old_prefix):]
