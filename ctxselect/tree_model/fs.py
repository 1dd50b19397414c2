"""Filesystem side of the tree model: the snapshot walk and live-path checks."""

from __future__ import annotations

import logging
import os
import time
from pathlib import Path

from ..errors import NotFoundError, wrap_os_error
from ..gitignore import GitIgnoreMatcher, load_gitignore_matcher
from ..logging import get_logger, log_event
from .types import DirectoryNode, FileNode, TreeNode, count_nodes

logger = get_logger(__name__)


def _sort_key(entry: os.DirEntry, is_dir: bool) -> tuple[bool, str, str]:
    return (not is_dir, entry.name.casefold(), entry.name)


class _TreeWalker:
    """Builds nodes below ``root``. Symlinks are listed as files, never followed."""

    def __init__(self, root: Path, show_hidden: bool, matcher: GitIgnoreMatcher | None) -> None:
        self.root = root
        self.show_hidden = show_hidden
        self.matcher = matcher

    def _visible(self, entry: os.DirEntry) -> bool:
        if not self.show_hidden and entry.name.startswith("."):
            return False
        return self.matcher is None or not self.matcher.is_ignored(Path(entry.path))

    def children(self, directory: Path) -> tuple[TreeNode, ...]:
        """Nodes for ``directory``'s entries. ``OSError`` from listing it propagates."""
        with os.scandir(directory) as it:
            entries = [entry for entry in it if self._visible(entry)]

        kinds: dict[str, bool] = {}
        for entry in entries:
            try:
                kinds[entry.name] = entry.is_dir(follow_symlinks=False)
            except OSError:
                kinds[entry.name] = False
        entries.sort(key=lambda entry: _sort_key(entry, kinds[entry.name]))
        return tuple(self._node(entry, kinds[entry.name]) for entry in entries)

    def _node(self, entry: os.DirEntry, is_dir: bool) -> TreeNode:
        path = Path(entry.path)
        relative_path = path.relative_to(self.root).as_posix()
        if not is_dir:
            try:
                size: int | None = entry.stat(follow_symlinks=False).st_size
            except OSError:
                size = None
            return FileNode(path=path, relative_path=relative_path, size=size)
        try:
            children = self.children(path)
        except OSError as exc:
            log_event(logger, "tree.skip_unreadable", level=logging.WARNING, path=str(path), error=str(exc))
            children = ()
        return DirectoryNode(path=path, relative_path=relative_path, children=children)


def load_tree(root: Path, *, show_hidden: bool = False, skip_gitignored: bool = True) -> DirectoryNode:
    """Walk ``root`` into an immutable snapshot.

    A missing root, or one that is not a directory, raises ``NotFoundError``;
    a root that can't be listed raises ``AccessError``. Subdirectories that
    can't be listed are kept, empty.
    """
    started = time.monotonic()
    try:
        root = root.resolve(strict=True)
    except OSError as exc:
        raise wrap_os_error(exc, root) from exc
    if not root.is_dir():
        raise NotFoundError(code="not_a_directory", message=f"Not a directory: {root}")

    matcher = load_gitignore_matcher(root) if skip_gitignored else None
    walker = _TreeWalker(root, show_hidden, matcher)
    try:
        children = walker.children(root)
    except OSError as exc:
        raise wrap_os_error(exc, root) from exc

    tree = DirectoryNode(path=root, relative_path=".", children=children)
    log_event(
        logger,
        "tree.loaded",
        root=str(root),
        nodes=count_nodes(tree),
        seconds=round(time.monotonic() - started, 4),
    )
    return tree


def read_file_bytes(path: Path) -> bytes:
    try:
        return path.read_bytes()
    except OSError as exc:
        raise wrap_os_error(exc, path) from exc


def path_kind(path: Path) -> str | None:
    """``"file"`` or ``"directory"`` for a live path; ``None`` once it is gone."""
    try:
        if path.is_dir():
            return "directory"
        return "file" if path.exists() else None
    except OSError:
        return None


__all__ = [
    "load_tree",
    "read_file_bytes",
    "path_kind",
]
