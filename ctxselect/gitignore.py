"""Leave git-ignored paths out of the tree walk.

git itself is asked, once per tree load, which untracked paths under the root
are ignored. Without git, or outside a work tree, nothing is filtered.
"""

from __future__ import annotations

import logging
import shutil
import subprocess
from dataclasses import dataclass
from pathlib import Path

from .logging import get_logger, log_event

logger = get_logger(__name__)

LS_IGNORED = ["ls-files", "-z", "--others", "--ignored", "--exclude-standard", "--directory"]


@dataclass(frozen=True)
class GitIgnoreMatcher:
    root: Path
    ignored_files: frozenset[Path]
    ignored_dirs: frozenset[Path]

    def is_ignored(self, path: Path) -> bool:
        """True for listed files and anything at or below a listed directory."""
        if path in self.ignored_files:
            return True
        if not path.is_relative_to(self.root):
            return False
        return any(candidate in self.ignored_dirs for candidate in (path, *path.parents))


def _git_output(args: list[str], cwd: Path) -> bytes | None:
    try:
        proc = subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            check=True,
        )
    except (OSError, subprocess.CalledProcessError) as exc:
        log_event(logger, "gitignore.git_failed", level=logging.DEBUG, args=args, error=str(exc))
        return None
    return proc.stdout


def load_gitignore_matcher(root: Path) -> GitIgnoreMatcher | None:
    """Matcher for ``root``, or ``None`` when git can't tell us anything."""
    if shutil.which("git") is None:
        return None
    root = root.resolve()
    if _git_output(["rev-parse", "--is-inside-work-tree"], root) is None:
        return None
    # ls-files run from ``root`` lists only that subtree, relative to it.
    listing = _git_output(LS_IGNORED, root)
    if listing is None:
        return None

    files: set[Path] = set()
    dirs: set[Path] = set()
    for entry in filter(None, listing.decode("utf-8", errors="replace").split("\0")):
        path = root / entry.rstrip("/")
        if path == root:
            continue
        (dirs if entry.endswith("/") or path.is_dir() else files).add(path)

    log_event(logger, "gitignore.loaded", level=logging.DEBUG, root=str(root), files=len(files), dirs=len(dirs))
    return GitIgnoreMatcher(root=root, ignored_files=frozenset(files), ignored_dirs=frozenset(dirs))
