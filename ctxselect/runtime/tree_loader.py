"""Background tree reloads for the selector.

Reloads run on one daemon thread so the key loop keeps drawing. Requests are
numbered; when a newer request is scheduled before an older one finishes, the
older tree is thrown away instead of being shown.
"""

from __future__ import annotations

import threading
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path

from ..errors import CtxSelectError
from ..tree_model.types import DirectoryNode


@dataclass(frozen=True)
class TreeLoadRequest:
    request_id: int
    root: Path
    show_hidden: bool
    skip_gitignored: bool


@dataclass(frozen=True)
class TreeLoadResult:
    """Exactly one of ``tree`` and ``error`` is set."""

    request: TreeLoadRequest
    tree: DirectoryNode | None
    error: CtxSelectError | None = None


class TreeLoadScheduler:
    def __init__(self, load_tree: Callable[..., DirectoryNode]) -> None:
        self._load_tree = load_tree
        self._lock = threading.Lock()
        self._request_ids = 0
        self._queued: TreeLoadRequest | None = None
        self._thread: threading.Thread | None = None
        self._finished: TreeLoadResult | None = None

    @property
    def latest_request_id(self) -> int:
        with self._lock:
            return self._request_ids

    @property
    def busy(self) -> bool:
        """Whether a load is queued or still running."""
        with self._lock:
            return self._thread is not None

    def schedule(self, root: Path, *, show_hidden: bool, skip_gitignored: bool) -> int:
        """Queue a reload of ``root``, replacing any not-yet-started one."""
        with self._lock:
            self._request_ids += 1
            self._queued = TreeLoadRequest(self._request_ids, root, show_hidden, skip_gitignored)
            request_id = self._request_ids
            if self._thread is not None:
                return request_id
            self._thread = threading.Thread(target=self._run, name="ctxselect-tree-load", daemon=True)
            thread = self._thread
        thread.start()
        return request_id

    def _take_queued(self) -> TreeLoadRequest | None:
        with self._lock:
            request, self._queued = self._queued, None
            if request is None:
                self._thread = None
            return request

    def _run(self) -> None:
        request = self._take_queued()
        while request is not None:
            try:
                result = TreeLoadResult(
                    request,
                    self._load_tree(
                        request.root,
                        show_hidden=request.show_hidden,
                        skip_gitignored=request.skip_gitignored,
                    ),
                )
            except CtxSelectError as exc:
                result = TreeLoadResult(request, None, exc)
            with self._lock:
                if request.request_id == self._request_ids:
                    self._finished = result
            request = self._take_queued()

    def drain_results(self) -> list[TreeLoadResult]:
        """Hand over the newest finished load (at most one), clearing it."""
        with self._lock:
            result, self._finished = self._finished, None
        return [result] if result is not None else []


__all__ = [
    "TreeLoadRequest",
    "TreeLoadResult",
    "TreeLoadScheduler",
]
