"""Error taxonomy shared by the tree provider, template store, and output.

Selection and range operations never raise; only I/O-facing code does.
"""

from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path


@dataclass
class CtxSelectError(Exception):
    """Base error carrying a short machine code and a user-facing message."""

    code: str
    message: str
    detail: str | None = None

    def __str__(self) -> str:
        if self.detail:
            return f"{self.message} ({self.detail})"
        return self.message


class NotFoundError(CtxSelectError):
    """A path vanished or never existed."""


class AccessError(CtxSelectError):
    """Permission denied while walking or reading."""


class ValidationError(CtxSelectError):
    """Stored data (template, name) does not match the live filesystem or rules."""


def format_error(error: BaseException) -> str:
    """Render ``error`` as a one-line status message."""
    if isinstance(error, CtxSelectError):
        return f"[{error.code}] {error}"
    return str(error) or error.__class__.__name__


def wrap_os_error(error: OSError, path: Path) -> CtxSelectError:
    """Translate an ``OSError`` raised for ``path`` into the project taxonomy."""
    if isinstance(error, (FileNotFoundError, NotADirectoryError)):
        return NotFoundError(code="not_found", message=f"Path not found: {path}", detail=error.strerror)
    if isinstance(error, PermissionError):
        return AccessError(code="access_denied", message=f"Permission denied: {path}", detail=error.strerror)
    return AccessError(code="io_error", message=f"Cannot access {path}", detail=str(error))


__all__ = [
    "CtxSelectError",
    "NotFoundError",
    "AccessError",
    "ValidationError",
    "format_error",
    "wrap_os_error",
]
