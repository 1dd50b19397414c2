"""Named selection templates and prompts persisted as files under the data dir.

A template records the selected files and empty directories. Loading never
fails because of entries that have since disappeared; those are reported in
``TemplateLoad.missing`` instead.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path

from platformdirs import user_data_dir

from ..errors import ValidationError, wrap_os_error
from ..logging import get_logger, log_event
from ..tree_model.fs import path_kind
from ..tree_model.index import TreeIndex
from ..tree_model.types import DirectoryNode, FileNode

APP_NAME = "ctxselect"
DATA_DIR = Path(user_data_dir(APP_NAME, appauthor=False))
TEMPLATES_DIR = DATA_DIR / "templates"
PROMPTS_DIR = DATA_DIR / "prompts"

KIND_FILE = "file"
KIND_DIRECTORY = "directory"

_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]")

logger = get_logger(__name__)


def sanitize_name(name: str) -> str:
    """Replace every character outside ``[A-Za-z0-9_-]`` with ``_``.

    Raises ``ValidationError`` when nothing usable remains.
    """
    cleaned = _UNSAFE_NAME_CHARS.sub("_", name.strip())
    if not cleaned.strip("_"):
        raise ValidationError(code="invalid_name", message=f"Invalid name: {name!r}")
    return cleaned


@dataclass(frozen=True)
class TemplateEntry:
    """One stored selection entry; ``kind`` is ``"file"`` or ``"directory"``."""

    path: Path
    relative_path: str
    kind: str = KIND_FILE

    def to_json(self) -> dict[str, str]:
        """JSON-ready dict with string paths."""
        return {"path": str(self.path), "relative_path": self.relative_path, "kind": self.kind}

    @classmethod
    def from_json(cls, raw: object) -> TemplateEntry:
        """Parse one stored entry; malformed data raises ``ValidationError``."""
        if not isinstance(raw, dict):
            raise ValidationError(code="invalid_template", message="Template entry is not an object")
        raw_path = raw.get("path")
        relative_path = raw.get("relative_path")
        kind = raw.get("kind", KIND_FILE)
        if not isinstance(raw_path, str) or not raw_path:
            raise ValidationError(code="invalid_template", message="Template entry has no path")
        if not isinstance(relative_path, str):
            relative_path = Path(raw_path).name
        if kind not in {KIND_FILE, KIND_DIRECTORY}:
            raise ValidationError(code="invalid_template", message=f"Unknown entry kind: {kind!r}")
        return cls(path=Path(raw_path), relative_path=relative_path, kind=kind)


@dataclass(frozen=True)
class TemplateLoad:
    """Entries of a template that still resolve, plus the ones that do not."""

    name: str
    files: tuple[Path, ...] = ()
    empty_dirs: tuple[Path, ...] = ()
    missing: tuple[str, ...] = field(default_factory=tuple)

    @property
    def is_partial(self) -> bool:
        """True when some stored entries no longer resolve."""
        return bool(self.missing)


def _resolve_entry(entry: TemplateEntry, root: Path | None) -> Path:
    """Path under ``root`` when given, else the stored absolute path."""
    if root is not None and entry.relative_path not in {"", "."}:
        return root / entry.relative_path
    return entry.path


class TemplateStore:
    """One JSON file per template in ``directory``."""

    def __init__(self, directory: Path | None = None) -> None:
        """Default ``directory`` is ``<user data dir>/templates``."""
        self.directory = directory if directory is not None else TEMPLATES_DIR

    def path_for(self, name: str) -> Path:
        """File backing template ``name`` after sanitising."""
        return self.directory / f"{sanitize_name(name)}.json"

    def save(self, name: str, entries: list[TemplateEntry]) -> Path:
        """Write ``entries`` under ``name``, replacing any previous template."""
        path = self.path_for(name)
        payload = {
            "name": sanitize_name(name),
            "files": [entry.to_json() for entry in entries],
            "created_at": datetime.now(timezone.utc).isoformat(),
        }
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(json.dumps(payload, indent=2) + "\n", encoding="utf-8")
        except OSError as exc:
            raise wrap_os_error(exc, path) from exc
        log_event(logger, "template.saved", name=payload["name"], entries=len(entries))
        return path

    def read_entries(self, name: str) -> list[TemplateEntry] | None:
        """Parse a stored template, or return ``None`` when it does not exist."""
        path = self.path_for(name)
        if not path.exists():
            return None
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as exc:
            raise wrap_os_error(exc, path) from exc
        except ValueError as exc:
            raise ValidationError(
                code="invalid_template",
                message=f"Template {name!r} is not valid JSON",
                detail=str(exc),
            ) from exc
        if not isinstance(data, dict) or not isinstance(data.get("files"), list):
            raise ValidationError(code="invalid_template", message=f"Template {name!r} has no file list")
        return [TemplateEntry.from_json(raw) for raw in data["files"]]

    def load(self, name: str, root: Path | None = None, index: TreeIndex | None = None) -> TemplateLoad | None:
        """Load ``name`` and re-validate every entry against the live tree.

        Entries resolve relative to ``root`` when given. With an ``index``, an
        entry must also be present in that snapshot; directories count only
        when they are empty there.
        """
        entries = self.read_entries(name)
        if entries is None:
            return None

        files: list[Path] = []
        empty_dirs: list[Path] = []
        missing: list[str] = []
        for entry in entries:
            target = _resolve_entry(entry, root)
            if index is not None:
                node = index.get(target)
                if entry.kind == KIND_FILE and isinstance(node, FileNode):
                    files.append(target)
                elif entry.kind == KIND_DIRECTORY and isinstance(node, DirectoryNode) and node.is_empty:
                    empty_dirs.append(target)
                else:
                    missing.append(entry.relative_path)
                continue
            kind = path_kind(target)
            if entry.kind == KIND_FILE and kind == "file":
                files.append(target)
            elif entry.kind == KIND_DIRECTORY and kind == "directory":
                empty_dirs.append(target)
            else:
                missing.append(entry.relative_path)

        if missing:
            log_event(logger, "template.missing_entries", name=name, missing=missing)
        log_event(logger, "template.loaded", name=name, files=len(files), empty_dirs=len(empty_dirs))
        return TemplateLoad(
            name=sanitize_name(name),
            files=tuple(files),
            empty_dirs=tuple(empty_dirs),
            missing=tuple(missing),
        )

    def list(self) -> list[str]:
        """Sorted names of saved templates."""
        try:
            return sorted(path.stem for path in self.directory.glob("*.json") if path.is_file())
        except OSError:
            return []

    def delete(self, name: str) -> bool:
        """Remove template ``name``; returns whether it existed."""
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise wrap_os_error(exc, path) from exc
        log_event(logger, "template.deleted", name=name)
        return True


class PromptStore:
    """Named free-text prompts stored as ``<name>.txt``."""

    def __init__(self, directory: Path | None = None) -> None:
        """Default ``directory`` is ``<user data dir>/prompts``."""
        self.directory = directory if directory is not None else PROMPTS_DIR

    def path_for(self, name: str) -> Path:
        """File backing prompt ``name`` after sanitising."""
        return self.directory / f"{sanitize_name(name)}.txt"

    def save(self, name: str, text: str) -> Path:
        """Write ``text`` under ``name``, replacing any previous prompt."""
        path = self.path_for(name)
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            path.write_text(text, encoding="utf-8")
        except OSError as exc:
            raise wrap_os_error(exc, path) from exc
        return path

    def load(self, name: str) -> str | None:
        """Prompt text, or ``None`` when no such prompt exists."""
        path = self.path_for(name)
        try:
            return path.read_text(encoding="utf-8")
        except FileNotFoundError:
            return None
        except OSError as exc:
            raise wrap_os_error(exc, path) from exc

    def list(self) -> list[str]:
        """Sorted names of saved prompts."""
        try:
            return sorted(path.stem for path in self.directory.glob("*.txt") if path.is_file())
        except OSError:
            return []

    def delete(self, name: str) -> bool:
        """Remove prompt ``name``; returns whether it existed."""
        path = self.path_for(name)
        try:
            path.unlink()
        except FileNotFoundError:
            return False
        except OSError as exc:
            raise wrap_os_error(exc, path) from exc
        return True
