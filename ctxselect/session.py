"""Interactive selection session: the command surface the terminal adapter drives.

The session owns every piece of mutable UI state (tree snapshot, expansion,
selection, search overlay, range, cursor) so several sessions can coexist
and the whole surface can be exercised without a terminal.
"""

from __future__ import annotations

from dataclasses import dataclass

from .errors import CtxSelectError, format_error
from .output.formatter import OUTPUT_FORMATS
from .range_select import RangeSelector
from .search.overlay import FILE as OVERLAY_FILE
from .search.overlay import GROUP as OVERLAY_GROUP
from .search.overlay import OverlayReference, SearchOverlay
from .selection.engine import SelectionEngine
from .selection.state import SelectionState
from .templates.store import KIND_DIRECTORY, KIND_FILE, TemplateEntry, TemplateLoad, TemplateStore
from .tree_model.flatten import ExpansionState, FlattenedView
from .tree_model.index import TreeIndex
from .tree_model.types import DirectoryNode, FileNode, TreeNode

ROW_DIRECTORY = "directory"
ROW_FILE = "file"
ROW_GROUP = "group"


@dataclass(frozen=True)
class DisplayRow:
    """Uniform row shape for both the tree view and the search overlay."""

    node: TreeNode | None
    depth: int
    label: str
    kind: str
    directory: DirectoryNode | None = None
    matched: bool = True


class SelectionSession:
    """State and commands for one selection run over one root directory."""

    def __init__(
        self,
        root: DirectoryNode,
        *,
        selection: SelectionState | None = None,
        output_format: str = "markdown",
        prompt: str = "",
    ) -> None:
        self.tree = root
        self.index = TreeIndex.build(root)
        self.expansion = ExpansionState(root.path)
        self.selection = selection if selection is not None else SelectionState()
        self.engine = SelectionEngine(self.selection)
        self.view = FlattenedView.build(root, self.expansion)
        self.overlay = SearchOverlay()
        self.range = RangeSelector()
        self.cursor = 0
        self.prompt = prompt
        self.output_format = output_format if output_format in OUTPUT_FORMATS else OUTPUT_FORMATS[0]
        self.pending_template_name: str | None = None
        self.template_missing: tuple[str, ...] = ()
        self.status = ""

    @property
    def searching(self) -> bool:
        return self.overlay.active

    def _rebuild_view(self) -> None:
        self.view = FlattenedView.build(self.tree, self.expansion)

    def current_rows(self) -> list[DisplayRow]:
        if self.overlay.active:
            rows: list[DisplayRow] = []
            for row in self.overlay.rows:
                if row.kind == OVERLAY_GROUP:
                    label = "./" if row.relative_path == "." else f"{row.relative_path}/"
                    rows.append(DisplayRow(row.node, 0, label, ROW_GROUP, directory=row.directory, matched=row.matched))
                else:
                    assert row.node is not None
                    rows.append(DisplayRow(row.node, 1, row.node.name, ROW_FILE))
            return rows
        out: list[DisplayRow] = []
        for row in self.view:
            if isinstance(row.node, DirectoryNode):
                label = row.node.name + "/"
                out.append(DisplayRow(row.node, row.depth, label, ROW_DIRECTORY, directory=row.node))
            else:
                out.append(DisplayRow(row.node, row.depth, row.node.name, ROW_FILE))
        return out

    def row_count(self) -> int:
        return len(self.overlay) if self.overlay.active else len(self.view)

    def current_node(self) -> TreeNode | None:
        if self.overlay.active:
            row = self.overlay.row_at(self.cursor)
            return row.node if row is not None else None
        return self.view.node_at(self.cursor)

    def _range_node_at(self, index: int) -> TreeNode | None:
        # Ranges inside the overlay only ever touch files.
        if self.overlay.active:
            return self.overlay.file_node_at(index)
        return self.view.node_at(index)

    def _clamp(self, index: int) -> int:
        count = self.row_count()
        if count <= 0:
            return 0
        return max(0, min(index, count - 1))

    def move_cursor(self, delta: int) -> None:
        self.range.clear()
        self.cursor = self._clamp(self.cursor + delta)

    def move_to(self, index: int) -> None:
        self.range.clear()
        self.cursor = self._clamp(index)

    def jump_top(self) -> None:
        self.move_to(0)

    def jump_bottom(self) -> None:
        self.move_to(self.row_count() - 1)

    def extend_range(self, delta: int) -> None:
        """Shift-move: anchor at the current row, then grow toward the new one."""
        self.range.begin(self.cursor)
        self.cursor = self._clamp(self.cursor + delta)
        self.range.extend(self.cursor)

    def cancel_range(self) -> bool:
        if not self.range.active:
            return False
        self.range.clear()
        return True

    def go_parent(self) -> None:
        """Collapse an open directory, otherwise move to the enclosing one."""
        self.range.clear()
        if self.overlay.active:
            for index in range(self.cursor - 1, -1, -1):
                row = self.overlay.row_at(index)
                if row is not None and row.kind == OVERLAY_GROUP:
                    self.cursor = index
                    return
            return
        node = self.view.node_at(self.cursor)
        if node is None:
            return
        if isinstance(node, DirectoryNode) and node.path != self.tree.path and self.expansion.is_expanded(node.path):
            self.expansion.collapse(node.path)
            self._rebuild_view()
            self.cursor = self._clamp(self.view.index_of(node.path) or 0)
            return
        parent = self.index.parent_of(node.path)
        if parent is not None:
            target = self.view.index_of(parent.path)
            if target is not None:
                self.cursor = target

    def expand_or_enter(self) -> None:
        """Open a closed directory, or step onto the first child of an open one."""
        self.range.clear()
        if self.overlay.active:
            row = self.overlay.row_at(self.cursor)
            if row is not None and row.kind == OVERLAY_GROUP:
                self.activate_current()
            return
        node = self.view.node_at(self.cursor)
        if not isinstance(node, DirectoryNode):
            return
        if not self.expansion.is_expanded(node.path):
            self.expansion.expand(node.path)
            self._rebuild_view()
            return
        if node.children:
            self.cursor = self._clamp(self.cursor + 1)

    def toggle_current(self) -> bool:
        """Commit the active range, or toggle the row under the cursor."""
        if self.range.active:
            toggled = self.range.commit(self._range_node_at, self.engine.toggle_all_visible)
            self.status = f"Toggled {toggled} item{'s' if toggled != 1 else ''}"
            return toggled > 0
        return self.engine.toggle_node(self.current_node())

    def toggle_all_visible(self) -> bool:
        self.range.clear()
        if self.overlay.active:
            nodes: list[TreeNode | None] = list(self.overlay.file_nodes())
        else:
            nodes = [row.node for row in self.view if row.node.path != self.tree.path]
        return self.engine.toggle_all_visible(nodes)

    def is_selected(self, node: TreeNode | None) -> bool:
        return self.engine.is_selected(node)

    def is_partially_selected(self, node: TreeNode | None) -> bool:
        return self.engine.is_partially_selected(node)

    def selected_files(self) -> list[FileNode]:
        return list(self.engine.iter_selected_files(self.tree))

    @property
    def has_selection(self) -> bool:
        return not self.selection.is_empty

    def activate_current(self) -> None:
        """Enter: expand/collapse in the tree; jump to the directory from a group row."""
        self.range.clear()
        if self.overlay.active:
            row = self.overlay.row_at(self.cursor)
            if row is None or row.kind != OVERLAY_GROUP or row.directory is None:
                return
            directory = row.directory
            self.overlay.exit()
            self.expansion.expand_path_to(directory.path, self.index)
            self._rebuild_view()
            self.cursor = self._clamp(self.view.index_of(directory.path) or 0)
            self.status = ""
            return
        node = self.view.node_at(self.cursor)
        if not isinstance(node, DirectoryNode) or node.path == self.tree.path:
            return
        self.expansion.toggle(node)
        self._rebuild_view()
        self.cursor = self._clamp(self.view.index_of(node.path) or 0)

    def replace_tree(self, root: DirectoryNode) -> None:
        """Swap in a fresh snapshot, pruning selection entries that are gone."""
        cursor_node = self.current_node()
        cursor_path = cursor_node.path if cursor_node is not None else None
        self.tree = root
        self.index = TreeIndex.build(root)
        kept_files = [path for path in self.selection.selected_files if isinstance(self.index.get(path), FileNode)]
        kept_dirs = []
        for path in self.selection.selected_empty_dirs:
            node = self.index.get(path)
            if isinstance(node, DirectoryNode) and node.is_empty:
                kept_dirs.append(path)
        self.selection.replace(kept_files, kept_dirs)
        self.expansion.retain(self.index)
        self.range.clear()
        self._rebuild_view()
        if self.overlay.active:
            reference = self.overlay.reference
            assert reference is not None
            self.overlay.reference = OverlayReference(root=root, cursor_path=reference.cursor_path)
            self.overlay.enter(self.overlay.query, self.index, self.overlay.reference)
            self.cursor = self._clamp(self.cursor)
            return
        index = self.view.index_of(cursor_path) if cursor_path is not None else None
        self.cursor = self._clamp(index if index is not None else self.cursor)

    def start_search(self, query: str) -> bool:
        """Open (or re-query) the overlay; blank queries are ignored."""
        if not query.strip():
            return False
        self.range.clear()
        cursor_node = self.view.node_at(self.cursor)
        reference = OverlayReference(
            root=self.tree,
            cursor_path=cursor_node.path if cursor_node is not None else None,
        )
        self.overlay.enter(query, self.index, reference)
        self.cursor = 0
        files = sum(1 for row in self.overlay.rows if row.kind == OVERLAY_FILE)
        self.status = f"{len(self.overlay.matches)} matches for {query!r} ({files} files)"
        return True

    def cancel_search(self) -> bool:
        """Leave the overlay and put the cursor back where it was."""
        if not self.overlay.active:
            return False
        self.range.clear()
        reference = self.overlay.exit()
        self.status = ""
        target = None
        if reference is not None and reference.cursor_path is not None:
            target = self.view.index_of(reference.cursor_path)
        self.cursor = self._clamp(target if target is not None else 0)
        return True

    def apply_template(self, load: TemplateLoad) -> None:
        """Replace the selection with a validated template load."""
        self.selection.replace(load.files, load.empty_dirs)
        self.template_missing = load.missing
        for path in list(load.files) + list(load.empty_dirs):
            self.expansion.expand_path_to(path, self.index)
        self._rebuild_view()
        self.cursor = self._clamp(self.cursor)
        message = f"Loaded template {load.name!r}: {len(load.files)} files"
        if load.missing:
            message += f", {len(load.missing)} missing"
        self.status = message

    def load_template(self, store: TemplateStore, name: str) -> bool:
        """Load ``name`` from ``store`` and apply it; failures become status messages."""
        try:
            loaded = store.load(name, root=self.tree.path, index=self.index)
        except CtxSelectError as exc:
            self.status = format_error(exc)
            return False
        if loaded is None:
            self.status = f"Template {name!r} not found"
            return False
        self.apply_template(loaded)
        return True

    def template_entries(self) -> list[TemplateEntry]:
        """Current selection as template entries in tree order."""
        entries = [
            TemplateEntry(path=node.path, relative_path=node.relative_path, kind=KIND_FILE)
            for node in self.engine.iter_selected_files(self.tree)
        ]
        entries.extend(
            TemplateEntry(path=node.path, relative_path=node.relative_path, kind=KIND_DIRECTORY)
            for node in self.engine.iter_selected_empty_dirs(self.tree)
        )
        return entries

    def toggle_output_format(self) -> str:
        position = OUTPUT_FORMATS.index(self.output_format)
        self.output_format = OUTPUT_FORMATS[(position + 1) % len(OUTPUT_FORMATS)]
        self.status = f"Output format: {self.output_format}"
        return self.output_format

    def set_prompt(self, text: str) -> None:
        self.prompt = text
        self.status = "Prompt set" if text.strip() else "Prompt cleared"

    def set_pending_template_name(self, name: str | None) -> None:
        self.pending_template_name = name or None
        if name:
            self.status = f"Selection will be saved as template {name!r}"


__all__ = [
    "DisplayRow",
    "OUTPUT_FORMATS",
    "ROW_DIRECTORY",
    "ROW_FILE",
    "ROW_GROUP",
    "SelectionSession",
]
