"""Editor session for Mindtree: the tree, selection, id counter and history.

Every structural or content change goes through `EditorSession`, which takes
a history snapshot immediately before applying it. Operations that find no
target, or that would not change anything, return without touching history.
"""

import json
import logging
from copy import deepcopy
from typing import Optional, Callable, Tuple, Dict, Any, Union

from mindtree.model import (
    Node, default_tree, find_node, find_parent, max_id, iter_nodes, node_to_dict,
)
from mindtree.sanitize import sanitize_tree, is_valid_color, ImportValidationError
from mindtree.settings import EditorSettings
from mindtree.undo import UndoManager

logger = logging.getLogger(__name__)

FIRST_FREE_ID = 2


class RestoreError(ValueError):
    """A persisted session blob could not be parsed."""


def restore(blob: Union[str, bytes, Dict[str, Any]],
            settings: Optional[EditorSettings] = None) -> Tuple[Node, int, int]:
    """Parse a blob produced by `EditorSession.serialize`.

    Returns (tree, next_id, selected_id). Raises RestoreError when the blob is
    not JSON, is not an object, or carries no usable tree.
    """
    settings = settings or EditorSettings()
    if isinstance(blob, (str, bytes)):
        try:
            blob = json.loads(blob)
        except (json.JSONDecodeError, RecursionError) as exc:
            raise RestoreError(f"malformed session data: {exc}") from exc
    if not isinstance(blob, dict):
        raise RestoreError("session data must be an object")

    try:
        tree = sanitize_tree(
            blob.get("data"),
            default_color=settings.default_color,
            fallback_label=settings.fallback_label,
            max_label_length=settings.max_label_length,
        )
    except ImportValidationError as exc:
        raise RestoreError(f"session data has no tree: {exc}") from exc

    next_id = blob.get("nextId")
    if not isinstance(next_id, int) or isinstance(next_id, bool):
        next_id = FIRST_FREE_ID
    next_id = max(next_id, max_id(tree) + 1)

    selected_id = blob.get("selectedId")
    if (not isinstance(selected_id, int) or isinstance(selected_id, bool)
            or find_node(tree, selected_id) is None):
        selected_id = tree.id

    return tree, next_id, selected_id


class EditorSession:
    """One editable mindmap with its own selection and undo history."""

    def __init__(self, tree: Optional[Node] = None, next_id: Optional[int] = None,
                 selected_id: Optional[int] = None,
                 settings: Optional[EditorSettings] = None):
        self.settings = settings or EditorSettings()
        self.tree = tree if tree is not None else default_tree()
        self.next_id = max(next_id or FIRST_FREE_ID, max_id(self.tree) + 1)
        if selected_id is None or find_node(self.tree, selected_id) is None:
            selected_id = self.tree.id
        self.selected_id = selected_id

        self.history = UndoManager(
            max_undo=self.settings.history_limit,
            max_redo=self.settings.history_limit,
        )

        # Inline label edit in progress
        self._edit_node_id: Optional[int] = None
        self._edit_original: str = ""

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    @classmethod
    def from_blob(cls, blob: Union[str, bytes, Dict[str, Any]],
                  settings: Optional[EditorSettings] = None) -> "EditorSession":
        tree, next_id, selected_id = restore(blob, settings)
        return cls(tree, next_id, selected_id, settings)

    # ==================== State ====================

    @property
    def root_id(self) -> int:
        return self.tree.id

    @property
    def selected_node(self) -> Optional[Node]:
        return find_node(self.tree, self.selected_id)

    @property
    def can_add_sibling(self) -> bool:
        return self.selected_id != self.root_id

    @property
    def can_delete(self) -> bool:
        return self.selected_id != self.root_id

    @property
    def is_editing(self) -> bool:
        return self._edit_node_id is not None

    def serialize(self) -> Dict[str, Any]:
        """Plain-data form of the session for persistence."""
        return {
            "data": node_to_dict(self.tree),
            "nextId": self.next_id,
            "selectedId": self.selected_id,
        }

    def select(self, node_id: int) -> bool:
        if find_node(self.tree, node_id) is None:
            return False
        if node_id != self.selected_id:
            self.selected_id = node_id
            self._notify_changed()
        return True

    def _target(self, node_id: Optional[int]) -> int:
        return self.selected_id if node_id is None else node_id

    def _allocate_id(self) -> int:
        node_id = self.next_id
        self.next_id += 1
        return node_id

    def _record(self, description: str):
        self.history.record(self.tree, self.next_id, self.selected_id, description)

    def _notify_changed(self):
        if self.on_state_changed:
            self.on_state_changed()

    # ==================== Structure ====================

    def add_child(self, parent_id: Optional[int] = None, label: Optional[str] = None,
                  color: Optional[str] = None) -> Optional[Node]:
        """Append a new leaf under `parent_id` and select it."""
        self.cancel_label_edit()
        parent = find_node(self.tree, self._target(parent_id))
        if parent is None:
            logger.debug("add_child: no node %s", parent_id)
            return None

        self._record("Add child")
        new_node = Node(
            id=self._allocate_id(),
            label=self.settings.new_node_label if label is None else label,
            color=parent.color if color is None else color,
        )
        parent.children.append(new_node)
        self.selected_id = new_node.id
        self._notify_changed()
        return new_node

    def add_sibling(self, node_id: Optional[int] = None) -> Optional[Node]:
        """Append a new node at the end of `node_id`'s parent and select it."""
        self.cancel_label_edit()
        node_id = self._target(node_id)
        if node_id == self.root_id:
            return None
        parent = find_parent(self.tree, node_id)
        if parent is None:
            logger.debug("add_sibling: no node %s", node_id)
            return None

        self._record("Add sibling")
        new_node = Node(
            id=self._allocate_id(),
            label=self.settings.new_node_label,
            color=parent.color,
        )
        parent.children.append(new_node)
        self.selected_id = new_node.id
        self._notify_changed()
        return new_node

    def delete_node(self, node_id: Optional[int] = None) -> bool:
        """Remove a node and its whole subtree, selecting its parent."""
        self.cancel_label_edit()
        node_id = self._target(node_id)
        if node_id == self.root_id:
            return False
        parent = find_parent(self.tree, node_id)
        if parent is None:
            logger.debug("delete_node: no node %s", node_id)
            return False

        self._record("Delete node")
        parent.children = [c for c in parent.children if c.id != node_id]
        self.selected_id = parent.id
        self._notify_changed()
        return True

    def delete_if_new(self, node_id: Optional[int] = None) -> bool:
        """Delete the node only while it still has the placeholder label."""
        self.cancel_label_edit()
        node = find_node(self.tree, self._target(node_id))
        if node is None or node.label != self.settings.new_node_label:
            return False
        return self.delete_node(node.id)

    def duplicate(self, node_id: Optional[int] = None) -> Optional[Node]:
        """Copy a subtree with fresh ids next to the original and select the copy."""
        self.cancel_label_edit()
        node_id = self._target(node_id)
        if node_id == self.root_id:
            return None
        node = find_node(self.tree, node_id)
        parent = find_parent(self.tree, node_id)
        if node is None or parent is None:
            logger.debug("duplicate: no node %s", node_id)
            return None

        self._record("Duplicate node")
        clone = deepcopy(node)
        for copied, _depth in iter_nodes(clone):
            copied.id = self._allocate_id()
        clone.label = node.label + self.settings.copy_suffix
        parent.children.append(clone)
        self.selected_id = clone.id
        self._notify_changed()
        return clone

    # ==================== Content ====================

    def relabel(self, node_id: Optional[int], text: str) -> Optional[Node]:
        self.cancel_label_edit()
        node = find_node(self.tree, self._target(node_id))
        if node is None or node.label == text:
            return None

        self._record("Edit label")
        node.label = text
        self._notify_changed()
        return node

    def recolor(self, node_id: Optional[int], color: str) -> Optional[Node]:
        if not is_valid_color(color):
            raise ValueError(f"not a #RRGGBB color: {color!r}")
        self.cancel_label_edit()
        node = find_node(self.tree, self._target(node_id))
        if node is None or node.color == color:
            return None

        self._record("Change color")
        node.color = color
        self._notify_changed()
        return node

    # ==================== Inline editing ====================

    def begin_label_edit(self, node_id: Optional[int] = None,
                         initial_text: Optional[str] = None) -> Optional[Node]:
        """Start editing a label; `initial_text` replaces it as a live preview."""
        if self.is_editing:
            self.cancel_label_edit()
        node = find_node(self.tree, self._target(node_id))
        if node is None:
            return None

        self._edit_node_id = node.id
        self._edit_original = node.label
        if initial_text is not None:
            node.label = initial_text
            self._notify_changed()
        return node

    def preview_label(self, text: str) -> Optional[Node]:
        """Show `text` on the node being edited without touching history."""
        node = self._editing_node()
        if node is None:
            return None
        node.label = text
        self._notify_changed()
        return node

    def commit_label_edit(self, text: Optional[str] = None) -> Optional[Node]:
        """Finish the edit, recording one history entry holding the old label."""
        node = self._editing_node()
        original = self._edit_original
        self._edit_node_id = None
        if node is None:
            return None

        text = node.label if text is None else text
        if not text.strip():
            text = original or self.settings.new_node_label

        # The snapshot must hold the label from before the preview
        node.label = original
        if text == original:
            self._notify_changed()
            return None

        self._record("Edit label")
        node.label = text
        self._notify_changed()
        return node

    def cancel_label_edit(self):
        node = self._editing_node()
        self._edit_node_id = None
        if node is not None and node.label != self._edit_original:
            node.label = self._edit_original
            self._notify_changed()

    def _editing_node(self) -> Optional[Node]:
        if self._edit_node_id is None:
            return None
        return find_node(self.tree, self._edit_node_id)

    # ==================== Undo/Redo ====================

    def undo(self) -> bool:
        """Restore the state before the last mutation."""
        self.cancel_label_edit()
        entry = self.history.undo(self.tree, self.next_id, self.selected_id)
        if entry is None:
            return False
        self._apply_entry(entry)
        return True

    def redo(self) -> bool:
        """Re-apply the last undone mutation."""
        self.cancel_label_edit()
        entry = self.history.redo(self.tree, self.next_id, self.selected_id)
        if entry is None:
            return False
        self._apply_entry(entry)
        return True

    def _apply_entry(self, entry):
        self.tree = entry.restore_tree()
        self.next_id = entry.next_id
        self.selected_id = entry.selected_id
        logger.debug("Restored snapshot (%s)", entry.description or "unnamed")
        self._notify_changed()

    # ==================== Import ====================

    def import_tree(self, data: Any) -> Node:
        """Replace the tree with sanitized external data.

        Raises ImportValidationError, leaving the session unchanged, when
        `data` is not an object. The import becomes the new history baseline.
        """
        tree = sanitize_tree(
            data,
            next_id=self.next_id,
            default_color=self.settings.default_color,
            fallback_label=self.settings.fallback_label,
            max_label_length=self.settings.max_label_length,
        )
        self._edit_node_id = None
        self.tree = tree
        self.next_id = max(self.next_id, max_id(tree) + 1)
        self.selected_id = tree.id
        self.history.clear()
        logger.info("Imported tree with root #%d, next id %d", tree.id, self.next_id)
        self._notify_changed()
        return tree
