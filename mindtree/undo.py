"""Undo/Redo system for Mindtree."""

from typing import Optional, List, Callable
from dataclasses import dataclass
from copy import deepcopy

from mindtree.model import Node


@dataclass(frozen=True)
class HistoryEntry:
    """A snapshot of session state taken before a mutation."""
    tree: Node
    next_id: int
    selected_id: int
    description: str = ""

    @classmethod
    def capture(cls, tree: Node, next_id: int, selected_id: int,
                description: str = "") -> "HistoryEntry":
        return cls(deepcopy(tree), next_id, selected_id, description)

    def restore_tree(self) -> Node:
        """Return a fresh copy of the stored tree, leaving the snapshot intact."""
        return deepcopy(self.tree)


class UndoManager:
    """Manages undo/redo history."""

    def __init__(self, max_undo: int = 50, max_redo: int = 50):
        self.max_undo = max_undo
        self.max_redo = max_redo
        self._undo_stack: List[HistoryEntry] = []
        self._redo_stack: List[HistoryEntry] = []

        # Callbacks
        self.on_state_changed: Optional[Callable[[], None]] = None

    @property
    def can_undo(self) -> bool:
        """Check if undo is available."""
        return len(self._undo_stack) > 0

    @property
    def can_redo(self) -> bool:
        """Check if redo is available."""
        return len(self._redo_stack) > 0

    @property
    def undo_depth(self) -> int:
        return len(self._undo_stack)

    @property
    def redo_depth(self) -> int:
        return len(self._redo_stack)

    @property
    def undo_description(self) -> str:
        """Get description of next undo action."""
        if self._undo_stack:
            return self._undo_stack[-1].description
        return ""

    @property
    def redo_description(self) -> str:
        """Get description of next redo action."""
        if self._redo_stack:
            return self._redo_stack[-1].description
        return ""

    def record(self, tree: Node, next_id: int, selected_id: int, description: str = ""):
        """Snapshot the state about to be mutated."""
        self._undo_stack.append(HistoryEntry.capture(tree, next_id, selected_id, description))
        self._redo_stack.clear()  # Clear redo on new action

        # Trim history if needed
        while len(self._undo_stack) > self.max_undo:
            self._undo_stack.pop(0)

        self._notify_changed()

    def undo(self, tree: Node, next_id: int, selected_id: int) -> Optional[HistoryEntry]:
        """Pop the last snapshot, parking the current state on the redo stack."""
        if not self._undo_stack:
            return None

        entry = self._undo_stack.pop()
        self._redo_stack.append(HistoryEntry.capture(tree, next_id, selected_id, entry.description))
        while len(self._redo_stack) > self.max_redo:
            self._redo_stack.pop(0)

        self._notify_changed()
        return entry

    def redo(self, tree: Node, next_id: int, selected_id: int) -> Optional[HistoryEntry]:
        """Pop the last undone snapshot, parking the current state on the undo stack."""
        if not self._redo_stack:
            return None

        entry = self._redo_stack.pop()
        self._undo_stack.append(HistoryEntry.capture(tree, next_id, selected_id, entry.description))
        while len(self._undo_stack) > self.max_undo:
            self._undo_stack.pop(0)

        self._notify_changed()
        return entry

    def clear(self):
        """Clear all history."""
        self._undo_stack.clear()
        self._redo_stack.clear()
        self._notify_changed()

    def _notify_changed(self):
        """Notify that undo/redo state changed."""
        if self.on_state_changed:
            self.on_state_changed()
