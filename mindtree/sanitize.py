"""Repair of external tree data before it enters a session.

A single corrupt node never rejects an otherwise valid file: bad ids, labels,
colors and children are replaced with safe values. Only a root that is not an
object at all is refused.
"""

import logging
import re
from typing import Any, Dict, Set

from mindtree.model import Node, DEFAULT_COLOR

logger = logging.getLogger(__name__)

MAX_LABEL_LENGTH = 200
FALLBACK_LABEL = "node"
COLOR_PATTERN = re.compile(r"#[0-9a-fA-F]{6}")


class ImportValidationError(ValueError):
    """External data cannot be turned into a tree at all."""


def is_valid_color(value: Any) -> bool:
    return isinstance(value, str) and COLOR_PATTERN.fullmatch(value) is not None


def _is_valid_id(value: Any) -> bool:
    # bool is an int subclass; true/false in a file is not an id
    return isinstance(value, int) and not isinstance(value, bool)


def _collect_ids(data: Dict[str, Any], seen: Set[int]):
    """Gather the ids that will survive sanitization (first occurrence wins)."""
    if _is_valid_id(data.get("id")):
        seen.add(data["id"])
    children = data.get("children")
    if isinstance(children, list):
        for child in children:
            if isinstance(child, dict):
                _collect_ids(child, seen)


class Sanitizer:
    """Turns arbitrary parsed data into a well-formed Node tree."""

    def __init__(self, next_id: int = 1, default_color: str = DEFAULT_COLOR,
                 fallback_label: str = FALLBACK_LABEL,
                 max_label_length: int = MAX_LABEL_LENGTH):
        self.next_id = next_id
        self.default_color = default_color
        self.fallback_label = fallback_label
        self.max_label_length = max_label_length
        self.repairs = 0
        self._used: Set[int] = set()

    def sanitize(self, data: Any) -> Node:
        if not isinstance(data, dict):
            raise ImportValidationError(
                f"expected an object at the root, got {type(data).__name__}"
            )

        candidates: Set[int] = set()
        self._used = set()
        self.repairs = 0
        try:
            _collect_ids(data, candidates)
            if candidates:
                self.next_id = max(self.next_id, max(candidates) + 1)
            tree = self._sanitize_node(data)
        except RecursionError as exc:
            raise ImportValidationError("tree is nested too deeply") from exc
        if self.repairs:
            logger.debug("Repaired %d field(s) while sanitizing imported tree", self.repairs)
        return tree

    def _fresh_id(self) -> int:
        node_id = self.next_id
        self.next_id += 1
        return node_id

    def _sanitize_node(self, data: Dict[str, Any]) -> Node:
        raw_id = data.get("id")
        if _is_valid_id(raw_id) and raw_id not in self._used:
            node_id = raw_id
        else:
            node_id = self._fresh_id()
            self.repairs += 1
        self._used.add(node_id)

        label = data.get("label")
        if not isinstance(label, str):
            label = self.fallback_label
            self.repairs += 1
        elif len(label) > self.max_label_length:
            label = label[:self.max_label_length]
            self.repairs += 1

        color = data.get("color")
        if not is_valid_color(color):
            color = self.default_color
            self.repairs += 1

        children = []
        raw_children = data.get("children")
        if isinstance(raw_children, list):
            for child in raw_children:
                if isinstance(child, dict):
                    children.append(self._sanitize_node(child))
                else:
                    self.repairs += 1
        elif raw_children is not None:
            self.repairs += 1

        return Node(id=node_id, label=label, color=color, children=children)


def sanitize_tree(data: Any, next_id: int = 1, default_color: str = DEFAULT_COLOR,
                  fallback_label: str = FALLBACK_LABEL,
                  max_label_length: int = MAX_LABEL_LENGTH) -> Node:
    """Sanitize `data` into a tree; raises ImportValidationError on a bad root."""
    return Sanitizer(
        next_id=next_id,
        default_color=default_color,
        fallback_label=fallback_label,
        max_label_length=max_label_length,
    ).sanitize(data)
