"""Tree model for Mindtree: the node hierarchy and pure tree queries."""

from typing import Optional, List, Iterator, Tuple, Dict, Any
from dataclasses import dataclass, field


DEFAULT_COLOR = "#4a90d9"
DEFAULT_ROOT_LABEL = "Mindmap"
NEW_NODE_LABEL = "new node"

# Swatches offered by the color picker
PALETTE = [
    "#e91e63", "#9c27b0", "#673ab7", "#3f51b5", "#2196f3", "#00bcd4",
    "#009688", "#4caf50", "#8bc34a", "#ff9800", "#ff5722", "#795548",
]


@dataclass
class Node:
    """Represents a node in the mindmap.

    Parents are never stored; use `find_parent` to look one up.
    """
    id: int = 0
    label: str = NEW_NODE_LABEL
    color: str = DEFAULT_COLOR
    children: List["Node"] = field(default_factory=list)


def default_tree() -> Node:
    """Tree a fresh session starts with."""
    return Node(id=1, label=DEFAULT_ROOT_LABEL, color=DEFAULT_COLOR)


def find_node(node: Node, node_id: int) -> Optional[Node]:
    """Find the node with the given id (pre-order, first match)."""
    if node.id == node_id:
        return node
    for child in node.children:
        found = find_node(child, node_id)
        if found is not None:
            return found
    return None


def find_parent(node: Node, node_id: int, parent: Optional[Node] = None) -> Optional[Node]:
    """Find the immediate parent of `node_id`.

    Returns None both for the root and for unknown ids; compare against the
    root's id to tell them apart.
    """
    if node.id == node_id:
        return parent
    for child in node.children:
        found = find_parent(child, node_id, node)
        if found is not None:
            return found
    return None


def max_id(node: Node) -> int:
    """Largest id in the subtree."""
    result = node.id
    for child in node.children:
        result = max(result, max_id(child))
    return result


def max_depth(node: Node, depth: int = 0) -> int:
    """Depth of the deepest leaf, counting the root as 0."""
    result = depth
    for child in node.children:
        result = max(result, max_depth(child, depth + 1))
    return result


def iter_nodes(node: Node, depth: int = 0) -> Iterator[Tuple[Node, int]]:
    """Yield (node, depth) pairs in pre-order."""
    yield node, depth
    for child in node.children:
        yield from iter_nodes(child, depth + 1)


def node_to_dict(node: Node) -> Dict[str, Any]:
    return {
        "id": node.id,
        "label": node.label,
        "color": node.color,
        "children": [node_to_dict(c) for c in node.children],
    }


def node_from_dict(data: Dict[str, Any]) -> Node:
    """Build a Node tree from an already well-formed dict.

    No repair is done here; external data goes through
    `mindtree.sanitize.sanitize_tree` first.
    """
    return Node(
        id=data["id"],
        label=data["label"],
        color=data["color"],
        children=[node_from_dict(c) for c in data.get("children", [])],
    )


def outline(node: Node, selected_id: Optional[int] = None, indent: str = "  ") -> List[str]:
    """Render the tree as indented text lines, marking the selected node."""
    lines = []
    for current, depth in iter_nodes(node):
        marker = "*" if current.id == selected_id else "-"
        lines.append(f"{indent * depth}{marker} {current.label} [{current.color}] #{current.id}")
    return lines
