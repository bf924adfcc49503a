"""Left-to-right tree layout for Mindtree.

Geometry is kept in a side table keyed by node id (`TreeLayout.boxes`); nodes
themselves never carry layout state. Every pass builds a new table.
"""

from typing import Callable, Dict, List, Optional, Tuple
from dataclasses import dataclass, field

from mindtree.model import Node, iter_nodes, max_depth

MeasureFunc = Callable[[str, str], float]
Point = Tuple[float, float]


@dataclass
class LayoutBox:
    """Geometry of one node in world space.

    `x` is the left edge and `y` the vertical center of the node; the node's
    subtree spans `total_height` around `y`.
    """
    x: float
    y: float
    width: float
    total_height: float
    depth: int

    @property
    def right(self) -> float:
        return self.x + self.width


@dataclass
class Connector:
    """Bezier curve from a parent's right edge to a child's left edge."""
    parent_id: int
    child_id: int
    start: Point
    ctrl1: Point
    ctrl2: Point
    end: Point


@dataclass
class TreeLayout:
    """Result of one layout pass."""
    boxes: Dict[int, LayoutBox] = field(default_factory=dict)
    depth_offsets: List[float] = field(default_factory=list)
    total_height: float = 0.0
    connectors: List[Connector] = field(default_factory=list)

    def get(self, node_id: int) -> Optional[LayoutBox]:
        return self.boxes.get(node_id)

    def bounds(self, box_height: float) -> Tuple[float, float, float, float]:
        """Return (min_x, min_y, max_x, max_y) of the drawn node boxes."""
        if not self.boxes:
            return 0.0, 0.0, 0.0, 0.0
        min_x = min(b.x for b in self.boxes.values())
        max_x = max(b.right for b in self.boxes.values())
        min_y = min(b.y for b in self.boxes.values()) - box_height / 2
        max_y = max(b.y for b in self.boxes.values()) + box_height / 2
        return min_x, min_y, max_x, max_y


class LayoutEngine:
    """Computes per-node geometry from a tree and a text measure function."""

    # Layout constants
    FONT = "12px sans-serif"
    NODE_PADDING = 24
    NODE_MIN_WIDTH = 60
    NODE_HEIGHT = 30
    BOX_HEIGHT = 26
    HORIZONTAL_GAP = 30
    VERTICAL_GAP = 10

    def __init__(self, measure: MeasureFunc, font: Optional[str] = None):
        self.measure = measure
        self.font = font or self.FONT

    def node_width(self, label: str) -> float:
        return max(self.NODE_MIN_WIDTH, self.measure(label, self.font) + self.NODE_PADDING)

    def compute(self, tree: Node, y_offset: Optional[float] = None) -> TreeLayout:
        """Lay out `tree`.

        With no `y_offset` the tree is centered vertically on y = 0.
        """
        widths = {node.id: self.node_width(node.label) for node, _depth in iter_nodes(tree)}
        offsets = self._depth_offsets(tree, widths)
        heights: Dict[int, float] = {}
        total = self._subtree_height(tree, heights)
        if y_offset is None:
            y_offset = -total / 2

        layout = TreeLayout(depth_offsets=offsets, total_height=total)
        self._place(tree, 0, y_offset, widths, heights, layout)
        layout.connectors = self._connectors(tree, layout)
        return layout

    def _depth_offsets(self, tree: Node, widths: Dict[int, float]) -> List[float]:
        deepest = max_depth(tree)
        widest = [0.0] * (deepest + 1)
        for node, depth in iter_nodes(tree):
            widest[depth] = max(widest[depth], widths[node.id])

        offsets = [0.0]
        for depth in range(deepest):
            offsets.append(offsets[depth] + widest[depth] + self.HORIZONTAL_GAP)
        return offsets

    def _subtree_height(self, node: Node, heights: Dict[int, float]) -> float:
        if not node.children:
            height = self.NODE_HEIGHT
        else:
            stacked = sum(self._subtree_height(c, heights) for c in node.children)
            stacked += self.VERTICAL_GAP * (len(node.children) - 1)
            height = max(self.NODE_HEIGHT, stacked)
        heights[node.id] = height
        return height

    def _place(self, node: Node, depth: int, top: float, widths: Dict[int, float],
               heights: Dict[int, float], layout: TreeLayout):
        child_top = top
        for child in node.children:
            self._place(child, depth + 1, child_top, widths, heights, layout)
            child_top += heights[child.id] + self.VERTICAL_GAP

        total = heights[node.id]
        layout.boxes[node.id] = LayoutBox(
            x=layout.depth_offsets[depth],
            y=top + total / 2,
            width=widths[node.id],
            total_height=total,
            depth=depth,
        )

    def _connectors(self, tree: Node, layout: TreeLayout) -> List[Connector]:
        result = []
        for node, _depth in iter_nodes(tree):
            parent = layout.boxes[node.id]
            for child in node.children:
                box = layout.boxes[child.id]
                mid_x = (parent.right + box.x) / 2
                result.append(Connector(
                    parent_id=node.id,
                    child_id=child.id,
                    start=(parent.right, parent.y),
                    ctrl1=(mid_x, parent.y),
                    ctrl2=(mid_x, box.y),
                    end=(box.x, box.y),
                ))
        return result


def layout_tree(tree: Node, measure: MeasureFunc, font: Optional[str] = None,
                y_offset: Optional[float] = None) -> TreeLayout:
    """Convenience wrapper around `LayoutEngine.compute`."""
    return LayoutEngine(measure, font).compute(tree, y_offset)
