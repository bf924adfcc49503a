"""Hit-testing and the pan/zoom view transform."""

from typing import Optional, Tuple
from dataclasses import dataclass

from mindtree.layout import LayoutEngine, TreeLayout
from mindtree.model import Node

HIT_MARGIN = 10
MIN_ZOOM = 0.3
MAX_ZOOM = 3.0
ZOOM_STEP = 1.2


def find_node_at(tree: Node, layout: TreeLayout, x: float, y: float,
                 margin: float = HIT_MARGIN,
                 box_height: float = LayoutEngine.BOX_HEIGHT) -> Optional[Node]:
    """Return the first node (pre-order) whose box contains the world point.

    A node is tested before its children. The box is widened by `margin` on
    the left and right to make small targets easier to hit.
    """
    box = layout.get(tree.id)
    if box is not None:
        if (box.x - margin <= x <= box.right + margin
                and box.y - box_height / 2 <= y <= box.y + box_height / 2):
            return tree
    for child in tree.children:
        found = find_node_at(child, layout, x, y, margin, box_height)
        if found is not None:
            return found
    return None


@dataclass
class Viewport:
    """Pan/zoom state of a canvas of `width` x `height` pixels.

    The world origin sits at the canvas center shifted by the pan offset;
    rendering translates by (center + pan) and then scales by `zoom`.
    """
    width: float = 0.0
    height: float = 0.0
    pan_x: float = 0.0
    pan_y: float = 0.0
    zoom: float = 1.0

    def screen_to_world(self, sx: float, sy: float) -> Tuple[float, float]:
        return (
            (sx - self.pan_x - self.width / 2) / self.zoom,
            (sy - self.pan_y - self.height / 2) / self.zoom,
        )

    def world_to_screen(self, wx: float, wy: float) -> Tuple[float, float]:
        return (
            wx * self.zoom + self.width / 2 + self.pan_x,
            wy * self.zoom + self.height / 2 + self.pan_y,
        )

    def node_at(self, tree: Node, layout: TreeLayout, sx: float, sy: float) -> Optional[Node]:
        """Find the node under a screen point."""
        wx, wy = self.screen_to_world(sx, sy)
        return find_node_at(tree, layout, wx, wy)

    def resize(self, width: float, height: float):
        self.width = width
        self.height = height

    def pan_by(self, dx: float, dy: float):
        self.pan_x += dx
        self.pan_y += dy

    def set_zoom(self, zoom: float):
        self.zoom = max(MIN_ZOOM, min(MAX_ZOOM, zoom))

    def zoom_in(self):
        self.set_zoom(self.zoom * ZOOM_STEP)

    def zoom_out(self):
        self.set_zoom(self.zoom / ZOOM_STEP)

    def zoom_by_wheel(self, dy: float):
        """Scroll down zooms out, scroll up zooms in."""
        self.set_zoom(self.zoom * (0.9 if dy > 0 else 1.1))

    def reset(self):
        """Back to 100% with no pan."""
        self.zoom = 1.0
        self.pan_x = 0.0
        self.pan_y = 0.0
