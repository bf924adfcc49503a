"""Cairo rendering and PNG export for Mindtree maps."""

import logging
import math
from typing import Optional, Tuple

import cairo

from mindtree.hittest import Viewport
from mindtree.layout import LayoutEngine, TreeLayout, MeasureFunc
from mindtree.model import Node, iter_nodes, DEFAULT_COLOR
from mindtree.textmetrics import CairoTextMeasurer, parse_font

logger = logging.getLogger(__name__)


def hex_to_rgb(color: str, fallback: str = DEFAULT_COLOR) -> Tuple[float, float, float]:
    """Parse '#rrggbb' into cairo's 0..1 channels."""
    try:
        value = color.lstrip('#')
        if len(value) != 6:
            raise ValueError(color)
        return (
            int(value[0:2], 16) / 255,
            int(value[2:4], 16) / 255,
            int(value[4:6], 16) / 255,
        )
    except (ValueError, AttributeError):
        if color == fallback:
            raise
        return hex_to_rgb(fallback)


class MindMapRenderer:
    """Draws a laid-out tree: connectors first, then node boxes."""

    COLORS = {
        'bg_primary': (1.0, 1.0, 1.0),
        'text': (1.0, 1.0, 1.0),
        'selection': (0.2, 0.2, 0.2),       # #333
    }

    CONNECTOR_WIDTH = 2
    SELECTION_WIDTH = 2

    def __init__(self, measure: Optional[MeasureFunc] = None, font: Optional[str] = None):
        self.measure = measure or CairoTextMeasurer()
        self.engine = LayoutEngine(self.measure, font)

    def layout(self, tree: Node) -> TreeLayout:
        return self.engine.compute(tree)

    def draw(self, cr, tree: Node, viewport: Viewport,
             selected_id: Optional[int] = None,
             layout: Optional[TreeLayout] = None) -> TreeLayout:
        """Paint the map onto `cr` using the viewport's transform.

        Returns the layout used, so callers can hit-test against exactly
        what was drawn.
        """
        layout = layout or self.layout(tree)

        cr.save()
        cr.set_source_rgb(*self.COLORS['bg_primary'])
        cr.paint()

        # Must stay the exact inverse of Viewport.screen_to_world
        cr.translate(viewport.width / 2 + viewport.pan_x, viewport.height / 2 + viewport.pan_y)
        cr.scale(viewport.zoom, viewport.zoom)

        self._draw_tree(cr, tree, layout, selected_id)
        cr.restore()
        return layout

    def export_png(self, tree: Node, filepath: str, scale: float = 2.0,
                   padding: float = 50, transparent: bool = False,
                   selected_id: Optional[int] = None) -> bool:
        """Export the whole map to a PNG image."""
        layout = self.layout(tree)
        min_x, min_y, max_x, max_y = layout.bounds(self.engine.BOX_HEIGHT)

        width = int(math.ceil((max_x - min_x + padding * 2) * scale))
        height = int(math.ceil((max_y - min_y + padding * 2) * scale))

        surface = cairo.ImageSurface(cairo.FORMAT_ARGB32, width, height)
        cr = cairo.Context(surface)

        cr.scale(scale, scale)
        cr.translate(-min_x + padding, -min_y + padding)

        if not transparent:
            cr.set_source_rgb(*self.COLORS['bg_primary'])
            cr.paint()

        self._draw_tree(cr, tree, layout, selected_id)

        surface.write_to_png(filepath)
        logger.info("Exported %d node(s) to %s (%dx%d)", len(layout.boxes), filepath, width, height)
        return True

    def _draw_tree(self, cr, tree: Node, layout: TreeLayout, selected_id: Optional[int]):
        self._draw_connections(cr, tree, layout)
        for node, _depth in iter_nodes(tree):
            self._draw_node(cr, node, layout, node.id == selected_id)

    def _draw_connections(self, cr, tree: Node, layout: TreeLayout):
        """Draw bezier connections, each in its child's color."""
        colors = {node.id: node.color for node, _depth in iter_nodes(tree)}
        cr.set_line_width(self.CONNECTOR_WIDTH)
        for conn in layout.connectors:
            cr.set_source_rgb(*hex_to_rgb(colors[conn.child_id]))
            cr.move_to(*conn.start)
            cr.curve_to(*conn.ctrl1, *conn.ctrl2, *conn.end)
            cr.stroke()

    def _draw_node(self, cr, node: Node, layout: TreeLayout, is_selected: bool):
        box = layout.get(node.id)
        if box is None:
            return
        h = self.engine.BOX_HEIGHT

        cr.save()
        self._draw_rounded_rect(cr, box.x, box.y - h / 2, box.width, h, h / 2)
        cr.set_source_rgb(*hex_to_rgb(node.color))
        if is_selected:
            cr.fill_preserve()
            cr.set_source_rgb(*self.COLORS['selection'])
            cr.set_line_width(self.SELECTION_WIDTH)
            cr.stroke()
        else:
            cr.fill()

        family, size, bold = parse_font(self.engine.font)
        cr.select_font_face(family, cairo.FONT_SLANT_NORMAL,
                            cairo.FONT_WEIGHT_BOLD if bold else cairo.FONT_WEIGHT_NORMAL)
        cr.set_font_size(size)
        extents = cr.text_extents(node.label)
        cr.set_source_rgb(*self.COLORS['text'])
        # Center the label in the box
        cr.move_to(box.x + box.width / 2 - extents.x_advance / 2,
                   box.y - extents.y_bearing - extents.height / 2)
        cr.show_text(node.label)
        cr.restore()

    def _draw_rounded_rect(self, cr, x: float, y: float, w: float, h: float, radius: float):
        """Draw a rounded rectangle path."""
        radius = min(radius, w / 2, h / 2)
        cr.new_path()
        cr.arc(x + w - radius, y + radius, radius, -math.pi / 2, 0)
        cr.arc(x + w - radius, y + h - radius, radius, 0, math.pi / 2)
        cr.arc(x + radius, y + h - radius, radius, math.pi / 2, math.pi)
        cr.arc(x + radius, y + radius, radius, math.pi, 3 * math.pi / 2)
        cr.close_path()
