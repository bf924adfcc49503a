"""
Tests for hit-testing and the viewport transform.

Sample layout (see test_layout): root box x 0..73 at y 0, Ideas 103..163 at
y -20, First 193..253 at y -40, Second 193..259 at y 0, Tasks 103..163 at y 40.
"""

import pytest

from mindtree.hittest import Viewport, find_node_at, MIN_ZOOM, MAX_ZOOM
from mindtree.layout import TreeLayout, LayoutBox
from mindtree.model import Node


@pytest.fixture
def layout(engine, sample_tree):
    return engine.compute(sample_tree)


@pytest.mark.unit
class TestFindNodeAt:

    @pytest.mark.parametrize("point,expected", [
        ((10, 0), 1),
        ((150, -20), 2),
        ((200, -40), 4),
        ((255, 5), 5),
        ((110, 45), 3),
    ])
    def test_hits(self, sample_tree, layout, point, expected):
        assert find_node_at(sample_tree, layout, *point).id == expected

    def test_margin_extends_horizontally(self, sample_tree, layout):
        assert find_node_at(sample_tree, layout, -10, 0).id == 1
        assert find_node_at(sample_tree, layout, 83, 0).id == 1
        assert find_node_at(sample_tree, layout, -11, 0) is None

    def test_vertical_extent_is_box_height(self, sample_tree, layout):
        assert find_node_at(sample_tree, layout, 10, 13).id == 1
        assert find_node_at(sample_tree, layout, 10, 14) is None

    def test_gap_between_nodes(self, sample_tree, layout):
        assert find_node_at(sample_tree, layout, 200, -20) is None
        assert find_node_at(sample_tree, layout, 88, 0) is None

    def test_parent_checked_before_children(self):
        tree = Node(id=1, label="r", children=[Node(id=2, label="c")])
        overlapping = TreeLayout(boxes={
            1: LayoutBox(x=0, y=0, width=100, total_height=30, depth=0),
            2: LayoutBox(x=50, y=0, width=100, total_height=30, depth=1),
        })
        assert find_node_at(tree, overlapping, 60, 0).id == 1
        assert find_node_at(tree, overlapping, 140, 0).id == 2


@pytest.mark.unit
@pytest.mark.critical
class TestViewport:

    def test_inverse_transform(self):
        view = Viewport(width=800, height=600, pan_x=20, pan_y=-10, zoom=2)
        assert view.screen_to_world(816, 210) == (198, -40)
        assert view.world_to_screen(198, -40) == (816, 210)

    def test_node_at_screen_point(self, sample_tree, layout):
        view = Viewport(width=800, height=600, pan_x=20, pan_y=-10, zoom=2)
        assert view.node_at(sample_tree, layout, 816, 210).id == 4
        assert view.node_at(sample_tree, layout, 0, 0) is None

    def test_identity_view_centers_origin(self):
        view = Viewport(width=400, height=300)
        assert view.screen_to_world(200, 150) == (0, 0)

    def test_zoom_is_clamped(self):
        view = Viewport()
        for _ in range(20):
            view.zoom_in()
        assert view.zoom == MAX_ZOOM
        for _ in range(40):
            view.zoom_out()
        assert view.zoom == MIN_ZOOM

    def test_wheel_zoom(self):
        view = Viewport()
        view.zoom_by_wheel(5)
        assert view.zoom == pytest.approx(0.9)
        view.zoom_by_wheel(-5)
        assert view.zoom == pytest.approx(0.99)

    def test_pan_resize_reset(self):
        view = Viewport(zoom=2)
        view.pan_by(5, 7)
        view.pan_by(1, 1)
        view.resize(640, 480)
        assert (view.pan_x, view.pan_y, view.width, view.height) == (6, 8, 640, 480)
        view.reset()
        assert (view.pan_x, view.pan_y, view.zoom) == (0, 0, 1)
