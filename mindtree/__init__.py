"""Mindtree - a mind-map editor core with layout, undo/redo and hit-testing."""

__version__ = "1.0.0"
__app_id__ = "io.github.mindtree"
