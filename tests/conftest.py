"""
Pytest configuration and fixtures for Mindtree testing.

This module provides:
- Fresh editor sessions and small prebuilt trees
- A deterministic text measure (no font backend needed)
- An isolated data directory for storage tests
"""

import pytest

from mindtree.layout import LayoutEngine
from mindtree.model import Node
from mindtree.session import EditorSession


def pytest_configure(config):
    config.addinivalue_line("markers", "unit: fast tests of a single component")
    config.addinivalue_line("markers", "integration: tests touching files or cairo")
    config.addinivalue_line("markers", "critical: core invariants that must never regress")


# ============================================================
# MEASUREMENT FIXTURES
# ============================================================

CHAR_WIDTH = 7


def fixed_measure(text, font):
    """Every character is CHAR_WIDTH pixels wide."""
    return len(text) * CHAR_WIDTH


@pytest.fixture
def measure():
    return fixed_measure


@pytest.fixture
def engine(measure):
    return LayoutEngine(measure)


# ============================================================
# TREE / SESSION FIXTURES
# ============================================================

@pytest.fixture
def session():
    """A fresh session: single root 'Mindmap' with id 1."""
    return EditorSession()


@pytest.fixture
def sample_tree():
    """
    Build a small three-level tree:

        1 Mindmap
        ├── 2 Ideas
        │   ├── 4 First
        │   └── 5 Second
        └── 3 Tasks
    """
    return Node(id=1, label="Mindmap", color="#4a90d9", children=[
        Node(id=2, label="Ideas", color="#e91e63", children=[
            Node(id=4, label="First", color="#e91e63"),
            Node(id=5, label="Second", color="#e91e63"),
        ]),
        Node(id=3, label="Tasks", color="#009688"),
    ])


@pytest.fixture
def sample_session(sample_tree):
    return EditorSession(sample_tree, next_id=6)


# ============================================================
# STORAGE FIXTURES
# ============================================================

@pytest.fixture
def data_dir(tmp_path, monkeypatch):
    """Point the data directory at a temporary folder."""
    target = tmp_path / "mindtree-data"
    monkeypatch.setenv("MINDTREE_DATA_DIR", str(target))
    return target
