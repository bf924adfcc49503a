"""
Mindtree Test Suite

Test Categories:
- Model: tree queries
- Session: mutations, selection, inline editing, import/restore
- Undo: snapshot history
- Layout / Hit-testing: geometry and coordinate mapping
- Storage / Render / CLI: adapters around the core

Run all tests:
    pytest

Run with markers:
    pytest -m critical
    pytest -m "unit and not integration"
"""
