"""Shared fixtures for outline tests."""

import pytest

from outline.lib.config import OutlineConfig, StatusLabel
from outline.session import Session

TODO_DONE = [StatusLabel("TODO"), StatusLabel("DONE", True)]


@pytest.fixture
def make_session():
    """Factory: make_session(items, status_labels=..., **config_fields)."""

    def factory(items=None, status_labels=None, **fields):
        labels = TODO_DONE if status_labels is None else status_labels
        config = OutlineConfig(status_labels=list(labels), **fields)
        return Session(config, items)

    return factory


@pytest.fixture
def family(make_session):
    """P with children A (TODO) and B (DONE), plus a sibling root Q."""
    return make_session([
        {"id": "P", "text": "Plan trip", "status": "TODO", "children": [
            {"id": "A", "text": "Book hotel", "status": "TODO"},
            {"id": "B", "text": "Buy tickets", "status": "DONE"},
        ]},
        {"id": "Q", "text": "Groceries", "status": "TODO"},
    ])
