"""Pytest fixtures for Dataview tests."""

import pytest

from vault_query.dataview.types import Date, Duration, Link


@pytest.fixture
def note_page():
    """A page record shaped like the indexer's output."""
    return {
        "file": {
            "name": "Test Note",
            "path": "test/Test Note.md",
            "folder": "test",
            "ext": ".md",
            "link": Link("test/Test Note", "Test Note"),
            "ctime": Date(2026, 1, 1),
            "mtime": Date(2026, 1, 10, 9, 30),
            "size": 120,
            "tags": ["dev", "project", "project/active"],
            "etags": ["project/active", "dev"],
            "outlinks": [Link("Other"), Link("people/Ada", "Ada")],
            "inlinks": [],
            "tasks": [
                {"text": "Task 1", "completed": False, "status": " ", "line": 5, "tags": []},
                {"text": "Task 2", "completed": True, "status": "x", "line": 6, "tags": []},
            ],
            "lists": [],
            "day": None,
            "frontmatter": {"status": "active", "priority": 1},
        },
        "status": "active",
        "priority": 1,
        "due": Date(2026, 1, 15),
        "estimate": Duration(hours=3),
        "owner": Link("people/Ada", "Ada"),
        "aliases": ["TN", "Test"],
        "meta": {"reviewed": True, "score": 7},
    }


@pytest.fixture
def current_page():
    """The page a query is embedded in, for `this` references."""
    return {
        "file": {"name": "Dashboard", "path": "Dashboard.md", "link": Link("Dashboard")},
        "status": "active",
        "threshold": 5,
    }
