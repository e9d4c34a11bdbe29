"""Shared test fixtures for toon-mcp."""

from __future__ import annotations

from typing import Any

import pytest
from fastapi.testclient import TestClient


@pytest.fixture
def simple_json() -> dict[str, Any]:
    """Flat object with mixed primitive types."""
    return {"name": "Alice", "age": 30, "active": True}


@pytest.fixture
def tabular_json() -> dict[str, Any]:
    """Uniform array of objects, the case TOON compresses best."""
    return {
        "users": [
            {"id": 1, "name": "Alice", "role": "admin"},
            {"id": 2, "name": "Bob", "role": "user"},
            {"id": 3, "name": "Charlie", "role": "user"},
        ]
    }


@pytest.fixture
def nested_json() -> dict[str, Any]:
    """Nested objects with arrays at several levels."""
    return {
        "company": {
            "name": "Acme Corp",
            "address": {"city": "Springfield", "zip": "12345"},
            "employees": [
                {"name": "John", "skills": ["python", "rust"]},
                {"name": "Jane", "skills": ["go"]},
            ],
        },
        "tags": ["a", "b", "c"],
        "score": -3.5,
        "missing": None,
    }


@pytest.fixture
def special_chars_json() -> dict[str, Any]:
    """Strings that need quoting or escaping."""
    return {
        "message": 'He said "hello"',
        "path": "C:\\Users\\test",
        "multiline": "line one\nline two",
        "unicode": "日本語 emoji: 🎉",
        "looks_numeric": "42",
        "looks_bool": "true",
        "padded": "  spaced  ",
        "empty": "",
        "dash": "- not a list item",
    }


@pytest.fixture
def client() -> TestClient:
    """HTTP test client for the REST API."""
    from toon_mcp.server import app

    return TestClient(app, raise_server_exceptions=False)
