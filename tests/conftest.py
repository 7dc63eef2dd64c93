"""Shared fixtures and payload factories."""

from __future__ import annotations

import io
import json
import urllib.error
from typing import Any
from unittest.mock import MagicMock

import pytest

from cmsdesk.api.client import ApiClient
from cmsdesk.session import Session, SessionStore

BASE_URL = "http://cms.test/api"
TIMESTAMP = "2024-03-01T10:00:00.000Z"


def mock_response(payload: Any = None, raw: bytes | None = None) -> MagicMock:
    """A urlopen context-manager response returning ``payload`` as JSON."""
    response = MagicMock()
    if raw is None:
        raw = json.dumps(payload).encode() if payload is not None else b""
    response.read.return_value = raw
    response.__enter__ = lambda s: s
    response.__exit__ = MagicMock(return_value=False)
    return response


def http_error(code: int, payload: Any = None, url: str = BASE_URL) -> urllib.error.HTTPError:
    body = json.dumps(payload).encode() if payload is not None else b""
    return urllib.error.HTTPError(url, code, "error", {}, io.BytesIO(body))


def user_payload(user_id: int = 1, **overrides: Any) -> dict[str, Any]:
    data = {
        "id": user_id,
        "name": f"User {user_id}",
        "email": f"user{user_id}@example.com",
        "role": "admin",
        "createdAt": TIMESTAMP,
        "updatedAt": TIMESTAMP,
    }
    data.update(overrides)
    return data


def content_payload(content_id: int = 1, **overrides: Any) -> dict[str, Any]:
    data = {
        "id": content_id,
        "title": f"Content {content_id}",
        "description": "<p>Body</p>",
        "categoryId": 10,
        "subcategoryId": 100,
        "category": {"id": 10, "name": "Guides"},
        "subcategory": {"id": 100, "name": "Setup"},
        "tags": [],
        "status": "draft",
        "priority": 50,
        "authorId": 1,
        "createdAt": TIMESTAMP,
        "updatedAt": TIMESTAMP,
    }
    data.update(overrides)
    return data


def project_payload(project_id: int = 1, **overrides: Any) -> dict[str, Any]:
    data = {
        "id": project_id,
        "title": f"Project {project_id}",
        "description": "Migrate the docs",
        "target": "Q3",
        "priority": 10,
        "statusId": 1,
        "areaId": 2,
        "authorId": 1,
        "createdAt": TIMESTAMP,
        "updatedAt": TIMESTAMP,
    }
    data.update(overrides)
    return data


def classification_payload(item_id: int, name: str, **overrides: Any) -> dict[str, Any]:
    data = {"id": item_id, "name": name, "isActive": True, "priority": 0}
    data.update(overrides)
    return data


@pytest.fixture
def session() -> Session:
    """In-memory session with nothing stored."""
    return Session(SessionStore())


@pytest.fixture
def api(session: Session) -> ApiClient:
    return ApiClient(BASE_URL, session)
