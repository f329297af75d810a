from __future__ import annotations

import copy

import pytest
from flask_jwt_extended import create_access_token

from storefront import create_app
from storefront.extensions import db as _db


@pytest.fixture
def app():
    """Flask app on an in-memory SQLite database, schema created per test."""
    app = create_app("testing")
    with app.app_context():
        _db.create_all()
        yield app
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def db(app):
    return _db


def _auth_headers(app, identity: str, role: str) -> dict[str, str]:
    token = create_access_token(identity=identity, additional_claims={"role": role})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def admin_headers(app):
    return _auth_headers(app, "admin-1", "admin")


@pytest.fixture
def editor_headers(app):
    return _auth_headers(app, "editor-1", "editor")


# ---------------------------------------------------------------------------
# In-memory persistence collaborators
# ---------------------------------------------------------------------------


class MemoryDocumentStore:
    """Keyed store holding deep copies, so callers never share state with it."""

    def __init__(self, documents: dict | None = None):
        self.documents = {k: copy.deepcopy(v) for k, v in (documents or {}).items()}
        self.puts: list[str] = []

    def get(self, key):
        document = self.documents.get(key)
        return copy.deepcopy(document) if document is not None else None

    def put(self, key, document):
        self.documents[key] = copy.deepcopy(document)
        self.puts.append(key)


class FailingDocumentStore:
    def __init__(self, fail_get: bool = False, fail_put: bool = True):
        self.fail_get = fail_get
        self.fail_put = fail_put

    def get(self, key):
        if self.fail_get:
            raise ConnectionError("database unreachable")
        return None

    def put(self, key, document):
        if self.fail_put:
            raise ConnectionError("database unreachable")


@pytest.fixture
def memory_documents():
    return MemoryDocumentStore()


@pytest.fixture
def failing_documents():
    return FailingDocumentStore()
