# tests/conftest.py

from __future__ import annotations

import mongomock
import pytest
from bson import ObjectId

from taskapi.app import close_app, create_app
from taskapi.config import TestingConfig
from taskapi.models.task_model import TaskStore
from taskapi.utils.auth import issue_token
from taskapi.utils.db import TASK_STORE_KEY


@pytest.fixture()
def mongo_client() -> mongomock.MongoClient:
    return mongomock.MongoClient()


@pytest.fixture()
def app(mongo_client):
    """App wired to an in-memory mongomock client; no real server needed."""
    app = create_app(TestingConfig, mongo_client=mongo_client)
    yield app
    close_app(app)


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def task_store(app) -> TaskStore:
    return app.extensions[TASK_STORE_KEY]


@pytest.fixture()
def make_headers(app):
    """Return a function that builds Authorization headers for a user id."""

    def _make(user_id) -> dict:
        with app.app_context():
            token = issue_token(user_id)
        return {"Authorization": f"Bearer {token}"}

    return _make


@pytest.fixture()
def alice() -> ObjectId:
    return ObjectId()


@pytest.fixture()
def bob() -> ObjectId:
    return ObjectId()


@pytest.fixture()
def alice_headers(make_headers, alice) -> dict:
    return make_headers(alice)


@pytest.fixture()
def bob_headers(make_headers, bob) -> dict:
    return make_headers(bob)
