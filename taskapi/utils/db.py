"""MongoDB connection lifecycle and document helpers.

The connection is built explicitly by the app factory and handed to the
stores; nothing here is a process-wide singleton.
"""

from datetime import datetime, timezone
from typing import Any, Optional

from bson import ObjectId
from bson.errors import BSONError, InvalidId
from flask import Flask, current_app
from pymongo import MongoClient
from pymongo.database import Database
from pymongo.errors import PyMongoError

EXTENSION_KEY = "taskapi.mongo"
TASK_STORE_KEY = "taskapi.tasks"
USER_STORE_KEY = "taskapi.users"

# Driver failures plus documents the BSON encoder refuses (bad surrogates, oversize).
STORE_ERRORS = (PyMongoError, BSONError, UnicodeEncodeError)


class MongoConnection:
    """Owns one ``MongoClient`` and the application database on it."""

    def __init__(self, uri: str, db_name: str, timeout_ms: int = 2000, client: Optional[MongoClient] = None):
        self.uri = uri
        self.db_name = db_name
        self.timeout_ms = timeout_ms
        self._client = client
        self._db: Optional[Database] = None

    def connect(self) -> Database:
        if self._client is None:
            # MongoClient connects lazily; the first operation surfaces
            # server-selection errors.
            self._client = MongoClient(self.uri, serverSelectionTimeoutMS=self.timeout_ms)
        self._db = self._client[self.db_name]
        return self._db

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
        self._client = None
        self._db = None

    @property
    def database(self) -> Database:
        if self._db is None:
            raise RuntimeError("MongoConnection.connect() has not been called")
        return self._db

    @property
    def connected(self) -> bool:
        return self._db is not None


def init_app(app: Flask, connection: MongoConnection) -> Database:
    """Connect and register ``connection`` on ``app``."""
    db = connection.connect()
    app.extensions[EXTENSION_KEY] = connection
    app.logger.info("Using MongoDB database %r", connection.db_name)
    return db


def get_db() -> Database:
    return current_app.extensions[EXTENSION_KEY].database


def get_task_store():
    return current_app.extensions[TASK_STORE_KEY]


def get_user_store():
    return current_app.extensions[USER_STORE_KEY]


def to_object_id(value: Any) -> Optional[ObjectId]:
    """Parse ``value`` into an ObjectId, or None when it is not one."""
    if isinstance(value, ObjectId):
        return value
    if not isinstance(value, str):
        return None
    try:
        return ObjectId(value.strip())
    except (InvalidId, TypeError):
        return None


def serialize_value(value: Any) -> Any:
    if isinstance(value, ObjectId):
        return str(value)
    if isinstance(value, datetime):
        # BSON dates are naive UTC with millisecond precision.
        if value.tzinfo is None:
            value = value.replace(tzinfo=timezone.utc)
        return value.astimezone(timezone.utc).isoformat(timespec="milliseconds")
    return value


def serialize_doc(doc: Optional[dict]) -> Optional[dict]:
    """Make a raw Mongo document JSON-friendly (``_id`` becomes ``id``)."""
    if doc is None:
        return None
    out = {}
    for key, value in doc.items():
        out["id" if key == "_id" else key] = serialize_value(value)
    return out
