import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import List, Optional

from bson import ObjectId
from pymongo import ASCENDING, DESCENDING
from pymongo.collection import Collection

from taskapi.utils.db import serialize_doc, to_object_id

logger = logging.getLogger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Task:
    title: str
    owner: Optional[ObjectId]
    description: Optional[str] = None
    created_at: datetime = field(default_factory=_utcnow)
    updated_at: datetime = field(default_factory=_utcnow)
    id: Optional[ObjectId] = None

    def owned_by(self, caller: ObjectId) -> bool:
        return self.owner == caller

    def to_document(self) -> dict:
        doc = {
            "owner": self.owner,
            "title": self.title,
            "description": self.description,
            "created_at": self.created_at,
            "updated_at": self.updated_at,
        }
        if self.id is not None:
            doc["_id"] = self.id
        return doc

    def to_dict(self) -> dict:
        return serialize_doc(self.to_document())

    @classmethod
    def from_document(cls, doc: dict) -> "Task":
        return cls(
            id=doc["_id"],
            owner=doc.get("owner"),
            title=doc.get("title", ""),
            description=doc.get("description"),
            created_at=doc.get("created_at"),
            updated_at=doc.get("updated_at"),
        )


class TaskStore:
    """Persistence for Task records in one Mongo collection.

    Driver and BSON encoding errors are not caught here; the route layer
    turns them into a server-error response.
    """

    def __init__(self, collection: Collection):
        self.collection = collection

    def ensure_indexes(self) -> None:
        self.collection.create_index([("owner", ASCENDING), ("created_at", DESCENDING)])

    def create(self, owner: ObjectId, title: str, description: Optional[str] = None) -> Task:
        task = Task(title=title, owner=owner, description=description)
        res = self.collection.insert_one(task.to_document())
        task.id = res.inserted_id
        logger.debug("Created task %s for owner %s", task.id, owner)
        return task

    def find_by_id(self, task_id) -> Optional[Task]:
        oid = to_object_id(task_id)
        if oid is None:
            return None
        doc = self.collection.find_one({"_id": oid})
        return Task.from_document(doc) if doc else None

    def find_by_owner(self, owner: ObjectId) -> List[Task]:
        cursor = self.collection.find({"owner": owner}).sort([("created_at", DESCENDING), ("_id", DESCENDING)])
        return [Task.from_document(d) for d in cursor]

    def save(self, task: Task) -> Task:
        """Write back the mutable fields of an existing task; owner is never rewritten."""
        task.updated_at = _utcnow()
        self.collection.update_one(
            {"_id": task.id},
            {"$set": {"title": task.title, "description": task.description, "updated_at": task.updated_at}},
        )
        return task

    def delete(self, task: Task) -> bool:
        res = self.collection.delete_one({"_id": task.id})
        return res.deleted_count == 1
