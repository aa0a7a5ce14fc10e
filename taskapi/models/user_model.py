from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Optional

from bson import ObjectId
from pymongo.collection import Collection
from werkzeug.security import check_password_hash, generate_password_hash


@dataclass
class User:
    email: str
    password_hash: str
    name: Optional[str] = None
    created_at: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    id: Optional[ObjectId] = None

    def check_password(self, password: str) -> bool:
        return check_password_hash(self.password_hash, password)

    def to_dict(self) -> dict:
        # Never expose the hash.
        return {"id": str(self.id), "name": self.name, "email": self.email}

    @classmethod
    def from_document(cls, doc: dict) -> "User":
        return cls(
            id=doc["_id"],
            email=doc["email"],
            password_hash=doc["password_hash"],
            name=doc.get("name"),
            created_at=doc.get("created_at"),
        )


class UserStore:
    def __init__(self, collection: Collection):
        self.collection = collection

    def ensure_indexes(self) -> None:
        self.collection.create_index("email", unique=True)

    def find_by_email(self, email: str) -> Optional[User]:
        doc = self.collection.find_one({"email": email.lower()})
        return User.from_document(doc) if doc else None

    def register(self, email: str, password: str, name: Optional[str] = None) -> User:
        """Insert a new user; raises ``pymongo.errors.DuplicateKeyError`` when the email is taken."""
        user = User(email=email.lower(), password_hash=generate_password_hash(password), name=name)
        res = self.collection.insert_one(
            {
                "email": user.email,
                "password_hash": user.password_hash,
                "name": user.name,
                "created_at": user.created_at,
            }
        )
        user.id = res.inserted_id
        return user
