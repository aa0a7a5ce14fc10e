"""Request body schemas, checked before any domain object is built."""

from dataclasses import dataclass
from typing import Any, Optional

MIN_PASSWORD_LENGTH = 8


class PayloadError(ValueError):
    """The request body does not have the expected shape."""


def _require_object(payload: Any) -> dict:
    if payload is None:
        return {}
    if not isinstance(payload, dict):
        raise PayloadError("Request body must be a JSON object")
    return payload


def _optional_str(payload: dict, field: str) -> Optional[str]:
    value = payload.get(field)
    if value is None:
        return None
    if not isinstance(value, str):
        raise PayloadError(f"{field} must be a string")
    return value


@dataclass
class TaskCreate:
    title: str
    description: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TaskCreate":
        data = _require_object(payload)
        title = (_optional_str(data, "title") or "").strip()
        if not title:
            raise PayloadError("Title is required")
        return cls(title=title, description=_optional_str(data, "description"))


@dataclass
class TaskUpdate:
    title: Optional[str] = None
    description: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any) -> "TaskUpdate":
        data = _require_object(payload)
        title = _optional_str(data, "title")
        return cls(
            title=title.strip() if title is not None else None,
            description=_optional_str(data, "description"),
        )

    def apply(self, task) -> None:
        # Empty or absent values keep what is stored.
        if self.title:
            task.title = self.title
        if self.description:
            task.description = self.description


@dataclass
class Credentials:
    email: str
    password: str
    name: Optional[str] = None

    @classmethod
    def from_payload(cls, payload: Any, registering: bool = False) -> "Credentials":
        data = _require_object(payload)
        email = (_optional_str(data, "email") or "").strip().lower()
        password = _optional_str(data, "password") or ""
        if not email or "@" not in email:
            raise PayloadError("A valid email is required")
        if not password:
            raise PayloadError("Password is required")
        if registering and len(password) < MIN_PASSWORD_LENGTH:
            raise PayloadError(f"Password must be at least {MIN_PASSWORD_LENGTH} characters")
        name = _optional_str(data, "name")
        return cls(email=email, password=password, name=name.strip() if name else None)
