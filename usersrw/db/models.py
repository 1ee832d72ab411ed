from __future__ import annotations

import uuid
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Mapping, Optional


class Status(str, Enum):
    """
    Outcome of a RecordStore operation.

    This is the only vocabulary callers of the store branch on; backend
    exceptions never cross the store boundary.
    """
    CREATED = "created"
    ALREADY_EXISTS = "already_exists"
    BACKEND_ERROR = "backend_error"
    NOT_FOUND = "not_found"
    UPDATED = "updated"
    OK = "ok"
    DELETED = "deleted"


class MessageType(str, Enum):
    USER_CREATED = "USER_CREATED"
    NICKNAME_CHANGED = "NICKNAME_CHANGED"


def derive_user_id(email: str) -> str:
    """
    Deterministic user id for an email address.

    Name-based UUID (version 3, MD5) in the nil namespace, so the same email
    always produces the same id.
    """
    return str(uuid.uuid3(uuid.UUID(int=0), email))


@dataclass
class UserRecord:
    """
    A single row of the users table, named with the external field names.
    """
    userID: str = ""
    firstName: str = ""
    lastName: str = ""
    emailAddress: str = ""
    password: str = ""
    nickname: str = ""
    country: str = ""

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "UserRecord":
        """Build a record from external field names; unknown keys are ignored."""
        known = {f.name for f in fields(cls)}
        return cls(**{k: "" if v is None else str(v) for k, v in data.items() if k in known})

    def to_dict(self) -> dict[str, str]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass(frozen=True)
class Message:
    """An outbound user event."""
    type: MessageType
    userID: str
    # only populated for NICKNAME_CHANGED
    nickname: Optional[str] = None

    def to_payload(self) -> dict[str, str]:
        payload = {"type": self.type.value, "userID": self.userID}
        if self.nickname is not None:
            payload["nickname"] = self.nickname
        return payload
