from .helpers import build_set, build_where, is_unique_violation
from .models import Message, MessageType, Status, UserRecord, derive_user_id
from .session import DbSession
from .store import RecordStore

__all__ = [
    "DbSession",
    "Message",
    "MessageType",
    "RecordStore",
    "Status",
    "UserRecord",
    "build_set",
    "build_where",
    "derive_user_id",
    "is_unique_violation",
]
