from .config import AppConfig, DbConfig, QueueConfig
from .db.models import Message, MessageType, Status, UserRecord
from .db.store import RecordStore
from .queue.redis_streams import RedisStreamsChannel
from .users.coordinator import Health, Outcome, Result, UsersCoordinator

__all__ = [
    "AppConfig",
    "DbConfig",
    "Health",
    "Message",
    "MessageType",
    "Outcome",
    "QueueConfig",
    "RecordStore",
    "RedisStreamsChannel",
    "Result",
    "Status",
    "UserRecord",
    "UsersCoordinator",
]
