from __future__ import annotations

from ..config import QueueConfig
from .base import NotificationChannel
from .redis_streams import RedisStreamsChannel

__all__ = [
    "NotificationChannel",
    "QueueConfig",
    "RedisStreamsChannel",
]
