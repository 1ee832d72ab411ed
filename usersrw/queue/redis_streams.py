from __future__ import annotations

import json
import logging

from redis import Redis
from redis.exceptions import RedisError

from ..config import QueueConfig
from ..db.models import Message
from ..errors import QueueError
from ..metrics.registry import NOTIFICATIONS_TOTAL

logger = logging.getLogger(__name__)


class RedisStreamsChannel:
    """
    Publishes user events to a Redis stream.

    Each message is one stream entry with a single ``data`` field holding the
    JSON payload. Delivery is best-effort: a failed XADD is logged and counted
    but never raised to the caller, and nothing is retried.

    Usage:
        channel = RedisStreamsChannel(Redis.from_url(url), QueueConfig(url=url))
        channel.enqueue(Message(MessageType.USER_CREATED, user_id))
    """

    def __init__(self, redis: Redis, config: QueueConfig) -> None:
        self.redis = redis
        self.config = config

    @classmethod
    def from_config(cls, config: QueueConfig) -> "RedisStreamsChannel":
        return cls(Redis.from_url(config.url), config)

    def publish(self, message: Message) -> str:
        """
        Append the message to the stream and return its entry id.

        Raises:
            QueueError: If Redis rejects the write
        """
        fields = {"data": json.dumps(message.to_payload())}
        try:
            if self.config.maxlen is not None:
                entry_id = self.redis.xadd(
                    self.config.stream_key, fields, maxlen=self.config.maxlen, approximate=True
                )
            else:
                entry_id = self.redis.xadd(self.config.stream_key, fields)
        except RedisError as exc:
            raise QueueError(f"failed to add message to {self.config.stream_key}: {exc}") from exc

        return entry_id.decode() if isinstance(entry_id, bytes) else str(entry_id)

    def enqueue(self, message: Message) -> None:
        """Publish without raising. Use publish() when the entry id is needed."""
        try:
            entry_id = self.publish(message)
        except QueueError as exc:
            NOTIFICATIONS_TOTAL.labels(type=message.type.value, status="error").inc()
            logger.error("could not enqueue %s for user %s: %s", message.type.value, message.userID, exc)
            return

        NOTIFICATIONS_TOTAL.labels(type=message.type.value, status="success").inc()
        logger.info("added %s message %s for user %s to queue", message.type.value, entry_id, message.userID)

    def is_writable(self) -> bool:
        try:
            return bool(self.redis.ping())
        except RedisError as exc:
            logger.error("message queue is not reachable: %s", exc)
            return False
