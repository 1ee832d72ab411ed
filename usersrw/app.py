from __future__ import annotations

import logging

from .config import AppConfig, configure_logging
from .db.store import RecordStore
from .queue.redis_streams import RedisStreamsChannel
from .users.coordinator import UsersCoordinator

logger = logging.getLogger(__name__)


def build_coordinator(config: AppConfig) -> UsersCoordinator:
    """
    Open the database and queue once and wire them into a coordinator.

    Schema creation failures propagate; the service should not start without
    its table.
    """
    store = RecordStore.from_config(config.db)
    store.ensure_schema()
    channel = RedisStreamsChannel.from_config(config.queue)
    logger.info("users store ready on table %s, events to stream %s", store.table, config.queue.stream_key)
    return UsersCoordinator(store, channel)


def bootstrap(config: AppConfig | None = None) -> UsersCoordinator:
    config = config or AppConfig.from_env()
    configure_logging(config.log_level)
    return build_coordinator(config)
