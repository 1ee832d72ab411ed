from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from sqlalchemy.engine import URL, make_url

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_TABLE = "Users"
DEFAULT_DRIVER = "mysql+pymysql"
DEFAULT_STREAM_KEY = "users-events"


@dataclass
class DbConfig:
    """
    Connection settings for the users database.

    ``dsn`` is ``host[:port]/schema`` and ``credentials`` is ``user:pass``
    (split on the first colon, so passwords may contain any character).
    A ``dsn`` that already carries a scheme (``sqlite:///users.db``) is used
    verbatim and ``credentials`` is ignored.
    """
    dsn: str
    credentials: str = ""
    table: str = DEFAULT_TABLE
    driver: str = DEFAULT_DRIVER

    def __post_init__(self) -> None:
        if not self.dsn:
            raise ConfigError("SQL connection string not set")
        if "://" in self.dsn:
            return
        if not self.credentials:
            raise ConfigError("SQL username and password not set")
        if ":" not in self.credentials:
            raise ConfigError("SQL credentials should be in 'user:pass' format")
        self._split_dsn()

    def _split_dsn(self) -> tuple[str, Optional[int], Optional[str]]:
        address, _, database = self.dsn.partition("/")
        host, _, raw_port = address.partition(":")
        if not host:
            raise ConfigError(f"SQL DSN {self.dsn!r} has no host")
        try:
            port = int(raw_port) if raw_port else None
        except ValueError as exc:
            raise ConfigError(f"SQL DSN port must be an integer, got {raw_port!r}") from exc
        return host, port, database or None

    @property
    def url(self) -> URL:
        if "://" in self.dsn:
            return make_url(self.dsn)
        username, _, password = self.credentials.partition(":")
        host, port, database = self._split_dsn()
        return URL.create(
            self.driver,
            username=username,
            password=password,
            host=host,
            port=port,
            database=database,
        )


@dataclass
class QueueConfig:
    url: str
    stream_key: str = DEFAULT_STREAM_KEY
    # Approximate cap on stream length; None keeps every entry.
    maxlen: Optional[int] = None

    def __post_init__(self) -> None:
        if not self.url:
            raise ConfigError("queue url not set")
        if not self.stream_key:
            raise ConfigError("stream_key cannot be empty")
        if self.maxlen is not None and self.maxlen <= 0:
            raise ConfigError("maxlen must be > 0 when set")


@dataclass
class AppConfig:
    db: DbConfig
    queue: QueueConfig
    port: int = 8080
    log_level: str = "info"

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> "AppConfig":
        """
        Build the configuration from environment variables.

        Reads SQL_DSN, SQL_CREDENTIALS, QUEUE_URL, QUEUE_STREAM, APP_PORT and
        LOG_LEVEL. Raises ConfigError when a required value is missing.
        """
        env = os.environ if environ is None else environ

        raw_port = env.get("APP_PORT", "8080")
        try:
            port = int(raw_port)
        except ValueError as exc:
            raise ConfigError(f"APP_PORT must be an integer, got {raw_port!r}") from exc

        raw_maxlen = env.get("QUEUE_MAXLEN")
        try:
            maxlen = int(raw_maxlen) if raw_maxlen else None
        except ValueError as exc:
            raise ConfigError(f"QUEUE_MAXLEN must be an integer, got {raw_maxlen!r}") from exc

        return cls(
            db=DbConfig(
                dsn=env.get("SQL_DSN", ""),
                credentials=env.get("SQL_CREDENTIALS", ""),
                table=env.get("SQL_TABLE", DEFAULT_TABLE),
            ),
            queue=QueueConfig(
                url=env.get("QUEUE_URL", ""),
                stream_key=env.get("QUEUE_STREAM", DEFAULT_STREAM_KEY),
                maxlen=maxlen,
            ),
            port=port,
            log_level=env.get("LOG_LEVEL", "info"),
        )


def configure_logging(level_name: str) -> int:
    """Configure root logging; unknown level names fall back to INFO."""
    level = logging.getLevelName(level_name.upper())
    if not isinstance(level, int):
        logging.basicConfig(level=logging.INFO)
        logger.error("could not parse log level %r. Using INFO instead.", level_name)
        return logging.INFO
    logging.basicConfig(level=level)
    return level
