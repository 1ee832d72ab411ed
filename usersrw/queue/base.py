from __future__ import annotations

from typing import Protocol

from ..db.models import Message


class NotificationChannel(Protocol):
    """
    Outbound channel for user events.

    ``enqueue`` is fire-and-forget: implementations log and swallow delivery
    failures so a committed store change is never reported as failed.
    """

    def enqueue(self, message: Message) -> None:
        ...

    def is_writable(self) -> bool:
        ...
