from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from enum import Enum
from typing import Mapping, Optional, Protocol

from ..db import fields
from ..db.models import Message, MessageType, Status, UserRecord, derive_user_id
from ..queue.base import NotificationChannel

logger = logging.getLogger(__name__)

_FIELD_LABELS = {"userID": "user ID", "emailAddress": "email address"}


class UserStore(Protocol):
    """The RecordStore operations the coordinator depends on."""

    def create_record(self, record: UserRecord) -> Status:
        ...

    def update_record(self, user_id: str, selector: Mapping[str, str]) -> Status:
        ...

    def retrieve_records(self, selector: Mapping[str, str]) -> tuple[list[UserRecord], Status]:
        ...

    def delete_record(self, user_id: str) -> Status:
        ...

    def active_connection(self) -> bool:
        ...


class Outcome(str, Enum):
    SUCCESS = "success"
    INVALID_REQUEST = "invalid_request"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    FAILURE = "failure"


@dataclass(frozen=True)
class Result:
    outcome: Outcome
    message: str
    user_id: Optional[str] = None
    users: list[UserRecord] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return self.outcome is Outcome.SUCCESS


@dataclass(frozen=True)
class Health:
    store: bool
    queue: bool

    @property
    def healthy(self) -> bool:
        return self.store and self.queue

    def checks(self) -> list[dict[str, str]]:
        return [
            {"system": "sqlDB", "status": "healthy" if self.store else "unhealthy"},
            {"system": "msgQueue", "status": "healthy" if self.queue else "unhealthy"},
        ]


class UsersCoordinator:
    """
    Turns validated user intent into store calls and event notifications.

    Only Status values from the store are inspected. Events are enqueued after
    the store has committed; a lost event does not undo the change.
    """

    def __init__(self, store: UserStore, channel: NotificationChannel) -> None:
        self.store = store
        self.channel = channel

    def create_user(self, record: UserRecord) -> Result:
        # ids are never taken from the caller
        user_id = derive_user_id(record.emailAddress)
        record = replace(record, userID=user_id)
        logger.debug("generated id %s for new user with email %s", user_id, record.emailAddress)

        status = self.store.create_record(record)
        if status is Status.CREATED:
            self.channel.enqueue(Message(MessageType.USER_CREATED, user_id))
            return Result(Outcome.SUCCESS, f"created user with ID: {user_id}", user_id=user_id)
        if status is Status.ALREADY_EXISTS:
            return Result(
                Outcome.CONFLICT,
                f"user with email: {record.emailAddress} already exists in db!",
                user_id=user_id,
            )
        return Result(Outcome.FAILURE, "could not add user to db")

    def update_user(self, user_id: str, updates: Mapping[str, str]) -> Result:
        """
        Change the supplied fields of an existing user.

        Empty-string values mean "leave unchanged"; there is no way to blank
        a field. The identity fields cannot be changed at all.
        """
        for name in sorted(fields.IMMUTABLE_FIELDS):
            if updates.get(name):
                logger.error("user %s attempted to change immutable field %s", user_id, name)
                return Result(Outcome.INVALID_REQUEST, f"users are currently unable to change their {_FIELD_LABELS[name]}")

        selector = fields.map_fields(updates, fields.UPDATE_FIELDS, skip_empty=True)
        if not selector:
            logger.info("no valid fields to update for user %s", user_id)
            return Result(Outcome.INVALID_REQUEST, "supplied fields are not valid for update")

        nickname_changed = fields.NICKNAME in selector

        status = self.store.update_record(user_id, selector)
        if status is Status.UPDATED:
            if nickname_changed:
                self.channel.enqueue(
                    Message(MessageType.NICKNAME_CHANGED, user_id, nickname=selector[fields.NICKNAME])
                )
            return Result(Outcome.SUCCESS, f"updated user: {user_id}", user_id=user_id)
        if status is Status.NOT_FOUND:
            return Result(
                Outcome.NOT_FOUND,
                f"could not update user: {user_id} as they did not exist",
                user_id=user_id,
            )
        return Result(Outcome.FAILURE, f"could not update user: {user_id}", user_id=user_id)

    def retrieve_users(self, criteria: Mapping[str, str]) -> Result:
        if not criteria:
            logger.info("no search criteria supplied")
            return Result(Outcome.INVALID_REQUEST, "no criteria supplied by which to search for matching users")

        selector = fields.map_fields(criteria, fields.SEARCH_FIELDS)
        if not selector:
            logger.info("no valid search criteria supplied")
            valid = ", ".join(fields.SEARCH_FIELD_ORDER)
            return Result(Outcome.INVALID_REQUEST, f"supplied search criteria are invalid; valid criteria are [{valid}]")

        users, status = self.store.retrieve_records(selector)
        if status is Status.OK:
            return Result(Outcome.SUCCESS, f"found {len(users)} matching users", users=users)
        if status is Status.NOT_FOUND:
            return Result(Outcome.NOT_FOUND, "found no users matching specified criteria")
        return Result(Outcome.FAILURE, "could not process request")

    def delete_user(self, user_id: str) -> Result:
        status = self.store.delete_record(user_id)
        if status is Status.DELETED:
            return Result(Outcome.SUCCESS, "user record deleted", user_id=user_id)
        if status is Status.NOT_FOUND:
            return Result(Outcome.NOT_FOUND, "user does not exist", user_id=user_id)
        return Result(Outcome.FAILURE, "could not process delete request", user_id=user_id)

    def health(self) -> Health:
        # probe both; one failing must not hide the other
        store_ok = self.store.active_connection()
        queue_ok = self.channel.is_writable()
        return Health(store=store_ok, queue=queue_ok)
