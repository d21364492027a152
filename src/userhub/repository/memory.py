"""In-process user repository.

Each instance owns its records; nothing is shared at module level. Used for
tests and for development servers started with
``USERHUB_REPOSITORY_BACKEND=memory``.
"""

from __future__ import annotations

import asyncio
from dataclasses import replace
from uuid import UUID, uuid4

from ..errors import ConflictError
from ..logging import get_logger
from .base import (
    DEFAULT_SORT,
    NewUser,
    UserChanges,
    UserFilter,
    UserPage,
    UserRecord,
    UserSort,
    next_timestamp,
    utcnow,
)

logger = get_logger(__name__)


def _contains(value: str, needle: str) -> bool:
    return needle.casefold() in value.casefold()


def _matches(record: UserRecord, filter: UserFilter | None) -> bool:
    if filter is None:
        return True
    if filter.username is not None and not _contains(record.username, filter.username):
        return False
    if filter.email is not None and not _contains(record.email, filter.email):
        return False
    if filter.role is not None and record.role != filter.role:
        return False
    if filter.is_active is not None and record.is_active != filter.is_active:
        return False
    if filter.age_min is not None and (record.age is None or record.age < filter.age_min):
        return False
    if filter.age_max is not None and (record.age is None or record.age > filter.age_max):
        return False
    return True


def _sorted(records: list[UserRecord], sort: UserSort) -> list[UserRecord]:
    # Two stable passes give "ORDER BY <field>, id" with missing values last
    ordered = sorted(records, key=lambda r: str(r.id))

    def key(record: UserRecord):
        value = getattr(record, sort.field)
        if hasattr(value, "value"):
            value = value.value
        if sort.descending:
            return (value is not None, value)
        return (value is None, value)

    return sorted(ordered, key=key, reverse=sort.descending)


class InMemoryUserRepository:
    """Dictionary-backed implementation of ``UserRepository``."""

    def __init__(self) -> None:
        self._records: dict[UUID, UserRecord] = {}
        self._password_hashes: dict[UUID, str] = {}
        self._write_lock = asyncio.Lock()

    def _taken_by(
        self, username: str | None, email: str | None, exclude: UUID | None = None
    ) -> UserRecord | None:
        for record in self._records.values():
            if record.id == exclude:
                continue
            if username is not None and record.username == username:
                return record
            if email is not None and record.email == email.lower():
                return record
        return None

    async def find(
        self,
        filter: UserFilter | None = None,
        sort: UserSort | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> UserPage:
        matching = [r for r in self._records.values() if _matches(r, filter)]
        ordered = _sorted(matching, sort or DEFAULT_SORT)
        return UserPage(
            users=ordered[offset : offset + limit],
            total_count=len(matching),
            offset=offset,
            limit=limit,
        )

    async def search(self, text: str, limit: int) -> list[UserRecord]:
        hits = [
            r
            for r in self._records.values()
            if any(
                _contains(value, text)
                for value in (r.username, r.email, r.first_name, r.last_name)
            )
        ]
        return _sorted(hits, DEFAULT_SORT)[:limit]

    async def count(self, filter: UserFilter | None = None) -> int:
        return sum(1 for r in self._records.values() if _matches(r, filter))

    async def find_by_id(self, user_id: UUID) -> UserRecord | None:
        return self._records.get(user_id)

    async def find_by_unique_key(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        if username is None and email is None:
            raise ValueError("Either username or email is required")
        return self._taken_by(username, email)

    async def get_credentials(self, email: str) -> tuple[UserRecord, str] | None:
        record = self._taken_by(None, email)
        if record is None:
            return None
        return record, self._password_hashes[record.id]

    async def insert(self, new_user: NewUser) -> UserRecord:
        async with self._write_lock:
            if self._taken_by(new_user.username, new_user.email) is not None:
                raise ConflictError("User with this email or username already exists")

            now = utcnow()
            record = UserRecord(
                id=uuid4(),
                username=new_user.username,
                email=new_user.email.lower(),
                first_name=new_user.first_name,
                last_name=new_user.last_name,
                age=new_user.age,
                role=new_user.role,
                is_active=new_user.is_active,
                created_at=now,
                updated_at=now,
            )
            self._records[record.id] = record
            self._password_hashes[record.id] = new_user.password_hash

        logger.debug("Inserted user", user_id=str(record.id))
        return record

    async def update_by_id(self, user_id: UUID, changes: UserChanges) -> UserRecord | None:
        async with self._write_lock:
            current = self._records.get(user_id)
            if current is None:
                return None

            fields = changes.as_dict()
            if "email" in fields:
                fields["email"] = fields["email"].lower()

            if self._taken_by(fields.get("username"), fields.get("email"), exclude=user_id):
                raise ConflictError("User with this email or username already exists")

            updated = replace(current, **fields, updated_at=next_timestamp(current.updated_at))
            self._records[user_id] = updated

        return updated

    async def delete_by_id(self, user_id: UUID) -> bool:
        async with self._write_lock:
            if self._records.pop(user_id, None) is None:
                return False
            self._password_hashes.pop(user_id, None)
        return True
