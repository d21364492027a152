"""SQLAlchemy-backed user repository."""

from __future__ import annotations

from contextlib import AbstractAsyncContextManager
from uuid import UUID

from sqlalchemy import ColumnElement, and_, delete, func, or_, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from ..database.connection import get_async_session, session_scope
from ..dbmodels import Users
from ..errors import ConflictError
from ..logging import get_logger
from .base import (
    DEFAULT_SORT,
    NewUser,
    Role,
    UserChanges,
    UserFilter,
    UserPage,
    UserRecord,
    UserSort,
    ensure_utc,
    next_timestamp,
    utcnow,
)

logger = get_logger(__name__)

_SORT_COLUMNS = {
    "username": Users.username,
    "email": Users.email,
    "first_name": Users.first_name,
    "last_name": Users.last_name,
    "age": Users.age,
    "role": Users.role,
    "is_active": Users.is_active,
    "created_at": Users.created_at,
    "updated_at": Users.updated_at,
}


# Unique constraints on identity keys, as named by PostgreSQL and reported by SQLite
_IDENTITY_CONSTRAINT_MARKERS = (
    "users_username_key",
    "users_email_key",
    "UNIQUE constraint failed: users.username",
    "UNIQUE constraint failed: users.email",
)


def _is_identity_collision(error: IntegrityError) -> bool:
    message = str(error.orig)
    return any(marker in message for marker in _IDENTITY_CONSTRAINT_MARKERS)


def _like_pattern(text: str) -> str:
    """Build a LIKE pattern that matches ``text`` literally anywhere in a value."""
    escaped = text.replace("\\", "\\\\").replace("%", "\\%").replace("_", "\\_")
    return f"%{escaped}%"


def _icontains(column, text: str) -> ColumnElement[bool]:
    return column.ilike(_like_pattern(text), escape="\\")


def _filter_conditions(filter: UserFilter | None) -> list[ColumnElement[bool]]:
    if filter is None:
        return []

    conditions: list[ColumnElement[bool]] = []
    if filter.username is not None:
        conditions.append(_icontains(Users.username, filter.username))
    if filter.email is not None:
        conditions.append(_icontains(Users.email, filter.email))
    if filter.role is not None:
        conditions.append(Users.role == filter.role.value)
    if filter.is_active is not None:
        conditions.append(Users.is_active == filter.is_active)
    if filter.age_min is not None:
        conditions.append(Users.age >= filter.age_min)
    if filter.age_max is not None:
        conditions.append(Users.age <= filter.age_max)
    return conditions


def _order_by(sort: UserSort) -> list:
    column = _SORT_COLUMNS[sort.field]
    ordered = column.desc() if sort.descending else column.asc()
    return [ordered.nulls_last(), Users.id.asc()]


def _to_record(row: Users) -> UserRecord:
    return UserRecord(
        id=row.id,
        username=row.username,
        email=row.email,
        first_name=row.first_name,
        last_name=row.last_name,
        age=row.age,
        role=Role(row.role),
        is_active=row.is_active,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
    )


class SQLUserRepository:
    """``UserRepository`` over the ``users`` table.

    Uniqueness of username and email is enforced by database constraints, so
    two concurrent registrations for the same key cannot both commit.
    """

    def __init__(self, sessionmaker: async_sessionmaker[AsyncSession] | None = None):
        self._sessionmaker = sessionmaker

    def _session(self) -> AbstractAsyncContextManager[AsyncSession]:
        if self._sessionmaker is None:
            return get_async_session()
        return session_scope(self._sessionmaker)

    async def find(
        self,
        filter: UserFilter | None = None,
        sort: UserSort | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> UserPage:
        conditions = _filter_conditions(filter)

        stmt = select(Users).order_by(*_order_by(sort or DEFAULT_SORT)).offset(offset).limit(limit)
        count_stmt = select(func.count()).select_from(Users)
        if conditions:
            stmt = stmt.where(and_(*conditions))
            count_stmt = count_stmt.where(and_(*conditions))

        async with self._session() as session:
            rows = (await session.execute(stmt)).scalars().all()
            total = (await session.execute(count_stmt)).scalar_one()

        return UserPage(
            users=[_to_record(row) for row in rows],
            total_count=total,
            offset=offset,
            limit=limit,
        )

    async def search(self, text: str, limit: int) -> list[UserRecord]:
        stmt = (
            select(Users)
            .where(
                or_(
                    _icontains(Users.username, text),
                    _icontains(Users.email, text),
                    _icontains(Users.first_name, text),
                    _icontains(Users.last_name, text),
                )
            )
            .order_by(*_order_by(DEFAULT_SORT))
            .limit(limit)
        )
        async with self._session() as session:
            rows = (await session.execute(stmt)).scalars().all()
        return [_to_record(row) for row in rows]

    async def count(self, filter: UserFilter | None = None) -> int:
        stmt = select(func.count()).select_from(Users)
        conditions = _filter_conditions(filter)
        if conditions:
            stmt = stmt.where(and_(*conditions))
        async with self._session() as session:
            return (await session.execute(stmt)).scalar_one()

    async def find_by_id(self, user_id: UUID) -> UserRecord | None:
        async with self._session() as session:
            row = await session.get(Users, user_id)
            return _to_record(row) if row else None

    async def find_by_unique_key(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None:
        keys = []
        if username is not None:
            keys.append(Users.username == username)
        if email is not None:
            keys.append(Users.email == email.lower())
        if not keys:
            raise ValueError("Either username or email is required")

        async with self._session() as session:
            result = await session.execute(select(Users).where(or_(*keys)).limit(1))
            row = result.scalar_one_or_none()
            return _to_record(row) if row else None

    async def get_credentials(self, email: str) -> tuple[UserRecord, str] | None:
        async with self._session() as session:
            result = await session.execute(select(Users).where(Users.email == email.lower()))
            row = result.scalar_one_or_none()
            if row is None:
                return None
            return _to_record(row), row.password_hash

    async def insert(self, new_user: NewUser) -> UserRecord:
        now = utcnow()
        row = Users(
            username=new_user.username,
            email=new_user.email.lower(),
            password_hash=new_user.password_hash,
            first_name=new_user.first_name,
            last_name=new_user.last_name,
            age=new_user.age,
            role=new_user.role.value,
            is_active=new_user.is_active,
            created_at=now,
            updated_at=now,
        )
        try:
            async with self._session() as session:
                session.add(row)
                await session.flush()
                record = _to_record(row)
        except IntegrityError as e:
            if not _is_identity_collision(e):
                raise
            logger.info("Insert rejected by uniqueness constraint", username=new_user.username)
            raise ConflictError("User with this email or username already exists") from e

        logger.debug("Inserted user", user_id=str(record.id))
        return record

    async def update_by_id(self, user_id: UUID, changes: UserChanges) -> UserRecord | None:
        try:
            async with self._session() as session:
                row = await session.get(Users, user_id)
                if row is None:
                    return None

                for name, value in changes.as_dict().items():
                    if name == "email":
                        value = str(value).lower()
                    elif name == "role":
                        value = value.value  # type: ignore[attr-defined]
                    setattr(row, name, value)
                row.updated_at = next_timestamp(row.updated_at)

                await session.flush()
                record = _to_record(row)
        except IntegrityError as e:
            if not _is_identity_collision(e):
                raise
            raise ConflictError("User with this email or username already exists") from e

        return record

    async def delete_by_id(self, user_id: UUID) -> bool:
        async with self._session() as session:
            result = await session.execute(delete(Users).where(Users.id == user_id))
            return result.rowcount > 0
