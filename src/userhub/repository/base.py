"""Repository interface and value types for the user collection."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import Enum
from typing import Protocol
from uuid import UUID


class Role(Enum):
    """Closed set of roles an identity can hold."""

    USER = "USER"
    ADMIN = "ADMIN"
    MODERATOR = "MODERATOR"


# Canonical (snake_case) names of the columns a listing may be ordered by
SORTABLE_FIELDS = frozenset(
    {
        "username",
        "email",
        "first_name",
        "last_name",
        "age",
        "role",
        "is_active",
        "created_at",
        "updated_at",
    }
)


@dataclass(frozen=True)
class UserRecord:
    """A stored identity with the password hash stripped."""

    id: UUID
    username: str
    email: str
    first_name: str
    last_name: str
    age: int | None
    role: Role
    is_active: bool
    created_at: datetime
    updated_at: datetime

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}"


@dataclass(frozen=True)
class NewUser:
    """Candidate identity for insertion. The password is already hashed."""

    username: str
    email: str
    password_hash: str
    first_name: str
    last_name: str
    age: int | None = None
    role: Role = Role.USER
    is_active: bool = True


@dataclass(frozen=True)
class UserChanges:
    """Field-level merge applied by ``update_by_id``; ``None`` leaves a field untouched."""

    username: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None
    role: Role | None = None
    is_active: bool | None = None

    def as_dict(self) -> dict[str, object]:
        return {
            name: value
            for name, value in (
                ("username", self.username),
                ("email", self.email),
                ("first_name", self.first_name),
                ("last_name", self.last_name),
                ("age", self.age),
                ("role", self.role),
                ("is_active", self.is_active),
            )
            if value is not None
        }


@dataclass(frozen=True)
class ProfileChanges:
    """Self-service update. Has no role or activation fields."""

    username: str | None = None
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None
    age: int | None = None

    def to_user_changes(self) -> UserChanges:
        return UserChanges(
            username=self.username,
            email=self.email,
            first_name=self.first_name,
            last_name=self.last_name,
            age=self.age,
        )


@dataclass(frozen=True)
class UserFilter:
    """Selection predicates for listings; all present predicates must hold."""

    username: str | None = None
    email: str | None = None
    role: Role | None = None
    is_active: bool | None = None
    age_min: int | None = None
    age_max: int | None = None


@dataclass(frozen=True)
class UserSort:
    field: str = "created_at"
    descending: bool = True

    def __post_init__(self) -> None:
        if self.field not in SORTABLE_FIELDS:
            raise ValueError(f"Cannot sort users by '{self.field}'")


DEFAULT_SORT = UserSort()


@dataclass(frozen=True)
class UserPage:
    """One offset/limit window of a listing plus the size of the full match set."""

    users: list[UserRecord]
    total_count: int
    offset: int
    limit: int

    @property
    def has_next_page(self) -> bool:
        return self.offset + self.limit < self.total_count

    @property
    def has_previous_page(self) -> bool:
        return self.offset > 0


def utcnow() -> datetime:
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive timestamps read back from backends that drop the offset."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value


def next_timestamp(previous: datetime) -> datetime:
    """Return a modification time strictly later than ``previous``."""
    now = utcnow()
    floor = ensure_utc(previous) + timedelta(microseconds=1)
    return now if now >= floor else floor


class UserRepository(Protocol):
    """Persistence operations over the user collection.

    Implementations never return the password hash except through
    ``get_credentials``, and enforce username/email uniqueness themselves
    so concurrent inserts cannot both succeed.
    """

    async def find(
        self,
        filter: UserFilter | None = None,
        sort: UserSort | None = None,
        offset: int = 0,
        limit: int = 10,
    ) -> UserPage: ...

    async def search(self, text: str, limit: int) -> list[UserRecord]: ...

    async def count(self, filter: UserFilter | None = None) -> int: ...

    async def find_by_id(self, user_id: UUID) -> UserRecord | None: ...

    async def find_by_unique_key(
        self, *, username: str | None = None, email: str | None = None
    ) -> UserRecord | None: ...

    async def get_credentials(self, email: str) -> tuple[UserRecord, str] | None: ...

    async def insert(self, new_user: NewUser) -> UserRecord:
        """Insert a new identity.

        Raises:
            ConflictError: If the username or email already exists
        """
        ...

    async def update_by_id(self, user_id: UUID, changes: UserChanges) -> UserRecord | None:
        """Merge ``changes`` into the identity and advance ``updated_at``.

        Returns:
            The updated record, or None if the id does not exist

        Raises:
            ConflictError: If the change collides with another identity
        """
        ...

    async def delete_by_id(self, user_id: UUID) -> bool: ...
