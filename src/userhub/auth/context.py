"""Authentication context for request handling."""

from __future__ import annotations

from dataclasses import dataclass
from uuid import UUID

from ..repository.base import UserRecord


@dataclass(frozen=True)
class AuthContext:
    """Runtime authentication context for a request."""

    user: UserRecord | None
    token: str | None = None

    @classmethod
    def anonymous(cls) -> AuthContext:
        return cls(user=None, token=None)

    @property
    def is_authenticated(self) -> bool:
        return self.user is not None

    @property
    def user_id(self) -> UUID | None:
        return self.user.id if self.user else None
