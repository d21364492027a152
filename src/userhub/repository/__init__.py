"""Persistence facade for user records."""

from .base import (
    SORTABLE_FIELDS,
    NewUser,
    ProfileChanges,
    Role,
    UserChanges,
    UserFilter,
    UserPage,
    UserRecord,
    UserRepository,
    UserSort,
)
from .memory import InMemoryUserRepository
from .sql import SQLUserRepository

__all__ = [
    "SORTABLE_FIELDS",
    "InMemoryUserRepository",
    "NewUser",
    "ProfileChanges",
    "Role",
    "SQLUserRepository",
    "UserChanges",
    "UserFilter",
    "UserPage",
    "UserRecord",
    "UserRepository",
    "UserSort",
]
