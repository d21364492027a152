"""
Shared access control logic for GraphQL resolvers
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING
from uuid import UUID

import strawberry

from ..auth.context import AuthContext
from ..errors import ForbiddenError, UnauthenticatedError
from ..logging import get_logger
from ..repository.base import Role

if TYPE_CHECKING:
    from ..repository.base import UserRecord
    from ..services import Services

logger = get_logger(__name__)

# Roles allowed to administer other users
ELEVATED_ROLES = frozenset({Role.ADMIN})


@strawberry.enum
class SortOrder(Enum):
    """Sort order for queries"""

    ASC = "asc"
    DESC = "desc"


def get_auth_context_from_info(info: strawberry.Info) -> AuthContext:
    """Extract the auth context from the GraphQL info object, anonymous if absent."""
    auth_context = info.context.get("auth")
    if auth_context is None:
        logger.error("Auth context not found in GraphQL context")
        return AuthContext.anonymous()
    return auth_context


def get_services(info: strawberry.Info) -> Services:
    return info.context["services"]


def require_authenticated(auth_context: AuthContext) -> UserRecord:
    """Return the caller, or fail if the request is anonymous."""
    if auth_context.user is None:
        raise UnauthenticatedError("You must be logged in to perform this action")
    return auth_context.user


def require_elevated(auth_context: AuthContext) -> UserRecord:
    """Return the caller if they hold an administrative role.

    Raises:
        UnauthenticatedError: If the request is anonymous
        ForbiddenError: If the caller is not an admin
    """
    user = require_authenticated(auth_context)
    if user.role not in ELEVATED_ROLES:
        logger.info("Admin operation refused", role=user.role.value)
        raise ForbiddenError("You must be an admin to perform this action")
    return user


def ensure_not_self(caller: UserRecord, target_id: UUID | None, message: str) -> None:
    """Refuse operations an admin must not apply to their own account."""
    if target_id is not None and caller.id == target_id:
        raise ForbiddenError(message)


def parse_user_id(raw: str) -> UUID | None:
    """Parse a client-supplied id; malformed ids simply match no user."""
    try:
        return UUID(str(raw))
    except ValueError:
        return None
