"""Credential verification: turn an Authorization header into an AuthContext."""

from __future__ import annotations

from uuid import UUID

from ..logging import get_logger
from ..repository.base import UserRepository
from .adapters.base import AuthAdapter, AuthenticationError
from .context import AuthContext

logger = get_logger(__name__)

BEARER_PREFIX = "Bearer "


def extract_bearer_token(authorization: str | None) -> str | None:
    """Return the token from a ``Bearer <token>`` header value, if there is one."""
    if not authorization or not authorization.startswith(BEARER_PREFIX):
        return None
    token = authorization[len(BEARER_PREFIX) :].strip()
    return token or None


async def resolve_identity(
    authorization: str | None,
    adapter: AuthAdapter,
    repository: UserRepository,
) -> AuthContext:
    """
    Resolve the caller behind an Authorization header.

    Anything short of a verified token whose subject still exists yields an
    anonymous context rather than an error, so public operations such as
    register and login stay reachable. The reason is logged, never returned.

    Args:
        authorization: Raw Authorization header value
        adapter: Token verifier
        repository: User lookup

    Returns:
        AuthContext carrying the identity, or an anonymous one
    """
    if not authorization:
        return AuthContext.anonymous()

    token = extract_bearer_token(authorization)
    if token is None:
        logger.warning("Invalid authorization format received")
        return AuthContext.anonymous()

    try:
        principal = await adapter.verify_token(token)
    except AuthenticationError as e:
        logger.info("Treating request as anonymous", reason=str(e))
        return AuthContext.anonymous()

    try:
        user_id = UUID(principal["subject"])
    except ValueError:
        logger.warning("Token subject is not a user id", subject=principal["subject"])
        return AuthContext.anonymous()

    user = await repository.find_by_id(user_id)
    if user is None:
        logger.info("Token subject no longer exists", user_id=str(user_id))
        return AuthContext.anonymous()

    return AuthContext(user=user, token=token)
