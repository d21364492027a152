"""
Per-request GraphQL context
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..auth.middleware import resolve_identity
from ..logging import bind_user_id

if TYPE_CHECKING:
    from fastapi import Request

    from ..services import Services


async def build_context(
    services: Services,
    authorization: str | None,
    request: Request | None = None,
) -> dict[str, Any]:
    """Resolve the caller once and expose it, with the services, to every resolver."""
    auth = await resolve_identity(authorization, services.auth_adapter, services.repository)
    bind_user_id(str(auth.user_id) if auth.user_id else None)
    return {"request": request, "services": services, "auth": auth}
