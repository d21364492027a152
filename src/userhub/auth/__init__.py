"""Authentication and authorization system for userhub."""

from .adapters.base import AuthAdapter, AuthenticationError, Principal
from .context import AuthContext
from .factory import get_auth_adapter, get_password_hasher
from .middleware import extract_bearer_token, resolve_identity
from .passwords import PasswordHasher

__all__ = [
    "AuthAdapter",
    "AuthContext",
    "AuthenticationError",
    "PasswordHasher",
    "Principal",
    "extract_bearer_token",
    "get_auth_adapter",
    "get_password_hasher",
    "resolve_identity",
]
