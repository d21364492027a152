"""Factory for creating the auth adapter from configuration."""

from __future__ import annotations

from datetime import timedelta

from ..config import get_jwt_secret, settings
from .adapters.base import AuthAdapter
from .adapters.jwt import JWTAuthAdapter
from .passwords import PasswordHasher


def get_auth_adapter() -> AuthAdapter:
    """Create the configured token adapter."""
    secret_key = get_jwt_secret()
    if not secret_key:
        raise ValueError("JWT secret key is required. Set USERHUB_JWT_SECRET.")

    return JWTAuthAdapter(
        secret_key=secret_key,
        algorithm=settings.jwt_algorithm,
        issuer=settings.jwt_issuer,
        audience=settings.jwt_audience,
        token_expiry=timedelta(days=settings.token_expiry_days),
    )


def get_password_hasher() -> PasswordHasher:
    return PasswordHasher(rounds=settings.password_hash_rounds)
