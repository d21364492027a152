"""
Process-wide collaborators handed to every request.
"""

from __future__ import annotations

from dataclasses import dataclass

from .auth.adapters.base import AuthAdapter
from .auth.factory import get_auth_adapter, get_password_hasher
from .auth.passwords import PasswordHasher
from .config import settings
from .logging import get_logger
from .repository import InMemoryUserRepository, SQLUserRepository, UserRepository

logger = get_logger(__name__)


@dataclass
class Services:
    repository: UserRepository
    auth_adapter: AuthAdapter
    password_hasher: PasswordHasher
    # True when the repository needs the shared database engine
    uses_database: bool = False


def build_services() -> Services:
    """Assemble services from settings.

    Raises:
        ValueError: If the repository backend is unknown or no JWT secret is set
    """
    backend = settings.repository_backend.lower()
    if backend == "sql":
        repository: UserRepository = SQLUserRepository()
    elif backend == "memory":
        repository = InMemoryUserRepository()
    else:
        raise ValueError(f"Unknown repository backend: {settings.repository_backend}")

    logger.info("Services configured", repository_backend=backend)
    return Services(
        repository=repository,
        auth_adapter=get_auth_adapter(),
        password_hasher=get_password_hasher(),
        uses_database=backend == "sql",
    )
