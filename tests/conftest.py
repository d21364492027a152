"""
Shared pytest fixtures and configuration for all tests.
"""

import os
from collections.abc import Awaitable, Callable, Generator
from datetime import UTC, datetime
from typing import Any
from uuid import uuid4

import pytest
import pytest_asyncio

from userhub.auth.adapters.jwt import JWTAuthAdapter
from userhub.auth.context import AuthContext
from userhub.auth.passwords import PasswordHasher
from userhub.graphql.schema import schema
from userhub.repository import InMemoryUserRepository, NewUser, Role, UserRecord
from userhub.services import Services

TEST_SECRET = "test-secret-key-for-testing-only-0123456789"
TEST_PASSWORD = "secret123"


def _make_record(role: Role = Role.USER, **overrides: Any) -> UserRecord:
    now = datetime.now(UTC)
    fields: dict[str, Any] = {
        "id": uuid4(),
        "username": "someone",
        "email": "someone@example.com",
        "first_name": "Some",
        "last_name": "One",
        "age": None,
        "role": role,
        "is_active": True,
        "created_at": now,
        "updated_at": now,
    }
    fields.update(overrides)
    return UserRecord(**fields)


@pytest.fixture
def make_record() -> Callable[..., UserRecord]:
    """Build detached user records for pure policy tests."""
    return _make_record


@pytest.fixture
def repository() -> InMemoryUserRepository:
    return InMemoryUserRepository()


@pytest.fixture
def password_hasher() -> PasswordHasher:
    # Minimum bcrypt cost keeps the suite fast
    return PasswordHasher(rounds=4)


@pytest.fixture
def auth_adapter() -> JWTAuthAdapter:
    return JWTAuthAdapter(secret_key=TEST_SECRET)


@pytest.fixture
def services(
    repository: InMemoryUserRepository,
    auth_adapter: JWTAuthAdapter,
    password_hasher: PasswordHasher,
) -> Services:
    return Services(
        repository=repository,
        auth_adapter=auth_adapter,
        password_hasher=password_hasher,
    )


@pytest.fixture
def create_user(
    repository: InMemoryUserRepository, password_hasher: PasswordHasher
) -> Callable[..., Awaitable[UserRecord]]:
    """Insert a user straight into the repository."""

    async def _create(
        username: str,
        role: Role = Role.USER,
        password: str = TEST_PASSWORD,
        **overrides: Any,
    ) -> UserRecord:
        fields: dict[str, Any] = {
            "username": username,
            "email": f"{username}@example.com",
            "password_hash": await password_hasher.hash(password),
            "first_name": username.capitalize(),
            "last_name": "Tester",
            "role": role,
        }
        fields.update(overrides)
        return await repository.insert(NewUser(**fields))

    return _create


@pytest_asyncio.fixture
async def alice(create_user) -> UserRecord:
    return await create_user("alice", age=30)


@pytest_asyncio.fixture
async def admin(create_user) -> UserRecord:
    return await create_user("admin", role=Role.ADMIN, age=45)


@pytest_asyncio.fixture
async def moderator(create_user) -> UserRecord:
    return await create_user("moderator", role=Role.MODERATOR)


@pytest.fixture
def execute(services: Services) -> Callable[..., Awaitable[Any]]:
    """Run a GraphQL document against the schema as the given caller."""

    async def _execute(
        query: str,
        variables: dict[str, Any] | None = None,
        as_user: UserRecord | None = None,
    ) -> Any:
        context = {
            "request": None,
            "services": services,
            "auth": AuthContext(user=as_user) if as_user else AuthContext.anonymous(),
        }
        return await schema.execute(query, variable_values=variables, context_value=context)

    return _execute


@pytest.fixture(autouse=True)
def reset_environment() -> Generator[None, None, None]:
    """Reset environment variables for each test."""
    original_env = os.environ.copy()
    yield
    os.environ.clear()
    os.environ.update(original_env)


# Test markers
def pytest_configure(config: Any) -> None:
    """Register custom markers."""
    config.addinivalue_line("markers", "slow: mark test as slow running")
    config.addinivalue_line("markers", "integration: mark test as integration test")
    config.addinivalue_line("markers", "unit: mark test as unit test")
