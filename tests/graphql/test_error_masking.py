"""
Tests that unexpected failures reach clients without internal details.
"""

import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import async_sessionmaker

from userhub.database.connection import create_engine_for
from userhub.graphql.schema import INTERNAL_ERROR_MESSAGE
from userhub.repository import SQLUserRepository

LOGIN = """
    mutation Login($input: LoginInput!) {
        login(input: $input) { token }
    }
"""

REGISTER = """
    mutation Register($input: RegisterInput!) {
        register(input: $input) { token }
    }
"""


@pytest_asyncio.fixture
async def repository(tmp_path):
    # The users table is never created, so every statement fails
    engine = create_engine_for(f"sqlite:///{tmp_path / 'empty.db'}")
    yield SQLUserRepository(async_sessionmaker(engine, expire_on_commit=False))
    await engine.dispose()


@pytest.mark.asyncio
async def test_database_failure_is_masked(execute):
    result = await execute(
        LOGIN, {"input": {"email": "a@example.com", "password": "secret123"}}
    )

    assert result.data is None
    error = result.errors[0]
    assert error.message == INTERNAL_ERROR_MESSAGE
    assert "SELECT" not in error.message
    assert "users" not in error.message
    assert error.original_error is None


@pytest.mark.asyncio
async def test_failed_write_does_not_leak_password_hash(execute):
    result = await execute(
        REGISTER,
        {
            "input": {
                "username": "alice",
                "email": "alice@example.com",
                "password": "secret123",
                "firstName": "Alice",
                "lastName": "Tester",
            }
        },
    )

    error = result.errors[0]
    assert error.message == INTERNAL_ERROR_MESSAGE
    assert "$2b$" not in str(result.errors)


@pytest.mark.asyncio
async def test_domain_errors_are_not_masked(execute):
    result = await execute("{ me { id } }")

    error = result.errors[0]
    assert error.message == "You must be logged in to perform this action"
    assert error.extensions == {"code": "UNAUTHENTICATED"}


@pytest.mark.asyncio
async def test_query_validation_errors_are_not_masked(execute):
    result = await execute("{ nosuchField }")

    assert "nosuchField" in result.errors[0].message
