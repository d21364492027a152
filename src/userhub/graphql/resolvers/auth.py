from __future__ import annotations

from typing import TYPE_CHECKING

import strawberry

from ...errors import ConflictError, UnauthenticatedError
from ...logging import get_logger
from ...repository.base import NewUser, Role
from ...validation import RegistrationFields, validate_fields
from ..access_control import get_auth_context_from_info, get_services, require_authenticated
from ..types.user import AuthPayload, User

if TYPE_CHECKING:
    from ..mutations.root import LoginInput, RegisterInput

logger = get_logger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


async def register(info: strawberry.Info, input: RegisterInput) -> AuthPayload:
    """
    Create a USER account and sign the new user in.

    Raises:
        UserInputError: If any field fails validation
        ConflictError: If the username or email is already taken
    """
    services = get_services(info)

    fields = validate_fields(
        RegistrationFields,
        username=input.username,
        email=input.email,
        password=input.password,
        first_name=input.first_name,
        last_name=input.last_name,
        age=input.age,
    )

    existing = await services.repository.find_by_unique_key(
        username=fields.username, email=fields.email
    )
    if existing is not None:
        logger.info("Registration refused, identity taken", username=fields.username)
        raise ConflictError("User with this email or username already exists")

    password_hash = await services.password_hasher.hash(fields.password)

    # insert re-checks uniqueness, so a racing registration still fails with CONFLICT
    record = await services.repository.insert(
        NewUser(
            username=fields.username,
            email=fields.email,
            password_hash=password_hash,
            first_name=fields.first_name,
            last_name=fields.last_name,
            age=fields.age,
            role=Role.USER,
        )
    )
    token = await services.auth_adapter.issue_token(record.id)

    logger.info("User registered", user_id=str(record.id))
    return AuthPayload(token=token, user=User.from_record(record))


async def login(info: strawberry.Info, input: LoginInput) -> AuthPayload:
    """
    Exchange an email and password for a token.

    An unknown email and a wrong password fail identically.
    """
    services = get_services(info)
    email = input.email.strip().lower()

    credentials = await services.repository.get_credentials(email)
    if credentials is None:
        # Spend the same bcrypt work as a real comparison
        await services.password_hasher.verify_against_dummy(input.password)
        logger.info("Login failed")
        raise UnauthenticatedError(INVALID_CREDENTIALS)

    record, password_hash = credentials
    if not await services.password_hasher.verify(input.password, password_hash):
        logger.info("Login failed", user_id=str(record.id))
        raise UnauthenticatedError(INVALID_CREDENTIALS)

    if not record.is_active:
        logger.info("Login refused for deactivated account", user_id=str(record.id))
        raise UnauthenticatedError("Your account has been deactivated")

    token = await services.auth_adapter.issue_token(record.id)

    logger.info("User logged in", user_id=str(record.id))
    return AuthPayload(token=token, user=User.from_record(record))


async def resolve_current_user(info: strawberry.Info) -> User:
    user = require_authenticated(get_auth_context_from_info(info))
    return User.from_record(user)
