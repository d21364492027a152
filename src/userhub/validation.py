"""
Input and configuration validation for userhub.

Field rules mirror the constraints the user collection has always enforced:
usernames of 3-30 characters, a plausible email address, passwords of at
least six characters, non-blank names, and ages between 0 and 120. Text is
trimmed (and emails lower-cased) before it is checked and stored.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, Field, field_validator
from pydantic import ValidationError as PydanticValidationError

from .auth.passwords import MAX_PASSWORD_BYTES
from .config import get_jwt_secret, settings
from .database.connection import check_database_connection
from .errors import UserInputError
from .logging import get_logger

logger = get_logger(__name__)

USERNAME_MIN_LENGTH = 3
USERNAME_MAX_LENGTH = 30
PASSWORD_MIN_LENGTH = 6
AGE_MIN = 0
AGE_MAX = 120

EMAIL_PATTERN = r"^[\w.+-]+@[\w-]+(?:\.[\w-]+)*\.\w{2,}$"

# Client-facing message per field for constraint failures
FIELD_MESSAGES = {
    "username": (
        f"Username must be between {USERNAME_MIN_LENGTH} and {USERNAME_MAX_LENGTH} characters"
    ),
    "email": "Please enter a valid email",
    "password": f"Password must be at least {PASSWORD_MIN_LENGTH} characters",
    "first_name": "First name is required",
    "last_name": "Last name is required",
    "age": f"Age must be between {AGE_MIN} and {AGE_MAX}",
    "offset": "Offset must not be negative",
    "limit": "Limit must not be negative",
}

ModelT = TypeVar("ModelT", bound=BaseModel)


class ValidationError(Exception):
    """Raised when application startup validation fails."""

    pass


class ProfileFields(BaseModel):
    """Editable profile fields; omitted fields stay ``None``."""

    username: str | None = Field(
        None, min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH
    )
    email: str | None = Field(None, pattern=EMAIL_PATTERN)
    first_name: str | None = Field(None, min_length=1)
    last_name: str | None = Field(None, min_length=1)
    age: int | None = Field(None, ge=AGE_MIN, le=AGE_MAX)

    @field_validator("username", "email", "first_name", "last_name", mode="before")
    @classmethod
    def strip_text(cls, v: Any) -> Any:
        return v.strip() if isinstance(v, str) else v

    @field_validator("email")
    @classmethod
    def lower_case_email(cls, v: str | None) -> str | None:
        return v.lower() if v is not None else None


class RegistrationFields(ProfileFields):
    """Everything a new account needs."""

    username: str = Field(..., min_length=USERNAME_MIN_LENGTH, max_length=USERNAME_MAX_LENGTH)
    email: str = Field(..., pattern=EMAIL_PATTERN)
    password: str = Field(..., min_length=PASSWORD_MIN_LENGTH)
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)

    @field_validator("password")
    @classmethod
    def fits_bcrypt(cls, v: str) -> str:
        if len(v.encode("utf-8")) > MAX_PASSWORD_BYTES:
            raise ValueError(f"Password must be at most {MAX_PASSWORD_BYTES} bytes")
        return v


class PageWindow(BaseModel):
    offset: int = Field(0, ge=0)
    limit: int = Field(0, ge=0)


def validate_fields(model: type[ModelT], **values: Any) -> ModelT:
    """
    Build ``model`` from request values.

    Raises:
        UserInputError: With a message for the first field that failed
    """
    try:
        return model(**values)
    except PydanticValidationError as e:
        error = e.errors()[0]
        if error["type"] == "value_error":
            message = str(error.get("ctx", {}).get("error", error["msg"]))
        else:
            field = str(error["loc"][0]) if error["loc"] else ""
            message = FIELD_MESSAGES.get(field, error["msg"])
        raise UserInputError(message) from None


async def validate_database_connection() -> dict[str, Any]:
    """
    Validate that the database is accessible and responsive.

    Returns a dictionary with validation results and connection details.
    """
    results: dict[str, Any] = {"valid": True, "errors": [], "connection_info": None}

    success, error_message = await check_database_connection()

    if success:
        results["connection_info"] = {
            "status": "connected",
            "message": "Database connection successful",
        }
        logger.info("Database connection validation successful")
    else:
        results["valid"] = False
        results["errors"].append(error_message)
        logger.error("Database connection validation failed", error=error_message)

    return results


def validate_auth_configuration() -> dict[str, Any]:
    """Check that tokens can be signed with the configured secret."""
    results: dict[str, Any] = {"valid": True, "errors": [], "warnings": []}

    secret = get_jwt_secret()
    if not secret:
        results["valid"] = False
        results["errors"].append("USERHUB_JWT_SECRET is not set")
    elif len(secret) < 32:
        results["warnings"].append("JWT secret is shorter than 32 characters")

    if settings.environment.lower() in ("production", "prod") and settings.graphiql:
        results["warnings"].append("GraphiQL is enabled in production")

    return results


async def validate_startup_configuration(
    check_auth: bool = True, check_database: bool = True
) -> dict[str, Any]:
    """
    Run the requested startup checks.

    Raises:
        ValidationError: If any check that the service cannot run without fails
    """
    auth_results = (
        validate_auth_configuration()
        if check_auth
        else {"valid": True, "errors": [], "warnings": []}
    )
    database_results = (
        await validate_database_connection() if check_database else {"valid": True, "errors": []}
    )

    for warning in auth_results["warnings"]:
        logger.warning("Configuration warning", warning=warning)

    errors = auth_results["errors"] + database_results["errors"]
    if errors:
        logger.error("Startup validation failed", errors=errors)
        raise ValidationError("; ".join(str(e) for e in errors))

    return {"auth": auth_results, "database": database_results, "overall_valid": True}
